# backend/retailpos/__init__.py
from flask import Flask, g

from .config import Config
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
        if "SECRET_KEY" in config_overrides and "JWT_SECRET_KEY" not in config_overrides:
            app.config["JWT_SECRET_KEY"] = config_overrides["SECRET_KEY"]

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.admin import admin_bp
    from .routes.stores import stores_bp
    from .routes.products import products_bp
    from .routes.checkout import checkout_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(stores_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(checkout_bp)

    from .errors import register_error_handlers
    register_error_handlers(app)

    @app.before_request
    def reset_request_identity():
        # g lives on the app context, which can outlive one request
        g.pop("actor", None)
        g.pop("current_user", None)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
