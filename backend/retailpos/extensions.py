# Overview: Shared SQLAlchemy handle and Alembic wiring (batch mode so SQLite can alter tables).

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate(render_as_batch=True)
