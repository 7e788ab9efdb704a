# Overview: Flask API routes for registration, login, the current user and cashier sessions.

"""
Authentication API routes

- POST /api/auth/register        public self-registration (never ADMIN)
- POST /api/auth/login           email + password -> signed token
- GET  /api/auth/me              current user (OWNER includes business)
- POST /api/auth/cashier-session start a cashier session (CASHIER)
"""

from flask import Blueprint, current_app, g, jsonify

from ..authorization import Action
from ..decorators import require_action, require_auth
from ..errors import InvalidCredentialsError, NotFoundError
from ..services import auth, cashier_sessions, users
from . import log_security_event, request_json


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    data = request_json()
    user, business = auth().register(data)

    log_security_event("USER_CREATED", user_id=user.id, store_id=user.store_id, reason=f"Self-registered as {user.role}")
    current_app.logger.info("Registered user %s with role %s", user.id, user.role)

    body = {"user": user.to_dict()}
    if business is not None:
        body["business"] = business.to_dict()
    return jsonify(body), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and return {"token", "user"}.

    Failures are generic: wrong email and wrong password look the same.
    """
    data = request_json()
    email = data.get("email")

    try:
        token, user = auth().login(email, data.get("password"))
    except InvalidCredentialsError:
        log_security_event("LOGIN_FAILED", success=False, reason=f"Invalid credentials for {email!r}")
        raise

    log_security_event("LOGIN_SUCCESS", user_id=user.id, store_id=user.store_id)
    return jsonify({"token": token, "user": user.to_dict()}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(users().describe_user(g.current_user)), 200


@auth_bp.post("/cashier-session")
@require_auth
def start_cashier_session_route():
    session = cashier_sessions().create_cashier_session(g.actor)
    return jsonify(session.to_dict()), 201


@auth_bp.get("/cashier-session/active")
@require_auth
@require_action(Action.START_CASHIER_SESSION, "Only cashiers have sessions")
def active_cashier_session_route():
    session = cashier_sessions().get_active_session(g.actor.id)
    if session is None:
        raise NotFoundError("No active session")
    return jsonify(session.to_dict()), 200


@auth_bp.post("/cashier-session/<int:session_id>/end")
@require_auth
def end_cashier_session_route(session_id: int):
    session = cashier_sessions().end_cashier_session(g.actor, session_id)
    return jsonify(session.to_dict()), 200
