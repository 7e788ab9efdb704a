# Overview: Flask API routes for user lookup, update, soft delete and restore.

from flask import Blueprint, g, jsonify

from ..authorization import Action
from ..decorators import require_action, require_auth
from ..services import users
from . import log_security_event, request_json


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("/active")
@require_auth
@require_action(Action.LIST_ALL_USERS, "Admin access required")
def list_active_users():
    return jsonify([user.to_dict() for user in users().list_active_users(g.actor)]), 200


@users_bp.get("/<int:user_id>")
@require_auth
def get_user(user_id: int):
    service = users()
    user = service.view_user(g.actor, user_id)
    return jsonify(service.describe_user(user)), 200


@users_bp.put("/<int:user_id>")
@require_auth
def update_user(user_id: int):
    data = request_json()
    user = users().update_user(g.actor, user_id, email=data.get("email"), password=data.get("password"))
    return jsonify(user.to_dict()), 200


@users_bp.delete("/<int:user_id>")
@require_auth
def delete_user(user_id: int):
    user = users().soft_delete_user(g.actor, user_id)
    log_security_event("USER_DELETED", reason=f"Soft-deleted user {user.id}")
    return jsonify({"message": "User deleted", "user": user.to_dict()}), 200


@users_bp.post("/<int:user_id>/restore")
@require_auth
@require_action(Action.RESTORE_USER, "Admin access required")
def restore_user(user_id: int):
    user = users().restore_user(g.actor, user_id)
    log_security_event("USER_RESTORED", reason=f"Restored user {user.id}")
    return jsonify(user.to_dict()), 200
