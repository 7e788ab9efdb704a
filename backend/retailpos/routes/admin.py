# Overview: Flask API routes for admin account management and the security event log.

"""
Admin API routes (ADMIN only)

Admins are never self-registered: this blueprint is the privileged path
that creates them (besides `flask admin bootstrap`).
"""

from flask import Blueprint, g, jsonify, request

from ..authorization import Action
from ..decorators import require_action, require_auth
from ..services import audit, auth, users
from ..validation import optional_int
from . import log_security_event, request_json


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/admins")
@require_auth
@require_action(Action.MANAGE_ADMINS, "Admin access required")
def list_admins():
    return jsonify([admin.to_dict() for admin in users().list_active_admins(g.actor)]), 200


@admin_bp.post("/admins")
@require_auth
@require_action(Action.MANAGE_ADMINS, "Admin access required")
def create_admin():
    admin = auth().create_admin(g.actor, request_json())
    log_security_event("USER_CREATED", reason=f"Admin {admin.id} created")
    return jsonify(admin.to_dict()), 201


@admin_bp.put("/admins/<int:admin_id>")
@require_auth
@require_action(Action.MANAGE_ADMINS, "Admin access required")
def update_admin(admin_id: int):
    admin = users().update_admin(g.actor, admin_id, request_json())
    return jsonify(admin.to_dict()), 200


@admin_bp.delete("/admins/<int:admin_id>")
@require_auth
@require_action(Action.MANAGE_ADMINS, "Admin access required")
def delete_admin(admin_id: int):
    admin = users().delete_admin(g.actor, admin_id)
    log_security_event("USER_DELETED", reason=f"Admin {admin.id} deleted")
    return jsonify({"message": "Admin deleted", "user": admin.to_dict()}), 200


@admin_bp.get("/security-events")
@require_auth
@require_action(Action.MANAGE_ADMINS, "Admin access required")
def list_security_events():
    events = audit().list_events(
        event_type=request.args.get("event_type") or None,
        user_id=optional_int(request.args.get("user_id"), "user_id"),
        limit=optional_int(request.args.get("limit"), "limit", minimum=1) or 100,
    )
    return jsonify([event.to_dict() for event in events]), 200
