# Overview: Helpers shared by the API blueprints.

from flask import g, request

from ..services import audit
from ..validation import json_payload


def request_json() -> dict:
    return json_payload(request.get_json(silent=True))


def log_security_event(event_type: str, *, success: bool = True, user_id=None, store_id=None, reason=None):
    """Append a security event for the current request (client address and agent included)."""
    actor = g.get("actor")
    if user_id is None and actor is not None:
        user_id = actor.id
    if store_id is None and actor is not None:
        store_id = actor.store_id
    return audit().log_security_event(
        user_id=user_id,
        store_id=store_id,
        event_type=event_type,
        success=success,
        resource=request.path,
        action=request.method,
        reason=reason,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
