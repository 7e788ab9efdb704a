# Overview: Request authentication and role-gate decorators for API routes.

from functools import wraps

from flask import g, request

from .authorization import Action, Actor, require
from .errors import AuthenticationError
from .models import User
from . import services


def require_auth(f):
    """
    Require a valid bearer token and establish the actor.

    Sets on flask.g:
    - g.actor: validated Actor built from the token claims
    - g.current_user: the User row behind it

    Raises AuthenticationError (401) if:
    - No Authorization header, or not a Bearer token
    - Signature invalid or token expired
    - Claims malformed
    - User no longer exists or was soft-deleted
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            raise AuthenticationError("Authentication required")

        token = auth_header.split(" ", 1)[1].strip()
        claims = services.tokens().decode_token(token)
        actor = Actor.from_claims(claims)

        user = services.datastore().get(User, actor.id)
        if user is None or user.is_deleted:
            raise AuthenticationError("Account no longer active")

        g.actor = actor
        g.current_user = user

        return f(*args, **kwargs)

    return decorated_function


def require_action(action: Action, message: str = "Access denied"):
    """
    Role-level gate: the actor's role must allow action.

    Scope checks (same store, owned stores) happen in the services once the
    target is known. Must be applied after @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            actor = g.get("actor")
            if actor is None:
                raise AuthenticationError("Authentication required")
            require(actor, action, message=message)
            return f(*args, **kwargs)

        return decorated_function

    return decorator
