# Overview: Error taxonomy shared by services and the JSON error handlers that map it to HTTP.

"""
Service-layer errors.

Services raise these and never catch-and-swallow them. The API boundary
(register_error_handlers) turns each one into a status code and a JSON body:

    {"error": "<message>", "details": {...}}

Anything that is not a RetailError is logged and returned as a generic 500
so internal detail never reaches the caller.
"""

from __future__ import annotations

from flask import current_app, g, jsonify, request


class RetailError(Exception):
    """Base class for classified failures."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(RetailError):
    """Malformed or missing input."""
    status_code = 400


class InsufficientStockError(RetailError):
    """Requested quantity exceeds the stock available at the store."""
    status_code = 400


class AuthenticationError(RetailError):
    """Missing, malformed or expired credentials on a protected request."""
    status_code = 401


class InvalidCredentialsError(RetailError):
    """Login failed. Never says whether the email or the password was wrong."""
    status_code = 401

    def __init__(self, message: str = "Invalid credentials", details: dict | None = None):
        super().__init__(message, details)


class PermissionDeniedError(RetailError):
    """Actor's role or scope fails the authorization evaluator."""
    status_code = 403

    def __init__(self, message: str = "Access denied", details: dict | None = None):
        super().__init__(message, details)


class NotFoundError(RetailError):
    """Entity absent, or outside the actor's scope (deliberately indistinguishable)."""
    status_code = 404


class ConflictError(RetailError):
    """Unique constraint violation (duplicate email, inventory row, session code)."""
    status_code = 409


class TransientError(RetailError):
    """Underlying store unavailable. Safe to retry the whole request."""
    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable", details: dict | None = None):
        super().__init__(message, details)


def register_error_handlers(app) -> None:
    """Map the error taxonomy onto JSON responses."""

    @app.errorhandler(RetailError)
    def handle_retail_error(exc: RetailError):
        if isinstance(exc, PermissionDeniedError):
            _record_denial(exc)
        elif isinstance(exc, TransientError):
            current_app.logger.warning("Transient store failure on %s %s: %s", request.method, request.path, exc.__cause__)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        # Let Flask render its own HTTP errors (404 for unknown routes, 405, ...)
        from werkzeug.exceptions import HTTPException
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description}), exc.code

        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


def _record_denial(exc: PermissionDeniedError) -> None:
    from .services import audit

    actor = g.get("actor")
    audit().log_security_event(
        user_id=actor.id if actor else None,
        store_id=actor.store_id if actor else None,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=request.path,
        action=request.method,
        reason=exc.message,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
