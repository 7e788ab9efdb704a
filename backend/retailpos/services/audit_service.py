# Overview: Append-only security event log.

"""
Security Event Logging

WHY: Create an audit trail of denials, login attempts and account
lifecycle changes for security monitoring.

Events are written in their own unit of work after the main operation has
resolved, so a denied or failed request still leaves its trace.
"""

from __future__ import annotations

from ..models import SecurityEvent
from retailpos.time_utils import utcnow


class AuditService:
    def __init__(self, store):
        self.store = store

    def log_security_event(
        self,
        user_id: int | None,
        event_type: str,
        success: bool,
        resource: str | None = None,
        action: str | None = None,
        reason: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        store_id: int | None = None,
    ) -> SecurityEvent:
        """
        Log security event to audit trail.

        event_type examples:
        - PERMISSION_DENIED
        - LOGIN_FAILED / LOGIN_SUCCESS
        - USER_CREATED / USER_DELETED / USER_RESTORED
        """
        with self.store.transaction():
            return self.store.create(
                SecurityEvent,
                user_id=user_id,
                store_id=store_id,
                event_type=event_type,
                resource=resource[:128] if resource else None,
                action=action,
                success=success,
                reason=reason,
                ip_address=ip_address,
                user_agent=user_agent[:512] if user_agent else None,
                occurred_at=utcnow(),
            )

    def list_events(self, *, event_type: str | None = None, user_id: int | None = None, limit: int = 100) -> list[SecurityEvent]:
        query = self.store.query(SecurityEvent)
        if event_type:
            query = query.filter_by(event_type=event_type)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        return query.order_by(SecurityEvent.id.desc()).limit(limit).all()
