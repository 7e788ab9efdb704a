# Overview: Cashier point-of-sale sessions identified by a unique code and its QR rendering.

"""
Cashier Session Service

A cashier starts a session to pair customer devices with their till: the
session code is scanned from a QR image shown at the counter.

RULES:
- Only CASHIER may start a session, and only when assigned to a store
- Starting a session deactivates the cashier's previous active sessions in
  the same transaction, so at most one stays active
- session_code is globally unique; a collision surfaces as ConflictError
"""

from __future__ import annotations

import base64
import io
import uuid

import qrcode
import qrcode.image.svg

from ..authorization import Action, Actor, require
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import CashierSession, User
from retailpos.time_utils import utcnow


def new_session_code() -> str:
    return str(uuid.uuid4())


def encode_qr_data_url(payload: str) -> str:
    """Render payload as an SVG QR code and return it as a data URL."""
    image = qrcode.make(payload, image_factory=qrcode.image.svg.SvgPathImage)
    buffer = io.BytesIO()
    image.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


class CashierSessionService:
    def __init__(self, store, *, code_factory=None, qr_encoder=None):
        self.store = store
        self.code_factory = code_factory or new_session_code
        self.qr_encoder = qr_encoder or encode_qr_data_url

    def create_cashier_session(self, actor: Actor) -> CashierSession:
        require(actor, Action.START_CASHIER_SESSION, message="Only cashiers can start a session")

        cashier = self.store.get(User, actor.id)
        if cashier is None or cashier.is_deleted:
            raise NotFoundError("Cashier not found")
        if cashier.store_id is None:
            raise ValidationError("Cashier is not assigned to a store")

        code = self.code_factory()
        qr_code = self.qr_encoder(code)

        try:
            with self.store.transaction():
                self.store.conditional_update(
                    CashierSession,
                    [CashierSession.cashier_id == cashier.id, CashierSession.active.is_(True)],
                    {"active": False, "ended_at": utcnow()},
                )
                session = self.store.create(
                    CashierSession,
                    session_code=code,
                    qr_code=qr_code,
                    cashier_id=cashier.id,
                    store_id=cashier.store_id,
                    active=True,
                )
        except ConflictError as exc:
            raise ConflictError("Session code already in use", details=exc.details) from exc
        return session

    def end_cashier_session(self, actor: Actor, session_id: int) -> CashierSession:
        # Another cashier's session is reported as absent
        session = self.store.find_one(CashierSession, id=session_id, cashier_id=actor.id)
        if session is None:
            raise NotFoundError("Session not found")
        if not session.active:
            return session

        with self.store.transaction():
            session.active = False
            session.ended_at = utcnow()
            self.store.flush()
        return session

    def get_active_session(self, cashier_id: int) -> CashierSession | None:
        return (
            self.store.query(CashierSession)
            .filter_by(cashier_id=cashier_id, active=True)
            .order_by(CashierSession.id.desc())
            .first()
        )
