from __future__ import annotations

from ..extensions import db
from retailpos.time_utils import to_utc_z

class User(db.Model):
    """
    User accounts for authentication and attribution.

    Email is unique among non-deleted users only (partial unique index), so
    a soft-deleted account frees its email for re-registration.

    Never hard-deleted: deleted_at marks the soft delete and can be cleared
    to restore the account.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index(
            "uq_users_email_active",
            "email",
            unique=True,
            sqlite_where=db.text("deleted_at IS NULL"),
            postgresql_where=db.text("deleted_at IS NULL"),
        ),
        db.Index("ix_users_store_role", "store_id", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    # ADMIN | OWNER | MANAGER | CASHIER | CUSTOMER (see retailpos.authorization.Role)
    role = db.Column(db.String(16), nullable=False, index=True)

    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)

    # Store affiliation (OWNER and ADMIN carry none)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    store = db.relationship("Store", backref=db.backref("users", lazy=True))

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        # password_hash never leaves the model
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "store_id": self.store_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "deleted_at": to_utc_z(self.deleted_at) if self.deleted_at else None,
        }


class CashierSession(db.Model):
    """
    Point-of-sale session started by a cashier.

    session_code is a globally unique opaque code; qr_code is its scannable
    rendering (SVG data URL). One active session per cashier is expected:
    starting a new one deactivates the previous ones.
    """
    __tablename__ = "cashier_sessions"
    __table_args__ = (
        db.Index("ix_cashier_sessions_cashier_active", "cashier_id", "active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    session_code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    qr_code = db.Column(db.Text, nullable=False)

    cashier_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    ended_at = db.Column(db.DateTime(timezone=True), nullable=True)

    cashier = db.relationship("User", backref=db.backref("cashier_sessions", lazy=True))
    store = db.relationship("Store", backref=db.backref("cashier_sessions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_code": self.session_code,
            "qr_code": self.qr_code,
            "cashier_id": self.cashier_id,
            "store_id": self.store_id,
            "active": self.active,
            "created_at": to_utc_z(self.created_at),
            "ended_at": to_utc_z(self.ended_at) if self.ended_at else None,
        }
