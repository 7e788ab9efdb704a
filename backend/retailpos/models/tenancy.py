from __future__ import annotations

from ..extensions import db
from retailpos.time_utils import to_utc_z

class Business(db.Model):
    """
    Tenant root: a Business owned by exactly one OWNER user.

    Created only in the same transaction as its owner's registration
    (or for an existing OWNER). Stores hang off the business.
    """
    __tablename__ = "businesses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    registration_number = db.Column(db.String(64), nullable=True)

    # 1:1 with the owning user
    # use_alter breaks the users -> stores -> businesses -> users FK cycle
    owner_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", use_alter=True, name="fk_businesses_owner_id"),
        nullable=False,
        unique=True,
        index=True,
    )

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    owner = db.relationship("User", foreign_keys=[owner_id], backref=db.backref("business", uselist=False, lazy=True))

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.name!r} owner_id={self.owner_id}>"

    def to_dict(self, *, include_stores: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "registration_number": self.registration_number,
            "owner_id": self.owner_id,
            "created_at": to_utc_z(self.created_at),
        }
        if include_stores:
            data["stores"] = [store.to_dict() for store in self.stores]
        return data

class Store(db.Model):
    """
    Store within a business.

    OWNER-created stores inherit the owner's business; ADMIN-created
    stores name the business explicitly. business_id is always required.
    """
    __tablename__ = "stores"
    __table_args__ = (
        db.Index("ix_stores_business_id", "business_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False)
    name = db.Column(db.String(120), nullable=False)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    business = db.relationship("Business", backref=db.backref("stores", lazy=True, order_by="Store.id"))

    def __repr__(self) -> str:
        return f"<Store id={self.id} name={self.name!r} business_id={self.business_id}>"

    def to_dict(self, *, include_business: bool = False) -> dict:
        data = {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
        }
        if include_business:
            data["business"] = self.business.to_dict() if self.business else None
        return data
