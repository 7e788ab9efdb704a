from __future__ import annotations

from ..extensions import db
from retailpos.time_utils import to_utc_z

class Order(db.Model):
    """
    Checkout order.

    items and total_cents are fixed at creation. The only later mutation is
    cashier confirmation (cashier_confirmed / cashier_id / confirmed_at).

    idempotency_key is client-supplied and unique per customer, so a retried
    checkout returns the original order instead of creating a second one.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("customer_id", "idempotency_key", name="uq_orders_customer_idempotency_key"),
        db.Index("ix_orders_store_created", "store_id", "created_at"),
        db.Index("ix_orders_cashier", "cashier_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False)

    # [{"product_id", "quantity", "unit_price_cents"}] in request order
    items = db.Column(db.JSON, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)

    paid_online = db.Column(db.Boolean, nullable=False, default=False)
    cashier_confirmed = db.Column(db.Boolean, nullable=False, default=False)
    cashier_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    idempotency_key = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    confirmed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    customer = db.relationship("User", foreign_keys=[customer_id])
    cashier = db.relationship("User", foreign_keys=[cashier_id])
    store = db.relationship("Store", backref=db.backref("orders", lazy=True))

    def __repr__(self) -> str:
        return f"<Order id={self.id} store_id={self.store_id} total_cents={self.total_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "store_id": self.store_id,
            "items": self.items,
            "total_cents": self.total_cents,
            "paid_online": self.paid_online,
            "cashier_confirmed": self.cashier_confirmed,
            "cashier_id": self.cashier_id,
            "created_at": to_utc_z(self.created_at),
            "confirmed_at": to_utc_z(self.confirmed_at) if self.confirmed_at else None,
        }
