from __future__ import annotations

from ..extensions import db
from retailpos.time_utils import to_utc_z

class Product(db.Model):
    """
    Product master data, shared across stores.

    Per-store price and stock live on ProductInventory. Products are
    soft-deleted (is_active=False + deleted_at), never hard-deleted.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_active", "is_active", "deleted_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Authoritative storage in cents (list price; store price is on the inventory row)
    price_cents = db.Column(db.Integer, nullable=False)
    cost_price_cents = db.Column(db.Integer, nullable=True)

    unit = db.Column(db.String(32), nullable=True)
    category = db.Column(db.String(120), nullable=True)
    barcode = db.Column(db.String(64), nullable=True, index=True)
    sku = db.Column(db.String(64), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    updated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"

    def to_dict(self, *, include_inventories: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price_cents": self.price_cents,
            "cost_price_cents": self.cost_price_cents,
            "unit": self.unit,
            "category": self.category,
            "barcode": self.barcode,
            "sku": self.sku,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "deleted_at": to_utc_z(self.deleted_at) if self.deleted_at else None,
        }
        if include_inventories:
            data["inventories"] = [inv.to_dict() for inv in self.inventories]
        return data


class ProductInventory(db.Model):
    """
    Product x Store join carrying the store price and stock on hand.

    One row per (product, store). stock never goes negative: decrements go
    through a conditional UPDATE ... WHERE stock >= qty, and the CHECK
    constraint backs it at the database level.
    """
    __tablename__ = "product_inventories"
    __table_args__ = (
        db.UniqueConstraint("product_id", "store_id", name="uq_product_inventories_product_store"),
        db.CheckConstraint("stock >= 0", name="ck_product_inventories_stock_non_negative"),
        db.Index("ix_product_inventories_store", "store_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    price_cents = db.Column(db.Integer, nullable=False)
    sku = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    product = db.relationship("Product", backref=db.backref("inventories", lazy=True, order_by="ProductInventory.id"))
    store = db.relationship("Store", backref=db.backref("inventories", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "store_id": self.store_id,
            "stock": self.stock,
            "price_cents": self.price_cents,
            "sku": self.sku,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_listing(self) -> dict:
        """Flattened inventory + product view used by the store product listing."""
        product = self.product
        return {
            "inventory_id": self.id,
            "price_cents": self.price_cents,
            "stock": self.stock,
            "sku": self.sku,
            "product_id": product.id,
            "name": product.name,
            "description": product.description,
            "cost_price_cents": product.cost_price_cents,
            "unit": product.unit,
            "category": product.category,
            "barcode": product.barcode,
            "is_active": product.is_active,
            "created_by": product.created_by,
            "updated_by": product.updated_by,
            "created_at": to_utc_z(product.created_at),
            "updated_at": to_utc_z(product.updated_at),
        }
