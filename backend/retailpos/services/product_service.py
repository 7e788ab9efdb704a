# Overview: Product catalog and per-store inventory rows (price and stock).

"""
Product Service

Product master data is shared; each store that carries a product has its
own ProductInventory row with the store price and stock.

RULES:
- Creating a product also stocks it at one store (same transaction)
- One inventory row per (product, store); a second one is a ConflictError
- Stock only goes down through a conditional UPDATE that never drives it
  negative
- Products are soft-deleted (is_active=False, deleted_at set)
- Only roles with MANAGE_PRODUCTS, and only for stores in their scope
"""

from __future__ import annotations

from ..authorization import AccessResolver, Action, Actor, Role, Target, can_act
from ..errors import ConflictError, InsufficientStockError, NotFoundError, PermissionDeniedError, ValidationError
from ..models import Product, ProductInventory, Store
from ..validation import (
    clean_str,
    coerce_bool,
    coerce_int,
    coerce_price_cents,
    optional_int,
    require_fields,
)
from retailpos.time_utils import utcnow


# (field, max_length) for the free-text product attributes
_TEXT_FIELDS = (
    ("name", 255),
    ("description", None),
    ("unit", 32),
    ("category", 120),
    ("barcode", 64),
    ("sku", 64),
)


class ProductService:
    def __init__(self, store):
        self.store = store
        self.access = AccessResolver(store)

    # -- create ------------------------------------------------------------

    def create_product(self, actor: Actor, fields: dict) -> tuple[Product, ProductInventory]:
        require_fields(fields, ("name", "price_cents", "store_id"))
        store_id = coerce_int(fields["store_id"], "store_id", minimum=1)
        self._require_store_scope(actor, store_id)
        self.store.get_or_404(Store, store_id, "Store not found")

        values = self._text_values(fields)
        if not values.get("name"):
            raise ValidationError("name is required")
        price_cents = coerce_price_cents(fields["price_cents"])
        cost_price_cents = fields.get("cost_price_cents")
        if cost_price_cents is not None:
            cost_price_cents = coerce_price_cents(cost_price_cents, "cost_price_cents")

        stock = optional_int(fields.get("stock"), "stock", minimum=0) or 0
        store_price = fields.get("store_price_cents")
        store_price = price_cents if store_price is None else coerce_price_cents(store_price, "store_price_cents")

        with self.store.transaction():
            product = self.store.create(
                Product,
                price_cents=price_cents,
                cost_price_cents=cost_price_cents,
                is_active=True,
                created_by=actor.id,
                updated_by=actor.id,
                **values,
            )
            inventory = self.store.create(
                ProductInventory,
                product_id=product.id,
                store_id=store_id,
                stock=stock,
                price_cents=store_price,
                sku=values.get("sku"),
            )
        return product, inventory

    def add_product_to_store(self, actor: Actor, product_id: int, store_id, price_cents, stock=0, sku=None) -> ProductInventory:
        store_id = coerce_int(store_id, "store_id", minimum=1)
        self._require_store_scope(actor, store_id)
        self.get_product(product_id)
        self.store.get_or_404(Store, store_id, "Store not found")

        price_cents = coerce_price_cents(price_cents)
        stock = optional_int(stock, "stock", minimum=0) or 0
        sku = clean_str(sku, "sku", max_length=64)

        if self.store.find_one(ProductInventory, product_id=product_id, store_id=store_id) is not None:
            raise ConflictError("Product already exists in this store")

        with self.store.transaction():
            return self.store.create(
                ProductInventory,
                product_id=product_id,
                store_id=store_id,
                price_cents=price_cents,
                stock=stock,
                sku=sku,
            )

    # -- reads -------------------------------------------------------------

    def get_product(self, product_id: int) -> Product:
        product = self.store.get(Product, product_id)
        if product is None or product.deleted_at is not None:
            raise NotFoundError("Product not found")
        return product

    def list_products_by_store(self, store_id: int) -> list[ProductInventory]:
        """Inventory rows at store_id whose product is active and not deleted."""
        return (
            self.store.query(ProductInventory)
            .join(Product, ProductInventory.product_id == Product.id)
            .filter(
                ProductInventory.store_id == store_id,
                Product.is_active.is_(True),
                Product.deleted_at.is_(None),
            )
            .order_by(Product.name, Product.id)
            .all()
        )

    # -- mutations ---------------------------------------------------------

    def update_product(self, actor: Actor, product_id: int, fields: dict) -> Product:
        product = self.get_product(product_id)
        self._require_product_scope(actor, product)

        changes = {}
        for name, value in self._text_values(fields).items():
            if name in fields:
                changes[name] = value
        if "name" in changes and not changes["name"]:
            raise ValidationError("name cannot be blank")
        if "price_cents" in fields:
            changes["price_cents"] = coerce_price_cents(fields["price_cents"])
        if "cost_price_cents" in fields:
            value = fields["cost_price_cents"]
            changes["cost_price_cents"] = None if value is None else coerce_price_cents(value, "cost_price_cents")
        if "is_active" in fields:
            changes["is_active"] = coerce_bool(fields["is_active"], "is_active")

        if not changes:
            raise ValidationError("No changes supplied")

        with self.store.transaction():
            for key, value in changes.items():
                setattr(product, key, value)
            product.updated_by = actor.id
            self.store.flush()
        return product

    def soft_delete_product(self, actor: Actor, product_id: int) -> Product:
        product = self.get_product(product_id)
        self._require_product_scope(actor, product)

        with self.store.transaction():
            product.is_active = False
            product.deleted_at = utcnow()
            product.updated_by = actor.id
            self.store.flush()
        return product

    def decrement_stock(self, actor: Actor, product_id: int, store_id: int, quantity) -> ProductInventory:
        """
        Atomically take quantity off the store's stock.

        Raises NotFoundError if the product is not stocked at the store and
        InsufficientStockError if stock is lower than quantity.
        """
        self._require_store_scope(actor, store_id)
        quantity = coerce_int(quantity, "quantity", minimum=1)

        inventory = self.store.find_one(ProductInventory, product_id=product_id, store_id=store_id)
        if inventory is None:
            raise NotFoundError("Product not found in this store")

        with self.store.transaction():
            affected = self.store.conditional_update(
                ProductInventory,
                [ProductInventory.id == inventory.id, ProductInventory.stock >= quantity],
                {"stock": ProductInventory.stock - quantity, "updated_at": utcnow()},
            )
            if affected == 0:
                raise InsufficientStockError(
                    f"Insufficient stock for product: {inventory.product.name}",
                    details={"product_id": product_id, "requested_quantity": quantity},
                )
        return self.store.get(ProductInventory, inventory.id, refresh=True)

    # -- helpers -----------------------------------------------------------

    def _text_values(self, fields: dict) -> dict:
        return {
            name: clean_str(fields.get(name), name, max_length=limit)
            for name, limit in _TEXT_FIELDS
        }

    def _require_store_scope(self, actor: Actor, store_id: int) -> None:
        self.access.require(
            actor,
            Action.MANAGE_PRODUCTS,
            Target.of_store(store_id),
            message="Access denied to this store",
        )

    def _require_product_scope(self, actor: Actor, product: Product) -> None:
        # A product is manageable by anyone who manages a store carrying it
        if actor.role is Role.ADMIN:
            return
        scope = self.access.scope_for(actor)
        for inventory in product.inventories:
            if can_act(actor, Action.MANAGE_PRODUCTS, Target.of_store(inventory.store_id), owner_store_ids=scope):
                return
        raise PermissionDeniedError("Access denied to this product", details={"action": Action.MANAGE_PRODUCTS.value})
