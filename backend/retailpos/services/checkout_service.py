# Overview: Checkout engine: order creation with stock validation, totals and cashier confirmation.

"""
Checkout Service

WHY: An order is the record of a sale at one store. Its items and total are
fixed when it is created; the only later change is cashier confirmation.

CREATE FLOW:
1. Validate items (non-empty, product_id + integer quantity >= 1) and store_id
2. Single pass in request order: load the store's inventory row for each
   product, reject unknown products and stock shortfalls, accumulate the
   total in integer cents
3. In one transaction: decrement each inventory row with
   UPDATE ... SET stock = stock - q WHERE id = :id AND stock >= q
   and persist the Order. A zero-row decrement means another checkout took
   the stock first: the transaction rolls back and no order exists.

IDEMPOTENCY:
A client may send idempotency_key. A second create with the same
(customer_id, idempotency_key) returns the first order untouched, with no
second decrement.

CONFIRMATION:
confirm_order is one conditional UPDATE scoped to the cashier's store, so
"order exists" and "order belongs to this store" are decided by the same
statement that writes. Unknown and foreign-store orders both read as
"Order not found".
"""

from __future__ import annotations

from ..authorization import Action, Actor, Role, can_act, require
from ..errors import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Order, Product, ProductInventory, User
from ..validation import clean_str, coerce_bool, coerce_int
from retailpos.time_utils import utcnow
from .concurrency import run_with_retry


class CheckoutService:
    def __init__(self, store):
        self.store = store

    # -- create ------------------------------------------------------------

    def create_order(
        self,
        customer_id: int,
        store_id,
        items,
        paid_online=False,
        *,
        cashier_id: int | None = None,
        idempotency_key: str | None = None,
    ) -> Order:
        """
        Create an order after validating every line against store stock.

        Raises:
            ValidationError: bad items / store_id / flags, or no active customer
            NotFoundError: a product has no active inventory row at the store
            InsufficientStockError: requested quantity exceeds stock
        """
        if store_id is None or store_id == "":
            raise ValidationError("Invalid order data", details={"store_id": "required"})
        store_id = coerce_int(store_id, "store_id", minimum=1)
        lines = self._parse_items(items)
        paid_online = coerce_bool(paid_online, "paid_online")
        idempotency_key = clean_str(idempotency_key, "idempotency_key", max_length=128)

        if self.store.find_one(User, User.deleted_at.is_(None), id=customer_id) is None:
            raise ValidationError("Invalid customer_id", details={"customer_id": customer_id})

        if idempotency_key:
            existing = self._find_by_idempotency_key(customer_id, idempotency_key)
            if existing is not None:
                return existing

        reservations = []
        snapshot = []
        total_cents = 0
        for product_id, quantity in lines:
            inventory = self._load_inventory(product_id, store_id)
            if inventory is None:
                raise NotFoundError(
                    f"Product {product_id} not found in this store",
                    details={"product_id": product_id},
                )
            if inventory.stock < quantity:
                raise self._shortfall(inventory, quantity)

            total_cents += inventory.price_cents * quantity
            reservations.append((inventory, quantity))
            snapshot.append({
                "product_id": product_id,
                "quantity": quantity,
                "unit_price_cents": inventory.price_cents,
            })

        try:
            with self.store.transaction():
                for inventory, quantity in reservations:
                    self._reserve_stock(inventory, quantity)

                order = self.store.create(
                    Order,
                    customer_id=customer_id,
                    store_id=store_id,
                    items=snapshot,
                    total_cents=total_cents,
                    paid_online=paid_online,
                    cashier_confirmed=cashier_id is not None,
                    cashier_id=cashier_id,
                    confirmed_at=utcnow() if cashier_id is not None else None,
                    idempotency_key=idempotency_key,
                )
        except ConflictError:
            # Lost a race against a retry carrying the same key
            if idempotency_key:
                existing = self._find_by_idempotency_key(customer_id, idempotency_key)
                if existing is not None:
                    return existing
            raise

        return order

    def _parse_items(self, items) -> list[tuple[int, int]]:
        if not isinstance(items, list) or not items:
            raise ValidationError("Invalid order data", details={"items": "must be a non-empty list"})

        lines = []
        for index, item in enumerate(items):
            if not isinstance(item, dict) or item.get("product_id") is None or item.get("quantity") is None:
                raise ValidationError(
                    "Invalid order data",
                    details={"items": f"item {index} needs product_id and quantity"},
                )
            product_id = coerce_int(item["product_id"], f"items[{index}].product_id", minimum=1)
            quantity = coerce_int(item["quantity"], f"items[{index}].quantity", minimum=1)
            lines.append((product_id, quantity))
        return lines

    def _find_by_idempotency_key(self, customer_id: int, key: str) -> Order | None:
        return self.store.find_one(Order, customer_id=customer_id, idempotency_key=key)

    def _load_inventory(self, product_id: int, store_id: int) -> ProductInventory | None:
        return (
            self.store.query(ProductInventory)
            .join(Product, ProductInventory.product_id == Product.id)
            .filter(
                ProductInventory.product_id == product_id,
                ProductInventory.store_id == store_id,
                Product.is_active.is_(True),
                Product.deleted_at.is_(None),
            )
            .first()
        )

    def _reserve_stock(self, inventory, quantity: int) -> None:
        affected = self.store.conditional_update(
            ProductInventory,
            [ProductInventory.id == inventory.id, ProductInventory.stock >= quantity],
            {"stock": ProductInventory.stock - quantity, "updated_at": utcnow()},
        )
        if affected == 0:
            raise self._shortfall(inventory, quantity)

    @staticmethod
    def _shortfall(inventory, quantity: int) -> InsufficientStockError:
        name = inventory.product.name
        return InsufficientStockError(
            f"Insufficient stock for product: {name}",
            details={
                "product_id": inventory.product_id,
                "product_name": name,
                "requested_quantity": quantity,
            },
        )

    # -- confirm -----------------------------------------------------------

    def confirm_order(self, order_id: int, actor: Actor) -> Order:
        """
        Mark an order confirmed by the acting cashier.

        Idempotent: confirming again leaves the same state (confirmed_at is
        kept from the first confirmation).
        """
        require(actor, Action.CONFIRM_ORDER, message="Only cashiers can confirm orders")

        criteria = [Order.id == order_id]
        if actor.role is not Role.ADMIN:
            if actor.store_id is None:
                raise NotFoundError("Order not found")
            criteria.append(Order.store_id == actor.store_id)

        values = {
            "cashier_confirmed": True,
            "cashier_id": actor.id,
            "confirmed_at": db.func.coalesce(Order.confirmed_at, utcnow()),
        }

        def _op():
            with self.store.transaction():
                return self.store.conditional_update(Order, criteria, values)

        if run_with_retry(_op) == 0:
            raise NotFoundError("Order not found")
        return self.store.get(Order, order_id, refresh=True)

    # -- reads -------------------------------------------------------------

    def get_order(self, order_id: int, actor: Actor | None = None) -> Order:
        """
        Load an order. With an actor, orders the actor may not see read as
        absent: customers see their own, cashiers their store's, and
        order-listing roles any.
        """
        order = self.store.get_or_404(Order, order_id, "Order not found")
        if actor is None or actor.id == order.customer_id:
            return order
        if can_act(actor, Action.LIST_ORDERS):
            return order
        if actor.role is Role.CASHIER and actor.store_id is not None and actor.store_id == order.store_id:
            return order
        raise NotFoundError("Order not found")

    def list_orders_by_store(self, store_id: int) -> list[Order]:
        return self.store.find_many(Order, store_id=store_id, order_by=[Order.created_at.desc(), Order.id.desc()])

    def list_orders_by_cashier(self, cashier_id: int) -> list[Order]:
        return self.store.find_many(Order, cashier_id=cashier_id, order_by=[Order.created_at.desc(), Order.id.desc()])
