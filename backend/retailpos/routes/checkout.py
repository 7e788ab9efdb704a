# Overview: Flask API routes for checkout: order creation, confirmation and order listings.

"""
Checkout API routes

- POST /api/checkout/orders                       customer or cashier-assisted order
- GET  /api/checkout/orders/<id>                  one order (visibility scoped)
- POST /api/checkout/orders/<id>/confirm          cashier confirmation
- GET  /api/checkout/stores/<store_id>/orders     MANAGER / OWNER / ADMIN
- GET  /api/checkout/cashiers/<cashier_id>/orders MANAGER / OWNER / ADMIN

A retried create may carry the same Idempotency-Key header (or
idempotency_key field) to get the original order back.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..authorization import AccessResolver, Action, Role, Target
from ..decorators import require_action, require_auth
from ..errors import ValidationError
from ..services import checkout, datastore
from ..validation import optional_int
from . import request_json


checkout_bp = Blueprint("checkout", __name__, url_prefix="/api/checkout")


@checkout_bp.post("/orders")
@require_auth
@require_action(Action.CREATE_ORDER)
def create_order():
    data = request_json()
    actor = g.actor

    store_id = optional_int(data.get("store_id"), "store_id")
    if store_id is None:
        raise ValidationError("Invalid order data", details={"store_id": "required"})
    AccessResolver(datastore()).require(
        actor,
        Action.CREATE_ORDER,
        Target.of_store(store_id),
        message="Cashiers can only sell in their own store",
    )

    # Cashier-assisted sale: the cashier rings up an order for a customer
    # (or a walk-in, recorded under the cashier) and it is confirmed at once
    customer_id = actor.id
    cashier_id = None
    if actor.role is Role.CASHIER:
        cashier_id = actor.id
        customer_id = optional_int(data.get("customer_id"), "customer_id") or actor.id

    order = checkout().create_order(
        customer_id,
        data.get("store_id"),
        data.get("items"),
        data.get("paid_online", False),
        cashier_id=cashier_id,
        idempotency_key=request.headers.get("Idempotency-Key") or data.get("idempotency_key"),
    )
    current_app.logger.info("Order %s created at store %s (total_cents=%s)", order.id, order.store_id, order.total_cents)
    return jsonify(order.to_dict()), 201


@checkout_bp.get("/orders/<int:order_id>")
@require_auth
def get_order(order_id: int):
    return jsonify(checkout().get_order(order_id, g.actor).to_dict()), 200


@checkout_bp.post("/orders/<int:order_id>/confirm")
@require_auth
@require_action(Action.CONFIRM_ORDER, "Only cashiers can confirm orders")
def confirm_order(order_id: int):
    order = checkout().confirm_order(order_id, g.actor)
    return jsonify(order.to_dict()), 200


@checkout_bp.get("/stores/<int:store_id>/orders")
@require_auth
@require_action(Action.LIST_ORDERS)
def list_store_orders(store_id: int):
    return jsonify([order.to_dict() for order in checkout().list_orders_by_store(store_id)]), 200


@checkout_bp.get("/cashiers/<int:cashier_id>/orders")
@require_auth
@require_action(Action.LIST_ORDERS)
def list_cashier_orders(cashier_id: int):
    return jsonify([order.to_dict() for order in checkout().list_orders_by_cashier(cashier_id)]), 200
