# Overview: Flask API routes for products and per-store inventory.

from flask import Blueprint, g, jsonify

from ..authorization import Action
from ..decorators import require_action, require_auth
from ..services import products
from . import request_json


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.post("")
@require_auth
@require_action(Action.MANAGE_PRODUCTS)
def create_product():
    product, inventory = products().create_product(g.actor, request_json())
    return jsonify({"product": product.to_dict(), "inventory": inventory.to_dict()}), 201


@products_bp.get("/<int:product_id>")
@require_auth
def get_product(product_id: int):
    product = products().get_product(product_id)
    return jsonify(product.to_dict(include_inventories=True)), 200


@products_bp.put("/<int:product_id>")
@require_auth
@require_action(Action.MANAGE_PRODUCTS)
def update_product(product_id: int):
    product = products().update_product(g.actor, product_id, request_json())
    return jsonify(product.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_action(Action.MANAGE_PRODUCTS)
def delete_product(product_id: int):
    product = products().soft_delete_product(g.actor, product_id)
    return jsonify({"message": "Product deleted", "product": product.to_dict()}), 200


@products_bp.post("/<int:product_id>/stores")
@require_auth
@require_action(Action.MANAGE_PRODUCTS)
def add_product_to_store(product_id: int):
    data = request_json()
    inventory = products().add_product_to_store(
        g.actor,
        product_id,
        data.get("store_id"),
        data.get("price_cents"),
        stock=data.get("stock", 0),
        sku=data.get("sku"),
    )
    return jsonify(inventory.to_dict()), 201


@products_bp.post("/<int:product_id>/stores/<int:store_id>/decrement")
@require_auth
@require_action(Action.MANAGE_PRODUCTS)
def decrement_stock(product_id: int, store_id: int):
    data = request_json()
    inventory = products().decrement_stock(g.actor, product_id, store_id, data.get("quantity"))
    return jsonify(inventory.to_dict()), 200
