# Overview: Flask API routes for stores, their users and their product listing.

from flask import Blueprint, g, jsonify

from ..authorization import Action
from ..decorators import require_action, require_auth
from ..services import products, stores, users
from . import request_json


stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")


@stores_bp.get("")
@require_auth
def list_stores():
    return jsonify([store.to_dict() for store in stores().list_stores()]), 200


@stores_bp.post("")
@require_auth
@require_action(Action.CREATE_STORE, "Only owners and admins can create stores")
def create_store():
    data = request_json()
    store = stores().create_store(g.actor, data.get("name"), business_id=data.get("business_id"))
    return jsonify(store.to_dict()), 201


@stores_bp.get("/<int:store_id>")
@require_auth
def get_store(store_id: int):
    store = stores().get_store(store_id)
    return jsonify(store.to_dict(include_business=True)), 200


@stores_bp.get("/business/<int:business_id>")
@require_auth
def list_business_stores(business_id: int):
    return jsonify([store.to_dict() for store in stores().list_stores_by_business(business_id)]), 200


@stores_bp.get("/<int:store_id>/users")
@require_auth
def list_store_users(store_id: int):
    return jsonify([user.to_dict() for user in users().list_users_by_store(g.actor, store_id)]), 200


@stores_bp.get("/<int:store_id>/products")
@require_auth
def list_store_products(store_id: int):
    stores().get_store(store_id)
    return jsonify([inventory.to_listing() for inventory in products().list_products_by_store(store_id)]), 200
