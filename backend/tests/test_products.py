# Overview: Pytest coverage for products, store inventory rows and stock decrements.

import pytest

from retailpos.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from retailpos.services.product_service import ProductService

from conftest import actor_for


@pytest.fixture
def products(data_store):
    return ProductService(data_store)


def _fields(store, **overrides):
    fields = {
        "name": "Oat Milk 1L",
        "price_cents": 349,
        "cost_price_cents": 210,
        "unit": "carton",
        "category": "Dairy Alternatives",
        "barcode": "5011234567890",
        "sku": "OAT-1L",
        "store_id": store.id,
        "stock": 24,
    }
    fields.update(overrides)
    return fields


class TestCreateProduct:

    def test_creates_product_with_first_inventory(self, products, manager_a, store_a):
        product, inventory = products.create_product(actor_for(manager_a), _fields(store_a))

        assert product.created_by == manager_a.id
        assert product.is_active is True
        assert inventory.product_id == product.id
        assert inventory.store_id == store_a.id
        assert inventory.stock == 24
        assert inventory.price_cents == 349

    def test_manager_cannot_stock_other_store(self, products, manager_a, store_b):
        with pytest.raises(PermissionDeniedError):
            products.create_product(actor_for(manager_a), _fields(store_b))

    def test_owner_stocks_any_owned_store(self, products, owner, store_b):
        _, inventory = products.create_product(actor_for(owner), _fields(store_b, store_price_cents=399))
        assert inventory.price_cents == 399

    def test_cashier_cannot_create(self, products, cashier_a, store_a):
        with pytest.raises(PermissionDeniedError):
            products.create_product(actor_for(cashier_a), _fields(store_a))

    @pytest.mark.parametrize("overrides", [{"price_cents": -1}, {"price_cents": "3.49"}, {"name": None}, {"stock": -5}])
    def test_invalid_fields(self, products, manager_a, store_a, overrides):
        with pytest.raises(ValidationError):
            products.create_product(actor_for(manager_a), _fields(store_a, **overrides))


class TestInventory:

    def test_add_to_second_store(self, products, owner, store_a, store_b, stock_product):
        existing = stock_product(store_a)

        inventory = products.add_product_to_store(actor_for(owner), existing.product_id, store_b.id, 1200, stock=3)

        assert inventory.store_id == store_b.id
        assert inventory.stock == 3

    def test_duplicate_inventory_conflicts(self, products, owner, store_a, stock_product):
        existing = stock_product(store_a)
        with pytest.raises(ConflictError):
            products.add_product_to_store(actor_for(owner), existing.product_id, store_a.id, 1000)

    def test_listing_skips_deleted_products(self, products, manager_a, store_a, stock_product):
        kept = stock_product(store_a, name="Apples")
        dropped = stock_product(store_a, name="Bananas")

        products.soft_delete_product(actor_for(manager_a), dropped.product_id)

        listing = products.list_products_by_store(store_a.id)
        assert [row.product_id for row in listing] == [kept.product_id]
        assert listing[0].to_listing()["name"] == "Apples"

    def test_deleted_product_not_found(self, products, manager_a, store_a, stock_product):
        inventory = stock_product(store_a)
        products.soft_delete_product(actor_for(manager_a), inventory.product_id)
        with pytest.raises(NotFoundError):
            products.get_product(inventory.product_id)


class TestDecrementStock:

    def test_decrement(self, products, manager_a, store_a, stock_product):
        inventory = stock_product(store_a, stock=5)
        updated = products.decrement_stock(actor_for(manager_a), inventory.product_id, store_a.id, 2)
        assert updated.stock == 3

    def test_cannot_go_negative(self, products, manager_a, store_a, stock_product):
        inventory = stock_product(store_a, stock=1)
        with pytest.raises(InsufficientStockError):
            products.decrement_stock(actor_for(manager_a), inventory.product_id, store_a.id, 2)

    def test_not_stocked_here(self, products, owner, store_a, store_b, stock_product):
        inventory = stock_product(store_a)
        with pytest.raises(NotFoundError):
            products.decrement_stock(actor_for(owner), inventory.product_id, store_b.id, 1)


class TestUpdateProduct:

    def test_update_price(self, products, manager_a, store_a, stock_product):
        inventory = stock_product(store_a)
        updated = products.update_product(actor_for(manager_a), inventory.product_id, {"price_cents": 1299, "category": "Tools"})
        assert updated.price_cents == 1299
        assert updated.category == "Tools"
        assert updated.updated_by == manager_a.id

    def test_rival_owner_cannot_update(self, products, rival_owner, store_a, stock_product):
        inventory = stock_product(store_a)
        with pytest.raises(PermissionDeniedError):
            products.update_product(actor_for(rival_owner), inventory.product_id, {"price_cents": 1})

    def test_empty_update_rejected(self, products, manager_a, store_a, stock_product):
        inventory = stock_product(store_a)
        with pytest.raises(ValidationError):
            products.update_product(actor_for(manager_a), inventory.product_id, {})
