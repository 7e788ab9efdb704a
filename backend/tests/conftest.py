"""
Pytest fixtures for retailpos backend tests.

Provides test database setup, a business with two stores, users of every
role, stocked products and auth header helpers.
"""

import pytest

from retailpos import create_app
from retailpos.authorization import Actor
from retailpos.extensions import db
from retailpos.models import Business, Product, ProductInventory, Store, User
from retailpos.services.auth_service import hash_password
from retailpos.services.data_store import DataStore
from retailpos.services.token_service import TokenService


TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
PASSWORD = "secret123"

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': TEST_SECRET,
    'JWT_SECRET_KEY': TEST_SECRET,
    'BCRYPT_ROUNDS': 4,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    db.session.rollback()
    # Clear all data but keep schema
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def data_store(db_session):
    return DataStore(db_session)


def make_user(db_session, email, role, store_id=None, password=PASSWORD):
    user = User(
        email=email,
        password_hash=hash_password(password, rounds=4),
        role=role,
        first_name=role.title(),
        last_name="Tester",
        phone_number="555-0100",
        store_id=store_id,
    )
    db_session.add(user)
    db_session.commit()
    return user


def actor_for(user) -> Actor:
    return Actor.from_user(user)


# =============================================================================
# TENANCY: owner -> business -> stores
# =============================================================================


@pytest.fixture(scope='function')
def owner(db_session):
    return make_user(db_session, "owner@acme.test", "OWNER")


@pytest.fixture(scope='function')
def business(db_session, owner):
    business = Business(name="Acme Retail", address="1 Main St", registration_number="REG-001", owner_id=owner.id)
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture(scope='function')
def store_a(db_session, business):
    store = Store(business_id=business.id, name="Acme Downtown")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def store_b(db_session, business):
    store = Store(business_id=business.id, name="Acme Uptown")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def rival_owner(db_session):
    return make_user(db_session, "owner@rival.test", "OWNER")


@pytest.fixture(scope='function')
def rival_store(db_session, rival_owner):
    """Store of a different business."""
    business = Business(name="Rival Goods", owner_id=rival_owner.id)
    db_session.add(business)
    db_session.commit()
    store = Store(business_id=business.id, name="Rival Central")
    db_session.add(store)
    db_session.commit()
    return store


# =============================================================================
# USERS
# =============================================================================


@pytest.fixture(scope='function')
def admin(db_session):
    return make_user(db_session, "admin@retailpos.test", "ADMIN")


@pytest.fixture(scope='function')
def manager_a(db_session, store_a):
    return make_user(db_session, "manager.a@acme.test", "MANAGER", store_id=store_a.id)


@pytest.fixture(scope='function')
def cashier_a(db_session, store_a):
    return make_user(db_session, "cashier.a@acme.test", "CASHIER", store_id=store_a.id)


@pytest.fixture(scope='function')
def cashier_b(db_session, store_b):
    return make_user(db_session, "cashier.b@acme.test", "CASHIER", store_id=store_b.id)


@pytest.fixture(scope='function')
def customer(db_session):
    return make_user(db_session, "customer@mail.test", "CUSTOMER")


# =============================================================================
# PRODUCTS
# =============================================================================


@pytest.fixture(scope='function')
def stock_product(db_session):
    """Factory: create a product stocked at a store, returns the inventory row."""
    def _stock(store, name="Widget", price_cents=1000, stock=10, is_active=True):
        product = Product(name=name, price_cents=price_cents, is_active=is_active)
        db_session.add(product)
        db_session.flush()
        inventory = ProductInventory(product_id=product.id, store_id=store.id, stock=stock, price_cents=price_cents)
        db_session.add(inventory)
        db_session.commit()
        return inventory

    return _stock


# =============================================================================
# HTTP HELPERS
# =============================================================================


@pytest.fixture(scope='function')
def auth_headers(app):
    """Factory: Authorization headers carrying a freshly signed token for user."""
    tokens = TokenService.from_config(app.config)

    def _headers(user) -> dict:
        return {'Authorization': f'Bearer {tokens.issue_token(user)}'}

    return _headers


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token through the login endpoint."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None
