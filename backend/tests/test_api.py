# Overview: HTTP-level tests for status codes, error bodies and audit events across the API.

"""
API Tests

Drives the blueprints through the Flask test client:
- Error taxonomy maps to status codes with {"error": ...} bodies
- Bearer token checks on protected routes
- Security events written for login failures and permission denials
"""

import pytest

from retailpos.models import Order, SecurityEvent, User
from retailpos.time_utils import utcnow

from conftest import PASSWORD, get_auth_token


def _events(db_session, event_type):
    return db_session.query(SecurityEvent).filter_by(event_type=event_type).all()


# =============================================================================
# SYSTEM
# =============================================================================


class TestSystem:

    def test_health(self, client, db_session):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.json['checks']['database']['status'] == 'healthy'

    def test_unknown_route_is_json_404(self, client, db_session):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert 'error' in response.json


# =============================================================================
# AUTH
# =============================================================================


class TestAuthEndpoints:

    def test_register_then_login(self, client, db_session):
        response = client.post('/api/auth/register', json={
            'email': 'shopper@mail.test',
            'password': 'hunter22',
            'role': 'CUSTOMER',
            'first_name': 'Sam',
            'last_name': 'Shopper',
            'phone_number': '555-0142',
        })
        assert response.status_code == 201
        assert response.json['user']['role'] == 'CUSTOMER'
        assert 'business' not in response.json
        assert len(_events(db_session, 'USER_CREATED')) == 1

        token = get_auth_token(client, 'shopper@mail.test', 'hunter22')
        assert token

        me = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert me.status_code == 200
        assert me.json['email'] == 'shopper@mail.test'

    def test_owner_registration_returns_business(self, client, db_session):
        response = client.post('/api/auth/register', json={
            'email': 'founder@shop.test',
            'password': 'hunter22',
            'role': 'OWNER',
            'first_name': 'Ada',
            'last_name': 'Founder',
            'phone_number': '555-0143',
            'business_name': 'Founder Foods',
        })
        assert response.status_code == 201
        assert response.json['business']['name'] == 'Founder Foods'
        assert response.json['business']['owner_id'] == response.json['user']['id']

    def test_admin_self_registration_forbidden(self, client, db_session):
        response = client.post('/api/auth/register', json={
            'email': 'root@mail.test',
            'password': 'hunter22',
            'role': 'ADMIN',
            'first_name': 'Root',
            'last_name': 'User',
            'phone_number': '555-0144',
        })
        assert response.status_code == 403
        assert db_session.query(User).count() == 0
        assert len(_events(db_session, 'PERMISSION_DENIED')) == 1

    def test_bad_login_is_generic(self, client, db_session, customer):
        response = client.post('/api/auth/login', json={'email': 'customer@mail.test', 'password': 'nope'})

        assert response.status_code == 401
        assert response.json == {'error': 'Invalid credentials'}
        failures = _events(db_session, 'LOGIN_FAILED')
        assert len(failures) == 1
        assert failures[0].success is False

    def test_login_success_logged(self, client, db_session, customer):
        response = client.post('/api/auth/login', json={'email': 'customer@mail.test', 'password': PASSWORD})
        assert response.status_code == 200
        assert response.json['user']['id'] == customer.id
        assert len(_events(db_session, 'LOGIN_SUCCESS')) == 1

    def test_non_object_body_rejected(self, client, db_session):
        response = client.post('/api/auth/login', json=['not', 'an', 'object'])
        assert response.status_code == 400


class TestBearerTokens:

    def test_missing_token(self, client, db_session):
        response = client.get('/api/auth/me')
        assert response.status_code == 401
        assert response.json['error'] == 'Authentication required'

    def test_malformed_token(self, client, db_session):
        response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 401

    def test_soft_deleted_user_token_rejected(self, client, db_session, customer, auth_headers):
        headers = auth_headers(customer)
        customer.deleted_at = utcnow()
        db_session.commit()

        response = client.get('/api/auth/me', headers=headers)
        assert response.status_code == 401
        assert response.json['error'] == 'Account no longer active'


# =============================================================================
# CHECKOUT
# =============================================================================


class TestCheckoutEndpoints:

    @pytest.fixture
    def inventory(self, store_a, stock_product):
        return stock_product(store_a, name="Espresso Beans", price_cents=1450, stock=3)

    def _order(self, client, headers, store, inventory, quantity=2, **extra):
        body = {'store_id': store.id, 'items': [{'product_id': inventory.product_id, 'quantity': quantity}]}
        body.update(extra)
        return client.post('/api/checkout/orders', json=body, headers=headers)

    def test_customer_creates_order(self, client, db_session, customer, store_a, inventory, auth_headers):
        response = self._order(client, auth_headers(customer), store_a, inventory)

        assert response.status_code == 201
        assert response.json['total_cents'] == 2900
        assert response.json['cashier_confirmed'] is False
        assert response.json['items'] == [
            {'product_id': inventory.product_id, 'quantity': 2, 'unit_price_cents': 1450},
        ]

    def test_insufficient_stock_is_400(self, client, db_session, customer, store_a, inventory, auth_headers):
        response = self._order(client, auth_headers(customer), store_a, inventory, quantity=4)

        assert response.status_code == 400
        assert response.json['error'] == 'Insufficient stock for product: Espresso Beans'
        assert db_session.query(Order).count() == 0

    def test_idempotency_header_replays(self, client, db_session, customer, store_a, inventory, auth_headers):
        headers = dict(auth_headers(customer), **{'Idempotency-Key': 'cart-77'})

        first = self._order(client, headers, store_a, inventory, quantity=1)
        second = self._order(client, headers, store_a, inventory, quantity=1)

        assert first.json['id'] == second.json['id']
        assert db_session.query(Order).count() == 1

    def test_cashier_sale_is_confirmed(self, client, db_session, cashier_a, customer, store_a, inventory, auth_headers):
        response = self._order(client, auth_headers(cashier_a), store_a, inventory, quantity=1, customer_id=customer.id)

        assert response.status_code == 201
        assert response.json['customer_id'] == customer.id
        assert response.json['cashier_id'] == cashier_a.id
        assert response.json['cashier_confirmed'] is True

    def test_cashier_sale_for_unknown_customer_rejected(self, client, db_session, cashier_a, store_a, inventory, auth_headers):
        response = self._order(client, auth_headers(cashier_a), store_a, inventory, quantity=1, customer_id=987654)

        assert response.status_code == 400
        assert response.json['error'] == 'Invalid customer_id'
        assert db_session.query(Order).count() == 0

    def test_cashier_without_store_id_is_400(self, client, db_session, cashier_a, inventory, auth_headers):
        response = client.post(
            '/api/checkout/orders',
            json={'items': [{'product_id': inventory.product_id, 'quantity': 1}]},
            headers=auth_headers(cashier_a),
        )

        assert response.status_code == 400
        assert response.json['error'] == 'Invalid order data'

    def test_cashier_cannot_sell_in_other_store(self, client, db_session, cashier_b, store_a, inventory, auth_headers):
        response = self._order(client, auth_headers(cashier_b), store_a, inventory, quantity=1)
        assert response.status_code == 403

    def test_confirm_flow(self, client, db_session, customer, cashier_a, cashier_b, store_a, inventory, auth_headers):
        order_id = self._order(client, auth_headers(customer), store_a, inventory, quantity=1).json['id']

        customer_attempt = client.post(f'/api/checkout/orders/{order_id}/confirm', headers=auth_headers(customer))
        assert customer_attempt.status_code == 403

        other_store = client.post(f'/api/checkout/orders/{order_id}/confirm', headers=auth_headers(cashier_b))
        assert other_store.status_code == 404

        confirmed = client.post(f'/api/checkout/orders/{order_id}/confirm', headers=auth_headers(cashier_a))
        assert confirmed.status_code == 200
        assert confirmed.json['cashier_confirmed'] is True
        assert confirmed.json['cashier_id'] == cashier_a.id

    def test_store_orders_listing(self, client, db_session, customer, manager_a, store_a, inventory, auth_headers):
        self._order(client, auth_headers(customer), store_a, inventory, quantity=1)

        as_manager = client.get(f'/api/checkout/stores/{store_a.id}/orders', headers=auth_headers(manager_a))
        assert as_manager.status_code == 200
        assert len(as_manager.json) == 1

        as_customer = client.get(f'/api/checkout/stores/{store_a.id}/orders', headers=auth_headers(customer))
        assert as_customer.status_code == 403


# =============================================================================
# CASHIER SESSIONS
# =============================================================================


class TestCashierSessionEndpoints:

    def test_start_and_read_active_session(self, client, db_session, cashier_a, auth_headers):
        headers = auth_headers(cashier_a)

        assert client.get('/api/auth/cashier-session/active', headers=headers).status_code == 404

        started = client.post('/api/auth/cashier-session', headers=headers)
        assert started.status_code == 201
        assert started.json['qr_code'].startswith('data:image/svg+xml;base64,')

        active = client.get('/api/auth/cashier-session/active', headers=headers)
        assert active.status_code == 200
        assert active.json['id'] == started.json['id']

        ended = client.post(f"/api/auth/cashier-session/{started.json['id']}/end", headers=headers)
        assert ended.status_code == 200
        assert ended.json['active'] is False

    def test_customer_cannot_start_session(self, client, db_session, customer, auth_headers):
        response = client.post('/api/auth/cashier-session', headers=auth_headers(customer))
        assert response.status_code == 403


# =============================================================================
# ADMIN
# =============================================================================


class TestAdminEndpoints:

    def test_security_events_admin_only(self, client, db_session, admin, owner, auth_headers):
        assert client.get('/api/admin/security-events', headers=auth_headers(owner)).status_code == 403

        response = client.get('/api/admin/security-events', headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json[0]['event_type'] == 'PERMISSION_DENIED'
