# Overview: Service factories wired to the request's database session and app config.

"""
Services take their collaborators at construction. These factories build
them for the current app context: a fresh DataStore around db.session and
settings read from current_app.config.
"""

from flask import current_app

from ..extensions import db
from .audit_service import AuditService
from .auth_service import AuthService
from .cashier_session_service import CashierSessionService
from .checkout_service import CheckoutService
from .data_store import DataStore
from .product_service import ProductService
from .store_service import StoreService
from .token_service import TokenService
from .user_service import UserService


def datastore() -> DataStore:
    return DataStore(db.session)


def _bcrypt_rounds() -> int:
    return int(current_app.config.get("BCRYPT_ROUNDS", 10))


def tokens() -> TokenService:
    return TokenService.from_config(current_app.config)


def auth() -> AuthService:
    return AuthService(datastore(), tokens(), bcrypt_rounds=_bcrypt_rounds())


def users() -> UserService:
    return UserService(datastore(), bcrypt_rounds=_bcrypt_rounds())


def audit() -> AuditService:
    return AuditService(datastore())


def checkout() -> CheckoutService:
    return CheckoutService(datastore())


def cashier_sessions() -> CashierSessionService:
    return CashierSessionService(datastore())


def stores() -> StoreService:
    return StoreService(datastore())


def products() -> ProductService:
    return ProductService(datastore())
