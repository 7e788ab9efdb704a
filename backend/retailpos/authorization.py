# Overview: Role hierarchy, action allow tables and the scope checks every route and service goes through.

"""
Authorization Evaluator

Permission logic lives here and only here. Routes and services ask
`can_act` / `require`; nobody compares role strings at call sites.

DESIGN PRINCIPLES:
- Fail closed: a (role, action) pair missing from ROLE_ACTIONS is denied
- ADMIN is allowed every action unconditionally
- Role-level check when no target is given; scope check (same store, owned
  store set) when a target is given
- Pure: the only data an OWNER check needs (its owned store ids) is loaded
  beforehand by AccessResolver and passed in

Hierarchy: ADMIN > OWNER > MANAGER > CASHIER > CUSTOMER
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from .errors import AuthenticationError, PermissionDeniedError


class Role(str, Enum):
    ADMIN = "ADMIN"
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    CASHIER = "CASHIER"
    CUSTOMER = "CUSTOMER"


class Action(str, Enum):
    MANAGE_USER = "MANAGE_USER"                      # update / soft-delete another user
    CREATE_STORE = "CREATE_STORE"
    LIST_ORDERS = "LIST_ORDERS"                      # by store or by cashier
    CONFIRM_ORDER = "CONFIRM_ORDER"
    CREATE_ORDER = "CREATE_ORDER"
    START_CASHIER_SESSION = "START_CASHIER_SESSION"
    VIEW_STORE_USERS = "VIEW_STORE_USERS"
    MANAGE_PRODUCTS = "MANAGE_PRODUCTS"
    MANAGE_ADMINS = "MANAGE_ADMINS"
    LIST_ALL_USERS = "LIST_ALL_USERS"
    RESTORE_USER = "RESTORE_USER"


ROLE_ACTIONS: dict[Role, frozenset[Action]] = {
    Role.ADMIN: frozenset(Action),
    Role.OWNER: frozenset({
        Action.MANAGE_USER,
        Action.CREATE_STORE,
        Action.LIST_ORDERS,
        Action.VIEW_STORE_USERS,
        Action.MANAGE_PRODUCTS,
    }),
    Role.MANAGER: frozenset({
        Action.MANAGE_USER,
        Action.LIST_ORDERS,
        Action.VIEW_STORE_USERS,
        Action.MANAGE_PRODUCTS,
    }),
    Role.CASHIER: frozenset({
        Action.CONFIRM_ORDER,
        Action.START_CASHIER_SESSION,
        Action.CREATE_ORDER,
    }),
    Role.CUSTOMER: frozenset({
        Action.CREATE_ORDER,
    }),
}

# Who each role may manage (MANAGE_USER). Store scope is checked separately.
MANAGEABLE_ROLES: dict[Role, Role] = {
    Role.OWNER: Role.MANAGER,
    Role.MANAGER: Role.CASHIER,
}

# Roles that may be created through public registration
SELF_REGISTERABLE_ROLES = frozenset({Role.OWNER, Role.MANAGER, Role.CASHIER, Role.CUSTOMER})


def parse_role(value: Any) -> Role | None:
    """Map a stored/submitted role string to Role; None if unknown."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip().upper())
    except ValueError:
        return None


@dataclass(frozen=True)
class Actor:
    """
    The authenticated caller, built from validated token claims.

    Never an unchecked dict: from_claims rejects anything malformed before
    business logic sees it.
    """
    id: int
    email: str
    role: Role
    store_id: int | None = None

    @classmethod
    def from_claims(cls, claims: Any) -> "Actor":
        if not isinstance(claims, dict):
            raise AuthenticationError("Invalid token claims")

        user_id = claims.get("id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise AuthenticationError("Invalid token claims: id")

        email = claims.get("email")
        if not isinstance(email, str) or not email:
            raise AuthenticationError("Invalid token claims: email")

        role = parse_role(claims.get("role"))
        if role is None:
            raise AuthenticationError("Invalid token claims: role")

        store_id = claims.get("store_id")
        if store_id is not None and (not isinstance(store_id, int) or isinstance(store_id, bool)):
            raise AuthenticationError("Invalid token claims: store_id")

        return cls(id=user_id, email=email, role=role, store_id=store_id)

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, email=user.email, role=Role(user.role), store_id=user.store_id)


@dataclass(frozen=True)
class Target:
    """
    Facts about the entity being acted on.

    role is set for user targets, store_id for anything store-scoped,
    owner_id for business targets.
    """
    role: Role | None = None
    store_id: int | None = None
    owner_id: int | None = None

    @classmethod
    def of_user(cls, user) -> "Target":
        return cls(role=parse_role(user.role), store_id=user.store_id)

    @classmethod
    def of_store(cls, store_id: int | None) -> "Target":
        return cls(store_id=store_id)

    @classmethod
    def of_business(cls, business) -> "Target":
        return cls(owner_id=business.owner_id)


def store_in_scope(actor: Actor, store_id: int | None, owner_store_ids: Iterable[int] = ()) -> bool:
    """ADMIN: any; MANAGER: own store; OWNER: stores of its business; others: none."""
    if actor.role is Role.ADMIN:
        return True
    if store_id is None:
        return False
    if actor.role is Role.MANAGER:
        return actor.store_id == store_id
    if actor.role is Role.OWNER:
        return store_id in set(owner_store_ids)
    return False


def can_act(
    actor: Actor,
    action: Action,
    target: Target | None = None,
    *,
    owner_store_ids: Iterable[int] = (),
) -> bool:
    """
    Decide whether actor may perform action on target.

    Without a target only the role-level allow table is consulted. With a
    target the action's scope rule applies as well.
    """
    if actor.role is Role.ADMIN:
        return True

    if action not in ROLE_ACTIONS.get(actor.role, frozenset()):
        return False

    if target is None:
        # MANAGE_USER is meaningless without knowing who is being managed
        return action is not Action.MANAGE_USER

    if action is Action.MANAGE_USER:
        if MANAGEABLE_ROLES.get(actor.role) is not target.role:
            return False
        if actor.role is Role.OWNER:
            return target.store_id is not None and target.store_id in set(owner_store_ids)
        return actor.store_id is not None and target.store_id == actor.store_id

    if action is Action.CREATE_STORE:
        return target.owner_id == actor.id

    if action in (Action.CONFIRM_ORDER, Action.START_CASHIER_SESSION):
        return actor.store_id is not None and target.store_id == actor.store_id

    if action is Action.CREATE_ORDER:
        # Customers shop anywhere; cashier-assisted sales stay in the cashier's store
        if actor.role is Role.CASHIER:
            return actor.store_id is not None and target.store_id == actor.store_id
        return True

    if action in (Action.VIEW_STORE_USERS, Action.MANAGE_PRODUCTS):
        return store_in_scope(actor, target.store_id, owner_store_ids)

    # LIST_ORDERS is gated by role membership only
    return True


def require(
    actor: Actor,
    action: Action,
    target: Target | None = None,
    *,
    owner_store_ids: Iterable[int] = (),
    message: str = "Access denied",
) -> None:
    """Raise PermissionDeniedError unless can_act allows."""
    if not can_act(actor, action, target, owner_store_ids=owner_store_ids):
        raise PermissionDeniedError(message, details={"action": action.value})


class AccessResolver:
    """
    Loads the facts the pure evaluator needs.

    OWNER carries no store_id of its own: its store set is resolved by
    following owner -> Business -> Stores (one read).
    """

    def __init__(self, store):
        self.store = store

    def owner_store_ids(self, owner_id: int) -> frozenset[int]:
        from .models import Business, Store

        business = self.store.find_one(Business, owner_id=owner_id)
        if business is None:
            # Claimed OWNER without a business owns nothing
            return frozenset()
        rows = self.store.query(Store.id).filter_by(business_id=business.id).all()
        return frozenset(row[0] for row in rows)

    def scope_for(self, actor: Actor) -> frozenset[int]:
        """Owned store ids for OWNER actors, empty for everyone else (no I/O)."""
        if actor.role is Role.OWNER:
            return self.owner_store_ids(actor.id)
        return frozenset()

    def can_access_store(self, actor: Actor, store_id: int | None) -> bool:
        if actor.role is Role.ADMIN:
            return True
        if actor.role is Role.MANAGER:
            return store_id is not None and actor.store_id == store_id
        if actor.role is Role.OWNER:
            return store_id is not None and store_id in self.owner_store_ids(actor.id)
        return False

    def can_act(self, actor: Actor, action: Action, target: Target | None = None) -> bool:
        return can_act(actor, action, target, owner_store_ids=self._scope_if_needed(actor, target))

    def require(self, actor: Actor, action: Action, target: Target | None = None, *, message: str = "Access denied") -> None:
        require(actor, action, target, owner_store_ids=self._scope_if_needed(actor, target), message=message)

    def _scope_if_needed(self, actor: Actor, target: Target | None) -> frozenset[int]:
        if target is None:
            return frozenset()
        return self.scope_for(actor)
