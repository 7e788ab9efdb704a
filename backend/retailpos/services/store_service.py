# Overview: Store creation under a business and store lookups.

"""
Store Service

Every store belongs to a business:
- OWNER creates stores under its own business (never another's)
- ADMIN creates stores under an explicitly named business
- Nobody else creates stores
"""

from __future__ import annotations

from ..authorization import Action, Actor, Role, Target, require
from ..errors import NotFoundError, ValidationError
from ..models import Business, Store
from ..validation import clean_str, optional_int


class StoreService:
    def __init__(self, store):
        self.store = store

    def create_store(self, actor: Actor, name, business_id=None) -> Store:
        require(actor, Action.CREATE_STORE, message="Only owners and admins can create stores")

        name = clean_str(name, "name", max_length=120)
        if not name:
            raise ValidationError("Store name is required")

        if actor.role is Role.OWNER:
            business = self.store.find_one(Business, owner_id=actor.id)
            if business is None:
                raise ValidationError("Owner does not have a registered business")
        else:
            business_id = optional_int(business_id, "business_id", minimum=1)
            if business_id is None:
                raise ValidationError("Business ID is required for ADMIN")
            business = self.store.get(Business, business_id)
            if business is None:
                raise NotFoundError("Business not found")

        require(actor, Action.CREATE_STORE, Target.of_business(business), message="Cannot create stores for another business")

        with self.store.transaction():
            return self.store.create(Store, name=name, business_id=business.id)

    def list_stores(self) -> list[Store]:
        return self.store.find_many(Store, order_by=Store.id)

    def get_store(self, store_id: int) -> Store:
        return self.store.get_or_404(Store, store_id, "Store not found")

    def list_stores_by_business(self, business_id: int) -> list[Store]:
        return self.store.find_many(Store, business_id=business_id, order_by=Store.id)
