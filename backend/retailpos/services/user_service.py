# Overview: User lookups, updates, soft delete/restore and admin account management.

"""
User Management Service

Users are never hard-deleted: soft delete sets deleted_at, restore clears
it. Every mutation of another account goes through the authorization
evaluator (MANAGE_USER for the role hierarchy, admin-only actions for
admin accounts and restores).
"""

from __future__ import annotations

from ..authorization import AccessResolver, Action, Actor, Role, Target, require
from ..errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ..models import Business, User
from ..validation import clean_str, normalize_email
from retailpos.time_utils import utcnow
from .auth_service import hash_password


class UserService:
    def __init__(self, store, *, bcrypt_rounds: int = 10):
        self.store = store
        self.bcrypt_rounds = bcrypt_rounds
        self.access = AccessResolver(store)

    # -- reads -------------------------------------------------------------

    def get_user(self, user_id: int) -> User:
        user = self.store.get(User, user_id)
        if user is None or user.is_deleted:
            raise NotFoundError("User not found")
        return user

    def view_user(self, actor: Actor, user_id: int) -> User:
        """Users see themselves; managers and owners see users of stores in their scope."""
        user = self.get_user(user_id)
        if actor.id == user.id:
            return user
        if not self.access.can_act(actor, Action.VIEW_STORE_USERS, Target.of_store(user.store_id)):
            raise PermissionDeniedError("Access denied to this user")
        return user

    def describe_user(self, user: User) -> dict:
        """User payload; OWNER accounts include their business and its stores."""
        data = user.to_dict()
        if user.role == Role.OWNER.value:
            business = self.store.find_one(Business, owner_id=user.id)
            data["business"] = business.to_dict(include_stores=True) if business else None
        return data

    def list_active_users(self, actor: Actor) -> list[User]:
        require(actor, Action.LIST_ALL_USERS, message="Admin access required")
        return self.store.find_many(User, User.deleted_at.is_(None), order_by=User.id)

    def list_users_by_store(self, actor: Actor, store_id: int) -> list[User]:
        if not self.access.can_access_store(actor, store_id):
            raise PermissionDeniedError("Access denied to this store", details={"store_id": store_id})
        return self.store.find_many(User, User.deleted_at.is_(None), store_id=store_id, order_by=User.id)

    # -- mutations ---------------------------------------------------------

    def update_user(self, actor: Actor, user_id: int, *, email=None, password=None) -> User:
        """Change another user's email and/or password within the role hierarchy."""
        target = self.get_user(user_id)
        self.access.require(actor, Action.MANAGE_USER, Target.of_user(target), message="Not allowed to update this user")
        return self._apply_account_changes(target, {"email": email, "password": password})

    def soft_delete_user(self, actor: Actor, user_id: int) -> User:
        target = self.get_user(user_id)
        self.access.require(actor, Action.MANAGE_USER, Target.of_user(target), message="Not allowed to delete this user")
        return self._soft_delete(target)

    def restore_user(self, actor: Actor, user_id: int) -> User:
        """
        Clear deleted_at on a soft-deleted user (ADMIN only).

        Fails with ConflictError if another active account took the email
        in the meantime.
        """
        require(actor, Action.RESTORE_USER, message="Admin access required")

        user = self.store.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not user.is_deleted:
            raise ValidationError("User is not deleted")

        taken = self.store.find_one(User, User.deleted_at.is_(None), User.id != user.id, email=user.email)
        if taken is not None:
            raise ConflictError("Email already in use")

        with self.store.transaction():
            user.deleted_at = None
            self.store.flush()
        return user

    # -- admin accounts ----------------------------------------------------

    def list_active_admins(self, actor: Actor) -> list[User]:
        require(actor, Action.MANAGE_ADMINS, message="Admin access required")
        return self.store.find_many(User, User.deleted_at.is_(None), role=Role.ADMIN.value, order_by=User.id)

    def get_admin(self, admin_id: int) -> User:
        admin = self.store.find_one(User, User.deleted_at.is_(None), id=admin_id, role=Role.ADMIN.value)
        if admin is None:
            raise NotFoundError("Admin not found")
        return admin

    def delete_admin(self, actor: Actor, admin_id: int) -> User:
        require(actor, Action.MANAGE_ADMINS, message="Admin access required")
        if admin_id == actor.id:
            raise ValidationError("Admins cannot delete their own account")
        return self._soft_delete(self.get_admin(admin_id))

    def update_admin(self, actor: Actor, admin_id: int, fields: dict) -> User:
        require(actor, Action.MANAGE_ADMINS, message="Admin access required")
        return self._apply_account_changes(self.get_admin(admin_id), fields, allow_profile=True)

    # -- helpers -----------------------------------------------------------

    def _soft_delete(self, user: User) -> User:
        with self.store.transaction():
            user.deleted_at = utcnow()
            self.store.flush()
        return user

    def _apply_account_changes(self, user: User, fields: dict, *, allow_profile: bool = False) -> User:
        changes = {}

        if fields.get("email") is not None:
            email = normalize_email(fields["email"])
            if email != user.email:
                taken = self.store.find_one(User, User.deleted_at.is_(None), User.id != user.id, email=email)
                if taken is not None:
                    raise ConflictError("Email already in use")
                changes["email"] = email

        if fields.get("password") is not None:
            changes["password_hash"] = hash_password(fields["password"], self.bcrypt_rounds)

        if allow_profile:
            for name, limit in (("first_name", 120), ("last_name", 120), ("phone_number", 32)):
                if name in fields:
                    changes[name] = clean_str(fields[name], name, max_length=limit)

        if not changes:
            raise ValidationError("No changes supplied")

        with self.store.transaction():
            for key, value in changes.items():
                setattr(user, key, value)
            self.store.flush()
        return user
