# Overview: Pytest coverage for user management within the role hierarchy.

import pytest

from retailpos.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from retailpos.models import User
from retailpos.services.auth_service import verify_password
from retailpos.services.user_service import UserService
from retailpos.time_utils import utcnow

from conftest import actor_for, make_user


@pytest.fixture
def users(data_store):
    return UserService(data_store, bcrypt_rounds=4)


@pytest.fixture
def manager_b(db_session, store_b):
    return make_user(db_session, "manager.b@acme.test", "MANAGER", store_id=store_b.id)


@pytest.fixture
def rival_manager(db_session, rival_store):
    return make_user(db_session, "manager@rival.test", "MANAGER", store_id=rival_store.id)


class TestSoftDelete:

    def test_manager_deletes_cashier_in_same_store(self, users, manager_a, cashier_a):
        deleted = users.soft_delete_user(actor_for(manager_a), cashier_a.id)
        assert deleted.deleted_at is not None

    def test_manager_cannot_delete_cashier_in_other_store(self, users, db_session, manager_a, cashier_b):
        with pytest.raises(PermissionDeniedError):
            users.soft_delete_user(actor_for(manager_a), cashier_b.id)
        assert db_session.get(User, cashier_b.id, populate_existing=True).deleted_at is None

    def test_owner_deletes_manager_in_owned_store(self, users, owner, manager_b):
        assert users.soft_delete_user(actor_for(owner), manager_b.id).is_deleted

    def test_owner_cannot_delete_rival_manager(self, users, owner, rival_manager):
        with pytest.raises(PermissionDeniedError):
            users.soft_delete_user(actor_for(owner), rival_manager.id)

    def test_owner_cannot_delete_cashier(self, users, owner, cashier_a):
        with pytest.raises(PermissionDeniedError):
            users.soft_delete_user(actor_for(owner), cashier_a.id)

    def test_cashier_cannot_delete_anyone(self, users, cashier_a, cashier_b):
        with pytest.raises(PermissionDeniedError):
            users.soft_delete_user(actor_for(cashier_a), cashier_b.id)

    def test_deleted_user_is_not_found(self, users, admin, manager_a, cashier_a):
        users.soft_delete_user(actor_for(manager_a), cashier_a.id)
        with pytest.raises(NotFoundError):
            users.get_user(cashier_a.id)
        with pytest.raises(NotFoundError):
            users.soft_delete_user(actor_for(admin), cashier_a.id)


class TestUpdate:

    def test_manager_changes_cashier_password(self, users, manager_a, cashier_a):
        updated = users.update_user(actor_for(manager_a), cashier_a.id, password="fresh-pass")
        assert verify_password("fresh-pass", updated.password_hash)

    def test_email_change_checks_uniqueness(self, users, manager_a, cashier_a, customer):
        with pytest.raises(ConflictError):
            users.update_user(actor_for(manager_a), cashier_a.id, email="customer@mail.test")

    def test_email_change(self, users, manager_a, cashier_a):
        updated = users.update_user(actor_for(manager_a), cashier_a.id, email="Till.One@Acme.test")
        assert updated.email == "till.one@acme.test"

    def test_nothing_to_change(self, users, manager_a, cashier_a):
        with pytest.raises(ValidationError):
            users.update_user(actor_for(manager_a), cashier_a.id)


class TestRestore:

    def test_admin_restores(self, users, db_session, admin, cashier_a):
        cashier_a.deleted_at = utcnow()
        db_session.commit()

        restored = users.restore_user(actor_for(admin), cashier_a.id)
        assert restored.deleted_at is None

    def test_only_admin_restores(self, users, db_session, manager_a, cashier_a):
        cashier_a.deleted_at = utcnow()
        db_session.commit()

        with pytest.raises(PermissionDeniedError):
            users.restore_user(actor_for(manager_a), cashier_a.id)

    def test_restore_conflicts_when_email_taken(self, users, db_session, admin, cashier_a, store_a):
        cashier_a.deleted_at = utcnow()
        db_session.commit()
        make_user(db_session, "cashier.a@acme.test", "CASHIER", store_id=store_a.id)

        with pytest.raises(ConflictError):
            users.restore_user(actor_for(admin), cashier_a.id)

    def test_restore_active_user_rejected(self, users, admin, cashier_a):
        with pytest.raises(ValidationError):
            users.restore_user(actor_for(admin), cashier_a.id)


class TestListing:

    def test_store_users_for_manager(self, users, manager_a, cashier_a, cashier_b):
        listed = users.list_users_by_store(actor_for(manager_a), manager_a.store_id)
        assert {u.id for u in listed} == {manager_a.id, cashier_a.id}

    def test_manager_cannot_list_other_store(self, users, manager_a, store_b):
        with pytest.raises(PermissionDeniedError):
            users.list_users_by_store(actor_for(manager_a), store_b.id)

    def test_owner_lists_owned_store_only(self, users, owner, cashier_b, store_b, rival_store):
        assert [u.id for u in users.list_users_by_store(actor_for(owner), store_b.id)] == [cashier_b.id]
        with pytest.raises(PermissionDeniedError):
            users.list_users_by_store(actor_for(owner), rival_store.id)

    def test_store_listing_excludes_deleted(self, users, db_session, manager_a, cashier_a):
        cashier_a.deleted_at = utcnow()
        db_session.commit()
        assert [u.id for u in users.list_users_by_store(actor_for(manager_a), manager_a.store_id)] == [manager_a.id]

    def test_active_users_admin_only(self, users, admin, manager_a, customer):
        assert {u.id for u in users.list_active_users(actor_for(admin))} >= {admin.id, manager_a.id, customer.id}
        with pytest.raises(PermissionDeniedError):
            users.list_active_users(actor_for(manager_a))

    def test_view_user_scope(self, users, manager_a, cashier_a, cashier_b, customer):
        assert users.view_user(actor_for(customer), customer.id).id == customer.id
        assert users.view_user(actor_for(manager_a), cashier_a.id).id == cashier_a.id
        with pytest.raises(PermissionDeniedError):
            users.view_user(actor_for(manager_a), cashier_b.id)

    def test_owner_description_includes_business(self, users, owner, store_a, store_b):
        described = users.describe_user(owner)
        assert described["business"]["name"] == "Acme Retail"
        assert [s["id"] for s in described["business"]["stores"]] == [store_a.id, store_b.id]


class TestAdminAccounts:

    @pytest.fixture
    def other_admin(self, db_session):
        return make_user(db_session, "ops@retailpos.test", "ADMIN")

    def test_list_admins(self, users, admin, other_admin, customer):
        assert [a.id for a in users.list_active_admins(actor_for(admin))] == [admin.id, other_admin.id]

    def test_admin_cannot_delete_self(self, users, admin):
        with pytest.raises(ValidationError):
            users.delete_admin(actor_for(admin), admin.id)

    def test_delete_other_admin(self, users, admin, other_admin):
        assert users.delete_admin(actor_for(admin), other_admin.id).is_deleted

    def test_update_admin_profile(self, users, admin, other_admin):
        updated = users.update_admin(actor_for(admin), other_admin.id, {"first_name": "Ops", "phone_number": "555-0111"})
        assert updated.first_name == "Ops"
        assert updated.phone_number == "555-0111"

    def test_non_admin_cannot_manage_admins(self, users, owner, admin):
        with pytest.raises(PermissionDeniedError):
            users.delete_admin(actor_for(owner), admin.id)

    def test_customer_is_not_an_admin(self, users, admin, customer):
        with pytest.raises(NotFoundError):
            users.delete_admin(actor_for(admin), customer.id)
