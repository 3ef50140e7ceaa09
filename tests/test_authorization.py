"""Tests for portal.auth — principals, the reveal predicate and tenant scoping."""

import pytest

from portal.auth.authorization import can_access_tenant, can_reveal, tenant_scope
from portal.auth.principal import Principal, Role, check_role_binding

T1 = "11111111-1111-1111-1111-111111111111"
T2 = "22222222-2222-2222-2222-222222222222"


@pytest.fixture
def admin():
    return Principal.admin("u-admin", "ops@example.com")


@pytest.fixture
def client_t1():
    return Principal.client("u-1", "one@example.com", T1)


@pytest.fixture
def client_t2():
    return Principal.client("u-2", "two@example.com", T2)


class TestPrincipal:
    def test_admin(self, admin):
        assert admin.is_admin
        assert admin.role is Role.ADMIN
        assert admin.client_id is None

    def test_client(self, client_t1):
        assert not client_t1.is_admin
        assert client_t1.client_id == T1

    def test_role_string_normalized(self):
        p = Principal(id="u", email="e@example.com", role="CLIENT", client_id=T1)
        assert p.role is Role.CLIENT

    def test_admin_with_tenant_rejected(self):
        with pytest.raises(ValueError, match="ADMIN"):
            Principal(id="u", email="e@example.com", role=Role.ADMIN, client_id=T1)

    def test_client_without_tenant_rejected(self):
        with pytest.raises(ValueError, match="assigned to a client"):
            Principal(id="u", email="e@example.com", role=Role.CLIENT)

    def test_unknown_role(self):
        with pytest.raises(ValueError, match="Unknown role"):
            check_role_binding("OWNER", None)

    def test_from_row(self):
        row = {"id": "abc", "email": "one@example.com", "role": "CLIENT", "client_id": T1}
        p = Principal.from_row(row)
        assert p == Principal.client("abc", "one@example.com", T1)

    def test_from_row_admin_without_client(self):
        row = {"id": "abc", "email": "ops@example.com", "role": "ADMIN", "client_id": None}
        assert Principal.from_row(row).is_admin

    def test_frozen(self, admin):
        with pytest.raises(AttributeError):
            admin.role = Role.CLIENT


class TestCanAccessTenant:
    def test_admin_any_tenant(self, admin):
        assert can_access_tenant(admin, T1)
        assert can_access_tenant(admin, T2)

    def test_client_own_tenant(self, client_t1):
        assert can_access_tenant(client_t1, T1)

    def test_client_foreign_tenant(self, client_t1):
        assert not can_access_tenant(client_t1, T2)

    def test_client_no_tenant(self, client_t1):
        assert not can_access_tenant(client_t1, None)


class TestCanReveal:
    def test_admin_always(self, admin):
        assert can_reveal(admin, {T1})
        assert can_reveal(admin, set())

    def test_linked_tenant(self, client_t1):
        assert can_reveal(client_t1, {T1})

    def test_foreign_tenant(self, client_t1):
        assert not can_reveal(client_t1, {T2})

    def test_shared_credential(self, client_t1, client_t2):
        linked = {T1, T2}
        assert can_reveal(client_t1, linked)
        assert can_reveal(client_t2, linked)

    def test_unlinked_credential_admin_only(self, admin, client_t1, client_t2):
        assert can_reveal(admin, set())
        assert not can_reveal(client_t1, set())
        assert not can_reveal(client_t2, set())

    def test_accepts_any_iterable(self, client_t1):
        assert can_reveal(client_t1, [T2, T1])


class TestTenantScope:
    def test_admin_unfiltered(self, admin):
        assert tenant_scope(admin) == ("", [])

    def test_client_filtered(self, client_t1):
        assert tenant_scope(client_t1) == (" AND client_id = %s", [T1])

    def test_custom_column(self, client_t2):
        sql, params = tenant_scope(client_t2, "d.client_id")
        assert sql == " AND d.client_id = %s"
        assert params == [T2]
