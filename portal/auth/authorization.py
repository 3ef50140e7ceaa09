"""
Access control for tenant-scoped records and credential reveals.

ADMIN principals see everything. CLIENT principals see rows of their own
tenant only; for credentials, "their tenant" means any tenant in the
credential's linked tenant set.
"""

from __future__ import annotations

from collections.abc import Iterable

from portal.auth.principal import Principal


def can_access_tenant(principal: Principal, tenant_id: str | None) -> bool:
    """True if the principal may read a record owned by ``tenant_id``."""
    if principal.is_admin:
        return True
    if tenant_id is None:
        return False
    return str(tenant_id) == principal.client_id


def can_reveal(principal: Principal, linked_tenants: Iterable[str]) -> bool:
    """True if the principal may decrypt a credential linked to these tenants.

    An empty linked set means only admins may reveal.
    """
    if principal.is_admin:
        return True
    if principal.client_id is None:
        return False
    return principal.client_id in {str(t) for t in linked_tenants}


def tenant_scope(principal: Principal, column: str = "client_id") -> tuple[str, list]:
    """SQL predicate restricting ``column`` to the principal's tenant.

    Returns ``("", [])`` for admins, otherwise ``(" AND <column> = %s", [client_id])``,
    to be appended to a WHERE clause so foreign rows are never fetched.
    """
    if principal.is_admin:
        return "", []
    return f" AND {column} = %s", [principal.client_id]
