"""Principals, access control, and session resolution."""

from portal.auth.authorization import can_access_tenant, can_reveal, tenant_scope
from portal.auth.principal import Principal, Role, check_role_binding

__all__ = [
    "Principal",
    "Role",
    "can_access_tenant",
    "can_reveal",
    "check_role_binding",
    "tenant_scope",
]
