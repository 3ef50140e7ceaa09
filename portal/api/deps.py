"""API dependency injection — principal resolution and role guards."""

from __future__ import annotations

from fastapi import Depends, Request

from portal.auth.principal import Principal
from portal.auth.session import resolve_principal
from portal.errors import Forbidden, NotFound, Unauthenticated
from portal.validation import is_uuid

SUBJECT_HEADER = "x-auth-subject"
EMAIL_HEADER = "x-auth-email"
ROLE_HEADER = "x-auth-role"


def get_principal(request: Request) -> Principal | None:
    """Resolve the identity assertion headers to a principal, or None.

    The headers are set by the identity-aware proxy in front of the API.
    """
    principal = resolve_principal(
        request.headers.get(SUBJECT_HEADER),
        request.headers.get(EMAIL_HEADER),
        request.headers.get(ROLE_HEADER),
    )
    request.state.principal_id = principal.id if principal else None
    return principal


def require_principal(principal: Principal | None = Depends(get_principal)) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal


def require_admin(principal: Principal = Depends(require_principal)) -> Principal:
    if not principal.is_admin:
        raise Forbidden()
    return principal


def path_uuid(value: str, what: str) -> str:
    """Malformed ids can never match a row: treat them as not found."""
    if not is_uuid(value):
        raise NotFound(f"{what} not found.")
    return value.lower()
