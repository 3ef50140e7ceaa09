"""
Session resolution — map an identity assertion to an application principal.

The upstream identity provider authenticates the caller and asserts an
external subject id, an email, and optionally a role claim. This module
links that assertion to an app_users row:

  1. Known subject, else known email → refresh the row (subject, email,
     admin promotion) and use it.
  2. Unknown but admin (PORTAL_ADMIN_EMAILS or role claim) → create ADMIN.
  3. Unknown client → consume a pending invite, else reject.

``external_subject`` is the only column holding the provider's subject id.
"""

from __future__ import annotations

import logging

from portal.auth import dal
from portal.auth.principal import Principal, Role
from portal.config import get_config
from portal.validation import blank_to_none, normalize_email

logger = logging.getLogger(__name__)


def _is_admin_assertion(email: str, role_claim: str | None, admin_emails: frozenset[str]) -> bool:
    if email in admin_emails:
        return True
    return bool(role_claim) and role_claim.strip().lower() == "admin"


def resolve_principal(
    subject: str | None,
    email: str | None,
    role_claim: str | None = None,
    *,
    admin_emails: frozenset[str] | None = None,
) -> Principal | None:
    """Return the principal for an identity assertion, or None if it maps to nobody."""
    subject = blank_to_none(subject)
    email = normalize_email(email)
    if not subject or not email:
        return None

    if admin_emails is None:
        admin_emails = get_config().admin_emails
    should_be_admin = _is_admin_assertion(email, role_claim, admin_emails)

    user = dal.get_user_by_subject(subject) or dal.get_user_by_email(email)

    if user:
        role = Role.ADMIN if should_be_admin else Role(user["role"])
        client_id = None if role is Role.ADMIN else user.get("client_id")
        if role is Role.CLIENT and not client_id:
            logger.warning("User %s has CLIENT role without a client", user["id"])
            return None
        user = dal.update_user(
            str(user["id"]),
            role=role,
            client_id=str(client_id) if client_id else None,
            email=email,
            external_subject=subject,
        )
        return Principal.from_row(user) if user else None

    if should_be_admin:
        created = dal.create_user(email, Role.ADMIN, external_subject=subject)
        logger.info("Created admin user %s for %s", created["id"], email)
        return Principal.from_row(created)

    created = dal.create_user_from_invite(email, subject)
    if created is None:
        logger.info("No user or pending invite for %s", email)
        return None
    return Principal.from_row(created)
