"""
Credential reveal — authorize, decrypt, audit, return once.

    principal ─► validate id ─► lookup ─► authorize ─► decrypt ─► audit ─► plaintext

Each step runs only if the previous one succeeded. The access log row is
written after decryption and before the plaintext is handed back, so every
returned secret has exactly one log entry and every failure has none.
Nothing here retries: a failed reveal is final for that request.
"""

from __future__ import annotations

import logging
from typing import Any

from portal.audit.access_log import REVEAL, record_access
from portal.auth.authorization import can_reveal
from portal.auth.principal import Principal
from portal.credentials.dal import get_credential
from portal.errors import (
    ConfigurationError,
    Forbidden,
    IntegrityError,
    InvalidRequest,
    NotFound,
    Unauthenticated,
)
from portal.validation import is_uuid
from portal.vault.crypto import Envelope, SecretCipher, get_cipher

logger = logging.getLogger(__name__)


def parse_reveal_request(payload: Any) -> str:
    """Extract a well-formed credential id from a request body."""
    if not isinstance(payload, dict):
        raise InvalidRequest("Invalid request payload.")
    credential_id = payload.get("credentialId")
    if credential_id is None:
        raise InvalidRequest("credentialId is required.")
    if not is_uuid(credential_id):
        raise InvalidRequest("credentialId must be a valid UUID.")
    return credential_id.lower()


def reveal_credential(
    principal: Principal | None,
    payload: Any,
    *,
    cipher: SecretCipher | None = None,
) -> str:
    """Run the reveal protocol and return the plaintext secret.

    Raises Unauthenticated, InvalidRequest, NotFound, Forbidden,
    ConfigurationError, IntegrityError or AuditWriteError.
    """
    if principal is None:
        raise Unauthenticated()

    credential_id = parse_reveal_request(payload)

    credential = get_credential(credential_id)
    if credential is None:
        raise NotFound("Credential not found.")

    linked_tenants = set(credential.get("client_ids") or [])
    if not can_reveal(principal, linked_tenants):
        raise Forbidden()

    try:
        secret = (cipher or get_cipher()).open(Envelope.from_row(credential))
    except (ConfigurationError, IntegrityError) as e:
        logger.critical(
            "Credential %s could not be decrypted (%s): %s",
            credential_id,
            type(e).__name__,
            e.message,
        )
        raise

    record_access(principal.id, credential_id, REVEAL)
    logger.info("Credential %s revealed by user %s", credential_id, principal.id)
    return secret
