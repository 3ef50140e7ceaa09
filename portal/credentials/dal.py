"""
Credential Data Access Layer.

A credential row holds a label, an optional username, and a sealed
envelope (encrypted_secret, iv, auth_tag). Credentials carry no tenant
column: they belong to whichever tenants own the domains and hosting
accounts that point at them.

Usage:
    from portal.credentials.dal import create_credential, list_linked_tenants

    cred_id = create_credential("Registrar login", "admin", "hunter2")
    tenants = list_linked_tenants(cred_id)   # set() until something links it
"""

from __future__ import annotations

import logging
import uuid

from psycopg2.extras import RealDictCursor

from portal.db.connection import get_connection
from portal.models import credential_to_dict
from portal.vault.crypto import SecretCipher, get_cipher

logger = logging.getLogger(__name__)

_LINKED_TENANTS_SQL = """
    SELECT client_id FROM domains WHERE credential_id = %(id)s
    UNION
    SELECT client_id FROM hosting WHERE credential_id = %(id)s
"""

# Same union, correlated against the outer credentials row
_LINKED_TENANTS_CORRELATED = _LINKED_TENANTS_SQL.replace("%(id)s", "c.id")


def create_credential(
    label: str,
    username: str | None,
    secret: str,
    *,
    cipher: SecretCipher | None = None,
) -> str:
    """Seal ``secret`` and store it with its metadata. Returns the new id.

    Every call seals under a fresh nonce; envelopes are never reused.
    """
    envelope = (cipher or get_cipher()).seal(secret)
    credential_id = str(uuid.uuid4())
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO credentials (id, label, username, encrypted_secret, iv, auth_tag)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (
                credential_id,
                label,
                username,
                envelope.ciphertext,
                envelope.nonce,
                envelope.auth_tag,
            ),
        )
    logger.info("Created credential %s (%s)", credential_id, label)
    return credential_id


def get_credential(credential_id: str) -> dict | None:
    """Fetch a credential row with its envelope and linked tenant ids.

    The result carries ``client_ids``: a list of tenant ids (possibly empty)
    owning a domain or hosting row that references the credential.
    """
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            f"""
            SELECT c.id, c.label, c.username, c.encrypted_secret, c.iv, c.auth_tag,
                   c.created_at, c.updated_at,
                   ARRAY(SELECT t.client_id::text FROM ({_LINKED_TENANTS_SQL}) t) AS client_ids
            FROM credentials c
            WHERE c.id = %(id)s
            """,
            {"id": credential_id},
        )
        row = cur.fetchone()
        return dict(row) if row else None


def list_linked_tenants(credential_id: str) -> set[str]:
    """Return the set of tenant ids linked to a credential through domains/hosting."""
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute(_LINKED_TENANTS_SQL, {"id": credential_id})
        return {str(row[0]) for row in cur.fetchall()}


def credential_exists(credential_id: str) -> bool:
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute("SELECT 1 FROM credentials WHERE id = %s", (credential_id,))
        return cur.fetchone() is not None


def list_credentials(limit: int = 200) -> list[dict]:
    """Admin listing. Metadata and linked tenants only, never envelopes."""
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            f"""
            SELECT c.id, c.label, c.username, c.created_at, c.updated_at,
                   ARRAY(SELECT t.client_id::text FROM ({_LINKED_TENANTS_CORRELATED}) t) AS client_ids
            FROM credentials c
            ORDER BY c.label ASC
            LIMIT %(limit)s
            """,
            {"limit": limit},
        )
        return [credential_to_dict(r) for r in cur.fetchall()]
