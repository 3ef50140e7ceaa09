"""
Secret Access Log — append-only record of every credential reveal.

One row per successful reveal: who, which credential, what action, when.
Rows are never updated or deleted (the schema rejects both). The log holds
metadata only; plaintext secrets never reach it.

Unlike general-purpose logging, a failed write here is not swallowed: the
reveal that triggered it must fail too.

Usage:
    from portal.audit.access_log import record_access, recent_access
    record_access(user_id, credential_id)
    recent_access(limit=10)    # newest first
"""

from __future__ import annotations

import logging

from psycopg2.extras import RealDictCursor

from portal.db.connection import get_connection
from portal.errors import AuditWriteError
from portal.models import access_log_to_dict

logger = logging.getLogger(__name__)

REVEAL = "REVEAL"
ACTIONS = frozenset({REVEAL})


def record_access(user_id: str, credential_id: str, action: str = REVEAL) -> dict:
    """Append one access entry. Returns {"id": int, "createdAt": str}.

    Raises AuditWriteError if the row could not be committed.
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown access action: {action!r}")

    try:
        with get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO secret_access_logs (user_id, credential_id, action)
                VALUES (%s, %s, %s)
                RETURNING id, created_at
                """,
                (user_id, credential_id, action),
            )
            row = cur.fetchone()
    except Exception as e:
        logger.error(
            "Access log write failed for credential %s by user %s: %s",
            credential_id,
            user_id,
            e,
        )
        raise AuditWriteError() from e

    return {"id": row[0], "createdAt": row[1].isoformat()}


def recent_access(limit: int = 10, credential_id: str | None = None) -> list[dict]:
    """Most recent access entries, newest first, with user email and credential label."""
    query = (
        "SELECT l.id, l.user_id, l.credential_id, l.action, l.created_at, "
        "u.email AS user_email, c.label AS credential_label "
        "FROM secret_access_logs l "
        "JOIN app_users u ON u.id = l.user_id "
        "JOIN credentials c ON c.id = l.credential_id "
        "WHERE 1=1"
    )
    params: list = []
    if credential_id:
        query += " AND l.credential_id = %s"
        params.append(credential_id)
    query += " ORDER BY l.created_at DESC, l.id DESC LIMIT %s"
    params.append(limit)

    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(query, params)
        return [access_log_to_dict(r) for r in cur.fetchall()]


def count_access(credential_id: str | None = None) -> int:
    """Count access entries, optionally for one credential."""
    with get_connection() as conn:
        cur = conn.cursor()
        if credential_id:
            cur.execute(
                "SELECT COUNT(*) FROM secret_access_logs WHERE credential_id = %s",
                (credential_id,),
            )
        else:
            cur.execute("SELECT COUNT(*) FROM secret_access_logs")
        row = cur.fetchone()
        return row[0] if row else 0
