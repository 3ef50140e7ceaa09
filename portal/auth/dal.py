"""
User and invite Data Access Layer.

The role/tenant invariant is checked before every write
(``check_role_binding``) and again by the app_users CHECK constraint.
"""

from __future__ import annotations

import logging
import uuid

from psycopg2.extras import RealDictCursor

from portal.auth.principal import Role, check_role_binding
from portal.db.connection import get_connection
from portal.models import user_to_dict

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, email, external_subject, role, client_id, created_at, updated_at"


def _fetch_user(where: str, value: str) -> dict | None:
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(f"SELECT {_USER_COLUMNS} FROM app_users WHERE {where} = %s", (value,))
        row = cur.fetchone()
        return dict(row) if row else None


def get_user(user_id: str) -> dict | None:
    return _fetch_user("id", user_id)


def get_user_by_subject(external_subject: str) -> dict | None:
    return _fetch_user("external_subject", external_subject)


def get_user_by_email(email: str) -> dict | None:
    return _fetch_user("email", email)


def create_user(
    email: str,
    role: Role | str,
    client_id: str | None = None,
    *,
    external_subject: str | None = None,
) -> dict:
    """Insert a user row. Raises ValueError on an invalid role/tenant pair."""
    role = check_role_binding(role, client_id)
    user_id = str(uuid.uuid4())
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            f"""
            INSERT INTO app_users (id, email, external_subject, role, client_id)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {_USER_COLUMNS}
            """,
            (user_id, email, external_subject, role.value, client_id),
        )
        return dict(cur.fetchone())


def update_user(
    user_id: str,
    *,
    role: Role | str,
    client_id: str | None,
    email: str | None = None,
    external_subject: str | None = None,
) -> dict | None:
    """Set role and tenant (plus identity fields when given). None if no such user."""
    role = check_role_binding(role, client_id)
    sets = ["role = %s", "client_id = %s"]
    vals: list = [role.value, client_id]
    if email is not None:
        sets.append("email = %s")
        vals.append(email)
    if external_subject is not None:
        sets.append("external_subject = %s")
        vals.append(external_subject)
    sets.append("updated_at = NOW()")
    vals.append(user_id)

    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            f"UPDATE app_users SET {', '.join(sets)} WHERE id = %s RETURNING {_USER_COLUMNS}",
            vals,
        )
        row = cur.fetchone()
        return dict(row) if row else None


def upsert_user(email: str, role: Role | str, client_id: str | None) -> dict:
    """Create or update the user with this email (admin user management)."""
    role = check_role_binding(role, client_id)
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            f"""
            INSERT INTO app_users (id, email, role, client_id)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (email)
            DO UPDATE SET role = EXCLUDED.role,
                          client_id = EXCLUDED.client_id,
                          updated_at = NOW()
            RETURNING {_USER_COLUMNS}
            """,
            (str(uuid.uuid4()), email, role.value, client_id),
        )
        return dict(cur.fetchone())


def list_users(limit: int = 200) -> list[dict]:
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            f"SELECT {_USER_COLUMNS} FROM app_users ORDER BY email ASC LIMIT %s",
            (limit,),
        )
        return [user_to_dict(r) for r in cur.fetchall()]


def create_user_from_invite(email: str, external_subject: str) -> dict | None:
    """Consume the newest valid invite for ``email`` and create its CLIENT user.

    The invite lookup, user insert and invite update share one transaction;
    returns None when there is no unused, unexpired invite.
    """
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            """
            SELECT id, client_id FROM client_invites
            WHERE email = %s AND used_at IS NULL AND expires_at > NOW()
            ORDER BY created_at DESC
            LIMIT 1
            FOR UPDATE
            """,
            (email,),
        )
        invite = cur.fetchone()
        if not invite:
            return None

        client_id = str(invite["client_id"])
        check_role_binding(Role.CLIENT, client_id)
        cur.execute(
            f"""
            INSERT INTO app_users (id, email, external_subject, role, client_id)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {_USER_COLUMNS}
            """,
            (str(uuid.uuid4()), email, external_subject, Role.CLIENT.value, client_id),
        )
        user = dict(cur.fetchone())
        cur.execute("UPDATE client_invites SET used_at = NOW() WHERE id = %s", (invite["id"],))

    logger.info("Invite %s consumed by %s", invite["id"], email)
    return user
