"""
Client records Data Access Layer — tenants and the records they own.

Every read that takes a principal pushes the tenant filter into the SQL
(``tenant_scope``): a CLIENT principal's query never fetches rows of other
tenants, and a detail lookup of a foreign row comes back as None.

Usage:
    from portal.clients.dal import list_domains, get_domain

    domains = list_domains(principal)
    domain = get_domain(principal, domain_id)   # None if absent or not visible
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from psycopg2.extras import RealDictCursor

from portal.auth.authorization import tenant_scope
from portal.auth.principal import Principal
from portal.db.connection import get_connection
from portal.models import (
    client_to_dict,
    document_to_dict,
    domain_to_dict,
    hosting_to_dict,
    ticket_to_dict,
)

logger = logging.getLogger(__name__)

TICKET_STATUSES = ("OPEN", "CLOSED")


def _insert(table: str, values: dict) -> str | None:
    """Insert one row with a fresh uuid. Returns the id, or None on failure."""
    row_id = str(uuid.uuid4())
    columns = ["id", *values.keys()]
    placeholders = ", ".join(["%s"] * len(columns))
    with get_connection() as conn:
        cur = conn.cursor()
        try:
            cur.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                [row_id, *values.values()],
            )
            conn.commit()
            return row_id
        except Exception as e:
            conn.rollback()
            logger.error("Failed to insert into %s: %s", table, e)
            return None


# ─── Clients (tenants) ───────────────────────────────────────────────────


def create_client(
    name: str,
    email_primary: str,
    company: str | None = None,
    phone: str | None = None,
    notes: str | None = None,
) -> str | None:
    client_id = _insert(
        "clients",
        {
            "name": name,
            "company": company,
            "email_primary": email_primary,
            "phone": phone,
            "notes": notes,
        },
    )
    if client_id:
        logger.info("Created client %s (%s)", client_id, name)
    return client_id


def get_client(client_id: str) -> dict | None:
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute("SELECT * FROM clients WHERE id = %s", (client_id,))
        row = cur.fetchone()
        return client_to_dict(row) if row else None


def client_exists(client_id: str) -> bool:
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute("SELECT 1 FROM clients WHERE id = %s", (client_id,))
        return cur.fetchone() is not None


def list_clients(limit: int = 200) -> list[dict]:
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute("SELECT * FROM clients ORDER BY name ASC LIMIT %s", (limit,))
        return [client_to_dict(r) for r in cur.fetchall()]


# ─── Domains ─────────────────────────────────────────────────────────────

_DOMAIN_SELECT = """
    SELECT d.*, cl.name AS client_name,
           cr.label AS credential_label, cr.username AS credential_username
    FROM domains d
    JOIN clients cl ON cl.id = d.client_id
    LEFT JOIN credentials cr ON cr.id = d.credential_id
    WHERE 1=1
"""


def create_domain(
    client_id: str,
    domain_name: str,
    registrar: str,
    nameservers: str,
    *,
    expiry_date: date | None = None,
    auto_renew: bool | None = None,
    login_url: str | None = None,
    credential_id: str | None = None,
) -> str | None:
    return _insert(
        "domains",
        {
            "client_id": client_id,
            "domain_name": domain_name,
            "registrar": registrar,
            "expiry_date": expiry_date,
            "auto_renew": auto_renew,
            "nameservers": nameservers,
            "login_url": login_url,
            "credential_id": credential_id,
        },
    )


def list_domains(principal: Principal) -> list[dict]:
    scope_sql, scope_params = tenant_scope(principal, "d.client_id")
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            _DOMAIN_SELECT + scope_sql + " ORDER BY d.domain_name ASC",
            scope_params,
        )
        return [domain_to_dict(r) for r in cur.fetchall()]


def get_domain(principal: Principal, domain_id: str) -> dict | None:
    scope_sql, scope_params = tenant_scope(principal, "d.client_id")
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            _DOMAIN_SELECT + " AND d.id = %s" + scope_sql,
            [domain_id, *scope_params],
        )
        row = cur.fetchone()
        return domain_to_dict(row) if row else None


# ─── Hosting ─────────────────────────────────────────────────────────────

_HOSTING_SELECT = """
    SELECT h.*, cl.name AS client_name,
           cr.label AS credential_label, cr.username AS credential_username
    FROM hosting h
    JOIN clients cl ON cl.id = h.client_id
    LEFT JOIN credentials cr ON cr.id = h.credential_id
    WHERE 1=1
"""


def create_hosting(
    client_id: str,
    provider: str,
    *,
    plan: str | None = None,
    renewal_date: date | None = None,
    region: str | None = None,
    control_panel_url: str | None = None,
    credential_id: str | None = None,
    notes: str | None = None,
) -> str | None:
    return _insert(
        "hosting",
        {
            "client_id": client_id,
            "provider": provider,
            "plan": plan,
            "renewal_date": renewal_date,
            "region": region,
            "control_panel_url": control_panel_url,
            "credential_id": credential_id,
            "notes": notes,
        },
    )


def list_hosting(principal: Principal) -> list[dict]:
    scope_sql, scope_params = tenant_scope(principal, "h.client_id")
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            _HOSTING_SELECT + scope_sql + " ORDER BY h.provider ASC",
            scope_params,
        )
        return [hosting_to_dict(r) for r in cur.fetchall()]


def get_hosting(principal: Principal, hosting_id: str) -> dict | None:
    scope_sql, scope_params = tenant_scope(principal, "h.client_id")
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            _HOSTING_SELECT + " AND h.id = %s" + scope_sql,
            [hosting_id, *scope_params],
        )
        row = cur.fetchone()
        return hosting_to_dict(row) if row else None


# ─── Documents (metadata only) ───────────────────────────────────────────


def create_document(client_id: str, title: str, storage_path: str) -> str | None:
    return _insert(
        "documents",
        {"client_id": client_id, "title": title, "storage_path": storage_path},
    )


def list_documents(principal: Principal) -> list[dict]:
    scope_sql, scope_params = tenant_scope(principal, "client_id")
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            "SELECT * FROM documents WHERE 1=1" + scope_sql + " ORDER BY created_at DESC",
            scope_params,
        )
        return [document_to_dict(r) for r in cur.fetchall()]


def get_document(principal: Principal, document_id: str) -> dict | None:
    scope_sql, scope_params = tenant_scope(principal, "client_id")
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            "SELECT * FROM documents WHERE id = %s" + scope_sql,
            [document_id, *scope_params],
        )
        row = cur.fetchone()
        return document_to_dict(row) if row else None


# ─── Support tickets ─────────────────────────────────────────────────────


def create_ticket(client_id: str, subject: str, message: str) -> str | None:
    return _insert(
        "support_tickets",
        {"client_id": client_id, "subject": subject, "message": message, "status": "OPEN"},
    )


def list_tickets(principal: Principal, status: str | None = None) -> list[dict]:
    scope_sql, scope_params = tenant_scope(principal, "t.client_id")
    query = (
        "SELECT t.*, cl.name AS client_name FROM support_tickets t "
        "JOIN clients cl ON cl.id = t.client_id WHERE 1=1" + scope_sql
    )
    params = list(scope_params)
    if status:
        query += " AND t.status = %s"
        params.append(status)
    query += " ORDER BY t.created_at DESC"
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(query, params)
        return [ticket_to_dict(r) for r in cur.fetchall()]


def set_ticket_status(ticket_id: str, status: str) -> bool:
    """Open or close a ticket. Returns False if the ticket does not exist."""
    if status not in TICKET_STATUSES:
        raise ValueError(f"status must be one of {TICKET_STATUSES}")
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute(
            "UPDATE support_tickets SET status = %s, updated_at = NOW() WHERE id = %s",
            (status, ticket_id),
        )
        return cur.rowcount > 0


# ─── Dashboard ───────────────────────────────────────────────────────────


def summary_counts() -> dict:
    """Record counts for the admin dashboard."""
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute("""
            SELECT
                (SELECT COUNT(*) FROM clients),
                (SELECT COUNT(*) FROM domains),
                (SELECT COUNT(*) FROM hosting),
                (SELECT COUNT(*) FROM app_users),
                (SELECT COUNT(*) FROM support_tickets WHERE status = 'OPEN')
        """)
        row = cur.fetchone()
    return {
        "clients": row[0],
        "domains": row[1],
        "hosting": row[2],
        "users": row[3],
        "openTickets": row[4],
    }


def check_health() -> dict:
    """Database connectivity check."""
    try:
        with get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.fetchone()
        return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "error": str(e)}
