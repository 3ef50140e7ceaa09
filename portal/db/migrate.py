"""
Schema migrations for ``portal/migrations/NNN_name.sql``.

Each file runs in its own transaction and is recorded in
``schema_migrations`` with its SHA-256, so an edited file that was already
applied shows up as DRIFT in ``status()``.

``schema_problems()`` backs ``portal migrate --check``: besides missing
tables it reports a secret access log that has lost its append-only
trigger, since reveals must not run against a mutable log.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from psycopg2.extras import RealDictCursor

from portal.db.connection import get_connection

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"

_FILENAME_RE = re.compile(r"^(?P<version>\d+[a-z]?)_[\w-]+\.sql$")

REQUIRED_TABLES = [
    "clients",
    "app_users",
    "client_invites",
    "credentials",
    "domains",
    "hosting",
    "documents",
    "support_tickets",
    "secret_access_logs",
]

APPEND_ONLY_TRIGGER = "trg_secret_access_logs_append_only"

_LEDGER_DDL = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version     TEXT PRIMARY KEY,
        filename    TEXT NOT NULL,
        checksum    TEXT NOT NULL,
        applied_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""


@dataclass(frozen=True)
class Migration:
    version: str
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.path.read_bytes()).hexdigest()


def discover(migrations_dir: Path | None = None) -> list[Migration]:
    """Migration files in version order; files not named NNN_name.sql are ignored."""
    found = []
    for path in sorted((migrations_dir or MIGRATIONS_DIR).glob("*.sql")):
        m = _FILENAME_RE.match(path.name)
        if m:
            found.append(Migration(m.group("version"), path))
    return found


def _ledger(conn) -> dict[str, dict]:
    cur = conn.cursor(cursor_factory=RealDictCursor)
    cur.execute(_LEDGER_DDL)
    cur.execute("SELECT version, checksum, applied_at FROM schema_migrations")
    return {r["version"]: dict(r) for r in cur.fetchall()}


def status(migrations_dir: Path | None = None) -> list[dict]:
    """One row per migration file: version, filename, status, applied_at."""
    migrations = discover(migrations_dir)
    with get_connection() as conn:
        ledger = _ledger(conn)

    rows = []
    for m in migrations:
        entry = ledger.get(m.version)
        if entry is None:
            state = "pending"
        elif entry.get("checksum") and entry["checksum"] != m.checksum:
            state = "DRIFT"
        else:
            state = "applied"
        rows.append(
            {
                "version": m.version,
                "filename": m.filename,
                "status": state,
                "applied_at": entry["applied_at"] if entry else None,
            }
        )
    return rows


def apply(
    version: str | None = None,
    dry_run: bool = False,
    migrations_dir: Path | None = None,
) -> list[str]:
    """Run pending migrations (or only ``version``). Returns the versions run."""
    migrations = discover(migrations_dir)
    done: list[str] = []

    with get_connection() as conn:
        ledger = _ledger(conn)
        conn.commit()
        pending = [
            m for m in migrations if m.version not in ledger and version in (None, m.version)
        ]
        for m in pending:
            if dry_run:
                logger.info("[dry-run] %s pending", m.filename)
                done.append(m.version)
                continue
            cur = conn.cursor()
            try:
                cur.execute(m.path.read_text())
                cur.execute(
                    "INSERT INTO schema_migrations (version, filename, checksum) "
                    "VALUES (%s, %s, %s)",
                    (m.version, m.filename, m.checksum),
                )
                conn.commit()
            except Exception:
                conn.rollback()
                logger.error("Migration %s failed; rolled back", m.filename)
                raise
            logger.info("Applied migration %s", m.filename)
            done.append(m.version)

    if not done:
        logger.info("Schema is up to date.")
    return done


def schema_problems() -> list[str]:
    """Human-readable problems with the live schema; empty when healthy."""
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute("SELECT table_name FROM information_schema.tables WHERE table_schema = 'public'")
        tables = {row[0] for row in cur.fetchall()}
        cur.execute("SELECT 1 FROM pg_trigger WHERE tgname = %s", (APPEND_ONLY_TRIGGER,))
        has_trigger = cur.fetchone() is not None

    problems = [f"missing table {t}" for t in REQUIRED_TABLES if t not in tables]
    if "secret_access_logs" in tables and not has_trigger:
        problems.append(f"secret_access_logs is not append-only ({APPEND_ONLY_TRIGGER} missing)")
    return problems
