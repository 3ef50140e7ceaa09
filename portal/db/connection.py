"""
PostgreSQL units of work for the portal.

Every DAL call runs inside ``get_connection()``: one pooled connection, one
transaction. The block commits on clean exit and rolls back on any error,
so a credential insert, an invite consumption or an access log row is
either durable or absent.

Tests replace the pool with ``set_connection_factory(lambda: conn)``; the
same seam serves every DAL module, the access log included.

Usage:
    from portal.db import get_connection

    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute("SELECT 1")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import psycopg2
import psycopg2.pool

from portal.config import get_config

logger = logging.getLogger(__name__)

_pool: psycopg2.pool.ThreadedConnectionPool | None = None
_pool_lock = threading.Lock()

# Test override: returns a connection the caller never hands back to a pool
_conn_factory: Callable[[], psycopg2.extensions.connection] | None = None


def _open_pool(minconn: int, maxconn: int) -> psycopg2.pool.ThreadedConnectionPool:
    db = get_config().db
    logger.info("Opening portal database pool %s:%s/%s", db.host or "<socket>", db.port, db.name)
    try:
        return psycopg2.pool.ThreadedConnectionPool(minconn, maxconn, **db.dict)
    except psycopg2.OperationalError as e:
        raise ConnectionError(
            f"Portal database {db.name} at {db.host or '<socket>'}:{db.port} is unreachable ({e}). "
            "Check the PORTAL_DB_* settings."
        ) from e


def get_pool(minconn: int = 2, maxconn: int = 20) -> psycopg2.pool.ThreadedConnectionPool:
    """Return the shared pool, opening it on first use."""
    global _pool
    with _pool_lock:
        if _pool is None or _pool.closed:
            _pool = _open_pool(minconn, maxconn)
        return _pool


@contextmanager
def get_connection() -> Iterator[psycopg2.extensions.connection]:
    """One transaction on one connection: commit on success, roll back on error."""
    if _conn_factory is not None:
        conn, pool = _conn_factory(), None
    else:
        pool = get_pool()
        conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if pool is not None:
            pool.putconn(conn)


def set_connection_factory(factory: Callable[[], psycopg2.extensions.connection]) -> None:
    """Bypass the pool (for testing)."""
    global _conn_factory
    _conn_factory = factory


def reset_connection_factory() -> None:
    global _conn_factory
    _conn_factory = None


def close_pool() -> None:
    """Close every pooled connection (API shutdown)."""
    global _pool
    with _pool_lock:
        if _pool is not None:
            _pool.closeall()
            _pool = None
