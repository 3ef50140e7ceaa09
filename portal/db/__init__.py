"""Database connection management for the portal."""

from portal.db.connection import (
    close_pool,
    get_connection,
    get_pool,
    reset_connection_factory,
    set_connection_factory,
)

__all__ = [
    "close_pool",
    "get_connection",
    "get_pool",
    "reset_connection_factory",
    "set_connection_factory",
]
