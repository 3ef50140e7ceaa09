"""
Root-level shared test fixtures.

Keeps environment-driven singletons (config, cipher, connection factory)
from leaking between tests.
"""

from __future__ import annotations

import pytest

from portal.config import reset_config
from portal.db.connection import reset_connection_factory
from portal.vault.crypto import reset_cipher_cache


@pytest.fixture(autouse=True)
def _reset_singletons():
    reset_config()
    reset_cipher_cache()
    reset_connection_factory()
    yield
    reset_config()
    reset_cipher_cache()
    reset_connection_factory()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove portal env vars that leak between tests."""
    for key in [
        "PORTAL_DB_HOST",
        "PORTAL_DB_PORT",
        "PORTAL_DB_NAME",
        "PORTAL_DB_USER",
        "PORTAL_DB_PASSWORD",
        "PORTAL_ENCRYPTION_KEY",
        "PORTAL_ADMIN_EMAILS",
        "PORTAL_API_HOST",
        "PORTAL_API_PORT",
        "PORTAL_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)
