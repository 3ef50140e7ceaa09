"""
Centralized configuration for the client portal.

All configuration is loaded from environment variables with sensible defaults.

Usage:
    from portal.config import get_config
    cfg = get_config()
    print(cfg.db.name)          # "client_portal"
    print(cfg.admin_emails)     # frozenset({"ops@example.com"})
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection parameters."""

    host: str = ""  # empty = Unix socket (peer auth); set to 127.0.0.1 for TCP
    port: int = 5432
    name: str = "client_portal"
    user: str = "portal"
    password: str = ""

    @property
    def dsn(self) -> str:
        """Return a psycopg2-compatible DSN string."""
        parts = [f"dbname={self.name}"]
        if self.host:
            parts.append(f"host={self.host}")
        parts.append(f"port={self.port}")
        if self.user:
            parts.append(f"user={self.user}")
        if self.password:
            parts.append(f"password={self.password}")
        return " ".join(parts)

    @property
    def dict(self) -> dict[str, str | int]:
        """Return a psycopg2.connect() kwargs dict."""
        d: dict[str, str | int] = {
            "dbname": self.name,
            "port": self.port,
        }
        if self.host:
            d["host"] = self.host
        if self.user:
            d["user"] = self.user
        if self.password:
            d["password"] = self.password
        return d


@dataclass(frozen=True)
class Config:
    """Top-level portal configuration."""

    db: DatabaseConfig = field(default_factory=DatabaseConfig)

    # Base64 of a 32-byte key. Validated lazily by portal.vault.crypto, not here.
    encryption_key: str = field(default="", repr=False)

    # Emails that are always resolved to ADMIN principals
    admin_emails: frozenset[str] = frozenset()

    api_host: str = "127.0.0.1"
    api_port: int = 9200
    log_level: str = "INFO"

    @property
    def api_url(self) -> str:
        return f"http://{self.api_host}:{self.api_port}"


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def parse_admin_emails(raw: str) -> frozenset[str]:
    """Split a comma-separated email list, normalized to lowercase."""
    return frozenset(entry.strip().lower() for entry in raw.split(",") if entry.strip())


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    db = DatabaseConfig(
        host=os.environ.get("PORTAL_DB_HOST", ""),
        port=int(os.environ.get("PORTAL_DB_PORT", "5432")),
        name=os.environ.get("PORTAL_DB_NAME", "client_portal"),
        user=os.environ.get("PORTAL_DB_USER", os.environ.get("USER", "portal")),
        password=os.environ.get("PORTAL_DB_PASSWORD", ""),
    )

    return Config(
        db=db,
        encryption_key=os.environ.get("PORTAL_ENCRYPTION_KEY", ""),
        admin_emails=parse_admin_emails(os.environ.get("PORTAL_ADMIN_EMAILS", "")),
        api_host=os.environ.get("PORTAL_API_HOST", "127.0.0.1"),
        api_port=int(os.environ.get("PORTAL_API_PORT", "9200")),
        log_level=os.environ.get("PORTAL_LOG_LEVEL", "INFO").upper(),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
