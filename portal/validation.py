"""
Input normalization shared by the DAL, session resolution and API models.

Usage:
    from portal.validation import is_uuid, normalize_email

    is_uuid("not-a-uuid")             # False
    normalize_email("  Ops@Acme.io ")  # "ops@acme.io"
"""

from __future__ import annotations

import re

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_uuid(value: object) -> bool:
    return isinstance(value, str) and bool(_UUID_RE.match(value))


def normalize_email(value: str | None) -> str | None:
    """Trim and lowercase an email; empty → None."""
    if not value:
        return None
    normalized = value.strip().lower()
    return normalized or None


def blank_to_none(value: str | None) -> str | None:
    """Trim a string; empty or whitespace-only → None."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None
