"""
Portal error taxonomy.

Every error carries the HTTP status it maps to and a short public message.
The message is safe to return to any caller: it never contains secret
material or internal details.
"""

from __future__ import annotations


class PortalError(Exception):
    """Base class for all portal errors."""

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(PortalError):
    status_code = 401
    default_message = "Unauthorized."


class InvalidRequest(PortalError):
    status_code = 400
    default_message = "Invalid request payload."


class Forbidden(PortalError):
    status_code = 403
    default_message = "Forbidden."


class NotFound(PortalError):
    status_code = 404
    default_message = "Not found."


class ConfigurationError(PortalError):
    """Encryption key missing or malformed. Fatal for every secret operation."""

    default_message = "Secret storage is not configured."


class IntegrityError(PortalError):
    """An envelope failed authentication: corrupted row or key mismatch."""

    default_message = "Stored secret could not be decrypted."


class AuditWriteError(PortalError):
    """The access log insert failed; the reveal must not complete."""

    default_message = "Secret access could not be recorded."
