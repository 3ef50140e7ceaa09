"""
AES-256-GCM envelope encryption for stored credentials.

The key is 32 random bytes supplied out-of-band as base64 in
PORTAL_ENCRYPTION_KEY. Each sealed secret gets its own 12-byte random nonce;
the nonce and the 16-byte GCM tag are stored next to the ciphertext, so a
row holds three base64 columns: encrypted_secret, iv, auth_tag.

The key is loaded on first use, not at import, so code paths that never
touch secrets keep working when it is absent.
"""

from __future__ import annotations

import base64
import binascii
import secrets
import threading
from dataclasses import dataclass
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from portal.errors import ConfigurationError, IntegrityError

KEY_LENGTH = 32
NONCE_LENGTH = 12
TAG_LENGTH = 16

_cached_cipher: SecretCipher | None = None
_cipher_lock = threading.Lock()


@dataclass(frozen=True)
class Envelope:
    """One sealed secret, in its persisted (base64) form."""

    ciphertext: str
    nonce: str
    auth_tag: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Envelope:
        """Build from a credentials row. All three parts are required."""
        parts = (row.get("encrypted_secret"), row.get("iv"), row.get("auth_tag"))
        if any(p is None for p in parts):
            raise IntegrityError("Stored secret envelope is incomplete.")
        return cls(ciphertext=parts[0], nonce=parts[1], auth_tag=parts[2])

    def to_row(self) -> dict[str, str]:
        return {
            "encrypted_secret": self.ciphertext,
            "iv": self.nonce,
            "auth_tag": self.auth_tag,
        }


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode(value: str) -> bytes:
    return base64.b64decode(value.encode("ascii"), validate=True)


class SecretCipher:
    """Seal and open secrets under a single 256-bit key."""

    def __init__(self, key: bytes):
        self._key = key

    def __repr__(self) -> str:
        return "SecretCipher(key=<redacted>)"

    def seal(self, plaintext: str) -> Envelope:
        """Encrypt plaintext under a fresh random nonce."""
        if len(self._key) != KEY_LENGTH:
            raise ConfigurationError(
                f"Encryption key must be {KEY_LENGTH} bytes, got {len(self._key)}."
            )
        nonce = secrets.token_bytes(NONCE_LENGTH)
        sealed = AESGCM(self._key).encrypt(nonce, plaintext.encode("utf-8"), None)
        # cryptography appends the tag to the ciphertext
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return Envelope(
            ciphertext=_b64encode(ciphertext),
            nonce=_b64encode(nonce),
            auth_tag=_b64encode(tag),
        )

    def open(self, envelope: Envelope) -> str:
        """Verify the tag and decrypt. Fails closed with IntegrityError."""
        if len(self._key) != KEY_LENGTH:
            raise IntegrityError(
                f"Encryption key must be {KEY_LENGTH} bytes, got {len(self._key)}."
            )
        try:
            ciphertext = _b64decode(envelope.ciphertext)
            nonce = _b64decode(envelope.nonce)
            tag = _b64decode(envelope.auth_tag)
        except (binascii.Error, ValueError, AttributeError) as e:
            raise IntegrityError("Stored secret envelope is not valid base64.") from e

        if len(nonce) != NONCE_LENGTH or len(tag) != TAG_LENGTH:
            raise IntegrityError("Stored secret envelope has a malformed nonce or tag.")

        try:
            plaintext = AESGCM(self._key).decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as e:
            raise IntegrityError("Stored secret failed authentication.") from e
        return plaintext.decode("utf-8")


def load_key(encoded: str | None) -> bytes:
    """Decode a base64 key and check it is exactly 32 bytes."""
    if not encoded:
        raise ConfigurationError("PORTAL_ENCRYPTION_KEY is required.")
    try:
        key = _b64decode(encoded.strip())
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError("PORTAL_ENCRYPTION_KEY must be base64.") from e
    if len(key) != KEY_LENGTH:
        raise ConfigurationError(
            f"PORTAL_ENCRYPTION_KEY must decode to {KEY_LENGTH} bytes, got {len(key)}."
        )
    return key


def generate_key() -> str:
    """Return a new random key, base64-encoded, for PORTAL_ENCRYPTION_KEY."""
    return _b64encode(secrets.token_bytes(KEY_LENGTH))


def get_cipher() -> SecretCipher:
    """Return the process-wide cipher, loading the key on first call."""
    global _cached_cipher
    if _cached_cipher is not None:
        return _cached_cipher

    with _cipher_lock:
        if _cached_cipher is not None:
            return _cached_cipher

        from portal.config import get_config

        _cached_cipher = SecretCipher(load_key(get_config().encryption_key))
        return _cached_cipher


def reset_cipher_cache() -> None:
    """Clear the cached cipher (for testing)."""
    global _cached_cipher
    _cached_cipher = None
