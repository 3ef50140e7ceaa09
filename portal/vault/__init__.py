"""
Credential vault — AES-256-GCM envelopes for secrets at rest.

Public API:
    get_cipher()             → process-wide SecretCipher (lazy key load)
    SecretCipher.seal(text)  → Envelope
    SecretCipher.open(env)   → plaintext
"""

from __future__ import annotations

from portal.vault.crypto import (
    Envelope,
    SecretCipher,
    generate_key,
    get_cipher,
    load_key,
    reset_cipher_cache,
)

__all__ = [
    "Envelope",
    "SecretCipher",
    "generate_key",
    "get_cipher",
    "load_key",
    "reset_cipher_cache",
]
