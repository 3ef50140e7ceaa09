"""
Shared fixtures for the portal test suite.

``store`` stands in for PostgreSQL behind the reveal protocol: it holds
credential rows with real sealed envelopes, the domain/hosting links that
make up each credential's tenant set, and an in-memory access log. The DAL
functions the reveal path and the API call are patched to use it.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from portal.audit.access_log import ACTIONS
from portal.auth.principal import Principal
from portal.errors import AuditWriteError
from portal.vault.crypto import SecretCipher


class FakeStore:
    def __init__(self, cipher: SecretCipher):
        self.cipher = cipher
        self.clients: dict[str, str] = {}
        self.credentials: dict[str, dict] = {}
        self.links: list[tuple[str, str, str]] = []  # (kind, client_id, credential_id)
        self.access_log: list[dict] = []
        self.users: dict[str, Principal] = {}
        self.fail_audit = False

    # ── setup helpers ──

    def add_client(self, name: str) -> str:
        client_id = str(uuid.uuid4())
        self.clients[client_id] = name
        return client_id

    def add_admin(self, subject: str = "admin-sub") -> Principal:
        principal = Principal.admin(str(uuid.uuid4()), f"{subject}@example.com")
        self.users[subject] = principal
        return principal

    def add_client_user(self, client_id: str, subject: str) -> Principal:
        principal = Principal.client(str(uuid.uuid4()), f"{subject}@example.com", client_id)
        self.users[subject] = principal
        return principal

    def link(self, credential_id: str, client_id: str, kind: str = "domain") -> None:
        self.links.append((kind, client_id, credential_id))

    # ── stand-ins for the DAL ──

    def create_credential(self, label, username, secret, *, cipher=None) -> str:
        envelope = (cipher or self.cipher).seal(secret)
        credential_id = str(uuid.uuid4())
        self.credentials[credential_id] = {
            "id": credential_id,
            "label": label,
            "username": username,
            **envelope.to_row(),
        }
        return credential_id

    def get_credential(self, credential_id: str) -> dict | None:
        row = self.credentials.get(credential_id)
        if row is None:
            return None
        tenants = sorted({c for _, c, cred in self.links if cred == credential_id})
        return {**row, "client_ids": tenants}

    def record_access(self, user_id, credential_id, action="REVEAL") -> dict:
        if action not in ACTIONS:
            raise ValueError(action)
        if self.fail_audit:
            raise AuditWriteError()
        entry = {
            "id": len(self.access_log) + 1,
            "user_id": user_id,
            "credential_id": credential_id,
            "action": action,
            "created_at": datetime.now(UTC),
        }
        self.access_log.append(entry)
        return {"id": entry["id"], "createdAt": entry["created_at"].isoformat()}

    def count_access(self, credential_id: str | None = None) -> int:
        return sum(
            1 for e in self.access_log if credential_id is None or e["credential_id"] == credential_id
        )

    def resolve(self, subject, email, role_claim=None, **_) -> Principal | None:
        return self.users.get(subject) if subject else None


@pytest.fixture
def key() -> bytes:
    return secrets.token_bytes(32)


@pytest.fixture
def cipher(key) -> SecretCipher:
    return SecretCipher(key)


@pytest.fixture
def store(cipher, monkeypatch) -> FakeStore:
    s = FakeStore(cipher)
    monkeypatch.setattr("portal.credentials.reveal.get_credential", s.get_credential)
    monkeypatch.setattr("portal.credentials.reveal.record_access", s.record_access)
    monkeypatch.setattr("portal.credentials.reveal.get_cipher", lambda: cipher)
    monkeypatch.setattr("portal.api.routers.credentials.create_credential", s.create_credential)
    monkeypatch.setattr("portal.api.routers.credentials.client_exists", lambda c: c in s.clients)
    monkeypatch.setattr("portal.api.deps.resolve_principal", s.resolve)
    return s


@pytest_asyncio.fixture
async def client():
    """Async HTTP client against the portal app."""
    from portal.api.app import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
