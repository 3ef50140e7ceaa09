"""Principal — the authenticated actor behind a request."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"


def check_role_binding(role: Role | str, client_id: str | None) -> Role:
    """Validate the role/tenant invariant and return the normalized role.

    ADMIN principals are never bound to a tenant; CLIENT principals are
    bound to exactly one.
    """
    try:
        role = Role(role)
    except ValueError as e:
        raise ValueError(f"Unknown role: {role!r}") from e
    if role is Role.ADMIN and client_id is not None:
        raise ValueError("ADMIN users cannot be assigned to a client.")
    if role is Role.CLIENT and not client_id:
        raise ValueError("Client users must be assigned to a client.")
    return role


@dataclass(frozen=True)
class Principal:
    id: str
    email: str
    role: Role
    client_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", check_role_binding(self.role, self.client_id))

    @classmethod
    def admin(cls, id: str, email: str) -> Principal:
        return cls(id=id, email=email, role=Role.ADMIN)

    @classmethod
    def client(cls, id: str, email: str, client_id: str) -> Principal:
        return cls(id=id, email=email, role=Role.CLIENT, client_id=client_id)

    @classmethod
    def from_row(cls, row: dict) -> Principal:
        """Build from an app_users row."""
        client_id = row.get("client_id")
        return cls(
            id=str(row["id"]),
            email=row["email"],
            role=row["role"],
            client_id=str(client_id) if client_id else None,
        )

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
