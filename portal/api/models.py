"""Pydantic request models for the portal API."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from portal.validation import blank_to_none, is_uuid, normalize_email


def _optional_uuid(v: str | None, field_name: str) -> str | None:
    v = blank_to_none(v)
    if v is None:
        return None
    if not is_uuid(v):
        raise ValueError(f"{field_name} must be a valid UUID.")
    return v.lower()


def _email(v: str) -> str:
    normalized = normalize_email(v)
    if not normalized or "@" not in normalized or normalized.startswith("@"):
        raise ValueError("Valid email is required.")
    return normalized


def _url(v: str | None) -> str | None:
    v = blank_to_none(v)
    if v is not None and not v.startswith(("http://", "https://")):
        raise ValueError("Invalid URL.")
    return v


# ─── Clients ─────────────────────────────────────────────────────────────


class CreateClientRequest(BaseModel):
    name: str = Field(min_length=2)
    company: str | None = None
    emailPrimary: str
    phone: str | None = None
    notes: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("company", "phone", "notes", mode="before")
    @classmethod
    def optional_text(cls, v: str | None) -> str | None:
        return blank_to_none(v)

    @field_validator("emailPrimary")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _email(v)


# ─── Credentials ─────────────────────────────────────────────────────────


class CreateCredentialRequest(BaseModel):
    label: str = Field(min_length=2)
    username: str | None = None
    secret: str = Field(min_length=1, repr=False)

    @field_validator("label", mode="before")
    @classmethod
    def strip_label(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("username", mode="before")
    @classmethod
    def optional_username(cls, v: str | None) -> str | None:
        return blank_to_none(v)


# ─── Domains / Hosting / Documents ───────────────────────────────────────


class CreateDomainRequest(BaseModel):
    domainName: str = Field(min_length=3)
    registrar: str = Field(min_length=2)
    nameservers: str = Field(min_length=2)
    expiryDate: date | None = None
    autoRenew: bool | None = None
    loginUrl: str | None = None
    credentialId: str | None = None

    @field_validator("domainName", "registrar", "nameservers", mode="before")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("expiryDate", "autoRenew", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return None if v == "" else v

    @field_validator("loginUrl", mode="before")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        return _url(v)

    @field_validator("credentialId", mode="before")
    @classmethod
    def validate_credential(cls, v: str | None, info: object) -> str | None:
        return _optional_uuid(v, info.field_name)


class CreateHostingRequest(BaseModel):
    provider: str = Field(min_length=2)
    plan: str | None = None
    renewalDate: date | None = None
    region: str | None = None
    controlPanelUrl: str | None = None
    credentialId: str | None = None
    notes: str | None = None

    @field_validator("provider", mode="before")
    @classmethod
    def strip_provider(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("plan", "region", "notes", mode="before")
    @classmethod
    def optional_text(cls, v: str | None) -> str | None:
        return blank_to_none(v)

    @field_validator("renewalDate", mode="before")
    @classmethod
    def blank_date(cls, v):
        return None if v == "" else v

    @field_validator("controlPanelUrl", mode="before")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        return _url(v)

    @field_validator("credentialId", mode="before")
    @classmethod
    def validate_credential(cls, v: str | None, info: object) -> str | None:
        return _optional_uuid(v, info.field_name)


class CreateDocumentRequest(BaseModel):
    title: str = Field(min_length=2)
    storagePath: str = Field(min_length=1)


# ─── Support tickets ─────────────────────────────────────────────────────


class CreateTicketRequest(BaseModel):
    subject: str = Field(min_length=4)
    message: str = Field(min_length=10)

    @field_validator("subject", "message", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class TicketStatusRequest(BaseModel):
    status: Literal["OPEN", "CLOSED"]


# ─── Users ───────────────────────────────────────────────────────────────


class _RoleBinding(BaseModel):
    role: Literal["ADMIN", "CLIENT"]
    clientId: str | None = None

    @field_validator("clientId", mode="before")
    @classmethod
    def validate_client(cls, v: str | None, info: object) -> str | None:
        return _optional_uuid(v, info.field_name)

    @model_validator(mode="after")
    def client_users_need_client(self):
        if self.role == "CLIENT" and not self.clientId:
            raise ValueError("Client users must be assigned to a client.")
        if self.role == "ADMIN":
            self.clientId = None
        return self


class CreateUserRequest(_RoleBinding):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _email(v)


class UpdateUserRequest(_RoleBinding):
    pass
