"""
Response shapes for database rows.

Converts RealDictCursor rows into the camelCase dicts returned by the API.
Credential shapes never include envelope columns.

Usage:
    from portal.models import domain_to_dict

    row = cursor.fetchone()
    response = domain_to_dict(row)
"""

from __future__ import annotations


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _id(value) -> str | None:
    return str(value) if value is not None else None


def client_to_dict(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "name": row.get("name") or "",
        "company": row.get("company"),
        "emailPrimary": row.get("email_primary") or "",
        "phone": row.get("phone"),
        "notes": row.get("notes"),
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }


def credential_summary(row: dict, prefix: str = "") -> dict | None:
    """Public credential metadata: id, label, username.

    ``prefix`` selects aliased join columns, e.g. ``credential_`` for
    ``credential_id``/``credential_label``/``credential_username``.
    """
    cred_id = row.get(f"{prefix}id")
    if cred_id is None:
        return None
    return {
        "id": str(cred_id),
        "label": row.get(f"{prefix}label") or "",
        "username": row.get(f"{prefix}username"),
    }


def credential_to_dict(row: dict) -> dict:
    """Admin list shape — metadata only."""
    return {
        **credential_summary(row),
        "linkedClientIds": sorted(str(c) for c in row.get("client_ids") or []),
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }


def domain_to_dict(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "clientId": str(row["client_id"]),
        "clientName": row.get("client_name"),
        "domainName": row.get("domain_name") or "",
        "registrar": row.get("registrar") or "",
        "expiryDate": _iso(row.get("expiry_date")),
        "autoRenew": row.get("auto_renew"),
        "nameservers": row.get("nameservers") or "",
        "loginUrl": row.get("login_url"),
        "credential": credential_summary(row, prefix="credential_"),
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }


def hosting_to_dict(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "clientId": str(row["client_id"]),
        "clientName": row.get("client_name"),
        "provider": row.get("provider") or "",
        "plan": row.get("plan"),
        "renewalDate": _iso(row.get("renewal_date")),
        "region": row.get("region"),
        "controlPanelUrl": row.get("control_panel_url"),
        "notes": row.get("notes"),
        "credential": credential_summary(row, prefix="credential_"),
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }


def document_to_dict(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "clientId": str(row["client_id"]),
        "title": row.get("title") or "",
        "storagePath": row.get("storage_path") or "",
        "createdAt": _iso(row.get("created_at")),
    }


def ticket_to_dict(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "clientId": str(row["client_id"]),
        "clientName": row.get("client_name"),
        "subject": row.get("subject") or "",
        "message": row.get("message") or "",
        "status": row.get("status") or "OPEN",
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }


def user_to_dict(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "email": row.get("email") or "",
        "role": row.get("role"),
        "clientId": _id(row.get("client_id")),
        "createdAt": _iso(row.get("created_at")),
    }


def access_log_to_dict(row: dict) -> dict:
    return {
        "id": row["id"],
        "userId": str(row["user_id"]),
        "userEmail": row.get("user_email"),
        "credentialId": str(row["credential_id"]),
        "credentialLabel": row.get("credential_label"),
        "action": row.get("action") or "REVEAL",
        "createdAt": _iso(row.get("created_at")),
    }
