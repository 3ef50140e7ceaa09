"""Admin user management routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.api.deps import path_uuid, require_admin
from portal.api.models import CreateUserRequest, UpdateUserRequest
from portal.auth.dal import get_user, list_users, update_user, upsert_user
from portal.auth.principal import Principal
from portal.clients.dal import client_exists
from portal.errors import NotFound

router = APIRouter(prefix="/api/admin/users", tags=["users"])


def _check_client(client_id: str | None) -> None:
    if client_id and not client_exists(client_id):
        raise NotFound("Client not found.")


@router.get("")
def api_list_users(_: Principal = Depends(require_admin)):
    return {"users": list_users()}


@router.post("")
def api_create_user(body: CreateUserRequest, _: Principal = Depends(require_admin)):
    _check_client(body.clientId)
    user = upsert_user(body.email, body.role, body.clientId)
    return {"id": str(user["id"])}


@router.patch("/{user_id}")
def api_update_user(
    user_id: str,
    body: UpdateUserRequest,
    _: Principal = Depends(require_admin),
):
    user_id = path_uuid(user_id, "User")
    if get_user(user_id) is None:
        raise NotFound("User not found.")
    _check_client(body.clientId)
    if update_user(user_id, role=body.role, client_id=body.clientId) is None:
        raise NotFound("User not found.")
    return {"success": True}
