"""Credential routes — admin creation/listing and the reveal endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from portal.api.deps import get_principal, path_uuid, require_admin
from portal.api.models import CreateCredentialRequest
from portal.auth.principal import Principal
from portal.clients.dal import client_exists
from portal.credentials.dal import create_credential, list_credentials
from portal.credentials.reveal import reveal_credential
from portal.errors import InvalidRequest, NotFound, Unauthenticated

router = APIRouter(prefix="/api", tags=["credentials"])

_NO_STORE = {"Cache-Control": "no-store", "Pragma": "no-cache"}


@router.post("/credentials/reveal")
async def api_reveal_credential(request: Request):
    """Identity first, body second: an anonymous caller gets 401 whatever it sends."""
    principal = await run_in_threadpool(get_principal, request)
    if principal is None:
        raise Unauthenticated()
    try:
        payload = await request.json()
    except ValueError as e:
        raise InvalidRequest() from e
    secret = await run_in_threadpool(reveal_credential, principal, payload)
    return JSONResponse({"secret": secret}, headers=_NO_STORE)


@router.get("/admin/credentials")
def api_list_credentials(_: Principal = Depends(require_admin)):
    return {"credentials": list_credentials()}


@router.post("/admin/credentials")
def api_create_credential(
    body: CreateCredentialRequest,
    _: Principal = Depends(require_admin),
):
    credential_id = create_credential(body.label, body.username, body.secret)
    return {"id": credential_id}


@router.post("/admin/clients/{client_id}/credentials")
def api_create_client_credential(
    client_id: str,
    body: CreateCredentialRequest,
    _: Principal = Depends(require_admin),
):
    client_id = path_uuid(client_id, "Client")
    if not client_exists(client_id):
        raise NotFound("Client not found.")
    credential_id = create_credential(body.label, body.username, body.secret)
    return {"id": credential_id}
