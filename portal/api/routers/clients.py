"""Admin routes for tenants and the records they own."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from portal.api.deps import path_uuid, require_admin
from portal.api.models import (
    CreateClientRequest,
    CreateDocumentRequest,
    CreateDomainRequest,
    CreateHostingRequest,
)
from portal.auth.principal import Principal
from portal.clients.dal import (
    client_exists,
    create_client,
    create_document,
    create_domain,
    create_hosting,
    get_client,
    list_clients,
)
from portal.credentials.dal import credential_exists
from portal.errors import NotFound

router = APIRouter(prefix="/api/admin/clients", tags=["clients"])


def _existing_client(client_id: str) -> str:
    client_id = path_uuid(client_id, "Client")
    if not client_exists(client_id):
        raise NotFound("Client not found.")
    return client_id


def _check_credential(credential_id: str | None) -> None:
    if credential_id and not credential_exists(credential_id):
        raise NotFound("Credential not found.")


@router.get("")
def api_list_clients(_: Principal = Depends(require_admin)):
    return {"clients": list_clients()}


@router.post("")
def api_create_client(body: CreateClientRequest, _: Principal = Depends(require_admin)):
    client_id = create_client(
        body.name,
        body.emailPrimary,
        company=body.company,
        phone=body.phone,
        notes=body.notes,
    )
    if client_id:
        return {"id": client_id}
    return JSONResponse({"error": "failed to create client"}, status_code=500)


@router.get("/{client_id}")
def api_get_client(client_id: str, _: Principal = Depends(require_admin)):
    result = get_client(path_uuid(client_id, "Client"))
    if not result:
        raise NotFound("Client not found.")
    return result


@router.post("/{client_id}/domains")
def api_create_domain(
    client_id: str,
    body: CreateDomainRequest,
    _: Principal = Depends(require_admin),
):
    client_id = _existing_client(client_id)
    _check_credential(body.credentialId)
    domain_id = create_domain(
        client_id,
        body.domainName,
        body.registrar,
        body.nameservers,
        expiry_date=body.expiryDate,
        auto_renew=body.autoRenew,
        login_url=body.loginUrl,
        credential_id=body.credentialId,
    )
    if domain_id:
        return {"id": domain_id}
    return JSONResponse({"error": "failed to create domain"}, status_code=500)


@router.post("/{client_id}/hosting")
def api_create_hosting(
    client_id: str,
    body: CreateHostingRequest,
    _: Principal = Depends(require_admin),
):
    client_id = _existing_client(client_id)
    _check_credential(body.credentialId)
    hosting_id = create_hosting(
        client_id,
        body.provider,
        plan=body.plan,
        renewal_date=body.renewalDate,
        region=body.region,
        control_panel_url=body.controlPanelUrl,
        credential_id=body.credentialId,
        notes=body.notes,
    )
    if hosting_id:
        return {"id": hosting_id}
    return JSONResponse({"error": "failed to create hosting record"}, status_code=500)


@router.post("/{client_id}/documents")
def api_create_document(
    client_id: str,
    body: CreateDocumentRequest,
    _: Principal = Depends(require_admin),
):
    client_id = _existing_client(client_id)
    document_id = create_document(client_id, body.title.strip(), body.storagePath)
    if document_id:
        return {"id": document_id}
    return JSONResponse({"error": "failed to create document"}, status_code=500)
