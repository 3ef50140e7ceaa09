"""Tenant-scoped reads: domains, hosting accounts, documents.

Admins see every tenant; client users see their own. Rows of other
tenants are filtered out in SQL and read as 404.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.api.deps import path_uuid, require_principal
from portal.auth.principal import Principal
from portal.clients.dal import (
    get_document,
    get_domain,
    get_hosting,
    list_documents,
    list_domains,
    list_hosting,
)
from portal.errors import NotFound

router = APIRouter(prefix="/api", tags=["records"])


@router.get("/domains")
def api_list_domains(principal: Principal = Depends(require_principal)):
    return {"domains": list_domains(principal)}


@router.get("/domains/{domain_id}")
def api_get_domain(domain_id: str, principal: Principal = Depends(require_principal)):
    result = get_domain(principal, path_uuid(domain_id, "Domain"))
    if not result:
        raise NotFound("Domain not found.")
    return result


@router.get("/hosting")
def api_list_hosting(principal: Principal = Depends(require_principal)):
    return {"hosting": list_hosting(principal)}


@router.get("/hosting/{hosting_id}")
def api_get_hosting(hosting_id: str, principal: Principal = Depends(require_principal)):
    result = get_hosting(principal, path_uuid(hosting_id, "Hosting record"))
    if not result:
        raise NotFound("Hosting record not found.")
    return result


@router.get("/documents")
def api_list_documents(principal: Principal = Depends(require_principal)):
    return {"documents": list_documents(principal)}


@router.get("/documents/{document_id}")
def api_get_document(document_id: str, principal: Principal = Depends(require_principal)):
    result = get_document(principal, path_uuid(document_id, "Document"))
    if not result:
        raise NotFound("Document not found.")
    return result
