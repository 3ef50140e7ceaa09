"""Support ticket routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from portal.api.deps import path_uuid, require_admin, require_principal
from portal.api.models import CreateTicketRequest, TicketStatusRequest
from portal.auth.principal import Principal
from portal.clients.dal import create_ticket, list_tickets, set_ticket_status
from portal.errors import Forbidden, InvalidRequest, NotFound

router = APIRouter(prefix="/api/support/tickets", tags=["support"])


@router.get("")
def api_list_tickets(
    status: str | None = Query(None),
    principal: Principal = Depends(require_principal),
):
    if status is not None and status not in ("OPEN", "CLOSED"):
        raise InvalidRequest("status must be OPEN or CLOSED.")
    return {"tickets": list_tickets(principal, status=status)}


@router.post("")
def api_create_ticket(
    body: CreateTicketRequest,
    principal: Principal = Depends(require_principal),
):
    if principal.is_admin or not principal.client_id:
        raise Forbidden("Only client users can open support tickets from this endpoint.")
    ticket_id = create_ticket(principal.client_id, body.subject, body.message)
    if ticket_id:
        return {"id": ticket_id}
    return JSONResponse({"error": "failed to create ticket"}, status_code=500)


@router.patch("/{ticket_id}/status")
def api_set_ticket_status(
    ticket_id: str,
    body: TicketStatusRequest,
    _: Principal = Depends(require_admin),
):
    if not set_ticket_status(path_uuid(ticket_id, "Ticket"), body.status):
        raise NotFound("Ticket not found.")
    return {"success": True}
