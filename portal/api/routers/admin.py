"""Admin dashboard routes — record counts and the secret access log."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from portal.api.deps import require_admin
from portal.audit.access_log import recent_access
from portal.auth.principal import Principal
from portal.clients.dal import summary_counts
from portal.errors import InvalidRequest
from portal.validation import is_uuid

router = APIRouter(prefix="/api/admin", tags=["admin", "audit"])


@router.get("/audit/reveals")
def api_recent_reveals(
    limit: int = Query(10, ge=1, le=500),
    credentialId: str | None = Query(None),
    _: Principal = Depends(require_admin),
):
    if credentialId is not None and not is_uuid(credentialId):
        raise InvalidRequest("credentialId must be a valid UUID.")
    events = recent_access(limit=limit, credential_id=credentialId)
    return {"events": events, "count": len(events)}


@router.get("/summary")
def api_summary(_: Principal = Depends(require_admin)):
    return {"counts": summary_counts(), "recentReveals": recent_access(limit=10)}
