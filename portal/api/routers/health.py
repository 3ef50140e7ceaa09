"""Health route."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from portal import __version__
from portal.clients.dal import check_health

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Check database connectivity."""
    db = check_health()
    ok = db["status"] == "ok"
    services = {"database": "ok" if ok else "error"}
    return JSONResponse(
        {"status": "ok" if ok else "degraded", "version": __version__, "services": services},
        status_code=200 if ok else 503,
    )
