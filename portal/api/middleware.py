"""API middleware and error rendering — correlation IDs, error formatting."""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from portal.errors import AuditWriteError, PortalError

logger = logging.getLogger(__name__)

# Decrypt failures are already alerted by portal.credentials.reveal
_ALERT_ERRORS = (AuditWriteError,)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Attach a unique X-Correlation-Id to every request/response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get("x-correlation-id") or uuid.uuid4().hex
        request.state.correlation_id = correlation_id
        response = await call_next(request)
        response.headers["X-Correlation-Id"] = correlation_id
        return response


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request payload."
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid request payload."
    msg = str(first.get("msg", "Invalid request payload."))
    msg = msg.removeprefix("Value error, ")
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{field}: {msg}" if field else msg


def _correlation(request: Request) -> str:
    return getattr(request.state, "correlation_id", "-")


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if isinstance(exc, _ALERT_ERRORS):
        logger.critical(
            "%s on %s %s (correlation %s)",
            type(exc).__name__,
            request.method,
            request.url.path,
            _correlation(request),
        )
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": _first_validation_message(exc)}, status_code=400)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else (database outage, bug) → generic 500, details only in the log."""
    logger.error(
        "Unhandled %s on %s %s (correlation %s)",
        type(exc).__name__,
        request.method,
        request.url.path,
        _correlation(request),
        exc_info=exc,
    )
    return JSONResponse({"error": PortalError.default_message}, status_code=500)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
