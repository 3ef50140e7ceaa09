"""
Client Portal API — FastAPI application.

Identity comes from the proxy-asserted X-Auth-* headers; every route
resolves it to a principal before touching tenant data.

Start:
  portal serve
  # or
  uvicorn portal.api.app:app --host 127.0.0.1 --port 9200
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from portal import __version__
from portal.api.middleware import CorrelationMiddleware, install_error_handlers
from portal.api.routers import admin, clients, credentials, health, records, support, users
from portal.db.connection import close_pool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Client Portal API %s starting", __version__)
    yield
    close_pool()


def create_app() -> FastAPI:
    app = FastAPI(title="Client Portal", version=__version__, lifespan=lifespan)
    app.add_middleware(CorrelationMiddleware)
    install_error_handlers(app)

    app.include_router(health.router)
    app.include_router(credentials.router)
    app.include_router(clients.router)
    app.include_router(records.router)
    app.include_router(support.router)
    app.include_router(users.router)
    app.include_router(admin.router)
    return app


app = create_app()
