"""
portal_access.api.app

FastAPI app factory for the portal access service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Load the navigation catalog once and share it via app.state.
- Provide a single composition root where cross-cutting concerns live.
- Serve the app with uvicorn (`portal-access` console script).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from portal_access import __version__
from portal_access.access.catalog import portal_navigation
from portal_access.api.routers.dev_auth import router as dev_auth_router
from portal_access.api.routers.health import router as health_router
from portal_access.api.routers.portal import router as portal_router
from portal_access.observability.logging import configure_logging, get_logger
from portal_access.observability.middleware import RequestContextMiddleware
from portal_access.settings import Settings, get_settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, env=settings.env, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, navigation_items=len(app.state.navigation.items))
        yield
        log.info("shutdown")

    app = FastAPI(
        title="Portal Access",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.navigation = portal_navigation()

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(portal_router)
    app.include_router(dev_auth_router)

    return app


def main() -> None:
    settings = get_settings()
    # structlog owns the handlers; uvicorn must not install its own dictConfig.
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


# --- Module Notes -----------------------------------------------------------
# This file is intentionally small: app composition stays here; access decisions stay
# in the access and session layers.
