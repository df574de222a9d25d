"""
portal_access.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide a liveness check (`/healthz`).
- Provide a readiness check (`/readyz`) that checks the access catalog is loaded.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from portal_access.access.navigation import NavigationFilter
from portal_access.api.deps import navigation_from_app

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(navigation: NavigationFilter = Depends(navigation_from_app)) -> dict[str, str]:
    if not navigation.items:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Navigation not loaded")
    return {"status": "ready"}
