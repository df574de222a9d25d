"""
portal_access.api.routers.dev_auth

Local token minting so the portal endpoints can be exercised without an identity provider.

Responsibilities:
- Issue a signed bearer token for a subject and a set of portal roles.
- Reject role tags outside the portal vocabulary (422).
- Stay hidden in production.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from portal_access.api.deps import jwt_config, settings_dep
from portal_access.auth.jwt import issue_token
from portal_access.auth.models import UserIdentity
from portal_access.auth.roles import RoleSet, RoleTag
from portal_access.observability.logging import get_logger
from portal_access.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=256)
    roles: list[RoleTag] = Field(default_factory=list)
    email: str | None = None
    name: str | None = None
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    roles: list[str]
    expires_at: datetime


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    identity = UserIdentity(subject=body.subject, email=body.email, name=body.name)
    roles = RoleSet.of(*body.roles)
    ttl = timedelta(minutes=body.ttl_minutes)
    token = issue_token(cfg=jwt_config(settings), identity=identity, roles=roles, ttl=ttl)

    log.info("dev_token_issued", subject=identity.subject, roles=roles.sorted())
    return DevTokenResponse(
        access_token=token,
        roles=roles.sorted(),
        # Approximate: the token's own exp is truncated to whole seconds.
        expires_at=datetime.now(tz=UTC) + ttl,
    )
