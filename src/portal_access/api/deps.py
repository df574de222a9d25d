"""
portal_access.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and the navigation catalog.
- Mount a request-scoped session (resolver + store) from the bearer token.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portal_access.access.navigation import NavigationFilter
from portal_access.auth.jwt import JwtConfig
from portal_access.session.resolver import JwtSessionResolver, SessionProvider
from portal_access.session.store import SessionStore
from portal_access.settings import Settings, get_settings

_bearer = HTTPBearer(auto_error=False)


def settings_dep(request: Request) -> Settings:
    # Settings passed to `create_app` win over the env-derived default.
    return getattr(request.app.state, "settings", None) or get_settings()


def jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(
        alg=settings.jwt_alg,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret=settings.jwt_secret,
        leeway=settings.jwt_leeway_seconds,
    )


def navigation_from_app(request: Request) -> NavigationFilter:
    # The navigation filter is built once in `portal_access.api.app.create_app`.
    return request.app.state.navigation  # type: ignore[attr-defined]


async def portal_session(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> AsyncIterator[SessionStore]:
    # Request-scoped session: one store per request, resolved before the handler runs.
    resolver = JwtSessionResolver(
        cfg=jwt_config(settings),
        token=creds.credentials if creds is not None else None,
    )
    async with SessionProvider.from_settings(settings, resolver=resolver) as provider:
        # Exposed to `RequestContextMiddleware` for the access log and response header.
        request.state.session = await provider.wait_resolved()
        yield provider.store


# --- Module Notes -----------------------------------------------------------
# Handlers receive an already-resolved store; the `resolving` status is only observable
# to subscribers that attach before `wait_resolved()` returns.
