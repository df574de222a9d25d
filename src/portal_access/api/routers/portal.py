"""
portal_access.api.routers.portal

Portal access endpoints.

Responsibilities:
- Report the resolved session (status, roles, capabilities).
- Serve the role-filtered navigation menu.
- Gate a view path and redirect when the session may not see it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from starlette.status import HTTP_307_TEMPORARY_REDIRECT

from portal_access.access.catalog import policy_for_view
from portal_access.access.gate import AuthorizationGate, GateDecision
from portal_access.access.navigation import NavigationFilter
from portal_access.api.deps import navigation_from_app, portal_session, settings_dep
from portal_access.auth.classifier import capabilities
from portal_access.session.store import SessionStore
from portal_access.settings import Settings

router = APIRouter(prefix="/v1/portal", tags=["portal"])


class SessionView(BaseModel):
    status: str
    subject: str | None = None
    email: str | None = None
    name: str | None = None
    roles: list[str]
    capabilities: dict[str, bool]


class NavigationEntry(BaseModel):
    path: str
    label: str
    active: bool


class ViewAccess(BaseModel):
    path: str
    decision: str


@router.get("/session", response_model=SessionView)
async def current_session(store: SessionStore = Depends(portal_session)) -> SessionView:
    session = store.get_snapshot()
    identity = session.identity
    return SessionView(
        status=str(session.status),
        subject=identity.subject if identity else None,
        email=identity.email if identity else None,
        name=identity.name if identity else None,
        roles=session.roles.sorted(),
        capabilities=capabilities(session.roles),
    )


@router.get("/navigation", response_model=list[NavigationEntry])
async def navigation(
    pathname: str = "",
    store: SessionStore = Depends(portal_session),
    nav: NavigationFilter = Depends(navigation_from_app),
) -> list[NavigationEntry]:
    return [
        NavigationEntry(path=item.path, label=item.label, active=bool(pathname) and item.is_active(pathname))
        for item in nav.visible(store.get_snapshot())
    ]


@router.get("/views/{view_path:path}", response_model=ViewAccess)
async def view_access(
    view_path: str,
    store: SessionStore = Depends(portal_session),
    settings: Settings = Depends(settings_dep),
):
    path = "/" + view_path.lstrip("/")
    policy = policy_for_view(path, settings)
    if policy is None:
        return ViewAccess(path=path, decision=str(GateDecision.granted))

    redirects: list[str] = []
    gate = AuthorizationGate(store=store, policy=policy, redirect=redirects.append)
    decision = gate.mount()
    gate.unmount()

    if redirects:
        return RedirectResponse(
            url=redirects[0],
            status_code=HTTP_307_TEMPORARY_REDIRECT,
            headers={"x-gate-decision": str(decision)},
        )
    return ViewAccess(path=path, decision=str(decision))


# --- Module Notes -----------------------------------------------------------
# The store handed to these handlers is already resolved, so the gate never reports
# `pending` here; long-lived consumers attach to a store before resolution instead.
