"""
portal_access.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs.
- Bind request metadata into structlog contextvars.
- Emit one access event per request carrying the resolved session (status, subject).
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portal_access.auth.models import Session
from portal_access.observability.logging import get_logger

log = get_logger(__name__)

SESSION_STATUS_HEADER = "x-session-status"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Requests that never mount a session (health checks, dev tokens) are logged with
    `session_status=None` and carry no session header.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            # Set by the `portal_session` dependency once the request's session resolved.
            session: Session | None = getattr(request.state, "session", None)
            log.info(
                "request_completed",
                status_code=response.status_code,
                session_status=str(session.status) if session else None,
                subject=session.subject if session else None,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        if session is not None:
            response.headers[SESSION_STATUS_HEADER] = str(session.status)
        return response


# --- Module Notes -----------------------------------------------------------
# BaseHTTPMiddleware runs the app in a copied context, so the session travels back via
# `request.state` (shared scope state) rather than contextvars.
