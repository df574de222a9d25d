"""
portal_access.session.resolver

Asynchronous session resolution and refresh for a mounted view tree.

Responsibilities:
- Run the single outstanding resolver call and map its outcome onto the store.
- Keep an authenticated session alive with a background refresh loop.
- Cancel outstanding work and tear the store down on unmount.
- Provide a bearer-token resolver backed by JWT validation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from portal_access.auth.jwt import JwtConfig, decode_and_validate, expires_within, session_from_claims
from portal_access.auth.models import ResolvedSession, Session
from portal_access.observability.logging import get_logger
from portal_access.session.store import SessionStore
from portal_access.settings import Settings

log = get_logger(__name__)

SessionResolver = Callable[[], Awaitable[ResolvedSession | None]]


class JwtSessionResolver:
    """
    Resolve the current actor from a bearer token.

    A missing token resolves to "no session"; an invalid one raises `JwtValidationError`,
    which the provider treats as a resolution failure.
    """

    def __init__(self, *, cfg: JwtConfig, token: str | None) -> None:
        self._cfg = cfg
        self._token = token

    async def __call__(self) -> ResolvedSession | None:
        if not self._token:
            return None
        payload = decode_and_validate(cfg=self._cfg, token=self._token)
        return session_from_claims(payload)


class SessionProvider:
    def __init__(
        self,
        *,
        resolver: SessionResolver,
        refresher: SessionResolver | None = None,
        store: SessionStore | None = None,
        resolve_timeout: float = 10.0,
        refresh_interval: float = 60.0,
        refresh_threshold: float = 300.0,
    ) -> None:
        self._resolver = resolver
        self._refresher = refresher
        self._store = store or SessionStore()
        self._resolve_timeout = resolve_timeout
        self._refresh_interval = refresh_interval
        self._refresh_threshold = refresh_threshold

        self._resolve_task: asyncio.Task[None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._signed_out = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        resolver: SessionResolver,
        refresher: SessionResolver | None = None,
    ) -> SessionProvider:
        return cls(
            resolver=resolver,
            refresher=refresher,
            resolve_timeout=settings.session_resolve_timeout_seconds,
            refresh_interval=settings.session_refresh_interval_seconds,
            refresh_threshold=settings.session_refresh_threshold_seconds,
        )

    @property
    def store(self) -> SessionStore:
        return self._store

    def mount(self) -> SessionStore:
        # One resolver per session lifetime; a remount needs a fresh provider.
        if self._resolve_task is not None:
            raise RuntimeError("session provider already mounted")
        if not self._store.alive:
            raise RuntimeError("session provider already unmounted")
        self._resolve_task = asyncio.create_task(self._resolve())
        return self._store

    async def wait_resolved(self) -> Session:
        if self._resolve_task is None:
            raise RuntimeError("session provider is not mounted")
        await self._resolve_task
        return self._store.get_snapshot()

    def sign_out(self) -> None:
        # Sticky for this lifetime: a resolver or refresh still in flight cannot sign back in.
        self._signed_out = True
        self._cancel_refresh()
        self._store.clear()

    async def unmount(self) -> None:
        tasks = [t for t in (self._resolve_task, self._refresh_task) if t is not None]
        for task in tasks:
            task.cancel()
        try:
            results = await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            self._refresh_task = None
            self._store.teardown()
        # Cancellation is expected; anything else (a failing subscriber) surfaces after teardown.
        for result in results:
            if isinstance(result, Exception):
                raise result

    async def __aenter__(self) -> SessionProvider:
        self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.unmount()

    async def _resolve(self) -> None:
        outcome = await self._call(self._resolver, event="session_resolve_failed")
        try:
            self._apply(outcome)
        finally:
            # A failing subscriber does not undo the committed snapshot; keep it refreshed.
            snapshot = self._store.get_snapshot()
            if self._store.alive and snapshot.is_authenticated and self._refresher is not None:
                self._refresh_task = asyncio.create_task(self._refresh_loop(self._refresher))

    async def _refresh_loop(self, refresher: SessionResolver) -> None:
        while True:
            await asyncio.sleep(self._refresh_interval)
            snapshot = self._store.get_snapshot()
            if not snapshot.is_authenticated:
                return
            if not expires_within(snapshot.expires_at, seconds=self._refresh_threshold):
                continue

            log.info("session_refresh_due", subject=snapshot.subject)
            outcome = await self._call(refresher, event="session_refresh_failed")
            self._apply(outcome)
            if outcome is None:
                return

    async def _call(self, fn: SessionResolver, *, event: str) -> ResolvedSession | None:
        try:
            return await asyncio.wait_for(fn(), timeout=self._resolve_timeout)
        except TimeoutError:
            log.warning(event, reason="timeout", timeout=self._resolve_timeout)
        except Exception as e:
            log.warning(event, reason=type(e).__name__, error=str(e))
        return None

    def _apply(self, outcome: ResolvedSession | None) -> None:
        if self._signed_out:
            log.info("session_outcome_discarded", reason="signed_out")
            return
        if outcome is None:
            self._store.clear()
        else:
            self._store.resolve(outcome.identity, outcome.roles, expires_at=outcome.expires_at)

    def _cancel_refresh(self) -> None:
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None


# --- Module Notes -----------------------------------------------------------
# Resolution failure (exception, timeout, or an empty outcome) maps to `clear()`; there is
# no separate error status. If `unmount()` wins the race against the resolver, the task is
# cancelled, and any completion that still slips through hits a torn-down store (no-op).
# After `sign_out()` outcomes are discarded, so the store stays unauthenticated until unmount.
