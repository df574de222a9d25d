"""
portal_access.session.store

Reactive session store for one mounted view tree.

Responsibilities:
- Hold the single authoritative `Session` snapshot.
- Own the status transitions (resolving -> authenticated / unauthenticated).
- Fan out every committed snapshot to subscribers, synchronously and in order.
- Queue transitions requested while a notification round is in progress.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from datetime import datetime
from functools import partial

from portal_access.auth.models import Session, UserIdentity
from portal_access.auth.roles import RoleSet
from portal_access.observability.logging import get_logger

log = get_logger(__name__)

Listener = Callable[[Session], None]
Unsubscribe = Callable[[], None]


class SessionStore:
    """
    Single-writer, many-reader session value.

    Writers are the session resolver and explicit sign-out. Readers (gates, navigation
    filters) either poll `get_snapshot()` or subscribe for pushes.
    """

    def __init__(self) -> None:
        self._snapshot = Session.resolving()
        self._listeners: dict[int, Listener] = {}
        self._next_token = 0
        self._pending: deque[Callable[[int], Session]] = deque()
        self._notifying = False
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    def get_snapshot(self) -> Session:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Unsubscribe:
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener

        def _unsubscribe() -> None:
            self._listeners.pop(token, None)

        return _unsubscribe

    def resolve(
        self,
        identity: UserIdentity,
        roles: RoleSet,
        *,
        expires_at: datetime | None = None,
    ) -> None:
        self._request(
            "resolve",
            partial(_authenticated, identity, roles, expires_at),
        )

    def clear(self) -> None:
        self._request("clear", _unauthenticated)

    def teardown(self) -> None:
        if not self._alive:
            return
        self._alive = False
        self._listeners.clear()
        self._pending.clear()
        log.debug("session_store_teardown", version=self._snapshot.version)

    def _request(self, action: str, build: Callable[[int], Session]) -> None:
        if not self._alive:
            # Late resolver completion after unmount; the store is discarded.
            log.debug("session_store_ignored", action=action)
            return

        self._pending.append(build)
        if self._notifying:
            log.debug("session_transition_queued", action=action)
            return
        self._drain()

    def _drain(self) -> None:
        errors: list[Exception] = []
        self._notifying = True
        try:
            while self._pending and self._alive:
                build = self._pending.popleft()
                self._snapshot = build(self._snapshot.version + 1)
                log.info(
                    "session_transition",
                    status=str(self._snapshot.status),
                    subject=self._snapshot.subject,
                    roles=self._snapshot.roles.sorted(),
                    version=self._snapshot.version,
                )
                errors.extend(self._notify(self._snapshot))
        finally:
            self._notifying = False

        if errors:
            raise errors[0]

    def _notify(self, snapshot: Session) -> list[Exception]:
        errors: list[Exception] = []
        for token, listener in list(self._listeners.items()):
            if token not in self._listeners:
                # Unsubscribed earlier in this round.
                continue
            try:
                listener(snapshot)
            except Exception as e:
                log.exception("session_listener_failed", version=snapshot.version)
                errors.append(e)
        return errors


def _authenticated(
    identity: UserIdentity,
    roles: RoleSet,
    expires_at: datetime | None,
    version: int,
) -> Session:
    return Session.authenticated(identity, roles, version=version, expires_at=expires_at)


def _unauthenticated(version: int) -> Session:
    return Session.unauthenticated(version=version)


# --- Module Notes -----------------------------------------------------------
# Every subscriber receives snapshot N before any subscriber receives N+1: a transition
# requested from inside a listener is appended to `_pending` and committed only after the
# current round has reached every listener. A failing listener does not stop the round;
# the first error is re-raised to the writer once the queue is drained.
