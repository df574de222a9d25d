"""
portal_access.access.gate

View gates over a session store.

Responsibilities:
- Describe what a protected view requires (`GatePolicy`).
- Decide render / pending / redirect for a session snapshot.
- Fire the redirect side effect once per entry into a denial state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from portal_access.auth.classifier import Capability
from portal_access.auth.models import Session, SessionStatus
from portal_access.errors import AccessConfigurationError
from portal_access.observability.logging import get_logger
from portal_access.session.store import SessionStore, Unsubscribe
from portal_access.settings import Settings

log = get_logger(__name__)

Redirect = Callable[[str], None]


class GateDecision(StrEnum):
    pending = "pending"
    granted = "granted"
    sign_in = "sign_in"
    denied = "denied"


@dataclass(frozen=True, slots=True)
class GatePolicy:
    sign_in_path: str
    denied_path: str
    required: Capability | None = None
    authenticated_only: bool = False

    def __post_init__(self) -> None:
        if self.required is None and not self.authenticated_only:
            raise AccessConfigurationError(
                "gate needs a capability predicate or authenticated_only=True"
            )
        if self.required is not None and not callable(self.required):
            raise AccessConfigurationError("gate capability must be callable")
        for path in (self.sign_in_path, self.denied_path):
            if not path.startswith("/"):
                raise AccessConfigurationError(f"redirect target must be an absolute path: {path!r}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        required: Capability | None = None,
        authenticated_only: bool = False,
    ) -> GatePolicy:
        return cls(
            sign_in_path=settings.sign_in_path,
            denied_path=settings.denied_path,
            required=required,
            authenticated_only=authenticated_only,
        )

    def decide(self, session: Session) -> GateDecision:
        if session.status is SessionStatus.resolving:
            return GateDecision.pending
        if session.status is SessionStatus.unauthenticated:
            return GateDecision.sign_in
        if self.required is None or self.required(session.roles):
            return GateDecision.granted
        return GateDecision.denied

    def target_for(self, decision: GateDecision) -> str | None:
        if decision is GateDecision.sign_in:
            return self.sign_in_path
        if decision is GateDecision.denied:
            return self.denied_path
        return None


class AuthorizationGate:
    """
    Stateful guard for one mounted protected view.

    The gate remembers its last decision; a redirect is issued only when the decision
    changes into `sign_in` or `denied`, so re-observing the same denial is silent and
    leaving then re-entering it re-arms the redirect.
    """

    def __init__(self, *, store: SessionStore, policy: GatePolicy, redirect: Redirect) -> None:
        self._store = store
        self._policy = policy
        self._redirect = redirect
        self._decision: GateDecision | None = None
        self._unsubscribe: Unsubscribe | None = None

    @property
    def decision(self) -> GateDecision:
        return self._decision or GateDecision.pending

    @property
    def renders_content(self) -> bool:
        return self._decision is GateDecision.granted

    def mount(self) -> GateDecision:
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self.evaluate)
        return self.evaluate(self._store.get_snapshot())

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def evaluate(self, session: Session) -> GateDecision:
        decision = self._policy.decide(session)
        previous, self._decision = self._decision, decision
        if decision == previous:
            return decision

        target = self._policy.target_for(decision)
        if target is not None:
            log.info(
                "gate_redirect",
                decision=str(decision),
                target=target,
                subject=session.subject,
                version=session.version,
            )
            self._redirect(target)
        return decision


# --- Module Notes -----------------------------------------------------------
# `GatePolicy.decide` is pure and is what the HTTP layer calls for one-shot checks;
# `AuthorizationGate` adds the per-mount memory needed for redirect idempotence.
