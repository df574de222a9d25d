"""
portal_access.auth.models

Session domain models.

Responsibilities:
- Define the resolved identity type (`UserIdentity`).
- Define the session status and the immutable `Session` snapshot.
- Enforce the status/identity/roles invariants on every snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from portal_access.auth.roles import EMPTY_ROLES, RoleSet


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """
    Identity of the acting user as reported by the session resolver.
    """

    subject: str
    email: str | None = None
    name: str | None = None


class SessionStatus(StrEnum):
    resolving = "resolving"
    authenticated = "authenticated"
    unauthenticated = "unauthenticated"


@dataclass(frozen=True, slots=True)
class Session:
    status: SessionStatus
    identity: UserIdentity | None = None
    roles: RoleSet = EMPTY_ROLES
    # Per-store sequence number; strictly increases with every committed transition.
    version: int = 0
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.status is SessionStatus.authenticated and self.identity is None:
            raise ValueError("authenticated session requires an identity")
        if self.status is not SessionStatus.authenticated and (self.identity or self.roles):
            raise ValueError(f"{self.status} session cannot carry identity or roles")

    @classmethod
    def resolving(cls) -> Session:
        return cls(status=SessionStatus.resolving)

    @classmethod
    def authenticated(
        cls,
        identity: UserIdentity,
        roles: RoleSet,
        *,
        version: int = 0,
        expires_at: datetime | None = None,
    ) -> Session:
        return cls(
            status=SessionStatus.authenticated,
            identity=identity,
            roles=roles,
            version=version,
            expires_at=expires_at,
        )

    @classmethod
    def unauthenticated(cls, *, version: int = 0) -> Session:
        return cls(status=SessionStatus.unauthenticated, version=version)

    @property
    def is_resolving(self) -> bool:
        return self.status is SessionStatus.resolving

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.authenticated

    @property
    def subject(self) -> str | None:
        return self.identity.subject if self.identity else None


@dataclass(frozen=True, slots=True)
class ResolvedSession:
    """
    Successful outcome of a session resolver: who is acting and with which roles.
    """

    identity: UserIdentity
    roles: RoleSet = EMPTY_ROLES
    expires_at: datetime | None = None


# --- Module Notes -----------------------------------------------------------
# A resolving session is held to the same empty identity/roles shape as an
# unauthenticated one, so nothing provisional can leak into a gate decision.
