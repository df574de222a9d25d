"""
portal_access.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue short-lived JWTs for local/dev scenarios.
- Decode and validate JWTs with strict claim requirements (iss/aud/exp/iat/sub).
- Map validated claims into a `ResolvedSession` (identity + roles + expiry).

Note:
- Production systems often prefer RS256 + JWKS; this repo uses HS256 for simplicity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from portal_access.auth.models import ResolvedSession, UserIdentity
from portal_access.auth.roles import RoleSet


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str
    # Clock skew tolerated on exp/iat, in seconds.
    leeway: float = 0.0


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    identity: UserIdentity,
    roles: RoleSet,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    """
    Mint a token whose claims round-trip through `session_from_claims`.
    """

    now = datetime.now(tz=UTC)
    claims: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": identity.subject,
        "roles": roles.sorted(),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    # Optional profile claims are omitted rather than sent as null.
    claims.update({k: v for k, v in (("email", identity.email), ("name", identity.name)) if v})
    return jwt.encode(claims, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            leeway=cfg.leeway,
            options={"require": ["exp", "iat", "iss", "aud", "sub"]},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


def session_from_claims(payload: dict[str, Any]) -> ResolvedSession:
    subject = str(payload.get("sub", "")).strip()
    if not subject:
        raise JwtValidationError("Invalid token subject")

    roles_raw = payload.get("roles", [])
    if not isinstance(roles_raw, list):
        raise JwtValidationError("Invalid token roles")

    exp = payload.get("exp")
    expires_at = datetime.fromtimestamp(int(exp), tz=UTC) if exp is not None else None
    return ResolvedSession(
        identity=UserIdentity(
            subject=subject,
            email=payload.get("email"),
            name=payload.get("name"),
        ),
        roles=RoleSet.from_claims(roles_raw),
        expires_at=expires_at,
    )


def expires_within(expires_at: datetime | None, *, seconds: float, now: datetime | None = None) -> bool:
    if expires_at is None:
        return False
    now = now or datetime.now(tz=UTC)
    return expires_at - now <= timedelta(seconds=seconds)


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `api/routers/dev_auth.py` (dev convenience) and the tests.
# Validation feeds `session.resolver.JwtSessionResolver`.
