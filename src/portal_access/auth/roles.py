"""
portal_access.auth.roles

Role vocabulary and the RoleSet value type.

Responsibilities:
- Define the fixed application role vocabulary (`RoleTag`).
- Normalize raw role claims into an immutable `RoleSet`.
- Validate configured role tags against the vocabulary.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from portal_access.errors import AccessConfigurationError


class RoleTag(StrEnum):
    admin = "admin"
    manager = "manager"
    owner = "owner"
    rentee = "rentee"
    service = "service"


_VOCABULARY = frozenset(tag.value for tag in RoleTag)


def _normalize(raw: Any) -> str | None:
    # Claims arrive either as plain strings or as role objects ({"role": ...} / {"name": ...}).
    if isinstance(raw, Mapping):
        raw = raw.get("role") or raw.get("name")
    if raw is None:
        return None
    tag = str(raw).strip().lower()
    return tag or None


@dataclass(frozen=True, slots=True)
class RoleSet:
    """
    Immutable set of role tags granted to an actor.

    Tags outside the vocabulary are kept (claims are not ours to rewrite) but never
    match a known capability.
    """

    tags: frozenset[str] = frozenset()

    @classmethod
    def of(cls, *tags: str) -> RoleSet:
        return cls.from_claims(tags)

    @classmethod
    def from_claims(cls, raw: Iterable[Any] | None) -> RoleSet:
        if not raw:
            return EMPTY_ROLES
        return cls(frozenset(t for t in (_normalize(r) for r in raw) if t is not None))

    def __contains__(self, tag: object) -> bool:
        return tag in self.tags

    def __iter__(self) -> Iterator[str]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def intersection(self, other: RoleSet | Iterable[str]) -> RoleSet:
        other_tags = other.tags if isinstance(other, RoleSet) else frozenset(other)
        return RoleSet(self.tags & other_tags)

    def intersects(self, other: RoleSet | Iterable[str]) -> bool:
        other_tags = other.tags if isinstance(other, RoleSet) else frozenset(other)
        return not self.tags.isdisjoint(other_tags)

    @property
    def unknown(self) -> frozenset[str]:
        return self.tags - _VOCABULARY

    def sorted(self) -> list[str]:
        return sorted(self.tags)


EMPTY_ROLES = RoleSet()


def known_roles(raw: Iterable[str]) -> RoleSet:
    """
    Build a RoleSet for configuration (navigation items, capability predicates).

    Raises `AccessConfigurationError` for tags outside the vocabulary.
    """

    roles = RoleSet.from_claims(list(raw))
    if roles.unknown:
        raise AccessConfigurationError(f"Unknown role tags: {sorted(roles.unknown)}")
    return roles


# --- Module Notes -----------------------------------------------------------
# RoleTag is a StrEnum so `RoleTag.manager in roles` and `"manager" in roles` agree.
