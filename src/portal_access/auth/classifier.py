"""
portal_access.auth.classifier

Pure role classification helpers.

Responsibilities:
- Derive named capabilities from a RoleSet (`is_administrator`, `is_manager`, ...).
- Compose capability predicates for per-view gates (`any_of`, `all_of`, `has_any_role`).
"""

from __future__ import annotations

from collections.abc import Callable

from portal_access.auth.roles import RoleSet, RoleTag, known_roles
from portal_access.errors import AccessConfigurationError

Capability = Callable[[RoleSet], bool]


def is_administrator(roles: RoleSet) -> bool:
    return RoleTag.admin in roles


def is_manager(roles: RoleSet) -> bool:
    return RoleTag.manager in roles


def is_owner(roles: RoleSet) -> bool:
    return RoleTag.owner in roles


def is_rentee(roles: RoleSet) -> bool:
    return RoleTag.rentee in roles


def is_service_provider(roles: RoleSet) -> bool:
    return RoleTag.service in roles


def has_any_role(*tags: str) -> Capability:
    """
    Capability satisfied when the actor holds at least one of `tags`.

    Tags are validated eagerly: an empty or unknown tag list is a configuration error.
    """

    if not tags:
        raise AccessConfigurationError("has_any_role needs at least one role tag")
    required = known_roles(tags)

    def _check(roles: RoleSet) -> bool:
        return roles.intersects(required)

    _check.__name__ = f"has_any_role({', '.join(required.sorted())})"
    return _check


def any_of(*capabilities: Capability) -> Capability:
    def _check(roles: RoleSet) -> bool:
        return any(cap(roles) for cap in capabilities)

    return _check


def all_of(*capabilities: Capability) -> Capability:
    def _check(roles: RoleSet) -> bool:
        return all(cap(roles) for cap in capabilities)

    return _check


is_admin_or_manager: Capability = any_of(is_administrator, is_manager)

NAMED_CAPABILITIES: dict[str, Capability] = {
    "is_administrator": is_administrator,
    "is_manager": is_manager,
    "is_owner": is_owner,
    "is_rentee": is_rentee,
    "is_service_provider": is_service_provider,
    "is_admin_or_manager": is_admin_or_manager,
}


def capabilities(roles: RoleSet) -> dict[str, bool]:
    return {name: cap(roles) for name, cap in NAMED_CAPABILITIES.items()}


# --- Module Notes -----------------------------------------------------------
# Admin and manager are accepted differently per portal area; each gate names its own
# predicate instead of sharing one "is privileged" rule.
