"""
tests.test_roles

RoleSet normalization and role classification.
"""

from __future__ import annotations

import pytest

from portal_access.auth.classifier import (
    all_of,
    any_of,
    capabilities,
    has_any_role,
    is_admin_or_manager,
    is_administrator,
    is_manager,
    is_service_provider,
)
from portal_access.auth.roles import EMPTY_ROLES, RoleSet, RoleTag, known_roles
from portal_access.errors import AccessConfigurationError


def test_roleset_normalizes_claims() -> None:
    roles = RoleSet.from_claims(["Manager", " owner ", "manager", {"role": "ADMIN"}, {"name": "rentee"}, "", None])
    assert roles.sorted() == ["admin", "manager", "owner", "rentee"]
    assert len(roles) == 4


def test_roleset_membership_accepts_enum_and_str() -> None:
    roles = RoleSet.of(RoleTag.service)
    assert RoleTag.service in roles
    assert "service" in roles
    assert "admin" not in roles


def test_roleset_intersection() -> None:
    roles = RoleSet.of("rentee", "owner")
    assert roles.intersects(RoleSet.of("owner", "service"))
    assert not roles.intersects(RoleSet.of("manager"))
    assert roles.intersection({"owner", "admin"}) == RoleSet.of("owner")
    assert not EMPTY_ROLES.intersects(roles)


def test_unknown_claims_are_kept_but_match_nothing() -> None:
    roles = RoleSet.from_claims(["superuser"])
    assert roles.unknown == frozenset({"superuser"})
    assert not any(capabilities(roles).values())


def test_known_roles_rejects_unknown_tags() -> None:
    assert known_roles(["admin", "owner"]) == RoleSet.of("admin", "owner")
    with pytest.raises(AccessConfigurationError):
        known_roles(["admin", "root"])


def test_named_capabilities() -> None:
    manager = RoleSet.of("manager")
    assert is_manager(manager)
    assert not is_administrator(manager)
    assert is_admin_or_manager(manager)
    assert is_admin_or_manager(RoleSet.of("admin"))
    assert not is_admin_or_manager(RoleSet.of("owner", "rentee"))
    assert is_service_provider(RoleSet.of("service"))


def test_capabilities_on_empty_roleset_are_all_false() -> None:
    assert capabilities(EMPTY_ROLES) == {
        "is_administrator": False,
        "is_manager": False,
        "is_owner": False,
        "is_rentee": False,
        "is_service_provider": False,
        "is_admin_or_manager": False,
    }


def test_composite_predicates() -> None:
    owner_or_rentee = has_any_role("owner", "rentee")
    assert owner_or_rentee(RoleSet.of("rentee"))
    assert not owner_or_rentee(RoleSet.of("service"))

    managing_owner = all_of(is_manager, has_any_role("owner"))
    assert managing_owner(RoleSet.of("manager", "owner"))
    assert not managing_owner(RoleSet.of("manager"))

    assert not any_of()(RoleSet.of("admin"))
    assert all_of()(EMPTY_ROLES)


def test_has_any_role_rejects_unknown_tag_eagerly() -> None:
    with pytest.raises(AccessConfigurationError):
        has_any_role("manager", "landlord")


def test_has_any_role_requires_a_tag() -> None:
    with pytest.raises(AccessConfigurationError, match="at least one"):
        has_any_role()
