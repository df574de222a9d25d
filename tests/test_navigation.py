"""
tests.test_navigation

Navigation filtering and the portal catalog.
"""

from __future__ import annotations

import pytest

from portal_access.access.catalog import (
    PORTAL_NAVIGATION,
    find_view_rule,
    policy_for_view,
    portal_navigation,
)
from portal_access.access.gate import GateDecision
from portal_access.access.navigation import NavigationFilter, NavigationItem, visible_items
from portal_access.auth.models import Session, UserIdentity
from portal_access.auth.roles import RoleSet
from portal_access.errors import AccessConfigurationError
from portal_access.session.store import SessionStore
from portal_access.settings import Settings

CAROL = UserIdentity(subject="u-3")

ITEMS = [
    NavigationItem.build("/dashboard", "Dashboard"),
    NavigationItem.build("/customers", "Customers", ["manager"]),
    NavigationItem.build("/my-documents", "My Documents", ["rentee", "service", "owner"]),
]


def _paths(items: list[NavigationItem]) -> list[str]:
    return [item.path for item in items]


def test_manager_sees_unrestricted_and_manager_items() -> None:
    nav = NavigationFilter(ITEMS)
    session = Session.authenticated(CAROL, RoleSet.of("manager"))
    assert _paths(nav.visible(session)) == ["/dashboard", "/customers"]


def test_visibility_rule_and_order() -> None:
    roles = RoleSet.of("owner")
    reversed_items = list(reversed(ITEMS))
    assert _paths(visible_items(ITEMS, roles)) == ["/dashboard", "/my-documents"]
    assert _paths(visible_items(reversed_items, roles)) == ["/my-documents", "/dashboard"]


def test_empty_roleset_sees_only_unrestricted_items() -> None:
    nav = NavigationFilter(ITEMS)
    assert _paths(nav.visible(Session.authenticated(CAROL, RoleSet()))) == ["/dashboard"]


@pytest.mark.parametrize("session", [Session.resolving(), Session.unauthenticated()])
def test_no_menu_before_authentication(session: Session) -> None:
    nav = NavigationFilter(ITEMS)
    assert nav.visible(session) == []


def test_attach_recomputes_on_every_change() -> None:
    store = SessionStore()
    menus: list[list[str]] = []
    unsubscribe = NavigationFilter(ITEMS).attach(store, lambda menu: menus.append(_paths(menu)))

    store.resolve(CAROL, RoleSet.of("rentee"))
    store.resolve(CAROL, RoleSet.of("manager"))
    store.clear()
    unsubscribe()
    store.resolve(CAROL, RoleSet.of("manager"))

    assert menus == [
        [],
        ["/dashboard", "/my-documents"],
        ["/dashboard", "/customers"],
        [],
    ]


def test_malformed_items_are_rejected() -> None:
    with pytest.raises(AccessConfigurationError):
        NavigationItem.build("/reports", "Reports", ["auditor"])
    with pytest.raises(AccessConfigurationError):
        NavigationItem(path="/reports", label="Reports", required_roles=RoleSet.of("auditor"))
    with pytest.raises(AccessConfigurationError):
        NavigationItem.build("reports", "Reports")
    with pytest.raises(AccessConfigurationError):
        NavigationItem.build("/reports", "  ")
    with pytest.raises(AccessConfigurationError):
        NavigationFilter([ITEMS[0], ITEMS[0]])


def test_is_active_uses_prefix() -> None:
    item = NavigationItem.build("/portal/news", "News & Alerts")
    assert item.is_active("/portal/news/42")
    assert not item.is_active("/portal/dashboard")


def test_portal_menu_for_service_provider() -> None:
    session = Session.authenticated(CAROL, RoleSet.of("service"))
    assert _paths(portal_navigation().visible(session)) == [
        "/portal/dashboard",
        "/portal/my-documents",
        "/portal/feedbacks",
        "/portal/news",
    ]


def test_portal_menu_for_admin_only_shows_transactions() -> None:
    session = Session.authenticated(CAROL, RoleSet.of("admin"))
    assert _paths(portal_navigation().visible(session)) == ["/portal/transactions"]


def test_portal_menu_for_manager_hides_my_documents() -> None:
    session = Session.authenticated(CAROL, RoleSet.of("manager"))
    paths = _paths(portal_navigation().visible(session))
    assert "/portal/my-documents" not in paths
    assert paths[0] == "/portal/dashboard"
    assert paths[-1] == "/portal/settings"
    assert len(paths) == len(PORTAL_NAVIGATION) - 1


def test_view_rules_use_longest_prefix() -> None:
    assert find_view_rule("/portal/categories/7").prefix == "/portal/categories"
    assert find_view_rule("/portal/customers/7").prefix == "/portal"
    assert find_view_rule("/portal/news").prefix == "/portal"
    assert find_view_rule("/portalish") is None
    assert find_view_rule("/listings") is None


def test_policy_for_view() -> None:
    settings = Settings(env="test")
    assert policy_for_view("/about", settings) is None

    news = policy_for_view("/portal/news", settings)
    assert news is not None and news.authenticated_only

    settings_view = policy_for_view("/portal/settings", settings)
    assert settings_view is not None
    admin = Session.authenticated(CAROL, RoleSet.of("admin"), version=1)
    owner = Session.authenticated(CAROL, RoleSet.of("owner"), version=1)
    assert settings_view.decide(admin) is GateDecision.granted
    assert settings_view.decide(owner) is GateDecision.denied


@pytest.mark.parametrize(
    "view",
    [
        "/portal/categories",
        "/portal/locations",
        "/portal/countries",
        "/portal/blogs",
        "/portal/manage-feedbacks",
        "/portal/settings",
    ],
)
def test_management_views_admit_admins_and_managers(view: str) -> None:
    policy = policy_for_view(view, Settings(env="test"))
    assert policy is not None

    for roles, expected in (
        (RoleSet.of("admin"), GateDecision.granted),
        (RoleSet.of("manager"), GateDecision.granted),
        (RoleSet.of("owner", "rentee"), GateDecision.denied),
    ):
        assert policy.decide(Session.authenticated(CAROL, roles, version=1)) is expected


@pytest.mark.parametrize("view", ["/portal/customers", "/portal/manage-news", "/admin", "/admin/users"])
def test_views_hidden_only_in_menu_need_a_signed_in_user(view: str) -> None:
    policy = policy_for_view(view, Settings(env="test"))
    assert policy is not None and policy.authenticated_only

    rentee = Session.authenticated(CAROL, RoleSet.of("rentee"), version=1)
    assert policy.decide(rentee) is GateDecision.granted
    assert policy.decide(Session.unauthenticated(version=1)) is GateDecision.sign_in
