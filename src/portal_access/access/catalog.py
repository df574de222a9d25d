"""
portal_access.access.catalog

Static portal configuration: the sidebar menu and the per-view access rules.

Responsibilities:
- Declare the portal navigation list with its role annotations.
- Map view paths to gate requirements (longest-prefix match).
"""

from __future__ import annotations

from dataclasses import dataclass

from portal_access.access.gate import GatePolicy
from portal_access.access.navigation import NavigationFilter, NavigationItem
from portal_access.auth.classifier import Capability, is_admin_or_manager
from portal_access.auth.roles import RoleTag
from portal_access.settings import Settings

_ALL_MEMBERS = (RoleTag.rentee, RoleTag.service, RoleTag.manager, RoleTag.owner)

PORTAL_NAVIGATION: tuple[NavigationItem, ...] = (
    NavigationItem.build("/portal/dashboard", "Dashboard", _ALL_MEMBERS),
    NavigationItem.build(
        "/portal/properties", "Properties", (RoleTag.rentee, RoleTag.manager, RoleTag.owner)
    ),
    NavigationItem.build(
        "/portal/transactions",
        "Transactions",
        (RoleTag.admin, RoleTag.manager, RoleTag.owner, RoleTag.rentee),
    ),
    NavigationItem.build(
        "/portal/my-documents", "My Documents", (RoleTag.rentee, RoleTag.service, RoleTag.owner)
    ),
    NavigationItem.build("/portal/customers", "Customers", (RoleTag.manager,)),
    NavigationItem.build("/portal/categories", "Categories", (RoleTag.manager,)),
    NavigationItem.build("/portal/locations", "Locations", (RoleTag.manager,)),
    NavigationItem.build("/portal/countries", "Countries", (RoleTag.manager,)),
    NavigationItem.build("/portal/blogs", "Blogs", (RoleTag.manager,)),
    NavigationItem.build("/portal/feedbacks", "Feedbacks", _ALL_MEMBERS),
    NavigationItem.build("/portal/manage-feedbacks", "Manage Feedbacks", (RoleTag.manager,)),
    NavigationItem.build("/portal/news", "News & Alerts", _ALL_MEMBERS),
    NavigationItem.build("/portal/manage-news", "Manage News", (RoleTag.manager,)),
    NavigationItem.build("/portal/settings", "Settings", (RoleTag.manager,)),
)


@dataclass(frozen=True, slots=True)
class ViewRule:
    prefix: str
    # None means the view only needs an authenticated session.
    required: Capability | None = None


PORTAL_VIEW_RULES: tuple[ViewRule, ...] = (
    ViewRule("/portal"),
    ViewRule("/portal/categories", is_admin_or_manager),
    ViewRule("/portal/locations", is_admin_or_manager),
    ViewRule("/portal/countries", is_admin_or_manager),
    ViewRule("/portal/blogs", is_admin_or_manager),
    ViewRule("/portal/manage-feedbacks", is_admin_or_manager),
    ViewRule("/portal/settings", is_admin_or_manager),
    # The admin area only ever required a signed-in user.
    ViewRule("/admin"),
)


def _matches(prefix: str, path: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def find_view_rule(path: str, rules: tuple[ViewRule, ...] = PORTAL_VIEW_RULES) -> ViewRule | None:
    best: ViewRule | None = None
    for rule in rules:
        if _matches(rule.prefix, path) and (best is None or len(rule.prefix) > len(best.prefix)):
            best = rule
    return best


def policy_for_view(
    path: str,
    settings: Settings,
    rules: tuple[ViewRule, ...] = PORTAL_VIEW_RULES,
) -> GatePolicy | None:
    """
    Gate policy for `path`, or None when the view is public.
    """

    rule = find_view_rule(path, rules)
    if rule is None:
        return None
    return GatePolicy.from_settings(
        settings,
        required=rule.required,
        authenticated_only=rule.required is None,
    )


def portal_navigation() -> NavigationFilter:
    return NavigationFilter(PORTAL_NAVIGATION)


# --- Module Notes -----------------------------------------------------------
# Menu visibility and view access are configured separately. Customers and Manage News
# are only hidden from the menu; their views need no more than a signed-in user. The
# other manager menu entries also accept admins at the view level.
