"""
portal_access.access.navigation

Role-based navigation filtering.

Responsibilities:
- Define the static `NavigationItem` configuration type.
- Compute the visible, order-preserving sub-list for a session.
- Keep a menu consumer in sync with a session store.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from portal_access.auth.models import Session
from portal_access.auth.roles import EMPTY_ROLES, RoleSet, known_roles
from portal_access.errors import AccessConfigurationError
from portal_access.observability.logging import get_logger
from portal_access.session.store import SessionStore, Unsubscribe

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class NavigationItem:
    path: str
    label: str
    required_roles: RoleSet = EMPTY_ROLES

    def __post_init__(self) -> None:
        if not self.path.startswith("/"):
            raise AccessConfigurationError(f"navigation path must be absolute: {self.path!r}")
        if not self.label.strip():
            raise AccessConfigurationError(f"navigation item {self.path!r} has no label")
        if self.required_roles.unknown:
            raise AccessConfigurationError(
                f"navigation item {self.path!r} uses unknown role tags: "
                f"{sorted(self.required_roles.unknown)}"
            )

    @classmethod
    def build(cls, path: str, label: str, roles: Iterable[str] = ()) -> NavigationItem:
        return cls(path=path, label=label, required_roles=known_roles(roles))

    def visible_to(self, roles: RoleSet) -> bool:
        return not self.required_roles or self.required_roles.intersects(roles)

    def is_active(self, pathname: str) -> bool:
        return pathname.startswith(self.path)


def visible_items(items: Iterable[NavigationItem], roles: RoleSet) -> list[NavigationItem]:
    return [item for item in items if item.visible_to(roles)]


class NavigationFilter:
    def __init__(self, items: Sequence[NavigationItem]) -> None:
        seen: set[str] = set()
        for item in items:
            if item.path in seen:
                raise AccessConfigurationError(f"duplicate navigation path: {item.path!r}")
            seen.add(item.path)
        self._items = tuple(items)

    @property
    def items(self) -> tuple[NavigationItem, ...]:
        return self._items

    def visible(self, session: Session) -> list[NavigationItem]:
        # Nothing is shown until the session is definitively authenticated.
        if not session.is_authenticated:
            return []
        return visible_items(self._items, session.roles)

    def attach(
        self,
        store: SessionStore,
        render: Callable[[list[NavigationItem]], None],
    ) -> Unsubscribe:
        """
        Push the visible menu to `render` now and after every session change.
        """

        def _on_change(session: Session) -> None:
            menu = self.visible(session)
            log.debug(
                "navigation_recomputed",
                status=str(session.status),
                version=session.version,
                visible=len(menu),
            )
            render(menu)

        unsubscribe = store.subscribe(_on_change)
        _on_change(store.get_snapshot())
        return unsubscribe


# --- Module Notes -----------------------------------------------------------
# An empty list from `visible()` means either "not known yet" or "nothing permitted";
# callers that need to tell them apart check the session status they passed in.
