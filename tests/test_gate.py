"""
tests.test_gate

Authorization gate decisions and redirect idempotence.
"""

from __future__ import annotations

import pytest

from portal_access.access.gate import AuthorizationGate, GateDecision, GatePolicy
from portal_access.auth.classifier import has_any_role, is_admin_or_manager
from portal_access.auth.models import Session, UserIdentity
from portal_access.auth.roles import RoleSet
from portal_access.errors import AccessConfigurationError
from portal_access.session.store import SessionStore
from portal_access.settings import Settings

SIGN_IN = "/auth/signin"
DENIED = "/portal/dashboard"
BOB = UserIdentity(subject="u-2")


def _gate(store: SessionStore, **policy_kwargs) -> tuple[AuthorizationGate, list[str]]:
    redirects: list[str] = []
    policy = GatePolicy(sign_in_path=SIGN_IN, denied_path=DENIED, **policy_kwargs)
    gate = AuthorizationGate(store=store, policy=policy, redirect=redirects.append)
    return gate, redirects


def test_never_redirects_while_resolving() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, required=has_any_role("manager"))

    assert gate.mount() is GateDecision.pending
    for _ in range(10):
        assert gate.evaluate(Session.resolving()) is GateDecision.pending

    assert redirects == []
    assert not gate.renders_content


def test_denial_redirect_fires_once_at_transition() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, required=has_any_role("manager"))
    gate.mount()
    assert redirects == []

    store.resolve(BOB, RoleSet.of("rentee"))

    assert redirects == [DENIED]
    assert gate.decision is GateDecision.denied


def test_repeated_denial_does_not_renavigate() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, required=has_any_role("manager"))
    gate.mount()

    for _ in range(5):
        store.resolve(BOB, RoleSet.of("rentee"))
    store.resolve(BOB, RoleSet.of("owner"))

    assert redirects == [DENIED]


def test_leaving_and_reentering_denial_rearms_redirect() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, required=has_any_role("manager"))
    gate.mount()

    store.resolve(BOB, RoleSet.of("rentee"))
    store.resolve(BOB, RoleSet.of("manager"))
    assert gate.renders_content
    store.resolve(BOB, RoleSet.of("rentee"))

    assert redirects == [DENIED, DENIED]


def test_unauthenticated_redirects_to_sign_in_once() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, authenticated_only=True)
    gate.mount()

    store.clear()
    store.clear()
    gate.evaluate(store.get_snapshot())

    assert redirects == [SIGN_IN]
    assert gate.decision is GateDecision.sign_in


def test_sign_out_after_grant_redirects_to_sign_in() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, required=is_admin_or_manager)
    gate.mount()

    store.resolve(BOB, RoleSet.of("admin"))
    assert gate.decision is GateDecision.granted
    store.clear()

    assert redirects == [SIGN_IN]


def test_authenticated_only_grants_empty_roleset() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, authenticated_only=True)
    gate.mount()
    store.resolve(BOB, RoleSet())
    assert gate.decision is GateDecision.granted
    assert redirects == []


def test_mount_on_already_resolved_store_decides_immediately() -> None:
    store = SessionStore()
    store.resolve(BOB, RoleSet.of("service"))
    gate, redirects = _gate(store, required=has_any_role("manager"))

    assert gate.mount() is GateDecision.denied
    assert redirects == [DENIED]


def test_unmounted_gate_ignores_changes() -> None:
    store = SessionStore()
    gate, redirects = _gate(store, required=has_any_role("manager"))
    gate.mount()
    gate.unmount()

    store.resolve(BOB, RoleSet.of("rentee"))

    assert redirects == []
    assert gate.decision is GateDecision.pending


def test_redirect_handler_may_sign_out_reentrantly() -> None:
    store = SessionStore()
    redirects: list[str] = []
    policy = GatePolicy(sign_in_path=SIGN_IN, denied_path=DENIED, required=has_any_role("manager"))

    def redirect(target: str) -> None:
        redirects.append(target)
        if target == DENIED:
            store.clear()

    gate = AuthorizationGate(store=store, policy=policy, redirect=redirect)
    gate.mount()
    store.resolve(BOB, RoleSet.of("rentee"))

    assert redirects == [DENIED, SIGN_IN]


def test_gate_without_requirement_is_config_error() -> None:
    with pytest.raises(AccessConfigurationError):
        GatePolicy(sign_in_path=SIGN_IN, denied_path=DENIED)
    with pytest.raises(AccessConfigurationError):
        GatePolicy(sign_in_path="signin", denied_path=DENIED, authenticated_only=True)


def test_policy_from_settings_uses_configured_targets() -> None:
    settings = Settings(env="test", sign_in_path="/login", denied_path="/home")
    policy = GatePolicy.from_settings(settings, required=is_admin_or_manager)
    assert policy.target_for(GateDecision.sign_in) == "/login"
    assert policy.target_for(GateDecision.denied) == "/home"
    assert policy.target_for(GateDecision.granted) is None
