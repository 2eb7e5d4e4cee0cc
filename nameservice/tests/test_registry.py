from __future__ import annotations

import pytest

from nameservice import codec
from nameservice.constants import NEVER_EXPIRES, ROOT_NODE
from nameservice.errors import (
    InvalidExpiration,
    InvalidLabel,
    MissingRole,
    NamespaceExpired,
    NotNamespaceOwner,
    ProtectedNamespace,
    Unauthorized,
)
from nameservice.registry import CONTROLLER_ROLE, NamespaceRegistry
from nameservice.types import NamespaceInfo

from .conftest import ALICE, BOB, CAROL, DEPLOYER, START


def test_root_is_owned_by_deployer(registry):
    assert registry.owner(ROOT_NODE) == DEPLOYER
    assert registry.expiration(ROOT_NODE) == NEVER_EXPIRES
    assert registry.is_active(ROOT_NODE)


def test_second_registry_on_same_state_keeps_root(state, registry):
    other = NamespaceRegistry(state, ALICE)
    assert other.owner(ROOT_NODE) == DEPLOYER


def test_set_subname_owner_creates_record_and_events(registry, state):
    node = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100, protected=False)
    assert node == codec.namehash_name("alice.ecs.eth")
    assert registry.owner(node) == ALICE
    assert registry.get_namespace(node) == NamespaceInfo(expiration=START + 100, name="alice.ecs.eth")
    names = [e.name for e in state.events[-3:]]
    assert names == ["NamespaceOwnerSet", "ExpirationSet", "NameSet"]
    assert state.events[-1].args["name"] == codec.encode("alice.ecs.eth")


def test_unregistered_views(registry):
    node = codec.namehash_name("nobody.eth")
    assert registry.owner(node) is None
    assert registry.get_namespace(node) is None
    assert registry.is_expired(node)
    assert not registry.is_authorized_for(node, ALICE)


def test_set_subname_owner_requires_parent_authorization(registry, state):
    before = len(state.events)
    with pytest.raises(Unauthorized):
        registry.set_subname_owner(ALICE, "x", "ecs.eth", ALICE, START + 100)
    assert len(state.events) == before


def test_set_subname_owner_requires_active_parent(registry, clock):
    registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100)
    clock.advance(100)
    with pytest.raises(NamespaceExpired) as ei:
        registry.set_subname_owner(ALICE, "sub", "alice.ecs.eth", BOB, START + 500)
    assert ei.value.expiration == START + 100
    assert ei.value.node == codec.namehash_name("alice.ecs.eth")


def test_label_with_separator_is_rejected(registry):
    with pytest.raises(InvalidLabel):
        registry.set_subname_owner(DEPLOYER, "a.b", "ecs.eth", ALICE, START + 100)


@pytest.mark.parametrize("parent", ["", "ecs.eth"])
def test_empty_label_is_rejected(registry, parent):
    with pytest.raises(InvalidLabel):
        registry.set_subname_owner(DEPLOYER, "", parent, ALICE, START + 100)
    assert registry.owner(ROOT_NODE) == DEPLOYER


def test_protected_namespace_blocks_until_expiry(registry, clock):
    node = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100, protected=True)
    with pytest.raises(ProtectedNamespace) as ei:
        registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", BOB, START + 1000)
    assert ei.value.owner == ALICE
    assert registry.owner(node) == ALICE

    clock.set(START + 100)
    registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", BOB, START + 1000)
    assert registry.owner(node) == BOB


def test_unprotected_namespace_can_be_overwritten(registry):
    node = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100)
    registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", BOB, START + 50)
    assert registry.owner(node) == BOB
    assert registry.expiration(node) == START + 50


def test_operator_approval_is_scoped_to_one_namespace(registry):
    a = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100)
    b = registry.set_subname_owner(DEPLOYER, "other", "ecs.eth", ALICE, START + 100)
    registry.set_approval_for_namespace(ALICE, a, BOB, True)
    assert registry.is_authorized_for(a, BOB)
    assert not registry.is_authorized_for(b, BOB)

    # operator can create children of the approved namespace
    registry.set_subname_owner(BOB, "sub", "alice.ecs.eth", CAROL, START + 100)

    registry.set_approval_for_namespace(ALICE, a, BOB, False)
    assert not registry.is_authorized_for(a, BOB)


def test_only_owner_manages_approvals(registry):
    a = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100)
    registry.set_approval_for_namespace(ALICE, a, BOB, True)
    with pytest.raises(NotNamespaceOwner):
        registry.set_approval_for_namespace(BOB, a, CAROL, True)


def test_transfer_drops_previous_owners_approvals(registry):
    a = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100)
    registry.set_approval_for_namespace(ALICE, a, BOB, True)
    registry.set_owner(BOB, a, CAROL)
    assert registry.owner(a) == CAROL
    assert not registry.is_authorized_for(a, BOB)


def test_set_owner_requires_active_namespace(registry, clock):
    a = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100)
    clock.advance(100)
    with pytest.raises(NamespaceExpired):
        registry.set_owner(ALICE, a, BOB)


def test_set_expiration_is_controller_only_and_monotone(registry):
    a = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 100)
    with pytest.raises(MissingRole):
        registry.set_expiration(ALICE, a, START + 200)

    registry.grant_controller(DEPLOYER, BOB)
    assert registry.is_controller(BOB)
    registry.set_expiration(BOB, a, START + 200)
    assert registry.expiration(a) == START + 200
    with pytest.raises(InvalidExpiration):
        registry.set_expiration(BOB, a, START + 150)

    registry.revoke_controller(DEPLOYER, BOB)
    with pytest.raises(MissingRole):
        registry.set_expiration(BOB, a, START + 300)


def test_only_admin_grants_controller(registry, state):
    with pytest.raises(MissingRole):
        registry.grant_controller(ALICE, ALICE)
    registry.grant_controller(DEPLOYER, ALICE)
    registry.grant_controller(DEPLOYER, ALICE)
    assert len(state.events_named("RoleGranted")) == 1
    assert state.events_named("RoleGranted")[0].args["role"] == CONTROLLER_ROLE


def test_resolver_binding_requires_commit_reveal(registry, clock, state):
    node = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 10_000)
    resolver = "0x" + "77" * 20
    secret = b"s" * 32
    c = registry.make_resolver_commitment(node, resolver, ALICE, secret)
    registry.commit(ALICE, c)
    clock.advance(60)
    registry.set_resolver(ALICE, node, resolver, secret)

    assert registry.resolver(node) == resolver
    info = registry.get_resolver_info(resolver)
    assert info.name == "alice.ecs.eth"
    assert info.label == "alice"
    assert info.updated_at == START + 60
    assert state.events_named("ResolverSet")[-1].args == {"node": node, "resolver": resolver}


def test_resolver_reveal_by_unauthorized_caller_restores_commitment(registry, clock):
    node = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 10_000)
    resolver = "0x" + "77" * 20
    secret = b"s" * 32
    c = registry.make_resolver_commitment(node, resolver, BOB, secret)
    registry.commit(BOB, c)
    clock.advance(60)
    with pytest.raises(Unauthorized):
        registry.set_resolver(BOB, node, resolver, secret)
    # the failed call rolled back the consumption
    assert registry.commitments.committed_at(c) == START


def test_bind_resolver_and_unbind(registry):
    node = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 10_000)
    resolver = "0x" + "77" * 20
    with pytest.raises(MissingRole):
        registry.bind_resolver(ALICE, node, resolver)
    registry.grant_controller(DEPLOYER, BOB)
    registry.bind_resolver(BOB, node, resolver)
    assert registry.resolver(node) == resolver
    registry.bind_resolver(BOB, node, None)
    assert registry.resolver(node) is None


def test_binding_requires_active_namespace(registry, clock):
    node = registry.set_subname_owner(DEPLOYER, "alice", "ecs.eth", ALICE, START + 10)
    registry.grant_controller(DEPLOYER, BOB)
    clock.advance(10)
    with pytest.raises(NamespaceExpired):
        registry.bind_resolver(BOB, node, "0x" + "77" * 20)
