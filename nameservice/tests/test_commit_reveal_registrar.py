from __future__ import annotations

import pytest

from nameservice import codec
from nameservice.config import NameServiceConfig
from nameservice.constants import DAY, NEVER_EXPIRES, YEAR
from nameservice.errors import (
    CommitmentExists,
    CommitmentNotFound,
    CommitmentTooNew,
    InsufficientFee,
    InvalidLabel,
)
from nameservice.registrar import CommitRevealRegistrar, build_register_commitment
from nameservice.registry import NamespaceRegistry
from nameservice.state import State
from nameservice.store.memory import MemoryKeyValue
from nameservice.utils.time import ManualClock

from .conftest import ALICE, BOB, DEPLOYER, START

SECRET = b"\x5e" * 32
RESOLVER = "0x" + "77" * 20


def test_alice_scenario_from_time_zero():
    clock = ManualClock(0)
    state = State(MemoryKeyValue(), clock)
    registry = NamespaceRegistry(state, DEPLOYER)
    registry.set_subname_owner(DEPLOYER, "tld", "", DEPLOYER, NEVER_EXPIRES)
    cfg = NameServiceConfig(base_domain="tld")
    registrar = CommitRevealRegistrar(state, registry, DEPLOYER, config=cfg)
    registry.set_approval_for_namespace(DEPLOYER, registrar.base_node, registrar.address, True)
    registry.grant_controller(DEPLOYER, registrar.address)

    duration = 365 * DAY
    price = registrar.price(duration)
    c = registrar.create_commitment("alice", ALICE, None, duration, SECRET)
    registrar.commit(ALICE, c)

    clock.set(59)
    with pytest.raises(CommitmentTooNew):
        registrar.register(ALICE, "alice", ALICE, None, duration, SECRET, value=price)

    clock.set(61)
    receipt = registrar.register(ALICE, "alice", ALICE, None, duration, SECRET, value=price)
    node = codec.namehash_name("alice.tld")
    assert receipt.node == node
    assert registry.owner(node) == ALICE
    assert registry.expiration(node) == 61 + 365 * DAY

    # second reveal with the same parameters: already consumed
    with pytest.raises(CommitmentNotFound):
        registrar.register(ALICE, "alice", ALICE, None, duration, SECRET, value=price)


def test_reveal_without_commit_fails(cr_registrar):
    with pytest.raises(CommitmentNotFound):
        cr_registrar.register(ALICE, "alice", ALICE, None, YEAR, SECRET, value=YEAR)


def test_commitment_binds_every_parameter():
    base = build_register_commitment("alice", ALICE, RESOLVER, YEAR, SECRET)
    assert base != build_register_commitment("alicf", ALICE, RESOLVER, YEAR, SECRET)
    assert base != build_register_commitment("alice", BOB, RESOLVER, YEAR, SECRET)
    assert base != build_register_commitment("alice", ALICE, None, YEAR, SECRET)
    assert base != build_register_commitment("alice", ALICE, RESOLVER, YEAR + 1, SECRET)
    assert base != build_register_commitment("alice", ALICE, RESOLVER, YEAR, b"\x00" * 32)
    # resolver/owner comparisons are case-insensitive
    assert base == build_register_commitment("alice", ALICE.upper().replace("0X", "0x"), RESOLVER, YEAR, SECRET)


def test_register_binds_resolver_and_records_info(cr_registrar, registry, clock):
    c = cr_registrar.create_commitment("alice", ALICE, RESOLVER, YEAR, SECRET)
    cr_registrar.commit(BOB, c)
    clock.advance(60)
    receipt = cr_registrar.register(BOB, "alice", ALICE, RESOLVER, YEAR, SECRET, value=YEAR + 1)
    assert receipt.owner == ALICE
    assert receipt.refund == 1
    assert registry.resolver(receipt.node) == RESOLVER
    info = registry.get_resolver_info(RESOLVER)
    assert info.name == "alice.ecs.eth"
    assert info.updated_at == START + 60


def test_revealed_params_must_match_commitment(cr_registrar, clock):
    c = cr_registrar.create_commitment("alice", ALICE, None, YEAR, SECRET)
    cr_registrar.commit(ALICE, c)
    clock.advance(60)
    with pytest.raises(CommitmentNotFound):
        cr_registrar.register(BOB, "alice", BOB, None, YEAR, SECRET, value=YEAR)


def test_failed_validation_after_consume_keeps_commitment(cr_registrar, clock):
    c = cr_registrar.create_commitment("alice", ALICE, None, YEAR, SECRET)
    cr_registrar.commit(ALICE, c)
    clock.advance(60)
    with pytest.raises(InsufficientFee):
        cr_registrar.register(ALICE, "alice", ALICE, None, YEAR, SECRET, value=YEAR - 1)
    assert cr_registrar.commitments.committed_at(c) == START
    cr_registrar.register(ALICE, "alice", ALICE, None, YEAR, SECRET, value=YEAR)


def test_invalid_label_is_only_detected_at_reveal(cr_registrar, clock):
    c = cr_registrar.create_commitment("NOPE", ALICE, None, YEAR, SECRET)
    cr_registrar.commit(ALICE, c)
    clock.advance(60)
    with pytest.raises(InvalidLabel):
        cr_registrar.register(ALICE, "NOPE", ALICE, None, YEAR, SECRET, value=YEAR)


def test_duplicate_commit_rejected(cr_registrar):
    c = cr_registrar.create_commitment("alice", ALICE, None, YEAR, SECRET)
    cr_registrar.commit(ALICE, c)
    with pytest.raises(CommitmentExists):
        cr_registrar.commit(BOB, c)


def test_registrars_do_not_share_commitments(cr_registrar, registry, state, clock):
    other = CommitRevealRegistrar(state, registry, DEPLOYER, address="0x" + "98" * 20)
    c = cr_registrar.create_commitment("alice", ALICE, None, YEAR, SECRET)
    cr_registrar.commit(ALICE, c)
    clock.advance(60)
    with pytest.raises(CommitmentNotFound):
        other.register(ALICE, "alice", ALICE, None, YEAR, SECRET, value=YEAR)
