from __future__ import annotations

import asyncio

import pytest

from nameservice.errors import Unauthorized
from nameservice.gateway import MemoryGateway
from nameservice.resolvers import (
    CredentialResolver,
    GatewayRequest,
    GatewayTextResolver,
    Immediate,
    Pending,
    StarsResolver,
    TextResolver,
)
from nameservice.resolvers.base import split_key
from nameservice.resolvers.gateway import read_program, record_slot

from .conftest import ALICE, BOB, CAROL, DEPLOYER

IDENT = b"\x04abcd\x011\x00"
TARGET = "0x" + "7a" * 20


def test_split_key():
    assert split_key("a.b.c") == ("a.b.c", [])
    assert split_key("a.b.c:1:g") == ("a.b.c", ["1", "g"])
    assert split_key("a.b.c:") == ("a.b.c", [""])


def test_text_resolver_owner_and_writers(state):
    r = TextResolver(state, DEPLOYER)
    assert isinstance(r, CredentialResolver)
    r.set_text(DEPLOYER, IDENT, "avatar", "https://x/y.png")
    assert r.credential(IDENT, "avatar") == "https://x/y.png"
    assert r.resolve(IDENT, "avatar") == Immediate("https://x/y.png")
    assert r.credential(IDENT, "missing") == ""

    with pytest.raises(Unauthorized):
        r.set_text(ALICE, IDENT, "avatar", "spoof")
    with pytest.raises(Unauthorized):
        r.set_writer(ALICE, ALICE, True)
    r.set_writer(DEPLOYER, ALICE, True)
    r.set_text(ALICE, IDENT, "avatar", "")
    assert r.credential(IDENT, "avatar") == ""


def test_text_records_are_per_identifier(state):
    r = TextResolver(state, DEPLOYER)
    r.set_text(DEPLOYER, IDENT, "k", "one")
    assert r.credential(b"\x04dcba\x011\x00", "k") == ""


def test_stars_one_per_account(state):
    r = StarsResolver(state, DEPLOYER)
    key = "eth.ecs.name-stars.stars:vitalik.eth"
    assert r.credential(IDENT, key) == "0"
    assert r.star(ALICE, "vitalik.eth") is True
    assert r.star(ALICE, "vitalik.eth") is False
    assert r.star(BOB, "vitalik.eth") is True
    assert r.credential(IDENT, key) == "2"
    assert r.unstar(ALICE, "vitalik.eth") is True
    assert r.unstar(CAROL, "vitalik.eth") is False
    assert r.credential(IDENT, key) == "1"
    assert r.has_starred(BOB, "vitalik.eth")


@pytest.mark.parametrize("key", ["eth.ecs.name-stars.stars", "eth.ecs.name-stars.stars:", "other:vitalik.eth", "eth.ecs.name-stars.stars:a:b"])
def test_stars_unmatched_keys(state, key):
    r = StarsResolver(state, DEPLOYER)
    r.star(ALICE, "vitalik.eth")
    assert r.credential(IDENT, key) == ""


def test_resolver_info_is_served_by_every_kind(state):
    for r in (TextResolver(state, DEPLOYER), StarsResolver(state, DEPLOYER)):
        info = r.credential(IDENT, "resolver-info")
        assert f"kind: {r.kind}" in info
        assert f"owner: {DEPLOYER}" in info
    g = GatewayTextResolver(state, DEPLOYER, target=TARGET)
    res = g.resolve(IDENT, "resolver-info")
    assert isinstance(res, Immediate)
    assert f"target: {TARGET}" in res.value


def test_same_kind_and_owner_need_explicit_address(state):
    TextResolver(state, DEPLOYER)
    with pytest.raises(ValueError):
        TextResolver(state, DEPLOYER)
    TextResolver(state, DEPLOYER, address="0x" + "12" * 20)


def test_gateway_resolver_round_trip(state):
    g = GatewayTextResolver(state, DEPLOYER, target=TARGET)
    res = g.resolve(IDENT, "avatar")
    assert isinstance(res, Pending)
    assert res.request.target == TARGET
    assert res.request.program == read_program(record_slot(IDENT, "avatar"))

    gw = MemoryGateway({TARGET: {record_slot(IDENT, "avatar"): b"ipfs://cid"}})
    values, context = asyncio.run(gw.execute(res.request))
    assert res.resume(values, context) == Immediate("ipfs://cid")
    assert res.resume([b""]) == Immediate("")
    with pytest.raises(TypeError):
        g.credential(IDENT, "avatar")


def test_pending_failure_reraises_by_default():
    req = GatewayRequest(target=TARGET, program=b"")
    p = Pending(req, lambda values, ctx: Immediate("ok"))
    err = RuntimeError("gateway down")
    with pytest.raises(RuntimeError) as ei:
        p.fail(err)
    assert ei.value is err

    handled = Pending(req, lambda values, ctx: Immediate("ok"), lambda exc: Immediate(f"failed: {exc}"))
    assert handled.fail(err) == Immediate("failed: gateway down")


def test_memory_gateway_rejects_unknown_programs():
    gw = MemoryGateway()
    with pytest.raises(ValueError):
        asyncio.run(gw.execute(GatewayRequest(target=TARGET, program=b"\xa0")))
