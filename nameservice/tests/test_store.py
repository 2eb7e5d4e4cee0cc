from __future__ import annotations

import pytest

from nameservice.state import State
from nameservice.store.memory import MemoryKeyValue
from nameservice.store.sqlite import SQLiteKeyValue
from nameservice.store.tables import Bucket, Tables
from nameservice.types import NamespaceRecord
from nameservice.utils.time import ManualClock


@pytest.fixture(params=["memory", "sqlite"])
def kv(request, tmp_path):
    if request.param == "memory":
        yield MemoryKeyValue()
    else:
        store = SQLiteKeyValue(str(tmp_path / "ns.db"))
        yield store
        store.close()


def test_basic_crud(kv):
    assert kv.get(b"k") is None
    kv.put(b"k", b"v")
    assert kv.get(b"k") == b"v"
    assert kv.has(b"k")
    kv.delete(b"k")
    assert not kv.has(b"k")


def test_iter_prefix_is_sorted_and_bounded(kv):
    for k in (b"a\x02", b"a\x01", b"b\x00", b"a\xff"):
        kv.put(k, k)
    assert [k for k, _ in kv.iter_prefix(b"a")] == [b"a\x01", b"a\x02", b"a\xff"]


def test_transaction_rolls_back_on_error(kv):
    kv.put(b"keep", b"1")
    with pytest.raises(RuntimeError):
        with kv.transaction():
            kv.put(b"keep", b"2")
            kv.put(b"new", b"x")
            raise RuntimeError("boom")
    assert kv.get(b"keep") == b"1"
    assert kv.get(b"new") is None


def test_nested_transaction_rolls_back_inner_only(kv):
    with kv.transaction():
        kv.put(b"outer", b"1")
        with pytest.raises(ValueError):
            with kv.transaction():
                kv.put(b"inner", b"1")
                raise ValueError("inner")
        kv.put(b"after", b"1")
    assert kv.get(b"outer") == b"1"
    assert kv.get(b"after") == b"1"
    assert kv.get(b"inner") is None


def test_sqlite_persists_across_connections(tmp_path):
    path = str(tmp_path / "nested" / "ns.db")
    with SQLiteKeyValue(path) as kv:
        with kv.transaction():
            kv.put(b"k", b"v")
    with SQLiteKeyValue(path) as kv:
        assert kv.get(b"k") == b"v"


def test_bucket_parts_do_not_collide():
    kv = MemoryKeyValue()
    b = Bucket(kv, b"\x10")
    b.put(b"1", b"ab", b"c")
    b.put(b"2", b"a", b"bc")
    assert b.get(b"ab", b"c") == b"1"
    assert b.get(b"a", b"bc") == b"2"
    with pytest.raises(TypeError):
        b.key(True)


def test_tables_namespace_roundtrip_and_commitment_zero_timestamp():
    t = Tables(MemoryKeyValue())
    node = b"\x01" * 32
    rec = NamespaceRecord(owner="0x" + "ab" * 20, expiration=(1 << 64) - 1, protected=True, name=b"\x03foo\x00")
    t.put_namespace(node, rec)
    assert t.get_namespace(node) == rec
    # a commitment made at t=0 is still "present"
    t.put_commitment(b"scope", b"\x02" * 32, 0)
    assert t.get_commitment(b"scope", b"\x02" * 32) == 0
    assert t.get_commitment(b"other", b"\x02" * 32) is None


def test_state_transaction_discards_events_on_failure():
    state = State(MemoryKeyValue(), ManualClock(5))
    state.emit("Kept")
    with pytest.raises(KeyError):
        with state.transaction():
            state.emit("Dropped")
            state.kv.put(b"x", b"y")
            raise KeyError("x")
    assert [e.name for e in state.events] == ["Kept"]
    assert state.kv.get(b"x") is None
    assert state.now() == 5


def test_state_deploy_rejects_address_reuse():
    class Component:
        def __init__(self, address):
            self.address = address

    state = State()
    a = Component("0x" + "11" * 20)
    state.deploy(a)
    state.deploy(a)
    assert state.component_at("0x" + "11" * 20) is a
    with pytest.raises(ValueError):
        state.deploy(Component("0x" + "11" * 20))
    assert state.component_at(None) is None
