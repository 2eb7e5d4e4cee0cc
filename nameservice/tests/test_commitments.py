from __future__ import annotations

import pytest

from nameservice.errors import CommitmentExists, CommitmentNotFound, CommitmentTooNew
from nameservice.registry import CommitmentBook, validate_secret

from .conftest import ALICE, START

C = b"\xcc" * 32


@pytest.fixture
def book(state):
    return CommitmentBook(state, b"test-scope", min_age=60)


def test_commit_records_time_and_event(book, state):
    assert book.commit(ALICE, C) == START
    assert book.committed_at(C) == START
    ev = state.events_named("CommitmentMade")[-1]
    assert ev.args["commitment"] == C and ev.args["sender"] == ALICE


def test_recommit_of_pending_commitment_fails(book, clock):
    book.commit(ALICE, C)
    clock.advance(30)
    with pytest.raises(CommitmentExists):
        book.commit(ALICE, C)
    assert book.committed_at(C) == START


@pytest.mark.parametrize("age,ok", [(0, False), (59, False), (60, True), (61, True)])
def test_minimum_age_boundary(book, clock, state, age, ok):
    book.commit(ALICE, C)
    clock.advance(age)
    if ok:
        with state.transaction():
            assert book.consume(C) == START
        assert book.committed_at(C) is None
    else:
        with pytest.raises(CommitmentTooNew) as ei:
            book.consume(C)
        assert ei.value.committed_at == START
        assert ei.value.now == START + age


def test_consume_is_single_use(book, clock):
    book.commit(ALICE, C)
    clock.advance(60)
    book.consume(C)
    with pytest.raises(CommitmentNotFound):
        book.consume(C)


def test_scopes_are_independent(state, clock):
    a = CommitmentBook(state, b"a")
    b = CommitmentBook(state, b"b")
    a.commit(ALICE, C)
    clock.advance(60)
    with pytest.raises(CommitmentNotFound):
        b.consume(C)
    a.consume(C)


def test_input_validation(book):
    with pytest.raises(ValueError):
        book.commit(ALICE, b"\x00" * 31)
    with pytest.raises(TypeError):
        validate_secret("secret")
    with pytest.raises(ValueError):
        validate_secret(b"short")
    assert validate_secret(bytearray(b"12345678")) == b"12345678"
