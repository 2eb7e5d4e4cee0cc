# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Commitment book for the commit–reveal protocol.

A commitment is an opaque 32-byte hash recorded with the time it was made.
The matching reveal *consumes* it, at which point the record is deleted.

Timing
------
reveal allowed  ⇔  now - committed_at >= min_age

Commitments are keyed per *scope* (registrar registrations, resolver
bindings, ...) so that two protocols can never consume each other's entries.

Secrets
-------
Builders in this package bind a caller-chosen secret into the hash. The secret
is validated the same way everywhere: bytes, between ``MIN_SECRET_LEN`` and
``MAX_SECRET_LEN`` long.
"""

from __future__ import annotations

from typing import Optional

from ..constants import HASH_LEN, MIN_COMMITMENT_AGE
from ..errors import CommitmentExists, CommitmentNotFound, CommitmentTooNew
from ..logging import get_logger
from ..metrics import METRICS
from ..state import State
from ..utils.bytes import normalize_address

log = get_logger(__name__)

MIN_SECRET_LEN = 8
MAX_SECRET_LEN = 128


def validate_secret(secret: bytes) -> bytes:
    if not isinstance(secret, (bytes, bytearray)):
        raise TypeError("secret must be bytes")
    if not (MIN_SECRET_LEN <= len(secret) <= MAX_SECRET_LEN):
        raise ValueError(f"secret length must be in [{MIN_SECRET_LEN}, {MAX_SECRET_LEN}] bytes")
    return bytes(secret)


def _validate_commitment(commitment: bytes) -> bytes:
    if not isinstance(commitment, (bytes, bytearray)):
        raise TypeError("commitment must be bytes")
    if len(commitment) != HASH_LEN:
        raise ValueError(f"commitment must be {HASH_LEN} bytes")
    return bytes(commitment)


class CommitmentBook:
    """Time-stamped, single-use commitments under one scope."""

    def __init__(self, state: State, scope: bytes, *, min_age: int = MIN_COMMITMENT_AGE) -> None:
        if min_age < 0:
            raise ValueError("min_age must be non-negative")
        self.state = state
        self.scope = bytes(scope)
        self.min_age = int(min_age)

    def committed_at(self, commitment: bytes) -> Optional[int]:
        return self.state.tables.get_commitment(self.scope, _validate_commitment(commitment))

    def commit(self, caller: str, commitment: bytes) -> int:
        """
        Record *commitment* at the current time and return that timestamp.

        Re-committing a key that has not been consumed yet fails with
        :class:`CommitmentExists`; otherwise the age clock could be reset by
        anyone who observed the hash.
        """
        commitment = _validate_commitment(commitment)
        now = self.state.now()
        with self.state.transaction():
            if self.state.tables.get_commitment(self.scope, commitment) is not None:
                METRICS.record_commitment("duplicate")
                raise CommitmentExists(commitment)
            self.state.tables.put_commitment(self.scope, commitment, now)
            self.state.emit(
                "CommitmentMade",
                scope=self.scope,
                commitment=commitment,
                sender=normalize_address(caller),
            )
        self.state.after_commit(lambda: METRICS.record_commitment("accepted"))
        log.info("commitment_made", scope=self.scope, commitment=commitment, at=now)
        return now

    def consume(self, commitment: bytes) -> int:
        """
        Check *commitment* is old enough and delete it. Returns the time it was
        made.

        Must run inside the caller's transaction so a later failure in the
        same operation restores the commitment.
        """
        commitment = _validate_commitment(commitment)
        now = self.state.now()
        committed_at = self.state.tables.get_commitment(self.scope, commitment)
        if committed_at is None:
            METRICS.record_reveal("not_found")
            raise CommitmentNotFound(commitment)
        if now - committed_at < self.min_age:
            METRICS.record_reveal("too_new")
            raise CommitmentTooNew(commitment, committed_at, now, self.min_age)
        self.state.tables.del_commitment(self.scope, commitment)
        self.state.emit("CommitmentConsumed", scope=self.scope, commitment=commitment)
        self.state.after_commit(lambda: METRICS.record_reveal("accepted"))
        log.debug("commitment_consumed", scope=self.scope, commitment=commitment)
        return committed_at


__all__ = ["CommitmentBook", "validate_secret", "MIN_SECRET_LEN", "MAX_SECRET_LEN"]
