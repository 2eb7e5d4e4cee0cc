# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Commit–reveal registrar.

Flow
----
1. ``c = create_commitment(label, owner, resolver, duration, secret)`` (off-line)
2. ``commit(caller, c)``
3. wait at least ``min_commitment_age`` seconds
4. ``register(caller, label, owner, resolver, duration, secret, value=...)``

Commitment
----------
C = keccak256( tag || labelhash(label) || owner20 || resolver20 || u64_be(duration) || secret )

``resolver=None`` commits to the zero address and registers without a
binding. The label stays hidden until the reveal, so an observer of step 2
cannot claim the name first.

On reveal the commitment is consumed *before* label, duration and payment are
validated; any failure rolls the whole call back, commitment included.
"""

from __future__ import annotations

from typing import Optional

from ..config import NameServiceConfig
from ..constants import DOMAIN_REGISTER_COMMIT
from ..logging import get_logger
from ..registry import CommitmentBook, NamespaceRegistry, validate_secret
from ..state import State
from ..types import RegistrationReceipt
from ..utils.bytes import address_bytes, is_zero_address, normalize_address, u64_be
from ..utils.hash import keccak256_concat, labelhash
from .controller import BaseRegistrar
from .pricing import validate_duration, validate_label

log = get_logger(__name__)


def build_register_commitment(
    label: str,
    owner: str,
    resolver: Optional[str],
    duration: int,
    secret: bytes,
) -> bytes:
    if duration < 0:
        raise ValueError("duration must be non-negative")
    return keccak256_concat(
        labelhash(label),
        address_bytes(owner),
        address_bytes(resolver),
        u64_be(duration),
        validate_secret(secret),
        domain=DOMAIN_REGISTER_COMMIT,
    )


class CommitRevealRegistrar(BaseRegistrar):
    kind = "commit-reveal-registrar"

    def __init__(
        self,
        state: State,
        registry: NamespaceRegistry,
        owner: str,
        *,
        config: Optional[NameServiceConfig] = None,
        address: Optional[str] = None,
    ) -> None:
        super().__init__(state, registry, owner, config=config, address=address)
        self.commitments = CommitmentBook(
            state,
            DOMAIN_REGISTER_COMMIT + address_bytes(self.address),
            min_age=self.config.min_commitment_age,
        )

    def create_commitment(
        self,
        label: str,
        owner: str,
        resolver: Optional[str],
        duration: int,
        secret: bytes,
    ) -> bytes:
        return build_register_commitment(label, owner, resolver, duration, secret)

    def commit(self, caller: str, commitment: bytes) -> int:
        return self.commitments.commit(caller, commitment)

    def register(
        self,
        caller: str,
        label: str,
        owner: str,
        resolver: Optional[str],
        duration: int,
        secret: bytes,
        *,
        value: int,
    ) -> RegistrationReceipt:
        owner = normalize_address(owner)
        commitment = build_register_commitment(label, owner, resolver, duration, secret)
        with self.state.transaction():
            self.commitments.consume(commitment)
            validate_label(label, self.config)
            validate_duration(duration, self.config)
            fee, refund = self._collect(duration, value)
            node = self._claim(label, owner, duration)
            if resolver is not None and not is_zero_address(resolver):
                self.registry.bind_resolver(self.address, node, resolver)
            log.debug("commitment_revealed", commitment=commitment, sender=normalize_address(caller))
            return self._receipt(node, label, owner, fee, refund)


__all__ = ["CommitRevealRegistrar", "build_register_commitment"]
