# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Resolver whose records live in a remote store read through the Gateway
Executor.

Every key other than ``resolver-info`` answers with :class:`Pending`. The
program asks the gateway for one storage slot,

    slot = keccak256(identifier || key)

and the success continuation decodes the first returned value as UTF-8
(missing or empty value -> ``""``).
"""

from __future__ import annotations

from typing import List, Optional

import cbor2

from ..constants import RESOLVER_INFO_KEY
from ..state import State
from ..utils.bytes import normalize_address
from ..utils.hash import keccak256
from .base import BaseResolver, GatewayRequest, Immediate, Pending, Resolution


def record_slot(identifier: bytes, key: str) -> bytes:
    return keccak256(bytes(identifier) + key.encode("utf-8"))


def read_program(*slots: bytes) -> bytes:
    return cbor2.dumps({"get": list(slots)}, canonical=True)


class GatewayTextResolver(BaseResolver):
    kind = "gateway-text"

    def __init__(self, state: State, owner: str, *, target: str, address: Optional[str] = None) -> None:
        super().__init__(state, owner, address=address)
        self.target = normalize_address(target)

    def resolver_info(self) -> str:
        return f"{super().resolver_info()}\ntarget: {self.target}"

    def resolve(self, identifier: bytes, key: str) -> Resolution:
        if key == RESOLVER_INFO_KEY:
            return Immediate(self.resolver_info())
        request = GatewayRequest(
            target=self.target,
            program=read_program(record_slot(identifier, key)),
            context=key.encode("utf-8"),
        )
        return Pending(request, self._on_values)

    def _on_values(self, values: List[bytes], context: bytes) -> Resolution:
        if not values or not values[0]:
            return Immediate("")
        return Immediate(bytes(values[0]).decode("utf-8"))

    def _credential(self, identifier: bytes, key: str) -> str:
        raise TypeError(f"{self.kind} resolves through the gateway; use resolve()")


__all__ = ["GatewayTextResolver", "record_slot", "read_program"]
