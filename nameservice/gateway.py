# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Gateway Executor boundary.

An executor runs a resolver's opaque read program against the remote store
named by ``request.target`` and returns ``(values, context)``. Errors are
raised to the caller unchanged; the dispatcher routes them through the
pending resolution's failure continuation.

:class:`MemoryGateway` serves programs built by
:func:`nameservice.resolvers.gateway.read_program` from an in-process mapping
``target -> {slot: value}``. It can add latency or fail on demand, which is
what tests and local simulations need.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

import cbor2

from .logging import get_logger
from .resolvers.base import GatewayRequest
from .utils.bytes import normalize_address

log = get_logger(__name__)


class GatewayExecutor(Protocol):
    async def execute(self, request: GatewayRequest) -> Tuple[List[bytes], bytes]: ...


class MemoryGateway:
    def __init__(
        self,
        records: Optional[Mapping[str, Mapping[bytes, bytes]]] = None,
        *,
        delay: float = 0.0,
        error: Optional[BaseException] = None,
    ) -> None:
        self.records: Dict[str, Dict[bytes, bytes]] = {
            normalize_address(t): dict(slots) for t, slots in (records or {}).items()
        }
        self.delay = delay
        self.error = error
        self.calls: List[GatewayRequest] = []

    def put(self, target: str, slot: bytes, value: bytes) -> None:
        self.records.setdefault(normalize_address(target), {})[bytes(slot)] = bytes(value)

    async def execute(self, request: GatewayRequest) -> Tuple[List[bytes], bytes]:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        program = cbor2.loads(request.program)
        if not isinstance(program, dict) or not isinstance(program.get("get"), list):
            raise ValueError("unsupported gateway program")
        store = self.records.get(normalize_address(request.target), {})
        values = [store.get(bytes(slot), b"") for slot in program["get"]]
        log.debug("gateway_read", target=request.target, slots=len(values))
        return values, request.context


__all__ = ["GatewayExecutor", "MemoryGateway"]
