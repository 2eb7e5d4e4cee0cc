# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Resolver capability interface and the two-phase result type.

A resolver answers ``resolve(identifier, key)`` with either

- :class:`Immediate`: the credential value, available now, or
- :class:`Pending`:   a :class:`GatewayRequest` plus the continuation that
  turns the Gateway Executor's answer into the next result.

``Pending.resume`` feeds gateway output to the success continuation.
``Pending.fail`` hands a gateway error to the failure continuation; without
one the error is re-raised unchanged.

Synchronous resolvers subclass :class:`BaseResolver` and implement
``_credential``; the reserved ``resolver-info`` key is answered for them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Tuple, Union, runtime_checkable

from ..constants import PARAM_SEPARATOR, RESOLVER_INFO_KEY
from ..state import State
from ..utils.bytes import normalize_address
from ..utils.hash import derive_address


@dataclass(frozen=True)
class Immediate:
    value: str


@dataclass(frozen=True)
class GatewayRequest:
    """
    target:  reference of the remote store the program reads
    program: opaque query program understood by the Gateway Executor
    context: continuation data handed back alongside the values
    """

    target: str
    program: bytes
    context: bytes = b""


@dataclass(frozen=True)
class Pending:
    request: GatewayRequest
    on_success: Callable[[List[bytes], bytes], "Resolution"]
    on_failure: Optional[Callable[[BaseException], "Resolution"]] = None

    def resume(self, values: List[bytes], context: Optional[bytes] = None) -> "Resolution":
        return self.on_success(list(values), self.request.context if context is None else context)

    def fail(self, exc: BaseException) -> "Resolution":
        if self.on_failure is None:
            raise exc
        return self.on_failure(exc)


Resolution = Union[Immediate, Pending]


@runtime_checkable
class CredentialResolver(Protocol):
    address: str

    def resolve(self, identifier: bytes, key: str) -> Resolution: ...


class BaseResolver:
    """
    Common plumbing: owner, address, private storage bucket and
    registration in the state's resolver directory.
    """

    kind = "resolver"

    def __init__(self, state: State, owner: str, *, address: Optional[str] = None) -> None:
        self.state = state
        self.owner = normalize_address(owner)
        self.address = normalize_address(address or derive_address(f"{self.kind}:{self.owner}"))
        self.store = state.tables.component(self.address)
        state.deploy(self)

    def resolver_info(self) -> str:
        return f"kind: {self.kind}\naddress: {self.address}\nowner: {self.owner}"

    def credential(self, identifier: bytes, key: str) -> str:
        if key == RESOLVER_INFO_KEY:
            return self.resolver_info()
        return self._credential(identifier, key)

    def resolve(self, identifier: bytes, key: str) -> Resolution:
        return Immediate(self.credential(identifier, key))

    def _credential(self, identifier: bytes, key: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self.address}, owner={self.owner})"


def split_key(key: str) -> Tuple[str, List[str]]:
    """``"base:p1:p2"`` -> ``("base", ["p1", "p2"])``"""
    if not isinstance(key, str):
        raise TypeError("key must be str")
    base, *params = key.split(PARAM_SEPARATOR)
    return base, params


__all__ = [
    "Immediate",
    "GatewayRequest",
    "Pending",
    "Resolution",
    "CredentialResolver",
    "BaseResolver",
    "split_key",
]
