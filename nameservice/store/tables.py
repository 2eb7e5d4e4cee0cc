"""
Logical tables over a raw byte-oriented KeyValue backend.

Buckets
-------
- NAMESPACES:  node -> NamespaceRecord
- APPROVALS:   (node, owner, operator) -> flag
- COMMITMENTS: (scope, commitment) -> committed_at
- RESOLVERS:   node -> resolver address
- RESOLVER_INFO: resolver address -> ResolverInfo
- ROLES:       (role, account) -> flag
- COMPONENT:   (component address, ...) -> per-resolver state

Keys are constructed deterministically::

    key = PREFIX || concat(u32_be(len(part)) || part for part in parts)

so no two part tuples collide. Structured values are canonical CBOR.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

import cbor2

from ..types import NamespaceRecord, ResolverInfo
from ..utils.bytes import address_bytes, normalize_address, u32_be, u64_be
from . import KeyValue

Part = Union[bytes, bytearray, str, int]

# --- Bucket prefix constants (single-byte, domain-separated) -----------------

NAMESPACES_PREFIX    = b"\x01"
APPROVALS_PREFIX     = b"\x02"
COMMITMENTS_PREFIX   = b"\x03"
RESOLVERS_PREFIX     = b"\x04"
RESOLVER_INFO_PREFIX = b"\x05"
ROLES_PREFIX         = b"\x06"
COMPONENT_PREFIX     = b"\x10"

_FLAG = b"\x01"


def _part(p: Part) -> bytes:
    if isinstance(p, (bytes, bytearray)):
        return bytes(p)
    if isinstance(p, bool):
        raise TypeError("bool is not a key part")
    if isinstance(p, int):
        return u64_be(p)
    if isinstance(p, str):
        return p.encode("utf-8")
    raise TypeError(f"unsupported key part: {type(p)!r}")


def _k(prefix: bytes, *parts: Part) -> bytes:
    """Prefix + 4-byte len for each part to avoid accidental collisions."""
    return prefix + b"".join(u32_be(len(b)) + b for b in map(_part, parts))


def dumps(obj: Any) -> bytes:
    return cbor2.dumps(obj, canonical=True)


def loads(data: bytes) -> Any:
    return cbor2.loads(data)


@dataclass(frozen=True)
class Bucket:
    """A prefixed view with CBOR helpers."""

    kv: KeyValue
    prefix: bytes

    def key(self, *parts: Part) -> bytes:
        return _k(self.prefix, *parts)

    def get(self, *parts: Part) -> Optional[bytes]:
        return self.kv.get(self.key(*parts))

    def put(self, value: bytes, *parts: Part) -> None:
        self.kv.put(self.key(*parts), value)

    def delete(self, *parts: Part) -> None:
        self.kv.delete(self.key(*parts))

    def has(self, *parts: Part) -> bool:
        return self.kv.has(self.key(*parts))

    def get_obj(self, *parts: Part, default: Any = None) -> Any:
        raw = self.get(*parts)
        return default if raw is None else loads(raw)

    def put_obj(self, value: Any, *parts: Part) -> None:
        self.put(dumps(value), *parts)

    def get_flag(self, *parts: Part) -> bool:
        return self.get(*parts) == _FLAG

    def set_flag(self, value: bool, *parts: Part) -> None:
        if value:
            self.put(_FLAG, *parts)
        else:
            self.delete(*parts)


@dataclass(frozen=True)
class Tables:
    """
    Namespaced view over a byte KV store used by the name service.

    Notes:
      - Addresses are stored in their raw 20-byte form.
      - Iteration order is key order; nothing in the protocol depends on it.
    """

    kv: KeyValue

    def _b(self, prefix: bytes) -> Bucket:
        return Bucket(self.kv, prefix)

    # --- Namespaces ----------------------------------------------------------

    def get_namespace(self, node: bytes) -> Optional[NamespaceRecord]:
        obj = self._b(NAMESPACES_PREFIX).get_obj(node)
        return None if obj is None else NamespaceRecord.from_obj(obj)

    def put_namespace(self, node: bytes, record: NamespaceRecord) -> None:
        self._b(NAMESPACES_PREFIX).put_obj(record.to_obj(), node)

    # --- Operator approvals --------------------------------------------------

    def is_approved(self, node: bytes, owner: str, operator: str) -> bool:
        return self._b(APPROVALS_PREFIX).get_flag(
            node, address_bytes(owner), address_bytes(operator)
        )

    def set_approved(self, node: bytes, owner: str, operator: str, approved: bool) -> None:
        self._b(APPROVALS_PREFIX).set_flag(
            approved, node, address_bytes(owner), address_bytes(operator)
        )

    # --- Commitments ---------------------------------------------------------

    def get_commitment(self, scope: bytes, commitment: bytes) -> Optional[int]:
        return self._b(COMMITMENTS_PREFIX).get_obj(scope, commitment)

    def put_commitment(self, scope: bytes, commitment: bytes, committed_at: int) -> None:
        self._b(COMMITMENTS_PREFIX).put_obj(int(committed_at), scope, commitment)

    def del_commitment(self, scope: bytes, commitment: bytes) -> None:
        self._b(COMMITMENTS_PREFIX).delete(scope, commitment)

    # --- Resolver bindings ---------------------------------------------------

    def get_resolver(self, node: bytes) -> Optional[str]:
        raw = self._b(RESOLVERS_PREFIX).get(node)
        return None if raw is None else normalize_address(raw)

    def set_resolver(self, node: bytes, resolver: Optional[str]) -> None:
        if resolver is None:
            self._b(RESOLVERS_PREFIX).delete(node)
        else:
            self._b(RESOLVERS_PREFIX).put(address_bytes(resolver), node)

    def get_resolver_info(self, resolver: str) -> Optional[ResolverInfo]:
        obj = self._b(RESOLVER_INFO_PREFIX).get_obj(address_bytes(resolver))
        return None if obj is None else ResolverInfo.from_obj(obj)

    def put_resolver_info(self, resolver: str, info: ResolverInfo) -> None:
        self._b(RESOLVER_INFO_PREFIX).put_obj(info.to_obj(), address_bytes(resolver))

    # --- Roles ---------------------------------------------------------------

    def has_role(self, role: bytes, account: str) -> bool:
        return self._b(ROLES_PREFIX).get_flag(role, address_bytes(account))

    def set_role(self, role: bytes, account: str, member: bool) -> None:
        self._b(ROLES_PREFIX).set_flag(member, role, address_bytes(account))

    # --- Per-component state -------------------------------------------------

    def component(self, address: str) -> Bucket:
        """Private bucket for one resolver / registrar instance."""
        return Bucket(self.kv, _k(COMPONENT_PREFIX, address_bytes(address)))


__all__ = [
    "Bucket",
    "Tables",
    "dumps",
    "loads",
    "NAMESPACES_PREFIX",
    "APPROVALS_PREFIX",
    "COMMITMENTS_PREFIX",
    "RESOLVERS_PREFIX",
    "RESOLVER_INFO_PREFIX",
    "ROLES_PREFIX",
    "COMPONENT_PREFIX",
]
