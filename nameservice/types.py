# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Core typed records shared across the registry, registrars, resolvers and
tests. Kept free of heavy dependencies to avoid import cycles.

Types provided:
  • NamespaceRecord:    stored owner / expiration / protection / encoded name
  • NamespaceInfo:      view returned by ``get_namespace``
  • ResolverInfo:       reverse lookup: resolver -> namespace it serves
  • RegistrationReceipt: outcome of a paid register / renew call
  • Event:              one entry of the append-only event log
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from .constants import HASH_LEN


def _require_len(name: str, b: bytes, n: int) -> None:
    if len(b) != n:
        raise ValueError(f"{name} must be exactly {n} bytes (got {len(b)})")


@dataclass(frozen=True, slots=True)
class NamespaceRecord:
    """
    Fields:
      owner:       lowercase 0x address
      expiration:  exclusive upper bound of validity (active iff now < expiration)
      protected:   blocks overwrites while active
      name:        canonical encoded name
    """

    owner: str
    expiration: int
    protected: bool
    name: bytes

    def __post_init__(self) -> None:
        if self.expiration < 0:
            raise ValueError("expiration must be non-negative")
        if not isinstance(self.name, (bytes, bytearray)):
            raise TypeError("name must be bytes")

    def is_active(self, now: int) -> bool:
        return now < self.expiration

    def to_obj(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "expiration": self.expiration,
            "protected": self.protected,
            "name": bytes(self.name),
        }

    @classmethod
    def from_obj(cls, obj: Mapping[str, Any]) -> "NamespaceRecord":
        return cls(
            owner=str(obj["owner"]),
            expiration=int(obj["expiration"]),
            protected=bool(obj["protected"]),
            name=bytes(obj["name"]),
        )


@dataclass(frozen=True, slots=True)
class NamespaceInfo:
    expiration: int
    name: str


@dataclass(frozen=True, slots=True)
class ResolverInfo:
    """Namespace a resolver was most recently bound to, and when."""

    name: str
    updated_at: int

    @property
    def label(self) -> str:
        return self.name.split(".", 1)[0]

    def to_obj(self) -> Dict[str, Any]:
        return {"name": self.name, "updated_at": self.updated_at}

    @classmethod
    def from_obj(cls, obj: Mapping[str, Any]) -> "ResolverInfo":
        return cls(name=str(obj["name"]), updated_at=int(obj["updated_at"]))


@dataclass(frozen=True, slots=True)
class RegistrationReceipt:
    node: bytes
    name: str
    owner: str
    expiration: int
    fee: int
    refund: int

    def __post_init__(self) -> None:
        _require_len("node", self.node, HASH_LEN)
        if self.fee < 0 or self.refund < 0:
            raise ValueError("fee and refund must be non-negative")


@dataclass(frozen=True)
class Event:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


__all__ = [
    "NamespaceRecord",
    "NamespaceInfo",
    "ResolverInfo",
    "RegistrationReceipt",
    "Event",
]
