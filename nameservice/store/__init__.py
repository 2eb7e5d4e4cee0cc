"""
nameservice.store
=================

Storage abstractions for the name service (namespace table, commitments,
approvals, roles, resolver bindings and per-resolver state).

Backends are pluggable: :class:`~nameservice.store.memory.MemoryKeyValue`
for tests and simulations, :class:`~nameservice.store.sqlite.SQLiteKeyValue`
for persistence. Higher layers depend only on the :class:`KeyValue` protocol
defined here; :mod:`nameservice.store.tables` adds typed, namespaced access.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterable, Optional, Protocol, Tuple


class KeyValue(Protocol):
    """Minimal byte-oriented KV interface.

    Keys and values are raw bytes. Namespaces are handled by the caller via
    prefixed keys (see :mod:`nameservice.store.tables`).
    """

    def get(self, key: bytes) -> Optional[bytes]:
        """Return value for key, or None if missing."""
        ...

    def put(self, key: bytes, value: bytes) -> None:
        """Insert or replace key with value."""
        ...

    def delete(self, key: bytes) -> None:
        """Remove key if present (no-op if absent)."""
        ...

    def has(self, key: bytes) -> bool:
        """Return True if key exists."""
        ...

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        """Yield (key, value) pairs whose keys start with prefix, in key order."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """All-or-nothing scope; nests."""
        ...


__all__ = ["KeyValue"]
