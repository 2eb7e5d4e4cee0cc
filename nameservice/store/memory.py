"""
In-memory KeyValue store.

A dict-backed implementation of :class:`nameservice.store.KeyValue` with
snapshot/rollback transactions. Each (possibly nested) transaction takes a
shallow copy of the table on entry and restores it if the block raises.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Generator, Iterable, List, Optional, Tuple


class MemoryKeyValue:
    def __init__(self) -> None:
        self._data: Dict[bytes, bytes] = {}
        self._snapshots: List[Dict[bytes, bytes]] = []

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(bytes(key))

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        self._data[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def has(self, key: bytes) -> bool:
        return bytes(key) in self._data

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        for k in sorted(k for k in self._data if k.startswith(prefix)):
            yield k, self._data[k]

    def __len__(self) -> int:
        return len(self._data)

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        self._snapshots.append(dict(self._data))
        try:
            yield
        except BaseException:
            self._data = self._snapshots.pop()
            raise
        else:
            self._snapshots.pop()

    def close(self) -> None:
        self._data.clear()


__all__ = ["MemoryKeyValue"]
