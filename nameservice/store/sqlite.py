"""
SQLite-backed KeyValue store for the name service.

Features
--------
- Simple byte-oriented KV: (key BLOB PRIMARY KEY, value BLOB NOT NULL)
- Nested transactions: the outermost scope is ``BEGIN IMMEDIATE``, inner
  scopes are SAVEPOINTs, so a failing inner call rolls back only its writes.
- Efficient prefix iteration using range scans (lower/upper bound).
- Pragmas tuned for a single-writer workload (WAL, synchronous=NORMAL).

Keys are arbitrary bytes. Prefix iteration relies on lexicographic byte
ordering of BLOBs: to iterate a prefix ``p`` we select
``key >= p AND key < next_prefix(p)``.
"""

from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Iterable, Optional, Tuple


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(os.path.abspath(path))
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA temp_store=MEMORY;")


def _init_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            key   BLOB PRIMARY KEY,
            value BLOB NOT NULL
        );
        """
    )


def _next_prefix(prefix: bytes) -> Optional[bytes]:
    """
    Smallest byte-string strictly greater than all keys starting with
    `prefix`, or None if no such bound exists (empty or all-0xFF prefix).
    """
    if not prefix:
        return None
    b = bytearray(prefix)
    for i in range(len(b) - 1, -1, -1):
        if b[i] != 0xFF:
            b[i] += 1
            return bytes(b[: i + 1])
    return None


@dataclass
class SQLiteKeyValue:
    """
    SQLite-backed implementation of the KeyValue protocol.

    Example
    -------
    >>> kv = SQLiteKeyValue("/tmp/nameservice.db")
    >>> with kv.transaction():
    ...     kv.put(b"hello", b"world")
    >>> kv.get(b"hello")
    b'world'
    >>> kv.close()
    """

    path: str

    def __post_init__(self) -> None:
        _ensure_dir(self.path)
        # isolation_level=None -> autocommit mode; BEGIN/COMMIT are explicit.
        self._conn = sqlite3.connect(self.path, isolation_level=None, timeout=30.0)
        _apply_pragmas(self._conn)
        _init_schema(self._conn)
        self._depth = 0

    def __enter__(self) -> "SQLiteKeyValue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- KV API --------------------------------------------------------------

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        self._conn.execute(
            "INSERT OR REPLACE INTO kv(key, value) VALUES(?, ?)", (bytes(key), bytes(value))
        )

    def get(self, key: bytes) -> Optional[bytes]:
        row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (bytes(key),)).fetchone()
        return bytes(row[0]) if row else None

    def delete(self, key: bytes) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (bytes(key),))

    def has(self, key: bytes) -> bool:
        row = self._conn.execute("SELECT 1 FROM kv WHERE key = ?", (bytes(key),)).fetchone()
        return row is not None

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        upper = _next_prefix(prefix)
        if upper is not None:
            sql = "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY key ASC"
            args: Tuple[bytes, ...] = (prefix, upper)
        else:
            sql = "SELECT key, value FROM kv WHERE key >= ? ORDER BY key ASC"
            args = (prefix,)
        # Materialize so callers may write while iterating.
        rows = self._conn.execute(sql, args).fetchall()
        for row in rows:
            k = bytes(row[0])
            if not k.startswith(prefix):
                break
            yield k, bytes(row[1])

    # --- Transactions --------------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """
        Commit on success, roll back on error. Nested scopes use SAVEPOINTs.
        A single connection must be used by a single thread.
        """
        if self._depth == 0:
            begin, commit, rollback = "BEGIN IMMEDIATE;", "COMMIT;", ("ROLLBACK;",)
        else:
            sp = f"sp_{self._depth}"
            begin, commit = f"SAVEPOINT {sp};", f"RELEASE SAVEPOINT {sp};"
            rollback = (f"ROLLBACK TO SAVEPOINT {sp};", f"RELEASE SAVEPOINT {sp};")
        self._conn.execute(begin)
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            for stmt in rollback:
                self._conn.execute(stmt)
            raise
        else:
            self._depth -= 1
            self._conn.execute(commit)

    def close(self) -> None:
        self._conn.close()


__all__ = ["SQLiteKeyValue"]
