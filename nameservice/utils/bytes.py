# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
nameservice.utils.bytes
=======================

Small utilities for hex/bytes conversion plus strict **address** handling.

Highlights
----------
- :func:`to_hex` / :func:`from_hex` with strict validation.
- :func:`as_bytes` to normalize bytes-like values.
- :func:`normalize_address` / :func:`address_bytes` for 20-byte account
  identities (case-insensitive input, lowercase ``0x`` output).
- :func:`u32_be` / :func:`u64_be` fixed-width integer encodings.
"""

from __future__ import annotations

import re
from typing import Union

from ..constants import ADDRESS_LEN, ZERO_ADDRESS
from ..errors import InvalidAddress

BytesLike = Union[bytes, bytearray, memoryview]

__all__ = [
    "BytesLike",
    "to_hex",
    "from_hex",
    "is_hex",
    "as_bytes",
    "normalize_address",
    "address_bytes",
    "is_zero_address",
    "u32_be",
    "u64_be",
]

# -----------------
# Hex <-> Bytes I/O
# -----------------

_HEX_RE = re.compile(r"^(?:0x|0X)?[0-9a-fA-F]*$")
_ADDR_RE = re.compile(r"^(?:0x|0X)?[0-9a-fA-F]{40}$")


def is_hex(s: str) -> bool:
    """
    Return True if *s* is a valid hex string with an optional ``0x`` prefix
    and an even number of nibbles.
    """
    if not isinstance(s, str) or not _HEX_RE.match(s):
        return False
    body = s[2:] if s.startswith(("0x", "0X")) else s
    return len(body) % 2 == 0


def from_hex(s: str) -> bytes:
    """
    Convert a hex string (with optional ``0x``) to bytes.

    Strict rules: no whitespace, only hex digits, even nibble count.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a str")
    if not _HEX_RE.match(s):
        raise ValueError("invalid hex string (characters or whitespace)")
    body = s[2:] if s.startswith(("0x", "0X")) else s
    if len(body) % 2 != 0:
        raise ValueError("hex string must have an even number of nibbles")
    return bytes.fromhex(body)


def to_hex(b: BytesLike, *, prefix: str = "0x") -> str:
    """Encode bytes as lowercase hex. By default returns with ``0x`` prefix."""
    return (prefix or "") + as_bytes(b).hex()


def as_bytes(x: BytesLike) -> bytes:
    """Normalize bytes-like to immutable :class:`bytes`."""
    if isinstance(x, bytes):
        return x
    if isinstance(x, (bytearray, memoryview)):
        return bytes(x)
    raise TypeError(f"expected bytes-like, got {type(x)!r}")


# ---------
# Addresses
# ---------


def normalize_address(value: Union[str, BytesLike, None]) -> str:
    """
    Canonical form of an account identity: ``0x`` + 40 lowercase hex digits.

    Accepts checksummed or lowercase hex strings and raw 20-byte values.
    ``None`` maps to the zero address.
    """
    if value is None:
        return ZERO_ADDRESS
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = as_bytes(value)
        if len(raw) != ADDRESS_LEN:
            raise InvalidAddress(raw.hex())
        return "0x" + raw.hex()
    if not isinstance(value, str) or not _ADDR_RE.match(value):
        raise InvalidAddress(str(value))
    body = value[2:] if value[:2] in ("0x", "0X") else value
    return "0x" + body.lower()


def address_bytes(value: Union[str, BytesLike, None]) -> bytes:
    """Raw 20-byte form of an address."""
    return bytes.fromhex(normalize_address(value)[2:])


def is_zero_address(value: Union[str, BytesLike, None]) -> bool:
    return normalize_address(value) == ZERO_ADDRESS


# ----------------------
# Fixed-width integers
# ----------------------


def u32_be(n: int) -> bytes:
    if n < 0 or n > 0xFFFFFFFF:
        raise ValueError("value out of range for u32")
    return n.to_bytes(4, "big")


def u64_be(n: int) -> bytes:
    if n < 0 or n > 0xFFFFFFFFFFFFFFFF:
        raise ValueError("value out of range for u64")
    return n.to_bytes(8, "big")
