# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Name codec: human-readable hierarchical names <-> canonical encoded names,
plus the recursive namehash.

Encoding
--------
A name is a dot-separated list of labels. The canonical encoding writes each
label as ``len(label) || label`` (1..255 bytes, UTF-8) and terminates with a
single zero byte::

    "alice.tld"  ->  05 'alice' 03 'tld' 00
    ""           ->  00                      (root)

Labels must not contain the separator; :func:`decode` rejects encodings whose
labels do, which keeps the mapping injective.

Namehash
--------
::

    namehash(root)          = 0x00 * 32
    namehash(label.parent)  = keccak256(namehash(parent) || keccak256(label))

Identifier names
----------------
Resolvers receive an *identifier*: the first two labels of the queried name
(subject id, then network / coin-type id), re-encoded with a terminator.
:func:`identifier_name` builds such names from an address and network id,
e.g. ``f8e0...b4ef.80014a34.addr.ecs.eth``.
"""

from __future__ import annotations

from typing import List, Tuple, Union

from .constants import HASH_LEN, LABEL_SEPARATOR, MAX_LABEL_BYTES, ROOT_NODE
from .errors import DecodeError, InvalidEncoding, LabelEmpty, LabelTooLong
from .utils.bytes import as_bytes, normalize_address
from .utils.hash import keccak256, labelhash

__all__ = [
    "encode",
    "decode",
    "labels",
    "read_label",
    "next_label",
    "namehash",
    "namehash_name",
    "child_node",
    "parent_name",
    "join_name",
    "identifier_from_name",
    "identifier_labels",
    "identifier_name",
    "coin_type_for_chain",
    "chain_for_coin_type",
]

_EVM_COIN_TYPE_FLAG = 0x80000000


# ---------------------------------------------------------------------------
# Encode / decode
# ---------------------------------------------------------------------------


def encode(name: str) -> bytes:
    """
    Encode a dot-separated name into its length-prefixed canonical form.

    Raises
    ------
    LabelEmpty
        A label between separators is empty (``"a..b"``, ``".a"``, ``"a."``).
    LabelTooLong
        A label exceeds 255 bytes once UTF-8 encoded.
    """
    if not isinstance(name, str):
        raise TypeError("name must be str")
    if name == "":
        return b"\x00"

    out = bytearray()
    offset = 0
    for label in name.split(LABEL_SEPARATOR):
        raw = label.encode("utf-8")
        if not raw:
            raise LabelEmpty("empty label", offset)
        if len(raw) > MAX_LABEL_BYTES:
            raise LabelTooLong(f"label is {len(raw)} bytes (max {MAX_LABEL_BYTES})", offset)
        out.append(len(raw))
        out += raw
        offset += 1 + len(raw)
    out.append(0)
    return bytes(out)


def read_label(data: bytes, offset: int = 0) -> Tuple[bytes, int]:
    """
    Read one label at *offset*.

    Returns ``(label_bytes, next_offset)``. At the terminator the label is
    empty and ``next_offset`` points past it.
    """
    data = as_bytes(data)
    if offset < 0 or offset >= len(data):
        raise DecodeError("offset out of range", offset)
    n = data[offset]
    end = offset + 1 + n
    if end > len(data):
        raise DecodeError("label length overruns buffer", offset)
    return data[offset + 1 : end], end


def next_label(data: bytes, offset: int = 0) -> int:
    """Offset of the label following the one at *offset*."""
    _, nxt = read_label(data, offset)
    return nxt


def labels(data: bytes, offset: int = 0) -> List[bytes]:
    """
    All labels from *offset* up to the terminator, validating the buffer is
    exactly consumed.
    """
    data = as_bytes(data)
    out: List[bytes] = []
    pos = offset
    while True:
        if pos >= len(data):
            raise DecodeError("missing zero terminator", pos)
        label, nxt = read_label(data, pos)
        if not label:
            if nxt != len(data):
                raise DecodeError("trailing bytes after terminator", nxt)
            return out
        out.append(label)
        pos = nxt


def decode(data: bytes) -> str:
    """Inverse of :func:`encode`."""
    parts: List[str] = []
    pos = 0
    for raw in labels(data):
        if LABEL_SEPARATOR.encode() in raw:
            raise DecodeError("separator inside label", pos)
        try:
            parts.append(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise DecodeError("label is not valid UTF-8", pos) from e
        pos += 1 + len(raw)
    return LABEL_SEPARATOR.join(parts)


# ---------------------------------------------------------------------------
# Namehash
# ---------------------------------------------------------------------------


def namehash(data: bytes, offset: int = 0) -> bytes:
    """
    Namehash of the encoded name starting at *offset*.

    Computed right-to-left so deep names do not recurse.
    """
    node = ROOT_NODE
    for raw in reversed(labels(data, offset)):
        node = keccak256(node + keccak256(raw))
    return node


def namehash_name(name: str) -> bytes:
    """Namehash of a human-readable name."""
    return namehash(encode(name))


def child_node(parent: bytes, label: Union[str, bytes]) -> bytes:
    if len(parent) != HASH_LEN:
        raise ValueError("parent node must be 32 bytes")
    return keccak256(parent + labelhash(label))


def join_name(label: str, parent: str) -> str:
    return label if parent == "" else f"{label}{LABEL_SEPARATOR}{parent}"


def parent_name(name: str) -> str:
    if name == "":
        raise InvalidEncoding("root has no parent")
    _, _, rest = name.partition(LABEL_SEPARATOR)
    return rest


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


def identifier_from_name(name: Union[str, bytes]) -> bytes:
    """
    Peel the first two labels off *name* and re-encode them with a
    terminator. Accepts a human-readable or an encoded name.
    """
    data = encode(name) if isinstance(name, str) else as_bytes(name)
    first, pos = read_label(data, 0)
    if not first:
        raise InvalidEncoding("identifier needs two labels, got root", 0)
    second, end = read_label(data, pos)
    if not second:
        raise InvalidEncoding("identifier needs two labels, got one", pos)
    return data[:end] + b"\x00"


def identifier_labels(identifier: bytes) -> Tuple[str, str]:
    """Split an encoded identifier into ``(subject, network)`` label strings."""
    parts = labels(identifier)
    if len(parts) != 2:
        raise InvalidEncoding(f"identifier must hold exactly two labels, got {len(parts)}")
    try:
        return parts[0].decode("ascii"), parts[1].decode("ascii")
    except UnicodeDecodeError as e:
        raise InvalidEncoding("identifier labels must be ASCII hex") from e


def identifier_name(address: str, network_id: int, suffix: str = "") -> str:
    """
    Address-based name: ``{address-hex}.{network-hex}[.{suffix}]``.

    >>> identifier_name("0xF8e03bd4436371E0e2F7C02E529b2172fe72b4EF", 0x80014A34, "addr.ecs.eth")
    'f8e03bd4436371e0e2f7c02e529b2172fe72b4ef.80014a34.addr.ecs.eth'
    """
    if network_id < 0:
        raise ValueError("network_id must be non-negative")
    head = f"{normalize_address(address)[2:]}{LABEL_SEPARATOR}{network_id:x}"
    return head if not suffix else f"{head}{LABEL_SEPARATOR}{suffix}"


def coin_type_for_chain(chain_id: int) -> int:
    """ENSIP-11 coin type for an EVM chain id."""
    if chain_id <= 0 or chain_id >= _EVM_COIN_TYPE_FLAG:
        raise ValueError("chain_id out of range")
    return _EVM_COIN_TYPE_FLAG | chain_id


def chain_for_coin_type(coin_type: int) -> int:
    """Inverse of :func:`coin_type_for_chain`."""
    if not coin_type & _EVM_COIN_TYPE_FLAG or coin_type >= 1 << 32:
        raise ValueError("not an EVM coin type")
    return coin_type & ~_EVM_COIN_TYPE_FLAG
