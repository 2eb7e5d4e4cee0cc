# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
nameservice.utils.hash
======================

Keccak-256 helpers used for namehashes, label hashes, commitments and
attestation digests. Keccak comes from ``pycryptodome``
(``Crypto.Hash.keccak``), the same provider the VM hash API uses.

Key pieces
----------
- :func:`keccak256`: one-shot Keccak-256 (Ethereum flavour, not SHA3-256).
- :func:`keccak256_concat`: hash of concatenated chunks with optional domain.
- :func:`labelhash`: hash of a single UTF-8 label.
- :func:`derive_address`: deterministic 20-byte identity for components.
"""

from __future__ import annotations

from typing import Union

from Crypto.Hash import keccak as _keccak

from ..constants import ADDRESS_LEN, DOMAIN_COMPONENT_ADDRESS

BytesLike = Union[bytes, bytearray, memoryview]

__all__ = [
    "keccak256",
    "keccak256_concat",
    "labelhash",
    "derive_address",
]


def keccak256(data: BytesLike) -> bytes:
    """Return Keccak-256(data)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("keccak256 expects a bytes-like object")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def keccak256_concat(*chunks: BytesLike, domain: bytes = b"") -> bytes:
    """Keccak-256(domain || chunk_0 || chunk_1 || ...)."""
    h = _keccak.new(digest_bits=256)
    if domain:
        h.update(domain)
    for c in chunks:
        if not isinstance(c, (bytes, bytearray, memoryview)):
            raise TypeError("keccak256_concat expects bytes-like chunks")
        h.update(bytes(c))
    return h.digest()


def labelhash(label: Union[str, BytesLike]) -> bytes:
    """Keccak-256 of a label's UTF-8 bytes."""
    if isinstance(label, str):
        label = label.encode("utf-8")
    return keccak256(label)


def derive_address(tag: Union[str, bytes]) -> str:
    """``0x`` + last 20 bytes of Keccak-256(domain || tag)."""
    if isinstance(tag, str):
        tag = tag.encode("utf-8")
    return "0x" + keccak256_concat(tag, domain=DOMAIN_COMPONENT_ADDRESS)[-ADDRESS_LEN:].hex()
