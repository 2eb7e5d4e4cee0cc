# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Name service errors.

A small, typed hierarchy of exceptions raised by the registry, registrars,
resolvers and the dispatcher. Callers can catch the base `NameServiceError`
to handle every protocol failure, one of the category bases
(`AuthorizationError`, `TemporalError`, `ValidationError`, `EconomicError`,
`ProtectionError`) to decide whether a retry makes sense, or a concrete
subclass for granular control.

Every concrete error carries the offending identifiers (namespace node,
commitment hash, caller) so logs and tests can assert on them.

Errors raised by a Gateway Executor are *not* wrapped here; they reach the
original caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


def _h(b: Optional[bytes]) -> str:
    return "0x" + bytes(b).hex() if b is not None else "None"


class NameServiceError(Exception):
    """Base class for all name service errors."""

    def __post_init__(self) -> None:
        Exception.__init__(self, str(self))


class AuthorizationError(NameServiceError):
    """Caller lacks rights. Never retryable."""


class TemporalError(NameServiceError):
    """A time or state precondition is unmet; wait or re-commit."""


class ValidationError(NameServiceError):
    """Malformed input. Not retryable."""


class EconomicError(NameServiceError):
    """Payment problems; resupply with an adequate amount."""


class ProtectionError(NameServiceError):
    """Claim blocked by an unexpired protected registration."""


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Unauthorized(AuthorizationError):
    """Caller is neither owner nor approved operator of the namespace."""

    node: bytes
    caller: str

    def __str__(self) -> str:
        return f"Unauthorized: node={_h(self.node)} caller={self.caller}"


@dataclass(eq=False)
class NotNamespaceOwner(AuthorizationError):
    """Operation reserved to the namespace owner itself (not operators)."""

    node: bytes
    caller: str

    def __str__(self) -> str:
        return f"NotNamespaceOwner: node={_h(self.node)} caller={self.caller}"


@dataclass(eq=False)
class MissingRole(AuthorizationError):
    """Caller does not hold a required role (e.g. controller, admin)."""

    role: bytes
    account: str

    def __str__(self) -> str:
        return f"MissingRole: role={_h(self.role)} account={self.account}"


# ---------------------------------------------------------------------------
# Temporal
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class NamespaceExpired(TemporalError):
    """Namespace is unregistered or its lease lapsed (now >= expiration)."""

    node: bytes
    expiration: int
    now: int

    def __str__(self) -> str:
        return (
            f"NamespaceExpired: node={_h(self.node)} expiration={self.expiration} "
            f"now={self.now}"
        )


@dataclass(eq=False)
class CommitmentTooNew(TemporalError):
    """Reveal attempted before the minimum commitment age elapsed."""

    commitment: bytes
    committed_at: int
    now: int
    min_age: int

    def __str__(self) -> str:
        return (
            f"CommitmentTooNew: commitment={_h(self.commitment)} "
            f"committed_at={self.committed_at} now={self.now} min_age={self.min_age}"
        )


@dataclass(eq=False)
class CommitmentNotFound(TemporalError):
    """No unconsumed commitment matches the revealed parameters."""

    commitment: bytes

    def __str__(self) -> str:
        return f"CommitmentNotFound: commitment={_h(self.commitment)}"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class InvalidDuration(ValidationError):
    duration: int
    min_duration: int
    max_duration: int

    def __str__(self) -> str:
        return (
            f"InvalidDuration: duration={self.duration} "
            f"allowed=[{self.min_duration}, {self.max_duration}]"
        )


@dataclass(eq=False)
class InvalidLabel(ValidationError):
    label: str
    reason: str

    def __str__(self) -> str:
        return f"InvalidLabel: label={self.label!r} reason={self.reason}"


@dataclass(eq=False)
class InvalidEncoding(ValidationError):
    """Malformed name, identifier or credential key encoding."""

    reason: str
    offset: Optional[int] = None

    def __str__(self) -> str:
        where = f" offset={self.offset}" if self.offset is not None else ""
        return f"{type(self).__name__}: {self.reason}{where}"


@dataclass(eq=False)
class LabelEmpty(InvalidEncoding):
    pass


@dataclass(eq=False)
class LabelTooLong(InvalidEncoding):
    pass


@dataclass(eq=False)
class DecodeError(InvalidEncoding):
    pass


@dataclass(eq=False)
class InvalidExpiration(ValidationError):
    """Expirations only move forward."""

    node: bytes
    current: int
    requested: int

    def __str__(self) -> str:
        return (
            f"InvalidExpiration: node={_h(self.node)} current={self.current} "
            f"requested={self.requested}"
        )


@dataclass(eq=False)
class CommitmentExists(ValidationError):
    """An unconsumed commitment with the same key is already recorded."""

    commitment: bytes

    def __str__(self) -> str:
        return f"CommitmentExists: commitment={_h(self.commitment)}"


@dataclass(eq=False)
class InvalidSignature(ValidationError):
    account: str
    recovered: Optional[str] = None

    def __str__(self) -> str:
        return f"InvalidSignature: account={self.account} recovered={self.recovered}"


@dataclass(eq=False)
class InvalidAddress(ValidationError):
    value: str

    def __str__(self) -> str:
        return f"InvalidAddress: {self.value!r}"


# ---------------------------------------------------------------------------
# Economic / protection
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class InsufficientFee(EconomicError):
    required: int
    paid: int

    def __str__(self) -> str:
        return f"InsufficientFee: required={self.required} paid={self.paid}"


@dataclass(eq=False)
class ProtectedNamespace(ProtectionError):
    node: bytes
    owner: str
    expiration: int

    def __str__(self) -> str:
        return (
            f"ProtectedNamespace: node={_h(self.node)} owner={self.owner} "
            f"expiration={self.expiration}"
        )


__all__ = [
    "NameServiceError",
    "AuthorizationError",
    "TemporalError",
    "ValidationError",
    "EconomicError",
    "ProtectionError",
    "Unauthorized",
    "NotNamespaceOwner",
    "MissingRole",
    "NamespaceExpired",
    "CommitmentTooNew",
    "CommitmentNotFound",
    "InvalidDuration",
    "InvalidLabel",
    "InvalidEncoding",
    "LabelEmpty",
    "LabelTooLong",
    "DecodeError",
    "InvalidExpiration",
    "CommitmentExists",
    "InvalidSignature",
    "InvalidAddress",
    "InsufficientFee",
    "ProtectedNamespace",
]
