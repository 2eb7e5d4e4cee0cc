# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Registrar pricing and input validation.

Fee model
---------
fee = duration * fee_per_second

Labels are lowercase ASCII letters and digits, optionally joined by single
internal hyphens (``"my-name"`` ok; ``"-x"``, ``"x-"``, ``"a--b"`` rejected),
and between ``min_label_length`` and ``max_label_length`` characters long.
Durations are accepted in the inclusive range ``[min_duration, max_duration]``.
"""

from __future__ import annotations

import re

from ..config import NameServiceConfig
from ..errors import InvalidDuration, InvalidLabel

_LABEL_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def validate_label(label: str, config: NameServiceConfig) -> str:
    if not isinstance(label, str):
        raise TypeError("label must be str")
    n = len(label)
    if n < config.min_label_length or n > config.max_label_length:
        raise InvalidLabel(
            label, f"length {n} outside [{config.min_label_length}, {config.max_label_length}]"
        )
    if not _LABEL_RE.match(label):
        raise InvalidLabel(label, "only a-z, 0-9 and internal single hyphens are allowed")
    return label


def validate_duration(duration: int, config: NameServiceConfig) -> int:
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise TypeError("duration must be int seconds")
    if duration < config.min_duration or duration > config.max_duration:
        raise InvalidDuration(duration, config.min_duration, config.max_duration)
    return duration


def fee_for(duration: int, config: NameServiceConfig) -> int:
    """Fee for a lease of *duration* seconds (validated)."""
    return validate_duration(duration, config) * config.fee_per_second


__all__ = ["validate_label", "validate_duration", "fee_for"]
