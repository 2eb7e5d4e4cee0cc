# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
nameservice.utils.time
======================

Clocks for the name service. Every component reads time through a
:class:`Clock` so that expirations and commitment ages are evaluated against
one canonical timestamp source, and so tests and simulations can drive time
explicitly with :class:`ManualClock`.

Timestamps are integer seconds.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

__all__ = ["Clock", "SystemClock", "ManualClock"]


@runtime_checkable
class Clock(Protocol):
    def now(self) -> int:
        """Current timestamp in integer seconds."""
        ...


class SystemClock:
    """Wall-clock time (epoch seconds, floored)."""

    def now(self) -> int:
        return int(time.time())


@dataclass
class ManualClock:
    """
    Deterministic clock for tests and simulations.

    >>> c = ManualClock(100)
    >>> c.advance(60)
    160
    """

    current: int = 0

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self.current += int(seconds)
        return self.current

    def set(self, timestamp: int) -> int:
        if timestamp < self.current:
            raise ValueError("clock cannot move backwards")
        self.current = int(timestamp)
        return self.current
