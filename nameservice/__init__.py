# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Animica name service package.

Hierarchical namespaces with time-bounded ownership, commit–reveal claims,
pluggable credential resolvers and a longest-suffix credential dispatcher.

Only light, stable exports are surfaced here to avoid import cycles.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
