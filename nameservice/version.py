# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Version helper for the name service package.

Prefers installed distribution metadata and falls back to BASE_VERSION when
running from a source checkout.
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Bump this when making intentional, source-level releases.
BASE_VERSION = "0.1.0"

_PKG_NAME = "animica-nameservice"


def get_version() -> str:
    try:
        return _pkg_version(_PKG_NAME)
    except PackageNotFoundError:
        return BASE_VERSION


__version__ = get_version()

__all__ = ["__version__", "BASE_VERSION", "get_version"]
