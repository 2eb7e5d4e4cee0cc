# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""Paid registrars for children of the base domain."""

from .commit_reveal import CommitRevealRegistrar, build_register_commitment
from .controller import BaseRegistrar, RegistrarController
from .pricing import fee_for, validate_duration, validate_label

__all__ = [
    "BaseRegistrar",
    "RegistrarController",
    "CommitRevealRegistrar",
    "build_register_commitment",
    "fee_for",
    "validate_duration",
    "validate_label",
]
