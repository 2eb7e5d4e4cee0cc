# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""Namespace ownership, leases, approvals, roles and commitments."""

from .commitments import CommitmentBook, validate_secret
from .namespaces import NamespaceRegistry, build_resolver_commitment
from .roles import CONTROLLER_ROLE, DEFAULT_ADMIN_ROLE, RoleTable

__all__ = [
    "CommitmentBook",
    "validate_secret",
    "NamespaceRegistry",
    "build_resolver_commitment",
    "CONTROLLER_ROLE",
    "DEFAULT_ADMIN_ROLE",
    "RoleTable",
]
