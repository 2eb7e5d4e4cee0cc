# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Name service constants.

This module centralizes:
- Domain separation tags for commitments and signed attestations
- Protocol timing constants (commitment age, "never expires")
- Reserved identifiers (root node, zero address, default network id)
- Default credential keys served by the bundled resolvers

Operational knobs (fees, duration bounds, label lengths) live in
`nameservice.config.NameServiceConfig`; code that needs stable compile-time
defaults imports from here.
"""

from __future__ import annotations

# -----------------------------
# Domain separation (bytes tags)
# -----------------------------
# Keep these stable; changing them invalidates outstanding commitments and
# previously signed attestations.
DOMAIN_PREFIX: bytes = b"animica.ns."

DOMAIN_REGISTER_COMMIT: bytes = DOMAIN_PREFIX + b"register.commit.v1"
DOMAIN_RESOLVER_COMMIT: bytes = DOMAIN_PREFIX + b"resolver.commit.v1"
DOMAIN_COMPONENT_ADDRESS: bytes = DOMAIN_PREFIX + b"component.address.v1"

# Textual tag prefixed to controlled-account confirmations before signing.
CONTROLLED_ACCOUNTS_SIG_TAG: bytes = b"ControlledAccounts:confirm:v1"

# -----------------------------
# Timing
# -----------------------------
# Minimum seconds between commit and the matching reveal.
MIN_COMMITMENT_AGE: int = 60

# Expiration used for namespaces that never lapse (root, bootstrap domains).
NEVER_EXPIRES: int = (1 << 64) - 1

DAY: int = 24 * 60 * 60
YEAR: int = 365 * DAY

# -----------------------------
# Reserved identifiers
# -----------------------------
HASH_LEN: int = 32
ADDRESS_LEN: int = 20

ROOT_NODE: bytes = b"\x00" * HASH_LEN
ZERO_ADDRESS: str = "0x" + "00" * ADDRESS_LEN

# Network id that applies to every network (cross-network confirmations).
DEFAULT_NETWORK_ID: int = 0
# Network ids are stored as u64 key parts.
MAX_NETWORK_ID: int = (1 << 64) - 1

# Group id used when a declaration names no group.
DEFAULT_GROUP_ID: bytes = b"\x00" * HASH_LEN

# Role held by components allowed to extend expirations and bind resolvers.
CONTROLLER_ROLE_NAME: bytes = b"nameservice.role.controller"

# -----------------------------
# Label limits (codec level)
# -----------------------------
MAX_LABEL_BYTES: int = 255
LABEL_SEPARATOR: str = "."
PARAM_SEPARATOR: str = ":"

# -----------------------------
# Credential keys
# -----------------------------
RESOLVER_INFO_KEY: str = "resolver-info"
CONTROLLED_ACCOUNTS_KEY: str = "eth.ecs.controlled-accounts.accounts"
STARS_KEY: str = "eth.ecs.name-stars.stars"

__all__ = [
    "DOMAIN_PREFIX",
    "DOMAIN_REGISTER_COMMIT",
    "DOMAIN_RESOLVER_COMMIT",
    "DOMAIN_COMPONENT_ADDRESS",
    "CONTROLLED_ACCOUNTS_SIG_TAG",
    "MIN_COMMITMENT_AGE",
    "NEVER_EXPIRES",
    "DAY",
    "YEAR",
    "HASH_LEN",
    "ADDRESS_LEN",
    "ROOT_NODE",
    "ZERO_ADDRESS",
    "DEFAULT_NETWORK_ID",
    "MAX_NETWORK_ID",
    "DEFAULT_GROUP_ID",
    "CONTROLLER_ROLE_NAME",
    "MAX_LABEL_BYTES",
    "LABEL_SEPARATOR",
    "PARAM_SEPARATOR",
    "RESOLVER_INFO_KEY",
    "CONTROLLED_ACCOUNTS_KEY",
    "STARS_KEY",
]
