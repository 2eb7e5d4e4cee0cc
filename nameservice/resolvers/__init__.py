# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""Credential resolvers behind the ``resolve(identifier, key)`` capability."""

from .base import BaseResolver, CredentialResolver, GatewayRequest, Immediate, Pending, Resolution
from .controlled_accounts import ControlledAccountsResolver, group_id
from .gateway import GatewayTextResolver, read_program, record_slot
from .stars import StarsResolver
from .text import TextResolver

__all__ = [
    "BaseResolver",
    "CredentialResolver",
    "GatewayRequest",
    "Immediate",
    "Pending",
    "Resolution",
    "ControlledAccountsResolver",
    "group_id",
    "GatewayTextResolver",
    "read_program",
    "record_slot",
    "StarsResolver",
    "TextResolver",
]
