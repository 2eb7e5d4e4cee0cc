# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
nameservice.registry.roles
==========================

Minimal **role-based access control** for registry components.

- Roles are 32-byte identifiers (``keccak256(name)``).
- ``DEFAULT_ADMIN_ROLE`` (all-zero) administers every role; it is granted to
  the registry deployer at genesis.
- Granting an existing role or revoking a missing one is a no-op; events are
  emitted only on state change.

Events
------
- ``RoleGranted`` : {"role", "account", "sender"}
- ``RoleRevoked`` : {"role", "account", "sender"}
"""

from __future__ import annotations

from ..constants import CONTROLLER_ROLE_NAME, HASH_LEN
from ..errors import MissingRole
from ..logging import get_logger
from ..state import State
from ..utils.bytes import normalize_address
from ..utils.hash import keccak256

log = get_logger(__name__)

DEFAULT_ADMIN_ROLE: bytes = b"\x00" * HASH_LEN
CONTROLLER_ROLE: bytes = keccak256(CONTROLLER_ROLE_NAME)


class RoleTable:
    def __init__(self, state: State, admin: str) -> None:
        self.state = state
        admin = normalize_address(admin)
        if not self.state.tables.has_role(DEFAULT_ADMIN_ROLE, admin):
            self.state.tables.set_role(DEFAULT_ADMIN_ROLE, admin, True)

    def has_role(self, role: bytes, account: str) -> bool:
        return self.state.tables.has_role(role, normalize_address(account))

    def require_role(self, role: bytes, account: str) -> None:
        if not self.has_role(role, account):
            raise MissingRole(role, normalize_address(account))

    def grant_role(self, caller: str, role: bytes, account: str) -> None:
        self.require_role(DEFAULT_ADMIN_ROLE, caller)
        account = normalize_address(account)
        if self.has_role(role, account):
            return
        with self.state.transaction():
            self.state.tables.set_role(role, account, True)
            self.state.emit("RoleGranted", role=role, account=account, sender=normalize_address(caller))
        log.info("role_granted", role=role, account=account)

    def revoke_role(self, caller: str, role: bytes, account: str) -> None:
        self.require_role(DEFAULT_ADMIN_ROLE, caller)
        account = normalize_address(account)
        if not self.has_role(role, account):
            return
        with self.state.transaction():
            self.state.tables.set_role(role, account, False)
            self.state.emit("RoleRevoked", role=role, account=account, sender=normalize_address(caller))
        log.info("role_revoked", role=role, account=account)


__all__ = ["DEFAULT_ADMIN_ROLE", "CONTROLLER_ROLE", "RoleTable"]
