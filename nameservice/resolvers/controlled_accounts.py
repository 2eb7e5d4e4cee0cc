# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
nameservice.resolvers.controlled_accounts
=========================================

Declare / verify trust relationships between a *controller* and the
accounts it claims to control.

Two independent tables
----------------------
- **declared**: ``(controller, network, group) -> [account, ...]``, written
  by the controller. Append-only per call, duplicates allowed.
- **verified**: ``(account, network, controller) -> flag``, written by the
  account itself or by anyone holding the account's signed confirmation.

Only the intersection is authoritative: an account is reported for a
controller iff it is declared *and* has confirmed that controller on the
same network or on the default network ``0``. Signed confirmations are
always recorded under network ``0``, so one signature covers every network.

Ordering
--------
:meth:`ControlledAccountsResolver.remove` swaps the removed entry with the
last one and pops. The declared order is therefore not stable across
removals, and neither is the order of the resolved credential.

Credential keys
---------------
``<key>``, ``<key>:<network>``, ``<key>:<group>``, ``<key>:<network>:<group>``

A decimal first parameter is the network id; otherwise it names a group and
the network is taken from the identifier's second (hex) label. Group names
are hashed with keccak-256; no group means the default group. The answer is
one lowercase ``0x`` address per line, without a trailing newline.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple, Union

from .. import codec
from ..config import NameServiceConfig
from ..constants import DEFAULT_GROUP_ID, DEFAULT_NETWORK_ID, HASH_LEN, MAX_NETWORK_ID
from ..errors import InvalidAddress, InvalidEncoding
from ..logging import get_logger
from ..signatures import verify_confirmation
from ..state import State
from ..utils.bytes import BytesLike, normalize_address
from ..utils.hash import keccak256
from .base import BaseResolver, split_key

log = get_logger(__name__)

GroupLike = Union[str, bytes, None]


def group_id(group: GroupLike) -> bytes:
    """``None``/``""`` -> default group; names hash; 32-byte ids pass through."""
    if group is None or group == "" or group == b"":
        return DEFAULT_GROUP_ID
    if isinstance(group, str):
        return keccak256(group.encode("utf-8"))
    if isinstance(group, (bytes, bytearray)) and len(group) == HASH_LEN:
        return bytes(group)
    raise ValueError("group must be a name or a 32-byte id")


def _is_decimal(s: str) -> bool:
    return s.isascii() and s.isdigit()


def _network(network: int) -> int:
    if isinstance(network, bool) or not isinstance(network, int) or network < 0 or network > MAX_NETWORK_ID:
        raise ValueError("network id must be an int in [0, 2**64)")
    return network


class ControlledAccountsResolver(BaseResolver):
    kind = "controlled-accounts"

    def __init__(
        self,
        state: State,
        owner: str,
        *,
        address: Optional[str] = None,
        config: Optional[NameServiceConfig] = None,
    ) -> None:
        super().__init__(state, owner, address=address)
        self.key = (config or NameServiceConfig()).controlled_accounts_key

    # --- Declarations (controller side) --------------------------------------

    def declared(self, controller: str, network: int, group: GroupLike = None) -> List[str]:
        return list(
            self.store.get_obj("declared", normalize_address(controller), _network(network), group_id(group), default=[])
        )

    def _put_declared(self, controller: str, network: int, gid: bytes, accounts: List[str]) -> None:
        if accounts:
            self.store.put_obj(accounts, "declared", controller, network, gid)
        else:
            self.store.delete("declared", controller, network, gid)

    def declare(self, caller: str, network: int, group: GroupLike, account: str) -> None:
        self.declare_many(caller, network, group, [account])

    def declare_many(self, caller: str, network: int, group: GroupLike, accounts: Iterable[str]) -> None:
        controller = normalize_address(caller)
        network = _network(network)
        gid = group_id(group)
        added = [normalize_address(a) for a in accounts]
        with self.state.transaction():
            current = self.declared(controller, network, gid)
            self._put_declared(controller, network, gid, current + added)
            for account in added:
                self.state.emit(
                    "AccountDeclared", controller=controller, network=network, group=gid, account=account
                )
        log.debug("accounts_declared", controller=controller, network=network, count=len(added))

    def remove(self, caller: str, network: int, group: GroupLike, account: str) -> bool:
        """
        Drop the first declared occurrence of *account*. Returns False if it
        was not declared.
        """
        controller = normalize_address(caller)
        network = _network(network)
        gid = group_id(group)
        account = normalize_address(account)
        current = self.declared(controller, network, gid)
        try:
            i = current.index(account)
        except ValueError:
            return False
        with self.state.transaction():
            current[i] = current[-1]
            current.pop()
            self._put_declared(controller, network, gid, current)
            self.state.emit("AccountRemoved", controller=controller, network=network, group=gid, account=account)
        return True

    # --- Confirmations (account side) ----------------------------------------

    def has_confirmed(self, account: str, network: int, controller: str) -> bool:
        return self.store.get_flag(
            "verified", normalize_address(account), _network(network), normalize_address(controller)
        )

    def is_verified(self, account: str, network: int, controller: str) -> bool:
        return self.has_confirmed(account, network, controller) or self.has_confirmed(
            account, DEFAULT_NETWORK_ID, controller
        )

    def _set_confirmed(self, account: str, network: int, controller: str, value: bool, via: str) -> None:
        with self.state.transaction():
            self.store.set_flag(value, "verified", account, network, controller)
            self.state.emit(
                "ControllerConfirmed" if value else "ControllerRevoked",
                account=account,
                network=network,
                controller=controller,
                via=via,
            )
        log.info("controller_confirmation", account=account, network=network, controller=controller, confirmed=value, via=via)

    def confirm(self, caller: str, network: int, controller: str) -> None:
        self._set_confirmed(normalize_address(caller), _network(network), normalize_address(controller), True, "call")

    def revoke(self, caller: str, network: int, controller: str) -> None:
        self._set_confirmed(normalize_address(caller), _network(network), normalize_address(controller), False, "call")

    def confirm_with_signature(self, caller: str, account: str, controller: str, signature: BytesLike) -> None:
        """
        Record *account*'s signed confirmation of *controller* under the
        default network. Any caller may relay the signature.
        """
        account = normalize_address(account)
        controller = normalize_address(controller)
        verify_confirmation(account, controller, self.address, signature)
        log.debug("signature_relayed", account=account, sender=normalize_address(caller))
        self._set_confirmed(account, DEFAULT_NETWORK_ID, controller, True, "signature")

    # --- Resolution ----------------------------------------------------------

    def verified_accounts(self, controller: str, network: int, group: GroupLike = None) -> List[str]:
        """Declared accounts that confirmed *controller*, in declared order."""
        return [a for a in self.declared(controller, network, group) if self.is_verified(a, network, controller)]

    def parse_key(self, identifier: bytes, key: str) -> Optional[Tuple[str, int, bytes]]:
        """
        ``(controller, network, group_id)`` for a key this resolver serves,
        or None.
        """
        base, params = split_key(key)
        if base != self.key or len(params) > 2:
            return None
        network: Optional[int] = None
        group: GroupLike = None
        if len(params) == 2:
            if not _is_decimal(params[0]):
                return None
            network, group = int(params[0]), params[1]
        elif len(params) == 1:
            if _is_decimal(params[0]):
                network = int(params[0])
            else:
                group = params[0]

        subject, network_label = codec.identifier_labels(identifier)
        try:
            controller = normalize_address("0x" + subject)
        except InvalidAddress as e:
            raise InvalidEncoding(f"identifier subject is not an address: {subject!r}") from e
        if network is None:
            try:
                network = int(network_label, 16)
            except ValueError as e:
                raise InvalidEncoding(f"identifier network label is not hex: {network_label!r}") from e
        if not 0 <= network <= MAX_NETWORK_ID:
            raise InvalidEncoding(f"network id out of range: {network}")
        return controller, network, group_id(group)

    def _credential(self, identifier: bytes, key: str) -> str:
        parsed = self.parse_key(identifier, key)
        if parsed is None:
            return ""
        controller, network, gid = parsed
        return "\n".join(self.verified_accounts(controller, network, gid))


__all__ = ["ControlledAccountsResolver", "group_id"]
