# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Counter-style resolver: accounts star names, one star per (account, name).

Key format: ``<stars_key>:<name>``, e.g. ``eth.ecs.name-stars.stars:vitalik.eth``.
The answer is the decimal star count; ``"0"`` for names nobody starred and
``""`` for keys this resolver does not serve. The identifier is not used.
"""

from __future__ import annotations

from typing import Optional

from ..config import NameServiceConfig
from ..logging import get_logger
from ..state import State
from ..utils.bytes import normalize_address
from .base import BaseResolver, split_key

log = get_logger(__name__)


class StarsResolver(BaseResolver):
    kind = "name-stars"

    def __init__(
        self,
        state: State,
        owner: str,
        *,
        address: Optional[str] = None,
        config: Optional[NameServiceConfig] = None,
    ) -> None:
        super().__init__(state, owner, address=address)
        self.key = (config or NameServiceConfig()).stars_key

    def stars(self, name: str) -> int:
        return int(self.store.get_obj("count", name, default=0))

    def has_starred(self, account: str, name: str) -> bool:
        return self.store.get_flag("starred", name, normalize_address(account))

    def star(self, caller: str, name: str) -> bool:
        """Returns False if *caller* already starred *name*."""
        return self._toggle(caller, name, True)

    def unstar(self, caller: str, name: str) -> bool:
        """Returns False if *caller* had not starred *name*."""
        return self._toggle(caller, name, False)

    def _toggle(self, caller: str, name: str, on: bool) -> bool:
        caller = normalize_address(caller)
        if not name:
            raise ValueError("name must be non-empty")
        if self.has_starred(caller, name) == on:
            return False
        with self.state.transaction():
            count = self.stars(name) + (1 if on else -1)
            self.store.set_flag(on, "starred", name, caller)
            self.store.put_obj(count, "count", name)
            self.state.emit("Starred" if on else "Unstarred", resolver=self.address, name=name, account=caller)
        log.debug("stars_changed", name=name, count=count)
        return True

    def _credential(self, identifier: bytes, key: str) -> str:
        base, params = split_key(key)
        if base != self.key or len(params) != 1 or not params[0]:
            return ""
        return str(self.stars(params[0]))


__all__ = ["StarsResolver"]
