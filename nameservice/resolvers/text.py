# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Basic key/value resolver: ``(identifier, key) -> text``.

Writes are allowed for the resolver owner and for writers the owner
authorized. Setting an empty value deletes the record; unknown keys resolve
to ``""``.
"""

from __future__ import annotations

from ..constants import ROOT_NODE
from ..errors import Unauthorized
from ..logging import get_logger
from ..utils.bytes import normalize_address
from .base import BaseResolver

log = get_logger(__name__)


class TextResolver(BaseResolver):
    kind = "text"

    def is_writer(self, account: str) -> bool:
        account = normalize_address(account)
        return account == self.owner or self.store.get_flag("writer", account)

    def set_writer(self, caller: str, account: str, allowed: bool) -> None:
        caller = normalize_address(caller)
        if caller != self.owner:
            raise Unauthorized(ROOT_NODE, caller)
        account = normalize_address(account)
        with self.state.transaction():
            self.store.set_flag(allowed, "writer", account)
            self.state.emit("WriterSet", resolver=self.address, account=account, allowed=bool(allowed))

    def set_text(self, caller: str, identifier: bytes, key: str, value: str) -> None:
        caller = normalize_address(caller)
        if not self.is_writer(caller):
            raise Unauthorized(ROOT_NODE, caller)
        identifier = bytes(identifier)
        with self.state.transaction():
            if value:
                self.store.put(value.encode("utf-8"), "text", identifier, key)
            else:
                self.store.delete("text", identifier, key)
            self.state.emit("TextChanged", resolver=self.address, identifier=identifier, key=key, value=value)
        log.debug("text_set", resolver=self.address, key=key)

    def text(self, identifier: bytes, key: str) -> str:
        raw = self.store.get("text", bytes(identifier), key)
        return "" if raw is None else raw.decode("utf-8")

    def _credential(self, identifier: bytes, key: str) -> str:
        return self.text(identifier, key)


__all__ = ["TextResolver"]
