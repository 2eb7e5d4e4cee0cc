# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Paid registrar for direct children of the configured base domain.

The registrar is itself an identity: it must be authorized on the base domain
(to create children) and hold the registry's controller role (to extend
expirations on renewal).

Payment model
-------------
Each paid call receives ``value``. The fee is kept in the registrar's treasury
and ``value - fee`` is reported back as the refund in the returned
:class:`~nameservice.types.RegistrationReceipt`. Short payment fails with
:class:`~nameservice.errors.InsufficientFee` before any state changes.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .. import codec
from ..config import NameServiceConfig
from ..errors import InsufficientFee, Unauthorized
from ..logging import get_logger
from ..metrics import METRICS
from ..registry import NamespaceRegistry
from ..state import State
from ..types import RegistrationReceipt
from ..utils.bytes import normalize_address
from ..utils.hash import derive_address
from .pricing import fee_for, validate_duration, validate_label

log = get_logger(__name__)

_TREASURY = "treasury"


class BaseRegistrar:
    """Pricing, renewal and treasury shared by every registrar variant."""

    kind = "registrar"

    def __init__(
        self,
        state: State,
        registry: NamespaceRegistry,
        owner: str,
        *,
        config: Optional[NameServiceConfig] = None,
        address: Optional[str] = None,
    ) -> None:
        self.state = state
        self.registry = registry
        self.config = config or registry.config
        self.config.validate()
        self.owner = normalize_address(owner)
        self.address = normalize_address(address or derive_address(f"{self.kind}:{self.config.base_domain}"))
        self.base_domain = self.config.base_domain
        self.base_node = codec.namehash_name(self.base_domain)
        self.store = state.tables.component(self.address)

    # --- Quotes / treasury ---------------------------------------------------

    def price(self, duration: int) -> int:
        return fee_for(duration, self.config)

    @property
    def balance(self) -> int:
        return int(self.store.get_obj(_TREASURY, default=0))

    def withdraw(self, caller: str) -> int:
        """Hand the accumulated fees to the registrar owner."""
        caller = normalize_address(caller)
        if caller != self.owner:
            raise Unauthorized(self.base_node, caller)
        with self.state.transaction():
            amount = self.balance
            self.store.put_obj(0, _TREASURY)
            self.state.emit("FeesWithdrawn", registrar=self.address, to=caller, amount=amount)
        log.info("fees_withdrawn", registrar=self.address, amount=amount)
        return amount

    def _collect(self, duration: int, value: int) -> Tuple[int, int]:
        fee = self.price(duration)
        if value < fee:
            raise InsufficientFee(fee, value)
        self.store.put_obj(self.balance + fee, _TREASURY)
        return fee, value - fee

    # --- Lifecycle -----------------------------------------------------------

    def _claim(self, label: str, owner: str, duration: int) -> bytes:
        expiration = self.state.now() + duration
        return self.registry.set_subname_owner(
            self.address, label, self.base_domain, owner, expiration, protected=True
        )

    def renew_namespace(self, caller: str, node: bytes, duration: int, *, value: int) -> RegistrationReceipt:
        """
        Extend *node* by *duration* seconds, counted from its current
        expiration.
        Only direct children of the base domain are renewable here; deeper
        names live on leases granted by their own parents.
        """
        caller = normalize_address(caller)
        validate_duration(duration, self.config)
        with self.state.transaction():
            rec = self.registry.require_active(node)
            self.registry.require_authorized(node, caller)
            name = codec.decode(rec.name)
            if name == "" or codec.parent_name(name) != self.base_domain:
                raise Unauthorized(node, caller)
            fee, refund = self._collect(duration, value)
            expiration = rec.expiration + duration
            self.registry.set_expiration(self.address, node, expiration)
            self.state.emit("NamespaceRenewed", node=node, expiration=expiration, fee=fee)
        METRICS.record_registration("renew")
        log.info("namespace_renewed", node=node, name=name, expiration=expiration, fee=fee, refund=refund)
        return RegistrationReceipt(node=node, name=name, owner=rec.owner, expiration=expiration, fee=fee, refund=refund)

    def _receipt(self, node: bytes, label: str, owner: str, fee: int, refund: int) -> RegistrationReceipt:
        name = codec.join_name(label, self.base_domain)
        expiration = self.registry.expiration(node)
        self.state.emit("NamespaceRegistered", node=node, name=name, owner=owner, expiration=expiration, fee=fee)
        self.state.after_commit(lambda: METRICS.record_registration("register"))
        log.info("namespace_registered", node=node, name=name, owner=owner, expiration=expiration, fee=fee, refund=refund)
        return RegistrationReceipt(node=node, name=name, owner=owner, expiration=expiration, fee=fee, refund=refund)


class RegistrarController(BaseRegistrar):
    """First come, first served registration: the caller becomes the owner."""

    kind = "registrar"

    def register_namespace(self, caller: str, label: str, duration: int, *, value: int) -> RegistrationReceipt:
        caller = normalize_address(caller)
        validate_label(label, self.config)
        validate_duration(duration, self.config)
        with self.state.transaction():
            fee, refund = self._collect(duration, value)
            node = self._claim(label, caller, duration)
            return self._receipt(node, label, caller, fee, refund)


__all__ = ["BaseRegistrar", "RegistrarController"]
