# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
nameservice.registry.namespaces
===============================

The namespace table: ``node -> (owner, expiration, protected, encoded name)``.

Authorization
-------------
A party is *authorized for* a node iff it is the owner, or the owner approved
it as an operator **for that single node**. Approvals are stored under the
owner that granted them, so a transfer silently drops every approval the
previous owner made.

Leases
------
A node is *active* iff ``now < expiration``. Expired nodes keep their record
(owner and name remain readable) but every mutation that requires an active
node fails with :class:`~nameservice.errors.NamespaceExpired`.

The root node is created at construction, owned by the deployer and never
expires. The deployer also holds the admin role and grants the controller
role to registrars.

Resolver bindings
-----------------
Binding a resolver is a commit–reveal operation for namespace owners
(:meth:`NamespaceRegistry.commit` then :meth:`NamespaceRegistry.set_resolver`)
and a direct call for controllers (:meth:`NamespaceRegistry.bind_resolver`),
whose own registration commitment already covered the resolver.

Events
------
- ``NamespaceOwnerSet``    : {"node", "owner"}
- ``ExpirationSet``        : {"node", "expiration"}
- ``NameSet``              : {"node", "name"}
- ``ApprovalForNamespace`` : {"node", "owner", "operator", "approved"}
- ``ResolverSet``          : {"node", "resolver"}
"""

from __future__ import annotations

from typing import Optional

from .. import codec
from ..config import NameServiceConfig
from ..constants import (
    DOMAIN_RESOLVER_COMMIT,
    HASH_LEN,
    LABEL_SEPARATOR,
    NEVER_EXPIRES,
    ROOT_NODE,
)
from ..errors import (
    InvalidExpiration,
    InvalidLabel,
    NamespaceExpired,
    NotNamespaceOwner,
    ProtectedNamespace,
    Unauthorized,
)
from ..logging import get_logger
from ..state import State
from ..types import NamespaceInfo, NamespaceRecord, ResolverInfo
from ..utils.bytes import address_bytes, is_zero_address, normalize_address
from ..utils.hash import keccak256_concat
from .commitments import CommitmentBook, validate_secret
from .roles import CONTROLLER_ROLE, RoleTable

log = get_logger(__name__)


def _node(node: bytes) -> bytes:
    if not isinstance(node, (bytes, bytearray)) or len(node) != HASH_LEN:
        raise ValueError(f"node must be {HASH_LEN} bytes")
    return bytes(node)


def build_resolver_commitment(node: bytes, resolver: Optional[str], owner: str, secret: bytes) -> bytes:
    """C = keccak256(tag || node || resolver20 || owner20 || secret)"""
    return keccak256_concat(
        _node(node),
        address_bytes(resolver),
        address_bytes(owner),
        validate_secret(secret),
        domain=DOMAIN_RESOLVER_COMMIT,
    )


class NamespaceRegistry:
    def __init__(self, state: State, deployer: str, *, config: Optional[NameServiceConfig] = None) -> None:
        self.state = state
        self.config = config or NameServiceConfig()
        self.deployer = normalize_address(deployer)
        self.roles = RoleTable(state, self.deployer)
        self.commitments = CommitmentBook(
            state, DOMAIN_RESOLVER_COMMIT, min_age=self.config.min_commitment_age
        )
        if state.tables.get_namespace(ROOT_NODE) is None:
            state.tables.put_namespace(
                ROOT_NODE,
                NamespaceRecord(owner=self.deployer, expiration=NEVER_EXPIRES, protected=True, name=b"\x00"),
            )

    # --- Views ---------------------------------------------------------------

    def record(self, node: bytes) -> Optional[NamespaceRecord]:
        return self.state.tables.get_namespace(_node(node))

    def owner(self, node: bytes) -> Optional[str]:
        rec = self.record(node)
        return rec.owner if rec is not None else None

    def expiration(self, node: bytes) -> int:
        rec = self.record(node)
        return rec.expiration if rec is not None else 0

    def is_active(self, node: bytes) -> bool:
        rec = self.record(node)
        return rec is not None and rec.is_active(self.state.now())

    def is_expired(self, node: bytes) -> bool:
        """True for unregistered nodes as well."""
        return not self.is_active(node)

    def get_namespace(self, node: bytes) -> Optional[NamespaceInfo]:
        rec = self.record(node)
        if rec is None:
            return None
        return NamespaceInfo(expiration=rec.expiration, name=codec.decode(rec.name))

    def is_authorized_for(self, node: bytes, identity: str) -> bool:
        rec = self.record(node)
        if rec is None:
            return False
        identity = normalize_address(identity)
        if identity == rec.owner:
            return True
        return self.state.tables.is_approved(_node(node), rec.owner, identity)

    def resolver(self, node: bytes) -> Optional[str]:
        return self.state.tables.get_resolver(_node(node))

    def get_resolver_info(self, resolver: str) -> Optional[ResolverInfo]:
        return self.state.tables.get_resolver_info(normalize_address(resolver))

    def is_controller(self, account: str) -> bool:
        return self.roles.has_role(CONTROLLER_ROLE, account)

    # --- Guards --------------------------------------------------------------

    def require_active(self, node: bytes) -> NamespaceRecord:
        rec = self.record(node)
        now = self.state.now()
        if rec is None or not rec.is_active(now):
            raise NamespaceExpired(node, rec.expiration if rec is not None else 0, now)
        return rec

    def require_authorized(self, node: bytes, caller: str) -> None:
        if not self.is_authorized_for(node, caller):
            raise Unauthorized(node, caller)

    # --- Ownership -----------------------------------------------------------

    def set_subname_owner(
        self,
        caller: str,
        label: str,
        parent_name: str,
        new_owner: str,
        expiration: int,
        protected: bool = False,
    ) -> bytes:
        """
        Create or overwrite ``label.parent_name`` and return its node.

        The caller must be authorized on the active parent. An existing
        protected record blocks the call until it expires, whoever the
        claimant is.
        Starting a new tenure (expired record or different owner) drops the
        previous resolver binding.
        """
        caller = normalize_address(caller)
        new_owner = normalize_address(new_owner)
        if not label:
            raise InvalidLabel(label, "label must not be empty")
        if LABEL_SEPARATOR in label:
            raise InvalidLabel(label, "label must not contain a separator")
        if expiration < 0:
            raise ValueError("expiration must be non-negative")
        encoded = codec.encode(codec.join_name(label, parent_name))
        parent = codec.namehash(codec.encode(parent_name))
        node = codec.namehash(encoded)

        with self.state.transaction():
            self.require_authorized(parent, caller)
            self.require_active(parent)
            existing = self.record(node)
            if existing is not None and existing.protected and existing.is_active(self.state.now()):
                raise ProtectedNamespace(node, existing.owner, existing.expiration)
            # a new tenure starts without the previous tenant's binding
            if existing is not None and (
                not existing.is_active(self.state.now()) or existing.owner != new_owner
            ) and self.state.tables.get_resolver(node) is not None:
                self.state.tables.set_resolver(node, None)
                self.state.emit("ResolverSet", node=node, resolver=None)
            self.state.tables.put_namespace(
                node,
                NamespaceRecord(owner=new_owner, expiration=int(expiration), protected=bool(protected), name=encoded),
            )
            self.state.emit("NamespaceOwnerSet", node=node, owner=new_owner)
            self.state.emit("ExpirationSet", node=node, expiration=int(expiration))
            self.state.emit("NameSet", node=node, name=encoded)

        log.info(
            "namespace_claimed",
            node=node,
            name=codec.join_name(label, parent_name),
            owner=new_owner,
            expiration=expiration,
            protected=protected,
        )
        return node

    def set_owner(self, caller: str, node: bytes, new_owner: str) -> None:
        node = _node(node)
        new_owner = normalize_address(new_owner)
        with self.state.transaction():
            self.require_authorized(node, caller)
            rec = self.require_active(node)
            self.state.tables.put_namespace(
                node,
                NamespaceRecord(owner=new_owner, expiration=rec.expiration, protected=rec.protected, name=rec.name),
            )
            self.state.emit("NamespaceOwnerSet", node=node, owner=new_owner)
        log.info("namespace_transferred", node=node, previous=rec.owner, owner=new_owner)

    def set_approval_for_namespace(self, caller: str, node: bytes, operator: str, approved: bool) -> None:
        node = _node(node)
        caller = normalize_address(caller)
        operator = normalize_address(operator)
        rec = self.record(node)
        if rec is None or rec.owner != caller:
            raise NotNamespaceOwner(node, caller)
        with self.state.transaction():
            self.state.tables.set_approved(node, caller, operator, bool(approved))
            self.state.emit(
                "ApprovalForNamespace", node=node, owner=caller, operator=operator, approved=bool(approved)
            )

    def set_expiration(self, caller: str, node: bytes, new_expiration: int) -> None:
        """Controller-only. Expirations never move backwards."""
        node = _node(node)
        self.roles.require_role(CONTROLLER_ROLE, caller)
        with self.state.transaction():
            rec = self.record(node)
            if rec is None:
                raise NamespaceExpired(node, 0, self.state.now())
            if new_expiration < rec.expiration:
                raise InvalidExpiration(node, rec.expiration, new_expiration)
            self.state.tables.put_namespace(
                node,
                NamespaceRecord(owner=rec.owner, expiration=int(new_expiration), protected=rec.protected, name=rec.name),
            )
            self.state.emit("ExpirationSet", node=node, expiration=int(new_expiration))
        log.info("namespace_expiration_set", node=node, expiration=new_expiration)

    # --- Controllers ---------------------------------------------------------

    def grant_controller(self, caller: str, account: str) -> None:
        self.roles.grant_role(caller, CONTROLLER_ROLE, account)

    def revoke_controller(self, caller: str, account: str) -> None:
        self.roles.revoke_role(caller, CONTROLLER_ROLE, account)

    # --- Resolver bindings ---------------------------------------------------

    def make_resolver_commitment(self, node: bytes, resolver: Optional[str], owner: str, secret: bytes) -> bytes:
        return build_resolver_commitment(node, resolver, owner, secret)

    def commit(self, caller: str, commitment: bytes) -> int:
        return self.commitments.commit(caller, commitment)

    def set_resolver(self, caller: str, node: bytes, resolver: Optional[str], secret: bytes) -> None:
        """
        Reveal a binding committed with :meth:`make_resolver_commitment`.

        ``resolver=None`` (or the zero address) removes the binding.
        """
        node = _node(node)
        caller = normalize_address(caller)
        commitment = build_resolver_commitment(node, resolver, caller, secret)
        with self.state.transaction():
            self.commitments.consume(commitment)
            self.require_authorized(node, caller)
            rec = self.require_active(node)
            self._bind(node, rec, resolver)

    def bind_resolver(self, caller: str, node: bytes, resolver: Optional[str]) -> None:
        node = _node(node)
        self.roles.require_role(CONTROLLER_ROLE, caller)
        with self.state.transaction():
            rec = self.require_active(node)
            self._bind(node, rec, resolver)

    def _bind(self, node: bytes, rec: NamespaceRecord, resolver: Optional[str]) -> None:
        if resolver is None or is_zero_address(resolver):
            self.state.tables.set_resolver(node, None)
            self.state.emit("ResolverSet", node=node, resolver=None)
            log.info("resolver_unbound", node=node)
            return
        resolver = normalize_address(resolver)
        name = codec.decode(rec.name)
        self.state.tables.set_resolver(node, resolver)
        self.state.tables.put_resolver_info(resolver, ResolverInfo(name=name, updated_at=self.state.now()))
        self.state.emit("ResolverSet", node=node, resolver=resolver)
        log.info("resolver_bound", node=node, name=name, resolver=resolver)


__all__ = ["NamespaceRegistry", "build_resolver_commitment"]
