# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Credential dispatcher.

Routing
-------
A credential key is reverse-domain style: ``"eth.ecs.controlled-accounts.accounts:1"``.
Parameters after ``:`` are ignored for routing. The base key's labels are
reversed into candidate namespaces, longest first::

    accounts.controlled-accounts.ecs.eth
    controlled-accounts.ecs.eth
    ecs.eth
    eth

The first candidate that is active *and* has a resolver bound wins. The root
namespace is never a candidate.

Identifier
----------
The queried name's first two labels (subject, network) are re-encoded as the
identifier handed to the resolver; the rest of the name is not passed on.

Two-phase results
-----------------
:meth:`CredentialDispatcher.resolve` returns the resolver's
:class:`~nameservice.resolvers.Immediate` or
:class:`~nameservice.resolvers.Pending` as-is.
:meth:`CredentialDispatcher.resolve_async` drives pending results through a
Gateway Executor until an immediate value comes out. Gateway errors go to
the failure continuation, which by default re-raises them unchanged.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional

from . import codec
from .config import NameServiceConfig
from .constants import LABEL_SEPARATOR
from .gateway import GatewayExecutor
from .logging import get_logger
from .metrics import METRICS
from .registry import NamespaceRegistry
from .resolvers.base import Immediate, Pending, Resolution, split_key
from .state import State
from .utils.bytes import normalize_address

log = get_logger(__name__)

# Identifier used when a lookup has no subject (hook resolution).
EMPTY_IDENTIFIER = b"\x00"


@dataclass(frozen=True)
class ResolverMatch:
    node: bytes
    name: str
    address: str
    resolver: Any


def candidate_names(key: str) -> List[str]:
    """Namespaces a key may route to, most specific first."""
    base, _ = split_key(key)
    if not base:
        return []
    labels = base.split(LABEL_SEPARATOR)
    return [LABEL_SEPARATOR.join(reversed(labels[:n])) for n in range(len(labels), 0, -1)]


class CredentialDispatcher:
    def __init__(
        self,
        state: State,
        registry: NamespaceRegistry,
        *,
        config: Optional[NameServiceConfig] = None,
    ) -> None:
        self.state = state
        self.registry = registry
        self.config = config or registry.config

    # --- Routing -------------------------------------------------------------

    def _match(self, name: str) -> Optional[ResolverMatch]:
        node = codec.namehash_name(name)
        if not self.registry.is_active(node):
            return None
        address = self.registry.resolver(node)
        if address is None:
            return None
        resolver = self.state.component_at(address)
        if resolver is None:
            log.warning("resolver_not_deployed", name=name, resolver=address)
            return None
        return ResolverMatch(node=node, name=name, address=address, resolver=resolver)

    def find_resolver(self, key: str) -> Optional[ResolverMatch]:
        for name in candidate_names(key):
            match = self._match(name)
            if match is not None:
                return match
        return None

    def extract_identifier(self, name: str) -> bytes:
        return codec.identifier_from_name(name)

    # --- Resolution ----------------------------------------------------------

    def _invoke(self, match: ResolverMatch, identifier: bytes, key: str) -> Resolution:
        try:
            result = match.resolver.resolve(identifier, key)
        except Exception:
            METRICS.record_resolution("error")
            raise
        METRICS.record_resolution("pending" if isinstance(result, Pending) else "immediate")
        log.debug("credential_dispatched", namespace=match.name, resolver=match.address, key=key)
        return result

    def resolve(self, name: str, key: str) -> Resolution:
        """
        Route *key* and ask the matched resolver about *name*'s identifier.
        Unmatched keys resolve to ``Immediate("")``.
        """
        match = self.find_resolver(key)
        if match is None:
            METRICS.record_resolution("unmatched")
            return Immediate("")
        return self._invoke(match, self.extract_identifier(name), key)

    def resolve_via_hook(self, resolver: str, key: str, identifier: bytes = EMPTY_IDENTIFIER) -> Resolution:
        """
        Resolve *key* under the namespace *resolver* was last bound to.

        A mismatch between that namespace's current binding and *resolver* is
        logged; the current binding answers.
        """
        resolver = normalize_address(resolver)
        info = self.registry.get_resolver_info(resolver)
        if info is None:
            METRICS.record_resolution("unmatched")
            return Immediate("")
        match = self._match(info.name)
        if match is None:
            METRICS.record_resolution("unmatched")
            return Immediate("")
        if match.address != resolver:
            log.warning("resolver_mismatch", name=info.name, expected=resolver, found=match.address)
        return self._invoke(match, identifier, key)

    async def settle(
        self,
        result: Resolution,
        gateway: Optional[GatewayExecutor] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        """Run pending results through *gateway* until a value is available."""
        if timeout is None:
            timeout = self.config.gateway_timeout_s
        while isinstance(result, Pending):
            if gateway is None:
                raise ValueError("resolution is pending and no gateway executor was supplied")
            try:
                with METRICS.gateway_timer():
                    call = gateway.execute(result.request)
                    if timeout is not None:
                        values, context = await asyncio.wait_for(call, timeout)
                    else:
                        values, context = await call
            except Exception as exc:
                log.warning("gateway_failed", target=result.request.target, error=repr(exc))
                result = result.fail(exc)
                continue
            result = result.resume(values, context)
        return result.value

    async def resolve_async(
        self,
        name: str,
        key: str,
        gateway: Optional[GatewayExecutor] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        return await self.settle(self.resolve(name, key), gateway, timeout=timeout)


__all__ = ["CredentialDispatcher", "ResolverMatch", "candidate_names", "EMPTY_IDENTIFIER"]
