# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Explicit world state shared by every component.

A :class:`State` bundles what would otherwise be ambient global tables:

- the byte KV store (behind :class:`~nameservice.store.tables.Tables`),
- the clock every expiration and commitment age is evaluated against,
- the append-only event log,
- the resolver directory (address -> live resolver instance).

Components receive the state by reference in their constructor, so tests
create one isolated state per scenario.

Atomicity
---------
Mutating operations run inside :meth:`State.transaction`. A failing call
rolls back its KV writes *and* any events it appended, so no partial state is
observable. Transactions nest.
Side effects outside the store (metrics) are registered with
:meth:`State.after_commit` and run once the outermost transaction commits.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from .logging import get_logger
from .store import KeyValue
from .store.memory import MemoryKeyValue
from .store.tables import Tables
from .types import Event
from .utils.bytes import normalize_address
from .utils.time import Clock, SystemClock

log = get_logger(__name__)


class State:
    def __init__(self, kv: Optional[KeyValue] = None, clock: Optional[Clock] = None) -> None:
        self.kv: KeyValue = kv if kv is not None else MemoryKeyValue()
        self.clock: Clock = clock if clock is not None else SystemClock()
        self.tables = Tables(self.kv)
        self.events: List[Event] = []
        self._components: Dict[str, Any] = {}
        self._depth = 0
        self._on_commit: List[Callable[[], None]] = []

    def now(self) -> int:
        return int(self.clock.now())

    # --- Events --------------------------------------------------------------

    def emit(self, event: str, /, **args: Any) -> Event:
        ev = Event(event, dict(args))
        self.events.append(ev)
        log.debug("state_event", event_name=event, **args)
        return ev

    def events_named(self, event: str) -> List[Event]:
        return [e for e in self.events if e.name == event]

    # --- Transactions --------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        mark, hooks = len(self.events), len(self._on_commit)
        self._depth += 1
        try:
            with self.kv.transaction():
                yield
        except BaseException:
            del self.events[mark:]
            del self._on_commit[hooks:]
            raise
        finally:
            self._depth -= 1
        if self._depth == 0:
            pending, self._on_commit = self._on_commit, []
            for fn in pending:
                fn()

    def after_commit(self, fn: Callable[[], None]) -> None:
        """Run *fn* when the outermost transaction commits, or now if none is open."""
        if self._depth == 0:
            fn()
        else:
            self._on_commit.append(fn)

    # --- Resolver directory --------------------------------------------------

    def deploy(self, component: Any) -> str:
        """Make *component* reachable by its ``address``."""
        address = normalize_address(component.address)
        if address in self._components and self._components[address] is not component:
            raise ValueError(f"address {address} already deployed")
        self._components[address] = component
        return address

    def component_at(self, address: Optional[str]) -> Optional[Any]:
        if address is None:
            return None
        return self._components.get(normalize_address(address))


__all__ = ["State"]
