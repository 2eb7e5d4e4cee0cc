from __future__ import annotations

import pytest

from nameservice.config import NameServiceConfig
from nameservice.constants import NEVER_EXPIRES
from nameservice.registrar import CommitRevealRegistrar, RegistrarController
from nameservice.registry import NamespaceRegistry
from nameservice.state import State
from nameservice.store.memory import MemoryKeyValue
from nameservice.utils.time import ManualClock

DEPLOYER = "0x" + "d0" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20

START = 1_000_000


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture
def state(clock: ManualClock) -> State:
    return State(MemoryKeyValue(), clock)


@pytest.fixture
def config() -> NameServiceConfig:
    return NameServiceConfig()


@pytest.fixture
def registry(state: State, config: NameServiceConfig) -> NamespaceRegistry:
    """Registry with ``eth`` and ``ecs.eth`` owned by the deployer, never expiring."""
    reg = NamespaceRegistry(state, DEPLOYER, config=config)
    reg.set_subname_owner(DEPLOYER, "eth", "", DEPLOYER, NEVER_EXPIRES)
    reg.set_subname_owner(DEPLOYER, "ecs", "eth", DEPLOYER, NEVER_EXPIRES)
    return reg


def _install(registry: NamespaceRegistry, registrar) -> None:
    registry.set_approval_for_namespace(DEPLOYER, registrar.base_node, registrar.address, True)
    registry.grant_controller(DEPLOYER, registrar.address)


@pytest.fixture
def registrar(state: State, registry: NamespaceRegistry) -> RegistrarController:
    r = RegistrarController(state, registry, DEPLOYER)
    _install(registry, r)
    return r


@pytest.fixture
def cr_registrar(state: State, registry: NamespaceRegistry) -> CommitRevealRegistrar:
    r = CommitRevealRegistrar(state, registry, DEPLOYER)
    _install(registry, r)
    return r
