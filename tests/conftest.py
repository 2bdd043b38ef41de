"""Shared fixtures for reqgraph tests."""

import logging
from unittest.mock import Mock

import pytest
import structlog

from reqgraph.engine import GraphEngine
from reqgraph.models import Identity, ItemKind
from reqgraph.stores import MemoryStore

R1 = Identity(1, ItemKind.REQUIREMENT)
R2 = Identity(2, ItemKind.REQUIREMENT)
R3 = Identity(3, ItemKind.REQUIREMENT)
S1 = Identity(1, ItemKind.SOLUTION)
S2 = Identity(2, ItemKind.SOLUTION)


@pytest.fixture
def store() -> MemoryStore:
    """Create an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def gateway(store: MemoryStore) -> Mock:
    """Wrap the store so individual calls can be made to fail."""
    return Mock(wraps=store)


@pytest.fixture
def engine(gateway: Mock) -> GraphEngine:
    """Create a loaded engine with requirements R1, R2, R3 and solutions S1, S2."""
    engine = GraphEngine(gateway)
    engine.load()
    for _ in range(3):
        engine.create_item(ItemKind.REQUIREMENT)
    for _ in range(2):
        engine.create_item(ItemKind.SOLUTION)
    return engine


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Keep log events out of captured command output."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))
