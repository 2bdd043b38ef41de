"""Item and link consistency engine for requirement and solution graphs."""

from reqgraph.engine import DeleteReport, EngineState, GraphEngine
from reqgraph.models import Identity, Item, ItemKind, Link, Requirement, Solution

__all__ = [
    "DeleteReport",
    "EngineState",
    "GraphEngine",
    "Identity",
    "Item",
    "ItemKind",
    "Link",
    "Requirement",
    "Solution",
]
