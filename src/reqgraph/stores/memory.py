"""In-memory store implementation."""

import random
from typing import Any

import structlog

from reqgraph.errors import StoreError
from reqgraph.gateway import PARENT_ATTRIBUTE, PersistenceGateway
from reqgraph.models import REQUIREMENT_ATTRIBUTES, SOLUTION_ATTRIBUTES, Identity, ItemKind

logger = structlog.get_logger()

# Composite attributes map onto two plain ones
COMPOSITE_ATTRIBUTES = {"position": ("x", "y"), "size": ("width", "height")}


def default_attributes(kind: ItemKind) -> dict[str, Any]:
    """Attributes of a freshly created, empty item row."""
    attributes: dict[str, Any] = {
        "uid": None,
        "version": 1,
        "shown": True,
        "description": "",
        "x": 0,
        "y": 0,
        "width": 128,
        "height": 64,
    }
    if kind is ItemKind.REQUIREMENT:
        attributes.update(rationale="", fit_criterion="")
    return attributes


class MemoryStore(PersistenceGateway):
    """Dictionary-backed store, used for tests and scratch projects."""

    def __init__(self) -> None:
        self._rows: dict[Identity, dict[str, Any]] = {}
        self._parents: dict[Identity, Identity] = {}
        self._children: dict[Identity, list[Identity]] = {}
        self._next_id = {kind: 1 for kind in ItemKind}
        logger.debug("Memory store initialized")

    def _row(self, identity: Identity) -> dict[str, Any]:
        try:
            return self._rows[identity]
        except KeyError:
            raise StoreError(f"Item {identity} does not exist") from None

    def _new_uid(self) -> int:
        taken = {row["uid"] for row in self._rows.values()}
        while True:
            uid = random.getrandbits(63)
            if uid not in taken:
                return uid

    def load_items(self) -> dict[Identity, dict[str, Any]]:
        items = {}
        for identity, row in self._rows.items():
            attributes = dict(row)
            if identity.kind is ItemKind.SOLUTION:
                attributes["children"] = list(self._children.get(identity, []))
            items[identity] = attributes
        logger.debug("Loaded items", count=len(items))
        return items

    def load_links(self) -> dict[Identity, Identity]:
        return dict(self._parents)

    def add_association(self, parent: Identity, child: Identity) -> None:
        self._row(parent)
        self._row(child)
        if child in self._parents:
            raise StoreError(f"Item {child} already has parent {self._parents[child]}")
        self._parents[child] = parent
        logger.debug("Association stored", parent=str(parent), child=str(child))

    def remove_association(self, child: Identity) -> None:
        self._parents.pop(child, None)

    def remove_all_associations_for(self, identity: Identity) -> None:
        self._parents.pop(identity, None)
        for child in [c for c, p in self._parents.items() if p == identity]:
            del self._parents[child]

    def get_attribute(self, identity: Identity, name: str) -> Any:
        row = self._row(identity)
        if name == PARENT_ATTRIBUTE:
            return self._parents.get(identity)
        if name in COMPOSITE_ATTRIBUTES:
            return tuple(row[part] for part in COMPOSITE_ATTRIBUTES[name])
        if name not in row:
            raise StoreError(f"Unknown attribute '{name}' for item {identity}")
        return row[name]

    def set_attribute(self, identity: Identity, name: str, value: Any) -> None:
        row = self._row(identity)
        if name in COMPOSITE_ATTRIBUTES:
            for part, part_value in zip(COMPOSITE_ATTRIBUTES[name], value, strict=True):
                row[part] = part_value
            return
        if name == PARENT_ATTRIBUTE:
            raise StoreError("Parent associations are written with add_association")
        allowed = REQUIREMENT_ATTRIBUTES if identity.kind is ItemKind.REQUIREMENT else SOLUTION_ATTRIBUTES
        if name not in allowed:
            raise StoreError(f"Unknown attribute '{name}' for item {identity}")
        row[name] = value

    def create_item(self, kind: ItemKind) -> Identity:
        identity = Identity(self._next_id[kind], kind)
        self._next_id[kind] += 1
        row = default_attributes(kind)
        row["uid"] = self._new_uid()
        self._rows[identity] = row
        logger.info("Item created", identity=str(identity))
        return identity

    def remove_item(self, identity: Identity) -> None:
        self._row(identity)
        del self._rows[identity]
        self._children.pop(identity, None)
        for children in self._children.values():
            if identity in children:
                children.remove(identity)
        logger.info("Item removed", identity=str(identity))

    def add_child(self, solution: Identity, child: Identity) -> None:
        self._row(solution)
        self._row(child)
        if solution.kind is not ItemKind.SOLUTION:
            raise StoreError(f"Item {solution} cannot own children")
        children = self._children.setdefault(solution, [])
        if child not in children:
            children.append(child)

    def remove_child(self, solution: Identity, child: Identity) -> None:
        children = self._children.get(solution, [])
        if child in children:
            children.remove(child)
