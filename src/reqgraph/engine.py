"""Graph engine coordinating the registry, the link index and the store."""

import functools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

import structlog

from reqgraph.errors import (
    EngineStateError,
    NotASolutionError,
    PersistenceError,
    SelfLinkError,
    StoreError,
)
from reqgraph.gateway import PersistenceGateway
from reqgraph.guard import ConsistencyGuard
from reqgraph.link_index import LinkIndex, LinksView
from reqgraph.models import (
    REQUIREMENT_ATTRIBUTES,
    SOLUTION_ATTRIBUTES,
    Identity,
    Item,
    ItemKind,
    Link,
    Solution,
    item_from_attributes,
)
from reqgraph.registry import ItemRegistry
from reqgraph.roots import RootResolver

logger = structlog.get_logger()

GeometryListener = Callable[[list[Link]], None]

# Attributes whose change counts as an edit of the item
TEXT_ATTRIBUTES = ("description", "rationale", "fit_criterion")

# Attributes update_item accepts; geometry goes through move_item and resize_item
EDITABLE_ATTRIBUTES = {
    ItemKind.REQUIREMENT: TEXT_ATTRIBUTES + ("shown",),
    ItemKind.SOLUTION: ("description", "shown"),
}


class EngineState(Enum):
    """Lifecycle of an opened project."""

    CLOSED = "closed"
    LOADING = "loading"
    READY = "ready"


@dataclass
class DeleteReport:
    """Outcome of a cascading delete.

    Failures met while clearing the item's links are collected here instead
    of aborting the delete.
    """

    identity: Identity
    removed_links: list[Link] = field(default_factory=list)
    failures: list[PersistenceError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def command(method: Callable[..., Any]) -> Callable[..., Any]:
    """Run an engine method under the engine lock, in the ready state only."""

    @functools.wraps(method)
    def wrapper(self: "GraphEngine", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self.state is not EngineState.READY:
                raise EngineStateError(f"Cannot {method.__name__} while the project is {self.state.value}")
            return method(self, *args, **kwargs)

    return wrapper


class GraphEngine:
    """Owns the item registry and link index of one opened project.

    Every mutating command either reaches both the store and the in-memory
    state or neither. The store is always written first; memory follows only
    on durable success. ``delete_item`` is the exception: link cleanup is
    best effort so a broken item can always be removed.
    """

    def __init__(self, gateway: PersistenceGateway, on_geometry_changed: GeometryListener | None = None) -> None:
        """Initialize the engine in the closed state.

        Args:
            gateway: Durable store of the project
            on_geometry_changed: Called with the links whose endpoint geometry
                must be recomputed after an item moves or a link is added
        """
        self.gateway = gateway
        self.on_geometry_changed = on_geometry_changed
        self.state = EngineState.CLOSED
        self.registry = ItemRegistry()
        self.index = LinkIndex()
        self.guard = ConsistencyGuard(self.index, gateway)
        self.resolver = RootResolver(self.registry, self.index)
        self.skipped_links: list[tuple[Identity, Identity]] = []
        self._lock = threading.RLock()

    # Lifecycle

    def load(self) -> None:
        """Rebuild the registry and the link index from the store.

        Items are loaded first, then links. A link whose endpoint cannot be
        resolved is logged, recorded in ``skipped_links`` and ignored.

        Raises:
            PersistenceError: The store could not be read; the engine is closed
        """
        with self._lock:
            self.state = EngineState.LOADING
            self.registry.clear()
            self.index.clear()
            self.skipped_links = []
            logger.debug("Loading project")

            try:
                items = self.gateway.load_items()
                links = self.gateway.load_links()
            except StoreError as e:
                self.state = EngineState.CLOSED
                logger.error("Failed to load project", error=str(e))
                raise PersistenceError("load", e) from e

            for identity, attributes in items.items():
                self.registry.register(item_from_attributes(identity, attributes))

            for child, parent in links.items():
                if parent not in self.registry or child not in self.registry or parent == child:
                    logger.warning(
                        "Ignoring link with unresolved endpoint",
                        parent=str(parent),
                        parent_found=parent in self.registry,
                        child=str(child),
                        child_found=child in self.registry,
                    )
                    self.skipped_links.append((parent, child))
                    continue
                self.index.insert(Link(parent, child))

            self.state = EngineState.READY
            logger.info("Project loaded", items=len(self.registry), links=len(links) - len(self.skipped_links))

    def reload(self) -> None:
        """Drop the in-memory state and load the project again from the store."""
        self.load()

    def close(self) -> None:
        """Discard the in-memory state of the project."""
        with self._lock:
            self.registry.clear()
            self.index.clear()
            self.skipped_links = []
            self.state = EngineState.CLOSED
            logger.debug("Project closed")

    # Link commands

    @command
    def add_link(self, parent: Identity, child: Identity) -> Link:
        """Link ``parent`` to ``child``.

        Raises:
            NotFoundError: an endpoint is not registered
            SelfLinkError: parent and child are the same item
            DuplicateParentError: child already has a parent
            PersistenceError: the association could not be stored
        """
        self.registry.resolve(parent)
        self.registry.resolve(child)
        self.guard.validate(parent, child)

        try:
            self.gateway.add_association(parent, child)
        except StoreError as e:
            logger.error("Failed to store link", parent=str(parent), child=str(child), error=str(e))
            raise PersistenceError("add_association", e) from e

        link = Link(parent, child)
        self.index.insert(link)
        logger.info("Link added", parent=str(parent), child=str(child))
        self._geometry_changed([link])
        return link

    @command
    def remove_link(self, link: Link) -> None:
        """Remove a link.

        A link that is not indexed is left alone, so a stale link never clears
        the child's current parent. Removing a link the store no longer has
        succeeds.
        """
        self.registry.resolve(link.parent)
        self.registry.resolve(link.child)
        if self.index.parent_link(link.child) != link:
            logger.debug("Link is not indexed, nothing to remove", parent=str(link.parent), child=str(link.child))
            return

        try:
            self.gateway.remove_association(link.child)
        except StoreError as e:
            logger.error("Failed to remove stored link", parent=str(link.parent), child=str(link.child), error=str(e))
            raise PersistenceError("remove_association", e) from e

        self.index.remove(link)
        logger.info("Link removed", parent=str(link.parent), child=str(link.child))

    # Item commands

    @command
    def create_item(
        self,
        kind: ItemKind,
        x: int = 0,
        y: int = 0,
        width: int | None = None,
        height: int | None = None,
        description: str = "",
    ) -> Item:
        """Create a new item in the store, then register it."""
        try:
            identity = self.gateway.create_item(kind)
        except StoreError as e:
            raise PersistenceError("create_item", e) from e

        try:
            self.gateway.set_attribute(identity, "position", (x, y))
            if width is not None and height is not None:
                self.gateway.set_attribute(identity, "size", (width, height))
            if description:
                self.gateway.set_attribute(identity, "description", description)
            attributes = self._fetch_attributes(identity)
        except StoreError as e:
            logger.error("Failed to initialize new item", identity=str(identity), error=str(e))
            self._discard_row(identity)
            raise PersistenceError("set_attribute", e) from e

        item = item_from_attributes(identity, attributes)
        self.registry.register(item)
        logger.info("Item created", identity=str(identity))
        return item

    @command
    def move_item(self, identity: Identity, x: int, y: int) -> Item:
        """Move an item. Link membership never changes, only link geometry."""
        item = self.registry.resolve(identity)

        try:
            self.gateway.set_attribute(identity, "position", (x, y))
        except StoreError as e:
            raise PersistenceError("set_attribute", e) from e

        item = replace(item, x=x, y=y)
        self.registry.register(item)
        logger.debug("Item moved", identity=str(identity), x=x, y=y)
        self._geometry_changed(list(self.index.links_of(identity)))
        return item

    @command
    def resize_item(self, identity: Identity, width: int, height: int) -> Item:
        item = self.registry.resolve(identity)

        try:
            self.gateway.set_attribute(identity, "size", (width, height))
        except StoreError as e:
            raise PersistenceError("set_attribute", e) from e

        item = replace(item, width=width, height=height)
        self.registry.register(item)
        self._geometry_changed(list(self.index.links_of(identity)))
        return item

    @command
    def update_item(self, identity: Identity, **changes: Any) -> Item:
        """Persist attribute changes of an item.

        Text changes bump the item version once per call. If a write fails
        the attributes already written are restored.

        Args:
            identity: Item to update
            **changes: description, shown, and for requirements rationale
                and fit_criterion

        Raises:
            ValueError: an attribute is not valid for the item kind
        """
        item = self.registry.resolve(identity)
        allowed = EDITABLE_ATTRIBUTES[identity.kind]
        for name in changes:
            if name not in allowed:
                raise ValueError(f"Item {identity} has no editable attribute '{name}'")

        changes = {name: value for name, value in changes.items() if getattr(item, name) != value}
        if not changes:
            return item
        if any(name in TEXT_ATTRIBUTES for name in changes):
            changes["version"] = item.version + 1

        written: list[str] = []
        try:
            for name, value in changes.items():
                self.gateway.set_attribute(identity, name, value)
                written.append(name)
        except StoreError as e:
            logger.error("Failed to update item", identity=str(identity), attribute=name, error=str(e))
            self._restore_attributes(item, written)
            raise PersistenceError("set_attribute", e) from e

        item = replace(item, **changes)
        self.registry.register(item)
        logger.info("Item updated", identity=str(identity), attributes=list(changes))
        return item

    @command
    def delete_item(self, identity: Identity) -> DeleteReport:
        """Delete an item and every link touching it.

        Links are purged from the index even when their stored association
        cannot be removed; those failures are collected in the report. Only
        a failure to delete the item row itself aborts the command.

        Raises:
            NotFoundError: the item is not registered
            PersistenceError: the item row could not be deleted
        """
        self.registry.resolve(identity)
        report = DeleteReport(identity)

        for link in list(self.index.links_of(identity)):
            try:
                self.gateway.remove_association(link.child)
            except StoreError as e:
                logger.warning("Failed to remove stored link", parent=str(link.parent), child=str(link.child))
                report.failures.append(PersistenceError("remove_association", e))
            self.index.remove(link)
            report.removed_links.append(link)
        report.removed_links.extend(self.index.remove_all_for(identity))

        try:
            self.gateway.remove_all_associations_for(identity)
        except StoreError as e:
            logger.warning("Failed to sweep stored links", identity=str(identity), error=str(e))
            report.failures.append(PersistenceError("remove_all_associations_for", e))

        try:
            self.gateway.remove_item(identity)
        except StoreError as e:
            logger.error("Failed to delete item", identity=str(identity), error=str(e))
            raise PersistenceError("remove_item", e) from e

        self.registry.evict(identity)
        for owner in self.registry.items():
            if isinstance(owner, Solution):
                owner.remove_child(identity)

        logger.info(
            "Item deleted",
            identity=str(identity),
            links=len(report.removed_links),
            failures=len(report.failures),
        )
        return report

    # Structural children

    @command
    def add_child(self, solution: Identity, child: Identity) -> None:
        """Make ``child`` a structural child of a solution."""
        owner = self._solution(solution)
        self.registry.resolve(child)
        if solution == child:
            raise SelfLinkError(child)

        try:
            self.gateway.add_child(solution, child)
        except StoreError as e:
            raise PersistenceError("add_child", e) from e
        owner.add_child(child)

    @command
    def remove_child(self, solution: Identity, child: Identity) -> None:
        owner = self._solution(solution)

        try:
            self.gateway.remove_child(solution, child)
        except StoreError as e:
            raise PersistenceError("remove_child", e) from e
        owner.remove_child(child)

    # Reads

    def item(self, identity: Identity) -> Item:
        with self._lock:
            return self.registry.resolve(identity)

    def items(self) -> list[Item]:
        with self._lock:
            return sorted(self.registry.items(), key=lambda item: item.identity)

    def links_of(self, identity: Identity) -> LinksView:
        """Return a live view of the links touching ``identity``.

        The view reads the index on every iteration; copy it with ``list()``
        before running commands that change links.
        """
        with self._lock:
            return self.index.links_of(identity)

    def links(self) -> list[Link]:
        with self._lock:
            return list(self.index.links())

    def find_link(self, parent: Identity, child: Identity) -> Link | None:
        with self._lock:
            link = self.index.parent_link(child)
        if link is not None and link.parent == parent:
            return link
        return None

    def parent_of(self, identity: Identity) -> Identity | None:
        with self._lock:
            link = self.index.parent_link(identity)
        return link.parent if link else None

    def children_of(self, identity: Identity) -> list[Identity]:
        with self._lock:
            return self.index.children_of(identity)

    def roots(self) -> set[Identity]:
        with self._lock:
            return self.resolver.roots()

    def tree(self) -> list[dict[str, Any]]:
        """Return the link forest as nested dictionaries, starting at sorted roots.

        Returns:
            List of nodes shaped ``{"item": Item, "children": [node, ...]}``
        """
        visited: set[Identity] = set()

        def build(identity: Identity) -> dict[str, Any]:
            visited.add(identity)
            children = [build(child) for child in sorted(self.index.children_of(identity)) if child not in visited]
            return {"item": self.registry.resolve(identity), "children": children}

        with self._lock:
            return [build(root) for root in sorted(self.resolver.roots())]

    # Helpers

    def _solution(self, identity: Identity) -> Solution:
        item = self.registry.resolve(identity)
        if not isinstance(item, Solution):
            raise NotASolutionError(identity)
        return item

    def _fetch_attributes(self, identity: Identity) -> dict[str, Any]:
        names = REQUIREMENT_ATTRIBUTES if identity.kind is ItemKind.REQUIREMENT else SOLUTION_ATTRIBUTES
        return {name: self.gateway.get_attribute(identity, name) for name in names}

    def _discard_row(self, identity: Identity) -> None:
        try:
            self.gateway.remove_item(identity)
        except StoreError as e:
            logger.warning("Failed to discard incomplete item", identity=str(identity), error=str(e))

    def _restore_attributes(self, item: Item, names: list[str]) -> None:
        for name in names:
            try:
                self.gateway.set_attribute(item.identity, name, getattr(item, name))
            except StoreError as e:
                logger.warning("Failed to restore attribute", identity=str(item.identity), attribute=name, error=str(e))

    def _geometry_changed(self, links: list[Link]) -> None:
        if self.on_geometry_changed is not None and links:
            self.on_geometry_changed(links)
