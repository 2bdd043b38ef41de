"""Persistence gateway interface for project storage."""

from abc import ABC, abstractmethod
from typing import Any

from reqgraph.models import Identity, ItemKind

# Attribute name used by stores to expose the durable parent of an item
PARENT_ATTRIBUTE = "parent"


class PersistenceGateway(ABC):
    """Abstract base class for durable item and link stores.

    Implementations raise ``StoreError`` when a durable operation fails.
    """

    @abstractmethod
    def load_items(self) -> dict[Identity, dict[str, Any]]:
        """Load the attributes of every stored item.

        Returns:
            Mapping of identity to attributes (description, x, y, width, height,
            shown, version, uid, and the kind-specific attributes)
        """
        pass

    @abstractmethod
    def load_links(self) -> dict[Identity, Identity]:
        """Load every parent association as a child to parent mapping."""
        pass

    @abstractmethod
    def add_association(self, parent: Identity, child: Identity) -> None:
        """Make ``parent`` the parent of ``child``.

        Fails if the child already has a durable parent.
        """
        pass

    @abstractmethod
    def remove_association(self, child: Identity) -> None:
        """Clear the parent of ``child``. Clearing an absent parent is not an error."""
        pass

    @abstractmethod
    def remove_all_associations_for(self, identity: Identity) -> None:
        """Clear the parent of ``identity`` and of every item whose parent it is."""
        pass

    @abstractmethod
    def get_attribute(self, identity: Identity, name: str) -> Any:
        """Read one attribute of an item. Returns None for a null value."""
        pass

    @abstractmethod
    def set_attribute(self, identity: Identity, name: str, value: Any) -> None:
        """Write one attribute of an item."""
        pass

    @abstractmethod
    def create_item(self, kind: ItemKind) -> Identity:
        """Create an empty item row and return its identity."""
        pass

    @abstractmethod
    def remove_item(self, identity: Identity) -> None:
        """Delete an item row."""
        pass

    @abstractmethod
    def add_child(self, solution: Identity, child: Identity) -> None:
        """Record ``child`` as a structural child of a solution."""
        pass

    @abstractmethod
    def remove_child(self, solution: Identity, child: Identity) -> None:
        """Remove ``child`` from the structural children of a solution."""
        pass

    def close(self) -> None:
        """Release any resource held by the store."""
        pass
