"""Root detection over the link graph."""

from reqgraph.link_index import LinkIndex
from reqgraph.models import Identity
from reqgraph.registry import ItemRegistry


class RootResolver:
    """Finds the items that are not the child of any link."""

    def __init__(self, registry: ItemRegistry, index: LinkIndex) -> None:
        self.registry = registry
        self.index = index

    def roots(self) -> set[Identity]:
        """Return the identities with no incoming link, in no particular order."""
        return {identity for identity in self.registry if self.index.parent_link(identity) is None}
