"""Registry of the live items of an opened project."""

from collections.abc import Iterator

from reqgraph.errors import NotFoundError
from reqgraph.models import Identity, Item


class ItemRegistry:
    """Maps each identity to its live item.

    The registry holds already-fetched attributes only; it never reads from
    or writes to a store.
    """

    def __init__(self) -> None:
        self._items: dict[Identity, Item] = {}

    def register(self, item: Item) -> None:
        """Insert an item, replacing any entry with the same identity."""
        self._items[item.identity] = item

    def resolve(self, identity: Identity) -> Item:
        """Return the item for an identity or raise NotFoundError."""
        try:
            return self._items[identity]
        except KeyError:
            raise NotFoundError(identity) from None

    def get(self, identity: Identity) -> Item | None:
        return self._items.get(identity)

    def evict(self, identity: Identity) -> Item | None:
        return self._items.pop(identity, None)

    def items(self) -> list[Item]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, identity: object) -> bool:
        return identity in self._items

    def __iter__(self) -> Iterator[Identity]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
