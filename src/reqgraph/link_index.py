"""Bidirectional adjacency index over links."""

from collections.abc import Iterator

import structlog

from reqgraph.models import Identity, Link

logger = structlog.get_logger()


class LinksView:
    """Live, restartable view of the links incident to one identity.

    Every iteration reads the current adjacency list, so the view reflects
    later inserts and removals. Take a ``list()`` copy before mutating the
    index while walking it.
    """

    def __init__(self, adjacency: dict[Identity, list[Link]], identity: Identity) -> None:
        self._adjacency = adjacency
        self._identity = identity

    def __iter__(self) -> Iterator[Link]:
        return iter(self._adjacency.get(self._identity, ()))

    def __len__(self) -> int:
        return len(self._adjacency.get(self._identity, ()))

    def __contains__(self, link: object) -> bool:
        return link in self._adjacency.get(self._identity, ())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"LinksView({self._identity}, {list(self)!r})"


class LinkIndex:
    """Identity to incident links, kept symmetric for both endpoints.

    A link stored under its parent is always stored under its child as well.
    List order carries no meaning.
    """

    def __init__(self) -> None:
        self._adjacency: dict[Identity, list[Link]] = {}

    def links_of(self, identity: Identity) -> LinksView:
        """Return a live view of the links where ``identity`` is an endpoint."""
        return LinksView(self._adjacency, identity)

    def insert(self, link: Link) -> None:
        """Append a link to the lists of both its endpoints."""
        self._adjacency.setdefault(link.parent, []).append(link)
        self._adjacency.setdefault(link.child, []).append(link)
        logger.debug("Link indexed", parent=str(link.parent), child=str(link.child))

    def remove(self, link: Link) -> bool:
        """Remove a link from both endpoint lists.

        Removing a link that is not indexed is a no-op.

        Returns:
            True if the link was present
        """
        removed = self._discard(link.parent, link)
        if link.child != link.parent:
            removed = self._discard(link.child, link) or removed
        if removed:
            logger.debug("Link unindexed", parent=str(link.parent), child=str(link.child))
        return removed

    def remove_all_for(self, identity: Identity) -> list[Link]:
        """Remove every link incident to ``identity`` from both sides.

        Returns:
            The removed links
        """
        removed = list(self._adjacency.get(identity, ()))
        for link in removed:
            self.remove(link)
        self._adjacency.pop(identity, None)
        return removed

    def parent_link(self, identity: Identity) -> Link | None:
        """Return the link having ``identity`` as child, if any."""
        for link in self._adjacency.get(identity, ()):
            if link.child == identity:
                return link
        return None

    def children_of(self, identity: Identity) -> list[Identity]:
        return [link.child for link in self._adjacency.get(identity, ()) if link.parent == identity]

    def links(self) -> Iterator[Link]:
        """Yield every indexed link exactly once."""
        for identity, links in self._adjacency.items():
            for link in links:
                if link.parent == identity:
                    yield link

    def clear(self) -> None:
        self._adjacency.clear()

    def __len__(self) -> int:
        return sum(1 for _ in self.links())

    def _discard(self, key: Identity, link: Link) -> bool:
        links = self._adjacency.get(key)
        if not links:
            return False
        try:
            position = links.index(link)
        except ValueError:
            return False
        # Swap with the last entry and truncate
        last = len(links) - 1
        links[position] = links[last]
        links.pop()
        if not links:
            del self._adjacency[key]
        return True
