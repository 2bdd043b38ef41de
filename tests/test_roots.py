"""Tests for root resolution."""

from reqgraph.link_index import LinkIndex
from reqgraph.models import Identity, ItemKind, Link, Requirement, Solution
from reqgraph.registry import ItemRegistry
from reqgraph.roots import RootResolver

R1 = Identity(1, ItemKind.REQUIREMENT)
R2 = Identity(2, ItemKind.REQUIREMENT)
S1 = Identity(1, ItemKind.SOLUTION)


def make_resolver(*links: Link) -> RootResolver:
    registry = ItemRegistry()
    registry.register(Requirement(R1))
    registry.register(Requirement(R2))
    registry.register(Solution(S1))
    index = LinkIndex()
    for link in links:
        index.insert(link)
    return RootResolver(registry, index)


def test_all_items_are_roots_without_links() -> None:
    """Test that unlinked items are all roots."""
    assert make_resolver().roots() == {R1, R2, S1}


def test_children_are_not_roots() -> None:
    """Test that the child endpoint of a link is not a root."""
    assert make_resolver(Link(S1, R1), Link(R1, R2)).roots() == {S1}


def test_same_numeric_id_is_resolved_per_kind() -> None:
    """Test that a parented R1 does not hide S1."""
    assert make_resolver(Link(R2, R1)).roots() == {R2, S1}


def test_cycle_has_no_roots() -> None:
    """Test that items in a parent cycle are not roots."""
    assert make_resolver(Link(R1, R2), Link(R2, R1)).roots() == {S1}
