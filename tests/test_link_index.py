"""Tests for the link index."""

from reqgraph.link_index import LinkIndex
from reqgraph.models import Identity, ItemKind, Link

P = Identity(1, ItemKind.SOLUTION)
Q = Identity(2, ItemKind.SOLUTION)
A = Identity(1, ItemKind.REQUIREMENT)
B = Identity(2, ItemKind.REQUIREMENT)
C = Identity(3, ItemKind.REQUIREMENT)


def assert_symmetric(index: LinkIndex, *identities: Identity) -> None:
    for identity in identities:
        for link in index.links_of(identity):
            assert link in index.links_of(link.parent)
            assert link in index.links_of(link.child)


def test_insert_adds_both_sides() -> None:
    """Test that a link is indexed under both endpoints."""
    index = LinkIndex()
    link = Link(P, A)
    index.insert(link)
    assert list(index.links_of(P)) == [link]
    assert list(index.links_of(A)) == [link]
    assert len(index) == 1


def test_remove_clears_both_sides() -> None:
    """Test that removal updates both endpoint lists."""
    index = LinkIndex()
    link = Link(P, A)
    index.insert(link)
    assert index.remove(link) is True
    assert list(index.links_of(P)) == []
    assert list(index.links_of(A)) == []
    assert len(index) == 0


def test_remove_missing_is_noop() -> None:
    """Test that removing an absent link changes nothing."""
    index = LinkIndex()
    kept = Link(P, A)
    index.insert(kept)
    assert index.remove(Link(P, B)) is False
    assert index.remove(Link(Q, C)) is False
    assert list(index.links_of(P)) == [kept]


def test_remove_swaps_with_last() -> None:
    """Test that removal moves the last link into the freed slot."""
    index = LinkIndex()
    first, second, third = Link(P, A), Link(P, B), Link(P, C)
    for link in (first, second, third):
        index.insert(link)
    index.remove(first)
    assert list(index.links_of(P)) == [third, second]
    assert_symmetric(index, P, A, B, C)


def test_remove_matches_equal_link() -> None:
    """Test that a link equal by endpoints removes the indexed one."""
    index = LinkIndex()
    index.insert(Link(P, A, geometry="drawn"))
    assert index.remove(Link(P, A)) is True
    assert len(index) == 0


def test_remove_all_for_drains_counterparts() -> None:
    """Test that every link touching an item disappears from every key."""
    index = LinkIndex()
    index.insert(Link(P, A))
    index.insert(Link(P, B))
    index.insert(Link(Q, P))
    index.insert(Link(Q, C))

    removed = index.remove_all_for(P)

    assert set(removed) == {Link(P, A), Link(P, B), Link(Q, P)}
    for identity in (P, A, B):
        assert list(index.links_of(identity)) == []
    assert list(index.links_of(Q)) == [Link(Q, C)]
    assert list(index.links()) == [Link(Q, C)]


def test_links_of_is_live_and_restartable() -> None:
    """Test that a view reflects later changes and can be iterated again."""
    index = LinkIndex()
    view = index.links_of(P)
    assert len(view) == 0
    assert not view

    index.insert(Link(P, A))
    index.insert(Link(P, B))
    assert len(view) == 2
    assert list(view) == list(view)
    assert Link(P, A) in view


def test_parent_link_and_children() -> None:
    """Test the parent and children lookups."""
    index = LinkIndex()
    index.insert(Link(P, A))
    index.insert(Link(P, B))
    index.insert(Link(A, C))
    assert index.parent_link(A) == Link(P, A)
    assert index.parent_link(P) is None
    assert sorted(index.children_of(P)) == [A, B]
    assert index.children_of(C) == []


def test_links_yields_each_link_once() -> None:
    """Test iterating over all links."""
    index = LinkIndex()
    links = [Link(P, A), Link(A, B), Link(Q, C)]
    for link in links:
        index.insert(link)
    assert sorted(index.links(), key=lambda link: (link.parent, link.child)) == sorted(
        links, key=lambda link: (link.parent, link.child)
    )
    index.clear()
    assert len(index) == 0
