"""Tests for data models."""

import pytest

from reqgraph.models import Identity, ItemKind, Link, Requirement, Solution, item_from_attributes


def test_identity_uses_id_and_kind() -> None:
    """Test that the same numeric id of two kinds names two items."""
    requirement = Identity(1, ItemKind.REQUIREMENT)
    solution = Identity(1, ItemKind.SOLUTION)
    assert requirement != solution
    assert len({requirement, solution, Identity(1, ItemKind.REQUIREMENT)}) == 2


def test_identity_is_immutable() -> None:
    """Test that identities cannot be reassigned."""
    identity = Identity(1, ItemKind.REQUIREMENT)
    with pytest.raises(AttributeError):
        identity.id = 2  # type: ignore[misc]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("R1", Identity(1, ItemKind.REQUIREMENT)),
        ("s12", Identity(12, ItemKind.SOLUTION)),
        ("solution:3", Identity(3, ItemKind.SOLUTION)),
        (" requirement:7 ", Identity(7, ItemKind.REQUIREMENT)),
    ],
)
def test_identity_parse(text: str, expected: Identity) -> None:
    """Test parsing identities from text."""
    assert Identity.parse(text) == expected


@pytest.mark.parametrize("text", ["", "R", "X1", "Rone", "widget:1"])
def test_identity_parse_rejects_garbage(text: str) -> None:
    """Test that malformed identities raise ValueError."""
    with pytest.raises(ValueError):
        Identity.parse(text)


def test_identity_str() -> None:
    """Test the text form of identities."""
    assert str(Identity(4, ItemKind.REQUIREMENT)) == "R4"
    assert str(Identity(4, ItemKind.SOLUTION)) == "S4"


def test_item_from_attributes_builds_variants() -> None:
    """Test that the kind of the identity selects the item variant."""
    requirement = item_from_attributes(
        Identity(1, ItemKind.REQUIREMENT),
        {"description": "Login", "rationale": "Security", "x": 16, "shown": False, "unknown": 1},
    )
    assert isinstance(requirement, Requirement)
    assert requirement.description == "Login"
    assert requirement.rationale == "Security"
    assert requirement.position == (16, 0)
    assert requirement.shown is False

    child = Identity(2, ItemKind.REQUIREMENT)
    solution = item_from_attributes(Identity(1, ItemKind.SOLUTION), {"children": [child], "version": 3})
    assert isinstance(solution, Solution)
    assert solution.children == [child]
    assert solution.version == 3


def test_requirement_has_no_children() -> None:
    """Test that only solutions expose structural children."""
    requirement = Requirement(Identity(1, ItemKind.REQUIREMENT))
    assert not hasattr(requirement, "children")
    assert not hasattr(requirement, "add_child")


def test_solution_children() -> None:
    """Test adding and removing structural children."""
    solution = Solution(Identity(1, ItemKind.SOLUTION))
    child = Identity(1, ItemKind.REQUIREMENT)
    solution.add_child(child)
    solution.add_child(child)
    assert solution.children == [child]
    assert solution.remove_child(child) is True
    assert solution.remove_child(child) is False


def test_link_equality_ignores_geometry() -> None:
    """Test that links compare by endpoints only."""
    parent = Identity(1, ItemKind.SOLUTION)
    child = Identity(1, ItemKind.REQUIREMENT)
    first = Link(parent, child, geometry="line")
    second = Link(parent, child)
    assert first == second
    assert hash(first) == hash(second)
    assert first.other(parent) == child
    assert first.other(child) == parent
