"""Data models for the requirement graph."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ItemKind(IntEnum):
    """Kind of an item. Numeric ids are only unique within a kind."""

    REQUIREMENT = 1
    SOLUTION = 2

    @property
    def prefix(self) -> str:
        return "R" if self is ItemKind.REQUIREMENT else "S"

    @classmethod
    def parse(cls, value: "str | ItemKind") -> "ItemKind":
        """Parse a kind from its name or its one-letter prefix."""
        if isinstance(value, ItemKind):
            return value
        text = value.strip().lower()
        for kind in cls:
            if text in (kind.name.lower(), kind.prefix.lower()):
                return kind
        raise ValueError(f"Unknown item kind: {value}")


@dataclass(frozen=True, order=True)
class Identity:
    """Composite key naming an item: numeric id plus kind."""

    id: int
    kind: ItemKind

    def __str__(self) -> str:
        return f"{self.kind.prefix}{self.id}"

    @classmethod
    def parse(cls, text: str) -> "Identity":
        """Parse an identity such as ``R1``, ``s12`` or ``solution:12``."""
        text = text.strip()
        if ":" in text:
            kind_text, id_text = text.split(":", 1)
        else:
            kind_text, id_text = text[:1], text[1:]
        try:
            return cls(int(id_text), ItemKind.parse(kind_text))
        except ValueError as e:
            raise ValueError(f"Invalid item identity: {text!r}") from e


@dataclass
class Item:
    """Attributes shared by requirements and solutions."""

    identity: Identity
    uid: int = 0
    version: int = 1
    shown: bool = True
    description: str = ""
    x: int = 0
    y: int = 0
    width: int = 128
    height: int = 64

    @property
    def kind(self) -> ItemKind:
        return self.identity.kind

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def __str__(self) -> str:
        return str(self.identity)


@dataclass
class Requirement(Item):
    """A requirement. Never owns structural children."""

    rationale: str = ""
    fit_criterion: str = ""


@dataclass
class Solution(Item):
    """A solution, which may own structural child items."""

    children: list[Identity] = field(default_factory=list)

    def add_child(self, child: Identity) -> None:
        if child not in self.children:
            self.children.append(child)

    def remove_child(self, child: Identity) -> bool:
        if child in self.children:
            self.children.remove(child)
            return True
        return False


# Attribute names understood by every item kind
COMMON_ATTRIBUTES = ("uid", "version", "shown", "description", "x", "y", "width", "height")
REQUIREMENT_ATTRIBUTES = COMMON_ATTRIBUTES + ("rationale", "fit_criterion")
SOLUTION_ATTRIBUTES = COMMON_ATTRIBUTES


def item_from_attributes(identity: Identity, attributes: dict[str, Any]) -> Item:
    """Build the item variant for an identity from persisted attributes.

    Unknown attribute names are ignored and missing ones keep their defaults.

    Args:
        identity: Identity of the persisted row
        attributes: Attribute values as returned by a store

    Returns:
        Requirement or Solution instance
    """
    if identity.kind is ItemKind.REQUIREMENT:
        values = {k: attributes[k] for k in REQUIREMENT_ATTRIBUTES if attributes.get(k) is not None}
        return Requirement(identity=identity, **values)

    values = {k: attributes[k] for k in SOLUTION_ATTRIBUTES if attributes.get(k) is not None}
    children = list(attributes.get("children") or [])
    return Solution(identity=identity, children=children, **values)


@dataclass(unsafe_hash=True)
class Link:
    """Directed parent to child association between two items.

    The geometry payload belongs to the presentation layer and takes no part
    in equality or hashing.
    """

    parent: Identity
    child: Identity
    geometry: Any = field(default=None, compare=False, repr=False)

    def other(self, identity: Identity) -> Identity:
        """Return the endpoint opposite to ``identity``."""
        return self.child if identity == self.parent else self.parent
