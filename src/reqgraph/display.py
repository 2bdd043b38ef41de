"""Presentation helpers: link geometry, grid snapping and item summaries."""

import html
import math
import re
from dataclasses import dataclass

from reqgraph.models import Item, Link
from reqgraph.registry import ItemRegistry

ARROW_SIZE = 16
SUMMARY_LENGTH = 46

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


@dataclass
class LinkGeometry:
    """Line from the parent centre to the child centre, with a direction arrow.

    Angles follow the canvas convention: degrees counter-clockwise from the
    positive x axis, with y growing downwards.
    """

    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def angle(self) -> float:
        return math.degrees(math.atan2(self.y1 - self.y2, self.x2 - self.x1)) % 360

    @property
    def center(self) -> tuple[float, float]:
        return (self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2

    @property
    def arrow_position(self) -> tuple[float, float]:
        """Top-left corner of the arrow head, centred on the line."""
        cx, cy = self.center
        return cx - ARROW_SIZE / 2, cy - ARROW_SIZE / 2

    @property
    def arrow_rotation(self) -> float:
        # The arrow is drawn pointing down, so it is turned a quarter further
        return -self.angle - 90


def center_of(item: Item) -> tuple[float, float]:
    return item.x + item.width / 2, item.y + item.height / 2


def link_geometry(parent: Item, child: Item) -> LinkGeometry:
    """Compute the geometry of a link between two items."""
    x1, y1 = center_of(parent)
    x2, y2 = center_of(child)
    return LinkGeometry(x1, y1, x2, y2)


def refresh_links(registry: ItemRegistry, links: list[Link]) -> None:
    """Recompute the geometry payload of each link from its endpoint items."""
    for link in links:
        link.geometry = link_geometry(registry.resolve(link.parent), registry.resolve(link.child))


def snap_to_grid(x: float, y: float, grid: int = 16) -> tuple[int, int]:
    """Round a position to the nearest grid point."""
    if grid <= 0:
        return int(x), int(y)
    return int(math.floor(x / grid + 0.5)) * grid, int(math.floor(y / grid + 0.5)) * grid


def plain_text(description: str) -> str:
    """Strip markup from a rich text description."""
    text = html.unescape(_TAG_RE.sub(" ", description))
    return _SPACE_RE.sub(" ", text).strip()


def summarize(item: Item, max_length: int = SUMMARY_LENGTH) -> str:
    """Return a one-line label for an item.

    Long descriptions are cropped at a word boundary and end with ``...``.
    Items without a description are labelled with their identity.
    """
    text = plain_text(item.description)
    if len(text) > max_length:
        text = text[:max_length]
        head, separator, _ = text.rpartition(" ")
        if separator and head:
            # Drop the cropped word
            text = head
        text = text.rstrip() + "..."
    if not text:
        return f"({item.identity})"
    return text
