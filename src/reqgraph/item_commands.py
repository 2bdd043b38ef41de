"""Item management commands for reqgraph CLI."""

from cyclopts import App

from reqgraph.config import get_config
from reqgraph.display import snap_to_grid, summarize
from reqgraph.models import Identity, ItemKind, Requirement, Solution

item_app = App(name="item", help="Manage requirements and solutions")


@item_app.command
def create(kind: str, x: int = 0, y: int = 0, description: str = "") -> None:
    """Create a requirement or a solution.

    Args:
        kind: "requirement" or "solution" (or R / S)
        x: Horizontal position, snapped to the grid
        y: Vertical position, snapped to the grid
        description: Item description
    """
    from reqgraph.cli import open_engine

    config = get_config()
    x, y = snap_to_grid(x, y, config.get_int("display.grid"))
    with open_engine() as engine:
        item = engine.create_item(
            ItemKind.parse(kind),
            x=x,
            y=y,
            width=config.get_int("display.item_width"),
            height=config.get_int("display.item_height"),
            description=description,
        )
        print(f"Created {item.identity}: {summarize(item)}")


@item_app.command
def show(item_id: str) -> None:
    """Show an item."""
    from reqgraph.cli import open_engine

    identity = Identity.parse(item_id)
    with open_engine() as engine:
        item = engine.item(identity)
        print(f"Item: {item.identity} ({item.kind.name.lower()})")
        print(f"UID: {item.uid}")
        print(f"Version: {item.version}")
        print(f"Shown: {'yes' if item.shown else 'no'}")
        print(f"Position: {item.x}, {item.y}")
        print(f"Size: {item.width} x {item.height}")
        print(f"Description: {item.description}")
        if isinstance(item, Requirement):
            print(f"Rationale: {item.rationale}")
            print(f"Fit criterion: {item.fit_criterion}")
        if isinstance(item, Solution) and item.children:
            print(f"Children: {', '.join(str(child) for child in item.children)}")
        parent = engine.parent_of(identity)
        if parent is not None:
            print(f"Parent: {parent}")


@item_app.command(name="list")
def list_items() -> None:
    """List every item of the project."""
    from reqgraph.cli import open_engine

    with open_engine() as engine:
        items = engine.items()
        print(f"Found {len(items)} item(s):\n")
        for item in items:
            marker = "●" if item.shown else "○"
            print(f"{marker} {item.identity}: {summarize(item)}")


@item_app.command
def move(item_id: str, x: int, y: int) -> None:
    """Move an item, snapping it to the grid."""
    from reqgraph.cli import open_engine

    identity = Identity.parse(item_id)
    x, y = snap_to_grid(x, y, get_config().get_int("display.grid"))
    with open_engine() as engine:
        engine.move_item(identity, x, y)
        print(f"Moved {identity} to {x}, {y}")


@item_app.command
def edit(
    item_id: str,
    description: str | None = None,
    rationale: str | None = None,
    fit_criterion: str | None = None,
    shown: bool | None = None,
) -> None:
    """Edit the attributes of an item."""
    from reqgraph.cli import open_engine

    identity = Identity.parse(item_id)
    changes = {
        name: value
        for name, value in (
            ("description", description),
            ("rationale", rationale),
            ("fit_criterion", fit_criterion),
            ("shown", shown),
        )
        if value is not None
    }
    with open_engine() as engine:
        item = engine.update_item(identity, **changes)
        print(f"Updated {item.identity} (version {item.version})")


@item_app.command
def delete(item_id: str) -> None:
    """Delete an item together with its links."""
    from reqgraph.cli import open_engine

    identity = Identity.parse(item_id)
    with open_engine() as engine:
        report = engine.delete_item(identity)
        print(f"Deleted {identity} and {len(report.removed_links)} link(s)")
        for failure in report.failures:
            print(f"warning: {failure}")


@item_app.command
def adopt(solution_id: str, child_id: str) -> None:
    """Make an item a structural child of a solution."""
    from reqgraph.cli import open_engine

    solution, child = Identity.parse(solution_id), Identity.parse(child_id)
    with open_engine() as engine:
        engine.add_child(solution, child)
        print(f"{child} is now a child of {solution}")


@item_app.command
def release(solution_id: str, child_id: str) -> None:
    """Remove an item from the structural children of a solution."""
    from reqgraph.cli import open_engine

    solution, child = Identity.parse(solution_id), Identity.parse(child_id)
    with open_engine() as engine:
        engine.remove_child(solution, child)
        print(f"{child} is no longer a child of {solution}")
