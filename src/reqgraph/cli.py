"""CLI for reqgraph."""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Any, Literal

import structlog
from cyclopts import App, Parameter

from reqgraph.config import get_config
from reqgraph.config_commands import config_app
from reqgraph.display import refresh_links, summarize
from reqgraph.engine import GraphEngine
from reqgraph.errors import PersistenceError, ReqGraphError, StoreError
from reqgraph.item_commands import item_app
from reqgraph.link_commands import link_app
from reqgraph.stores import SQLiteStore

logger = structlog.get_logger()

app = App(
    help="reqgraph - Requirement and solution graph editor",
)

app.command(item_app)
app.command(link_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


@contextmanager
def open_engine() -> Iterator[GraphEngine]:
    """Open the configured project and yield a loaded engine."""
    config = get_config()
    path = config.get("project.path")
    if not path:
        raise ValueError("No project configured. Create or select one using:\n  reqgraph init <path>")

    try:
        store = SQLiteStore(path)
    except StoreError as e:
        raise PersistenceError("open", e) from e

    engine = GraphEngine(store)
    engine.on_geometry_changed = lambda links: refresh_links(engine.registry, links)
    try:
        engine.load()
        yield engine
    finally:
        engine.close()
        store.close()


@app.command
def init(path: str) -> None:
    """Create or open a project file and make it the current project."""
    try:
        store = SQLiteStore(path)
    except StoreError as e:
        raise PersistenceError("open", e) from e
    name = store.name
    store.close()

    get_config().set("project.path", str(store.path))
    print(f"Using project '{name}' at {store.path}")


@app.command
def roots() -> None:
    """List the items that have no parent."""
    with open_engine() as engine:
        identities = sorted(engine.roots())
        print(f"Found {len(identities)} root(s):\n")
        for identity in identities:
            print(f"  {identity}: {summarize(engine.item(identity))}")


@app.command
def tree() -> None:
    """Display the whole link forest."""

    def show(node: dict[str, Any], depth: int) -> None:
        item = node["item"]
        marker = "●" if item.shown else "○"
        print(f"{'  ' * depth}{marker} {item.identity}: {summarize(item)}")
        for child in node["children"]:
            show(child, depth + 1)

    with open_engine() as engine:
        forest = engine.tree()
        if not forest:
            print("Project is empty")
            return
        for root in forest:
            show(root, 0)
        if engine.skipped_links:
            print(f"\n{len(engine.skipped_links)} stored link(s) ignored, see debug log")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    try:
        app(tokens)
    except (ReqGraphError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    app.meta()
