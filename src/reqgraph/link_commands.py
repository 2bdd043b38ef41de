"""Link management commands for reqgraph CLI."""

from cyclopts import App

from reqgraph.models import Identity

link_app = App(name="link", help="Manage parent/child links between items")


@link_app.command
def add(parent_id: str, child_id: str) -> None:
    """Link a parent item to a child item."""
    from reqgraph.cli import open_engine

    parent, child = Identity.parse(parent_id), Identity.parse(child_id)
    with open_engine() as engine:
        link = engine.add_link(parent, child)
        print(f"Linked {link.parent} -> {link.child}")


@link_app.command
def remove(parent_id: str, child_id: str) -> None:
    """Remove the link between a parent and a child."""
    from reqgraph.cli import open_engine

    parent, child = Identity.parse(parent_id), Identity.parse(child_id)
    with open_engine() as engine:
        link = engine.find_link(parent, child)
        if link is None:
            print(f"No link from {parent} to {child}")
            return
        engine.remove_link(link)
        print(f"Removed link {parent} -> {child}")


@link_app.command(name="list")
def list_links(item_id: str) -> None:
    """List the links of an item."""
    from reqgraph.cli import open_engine

    identity = Identity.parse(item_id)
    with open_engine() as engine:
        engine.item(identity)
        links = list(engine.links_of(identity))

        if not links:
            print(f"No links found for item {identity}")
            return

        print(f"Links for item {identity}:\n")
        for link in sorted(links, key=lambda link: (link.parent, link.child)):
            role = "parent" if link.child == identity else "child"
            print(f"  {link.parent} --> {link.child} ({role} {link.other(identity)})")
