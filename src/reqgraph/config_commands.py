"""Configuration commands for reqgraph CLI."""

from cyclopts import App

from reqgraph.config import KEYS, get_config, parse_value
from reqgraph.stores.sqlite import project_path

config_app = App(name="config", help="Manage project and display settings")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Display sizes are checked to be positive integers and project paths get
    the project file suffix before they are stored.

    Args:
        key: One of project.path, display.grid, display.item_width, display.item_height
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    parsed = parse_value(key, value)
    if key == "project.path":
        parsed = str(project_path(parsed))
    get_config(use_global=global_).set(key, parsed)
    print(f"Set {key} = {parsed} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting, reverting to the global value or the default."""
    config = get_config(use_global=global_)
    if config.source(key) != _scope(global_):
        print(f"{key} is not set in {_scope(global_)} config")
        return
    config.unset(key)
    print(f"Unset {key} ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show a setting and where its value comes from."""
    config = get_config(use_global=global_)
    source = config.source(key)
    if source is None:
        print(f"{key} is not set")
        return
    print(f"{key} = {config.get(key)} ({source})")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List every known setting with its effective value."""
    config = get_config(use_global=global_)
    settings = config.list()

    print("Settings:\n")
    for key in KEYS:
        source = config.source(key)
        if source is None:
            print(f"  {key} (not set)")
        else:
            print(f"  {key} = {config.get(key)} ({source})")
    for key in sorted(k for k in settings if k not in KEYS):
        print(f"  {key} = {settings[key]} (unknown key)")
