"""Tests for configuration management."""

from pathlib import Path

import pytest
import yaml

from reqgraph import config_commands
from reqgraph.config import Config, get_config, parse_value


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Use temporary home and working directories."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return home


def test_set_and_get_local(home: Path) -> None:
    """Test that local values are written to the working directory."""
    config = get_config()
    config.set("project.path", "demo.orq")

    assert get_config().get("project.path") == "demo.orq"
    with open(Path.cwd() / ".reqgraph" / "config.yaml") as f:
        assert yaml.safe_load(f) == {"project.path": "demo.orq"}


def test_local_falls_back_to_global(home: Path) -> None:
    """Test that global values are visible unless overridden locally."""
    get_config(use_global=True).set("display.grid", 32)
    get_config(use_global=True).set("project.path", "global.orq")
    get_config().set("project.path", "local.orq")

    config = get_config()
    assert config.get("display.grid") == 32
    assert config.get("project.path") == "local.orq"
    assert config.list() == {"display.grid": 32, "project.path": "local.orq"}
    assert get_config(use_global=True).get("project.path") == "global.orq"


def test_defaults(home: Path) -> None:
    """Test the built-in defaults."""
    config = get_config()
    assert config.get_int("display.grid") == 16
    assert config.get_int("display.item_width") == 128
    assert config.get("missing") is None
    assert config.get("missing", "fallback") == "fallback"
    assert config.list() == {}


def test_get_int_parses_strings(home: Path) -> None:
    """Test that values set from the command line are read as integers."""
    config = get_config()
    config.set("display.grid", "8")
    assert config.get_int("display.grid") == 8
    config.set("display.grid", "eight")
    with pytest.raises(ValueError):
        config.get_int("display.grid")


def test_unset(home: Path) -> None:
    """Test removing a value."""
    config = get_config()
    config.set("project.path", "demo.orq")
    config.unset("project.path")
    config.unset("never.set")
    assert get_config().get("project.path") is None


def test_reading_does_not_create_files(home: Path) -> None:
    """Test that reading the configuration leaves the disk untouched."""
    get_config().get("project.path")
    assert not (Path.cwd() / ".reqgraph").exists()


def test_invalid_file_raises(tmp_path: Path) -> None:
    """Test that a malformed config file is reported."""
    config_dir = tmp_path / "custom"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        Config(use_global=True, config_dir=config_dir)


def test_parse_value_checks_known_keys() -> None:
    """Test that display sizes are integers and unknown keys are refused."""
    assert parse_value("display.grid", "8") == 8
    assert parse_value("project.path", "demo.orq") == "demo.orq"
    with pytest.raises(ValueError, match="integer"):
        parse_value("display.grid", "abc")
    with pytest.raises(ValueError, match="positive"):
        parse_value("display.item_width", "0")
    with pytest.raises(ValueError, match="Unknown configuration key"):
        parse_value("display.colour", "red")


def test_set_command_rejects_bad_values(home: Path) -> None:
    """Test that invalid settings are refused before they are written."""
    with pytest.raises(ValueError):
        config_commands.set("display.grid", "abc")
    assert not (Path.cwd() / ".reqgraph" / "config.yaml").exists()
    assert get_config().get_int("display.grid") == 16


def test_set_command_stores_typed_values(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that sizes are stored as integers and project paths get their suffix."""
    config_commands.set("display.grid", "32")
    config_commands.set("project.path", "demo")

    with open(Path.cwd() / ".reqgraph" / "config.yaml") as f:
        assert yaml.safe_load(f) == {"display.grid": 32, "project.path": "demo.orq"}
    assert "Set project.path = demo.orq (local)" in capsys.readouterr().out


def test_get_and_list_show_source(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that values are reported with the scope they come from."""
    config_commands.set("display.grid", "8", global_=True)
    capsys.readouterr()

    config_commands.get("display.grid")
    config_commands.get("display.item_width")
    config_commands.get("project.path")
    out = capsys.readouterr().out
    assert "display.grid = 8 (global)" in out
    assert "display.item_width = 128 (default)" in out
    assert "project.path is not set" in out

    config_commands.list_config()
    out = capsys.readouterr().out
    assert "display.grid = 8 (global)" in out
    assert "project.path (not set)" in out


def test_unset_command_only_touches_its_scope(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that unsetting locally leaves the global value in effect."""
    config_commands.set("display.grid", "8", global_=True)
    config_commands.unset("display.grid")
    assert "not set in local config" in capsys.readouterr().out
    assert get_config().get("display.grid") == 8

    config_commands.unset("display.grid", global_=True)
    assert get_config().get("display.grid") == 16
