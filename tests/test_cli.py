"""Tests for the reachlogic command line."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from reachlogic import LogicalOptions, dump_logical_options, load_logical_options
from reachlogic._cli.main import app

runner = CliRunner()

WORLD_SCRIPT = """
from reachlogic import ModelBuilder

builder = ModelBuilder()
builder.add_item("Morph Ball")
room = builder.add_location("Landing Site")
a = builder.add_node(room, 1)
b = builder.add_node(room, 2)
roll = builder.add_strat("Roll Through", builder.item("Morph Ball"), notable=True)
builder.add_link(a, b, [roll])
world = builder.build()
"""


@pytest.fixture
def script(tmp_path: Path) -> Path:
    """A script building a one-room model."""
    path = tmp_path / "cli_world.py"
    path.write_text(WORLD_SCRIPT)
    return path


class TestFlagsCommand:
    """Tests for the flags command."""

    def test_summary(self, script: Path) -> None:
        result = runner.invoke(app, ["flags", str(script), "--name", "world"])

        assert result.exit_code == 0, result.output
        assert "Logical flags" in result.output
        assert "Strats" in result.output

    def test_list_never(self, script: Path, tmp_path: Path) -> None:
        options = tmp_path / "options.toml"
        dump_logical_options(LogicalOptions(disabled_strats=frozenset({"Roll Through"})), options)

        result = runner.invoke(app, ["flags", str(script), "--options", str(options), "--list-never"])

        assert result.exit_code == 0, result.output
        assert "1 impossible strats" in result.output
        assert "Roll Through" in result.output

    def test_nothing_impossible(self, script: Path) -> None:
        result = runner.invoke(app, ["flags", str(script), "--list-never"])

        assert result.exit_code == 0, result.output
        assert "No impossible strats" in result.output

    def test_unknown_variable(self, script: Path) -> None:
        result = runner.invoke(app, ["flags", str(script), "--name", "nowhere"])

        assert result.exit_code == 1
        assert "Could not find model" in result.output

    def test_model_from_pyproject(self, script: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text(
            f"""
[tool.reachlogic]
model = {{ script = "{script.name}", name = "world" }}
""",
        )
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["flags"])

        assert result.exit_code == 0, result.output
        assert "Logical flags" in result.output

    def test_no_model(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["flags"])

        assert result.exit_code == 1
        assert "No model given" in result.output


class TestOptionsTemplateCommand:
    """Tests for the options-template command."""

    def test_writes_loadable_defaults(self, tmp_path: Path) -> None:
        output = tmp_path / "presets" / "default.toml"

        result = runner.invoke(app, ["options-template", str(output)])

        assert result.exit_code == 0, result.output
        assert load_logical_options(output) == LogicalOptions()
