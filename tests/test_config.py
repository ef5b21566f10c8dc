"""Tests for the configuration module."""

from pathlib import Path

import pytest

from reachlogic._cli.config import (
    ConfigError,
    ModuleSource,
    ReachlogicConfig,
    ScriptSource,
    find_pyproject_toml,
    load_config,
    parse_model_source,
)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        assert find_pyproject_toml(tmp_path) == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        subdir = tmp_path / "logic" / "areas"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == pyproject

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        """Should return None when no pyproject.toml is found."""
        assert find_pyproject_toml(tmp_path) is None


class TestLoadConfigModel:
    """Tests for loading the model source."""

    def test_module_path_string(self, tmp_path: Path) -> None:
        """Should parse module path string format."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.reachlogic]
model = "mygame.logic:model"
""",
        )

        config = load_config(pyproject)

        assert config.model == ModuleSource("mygame.logic", "model")
        assert config.project_root == tmp_path

    def test_module_path_without_colon_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for invalid module path."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.reachlogic]
model = "mygame.logic"
""",
        )

        with pytest.raises(ConfigError, match="Invalid module path"):
            load_config(pyproject)

    def test_module_path_without_variable_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError when the variable after the colon is missing."""
        with pytest.raises(ConfigError, match="Invalid module path 'mygame.logic:'"):
            parse_model_source("mygame.logic:", tmp_path)

    def test_script_with_name(self, tmp_path: Path) -> None:
        """Should resolve script paths from the project root."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.reachlogic]
model = { script = "logic/world.py", name = "world" }
""",
        )

        config = load_config(pyproject)

        assert config.model == ScriptSource(script=tmp_path / "logic/world.py", name="world")

    def test_script_missing_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError when script key is missing."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.reachlogic]
model = { name = "world" }
""",
        )

        with pytest.raises(ConfigError, match="expected string path"):
            load_config(pyproject)

    def test_invalid_model_type_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for a model that is neither string nor table."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.reachlogic]
model = 123
""",
        )

        with pytest.raises(ConfigError, match=r"Invalid.*model configuration"):
            load_config(pyproject)

    def test_absolute_script_is_kept(self, tmp_path: Path) -> None:
        """Should not rebase absolute script paths."""
        script = tmp_path / "elsewhere" / "world.py"

        source = parse_model_source({"script": str(script)}, tmp_path / "project")

        assert source == ScriptSource(script=script)


class TestLoadConfigOptions:
    """Tests for loading the logical options path."""

    def test_options_path(self, tmp_path: Path) -> None:
        """Should resolve the options path from the project root."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.reachlogic]
model = "mygame.logic:model"
options = "presets/casual.toml"
""",
        )

        config = load_config(pyproject)

        assert config.options == tmp_path / "presets/casual.toml"

    def test_invalid_options_type_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError when options is not a string."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.reachlogic]
options = 123
""",
        )

        with pytest.raises(ConfigError, match="expected string path"):
            load_config(pyproject)


class TestLoadConfigEmptySection:
    """Tests for empty or missing configuration."""

    def test_no_tool_section(self, tmp_path: Path) -> None:
        """Should return empty config when no [tool.reachlogic] section."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[project]
name = "test"
""",
        )

        config = load_config(pyproject)

        assert config.model is None
        assert config.options is None
        assert config.project_root == tmp_path

    def test_invalid_toml_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for invalid TOML."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("invalid toml [[[")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)


class TestReachlogicConfigDataclass:
    """Tests for the ReachlogicConfig dataclass."""

    def test_default_values(self) -> None:
        """Should have None as default values."""
        config = ReachlogicConfig()

        assert config.model is None
        assert config.options is None
        assert config.project_root is None

    def test_frozen(self) -> None:
        """Should be frozen (immutable)."""
        config = ReachlogicConfig()

        with pytest.raises(AttributeError):
            config.model = ModuleSource("pkg", "model")  # type: ignore[misc]
