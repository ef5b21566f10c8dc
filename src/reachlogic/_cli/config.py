"""The ``[tool.reachlogic]`` section of pyproject.toml.

Two keys are read, both optional:

- ``model``: where the model is built. Either ``"package.module:variable"``
  or ``{ script = "path/to/world.py", name = "variable" }``.
- ``options``: a logical options TOML file.

Relative paths are resolved from the directory holding pyproject.toml.
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    """Error in reachlogic configuration."""


@dataclass(slots=True, frozen=True)
class ScriptSource:
    """A script building the model, and optionally the variable holding it."""

    script: Path
    name: str | None = None

    def __str__(self) -> str:
        return str(self.script) if self.name is None else f"{self.script} ({self.name})"


@dataclass(slots=True, frozen=True)
class ModuleSource:
    """An importable module and the variable holding the model."""

    module: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "ModuleSource":
        """Split ``"package.module:variable"``.

        Raises:
            ConfigError: If either part is missing.

        """
        module, _, name = value.partition(":")
        if not module or not name:
            msg = f"Invalid module path '{value}'. Expected format: 'module.path:variable_name'"
            raise ConfigError(msg)
        return cls(module, name)

    def __str__(self) -> str:
        return f"{self.module}:{self.name}"


ModelSource = ScriptSource | ModuleSource


@dataclass(slots=True, frozen=True)
class ReachlogicConfig:
    """What pyproject.toml says, with paths already resolved."""

    model: ModelSource | None = None
    options: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """The nearest pyproject.toml in ``start_dir`` (default: cwd) or above it."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _path(value: object, key: str, project_root: Path) -> Path:
    if not isinstance(value, str):
        msg = f"Invalid [tool.reachlogic].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    return path if path.is_absolute() else project_root / path


def parse_model_source(value: object, project_root: Path) -> ModelSource:
    """Parse a model source, from config or from the command line.

    Raises:
        ConfigError: If the value is neither a module path nor a script table.

    """
    match value:
        case str():
            return ModuleSource.parse(value)
        case dict():
            script = _path(value.get("script"), "model.script", project_root)
            name = value.get("name")
            if name is not None and not isinstance(name, str):
                msg = "Invalid [tool.reachlogic].model.name: expected string"
                raise ConfigError(msg)
            return ScriptSource(script, name)
        case _:
            msg = "Invalid [tool.reachlogic].model configuration. Expected string or table with 'script' key."
            raise ConfigError(msg)


def load_config(pyproject_path: Path) -> ReachlogicConfig:
    """Load and validate the ``[tool.reachlogic]`` section of ``pyproject_path``.

    Raises:
        ConfigError: If the file is not valid TOML or the section is invalid.

    """
    project_root = pyproject_path.parent
    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {pyproject_path}: {e}"
        raise ConfigError(msg) from e

    section = data.get("tool", {}).get("reachlogic", {})
    model = parse_model_source(section["model"], project_root) if "model" in section else None
    options = _path(section["options"], "options", project_root) if "options" in section else None
    return ReachlogicConfig(model=model, options=options, project_root=project_root)


def get_config() -> ReachlogicConfig:
    """The configuration found from the current directory, empty if there is none."""
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return ReachlogicConfig()
    return load_config(pyproject_path)
