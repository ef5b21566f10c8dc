"""Loading the logic model a command refers to."""

from __future__ import annotations

import importlib
import importlib.util
import logging
from typing import TYPE_CHECKING, assert_never

from reachlogic._model import LogicModel

from .config import ModuleSource, ScriptSource

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

    from .config import ModelSource

logger = logging.getLogger(__name__)


def load_model(source: ModelSource) -> LogicModel:
    """Import the module a source points to and pick its model.

    Raises:
        ImportError: If the module or script cannot be loaded.
        ValueError: If the module holds no model, or not the named one.
        TypeError: If the named variable is not a ``LogicModel``.

    """
    match source:
        case ScriptSource(script=script, name=name):
            module = _exec_script(script)
        case ModuleSource(module=module_name, name=name):
            module = importlib.import_module(module_name)
        case _:
            assert_never(source)
    return _pick_model(module, name)


def _exec_script(script: Path) -> ModuleType:
    """Run a script as a fresh module, outside ``sys.modules``."""
    spec = importlib.util.spec_from_file_location(script.stem, script)
    if spec is None or spec.loader is None:
        msg = f"Cannot load a Python module from {script}"
        raise ImportError(msg)
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except FileNotFoundError as e:
        msg = f"No script at {script}"
        raise ImportError(msg) from e
    return module


def _pick_model(module: ModuleType, name: str | None) -> LogicModel:
    """The model named ``name`` in ``module``, or its only model when unnamed."""
    if name is not None:
        model = getattr(module, name, None)
        if model is None:
            msg = f"Could not find model '{name}' in {module.__name__}"
            raise ValueError(msg)
        if not isinstance(model, LogicModel):
            msg = f"'{name}' in {module.__name__} is a {type(model).__name__}, not a LogicModel"
            raise TypeError(msg)
        return model

    found = {var: value for var, value in vars(module).items() if isinstance(value, LogicModel)}
    if len(found) != 1:
        msg = f"Expected one LogicModel in {module.__name__}, found {len(found)}; pass its variable name"
        raise ValueError(msg)
    [(var, model)] = found.items()
    logger.debug("Using model '%s' from %s", var, module.__name__)
    return model
