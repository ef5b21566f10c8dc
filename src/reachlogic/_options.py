"""Logical options: the rule profile that evaluation and static analysis follow."""

from __future__ import annotations

import logging
import tomllib
from decimal import Decimal
from enum import Enum, StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._enums import ConsumableResource, DamageOverTimeSource, RechargeableResource, UnknownNamePolicy
from ._errors import OptionsError
from ._execution import FixedValueResourceEvaluator
from ._resources import VANILLA_REGULAR_ENERGY_MAXIMUM

if TYPE_CHECKING:
    from ._execution import ResourceEvaluator
    from ._model import LogicModel, Strat

logger = logging.getLogger(__name__)


class BestChoice(StrEnum):
    """How to pick among several successful alternatives."""

    CHEAPEST = "cheapest"
    FIRST = "first"


def _default_resource_values() -> dict[ConsumableResource, int]:
    return dict(FixedValueResourceEvaluator.DEFAULT_VALUES)


def _default_base_maximums() -> dict[RechargeableResource, int]:
    return {RechargeableResource.REGULAR_ENERGY: VANILLA_REGULAR_ENERGY_MAXIMUM}


class StartConditions(BaseModel):
    """Baseline inventory and resources of a new game.

    Static analysis treats what is listed here as always available.
    ``resources`` defaults to full resources when omitted.
    """

    model_config = ConfigDict(frozen=True)

    items: frozenset[str] = frozenset()
    expansions: dict[str, int] = Field(default_factory=dict)
    game_flags: frozenset[str] = frozenset()
    base_maximums: dict[RechargeableResource, int] = Field(default_factory=_default_base_maximums)
    resources: dict[RechargeableResource, int] | None = None


class LogicalOptions(BaseModel):
    """Which techniques, strats, items and flags logic may rely on.

    Example:
        >>> options = LogicalOptions(disabled_techs=frozenset({"canWalljump"}))
        >>> options.is_tech_enabled("canWalljump")
        False
        >>> options.is_tech_enabled("canMorph")
        True

    """

    model_config = ConfigDict(frozen=True)

    techs_enabled_by_default: bool = True
    disabled_techs: frozenset[str] = frozenset()
    enabled_techs: frozenset[str] = frozenset()
    disabled_strats: frozenset[str] = frozenset()
    removed_items: frozenset[str] = frozenset()
    removed_game_flags: frozenset[str] = frozenset()

    tech_tries: dict[str, int] = Field(default_factory=dict)
    helper_tries: dict[str, int] = Field(default_factory=dict)
    strat_tries: dict[str, int] = Field(default_factory=dict)

    heat_leniency_multiplier: Decimal = Field(default=Decimal(1), ge=1)
    lava_leniency_multiplier: Decimal = Field(default=Decimal(1), ge=1)
    acid_leniency_multiplier: Decimal = Field(default=Decimal(1), ge=1)

    best_choice: BestChoice = BestChoice.CHEAPEST
    resource_values: dict[ConsumableResource, int] = Field(default_factory=_default_resource_values)

    start_conditions: StartConditions = Field(default_factory=StartConditions)
    max_possible_amounts: dict[RechargeableResource, int] = Field(default_factory=dict)

    unknown_names: UnknownNamePolicy = UnknownNamePolicy.IGNORE

    def is_tech_enabled(self, name: str) -> bool:
        if name in self.disabled_techs:
            return False
        if name in self.enabled_techs:
            return True
        return self.techs_enabled_by_default

    def is_strat_enabled(self, strat: Strat) -> bool:
        """Only notable strats can be disabled."""
        return not (strat.notable and strat.name in self.disabled_strats)

    def is_item_removed(self, name: str) -> bool:
        return name in self.removed_items

    def is_game_flag_removed(self, name: str) -> bool:
        return name in self.removed_game_flags

    def tries_for_tech(self, name: str) -> int:
        return self.tech_tries.get(name, 1)

    def tries_for_helper(self, name: str) -> int:
        return self.helper_tries.get(name, 1)

    def tries_for_strat(self, strat: Strat) -> int:
        if not strat.notable:
            return 1
        return self.strat_tries.get(strat.name, 1)

    def leniency_multiplier(self, source: DamageOverTimeSource) -> Decimal:
        match source:
            case DamageOverTimeSource.HEAT:
                return self.heat_leniency_multiplier
            case DamageOverTimeSource.LAVA | DamageOverTimeSource.LAVA_PHYSICS:
                return self.lava_leniency_multiplier
            case DamageOverTimeSource.ACID:
                return self.acid_leniency_multiplier
            case _:
                return Decimal(1)

    def comparator(self) -> ResourceEvaluator | None:
        """The evaluator used to rank alternatives, or None to keep the first success."""
        if self.best_choice == BestChoice.FIRST:
            return None
        return FixedValueResourceEvaluator(self.resource_values)

    def max_possible_amount(self, resource: RechargeableResource) -> int | None:
        """Upper bound of a resource over a whole game, or None if unknown."""
        return self.max_possible_amounts.get(resource)

    def max_possible_consumable(self, resource: ConsumableResource) -> int | None:
        amounts = [self.max_possible_amount(source) for source in resource.rechargeables]
        if any(amount is None for amount in amounts):
            return None
        return sum(amounts)  # type: ignore[arg-type]

    def unknown_names_in(self, model: LogicModel) -> list[str]:
        """List option names that match nothing in ``model``."""
        techs = {tech.name for tech in model.techs}
        helpers = {helper.name for helper in model.helpers}
        strats = {strat.name for strat in model.strats}
        checks: list[tuple[str, frozenset[str] | set[str], set[str] | frozenset[str]]] = [
            ("tech", self.disabled_techs | self.enabled_techs | set(self.tech_tries), techs),
            ("helper", set(self.helper_tries), helpers),
            ("strat", self.disabled_strats | set(self.strat_tries), strats),
            ("item", self.removed_items | self.start_conditions.items | set(self.start_conditions.expansions), set(model.items)),
            ("game flag", self.removed_game_flags | self.start_conditions.game_flags, model.game_flags),
        ]
        return [f"{kind} '{name}'" for kind, names, known in checks for name in sorted(names) if name not in known]

    def check_names(self, model: LogicModel) -> None:
        """Apply the unknown-name policy against ``model``.

        Raises:
            OptionsError: If names are unknown and the policy is ``error``.

        """
        if self.unknown_names == UnknownNamePolicy.IGNORE:
            return
        unknown = self.unknown_names_in(model)
        if not unknown:
            return
        if self.unknown_names == UnknownNamePolicy.ERROR:
            msg = f"Logical options reference unknown names: {', '.join(unknown)}"
            raise OptionsError(msg)
        for name in unknown:
            logger.warning("Logical options reference unknown %s", name)


def _to_toml_value(value: Any) -> Any:
    """Convert a dumped options value into something TOML can store."""
    if isinstance(value, dict):
        return {
            (k.value if isinstance(k, Enum) else str(k)): _to_toml_value(v) for k, v in value.items() if v is not None
        }
    if isinstance(value, (set, frozenset)):
        return sorted(_to_toml_value(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_to_toml_value(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


def dump_logical_options(options: LogicalOptions, path: Path) -> None:
    """Write logical options to a TOML file."""
    data = _to_toml_value(options.model_dump(mode="python"))
    with path.open("wb") as f:
        tomli_w.dump(data, f)
    logger.debug("Wrote logical options to %s", path)


def load_logical_options(path: Path) -> LogicalOptions:
    """Read logical options from a TOML file.

    Raises:
        OptionsError: If the file cannot be read, parsed or validated.

    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        msg = f"Cannot read logical options from {path}: {e}"
        raise OptionsError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise OptionsError(msg) from e

    try:
        options = LogicalOptions.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid logical options in {path}:\n{e}"
        raise OptionsError(msg) from e

    logger.debug("Loaded logical options from %s", path)
    return options
