"""A model bound to logical options, with its static flags."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._errors import InvalidTraversalError
from ._evaluate import evaluate
from ._model import ElementKind
from ._propagation import compute_properties
from ._rules import GameRules
from ._state import SimulatedState

if TYPE_CHECKING:
    from ._execution import ExecutionResult, ResourceEvaluator
    from ._model import LogicModel
    from ._options import LogicalOptions
    from ._propagation import LockFlags, LogicalFlags, LogicalProperties
    from ._requirements import RequirementId

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class LogicContext:
    """A model, the options applied to it, and the resulting static flags.

    Contexts are only created by ``apply_configuration``, once every flag
    has been computed. A context never changes: applying other options
    gives a new context, and flags read from an older one stay those of
    its own options. Contexts compare and hash by identity, like models.

    Attributes:
        model: The model evaluated.
        options: The logical options applied.
        rules: The game rules used for damage.
        properties: Flags of every element under ``options``.

    """

    model: LogicModel
    options: LogicalOptions
    rules: GameRules
    properties: LogicalProperties
    comparator: ResourceEvaluator | None

    def evaluate(
        self,
        requirement: RequirementId,
        state: SimulatedState,
        *,
        times: int = 1,
    ) -> ExecutionResult | None:
        """Try to fulfill a requirement from ``state``. See ``evaluate``.

        Raises:
            InvalidTraversalError: If ``state`` belongs to another model.

        """
        self.check_state(state)
        return evaluate(self, requirement, state, times=times)

    def check_state(self, state: SimulatedState) -> None:
        if state.model is not self.model:
            msg = "State was created for a different model"
            raise InvalidTraversalError(msg)

    def initial_state(self, node: int) -> SimulatedState:
        """A new-game state at ``node``, from the options' start conditions."""
        return SimulatedState.initial(self.model, node, self.options.start_conditions)

    def requirement_flags(self, requirement: RequirementId) -> LogicalFlags:
        self.model.requirement(requirement)
        return self.properties.requirements[requirement]

    def tech_flags(self, tech: int) -> LogicalFlags:
        return self.properties.techs[self.model.tech(tech).index]

    def helper_flags(self, helper: int) -> LogicalFlags:
        return self.properties.helpers[self.model.helper(helper).index]

    def obstacle_flags(self, obstacle: int) -> LogicalFlags:
        return self.properties.obstacles[self.model.obstacle(obstacle).index]

    def strat_obstacle_flags(self, strat_obstacle: int) -> LogicalFlags:
        return self.properties.strat_obstacles[self.model.strat_obstacle(strat_obstacle).index]

    def strat_flags(self, strat: int) -> LogicalFlags:
        return self.properties.strats[self.model.strat(strat).index]

    def lock_flags(self, lock: int) -> LockFlags:
        return self.properties.locks[self.model.lock(lock).index]

    def link_flags(self, link: int) -> LogicalFlags:
        return self.properties.links[self.model.link(link).index]

    def never_strats(self) -> list[str]:
        """Names of strats that the options make impossible."""
        return [strat.name for strat in self.model.strats if self.properties.strats[strat.index].never]

    def affected_by_tech(self, name: str) -> frozenset[str]:
        """Names of strats whose logic depends on the named tech."""
        tech = self.model.tech_named(name)
        return frozenset(
            self.model.strats[index].name
            for kind, index in self.model.dependents_of(ElementKind.TECH, tech.index)
            if kind == ElementKind.STRAT
        )

    def reapply(self, options: LogicalOptions) -> LogicContext:
        """Apply other options to the same model and rules.

        Returns this context unchanged when ``options`` are those already applied.
        """
        if options == self.options:
            logger.debug("Logical options unchanged, keeping current flags")
            return self
        return apply_configuration(self.model, options, self.rules)


def apply_configuration(
    model: LogicModel,
    options: LogicalOptions,
    rules: GameRules | None = None,
) -> LogicContext:
    """Compute the static flags of ``model`` under ``options``.

    Unknown names in ``options`` are tolerated unless the options' unknown
    name policy says otherwise.

    Raises:
        OptionsError: If names are unknown and the policy is ``error``.

    Example:
        >>> context = apply_configuration(model, LogicalOptions())
        >>> context.requirement_flags(root).never
        False

    """
    rules = rules if rules is not None else GameRules()
    options.check_names(model)
    properties = compute_properties(model, options, rules)
    return LogicContext(
        model=model,
        options=options,
        rules=rules,
        properties=properties,
        comparator=options.comparator(),
    )
