"""Execution results and the operators that combine them.

An ``ExecutionResult`` pairs the state reached after doing something with a
log of what it took. Failure is ``None``, never an exception: every operator
here propagates ``None`` and only ever builds new results.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, ClassVar, Protocol

from ._enums import ConsumableResource
from ._resources import ResourceCount

if TYPE_CHECKING:
    from ._requirements import KillMethod
    from ._state import SimulatedState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnemyKill:
    """An enemy defeated, and how."""

    enemy: str
    method: KillMethod


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """The state reached by a successful execution, plus what happened.

    Attributes:
        resulting_state: State after the execution. Owned by this result.
        resource_variation: Net resource change (negative when spent).
        items_involved: Items whose possession was relied upon.
        damage_reducing_items: Items that reduced damage taken.
        destroyed_obstacles: Obstacles destroyed, in order, each once.
        opened_locks: Opened lock -> strat used.
        bypassed_locks: Bypassed lock -> strat used.
        activated_game_flags: Game flags that became active.
        killed_enemies: Enemies defeated, in order.

    """

    resulting_state: SimulatedState
    resource_variation: ResourceCount = field(default_factory=ResourceCount)
    items_involved: frozenset[str] = frozenset()
    damage_reducing_items: frozenset[str] = frozenset()
    destroyed_obstacles: tuple[int, ...] = ()
    opened_locks: Mapping[int, int] = field(default_factory=dict)
    bypassed_locks: Mapping[int, int] = field(default_factory=dict)
    activated_game_flags: frozenset[str] = frozenset()
    killed_enemies: tuple[EnemyKill, ...] = ()

    @classmethod
    def unchanged(cls, state: SimulatedState) -> ExecutionResult:
        """A success that changes nothing, on a copy of ``state``."""
        return cls(state.clone())

    @classmethod
    def between(
        cls,
        initial_state: SimulatedState,
        resulting_state: SimulatedState,
        **logs: object,
    ) -> ExecutionResult:
        """A success going from ``initial_state`` to ``resulting_state``.

        The resource variation is derived from the two states.
        """
        variation = resulting_state.resources.variation_with(initial_state.resources)
        return cls(resulting_state, variation, **logs)  # type: ignore[arg-type]

    def merge(self, subsequent: ExecutionResult) -> ExecutionResult:
        """Combine with a result obtained from this result's state."""
        return ExecutionResult(
            resulting_state=subsequent.resulting_state,
            resource_variation=self.resource_variation.plus(subsequent.resource_variation),
            items_involved=self.items_involved | subsequent.items_involved,
            damage_reducing_items=self.damage_reducing_items | subsequent.damage_reducing_items,
            destroyed_obstacles=tuple(dict.fromkeys(self.destroyed_obstacles + subsequent.destroyed_obstacles)),
            opened_locks={**self.opened_locks, **subsequent.opened_locks},
            bypassed_locks={**self.bypassed_locks, **subsequent.bypassed_locks},
            activated_game_flags=self.activated_game_flags | subsequent.activated_game_flags,
            killed_enemies=self.killed_enemies + subsequent.killed_enemies,
        )

    def and_then(self, step: Callable[[SimulatedState], ExecutionResult | None]) -> ExecutionResult | None:
        """Run ``step`` from this result's state and merge, or return None."""
        return chain(self, step)

    def with_items_involved(self, *items: str) -> ExecutionResult:
        return replace(self, items_involved=self.items_involved | frozenset(items))

    def with_damage_reducing_items(self, items: Iterable[str]) -> ExecutionResult:
        return replace(self, damage_reducing_items=self.damage_reducing_items | frozenset(items))

    def with_destroyed_obstacles(self, obstacles: Iterable[int]) -> ExecutionResult:
        """Destroy obstacles in the resulting state and log them."""
        obstacles = tuple(obstacles)
        for obstacle in obstacles:
            self.resulting_state.apply_destroy_obstacle(obstacle)
        return replace(self, destroyed_obstacles=tuple(dict.fromkeys(self.destroyed_obstacles + obstacles)))

    def with_opened_lock(self, lock: int, strat: int) -> ExecutionResult:
        self.resulting_state.apply_open_lock(lock)
        return replace(self, opened_locks={**self.opened_locks, lock: strat})

    def with_bypassed_lock(self, lock: int, strat: int) -> ExecutionResult:
        self.resulting_state.apply_bypass_lock(lock)
        return replace(self, bypassed_locks={**self.bypassed_locks, lock: strat})

    def with_activated_game_flag(self, flag: str) -> ExecutionResult:
        """Activate a game flag, logging it only if it was not already active."""
        if self.resulting_state.has_game_flag(flag):
            return self
        self.resulting_state.apply_add_game_flag(flag)
        return replace(self, activated_game_flags=self.activated_game_flags | {flag})

    def with_killed_enemy(self, enemy: str, method: KillMethod) -> ExecutionResult:
        return replace(self, killed_enemies=(*self.killed_enemies, EnemyKill(enemy, method)))


def chain(
    result: ExecutionResult | None,
    step: Callable[[SimulatedState], ExecutionResult | None],
) -> ExecutionResult | None:
    """Thread ``result``'s state through ``step`` and merge the logs.

    Returns None if either ``result`` is None or ``step`` fails.
    """
    if result is None:
        return None
    subsequent = step(result.resulting_state)
    if subsequent is None:
        return None
    return result.merge(subsequent)


def execute_all(
    steps: Iterable[Callable[[SimulatedState], ExecutionResult | None]],
    state: SimulatedState,
) -> ExecutionResult | None:
    """Run every step in order, each from the previous step's state.

    Stops at the first failure. No steps is a success that changes nothing.
    """
    result: ExecutionResult | None = ExecutionResult.unchanged(state)
    for step in steps:
        result = chain(result, step)
        if result is None:
            return None
    return result


class ResourceEvaluator(Protocol):
    """Gives a value to a set of resources. Higher is better."""

    def value(self, resources: ResourceCount) -> int: ...


class FixedValueResourceEvaluator:
    """Values resources as a weighted sum of consumable amounts."""

    DEFAULT_VALUES: ClassVar[Mapping[ConsumableResource, int]] = {
        ConsumableResource.ENERGY: 1,
        ConsumableResource.MISSILE: 3,
        ConsumableResource.SUPER: 30,
        ConsumableResource.POWER_BOMB: 60,
    }

    def __init__(self, values: Mapping[ConsumableResource, int] | None = None) -> None:
        self.values = dict(self.DEFAULT_VALUES if values is None else values)

    def value(self, resources: ResourceCount) -> int:
        return sum(resources.get_consumable(resource) * weight for resource, weight in self.values.items())

    def __repr__(self) -> str:
        return f"FixedValueResourceEvaluator({self.values!r})"


def execute_best[A](
    alternatives: Iterable[A],
    state: SimulatedState,
    run: Callable[[A, SimulatedState], ExecutionResult | None],
    comparator: ResourceEvaluator | None,
    accept: Callable[[ExecutionResult], bool] | None = None,
) -> tuple[A, ExecutionResult] | tuple[None, None]:
    """Run each alternative from ``state`` and keep the most valuable success.

    Every alternative starts from the same ``state``; ``run`` must not mutate
    it. Results rejected by ``accept`` count as failures. With a comparator,
    a success that costs nothing is returned at once, and otherwise only a
    strictly better result replaces the current best, so ties go to the
    alternative declared first. Without a comparator the first success wins.

    Returns:
        The winning (alternative, result), or (None, None) if none succeeded.

    """
    initial_value = comparator.value(state.resources) if comparator is not None else None
    best: tuple[A, ExecutionResult] | None = None
    best_value = 0

    for alternative in alternatives:
        result = run(alternative, state)
        if result is None or (accept is not None and not accept(result)):
            continue
        if comparator is None:
            return alternative, result
        value = comparator.value(result.resulting_state.resources)
        if value == initial_value:
            return alternative, result
        if best is None or value > best_value:
            best = (alternative, result)
            best_value = value

    if best is None:
        logger.debug("No alternative succeeded")
        return None, None
    return best
