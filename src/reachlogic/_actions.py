"""Executing strats, and using them on locks and links."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from ._errors import InvalidTraversalError
from ._evaluate import evaluate
from ._execution import ExecutionResult, chain, execute_all, execute_best

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._engine import LogicContext
    from ._requirements import RequirementId
    from ._state import SimulatedState

logger = logging.getLogger(__name__)


def execute_strat(
    context: LogicContext,
    strat: int,
    state: SimulatedState,
    *,
    times: int = 1,
) -> ExecutionResult | None:
    """Execute a strat: its requirement, then each of its obstacles.

    Every obstacle still intact is destroyed if possible, and bypassed
    otherwise. Obstacles destroyed earlier in the visit need nothing.
    """
    model = context.model
    options = context.options
    definition = model.strat(strat)
    if not options.is_strat_enabled(definition):
        return None
    times *= options.tries_for_strat(definition)

    result = evaluate(context, definition.requires, state, times=times)
    for strat_obstacle in definition.obstacles:
        result = chain(result, partial(_deal_with_obstacle, context, strat_obstacle, times))
        if result is None:
            return None
    return result


def _deal_with_obstacle(
    context: LogicContext,
    strat_obstacle: int,
    times: int,
    state: SimulatedState,
) -> ExecutionResult | None:
    definition = context.model.strat_obstacle(strat_obstacle)
    if state.is_obstacle_destroyed(definition.obstacle):
        return ExecutionResult.unchanged(state)
    destroyed = _destroy_obstacle(context, strat_obstacle, times, state)
    if destroyed is not None:
        return destroyed
    if definition.bypass is None:
        return None
    return evaluate(context, definition.bypass, state, times=times)


def _destroy_obstacle(
    context: LogicContext,
    strat_obstacle: int,
    times: int,
    state: SimulatedState,
) -> ExecutionResult | None:
    definition = context.model.strat_obstacle(strat_obstacle)
    obstacle = context.model.obstacle(definition.obstacle)
    result = execute_all(
        (
            partial(_evaluate_times, context, obstacle.requires, times),
            partial(_evaluate_times, context, definition.requires, times),
        ),
        state,
    )
    if result is None:
        return None
    return result.with_destroyed_obstacles((obstacle.index, *definition.additional_obstacles))


def _evaluate_times(
    context: LogicContext,
    requirement: RequirementId,
    times: int,
    state: SimulatedState,
) -> ExecutionResult | None:
    return evaluate(context, requirement, state, times=times)


def _run_strat(context: LogicContext, strat: int, state: SimulatedState) -> ExecutionResult | None:
    return execute_strat(context, strat, state)


def execute_best_strat(
    context: LogicContext,
    strats: Iterable[int],
    state: SimulatedState,
) -> tuple[int, ExecutionResult] | tuple[None, None]:
    """Execute the cheapest of several strats. Ties go to the first declared."""
    return execute_best(strats, state, partial(_run_strat, context), context.comparator)


def is_lock_active(context: LogicContext, lock: int, state: SimulatedState) -> bool:
    """A lock is active if it was not opened and its lock condition holds."""
    definition = context.model.lock(lock)
    if state.is_lock_opened(lock):
        return False
    return evaluate(context, definition.lock_requires, state) is not None


def open_lock(context: LogicContext, lock: int, state: SimulatedState) -> ExecutionResult | None:
    """Open an active lock with its cheapest unlock strat.

    The lock is recorded as opened with the strat used, and the game flags
    it yields are activated.
    """
    definition = context.model.lock(lock)
    if not is_lock_active(context, lock, state):
        return None
    strat, result = execute_best_strat(context, definition.unlock_strats, state)
    if result is None:
        return None
    result = result.with_opened_lock(lock, strat)
    for flag in definition.yields:
        result = result.with_activated_game_flag(flag)
    logger.debug("Opened lock '%s' with strat %d", definition.name, strat)
    return result


def bypass_lock(context: LogicContext, lock: int, state: SimulatedState) -> ExecutionResult | None:
    """Bypass a lock for the current visit with its cheapest bypass strat."""
    definition = context.model.lock(lock)
    strat, result = execute_best_strat(context, definition.bypass_strats, state)
    if result is None:
        return None
    return result.with_bypassed_lock(lock, strat)


def traverse_link(
    context: LogicContext,
    link: int,
    state: SimulatedState,
) -> tuple[int, ExecutionResult] | tuple[None, None]:
    """Follow a link from the node ``state`` is at, with its cheapest strat.

    The destination node is visited in the resulting state.

    Raises:
        InvalidTraversalError: If ``state`` is not at the link's origin.

    """
    definition = context.model.link(link)
    if state.current_node != definition.from_node:
        msg = f"Cannot follow link {link} from node {state.current_node}: it starts at node {definition.from_node}"
        raise InvalidTraversalError(msg)
    strat, result = execute_best_strat(context, definition.strats, state)
    if result is None:
        return None, None
    result.resulting_state.apply_visit_node(definition.to_node, strat)
    return strat, result


def exit_location(context: LogicContext, state: SimulatedState) -> SimulatedState:
    """Leave the current location through the node ``state`` is at.

    Returns a copy of ``state`` that entered the location the node leads to.
    The visit being left is kept as the most recent previous visit.

    Raises:
        InvalidTraversalError: If the node leads to no other location, or if
            one of its locks is active and was not bypassed during this visit.

    """
    node = context.model.node(state.current_node)
    if node.out_node is None:
        msg = f"Cannot leave through {node.name}: it leads to no other location"
        raise InvalidTraversalError(msg)
    active = [
        context.model.lock(lock).name
        for lock in node.locks
        if not state.is_lock_bypassed(lock) and is_lock_active(context, lock, state)
    ]
    if active:
        msg = f"Cannot leave through {node.name}, locks are active: {', '.join(active)}"
        raise InvalidTraversalError(msg)
    return state.clone().apply_enter_location(node.out_node)
