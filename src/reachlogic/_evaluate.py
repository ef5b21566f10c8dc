"""Evaluation of requirement trees against a simulated state."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, assert_never

from ._enums import ConsumableResource, RechargeableResource
from ._execution import ExecutionResult, execute_all, execute_best
from ._requirements import (
    AlwaysRequirement,
    AmmoDrainRequirement,
    AmmoRequirement,
    AndRequirement,
    DamageOverTimeRequirement,
    DestroyObstaclesRequirement,
    EnemyDamageRequirement,
    EnemyKillRequirement,
    EnergyAtMostRequirement,
    GameFlagRequirement,
    HelperRequirement,
    ItemRequirement,
    NeverRequirement,
    NotRequirement,
    ObstaclesClearedRequirement,
    OrRequirement,
    PreviousNodeRequirement,
    PreviousStratPropertyRequirement,
    PunctualDamageRequirement,
    ResourceCapacityRequirement,
    ShinesparkRequirement,
    TechRequirement,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._engine import LogicContext
    from ._requirements import KillMethod, RequirementId
    from ._state import SimulatedState

logger = logging.getLogger(__name__)


def evaluate(  # noqa: C901, PLR0911, PLR0912
    context: LogicContext,
    requirement: RequirementId,
    state: SimulatedState,
    *,
    times: int = 1,
) -> ExecutionResult | None:
    """Try to fulfill a requirement from ``state``.

    ``state`` is never modified: any change happens on a copy, owned by the
    returned result.

    Args:
        context: Model, options and rules to evaluate with.
        requirement: The root of the requirement tree.
        state: The state to start from.
        times: How many times the requirement must be fulfilled in a row.
            Costs are multiplied; checks that cost nothing are done once.

    Returns:
        The result of fulfilling the requirement, or None if it cannot be.

    """
    model = context.model
    options = context.options
    rules = context.rules
    node = model.requirement(requirement)

    match node:
        case AlwaysRequirement():
            return ExecutionResult.unchanged(state)

        case NeverRequirement():
            return None

        case ItemRequirement(item=item):
            if not _has_usable_item(context, state, item):
                return None
            return ExecutionResult.unchanged(state).with_items_involved(item)

        case GameFlagRequirement(flag=flag):
            if options.is_game_flag_removed(flag) or not state.has_game_flag(flag):
                return None
            return ExecutionResult.unchanged(state)

        case TechRequirement(tech=index):
            tech = model.tech(index)
            if not options.is_tech_enabled(tech.name):
                return None
            return evaluate(context, tech.requires, state, times=times * options.tries_for_tech(tech.name))

        case HelperRequirement(helper=index):
            helper = model.helper(index)
            return evaluate(context, helper.requires, state, times=times * options.tries_for_helper(helper.name))

        case PreviousNodeRequirement(nodes=nodes):
            if state.previous_node not in nodes:
                return None
            return ExecutionResult.unchanged(state)

        case PreviousStratPropertyRequirement(strat_property=strat_property, previous_visits=previous_visits):
            strat = state.last_strat(previous_visits)
            if strat is None or strat_property not in model.strat(strat).properties:
                return None
            return ExecutionResult.unchanged(state)

        case ObstaclesClearedRequirement(obstacles=obstacles):
            if not all(state.is_obstacle_destroyed(obstacle) for obstacle in obstacles):
                return None
            return ExecutionResult.unchanged(state)

        case DestroyObstaclesRequirement(obstacles=obstacles):
            return execute_all(
                (partial(destroy_obstacle, context, obstacle, times=times) for obstacle in obstacles),
                state,
            )

        case ResourceCapacityRequirement(resource=resource, count=count):
            if state.resource_maximums.get(resource) < count:
                return None
            return ExecutionResult.unchanged(state)

        case AmmoRequirement(ammo=ammo, count=count):
            return _spend(state, ammo, count * times)

        case AmmoDrainRequirement(ammo=ammo, count=count):
            available = state.resources.get_consumable(ammo)
            return _consume(state, ammo, max(0, min(available, count * times)))

        case EnergyAtMostRequirement(amount=amount):
            regular = state.resources.get(RechargeableResource.REGULAR_ENERGY)
            return _consume(state, ConsumableResource.ENERGY, max(0, regular - amount))

        case DamageOverTimeRequirement(source=source, frames=frames):
            has_item = partial(_has_usable_item, context, state)
            frames = rules.lenient_frames(source, frames, options)
            damage = rules.damage_over_time(source, frames, has_item) * times
            return _take_damage(state, damage, rules.damage_over_time_reducing_items(source, has_item))

        case PunctualDamageRequirement(source=source, hits=hits):
            has_item = partial(_has_usable_item, context, state)
            damage = rules.punctual_damage_per_hit(source, has_item) * hits * times
            return _take_damage(state, damage, rules.punctual_damage_reducing_items(has_item))

        case EnemyDamageRequirement(attack=attack, hits=hits):
            has_item = partial(_has_usable_item, context, state)
            damage = rules.enemy_damage_per_hit(attack, has_item) * hits * times
            return _take_damage(state, damage, rules.enemy_damage_reducing_items(attack, has_item))

        case ShinesparkRequirement(frames=frames, excess_frames=excess_frames):
            regular = state.resources.get(RechargeableResource.REGULAR_ENERGY)
            if regular < rules.shinespark_energy_needed(frames, excess_frames, times):
                return None
            return _consume(state, ConsumableResource.ENERGY, rules.shinespark_damage(regular, frames, times))

        case EnemyKillRequirement(enemy=enemy, methods=methods, count=count):
            _, result = execute_best(
                methods,
                state,
                partial(_kill, context, enemy, count * times),
                context.comparator,
            )
            return result

        case AndRequirement(children=children):
            return execute_all((partial(_evaluate_child, context, times, child) for child in children), state)

        case OrRequirement(children=children):
            _, result = execute_best(
                children,
                state,
                partial(_evaluate_child, context, times),
                context.comparator,
            )
            return result

        case NotRequirement(child=child):
            if evaluate(context, child, state, times=times) is not None:
                return None
            return ExecutionResult.unchanged(state)

        case _:
            assert_never(node)


def _evaluate_child(
    context: LogicContext,
    times: int,
    child: RequirementId,
    state: SimulatedState,
) -> ExecutionResult | None:
    return evaluate(context, child, state, times=times)


def _has_usable_item(context: LogicContext, state: SimulatedState, item: str) -> bool:
    """Whether ``state`` holds ``item`` and the options did not remove it."""
    return state.has_item(item) and not context.options.is_item_removed(item)


def destroy_obstacle(
    context: LogicContext,
    obstacle: int,
    state: SimulatedState,
    *,
    times: int = 1,
) -> ExecutionResult | None:
    """Destroy an obstacle using its common requirement, ``times`` times.

    An obstacle that is already destroyed costs nothing and is not logged
    again.
    """
    if state.is_obstacle_destroyed(obstacle):
        return ExecutionResult.unchanged(state)
    result = evaluate(context, context.model.obstacle(obstacle).requires, state, times=times)
    if result is None:
        return None
    return result.with_destroyed_obstacles((obstacle,))


def _consume(state: SimulatedState, resource: ConsumableResource, quantity: int) -> ExecutionResult:
    resulting = state.clone().apply_consume_resource(resource, quantity)
    return ExecutionResult.between(state, resulting)


def _spend(state: SimulatedState, resource: ConsumableResource, quantity: int) -> ExecutionResult | None:
    if not state.is_resource_available(resource, quantity):
        return None
    return _consume(state, resource, quantity)


def _take_damage(state: SimulatedState, damage: int, reducing_items: Iterable[str]) -> ExecutionResult | None:
    result = _spend(state, ConsumableResource.ENERGY, damage)
    if result is None:
        return None
    return result.with_damage_reducing_items(reducing_items)


def _kill(
    context: LogicContext,
    enemy: str,
    count: int,
    method: KillMethod,
    state: SimulatedState,
) -> ExecutionResult | None:
    if not all(_has_usable_item(context, state, item) for item in method.items):
        return None
    if method.ammo is None:
        result = ExecutionResult.unchanged(state)
    else:
        result = _spend(state, method.ammo, method.shots * count)
    if result is None:
        return None
    return result.with_killed_enemy(enemy, method)
