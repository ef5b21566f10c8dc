"""Static logical flags, derived from logical options.

Flags tell what holds for a requirement (or any element built on
requirements) whatever the state:

- ``never``: cannot be fulfilled under the options.
- ``always``: can be fulfilled in any state, though it may cost resources.
- ``free``: can be fulfilled in any state at no cost.

``relevant`` is ``not never``. Every flag set guarantees that ``always``
implies ``not never`` and that ``free`` implies ``always``.

Flags are computed for the whole model at once, in ``model.element_order``
so that every element is computed after everything it depends on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, assert_never

from ._enums import ConsumableResource, RechargeableResource
from ._inventory import ExpansionItem, ItemInventory
from ._model import ElementKind
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
from ._resources import ResourceCount

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._model import ElementKey, LogicModel
    from ._options import LogicalOptions
    from ._requirements import KillMethod, Requirement
    from ._rules import GameRules, HasItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LogicalFlags:
    """Never/Always/Free flags of one element."""

    never: bool = False
    always: bool = False
    free: bool = False

    def __post_init__(self) -> None:
        if self.always and self.never:
            msg = "An element cannot be both always and never fulfillable"
            raise ValueError(msg)
        if self.free and not self.always:
            msg = "A freely fulfillable element must be always fulfillable"
            raise ValueError(msg)

    @classmethod
    def of(cls, *, never: bool, always: bool, free: bool) -> LogicalFlags:
        """Build flags, letting ``never`` win over ``always`` and ``free``."""
        always = always and not never
        return cls(never=never, always=always, free=free and always)

    @classmethod
    def all_of(cls, flags: Iterable[LogicalFlags]) -> LogicalFlags:
        """Flags of a conjunction. An empty conjunction is free."""
        flags = list(flags)
        return cls.of(
            never=any(f.never for f in flags),
            always=all(f.always for f in flags),
            free=all(f.free for f in flags),
        )

    @classmethod
    def any_of(cls, flags: Iterable[LogicalFlags]) -> LogicalFlags:
        """Flags of a disjunction. An empty disjunction is never fulfillable."""
        flags = list(flags)
        return cls.of(
            never=all(f.never for f in flags),
            always=any(f.always for f in flags),
            free=any(f.free for f in flags),
        )

    @property
    def relevant(self) -> bool:
        return not self.never


NEVER = LogicalFlags(never=True)
SITUATIONAL = LogicalFlags()
FREE = LogicalFlags(always=True, free=True)


@dataclass(frozen=True, slots=True)
class LockFlags:
    """Flags of a lock.

    ``never`` means the lock can be neither opened nor bypassed. A lock is
    relevant when it can be active at all.
    """

    never: bool
    relevant: bool


@dataclass(frozen=True, slots=True)
class LogicalProperties:
    """Flags of every element of a model, by arena index."""

    requirements: tuple[LogicalFlags, ...]
    techs: tuple[LogicalFlags, ...]
    helpers: tuple[LogicalFlags, ...]
    obstacles: tuple[LogicalFlags, ...]
    strat_obstacles: tuple[LogicalFlags, ...]
    strat_obstacles_never_from_here: tuple[bool, ...]
    strats: tuple[LogicalFlags, ...]
    locks: tuple[LockFlags, ...]
    links: tuple[LogicalFlags, ...]

    def of(self, key: ElementKey) -> LogicalFlags | LockFlags:
        kind, index = key
        return self._table(kind)[index]

    def _table(self, kind: ElementKind) -> tuple[LogicalFlags, ...] | tuple[LockFlags, ...]:
        match kind:
            case ElementKind.REQUIREMENT:
                return self.requirements
            case ElementKind.TECH:
                return self.techs
            case ElementKind.HELPER:
                return self.helpers
            case ElementKind.OBSTACLE:
                return self.obstacles
            case ElementKind.STRAT_OBSTACLE:
                return self.strat_obstacles
            case ElementKind.STRAT:
                return self.strats
            case ElementKind.LOCK:
                return self.locks
            case ElementKind.LINK:
                return self.links
            case _:
                assert_never(kind)

    def total(self, kind: ElementKind) -> int:
        return len(self._table(kind))

    def count(self, kind: ElementKind, predicate: str) -> int:
        """Count the elements of ``kind`` whose flag named ``predicate`` is set."""
        return sum(1 for flags in self._table(kind) if getattr(flags, predicate))


class _Propagation:
    """Computes flags for one model under one set of options."""

    def __init__(self, model: LogicModel, options: LogicalOptions, rules: GameRules) -> None:
        self.model = model
        self.options = options
        self.rules = rules
        self.flags: dict[ElementKey, LogicalFlags] = {}
        self.lock_flags: dict[int, LockFlags] = {}
        self.never_from_here: dict[int, bool] = {}
        self.best_case: HasItem = rules.best_case_inventory(options)
        self.worst_case: HasItem = rules.worst_case_inventory(options)
        self.starting_maximums = _starting_maximums(model, options)

    def get(self, kind: ElementKind, index: int) -> LogicalFlags:
        return self.flags[kind, index]

    def requirement(self, index: int) -> LogicalFlags:
        return self.get(ElementKind.REQUIREMENT, index)

    def run(self) -> LogicalProperties:
        for kind, index in self.model.element_order:
            flags = self.compute(kind, index)
            if isinstance(flags, LockFlags):
                self.lock_flags[index] = flags
            else:
                self.flags[kind, index] = flags
        return LogicalProperties(
            requirements=self._collect(ElementKind.REQUIREMENT, len(self.model.requirements)),
            techs=self._collect(ElementKind.TECH, len(self.model.techs)),
            helpers=self._collect(ElementKind.HELPER, len(self.model.helpers)),
            obstacles=self._collect(ElementKind.OBSTACLE, len(self.model.obstacles)),
            strat_obstacles=self._collect(ElementKind.STRAT_OBSTACLE, len(self.model.strat_obstacles)),
            strat_obstacles_never_from_here=tuple(
                self.never_from_here[index] for index in range(len(self.model.strat_obstacles))
            ),
            strats=self._collect(ElementKind.STRAT, len(self.model.strats)),
            locks=tuple(self.lock_flags[index] for index in range(len(self.model.locks))),
            links=self._collect(ElementKind.LINK, len(self.model.links)),
        )

    def _collect(self, kind: ElementKind, count: int) -> tuple[LogicalFlags, ...]:
        return tuple(self.get(kind, index) for index in range(count))

    def compute(self, kind: ElementKind, index: int) -> LogicalFlags | LockFlags:  # noqa: C901
        model = self.model
        match kind:
            case ElementKind.REQUIREMENT:
                return self.compute_requirement(model.requirements[index])
            case ElementKind.TECH:
                tech = model.techs[index]
                if not self.options.is_tech_enabled(tech.name):
                    return NEVER
                return self.requirement(tech.requires)
            case ElementKind.HELPER:
                return self.requirement(model.helpers[index].requires)
            case ElementKind.OBSTACLE:
                return self.requirement(model.obstacles[index].requires)
            case ElementKind.STRAT_OBSTACLE:
                strat_obstacle = model.strat_obstacles[index]
                obstacle = self.get(ElementKind.OBSTACLE, strat_obstacle.obstacle)
                destroy = self.requirement(strat_obstacle.requires)
                bypass = NEVER if strat_obstacle.bypass is None else self.requirement(strat_obstacle.bypass)
                self.never_from_here[index] = (obstacle.never or destroy.never) and bypass.never
                return LogicalFlags.of(
                    never=obstacle.never and bypass.never,
                    always=(obstacle.always and destroy.always) or bypass.always,
                    free=(obstacle.free and destroy.free) or bypass.free,
                )
            case ElementKind.STRAT:
                strat = model.strats[index]
                if not self.options.is_strat_enabled(strat):
                    return NEVER
                parts = [self.requirement(strat.requires)]
                parts.extend(self.get(ElementKind.STRAT_OBSTACLE, so) for so in strat.obstacles)
                return LogicalFlags.all_of(parts)
            case ElementKind.LOCK:
                lock = model.locks[index]
                usable = [
                    self.get(ElementKind.STRAT, strat)
                    for strat in (*lock.unlock_strats, *lock.bypass_strats)
                ]
                return LockFlags(
                    never=not any(flags.relevant for flags in usable),
                    relevant=self.requirement(lock.lock_requires).relevant,
                )
            case ElementKind.LINK:
                return LogicalFlags.any_of(self.get(ElementKind.STRAT, strat) for strat in model.links[index].strats)
            case _:
                assert_never(kind)

    def compute_requirement(self, requirement: Requirement) -> LogicalFlags:  # noqa: C901, PLR0911, PLR0912
        options = self.options
        rules = self.rules
        match requirement:
            case AlwaysRequirement():
                return FREE
            case NeverRequirement():
                return NEVER
            case ItemRequirement(item=item):
                if options.is_item_removed(item):
                    return NEVER
                return FREE if item in options.start_conditions.items else SITUATIONAL
            case GameFlagRequirement(flag=flag):
                if options.is_game_flag_removed(flag):
                    return NEVER
                return FREE if flag in options.start_conditions.game_flags else SITUATIONAL
            case TechRequirement(tech=tech):
                return self.get(ElementKind.TECH, tech)
            case HelperRequirement(helper=helper):
                return self.get(ElementKind.HELPER, helper)
            case PreviousNodeRequirement() | PreviousStratPropertyRequirement():
                return SITUATIONAL
            case ObstaclesClearedRequirement(obstacles=obstacles):
                if any(self.get(ElementKind.OBSTACLE, obstacle).never for obstacle in obstacles):
                    return NEVER
                return FREE if not obstacles else SITUATIONAL
            case DestroyObstaclesRequirement(obstacles=obstacles):
                return LogicalFlags.all_of(self.get(ElementKind.OBSTACLE, obstacle) for obstacle in obstacles)
            case ResourceCapacityRequirement(resource=resource, count=count):
                if count <= 0 or self.starting_maximums.get(resource) >= count:
                    return FREE
                return self._unpayable_if(options.max_possible_amount(resource), count, strict=False)
            case AmmoRequirement(ammo=ammo, count=count):
                if count <= 0:
                    return FREE
                return self._unpayable_if(options.max_possible_consumable(ammo), count, strict=False)
            case AmmoDrainRequirement(count=count):
                return FREE if count <= 0 else LogicalFlags(always=True)
            case EnergyAtMostRequirement(amount=amount):
                max_regular = options.max_possible_amount(RechargeableResource.REGULAR_ENERGY)
                return LogicalFlags.of(never=False, always=True, free=max_regular is not None and max_regular <= amount)
            case DamageOverTimeRequirement(source=source, frames=frames):
                # Same rounding as evaluation, so a free flag never hides a cost
                frames = rules.lenient_frames(source, frames, options)
                return self._damage(
                    rules.damage_over_time(source, frames, self.best_case),
                    rules.damage_over_time(source, frames, self.worst_case),
                )
            case PunctualDamageRequirement(source=source, hits=hits):
                return self._damage(
                    rules.punctual_damage_per_hit(source, self.best_case) * hits,
                    rules.punctual_damage_per_hit(source, self.worst_case) * hits,
                )
            case EnemyDamageRequirement(attack=attack, hits=hits):
                return self._damage(
                    rules.enemy_damage_per_hit(attack, self.best_case) * hits,
                    rules.enemy_damage_per_hit(attack, self.worst_case) * hits,
                )
            case ShinesparkRequirement(frames=frames, excess_frames=excess_frames):
                if frames <= 0:
                    return FREE
                needed = rules.shinespark_energy_needed(frames, excess_frames)
                max_regular = options.max_possible_amount(RechargeableResource.REGULAR_ENERGY)
                return LogicalFlags(never=max_regular is not None and max_regular < needed)
            case EnemyKillRequirement(methods=methods, count=count):
                return LogicalFlags.any_of(self._kill_method(method, count) for method in methods)
            case AndRequirement(children=children):
                return LogicalFlags.all_of(self.requirement(child) for child in children)
            case OrRequirement(children=children):
                return LogicalFlags.any_of(self.requirement(child) for child in children)
            case NotRequirement(child=child):
                inner = self.requirement(child)
                return LogicalFlags.of(never=inner.always, always=inner.never, free=inner.never)
            case _:
                assert_never(requirement)

    def _unpayable_if(self, maximum: int | None, cost: int, *, strict: bool) -> LogicalFlags:
        """Never if ``cost`` exceeds a known ``maximum``, situational otherwise.

        With ``strict``, the maximum must also be strictly above the cost.
        """
        if maximum is None:
            return SITUATIONAL
        unpayable = cost >= maximum if strict else cost > maximum
        return NEVER if unpayable else SITUATIONAL

    def _damage(self, best_case: int, worst_case: int) -> LogicalFlags:
        """Flags of an energy cost, from its best and worst case amounts."""
        if worst_case <= 0:
            return FREE
        if best_case <= 0:
            return SITUATIONAL
        return self._unpayable_if(self.options.max_possible_consumable(ConsumableResource.ENERGY), best_case, strict=True)

    def _kill_method(self, method: KillMethod, count: int) -> LogicalFlags:
        options = self.options
        if any(options.is_item_removed(item) for item in method.items):
            return NEVER
        items_free = all(item in options.start_conditions.items for item in method.items)
        if method.ammo is None or method.shots <= 0:
            return FREE if items_free else SITUATIONAL
        return self._unpayable_if(options.max_possible_consumable(method.ammo), method.shots * count, strict=False)


def _starting_maximums(model: LogicModel, options: LogicalOptions) -> ResourceCount:
    """Resource maximums granted by the start conditions alone.

    Names unknown to the model are skipped here.
    """
    start = options.start_conditions
    inventory = ItemInventory(ResourceCount.from_mapping(start.base_maximums))
    for name, count in start.expansions.items():
        item = model.items.get(name)
        if isinstance(item, ExpansionItem):
            inventory.apply_add_item(item, count)
    return inventory.resource_maximums


def compute_properties(model: LogicModel, options: LogicalOptions, rules: GameRules) -> LogicalProperties:
    """Compute the flags of every element of ``model`` under ``options``."""
    properties = _Propagation(model, options, rules).run()
    logger.debug(
        "Computed flags for %d requirements: %d never, %d always, %d free",
        len(properties.requirements),
        properties.count(ElementKind.REQUIREMENT, "never"),
        properties.count(ElementKind.REQUIREMENT, "always"),
        properties.count(ElementKind.REQUIREMENT, "free"),
    )
    return properties
