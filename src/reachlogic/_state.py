"""Simulated in-game state: resources, inventory and the current visit."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._enums import ConsumableResource, RechargeableResource
from ._errors import InvalidTraversalError, UnknownElementError
from ._inventory import ExpansionItem, ItemInventory
from ._resources import ResourceCount

if TYPE_CHECKING:
    from ._model import LogicModel
    from ._options import StartConditions

logger = logging.getLogger(__name__)

MAX_PREVIOUS_VISITS = 2


@dataclass(frozen=True, slots=True)
class VisitedStep:
    """A node reached during a visit, and the strat used to reach it."""

    node: int
    strat: int | None = None


@dataclass(slots=True)
class LocationVisit:
    """What happened since entering the current location."""

    location: int
    path: list[VisitedStep] = field(default_factory=list)
    destroyed_obstacles: set[int] = field(default_factory=set)
    opened_locks: set[int] = field(default_factory=set)
    bypassed_locks: set[int] = field(default_factory=set)

    def clone(self) -> LocationVisit:
        return LocationVisit(
            location=self.location,
            path=list(self.path),
            destroyed_obstacles=set(self.destroyed_obstacles),
            opened_locks=set(self.opened_locks),
            bypassed_locks=set(self.bypassed_locks),
        )


class SimulatedState:
    """The state of a game at one point of a simulation.

    States are values in practice: anything hypothetical works on a
    ``clone()``, and only the clone of a successful branch is kept.

    Every index passed to a state is checked against its model.
    """

    __slots__ = ("_model", "active_game_flags", "inventory", "opened_locks", "previous_visits", "resources", "visit")

    def __init__(
        self,
        model: LogicModel,
        node: int,
        resources: ResourceCount,
        inventory: ItemInventory,
        *,
        active_game_flags: set[str] | None = None,
        opened_locks: set[int] | None = None,
    ) -> None:
        self._model = model
        self.resources = resources
        self.inventory = inventory
        self.active_game_flags = set(active_game_flags or ())
        self.opened_locks = set(opened_locks or ())
        self.previous_visits: deque[LocationVisit] = deque(maxlen=MAX_PREVIOUS_VISITS)
        entry = model.node(node)
        self.visit = LocationVisit(entry.location, [VisitedStep(entry.index)])

    @classmethod
    def initial(cls, model: LogicModel, node: int, start: StartConditions | None = None) -> SimulatedState:
        """Create the state of a new game standing at ``node``.

        Without start conditions the inventory is empty and energy is full.
        """
        if start is None:
            inventory = ItemInventory()
            return cls(model, node, inventory.resource_maximums, inventory)

        inventory = ItemInventory(ResourceCount.from_mapping(start.base_maximums))
        for name in sorted(start.items):
            inventory.apply_add_item(model.item(name))
        for name, count in sorted(start.expansions.items()):
            inventory.apply_add_item(model.item(name), count)
        resources = (
            inventory.resource_maximums if start.resources is None else ResourceCount.from_mapping(start.resources)
        )
        for flag in start.game_flags:
            _check_game_flag(model, flag)
        return cls(model, node, resources, inventory, active_game_flags=set(start.game_flags))

    @property
    def model(self) -> LogicModel:
        return self._model

    def clone(self) -> SimulatedState:
        copy = SimulatedState.__new__(SimulatedState)
        copy._model = self._model
        copy.resources = self.resources.clone()
        copy.inventory = self.inventory.clone()
        copy.active_game_flags = set(self.active_game_flags)
        copy.opened_locks = set(self.opened_locks)
        copy.previous_visits = deque((visit.clone() for visit in self.previous_visits), maxlen=MAX_PREVIOUS_VISITS)
        copy.visit = self.visit.clone()
        return copy

    # Resources

    @property
    def resource_maximums(self) -> ResourceCount:
        return self.inventory.resource_maximums

    def is_resource_available(self, resource: ConsumableResource, quantity: int) -> bool:
        return self.resources.is_available(resource, quantity)

    def apply_consume_resource(self, resource: ConsumableResource, quantity: int) -> SimulatedState:
        """Spend resources without checking, possibly down to death."""
        self.resources.apply_reduction(resource, quantity)
        return self

    def apply_add_resource(self, resource: RechargeableResource, quantity: int) -> SimulatedState:
        """Gain resources, capped at the current maximum."""
        maximum = self.inventory.max_amount(resource)
        self.resources.apply_amount(resource, min(maximum, self.resources.get(resource) + quantity))
        return self

    def apply_refill_resources(self) -> SimulatedState:
        self.resources.apply_amounts(self.resource_maximums)
        return self

    def resource_variation_with(self, other: SimulatedState) -> ResourceCount:
        return self.resources.variation_with(other.resources)

    def is_dead(self) -> bool:
        return self.resources.get(RechargeableResource.REGULAR_ENERGY) <= 0

    # Items and flags

    def has_item(self, name: str) -> bool:
        return self.inventory.has(name)

    def apply_add_item(self, name: str, count: int = 1) -> SimulatedState:
        """Pick up an item from the model's catalog.

        Expansions raise the maximum and add the same amount to the current
        resource, as a pickup does.
        """
        item = self._model.item(name)
        self.inventory.apply_add_item(item, count)
        if isinstance(item, ExpansionItem):
            self.apply_add_resource(item.resource, item.amount * count)
        return self

    def apply_disable_item(self, name: str) -> SimulatedState:
        self._model.item(name)
        self.inventory.apply_disable_item(name)
        return self

    def apply_enable_item(self, name: str) -> SimulatedState:
        self._model.item(name)
        self.inventory.apply_enable_item(name)
        return self

    def has_game_flag(self, flag: str) -> bool:
        return flag in self.active_game_flags

    def apply_add_game_flag(self, flag: str) -> SimulatedState:
        _check_game_flag(self._model, flag)
        self.active_game_flags.add(flag)
        return self

    # Visit

    @property
    def current_location(self) -> int:
        return self.visit.location

    @property
    def current_node(self) -> int:
        return self.visit.path[-1].node

    @property
    def previous_node(self) -> int | None:
        """The node visited just before the current one, during this visit."""
        if len(self.visit.path) < 2:  # noqa: PLR2004
            return None
        return self.visit.path[-2].node

    @property
    def visited_nodes(self) -> tuple[int, ...]:
        return tuple(step.node for step in self.visit.path)

    def last_strat(self, previous_visits: int = 0) -> int | None:
        """The strat used to reach the last node of a visit.

        ``previous_visits`` counts visits back from the current one. Returns
        None when that visit is not remembered, or when its last node was
        reached without a strat.
        """
        if previous_visits == 0:
            return self.visit.path[-1].strat
        if previous_visits > len(self.previous_visits):
            return None
        return self.previous_visits[previous_visits - 1].path[-1].strat

    def apply_enter_location(self, node: int) -> SimulatedState:
        """Start a new visit at ``node``, remembering the one being left."""
        entry = self._model.node(node)
        self.previous_visits.appendleft(self.visit)
        self.visit = LocationVisit(entry.location, [VisitedStep(entry.index)])
        logger.debug("Entered location %d at node %d", entry.location, entry.index)
        return self

    def apply_visit_node(self, node: int, strat: int | None) -> SimulatedState:
        """Move to a node of the current location through a link.

        Raises:
            InvalidTraversalError: If ``node`` is in another location or no
                link leads to it from the current node.

        """
        target = self._model.node(node)
        if target.location != self.visit.location:
            msg = f"Node {node} is not in the current location {self.visit.location}"
            raise InvalidTraversalError(msg)
        if self._model.link_between(self.current_node, node) is None:
            msg = f"No link from node {self.current_node} to node {node}"
            raise InvalidTraversalError(msg)
        if strat is not None:
            self._model.strat(strat)
        self.visit.path.append(VisitedStep(node, strat))
        return self

    def apply_destroy_obstacle(self, obstacle: int) -> SimulatedState:
        """Mark an obstacle of the current location as destroyed.

        Raises:
            InvalidTraversalError: If the obstacle is in another location.

        """
        if self._model.obstacle(obstacle).location != self.visit.location:
            msg = f"Obstacle {obstacle} is not in the current location {self.visit.location}"
            raise InvalidTraversalError(msg)
        self.visit.destroyed_obstacles.add(obstacle)
        return self

    def is_obstacle_destroyed(self, obstacle: int) -> bool:
        return obstacle in self.visit.destroyed_obstacles

    def apply_open_lock(self, lock: int) -> SimulatedState:
        self._model.lock(lock)
        self.opened_locks.add(lock)
        self.visit.opened_locks.add(lock)
        return self

    def apply_bypass_lock(self, lock: int) -> SimulatedState:
        """Bypass a lock for this visit. Opened locks need no bypass."""
        self._model.lock(lock)
        if lock not in self.opened_locks:
            self.visit.bypassed_locks.add(lock)
        return self

    def is_lock_opened(self, lock: int) -> bool:
        return lock in self.opened_locks

    def is_lock_bypassed(self, lock: int) -> bool:
        return lock in self.visit.bypassed_locks

    def __repr__(self) -> str:
        return (
            f"SimulatedState(node={self.current_node}, resources={dict(self.resources)!r}, "
            f"inventory={self.inventory!r}, flags={sorted(self.active_game_flags)!r})"
        )


def _check_game_flag(model: LogicModel, flag: str) -> None:
    if flag not in model.game_flags:
        msg = f"Unknown game flag '{flag}'"
        raise UnknownElementError(msg)
