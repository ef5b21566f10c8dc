"""Immutable, index-addressed model of locations and their logic.

Every element lives in a tuple (an arena) and refers to other elements by
their index in the relevant arena. Back-references (a node to its location,
a lock to its node) are indices too, so the model holds no reference cycles.
Models are produced by ``ModelBuilder.build()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING

from ._errors import UnknownElementError
from ._requirements import children_of

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._graph import DependencyGraph
    from ._inventory import Item
    from ._requirements import Requirement, RequirementId


class ElementKind(StrEnum):
    """Kinds of model elements that carry static logical flags."""

    REQUIREMENT = auto()
    TECH = auto()
    HELPER = auto()
    OBSTACLE = auto()
    STRAT_OBSTACLE = auto()
    STRAT = auto()
    LOCK = auto()
    LINK = auto()


type ElementKey = tuple[ElementKind, int]


@dataclass(frozen=True, slots=True)
class Tech:
    """A named technique, which logical options can disable."""

    index: int
    name: str
    requires: RequirementId


@dataclass(frozen=True, slots=True)
class Helper:
    """A named, reusable requirement."""

    index: int
    name: str
    requires: RequirementId


@dataclass(frozen=True, slots=True)
class Location:
    """A room: a group of nodes connected by links."""

    index: int
    name: str
    nodes: tuple[int, ...]
    obstacles: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Node:
    """A point inside a location.

    ``out_node`` is the node of another location reached by leaving the
    location through this node, if any.
    """

    index: int
    location: int
    node_id: int
    name: str
    locks: tuple[int, ...] = ()
    links: tuple[int, ...] = ()
    out_node: int | None = None


@dataclass(frozen=True, slots=True)
class Link:
    """A one-way connection between two nodes of the same location."""

    index: int
    from_node: int
    to_node: int
    strats: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Obstacle:
    """Something in a location that strats destroy or bypass."""

    index: int
    location: int
    obstacle_id: str
    name: str
    requires: RequirementId


@dataclass(frozen=True, slots=True)
class StratObstacle:
    """How a given strat deals with one obstacle.

    Destroying takes the obstacle's common requirement, then ``requires``, and
    also destroys ``additional_obstacles``. Bypassing takes ``bypass`` and is
    impossible when ``bypass`` is None.
    """

    index: int
    strat: int
    obstacle: int
    requires: RequirementId
    bypass: RequirementId | None = None
    additional_obstacles: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class Strat:
    """A named way to do something: traverse a link, open or bypass a lock.

    ``properties`` are free-form tags that later requirements can check on
    the strat last used to reach a node.
    """

    index: int
    name: str
    requires: RequirementId
    notable: bool = False
    obstacles: tuple[int, ...] = ()
    properties: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Lock:
    """A lock on a node.

    The lock is active while ``lock_requires`` holds and it has not been
    opened. Opening it activates ``yields`` game flags.
    """

    index: int
    node: int
    name: str
    lock_requires: RequirementId
    unlock_strats: tuple[int, ...] = ()
    bypass_strats: tuple[int, ...] = ()
    yields: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, eq=False)
class LogicModel:
    """The frozen arenas of a model.

    Models compare by identity: a state built for one model is foreign to
    every other model.

    Attributes:
        requirements: Requirement nodes, indexed by ``RequirementId``.
        items: Item catalog by name.
        game_flags: Names of every known game flag.
        dependencies: Which flagged elements depend on which.
        element_order: Every flagged element, children before their owners.

    """

    requirements: tuple[Requirement, ...]
    items: dict[str, Item]
    game_flags: frozenset[str]
    techs: tuple[Tech, ...]
    helpers: tuple[Helper, ...]
    locations: tuple[Location, ...]
    nodes: tuple[Node, ...]
    links: tuple[Link, ...]
    obstacles: tuple[Obstacle, ...]
    strat_obstacles: tuple[StratObstacle, ...]
    strats: tuple[Strat, ...]
    locks: tuple[Lock, ...]
    dependencies: DependencyGraph[ElementKey]
    element_order: tuple[ElementKey, ...]
    _names: dict[tuple[str, str], int] = field(default_factory=dict, repr=False, compare=False)

    def requirement(self, requirement: RequirementId) -> Requirement:
        return _at(self.requirements, requirement, "requirement")

    def tech(self, index: int) -> Tech:
        return _at(self.techs, index, "tech")

    def helper(self, index: int) -> Helper:
        return _at(self.helpers, index, "helper")

    def location(self, index: int) -> Location:
        return _at(self.locations, index, "location")

    def node(self, index: int) -> Node:
        return _at(self.nodes, index, "node")

    def link(self, index: int) -> Link:
        return _at(self.links, index, "link")

    def obstacle(self, index: int) -> Obstacle:
        return _at(self.obstacles, index, "obstacle")

    def strat_obstacle(self, index: int) -> StratObstacle:
        return _at(self.strat_obstacles, index, "strat obstacle")

    def strat(self, index: int) -> Strat:
        return _at(self.strats, index, "strat")

    def lock(self, index: int) -> Lock:
        return _at(self.locks, index, "lock")

    def item(self, name: str) -> Item:
        try:
            return self.items[name]
        except KeyError:
            msg = f"Unknown item '{name}'"
            raise UnknownElementError(msg) from None

    def tech_named(self, name: str) -> Tech:
        return self.techs[self._lookup("tech", name)]

    def helper_named(self, name: str) -> Helper:
        return self.helpers[self._lookup("helper", name)]

    def location_named(self, name: str) -> Location:
        return self.locations[self._lookup("location", name)]

    def strat_named(self, name: str) -> Strat:
        return self.strats[self._lookup("strat", name)]

    def lock_named(self, name: str) -> Lock:
        return self.locks[self._lookup("lock", name)]

    def node_in(self, location_name: str, node_id: int) -> Node:
        """Return the node of a location by its in-location id."""
        location = self.location_named(location_name)
        for index in location.nodes:
            if self.nodes[index].node_id == node_id:
                return self.nodes[index]
        msg = f"Location '{location_name}' has no node {node_id}"
        raise UnknownElementError(msg)

    def obstacle_in(self, location_name: str, obstacle_id: str) -> Obstacle:
        location = self.location_named(location_name)
        for index in location.obstacles:
            if self.obstacles[index].obstacle_id == obstacle_id:
                return self.obstacles[index]
        msg = f"Location '{location_name}' has no obstacle '{obstacle_id}'"
        raise UnknownElementError(msg)

    def dependents_of(self, kind: ElementKind, index: int) -> frozenset[ElementKey]:
        """Every flagged element whose logic transitively uses the given one."""
        return self.dependencies.descendants((kind, index))

    def link_between(self, from_node: int, to_node: int) -> Link | None:
        """Return the link from ``from_node`` to ``to_node``, if there is one."""
        for index in self.node(from_node).links:
            if self.links[index].to_node == to_node:
                return self.links[index]
        return None

    def iter_tree(self, root: RequirementId) -> Iterator[RequirementId]:
        """Yield ``root`` and every requirement below it, depth first."""
        stack = [root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(children_of(self.requirement(current))))

    def _lookup(self, kind: str, name: str) -> int:
        try:
            return self._names[kind, name]
        except KeyError:
            msg = f"Unknown {kind} '{name}'"
            raise UnknownElementError(msg) from None


def _at[T](arena: tuple[T, ...], index: int, kind: str) -> T:
    if not 0 <= index < len(arena):
        msg = f"No {kind} at index {index}"
        raise UnknownElementError(msg)
    return arena[index]
