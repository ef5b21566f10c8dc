"""Single-pass construction of a ``LogicModel``.

The builder allocates every element into an arena as soon as it is
declared and resolves names to indices right away, so a reference to
something not declared yet fails immediately. ``build()`` freezes the arenas
and computes the order in which static flags must be derived.

Example:
    >>> builder = ModelBuilder()
    >>> builder.add_item("Morph Ball")
    >>> room = builder.add_location("Landing Site")
    >>> a = builder.add_node(room, 1)
    >>> b = builder.add_node(room, 2)
    >>> roll = builder.add_strat("Roll Through", builder.item("Morph Ball"))
    >>> builder.add_link(a, b, [roll])
    >>> model = builder.build()

"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ._enums import ConsumableResource, DamageOverTimeSource, PunctualDamageSource, RechargeableResource
from ._errors import ModelValidationError, UnknownElementError
from ._graph import DependencyGraph
from ._inventory import ExpansionItem, Item
from ._model import (
    ElementKey,
    ElementKind,
    Helper,
    Link,
    Location,
    Lock,
    LogicModel,
    Node,
    Obstacle,
    Strat,
    StratObstacle,
    Tech,
)
from ._requirements import (
    AlwaysRequirement,
    AmmoDrainRequirement,
    AmmoRequirement,
    AndRequirement,
    DamageOverTimeRequirement,
    DestroyObstaclesRequirement,
    EnemyAttack,
    EnemyDamageRequirement,
    EnemyKillRequirement,
    EnergyAtMostRequirement,
    GameFlagRequirement,
    HelperRequirement,
    ItemRequirement,
    KillMethod,
    NeverRequirement,
    NotRequirement,
    ObstaclesClearedRequirement,
    OrRequirement,
    PreviousNodeRequirement,
    PreviousStratPropertyRequirement,
    PunctualDamageRequirement,
    Requirement,
    RequirementId,
    ResourceCapacityRequirement,
    ShinesparkRequirement,
    TechRequirement,
    children_of,
)
from ._state import MAX_PREVIOUS_VISITS

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StratObstacleSpec:
    """How a strat deals with an obstacle, before the strat exists.

    ``requires`` defaults to no extra requirement. ``bypass`` None means
    the obstacle cannot be bypassed by this strat.
    """

    obstacle: int
    requires: RequirementId | None = None
    bypass: RequirementId | None = None
    additional_obstacles: tuple[int, ...] = ()


@dataclass(slots=True)
class _NodeDraft:
    location: int
    node_id: int
    name: str
    locks: list[int] = field(default_factory=list)
    links: list[int] = field(default_factory=list)
    out_node: int | None = None


class ModelBuilder:
    """Declares the elements of a model, then freezes them with ``build()``.

    Requirement factories (``item``, ``ammo``, ``and_``, ...) allocate a
    requirement node and return its id, to be used as a child of other
    requirements or as the requirement of a strat, tech, helper, obstacle
    or lock.
    """

    def __init__(self) -> None:
        self._requirements: list[Requirement] = []
        self._items: dict[str, Item] = {}
        self._game_flags: dict[str, None] = {}
        self._techs: list[Tech] = []
        self._helpers: list[Helper] = []
        self._locations: list[tuple[str, list[int], list[int]]] = []
        self._nodes: list[_NodeDraft] = []
        self._links: list[Link] = []
        self._obstacles: list[Obstacle] = []
        self._strat_obstacles: list[StratObstacle] = []
        self._strats: list[Strat] = []
        self._locks: list[Lock] = []
        self._names: dict[tuple[str, str], int] = {}
        self._always: RequirementId | None = None

    # Catalog

    def add_item(self, name: str) -> Item:
        item = Item(name)
        self._register_item(item)
        return item

    def add_expansion(self, name: str, resource: RechargeableResource, amount: int) -> ExpansionItem:
        _check_non_negative(amount, f"amount of expansion '{name}'")
        item = ExpansionItem(name, RechargeableResource(resource), amount)
        self._register_item(item)
        return item

    def add_game_flag(self, name: str) -> str:
        if name in self._game_flags:
            msg = f"Duplicate game flag '{name}'"
            raise ModelValidationError(msg)
        self._game_flags[name] = None
        return name

    def add_tech(self, name: str, requires: RequirementId | None = None) -> int:
        index = self._claim_name("tech", name, len(self._techs))
        self._techs.append(Tech(index, name, self._requirement_or_always(requires)))
        return index

    def add_helper(self, name: str, requires: RequirementId) -> int:
        self._check_requirement(requires)
        index = self._claim_name("helper", name, len(self._helpers))
        self._helpers.append(Helper(index, name, requires))
        return index

    # Requirements

    def always(self) -> RequirementId:
        """The always-fulfilled requirement, shared by every caller."""
        if self._always is None:
            self._always = self._add(AlwaysRequirement())
        return self._always

    def never(self) -> RequirementId:
        return self._add(NeverRequirement())

    def item(self, name: str) -> RequirementId:
        self._known_item(name)
        return self._add(ItemRequirement(name))

    def game_flag(self, name: str) -> RequirementId:
        if name not in self._game_flags:
            msg = f"Unknown game flag '{name}'"
            raise UnknownElementError(msg)
        return self._add(GameFlagRequirement(name))

    def tech(self, name: str) -> RequirementId:
        return self._add(TechRequirement(self._lookup("tech", name)))

    def helper(self, name: str) -> RequirementId:
        return self._add(HelperRequirement(self._lookup("helper", name)))

    def previous_node(self, *nodes: int) -> RequirementId:
        for node in nodes:
            self._node(node)
        return self._add(PreviousNodeRequirement(tuple(nodes)))

    def previous_strat_property(self, strat_property: str, previous_visits: int = 0) -> RequirementId:
        if not 0 <= previous_visits <= MAX_PREVIOUS_VISITS:
            msg = f"Cannot look {previous_visits} visits back, only {MAX_PREVIOUS_VISITS} are kept"
            raise ModelValidationError(msg)
        return self._add(PreviousStratPropertyRequirement(strat_property, previous_visits))

    def obstacles_cleared(self, *obstacles: int) -> RequirementId:
        for obstacle in obstacles:
            self._obstacle(obstacle)
        return self._add(ObstaclesClearedRequirement(tuple(obstacles)))

    def destroy_obstacles(self, *obstacles: int) -> RequirementId:
        for obstacle in obstacles:
            self._obstacle(obstacle)
        return self._add(DestroyObstaclesRequirement(tuple(obstacles)))

    def resource_capacity(self, resource: RechargeableResource, count: int) -> RequirementId:
        _check_non_negative(count, "resource capacity")
        return self._add(ResourceCapacityRequirement(RechargeableResource(resource), count))

    def ammo(self, ammo: ConsumableResource, count: int) -> RequirementId:
        _check_ammo(ammo)
        _check_non_negative(count, "ammo count")
        return self._add(AmmoRequirement(ConsumableResource(ammo), count))

    def ammo_drain(self, ammo: ConsumableResource, count: int) -> RequirementId:
        _check_ammo(ammo)
        _check_non_negative(count, "ammo drain count")
        return self._add(AmmoDrainRequirement(ConsumableResource(ammo), count))

    def energy_at_most(self, amount: int) -> RequirementId:
        if amount < 1:
            msg = f"Energy cannot be brought down to {amount}, the minimum is 1"
            raise ModelValidationError(msg)
        return self._add(EnergyAtMostRequirement(amount))

    def damage_over_time(self, source: DamageOverTimeSource, frames: int) -> RequirementId:
        _check_non_negative(frames, "frame count")
        return self._add(DamageOverTimeRequirement(DamageOverTimeSource(source), frames))

    def heat_frames(self, frames: int) -> RequirementId:
        return self.damage_over_time(DamageOverTimeSource.HEAT, frames)

    def punctual_damage(self, source: PunctualDamageSource, hits: int) -> RequirementId:
        _check_non_negative(hits, "hit count")
        return self._add(PunctualDamageRequirement(PunctualDamageSource(source), hits))

    def enemy_damage(self, attack: EnemyAttack, hits: int) -> RequirementId:
        _check_non_negative(hits, "hit count")
        _check_non_negative(attack.base_damage, f"damage of attack '{attack.name}'")
        return self._add(EnemyDamageRequirement(attack, hits))

    def shinespark(self, frames: int, excess_frames: int = 0) -> RequirementId:
        _check_non_negative(frames, "shinespark frames")
        if not 0 <= excess_frames <= frames:
            msg = f"Excess shinespark frames ({excess_frames}) must be between 0 and {frames}"
            raise ModelValidationError(msg)
        return self._add(ShinesparkRequirement(frames, excess_frames))

    def enemy_kill(self, enemy: str, methods: Sequence[KillMethod], count: int = 1) -> RequirementId:
        _check_non_negative(count, "enemy count")
        for method in methods:
            for item in method.items:
                self._known_item(item)
            if method.ammo is not None:
                _check_ammo(method.ammo)
            _check_non_negative(method.shots, f"shots of weapon '{method.weapon}'")
        return self._add(EnemyKillRequirement(enemy, tuple(methods), count))

    def and_(self, *children: RequirementId) -> RequirementId:
        for child in children:
            self._check_requirement(child)
        return self._add(AndRequirement(tuple(children)))

    def or_(self, *children: RequirementId) -> RequirementId:
        for child in children:
            self._check_requirement(child)
        return self._add(OrRequirement(tuple(children)))

    def not_(self, child: RequirementId) -> RequirementId:
        self._check_requirement(child)
        return self._add(NotRequirement(child))

    # Topology

    def add_location(self, name: str) -> int:
        index = self._claim_name("location", name, len(self._locations))
        self._locations.append((name, [], []))
        return index

    def add_node(self, location: int, node_id: int, name: str | None = None) -> int:
        """Add a node to a location. ``node_id`` is unique within the location."""
        location_name, nodes, _ = self._location(location)
        index = self._claim_name("node", f"{location_name}#{node_id}", len(self._nodes))
        self._nodes.append(_NodeDraft(location, node_id, name or f"{location_name} {node_id}"))
        nodes.append(index)
        return index

    def node_index(self, location: int, node_id: int) -> int:
        location_name, _, _ = self._location(location)
        return self._lookup("node", f"{location_name}#{node_id}")

    def add_obstacle(
        self,
        location: int,
        obstacle_id: str,
        requires: RequirementId | None = None,
        name: str | None = None,
    ) -> int:
        """Add an obstacle. ``requires`` applies to every way of destroying it."""
        location_name, _, obstacles = self._location(location)
        index = self._claim_name("obstacle", f"{location_name}#{obstacle_id}", len(self._obstacles))
        self._obstacles.append(
            Obstacle(index, location, obstacle_id, name or obstacle_id, self._requirement_or_always(requires)),
        )
        obstacles.append(index)
        return index

    def add_strat(
        self,
        name: str,
        requires: RequirementId | None = None,
        *,
        notable: bool = False,
        obstacles: Iterable[StratObstacleSpec] = (),
        properties: Iterable[str] = (),
    ) -> int:
        index = self._claim_name("strat", name, len(self._strats))
        requires = self._requirement_or_always(requires)
        strat_obstacles: list[int] = []
        for spec in obstacles:
            self._obstacle(spec.obstacle)
            for extra in spec.additional_obstacles:
                self._obstacle(extra)
            if spec.bypass is not None:
                self._check_requirement(spec.bypass)
            so_index = len(self._strat_obstacles)
            self._strat_obstacles.append(
                StratObstacle(
                    index=so_index,
                    strat=index,
                    obstacle=spec.obstacle,
                    requires=self._requirement_or_always(spec.requires),
                    bypass=spec.bypass,
                    additional_obstacles=tuple(spec.additional_obstacles),
                ),
            )
            strat_obstacles.append(so_index)
        self._strats.append(Strat(index, name, requires, notable, tuple(strat_obstacles), frozenset(properties)))
        return index

    def add_link(self, from_node: int, to_node: int, strats: Sequence[int]) -> int:
        """Add a one-way link between two nodes of the same location."""
        source = self._node(from_node)
        target = self._node(to_node)
        if source.location != target.location:
            msg = f"Cannot link nodes of different locations ({source.name} -> {target.name})"
            raise ModelValidationError(msg)
        if any(self._links[link].to_node == to_node for link in source.links):
            msg = f"Duplicate link {source.name} -> {target.name}"
            raise ModelValidationError(msg)
        for strat in strats:
            self._strat(strat)
        index = len(self._links)
        self._links.append(Link(index, from_node, to_node, tuple(strats)))
        source.links.append(index)
        return index

    def add_lock(
        self,
        node: int,
        name: str,
        *,
        lock_requires: RequirementId | None = None,
        unlock_strats: Sequence[int] = (),
        bypass_strats: Sequence[int] = (),
        yields: Sequence[str] = (),
    ) -> int:
        """Add a lock to a node. Without ``lock_requires`` the lock is always active."""
        draft = self._node(node)
        for strat in (*unlock_strats, *bypass_strats):
            self._strat(strat)
        for flag in yields:
            if flag not in self._game_flags:
                msg = f"Lock '{name}' yields unknown game flag '{flag}'"
                raise UnknownElementError(msg)
        index = self._claim_name("lock", name, len(self._locks))
        self._locks.append(
            Lock(
                index=index,
                node=node,
                name=name,
                lock_requires=self._requirement_or_always(lock_requires),
                unlock_strats=tuple(unlock_strats),
                bypass_strats=tuple(bypass_strats),
                yields=tuple(yields),
            ),
        )
        draft.locks.append(index)
        return index

    def connect(self, from_node: int, to_node: int) -> None:
        """Leaving a location through ``from_node`` enters another at ``to_node``."""
        source = self._node(from_node)
        target = self._node(to_node)
        if source.location == target.location:
            msg = f"Cannot connect nodes of the same location ({source.name} -> {target.name})"
            raise ModelValidationError(msg)
        source.out_node = to_node

    # Freeze

    def build(self) -> LogicModel:
        """Freeze the declared elements into a ``LogicModel``.

        Raises:
            ModelValidationError: If the elements depend on each other in a cycle.

        """
        nodes, edges = self._dependencies()
        dependencies = DependencyGraph.from_edges(edges, nodes=nodes)
        try:
            order = dependencies.topological_order()
        except ValueError as e:
            msg = f"Model elements depend on each other in a cycle: {e}"
            raise ModelValidationError(msg) from e

        model = LogicModel(
            requirements=tuple(self._requirements),
            items=dict(self._items),
            game_flags=frozenset(self._game_flags),
            techs=tuple(self._techs),
            helpers=tuple(self._helpers),
            locations=tuple(
                Location(index, name, tuple(location_nodes), tuple(obstacles))
                for index, (name, location_nodes, obstacles) in enumerate(self._locations)
            ),
            nodes=tuple(
                Node(
                    index=index,
                    location=draft.location,
                    node_id=draft.node_id,
                    name=draft.name,
                    locks=tuple(draft.locks),
                    links=tuple(draft.links),
                    out_node=draft.out_node,
                )
                for index, draft in enumerate(self._nodes)
            ),
            links=tuple(self._links),
            obstacles=tuple(self._obstacles),
            strat_obstacles=tuple(self._strat_obstacles),
            strats=tuple(self._strats),
            locks=tuple(self._locks),
            dependencies=dependencies,
            element_order=tuple(order),
            _names=dict(self._names),
        )
        logger.debug(
            "Built model with %d requirements, %d strats, %d links and %d locks",
            len(model.requirements),
            len(model.strats),
            len(model.links),
            len(model.locks),
        )
        return model

    def _dependencies(self) -> tuple[list[ElementKey], list[tuple[ElementKey, ElementKey]]]:  # noqa: C901
        """List flagged elements and the (dependency, dependent) edges between them."""
        req = ElementKind.REQUIREMENT
        nodes: list[ElementKey] = []
        edges: list[tuple[ElementKey, ElementKey]] = []

        for index, requirement in enumerate(self._requirements):
            key = (req, index)
            nodes.append(key)
            edges.extend(((req, child), key) for child in children_of(requirement))
            match requirement:
                case TechRequirement(tech=tech):
                    edges.append(((ElementKind.TECH, tech), key))
                case HelperRequirement(helper=helper):
                    edges.append(((ElementKind.HELPER, helper), key))
                case ObstaclesClearedRequirement(obstacles=obstacles) | DestroyObstaclesRequirement(
                    obstacles=obstacles,
                ):
                    edges.extend(((ElementKind.OBSTACLE, obstacle), key) for obstacle in obstacles)
                case _:
                    pass

        for tech in self._techs:
            nodes.append((ElementKind.TECH, tech.index))
            edges.append(((req, tech.requires), (ElementKind.TECH, tech.index)))
        for helper in self._helpers:
            nodes.append((ElementKind.HELPER, helper.index))
            edges.append(((req, helper.requires), (ElementKind.HELPER, helper.index)))
        for obstacle in self._obstacles:
            nodes.append((ElementKind.OBSTACLE, obstacle.index))
            edges.append(((req, obstacle.requires), (ElementKind.OBSTACLE, obstacle.index)))
        for so in self._strat_obstacles:
            key = (ElementKind.STRAT_OBSTACLE, so.index)
            nodes.append(key)
            edges.append(((ElementKind.OBSTACLE, so.obstacle), key))
            edges.append(((req, so.requires), key))
            if so.bypass is not None:
                edges.append(((req, so.bypass), key))
        for strat in self._strats:
            key = (ElementKind.STRAT, strat.index)
            nodes.append(key)
            edges.append(((req, strat.requires), key))
            edges.extend(((ElementKind.STRAT_OBSTACLE, so), key) for so in strat.obstacles)
        for lock in self._locks:
            key = (ElementKind.LOCK, lock.index)
            nodes.append(key)
            edges.append(((req, lock.lock_requires), key))
            edges.extend(((ElementKind.STRAT, strat), key) for strat in (*lock.unlock_strats, *lock.bypass_strats))
        for link in self._links:
            key = (ElementKind.LINK, link.index)
            nodes.append(key)
            edges.extend(((ElementKind.STRAT, strat), key) for strat in link.strats)

        return nodes, edges

    # Internals

    def _add(self, requirement: Requirement) -> RequirementId:
        self._requirements.append(requirement)
        return RequirementId(len(self._requirements) - 1)

    def _requirement_or_always(self, requirement: RequirementId | None) -> RequirementId:
        if requirement is None:
            return self.always()
        self._check_requirement(requirement)
        return requirement

    def _check_requirement(self, requirement: RequirementId) -> None:
        if not 0 <= requirement < len(self._requirements):
            msg = f"No requirement with id {requirement}"
            raise UnknownElementError(msg)

    def _register_item(self, item: Item) -> None:
        if item.name in self._items:
            msg = f"Duplicate item '{item.name}'"
            raise ModelValidationError(msg)
        self._items[item.name] = item

    def _known_item(self, name: str) -> None:
        if name not in self._items:
            msg = f"Unknown item '{name}'"
            raise UnknownElementError(msg)

    def _claim_name(self, kind: str, name: str, index: int) -> int:
        if (kind, name) in self._names:
            msg = f"Duplicate {kind} '{name}'"
            raise ModelValidationError(msg)
        self._names[kind, name] = index
        return index

    def _lookup(self, kind: str, name: str) -> int:
        try:
            return self._names[kind, name]
        except KeyError:
            msg = f"Unknown {kind} '{name}'"
            raise UnknownElementError(msg) from None

    def _location(self, location: int) -> tuple[str, list[int], list[int]]:
        if not 0 <= location < len(self._locations):
            msg = f"No location at index {location}"
            raise UnknownElementError(msg)
        return self._locations[location]

    def _node(self, node: int) -> _NodeDraft:
        if not 0 <= node < len(self._nodes):
            msg = f"No node at index {node}"
            raise UnknownElementError(msg)
        return self._nodes[node]

    def _obstacle(self, obstacle: int) -> Obstacle:
        if not 0 <= obstacle < len(self._obstacles):
            msg = f"No obstacle at index {obstacle}"
            raise UnknownElementError(msg)
        return self._obstacles[obstacle]

    def _strat(self, strat: int) -> Strat:
        if not 0 <= strat < len(self._strats):
            msg = f"No strat at index {strat}"
            raise UnknownElementError(msg)
        return self._strats[strat]


def _check_non_negative(value: int, what: str) -> None:
    if value < 0:
        msg = f"Negative {what}: {value}"
        raise ModelValidationError(msg)


def _check_ammo(ammo: ConsumableResource) -> None:
    if ConsumableResource(ammo) == ConsumableResource.ENERGY:
        msg = "Energy is not ammo; use a damage or energy requirement"
        raise ModelValidationError(msg)
