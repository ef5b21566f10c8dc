"""Requirement tree node variants.

A requirement tree is stored in the model's requirement arena. Composite
nodes refer to their children by ``RequirementId`` (an index into that
arena), so a tree is a slice of a flat tuple rather than a web of objects.

Every variant is a frozen dataclass. ``Requirement`` is the closed union of
them; evaluation and static analysis dispatch on it with ``match``.
"""

from dataclasses import dataclass
from typing import NewType

from ._enums import ConsumableResource, DamageOverTimeSource, PunctualDamageSource, RechargeableResource

RequirementId = NewType("RequirementId", int)


@dataclass(frozen=True, slots=True)
class EnemyAttack:
    """An enemy attack and the suits that reduce its damage."""

    enemy: str
    name: str
    base_damage: int
    affected_by_heat_suit: bool = True
    affected_by_full_suit: bool = True


@dataclass(frozen=True, slots=True)
class KillMethod:
    """A way to defeat an enemy: required items and ammo per kill."""

    weapon: str
    items: tuple[str, ...] = ()
    ammo: ConsumableResource | None = None
    shots: int = 0


@dataclass(frozen=True, slots=True)
class AlwaysRequirement:
    pass


@dataclass(frozen=True, slots=True)
class NeverRequirement:
    pass


@dataclass(frozen=True, slots=True)
class ItemRequirement:
    """The named item must be held."""

    item: str


@dataclass(frozen=True, slots=True)
class GameFlagRequirement:
    """The named game flag must be active."""

    flag: str


@dataclass(frozen=True, slots=True)
class TechRequirement:
    """The tech must be enabled and its own requirement fulfilled."""

    tech: int


@dataclass(frozen=True, slots=True)
class HelperRequirement:
    """The helper's requirement must be fulfilled."""

    helper: int


@dataclass(frozen=True, slots=True)
class PreviousNodeRequirement:
    """The node visited just before the current one must be one of ``nodes``."""

    nodes: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class PreviousStratPropertyRequirement:
    """The strat last used to reach a node must have ``strat_property``.

    ``previous_visits`` looks that many visits back: 0 is the current
    location, 1 the location left to enter it.
    """

    strat_property: str
    previous_visits: int = 0


@dataclass(frozen=True, slots=True)
class ObstaclesClearedRequirement:
    """Every obstacle must already be destroyed during the current visit."""

    obstacles: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class DestroyObstaclesRequirement:
    """Destroy every intact obstacle using its common requirement."""

    obstacles: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ResourceCapacityRequirement:
    """The maximum of a resource must be at least ``count``."""

    resource: RechargeableResource
    count: int


@dataclass(frozen=True, slots=True)
class AmmoRequirement:
    """Spend ``count`` ammo per repetition."""

    ammo: ConsumableResource
    count: int


@dataclass(frozen=True, slots=True)
class AmmoDrainRequirement:
    """Spend up to ``count`` ammo per repetition. Never fails."""

    ammo: ConsumableResource
    count: int


@dataclass(frozen=True, slots=True)
class EnergyAtMostRequirement:
    """Bring regular energy down to ``amount``, if above it."""

    amount: int


@dataclass(frozen=True, slots=True)
class DamageOverTimeRequirement:
    source: DamageOverTimeSource
    frames: int


@dataclass(frozen=True, slots=True)
class PunctualDamageRequirement:
    source: PunctualDamageSource
    hits: int


@dataclass(frozen=True, slots=True)
class EnemyDamageRequirement:
    attack: EnemyAttack
    hits: int


@dataclass(frozen=True, slots=True)
class ShinesparkRequirement:
    """Shinespark for ``frames`` frames, the last ``excess_frames`` of which may be cut short."""

    frames: int
    excess_frames: int = 0


@dataclass(frozen=True, slots=True)
class EnemyKillRequirement:
    """Defeat ``count`` of an enemy with the cheapest working method."""

    enemy: str
    methods: tuple[KillMethod, ...]
    count: int = 1


@dataclass(frozen=True, slots=True)
class AndRequirement:
    children: tuple[RequirementId, ...]


@dataclass(frozen=True, slots=True)
class OrRequirement:
    children: tuple[RequirementId, ...]


@dataclass(frozen=True, slots=True)
class NotRequirement:
    child: RequirementId


type Requirement = (
    AlwaysRequirement
    | NeverRequirement
    | ItemRequirement
    | GameFlagRequirement
    | TechRequirement
    | HelperRequirement
    | PreviousNodeRequirement
    | PreviousStratPropertyRequirement
    | ObstaclesClearedRequirement
    | DestroyObstaclesRequirement
    | ResourceCapacityRequirement
    | AmmoRequirement
    | AmmoDrainRequirement
    | EnergyAtMostRequirement
    | DamageOverTimeRequirement
    | PunctualDamageRequirement
    | EnemyDamageRequirement
    | ShinesparkRequirement
    | EnemyKillRequirement
    | AndRequirement
    | OrRequirement
    | NotRequirement
)


def children_of(requirement: Requirement) -> tuple[RequirementId, ...]:
    """Return the direct child requirements of a composite node."""
    match requirement:
        case AndRequirement(children=children) | OrRequirement(children=children):
            return children
        case NotRequirement(child=child):
            return (child,)
        case _:
            return ()
