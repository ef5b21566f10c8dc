"""Requirement logic evaluation for item-gated exploration games."""

__all__ = [
    "FREE",
    "NEVER",
    "SITUATIONAL",
    "AlwaysRequirement",
    "AmmoDrainRequirement",
    "AmmoRequirement",
    "AndRequirement",
    "BestChoice",
    "ConsumableResource",
    "DamageOverTimeRequirement",
    "DamageOverTimeSource",
    "DependencyGraph",
    "DestroyObstaclesRequirement",
    "ElementKind",
    "EnemyAttack",
    "EnemyDamageRequirement",
    "EnemyKill",
    "EnemyKillRequirement",
    "EnergyAtMostRequirement",
    "ExecutionResult",
    "ExpansionItem",
    "FixedValueResourceEvaluator",
    "GameFlagRequirement",
    "GameRules",
    "Helper",
    "HelperRequirement",
    "InvalidTraversalError",
    "Item",
    "ItemInventory",
    "ItemRequirement",
    "KillMethod",
    "Link",
    "Location",
    "LocationVisit",
    "Lock",
    "LockFlags",
    "LogicContext",
    "LogicError",
    "LogicModel",
    "LogicalFlags",
    "LogicalOptions",
    "LogicalProperties",
    "ModelBuilder",
    "ModelValidationError",
    "NeverRequirement",
    "Node",
    "NotRequirement",
    "Obstacle",
    "ObstaclesClearedRequirement",
    "OptionsError",
    "OrRequirement",
    "PreviousNodeRequirement",
    "PreviousStratPropertyRequirement",
    "PunctualDamageRequirement",
    "PunctualDamageSource",
    "RechargeableResource",
    "Requirement",
    "RequirementId",
    "ResourceCapacityRequirement",
    "ResourceCount",
    "ResourceEvaluator",
    "ShinesparkRequirement",
    "SimulatedState",
    "StartConditions",
    "Strat",
    "StratObstacle",
    "StratObstacleSpec",
    "Tech",
    "TechRequirement",
    "UnknownElementError",
    "UnknownNamePolicy",
    "VisitedStep",
    "apply_configuration",
    "bypass_lock",
    "chain",
    "destroy_obstacle",
    "dump_logical_options",
    "evaluate",
    "execute_all",
    "execute_best",
    "execute_best_strat",
    "execute_strat",
    "exit_location",
    "is_lock_active",
    "load_logical_options",
    "open_lock",
    "traverse_link",
]

from ._actions import (
    bypass_lock,
    execute_best_strat,
    execute_strat,
    exit_location,
    is_lock_active,
    open_lock,
    traverse_link,
)
from ._builder import ModelBuilder, StratObstacleSpec
from ._engine import LogicContext, apply_configuration
from ._enums import (
    ConsumableResource,
    DamageOverTimeSource,
    PunctualDamageSource,
    RechargeableResource,
    UnknownNamePolicy,
)
from ._errors import InvalidTraversalError, LogicError, ModelValidationError, OptionsError, UnknownElementError
from ._evaluate import destroy_obstacle, evaluate
from ._execution import (
    EnemyKill,
    ExecutionResult,
    FixedValueResourceEvaluator,
    ResourceEvaluator,
    chain,
    execute_all,
    execute_best,
)
from ._graph import DependencyGraph
from ._inventory import ExpansionItem, Item, ItemInventory
from ._model import ElementKind, Helper, Link, Location, Lock, LogicModel, Node, Obstacle, Strat, StratObstacle, Tech
from ._options import BestChoice, LogicalOptions, StartConditions, dump_logical_options, load_logical_options
from ._propagation import FREE, NEVER, SITUATIONAL, LockFlags, LogicalFlags, LogicalProperties
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
)
from ._resources import ResourceCount
from ._rules import GameRules
from ._state import LocationVisit, SimulatedState, VisitedStep
