"""Shared fixtures: a catalog of items and flags plus two locations."""

import pytest

from reachlogic import (
    LogicalOptions,
    LogicContext,
    LogicModel,
    ModelBuilder,
    RechargeableResource,
    SimulatedState,
    apply_configuration,
)

# Node indices declared by the ``builder`` fixture
ROOM_NODE_1 = 0
ROOM_NODE_2 = 1
ROOM_NODE_3 = 2
OTHER_NODE_1 = 3


@pytest.fixture
def builder() -> ModelBuilder:
    """A builder with items, game flags and two locations already declared.

    "Test Room" has nodes 1, 2 and 3; "Other Room" has node 1. No links.
    """
    builder = ModelBuilder()
    for name in ("Morph Ball", "Bombs", "Varia Suit", "Gravity Suit", "Speed Booster", "Charge Beam"):
        builder.add_item(name)
    builder.add_expansion("Missile", RechargeableResource.MISSILE, 5)
    builder.add_expansion("Super Missile", RechargeableResource.SUPER, 5)
    builder.add_expansion("Power Bomb", RechargeableResource.POWER_BOMB, 5)
    builder.add_expansion("Energy Tank", RechargeableResource.REGULAR_ENERGY, 100)
    builder.add_expansion("Reserve Tank", RechargeableResource.RESERVE_ENERGY, 100)
    builder.add_game_flag("f_DefeatedBotwoon")
    builder.add_game_flag("f_ZebesAwake")

    room = builder.add_location("Test Room")
    for node_id in (1, 2, 3):
        builder.add_node(room, node_id)
    other = builder.add_location("Other Room")
    builder.add_node(other, 1)
    return builder


def configure(model: LogicModel, **options: object) -> LogicContext:
    return apply_configuration(model, LogicalOptions.model_validate(options))


def state_at(model: LogicModel, node: int = ROOM_NODE_1, *items: str) -> SimulatedState:
    """A new-game state at ``node`` holding ``items``."""
    state = SimulatedState.initial(model, node)
    for item in items:
        state.apply_add_item(item)
    return state
