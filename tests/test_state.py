"""Tests for SimulatedState."""

import pytest
from conftest import OTHER_NODE_1, ROOM_NODE_1, ROOM_NODE_2, ROOM_NODE_3, state_at

from reachlogic import (
    ConsumableResource,
    InvalidTraversalError,
    ModelBuilder,
    RechargeableResource,
    SimulatedState,
    StartConditions,
    UnknownElementError,
)


class TestInitialState:
    """Tests for new-game states."""

    def test_defaults_to_full_energy_and_no_items(self, builder: ModelBuilder) -> None:
        state = SimulatedState.initial(builder.build(), ROOM_NODE_1)
        assert state.resources.get(RechargeableResource.REGULAR_ENERGY) == 99
        assert state.resource_maximums.get(RechargeableResource.REGULAR_ENERGY) == 99
        assert not state.has_item("Morph Ball")
        assert state.current_node == ROOM_NODE_1
        assert state.previous_node is None

    def test_start_conditions(self, builder: ModelBuilder) -> None:
        start = StartConditions(
            items=frozenset({"Morph Ball"}),
            expansions={"Missile": 2},
            game_flags=frozenset({"f_ZebesAwake"}),
        )
        state = SimulatedState.initial(builder.build(), ROOM_NODE_1, start)
        assert state.has_item("Morph Ball")
        assert state.resources.get(RechargeableResource.MISSILE) == 10
        assert state.has_game_flag("f_ZebesAwake")

    def test_start_resources_override_maximums(self, builder: ModelBuilder) -> None:
        start = StartConditions(resources={RechargeableResource.REGULAR_ENERGY: 30})
        state = SimulatedState.initial(builder.build(), ROOM_NODE_1, start)
        assert state.resources.get(RechargeableResource.REGULAR_ENERGY) == 30
        assert state.resource_maximums.get(RechargeableResource.REGULAR_ENERGY) == 99

    def test_unknown_start_item_raises(self, builder: ModelBuilder) -> None:
        start = StartConditions(items=frozenset({"Screw Attack"}))
        with pytest.raises(UnknownElementError, match="Screw Attack"):
            SimulatedState.initial(builder.build(), ROOM_NODE_1, start)


class TestResources:
    """Tests for spending and gaining resources."""

    def test_expansion_pickup_raises_maximum_and_amount(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build())
        state.apply_add_item("Energy Tank")
        assert state.resource_maximums.get(RechargeableResource.REGULAR_ENERGY) == 199
        assert state.resources.get(RechargeableResource.REGULAR_ENERGY) == 199

    def test_gains_are_capped(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build())
        state.apply_consume_resource(ConsumableResource.ENERGY, 50)
        state.apply_add_resource(RechargeableResource.REGULAR_ENERGY, 500)
        assert state.resources.get(RechargeableResource.REGULAR_ENERGY) == 99

    def test_refill(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build(), ROOM_NODE_1, "Missile")
        state.apply_consume_resource(ConsumableResource.MISSILE, 5)
        state.apply_refill_resources()
        assert state.resources.get(RechargeableResource.MISSILE) == 5

    def test_unavoidable_damage_can_kill(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build())
        state.apply_consume_resource(ConsumableResource.ENERGY, 120)
        assert state.is_dead()

    def test_clone_is_independent(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build())
        copy = state.clone()
        copy.apply_consume_resource(ConsumableResource.ENERGY, 10)
        copy.apply_add_item("Bombs")
        copy.apply_add_game_flag("f_ZebesAwake")
        assert state.resources.get(RechargeableResource.REGULAR_ENERGY) == 99
        assert not state.has_item("Bombs")
        assert not state.has_game_flag("f_ZebesAwake")
        assert copy.model is state.model


class TestFlagsAndItems:
    """Tests for items and game flags checked against the model."""

    def test_unknown_game_flag_raises(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build())
        with pytest.raises(UnknownElementError, match="f_Unknown"):
            state.apply_add_game_flag("f_Unknown")

    def test_unknown_item_raises(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build())
        with pytest.raises(UnknownElementError, match="Screw Attack"):
            state.apply_add_item("Screw Attack")

    def test_disable_item(self, builder: ModelBuilder) -> None:
        state = state_at(builder.build(), ROOM_NODE_1, "Morph Ball")
        state.apply_disable_item("Morph Ball")
        assert not state.has_item("Morph Ball")


class TestVisit:
    """Tests for moving inside and between locations."""

    @pytest.fixture
    def linked(self, builder: ModelBuilder) -> ModelBuilder:
        base = builder.add_strat("Base")
        builder.add_link(ROOM_NODE_1, ROOM_NODE_2, [base])
        builder.add_link(ROOM_NODE_2, ROOM_NODE_3, [base])
        return builder

    def test_visit_through_links(self, linked: ModelBuilder) -> None:
        state = state_at(linked.build())
        state.apply_visit_node(ROOM_NODE_2, 0).apply_visit_node(ROOM_NODE_3, 0)
        assert state.visited_nodes == (ROOM_NODE_1, ROOM_NODE_2, ROOM_NODE_3)
        assert state.previous_node == ROOM_NODE_2

    def test_visit_without_link_raises(self, linked: ModelBuilder) -> None:
        state = state_at(linked.build())
        with pytest.raises(InvalidTraversalError, match="No link"):
            state.apply_visit_node(ROOM_NODE_3, 0)

    def test_visit_other_location_raises(self, linked: ModelBuilder) -> None:
        state = state_at(linked.build())
        with pytest.raises(InvalidTraversalError, match="not in the current location"):
            state.apply_visit_node(OTHER_NODE_1, None)

    def test_enter_location_keeps_two_previous_visits(self, linked: ModelBuilder) -> None:
        state = state_at(linked.build())
        state.apply_enter_location(OTHER_NODE_1)
        state.apply_enter_location(ROOM_NODE_2)
        state.apply_enter_location(OTHER_NODE_1)
        assert len(state.previous_visits) == 2
        assert state.previous_visits[0].path[0].node == ROOM_NODE_2
        assert state.current_location == 1

    def test_last_strat_looks_back_through_visits(self, linked: ModelBuilder) -> None:
        state = state_at(linked.build())
        assert state.last_strat() is None
        state.apply_visit_node(ROOM_NODE_2, 0)
        assert state.last_strat() == 0
        state.apply_enter_location(OTHER_NODE_1)
        assert state.last_strat() is None
        assert state.last_strat(1) == 0
        assert state.last_strat(2) is None

    def test_destroyed_obstacles_belong_to_the_visit(self, builder: ModelBuilder) -> None:
        obstacle = builder.add_obstacle(0, "A")
        state = state_at(builder.build())
        state.apply_destroy_obstacle(obstacle)
        assert state.is_obstacle_destroyed(obstacle)
        state.apply_enter_location(ROOM_NODE_1)
        assert not state.is_obstacle_destroyed(obstacle)

    def test_destroy_obstacle_elsewhere_raises(self, builder: ModelBuilder) -> None:
        obstacle = builder.add_obstacle(0, "A")
        state = state_at(builder.build(), OTHER_NODE_1)
        with pytest.raises(InvalidTraversalError, match="Obstacle"):
            state.apply_destroy_obstacle(obstacle)

    def test_opened_lock_is_not_bypassed(self, builder: ModelBuilder) -> None:
        lock = builder.add_lock(ROOM_NODE_1, "Gray Door")
        state = state_at(builder.build())
        state.apply_open_lock(lock).apply_bypass_lock(lock)
        assert state.is_lock_opened(lock)
        assert not state.is_lock_bypassed(lock)
