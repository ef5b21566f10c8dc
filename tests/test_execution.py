"""Tests for ExecutionResult and its combinators."""

from functools import partial

import pytest
from conftest import state_at

from reachlogic import (
    ConsumableResource,
    ExecutionResult,
    FixedValueResourceEvaluator,
    LogicModel,
    ModelBuilder,
    RechargeableResource,
    ResourceCount,
    SimulatedState,
    chain,
    execute_all,
    execute_best,
)

REGULAR = RechargeableResource.REGULAR_ENERGY


def spend(resource: ConsumableResource, quantity: int, state: SimulatedState) -> ExecutionResult | None:
    if not state.is_resource_available(resource, quantity):
        return None
    return ExecutionResult.between(state, state.clone().apply_consume_resource(resource, quantity))


def fail(_state: SimulatedState) -> ExecutionResult | None:
    return None


@pytest.fixture
def model(builder: ModelBuilder) -> LogicModel:
    return builder.build()


class TestExecutionResult:
    """Tests for building and merging results."""

    def test_unchanged_works_on_a_copy(self, model: LogicModel) -> None:
        state = state_at(model)
        result = ExecutionResult.unchanged(state)
        assert result.resulting_state is not state
        assert result.resource_variation.is_zero()

    def test_between_derives_variation(self, model: LogicModel) -> None:
        result = spend(ConsumableResource.ENERGY, 30, state_at(model))
        assert result is not None
        assert result.resource_variation.get(REGULAR) == -30

    def test_merge_sums_and_unions(self, model: LogicModel) -> None:
        state = state_at(model)
        first = ExecutionResult(state.clone(), destroyed_obstacles=(2, 1)).with_items_involved("Morph Ball")
        second = ExecutionResult(
            state.clone(),
            ResourceCount({REGULAR: -5}),
            items_involved=frozenset({"Bombs"}),
            destroyed_obstacles=(1, 3),
        )
        merged = first.merge(second)
        assert merged.items_involved == frozenset({"Morph Ball", "Bombs"})
        assert merged.resource_variation.get(REGULAR) == -5
        assert merged.destroyed_obstacles == (2, 1, 3)
        assert merged.resulting_state is second.resulting_state

    def test_activated_flag_is_logged_once(self, model: LogicModel) -> None:
        state = state_at(model)
        state.apply_add_game_flag("f_ZebesAwake")
        result = ExecutionResult.unchanged(state).with_activated_game_flag("f_ZebesAwake")
        assert result.activated_game_flags == frozenset()
        result = result.with_activated_game_flag("f_DefeatedBotwoon")
        assert result.activated_game_flags == frozenset({"f_DefeatedBotwoon"})
        assert result.resulting_state.has_game_flag("f_DefeatedBotwoon")


class TestChaining:
    """Tests for chain and execute_all."""

    def test_chain_threads_state(self, model: LogicModel) -> None:
        first = spend(ConsumableResource.ENERGY, 10, state_at(model))
        result = chain(first, partial(spend, ConsumableResource.ENERGY, 20))
        assert result is not None
        assert result.resulting_state.resources.get(REGULAR) == 69
        assert result.resource_variation.get(REGULAR) == -30

    def test_chain_propagates_failure(self, model: LogicModel) -> None:
        assert chain(None, partial(spend, ConsumableResource.ENERGY, 1)) is None
        assert chain(ExecutionResult.unchanged(state_at(model)), fail) is None

    def test_and_then(self, model: LogicModel) -> None:
        result = ExecutionResult.unchanged(state_at(model)).and_then(partial(spend, ConsumableResource.ENERGY, 9))
        assert result is not None
        assert result.resulting_state.resources.get(REGULAR) == 90

    def test_execute_all_stops_at_first_failure(self, model: LogicModel) -> None:
        calls: list[int] = []

        def record(state: SimulatedState) -> ExecutionResult | None:
            calls.append(1)
            return ExecutionResult.unchanged(state)

        assert execute_all([fail, record], state_at(model)) is None
        assert calls == []

    def test_execute_all_empty_is_unchanged(self, model: LogicModel) -> None:
        state = state_at(model)
        result = execute_all([], state)
        assert result is not None
        assert result.resulting_state is not state
        assert result.resulting_state.resources == state.resources


class TestExecuteBest:
    """Tests for picking the best alternative."""

    def run(self, quantity: int, state: SimulatedState) -> ExecutionResult | None:
        return spend(ConsumableResource.ENERGY, quantity, state)

    def test_cheapest_wins(self, model: LogicModel) -> None:
        alternative, result = execute_best([30, 20, 40], state_at(model), self.run, FixedValueResourceEvaluator())
        assert alternative == 20
        assert result is not None
        assert result.resulting_state.resources.get(REGULAR) == 79

    def test_failures_are_skipped(self, model: LogicModel) -> None:
        alternative, _ = execute_best([200, 50], state_at(model), self.run, FixedValueResourceEvaluator())
        assert alternative == 50

    def test_ties_go_to_first_declared(self, model: LogicModel) -> None:
        state = state_at(model, 0, "Missile")

        def run(option: str, state: SimulatedState) -> ExecutionResult | None:
            if option == "missile":
                return spend(ConsumableResource.MISSILE, 1, state)
            return spend(ConsumableResource.ENERGY, 3, state)

        alternative, _ = execute_best(["energy", "missile"], state, run, FixedValueResourceEvaluator())
        assert alternative == "energy"
        alternative, _ = execute_best(["missile", "energy"], state, run, FixedValueResourceEvaluator())
        assert alternative == "missile"

    def test_free_alternative_stops_the_search(self, model: LogicModel) -> None:
        tried: list[int] = []

        def run(quantity: int, state: SimulatedState) -> ExecutionResult | None:
            tried.append(quantity)
            return spend(ConsumableResource.ENERGY, quantity, state)

        alternative, _ = execute_best([10, 0, 5], state_at(model), run, FixedValueResourceEvaluator())
        assert alternative == 0
        assert tried == [10, 0]

    def test_without_comparator_first_success_wins(self, model: LogicModel) -> None:
        alternative, _ = execute_best([200, 30, 20], state_at(model), self.run, None)
        assert alternative == 30

    def test_accept_filters_successes(self, model: LogicModel) -> None:
        alternative, _ = execute_best(
            [10, 20],
            state_at(model),
            self.run,
            FixedValueResourceEvaluator(),
            accept=lambda result: result.resource_variation.get(REGULAR) < -15,
        )
        assert alternative == 20

    def test_nothing_succeeds(self, model: LogicModel) -> None:
        assert execute_best([], state_at(model), self.run, FixedValueResourceEvaluator()) == (None, None)
        assert execute_best([100], state_at(model), self.run, None) == (None, None)

    def test_initial_state_is_untouched(self, model: LogicModel) -> None:
        state = state_at(model)
        execute_best([30, 20], state, self.run, FixedValueResourceEvaluator())
        assert state.resources.get(REGULAR) == 99


class TestFixedValueResourceEvaluator:
    """Tests for resource valuation."""

    def test_default_weights(self) -> None:
        resources = ResourceCount(
            {
                RechargeableResource.REGULAR_ENERGY: 10,
                RechargeableResource.RESERVE_ENERGY: 5,
                RechargeableResource.MISSILE: 2,
                RechargeableResource.SUPER: 1,
                RechargeableResource.POWER_BOMB: 1,
            },
        )
        assert FixedValueResourceEvaluator().value(resources) == 15 + 6 + 30 + 60

    def test_custom_weights(self) -> None:
        evaluator = FixedValueResourceEvaluator({ConsumableResource.MISSILE: 1})
        assert evaluator.value(ResourceCount({RechargeableResource.MISSILE: 7, REGULAR: 99})) == 7
