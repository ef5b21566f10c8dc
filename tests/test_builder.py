"""Tests for ModelBuilder and LogicModel lookups."""

import pytest
from conftest import OTHER_NODE_1, ROOM_NODE_1, ROOM_NODE_2, ROOM_NODE_3

from reachlogic import (
    AndRequirement,
    ConsumableResource,
    ElementKind,
    EnemyAttack,
    KillMethod,
    ModelBuilder,
    ModelValidationError,
    RechargeableResource,
    StratObstacleSpec,
    UnknownElementError,
)


class TestCatalog:
    """Tests for items, flags, techs and helpers."""

    def test_duplicate_item(self, builder: ModelBuilder) -> None:
        with pytest.raises(ModelValidationError, match="Duplicate item 'Bombs'"):
            builder.add_item("Bombs")

    def test_duplicate_game_flag(self, builder: ModelBuilder) -> None:
        with pytest.raises(ModelValidationError, match="Duplicate game flag"):
            builder.add_game_flag("f_ZebesAwake")

    def test_duplicate_tech(self, builder: ModelBuilder) -> None:
        builder.add_tech("canWalljump")
        with pytest.raises(ModelValidationError, match="Duplicate tech 'canWalljump'"):
            builder.add_tech("canWalljump")

    def test_negative_expansion(self, builder: ModelBuilder) -> None:
        with pytest.raises(ModelValidationError, match="Negative amount"):
            builder.add_expansion("Broken Tank", RechargeableResource.REGULAR_ENERGY, -1)

    def test_tech_without_requirement_is_always(self, builder: ModelBuilder) -> None:
        tech = builder.add_tech("canWalljump")
        model = builder.build()
        assert model.tech_named("canWalljump").requires == builder.always()
        assert model.tech(tech).name == "canWalljump"

    def test_always_is_shared(self, builder: ModelBuilder) -> None:
        assert builder.always() == builder.always()
        assert builder.never() != builder.never()


class TestRequirementFactories:
    """Tests for requirement validation at declaration time."""

    def test_unknown_references(self, builder: ModelBuilder) -> None:
        with pytest.raises(UnknownElementError, match="Unknown item 'Screw Attack'"):
            builder.item("Screw Attack")
        with pytest.raises(UnknownElementError, match="Unknown game flag"):
            builder.game_flag("f_DefeatedKraid")
        with pytest.raises(UnknownElementError, match="Unknown tech 'canFly'"):
            builder.tech("canFly")
        with pytest.raises(UnknownElementError, match="Unknown helper"):
            builder.helper("h_canOpenGreenDoors")
        with pytest.raises(UnknownElementError, match="No requirement with id 999"):
            builder.and_(builder.always(), 999)  # type: ignore[arg-type]

    def test_energy_is_not_ammo(self, builder: ModelBuilder) -> None:
        with pytest.raises(ModelValidationError, match="Energy is not ammo"):
            builder.ammo(ConsumableResource.ENERGY, 10)
        with pytest.raises(ModelValidationError, match="Energy is not ammo"):
            builder.ammo_drain(ConsumableResource.ENERGY, 10)

    def test_negative_counts(self, builder: ModelBuilder) -> None:
        with pytest.raises(ModelValidationError, match="Negative ammo count"):
            builder.ammo(ConsumableResource.MISSILE, -1)
        with pytest.raises(ModelValidationError, match="Negative frame count"):
            builder.heat_frames(-10)
        with pytest.raises(ModelValidationError, match="Negative damage"):
            builder.enemy_damage(EnemyAttack("Sova", "contact", -5), 1)

    def test_energy_at_most_minimum(self, builder: ModelBuilder) -> None:
        builder.energy_at_most(1)
        with pytest.raises(ModelValidationError, match="minimum is 1"):
            builder.energy_at_most(0)

    def test_shinespark_excess_frames(self, builder: ModelBuilder) -> None:
        builder.shinespark(40, 40)
        with pytest.raises(ModelValidationError, match="between 0 and 40"):
            builder.shinespark(40, 41)

    def test_previous_strat_property_history_limit(self, builder: ModelBuilder) -> None:
        builder.previous_strat_property("spinjump", previous_visits=2)
        with pytest.raises(ModelValidationError, match="only 2 are kept"):
            builder.previous_strat_property("spinjump", previous_visits=3)
        with pytest.raises(ModelValidationError, match="Cannot look -1 visits back"):
            builder.previous_strat_property("spinjump", previous_visits=-1)

    def test_strat_properties(self, builder: ModelBuilder) -> None:
        strat = builder.add_strat("Spin Jump In", properties=["spinjump", "spinjump"])
        assert builder.build().strat(strat).properties == frozenset({"spinjump"})

    def test_enemy_kill_checks_methods(self, builder: ModelBuilder) -> None:
        with pytest.raises(UnknownElementError, match="Screw Attack"):
            builder.enemy_kill("Geemer", [KillMethod("Screw Attack", items=("Screw Attack",))])
        with pytest.raises(ModelValidationError, match="Energy is not ammo"):
            builder.enemy_kill("Geemer", [KillMethod("Energy", ammo=ConsumableResource.ENERGY, shots=1)])

    def test_composites_keep_child_order(self, builder: ModelBuilder) -> None:
        first = builder.item("Bombs")
        second = builder.item("Morph Ball")
        root = builder.and_(first, second)
        assert builder.build().requirement(root) == AndRequirement((first, second))

    def test_iter_tree(self, builder: ModelBuilder) -> None:
        a = builder.item("Bombs")
        b = builder.item("Morph Ball")
        c = builder.item("Varia Suit")
        either = builder.or_(b, c)
        root = builder.and_(a, either)
        assert list(builder.build().iter_tree(root)) == [root, a, either, b, c]


class TestTopology:
    """Tests for locations, nodes, links and locks."""

    def test_node_lookup(self, builder: ModelBuilder) -> None:
        model = builder.build()
        assert model.node_in("Test Room", 2).index == ROOM_NODE_2
        assert model.node_in("Other Room", 1).index == OTHER_NODE_1
        assert model.node(ROOM_NODE_3).name == "Test Room 3"
        assert builder.node_index(1, 1) == OTHER_NODE_1
        with pytest.raises(UnknownElementError, match="has no node 9"):
            model.node_in("Test Room", 9)
        with pytest.raises(UnknownElementError, match="No node at index 42"):
            model.node(42)

    def test_duplicate_node_id(self, builder: ModelBuilder) -> None:
        with pytest.raises(ModelValidationError, match="Duplicate node"):
            builder.add_node(0, 1)

    def test_links(self, builder: ModelBuilder) -> None:
        walk = builder.add_strat("Base")
        link = builder.add_link(ROOM_NODE_1, ROOM_NODE_2, [walk])
        model = builder.build()
        assert model.node(ROOM_NODE_1).links == (link,)
        assert model.link_between(ROOM_NODE_1, ROOM_NODE_2) == model.link(link)
        assert model.link_between(ROOM_NODE_2, ROOM_NODE_1) is None

    def test_link_rules(self, builder: ModelBuilder) -> None:
        walk = builder.add_strat("Base")
        builder.add_link(ROOM_NODE_1, ROOM_NODE_2, [walk])
        with pytest.raises(ModelValidationError, match="Duplicate link"):
            builder.add_link(ROOM_NODE_1, ROOM_NODE_2, [walk])
        with pytest.raises(ModelValidationError, match="different locations"):
            builder.add_link(ROOM_NODE_1, OTHER_NODE_1, [walk])
        with pytest.raises(UnknownElementError, match="No strat at index 7"):
            builder.add_link(ROOM_NODE_2, ROOM_NODE_3, [7])

    def test_connect(self, builder: ModelBuilder) -> None:
        builder.connect(ROOM_NODE_3, OTHER_NODE_1)
        with pytest.raises(ModelValidationError, match="same location"):
            builder.connect(ROOM_NODE_1, ROOM_NODE_2)
        assert builder.build().node(ROOM_NODE_3).out_node == OTHER_NODE_1

    def test_locks(self, builder: ModelBuilder) -> None:
        shoot = builder.add_strat("Shoot Door", builder.ammo(ConsumableResource.MISSILE, 1))
        lock = builder.add_lock(ROOM_NODE_1, "Red Door", unlock_strats=[shoot], yields=["f_ZebesAwake"])
        model = builder.build()
        assert model.node(ROOM_NODE_1).locks == (lock,)
        assert model.lock_named("Red Door").lock_requires == builder.always()
        with pytest.raises(UnknownElementError, match="unknown game flag"):
            builder.add_lock(ROOM_NODE_2, "Grey Door", yields=["f_Nothing"])

    def test_obstacles(self, builder: ModelBuilder) -> None:
        obstacle = builder.add_obstacle(0, "A", builder.item("Bombs"))
        strat = builder.add_strat("Bomb It", obstacles=[StratObstacleSpec(obstacle)])
        model = builder.build()
        assert model.obstacle_in("Test Room", "A").index == obstacle
        assert model.location_named("Test Room").obstacles == (obstacle,)
        (so,) = model.strat(strat).obstacles
        assert model.strat_obstacle(so).requires == builder.always()
        assert model.strat_obstacle(so).bypass is None
        with pytest.raises(UnknownElementError, match="has no obstacle 'B'"):
            model.obstacle_in("Test Room", "B")


class TestBuild:
    """Tests for the frozen model and its element order."""

    def test_children_come_first(self, builder: ModelBuilder) -> None:
        tech = builder.add_tech("canMorph", builder.item("Morph Ball"))
        uses_tech = builder.tech("canMorph")
        strat = builder.add_strat("Roll", uses_tech)
        link = builder.add_link(ROOM_NODE_1, ROOM_NODE_2, [strat])
        order = builder.build().element_order
        chain = [
            (ElementKind.TECH, tech),
            (ElementKind.REQUIREMENT, uses_tech),
            (ElementKind.STRAT, strat),
            (ElementKind.LINK, link),
        ]
        positions = [order.index(key) for key in chain]
        assert positions == sorted(positions)

    def test_dependents_of(self, builder: ModelBuilder) -> None:
        tech = builder.add_tech("canMorph", builder.item("Morph Ball"))
        uses_tech = builder.tech("canMorph")
        strat = builder.add_strat("Roll", uses_tech)
        other = builder.add_strat("Walk")
        link = builder.add_link(ROOM_NODE_1, ROOM_NODE_2, [strat])
        dependents = builder.build().dependents_of(ElementKind.TECH, tech)
        assert (ElementKind.REQUIREMENT, uses_tech) in dependents
        assert (ElementKind.STRAT, strat) in dependents
        assert (ElementKind.LINK, link) in dependents
        assert (ElementKind.STRAT, other) not in dependents

    def test_name_lookups(self, builder: ModelBuilder) -> None:
        builder.add_helper("h_canBomb", builder.and_(builder.item("Morph Ball"), builder.item("Bombs")))
        model = builder.build()
        assert model.helper_named("h_canBomb").index == 0
        assert model.item("Bombs").name == "Bombs"
        with pytest.raises(UnknownElementError, match="Unknown strat 'Fly'"):
            model.strat_named("Fly")
        with pytest.raises(UnknownElementError, match="Unknown item"):
            model.item("Screw Attack")

    def test_models_compare_by_identity(self, builder: ModelBuilder) -> None:
        model = builder.build()
        assert model == model
        assert model != builder.build()
