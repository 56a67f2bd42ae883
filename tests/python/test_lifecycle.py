from __future__ import annotations

import math

from pygame.math import Vector2
from pytest import approx

from slimeworld.sim.core.agent import AgentKind, Color, Expression, Shape
from slimeworld.sim.core.config import SplitConfig
from slimeworld.sim.core.rng import DeterministicRng
from slimeworld.sim.systems import collisions, lifecycle


def test_split_channel_stays_in_range_and_preserves_average():
    rng = DeterministicRng(3)
    for parent in (0.0, 20.0, 127.5, 200.0, 255.0):
        for _ in range(50):
            first, second = lifecycle.split_channel(parent, rng)
            assert 0.0 <= first <= 255.0
            assert 0.0 <= second <= 255.0
            assert (first + second) / 2.0 == approx(parent)


def test_small_agents_do_not_split(make_world):
    world = make_world()
    agent = world.add_agent(AgentKind.BASIC, Vector2(100, 100), 5.0)

    assert lifecycle.split_agent(world, agent) == []
    assert agent.alive


def test_split_halves_area_and_separates_children(make_world):
    world = make_world(split=SplitConfig(black_hole_chance=0.0))
    parent = world.add_agent(AgentKind.BASIC, Vector2(300, 300), 40.0, Vector2(1.0, 1.0))

    first, second = lifecycle.split_agent(world, parent)

    assert first.radius == approx(40.0 / math.sqrt(2.0))
    assert first.area + second.area == approx(parent.area)
    assert not first.intersects(second)
    assert ((first.position + second.position) / 2.0).distance_to(parent.position) == approx(0.0, abs=1e-9)
    assert first.velocity.length() == approx(5.0)
    assert (first.velocity + second.velocity).length() == approx(0.0, abs=1e-9)
    assert first.kind == AgentKind.BASIC
    assert second.kind == AgentKind.BASIC
    assert first.shape in lifecycle.BASIC_SHAPES
    assert parent.alive


def test_split_then_merge_restores_color(make_world):
    world = make_world(split=SplitConfig(black_hole_chance=0.0))
    parent = world.add_agent(AgentKind.BASIC, Vector2(300, 300), 40.0, color=Color(180.0, 90.0, 240.0, 60.0))

    first, second = lifecycle.split_agent(world, parent)
    merged = collisions.merge_agents(world, first, second)

    assert merged.color.as_tuple() == approx(parent.color.as_tuple())
    assert merged.radius == approx(parent.radius)
    assert first.color.a == parent.color.a


def test_large_split_can_collapse_into_black_hole(make_world):
    world = make_world(split=SplitConfig(black_hole_chance=1.0))
    parent = world.add_agent(AgentKind.BASIC, Vector2(300, 300), 70.0)

    first, second = lifecycle.split_agent(world, parent)

    assert first.kind == AgentKind.BASIC
    assert second.kind == AgentKind.BLACK_HOLE
    assert second.shape == Shape.BLACK_HOLE
    assert second.velocity == Vector2()
    assert second.color.as_tuple() == lifecycle.BLACK_HOLE_COLOR.as_tuple()
    assert len(second.orbiters) == world.config.black_hole.orbiter_count
    for orbiter in second.orbiters:
        assert second.radius <= orbiter.distance <= second.radius * 2.5


def test_black_hole_needs_large_parent(make_world):
    world = make_world(split=SplitConfig(black_hole_chance=1.0))
    parent = world.add_agent(AgentKind.BASIC, Vector2(300, 300), 50.0)

    children = lifecycle.split_agent(world, parent)

    assert [child.kind for child in children] == [AgentKind.BASIC, AgentKind.BASIC]


def test_cluster_children_keep_parent_momentum(make_world):
    world = make_world(split=SplitConfig(black_hole_chance=0.0))
    parent = world.add_agent(AgentKind.CLUSTER, Vector2(300, 300), 40.0, Vector2(2.0, 0.0))

    first, second = lifecycle.split_agent(world, parent)

    assert first.kind == AgentKind.CLUSTER
    assert second.kind == AgentKind.CLUSTER
    assert first.body is not None and second.body is not None
    assert ((first.velocity + second.velocity) / 2.0).distance_to(Vector2(2.0, 0.0)) == approx(0.0, abs=1e-9)
    assert (first.velocity - parent.velocity).length() == approx(5.0)


def test_killer_spawn_uses_killer_tuning(make_world):
    world = make_world()
    killer = world.add_agent(AgentKind.KILLER, Vector2(100, 100), 20.0)

    assert killer.shape == Shape.KILLER
    assert killer.expression == Expression.SURPRISED
    assert killer.max_force == world.config.killer.max_force


def test_shape_table_draws_only_weighted_shapes():
    table = lifecycle.ShapeTable({"square": 1.0, "killer": 0.0, "cluster": 2.0})
    rng = DeterministicRng(1)

    drawn = {table.draw(rng) for _ in range(200)}
    basic = {table.draw_basic(rng) for _ in range(50)}

    assert drawn == {Shape.SQUARE, Shape.CLUSTER}
    assert basic == {Shape.SQUARE}


def test_shape_table_without_basic_shapes_falls_back_to_circle():
    table = lifecycle.ShapeTable({"killer": 1.0})

    assert table.draw_basic(DeterministicRng(1)) == Shape.CIRCLE


def test_bootstrap_places_agents_inside_the_canvas(make_world):
    world = make_world(initial_population=15)

    assert len(world.agents) == 15
    for agent in world.agents:
        assert agent.radius <= agent.position.x <= world.config.width - agent.radius
        assert agent.radius <= agent.position.y <= world.config.height - agent.radius
        assert agent.kind == lifecycle.kind_for_shape(agent.shape)
        assert agent.velocity.length() == approx(world.config.initial_speed)
