from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from slimeworld.sim.core.agent import AgentKind, Shape
from slimeworld.sim.systems import movement


def test_bounce_clamps_and_reflects(make_world):
    world = make_world()
    agent = world.add_agent(AgentKind.BASIC, Vector2(795, 5), 10.0, Vector2(3.0, -2.0))

    correction = movement.bounce(agent, 800.0, 600.0)

    assert agent.position == Vector2(790, 10)
    assert agent.velocity == Vector2(-3.0, 2.0)
    assert correction == Vector2(-5, 5)


def test_bounce_leaves_interior_agents_alone(make_world):
    world = make_world()
    agent = world.add_agent(AgentKind.BASIC, Vector2(400, 300), 10.0, Vector2(3.0, -2.0))

    correction = movement.bounce(agent, 800.0, 600.0)

    assert correction == Vector2()
    assert agent.velocity == Vector2(3.0, -2.0)


def test_agents_stay_inside_canvas(make_world):
    world = make_world(initial_population=15, flow=True)
    width = world.config.width
    height = world.config.height

    for frame in range(200):
        world.step(frame)
        for agent in world.agents:
            assert agent.radius - 1e-6 <= agent.position.x <= width - agent.radius + 1e-6
            assert agent.radius - 1e-6 <= agent.position.y <= height - agent.radius + 1e-6


def test_speed_is_limited_and_dragged(make_world):
    world = make_world()
    agent = world.add_agent(AgentKind.BASIC, Vector2(400, 300), 10.0, Vector2(10.0, 0.0), shape=Shape.CIRCLE)

    movement.move_basic(world, agent)

    motion = world.config.motion
    assert agent.velocity.length() <= motion.max_speed * motion.drag + 1e-9
    assert agent.move_offset > 0.0


def test_arrow_steers_toward_pointer(make_world):
    world = make_world()
    world.set_pointer(600.0, 300.0)
    agent = world.add_agent(AgentKind.BASIC, Vector2(400, 300), 10.0, shape=Shape.ARROW)

    movement.move_basic(world, agent)

    motion = world.config.motion
    assert agent.velocity.x == approx(motion.arrow_acceleration * motion.drag)
    assert agent.velocity.y == approx(0.0)
    assert agent.position.x > 400.0


def test_black_hole_stays_put_while_orbiters_turn(make_world):
    world = make_world()
    hole = world.add_agent(AgentKind.BLACK_HOLE, Vector2(400, 300), 30.0)
    angles = [orbiter.angle for orbiter in hole.orbiters]

    movement.move_black_hole(world, hole)

    assert hole.position == Vector2(400, 300)
    assert hole.velocity == Vector2()
    for orbiter, angle in zip(hole.orbiters, angles):
        assert orbiter.angle == approx(angle + orbiter.speed)


def test_orbiters_inside_a_grown_hole_are_pushed_out(make_world):
    world = make_world()
    hole = world.add_agent(AgentKind.BLACK_HOLE, Vector2(400, 300), 20.0)
    hole.radius = 100.0

    movement.move_black_hole(world, hole)

    for orbiter in hole.orbiters:
        assert 100.0 <= orbiter.distance <= 250.0


def test_killer_records_and_loses_target(make_world):
    world = make_world()
    killer = world.add_agent(AgentKind.KILLER, Vector2(100, 100), 20.0)
    prey = world.add_agent(AgentKind.BASIC, Vector2(300, 300), 10.0)

    movement.move_killer(world, killer)
    assert killer.target_id == prey.id
    assert world.resolve_target(killer) is prey

    world._agents.remove(prey)
    world._release(prey)
    assert world.resolve_target(killer) is None
    assert killer.target_id is None


def test_killer_target_is_dropped_after_consumption(make_world):
    world = make_world()
    killer = world.add_agent(AgentKind.KILLER, Vector2(100, 100), 20.0)
    prey = world.add_agent(AgentKind.BASIC, Vector2(600, 400), 10.0)
    world.add_agent(AgentKind.BLACK_HOLE, Vector2(620, 400), 30.0)
    killer.target_id = prey.id

    world.step(0)

    assert world.find_agent(prey.id) is None
    assert killer.target_id is None


def test_cluster_position_follows_its_particles(make_world):
    world = make_world()
    cluster = world.add_agent(AgentKind.CLUSTER, Vector2(400, 300), 30.0, Vector2(1.0, 0.0))

    world.step(0)

    assert cluster.position.x == approx(401.0)
    assert cluster.position.y == approx(300.0)
    assert cluster.velocity.x == approx(1.0)
    assert cluster.radius == approx(24.0)


def test_cluster_bounce_moves_the_body(make_world):
    world = make_world()
    cluster = world.add_agent(AgentKind.CLUSTER, Vector2(785, 300), 30.0, Vector2(2.0, 0.0))

    world.step(0)

    centroid, velocity, radius = cluster.body.update()
    assert cluster.position.x == approx(800.0 - cluster.radius)
    assert centroid.x == approx(cluster.position.x)
    assert velocity.x < 0.0
