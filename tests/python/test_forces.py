from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from slimeworld.sim.core.agent import AgentKind
from slimeworld.sim.systems import forces


def test_gravity_uses_clamped_distance(make_world):
    world = make_world()
    world.add_agent(AgentKind.BLACK_HOLE, Vector2(600, 300), 40.0)
    far = world.add_agent(AgentKind.BASIC, Vector2(100, 300), 20.0)
    near = world.add_agent(AgentKind.BASIC, Vector2(590, 300), 10.0)

    forces.apply_black_hole_gravity(world)

    # 6 * 40 * 20 / 200^2
    assert far.velocity.x == approx(0.12)
    assert far.velocity.y == approx(0.0)
    # 6 * 40 * 10 / 20^2
    assert near.velocity.x == approx(6.0)
    assert near.velocity.y == approx(0.0)


def test_black_holes_do_not_pull_each_other(make_world):
    world = make_world()
    first = world.add_agent(AgentKind.BLACK_HOLE, Vector2(300, 300), 40.0)
    second = world.add_agent(AgentKind.BLACK_HOLE, Vector2(700, 500), 30.0)

    forces.apply_black_hole_gravity(world)

    assert first.velocity == Vector2()
    assert second.velocity == Vector2()


def test_gravity_reaches_cluster_particles(make_world):
    world = make_world()
    world.add_agent(AgentKind.BLACK_HOLE, Vector2(600, 300), 40.0)
    cluster = world.add_agent(AgentKind.CLUSTER, Vector2(100, 300), 20.0)

    forces.apply_black_hole_gravity(world)

    pull = cluster.velocity.x
    assert pull > 0.0
    for particle in cluster.body.particles:
        velocity = world.solver.particle_velocity(particle)
        assert velocity.x == approx(pull)
        assert velocity.y == approx(0.0)


def test_flow_pushes_cluster_particles(make_world):
    world = make_world(flow=True)
    cluster = world.add_agent(AgentKind.CLUSTER, Vector2(400, 300), 30.0)
    scale = world.config.cluster.flow_force_scale
    expected = [world.flow_field.lookup(position) * scale for position in cluster.body.positions()]

    forces.apply_flow_to_clusters(world)
    world.solver.integrate()

    for particle, push in zip(cluster.body.particles, expected):
        velocity = world.solver.particle_velocity(particle)
        assert velocity.x == approx(push.x, abs=1e-6)
        assert velocity.y == approx(push.y, abs=1e-6)


def test_no_flow_field_leaves_clusters_alone(make_world):
    world = make_world()
    cluster = world.add_agent(AgentKind.CLUSTER, Vector2(400, 300), 30.0)

    forces.apply_flow_to_clusters(world)
    world.solver.integrate()

    for particle in cluster.body.particles:
        assert world.solver.particle_velocity(particle).length() == approx(0.0, abs=1e-9)
