from __future__ import annotations

from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..core.agent import Agent, AgentKind, Shape
from ..utils.math2d import _clamp_length, _set_length
from . import steering

if TYPE_CHECKING:
    from ..core.world import World


def move_agent(world: World, agent: Agent) -> None:
    if agent.kind == AgentKind.KILLER:
        move_killer(world, agent)
    elif agent.kind == AgentKind.CLUSTER:
        move_cluster(world, agent)
    elif agent.kind == AgentKind.BLACK_HOLE:
        move_black_hole(world, agent)
    else:
        move_basic(world, agent)


def bounce(agent: Agent, width: float, height: float) -> Vector2:
    r = agent.radius
    position = agent.position
    velocity = agent.velocity
    before_x = position.x
    before_y = position.y
    if position.x > width - r:
        position.x = width - r
        velocity.x *= -1
    elif position.x < r:
        position.x = r
        velocity.x *= -1
    if position.y > height - r:
        position.y = height - r
        velocity.y *= -1
    elif position.y < r:
        position.y = r
        velocity.y *= -1
    return Vector2(position.x - before_x, position.y - before_y)


def _integrate(world: World, agent: Agent, acceleration: Vector2, speed_limit: float) -> None:
    motion = world._config.motion
    agent.velocity = _clamp_length(agent.velocity + acceleration, speed_limit) * motion.drag
    agent.position += agent.velocity
    bounce(agent, world._config.width, world._config.height)
    agent.move_offset += motion.noise_step


def move_basic(world: World, agent: Agent) -> None:
    motion = world._config.motion
    if agent.shape == Shape.ARROW:
        acceleration = _set_length(world._pointer - agent.position, motion.arrow_acceleration)
        speed_limit = motion.arrow_max_speed
    else:
        acceleration = steering.wander(world._noise, agent.move_offset, motion.wander_acceleration)
        speed_limit = agent.max_speed
    if world._flow_field is not None:
        acceleration += steering.follow(world._flow_field, agent)
    _integrate(world, agent, acceleration, speed_limit)


def move_killer(world: World, agent: Agent) -> None:
    config = world._config
    force, target_id = steering.calculate_steering(agent, world._agents, config.killer)
    agent.target_id = target_id
    if force.length_squared() == 0.0:
        force = steering.wander(world._noise, agent.move_offset, config.motion.wander_acceleration)
    if world._flow_field is not None:
        force += steering.follow(world._flow_field, agent) * config.killer.flow_weight
    _integrate(world, agent, force, agent.max_speed)


def move_cluster(world: World, agent: Agent) -> None:
    body = agent.body
    if body is None:
        return
    derived = body.update()
    if derived is None:
        return
    agent.position, agent.velocity, radius = derived
    if radius > 1e-6:
        agent.radius = radius
    correction = bounce(agent, world._config.width, world._config.height)
    if correction.x != 0.0 or correction.y != 0.0:
        body.translate(correction)
        body.reflect(correction.x != 0.0, correction.y != 0.0)


def move_black_hole(world: World, agent: Agent) -> None:
    agent.velocity = Vector2()
    rng = world._effects_rng
    reach = world._config.black_hole.orbit_distance_factor
    for orbiter in agent.orbiters:
        orbiter.angle += orbiter.speed
        if orbiter.distance < agent.radius:
            orbiter.distance = rng.next_range(agent.radius, agent.radius * reach)
    bounce(agent, world._config.width, world._config.height)
