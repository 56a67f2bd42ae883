from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable

from pygame.math import Vector2

from ..core.agent import Agent
from ..core.config import KillerConfig
from ..core.rng import CoherentNoise
from ..utils.math2d import _clamp_length, _from_angle, _set_length

if TYPE_CHECKING:
    from .flowfield import FlowField


def steer_towards(desired: Vector2, velocity: Vector2, max_force: float) -> Vector2:
    return _clamp_length(desired - velocity, max_force)


def seek(position: Vector2, velocity: Vector2, target: Vector2, max_speed: float, max_force: float) -> Vector2:
    desired = _set_length(target - position, max_speed)
    return steer_towards(desired, velocity, max_force)


def arrive(
    position: Vector2,
    velocity: Vector2,
    target: Vector2,
    max_speed: float,
    max_force: float,
    slowdown_radius: float,
) -> Vector2:
    offset = target - position
    distance = offset.length()
    if slowdown_radius > 0.0 and distance < slowdown_radius:
        speed = distance / slowdown_radius * max_speed
    else:
        speed = max_speed
    return steer_towards(_set_length(offset, speed), velocity, max_force)


def flee(position: Vector2, velocity: Vector2, threat: Vector2, max_speed: float, max_force: float) -> Vector2:
    desired = _set_length(position - threat, max_speed)
    return steer_towards(desired, velocity, max_force)


def wander(noise: CoherentNoise, move_offset: float, magnitude: float) -> Vector2:
    angle = noise.sample(move_offset) * math.tau * 2.0
    return _from_angle(angle, magnitude)


def follow(flow_field: FlowField, agent: Agent) -> Vector2:
    desired = flow_field.lookup(agent.position) * agent.max_speed
    return steer_towards(desired, agent.velocity, agent.max_force)


def calculate_steering(agent: Agent, others: Iterable[Agent], config: KillerConfig) -> tuple[Vector2, int | None]:
    predators: list[Agent] = []
    closest_prey: Agent | None = None
    closest_dist = math.inf
    for other in others:
        if other is agent or not other.alive:
            continue
        distance = agent.position.distance_to(other.position)
        if other.radius > agent.radius:
            if distance < agent.radius + config.flee_margin:
                predators.append(other)
        elif distance < closest_dist:
            closest_dist = distance
            closest_prey = other

    if predators:
        flee_sum = Vector2()
        for predator in predators:
            flee_sum += flee(agent.position, agent.velocity, predator.position, agent.max_speed, agent.max_force)
        flee_sum /= len(predators)
        return flee_sum * config.flee_weight, None
    if closest_prey is not None:
        seek_force = arrive(
            agent.position,
            agent.velocity,
            closest_prey.position,
            agent.max_speed,
            agent.max_force,
            config.slowdown_radius,
        )
        return seek_force * config.seek_weight, closest_prey.id
    return Vector2(), None
