from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.agent import AgentKind
from ..utils.math2d import _clamp_value, _set_length

if TYPE_CHECKING:
    from ..core.world import World


def apply_flow_to_clusters(world: World) -> None:
    flow_field = world._flow_field
    if flow_field is None:
        return
    scale = world._config.cluster.flow_force_scale
    for agent in world._agents:
        if agent.kind == AgentKind.CLUSTER and agent.body is not None:
            agent.body.apply_particle_forces(lambda position: flow_field.lookup(position) * scale)


def apply_black_hole_gravity(world: World) -> None:
    config = world._config.black_hole
    holes = [agent for agent in world._agents if agent.kind == AgentKind.BLACK_HOLE]
    if not holes:
        return
    for hole in holes:
        for agent in world._agents:
            if agent.kind == AgentKind.BLACK_HOLE:
                continue
            offset = hole.position - agent.position
            if offset.length_squared() < 1e-12:
                continue
            distance = _clamp_value(offset.length(), config.min_distance, config.max_distance)
            # radius stands in for mass
            strength = config.gravity_constant * hole.radius * agent.radius / (distance * distance)
            pull = _set_length(offset, strength)
            agent.velocity += pull
            if agent.body is not None:
                agent.body.add_velocity(pull)
