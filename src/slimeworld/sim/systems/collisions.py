from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Set

from ..core.agent import Agent, AgentKind, Color
from ..utils.math2d import _radius_for_area
from .lifecycle import spawn_agent

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CollisionOutcome:
    next_generation: List[Agent] = field(default_factory=list)
    created: List[Agent] = field(default_factory=list)
    merges: int = 0
    consumptions: int = 0
    detonations: int = 0


def merged_kind(first: Agent, second: Agent) -> AgentKind:
    kinds = {first.kind, second.kind}
    if AgentKind.KILLER in kinds:
        return AgentKind.KILLER
    if AgentKind.CLUSTER in kinds:
        return AgentKind.CLUSTER
    if kinds == {AgentKind.BLACK_HOLE}:
        return AgentKind.BLACK_HOLE
    return AgentKind.BASIC


def merge_agents(world: World, first: Agent, second: Agent) -> Agent:
    area_a = first.area
    area_b = second.area
    combined = area_a + area_b
    if combined > 0.0:
        weight_a = area_a / combined
        radius = _radius_for_area(combined)
    else:
        weight_a = 0.5
        radius = max(first.radius, second.radius)
    weight_b = 1.0 - weight_a

    position = first.position * weight_a + second.position * weight_b
    velocity = first.velocity * weight_a + second.velocity * weight_b
    color = Color(
        first.color.r * weight_a + second.color.r * weight_b,
        first.color.g * weight_a + second.color.g * weight_b,
        first.color.b * weight_a + second.color.b * weight_b,
        first.color.a,
    )
    shape = first.shape if first.radius > second.radius else second.shape
    return spawn_agent(world, merged_kind(first, second), position, radius, velocity, color, shape)


def consume(hole: Agent, prey: Agent) -> None:
    hole.radius = _radius_for_area(hole.area + prey.area)


def resolve_collisions(world: World) -> CollisionOutcome:
    agents = world._agents
    outcome = CollisionOutcome()
    resolved: Set[int] = set()
    count = len(agents)
    for i in range(count):
        for j in range(i + 1, count):
            if i in resolved:
                break
            if j in resolved:
                continue
            first = agents[i]
            second = agents[j]
            if not first.intersects(second):
                continue

            first_hole = first.kind == AgentKind.BLACK_HOLE
            second_hole = second.kind == AgentKind.BLACK_HOLE
            if first_hole != second_hole:
                hole, prey, prey_index = (first, second, j) if first_hole else (second, first, i)
                consume(hole, prey)
                world._release(prey)
                resolved.add(prey_index)
                outcome.consumptions += 1
                logger.debug("black hole #%d consumed #%d (r=%.2f)", hole.id, prey.id, hole.radius)
            elif first.is_bomb or second.is_bomb:
                midpoint = (first.position + second.position) / 2.0
                world._add_splatter(midpoint, first.color, second.color, first.radius + second.radius)
                world._release(first)
                world._release(second)
                resolved.update((i, j))
                outcome.detonations += 1
                logger.debug("bomb detonated between #%d and #%d", first.id, second.id)
            else:
                merged = merge_agents(world, first, second)
                world._release(first)
                world._release(second)
                resolved.update((i, j))
                outcome.created.append(merged)
                outcome.merges += 1
                logger.debug("merged #%d and #%d into #%d (r=%.2f)", first.id, second.id, merged.id, merged.radius)

    outcome.next_generation = [agent for index, agent in enumerate(agents) if index not in resolved]
    outcome.next_generation.extend(outcome.created)
    return outcome
