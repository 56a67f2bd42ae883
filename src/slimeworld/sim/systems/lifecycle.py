from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, List

from pygame.math import Vector2

from ..core.agent import Agent, AgentKind, Color, Expression, Orbiter, Shape
from ..core.rng import DeterministicRng
from .softbody import ClusterBody

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)

BASIC_SHAPES = (Shape.CIRCLE, Shape.SQUARE, Shape.TRIANGLE, Shape.BOMB, Shape.ARROW)
LAUNCH_SHAPES = (Shape.CIRCLE, Shape.SQUARE, Shape.TRIANGLE, Shape.ARROW, Shape.CLUSTER)
BLACK_HOLE_COLOR = Color(0.0, 0.0, 0.0, 255.0)

_SHAPE_KINDS = {
    Shape.KILLER: AgentKind.KILLER,
    Shape.CLUSTER: AgentKind.CLUSTER,
    Shape.BLACK_HOLE: AgentKind.BLACK_HOLE,
}


def kind_for_shape(shape: Shape) -> AgentKind:
    return _SHAPE_KINDS.get(shape, AgentKind.BASIC)


class ShapeTable:
    """Weighted shape draw; validated once so per-frame draws can never come up empty."""

    def __init__(self, weights: dict[str, float]):
        shapes: list[Shape] = []
        values: list[float] = []
        for name, weight in weights.items():
            try:
                shape = Shape(name)
            except ValueError:
                raise ValueError(f"Unknown shape in shape_weights: {name!r}") from None
            if shape == Shape.BLACK_HOLE:
                raise ValueError("black holes only appear through splitting and cannot be seeded")
            if weight < 0:
                raise ValueError(f"Negative weight for shape {name!r}: {weight}")
            if weight > 0:
                shapes.append(shape)
                values.append(float(weight))
        if not shapes:
            raise ValueError("shape_weights must give at least one shape a positive weight")
        self.shapes = tuple(shapes)
        self.weights = tuple(values)
        basic = [(s, w) for s, w in zip(shapes, values) if s in BASIC_SHAPES]
        self.basic_shapes = tuple(s for s, _ in basic) or (Shape.CIRCLE,)
        self.basic_weights = tuple(w for _, w in basic) or (1.0,)

    def draw(self, rng: DeterministicRng) -> Shape:
        return rng.weighted_choice(self.shapes, self.weights)

    def draw_basic(self, rng: DeterministicRng) -> Shape:
        return rng.weighted_choice(self.basic_shapes, self.basic_weights)


def spawn_agent(
    world: World,
    kind: AgentKind,
    position: Vector2,
    radius: float,
    velocity: Vector2,
    color: Color,
    shape: Shape | None = None,
) -> Agent:
    config = world._config
    rng = world._rng
    if shape is None:
        shape = Shape.CIRCLE
    if kind == AgentKind.KILLER:
        shape = Shape.KILLER
    elif kind == AgentKind.CLUSTER:
        shape = Shape.CLUSTER
    elif kind == AgentKind.BLACK_HOLE:
        shape = Shape.BLACK_HOLE
        velocity = Vector2()

    agent = Agent(
        id=world._allocate_id(),
        kind=kind,
        position=Vector2(position),
        velocity=Vector2(velocity),
        radius=radius,
        color=color,
        shape=shape,
        expression=rng.sample_choice(list(Expression)),
        noise_seed=rng.next_range(0.0, 1000.0),
        move_offset=rng.next_range(0.0, 1000.0),
        max_speed=config.motion.max_speed,
        max_force=config.motion.max_force,
    )
    if kind == AgentKind.KILLER:
        # killers always wear the same face
        agent.expression = Expression.SURPRISED
        agent.max_speed = config.killer.max_speed
        agent.max_force = config.killer.max_force
    elif kind == AgentKind.CLUSTER:
        agent.body = ClusterBody(world._solver, agent.position, radius, agent.velocity, config.cluster)
    elif kind == AgentKind.BLACK_HOLE:
        agent.orbiters = _make_orbiters(world, radius)
    logger.debug("spawned %s #%d r=%.2f at (%.1f, %.1f)", kind.value, agent.id, radius, position.x, position.y)
    return agent


def _make_orbiters(world: World, radius: float) -> List[Orbiter]:
    config = world._config.black_hole
    rng = world._effects_rng
    low, high = config.orbit_speed_range
    return [
        Orbiter(
            angle=rng.next_angle(),
            distance=rng.next_range(radius, radius * config.orbit_distance_factor),
            speed=rng.next_range(low, high),
        )
        for _ in range(config.orbiter_count)
    ]


def random_color(world: World) -> Color:
    low, high = world._config.color_channel_range
    rng = world._color_rng
    return Color(
        rng.next_range(low, high),
        rng.next_range(low, high),
        rng.next_range(low, high),
        world._config.color_alpha,
    )


def bootstrap_population(world: World) -> List[Agent]:
    config = world._config
    rng = world._rng
    low, high = config.initial_radius_range
    agents = []
    for _ in range(config.initial_population):
        radius = rng.next_range(low, high)
        position = Vector2(
            rng.next_range(radius, max(radius, config.width - radius)),
            rng.next_range(radius, max(radius, config.height - radius)),
        )
        shape = world._shape_table.draw(rng)
        velocity = rng.next_unit_circle() * config.initial_speed
        agents.append(
            spawn_agent(world, kind_for_shape(shape), position, radius, velocity, random_color(world), shape)
        )
    return agents


def split_channel(parent: float, rng: DeterministicRng) -> tuple[float, float]:
    low = max(0.0, 2.0 * parent - 255.0)
    high = min(255.0, 2.0 * parent)
    first = rng.next_range(low, high)
    second = max(0.0, min(255.0, 2.0 * parent - first))
    return first, second


def split_color(color: Color, rng: DeterministicRng) -> tuple[Color, Color]:
    r1, r2 = split_channel(color.r, rng)
    g1, g2 = split_channel(color.g, rng)
    b1, b2 = split_channel(color.b, rng)
    return Color(r1, g1, b1, color.a), Color(r2, g2, b2, color.a)


def split_agent(world: World, agent: Agent) -> List[Agent]:
    config = world._config.split
    rng = world._rng
    child_radius = agent.radius / math.sqrt(2.0)
    if child_radius < config.min_child_radius:
        return []

    axis = rng.next_unit_circle()
    offset = axis * (child_radius + config.separation_margin)
    kick = axis * config.separation_speed
    first_color, second_color = split_color(agent.color, world._color_rng)

    if agent.kind == AgentKind.CLUSTER:
        child_kind = AgentKind.CLUSTER
        first_velocity = agent.velocity + kick
        second_velocity = agent.velocity - kick
    else:
        child_kind = AgentKind.BASIC
        first_velocity = kick
        second_velocity = -kick

    first = spawn_agent(
        world,
        child_kind,
        agent.position + offset,
        child_radius,
        first_velocity,
        first_color,
        world._shape_table.draw_basic(rng),
    )
    if agent.radius > config.black_hole_min_radius and rng.next_float() < config.black_hole_chance:
        second = spawn_agent(
            world,
            AgentKind.BLACK_HOLE,
            agent.position - offset,
            child_radius,
            Vector2(),
            Color(*BLACK_HOLE_COLOR.as_tuple()),
        )
        logger.info("agent #%d collapsed into black hole #%d", agent.id, second.id)
    else:
        second = spawn_agent(
            world,
            child_kind,
            agent.position - offset,
            child_radius,
            second_velocity,
            second_color,
            world._shape_table.draw_basic(rng),
        )
    logger.debug("split #%d into #%d and #%d (r=%.2f)", agent.id, first.id, second.id, child_radius)
    return [first, second]
