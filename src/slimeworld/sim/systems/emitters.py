from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from pygame.math import Vector2

from ..core.agent import Agent, Color
from ..core.config import EffectsConfig, LauncherConfig
from ..core.rng import DeterministicRng
from ..utils.math2d import _remap
from .lifecycle import LAUNCH_SHAPES, kind_for_shape, random_color, spawn_agent

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Launcher:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def for_canvas(cls, width: float, height: float, config: LauncherConfig) -> "Launcher":
        return cls(x=width / 2.0, y=height - config.height / 2.0, width=config.width, height=config.height)

    @property
    def nozzle(self) -> Vector2:
        return Vector2(self.x, self.y - self.height / 2.0)

    def is_clicked(self, px: float, py: float) -> bool:
        # the base arc is wider than the barrel
        half_width = self.width * 1.2 / 2.0
        top = self.y - self.height / 2.0
        bottom = self.y + self.height
        return self.x - half_width < px < self.x + half_width and top < py < bottom


def fire(world: World, launcher: Launcher) -> Agent:
    config = world._config.launcher
    rng = world._rng
    low, high = config.radius_range
    radius = rng.next_range(low, high)
    velocity = Vector2(rng.next_range(-config.horizontal_speed, config.horizontal_speed), -config.launch_speed)
    shape = rng.sample_choice(LAUNCH_SHAPES)
    agent = spawn_agent(world, kind_for_shape(shape), launcher.nozzle, radius, velocity, random_color(world), shape)
    logger.debug("launcher fired %s #%d", agent.shape.value, agent.id)
    return agent


@dataclass(slots=True)
class Droplet:
    offset: Vector2
    size: float
    alpha: float


@dataclass(slots=True)
class SplatterBurst:
    id: int
    position: Vector2
    size: float
    color: Color
    frames_left: int
    droplets: List[Droplet] = field(default_factory=list)

    @property
    def expired(self) -> bool:
        return self.frames_left <= 0


def droplet_count(size: float, config: EffectsConfig) -> int:
    size_low, size_high = config.splatter_size_range
    count_low, count_high = config.droplet_count_range
    count = math.floor(_remap(size, size_low, size_high, count_low, count_high))
    return int(max(count_low, min(count_high, count)))


def create_splatter(
    burst_id: int,
    position: Vector2,
    first: Color,
    second: Color,
    size: float,
    config: EffectsConfig,
    rng: DeterministicRng,
) -> SplatterBurst:
    spread = size * config.spread_factor
    size_low, size_high = config.droplet_size_range
    alpha_low, alpha_high = config.droplet_alpha_range
    droplets = []
    for _ in range(droplet_count(size, config)):
        distance = rng.next_gaussian(0.0, spread)
        angle = rng.next_angle()
        droplets.append(
            Droplet(
                offset=Vector2(math.cos(angle) * distance, math.sin(angle) * distance),
                size=rng.next_range(size_low, size_high),
                alpha=rng.next_range(alpha_low, alpha_high),
            )
        )
    return SplatterBurst(
        id=burst_id,
        position=Vector2(position),
        size=size,
        color=first.lerp(second, 0.5),
        frames_left=config.lifetime_frames,
        droplets=droplets,
    )


def tick_effects(effects: List[SplatterBurst]) -> List[SplatterBurst]:
    for effect in effects:
        effect.frames_left -= 1
    return [effect for effect in effects if not effect.expired]
