from __future__ import annotations

import logging
import math
from typing import List

from pygame.math import Vector2

from ..core.config import FlowFieldConfig
from ..core.rng import CoherentNoise, DeterministicRng
from ..utils.math2d import _from_angle

logger = logging.getLogger(__name__)


class FlowField:
    def __init__(self, width: float, height: float, config: FlowFieldConfig, rng: DeterministicRng):
        self._config = config
        self._rng = rng
        self.resolution = config.resolution
        self.cols = max(1, int(width // config.resolution))
        self.rows = max(1, int(height // config.resolution))
        self._noise = CoherentNoise()
        self.field: List[List[Vector2]] = []
        self.regenerate()

    @property
    def noise_base(self) -> int:
        return self._noise.base

    def regenerate(self) -> None:
        self._noise.reseed(self._rng.next_int(10_000))
        step = self._config.noise_increment
        turns = 2.0 * math.pi * self._config.angle_turns
        field = []
        for i in range(self.cols):
            column = []
            for j in range(self.rows):
                angle = self._noise.sample2(i * step, j * step) * turns
                column.append(_from_angle(angle))
            field.append(column)
        self.field = field
        logger.info("flow field regenerated (%dx%d, noise base %d)", self.cols, self.rows, self._noise.base)

    def lookup(self, position: Vector2) -> Vector2:
        column = int(max(0.0, min(self.cols - 1, position.x / self.resolution)))
        row = int(max(0.0, min(self.rows - 1, position.y / self.resolution)))
        return Vector2(self.field[column][row])
