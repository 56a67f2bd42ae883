from __future__ import annotations

import math
import random
from typing import Optional, Sequence, TypeVar

import noise
from pygame.math import Vector2

T = TypeVar("T")

_NOISE_BASES = 256


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_int(self, max_value: int) -> int:
        return self._random.randrange(max_value)

    def next_gaussian(self, mean: float, sigma: float) -> float:
        return self._random.gauss(mean, sigma)

    def next_angle(self) -> float:
        return self._random.uniform(0.0, 2.0 * math.pi)

    def next_unit_circle(self) -> Vector2:
        angle = self._random.uniform(0, 2 * math.pi)
        vector = Vector2()
        vector.from_polar((1, math.degrees(angle)))
        return vector

    def sample_choice(self, items: Sequence[T]) -> Optional[T]:
        if not items:
            return None
        return self._random.choice(items)

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        return self._random.choices(items, weights=weights, k=1)[0]


class CoherentNoise:
    """Perlin noise remapped to [0, 1], reseedable by switching the permutation base."""

    def __init__(self, base: int = 0, octaves: int = 2):
        self._base = int(base) % _NOISE_BASES
        self._octaves = octaves

    @property
    def base(self) -> int:
        return self._base

    def reseed(self, base: int) -> None:
        self._base = int(base) % _NOISE_BASES

    def sample(self, x: float) -> float:
        value = noise.pnoise1(x, octaves=self._octaves, base=self._base)
        return _unit(value)

    def sample2(self, x: float, y: float) -> float:
        value = noise.pnoise2(x, y, octaves=self._octaves, base=self._base)
        return _unit(value)


def _unit(value: float) -> float:
    return max(0.0, min(1.0, (value + 1.0) * 0.5))
