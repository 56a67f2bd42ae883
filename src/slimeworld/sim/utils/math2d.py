from __future__ import annotations

import math

from pygame.math import Vector2


def _safe_normalize(vector: Vector2) -> Vector2:
    return _safe_normalize_xy(vector.x, vector.y)


def _safe_normalize_xy(x: float, y: float) -> Vector2:
    magnitude_sq = x * x + y * y
    if magnitude_sq < 1e-10:
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def _set_length(vector: Vector2, length: float) -> Vector2:
    direction = _safe_normalize(vector)
    return direction * length


def _clamp_length(vector: Vector2, max_length: float) -> Vector2:
    if max_length <= 0:
        return Vector2()
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= max_length * max_length:
        return Vector2(vector)
    if magnitude_sq == 0:
        return Vector2()
    return vector.normalize() * max_length


def _from_angle(angle: float, length: float = 1.0) -> Vector2:
    return Vector2(math.cos(angle) * length, math.sin(angle) * length)


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _remap(value: float, low: float, high: float, out_low: float, out_high: float) -> float:
    if high == low:
        return out_low
    return out_low + (value - low) * (out_high - out_low) / (high - low)


def _circle_area(radius: float) -> float:
    return math.pi * radius * radius


def _radius_for_area(area: float) -> float:
    if area <= 0.0:
        return 0.0
    return math.sqrt(area / math.pi)
