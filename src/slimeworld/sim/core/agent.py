from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List

from pygame.math import Vector2

from ..utils.math2d import _circle_area

if TYPE_CHECKING:
    from ..systems.softbody import ClusterBody


class AgentKind(str, Enum):
    BASIC = "Basic"
    KILLER = "Killer"
    CLUSTER = "Cluster"
    BLACK_HOLE = "BlackHole"


class Shape(str, Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    TRIANGLE = "triangle"
    BOMB = "bomb"
    ARROW = "arrow"
    KILLER = "killer"
    CLUSTER = "cluster"
    BLACK_HOLE = "blackhole"


class Expression(str, Enum):
    DEFAULT = "default"
    HAPPY = "happy"
    WINK = "wink"
    SURPRISED = "surprised"


@dataclass(slots=True)
class Color:
    r: float
    g: float
    b: float
    a: float = 255.0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)

    def lerp(self, other: "Color", t: float) -> "Color":
        return Color(
            self.r + (other.r - self.r) * t,
            self.g + (other.g - self.g) * t,
            self.b + (other.b - self.b) * t,
            self.a + (other.a - self.a) * t,
        )


@dataclass(slots=True)
class Orbiter:
    angle: float
    distance: float
    speed: float


@dataclass(slots=True)
class Agent:
    id: int
    kind: AgentKind
    position: Vector2
    velocity: Vector2
    radius: float
    color: Color
    shape: Shape
    expression: Expression = Expression.DEFAULT
    noise_seed: float = 0.0
    move_offset: float = 0.0
    max_speed: float = 3.0
    max_force: float = 0.1
    alive: bool = True
    target_id: int | None = None
    body: "ClusterBody | None" = None
    orbiters: List[Orbiter] = field(default_factory=list)

    @property
    def area(self) -> float:
        return _circle_area(self.radius)

    @property
    def is_bomb(self) -> bool:
        return self.shape == Shape.BOMB

    def intersects(self, other: "Agent") -> bool:
        return self.position.distance_to(other.position) < self.radius + other.radius

    def is_clicked(self, px: float, py: float) -> bool:
        return self.position.distance_to((px, py)) < self.radius
