from __future__ import annotations

import logging
from typing import Set

import pymunk
from pygame.math import Vector2

logger = logging.getLogger(__name__)


class SoftBodySolver:
    """Point masses and springs integrated by a pymunk space.

    Particles are shapeless bodies with infinite moment, so they never collide
    with each other; only springs and the world bounds constrain them.
    """

    def __init__(
        self,
        width: float,
        height: float,
        gravity: tuple[float, float] = (0.0, 0.0),
        damping: float = 1.0,
        time_step: float = 1.0,
    ):
        self._width = float(width)
        self._height = float(height)
        self._time_step = float(time_step)
        self._space = pymunk.Space()
        self._space.gravity = gravity
        self._space.damping = damping
        self._particles: Set[pymunk.Body] = set()
        self._springs: Set[pymunk.DampedSpring] = set()
        self._integrating = False

    @property
    def particle_count(self) -> int:
        return len(self._particles)

    @property
    def spring_count(self) -> int:
        return len(self._springs)

    def add_particle(
        self,
        position: Vector2,
        velocity: Vector2 | None = None,
        mass: float = 1.0,
    ) -> pymunk.Body:
        self._check_not_integrating()
        body = pymunk.Body(mass, float("inf"))
        body.position = (position.x, position.y)
        if velocity is not None:
            body.velocity = (velocity.x, velocity.y)
        self._space.add(body)
        self._particles.add(body)
        return body

    def remove_particle(self, handle: pymunk.Body) -> None:
        self._check_not_integrating()
        if handle not in self._particles:
            return
        self._particles.discard(handle)
        self._space.remove(handle)

    def add_spring(
        self,
        first: pymunk.Body,
        second: pymunk.Body,
        rest_length: float,
        stiffness: float,
        damping: float = 0.0,
    ) -> pymunk.DampedSpring:
        self._check_not_integrating()
        spring = pymunk.DampedSpring(first, second, (0, 0), (0, 0), rest_length, stiffness, damping)
        self._space.add(spring)
        self._springs.add(spring)
        return spring

    def remove_spring(self, handle: pymunk.DampedSpring) -> None:
        self._check_not_integrating()
        if handle not in self._springs:
            return
        self._springs.discard(handle)
        self._space.remove(handle)

    def particle_position(self, handle: pymunk.Body) -> Vector2:
        return Vector2(handle.position.x, handle.position.y)

    def particle_velocity(self, handle: pymunk.Body) -> Vector2:
        return Vector2(handle.velocity.x, handle.velocity.y)

    def set_particle_position(self, handle: pymunk.Body, position: Vector2) -> None:
        handle.position = (position.x, position.y)

    def set_particle_velocity(self, handle: pymunk.Body, velocity: Vector2) -> None:
        handle.velocity = (velocity.x, velocity.y)

    def apply_force(self, handle: pymunk.Body, force: Vector2) -> None:
        handle.apply_force_at_local_point((force.x, force.y))

    def integrate(self) -> None:
        self._check_not_integrating()
        self._integrating = True
        try:
            self._space.step(self._time_step)
        finally:
            self._integrating = False
        self._clamp_to_bounds()

    def clear(self) -> None:
        logger.debug("clearing %d particles and %d springs", len(self._particles), len(self._springs))
        for spring in list(self._springs):
            self.remove_spring(spring)
        for particle in list(self._particles):
            self.remove_particle(particle)

    def _clamp_to_bounds(self) -> None:
        for body in self._particles:
            x, y = body.position
            vx, vy = body.velocity
            clamped_x = min(max(x, 0.0), self._width)
            clamped_y = min(max(y, 0.0), self._height)
            if clamped_x == x and clamped_y == y:
                continue
            if clamped_x != x:
                vx = 0.0
            if clamped_y != y:
                vy = 0.0
            body.position = (clamped_x, clamped_y)
            body.velocity = (vx, vy)

    def _check_not_integrating(self) -> None:
        if self._integrating:
            raise RuntimeError("solver state cannot change while integrating")
