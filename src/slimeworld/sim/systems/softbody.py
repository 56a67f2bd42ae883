from __future__ import annotations

import logging
import math
from typing import Callable, List

import pymunk
from pygame.math import Vector2

from ..core.config import ClusterConfig
from ..core.solver import SoftBodySolver
from ..utils.math2d import _remap

logger = logging.getLogger(__name__)


def particle_count_for_radius(radius: float, config: ClusterConfig) -> int:
    low, high = config.particle_radius_range
    count = math.floor(_remap(radius, low, high, config.min_particles, config.max_particles))
    return int(max(config.min_particles, min(config.max_particles, count)))


class ClusterBody:
    """Ring of solver particles tied by springs; the owning agent's geometry is derived from it."""

    def __init__(
        self,
        solver: SoftBodySolver,
        center: Vector2,
        radius: float,
        velocity: Vector2,
        config: ClusterConfig,
    ):
        self._solver = solver
        self.particles: List[pymunk.Body] = []
        self.springs: List[pymunk.DampedSpring] = []

        count = particle_count_for_radius(radius, config)
        ring = radius * config.ring_fraction
        for i in range(count):
            angle = 2.0 * math.pi * i / count
            position = Vector2(center.x + math.cos(angle) * ring, center.y + math.sin(angle) * ring)
            self.particles.append(solver.add_particle(position, velocity, config.particle_mass))

        reach = radius * config.spring_reach
        positions = self.positions()
        for i in range(count):
            for j in range(i + 1, count):
                rest = positions[i].distance_to(positions[j])
                if rest < reach:
                    self.springs.append(
                        solver.add_spring(
                            self.particles[i],
                            self.particles[j],
                            rest,
                            config.spring_stiffness,
                            config.spring_damping,
                        )
                    )
        logger.debug("cluster body with %d particles and %d springs", len(self.particles), len(self.springs))

    @property
    def destroyed(self) -> bool:
        return not self.particles and not self.springs

    def positions(self) -> List[Vector2]:
        return [self._solver.particle_position(p) for p in self.particles]

    def outline(self) -> List[Vector2]:
        positions = self.positions()
        if not positions:
            return []
        centroid = sum(positions, Vector2()) / len(positions)
        return sorted(positions, key=lambda p: math.atan2(p.y - centroid.y, p.x - centroid.x) % (2.0 * math.pi))

    def update(self) -> tuple[Vector2, Vector2, float] | None:
        if not self.particles:
            return None
        count = len(self.particles)
        centroid = Vector2()
        velocity = Vector2()
        positions = []
        for particle in self.particles:
            position = self._solver.particle_position(particle)
            positions.append(position)
            centroid += position
            velocity += self._solver.particle_velocity(particle)
        centroid /= count
        velocity /= count
        max_dist = max(p.distance_to(centroid) for p in positions)
        return centroid, velocity, max_dist

    def apply_particle_forces(self, field_force: Callable[[Vector2], Vector2]) -> None:
        for particle in self.particles:
            position = self._solver.particle_position(particle)
            self._solver.apply_force(particle, field_force(position))

    def add_velocity(self, delta: Vector2) -> None:
        for particle in self.particles:
            velocity = self._solver.particle_velocity(particle) + delta
            self._solver.set_particle_velocity(particle, velocity)

    def translate(self, offset: Vector2) -> None:
        for particle in self.particles:
            self._solver.set_particle_position(particle, self._solver.particle_position(particle) + offset)

    def reflect(self, reflect_x: bool, reflect_y: bool) -> None:
        for particle in self.particles:
            velocity = self._solver.particle_velocity(particle)
            if reflect_x:
                velocity.x = -velocity.x
            if reflect_y:
                velocity.y = -velocity.y
            self._solver.set_particle_velocity(particle, velocity)

    def destroy(self) -> None:
        if self.destroyed:
            return
        # springs first; a constraint must not outlive its bodies in the space
        for spring in self.springs:
            self._solver.remove_spring(spring)
        for particle in self.particles:
            self._solver.remove_particle(particle)
        logger.debug("released %d particles and %d springs", len(self.particles), len(self.springs))
        self.particles = []
        self.springs = []
