from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

import pygame
from pygame.math import Vector2

from ..sim.core.config import SimulationConfig
from ..sim.core.rng import CoherentNoise
from ..sim.core.world import World
from ..sim.systems.flowfield import FlowField
from ..sim.types.snapshot import Snapshot

logger = logging.getLogger(__name__)

BACKGROUND = (230, 240, 255)
TRAIL_ALPHA = 30
MAX_STRETCH = 1.35
STRETCH_SPEED = 3.0
WOBBLE = 0.2
CORNER_JITTER = 0.4


def _shade(color: Iterable[float], factor: float) -> tuple[int, int, int, int]:
    r, g, b, a = color
    return (int(r * factor), int(g * factor), int(b * factor), int(a))


def _rgba(color: Iterable[float]) -> tuple[int, int, int, int]:
    r, g, b, a = color
    return (int(r), int(g), int(b), int(a))


class SlimeRenderer:
    """Draws world snapshots; splatters are stamped once onto a persistent paint layer."""

    def __init__(self, surface: pygame.Surface, seed: int = 0):
        self._surface = surface
        size = surface.get_size()
        self._paint = pygame.Surface(size, pygame.SRCALPHA)
        self._layer = pygame.Surface(size, pygame.SRCALPHA)
        self._glow = pygame.Surface(size, pygame.SRCALPHA)
        self._fade = pygame.Surface(size, pygame.SRCALPHA)
        self._fade.fill((*BACKGROUND, TRAIL_ALPHA))
        self._noise = CoherentNoise(seed)
        self._stamped: Set[int] = set()

    def clear_paint(self) -> None:
        self._paint.fill((0, 0, 0, 0))
        self._stamped.clear()

    def draw(
        self,
        snapshot: Snapshot,
        painter_mode: bool = True,
        flow_field: Optional[FlowField] = None,
    ) -> None:
        if painter_mode:
            self._surface.blit(self._fade, (0, 0))
        else:
            self._surface.fill(BACKGROUND)
        for effect in snapshot.effects:
            if effect["id"] not in self._stamped:
                self._stamp_splatter(effect)
                self._stamped.add(effect["id"])
        self._stamped &= {effect["id"] for effect in snapshot.effects}
        self._surface.blit(self._paint, (0, 0))

        if flow_field is not None:
            self._draw_flow_field(flow_field)

        self._layer.fill((0, 0, 0, 0))
        self._glow.fill((0, 0, 0, 0))
        t = snapshot.frame * 0.01
        for agent in snapshot.agents:
            kind = agent["kind"]
            if kind == "BlackHole":
                self._draw_black_hole(agent, snapshot.frame)
            elif kind == "Cluster":
                self._draw_cluster(agent)
            else:
                self._draw_slime(agent, t)
            if kind == "Killer" and agent.get("target"):
                self._draw_gaze(agent, agent["target"])
        self._surface.blit(self._glow, (0, 0))
        self._surface.blit(self._layer, (0, 0))
        self._draw_launcher(snapshot.launcher)

    def _stamp_splatter(self, effect: Dict[str, Any]) -> None:
        r, g, b, _ = effect["color"]
        for dx, dy, size, alpha in effect["droplets"]:
            center = (int(effect["x"] + dx), int(effect["y"] + dy))
            pygame.draw.circle(self._paint, (int(r), int(g), int(b), int(alpha)), center, max(1, int(size / 2)))

    def _draw_flow_field(self, flow_field: FlowField) -> None:
        step = flow_field.resolution
        for i, column in enumerate(flow_field.field):
            for j, vector in enumerate(column):
                start = Vector2(i * step, j * step)
                end = start + vector * (step - 2)
                pygame.draw.line(self._surface, (150, 150, 150), start, end)

    def _transform(self, points: List[Vector2], agent: Dict[str, Any]) -> List[tuple[float, float]]:
        velocity = Vector2(agent["vx"], agent["vy"])
        speed = velocity.length()
        stretch = 1.0 + min(speed, STRETCH_SPEED) / STRETCH_SPEED * (MAX_STRETCH - 1.0)
        heading = math.degrees(math.atan2(velocity.y, velocity.x)) if speed > 1e-6 else 0.0
        center = Vector2(agent["x"], agent["y"])
        out = []
        for point in points:
            local = Vector2(point.x * stretch, point.y / stretch).rotate(heading)
            out.append((center.x + local.x, center.y + local.y))
        return out

    def _outline(self, agent: Dict[str, Any], t: float) -> List[Vector2]:
        r = agent["radius"]
        seed = agent["noise_seed"]
        shape = agent["shape"]
        if shape in ("square", "triangle", "arrow"):
            if shape == "square":
                corners = [Vector2(-r, -r), Vector2(r, -r), Vector2(r, r), Vector2(-r, r)]
            elif shape == "triangle":
                corners = [Vector2(0, -r * 1.15), Vector2(-r, r * 0.85), Vector2(r, r * 0.85)]
            else:
                corners = [
                    Vector2(r * 1.3, 0),
                    Vector2(0, -r),
                    Vector2(-r * 0.4, -r * 0.5),
                    Vector2(-r * 0.8, -r * 0.5),
                    Vector2(-r * 0.8, r * 0.5),
                    Vector2(-r * 0.4, r * 0.5),
                    Vector2(0, r),
                ]
            jitter = r * CORNER_JITTER
            return [
                Vector2(
                    c.x + (self._noise.sample2(c.x * 0.05 + seed, t) - 0.5) * 2 * jitter,
                    c.y + (self._noise.sample2(c.y * 0.05 + seed, t + 100) - 0.5) * 2 * jitter,
                )
                for c in corners
            ]
        points = []
        steps = 63
        for k in range(steps):
            angle = 2 * math.pi * k / steps
            wobble = (self._noise.sample2(math.cos(angle) * 0.5 + seed, math.sin(angle) * 0.5 + t) - 0.5) * 2
            radius = r + wobble * r * WOBBLE
            points.append(Vector2(math.cos(angle) * radius, math.sin(angle) * radius))
        return points

    def _draw_slime(self, agent: Dict[str, Any], t: float) -> None:
        r = agent["radius"]
        points = self._transform(self._outline(agent, t), agent)
        if len(points) >= 3:
            pygame.draw.polygon(self._layer, _rgba(agent["color"]), points)
            pygame.draw.polygon(self._layer, _shade(agent["color"], 0.8), points, max(1, int(r * 0.1)))
        center = Vector2(agent["x"], agent["y"])
        if agent["shape"] == "bomb":
            pygame.draw.circle(self._layer, (40, 40, 40, 255), center + Vector2(0, -r * 0.9), max(1, int(r * 0.3)))
            pygame.draw.circle(self._layer, (255, 255, 0, 255), center + Vector2(r * 0.1, -r * 1.3), max(1, int(r * 0.1)))
        self._draw_face(center, r, agent["expression"])

    def _draw_cluster(self, agent: Dict[str, Any]) -> None:
        outline = agent.get("outline") or []
        if len(outline) >= 3:
            pygame.draw.polygon(self._layer, _rgba(agent["color"]), outline)
            pygame.draw.polygon(self._layer, _shade(agent["color"], 0.8), outline, max(1, int(agent["radius"] * 0.2)))
        self._draw_face(Vector2(agent["x"], agent["y"]), agent["radius"], agent["expression"])

    def _draw_face(self, center: Vector2, r: float, expression: str) -> None:
        eye = max(1, int(r * 0.075))
        left = center + Vector2(-r * 0.25, -r * 0.1)
        right = center + Vector2(r * 0.25, -r * 0.1)
        black = (0, 0, 0, 255)
        width = max(1, int(r * 0.05))
        if expression == "surprised":
            pygame.draw.circle(self._layer, black, left, int(eye * 1.2))
            pygame.draw.circle(self._layer, black, right, int(eye * 1.2))
            mouth = pygame.Rect(0, 0, r * 0.25, r * 0.35)
            mouth.center = (int(center.x), int(center.y + r * 0.25))
            pygame.draw.ellipse(self._layer, black, mouth)
            return
        if expression == "wink":
            lid = pygame.Rect(0, 0, eye * 1.6, eye)
            lid.center = (int(left.x), int(left.y))
            pygame.draw.arc(self._layer, black, lid, 0, math.pi, width)
        else:
            pygame.draw.circle(self._layer, black, left, eye)
        pygame.draw.circle(self._layer, black, right, eye)
        if expression == "happy":
            smile = pygame.Rect(0, 0, r * 0.5, r * 0.4)
            smile.center = (int(center.x), int(center.y + r * 0.1))
            pygame.draw.arc(self._layer, black, smile, math.pi, 2 * math.pi, width)

    def _draw_black_hole(self, agent: Dict[str, Any], frame: int) -> None:
        center = Vector2(agent["x"], agent["y"])
        r = agent["radius"]
        for angle, distance in agent.get("orbiters", []):
            point = center + Vector2(math.cos(angle) * distance, math.sin(angle) * distance)
            pygame.draw.circle(self._layer, (200, 200, 255, 180), point, 2)
        pulse = math.sin(frame * 0.05) * r * 0.1
        for i in range(15, 0, -1):
            alpha = int(100 * (15 - i) / 15)
            pygame.draw.circle(self._glow, (120, 100, 255, alpha), center, max(1, int(r + i * 2 + pulse)))
        pygame.draw.circle(self._layer, (0, 0, 0, 255), center, max(1, int(r)))

    def _draw_gaze(self, agent: Dict[str, Any], target: Dict[str, float]) -> None:
        start = Vector2(agent["x"], agent["y"])
        end = Vector2(target["x"], target["y"])
        length = start.distance_to(end)
        if length > 1e-6:
            direction = (end - start) / length
            dash = 8.0
            position = 0.0
            while position < length:
                a = start + direction * position
                b = start + direction * min(length, position + dash)
                pygame.draw.line(self._layer, (255, 0, 0, 150), a, b, 2)
                position += dash * 2
        reticle = target["radius"] * 1.5
        pygame.draw.circle(self._layer, (255, 0, 0, 200), end, max(1, int(reticle)), 2)
        pygame.draw.line(self._layer, (255, 0, 0, 200), end - Vector2(reticle, 0), end + Vector2(reticle, 0), 2)
        pygame.draw.line(self._layer, (255, 0, 0, 200), end - Vector2(0, reticle), end + Vector2(0, reticle), 2)

    def _draw_launcher(self, launcher: Dict[str, float]) -> None:
        w = launcher["width"]
        h = launcher["height"]
        barrel = pygame.Rect(0, 0, w, h)
        barrel.center = (int(launcher["x"]), int(launcher["y"]))
        pygame.draw.rect(self._surface, (80, 80, 80), barrel, border_top_left_radius=10, border_top_right_radius=10)
        base = pygame.Rect(0, 0, w * 1.2, h)
        base.center = (int(launcher["x"]), int(launcher["y"] + h / 2))
        pygame.draw.ellipse(self._surface, (60, 60, 60), base)


def run_viewer(config: SimulationConfig, fps: int = 60) -> None:
    pygame.init()
    screen = pygame.display.set_mode((int(config.width), int(config.height)))
    pygame.display.set_caption("slimeworld")
    world = World(config)
    renderer = SlimeRenderer(screen, config.seed)
    clock = pygame.time.Clock()
    painter_mode = True
    debug = False
    frame = 0
    running = True
    logger.info("viewer started (%dx%d, %d agents)", config.width, config.height, len(world.agents))
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.MOUSEMOTION:
                    world.set_pointer(*event.pos)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    world.handle_click(*event.pos)
                elif event.type == pygame.KEYDOWN:
                    key = pygame.key.name(event.key)
                    if key == "escape":
                        running = False
                    elif key == "p":
                        painter_mode = not painter_mode
                    elif key == "d":
                        debug = not debug
                    elif key == "r":
                        world.reset()
                        renderer.clear_paint()
                    else:
                        world.handle_key(key)
            world.step(frame)
            renderer.draw(world.snapshot(frame), painter_mode, world.flow_field if debug else None)
            pygame.display.flip()
            clock.tick(fps)
            frame += 1
    finally:
        pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Interactive slime simulation")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--width", type=float, default=None)
    parser.add_argument("--height", type=float, default=None)
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    if args.seed is not None:
        config.seed = args.seed
    if args.width is not None:
        config.width = args.width
    if args.height is not None:
        config.height = args.height
    run_viewer(config, fps=args.fps)


if __name__ == "__main__":
    main()
