from __future__ import annotations

import pygame
from pygame.math import Vector2

from slimeworld.app.viewer import SlimeRenderer
from slimeworld.sim.core.agent import AgentKind, Shape


def _renderer(world) -> SlimeRenderer:
    surface = pygame.Surface((int(world.config.width), int(world.config.height)))
    return SlimeRenderer(surface, world.config.seed)


def test_expired_splatters_are_forgotten(make_world):
    world = make_world()
    world.add_agent(AgentKind.BASIC, Vector2(200, 200), 20.0, shape=Shape.BOMB)
    world.add_agent(AgentKind.BASIC, Vector2(220, 200), 20.0)
    world.step(0)
    renderer = _renderer(world)

    renderer.draw(world.snapshot(0))
    assert renderer._stamped == {world.effects[0].id}

    world._effects.clear()
    renderer.draw(world.snapshot(1))
    assert renderer._stamped == set()


def test_black_hole_glow_reuses_one_surface(make_world):
    world = make_world()
    world.add_agent(AgentKind.BLACK_HOLE, Vector2(400, 300), 30.0)
    renderer = _renderer(world)
    glow = renderer._glow

    renderer.draw(world.snapshot(0), painter_mode=False)
    renderer.draw(world.snapshot(1), painter_mode=False)

    assert renderer._glow is glow
    assert tuple(renderer._surface.get_at((400, 300)))[:3] == (0, 0, 0)
