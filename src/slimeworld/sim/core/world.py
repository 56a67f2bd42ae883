from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List

from pygame.math import Vector2

from .agent import Agent, AgentKind, Color, Shape
from .config import SimulationConfig
from .rng import CoherentNoise, DeterministicRng
from .solver import SoftBodySolver
from ..systems import collisions, emitters, forces, lifecycle, metrics as metrics_system, movement
from ..systems.emitters import Launcher, SplatterBurst
from ..systems.flowfield import FlowField
from ..types.metrics import FrameMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld

logger = logging.getLogger(__name__)

_COLOR_RNG_SALT = 0xC0107F00D5EED123
_EFFECTS_RNG_SALT = 0xE55EC75A1E0F1A57
_FIELD_RNG_SALT = 0xF10BF1E1D0000001


def _derive_stream_seed(seed: int, salt: int) -> int:
    return (int(seed) ^ int(salt)) & 0xFFFFFFFFFFFFFFFF


class World:
    """Owns the slime population and runs one frame at a time.

    All mutation of the population happens either inside ``step`` or inside
    one of the input handlers, which run between frames.
    """

    def __init__(self, config: SimulationConfig):
        self._config = config
        self._shape_table = lifecycle.ShapeTable(config.shape_weights)
        self._rng = DeterministicRng(config.seed)
        self._color_rng = DeterministicRng(_derive_stream_seed(config.seed, _COLOR_RNG_SALT))
        self._effects_rng = DeterministicRng(_derive_stream_seed(config.seed, _EFFECTS_RNG_SALT))
        self._field_rng = DeterministicRng(_derive_stream_seed(config.seed, _FIELD_RNG_SALT))
        self._noise = CoherentNoise(config.seed)
        self._solver = SoftBodySolver(
            config.width,
            config.height,
            gravity=config.cluster.gravity,
            damping=config.cluster.damping,
        )
        self._flow_field: FlowField | None = FlowField(config.width, config.height, config.flow_field, self._field_rng)
        self._launcher = Launcher.for_canvas(config.width, config.height, config.launcher)
        self._pointer = Vector2(config.width / 2.0, config.height / 2.0)
        self._agents: List[Agent] = []
        self._effects: List[SplatterBurst] = []
        self._next_id = 0
        self._next_effect_id = 0
        self._spawned = 0
        self._splits = 0
        self._metrics: FrameMetrics | None = None
        self._bootstrap_population()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def effects(self) -> List[SplatterBurst]:
        return self._effects

    @property
    def flow_field(self) -> FlowField | None:
        return self._flow_field

    @flow_field.setter
    def flow_field(self, value: FlowField | None) -> None:
        self._flow_field = value

    @property
    def launcher(self) -> Launcher:
        return self._launcher

    @property
    def solver(self) -> SoftBodySolver:
        return self._solver

    @property
    def pointer(self) -> Vector2:
        return Vector2(self._pointer)

    @property
    def metrics(self) -> FrameMetrics | None:
        return self._metrics

    def reset(self) -> None:
        for agent in self._agents:
            self._release(agent)
        self._agents.clear()
        self._effects.clear()
        self._solver.clear()
        self._rng.reset()
        self._color_rng.reset()
        self._effects_rng.reset()
        self._field_rng.reset()
        if self._flow_field is not None:
            self._flow_field.regenerate()
        self._pointer = Vector2(self._config.width / 2.0, self._config.height / 2.0)
        self._next_id = 0
        self._next_effect_id = 0
        self._spawned = 0
        self._splits = 0
        self._metrics = None
        self._bootstrap_population()
        logger.info("world reset with %d agents", len(self._agents))

    def step(self, frame: int) -> FrameMetrics:
        start = perf_counter()

        forces.apply_flow_to_clusters(self)
        forces.apply_black_hole_gravity(self)
        self._solver.integrate()

        outcome = collisions.resolve_collisions(self)
        self._agents = outcome.next_generation
        self._invalidate_targets()

        for agent in self._agents:
            movement.move_agent(self, agent)

        self._effects = emitters.tick_effects(self._effects)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            frame,
            outcome,
            self._spawned,
            self._splits,
            len(self._effects),
            duration_ms,
            self._population_stats(),
        )
        self._spawned = 0
        self._splits = 0
        return self._metrics

    def add_agent(
        self,
        kind: AgentKind,
        position: Vector2,
        radius: float,
        velocity: Vector2 | None = None,
        color: Color | None = None,
        shape: Shape | None = None,
    ) -> Agent:
        agent = lifecycle.spawn_agent(
            self,
            kind,
            position,
            radius,
            velocity if velocity is not None else Vector2(),
            color if color is not None else lifecycle.random_color(self),
            shape,
        )
        self._agents.append(agent)
        self._spawned += 1
        return agent

    def find_agent(self, agent_id: int | None) -> Agent | None:
        if agent_id is None:
            return None
        for agent in self._agents:
            if agent.id == agent_id:
                return agent
        return None

    def resolve_target(self, agent: Agent) -> Agent | None:
        target = self.find_agent(agent.target_id)
        if target is None:
            agent.target_id = None
        return target

    def set_pointer(self, x: float, y: float) -> None:
        self._pointer = Vector2(x, y)

    def handle_click(self, x: float, y: float) -> List[Agent]:
        if self._launcher.is_clicked(x, y):
            agent = emitters.fire(self, self._launcher)
            self._agents.append(agent)
            self._spawned += 1
            return [agent]

        for index in range(len(self._agents) - 1, -1, -1):
            agent = self._agents[index]
            if not agent.is_clicked(x, y):
                continue
            if agent.radius <= self._config.split.min_click_radius:
                break
            children = lifecycle.split_agent(self, agent)
            if children:
                self._release(agent)
                del self._agents[index]
                self._agents.extend(children)
                self._splits += 1
            return children
        return []

    def handle_key(self, key: str) -> bool:
        if key == "space" and self._flow_field is not None:
            self._flow_field.regenerate()
            return True
        return False

    def snapshot(self, frame: int) -> Snapshot:
        return Snapshot(
            frame=frame,
            metrics=self._metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents if agent.alive],
            effects=[self._effect_snapshot(effect) for effect in self._effects],
            launcher={
                "x": self._launcher.x,
                "y": self._launcher.y,
                "width": self._launcher.width,
                "height": self._launcher.height,
            },
            world=SnapshotWorld(width=self._config.width, height=self._config.height),
            metadata=SnapshotMetadata(
                seed=self._config.seed,
                config_version=self._config.config_version,
                flow_noise_base=self._flow_field.noise_base if self._flow_field is not None else -1,
            ),
        )

    def _bootstrap_population(self) -> None:
        self._agents.extend(lifecycle.bootstrap_population(self))

    def _allocate_id(self) -> int:
        agent_id = self._next_id
        self._next_id += 1
        return agent_id

    def _release(self, agent: Agent) -> None:
        agent.alive = False
        if agent.body is not None:
            agent.body.destroy()

    def _add_splatter(self, position: Vector2, first: Color, second: Color, size: float) -> SplatterBurst:
        burst = emitters.create_splatter(
            self._next_effect_id,
            position,
            first,
            second,
            size,
            self._config.effects,
            self._effects_rng,
        )
        self._next_effect_id += 1
        self._effects.append(burst)
        return burst

    def _invalidate_targets(self) -> None:
        live_ids = {agent.id for agent in self._agents}
        for agent in self._agents:
            if agent.target_id is not None and agent.target_id not in live_ids:
                agent.target_id = None

    def _population_stats(self) -> tuple[int, int, int, int, float]:
        killers = 0
        clusters = 0
        black_holes = 0
        total_area = 0.0
        for agent in self._agents:
            total_area += agent.area
            if agent.kind == AgentKind.KILLER:
                killers += 1
            elif agent.kind == AgentKind.CLUSTER:
                clusters += 1
            elif agent.kind == AgentKind.BLACK_HOLE:
                black_holes += 1
        return len(self._agents), killers, clusters, black_holes, total_area

    def _agent_snapshot(self, agent: Agent) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": agent.id,
            "kind": agent.kind.value,
            "shape": agent.shape.value,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "radius": agent.radius,
            "color": agent.color.as_tuple(),
            "expression": agent.expression.value,
            "noise_seed": agent.noise_seed,
        }
        if agent.kind == AgentKind.KILLER:
            target = self.resolve_target(agent)
            payload["target"] = (
                None if target is None else {"x": target.position.x, "y": target.position.y, "radius": target.radius}
            )
        elif agent.kind == AgentKind.CLUSTER and agent.body is not None:
            payload["outline"] = [(p.x, p.y) for p in agent.body.outline()]
        elif agent.kind == AgentKind.BLACK_HOLE:
            payload["orbiters"] = [(o.angle, o.distance) for o in agent.orbiters]
        return payload

    @staticmethod
    def _effect_snapshot(effect: SplatterBurst) -> Dict[str, Any]:
        return {
            "id": effect.id,
            "x": effect.position.x,
            "y": effect.position.y,
            "size": effect.size,
            "color": effect.color.as_tuple(),
            "frames_left": effect.frames_left,
            "droplets": [(d.offset.x, d.offset.y, d.size, d.alpha) for d in effect.droplets],
        }
