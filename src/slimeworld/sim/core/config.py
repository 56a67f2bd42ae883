from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import yaml


def _default_shape_weights() -> Dict[str, float]:
    # killer and arrow slimes are ten times rarer than the rest
    return {
        "circle": 10.0,
        "square": 10.0,
        "triangle": 10.0,
        "bomb": 10.0,
        "arrow": 1.0,
        "killer": 1.0,
        "cluster": 10.0,
    }


@dataclass
class MotionConfig:
    max_speed: float = 3.0
    max_force: float = 0.1
    arrow_max_speed: float = 4.0
    arrow_acceleration: float = 0.2
    wander_acceleration: float = 0.1
    noise_step: float = 0.01
    drag: float = 0.99


@dataclass
class KillerConfig:
    max_speed: float = 3.0
    max_force: float = 0.15
    flee_margin: float = 100.0
    slowdown_radius: float = 100.0
    flee_weight: float = 2.0
    seek_weight: float = 1.0
    flow_weight: float = 0.5


@dataclass
class SplitConfig:
    min_click_radius: float = 3.5
    min_child_radius: float = 10.0
    separation_speed: float = 5.0
    separation_margin: float = 1.0
    black_hole_chance: float = 0.1
    black_hole_min_radius: float = 60.0


@dataclass
class ClusterConfig:
    min_particles: int = 8
    max_particles: int = 16
    particle_radius_range: tuple[float, float] = (10.0, 50.0)
    ring_fraction: float = 0.8
    spring_reach: float = 1.5
    spring_stiffness: float = 0.05
    spring_damping: float = 0.0
    particle_mass: float = 1.0
    flow_force_scale: float = 0.1
    gravity: tuple[float, float] = (0.0, 0.0)
    damping: float = 1.0


@dataclass
class BlackHoleConfig:
    gravity_constant: float = 6.0
    min_distance: float = 20.0
    max_distance: float = 200.0
    orbiter_count: int = 30
    orbit_speed_range: tuple[float, float] = (0.01, 0.03)
    orbit_distance_factor: float = 2.5


@dataclass
class FlowFieldConfig:
    resolution: float = 20.0
    noise_increment: float = 0.1
    angle_turns: float = 4.0


@dataclass
class LauncherConfig:
    width: float = 100.0
    height: float = 60.0
    radius_range: tuple[float, float] = (15.0, 30.0)
    horizontal_speed: float = 2.0
    launch_speed: float = 12.0


@dataclass
class EffectsConfig:
    splatter_size_range: tuple[float, float] = (20.0, 150.0)
    droplet_count_range: tuple[int, int] = (50, 400)
    spread_factor: float = 0.25
    droplet_size_range: tuple[float, float] = (2.0, 10.0)
    droplet_alpha_range: tuple[float, float] = (50.0, 150.0)
    lifetime_frames: int = 45


@dataclass
class SimulationConfig:
    width: float = 1280.0
    height: float = 720.0
    seed: int = 42
    initial_population: int = 15
    initial_radius_range: tuple[float, float] = (20.0, 50.0)
    initial_speed: float = 2.0
    color_channel_range: tuple[float, float] = (100.0, 255.0)
    color_alpha: float = 60.0
    shape_weights: Dict[str, float] = field(default_factory=_default_shape_weights)
    config_version: str = "v1"
    motion: MotionConfig = field(default_factory=MotionConfig)
    killer: KillerConfig = field(default_factory=KillerConfig)
    split: SplitConfig = field(default_factory=SplitConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    black_hole: BlackHoleConfig = field(default_factory=BlackHoleConfig)
    flow_field: FlowFieldConfig = field(default_factory=FlowFieldConfig)
    launcher: LauncherConfig = field(default_factory=LauncherConfig)
    effects: EffectsConfig = field(default_factory=EffectsConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text())
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
        return load_config(data)


_SECTIONS = {
    "motion": MotionConfig,
    "killer": KillerConfig,
    "split": SplitConfig,
    "cluster": ClusterConfig,
    "black_hole": BlackHoleConfig,
    "flow_field": FlowFieldConfig,
    "launcher": LauncherConfig,
    "effects": EffectsConfig,
}

_PAIR_FIELDS = {
    "initial_radius_range",
    "color_channel_range",
    "particle_radius_range",
    "gravity",
    "orbit_speed_range",
    "radius_range",
    "splatter_size_range",
    "droplet_count_range",
    "droplet_size_range",
    "droplet_alpha_range",
}


def _pairs(values: dict) -> dict:
    def _pair(value: object) -> object:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (value[0], value[1])
        return value

    return {k: (_pair(v) if k in _PAIR_FIELDS else v) for k, v in values.items()}


def load_config(raw: dict) -> SimulationConfig:
    sections = {name: cls(**_pairs(raw.get(name) or {})) for name, cls in _SECTIONS.items()}
    sim_values = _pairs({k: v for k, v in raw.items() if k not in _SECTIONS})
    if "shape_weights" in sim_values:
        sim_values["shape_weights"] = {str(k): float(v) for k, v in sim_values["shape_weights"].items()}
    return SimulationConfig(**sections, **sim_values)
