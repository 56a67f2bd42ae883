from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class FrameMetrics:
    frame: int
    population: int
    merges: int
    consumptions: int
    detonations: int
    spawned: int
    splits: int
    killers: int
    clusters: int
    black_holes: int
    total_area: float
    effects: int
    frame_duration_ms: float = 0.0
