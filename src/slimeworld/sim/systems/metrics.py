from __future__ import annotations

from typing import Tuple

from ..types.metrics import FrameMetrics
from .collisions import CollisionOutcome


def create_metrics(
    frame: int,
    outcome: CollisionOutcome,
    spawned: int,
    splits: int,
    effects: int,
    duration_ms: float,
    stats: Tuple[int, int, int, int, float],
) -> FrameMetrics:
    population, killers, clusters, black_holes, total_area = stats
    return FrameMetrics(
        frame=frame,
        population=population,
        merges=outcome.merges,
        consumptions=outcome.consumptions,
        detonations=outcome.detonations,
        spawned=spawned,
        splits=splits,
        killers=killers,
        clusters=clusters,
        black_holes=black_holes,
        total_area=total_area,
        effects=effects,
        frame_duration_ms=duration_ms,
    )
