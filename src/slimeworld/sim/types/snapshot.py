from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import FrameMetrics


@dataclass(slots=True)
class Snapshot:
    frame: int
    metrics: FrameMetrics | None
    agents: List[Dict[str, Any]]
    effects: List[Dict[str, Any]]
    launcher: Dict[str, float]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotWorld:
    width: float
    height: float


@dataclass(slots=True)
class SnapshotMetadata:
    seed: int
    config_version: str
    flow_noise_base: int
