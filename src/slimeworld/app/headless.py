from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.agent import AgentKind
from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import FrameMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "frame",
    "population",
    "merges",
    "consumptions",
    "detonations",
    "total_area",
    "frame_ms",
]

_DETAILED_HEADER = [
    "frame",
    "population",
    "merges",
    "consumptions",
    "detonations",
    "spawned",
    "splits",
    "killers",
    "clusters",
    "black_holes",
    "total_area",
    "effects",
    "frame_ms",
    "avg_radius",
    "max_radius",
    "avg_speed",
    "killers_hunting",
    "solver_particles",
    "solver_springs",
]


def _format_basic_row(metrics: FrameMetrics, frame_ms: float) -> list[object]:
    return [
        metrics.frame,
        metrics.population,
        metrics.merges,
        metrics.consumptions,
        metrics.detonations,
        f"{metrics.total_area:.3f}",
        f"{frame_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: FrameMetrics, frame_ms: float) -> list[object]:
    agents = world.agents
    if agents:
        radii = [agent.radius for agent in agents]
        avg_radius = sum(radii) / len(radii)
        max_radius = max(radii)
        avg_speed = sum(math.hypot(a.velocity.x, a.velocity.y) for a in agents) / len(agents)
    else:
        avg_radius = 0.0
        max_radius = 0.0
        avg_speed = 0.0
    hunting = sum(1 for a in agents if a.kind == AgentKind.KILLER and a.target_id is not None)
    return [
        metrics.frame,
        metrics.population,
        metrics.merges,
        metrics.consumptions,
        metrics.detonations,
        metrics.spawned,
        metrics.splits,
        metrics.killers,
        metrics.clusters,
        metrics.black_holes,
        f"{metrics.total_area:.3f}",
        metrics.effects,
        f"{frame_ms:.3f}",
        f"{avg_radius:.4f}",
        f"{max_radius:.4f}",
        f"{avg_speed:.4f}",
        hunting,
        world.solver.particle_count,
        world.solver.spring_count,
    ]


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0}
    return {
        "min": float(min(values)),
        "max": float(max(values)),
        "avg": float(sum(values) / len(values)),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config)
    logger.info("running %d frames with seed %d and %d agents", steps, config.seed, len(world.agents))

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    frame_ms_series: list[float] = []
    population_series: list[float] = []
    totals = {"merges": 0, "consumptions": 0, "detonations": 0}

    try:
        for frame in range(steps):
            metrics = world.step(frame)
            frame_ms = 0.0 if deterministic_log else metrics.frame_duration_ms
            frame_ms_series.append(frame_ms)
            population_series.append(float(metrics.population))
            totals["merges"] += metrics.merges
            totals["consumptions"] += metrics.consumptions
            totals["detonations"] += metrics.detonations
            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, frame_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, frame_ms))
    finally:
        if csv_file:
            csv_file.close()

    logger.info(
        "finished: population=%d merges=%d consumptions=%d detonations=%d",
        len(world.agents),
        totals["merges"],
        totals["consumptions"],
        totals["detonations"],
    )

    if summary_path:
        summary = {
            "steps": steps,
            "seed": config.seed,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "frame_ms": _summary_stats(frame_ms_series),
            "population": _summary_stats(population_series),
            "totals": totals,
            "final_population": len(world.agents),
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless slime simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (frame_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        config_path=args.config,
    )


if __name__ == "__main__":
    main()
