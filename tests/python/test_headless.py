from __future__ import annotations

import csv
import json

import pytest

from slimeworld.app.headless import _BASIC_HEADER, _DETAILED_HEADER, run_headless


def _read_rows(path):
    with path.open() as handle:
        return list(csv.reader(handle))


def test_detailed_log_has_header_and_one_row_per_frame(tmp_path):
    log_path = tmp_path / "metrics.csv"

    world = run_headless(steps=12, seed=5, log_path=log_path, deterministic_log=True)

    rows = _read_rows(log_path)
    assert rows[0] == _DETAILED_HEADER
    assert len(rows) == 13
    assert [int(row[0]) for row in rows[1:]] == list(range(12))
    assert all(row[_DETAILED_HEADER.index("frame_ms")] == "0.000" for row in rows[1:])
    assert int(rows[-1][1]) == len(world.agents)
    assert int(rows[-1][_DETAILED_HEADER.index("solver_particles")]) == world.solver.particle_count


def test_basic_log_format(tmp_path):
    log_path = tmp_path / "basic.csv"

    run_headless(steps=4, seed=5, log_path=log_path, log_format="basic")

    rows = _read_rows(log_path)
    assert rows[0] == _BASIC_HEADER
    assert all(len(row) == len(_BASIC_HEADER) for row in rows)


def test_deterministic_logs_match(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"

    run_headless(steps=20, seed=8, log_path=first, deterministic_log=True)
    run_headless(steps=20, seed=8, log_path=second, deterministic_log=True)

    assert first.read_text() == second.read_text()


def test_summary_json(tmp_path):
    summary_path = tmp_path / "summary.json"

    world = run_headless(steps=6, seed=2, log_path=None, summary_path=summary_path, deterministic_log=True)

    summary = json.loads(summary_path.read_text())
    assert summary["steps"] == 6
    assert summary["seed"] == 2
    assert summary["log_format"] == "detailed"
    assert summary["frame_ms"] == {"min": 0.0, "max": 0.0, "avg": 0.0}
    assert set(summary["totals"]) == {"merges", "consumptions", "detonations"}
    assert summary["final_population"] == len(world.agents)


def test_invalid_log_format_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        run_headless(steps=1, seed=1, log_path=tmp_path / "x.csv", log_format="verbose")
    assert not (tmp_path / "x.csv").exists()


def test_config_file_is_honoured(tmp_path):
    config_path = tmp_path / "tiny.yaml"
    config_path.write_text("width: 400\nheight: 300\ninitial_population: 3\nseed: 1\n")

    world = run_headless(steps=2, seed=None, log_path=None, config_path=config_path)

    assert world.config.width == 400
    assert world.config.seed == 1
    assert len(world.agents) <= 3
