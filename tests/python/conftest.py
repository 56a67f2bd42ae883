import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from slimeworld.sim.core.config import SimulationConfig  # noqa: E402
from slimeworld.sim.core.world import World  # noqa: E402


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run long soak simulations",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "slow: marks long soak simulations that only run with --run-slow",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow"):
        return

    skip_marker = pytest.mark.skip(reason="Long soak run (use --run-slow)")

    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture
def make_world() -> Callable[..., World]:
    """Empty, flow-free world so each test places exactly the agents it needs."""

    def _make(flow: bool = False, **overrides) -> World:
        values = {"seed": 7, "width": 800.0, "height": 600.0, "initial_population": 0}
        values.update(overrides)
        world = World(SimulationConfig(**values))
        if not flow:
            world.flow_field = None
        return world

    return _make
