"""Pytest configuration and fixtures for sigtrace tests."""

from pathlib import Path

import numpy as np
import pytest

from sigtrace.config.schema import TracingParams
from sigtrace.tracing.types import Hit


class ScriptedOracle:
    """
    Scene oracle that replays a fixed sequence of hits.

    Each hit is placed `distance` along the queried ray with a normal facing
    the ray. Once the script runs out every query misses. All queries are
    logged for inspection.
    """

    def __init__(self, script: list[tuple[str, float]], normal=None, repeat: bool = False):
        self.script = list(script)
        self.normal = None if normal is None else np.asarray(normal, dtype=float)
        self.repeat = repeat
        self.queries: list[dict] = []

    def cast_ray(self, origin, direction, max_distance, tags=None):
        self.queries.append(
            {"origin": origin, "direction": direction, "max_distance": max_distance, "tags": tags}
        )
        step = len(self.queries) - 1
        if self.repeat and self.script:
            step %= len(self.script)
        if step >= len(self.script):
            return None
        tag, distance = self.script[step]
        normal = self.normal if self.normal is not None else -np.asarray(direction, dtype=float)
        return Hit(
            point=np.asarray(origin, dtype=float) + distance * np.asarray(direction, dtype=float),
            normal=normal,
            distance=distance,
            tag=tag,
        )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def examples_dir(project_root: Path) -> Path:
    """Return the examples directory."""
    return project_root / "examples"


@pytest.fixture
def sample_simulation_path(examples_dir: Path) -> Path:
    """Return path to the sample simulation file."""
    return examples_dir / "forest_clearing" / "simulation.yaml"


@pytest.fixture
def scripted_oracle():
    """Factory for ScriptedOracle instances."""
    return ScriptedOracle


@pytest.fixture
def params() -> TracingParams:
    """Default tracing parameters."""
    return TracingParams()
