"""Configuration schema and loading for sigtrace simulations."""

from sigtrace.config.schema import (
    BoxObject,
    OutputConfig,
    PlaneObject,
    PointObject,
    Position,
    SceneDefinition,
    SimulationConfig,
    SphereObject,
    TracingParams,
)
from sigtrace.config.loader import SimulationLoader, SimulationLoadError, load_simulation

__all__ = [
    "BoxObject",
    "OutputConfig",
    "PlaneObject",
    "PointObject",
    "Position",
    "SceneDefinition",
    "SimulationConfig",
    "SimulationLoadError",
    "SimulationLoader",
    "SphereObject",
    "TracingParams",
    "load_simulation",
]
