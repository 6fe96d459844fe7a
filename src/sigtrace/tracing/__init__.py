"""Ray tracing core: refraction, bounce state machine, and single-ray tracer."""

from sigtrace.tracing.refraction import reflect, refract
from sigtrace.tracing.tracer import RayTracer, SceneOracle
from sigtrace.tracing.types import Hit, RayPath, RaySegment, TraceState

__all__ = [
    "Hit",
    "RayPath",
    "RaySegment",
    "RayTracer",
    "SceneOracle",
    "TraceState",
    "reflect",
    "refract",
]
