"""Analytic scenes and scene construction for ray tracing."""

from sigtrace.scene.builder import SceneBuilder, SceneError
from sigtrace.scene.oracle import AnalyticScene

__all__ = [
    "AnalyticScene",
    "SceneBuilder",
    "SceneError",
]
