"""
Value types shared by the ray tracing core.

Vectors are float64 numpy arrays of shape (3,).
"""

from dataclasses import dataclass
from typing import Iterator

import numpy as np


@dataclass(frozen=True)
class Hit:
    """Result of a scene intersection query."""

    point: np.ndarray
    normal: np.ndarray  # unit, facing the side the ray struck
    distance: float
    tag: str  # full material tag, e.g. "foliage"


@dataclass(frozen=True)
class RaySegment:
    """One hop of a traced ray, from its origin to the surface it hit."""

    origin: np.ndarray
    direction: np.ndarray
    hit_point: np.ndarray
    hit_normal: np.ndarray
    total_distance: float
    ray_distance: float
    hit_tag: str  # first character of the hit material tag

    @classmethod
    def from_hit(cls, state: "TraceState", hit: Hit) -> "RaySegment":
        """Build the segment for `hit`, reached from the current trace state."""
        return cls(
            origin=state.origin,
            direction=state.direction,
            hit_point=hit.point,
            hit_normal=hit.normal,
            total_distance=state.total_distance + hit.distance,
            ray_distance=hit.distance,
            hit_tag=hit.tag[0],
        )


class RayPath:
    """
    Ordered segments of the ray currently being traced.

    A tracer keeps a single RayPath and clears it between rays; a committed
    path leaves the tracer as an immutable snapshot.
    """

    def __init__(self) -> None:
        self._segments: list[RaySegment] = []

    def append(self, segment: RaySegment) -> None:
        self._segments.append(segment)

    def clear(self) -> None:
        self._segments.clear()

    def snapshot(self) -> tuple[RaySegment, ...]:
        """Return the current segments as a tuple detached from this path."""
        return tuple(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[RaySegment]:
        return iter(self._segments)

    def __getitem__(self, index: int) -> RaySegment:
        return self._segments[index]


@dataclass(frozen=True)
class TraceState:
    """Per-ray state threaded through the bounce state machine."""

    origin: np.ndarray
    direction: np.ndarray
    total_distance: float = 0.0
    in_foliage: bool = False
    bounces_remaining: int = 1
    refractions: int = 0

    @classmethod
    def initial(
        cls, origin: np.ndarray, direction: np.ndarray, max_reflections: int
    ) -> "TraceState":
        """State of a fresh ray leaving the transmitter."""
        return cls(
            origin=np.asarray(origin, dtype=float),
            direction=np.asarray(direction, dtype=float),
            total_distance=0.0,
            in_foliage=False,
            bounces_remaining=max_reflections + 1,
        )
