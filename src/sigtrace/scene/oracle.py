"""
AnalyticScene: scene intersection oracle over analytic primitives.

The scene is immutable after construction, so concurrent cast_ray calls
from tracing threads are safe.
"""

import logging
from typing import Iterable, Protocol

import numpy as np

from sigtrace.tracing.types import Hit

logger = logging.getLogger(__name__)


class Primitive(Protocol):
    tag: str

    def intersect(self, origin: np.ndarray, direction: np.ndarray) -> tuple[float, np.ndarray] | None:
        ...


class AnalyticScene:
    """Nearest-hit queries against a fixed set of tagged primitives."""

    def __init__(self, primitives: Iterable[Primitive]):
        self.primitives: tuple[Primitive, ...] = tuple(primitives)
        logger.debug("Scene built with %d primitives", len(self.primitives))

    @property
    def tags(self) -> set[str]:
        """Material tags present in the scene."""
        return {p.tag for p in self.primitives}

    def cast_ray(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        max_distance: float,
        tags: frozenset[str] | None = None,
    ) -> Hit | None:
        """
        Find the nearest surface hit by a ray.

        Args:
            origin: Ray origin
            direction: Unit ray direction
            max_distance: Hits farther than this are ignored
            tags: Only surfaces with these material tags are considered
                  (None = all)

        Returns:
            Hit with the normal facing the incoming ray, or None
        """
        origin = np.asarray(origin, dtype=float)
        direction = np.asarray(direction, dtype=float)

        best_t = np.inf
        best: tuple[Primitive, np.ndarray] | None = None
        for prim in self.primitives:
            if tags is not None and prim.tag not in tags:
                continue
            res = prim.intersect(origin, direction)
            if res is None:
                continue
            t, normal = res
            if t < best_t and t <= max_distance:
                best_t = t
                best = (prim, normal)

        if best is None:
            return None

        prim, normal = best
        if np.dot(normal, direction) > 0.0:
            normal = -normal
        return Hit(
            point=origin + best_t * direction,
            normal=normal,
            distance=float(best_t),
            tag=prim.tag,
        )
