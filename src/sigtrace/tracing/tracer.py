"""
Single-ray path tracer.

Drives the bounce loop for one ray: query the scene, record the segment,
classify the hit, and repeat until the ray succeeds, is absorbed, leaves
the scene, or runs out of bounce budget.
"""

import logging
from typing import Protocol

import numpy as np

from sigtrace.config.schema import TracingParams
from sigtrace.tracing.classifier import Absorbed, Refract, Success, classify_hit
from sigtrace.tracing.types import Hit, RayPath, RaySegment, TraceState

logger = logging.getLogger(__name__)


class SceneOracle(Protocol):
    """Scene intersection query consumed by the tracer."""

    def cast_ray(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        max_distance: float,
        tags: frozenset[str] | None = None,
    ) -> Hit | None:
        """Return the nearest hit within `max_distance` among surfaces in `tags`."""
        ...


class RayTracer:
    """
    Trace rays through a scene one at a time.

    The tracer reuses a single RayPath between rays, so it must not be
    shared between threads; create one tracer per worker.
    """

    def __init__(self, oracle: SceneOracle, params: TracingParams):
        """
        Initialize tracer.

        Args:
            oracle: Scene intersection oracle
            params: Tracing parameters
        """
        self.oracle = oracle
        self.params = params
        self.path = RayPath()

    def trace(self, origin: np.ndarray, direction: np.ndarray) -> tuple[bool, RayPath]:
        """
        Trace one ray from `origin` along unit `direction`.

        Returns:
            (committed, path). `committed` is True only when the ray reached
            the receiver from air; the path is valid until the next call.
        """
        self.path.clear()
        state = TraceState.initial(origin, direction, self.params.max_reflections)
        max_refractions = self.params.max_refractions

        while state.bounces_remaining > 0:
            hit = self.oracle.cast_ray(
                state.origin,
                state.direction,
                self.params.max_ray_distance,
                self.params.interaction_tags,
            )
            if hit is None:
                logger.debug("Ray left the scene after %d segments", len(self.path))
                return False, self.path

            self.path.append(RaySegment.from_hit(state, hit))
            outcome = classify_hit(hit, state, self.params)

            if isinstance(outcome, Success):
                return True, self.path
            if isinstance(outcome, Absorbed):
                logger.debug("Ray absorbed at '%s' after %d segments", hit.tag, len(self.path))
                return False, self.path

            state = outcome.state
            if (
                isinstance(outcome, Refract)
                and max_refractions is not None
                and state.refractions > max_refractions
            ):
                logger.debug("Ray discarded after %d foliage crossings", state.refractions)
                return False, self.path

        logger.debug("Ray exhausted its bounce budget")
        return False, self.path
