"""
Scene builder for turning a scene definition into a traceable scene.

Handles building analytic primitives from the configuration, locating the
transmitter, and checking the scene for obvious mistakes.
"""

import logging
from collections import Counter

import numpy as np

from sigtrace.config.schema import (
    RECEIVER_TAG,
    TRANSMITTER_TAG,
    BoxObject,
    PlaneObject,
    PointObject,
    SceneDefinition,
    SphereObject,
)
from sigtrace.scene.oracle import AnalyticScene
from sigtrace.scene.primitives import Box, Plane, Sphere

logger = logging.getLogger(__name__)


class SceneError(Exception):
    """Error building a scene or locating its transmitter."""

    pass


def _object_position(obj) -> tuple[float, float, float]:
    if isinstance(obj, PointObject):
        return obj.position.as_tuple()
    if isinstance(obj, SphereObject):
        return obj.center.as_tuple()
    if isinstance(obj, BoxObject):
        return obj.center
    raise SceneError(f"Object of type '{obj.type}' has no single position")


class SceneBuilder:
    """
    Build analytic scenes for ray tracing.

    Objects tagged "transmitter" and point markers carry no geometry and
    are never intersected.
    """

    def __init__(self, definition: SceneDefinition):
        """
        Initialize scene builder.

        Args:
            definition: Validated scene definition
        """
        self.definition = definition

    def build(self) -> AnalyticScene:
        """
        Build the analytic scene.

        Returns:
            AnalyticScene containing every geometric, non-transmitter object
        """
        primitives = []
        for obj in self.definition.objects:
            if obj.tag == TRANSMITTER_TAG or isinstance(obj, PointObject):
                continue
            if isinstance(obj, PlaneObject):
                primitives.append(Plane(obj.point.as_tuple(), obj.normal.as_tuple(), obj.tag))
            elif isinstance(obj, SphereObject):
                primitives.append(Sphere(obj.center.as_tuple(), obj.radius, obj.tag))
            elif isinstance(obj, BoxObject):
                primitives.append(
                    Box(obj.min_corner.as_tuple(), obj.max_corner.as_tuple(), obj.tag)
                )
            else:
                raise SceneError(f"Unsupported scene object type: {obj.type}")

        logger.info("Built scene with %d surfaces", len(primitives))
        return AnalyticScene(primitives)

    def find_transmitter(self) -> np.ndarray:
        """
        Locate the transmitter.

        Returns:
            Position of the first object tagged "transmitter"

        Raises:
            SceneError: If no transmitter is defined
        """
        for obj in self.definition.objects:
            if obj.tag == TRANSMITTER_TAG:
                position = np.asarray(_object_position(obj), dtype=float)
                logger.info("Transmitter at %s", tuple(position))
                return position
        raise SceneError(f"No object with tag '{TRANSMITTER_TAG}' found")

    def validate_scene(self, interaction_tags: frozenset[str] | None = None) -> list[str]:
        """
        Check the scene for problems that would make every ray fail.

        Args:
            interaction_tags: Material filter the run will use

        Returns:
            List of warnings found in the scene
        """
        warnings = []
        tags = {obj.tag for obj in self.definition.objects}

        if not self.definition.objects:
            warnings.append("Scene has no objects")
            return warnings

        if TRANSMITTER_TAG not in tags:
            warnings.append(f"No object tagged '{TRANSMITTER_TAG}'")

        receivers = [
            obj for obj in self.definition.objects
            if obj.tag == RECEIVER_TAG and not isinstance(obj, PointObject)
        ]
        if not receivers:
            warnings.append(f"No geometric object tagged '{RECEIVER_TAG}'")

        if interaction_tags is not None:
            if RECEIVER_TAG not in interaction_tags:
                warnings.append(
                    f"interaction_tags excludes '{RECEIVER_TAG}'; no ray can reach it"
                )
            unknown = sorted(interaction_tags - tags)
            if unknown:
                warnings.append(f"interaction_tags not present in scene: {', '.join(unknown)}")

        return warnings


def get_scene_info(definition: SceneDefinition) -> dict:
    """
    Get information about a scene definition.

    Args:
        definition: Scene definition

    Returns:
        Dictionary with object counts per tag and per type
    """
    return {
        "objects": len(definition.objects),
        "tags": dict(Counter(obj.tag for obj in definition.objects)),
        "types": dict(Counter(obj.type for obj in definition.objects)),
    }
