"""Unit tests for SceneBuilder - scene construction and transmitter lookup."""

import numpy as np
import pytest

from sigtrace.config.schema import SceneDefinition
from sigtrace.scene.builder import SceneBuilder, SceneError, get_scene_info
from sigtrace.scene.primitives import Box, Plane, Sphere


def _definition(*objects: dict) -> SceneDefinition:
    return SceneDefinition.model_validate({"objects": list(objects)})


TRANSMITTER = {"type": "point", "tag": "transmitter", "position": {"x": 1.0, "y": 2.0, "z": 3.0}}
RECEIVER = {"type": "sphere", "tag": "receiver", "center": {"x": 10.0, "y": 0.0}, "radius": 1.0}
GROUND = {
    "type": "plane",
    "tag": "ground",
    "point": {"x": 0.0, "y": 0.0, "z": 0.0},
    "normal": {"x": 0.0, "y": 0.0, "z": 1.0},
}
FOLIAGE = {
    "type": "box",
    "tag": "foliage",
    "min_corner": {"x": 4.0, "y": -1.0, "z": 0.0},
    "max_corner": {"x": 6.0, "y": 1.0, "z": 5.0},
}


class TestBuild:
    """Test primitive construction."""

    def test_build_creates_primitives(self):
        """Test that each geometric object becomes a primitive."""
        scene = SceneBuilder(_definition(TRANSMITTER, RECEIVER, GROUND, FOLIAGE)).build()

        kinds = sorted(type(p).__name__ for p in scene.primitives)
        assert kinds == ["Box", "Plane", "Sphere"]
        assert scene.tags == {"receiver", "ground", "foliage"}

    def test_transmitter_geometry_is_not_intersectable(self):
        """Test that a transmitter sphere is kept out of the scene."""
        tx_sphere = {"type": "sphere", "tag": "transmitter", "center": {"x": 0.0, "y": 0.0}, "radius": 0.5}
        scene = SceneBuilder(_definition(tx_sphere, RECEIVER)).build()

        assert len(scene.primitives) == 1
        assert isinstance(scene.primitives[0], Sphere)
        assert scene.primitives[0].tag == "receiver"

    def test_built_primitive_values(self):
        """Test that coordinates are carried through."""
        scene = SceneBuilder(_definition(GROUND, FOLIAGE)).build()
        plane = next(p for p in scene.primitives if isinstance(p, Plane))
        box = next(p for p in scene.primitives if isinstance(p, Box))

        np.testing.assert_allclose(plane.normal, [0.0, 0.0, 1.0])
        np.testing.assert_allclose(box.min_corner, [4.0, -1.0, 0.0])
        np.testing.assert_allclose(box.max_corner, [6.0, 1.0, 5.0])


class TestFindTransmitter:
    """Test transmitter discovery."""

    def test_point_transmitter(self):
        """Test a point marker transmitter."""
        position = SceneBuilder(_definition(TRANSMITTER, RECEIVER)).find_transmitter()
        np.testing.assert_allclose(position, [1.0, 2.0, 3.0])

    def test_box_transmitter_uses_center(self):
        """Test that a box-shaped transmitter is located at its center."""
        tx_box = {**FOLIAGE, "tag": "transmitter"}
        position = SceneBuilder(_definition(tx_box)).find_transmitter()
        np.testing.assert_allclose(position, [5.0, 0.0, 2.5])

    def test_missing_transmitter_raises(self):
        """Test that a scene without transmitter is rejected."""
        with pytest.raises(SceneError, match="transmitter"):
            SceneBuilder(_definition(RECEIVER, GROUND)).find_transmitter()

    def test_plane_transmitter_raises(self):
        """Test that a plane has no single position."""
        with pytest.raises(SceneError, match="no single position"):
            SceneBuilder(_definition({**GROUND, "tag": "transmitter"})).find_transmitter()


class TestValidateScene:
    """Test scene warnings."""

    def test_complete_scene_has_no_warnings(self):
        """Test a scene with transmitter and receiver."""
        builder = SceneBuilder(_definition(TRANSMITTER, RECEIVER, GROUND))
        assert builder.validate_scene() == []

    def test_empty_scene(self):
        """Test that an empty scene is reported."""
        assert SceneBuilder(_definition()).validate_scene() == ["Scene has no objects"]

    def test_missing_receiver_and_transmitter(self):
        """Test warnings for missing receiver and transmitter."""
        warnings = SceneBuilder(_definition(GROUND)).validate_scene()
        assert any("transmitter" in w for w in warnings)
        assert any("receiver" in w for w in warnings)

    def test_filter_excluding_receiver(self):
        """Test a material filter that would make every ray miss the receiver."""
        builder = SceneBuilder(_definition(TRANSMITTER, RECEIVER, GROUND))
        warnings = builder.validate_scene(frozenset({"ground", "tree"}))
        assert any("excludes 'receiver'" in w for w in warnings)
        assert any("tree" in w for w in warnings)


def test_get_scene_info():
    """Test object counts per tag and type."""
    info = get_scene_info(_definition(TRANSMITTER, RECEIVER, GROUND, FOLIAGE, {**FOLIAGE}))
    assert info["objects"] == 5
    assert info["tags"]["foliage"] == 2
    assert info["types"] == {"point": 1, "sphere": 1, "plane": 1, "box": 2}
