"""
Unit tests for refraction.py - reflection and Snell's law refraction.

Tests cover:
- Mirror reflection
- Straight pass-through for equal permittivities
- Bending toward/away from the normal
- Total internal reflection fallback
"""

import math

import numpy as np
import pytest

from sigtrace.tracing.refraction import reflect, refract


def _unit(*v) -> np.ndarray:
    a = np.array(v, dtype=float)
    return a / np.linalg.norm(a)


def _sin_to_normal(d: np.ndarray, normal: np.ndarray) -> float:
    return float(np.linalg.norm(np.cross(d, normal)))


class TestReflect:
    """Test mirror reflection about a normal."""

    def test_reflect_off_floor(self):
        """Test a 45 degree ray bouncing off a horizontal surface."""
        d = _unit(1.0, 0.0, -1.0)
        out = reflect(d, np.array([0.0, 0.0, 1.0]))
        np.testing.assert_allclose(out, _unit(1.0, 0.0, 1.0), atol=1e-12)

    def test_reflect_head_on(self):
        """Test that a head-on ray is sent straight back."""
        d = np.array([0.0, -1.0, 0.0])
        np.testing.assert_allclose(reflect(d, np.array([0.0, 1.0, 0.0])), -d)

    def test_reflect_preserves_length(self):
        """Test that reflection keeps the direction a unit vector."""
        d = _unit(0.3, -0.8, 0.5)
        out = reflect(d, _unit(0.1, 1.0, -0.2))
        assert np.linalg.norm(out) == pytest.approx(1.0)


class TestRefractPassThrough:
    """Test the equal-permittivity limit."""

    @pytest.mark.parametrize(
        "direction,normal",
        [
            ((1.0, -1.0, 0.3), (0.0, 1.0, 0.0)),
            ((0.0, 0.0, -1.0), (0.0, 0.0, 1.0)),
            ((0.2, 0.9, -0.4), (0.0, -1.0, 0.0)),
            ((-0.7, 0.1, -0.05), (1.0, 0.0, 0.0)),
        ],
    )
    @pytest.mark.parametrize("eps", [1.0, 4.0, 80.0])
    def test_equal_permittivity_is_straight(self, direction, normal, eps):
        """Test that equal permittivities leave the direction unchanged."""
        d = _unit(*direction)
        out = refract(d, np.array(normal, dtype=float), eps, eps)
        np.testing.assert_allclose(out, d, atol=1e-12)

    def test_normal_incidence_is_straight(self):
        """Test that a ray along the normal never bends."""
        d = np.array([0.0, 0.0, -1.0])
        out = refract(d, np.array([0.0, 0.0, 1.0]), 1.0, 4.0)
        np.testing.assert_allclose(out, d, atol=1e-12)


class TestRefractSnell:
    """Test bending according to Snell's law."""

    def test_air_to_foliage_bends_toward_normal(self):
        """Test n1 sin(i) = n2 sin(t) entering a denser medium."""
        normal = np.array([0.0, 0.0, 1.0])
        d = _unit(math.sin(math.radians(60)), 0.0, -math.cos(math.radians(60)))

        out = refract(d, normal, 1.0, 4.0)

        # n = sqrt(1/4) = 0.5, so sin(t) = 0.5 * sin(60 deg)
        assert _sin_to_normal(out, normal) == pytest.approx(0.5 * math.sin(math.radians(60)))
        assert out[2] < 0.0
        assert np.linalg.norm(out) == pytest.approx(1.0)

    def test_foliage_to_air_bends_away_from_normal(self):
        """Test that leaving a denser medium increases the angle."""
        normal = np.array([0.0, 0.0, 1.0])
        d = _unit(math.sin(math.radians(20)), 0.0, -math.cos(math.radians(20)))

        out = refract(d, normal, 4.0, 1.0)

        assert _sin_to_normal(out, normal) == pytest.approx(2.0 * math.sin(math.radians(20)))
        assert _sin_to_normal(out, normal) > _sin_to_normal(d, normal)

    def test_refracted_stays_in_plane_of_incidence(self):
        """Test that refraction keeps the ray in the plane spanned by d and n."""
        normal = np.array([0.0, 1.0, 0.0])
        d = _unit(0.4, -1.0, 0.0)
        out = refract(d, normal, 1.0, 2.5)
        assert out[2] == pytest.approx(0.0, abs=1e-12)


class TestTotalInternalReflection:
    """Test the total internal reflection branch."""

    def test_grazing_exit_reflects(self):
        """Test that beyond the critical angle the mirror reflection is returned."""
        normal = np.array([0.0, 1.0, 0.0])
        d = _unit(1.0, -0.2, 0.0)

        # n = 2, critical angle 30 deg; this ray is ~79 deg from the normal
        out = refract(d, normal, 4.0, 1.0)

        np.testing.assert_allclose(out, reflect(d, normal), atol=1e-12)

    def test_just_below_critical_angle_transmits(self):
        """Test that a ray just inside the critical angle still refracts."""
        normal = np.array([0.0, 0.0, 1.0])
        angle = math.radians(29.0)
        d = np.array([math.sin(angle), 0.0, -math.cos(angle)])

        out = refract(d, normal, 4.0, 1.0)

        assert out[2] < 0.0
        assert not np.allclose(out, reflect(d, normal))
