"""Unit tests for uniform unit-sphere direction sampling."""

import numpy as np
import pytest

from sigtrace.tracing.sampling import UnitSphereSampler

N_SAMPLES = 20000


@pytest.fixture
def directions() -> np.ndarray:
    return UnitSphereSampler(seed=1234).sample_many(N_SAMPLES)


def test_shape_and_unit_length(directions: np.ndarray):
    """Test that samples are unit vectors of shape (n, 3)."""
    assert directions.shape == (N_SAMPLES, 3)
    np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-12)


def test_mean_direction_vanishes(directions: np.ndarray):
    """Test that there is no directional bias."""
    assert np.linalg.norm(directions.mean(axis=0)) < 0.03


@pytest.mark.parametrize("axis", [0, 1, 2])
def test_component_marginal_is_uniform(directions: np.ndarray, axis: int):
    """Test that each component is uniform on [-1, 1] (Archimedes' hat-box theorem)."""
    values = np.sort(directions[:, axis])
    empirical = np.arange(1, N_SAMPLES + 1) / N_SAMPLES
    uniform_cdf = (values + 1.0) / 2.0
    ks_statistic = np.max(np.abs(empirical - uniform_cdf))
    assert ks_statistic < 0.02

    counts, _ = np.histogram(values, bins=10, range=(-1.0, 1.0))
    np.testing.assert_allclose(counts / N_SAMPLES, 0.1, atol=0.015)


def test_seeded_sampler_is_reproducible():
    """Test that the same seed yields the same directions."""
    a = UnitSphereSampler(seed=99).sample_many(50)
    b = UnitSphereSampler(seed=99).sample_many(50)
    np.testing.assert_array_equal(a, b)


def test_single_sample():
    """Test sampling one direction."""
    d = UnitSphereSampler(seed=3).sample()
    assert d.shape == (3,)
    assert np.linalg.norm(d) == pytest.approx(1.0)
