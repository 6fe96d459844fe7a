"""Uniform direction sampling on the unit sphere."""

import numpy as np


class UnitSphereSampler:
    """
    Draw isotropic unit vectors.

    Normalizing independent standard normal triples gives a distribution
    that is uniform on the sphere surface.
    """

    def __init__(self, seed: int | None = None, rng: np.random.Generator | None = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self) -> np.ndarray:
        """Return one unit vector."""
        return self.sample_many(1)[0]

    def sample_many(self, n: int) -> np.ndarray:
        """Return an (n, 3) array of unit vectors."""
        v = self.rng.standard_normal((n, 3))
        norms = np.linalg.norm(v, axis=1, keepdims=True)
        # Resample the (measure-zero) degenerate draws
        bad = norms[:, 0] < 1e-12
        while np.any(bad):
            v[bad] = self.rng.standard_normal((int(bad.sum()), 3))
            norms[bad] = np.linalg.norm(v[bad], axis=1, keepdims=True)
            bad = norms[:, 0] < 1e-12
        return v / norms
