"""
Analytic scene primitives with ray intersection.

Each primitive returns the nearest intersection `(t, outward_normal)` with
`t > SURFACE_EPSILON` along a unit direction, or None. The epsilon keeps a
ray that starts on a surface (after a reflection) from hitting it again;
plane and box faces also require the origin to sit more than
SURFACE_EPSILON off the face, measured along its normal.
"""

from dataclasses import dataclass

import numpy as np

SURFACE_EPSILON = 1e-6
_PARALLEL_EPS = 1e-12


def _vec(v) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def _clears_surface(t: float, d_normal: float) -> bool:
    """
    True if a hit at `t` is a real surface crossing.

    The origin's distance to the surface is measured along the normal
    (`t * d_normal`), so a grazing ray that starts on a face is not sent
    back to it by the division with a tiny `d_normal`.
    """
    return t > SURFACE_EPSILON and abs(t * d_normal) > SURFACE_EPSILON


@dataclass(frozen=True)
class Plane:
    """Infinite plane through `point` with normal `normal`."""

    point: np.ndarray
    normal: np.ndarray
    tag: str

    def __post_init__(self):
        n = _vec(self.normal)
        object.__setattr__(self, "point", _vec(self.point))
        object.__setattr__(self, "normal", n / np.linalg.norm(n))

    def intersect(self, origin: np.ndarray, direction: np.ndarray) -> tuple[float, np.ndarray] | None:
        denom = float(np.dot(self.normal, direction))
        if abs(denom) < _PARALLEL_EPS:
            return None
        t = float(np.dot(self.normal, self.point - origin)) / denom
        if not _clears_surface(t, denom):
            return None
        return t, self.normal


@dataclass(frozen=True)
class Sphere:
    """Sphere with `center` and `radius`."""

    center: np.ndarray
    radius: float
    tag: str

    def __post_init__(self):
        object.__setattr__(self, "center", _vec(self.center))

    def intersect(self, origin: np.ndarray, direction: np.ndarray) -> tuple[float, np.ndarray] | None:
        oc = origin - self.center
        b = float(np.dot(oc, direction))
        c = float(np.dot(oc, oc)) - self.radius * self.radius
        disc = b * b - c
        if disc < 0.0:
            return None
        sq = np.sqrt(disc)
        for t in (-b - sq, -b + sq):
            if t > SURFACE_EPSILON:
                p = origin + t * direction
                return float(t), (p - self.center) / self.radius
        return None


@dataclass(frozen=True)
class Box:
    """Axis-aligned box; rays may hit it from outside or from inside."""

    min_corner: np.ndarray
    max_corner: np.ndarray
    tag: str

    def __post_init__(self):
        object.__setattr__(self, "min_corner", _vec(self.min_corner))
        object.__setattr__(self, "max_corner", _vec(self.max_corner))

    def intersect(self, origin: np.ndarray, direction: np.ndarray) -> tuple[float, np.ndarray] | None:
        t_near, t_far = -np.inf, np.inf
        near_axis = far_axis = 0
        near_sign = far_sign = 1.0

        for axis in range(3):
            o, d = origin[axis], direction[axis]
            lo, hi = self.min_corner[axis], self.max_corner[axis]
            if abs(d) < _PARALLEL_EPS:
                if o < lo or o > hi:
                    return None
                continue
            t0, t1 = (lo - o) / d, (hi - o) / d
            if t0 > t1:
                t0, t1 = t1, t0
            # Outward normal is -sign(d) on the entry face, +sign(d) on the exit face
            if t0 > t_near:
                t_near, near_axis, near_sign = t0, axis, -np.sign(d)
            if t1 < t_far:
                t_far, far_axis, far_sign = t1, axis, np.sign(d)
            if t_near > t_far:
                return None

        if _clears_surface(t_near, direction[near_axis]):
            t, axis, sign = t_near, near_axis, near_sign
        elif _clears_surface(t_far, direction[far_axis]):
            t, axis, sign = t_far, far_axis, far_sign
        else:
            return None

        normal = np.zeros(3)
        normal[axis] = sign
        return float(t), normal
