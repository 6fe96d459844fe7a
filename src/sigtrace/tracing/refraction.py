"""
Reflection and refraction of ray directions at a surface.

Refraction uses the vector form of Snell's law with the relative
refractive index derived from relative permittivities:

    n = sqrt(eps_incident / eps_exit)
    T = n*D + (n*cos_i - cos_t)*N

where cos_i = -N.D and cos_t = sqrt(1 - n^2 (1 - cos_i^2)). When
n^2 (1 - cos_i^2) > 1 the ray is totally internally reflected.

The normal must face the incoming ray (N.D <= 0).
"""

import math

import numpy as np


def reflect(direction: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Mirror `direction` about the plane with unit `normal`."""
    return direction - 2.0 * np.dot(direction, normal) * normal


def refract(
    incident: np.ndarray,
    normal: np.ndarray,
    eps_incident: float,
    eps_exit: float,
) -> np.ndarray:
    """
    Refract a unit direction through a surface.

    Args:
        incident: Unit direction of the incoming ray
        normal: Unit surface normal facing the incoming ray
        eps_incident: Relative permittivity of the medium the ray leaves
        eps_exit: Relative permittivity of the medium the ray enters

    Returns:
        Unit direction of the refracted ray, or the mirror reflection when
        the incidence exceeds the critical angle
    """
    n = math.sqrt(eps_incident / eps_exit)
    cos_i = -float(np.dot(normal, incident))
    sin2_t = n * n * (1.0 - cos_i * cos_i)

    if sin2_t > 1.0:
        return reflect(incident, normal)

    cos_t = math.sqrt(1.0 - sin2_t)
    t = n * incident + (n * cos_i - cos_t) * normal
    return t / np.linalg.norm(t)
