"""Unit-sphere geometry and the von Mises-Fisher kernel."""

from __future__ import annotations

import math

import numpy as np

FOUR_PI: float = 4.0 * math.pi


def spherical_to_cartesian(latitude: float, longitude: float) -> np.ndarray:
    """Convert a (latitude, longitude) pair in degrees to a unit vector."""
    lat = math.radians(latitude)
    lon = math.radians(longitude)
    cos_lat = math.cos(lat)
    return np.array(
        [cos_lat * math.cos(lon), cos_lat * math.sin(lon), math.sin(lat)],
        dtype=np.float64,
    )


def cartesian_to_spherical(vector: np.ndarray) -> tuple[float, float]:
    """Inverse of spherical_to_cartesian for any nonzero vector."""
    x, y, z = (float(c) for c in vector)
    norm = math.sqrt(x * x + y * y + z * z)
    if norm == 0.0:
        raise ValueError("zero vector has no direction")
    return math.degrees(math.asin(z / norm)), math.degrees(math.atan2(y, x))


def unit_directions(means: np.ndarray) -> np.ndarray:
    """Normalize each row of means; zero rows stay zero."""
    norms = np.linalg.norm(means, axis=1, keepdims=True)
    out = np.zeros_like(means)
    np.divide(means, norms, out=out, where=norms > 0.0)
    return out


def scaled_density(
    candidates: np.ndarray, means: np.ndarray, kappa: float
) -> np.ndarray:
    """Kernel value of every candidate under every region mean.

    Returns an (n_regions, n_candidates) array of
    ``exp(kappa * (x . mu_hat - 1))``, i.e. the unnormalized vMF density
    ``exp(kappa * x . mu_hat)`` scaled by ``exp(-kappa)``. A region with a
    zero mean has no direction and contributes ``x . mu_hat = 0``.
    """
    dots = unit_directions(means) @ candidates.T
    return np.exp(kappa * (dots - 1.0))


def scaled_crp_mass(crp_alpha: float, kappa: float) -> float:
    """New-region mass ``crp_alpha * 4 pi sinh(kappa) / kappa``, scaled like scaled_density.

    ``4 pi sinh(k) / k * exp(-k) == 2 pi (1 - exp(-2k)) / k``, which stays
    finite for any positive kappa.
    """
    return crp_alpha * 2.0 * math.pi * -math.expm1(-2.0 * kappa) / kappa
