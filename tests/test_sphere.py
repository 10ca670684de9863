"""Tests for sphere geometry and the region kernel."""

import math

import numpy as np
import pytest

from toporegion._sphere import (
    cartesian_to_spherical,
    scaled_crp_mass,
    scaled_density,
    spherical_to_cartesian,
    unit_directions,
)


def test_poles():
    np.testing.assert_allclose(spherical_to_cartesian(90.0, 0.0), [0.0, 0.0, 1.0], atol=1e-12)
    np.testing.assert_allclose(spherical_to_cartesian(-90.0, 0.0), [0.0, 0.0, -1.0], atol=1e-12)


def test_equator_prime_meridian():
    np.testing.assert_allclose(spherical_to_cartesian(0.0, 0.0), [1.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(spherical_to_cartesian(0.0, 90.0), [0.0, 1.0, 0.0], atol=1e-12)


def test_unit_length():
    v = spherical_to_cartesian(37.5, -122.3)
    assert math.isclose(float(np.linalg.norm(v)), 1.0)


def test_round_trip_degrees():
    lat, lon = cartesian_to_spherical(3.0 * spherical_to_cartesian(-33.9, 151.2))
    assert lat == pytest.approx(-33.9)
    assert lon == pytest.approx(151.2)


def test_cartesian_to_spherical_zero():
    with pytest.raises(ValueError):
        cartesian_to_spherical(np.zeros(3))


def test_unit_directions_keeps_zero_rows():
    out = unit_directions(np.array([[0.0, 0.0, 0.0], [0.0, 3.0, 4.0]]))
    np.testing.assert_array_equal(out[0], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(out[1], [0.0, 0.6, 0.8])


def test_density_peaks_at_mean_direction():
    north = spherical_to_cartesian(90.0, 0.0)
    south = spherical_to_cartesian(-90.0, 0.0)
    candidates = np.vstack([north, south])
    # Unnormalized mean: the kernel only looks at its direction.
    density = scaled_density(candidates, np.array([5.0 * north]), kappa=10.0)
    assert density.shape == (1, 2)
    assert density[0, 0] == pytest.approx(1.0)
    assert density[0, 1] == pytest.approx(math.exp(-20.0))


def test_density_zero_mean_is_flat():
    candidates = np.vstack([spherical_to_cartesian(10.0, 20.0), spherical_to_cartesian(-5.0, 0.0)])
    density = scaled_density(candidates, np.zeros((1, 3)), kappa=3.0)
    np.testing.assert_allclose(density, [[math.exp(-3.0), math.exp(-3.0)]])


def test_crp_mass_matches_unscaled_form():
    kappa = 4.0
    unscaled = 2.0 * 4 * math.pi * math.sinh(kappa) / kappa
    assert scaled_crp_mass(2.0, kappa) == pytest.approx(unscaled * math.exp(-kappa))


def test_crp_mass_finite_for_large_kappa():
    mass = scaled_crp_mass(1.0, 5000.0)
    assert math.isfinite(mass)
    assert mass == pytest.approx(2.0 * math.pi / 5000.0)
