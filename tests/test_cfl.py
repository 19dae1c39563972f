"""Tests for the CFL step-size control."""

import numpy as np
import pytest

from boussinesq.cfl import compute_cfl_factor, max_velocities
from boussinesq.core.grid import GridGeometry


@pytest.fixture
def grid():
    return GridGeometry(n_z=21, n_n=4, aspect=1.0)


def single_mode(grid, n, amplitude):
    psi = np.zeros(grid.shape)
    psi[n] = amplitude * np.sin(np.pi * grid.z)
    return psi


class TestMaxVelocities:

    def test_at_rest(self, grid):
        assert max_velocities(np.zeros(grid.shape), grid) == (0.0, 0.0)

    def test_single_mode_vertical_velocity(self, grid):
        # w = k₁ψ₁ cos(πx); |w| peaks at x = 0 and z = 1/2
        psi = single_mode(grid, 1, 2.0)
        _, w_max = max_velocities(psi, grid)
        assert w_max == pytest.approx(2.0 * np.pi, rel=1e-12)

    def test_single_mode_horizontal_velocity(self, grid):
        # u = ψ₁' sin(πx); peak of the centered derivative next to the walls
        psi = single_mode(grid, 1, 2.0)
        u_max, _ = max_velocities(psi, grid)
        dz = grid.dz
        expected = 2.0 * np.sin(2 * np.pi * dz) / (2 * dz) * np.max(np.sin(np.pi * grid.x))
        assert u_max == pytest.approx(expected, rel=1e-12)

    def test_mean_mode_ignored(self, grid):
        psi = np.zeros(grid.shape)
        psi[0] = np.sin(np.pi * grid.z)
        u_max, w_max = max_velocities(psi, grid)
        assert u_max == pytest.approx(0.0, abs=1e-12)
        assert w_max == 0.0


class TestCflFactor:

    def test_at_rest_is_one(self, grid):
        assert compute_cfl_factor(np.zeros(grid.shape), grid, dt=1.0) == 1.0

    def test_within_bound_is_one(self, grid):
        psi = single_mode(grid, 1, 1e-3)
        assert compute_cfl_factor(psi, grid, dt=1e-4) == 1.0

    def test_breach_scales_to_bound(self, grid):
        psi = single_mode(grid, 1, 10.0)
        dt = 0.1
        f = compute_cfl_factor(psi, grid, dt, safety=0.9)
        assert 0.0 < f < 1.0
        u_max, w_max = max_velocities(psi, grid)
        new_dt = f * dt
        assert u_max * new_dt <= 0.9 * grid.dx * (1 + 1e-12)
        assert w_max * new_dt <= 0.9 * grid.dz * (1 + 1e-12)
        # One of the two bounds is met exactly
        assert max(u_max * new_dt / grid.dx, w_max * new_dt / grid.dz) == pytest.approx(0.9)

    def test_factor_scales_inversely_with_dt(self, grid):
        psi = single_mode(grid, 2, 10.0)
        f1 = compute_cfl_factor(psi, grid, 0.1)
        f2 = compute_cfl_factor(psi, grid, 0.2)
        assert f2 == pytest.approx(f1 / 2)
