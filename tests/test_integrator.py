"""Tests for the Adams-Bashforth update."""

import numpy as np
import pytest

from boussinesq.kernels.numerics import adams_bashforth, d2dz2, ddz
from boussinesq.kernels.reference import ReferenceBackend


class TestFormula:

    def test_fixed_step_weights(self):
        # f = 1: dt·(3/2·cur - 1/2·prev)
        assert adams_bashforth(2.0, 4.0, 1.0, 0.1) == pytest.approx(0.1 * (3.0 - 2.0))

    @pytest.mark.parametrize("f", [0.25, 0.5, 0.9])
    def test_variable_step_weights(self, f):
        # Equivalent form dt·[(3/2 + δ)·cur - (1/2 + δ)·prev], δ = (f - 1)/2
        cur, prev, dt = 1.3, -0.7, 1e-3
        delta = (f - 1.0) / 2.0
        expected = dt * ((1.5 + delta) * cur - (0.5 + delta) * prev)
        assert adams_bashforth(cur, prev, f, dt) == pytest.approx(expected)

    def test_exact_for_linear_derivative(self):
        # dx/dt = t: the two-level scheme is exact, including across a step change
        t_prev, t, x = 0.0, 0.1, 0.005
        for dt in (0.1, 0.1, 0.05, 0.05, 0.02):
            f = dt / (t - t_prev)
            x += adams_bashforth(t, t_prev, f, dt)
            t_prev, t = t, t + dt
        assert x == pytest.approx(t**2 / 2, rel=1e-12)


class TestDifferences:

    def test_ddz_exact_on_quadratic(self):
        z = np.linspace(0.0, 1.0, 11)
        f = (z**2)[None, :]
        np.testing.assert_allclose(ddz(f, 0.1)[0], 2 * z[1:-1])

    def test_d2dz2_exact_on_quadratic(self):
        z = np.linspace(0.0, 1.0, 11)
        f = (3 * z**2)[None, :]
        np.testing.assert_allclose(d2dz2(f, 100.0)[0], 6.0)


class TestIntegrate:

    def test_updates_every_field(self, small_grid, dd_terms, random_state):
        state = random_state(small_grid, double_diffusive=True, seed=31)
        backend = ReferenceBackend(small_grid, dd_terms)
        backend.load_state(state)
        f, dt = 0.8, 1e-3
        backend.integrate(f, dt)
        for name, dname in (("tmp", "dtmp"), ("omg", "domg"), ("xi", "dxi")):
            d = getattr(state, dname)
            expected = getattr(state, name) + ((2 + f) * d[0] - f * d[1]) * dt / 2
            np.testing.assert_allclose(backend.read(name), expected, rtol=1e-12, atol=1e-14)

    def test_psi_not_integrated(self, small_grid, terms, random_state):
        state = random_state(small_grid, seed=32)
        backend = ReferenceBackend(small_grid, terms)
        backend.load_state(state)
        backend.integrate(1.0, 1e-2)
        np.testing.assert_array_equal(backend.read("psi"), state.psi)

    def test_uses_current_slot_after_advance(self, small_grid, terms, random_state):
        state = random_state(small_grid, seed=33)
        backend = ReferenceBackend(small_grid, terms)
        backend.load_state(state)
        backend.advance()
        backend.integrate(1.0, 1e-2)
        expected = state.tmp + (1.5 * state.dtmp[1] - 0.5 * state.dtmp[0]) * 1e-2
        np.testing.assert_allclose(backend.read("tmp"), expected, rtol=1e-12, atol=1e-14)

    def test_walls_fixed(self, small_grid, terms, random_state):
        state = random_state(small_grid, seed=34)
        backend = ReferenceBackend(small_grid, terms)
        backend.load_state(state)
        backend.integrate(1.0, 1e-2)
        tmp = backend.read("tmp")
        np.testing.assert_array_equal(tmp[:, 0], state.tmp[:, 0])
        np.testing.assert_array_equal(tmp[:, -1], state.tmp[:, -1])
