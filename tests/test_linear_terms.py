"""Tests for the linear tendencies: diffusion, buoyancy, linearized advection."""

from math import pi

import numpy as np
import pytest

from boussinesq.core.grid import GridGeometry
from boussinesq.kernels.protocol import TermParams
from boussinesq.kernels.reference import ReferenceBackend
from boussinesq.kernels.reference.linear import compute_linear_derivatives


def loop_linear(state, geometry, terms, linear):
    """Direct per-entry transcription of the linear equations."""
    n_n, n_z = geometry.shape
    dtmp = np.zeros(geometry.shape)
    domg = np.zeros(geometry.shape)
    dxi = np.zeros(geometry.shape)
    tmp, omg, psi, xi = state.tmp, state.omg, state.psi, state.xi
    for n in range(1 if linear else 0, n_n):
        kn = n * pi / geometry.aspect
        for k in range(1, n_z - 1):
            d2 = lambda f: (f[n, k + 1] - 2 * f[n, k] + f[n, k - 1]) / geometry.dz**2
            dtmp[n, k] = d2(tmp) - kn**2 * tmp[n, k]
            if linear:
                dtmp[n, k] += -terms.temperature_gradient * kn * psi[n, k]
            domg[n, k] = terms.prandtl * (d2(omg) - kn**2 * omg[n, k] + terms.rayleigh * kn * tmp[n, k])
            if terms.double_diffusive:
                dxi[n, k] = terms.tau * (d2(xi) - kn**2 * xi[n, k])
                if linear:
                    dxi[n, k] += -terms.solute_gradient * kn * psi[n, k]
                domg[n, k] += -terms.rayleigh_xi * terms.tau * terms.prandtl * kn * xi[n, k]
    return dtmp, domg, dxi


def current_slot(backend, name):
    return backend.read(name)[backend.current]


@pytest.mark.parametrize("linear", [False, True])
def test_matches_loop(small_grid, terms, random_state, linear):
    state = random_state(small_grid, seed=11)
    backend = ReferenceBackend(small_grid, terms)
    backend.load_state(state)
    backend.compute_linear_derivatives(linear)

    dtmp, domg, _ = loop_linear(state, small_grid, terms, linear)
    n0 = 1 if linear else 0
    np.testing.assert_allclose(current_slot(backend, "dtmp")[n0:, 1:-1], dtmp[n0:, 1:-1], rtol=1e-12, atol=1e-9)
    np.testing.assert_allclose(current_slot(backend, "domg")[n0:, 1:-1], domg[n0:, 1:-1], rtol=1e-12, atol=1e-9)


@pytest.mark.parametrize("linear", [False, True])
def test_double_diffusive_matches_loop(small_grid, dd_terms, random_state, linear):
    state = random_state(small_grid, double_diffusive=True, seed=12)
    backend = ReferenceBackend(small_grid, dd_terms)
    backend.load_state(state)
    backend.compute_linear_derivatives(linear)

    _, domg, dxi = loop_linear(state, small_grid, dd_terms, linear)
    n0 = 1 if linear else 0
    np.testing.assert_allclose(current_slot(backend, "domg")[n0:, 1:-1], domg[n0:, 1:-1], rtol=1e-12, atol=1e-9)
    np.testing.assert_allclose(current_slot(backend, "dxi")[n0:, 1:-1], dxi[n0:, 1:-1], rtol=1e-12, atol=1e-9)


def test_linear_mode_leaves_mode_zero(small_grid, terms, random_state):
    state = random_state(small_grid, seed=13)
    backend = ReferenceBackend(small_grid, terms)
    backend.load_state(state)
    backend.compute_linear_derivatives(linear=True)
    np.testing.assert_array_equal(current_slot(backend, "dtmp")[0], state.dtmp[0, 0])
    np.testing.assert_array_equal(current_slot(backend, "domg")[0], state.domg[0, 0])


def test_walls_untouched(small_grid, terms, random_state):
    backend = ReferenceBackend(small_grid, terms)
    backend.load_state(random_state(small_grid, seed=14))
    backend.compute_linear_derivatives()
    for name in ("dtmp", "domg"):
        slot = current_slot(backend, name)
        assert np.all(slot[:, 0] == 0.0)
        assert np.all(slot[:, -1] == 0.0)


def test_previous_slot_untouched(small_grid, terms, random_state):
    state = random_state(small_grid, seed=15)
    backend = ReferenceBackend(small_grid, terms)
    backend.load_state(state)
    backend.compute_linear_derivatives()
    np.testing.assert_array_equal(backend.history.read_previous("dtmp"), state.dtmp[1])


def test_conduction_profile_is_steady():
    # Linear mean profile, no perturbation: every tendency vanishes
    g = GridGeometry(n_z=11, n_n=4, aspect=1.0)
    backend = ReferenceBackend(g, TermParams(rayleigh=1e4, prandtl=1.0))
    tmp = np.zeros(g.shape)
    tmp[0] = 1.0 - g.z
    state = backend.export_state()
    state.tmp[...] = tmp
    backend.load_state(state)
    backend.compute_linear_derivatives()
    np.testing.assert_allclose(current_slot(backend, "dtmp"), 0.0, atol=1e-10)
    np.testing.assert_allclose(current_slot(backend, "domg"), 0.0, atol=1e-10)


def test_buoyancy_drives_vorticity():
    # θ = sin(πz) in mode 1, ω = 0: dω/dt = Pr·Ra·k₁·θ at interior levels
    g = GridGeometry(n_z=11, n_n=3, aspect=2.0)
    t = TermParams(rayleigh=500.0, prandtl=2.0)
    backend = ReferenceBackend(g, t)
    state = backend.export_state()
    state.tmp[1] = np.sin(np.pi * g.z)
    backend.load_state(state)
    backend.compute_linear_derivatives()
    expected = t.prandtl * t.rayleigh * g.wavenumber(1) * state.tmp[1, 1:-1]
    np.testing.assert_allclose(current_slot(backend, "domg")[1, 1:-1], expected)
