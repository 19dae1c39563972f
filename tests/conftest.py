"""Pytest fixtures and test utilities for the convection solver."""

import numpy as np
import pytest

from boussinesq.config import init_taichi
from boussinesq.core.grid import GridGeometry
from boussinesq.fields.state import StateArrays
from boussinesq.kernels.protocol import TermParams


@pytest.fixture(scope="session", autouse=True)
def taichi_init():
    """Initialize Taichi once per test session with CPU backend."""
    init_taichi(arch="cpu", debug=True)
    yield


@pytest.fixture
def small_grid():
    """Small grid with aspect != 1 so wavenumber scaling is exercised."""
    return GridGeometry(n_z=17, n_n=6, aspect=1.5)


@pytest.fixture
def terms():
    return TermParams(rayleigh=2000.0, prandtl=0.7)


@pytest.fixture
def dd_terms():
    return TermParams(
        rayleigh=2000.0, prandtl=0.7, double_diffusive=True, rayleigh_xi=300.0, tau=0.1
    )


@pytest.fixture
def random_state():
    """Factory for a random state with valid wall values."""
    return make_random_state


def make_random_state(
    geometry: GridGeometry,
    double_diffusive: bool = False,
    seed: int = 0,
    scale: float = 1.0,
) -> StateArrays:
    """Random interior values; ω, ψ and θ/ξ modes n >= 1 zero at both walls,
    mode 0 of θ/ξ at 1 (bottom) and 0 (top). The derivative history is
    random at interior levels and zero at the walls.
    """
    rng = np.random.default_rng(seed)
    state = StateArrays.zeros(geometry, double_diffusive)
    for name in state.names():
        values = getattr(state, name)
        values[...] = scale * rng.standard_normal(values.shape)
        values[..., 0] = 0.0
        values[..., -1] = 0.0
    state.tmp[0, 0] = 1.0
    if double_diffusive:
        state.xi[0, 0] = 1.0
    return state
