"""Initial conditions for linear and nonlinear runs.
"""

import numpy as np

from boussinesq.core.grid import GridGeometry
from boussinesq.fields.state import StateArrays


def background_profile(geometry: GridGeometry, gradient: int = -1) -> np.ndarray:
    """Mode-0 conductive profile: 1 - z for gradient -1, z for gradient +1."""
    if gradient not in (-1, 1):
        raise ValueError(f"gradient must be -1 or +1, got {gradient}")
    z = geometry.z
    return 1.0 - z if gradient == -1 else z.copy()


def linear_initial_conditions(
    geometry: GridGeometry,
    temperature_gradient: int = -1,
    solute_gradient: int = -1,
    double_diffusive: bool = False,
) -> StateArrays:
    """Start state for a linear-stability run.

    Mode 0 carries the background profile, every mode n >= 1 the shape
    sin(πz); ω, ψ and the derivative history are zero.
    """
    state = StateArrays.zeros(geometry, double_diffusive)
    shape = np.sin(np.pi * geometry.z)

    state.tmp[0] = background_profile(geometry, temperature_gradient)
    state.tmp[1:] = shape
    if double_diffusive:
        state.xi[0] = background_profile(geometry, solute_gradient)
        state.xi[1:] = shape
    return state


def conduction_initial_conditions(
    geometry: GridGeometry,
    amplitude: float = 1e-3,
    temperature_gradient: int = -1,
    solute_gradient: int = -1,
    double_diffusive: bool = False,
    seed: int | None = None,
) -> StateArrays:
    """Conductive state plus a small perturbation, for a nonlinear cold start.

    Args:
        geometry: Grid dimensions
        amplitude: Size of the sin(πz) perturbation in modes n >= 1
        temperature_gradient: Sign of the background θ gradient
        solute_gradient: Sign of the background ξ gradient
        double_diffusive: Include ξ
        seed: If given, each mode's amplitude is scaled by a random factor
            in [0, 1) drawn from this seed

    Returns:
        StateArrays with zero ω, ψ and derivative history
    """
    state = StateArrays.zeros(geometry, double_diffusive)
    weights = np.ones(geometry.n_n - 1)
    if seed is not None:
        weights = np.random.default_rng(seed).random(geometry.n_n - 1)
    perturbation = amplitude * weights[:, None] * np.sin(np.pi * geometry.z)[None, :]

    state.tmp[0] = background_profile(geometry, temperature_gradient)
    state.tmp[1:] = perturbation
    if double_diffusive:
        state.xi[0] = background_profile(geometry, solute_gradient)
        state.xi[1:] = perturbation
    return state
