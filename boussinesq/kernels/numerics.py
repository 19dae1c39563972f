"""Finite-difference and time-stepping formulas shared by both backends.

All difference operators act along the last (level) axis and return values
at the interior levels 1..n_z-2 only.
"""

import numpy as np


def ddz(f: np.ndarray, dz: float) -> np.ndarray:
    """Centered first derivative (f[k+1] - f[k-1]) / 2dz at interior levels."""
    return (f[..., 2:] - f[..., :-2]) / (2.0 * dz)


def d2dz2(f: np.ndarray, oodz2: float) -> np.ndarray:
    """Centered second derivative (f[k+1] - 2f[k] + f[k-1]) / dz² at interior levels."""
    return (f[..., 2:] - 2.0 * f[..., 1:-1] + f[..., :-2]) * oodz2


def adams_bashforth(current, previous, f: float, dt: float):
    """Increment of the two-level Adams-Bashforth scheme.

    x_new = x + dt·[(1 + f/2)·current - (f/2)·previous]

    f is the ratio of the new step to the previous one. f = 1 gives the
    classic 3/2, -1/2 weights; any other f is the variable-step form, i.e.
    weights 3/2 + δ and 1/2 + δ with δ = (f - 1)/2.
    """
    return ((2.0 + f) * current - f * previous) * dt / 2.0
