"""
CFL step-size control.

The velocity is reconstructed from ψ on the physical grid,

    u(x, z) =  Σₙ ∂ψₙ/∂z · sin(nπx/a)
    w(x, z) =  Σₙ (nπ/a)·ψₙ · cos(nπx/a)

at interior levels and the n_x horizontal sample points x_j = j·dx. The
step must satisfy dt <= safety·dx/|u|max and dt <= safety·dz/|w|max.
"""

import numpy as np

from boussinesq.core.grid import GridGeometry
from boussinesq.kernels.numerics import ddz

# Below this speed the flow is treated as at rest
MIN_VELOCITY = 1e-12


def max_velocities(psi: np.ndarray, geometry: GridGeometry) -> tuple[float, float]:
    """Largest |u| and |w| over interior levels and all horizontal samples.

    Args:
        psi: (n_n, n_z) streamfunction coefficients
        geometry: Grid dimensions and spacing

    Returns:
        (u_max, w_max)
    """
    phase = np.outer(geometry.wavenumbers, geometry.x)  # (n_n, n_x)
    psi_dz = ddz(psi, geometry.dz)  # (n_n, n_z-2)
    kpsi = geometry.wavenumbers[:, None] * psi[:, 1:-1]

    u = psi_dz.T @ np.sin(phase)
    w = kpsi.T @ np.cos(phase)
    return float(np.max(np.abs(u))), float(np.max(np.abs(w)))


def compute_cfl_factor(
    psi: np.ndarray,
    geometry: GridGeometry,
    dt: float,
    safety: float = 0.9,
) -> float:
    """Factor f <= 1 by which dt must shrink to satisfy the CFL bound.

    Returns 1.0 when the flow is at rest or already within the bound, so
    the caller can always apply `dt *= f`.
    """
    u_max, w_max = max_velocities(psi, geometry)
    f = 1.0
    if u_max > MIN_VELOCITY:
        f = min(f, safety * geometry.dx / (u_max * dt))
    if w_max > MIN_VELOCITY:
        f = min(f, safety * geometry.dz / (w_max * dt))
    return f
