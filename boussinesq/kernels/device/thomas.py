"""
Tridiagonal ψ solve as a Taichi kernel.

Same system and coefficients as the reference solver; the coefficient
arrays are computed on the host by `thomas_coefficients` and uploaded once.
The outer loop over modes runs in parallel, the sweeps over levels are
sequential within each mode.
"""

import taichi as ti

from boussinesq.core.dtypes import DTYPE
from boussinesq.core.grid import GridGeometry
from boussinesq.kernels.reference.thomas import thomas_coefficients


@ti.kernel
def thomas_solve(
    psi: ti.template(),
    omg: ti.template(),
    inv_denom: ti.template(),
    upper_ratio: ti.template(),
    sub: DTYPE,
):
    """Solve every mode in place: forward substitution then back substitution."""
    n_n = psi.shape[0]
    n_z = psi.shape[1]

    for n in range(n_n):
        psi[n, 0] = 0.0
        psi[n, n_z - 1] = 0.0

        psi[n, 1] = omg[n, 1] * inv_denom[n, 1]
        for k in range(2, n_z - 1):
            psi[n, k] = (omg[n, k] - sub * psi[n, k - 1]) * inv_denom[n, k]

        # k runs n_z-3 down to 1
        for j in range(n_z - 3):
            k = n_z - 3 - j
            psi[n, k] -= upper_ratio[n, k] * psi[n, k + 1]


class DeviceThomasSolver:
    """Holds the uploaded coefficients for one grid."""

    def __init__(self, geometry: GridGeometry):
        self.geometry = geometry
        coefficients = thomas_coefficients(geometry)
        self.sub = coefficients.sub
        self.inv_denom = ti.field(dtype=DTYPE, shape=geometry.shape)
        self.upper_ratio = ti.field(dtype=DTYPE, shape=geometry.shape)
        self.inv_denom.from_numpy(coefficients.inv_denom)
        self.upper_ratio.from_numpy(coefficients.upper_ratio)

    def solve(self, psi, omg) -> None:
        """Solve every mode, writing the ψ field in place."""
        thomas_solve(psi, omg, self.inv_denom, self.upper_ratio, self.sub)
