"""
Tridiagonal (Thomas) solve recovering ψ from ω, one system per mode.

For each mode n the interior levels k = 1..n_z-2 satisfy

    -ψ[k-1]/dz² + (2/dz² + kₙ²)·ψ[k] - ψ[k+1]/dz² = ω[k],   kₙ = nπ/a

i.e. the discretized -(d²/dz² - kₙ²)ψ = ω, with ψ = 0 at both walls. The
matrix depends only on n_z, kₙ and dz, so the forward-elimination
coefficients are computed once per mode at construction. Each solve is
then one forward sweep and one back substitution, O(n_z) per mode.

The coefficients are computed here on the host and shared with the device
backend so both solve exactly the same system.
"""

from dataclasses import dataclass

import numpy as np

from boussinesq.core.dtypes import NP_DTYPE
from boussinesq.core.grid import GridGeometry


@dataclass(frozen=True)
class ThomasCoefficients:
    """Precomputed elimination coefficients.

    Attributes:
        sub: Off-diagonal entry -1/dz² (sub- and super-diagonal are equal)
        inv_denom: 1 / pivot for each (mode, level), shape (n_n, n_z)
        upper_ratio: Modified super-diagonal c'[k], shape (n_n, n_z)

    Entries at the wall levels are unused and left at zero.
    """

    sub: float
    inv_denom: np.ndarray
    upper_ratio: np.ndarray


def thomas_coefficients(geometry: GridGeometry) -> ThomasCoefficients:
    """Forward-elimination coefficients for every mode."""
    n_n, n_z = geometry.shape
    off = -geometry.oodz2
    inv_denom = np.zeros((n_n, n_z), dtype=NP_DTYPE)
    upper_ratio = np.zeros((n_n, n_z), dtype=NP_DTYPE)

    for n in range(n_n):
        kn = geometry.wavenumber(n)
        diag = 2.0 * geometry.oodz2 + kn * kn
        for k in range(1, n_z - 1):
            denom = diag if k == 1 else diag - off * upper_ratio[n, k - 1]
            inv_denom[n, k] = 1.0 / denom
            upper_ratio[n, k] = off * inv_denom[n, k]

    return ThomasCoefficients(sub=off, inv_denom=inv_denom, upper_ratio=upper_ratio)


class ThomasSolver:
    """Per-mode tridiagonal solver with precomputed coefficients.

    Modes are independent; the sweeps below run over levels and act on all
    modes at once.
    """

    def __init__(self, geometry: GridGeometry):
        self.geometry = geometry
        self.coefficients = thomas_coefficients(geometry)

    def solve(self, psi: np.ndarray, omg: np.ndarray) -> None:
        """Solve every mode, writing ψ in place.

        Args:
            psi: (n_n, n_z) output array
            omg: (n_n, n_z) right-hand side; wall values are ignored
        """
        self._solve(psi, omg, slice(None))

    def solve_mode(self, psi_n: np.ndarray, omg_n: np.ndarray, n: int) -> None:
        """Solve a single mode n, writing ψ(n, ·) in place."""
        if not 0 <= n < self.geometry.n_n:
            raise ValueError(f"mode must be in [0, {self.geometry.n_n}), got {n}")
        # psi_n[np.newaxis] is a view, so the writes land in psi_n
        self._solve(psi_n[np.newaxis], omg_n[np.newaxis], slice(n, n + 1))

    def _solve(self, psi: np.ndarray, omg: np.ndarray, modes: slice) -> None:
        c = self.coefficients
        inv = c.inv_denom[modes]
        up = c.upper_ratio[modes]
        n_z = self.geometry.n_z

        psi[:, 0] = 0.0
        psi[:, n_z - 1] = 0.0

        # Forward substitution
        psi[:, 1] = omg[:, 1] * inv[:, 1]
        for k in range(2, n_z - 1):
            psi[:, k] = (omg[:, k] - c.sub * psi[:, k - 1]) * inv[:, k]

        # Back substitution
        for k in range(n_z - 3, 0, -1):
            psi[:, k] -= up[:, k] * psi[:, k + 1]
