"""
Nonlinear advection by triad mode coupling.

θ and ξ are cosine series and ω, ψ sine series in x. Multiplying two
series with the product-to-sum identities and projecting back onto mode n
couples n to every pair (m, o) with

    o = n - m   for 0 < m < n        (from below)
    o = m - n   for n < m < n_n      (from above)
    o = n + m   for m >= 1, n+m < n_n (folding back)

For a cosine-series scalar s all three families enter with the same sign.
For ω the third family enters with the opposite sign: there the sine of the
difference angle is sin((m - o)kx) = -sin(n kx), which flips the projection.

Mode 0 of s receives the horizontal average of the advective flux, and each
mode n >= 1 is advected by the mean gradient ∂s₀/∂z.

Every mode n >= 1 reads shared inputs and writes only its own row of the
derivative slot, so the outer loop over n is a parallel-for.
"""

from concurrent.futures import Executor
from math import pi
from typing import Callable, Iterable, Optional

import numpy as np

from boussinesq.fields.base import FieldContainer
from boussinesq.kernels.numerics import ddz


def parallel_for(
    body: Callable[[int], None],
    indices: Iterable[int],
    executor: Optional[Executor] = None,
) -> None:
    """Run body(i) for every index, on the executor when one is given."""
    if executor is None:
        for i in indices:
            body(i)
        return
    # list() forces completion and re-raises the first worker exception
    list(executor.map(body, indices))


def mean_flux(s: np.ndarray, psi: np.ndarray, dz: float, aspect: float) -> np.ndarray:
    """Contribution to mode 0 of s from all modes n >= 1, interior levels."""
    n = np.arange(1, s.shape[0])[:, None]
    flux = n * (ddz(psi, dz)[1:] * s[1:, 1:-1] + ddz(s, dz)[1:] * psi[1:, 1:-1])
    return -pi / (2.0 * aspect) * np.sum(flux, axis=0)


def scalar_advection_mode(
    n: int,
    s: np.ndarray,
    s_dz: np.ndarray,
    psi: np.ndarray,
    psi_dz: np.ndarray,
    aspect: float,
) -> np.ndarray:
    """Advective tendency of a cosine-series scalar at mode n >= 1.

    Args:
        n: Target mode
        s, psi: Interior-level values, shape (n_n, n_z-2)
        s_dz, psi_dz: Centered z-derivatives at interior levels
        aspect: Aspect ratio

    Returns:
        Tendency at interior levels, shape (n_z-2,)
    """
    n_n = s.shape[0]
    c = pi / (2.0 * aspect)

    # From the mean profile
    acc = -n * pi / aspect * psi[n] * s_dz[0]

    m = np.arange(1, n)
    o = n - m
    acc -= c * np.sum(
        -m[:, None] * psi_dz[o] * s[m] + o[:, None] * s_dz[m] * psi[o], axis=0
    )

    m = np.arange(n + 1, n_n)
    o = m - n
    acc -= c * np.sum(
        m[:, None] * psi_dz[o] * s[m] + o[:, None] * s_dz[m] * psi[o], axis=0
    )

    m = np.arange(1, n_n - n)
    o = n + m
    acc -= c * np.sum(
        m[:, None] * psi_dz[o] * s[m] + o[:, None] * s_dz[m] * psi[o], axis=0
    )
    return acc


def vorticity_advection_mode(
    n: int,
    omg: np.ndarray,
    omg_dz: np.ndarray,
    psi: np.ndarray,
    psi_dz: np.ndarray,
    aspect: float,
) -> np.ndarray:
    """Advective tendency of ω at mode n >= 1 (same layout as scalar_advection_mode)."""
    n_n = omg.shape[0]
    c = pi / (2.0 * aspect)

    m = np.arange(1, n)
    o = n - m
    acc = -c * np.sum(
        -m[:, None] * psi_dz[o] * omg[m] + o[:, None] * omg_dz[m] * psi[o], axis=0
    )

    m = np.arange(n + 1, n_n)
    o = m - n
    acc -= c * np.sum(
        m[:, None] * psi_dz[o] * omg[m] + o[:, None] * omg_dz[m] * psi[o], axis=0
    )

    # Folding back: opposite sign
    m = np.arange(1, n_n - n)
    o = n + m
    acc += c * np.sum(
        m[:, None] * psi_dz[o] * omg[m] + o[:, None] * omg_dz[m] * psi[o], axis=0
    )
    return acc


def compute_nonlinear_derivatives(
    fields: FieldContainer,
    executor: Optional[Executor] = None,
) -> None:
    """Add advection tendencies to the current slot.

    Args:
        fields: Allocated container (host storage)
        executor: Optional pool for the parallel loop over modes
    """
    g = fields.geometry
    cur = fields.history.current
    dz, aspect = g.dz, g.aspect

    psi_full = fields["psi"]
    psi = psi_full[:, 1:-1]
    psi_dz = ddz(psi_full, dz)

    scalars = [("tmp", "dtmp")]
    if "xi" in fields:
        scalars.append(("xi", "dxi"))

    inputs = {}
    for name, dname in scalars:
        s_full = fields[name]
        target = fields[dname][cur]
        target[0, 1:-1] += mean_flux(s_full, psi_full, dz, aspect)
        inputs[name] = (s_full[:, 1:-1], ddz(s_full, dz), target)

    omg_full = fields["omg"]
    omg = omg_full[:, 1:-1]
    omg_dz = ddz(omg_full, dz)
    domg = fields["domg"][cur]

    def advect_mode(n: int) -> None:
        for s, s_dz, target in inputs.values():
            target[n, 1:-1] += scalar_advection_mode(n, s, s_dz, psi, psi_dz, aspect)
        domg[n, 1:-1] += vorticity_advection_mode(n, omg, omg_dz, psi, psi_dz, aspect)

    parallel_for(advect_mode, range(1, g.n_n), executor)
