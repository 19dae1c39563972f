"""
Triad advection terms as Taichi kernels.

Same coupling as boussinesq.kernels.reference.nonlinear. The outermost loop
of `scalar_advection` and `vorticity_advection` runs over modes n >= 1 in
parallel; each iteration writes only row n of the derivative slot. The
mean-flux kernel reduces over modes into mode 0, so it parallelizes over
levels instead.
"""

from math import pi

import taichi as ti

from boussinesq.core.dtypes import DTYPE


@ti.func
def ddz(f: ti.template(), n, k, dz):
    return (f[n, k + 1] - f[n, k - 1]) / (2.0 * dz)


@ti.kernel
def mean_flux(
    s: ti.template(),
    psi: ti.template(),
    ds: ti.template(),
    cur: ti.i32,
    dz: DTYPE,
    aspect: DTYPE,
):
    """Add the horizontally averaged advective flux to mode 0 of ds."""
    n_n = s.shape[0]
    n_z = s.shape[1]

    for k in range(1, n_z - 1):
        acc = 0.0
        for n in range(1, n_n):
            acc += n * (ddz(psi, n, k, dz) * s[n, k] + ddz(s, n, k, dz) * psi[n, k])
        ds[cur, 0, k] += -pi / (2.0 * aspect) * acc


@ti.kernel
def scalar_advection(
    s: ti.template(),
    psi: ti.template(),
    ds: ti.template(),
    cur: ti.i32,
    dz: DTYPE,
    aspect: DTYPE,
):
    """Add advection of a cosine-series scalar (θ or ξ) to modes n >= 1."""
    n_n = s.shape[0]
    n_z = s.shape[1]
    c = pi / (2.0 * aspect)

    for n in range(1, n_n):
        kn = n * pi / aspect
        for k in range(1, n_z - 1):
            acc = -kn * psi[n, k] * ddz(s, 0, k, dz)
            for m in range(1, n):
                o = n - m
                acc -= c * (
                    -m * ddz(psi, o, k, dz) * s[m, k] + o * ddz(s, m, k, dz) * psi[o, k]
                )
            for m in range(n + 1, n_n):
                o = m - n
                acc -= c * (
                    m * ddz(psi, o, k, dz) * s[m, k] + o * ddz(s, m, k, dz) * psi[o, k]
                )
            for m in range(1, n_n - n):
                o = n + m
                acc -= c * (
                    m * ddz(psi, o, k, dz) * s[m, k] + o * ddz(s, m, k, dz) * psi[o, k]
                )
            ds[cur, n, k] += acc


@ti.kernel
def vorticity_advection(
    omg: ti.template(),
    psi: ti.template(),
    domg: ti.template(),
    cur: ti.i32,
    dz: DTYPE,
    aspect: DTYPE,
):
    """Add advection of ω to modes n >= 1 (folding-back family sign flipped)."""
    n_n = omg.shape[0]
    n_z = omg.shape[1]
    c = pi / (2.0 * aspect)

    for n in range(1, n_n):
        for k in range(1, n_z - 1):
            acc = 0.0
            for m in range(1, n):
                o = n - m
                acc -= c * (
                    -m * ddz(psi, o, k, dz) * omg[m, k] + o * ddz(omg, m, k, dz) * psi[o, k]
                )
            for m in range(n + 1, n_n):
                o = m - n
                acc -= c * (
                    m * ddz(psi, o, k, dz) * omg[m, k] + o * ddz(omg, m, k, dz) * psi[o, k]
                )
            for m in range(1, n_n - n):
                o = n + m
                acc += c * (
                    m * ddz(psi, o, k, dz) * omg[m, k] + o * ddz(omg, m, k, dz) * psi[o, k]
                )
            domg[cur, n, k] += acc
