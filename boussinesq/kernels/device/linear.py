"""
Linear terms as Taichi kernels.

Same equations as the reference implementation; see
boussinesq.kernels.reference.linear. The solute kernel must run after
`linear_terms` because it adds its buoyancy term onto dω/dt.
"""

from math import pi

import taichi as ti

from boussinesq.core.dtypes import DTYPE


@ti.kernel
def linear_terms(
    tmp: ti.template(),
    omg: ti.template(),
    psi: ti.template(),
    dtmp: ti.template(),
    domg: ti.template(),
    cur: ti.i32,
    linear: ti.i32,
    oodz2: DTYPE,
    aspect: DTYPE,
    rayleigh: DTYPE,
    prandtl: DTYPE,
    gradient: DTYPE,
):
    """Write dθ/dt and dω/dt at interior levels of modes n >= linear."""
    n_n = tmp.shape[0]
    n_z = tmp.shape[1]

    for n, k in ti.ndrange((linear, n_n), (1, n_z - 1)):
        kn = n * pi / aspect
        t = tmp[n, k]
        w = omg[n, k]

        d_tmp = (tmp[n, k + 1] - 2.0 * t + tmp[n, k - 1]) * oodz2 - kn * kn * t
        if linear == 1:
            d_tmp += -gradient * kn * psi[n, k]
        dtmp[cur, n, k] = d_tmp

        domg[cur, n, k] = prandtl * (
            (omg[n, k + 1] - 2.0 * w + omg[n, k - 1]) * oodz2
            - kn * kn * w
            + rayleigh * kn * t
        )


@ti.kernel
def solute_linear_terms(
    xi: ti.template(),
    psi: ti.template(),
    dxi: ti.template(),
    domg: ti.template(),
    cur: ti.i32,
    linear: ti.i32,
    oodz2: DTYPE,
    aspect: DTYPE,
    tau: DTYPE,
    rayleigh_xi: DTYPE,
    prandtl: DTYPE,
    gradient: DTYPE,
):
    """Write dξ/dt and add the solutal buoyancy term to dω/dt."""
    n_n = xi.shape[0]
    n_z = xi.shape[1]

    for n, k in ti.ndrange((linear, n_n), (1, n_z - 1)):
        kn = n * pi / aspect
        x = xi[n, k]

        d_xi = tau * ((xi[n, k + 1] - 2.0 * x + xi[n, k - 1]) * oodz2 - kn * kn * x)
        if linear == 1:
            d_xi += -gradient * kn * psi[n, k]
        dxi[cur, n, k] = d_xi

        domg[cur, n, k] += -rayleigh_xi * tau * prandtl * kn * x
