"""Adams-Bashforth update as a Taichi kernel."""

import taichi as ti

from boussinesq.core.dtypes import DTYPE


@ti.kernel
def adams_bashforth_update(
    x: ti.template(),
    history: ti.template(),
    cur: ti.i32,
    f: DTYPE,
    dt: DTYPE,
):
    """x += dt/2·[(2+f)·current - f·previous] over all modes and levels."""
    prev = 1 - cur
    for n, k in x:
        x[n, k] += ((2.0 + f) * history[cur, n, k] - f * history[prev, n, k]) * dt / 2.0
