"""Adams-Bashforth update of the prognostic fields (host arrays)."""

from boussinesq.fields.base import FieldContainer
from boussinesq.fields.state import DERIVATIVE_OF
from boussinesq.kernels.numerics import adams_bashforth


def integrate(fields: FieldContainer, f: float, dt: float) -> None:
    """Advance θ, ω (and ξ) by one step in place, all modes and levels.

    Wall levels carry zero derivatives, so their values are left unchanged.
    """
    history = fields.history
    for name, dname in DERIVATIVE_OF.items():
        if name not in fields:
            continue
        derivative = fields[dname]
        field = fields[name]
        field += adams_bashforth(
            derivative[history.current], derivative[history.previous], f, dt
        )
