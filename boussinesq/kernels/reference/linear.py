"""
Linear terms: diffusion, buoyancy and linearized advection.

    dθ/dt = ∂²θ/∂z² - kₙ²θ                     [- g_θ·kₙ·ψ   linear runs]
    dω/dt = Pr·(∂²ω/∂z² - kₙ²ω + Ra·kₙ·θ)      [- Ra_ξ·τ·Pr·kₙ·ξ   double diffusion]
    dξ/dt = τ·(∂²ξ/∂z² - kₙ²ξ)                 [- g_ξ·kₙ·ψ   linear runs]

evaluated at interior levels of modes n >= n_start and written (not added)
into the current derivative slot. Full nonlinear runs start at mode 0 so the
mean profile diffuses; linear-stability runs start at mode 1 and hold the
background profile fixed, which is what the g·kₙ·ψ term stands in for.
"""

from boussinesq.fields.base import FieldContainer
from boussinesq.kernels.numerics import d2dz2
from boussinesq.kernels.protocol import TermParams


def compute_linear_derivatives(
    fields: FieldContainer,
    terms: TermParams,
    linear: bool = False,
) -> None:
    """Write linear tendencies into the current slot.

    Args:
        fields: Allocated container (host storage)
        terms: Physical coefficients
        linear: Linear-stability mode (skip mode 0, add linearized advection)
    """
    g = fields.geometry
    cur = fields.history.current
    n0 = 1 if linear else 0
    kn = g.wavenumbers[n0:, None]

    tmp = fields["tmp"][n0:]
    omg = fields["omg"][n0:]
    psi = fields["psi"][n0:, 1:-1]
    dtmp = fields["dtmp"][cur, n0:]
    domg = fields["domg"][cur, n0:]

    dtmp[:, 1:-1] = d2dz2(tmp, g.oodz2) - kn**2 * tmp[:, 1:-1]
    if linear:
        dtmp[:, 1:-1] += -terms.temperature_gradient * kn * psi

    domg[:, 1:-1] = terms.prandtl * (
        d2dz2(omg, g.oodz2) - kn**2 * omg[:, 1:-1] + terms.rayleigh * kn * tmp[:, 1:-1]
    )

    if terms.double_diffusive:
        xi = fields["xi"][n0:]
        dxi = fields["dxi"][cur, n0:]
        dxi[:, 1:-1] = terms.tau * (d2dz2(xi, g.oodz2) - kn**2 * xi[:, 1:-1])
        if linear:
            dxi[:, 1:-1] += -terms.solute_gradient * kn * psi
        domg[:, 1:-1] += -terms.rayleigh_xi * terms.tau * terms.prandtl * kn * xi[:, 1:-1]
