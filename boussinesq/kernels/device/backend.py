"""Taichi device backend."""

import taichi as ti

from boussinesq.config import ensure_taichi
from boussinesq.core.grid import GridGeometry
from boussinesq.fields.base import TaichiStorage
from boussinesq.fields.state import DERIVATIVE_OF
from boussinesq.kernels.base import ContainerBackend
from boussinesq.kernels.device.integrator import adams_bashforth_update
from boussinesq.kernels.device.linear import linear_terms, solute_linear_terms
from boussinesq.kernels.device.nonlinear import (
    mean_flux,
    scalar_advection,
    vorticity_advection,
)
from boussinesq.kernels.device.thomas import DeviceThomasSolver
from boussinesq.kernels.protocol import TermParams


class DeviceBackend(ContainerBackend):
    """Taichi implementation of the ComputeBackend protocol.

    Fields live in ti.field storage on whatever arch Taichi was initialized
    with. Scalars go to the kernels as arguments, so changing Ra or dt
    between calls does not trigger recompilation.

    Args:
        geometry: Grid dimensions and spacing
        terms: Physical coefficients
        arch: Passed to init_taichi if Taichi is not yet initialized
    """

    variant_name = "device"

    def __init__(self, geometry: GridGeometry, terms: TermParams, arch: str = None):
        ensure_taichi(arch)
        super().__init__(geometry, terms, TaichiStorage())
        self.solver = DeviceThomasSolver(geometry)

    def compute_linear_derivatives(self, linear: bool = False) -> None:
        f, g, t = self.fields, self.geometry, self.terms
        cur = self.current
        n_start = 1 if linear else 0
        linear_terms(
            f["tmp"], f["omg"], f["psi"], f["dtmp"], f["domg"],
            cur, n_start, g.oodz2, g.aspect,
            t.rayleigh, t.prandtl, float(t.temperature_gradient),
        )
        if t.double_diffusive:
            solute_linear_terms(
                f["xi"], f["psi"], f["dxi"], f["domg"],
                cur, n_start, g.oodz2, g.aspect,
                t.tau, t.rayleigh_xi, t.prandtl, float(t.solute_gradient),
            )

    def compute_nonlinear_derivatives(self) -> None:
        f, g = self.fields, self.geometry
        cur = self.current
        psi = f["psi"]
        for name in self.prognostic_fields():
            if name == "omg":
                continue
            s, ds = f[name], f[DERIVATIVE_OF[name]]
            mean_flux(s, psi, ds, cur, g.dz, g.aspect)
            scalar_advection(s, psi, ds, cur, g.dz, g.aspect)
        vorticity_advection(f["omg"], psi, f["domg"], cur, g.dz, g.aspect)

    def integrate(self, f: float, dt: float) -> None:
        cur = self.current
        for name in self.prognostic_fields():
            adams_bashforth_update(
                self.fields[name], self.fields[DERIVATIVE_OF[name]], cur, f, dt
            )

    def solve_psi(self) -> None:
        self.solver.solve(self.fields["psi"], self.fields["omg"])

    def synchronize(self) -> None:
        ti.sync()
