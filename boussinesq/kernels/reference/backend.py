"""NumPy reference backend."""

from concurrent.futures import ThreadPoolExecutor

from boussinesq.core.grid import GridGeometry
from boussinesq.fields.base import NumpyStorage
from boussinesq.kernels.base import ContainerBackend
from boussinesq.kernels.protocol import TermParams
from boussinesq.kernels.reference.integrator import integrate
from boussinesq.kernels.reference.linear import compute_linear_derivatives
from boussinesq.kernels.reference.nonlinear import compute_nonlinear_derivatives
from boussinesq.kernels.reference.thomas import ThomasSolver


class ReferenceBackend(ContainerBackend):
    """Host implementation of the ComputeBackend protocol.

    Correctness first: vectorized over levels, explicit loops over modes.
    Serves as the baseline the device backend is checked against.

    Args:
        geometry: Grid dimensions and spacing
        terms: Physical coefficients
        workers: Threads for the nonlinear mode loop (1 = serial)
    """

    variant_name = "reference"

    def __init__(self, geometry: GridGeometry, terms: TermParams, workers: int = 1):
        super().__init__(geometry, terms, NumpyStorage())
        self.solver = ThomasSolver(geometry)
        self.workers = workers
        self._executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None

    def compute_linear_derivatives(self, linear: bool = False) -> None:
        compute_linear_derivatives(self.fields, self.terms, linear)

    def compute_nonlinear_derivatives(self) -> None:
        compute_nonlinear_derivatives(self.fields, self._executor)

    def integrate(self, f: float, dt: float) -> None:
        integrate(self.fields, f, dt)

    def solve_psi(self) -> None:
        self.solver.solve(self.fields["psi"], self.fields["omg"])

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
