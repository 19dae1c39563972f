"""
Compute backend protocol for swappable implementations.

The solver's numerical core (term evaluators, streamfunction solve, time
integrator) is specified once and implemented twice: a NumPy reference on
the host and a Taichi implementation that runs on the accelerator. The
orchestration code only talks to this protocol, so either backend can be
selected at runtime and the two can be run side by side for cross-checks.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Protocol, runtime_checkable

import numpy as np

from boussinesq.core.grid import GridGeometry
from boussinesq.fields.state import StateArrays


class BackendVariant(Enum):
    """Available backend implementations."""

    REFERENCE = auto()  # NumPy on the host
    DEVICE = auto()  # Taichi kernels


@dataclass(frozen=True)
class TermParams:
    """Physical coefficients consumed by the term evaluators.

    Attributes:
        rayleigh: Thermal Rayleigh number Ra
        prandtl: Prandtl number Pr
        double_diffusive: Solute field present
        rayleigh_xi: Solutal Rayleigh number (double diffusion only)
        tau: Solute/heat diffusivity ratio (double diffusion only)
        temperature_gradient: Sign of the background θ gradient in the
            linearized advection term (-1 = decreasing with height)
        solute_gradient: Same for ξ
    """

    rayleigh: float
    prandtl: float
    double_diffusive: bool = False
    rayleigh_xi: float = 0.0
    tau: float = 1.0
    temperature_gradient: int = -1
    solute_gradient: int = -1

    @classmethod
    def from_config(cls, config: Any) -> "TermParams":
        """Build from a SimulationConfig."""
        dd = config.double_diffusion
        return cls(
            rayleigh=config.physics.rayleigh,
            prandtl=config.physics.prandtl,
            double_diffusive=dd is not None,
            rayleigh_xi=dd.rayleigh_xi if dd is not None else 0.0,
            tau=dd.tau if dd is not None else 1.0,
            temperature_gradient=config.linear.temperature_gradient,
            solute_gradient=config.linear.solute_gradient,
        )


@runtime_checkable
class ComputeBackend(Protocol):
    """Protocol for the per-step numerical operations.

    Each step the driver calls, in order:
        compute_linear_derivatives -> [compute_nonlinear_derivatives]
        -> integrate -> solve_psi -> advance

    Derivatives are written into the current history slot; integrate reads
    the current and previous slots. After solve_psi, ψ vanishes exactly at
    both walls for every mode.
    """

    geometry: GridGeometry
    terms: TermParams

    def load_state(self, state: StateArrays) -> None:
        """Copy a host state into the backend and make its slot 0 current."""
        ...

    def export_state(self) -> StateArrays:
        """Host copy of the full state (derivatives ordered current, previous)."""
        ...

    def read(self, name: str) -> np.ndarray:
        """Host copy of one field."""
        ...

    def reset(self) -> None:
        """Zero every field and derivative slot."""
        ...

    def compute_linear_derivatives(self, linear: bool = False) -> None:
        """Diffusion and buoyancy (plus linearized advection when `linear`)."""
        ...

    def compute_nonlinear_derivatives(self) -> None:
        """Add the triad advection terms to the current slot."""
        ...

    def integrate(self, f: float, dt: float) -> None:
        """Adams-Bashforth update of every prognostic field."""
        ...

    def solve_psi(self) -> None:
        """Recover ψ from ω mode by mode."""
        ...

    def advance(self) -> None:
        """Flip current and previous derivative slots."""
        ...

    def synchronize(self) -> None:
        """Block until pending work is visible to the host."""
        ...

    @property
    def current(self) -> int:
        """Index of the current derivative slot."""
        ...
