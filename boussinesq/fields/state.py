"""State field specifications, factory, and host-side state snapshot.

State fields represent the solver variables, all stored as (n_n, n_z):
- tmp: Temperature θ (cosine-series coefficients, mode 0 = mean profile)
- omg: Vorticity ω (sine-series coefficients)
- psi: Streamfunction ψ (sine-series coefficients, diagnosed from ω)
- xi: Solute concentration ξ (double-diffusive runs only)

Derivative fields carry two history slots, stored as (2, n_n, n_z):
- dtmp, domg, dxi: dθ/dt, dω/dt, dξ/dt
"""

from dataclasses import dataclass, fields as dataclass_fields
from typing import Any, Optional

import numpy as np

from boussinesq.core.dtypes import NP_DTYPE
from boussinesq.core.grid import GridGeometry
from boussinesq.fields.base import FieldContainer, FieldRole, FieldSpec

# Prognostic field -> its derivative field
DERIVATIVE_OF = {"tmp": "dtmp", "omg": "domg", "xi": "dxi"}


def create_state_specs(double_diffusive: bool = False) -> list[FieldSpec]:
    """Create specifications for the solver fields.

    Args:
        double_diffusive: Also register the solute field and its derivative

    Returns:
        List of FieldSpec, state fields first
    """
    specs = [
        FieldSpec("tmp", FieldRole.STATE, "Temperature θ"),
        FieldSpec("omg", FieldRole.STATE, "Vorticity ω"),
        FieldSpec("psi", FieldRole.STATE, "Streamfunction ψ"),
    ]
    if double_diffusive:
        specs.append(FieldSpec("xi", FieldRole.STATE, "Solute concentration ξ"))

    specs += [
        FieldSpec("dtmp", FieldRole.DERIVATIVE, "dθ/dt history"),
        FieldSpec("domg", FieldRole.DERIVATIVE, "dω/dt history"),
    ]
    if double_diffusive:
        specs.append(FieldSpec("dxi", FieldRole.DERIVATIVE, "dξ/dt history"))
    return specs


def create_state_container(
    geometry: GridGeometry,
    double_diffusive: bool = False,
    storage: Any = None,
) -> FieldContainer:
    """Create an allocated container holding every solver field.

    Args:
        geometry: Grid dimensions and spacing
        double_diffusive: Include the solute fields
        storage: Array backend (default: host numpy arrays)

    Returns:
        Allocated, zero-initialized FieldContainer
    """
    container = FieldContainer(geometry, storage)
    container.register_many(create_state_specs(double_diffusive))
    container.allocate()
    return container


@dataclass
class StateArrays:
    """Host copy of a complete solver state.

    Derivative arrays are ordered by role rather than by storage slot:
    index 0 is the current slot, index 1 the previous slot. This is the
    order used by snapshot files and by backend load/export.

    Attributes:
        tmp, omg, psi: (n_n, n_z) fields
        dtmp, domg: (2, n_n, n_z) derivative histories
        xi, dxi: Solute field and history, None for single-component runs
    """

    tmp: np.ndarray
    omg: np.ndarray
    psi: np.ndarray
    dtmp: np.ndarray
    domg: np.ndarray
    xi: Optional[np.ndarray] = None
    dxi: Optional[np.ndarray] = None

    def __post_init__(self):
        if (self.xi is None) != (self.dxi is None):
            raise ValueError("xi and dxi must both be given or both be None")
        shape = self.tmp.shape
        for name in ("omg", "psi", "xi"):
            value = getattr(self, name)
            if value is not None and value.shape != shape:
                raise ValueError(f"{name} has shape {value.shape}, expected {shape}")
        for name in ("dtmp", "domg", "dxi"):
            value = getattr(self, name)
            if value is not None and value.shape != (2,) + shape:
                raise ValueError(
                    f"{name} has shape {value.shape}, expected {(2,) + shape}"
                )

    @classmethod
    def zeros(cls, geometry: GridGeometry, double_diffusive: bool = False) -> "StateArrays":
        """All-zero state on the given grid."""
        shape = geometry.shape
        history = (2,) + shape
        return cls(
            tmp=np.zeros(shape, dtype=NP_DTYPE),
            omg=np.zeros(shape, dtype=NP_DTYPE),
            psi=np.zeros(shape, dtype=NP_DTYPE),
            dtmp=np.zeros(history, dtype=NP_DTYPE),
            domg=np.zeros(history, dtype=NP_DTYPE),
            xi=np.zeros(shape, dtype=NP_DTYPE) if double_diffusive else None,
            dxi=np.zeros(history, dtype=NP_DTYPE) if double_diffusive else None,
        )

    @property
    def double_diffusive(self) -> bool:
        return self.xi is not None

    @property
    def shape(self) -> tuple[int, int]:
        return self.tmp.shape

    def names(self) -> list[str]:
        """Names of the arrays present in this state."""
        return [f.name for f in dataclass_fields(self) if getattr(self, f.name) is not None]

    def copy(self) -> "StateArrays":
        return StateArrays(
            **{name: getattr(self, name).copy() for name in self.names()}
        )

    def max_abs_difference(self, other: "StateArrays") -> dict[str, float]:
        """Largest absolute difference per array."""
        if self.names() != other.names():
            raise ValueError("States hold different sets of fields")
        return {
            name: float(np.max(np.abs(getattr(self, name) - getattr(other, name))))
            for name in self.names()
        }

    def allclose(self, other: "StateArrays", rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        """True if every array matches within tolerance."""
        if self.names() != other.names():
            return False
        return all(
            np.allclose(getattr(self, name), getattr(other, name), rtol=rtol, atol=atol)
            for name in self.names()
        )
