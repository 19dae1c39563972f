"""
State validation pass.

Checks a host copy of the solver state for NaN entries and for wall values
that have drifted from their Dirichlet conditions:

- ω and ψ vanish at both walls in every mode
- θ (and ξ) modes n >= 1 vanish at both walls
- θ (and ξ) mode 0 holds the background values set by the gradient sign

The pass returns a report rather than raising, so callers can log and
decide; `raise_if_failed` converts the first violation into an exception.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from boussinesq.core.dtypes import EPSILON
from boussinesq.errors import BoundaryViolationError, NumericalInstabilityError
from boussinesq.fields.state import StateArrays

# NaN locations listed per array before the report stops enumerating
MAX_REPORTED = 10


class ViolationKind(Enum):
    NAN = "nan"
    BOUNDARY = "boundary"


@dataclass(frozen=True)
class Violation:
    """One failed check.

    Attributes:
        kind: NAN or BOUNDARY
        field: Array name (tmp, omg, psi, xi, dtmp, domg, dxi)
        mode: Fourier mode n
        level: Vertical level k
        value: Offending value
        expected: Required value (None for NaN checks)
    """

    kind: ViolationKind
    field: str
    mode: int
    level: int
    value: float
    expected: Optional[float] = None

    def __str__(self) -> str:
        where = f"{self.field}[n={self.mode}, k={self.level}]"
        if self.kind is ViolationKind.NAN:
            return f"NaN in {where}"
        return f"{where} = {self.value:.3e}, expected {self.expected:.3e}"


@dataclass
class ValidationReport:
    violations: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def by_kind(self, kind: ViolationKind) -> list[Violation]:
        return [v for v in self.violations if v.kind is kind]

    def raise_if_failed(self) -> None:
        """Raise for the first violation; NaN takes precedence over boundary drift."""
        nans = self.by_kind(ViolationKind.NAN)
        if nans:
            raise NumericalInstabilityError(
                f"{len(nans)} NaN value(s), first: {nans[0]}"
            )
        walls = self.by_kind(ViolationKind.BOUNDARY)
        if walls:
            raise BoundaryViolationError(
                f"{len(walls)} boundary violation(s), first: {walls[0]}"
            )

    def __str__(self) -> str:
        if self.ok:
            return "ValidationReport(ok)"
        lines = [f"ValidationReport({len(self.violations)} violation(s))"]
        lines += [f"  {v}" for v in self.violations]
        return "\n".join(lines)


@dataclass(frozen=True)
class BoundaryValues:
    """Mode-0 wall values of θ and ξ."""

    tmp_bottom: float = 1.0
    tmp_top: float = 0.0
    xi_bottom: float = 1.0
    xi_top: float = 0.0

    @classmethod
    def from_gradients(
        cls, temperature_gradient: int = -1, solute_gradient: int = -1
    ) -> "BoundaryValues":
        """Gradient -1 means 1 at the bottom and 0 at the top; +1 the reverse."""
        tb, tt = (1.0, 0.0) if temperature_gradient == -1 else (0.0, 1.0)
        xb, xt = (1.0, 0.0) if solute_gradient == -1 else (0.0, 1.0)
        return cls(tmp_bottom=tb, tmp_top=tt, xi_bottom=xb, xi_top=xt)


def _check_nan(name: str, values: np.ndarray, report: ValidationReport) -> None:
    # Derivative histories are (slot, n, k); report the mode and level only
    locations = np.argwhere(np.isnan(values))
    for index in locations[:MAX_REPORTED]:
        n, k = int(index[-2]), int(index[-1])
        report.violations.append(
            Violation(ViolationKind.NAN, name, n, k, float("nan"))
        )


def _check_wall(
    name: str,
    values: np.ndarray,
    n: int,
    k: int,
    expected: float,
    epsilon: float,
    report: ValidationReport,
) -> None:
    value = float(values[n, k])
    if not abs(value - expected) < epsilon:
        report.violations.append(
            Violation(ViolationKind.BOUNDARY, name, n, k, value, expected)
        )


def validate_state(
    state: StateArrays,
    boundary: Optional[BoundaryValues] = None,
    epsilon: float = EPSILON,
) -> ValidationReport:
    """Check every array for NaN and every wall value against its condition.

    Args:
        state: Host copy of the solver state
        boundary: Mode-0 wall values (default: heated from below)
        epsilon: Allowed deviation of a wall value

    Returns:
        ValidationReport (check `.ok`)
    """
    boundary = boundary or BoundaryValues()
    report = ValidationReport()

    for name in state.names():
        _check_nan(name, getattr(state, name), report)

    n_n, n_z = state.shape
    top = n_z - 1
    scalars = [("tmp", boundary.tmp_bottom, boundary.tmp_top)]
    if state.double_diffusive:
        scalars.append(("xi", boundary.xi_bottom, boundary.xi_top))

    for n in range(n_n):
        for name in ("omg", "psi"):
            values = getattr(state, name)
            _check_wall(name, values, n, 0, 0.0, epsilon, report)
            _check_wall(name, values, n, top, 0.0, epsilon, report)
        for name, bottom, upper in scalars:
            values = getattr(state, name)
            if n == 0:
                _check_wall(name, values, n, 0, bottom, epsilon, report)
                _check_wall(name, values, n, top, upper, epsilon, report)
            else:
                _check_wall(name, values, n, 0, 0.0, epsilon, report)
                _check_wall(name, values, n, top, 0.0, epsilon, report)

    return report
