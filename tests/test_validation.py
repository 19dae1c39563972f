"""Tests for the state validation pass."""

import numpy as np
import pytest

from boussinesq.core.grid import GridGeometry
from boussinesq.errors import BoundaryViolationError, NumericalInstabilityError, SimulationError
from boussinesq.initialization import linear_initial_conditions
from boussinesq.validation import (
    BoundaryValues,
    ViolationKind,
    validate_state,
)

GRID = GridGeometry(n_z=11, n_n=4)


class TestBoundaryValues:

    def test_heated_from_below(self):
        b = BoundaryValues.from_gradients(-1, -1)
        assert (b.tmp_bottom, b.tmp_top) == (1.0, 0.0)

    def test_reversed_gradients(self):
        b = BoundaryValues.from_gradients(1, -1)
        assert (b.tmp_bottom, b.tmp_top) == (0.0, 1.0)
        assert (b.xi_bottom, b.xi_top) == (1.0, 0.0)


class TestValidateState:

    def test_valid_state(self, random_state):
        report = validate_state(random_state(GRID, double_diffusive=True))
        assert report.ok
        report.raise_if_failed()

    def test_linear_initial_conditions_valid(self):
        state = linear_initial_conditions(GRID, temperature_gradient=1, solute_gradient=1,
                                          double_diffusive=True)
        assert validate_state(state, BoundaryValues.from_gradients(1, 1)).ok

    def test_wrong_gradient_flagged(self):
        state = linear_initial_conditions(GRID, temperature_gradient=1)
        report = validate_state(state, BoundaryValues.from_gradients(-1))
        walls = report.by_kind(ViolationKind.BOUNDARY)
        assert {(v.field, v.mode, v.level) for v in walls} == {("tmp", 0, 0), ("tmp", 0, 10)}

    def test_nan_detected(self, random_state):
        state = random_state(GRID)
        state.domg[1, 2, 5] = np.nan
        report = validate_state(state)
        assert not report.ok
        (violation,) = report.by_kind(ViolationKind.NAN)
        assert (violation.field, violation.mode, violation.level) == ("domg", 2, 5)
        with pytest.raises(NumericalInstabilityError):
            report.raise_if_failed()

    def test_nan_takes_precedence(self, random_state):
        state = random_state(GRID)
        state.omg[1, 0] = 0.5
        state.tmp[2, 4] = np.nan
        with pytest.raises(NumericalInstabilityError):
            validate_state(state).raise_if_failed()

    @pytest.mark.parametrize("name,n,k", [("omg", 0, 0), ("psi", 3, 10), ("tmp", 2, 0), ("xi", 1, 10)])
    def test_wall_drift(self, random_state, name, n, k):
        state = random_state(GRID, double_diffusive=True)
        getattr(state, name)[n, k] = 1e-3
        report = validate_state(state)
        (violation,) = report.violations
        assert violation.kind is ViolationKind.BOUNDARY
        assert (violation.field, violation.mode, violation.level) == (name, n, k)
        assert violation.expected == 0.0
        with pytest.raises(BoundaryViolationError):
            report.raise_if_failed()

    def test_within_epsilon(self, random_state):
        state = random_state(GRID)
        state.psi[1, 0] = 1e-9
        assert validate_state(state).ok

    def test_errors_are_simulation_errors(self):
        assert issubclass(NumericalInstabilityError, SimulationError)
        assert issubclass(BoundaryViolationError, RuntimeError)

    def test_report_str(self, random_state):
        state = random_state(GRID)
        state.omg[1, 0] = 0.5
        text = str(validate_state(state))
        assert "omg[n=1, k=0]" in text
