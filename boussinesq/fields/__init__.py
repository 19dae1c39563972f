"""Field management for the convection solver.

This module provides declarative field containers for the mode × level
arrays of the solver, with a two-slot derivative history for the
Adams-Bashforth scheme.

Main classes:
- FieldSpec: Declarative field specification
- FieldRole: Field categorization (STATE, DERIVATIVE)
- FieldContainer: Manages field lifecycle on host or device storage
- DerivativeHistory: Current/previous slot bookkeeping
- StateArrays: Host copy of a complete state

Factory functions:
- create_state_specs, create_state_container
"""

from boussinesq.fields.base import (
    HISTORY_SLOTS,
    DerivativeHistory,
    FieldContainer,
    FieldRole,
    FieldSpec,
    NumpyStorage,
    TaichiStorage,
)
from boussinesq.fields.state import (
    DERIVATIVE_OF,
    StateArrays,
    create_state_container,
    create_state_specs,
)

__all__ = [
    # Core classes
    "DerivativeHistory",
    "FieldContainer",
    "FieldRole",
    "FieldSpec",
    "HISTORY_SLOTS",
    "NumpyStorage",
    "TaichiStorage",
    "StateArrays",
    "DERIVATIVE_OF",
    # Factory functions
    "create_state_specs",
    "create_state_container",
]
