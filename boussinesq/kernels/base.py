"""State bookkeeping shared by the reference and device backends.

Both backends keep their arrays in a FieldContainer; they differ only in
the storage (host numpy vs Taichi fields) and in how the step operations
are computed. Loading, exporting and slot handling live here.
"""

from typing import Any

import numpy as np

from boussinesq.core.grid import GridGeometry
from boussinesq.fields.base import FieldContainer
from boussinesq.fields.state import DERIVATIVE_OF, StateArrays, create_state_specs
from boussinesq.kernels.protocol import TermParams


class ContainerBackend:
    """Base class: allocation, state transfer and derivative-slot handling."""

    variant_name = "base"

    def __init__(self, geometry: GridGeometry, terms: TermParams, storage: Any):
        self.geometry = geometry
        self.terms = terms
        self.fields = FieldContainer(geometry, storage)
        self.fields.register_many(create_state_specs(terms.double_diffusive))
        self.fields.allocate()

    @property
    def history(self):
        return self.fields.history

    @property
    def current(self) -> int:
        return self.fields.history.current

    @property
    def double_diffusive(self) -> bool:
        return self.terms.double_diffusive

    def prognostic_fields(self) -> list[str]:
        """Fields advanced by the integrator, in update order."""
        return [name for name in DERIVATIVE_OF if name in self.fields]

    def read(self, name: str) -> np.ndarray:
        self.synchronize()
        return self.fields.read(name)

    def load_state(self, state: StateArrays) -> None:
        if state.double_diffusive != self.double_diffusive:
            raise ValueError(
                "State and backend disagree on double diffusion "
                f"(state: {state.double_diffusive}, backend: {self.double_diffusive})"
            )
        if state.shape != self.geometry.shape:
            raise ValueError(
                f"State shape {state.shape} does not match grid {self.geometry.shape}"
            )
        self.history.reset(0)
        for name in state.names():
            values = getattr(state, name)
            self.fields.write(name, values)

    def export_state(self) -> StateArrays:
        self.synchronize()
        cur, prev = self.history.current, self.history.previous
        arrays = {}
        for name in self.fields.field_names:
            values = self.fields.read(name)
            if name in DERIVATIVE_OF.values():
                values = np.stack([values[cur], values[prev]])
            arrays[name] = values
        return StateArrays(**arrays)

    def reset(self) -> None:
        self.fields.zero()

    def advance(self) -> None:
        self.history.advance()

    def synchronize(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        g = self.geometry
        return (
            f"{type(self).__name__}(n_z={g.n_z}, n_n={g.n_n}, aspect={g.aspect}, "
            f"double_diffusive={self.double_diffusive})"
        )
