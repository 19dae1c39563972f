"""Base field container and specification classes.

This module provides the foundation for declarative field management:
- FieldSpec: Describes a field's name and role
- FieldRole: Enum categorizing field usage patterns
- NumpyStorage / TaichiStorage: Where the arrays live (host or device)
- FieldContainer: Manages field lifecycle and allocation
- DerivativeHistory: Two-slot ring buffer over all DERIVATIVE fields

Usage:
    container = FieldContainer(geometry, NumpyStorage())
    container.register(FieldSpec("tmp", FieldRole.STATE))
    container.register(FieldSpec("dtmp", FieldRole.DERIVATIVE))
    container.allocate()
    tmp = container["tmp"]                        # shape (n_n, n_z)
    container.history.read_current("dtmp")        # shape (n_n, n_z)
    container.history.advance()                   # current <-> previous
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

import numpy as np
import taichi as ti

from boussinesq.core.dtypes import DTYPE, NP_DTYPE
from boussinesq.core.grid import GridGeometry

# Number of slots in a derivative history (Adams-Bashforth needs two levels)
HISTORY_SLOTS = 2


class FieldRole(Enum):
    """Categorizes field usage patterns.

    STATE: Prognostic or diagnosed quantity (tmp, omg, psi, xi), shape (n_n, n_z)
    DERIVATIVE: Time derivative with history, shape (2, n_n, n_z)
    """

    STATE = auto()
    DERIVATIVE = auto()


@dataclass(frozen=True)
class FieldSpec:
    """Immutable specification for a solver field.

    Attributes:
        name: Field identifier (snake_case)
        role: Field usage category
        description: Human-readable description
    """

    name: str
    role: FieldRole
    description: str = ""

    def __post_init__(self):
        """Validate field specification."""
        if not self.name:
            raise ValueError("Field name cannot be empty")
        if not self.name.islower() or not self.name.replace("_", "").isalnum():
            raise ValueError(f"Field name must be snake_case, got: {self.name}")

    def shape(self, geometry: GridGeometry) -> tuple[int, ...]:
        """Allocation shape of this field on the given grid."""
        if self.role == FieldRole.DERIVATIVE:
            return (HISTORY_SLOTS,) + geometry.shape
        return geometry.shape


class NumpyStorage:
    """Host arrays. Reads return copies so callers cannot alias live state."""

    name = "numpy"

    def zeros(self, shape: tuple[int, ...]) -> np.ndarray:
        return np.zeros(shape, dtype=NP_DTYPE)

    def to_numpy(self, array: np.ndarray) -> np.ndarray:
        return array.copy()

    def from_numpy(self, array: np.ndarray, values: np.ndarray) -> None:
        array[...] = values

    def fill_zero(self, array: np.ndarray) -> None:
        array.fill(0.0)


class TaichiStorage:
    """Device arrays backed by Taichi fields (requires ti.init)."""

    name = "taichi"

    def zeros(self, shape: tuple[int, ...]) -> Any:
        return ti.field(dtype=DTYPE, shape=shape)

    def to_numpy(self, array: Any) -> np.ndarray:
        return array.to_numpy().astype(NP_DTYPE, copy=False)

    def from_numpy(self, array: Any, values: np.ndarray) -> None:
        array.from_numpy(np.ascontiguousarray(values, dtype=NP_DTYPE))

    def fill_zero(self, array: Any) -> None:
        array.fill(0.0)


class DerivativeHistory:
    """Two-slot ring buffer over every DERIVATIVE field of a container.

    All derivative fields share a single active slot index. The current slot
    is written by the term evaluators during a step; the previous slot holds
    the prior step's derivative for the multistep formula. `advance()` is
    called once per completed step.
    """

    def __init__(self, container: "FieldContainer"):
        self._container = container
        self._current = 0

    @property
    def current(self) -> int:
        """Index of the slot being written this step."""
        return self._current

    @property
    def previous(self) -> int:
        """Index of the slot holding the previous step's derivative."""
        return (self._current + 1) % HISTORY_SLOTS

    @property
    def names(self) -> list[str]:
        return self._container.fields_by_role(FieldRole.DERIVATIVE)

    def _check(self, name: str) -> None:
        if self._container.get_spec(name).role != FieldRole.DERIVATIVE:
            raise ValueError(f"Field '{name}' has no derivative history")

    def _slot(self, name: str, slot: int) -> np.ndarray:
        self._check(name)
        if slot not in (0, 1):
            raise ValueError(f"slot must be 0 or 1, got {slot}")
        return self._container.read(name)[slot]

    def read_current(self, name: str) -> np.ndarray:
        """Host copy of the current slot of a derivative field."""
        return self._slot(name, self.current)

    def read_previous(self, name: str) -> np.ndarray:
        """Host copy of the previous slot of a derivative field."""
        return self._slot(name, self.previous)

    def write(self, name: str, slot: int, values: np.ndarray) -> None:
        """Overwrite one slot of a derivative field."""
        both = self._container.read(name)
        if slot not in (0, 1):
            raise ValueError(f"slot must be 0 or 1, got {slot}")
        both[slot] = values
        self._container.write(name, both)

    def advance(self) -> None:
        """Flip current and previous slots."""
        self._current = self.previous

    def reset(self, current: int = 0) -> None:
        """Set the active slot without touching the data."""
        if current not in (0, 1):
            raise ValueError(f"slot must be 0 or 1, got {current}")
        self._current = current


class FieldContainer:
    """Manages field lifecycle with declarative specifications.

    A FieldContainer holds a collection of arrays associated with a specific
    grid geometry. Fields are registered via FieldSpec, then allocated
    together (zero-initialized) in the storage given at construction.

    Attributes:
        geometry: Grid dimensions and spacing
        storage: Array backend (NumpyStorage or TaichiStorage)
        history: Ring buffer view of the DERIVATIVE fields

    Example:
        container = FieldContainer(GridGeometry(33, 8), NumpyStorage())
        container.register_many(create_state_specs(double_diffusive=False))
        container.allocate()
        psi = container["psi"]
    """

    def __init__(self, geometry: GridGeometry, storage: Any = None):
        """Initialize container with grid geometry.

        Args:
            geometry: Grid dimensions and spacing
            storage: Array backend (default: NumpyStorage)
        """
        self._geometry = geometry
        self._storage = storage if storage is not None else NumpyStorage()
        self._specs: dict[str, FieldSpec] = {}
        self._fields: dict[str, Any] = {}
        self._allocated = False
        self.history = DerivativeHistory(self)

    @property
    def geometry(self) -> GridGeometry:
        """Get the grid geometry."""
        return self._geometry

    @property
    def storage(self) -> Any:
        return self._storage

    @property
    def allocated(self) -> bool:
        """Check if fields have been allocated."""
        return self._allocated

    @property
    def field_names(self) -> list[str]:
        """Get list of registered field names."""
        return list(self._specs.keys())

    def register(self, spec: FieldSpec) -> None:
        """Register a field specification.

        Raises:
            ValueError: If name already registered
            RuntimeError: If fields already allocated
        """
        if self._allocated:
            raise RuntimeError("Cannot register fields after allocation")
        if spec.name in self._specs:
            raise ValueError(f"Field '{spec.name}' already registered")
        self._specs[spec.name] = spec

    def register_many(self, specs: list[FieldSpec]) -> None:
        """Register multiple field specifications."""
        for spec in specs:
            self.register(spec)

    def allocate(self) -> None:
        """Allocate all registered fields, zero-initialized.

        Raises:
            RuntimeError: If already allocated or no fields registered
        """
        if self._allocated:
            raise RuntimeError("Fields already allocated")
        if not self._specs:
            raise RuntimeError("No fields registered")

        for name, spec in self._specs.items():
            self._fields[name] = self._storage.zeros(spec.shape(self._geometry))

        self._allocated = True

    def get(self, name: str) -> Any:
        """Get the live array (numpy array or Taichi field) by name.

        Raises:
            KeyError: If field not found
            RuntimeError: If fields not allocated
        """
        if not self._allocated:
            raise RuntimeError("Fields not yet allocated")
        if name not in self._fields:
            raise KeyError(f"Field '{name}' not found")
        return self._fields[name]

    def __getitem__(self, name: str) -> Any:
        """Get a field by name using bracket notation."""
        return self.get(name)

    def read(self, name: str) -> np.ndarray:
        """Host copy of a field."""
        return self._storage.to_numpy(self.get(name))

    def write(self, name: str, values: np.ndarray) -> None:
        """Overwrite a field from a host array of matching shape."""
        expected = self.get_spec(name).shape(self._geometry)
        values = np.asarray(values, dtype=NP_DTYPE)
        if values.shape != expected:
            raise ValueError(
                f"Field '{name}' expects shape {expected}, got {values.shape}"
            )
        self._storage.from_numpy(self.get(name), values)

    def zero(self) -> None:
        """Zero every field and reset the history to slot 0."""
        for name in self._specs:
            self._storage.fill_zero(self.get(name))
        self.history.reset()

    def get_spec(self, name: str) -> FieldSpec:
        """Get the specification for a field."""
        if name not in self._specs:
            raise KeyError(f"Field '{name}' not registered")
        return self._specs[name]

    def fields_by_role(self, role: FieldRole) -> list[str]:
        """Get field names filtered by role."""
        return [name for name, spec in self._specs.items() if spec.role == role]

    @property
    def memory_bytes(self) -> int:
        """Memory held by all allocated fields (float64 entries)."""
        if not self._allocated:
            return 0
        total = 0
        for spec in self._specs.values():
            total += int(np.prod(spec.shape(self._geometry))) * 8
        return total

    @property
    def memory_mb(self) -> float:
        """Memory held by all allocated fields in megabytes."""
        return self.memory_bytes / (1024 * 1024)

    def __contains__(self, name: str) -> bool:
        """Check if a field is registered."""
        return name in self._specs

    def __len__(self) -> int:
        """Number of registered fields."""
        return len(self._specs)
