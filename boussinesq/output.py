"""
Binary snapshot files.

A snapshot is the raw concatenation of native-endian float64 arrays, each
(n_n, n_z) in row-major order, with no header:

    θ, ω, ψ, [ξ], dθ/dt (current), dθ/dt (previous),
    dω/dt (current), dω/dt (previous), [dξ/dt (current), dξ/dt (previous)]

Bracketed arrays are present only in double-diffusive runs. The grid is not
recorded, so a reader must know n_n, n_z and whether ξ is present; the file
size is checked against that expectation.
"""

import logging
from pathlib import Path

import numpy as np

from boussinesq.core.dtypes import NP_DTYPE
from boussinesq.core.grid import GridGeometry
from boussinesq.errors import SnapshotError
from boussinesq.fields.state import StateArrays

logger = logging.getLogger(__name__)

SNAPSHOT_NAME = "vars{number}.dat"


def _layout(double_diffusive: bool) -> list:
    """(array, slot) pairs in file order; slot is None for state fields."""
    layout = [("tmp", None), ("omg", None), ("psi", None)]
    if double_diffusive:
        layout.append(("xi", None))
    layout += [("dtmp", 0), ("dtmp", 1), ("domg", 0), ("domg", 1)]
    if double_diffusive:
        layout += [("dxi", 0), ("dxi", 1)]
    return layout


def snapshot_size(geometry: GridGeometry, double_diffusive: bool = False) -> int:
    """Expected file size in bytes."""
    itemsize = np.dtype(NP_DTYPE).itemsize
    return len(_layout(double_diffusive)) * geometry.size * itemsize


def save_snapshot(path, state: StateArrays) -> Path:
    """Write a state to `path`, creating parent directories.

    Raises:
        SnapshotError: If the file cannot be written
    """
    path = Path(path)
    blocks = []
    for name, slot in _layout(state.double_diffusive):
        values = getattr(state, name)
        if slot is not None:
            values = values[slot]
        blocks.append(np.ascontiguousarray(values, dtype=NP_DTYPE))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            for block in blocks:
                f.write(block.tobytes())
    except OSError as e:
        raise SnapshotError(f"Could not write snapshot {path}: {e}") from e
    return path


def load_snapshot(
    path,
    geometry: GridGeometry,
    double_diffusive: bool = False,
) -> StateArrays:
    """Read a snapshot written for the given grid.

    Raises:
        SnapshotError: If the file is missing, unreadable or the wrong size
    """
    path = Path(path)
    expected = snapshot_size(geometry, double_diffusive)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise SnapshotError(f"Could not read snapshot {path}: {e}") from e
    if len(data) != expected:
        raise SnapshotError(
            f"Snapshot {path} has {len(data)} bytes, expected {expected} "
            f"for n_n={geometry.n_n}, n_z={geometry.n_z}, "
            f"double_diffusive={double_diffusive}"
        )

    values = np.frombuffer(data, dtype=NP_DTYPE).reshape(-1, *geometry.shape)
    state = StateArrays.zeros(geometry, double_diffusive)
    for block, (name, slot) in zip(values, _layout(double_diffusive)):
        target = getattr(state, name)
        if slot is None:
            target[...] = block
        else:
            target[slot] = block
    return state


class SnapshotWriter:
    """Writes vars{N}.dat files into one directory with a running save number."""

    def __init__(self, directory, start: int = 0):
        self.directory = Path(directory)
        self.number = start

    def path(self, number: int) -> Path:
        return self.directory / SNAPSHOT_NAME.format(number=number)

    def write(self, state: StateArrays) -> Path:
        path = save_snapshot(self.path(self.number), state)
        logger.debug("Saved snapshot %s", path)
        self.number += 1
        return path
