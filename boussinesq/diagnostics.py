"""Kinetic-energy diagnostics and their append-only logs.

The kinetic energy of mode n is the trapezoid-rule integral over z of

    (∂ψₙ/∂z)² + (kₙψₙ)²

scaled by a/4 (the horizontal average of sin² and cos² over the box).
The centered derivative is undefined at the walls, so the two end-point
terms carry only (kₙψₙ)²/2.
"""

import logging
from pathlib import Path

import numpy as np

from boussinesq.core.dtypes import NP_DTYPE
from boussinesq.core.grid import GridGeometry
from boussinesq.errors import OutputError
from boussinesq.kernels.numerics import ddz

logger = logging.getLogger(__name__)


def kinetic_energy_mode(psi: np.ndarray, geometry: GridGeometry, n: int) -> float:
    """Kinetic energy held in mode n."""
    kn = geometry.wavenumber(n)
    psi_n = psi[n]
    ke = (kn * psi_n[0]) ** 2 / 2.0 + (kn * psi_n[-1]) ** 2 / 2.0
    ke += np.sum(ddz(psi_n, geometry.dz) ** 2 + (kn * psi_n[1:-1]) ** 2)
    return float(ke * geometry.aspect / (4.0 * (geometry.n_z - 1)))


def kinetic_energy(psi: np.ndarray, geometry: GridGeometry) -> float:
    """Total kinetic energy, summed over every mode."""
    return sum(kinetic_energy_mode(psi, geometry, n) for n in range(geometry.n_n))


class KineticEnergyLog:
    """Append-only binary logs of kinetic energy.

    Each call to `record` appends one native float64 to KineticEnergy.dat
    (total) and to KineticEnergyMode{n}.dat for every mode n >= 1. The last
    two totals are kept so the driver can report the log growth between
    samples.

    Args:
        directory: Output directory (created if missing)
        geometry: Grid dimensions

    Raises:
        OutputError: If the directory or a log file cannot be written
    """

    TOTAL_FILE = "KineticEnergy.dat"
    MODE_FILE = "KineticEnergyMode{n}.dat"

    def __init__(self, directory, geometry: GridGeometry):
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create output directory {self.directory}: {e}") from e
        self.geometry = geometry
        self.previous = 0.0
        self.current = 0.0
        self.samples = 0

    def total_path(self) -> Path:
        return self.directory / self.TOTAL_FILE

    def mode_path(self, n: int) -> Path:
        return self.directory / self.MODE_FILE.format(n=n)

    def record(self, psi: np.ndarray) -> float:
        """Compute, store and append the kinetic energy of ψ."""
        total = kinetic_energy(psi, self.geometry)
        self.previous, self.current = self.current, total
        self.samples += 1
        self._append(self.total_path(), total)
        for n in range(1, self.geometry.n_n):
            self._append(self.mode_path(n), kinetic_energy_mode(psi, self.geometry, n))
        return total

    @property
    def log_change(self) -> float:
        """log|KE| - log|KE_prev| between the last two samples (nan if undefined)."""
        if self.previous == 0.0 or self.current == 0.0:
            return float("nan")
        return float(np.log(abs(self.current)) - np.log(abs(self.previous)))

    @staticmethod
    def _append(path: Path, value: float) -> None:
        try:
            with open(path, "ab") as f:
                f.write(np.asarray([value], dtype=NP_DTYPE).tobytes())
        except OSError as e:
            raise OutputError(f"Could not append to {path}: {e}") from e

    def read_total(self) -> np.ndarray:
        """Every total recorded so far (including earlier runs in the same directory)."""
        return np.fromfile(self.total_path(), dtype=NP_DTYPE)

    def read_mode(self, n: int) -> np.ndarray:
        return np.fromfile(self.mode_path(n), dtype=NP_DTYPE)
