"""Mode/level grid geometry for the convection solver.

The domain is a 2-D box of height 1 and width `aspect`. Horizontally the
fields are expanded in Fourier modes n = 0..n_n-1 with wavenumber nπ/aspect;
vertically they are sampled on n_z equally spaced levels including both
walls:

    level k:   0 (bottom wall) ... n_z-1 (top wall),  z_k = k·dz

Every field is stored as an (n_n, n_z) array indexed [n, k]. Mode 0 is the
horizontally averaged profile.
"""

from dataclasses import dataclass
from math import pi

import numpy as np


@dataclass(frozen=True)
class GridGeometry:
    """Immutable grid specification and derived constants.

    Attributes:
        n_z: Number of vertical levels (including both walls)
        n_n: Number of horizontal Fourier modes (including mode 0)
        aspect: Aspect ratio a (domain width / height)

    Derived properties (fixed for the run):
        n_x: Horizontal sample count n_z·a, used by the CFL check
        dz: Vertical spacing 1/(n_z-1)
        dx: Horizontal spacing a/(n_x-1)
        oodz2: Second-difference coefficient 1/dz²
    """

    n_z: int
    n_n: int
    aspect: float = 1.0

    def __post_init__(self):
        """Validate grid dimensions."""
        if self.n_z < 3:
            raise ValueError(f"n_z must be >= 3, got {self.n_z}")
        if self.n_n < 1:
            raise ValueError(f"n_n must be >= 1, got {self.n_n}")
        if self.aspect <= 0:
            raise ValueError(f"aspect must be > 0, got {self.aspect}")
        if self.n_x < 2:
            raise ValueError(
                f"n_z * aspect must give at least 2 horizontal points, got {self.n_x}"
            )

    @property
    def n_x(self) -> int:
        """Number of horizontal sample points."""
        return int(round(self.n_z * self.aspect))

    @property
    def dz(self) -> float:
        """Vertical grid spacing."""
        return 1.0 / (self.n_z - 1)

    @property
    def dx(self) -> float:
        """Horizontal grid spacing."""
        return self.aspect / (self.n_x - 1)

    @property
    def oodz2(self) -> float:
        """Coefficient of the centered second difference, 1/dz²."""
        return 1.0 / (self.dz * self.dz)

    @property
    def shape(self) -> tuple[int, int]:
        """Field shape as (n_n, n_z)."""
        return (self.n_n, self.n_z)

    @property
    def size(self) -> int:
        """Number of entries in one field."""
        return self.n_n * self.n_z

    @property
    def z(self) -> np.ndarray:
        """Level coordinates z_k = k·dz."""
        return np.arange(self.n_z) * self.dz

    @property
    def x(self) -> np.ndarray:
        """Horizontal sample coordinates x_j = j·dx."""
        return np.arange(self.n_x) * self.dx

    def wavenumber(self, n: int) -> float:
        """Horizontal wavenumber nπ/a of mode n."""
        if n < 0 or n >= self.n_n:
            raise ValueError(f"mode must be in [0, {self.n_n}), got {n}")
        return n * pi / self.aspect

    @property
    def wavenumbers(self) -> np.ndarray:
        """Wavenumbers of every mode, shape (n_n,)."""
        return np.arange(self.n_n) * pi / self.aspect
