"""Core infrastructure: types, grid geometry, and constants."""

from boussinesq.core.dtypes import DTYPE, EPSILON, NP_DTYPE
from boussinesq.core.grid import GridGeometry

__all__ = [
    "DTYPE",
    "EPSILON",
    "NP_DTYPE",
    "GridGeometry",
]
