"""
Reference (host) backend.

NumPy implementations that prioritize correctness and readability. They are
the baseline for equivalence testing of the device backend.
"""

from boussinesq.kernels.reference.backend import ReferenceBackend
from boussinesq.kernels.reference.thomas import (
    ThomasCoefficients,
    ThomasSolver,
    thomas_coefficients,
)

__all__ = [
    "ReferenceBackend",
    "ThomasCoefficients",
    "ThomasSolver",
    "thomas_coefficients",
]
