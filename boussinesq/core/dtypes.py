"""Type definitions for the convection solver.

Snapshots are raw float64 and both backends must agree to ~1e-12, so the
device kernels run in double precision. Vulkan devices without f64 support
are therefore not usable as the accelerator backend.
"""

import numpy as np
import taichi as ti

# Floating-point type for all Taichi fields and kernel scalars
DTYPE = ti.f64

# Host-side counterpart (snapshot files, reference backend)
NP_DTYPE = np.float64

# Tolerance for boundary checks and time-gate comparisons
EPSILON = 1e-7
