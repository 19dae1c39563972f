"""
Boussinesq: Rayleigh-Benard convection in a 2-D box, with optional double diffusion.

Fourier modes in x, finite differences in z, Adams-Bashforth in time, on a
NumPy reference backend or Taichi kernels.
"""

__version__ = "0.1.0"
