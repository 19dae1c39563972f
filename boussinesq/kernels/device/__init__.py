"""Taichi kernels and the device backend built on them."""

from boussinesq.kernels.device.backend import DeviceBackend
from boussinesq.kernels.device.thomas import DeviceThomasSolver

__all__ = ["DeviceBackend", "DeviceThomasSolver"]
