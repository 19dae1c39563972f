"""
Taichi configuration and initialization.

Environment variables:
    BOUSSINESQ_ARCH: 'cuda', 'vulkan', 'cpu', or 'auto' (default)
    BOUSSINESQ_DEBUG: '1' to enable debug mode (bounds checks in kernels)

The device backend needs f64 support, so CUDA or CPU are the useful targets.
"""

import logging
import os
import subprocess

import taichi as ti

from boussinesq.core.dtypes import DTYPE

logger = logging.getLogger(__name__)

_active_arch: str | None = None


def get_arch() -> str:
    """Determine Taichi arch: check env var, then auto-detect."""
    env = os.environ.get("BOUSSINESQ_ARCH", "auto").lower()

    if env in ("cuda", "vulkan", "cpu"):
        return env
    if env != "auto":
        raise ValueError(f"Invalid BOUSSINESQ_ARCH: {env}")

    # Auto-detect CUDA
    try:
        result = subprocess.run(
            ["nvidia-smi", "-L"], capture_output=True, text=True, timeout=5
        )
        if result.returncode == 0 and "GPU" in result.stdout:
            return "cuda"
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass

    return "cpu"


def init_taichi(
    arch: str | None = None,
    debug: bool | None = None,
    kernel_profiler: bool = False,
) -> str:
    """Initialize Taichi with specified or auto-detected arch."""
    global _active_arch

    if arch is None or arch == "auto":
        arch = get_arch()
    if debug is None:
        debug = os.environ.get("BOUSSINESQ_DEBUG", "0") == "1"

    ti_arch = {"cuda": ti.cuda, "vulkan": ti.vulkan, "cpu": ti.cpu}.get(arch)
    if ti_arch is None:
        raise ValueError(f"Unknown arch: {arch}")

    ti.init(
        arch=ti_arch,
        default_fp=DTYPE,
        debug=debug,
        offline_cache=True,
        kernel_profiler=kernel_profiler,
    )
    _active_arch = arch
    logger.info("Taichi initialized on %s (debug=%s)", arch, debug)
    return arch


def ensure_taichi(arch: str | None = None) -> str:
    """Initialize Taichi unless this process already did so."""
    if _active_arch is not None:
        return _active_arch
    return init_taichi(arch)
