"""
Compute backends for the Boussinesq solver.

This module provides both backend implementations and a registry for
selecting between them at runtime.

Usage:
    from boussinesq.kernels import BackendRegistry, BackendVariant

    registry = BackendRegistry()
    backend = registry.get(BackendVariant.REFERENCE, geometry, terms)
    backend.compute_linear_derivatives()

Submodules:
- reference: NumPy implementations (correctness first)
- device: Taichi kernels
- protocol: Backend interface and shared parameter types
"""

from typing import Any, Type

from boussinesq.core.grid import GridGeometry
from boussinesq.kernels.device import DeviceBackend
from boussinesq.kernels.protocol import BackendVariant, ComputeBackend, TermParams
from boussinesq.kernels.reference import ReferenceBackend


class BackendRegistry:
    """Registry for backend implementations with variant selection.

    Lets the drivers pick the reference or device implementation without
    changing orchestration code, and lets tests run both side by side.

    Example:
        registry = BackendRegistry()
        ref = registry.get(BackendVariant.REFERENCE, geometry, terms, workers=4)
        dev = registry.get(BackendVariant.DEVICE, geometry, terms)
    """

    def __init__(self):
        self._backends: dict[BackendVariant, Type[Any]] = {
            BackendVariant.REFERENCE: ReferenceBackend,
            BackendVariant.DEVICE: DeviceBackend,
        }

    def get(
        self,
        variant: BackendVariant,
        geometry: GridGeometry,
        terms: TermParams,
        **options: Any,
    ) -> ComputeBackend:
        """Construct a backend instance.

        Args:
            variant: Implementation variant
            geometry: Grid dimensions and spacing
            terms: Physical coefficients
            **options: Backend-specific keyword arguments (workers, arch)

        Raises:
            KeyError: If variant not registered
        """
        if variant not in self._backends:
            raise KeyError(
                f"No backend registered for variant {variant}. "
                f"Available: {list(self._backends.keys())}"
            )
        return self._backends[variant](geometry, terms, **options)

    def register(self, variant: BackendVariant, backend_cls: Type[Any]) -> None:
        """Register a backend implementation under a variant."""
        self._backends[variant] = backend_cls

    def available_variants(self) -> list[BackendVariant]:
        return list(self._backends.keys())


# Default registry instance for convenience
_default_registry = BackendRegistry()


def get_registry() -> BackendRegistry:
    """Get the default backend registry."""
    return _default_registry


def create_backend(config: Any) -> ComputeBackend:
    """Build the backend a SimulationConfig asks for."""
    options = config.backend
    terms = TermParams.from_config(config)
    if options.variant == "device":
        return _default_registry.get(
            BackendVariant.DEVICE, config.geometry, terms, arch=options.arch
        )
    return _default_registry.get(
        BackendVariant.REFERENCE, config.geometry, terms, workers=options.workers
    )


__all__ = [
    "BackendRegistry",
    "BackendVariant",
    "ComputeBackend",
    "DeviceBackend",
    "ReferenceBackend",
    "TermParams",
    "create_backend",
    "get_registry",
]
