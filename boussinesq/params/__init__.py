"""
Parameter management for the convection solver.

This module provides:
- Validated, immutable parameter containers (schema.py)
- YAML loading utilities (loader.py)
"""

from boussinesq.params.schema import (
    BackendParams,
    DoubleDiffusionParams,
    GridParams,
    LinearParams,
    OutputParams,
    PhysicsParams,
    SimulationConfig,
    TimeParams,
    ValidationError,
)
from boussinesq.params.loader import (
    load_config,
    load_config_with_overrides,
    save_config,
)

__all__ = [
    # Schema classes
    "GridParams",
    "PhysicsParams",
    "DoubleDiffusionParams",
    "TimeParams",
    "OutputParams",
    "LinearParams",
    "BackendParams",
    "SimulationConfig",
    "ValidationError",
    # Loader functions
    "load_config",
    "load_config_with_overrides",
    "save_config",
]
