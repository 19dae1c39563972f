"""Run configurations on disk.

A run file is a YAML mapping of parameter groups; any group or key it
leaves out keeps its default. Nonlinear runs write the resolved
configuration back next to their snapshots.
"""

from pathlib import Path
from typing import Any

import yaml

from boussinesq.params.schema import SimulationConfig, ValidationError


def _read_groups(path: Path) -> dict[str, Any]:
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValidationError(f"{path} is not valid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(
            f"{path} must map parameter groups to values, got {type(data).__name__}"
        )
    return data


def load_config(path: str | Path) -> SimulationConfig:
    """Build a SimulationConfig from a YAML run file.

    Raises:
        FileNotFoundError: If there is no file at path
        ValidationError: If the file is malformed or a parameter is invalid
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return SimulationConfig.from_dict(_read_groups(path))


def save_config(config: SimulationConfig, path: str | Path) -> Path:
    """Write config as YAML, creating the parent directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    return path


def load_config_with_overrides(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> SimulationConfig:
    """Defaults (or the file at path) with per-group overrides applied on top.

    `overrides` has the shape built by the CLI, e.g.
    {"physics": {"rayleigh": 1100.0}, "grid": {"n_z": 10}}.
    """
    config = SimulationConfig() if path is None else load_config(path)
    if overrides:
        config = config.with_updates(**overrides)
    return config
