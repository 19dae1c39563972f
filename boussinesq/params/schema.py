"""Parameter schema with validation. Nondimensional units throughout."""

from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from boussinesq.core.grid import GridGeometry


class ValidationError(ValueError):
    """Parameter validation failed."""
    pass


def _positive(value: float, name: str) -> None:
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")


def _non_negative(value: float, name: str) -> None:
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")


def _unit_sign(value: int, name: str) -> None:
    if value not in (-1, 1):
        raise ValidationError(f"{name} must be -1 or +1, got {value}")


@dataclass(frozen=True)
class GridParams:
    """Grid: n_z (levels), n_n (Fourier modes), aspect (width/height)."""
    n_z: int = 101
    n_n: int = 51
    aspect: float = 3.0

    def __post_init__(self) -> None:
        if self.n_z < 3:
            raise ValidationError(f"n_z must be >= 3, got {self.n_z}")
        if self.n_n < 1:
            raise ValidationError(f"n_n must be >= 1, got {self.n_n}")
        _positive(self.aspect, "aspect")

    def geometry(self) -> GridGeometry:
        return GridGeometry(n_z=self.n_z, n_n=self.n_n, aspect=self.aspect)


@dataclass(frozen=True)
class PhysicsParams:
    """Physics: rayleigh (Ra), prandtl (Pr)."""
    rayleigh: float = 1e6
    prandtl: float = 0.5

    def __post_init__(self) -> None:
        _non_negative(self.rayleigh, "rayleigh")
        _positive(self.prandtl, "prandtl")


@dataclass(frozen=True)
class DoubleDiffusionParams:
    """Double diffusion: rayleigh_xi (solutal Ra), tau (diffusivity ratio)."""
    rayleigh_xi: float = 1e5
    tau: float = 0.01

    def __post_init__(self) -> None:
        _non_negative(self.rayleigh_xi, "rayleigh_xi")
        _positive(self.tau, "tau")


@dataclass(frozen=True)
class TimeParams:
    """Time: dt, total_time, adaptive_dt (CFL rescaling), cfl_check_steps, cfl_safety."""
    dt: float = 3e-6
    total_time: float = 1e-1
    adaptive_dt: bool = True
    cfl_check_steps: int = 10000
    cfl_safety: float = 0.9

    def __post_init__(self) -> None:
        _positive(self.dt, "dt")
        _positive(self.total_time, "total_time")
        if self.cfl_check_steps < 1:
            raise ValidationError(
                f"cfl_check_steps must be >= 1, got {self.cfl_check_steps}"
            )
        if not 0 < self.cfl_safety <= 1:
            raise ValidationError(f"cfl_safety must be in (0, 1], got {self.cfl_safety}")

    @property
    def n_steps(self) -> int:
        return int(round(self.total_time / self.dt))


@dataclass(frozen=True)
class OutputParams:
    """Output: output_dir, ic_file (snapshot to start from), save_interval, ke_interval."""
    output_dir: str = "output"
    ic_file: Optional[str] = None
    save_interval: float = 1e-2
    ke_interval: float = 1e-4

    def __post_init__(self) -> None:
        if not self.output_dir:
            raise ValidationError("output_dir cannot be empty")
        _positive(self.save_interval, "save_interval")
        _positive(self.ke_interval, "ke_interval")


@dataclass(frozen=True)
class LinearParams:
    """Linear stability probe.

    n_crit: tracked mode, probe_level: level sampled (None = n_z // 3),
    check_interval: steps between growth-rate samples, tolerance: convergence
    threshold on successive log-ratios, temperature_gradient / solute_gradient:
    sign of the background mode-0 gradient (-1 = decreasing with height).
    """
    n_crit: int = 1
    probe_level: Optional[int] = None
    check_interval: int = 500
    tolerance: float = 1e-10
    temperature_gradient: int = -1
    solute_gradient: int = -1

    def __post_init__(self) -> None:
        if self.n_crit < 1:
            raise ValidationError(f"n_crit must be >= 1, got {self.n_crit}")
        if self.probe_level is not None and self.probe_level < 1:
            raise ValidationError(f"probe_level must be >= 1, got {self.probe_level}")
        if self.check_interval < 1:
            raise ValidationError(
                f"check_interval must be >= 1, got {self.check_interval}"
            )
        _positive(self.tolerance, "tolerance")
        _unit_sign(self.temperature_gradient, "temperature_gradient")
        _unit_sign(self.solute_gradient, "solute_gradient")


@dataclass(frozen=True)
class BackendParams:
    """Backend: variant ('reference' or 'device'), arch, workers, validate_every."""
    variant: str = "reference"
    arch: str = "auto"
    workers: int = 1
    validate_every: int = 1

    def __post_init__(self) -> None:
        if self.variant not in ("reference", "device"):
            raise ValidationError(
                f"variant must be 'reference' or 'device', got {self.variant}"
            )
        if self.arch not in ("auto", "cpu", "cuda", "vulkan"):
            raise ValidationError(f"Unknown arch: {self.arch}")
        if self.workers < 1:
            raise ValidationError(f"workers must be >= 1, got {self.workers}")
        _non_negative(self.validate_every, "validate_every")


@dataclass(frozen=True)
class SimulationConfig:
    """Complete simulation configuration.

    `double_diffusion` is None for single-component convection; setting it
    switches on the solute field and every solute term at runtime.
    """

    grid: GridParams = field(default_factory=GridParams)
    physics: PhysicsParams = field(default_factory=PhysicsParams)
    double_diffusion: Optional[DoubleDiffusionParams] = None
    time: TimeParams = field(default_factory=TimeParams)
    output: OutputParams = field(default_factory=OutputParams)
    linear: LinearParams = field(default_factory=LinearParams)
    backend: BackendParams = field(default_factory=BackendParams)

    def __post_init__(self) -> None:
        if self.linear.probe_level is not None and self.linear.probe_level >= self.grid.n_z - 1:
            raise ValidationError(
                f"probe_level ({self.linear.probe_level}) must be an interior level"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to nested dictionary."""
        return {
            "grid": asdict(self.grid),
            "physics": asdict(self.physics),
            "double_diffusion": (
                asdict(self.double_diffusion) if self.double_diffusion else None
            ),
            "time": asdict(self.time),
            "output": asdict(self.output),
            "linear": asdict(self.linear),
            "backend": asdict(self.backend),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SimulationConfig":
        """Create from nested dictionary."""
        param_classes = {
            "grid": GridParams,
            "physics": PhysicsParams,
            "double_diffusion": DoubleDiffusionParams,
            "time": TimeParams,
            "output": OutputParams,
            "linear": LinearParams,
            "backend": BackendParams,
        }
        unknown = set(data) - set(param_classes)
        if unknown:
            raise ValidationError(f"Unknown parameter group(s): {sorted(unknown)}")
        kwargs = {}
        for key, value in data.items():
            if value is None:
                if key != "double_diffusion":
                    raise ValidationError(f"Parameter group '{key}' cannot be empty")
                kwargs[key] = None
                continue
            try:
                kwargs[key] = param_classes[key](**value)
            except TypeError as e:
                raise ValidationError(f"Invalid parameters for '{key}': {e}") from e
        return cls(**kwargs)

    def with_updates(self, **kwargs: Any) -> "SimulationConfig":
        """Create new config with updates."""
        current = self.to_dict()
        for key, value in kwargs.items():
            if key not in current:
                raise ValidationError(f"Unknown parameter group: {key}")
            if value is None:
                current[key] = None
            elif isinstance(value, dict):
                if current[key] is None:
                    current[key] = {}
                current[key].update(value)
            else:
                current[key] = asdict(value)
        return self.from_dict(current)

    # Convenience accessors
    @property
    def geometry(self) -> GridGeometry:
        return self.grid.geometry()

    @property
    def double_diffusive(self) -> bool:
        return self.double_diffusion is not None

    @property
    def probe_level(self) -> int:
        if self.linear.probe_level is not None:
            return self.linear.probe_level
        return max(1, self.grid.n_z // 3)
