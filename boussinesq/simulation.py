"""Run drivers: nonlinear evolution and linear growth-rate measurement.

One step is always

    linear derivatives -> [nonlinear derivatives] -> integrate
    -> solve ψ -> t += dt -> flip derivative slots

and the drivers differ only in how they start, what they record between
steps and when they stop.
"""

import logging
import math
from typing import Optional

import numpy as np

from boussinesq.cfl import compute_cfl_factor
from boussinesq.core.dtypes import EPSILON
from boussinesq.diagnostics import KineticEnergyLog
from boussinesq.errors import SimulationError
from boussinesq.fields.state import StateArrays
from boussinesq.initialization import (
    conduction_initial_conditions,
    linear_initial_conditions,
)
from boussinesq.kernels import ComputeBackend, create_backend
from boussinesq.output import SnapshotWriter, load_snapshot
from boussinesq.params.schema import SimulationConfig, ValidationError
from boussinesq.validation import BoundaryValues, ValidationReport, validate_state

logger = logging.getLogger(__name__)

# Returned by run_linear when the growth rate never settles
CONVERGENCE_TIMEOUT = 0.0


class Simulation:
    """Orchestrates one run on a compute backend.

    Args:
        config: Full run configuration (defaults if None)
        backend: Backend to run on; built from config.backend if None
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        backend: ComputeBackend | None = None,
    ):
        self.config = config or SimulationConfig()
        self.geometry = self.config.geometry
        self.backend = backend if backend is not None else create_backend(self.config)
        if self.backend.geometry != self.geometry:
            raise ValueError(
                f"Backend grid {self.backend.geometry} does not match config grid "
                f"{self.geometry}"
            )
        lin = self.config.linear
        self.boundary = BoundaryValues.from_gradients(
            lin.temperature_gradient, lin.solute_gradient
        )
        self.dt = self.config.time.dt
        self.time = 0.0
        self.steps = 0
        self.ke_log: Optional[KineticEnergyLog] = None
        self.writer: Optional[SnapshotWriter] = None

    def __enter__(self) -> "Simulation":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        close = getattr(self.backend, "close", None)
        if close is not None:
            close()

    # State handling

    def load(self, state: StateArrays) -> None:
        """Load a state and restart the clock."""
        self.backend.load_state(state)
        self.time = 0.0
        self.steps = 0
        self.dt = self.config.time.dt
        if self.config.backend.validate_every:
            self.validate().raise_if_failed()

    def initial_state(self) -> StateArrays:
        """Snapshot from output.ic_file if set, else a perturbed conductive state."""
        cfg = self.config
        if cfg.output.ic_file:
            logger.info("Loading initial conditions from %s", cfg.output.ic_file)
            return load_snapshot(cfg.output.ic_file, self.geometry, cfg.double_diffusive)
        logger.info("No initial-condition file, starting from conduction")
        return conduction_initial_conditions(
            self.geometry,
            temperature_gradient=cfg.linear.temperature_gradient,
            solute_gradient=cfg.linear.solute_gradient,
            double_diffusive=cfg.double_diffusive,
        )

    def state(self) -> StateArrays:
        """Host copy of the current state."""
        return self.backend.export_state()

    def validate(self) -> ValidationReport:
        return validate_state(self.backend.export_state(), self.boundary)

    # Stepping

    def step(self, f: float = 1.0, linear: bool = False) -> None:
        """Advance one step of size self.dt.

        Args:
            f: Ratio of this step to the previous one (1 unless dt changed)
            linear: Linearized equations about the fixed background profile
        """
        backend = self.backend
        backend.compute_linear_derivatives(linear)
        if not linear:
            backend.compute_nonlinear_derivatives()
        backend.integrate(f, self.dt)
        backend.solve_psi()
        self.time += self.dt
        backend.advance()
        self.steps += 1

        every = self.config.backend.validate_every
        if every and self.steps % every == 0:
            report = self.validate()
            if not report.ok:
                logger.error("Validation failed at t=%.6e (step %d)", self.time, self.steps)
                report.raise_if_failed()

    def check_cfl(self) -> float:
        """Shrink dt if the flow breaches the CFL bound; return the ratio f."""
        t = self.config.time
        f = compute_cfl_factor(self.backend.read("psi"), self.geometry, self.dt, t.cfl_safety)
        if f < 1.0:
            logger.info("CFL: dt %.3e -> %.3e", self.dt, self.dt * f)
            self.dt *= f
        return f

    # Drivers

    def run_nonlinear(self, state: StateArrays | None = None) -> StateArrays:
        """Evolve the full equations until total_time.

        Kinetic energy is appended every ke_interval, the CFL bound is checked
        every cfl_check_steps steps at the step size it leaves in force (when
        adaptive_dt is set), and a snapshot is written every save_interval
        and once at the end.

        Args:
            state: Initial state (default: initial_state())

        Returns:
            Final state
        """
        cfg = self.config
        self.load(state if state is not None else self.initial_state())
        self.ke_log = KineticEnergyLog(cfg.output.output_dir, self.geometry)
        self.writer = SnapshotWriter(cfg.output.output_dir)

        total = cfg.time.total_time
        ke_time = cfl_time = save_time = 0.0
        f = 1.0

        logger.info(
            "Nonlinear run: Ra=%g Pr=%g grid %dx%d, dt=%.3e, t_end=%g",
            cfg.physics.rayleigh, cfg.physics.prandtl,
            self.geometry.n_n, self.geometry.n_z, self.dt, total,
        )
        while total - self.time > EPSILON:
            if ke_time - self.time < EPSILON:
                self.ke_log.record(self.backend.read("psi"))
                ke_time += cfg.output.ke_interval
            if cfg.time.adaptive_dt and cfl_time - self.time < EPSILON:
                f = self.check_cfl()
                cfl_time += cfg.time.cfl_check_steps * self.dt
                logger.debug("KE log change: %.6e", self.ke_log.log_change)
            if save_time - self.time < EPSILON:
                logger.info("t = %.6e of %.6e (%.1f%%)", self.time, total, 100 * self.time / total)
                save_time += cfg.output.save_interval
                self.writer.write(self.backend.export_state())

            self.step(f)
            f = 1.0

        logger.info("Finished at t = %.6e after %d steps", self.time, self.steps)
        final = self.backend.export_state()
        self.writer.write(final)
        return final

    def _probe(self, names: list[str]) -> dict[str, float]:
        n, k = self.config.linear.n_crit, self.config.probe_level
        return {name: float(self.backend.read(name)[n, k]) for name in names}

    def run_linear(self) -> float:
        """Measure the growth of the tracked mode under the linearized equations.

        Every check_interval steps the log-ratio log|x| - log|x_prev| of each
        of θ, ω, ψ (and ξ) at (n_crit, probe_level) is compared with the
        ratio from the previous window. When all agree to within tolerance
        the θ log-ratio is returned: positive means the mode grows, negative
        that it decays. It is per window, so the growth rate per unit time is
        this value / (check_interval·dt).

        Returns:
            Converged θ log-ratio, or CONVERGENCE_TIMEOUT (0.0) if total_time
            elapses first

        Raises:
            ValidationError: If n_crit is not one of the grid's modes
        """
        cfg = self.config
        lin = cfg.linear
        if lin.n_crit >= self.geometry.n_n:
            raise ValidationError(
                f"n_crit ({lin.n_crit}) must be < n_n ({self.geometry.n_n})"
            )
        self.load(
            linear_initial_conditions(
                self.geometry,
                lin.temperature_gradient,
                lin.solute_gradient,
                cfg.double_diffusive,
            )
        )
        names = self.backend.prognostic_fields() + ["psi"]
        previous = self._probe(names)
        previous_ratios: dict[str, float] | None = None

        while cfg.time.total_time - self.time > EPSILON:
            if self.steps % lin.check_interval == 0:
                current = self._probe(names)
                ratios = _log_ratios(current, previous)
                if ratios is not None and previous_ratios is not None:
                    if all(
                        abs(ratios[name] - previous_ratios[name]) < lin.tolerance
                        for name in names
                    ):
                        rate = ratios["tmp"] / (lin.check_interval * self.dt)
                        logger.info(
                            "Ra=%g n=%d converged after %d steps: log-ratio %.6e "
                            "(rate %.6e per unit time)",
                            cfg.physics.rayleigh, lin.n_crit, self.steps, ratios["tmp"], rate,
                        )
                        return ratios["tmp"]
                previous_ratios = ratios
                previous = current
            self.step(linear=True)

        logger.warning(
            "Ra=%g n=%d: growth rate did not converge within t=%g",
            cfg.physics.rayleigh, lin.n_crit, cfg.time.total_time,
        )
        return CONVERGENCE_TIMEOUT


def _log_ratios(current: dict[str, float], previous: dict[str, float]) -> dict[str, float] | None:
    """log|x| - log|x_prev| per field, or None while any amplitude is zero."""
    values = list(current.values()) + list(previous.values())
    if any(v == 0.0 or not math.isfinite(v) for v in values):
        return None
    return {
        name: float(np.log(abs(current[name])) - np.log(abs(previous[name])))
        for name in current
    }


def growth_rate(config: SimulationConfig, rayleigh: float) -> float:
    """run_linear at the given Rayleigh number with everything else from config."""
    run_config = config.with_updates(physics={"rayleigh": rayleigh})
    with Simulation(run_config) as sim:
        return sim.run_linear()


def find_critical_rayleigh(
    config: SimulationConfig,
    low: float,
    high: float,
    iterations: int = 20,
    rtol: float = 1e-4,
) -> float:
    """Bisect on Ra for the onset of instability of mode n_crit.

    Args:
        config: Base configuration (grid, Pr, linear settings)
        low: Rayleigh number at which the mode decays
        high: Rayleigh number at which the mode grows
        iterations: Maximum number of bisection steps
        rtol: Stop once (high - low) / high falls below this

    Returns:
        Midpoint of the final bracket

    Raises:
        ValueError: If [low, high] does not bracket the onset
        SimulationError: If a growth-rate measurement does not converge
    """
    if not 0 <= low < high:
        raise ValueError(f"Need 0 <= low < high, got low={low}, high={high}")

    def sign(ra: float) -> float:
        rate = growth_rate(config, ra)
        if rate == CONVERGENCE_TIMEOUT:
            raise SimulationError(
                f"Growth rate at Ra={ra:g} did not converge; increase total_time"
            )
        return rate

    if sign(low) > 0:
        raise ValueError(f"Mode already grows at low={low:g}")
    if sign(high) < 0:
        raise ValueError(f"Mode still decays at high={high:g}")

    for _ in range(iterations):
        mid = 0.5 * (low + high)
        if sign(mid) > 0:
            high = mid
        else:
            low = mid
        logger.info("Critical Ra bracket: [%g, %g]", low, high)
        if (high - low) / high < rtol:
            break
    return 0.5 * (low + high)
