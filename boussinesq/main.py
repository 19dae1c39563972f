"""CLI entry point for the Boussinesq convection solver.

    boussinesq-run nonlinear --config run.yaml --output out/
    boussinesq-run linear --ra 1100 --nz 10 --nn 5 --aspect 1
    boussinesq-run critical --low 500 --high 1100 --nz 10 --nn 5 --aspect 1
"""

import argparse
import logging
import sys
from pathlib import Path

from boussinesq.config import init_taichi
from boussinesq.errors import SimulationError
from boussinesq.params import ValidationError, load_config_with_overrides, save_config
from boussinesq.simulation import Simulation, find_critical_rayleigh

logger = logging.getLogger("boussinesq")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boussinesq-run", description="Boussinesq Rayleigh-Benard convection"
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="More logging (-v info, -vv debug)")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=str, help="Path to YAML configuration file")
    common.add_argument("--backend", choices=["reference", "device"],
                        help="Compute backend. Overrides config.")
    common.add_argument("--arch", choices=["auto", "cpu", "cuda", "vulkan"],
                        help="Taichi arch for the device backend. Overrides config.")
    common.add_argument("--workers", type=int, help="Reference backend threads")
    common.add_argument("--nz", type=int, help="Vertical levels. Overrides config.")
    common.add_argument("--nn", type=int, help="Fourier modes. Overrides config.")
    common.add_argument("--aspect", type=float, help="Aspect ratio. Overrides config.")
    common.add_argument("--ra", type=float, help="Rayleigh number. Overrides config.")
    common.add_argument("--pr", type=float, help="Prandtl number. Overrides config.")
    common.add_argument("--ra-xi", type=float, help="Solutal Rayleigh number (enables double diffusion)")
    common.add_argument("--tau", type=float, help="Diffusivity ratio (enables double diffusion)")
    common.add_argument("--dt", type=float, help="Time step. Overrides config.")
    common.add_argument("--total-time", type=float, help="Run length. Overrides config.")

    sub = parser.add_subparsers(dest="command", required=True)

    nonlinear = sub.add_parser("nonlinear", parents=[common], help="Full nonlinear run")
    nonlinear.add_argument("--output", type=str, help="Output directory")
    nonlinear.add_argument("--ic", type=str, help="Initial-condition snapshot")
    nonlinear.add_argument("--fixed-dt", action="store_true", help="Disable CFL step control")

    linear = sub.add_parser("linear", parents=[common], help="Linear growth rate of one mode")
    linear.add_argument("--n-crit", type=int, help="Tracked mode")

    critical = sub.add_parser("critical", parents=[common], help="Bisect for the critical Ra")
    critical.add_argument("--n-crit", type=int, help="Tracked mode")
    critical.add_argument("--low", type=float, required=True, help="Ra at which the mode decays")
    critical.add_argument("--high", type=float, required=True, help="Ra at which the mode grows")
    critical.add_argument("--iterations", type=int, default=20)

    return parser


def collect_overrides(args: argparse.Namespace) -> dict:
    """Map CLI flags onto parameter groups, skipping flags not given."""
    groups = {
        "grid": {"n_z": args.nz, "n_n": args.nn, "aspect": args.aspect},
        "physics": {"rayleigh": args.ra, "prandtl": args.pr},
        "double_diffusion": {"rayleigh_xi": args.ra_xi, "tau": args.tau},
        "time": {"dt": args.dt, "total_time": args.total_time},
        "backend": {"variant": args.backend, "arch": args.arch, "workers": args.workers},
        "output": {
            "output_dir": getattr(args, "output", None),
            "ic_file": getattr(args, "ic", None),
        },
        "linear": {"n_crit": getattr(args, "n_crit", None)},
    }
    if getattr(args, "fixed_dt", False):
        groups["time"]["adaptive_dt"] = False

    overrides = {}
    for group, values in groups.items():
        values = {k: v for k, v in values.items() if v is not None}
        if values:
            overrides[group] = values
    return overrides


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config_with_overrides(args.config, collect_overrides(args))
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    except OSError as e:
        logger.error("Could not read configuration: %s", e)
        return 1

    if config.backend.variant == "device":
        init_taichi(config.backend.arch)

    try:
        if args.command == "nonlinear":
            save_config(config, Path(config.output.output_dir) / "config.yaml")
            with Simulation(config) as sim:
                sim.run_nonlinear()
            print(f"Finished at t = {sim.time:.6e}; output in {config.output.output_dir}")
        elif args.command == "linear":
            with Simulation(config) as sim:
                ratio = sim.run_linear()
            print(f"{config.physics.rayleigh:g} {config.linear.n_crit} {ratio:.12e}")
        else:
            ra_crit = find_critical_rayleigh(config, args.low, args.high, args.iterations)
            print(f"Critical Ra for n={config.linear.n_crit}: {ra_crit:.6f}")
    except (OSError, SimulationError, ValueError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
