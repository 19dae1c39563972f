"""
Backend benchmark for the convection solver.

Times nonlinear steps on both backends across grid sizes to quantify:
1. Step rate (steps / second)
2. Throughput (mode-level points advanced per second)
3. Device speed-up over the reference backend

Usage:
    python -m benchmarks.benchmark
"""

import gc
import time
from dataclasses import dataclass

import taichi as ti

from boussinesq.config import init_taichi
from boussinesq.core.grid import GridGeometry
from boussinesq.initialization import conduction_initial_conditions
from boussinesq.kernels import BackendVariant, TermParams, get_registry


@dataclass
class BenchmarkMetrics:
    variant: str
    n_z: int
    n_n: int
    steps: int
    wall_time_s: float

    @property
    def steps_per_second(self) -> float:
        return self.steps / self.wall_time_s

    @property
    def megapoints_per_second(self) -> float:
        return self.n_z * self.n_n * self.steps / self.wall_time_s / 1e6


class BenchmarkRunner:
    def __init__(self, arch: str = "auto"):
        print("Initializing Taichi...")
        self.arch = init_taichi(arch, debug=False)
        self.registry = get_registry()
        self.terms = TermParams(rayleigh=1e6, prandtl=0.5)

    def run_single(self, variant: BackendVariant, n_z: int, n_n: int, steps: int = 200) -> BenchmarkMetrics:
        """Time `steps` nonlinear steps on one backend and grid."""
        print(f"\n{variant.name.lower()} {n_n} modes x {n_z} levels...")
        gc.collect()

        geometry = GridGeometry(n_z=n_z, n_n=n_n, aspect=3.0)
        backend = self.registry.get(variant, geometry, self.terms)
        backend.load_state(conduction_initial_conditions(geometry, seed=42))

        def step():
            backend.compute_linear_derivatives()
            backend.compute_nonlinear_derivatives()
            backend.integrate(1.0, 1e-7)
            backend.solve_psi()
            backend.advance()

        print("  Warming up JIT...", end=" ", flush=True)
        for _ in range(5):
            step()
        backend.synchronize()
        print("Done.")

        start_time = time.perf_counter()
        for _ in range(steps):
            step()
        backend.synchronize()
        wall_time = time.perf_counter() - start_time
        backend.close()

        return BenchmarkMetrics(variant.name.lower(), n_z, n_n, steps, wall_time)

    def print_report(self, results: list[BenchmarkMetrics]):
        print("\n" + "=" * 72)
        print(f"{f'BENCHMARK RESULTS ({self.arch})':^72}")
        print("=" * 72)
        print(f"{'Backend':<11} {'n_n':<6} {'n_z':<6} {'Time (s)':<10} {'Steps/s':<12} {'MPoints/s':<10}")
        print("-" * 72)
        for r in results:
            print(
                f"{r.variant:<11} {r.n_n:<6} {r.n_z:<6} "
                f"{r.wall_time_s:>8.2f}   {r.steps_per_second:>10.1f}   "
                f"{r.megapoints_per_second:>8.3f}"
            )
        print("=" * 72)


def main():
    runner = BenchmarkRunner()
    sizes = [(101, 51), (201, 101), (401, 201)]

    results = []
    for n_z, n_n in sizes:
        for variant in (BackendVariant.REFERENCE, BackendVariant.DEVICE):
            results.append(runner.run_single(variant, n_z, n_n))

    runner.print_report(results)


if __name__ == "__main__":
    main()
