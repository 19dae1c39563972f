"""Tests for the boussinesq-run command line."""

import numpy as np
import pytest

from boussinesq.main import build_parser, collect_overrides, main
from boussinesq.params.loader import load_config

SMALL_RUN = ["--nz", "9", "--nn", "3", "--dt", "1e-4", "--total-time", "5e-4"]


class TestOverrides:

    def test_only_given_flags(self):
        args = build_parser().parse_args(["linear", "--ra", "900", "--nz", "10"])
        assert collect_overrides(args) == {
            "grid": {"n_z": 10},
            "physics": {"rayleigh": 900.0},
        }

    def test_fixed_dt_and_output(self):
        args = build_parser().parse_args(["nonlinear", "--fixed-dt", "--output", "out"])
        overrides = collect_overrides(args)
        assert overrides["time"] == {"adaptive_dt": False}
        assert overrides["output"] == {"output_dir": "out"}


class TestExitStatus:

    def test_nonlinear_run(self, tmp_path, capsys):
        out = tmp_path / "run"
        assert main(["nonlinear", *SMALL_RUN, "--output", str(out)]) == 0
        assert "Finished" in capsys.readouterr().out
        assert load_config(out / "config.yaml").grid.n_n == 3
        assert list(out.glob("vars*.dat"))
        assert np.fromfile(out / "KineticEnergy.dat", dtype=np.float64).size > 0

    def test_unwritable_output(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        assert main(["nonlinear", *SMALL_RUN, "--output", str(blocker / "out")]) == 1

    def test_missing_initial_conditions(self, tmp_path):
        args = ["nonlinear", *SMALL_RUN, "--output", str(tmp_path / "run"),
                "--ic", str(tmp_path / "missing.dat")]
        assert main(args) == 1

    def test_missing_config(self, tmp_path):
        assert main(["linear", "--config", str(tmp_path / "none.yaml")]) == 1

    def test_malformed_config(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("grid: {n_z: 10\n")
        assert main(["linear", "--config", str(path)]) == 1

    def test_invalid_parameter(self):
        assert main(["linear", "--nz", "2"]) == 1

    def test_linear_reports_ratio(self, capsys):
        args = ["linear", "--nz", "10", "--nn", "5", "--aspect", "1", "--ra", "1100",
                "--dt", "5e-4", "--total-time", "0.3"]
        assert main(args) == 0
        ra, n, ratio = capsys.readouterr().out.split()
        assert (float(ra), int(n)) == (1100.0, 1)
        # 0.3 time units is too short to converge
        assert float(ratio) == 0.0

    def test_tracked_mode_outside_grid(self):
        assert main(["linear", "--nz", "10", "--nn", "2", "--n-crit", "2"]) == 1

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            main([])
