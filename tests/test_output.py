"""Tests for binary snapshot files."""

import numpy as np
import pytest

from boussinesq.core.grid import GridGeometry
from boussinesq.errors import SnapshotError
from boussinesq.output import SnapshotWriter, load_snapshot, save_snapshot, snapshot_size

GRID = GridGeometry(n_z=9, n_n=4)


class TestSnapshot:

    @pytest.mark.parametrize("double_diffusive", [False, True])
    def test_bit_exact_round_trip(self, tmp_path, random_state, double_diffusive):
        state = random_state(GRID, double_diffusive=double_diffusive, seed=41)
        path = save_snapshot(tmp_path / "vars0.dat", state)
        loaded = load_snapshot(path, GRID, double_diffusive)
        for name in state.names():
            np.testing.assert_array_equal(getattr(loaded, name), getattr(state, name))

    def test_size(self, tmp_path, random_state):
        path = save_snapshot(tmp_path / "s.dat", random_state(GRID))
        assert path.stat().st_size == snapshot_size(GRID) == 7 * 36 * 8
        assert snapshot_size(GRID, double_diffusive=True) == 10 * 36 * 8

    def test_block_order(self, tmp_path, random_state):
        state = random_state(GRID, double_diffusive=True, seed=42)
        path = save_snapshot(tmp_path / "s.dat", state)
        blocks = np.fromfile(path, dtype=np.float64).reshape(-1, *GRID.shape)
        expected = [
            state.tmp, state.omg, state.psi, state.xi,
            state.dtmp[0], state.dtmp[1], state.domg[0], state.domg[1],
            state.dxi[0], state.dxi[1],
        ]
        for block, values in zip(blocks, expected):
            np.testing.assert_array_equal(block, values)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError):
            load_snapshot(tmp_path / "missing.dat", GRID)

    def test_truncated_file(self, tmp_path, random_state):
        path = save_snapshot(tmp_path / "s.dat", random_state(GRID))
        path.write_bytes(path.read_bytes()[:-8])
        with pytest.raises(SnapshotError, match="bytes"):
            load_snapshot(path, GRID)

    def test_wrong_grid(self, tmp_path, random_state):
        path = save_snapshot(tmp_path / "s.dat", random_state(GRID))
        with pytest.raises(SnapshotError):
            load_snapshot(path, GridGeometry(n_z=9, n_n=5))

    def test_double_diffusion_mismatch(self, tmp_path, random_state):
        path = save_snapshot(tmp_path / "s.dat", random_state(GRID))
        with pytest.raises(SnapshotError):
            load_snapshot(path, GRID, double_diffusive=True)

    def test_snapshot_error_is_os_error(self, tmp_path):
        with pytest.raises(OSError):
            load_snapshot(tmp_path, GRID)

    def test_unwritable_path(self, tmp_path, random_state):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(SnapshotError):
            save_snapshot(blocker / "vars0.dat", random_state(GRID))


class TestSnapshotWriter:

    def test_numbering(self, tmp_path, random_state):
        writer = SnapshotWriter(tmp_path / "out")
        state = random_state(GRID)
        paths = [writer.write(state) for _ in range(3)]
        assert [p.name for p in paths] == ["vars0.dat", "vars1.dat", "vars2.dat"]
        assert writer.number == 3
