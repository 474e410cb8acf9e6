"""Tests for the Grid class, D8 navigation and synthetic terrains."""
import numpy as np
import pytest
import taichi as ti

import pyfastscape as pfs
from pyfastscape import constants as cte
from pyfastscape.grid import neighbourer_d8 as nei


@ti.kernel
def _neighbours_of(i: ti.i32, nx: ti.i32, ny: ti.i32, out: ti.types.ndarray(dtype=ti.i32, ndim=1)):
    for k in ti.static(range(8)):
        out[k] = nei.neighbour(i, k, nx, ny)


@ti.kernel
def _ring_depths(nx: ti.i32, ny: ti.i32, out: ti.types.ndarray(dtype=ti.i32, ndim=1)):
    for i in range(nx * ny):
        out[i] = nei.ring_depth(i, nx, ny)


class TestNeighbourer:
    def test_interior_neighbours_follow_table(self):
        nx, ny = 6, 5
        out = np.zeros(8, dtype=np.int32)
        i = 2 * nx + 3
        _neighbours_of(i, nx, ny, out)
        expected = [i + off for off in nei.d8_offsets(nx)]
        assert out.tolist() == expected

    def test_corner_neighbours_out_of_grid(self):
        nx, ny = 6, 5
        out = np.zeros(8, dtype=np.int32)
        _neighbours_of(0, nx, ny, out)
        # only E, SE and S exist from the top left corner
        assert out.tolist() == [-1, -1, -1, -1, 1, nx + 1, nx, -1]

    def test_no_wrap_on_row_end(self):
        nx, ny = 6, 5
        out = np.zeros(8, dtype=np.int32)
        _neighbours_of(nx - 1 + nx, nx, ny, out)
        # east neighbours of the last column do not wrap to the next row
        assert out[3] == -1 and out[4] == -1 and out[5] == -1

    def test_ring_depth_kernel_matches_host(self):
        nx, ny = 7, 5
        out = np.zeros(nx * ny, dtype=np.int32)
        _ring_depths(nx, ny, out)
        np.testing.assert_array_equal(out.reshape(ny, nx), nei.ring_depth_array(nx, ny))

    def test_ring_depth_array(self):
        depth = nei.ring_depth_array(5, 5)
        assert depth[2, 2] == 2
        assert np.all(depth[0, :] == 0)
        assert np.count_nonzero(depth == 1) == 8

    def test_receiver_indices(self):
        nx = 4
        rcv = np.full(12, cte.NO_FLOW, dtype=np.int32)
        rcv[5] = 4
        rcv[6] = 1
        res = nei.receiver_indices(rcv, nx)
        assert res[5] == 6
        assert res[6] == 1
        assert res[0] == cte.NO_FLOW

    def test_diagonal_distances(self):
        assert cte.D8_DIST[1] == pytest.approx(np.sqrt(2))
        assert cte.D8_DIST[4] == 1.0


class TestGrid:
    def test_round_trip_heights(self, make_grid):
        z = np.arange(30, dtype=np.float64).reshape(5, 6)
        grid = make_grid(z, dx=10.0)
        np.testing.assert_array_equal(grid.get_Z(), z)
        assert grid.size == 30
        assert grid.n_routed == 4 * 3

    def test_defaults_from_constants(self, make_grid):
        grid = make_grid(np.zeros((6, 6)))
        assert grid.flow_ring == cte.FLOW_RING
        assert grid.uplift_ring == cte.UPLIFT_RING

    def test_distances_scaled(self, make_grid):
        grid = make_grid(np.zeros((5, 5)), dx=3.0)
        assert grid.distances[0] == 3.0
        assert grid.distances[1] == pytest.approx(3.0 * np.sqrt(2))

    def test_too_small(self):
        with pytest.raises(ValueError):
            pfs.grid.Grid(4, 6, 1.0, np.zeros((6, 4)))
        with pytest.raises(ValueError):
            pfs.grid.Grid(2, 2, 1.0, np.zeros((2, 2)), flow_ring=1)

    @pytest.mark.parametrize("dx", [0.0, -1.0, float("nan"), float("inf")])
    def test_bad_spacing(self, dx):
        with pytest.raises(ValueError):
            pfs.grid.Grid(5, 5, dx, np.zeros((5, 5)))

    def test_bad_heights(self):
        with pytest.raises(ValueError):
            pfs.grid.Grid(5, 5, 1.0, np.zeros((4, 5)))
        z = np.zeros((5, 5))
        z[2, 2] = np.nan
        with pytest.raises(ValueError):
            pfs.grid.Grid(5, 5, 1.0, z)

    def test_bad_rings(self):
        with pytest.raises(ValueError):
            pfs.grid.Grid(5, 5, 1.0, np.zeros((5, 5)), flow_ring=0)
        with pytest.raises(ValueError):
            pfs.grid.Grid(5, 5, 1.0, np.zeros((5, 5)), uplift_ring=0)

    def test_hillshade_shape(self, make_grid):
        grid = make_grid(pfs.grid.ramp_terrain(8, 6))
        hs = grid.hillshade()
        assert hs.shape == (6, 8)


class TestTerrain:
    def test_random_terrain_fixed_rings(self):
        z = pfs.grid.random_terrain(10, 8, seed=3, fixed_rings=2)
        depth = nei.ring_depth_array(10, 8)
        assert np.all(z[depth < 2] == 0.0)
        assert np.all(z[depth >= 2] >= 0.0)
        assert np.all(z < 1.0)

    def test_random_terrain_seeded(self):
        np.testing.assert_array_equal(pfs.grid.random_terrain(9, 9, seed=1), pfs.grid.random_terrain(9, 9, seed=1))

    def test_ramp(self):
        z = pfs.grid.ramp_terrain(5, 3, slope=2.0)
        np.testing.assert_array_equal(z[0], [8.0, 6.0, 4.0, 2.0, 0.0])
        assert z.shape == (3, 5)
