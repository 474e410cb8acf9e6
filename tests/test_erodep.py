"""Tests for uplift and implicit Stream Power Law erosion."""
import numpy as np
import pytest

import pyfastscape as pfs
from pyfastscape import constants as cte


def _chain_z():
    """5x3 grid whose routed row is a chain 3 -> 2 -> 1 (column indices), column 1 the sink."""
    z = np.full((3, 5), 9.0)
    z[1, 1:4] = [0.0, 1.0, 2.0]
    return z


class TestUplift:
    def test_block_uplift_respects_ring(self, make_grid):
        grid = make_grid(np.zeros((7, 7)))
        pfs.erodep.block_uplift(grid.z.field, 2e-3, 1e3, grid.nx, grid.ny, grid.uplift_ring)
        z = grid.get_Z()
        depth = grid.ring_depth()
        np.testing.assert_allclose(z[depth >= 2], 2.0)
        assert np.all(z[depth < 2] == 0.0)

    def test_ext_uplift(self, make_grid):
        grid = make_grid(np.zeros((6, 6)), uplift_ring=1)
        rate = pfs.pool.get_temp_field(cte.FTYPE, (grid.size,))
        try:
            rate.from_numpy(np.arange(grid.size, dtype=np.float64))
            pfs.erodep.ext_uplift(grid.z.field, rate.field, 2.0, grid.nx, grid.ny, grid.uplift_ring)
        finally:
            rate.release()
        z = grid.get_Z().ravel()
        depth = grid.ring_depth().ravel()
        np.testing.assert_allclose(z[depth >= 1], 2.0 * np.nonzero(depth >= 1)[0])
        assert np.all(z[depth == 0] == 0.0)


class TestSPL:
    def test_linear_chain_closed_form(self, make_router):
        router = make_router(_chain_z(), flow_ring=1)
        router.route(cell_area=1.0)
        K, m, dt = 0.1, 0.5, 1.0
        pfs.erodep.SPL(router, K=K, m=m, n=1.0, dt=dt, tol=1e-12)

        f2 = K * dt * 2.0 ** m
        f3 = K * dt * 1.0 ** m
        h2 = (1.0 + f2 * 0.0) / (1.0 + f2)
        h3 = (2.0 + f3 * h2) / (1.0 + f3)
        z = router.get_Z()
        assert z[1, 1] == 0.0
        assert z[1, 2] == pytest.approx(h2, rel=1e-10)
        assert z[1, 3] == pytest.approx(h3, rel=1e-10)

    def test_nonlinear_residual(self, make_router):
        router = make_router(_chain_z(), flow_ring=1)
        router.route(cell_area=1.0)
        z0 = router.get_Z().copy()
        K, m, n, dt = 0.3, 0.5, 2.0, 1.0
        pfs.erodep.SPL(router, K=K, m=m, n=n, dt=dt, tol=1e-12)
        z = router.get_Z()
        Q = router.get_Q()
        for col in (2, 3):
            fact = K * dt * Q[1, col] ** m
            h, hr = z[1, col], z[1, col - 1]
            assert h - z0[1, col] + fact * (h - hr) ** n == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("n", [0.5, 1.0, 1.5, 2.0])
    def test_erosion_lowers_and_keeps_order(self, n, make_router):
        z0 = pfs.grid.random_terrain(30, 25, seed=10, amplitude=100.0)
        router = make_router(z0, dx=100.0)
        router.route()
        pfs.erodep.SPL(router, K=2e-5, m=0.5, n=n, dt=1e3)
        z = router.get_Z().ravel()
        assert np.all(z <= z0.ravel() + 1e-12)
        rcv = router.get_receiver_indices().ravel()
        flows = rcv != cte.NO_FLOW
        assert np.all(z[flows] >= z[rcv[flows]])

    def test_concave_exponent_stays_above_receiver(self, make_router):
        # n < 1: a plain Newton step from h0 overshoots below the receiver
        z = np.full((3, 5), 30.0)
        z[1, 1:4] = [0.0, 10.0, 20.0]
        router = make_router(z, flow_ring=1)
        router.route(cell_area=1.0)
        K, m, n, dt = 100.0, 0.5, 0.5, 1.0 / np.sqrt(2.0)
        pfs.erodep.SPL(router, K=K, m=m, n=n, dt=dt, tol=1e-10)
        zn = router.get_Z()
        Q = router.get_Q()

        # fact = 100 next to the sink: h + 100 sqrt(h) = 10
        s = (-100.0 + np.sqrt(100.0 ** 2 + 40.0)) / 2.0
        assert zn[1, 2] == pytest.approx(s * s, rel=1e-6)
        for col in (2, 3):
            h, hr, h0 = zn[1, col], zn[1, col - 1], z[1, col]
            assert hr <= h <= h0
            fact = K * dt * Q[1, col] ** m
            assert h - h0 + fact * (h - hr) ** n == pytest.approx(0.0, abs=1e-6)

    def test_sinks_and_outer_ring_untouched(self, make_router):
        z0 = pfs.grid.random_terrain(20, 20, seed=12)
        router = make_router(z0)
        router.route()
        sinks = router.schedule.get_level(0)
        pfs.erodep.SPL(router)
        z = router.get_Z().ravel()
        np.testing.assert_array_equal(z[sinks], z0.ravel()[sinks])
        depth = router.grid.ring_depth().ravel()
        np.testing.assert_array_equal(z[depth == 0], z0.ravel()[depth == 0])

    def test_iteration_cap_raises(self, make_router):
        router = make_router(_chain_z(), flow_ring=1)
        router.route(cell_area=1.0)
        with pytest.raises(pfs.NewtonConvergenceError) as info:
            pfs.erodep.SPL(router, K=0.5, m=0.5, n=2.0, dt=1.0, tol=1e-14, max_iterations=1)
        assert info.value.nfailed == 2
        assert info.value.max_iterations == 1
