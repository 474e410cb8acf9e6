"""Pytest configuration and fixtures for pyfastscape tests."""
import pytest
import numpy as np
import taichi as ti

import pyfastscape as pfs


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    """One taichi runtime for the whole session, CPU backend in double precision."""
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=0)
    yield
    pfs.pool.clear_pool()


@pytest.fixture
def pit_z():
    """5x5 grid: inner 3x3 block at 1 around a pit at 0, outer ring at 10."""
    z = np.full((5, 5), 10.0)
    z[1:4, 1:4] = 1.0
    z[2, 2] = 0.0
    return z


@pytest.fixture
def make_grid():
    """Grid factory, every grid built through it is released after the test."""
    grids = []

    def _make(z, dx=1.0, **kwargs):
        ny, nx = z.shape
        grid = pfs.grid.Grid(nx, ny, dx, z, **kwargs)
        grids.append(grid)
        return grid

    yield _make
    for grid in grids:
        grid.destroy()


@pytest.fixture
def make_router(make_grid):
    """FlowRouter factory on a fresh grid, released after the test."""
    routers = []

    def _make(z, dx=1.0, flow_ring=None, uplift_ring=None, **kwargs):
        grid = make_grid(z, dx=dx, flow_ring=flow_ring, uplift_ring=uplift_ring)
        router = pfs.flow.FlowRouter(grid, **kwargs)
        routers.append(router)
        return router

    yield _make
    for router in routers:
        router.destroy()
