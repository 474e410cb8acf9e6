"""
Erosion and uplift submodule for pyfastscape.

Core Modules:
- SPL: implicit Stream Power Law erosion solved per cell with capped
  Newton-Raphson, swept over the level schedule from the sinks outward
- uplift: uniform (block) and spatially variable uplift

Available Functions:
- block_uplift: uniform uplift of nodes deep enough in the grid
- ext_uplift: spatially variable uplift, same ring rule
- erode_level_SPL: SPL update kernel for one level
- SPL: one erosion time step on a routed FlowRouter

Usage:
    import pyfastscape as pfs

    router.route()
    pfs.erodep.block_uplift(grid.z.field, 2e-3, 1e3, grid.nx, grid.ny, grid.uplift_ring)
    pfs.erodep.SPL(router, K = 2e-6, m = 0.8, n = 2., dt = 1e3)

Physical Background:
E = K * A^m * S^n, with A the drainage area and S the slope towards the D8
receiver. The backward Euler scheme is unconditionally stable, which permits
large time steps even though the flow network changes every step.
"""

from .uplift import block_uplift, ext_uplift
from .SPL import newton_SPL, erode_level_SPL, SPL

__all__ = [
    "block_uplift",
    "ext_uplift",
    "newton_SPL",
    "erode_level_SPL",
    "SPL",
]
