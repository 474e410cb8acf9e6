"""
Grid management and D8 topology for pyfastscape.

Core Classes:
- Grid: 2D regular grid with elevation data and halo ring configuration

Modules:
- neighbourer_d8: taichi functions for flat-index <-> (row, col) conversion,
  ring depth and bounds-checked D8 neighbour lookup
- terrain: synthetic initial topographies (white noise, ramp)

Halo rings:
The outermost ring never flows and is excluded from the schedule. Cells of
depth >= flow_ring compute receivers and erode; the rings in between are sinks
at fixed elevation. Cells of depth >= uplift_ring are uplifted.

Usage:
    import pyfastscape as pfs

    z = pfs.grid.random_terrain(101, 101, seed = 42)
    grid = pfs.grid.Grid(101, 101, 200., z)
    depth = grid.ring_depth()
"""

from . import neighbourer_d8
from .gridfields import Grid
from .terrain import random_terrain, ramp_terrain

__all__ = [
    "Grid",
    "neighbourer_d8",
    "random_terrain",
    "ramp_terrain",
]
