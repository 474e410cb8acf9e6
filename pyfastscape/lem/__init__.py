"""
Landscape evolution driver for pyfastscape.

Core Classes:
- LandscapeModel: owns the parameters and sequences one time step
  (receivers, donors, schedule, drainage area, uplift, implicit erosion)
- CumulativeTimer / PhaseTimers: per-phase wall-clock timings

Usage:
    import taichi as ti
    import pyfastscape as pfs

    ti.init(ti.cpu)
    z = pfs.grid.random_terrain(101, 101, seed = 0)
    grid = pfs.grid.Grid(101, 101, 200., z)
    model = pfs.lem.LandscapeModel(grid, K = 2e-6, m = 0.8, n = 2., uplift = 2e-3, dt = 1e3)
    z_final = model.run(120)
    print(model.timers.report())
"""

from .model import LandscapeModel
from .timers import CumulativeTimer, PhaseTimers

__all__ = [
    "LandscapeModel",
    "CumulativeTimer",
    "PhaseTimers",
]
