"""
PyFastScape - parallel D8 landscape evolution with Taichi.

A landscape evolution model coupling D8 steepest descent flow routing, drainage
area accumulation, block uplift and implicit Stream Power Law fluvial erosion
on a regular grid. Every phase of a time step is data parallel: the
flow forest is ordered into levels (topological depth from the sinks) and each
level is processed by one parallel kernel launch, the host loop over levels
acting as the synchronisation barrier.

Core Components:
- grid: Grid class, D8 topology, halo rings, synthetic terrains
- flow: receivers, donors, level schedule, drainage area (FlowRouter)
- erodep: uplift and implicit Stream Power Law erosion
- lem: LandscapeModel time stepping and phase timers
- general_algorithms: parallel scan and stream compaction
- pool: Taichi field pooling
- io: ESRI ASCII grid export
- visu: hillshading and matplotlib maps
- constants: default grid and model parameters
- errors: exception hierarchy

Basic Usage:
    import pyfastscape as pfs
    import taichi as ti

    ti.init(ti.gpu, default_fp = ti.f64)

    nx, ny, dx = 201, 201, 200.
    z = pfs.grid.random_terrain(nx, ny, seed = 42)
    grid = pfs.grid.Grid(nx, ny, dx, z)

    model = pfs.lem.LandscapeModel(grid, K = 2e-6, m = 0.8, n = 2., uplift = 2e-3, dt = 1e3)
    z_final = model.run(120)

    pfs.io.write_ascii_grid("dem.asc", z_final, cellsize = dx)
    hillshade = pfs.visu.hillshade_numpy(z_final, dx = dx)

Scientific Background:
Braun and Willett (2013) for the implicit SPL scheme and the stack ordering,
Jain et al. (2024) for the parallel formulation of flow routines.
"""

__version__ = "0.1.0"

# Import all submodules in alphabetical order
from . import constants
from . import erodep
from . import errors
from . import flow
from . import general_algorithms
from . import grid
from . import io
from . import lem
from . import pool
from . import visu

from .errors import FastScapeError, CapacityError, ScheduleError, NewtonConvergenceError

# Export all submodules
__all__ = [
    "constants",
    "erodep",
    "errors",
    "flow",
    "general_algorithms",
    "grid",
    "io",
    "lem",
    "pool",
    "visu",
    "FastScapeError",
    "CapacityError",
    "ScheduleError",
    "NewtonConvergenceError",
]
