"""
D8 flow routing submodule for pyfastscape.

Core Modules:
- receivers: steepest descent receiver computation (data-parallel map)
- donors: inversion of the receiver map (gather or atomic scatter)
- stack: level-synchronous topological schedule of the flow forest
- accumulation: drainage area reduction over the schedule
- flowfields: FlowRouter class with pool-based field management

Usage:
    import pyfastscape as pfs
    import taichi as ti

    ti.init(ti.cpu)
    z = pfs.grid.random_terrain(201, 201, seed = 1)
    grid = pfs.grid.Grid(201, 201, 100., z)
    router = pfs.flow.FlowRouter(grid)

    router.route()                     # receivers, donors, schedule, drainage area
    area = router.get_Q()
    print(router.nlevels, "levels")
"""

from .receivers import compute_receivers, compute_receivers_slope
from .donors import rcv2donor_gather, rcv2donor_scatter, build_donors
from .stack import LevelSchedule
from .accumulation import init_accumulation, accumulate_level, accumulate_drainage_area
from .flowfields import FlowRouter

__all__ = [
    "compute_receivers",
    "compute_receivers_slope",
    "rcv2donor_gather",
    "rcv2donor_scatter",
    "build_donors",
    "LevelSchedule",
    "init_accumulation",
    "accumulate_level",
    "accumulate_drainage_area",
    "FlowRouter",
]
