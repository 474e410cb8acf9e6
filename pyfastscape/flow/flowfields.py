"""
High-level FlowRouter class for D8 flow routing on a Grid.

Owns the per-step fields (receivers, donor lists, drainage area) and the level
schedule, and chains receiver computation, donor inversion, scheduling and
accumulation. All of them are rebuilt from scratch whenever the heights
change; only the grid's height field persists.
"""

import logging

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool
from ..grid import neighbourer_d8 as nei
from . import accumulation as acc
from . import donors as dnr
from . import receivers as rcv
from .stack import LevelSchedule

logger = logging.getLogger(__name__)


class FlowRouter:
    """
    Interface for D8 flow routing computations.

    Attributes:
        grid (Grid): Grid holding the heights
        receivers (TPField): Direction-coded receivers (ti.i32)
        donors (TPField): Donor lists, 8 slots per node (ti.i32)
        ndonors (TPField): Number of donors per node (ti.i32)
        Q (TPField): Drainage area (cte.FTYPE)
        schedule (LevelSchedule): Stack and levels
    """

    def __init__(self, grid, donor_method = 'gather', order_method = 'scan', validate = False):
        """
        Args:
            grid (Grid): The grid to route flow on
            donor_method (str): 'gather' (inverted writes) or 'scatter' (atomics)
            order_method (str): 'scan' (prefix sum) or 'atomic' (shared cursor)
            validate (bool): Run the host-side schedule check after every build
        """
        if donor_method not in ('gather', 'scatter'):
            raise ValueError(f"Unknown donor method '{donor_method}', expected 'gather' or 'scatter'")
        if order_method not in ('scan', 'atomic'):
            raise ValueError(f"Unknown ordering method '{order_method}', expected 'scan' or 'atomic'")

        self.grid = grid
        self.donor_method = donor_method
        self.order_method = order_method
        self.validate = validate

        n = self.nx * self.ny
        self.receivers = pool.taipool.get_tpfield(dtype = ti.i32, shape = (n,))
        self.donors    = pool.taipool.get_tpfield(dtype = ti.i32, shape = (n * 8,))
        self.ndonors   = pool.taipool.get_tpfield(dtype = ti.i32, shape = (n,))
        self.Q         = pool.taipool.get_tpfield(dtype = cte.FTYPE, shape = (n,))

        self.receivers.fill(cte.NO_FLOW)
        self.ndonors.fill(0)

        self.schedule = LevelSchedule(grid)

    @property
    def nx(self):
        return self.grid.nx

    @property
    def ny(self):
        return self.grid.ny

    @property
    def dx(self):
        return self.grid.dx

    @property
    def rshp(self):
        return self.grid.rshp

    @property
    def nlevels(self):
        return self.schedule.nlevels

    def compute_receivers(self):
        """Steepest descent receivers of the current heights."""
        rcv.compute_receivers(self.grid.z.field, self.receivers.field, self.nx, self.ny, self.dx,
                              self.grid.flow_ring)

    def compute_donors(self):
        """Invert the receiver map into donor lists."""
        dnr.build_donors(self.receivers.field, self.donors.field, self.ndonors.field,
                         self.nx, self.ny, method = self.donor_method)

    def build_schedule(self):
        """Topologically order the routed cells into levels."""
        self.schedule.build(self.receivers.field, self.donors.field, self.ndonors.field,
                            method = self.order_method)
        if self.validate:
            self.schedule.validate(self.receivers.to_numpy())

    def accumulate(self, cell_area = None):
        """
        Drainage area of every cell, stored in self.Q.

        Args:
            cell_area (float, optional): Unit area. Defaults to cte.CELL_AREA,
                or dx*dx if that is None.
        """
        if cell_area is None:
            cell_area = cte.CELL_AREA if cte.CELL_AREA is not None else self.dx * self.dx
        if not cell_area > 0:
            raise ValueError(f"cell_area must be positive, got {cell_area}")
        acc.accumulate_drainage_area(self.schedule, self.donors.field, self.ndonors.field,
                                     self.Q.field, cell_area)

    def route(self, cell_area = None):
        """Receivers, donors, schedule and drainage area in one call."""
        self.compute_receivers()
        self.compute_donors()
        self.build_schedule()
        self.accumulate(cell_area)

    def get_Q(self):
        """
        Returns:
            numpy.ndarray: 2D array of drainage area (ny, nx)
        """
        return self.Q.to_numpy().reshape(self.rshp)

    def get_Z(self):
        return self.grid.get_Z()

    def get_receivers(self):
        """
        Returns:
            numpy.ndarray: 2D array of receiver directions (ny, nx), NO_FLOW where undefined
        """
        return self.receivers.to_numpy().reshape(self.rshp)

    def get_receiver_indices(self):
        """
        Returns:
            numpy.ndarray: 2D array of linear receiver indices (ny, nx), NO_FLOW where undefined
        """
        return nei.receiver_indices(self.receivers.to_numpy(), self.nx).reshape(self.rshp)

    def get_donors(self):
        """
        Returns:
            list: donors of every node (flat index order), each a sorted list
        """
        ndonors = self.ndonors.to_numpy()
        donors = self.donors.to_numpy().reshape(-1, 8)
        return [sorted(donors[i, :ndonors[i]].tolist()) for i in range(ndonors.size)]

    def get_ndonors(self):
        return self.ndonors.to_numpy().reshape(self.rshp)

    def get_stack(self):
        return self.schedule.get_stack()

    def get_levels(self):
        return list(self.schedule.levels)

    def destroy(self):
        """
        Release all pooled fields. The router must not be used afterwards.
        """
        for name in ('Q', 'receivers', 'donors', 'ndonors'):
            f = getattr(self, name, None)
            if f is not None:
                f.release()
                setattr(self, name, None)
        if getattr(self, 'schedule', None) is not None:
            self.schedule.destroy()
            self.schedule = None

    def __del__(self):
        try:
            self.destroy()
        except Exception:
            logger.debug("FlowRouter cleanup failed", exc_info = True)
