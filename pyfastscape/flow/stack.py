"""
Level-synchronous topological ordering of the D8 flow forest.

The stack is a permutation of the routed cells (every cell but the outermost
ring) cut into consecutive levels:
- level 0 holds the sinks (receiver == NO_FLOW),
- level k+1 holds the donors of every cell of level k.

A cell's level is therefore its number of receiver hops to its sink. Within a
level no cell depends on another, so any computation running along the flow
graph becomes one parallel kernel per level, levels being separated by the
host loop (the synchronisation barrier):
- upstream -> downstream reductions (drainage area) walk the levels from the
  last one to level 0 (levels_source_first),
- downstream -> upstream recurrences (implicit erosion) walk them from level 0
  outward (levels_outlet_first).

Level construction, per level:
- 'scan' (default): donor counts of the parents are prefix-summed, giving each
  parent a disjoint region of the stack; deterministic order.
- 'atomic': each parent claims its region with an atomic add on a shared write
  cursor; order inside a level depends on thread scheduling.

The stack has the exact capacity of the grid and level boundaries are kept in
a growable python list, so no capacity heuristic is involved. A level that
would still overflow (corrupted donor lists) is reported before any write.
"""

import logging

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool
from ..errors import CapacityError, ScheduleError
from ..general_algorithms import parallel_scan as psc
from ..grid import neighbourer_d8 as nei

logger = logging.getLogger(__name__)


@ti.kernel
def flag_sinks(receivers: ti.template(), flags: ti.template(), nx: ti.i32, ny: ti.i32):
    """flags[i] = 1 for routed cells without receiver, 0 elsewhere."""
    for i in receivers:
        flags[i] = 0
        if nei.ring_depth(i, nx, ny) >= 1 and receivers[i] == cte.NO_FLOW:
            flags[i] = 1


@ti.kernel
def gather_level_counts(stack: ti.template(), ndonors: ti.template(), counts: ti.template(),
                        start: ti.i32, end: ti.i32):
    """counts[j] = number of donors of the j-th cell of level [start, end)."""
    for si in range(start, end):
        counts[si - start] = ndonors[stack[si]]


@ti.kernel
def append_donors_scan(stack: ti.template(), donors: ti.template(), counts: ti.template(),
                       offsets: ti.template(), start: ti.i32, end: ti.i32, nstack: ti.i32):
    """
    Copy the donors of every cell of level [start, end) after nstack.
    offsets is the inclusive scan of counts.
    """
    for si in range(start, end):
        j = si - start
        c = stack[si]
        base = nstack + offsets[j] - counts[j]
        for d in range(counts[j]):
            stack[base + d] = donors[c * 8 + d]


@ti.kernel
def append_donors_atomic(stack: ti.template(), donors: ti.template(), ndonors: ti.template(),
                         cursor: ti.template(), start: ti.i32, end: ti.i32, capacity: ti.i32):
    """
    Copy the donors of every cell of level [start, end) at the shared cursor.
    Writes beyond capacity are dropped; the cursor still counts them.
    """
    for si in range(start, end):
        c = stack[si]
        nd = ndonors[c]
        base = ti.atomic_add(cursor[None], nd)
        for d in range(nd):
            if base + d < capacity:
                stack[base + d] = donors[c * 8 + d]


class LevelSchedule:
    """
    Stack + level boundaries of one grid, rebuilt every time step.

    Attributes:
        grid (Grid): The grid the schedule is built for
        stack (TPField): Pooled i32 field of size grid.size, first nstack slots used
        levels (list): Level boundaries, level l spans stack[levels[l]:levels[l+1]]
        nstack (int): Number of scheduled cells
    """

    def __init__(self, grid):
        self.grid = grid
        n = grid.size

        self.stack = pool.taipool.get_tpfield(dtype = ti.i32, shape = (n,))

        # Scan buffers, sized for the widest possible level
        self.counts  = pool.taipool.get_tpfield(dtype = ti.i32, shape = (n,))
        self.offsets = pool.taipool.get_tpfield(dtype = ti.i32, shape = (n,))
        self.work    = pool.taipool.get_tpfield(dtype = ti.i32, shape = (psc.next_pow2(n),))
        self.cursor  = pool.taipool.get_tpfield(dtype = ti.i32, shape = ())

        self.levels = [0]
        self.nstack = 0

    @property
    def capacity(self):
        return self.grid.size

    @property
    def nlevels(self):
        return len(self.levels) - 1

    def level_bounds(self, l):
        """(start, end) stack range of level l."""
        return self.levels[l], self.levels[l + 1]

    def level_sizes(self):
        return np.diff(np.asarray(self.levels, dtype = np.int64))

    def levels_source_first(self):
        """Yield (level, start, end) from the most upstream level down to level 0."""
        for l in range(self.nlevels - 1, -1, -1):
            yield (l,) + self.level_bounds(l)

    def levels_outlet_first(self):
        """Yield (level, start, end) from level 0 (sinks) outward."""
        for l in range(self.nlevels):
            yield (l,) + self.level_bounds(l)

    def build(self, receivers, donors, ndonors, method = 'scan'):
        """
        Build the stack and the levels from the receiver and donor fields.

        Args:
            receivers: Direction-coded receiver field
            donors, ndonors: Donor lists (see donors.py)
            method (str): 'scan' or 'atomic'

        Raises:
            CapacityError: a level would overflow the stack
            ScheduleError: the schedule does not hold every routed cell once
        """
        if method not in ('scan', 'atomic'):
            raise ValueError(f"Unknown ordering method '{method}', expected 'scan' or 'atomic'")

        nx, ny = self.grid.nx, self.grid.ny

        # Level 0: the sinks, ascending index order
        flag_sinks(receivers, self.counts.field, nx, ny)
        self.nstack = psc.compact_flags(self.counts.field, self.offsets.field, self.work.field, self.stack.field, 0)
        self.levels = [0, self.nstack]

        level_bottom, level_top = 0, self.nstack
        while level_top > level_bottom:
            if method == 'scan':
                added = self._append_scan(donors, ndonors, level_bottom, level_top)
            else:
                added = self._append_atomic(donors, ndonors, level_bottom, level_top)

            if added == 0:
                break
            self.nstack += added
            self.levels.append(self.nstack)
            level_bottom, level_top = level_top, self.nstack

        logger.debug("Schedule built: %d cells in %d levels", self.nstack, self.nlevels)

        if self.nstack != self.grid.n_routed:
            raise ScheduleError(
                f"Schedule holds {self.nstack} cells, expected {self.grid.n_routed} routed cells "
                "(receiver map is not a forest?)"
            )

    def _append_scan(self, donors, ndonors, start, end):
        width = end - start
        gather_level_counts(self.stack.field, ndonors, self.counts.field, start, end)
        added = psc.inclusive_scan(self.counts.field, self.offsets.field, self.work.field, width)
        if self.nstack + added > self.capacity:
            raise CapacityError(
                f"Level {self.nlevels} adds {added} cells to {self.nstack}, stack capacity is {self.capacity}"
            )
        if added > 0:
            append_donors_scan(self.stack.field, donors, self.counts.field, self.offsets.field,
                               start, end, self.nstack)
        return added

    def _append_atomic(self, donors, ndonors, start, end):
        self.cursor.field[None] = self.nstack
        append_donors_atomic(self.stack.field, donors, ndonors, self.cursor.field, start, end, self.capacity)
        new_top = int(self.cursor.field[None])
        if new_top > self.capacity:
            raise CapacityError(
                f"Level {self.nlevels} adds {new_top - self.nstack} cells to {self.nstack}, "
                f"stack capacity is {self.capacity}"
            )
        return new_top - self.nstack

    def get_stack(self):
        """Scheduled cells as a flat numpy array of length nstack."""
        return self.stack.to_numpy()[:self.nstack]

    def get_level(self, l):
        start, end = self.level_bounds(l)
        return self.get_stack()[start:end]

    def level_of_cells(self):
        """
        Level index of every cell, -1 for unscheduled cells.

        Returns:
            np.ndarray: (ny, nx) integer array
        """
        res = np.full(self.grid.size, -1, dtype = np.int64)
        stack = self.get_stack()
        for l in range(self.nlevels):
            start, end = self.level_bounds(l)
            res[stack[start:end]] = l
        return res.reshape(self.grid.rshp)

    def validate(self, receivers):
        """
        Check the schedule invariants on the host.

        - every routed cell appears exactly once, no other cell appears
        - level 0 is exactly the routed sinks
        - the receiver of every cell of level l > 0 lies in level l-1

        Args:
            receivers (np.ndarray): direction-coded receivers (flat or 2D)

        Raises:
            ScheduleError: on the first violated invariant
        """
        stack = self.get_stack()
        counts = np.bincount(stack, minlength = self.grid.size)
        routed = (self.grid.ring_depth() >= 1).ravel()

        if np.any(counts[routed] != 1) or np.any(counts[~routed] != 0):
            bad = np.nonzero((counts != 1) & routed | (counts != 0) & ~routed)[0]
            raise ScheduleError(f"{bad.size} cell(s) not scheduled exactly once, e.g. cell {bad[0]}")

        rcv = nei.receiver_indices(receivers, self.grid.nx)
        level = self.level_of_cells().ravel()

        sinks = stack[self.levels[0]:self.levels[1]]
        if np.any(rcv[sinks] != cte.NO_FLOW):
            raise ScheduleError("Level 0 holds cells with a receiver")

        upstream = stack[self.levels[1]:]
        if np.any(rcv[upstream] == cte.NO_FLOW) or np.any(level[rcv[upstream]] != level[upstream] - 1):
            raise ScheduleError("A cell is not exactly one level above its receiver")

    def destroy(self):
        """Give the pooled fields back."""
        for name in ('stack', 'counts', 'offsets', 'work', 'cursor'):
            f = getattr(self, name, None)
            if f is not None:
                f.release()
                setattr(self, name, None)
