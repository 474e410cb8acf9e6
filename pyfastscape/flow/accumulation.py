"""
Drainage area accumulation along the level schedule.

Every cell starts with its own unit area; then, level by level from the most
upstream one down to the sinks, every cell adds the (already final)
accumulation of its donors. A cell only writes its own slot and reads cells of
the next level outward, so a level is one parallel kernel without atomics.
"""

import taichi as ti


@ti.kernel
def init_accumulation(accum: ti.template(), cell_area: ti.f64):
    for i in accum:
        accum[i] = cell_area


@ti.kernel
def accumulate_level(stack: ti.template(), donors: ti.template(), ndonors: ti.template(),
                     accum: ti.template(), start: ti.i32, end: ti.i32):
    """
    Gather the donors' accumulation into every cell of level [start, end).
    """
    for si in range(start, end):
        c = stack[si]
        acc = accum[c]
        for d in range(ndonors[c]):
            acc += accum[donors[c * 8 + d]]
        accum[c] = acc


def accumulate_drainage_area(schedule, donors, ndonors, accum, cell_area):
    """
    Compute the drainage area of every cell.

    Args:
        schedule (LevelSchedule): built schedule
        donors, ndonors: Donor lists
        accum: Output field (float)
        cell_area (float): Area contributed by every cell
    """
    init_accumulation(accum, cell_area)
    for l, start, end in schedule.levels_source_first():
        # the outermost level has no donor
        if l == schedule.nlevels - 1:
            continue
        accumulate_level(schedule.stack.field, donors, ndonors, accum, start, end)
