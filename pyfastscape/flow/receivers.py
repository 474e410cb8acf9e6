"""
Steepest descent (D8) receiver computation.

Each cell deep enough in the grid (ring depth >= flow_ring) sends all its flow
to the neighbour of steepest downhill slope. Receivers are stored as a
direction index 0..7 (see neighbourer_d8) or NO_FLOW. Candidate neighbours are
restricted to the routed region (ring depth >= 1) so that every receiver is a
scheduled cell.

Every cell only reads heights and writes its own slot: the kernel is a plain
data-parallel map.
"""

import taichi as ti
from .. import constants as cte
from ..grid import neighbourer_d8 as nei


@ti.func
def steepest_descent(z: ti.template(), i: ti.i32, nx: ti.i32, ny: ti.i32, dx: ti.f64):
    """
    Direction and slope of steepest descent from node i.

    Ties keep the first direction in table order. A cell with no strictly
    positive slope gets NO_FLOW and a slope of 0.
    """
    r: ti.i32 = cte.NO_FLOW
    sr: ti.f64 = 0.
    for k in ti.static(range(8)):
        j = nei.neighbour(i, k, nx, ny)
        if j != -1:
            if nei.ring_depth(j, nx, ny) >= 1:
                tsr = (z[i] - z[j]) / (nei.distance(k) * dx)
                if tsr > sr:
                    sr = tsr
                    r = k
    return r, sr


@ti.kernel
def compute_receivers(z: ti.template(), receivers: ti.template(), nx: ti.i32, ny: ti.i32, dx: ti.f64, flow_ring: ti.i32):
    """
    Compute steepest descent receivers for each node in the grid.

    Args:
        z: Elevation field
        receivers: Output direction field (ti.i32), NO_FLOW where no flow
        nx, ny: Grid dimensions
        dx: Grid spacing
        flow_ring: Minimum ring depth of cells allowed to flow
    """
    for i in z:
        r: ti.i32 = cte.NO_FLOW
        if nei.ring_depth(i, nx, ny) >= flow_ring:
            rr, _sr = steepest_descent(z, i, nx, ny, dx)
            r = rr
        receivers[i] = r


@ti.kernel
def compute_receivers_slope(z: ti.template(), receivers: ti.template(), slope: ti.template(),
                            nx: ti.i32, ny: ti.i32, dx: ti.f64, flow_ring: ti.i32):
    """
    Same as compute_receivers, also storing the steepest slope (0 for NO_FLOW).
    """
    for i in z:
        r: ti.i32 = cte.NO_FLOW
        s: ti.f64 = 0.
        if nei.ring_depth(i, nx, ny) >= flow_ring:
            rr, ss = steepest_descent(z, i, nx, ny, dx)
            r = rr
            s = ss
        receivers[i] = r
        slope[i] = s
