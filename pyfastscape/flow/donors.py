"""
Donor lists: the inverse of the receiver map.

For every cell c, donors[8*c : 8*c + ndonors[c]] holds the cells whose
receiver is c (a D8 cell has at most 8 donors, so the storage is exact).

Two formulations produce the same donor sets:
- gather (default): every routed cell checks its 8 neighbours and keeps those
  pointing back at it. Each cell writes only its own slots, no atomics, at the
  price of 8 neighbour checks per cell. The slot order is the D8 table order,
  hence deterministic.
- scatter: every flowing cell appends itself to its receiver's list through an
  atomically incremented counter. Slot order depends on thread scheduling.
"""

import taichi as ti
from .. import constants as cte
from ..grid import neighbourer_d8 as nei


@ti.kernel
def rcv2donor_gather(receivers: ti.template(), donors: ti.template(), ndonors: ti.template(),
                     nx: ti.i32, ny: ti.i32):
    """
    Build donor lists by inverted writes.

    Args:
        receivers: Direction-coded receiver field
        donors: Output donor field (8 slots per node)
        ndonors: Output number of donors per node
        nx, ny: Grid dimensions
    """
    for i in receivers:
        n = 0
        if nei.ring_depth(i, nx, ny) >= 1:
            for k in ti.static(range(8)):
                j = nei.neighbour(i, k, nx, ny)
                if j != -1:
                    if nei.receiver_node(j, receivers[j], nx, ny) == i:
                        donors[i * 8 + n] = j
                        n += 1
        ndonors[i] = n


@ti.kernel
def rcv2donor_scatter(receivers: ti.template(), donors: ti.template(), ndonors: ti.template(),
                      nx: ti.i32, ny: ti.i32):
    """
    Build donor lists by atomic appends to the receivers' lists.
    ndonors must be zeroed beforehand (see build_donors).
    """
    for i in receivers:
        if receivers[i] != cte.NO_FLOW:
            r = nei.receiver_node(i, receivers[i], nx, ny)
            old_val = ti.atomic_add(ndonors[r], 1)
            donors[r * 8 + old_val] = i


def build_donors(receivers, donors, ndonors, nx, ny, method = 'gather'):
    """
    Fill donors/ndonors from the receiver map.

    Args:
        receivers, donors, ndonors: Taichi fields (see module doc)
        nx, ny (int): Grid dimensions
        method (str): 'gather' or 'scatter'
    """
    if method == 'gather':
        rcv2donor_gather(receivers, donors, ndonors, nx, ny)
    elif method == 'scatter':
        ndonors.fill(0)
        rcv2donor_scatter(receivers, donors, ndonors, nx, ny)
    else:
        raise ValueError(f"Unknown donor method '{method}', expected 'gather' or 'scatter'")
