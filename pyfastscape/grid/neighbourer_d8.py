"""
D8 grid navigation on a flat (row-major) index space.

Cells are addressed by their linear index i = row * nx + col. The functions
below convert between (row, col) and linear indices and give bounds-checked
access to the 8 neighbours, so that no kernel does raw offset arithmetic.

Direction indices (W first, clockwise):
	1 2 3
	0 X 4
	7 6 5

Grid dimensions are passed explicitly to every function instead of being
read from the constants module: a taichi kernel freezes python globals at its
first compilation, and a session may hold grids of several sizes.
"""

import numpy as np
import taichi as ti
from .. import constants as cte


#########################################
###### INDEXING #########################
#########################################

@ti.func
def rc_from_i(i:ti.i32, nx:ti.i32):
	"""
	Convert vectorized index to row,col coordinates.

	Returns:
		tuple: (row, col) coordinates
	"""
	return i // nx, i % nx

@ti.func
def i_from_rc(row:ti.i32, col:ti.i32, nx:ti.i32):
	"""Convert row,col coordinates to vectorized index."""
	return row * nx + col

@ti.func
def ring_depth(i:ti.i32, nx:ti.i32, ny:ti.i32):
	"""
	Distance in cells between node i and the closest grid edge.
	0 on the outermost ring, 1 on the second ring, etc.
	"""
	row, col = rc_from_i(i, nx)
	return ti.min(ti.min(row, col), ti.min(ny - 1 - row, nx - 1 - col))


#########################################
###### D8 NEIGHBOURS ####################
#########################################

@ti.func
def d8_delta(k):
	"""
	Row and column shift of direction k (works for static and runtime k).
	Must stay consistent with cte.D8_DROW / cte.D8_DCOL.
	"""
	drow = 0
	dcol = 0
	if k == 0:
		dcol = -1
	elif k == 1:
		drow = -1
		dcol = -1
	elif k == 2:
		drow = -1
	elif k == 3:
		drow = -1
		dcol = 1
	elif k == 4:
		dcol = 1
	elif k == 5:
		drow = 1
		dcol = 1
	elif k == 6:
		drow = 1
	elif k == 7:
		drow = 1
		dcol = -1
	return drow, dcol

@ti.func
def distance(k):
	"""Distance to the neighbour in direction k, in cell units."""
	d:ti.f64 = 1.
	if k % 2 == 1:
		d = cte.SQRT2
	return d

@ti.func
def neighbour(i:ti.i32, k, nx:ti.i32, ny:ti.i32):
	"""
	Bounds-checked neighbour of node i in direction k.

	Returns:
		int: linear index of the neighbour, -1 if it falls outside the grid
	"""
	row, col = rc_from_i(i, nx)
	drow, dcol = d8_delta(k)
	trow = row + drow
	tcol = col + dcol
	res = -1
	if trow >= 0 and trow < ny and tcol >= 0 and tcol < nx:
		res = i_from_rc(trow, tcol, nx)
	return res

@ti.func
def receiver_node(i:ti.i32, k:ti.i32, nx:ti.i32, ny:ti.i32):
	"""Linear index of the receiver of i given its direction k (-1 if NO_FLOW)."""
	res = -1
	if k != cte.NO_FLOW:
		res = neighbour(i, k, nx, ny)
	return res


#########################################
###### HOST HELPERS #####################
#########################################

def d8_offsets(nx):
	"""Linear index deltas of the 8 directions for a grid nx cells wide."""
	return [dr * nx + dc for dr, dc in zip(cte.D8_DROW, cte.D8_DCOL)]

def ring_depth_array(nx, ny):
	"""Ring depth of every cell as a (ny, nx) integer array."""
	rows = np.arange(ny)[:, None]
	cols = np.arange(nx)[None, :]
	return np.minimum(np.minimum(rows, cols), np.minimum(ny - 1 - rows, nx - 1 - cols))

def receiver_indices(receivers, nx):
	"""
	Convert a flat direction-coded receiver array to linear receiver indices.

	Args:
		receivers (np.ndarray): direction indices 0..7 or NO_FLOW, flat
		nx (int): grid width

	Returns:
		np.ndarray: linear index of each receiver, NO_FLOW where undefined
	"""
	receivers = np.asarray(receivers).ravel()
	offsets = np.asarray(d8_offsets(nx))
	flows = receivers != cte.NO_FLOW
	res = np.full(receivers.shape, cte.NO_FLOW, dtype=np.int64)
	res[flows] = np.nonzero(flows)[0] + offsets[receivers[flows]]
	return res
