'''
Tectonic uplift of the landscape evolution model.
'''

import taichi as ti
from ..grid import neighbourer_d8 as nei


@ti.kernel
def block_uplift(z:ti.template(), rate:ti.f64, dt:ti.f64, nx:ti.i32, ny:ti.i32, uplift_ring:ti.i32):
	"""
	Apply uniform block uplift to the topography.

	Adds rate * dt to every node of ring depth >= uplift_ring. The outer
	rings keep their elevation (base level).

	Args:
		z (ti.template): Topographic elevation field to be uplifted
		rate (ti.f64): Uplift rate in m/year
		dt (ti.f64): Time step in years
		nx, ny (ti.i32): Grid dimensions
		uplift_ring (ti.i32): Minimum ring depth of uplifted nodes
	"""
	for i in z:
		if nei.ring_depth(i, nx, ny) >= uplift_ring:
			z[i] += rate * dt


@ti.kernel
def ext_uplift(z:ti.template(), rate:ti.template(), dt:ti.f64, nx:ti.i32, ny:ti.i32, uplift_ring:ti.i32):
	"""
	Apply spatially-varying uplift, same ring rule as block_uplift.

	Args:
		z (ti.template): Topographic elevation field to be uplifted
		rate (ti.template): Uplift rate field (m/year), same shape as z
		dt (ti.f64): Time step in years
		nx, ny (ti.i32): Grid dimensions
		uplift_ring (ti.i32): Minimum ring depth of uplifted nodes
	"""
	for i in z:
		if nei.ring_depth(i, nx, ny) >= uplift_ring:
			z[i] += rate[i] * dt
