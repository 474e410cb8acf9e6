"""
Hillshading of elevation fields, used to inspect evolved landscapes.

Single light source model:
    hs = cos(zenith) cos(slope) + sin(zenith) sin(slope) cos(azimuth - aspect)
clamped to [0, 1]. The gradient is a centred difference between the two
neighbours along each axis, clamped to the cell itself on the grid edges
(one-sided difference there).

The kernel works on flat row-major fields like the rest of the package, so a
Grid's height field can be shaded without leaving the device.
"""

import math

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool


@ti.kernel
def hillshade_flat(z:ti.template(), hs:ti.template(), nx:ti.i32, ny:ti.i32, dx:ti.f64,
	zenith:ti.f64, azimuth:ti.f64, z_factor:ti.f64):
	"""
	Hillshade of a flat (ny*nx) elevation field into hs.

	Args:
		z: Elevation field
		hs: Output field, same shape
		nx, ny: Grid dimensions
		dx: Grid spacing
		zenith: Sun zenith angle in radians (90 deg - altitude)
		azimuth: Sun azimuth in radians, clockwise from North
		z_factor: Vertical exaggeration
	"""
	for i in z:
		row = i // nx
		col = i % nx

		cw = ti.max(col - 1, 0)
		ce = ti.min(col + 1, nx - 1)
		rn = ti.max(row - 1, 0)
		rs = ti.min(row + 1, ny - 1)

		gx = z_factor * (z[row * nx + ce] - z[row * nx + cw]) / ((ce - cw) * dx)
		gy = z_factor * (z[rs * nx + col] - z[rn * nx + col]) / ((rs - rn) * dx)

		slope = ti.atan2(ti.sqrt(gx * gx + gy * gy), 1.)

		aspect = 0.
		if gx != 0. or gy != 0.:
			aspect = 0.5 * math.pi - ti.atan2(gy, gx)
			if aspect < 0.:
				aspect += 2. * math.pi

		val = ti.cos(zenith) * ti.cos(slope) + ti.sin(zenith) * ti.sin(slope) * ti.cos(azimuth - aspect)
		hs[i] = ti.min(ti.max(val, 0.), 1.)


def hillshade_field(z, nx, ny, dx = 1., altitude_deg = 45., azimuth_deg = 315., z_factor = 1.):
	"""
	Hillshade of a flat taichi elevation field.

	Returns:
		numpy.ndarray: (ny, nx) float64 array in [0, 1]
	"""
	with pool.temp_field(cte.FTYPE, (nx * ny,)) as hs:
		hillshade_flat(z, hs.field, nx, ny, dx, math.radians(90. - altitude_deg),
			math.radians(azimuth_deg), z_factor)
		return hs.to_numpy().reshape(ny, nx)


def hillshade_numpy(elevation_array, altitude_deg = 45., azimuth_deg = 315., z_factor = 1., dx = 1., mask = None):
	"""
	Hillshade of a 2D numpy elevation array.

	Args:
		elevation_array: 2D elevation (ny, nx)
		altitude_deg: Sun altitude in degrees (0-90)
		azimuth_deg: Sun azimuth in degrees, clockwise from North
		z_factor: Vertical exaggeration
		dx: Grid spacing
		mask: Optional boolean array, True cells set to NaN

	Returns:
		numpy.ndarray: (ny, nx) float64 array in [0, 1], NaN where masked
	"""
	z = np.asarray(elevation_array, dtype = np.float64)
	if z.ndim != 2:
		raise ValueError(f"elevation_array must be 2D, got {z.ndim}D")
	ny, nx = z.shape

	with pool.temp_field(cte.FTYPE, (nx * ny,)) as zf:
		zf.from_numpy(np.ascontiguousarray(z.ravel()))
		res = hillshade_field(zf.field, nx, ny, dx, altitude_deg, azimuth_deg, z_factor)

	if mask is not None:
		mask = np.asarray(mask, dtype = bool)
		if mask.shape != z.shape:
			raise ValueError(f"mask shape {mask.shape} does not match elevation shape {z.shape}")
		res[mask] = np.nan

	return res
