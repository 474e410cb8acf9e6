import math
import numbers

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool
from . import neighbourer_d8 as nei


class Grid:
	"""
	Regular 2D grid holding the height field of a landscape evolution run.

	The heights live in a pool-allocated Taichi field (flat, row-major, float
	type cte.FTYPE) that every component reads and the erosion and uplift
	components mutate in place. Everything else about the grid is immutable.

	Attributes:
		nx (int): Number of grid columns (x-direction)
		ny (int): Number of grid rows (y-direction)
		dx (float): Grid spacing in meters (uniform cell size)
		rshp (tuple): Reshape tuple (ny, nx) for converting 1D to 2D arrays
		flow_ring (int): Minimum ring depth of cells computing a receiver and eroding
		uplift_ring (int): Minimum ring depth of uplifted cells
		z (TPField): Elevation field allocated from pool
		metadata (dict): Optional metadata for transforms, projections, etc.
	"""

	def __init__(self, nx:int, ny:int, dx:float, z:np.ndarray, flow_ring = None, uplift_ring = None, metadata = None):
		"""
		Initialize Grid with dimensions, elevation data and halo configuration.

		Args:
			nx (int): Number of grid columns (x-direction)
			ny (int): Number of grid rows (y-direction)
			dx (float): Grid spacing in meters
			z (np.ndarray): Elevation data, shape (ny, nx) or flat of size nx*ny
			flow_ring (int, optional): Defaults to cte.FLOW_RING
			uplift_ring (int, optional): Defaults to cte.UPLIFT_RING
			metadata (dict, optional): Free-form metadata

		Raises:
			ValueError: degenerate grid, wrong or non-finite elevation data,
				non-positive spacing or invalid ring depths
		"""
		self.flow_ring = cte.FLOW_RING if flow_ring is None else flow_ring
		self.uplift_ring = cte.UPLIFT_RING if uplift_ring is None else uplift_ring

		for name, val in (('nx', nx), ('ny', ny), ('flow_ring', self.flow_ring), ('uplift_ring', self.uplift_ring)):
			if not isinstance(val, numbers.Integral) or isinstance(val, bool):
				raise ValueError(f"{name} must be an integer, got {val!r}")
		if self.flow_ring < 1:
			raise ValueError(f"flow_ring must be >= 1, got {self.flow_ring}")
		if self.uplift_ring < 1:
			raise ValueError(f"uplift_ring must be >= 1, got {self.uplift_ring}")

		# at least one cell must be able to erode
		min_side = max(3, 2 * self.flow_ring + 1)
		if nx < min_side or ny < min_side:
			raise ValueError(f"Grid {nx}x{ny} too small, both sides must be >= {min_side} for flow_ring={self.flow_ring}")

		if not (isinstance(dx, numbers.Real) and math.isfinite(dx) and dx > 0):
			raise ValueError(f"dx must be a positive finite number, got {dx!r}")

		self.nx = int(nx)
		self.ny = int(ny)
		self.dx = float(dx)
		self.rshp = (self.ny, self.nx)
		self.metadata = metadata

		cte.NX = self.nx
		cte.NY = self.ny
		cte.DX = self.dx

		z = self._check_z(z)
		self.z = pool.taipool.get_tpfield(dtype = cte.FTYPE, shape = (self.size,))
		self.z.from_numpy(z)

	@property
	def size(self):
		return self.nx * self.ny

	@property
	def n_routed(self):
		"""Number of cells in the routed region (every cell but the outermost ring)."""
		return (self.nx - 2) * (self.ny - 2)

	@property
	def offsets(self):
		return nei.d8_offsets(self.nx)

	@property
	def distances(self):
		return [d * self.dx for d in cte.D8_DIST]

	def ring_depth(self):
		"""Ring depth of every cell, shape (ny, nx)."""
		return nei.ring_depth_array(self.nx, self.ny)

	def set_z(self, z):
		"""
		Replace the elevation data.

		Args:
			z (np.ndarray): shape (ny, nx) or flat of size nx*ny
		"""
		self.z.from_numpy(self._check_z(z))

	def _check_z(self, z):
		z = np.asarray(z, dtype = np.float64)
		if z.size != self.size or (z.ndim == 2 and z.shape != self.rshp) or z.ndim > 2:
			raise ValueError(f"Elevation must have shape {self.rshp} or size {self.size}, got {z.shape}")
		if not np.all(np.isfinite(z)):
			raise ValueError("Elevation contains non-finite values")
		return np.ascontiguousarray(z.ravel())

	def get_Z(self):
		"""
		Get elevation data as 2D numpy array.

		Returns:
			numpy.ndarray: 2D array of elevation values (ny, nx)
		"""
		return self.z.to_numpy().reshape(self.rshp)

	def hillshade(self, altitude_deg=45.0, azimuth_deg=315.0, z_factor=1.0):
		"""
		Hillshade of the current elevation, values in [0, 1], shape (ny, nx).
		"""
		from ..visu import hillshade_field
		return hillshade_field(self.z.field, self.nx, self.ny, dx = self.dx, altitude_deg = altitude_deg,
			azimuth_deg = azimuth_deg, z_factor = z_factor)

	def destroy(self):
		"""Give the elevation field back to the pool."""
		if getattr(self, 'z', None) is not None:
			self.z.release()
			self.z = None
