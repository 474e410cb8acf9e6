"""
Synthetic initial topographies.
"""

import numpy as np


def random_terrain(nx, ny, seed = None, fixed_rings = 2, amplitude = 1.):
	"""
	White-noise terrain with the outer rings held at zero.

	Heights are uniform in [0, amplitude). The outermost `fixed_rings` rings
	are set to 0, which gives the base level the second ring is pinned at.

	Args:
		nx, ny (int): grid dimensions
		seed (int, optional): seed of the numpy random generator
		fixed_rings (int): number of zeroed rings
		amplitude (float): maximum height

	Returns:
		np.ndarray: (ny, nx) float64 heights
	"""
	rng = np.random.default_rng(seed)
	z = rng.random((ny, nx)) * amplitude
	if fixed_rings > 0:
		z[:fixed_rings, :] = 0.
		z[-fixed_rings:, :] = 0.
		z[:, :fixed_rings] = 0.
		z[:, -fixed_rings:] = 0.
	return z


def ramp_terrain(nx, ny, slope = 1., noise = 0., seed = None):
	"""
	Plane tilted along +x (heights decrease with the column index).

	Args:
		nx, ny (int): grid dimensions
		slope (float): height drop per column
		noise (float): amplitude of added uniform noise, 0 for a perfect plane
		seed (int, optional): seed of the noise

	Returns:
		np.ndarray: (ny, nx) float64 heights
	"""
	z = np.tile((nx - 1 - np.arange(nx, dtype = np.float64)) * slope, (ny, 1))
	if noise > 0:
		z += np.random.default_rng(seed).random((ny, nx)) * noise
	return z
