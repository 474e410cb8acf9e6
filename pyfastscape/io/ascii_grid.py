"""
ESRI ASCII grid export and import of elevation arrays.

The exported raster leaves out the outer `trim` rings of the model grid,
these only hold fixed boundary heights.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)

HEADER_KEYS = ("ncols", "nrows", "xllcorner", "yllcorner", "cellsize", "NODATA_value")


def write_ascii_grid(filename, z, cellsize, xllcorner = 637500., yllcorner = 206000., nodata = -9999, trim = 1):
	"""
	Write a 2D elevation array to an ESRI ASCII grid file.

	Args:
		filename (str or Path): Output file
		z (numpy.ndarray): Elevation (ny, nx)
		cellsize (float): Cell size written in the header
		xllcorner, yllcorner (float): Lower left corner coordinates
		nodata (int or float): NODATA_value written in the header
		trim (int): Number of outer rings left out

	Returns:
		tuple: (nrows, ncols) of the written raster
	"""
	z = np.asarray(z, dtype=np.float64)
	if z.ndim != 2:
		raise ValueError("z must be 2D")
	if trim < 0 or 2 * trim >= min(z.shape):
		raise ValueError(f"trim={trim} leaves nothing of a {z.shape} array")

	if trim > 0:
		z = z[trim:-trim, trim:-trim]
	nrows, ncols = z.shape

	with open(filename, "w") as f:
		f.write(f"ncols {ncols}\n")
		f.write(f"nrows {nrows}\n")
		f.write(f"xllcorner {xllcorner}\n")
		f.write(f"yllcorner {yllcorner}\n")
		f.write(f"cellsize {cellsize}\n")
		f.write(f"NODATA_value {nodata}\n")
		np.savetxt(f, z, fmt = "%.6f", delimiter = " ")

	logger.info("Wrote %dx%d grid to %s", nrows, ncols, filename)
	return nrows, ncols


def read_ascii_grid(filename):
	"""
	Read an ESRI ASCII grid file.

	Returns:
		tuple: (z, header) with z a (nrows, ncols) float64 array, NODATA cells
			as NaN, and header a dict of the six header values
	"""
	header = {}
	with open(filename, "r") as f:
		for _ in HEADER_KEYS:
			key, val = f.readline().split()
			header[key] = float(val)
		z = np.loadtxt(f, dtype = np.float64, ndmin = 2)

	for key in ("ncols", "nrows"):
		header[key] = int(header[key])
	if z.shape != (header["nrows"], header["ncols"]):
		raise ValueError(f"Data shape {z.shape} does not match header ({header['nrows']}, {header['ncols']})")

	nodata = header.get("NODATA_value")
	if nodata is not None:
		z[z == nodata] = np.nan

	return z, header
