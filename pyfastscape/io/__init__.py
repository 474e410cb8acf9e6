"""
Raster input/output for pyfastscape.

- write_ascii_grid: export heights as an ESRI ASCII grid, boundary ring trimmed
- read_ascii_grid: load an ESRI ASCII grid back into numpy
"""

from .ascii_grid import write_ascii_grid, read_ascii_grid

__all__ = [
	"write_ascii_grid",
	"read_ascii_grid",
]
