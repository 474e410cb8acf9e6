"""
Visualization submodule for pyfastscape.

Core Modules:
- hillshading: hillshade of flat taichi fields and numpy arrays
- plotting: matplotlib maps of elevation and drainage area

Available Functions:
- hillshade_numpy: Standard hillshading for NumPy elevation arrays
- hillshade_field: hillshade of a flat taichi elevation field (e.g. Grid.z.field)
- hillshade_flat: the underlying kernel
- plot_topography: elevation map with hillshade overlay
- plot_drainage_area: log10 drainage area map

Usage:
    import pyfastscape as pfs
    import matplotlib.pyplot as plt

    fig, ax = pfs.visu.plot_topography(model.get_Z(), dx = grid.dx)
    plt.show()
"""

from .hillshading import hillshade_flat, hillshade_field, hillshade_numpy
from .plotting import plot_topography, plot_drainage_area

__all__ = [
    "hillshade_flat",
    "hillshade_field",
    "hillshade_numpy",
    "plot_topography",
    "plot_drainage_area",
]
