"""
Matplotlib figures of model states.
"""

import numpy as np

from .hillshading import hillshade_numpy


def plot_topography(z, dx=1.0, ax=None, cmap='terrain', hillshade=True, trim=1, title=None):
    """
    Elevation map, optionally blended with its hillshade.

    Args:
        z: 2D elevation array (ny, nx)
        dx: Grid cell size, sets the axis extent
        ax: Matplotlib axes, a new figure is created if None
        cmap: Colormap of the elevation
        hillshade: Overlay a semi-transparent hillshade
        trim: Number of outer rings left out of the figure
        title: Optional axes title

    Returns:
        tuple: (figure, axes)
    """
    import matplotlib.pyplot as plt

    z = np.asarray(z, dtype=np.float64)
    if trim > 0:
        z = z[trim:-trim, trim:-trim]
    ny, nx = z.shape
    extent = (0., nx * dx, 0., ny * dx)

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    im = ax.imshow(z, cmap=cmap, extent=extent)
    if hillshade:
        ax.imshow(hillshade_numpy(z, dx=dx), cmap='gray', alpha=0.4, extent=extent)
    fig.colorbar(im, ax=ax, label='Elevation')
    if title is not None:
        ax.set_title(title)
    return fig, ax


def plot_drainage_area(area, dx=1.0, ax=None, trim=1):
    """
    Log10 drainage area map.

    Returns:
        tuple: (figure, axes)
    """
    import matplotlib.pyplot as plt

    area = np.asarray(area, dtype=np.float64)
    if trim > 0:
        area = area[trim:-trim, trim:-trim]
    ny, nx = area.shape

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    im = ax.imshow(np.log10(area), cmap='Blues', extent=(0., nx * dx, 0., ny * dx))
    fig.colorbar(im, ax=ax, label='log10 drainage area')
    return fig, ax
