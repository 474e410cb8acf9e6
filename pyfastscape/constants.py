"""
Global constants and default parameters for pyfastscape.

This module gathers the grid layout, the D8 neighbour table and the default
landscape evolution parameters used throughout pyfastscape. Kernels never read
grid dimensions from here (they receive them as arguments, so that grids of
different sizes can coexist in one taichi session); the values below are the
defaults picked up by the Python-side classes when no explicit value is given.

Constant Categories:
- Grid Constants: last configured domain size and spacing, halo rings
- D8 Constants: neighbour table and distances
- Erosion Constants: Stream Power Law parameters, uplift, time step
- Solver Constants: Newton-Raphson tolerance and iteration cap

Halo rings:
The ring depth of a cell is its distance (in cells) to the closest grid edge.
- depth 0: outermost ring, never flows, never scheduled, never a receiver
- depth >= 1: routed region, scheduled every step and eligible as receiver
- depth >= FLOW_RING: computes a receiver and is eroded
- depth >= UPLIFT_RING: is uplifted

D8 layout (direction indices around the focal cell X):
    1 2 3
    0 X 4
    7 6 5

Usage:
    import pyfastscape.constants as cte

    cte.KR = 1e-5        # change the default erodibility
    cte.FLOW_RING = 1    # let the second ring erode too
"""

import math
import taichi as ti

#########################################
###### GRID CONSTANTS ###################
#########################################

# Grid spacing (uniform cell size in meters)
DX = 1.

# Number of columns of the last configured grid (x-direction)
NX = 512

# Number of rows of the last configured grid (y-direction)
NY = 512

# Minimum ring depth for receiver computation and erosion.
# 2 keeps the second ring at a fixed elevation (base level)
FLOW_RING = 2

# Minimum ring depth for uplift
UPLIFT_RING = 2

# Float type of heights and drainage areas
FTYPE = ti.f64


#########################################
###### D8 CONSTANTS #####################
#########################################

# Receiver sentinel for cells without downhill neighbour
NO_FLOW = -1

SQRT2 = math.sqrt(2.)

# Row and column deltas, W first then clockwise
D8_DROW = (0, -1, -1, -1, 0, 1, 1, 1)
D8_DCOL = (-1, -1, 0, 1, 1, 1, 0, -1)

# Distances in cell units (axis-aligned, diagonal alternating)
D8_DIST = (1., SQRT2, 1., SQRT2, 1., SQRT2, 1., SQRT2)


#########################################
###### LANDSCAPE EVOLUTION CONSTANTS ####
#########################################

# Erodibility coefficient K in E = K * A^m * S^n
KR = 2e-6

# Drainage area exponent m
MEXP = 0.8

# Slope exponent n
NEXP = 2.

# Uplift rate (m/year)
UPLIFT = 2e-3

# Time step for landscape evolution (years)
DT_SPL = 1e3

# Unit cell area used to seed the drainage area. None -> DX*DX
CELL_AREA = None


#########################################
###### SOLVER CONSTANTS #################
#########################################

# Absolute tolerance between successive Newton-Raphson iterates
NEWTON_TOL = 1e-3

# Maximum Newton-Raphson iterations per cell and step
NEWTON_MAXIT = 100
