"""
Landscape evolution from white noise, exported as an ESRI ASCII grid.

	python examples/run_fastscape.py 101 120 dem.asc 42 --arch gpu
"""

import argparse
import logging

import taichi as ti

import pyfastscape as pfs

logger = logging.getLogger("run_fastscape")


def main():
	parser = argparse.ArgumentParser(description = "D8 stream power landscape evolution")
	parser.add_argument('dimension', type = int, help = "number of rows and columns")
	parser.add_argument('steps', type = int, help = "number of time steps")
	parser.add_argument('output', type = str, help = "output ASCII grid")
	parser.add_argument('seed', type = int, help = "seed of the initial noise")
	parser.add_argument('--arch', choices = ('cpu', 'gpu'), default = 'cpu')
	parser.add_argument('--dx', type = float, default = 500., help = "cell size")
	parser.add_argument('--cell-area', type = float, default = 40000., help = "unit drainage area of a cell")
	parser.add_argument('--order', choices = ('scan', 'atomic'), default = 'scan')
	parser.add_argument('--donors', choices = ('gather', 'scatter'), default = 'gather')
	parser.add_argument('--validate', action = 'store_true', help = "check the schedule every step")
	parser.add_argument('--plot', action = 'store_true', help = "show the final topography")
	args = parser.parse_args()

	logging.basicConfig(level = logging.INFO, format = "%(asctime)s %(name)s %(levelname)s %(message)s")

	ti.init(ti.gpu if args.arch == 'gpu' else ti.cpu, default_fp = ti.f64)

	n = args.dimension
	z = pfs.grid.random_terrain(n, n, seed = args.seed)
	grid = pfs.grid.Grid(n, n, args.dx, z)

	model = pfs.lem.LandscapeModel(grid, cell_area = args.cell_area, donor_method = args.donors,
		order_method = args.order, validate = args.validate)
	logger.info("%dx%d grid, K=%g m=%g n=%g U=%g dt=%g", n, n, model.K, model.m, model.n, model.uplift, model.dt)

	z_final = model.run(args.steps)
	pfs.io.write_ascii_grid(args.output, z_final, cellsize = args.dx)

	if args.plot:
		import matplotlib.pyplot as plt
		pfs.visu.plot_topography(z_final, dx = args.dx, title = f"{model.time:g} years")
		plt.show()


if __name__ == "__main__":
	main()
