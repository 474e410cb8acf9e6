"""
Time stepping of the landscape evolution model.

One step runs, in this order:
    receivers -> donors -> schedule -> drainage area -> uplift -> erosion
Only the grid's height field and the step counter survive from one step to
the next; everything else is rebuilt from the current heights.
"""

import logging
import math
import numbers

from .. import constants as cte
from .. import erodep
from ..flow import FlowRouter
from .timers import PhaseTimers

logger = logging.getLogger(__name__)


def _check_positive(name, val):
	if not (isinstance(val, numbers.Real) and not isinstance(val, bool) and math.isfinite(val) and val > 0):
		raise ValueError(f"{name} must be a positive finite number, got {val!r}")


class LandscapeModel:
	"""
	Stream Power Law landscape evolution on a Grid.

	Attributes:
		grid (Grid): Grid whose heights evolve in place
		router (FlowRouter): Routing fields and schedule of the current step
		K, m, n (float): SPL erodibility and exponents
		uplift (float): Uplift rate
		dt (float): Time step
		tol (float): Newton-Raphson tolerance
		max_newton_iterations (int): Newton-Raphson iteration cap
		cell_area (float): Unit area of a cell
		istep (int): Number of completed steps
		timers (PhaseTimers): Cumulative time per phase
	"""

	PHASES = ("receivers", "donors", "schedule", "accumulation", "uplift", "erosion")

	def __init__(self, grid, K = None, m = None, n = None, uplift = None, dt = None, tol = None,
		max_newton_iterations = None, cell_area = None, donor_method = 'gather', order_method = 'scan',
		validate = False, sync_timers = True):
		"""
		Args:
			grid (Grid): The grid to evolve
			K, m, n (float, optional): default cte.KR, cte.MEXP, cte.NEXP
			uplift (float, optional): default cte.UPLIFT, may be 0
			dt (float, optional): default cte.DT_SPL
			tol (float, optional): default cte.NEWTON_TOL
			max_newton_iterations (int, optional): default cte.NEWTON_MAXIT
			cell_area (float, optional): default cte.CELL_AREA, or dx*dx
			donor_method (str): 'gather' or 'scatter'
			order_method (str): 'scan' or 'atomic'
			validate (bool): check the schedule invariants every step
			sync_timers (bool): synchronise taichi when timing phases

		Raises:
			ValueError: on any invalid parameter
		"""
		self.grid = grid
		self.K = cte.KR if K is None else K
		self.m = cte.MEXP if m is None else m
		self.n = cte.NEXP if n is None else n
		self.uplift = cte.UPLIFT if uplift is None else uplift
		self.dt = cte.DT_SPL if dt is None else dt
		self.tol = cte.NEWTON_TOL if tol is None else tol
		self.max_newton_iterations = cte.NEWTON_MAXIT if max_newton_iterations is None else max_newton_iterations
		if cell_area is None:
			cell_area = cte.CELL_AREA if cte.CELL_AREA is not None else grid.dx * grid.dx
		self.cell_area = cell_area

		for name in ("K", "m", "n", "dt", "tol", "cell_area"):
			_check_positive(name, getattr(self, name))
		if not (isinstance(self.uplift, numbers.Real) and math.isfinite(self.uplift) and self.uplift >= 0):
			raise ValueError(f"uplift must be a non-negative finite number, got {self.uplift!r}")
		if not isinstance(self.max_newton_iterations, numbers.Integral) or self.max_newton_iterations < 1:
			raise ValueError(f"max_newton_iterations must be an integer >= 1, got {self.max_newton_iterations!r}")

		self.router = FlowRouter(grid, donor_method = donor_method, order_method = order_method, validate = validate)
		self.istep = 0
		self.timers = PhaseTimers(sync = sync_timers)

	def step(self):
		"""
		Advance the landscape by one time step.

		Raises:
			CapacityError, ScheduleError, NewtonConvergenceError: the step is
				aborted, heights may be partially updated
		"""
		router = self.router
		grid = self.grid

		with self.timers["receivers"]:
			router.compute_receivers()
		with self.timers["donors"]:
			router.compute_donors()
		with self.timers["schedule"]:
			router.build_schedule()
		with self.timers["accumulation"]:
			router.accumulate(self.cell_area)
		with self.timers["uplift"]:
			erodep.block_uplift(grid.z.field, self.uplift, self.dt, grid.nx, grid.ny, grid.uplift_ring)
		with self.timers["erosion"]:
			erodep.SPL(router, K = self.K, m = self.m, n = self.n, dt = self.dt, tol = self.tol,
				max_iterations = self.max_newton_iterations)

		logger.debug("Step %d: %d levels", self.istep, router.nlevels)
		self.istep += 1

	def run(self, nstep, log_every = 20):
		"""
		Run nstep time steps.

		Args:
			nstep (int): Number of steps
			log_every (int): Log progress every log_every steps (0 disables)

		Returns:
			numpy.ndarray: final heights (ny, nx)
		"""
		if not isinstance(nstep, numbers.Integral) or nstep < 0:
			raise ValueError(f"nstep must be a non-negative integer, got {nstep!r}")

		for _ in range(nstep):
			if log_every and self.istep % log_every == 0:
				logger.info("Step %d", self.istep)
			self.step()

		logger.info("Completed %d steps\n%s", self.istep, self.timers.report())
		return self.get_Z()

	@property
	def time(self):
		"""Simulated time elapsed."""
		return self.istep * self.dt

	def get_Z(self):
		return self.grid.get_Z()

	def get_Q(self):
		return self.router.get_Q()

	def destroy(self):
		self.router.destroy()
