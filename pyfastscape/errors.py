"""
Runtime failures of the landscape evolution pipeline.

Precondition violations (bad grid, bad parameters) are reported with plain
ValueError before anything runs. The classes below cover what can only be
detected while stepping; none of them is recoverable within a step.
"""


class FastScapeError(RuntimeError):
	"""Base class of all pyfastscape runtime failures."""


class CapacityError(FastScapeError):
	"""A level of the schedule would write past the stack capacity."""


class ScheduleError(FastScapeError):
	"""A routed cell is missing from the schedule or appears more than once."""


class NewtonConvergenceError(FastScapeError):
	"""
	Some cells did not converge within the Newton-Raphson iteration cap.

	Attributes:
		nfailed (int): number of cells that hit the cap during the sweep
		max_iterations (int): the cap in use
	"""

	def __init__(self, nfailed, max_iterations):
		self.nfailed = nfailed
		self.max_iterations = max_iterations
		super().__init__(
			f"{nfailed} cell(s) did not converge within {max_iterations} Newton-Raphson iterations"
		)
