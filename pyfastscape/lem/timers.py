"""
Cumulative wall-clock timers for the phases of a time step.

Taichi kernels launch asynchronously; a timer synchronises the taichi runtime
before reading the clock so that the time of a phase includes its kernels.
"""

import time

import taichi as ti


class CumulativeTimer:
	"""
	Accumulates elapsed time over any number of start/stop cycles.

	Usage:
		tmr = CumulativeTimer()
		with tmr:
			some_kernel()
		tmr.elapsed   # seconds
	"""

	def __init__(self, sync = True):
		self.sync = sync
		self.elapsed = 0.
		self.count = 0
		self._start = None

	def start(self):
		if self.sync:
			ti.sync()
		self._start = time.perf_counter()

	def stop(self):
		if self._start is None:
			raise RuntimeError("CumulativeTimer stopped before being started")
		if self.sync:
			ti.sync()
		self.elapsed += time.perf_counter() - self._start
		self.count += 1
		self._start = None

	def reset(self):
		self.elapsed = 0.
		self.count = 0
		self._start = None

	def __enter__(self):
		self.start()
		return self

	def __exit__(self, exc_type, exc_val, exc_tb):
		self.stop()
		return False


class PhaseTimers:
	"""One CumulativeTimer per named phase, created on first use."""

	def __init__(self, sync = True):
		self.sync = sync
		self._timers = {}

	def __getitem__(self, name):
		if name not in self._timers:
			self._timers[name] = CumulativeTimer(sync = self.sync)
		return self._timers[name]

	def __contains__(self, name):
		return name in self._timers

	def items(self):
		return self._timers.items()

	def report(self):
		"""Phase timings as text, one line per phase, in milliseconds."""
		width = max((len(name) for name in self._timers), default = 0)
		return "\n".join(
			f"{name:<{width}} = {tmr.elapsed * 1e3:12.3f} ms ({tmr.count} calls)"
			for name, tmr in self._timers.items()
		)
