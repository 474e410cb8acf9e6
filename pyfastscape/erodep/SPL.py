"""
Implicit Stream Power Law (SPL) erosion on the level schedule.

The SPL describes bedrock erosion rate as a function of drainage area and
local slope:

E = K * A^m * S^n

Discretised with backward Euler along the D8 receiver of each cell:

h = h0 - K*dt*A^m * ((h - hr)/L)^n

where hr is the receiver's elevation at the end of the step and L the distance
to the receiver. Each cell therefore needs its receiver to be finalised
first: levels are processed from the sinks outward (level 0 holds sinks that
do not erode). Inside a level cells only read their receiver (previous level)
and write themselves, so a level is one parallel kernel.

The scalar equation is solved with Newton-Raphson,

f(h)  = h - h0 + fact * (h - hr)^n,   fact = K*dt*A^m / L^n
f'(h) = 1 + fact * n * (h - hr)^(n-1)

starting from h = h0 and stopping when two successive iterates differ by at
most tol. Iterates are kept inside the bracket (hr, h0] that holds the root,
with a bisection step whenever Newton leaves it. Iterations are capped;
cells hitting the cap (or ending on NaN) are counted and the sweep reports
them as a NewtonConvergenceError.
"""

import taichi as ti

from .. import constants as cte
from .. import pool
from ..errors import NewtonConvergenceError
from ..grid import neighbourer_d8 as nei


@ti.func
def newton_SPL(h0:ti.f64, hr:ti.f64, fact:ti.f64, nexp:ti.f64, tol:ti.f64, maxit:ti.i32):
	"""
	Solve h - h0 + fact*(h - hr)^n = 0 from h = h0.

	f is increasing on (hr, h0] with f(hr) < 0 <= f(h0), so the root is
	bracketed. Every iterate updates the bracket; a Newton step landing outside
	of it (concave f for n < 1, or a non-finite step) is replaced by bisection.

	Returns:
		tuple: (h, last iterate change); converged when |change| <= tol
	"""
	hnew = h0
	lo = hr
	hi = h0
	diff = 2. * tol
	it = 0
	while ti.abs(diff) > tol and it < maxit:
		hp = hnew
		x = hnew - hr
		f = hnew - h0 + fact * x ** nexp
		if f == 0.:
			diff = 0.
		else:
			if f > 0.:
				hi = hnew
			else:
				lo = hnew
			hn = hnew - f / (1. + fact * nexp * x ** (nexp - 1.))
			if hn == hnew:
				diff = 0.
			else:
				if hn > lo and hn < hi:
					hnew = hn
				else:
					hnew = 0.5 * (lo + hi)
				diff = hnew - hp
		it += 1
	return hnew, diff


@ti.kernel
def erode_level_SPL(z:ti.template(), receivers:ti.template(), Q:ti.template(), stack:ti.template(),
	start:ti.i32, end:ti.i32, nx:ti.i32, ny:ti.i32, dx:ti.f64,
	K:ti.f64, mexp:ti.f64, nexp:ti.f64, dt:ti.f64, tol:ti.f64, maxit:ti.i32, nfailed:ti.template()):
	"""
	Implicit SPL update of every cell of level [start, end).

	Args:
		z (ti.template): Elevation field, updated in place
		receivers (ti.template): Direction-coded receivers
		Q (ti.template): Drainage area
		stack (ti.template): Schedule stack
		start, end (ti.i32): Level range in the stack
		nx, ny (ti.i32): Grid dimensions
		dx (ti.f64): Grid spacing
		K, mexp, nexp (ti.f64): Erodibility and exponents
		dt (ti.f64): Time step
		tol (ti.f64): Newton-Raphson tolerance
		maxit (ti.i32): Newton-Raphson iteration cap
		nfailed (ti.template): 0D counter of non-converged cells
	"""
	for si in range(start, end):
		i = stack[si]
		k = receivers[i]
		if k != cte.NO_FLOW:
			r = nei.receiver_node(i, k, nx, ny)
			length = nei.distance(k) * dx
			fact = K * dt * Q[i] ** mexp / length ** nexp
			hnew, diff = newton_SPL(z[i], z[r], fact, nexp, tol, maxit)
			if ti.abs(diff) > tol or ti.math.isnan(hnew):
				ti.atomic_add(nfailed[None], 1)
			z[i] = hnew


def SPL(router, K = None, m = None, n = None, dt = None, tol = None, max_iterations = None):
	"""
	Execute implicit Stream Power Law erosion for one time step.

	Requires router.route() (or its four stages) to have run on the current
	heights. The router's grid heights are modified in place.

	Args:
		router (FlowRouter): Router with receivers, schedule and drainage area
		K, m, n (float, optional): SPL parameters, default cte.KR, cte.MEXP, cte.NEXP
		dt (float, optional): Time step, default cte.DT_SPL
		tol (float, optional): Newton tolerance, default cte.NEWTON_TOL
		max_iterations (int, optional): Newton cap, default cte.NEWTON_MAXIT

	Raises:
		NewtonConvergenceError: if any cell hit the iteration cap
	"""
	K = cte.KR if K is None else K
	m = cte.MEXP if m is None else m
	n = cte.NEXP if n is None else n
	dt = cte.DT_SPL if dt is None else dt
	tol = cte.NEWTON_TOL if tol is None else tol
	max_iterations = cte.NEWTON_MAXIT if max_iterations is None else max_iterations

	schedule = router.schedule
	with pool.temp_field(ti.i32, ()) as nfailed:
		nfailed.field[None] = 0
		for l, start, end in schedule.levels_outlet_first():
			# sinks do not erode
			if l == 0:
				continue
			erode_level_SPL(router.grid.z.field, router.receivers.field, router.Q.field, schedule.stack.field,
				start, end, router.nx, router.ny, router.dx,
				K, m, n, dt, tol, max_iterations, nfailed.field)
		failed = int(nfailed.field[None])

	if failed > 0:
		raise NewtonConvergenceError(failed, max_iterations)
