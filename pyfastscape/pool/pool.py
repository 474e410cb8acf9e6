"""
Taichi Field Pool Module

Pooling system for the per-step Taichi fields of the landscape evolution
pipeline (receivers, donors, stack, scan buffers...). Every step needs the same
set of full-grid buffers; the pool hands back an already materialised field of
the right dtype and shape instead of building a new SNode tree each time.

Fields are organised by (dtype, shape). Each field lives in its own
FieldsBuilder tree so it can be destroyed individually.

Supports 0D (scalar), 1D, and 2D fields:
- 0D fields: counters and cursors, accessed with [None]
- 1D fields: flat grid arrays with ti.i indexing
- 2D fields: ti.ij indexing
"""

import logging
from typing import Any, Tuple

import taichi as ti

logger = logging.getLogger(__name__)


def _normalise_shape(shape) -> Tuple[int, ...]:
    if isinstance(shape, int):
        return (shape,) if shape > 0 else ()
    if not isinstance(shape, tuple):
        shape = tuple(shape) if hasattr(shape, '__iter__') else (shape,)
    if not shape or (len(shape) == 1 and shape[0] == 0):
        return ()
    return shape


class TPField:
    """
    Pooled Taichi field with an acquire/release lifecycle.

    Attributes:
        id: Unique field identifier
        field: Underlying Taichi field (pass this one to kernels)
        in_use: Current usage status
        dtype: Field data type
        shape: Field dimensions (empty tuple () for 0D scalars)
        snodetree: Finalized field structure, None once destroyed
    """

    _next_id = 0

    def __init__(self, dtype: Any, shape: Tuple[int, ...]):
        shape = _normalise_shape(shape)
        if len(shape) > 2:
            raise ValueError(f"Unsupported field dimensionality: {len(shape)}D. Only 0D, 1D and 2D fields supported.")

        TPField._next_id += 1
        self.id = TPField._next_id
        self.in_use = False
        self.dtype = dtype
        self.shape = shape

        self.fb = ti.FieldsBuilder()
        self.field = ti.field(dtype)

        if len(shape) == 0:
            self.fb.place(self.field)
        elif len(shape) == 1:
            self.fb.dense(ti.i, shape).place(self.field)
        else:
            self.fb.dense(ti.ij, shape).place(self.field)

        self.snodetree = self.fb.finalize()
        logger.debug("Allocated pooled field %d dtype=%s shape=%s", self.id, dtype, shape)

    def acquire(self):
        """Mark field as in use."""
        self.in_use = True

    def release(self):
        """Mark field as available for reuse. Does not free memory."""
        self.in_use = False

    def destroy(self):
        """Free the field memory. The field must not be used afterwards."""
        if getattr(self, 'snodetree', None) is not None:
            self.snodetree.destroy()
            self.snodetree = None

    def fill(self, val):
        self.field.fill(val)

    def to_numpy(self):
        return self.field.to_numpy()

    def from_numpy(self, val):
        self.field.from_numpy(val)

    def copy_from(self, other):
        self.field.copy_from(other.field if isinstance(other, TPField) else other)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    def __repr__(self):
        state = "in use" if self.in_use else "free"
        return f"TPField(id={self.id}, dtype={self.dtype}, shape={self.shape}, {state})"


class TaiPool:
    """
    Pool manager for temporary Taichi fields.

    Usage:
        pool = TaiPool()
        stack = pool.get_tpfield(ti.i32, (nx*ny,))
        cursor = pool.get_tpfield(ti.i32, ())
        ...
        stack.release()
    """

    def __init__(self):
        self._pools = {}  # (dtype, shape) -> [TPField]

    def get_tpfield(self, dtype: Any, shape: Tuple[int, ...]) -> TPField:
        """
        Get an unused TPField of the given dtype and shape, creating it if needed.

        Returns:
            TPField: field already marked as in use
        """
        key = (dtype, _normalise_shape(shape))
        pool = self._pools.setdefault(key, [])

        for tpfield in pool:
            if not tpfield.in_use:
                tpfield.acquire()
                return tpfield

        tpfield = TPField(*key)
        pool.append(tpfield)
        tpfield.acquire()
        return tpfield

    def release_tpfield(self, tpfield: TPField):
        tpfield.release()

    def clear_unused(self):
        """Destroy every field that is not in use."""
        for pool in self._pools.values():
            for tpfield in pool[:]:
                if not tpfield.in_use:
                    tpfield.destroy()
                    pool.remove(tpfield)

    def clear_all(self):
        """Destroy every field, EVEN IF STILL IN USE."""
        for pool in self._pools.values():
            for tpfield in pool[:]:
                tpfield.destroy()
                pool.remove(tpfield)

    def stats(self) -> dict:
        """
        Returns:
            dict: total, in_use and available field counts
        """
        total = sum(len(pool) for pool in self._pools.values())
        in_use = sum(1 for pool in self._pools.values() for tpf in pool if tpf.in_use)
        return {"total": total, "in_use": in_use, "available": total - in_use}


# Global pool instance
taipool = TaiPool()


def get_temp_field(dtype: Any, shape: Tuple[int, ...]) -> TPField:
    """Get a TPField from the global pool."""
    return taipool.get_tpfield(dtype, shape)


def release_temp_field(tpfield: TPField):
    """Give a TPField back to the global pool."""
    taipool.release_tpfield(tpfield)


def pool_stats() -> dict:
    return taipool.stats()


def clear_pool():
    """Destroy the unused fields of the global pool."""
    taipool.clear_unused()


def temp_field(dtype: Any, shape: Tuple[int, ...]) -> TPField:
    """
    Get a TPField usable as a context manager, released on exit.

        with temp_field(ti.i32, ()) as cursor:
            cursor.field[None] = 0
            ...
    """
    return taipool.get_tpfield(dtype, shape)
