"""
Memory management and field pooling for pyfastscape.

Every time step rebuilds the receiver map, the donor lists, the stack and the
drainage area over the whole grid. The pool keeps these full-grid Taichi fields
alive between steps and between objects so that they are allocated once.

Core Classes:
- TPField: Wrapper for pooled Taichi fields with acquire/release lifecycle
- TaiPool: Pool manager keyed by (dtype, shape)

Pool Management Functions:
- get_temp_field / release_temp_field: use the global pool
- temp_field: context manager releasing the field on exit
- pool_stats: usage statistics
- clear_pool: destroy unused fields

Usage:
    import pyfastscape as pfs
    import taichi as ti

    with pfs.pool.temp_field(ti.i32, ()) as counter:
        counter.field[None] = 0
"""

from .pool import (
    TPField,
    TaiPool,
    taipool,
    get_temp_field,
    release_temp_field,
    pool_stats,
    clear_pool,
    temp_field,
)

__all__ = [
    "TPField",
    "TaiPool",
    "taipool",
    "get_temp_field",
    "release_temp_field",
    "pool_stats",
    "clear_pool",
    "temp_field",
]
