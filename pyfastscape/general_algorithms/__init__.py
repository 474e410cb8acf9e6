"""
General Algorithms Module

Taichi implementations of generic parallel building blocks used by the flow
scheduler.

Available Algorithms:
    - inclusive_scan: Work-efficient parallel prefix sum (Blelloch scan)
    - compact_flags: Stream compaction of flagged indices, order preserving
    - next_pow2: Size helper for the scan working buffer

Example Usage:
    ```python
    from pyfastscape.general_algorithms import inclusive_scan, next_pow2
    import taichi as ti

    data = ti.field(ti.i32, shape=1000)
    out = ti.field(ti.i32, shape=1000)
    work = ti.field(ti.i32, shape=next_pow2(1000))
    total = inclusive_scan(data, out, work, 1000)
    ```
"""

from .parallel_scan import inclusive_scan, compact_flags, next_pow2

__all__ = [
    'inclusive_scan',
    'compact_flags',
    'next_pow2',
]
