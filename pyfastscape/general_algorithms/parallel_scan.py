"""
Parallel Scan Implementation

Work-efficient parallel inclusive scan (Blelloch scan) and the stream
compaction built on top of it. The level scheduler uses both: compaction to
gather the sink cells of level 0, and a scan of the per-parent donor counts to
give every parent a disjoint write region in the stack.

Algorithm Details:
    - Based on Blelloch (1990) work-efficient scan
    - Two-phase approach: up-sweep (reduce) + down-sweep (distribute)
    - O(n) work complexity, O(log n) depth complexity
    - Needs a working buffer of at least next_pow2(n) elements

Mathematical Operation:
    Given input array [a0, a1, ..., an-1], produces output:
    [a0, a0+a1, ..., a0+a1+...+an-1]

Reference: Blelloch, G. E. (1990). "Prefix sums and their applications"
"""
import taichi as ti


def next_pow2(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    p = 1
    while p < n:
        p *= 2
    return p


@ti.kernel
def upsweep_step(data: ti.template(), n: int, stride: int):
    """
    One reduce step: data[i] += data[i-stride] where (i+1) % (2*stride) == 0.
    """
    for i in range(n):
        if (i + 1) % (stride * 2) == 0:
            data[i] += data[i - stride]


@ti.kernel
def downsweep_step(data: ti.template(), n: int, stride: int):
    """
    One distribute step, swapping and summing the pair (i-stride, i).
    """
    for i in range(n):
        if (i + 1) % (stride * 2) == 0:
            temp = data[i - stride]
            data[i - stride] = data[i]
            data[i] += temp


@ti.kernel
def copy_input_to_work(src: ti.template(), dst: ti.template(), n: int, work_size: int):
    """Copy the n valid input values and zero-pad up to work_size."""
    for i in range(work_size):
        if i < n:
            dst[i] = src[i]
        else:
            dst[i] = 0


@ti.kernel
def set_zero(data: ti.template(), index: int):
    data[index] = 0


@ti.kernel
def make_inclusive_and_copy(input_arr: ti.template(), work_data: ti.template(), output_arr: ti.template(), n: int):
    """Exclusive scan in work_data -> inclusive scan in output_arr."""
    for i in range(n):
        output_arr[i] = work_data[i] + input_arr[i]


def inclusive_scan(input_arr: ti.template(), output_arr: ti.template(), work_arr: ti.template(), n: int) -> int:
    """
    Compute the inclusive prefix sum of input_arr[0:n] into output_arr[0:n].

    Args:
        input_arr: Input data array to scan
        output_arr: Output array for inclusive scan results
        work_arr: Working buffer (size >= next_pow2(n))
        n: Number of elements to scan

    Returns:
        int: The total (output_arr[n-1]), 0 when n == 0

    Example:
        Input:  [3, 1, 7, 0, 4, 1, 6, 3]
        Output: [3, 4, 11, 11, 15, 16, 22, 25]
    """
    if n <= 0:
        return 0

    work_size = next_pow2(n)
    if work_arr.shape[0] < work_size:
        raise ValueError(f"Scan work buffer too small: {work_arr.shape[0]} < {work_size}")

    copy_input_to_work(input_arr, work_arr, n, work_size)

    # Up-sweep phase (build sum tree)
    stride = 1
    while stride < work_size:
        upsweep_step(work_arr, work_size, stride)
        stride *= 2

    set_zero(work_arr, work_size - 1)

    # Down-sweep phase (traverse down tree)
    stride = work_size // 2
    while stride > 0:
        downsweep_step(work_arr, work_size, stride)
        stride //= 2

    make_inclusive_and_copy(input_arr, work_arr, output_arr, n)
    return int(output_arr[n - 1])


@ti.kernel
def scatter_flagged(flags: ti.template(), offsets: ti.template(), dst: ti.template(), base: int):
    """
    Stream compaction write: every flagged index i lands at
    dst[base + offsets[i] - 1], offsets being the inclusive scan of flags.
    Output order is the ascending order of i.
    """
    for i in flags:
        if flags[i] == 1:
            dst[base + offsets[i] - 1] = i


def compact_flags(flags: ti.template(), offsets: ti.template(), work_arr: ti.template(), dst: ti.template(), base: int = 0) -> int:
    """
    Write the indices i where flags[i] == 1 into dst[base:], in ascending order.

    Args:
        flags: 0/1 integer field
        offsets: integer field of the same size as flags (scan output)
        work_arr: scan working buffer (size >= next_pow2(flags.shape[0]))
        dst: destination field
        base: first slot written in dst

    Returns:
        int: number of indices written
    """
    n = flags.shape[0]
    count = inclusive_scan(flags, offsets, work_arr, n)
    if base + count > dst.shape[0]:
        raise ValueError(f"Compaction of {count} indices at {base} overflows destination of size {dst.shape[0]}")
    scatter_flagged(flags, offsets, dst, base)
    return count
