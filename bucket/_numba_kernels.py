"""Numba JIT-compiled scanline flood fill.

IMPORTANT: The JIT-compiled function uses explicit loops (not NumPy
vectorization) since Numba compiles it to native machine code. It uses
an explicit stack; recursion would exhaust the call stack on large
regions.
"""

from __future__ import annotations

import numpy as np
from numba import njit

# Per-pixel state in the scanline kernel
_UNSEEN = 0
_QUEUED = 1
_FILLED = 2


@njit(cache=True)
def scanline_fill(fillable, seed_x, seed_y):
    """Collect the 4-connected region of fillable pixels around a seed.

    For each popped point the span is extended left and right while
    pixels are fillable and not yet filled; every pixel of the span is
    marked filled and its vertical neighbours are pushed if fillable and
    not yet queued.

    Args:
        fillable: (H, W) bool mask of pixels the fill may enter.
        seed_x: Seed column.
        seed_y: Seed row.

    Returns:
        (H, W) bool mask of filled pixels.
    """
    height, width = fillable.shape
    state = np.zeros((height, width), dtype=np.uint8)
    filled = np.zeros((height, width), dtype=np.bool_)
    if not fillable[seed_y, seed_x]:
        return filled

    stack_x = [seed_x]
    stack_y = [seed_y]
    state[seed_y, seed_x] = _QUEUED

    while len(stack_x) > 0:
        cx = stack_x.pop()
        cy = stack_y.pop()

        lx = cx
        while lx >= 0 and fillable[cy, lx] and state[cy, lx] != _FILLED:
            lx -= 1
        lx += 1
        rx = cx
        while rx < width and fillable[cy, rx] and state[cy, rx] != _FILLED:
            rx += 1

        for xx in range(lx, rx):
            state[cy, xx] = _FILLED
            filled[cy, xx] = True
            if cy > 0 and fillable[cy - 1, xx] and state[cy - 1, xx] == _UNSEEN:
                state[cy - 1, xx] = _QUEUED
                stack_x.append(xx)
                stack_y.append(cy - 1)
            if cy < height - 1 and fillable[cy + 1, xx] and state[cy + 1, xx] == _UNSEEN:
                state[cy + 1, xx] = _QUEUED
                stack_x.append(xx)
                stack_y.append(cy + 1)

    return filled
