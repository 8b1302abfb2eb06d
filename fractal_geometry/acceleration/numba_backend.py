"""
Numba JIT compilation backend for the Julia set.

This module provides a JIT-compiled escape-count kernel that produces the
same counts as the NumPy implementation in ``core.julia`` while iterating
each pixel in compiled code, parallelised over rows.
"""

import numpy as np
from typing import Optional, Tuple
import logging

import numba
from numba import njit, prange

from ..core.julia import ESCAPE_RADIUS, PLANE_EXTENT, check_rows, validate_grid
from ..core.validation import DEFAULT_LIMITS, DepthLimits

logger = logging.getLogger(__name__)


@njit(parallel=True, cache=True)
def julia_kernel(width, height, y_start, y_end, c, max_iter, escape_radius, extent):
    """
    JIT-compiled Julia set escape-count kernel.

    Args:
        width: Grid width in pixels
        height: Grid height in pixels
        y_start: First row of the band
        y_end: Row after the last row of the band
        c: Julia constant
        max_iter: Maximum iterations
        escape_radius: Escape radius
        extent: Side of the square plane region mapped onto the grid

    Returns:
        Array of shape (y_end - y_start, width) with escape counts
    """
    rows = y_end - y_start
    counts = np.zeros((rows, width), dtype=np.int32)
    half = extent / 2.0

    for i in prange(rows):
        y = (y_start + i) / height * extent - half
        for j in range(width):
            x = j / width * extent - half
            z = complex(x, y)
            n = 0
            while n < max_iter and abs(z) <= escape_radius:
                z = z * z + c
                n += 1
            counts[i, j] = n

    return counts


class NumbaAccelerator:
    """Numba-based Julia set computation."""

    def __init__(self):
        self.version = numba.__version__
        logger.info(f"Numba accelerator initialized (numba {self.version})")

    def julia_escape_counts(self, width: int, height: int, c: complex, max_iterations: int,
                            rows: Optional[Tuple[int, int]] = None,
                            limits: DepthLimits = DEFAULT_LIMITS) -> np.ndarray:
        """
        Escape counts for a grid or a band of rows.

        Args:
            width: Grid width in pixels
            height: Grid height in pixels
            c: Julia constant
            max_iterations: Iteration cap
            rows: Optional ``(y_start, y_end)`` band
            limits: Iteration caps

        Returns:
            ``int32`` escape counts
        """
        c = validate_grid(width, height, c, max_iterations, limits)
        y_start, y_end = check_rows(rows, height)
        return julia_kernel(int(width), int(height), y_start, y_end, c,
                            int(max_iterations), ESCAPE_RADIUS, PLANE_EXTENT)


# Global Numba accelerator
_numba_accelerator = None


def get_numba_accelerator() -> NumbaAccelerator:
    """Get the global Numba accelerator instance."""
    global _numba_accelerator
    if _numba_accelerator is None:
        _numba_accelerator = NumbaAccelerator()
    return _numba_accelerator
