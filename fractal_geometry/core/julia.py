"""
Escape-time Julia set.

Every pixel ``(x, y)`` of a ``width x height`` grid maps to the starting
value ``z0 = (x / width * 4 - 2) + (y / height * 4 - 2)i`` and iterates
``z <- z**2 + c`` while ``|z| <= 2`` and fewer than ``max_iterations``
steps were taken. Pixels that escape in time become colored unit pixels;
the rest stay transparent.

Rows are independent, so the grid can be computed in bands
(``rows=(y_start, y_end)``) and assembled afterwards.
"""

import cmath
import numbers
from typing import List, Optional, Tuple
import logging

import numpy as np

from .color import Hsla
from .exceptions import InvalidParameterError
from .geometry import Point
from .shapes import Pixel
from .validation import DEFAULT_LIMITS, DepthLimits, check_depth

logger = logging.getLogger(__name__)

ESCAPE_RADIUS = 2.0
PLANE_EXTENT = 4.0
SATURATION = 1.0
LIGHTNESS = 0.5


def validate_grid(width: int, height: int, c: complex, max_iterations: int,
                  limits: DepthLimits = DEFAULT_LIMITS) -> complex:
    """
    Check Julia grid parameters.

    Returns:
        ``c`` converted to ``complex``
    """
    for name, value in (('width', width), ('height', height)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
            raise InvalidParameterError(f"{name} must be a positive integer, got {value!r}")
    max_iterations = check_depth('max_iterations', max_iterations, limits.julia_iterations)
    if max_iterations == 0:
        raise InvalidParameterError("max_iterations must be positive")
    if not isinstance(c, numbers.Complex):
        raise InvalidParameterError(f"c must be a complex number, got {c!r}")
    c = complex(c)
    if not cmath.isfinite(c):
        raise InvalidParameterError(f"c must be finite, got {c}")
    return c


def check_rows(rows: Optional[Tuple[int, int]], height: int) -> Tuple[int, int]:
    """Resolve a row band, defaulting to the full grid."""
    if rows is None:
        return 0, height
    y_start, y_end = rows
    if not 0 <= y_start <= y_end <= height:
        raise InvalidParameterError(f"rows must satisfy 0 <= start <= end <= {height}, got {rows}")
    return int(y_start), int(y_end)


def plane_coordinates(width: int, height: int,
                      rows: Optional[Tuple[int, int]] = None) -> np.ndarray:
    """
    Starting values for each pixel of a band.

    Args:
        width: Grid width in pixels
        height: Grid height in pixels
        rows: Optional ``(y_start, y_end)`` band

    Returns:
        Complex array of shape ``(y_end - y_start, width)``
    """
    y_start, y_end = check_rows(rows, height)
    xs = np.arange(width, dtype=np.float64) / width * PLANE_EXTENT - PLANE_EXTENT / 2.0
    ys = np.arange(y_start, y_end, dtype=np.float64) / height * PLANE_EXTENT - PLANE_EXTENT / 2.0
    return xs[np.newaxis, :] + 1j * ys[:, np.newaxis]


def escape_counts(z: np.ndarray, c: complex, max_iterations: int) -> np.ndarray:
    """
    Count iterations until each value escapes.

    Args:
        z: Starting values (any shape)
        c: Julia constant
        max_iterations: Iteration cap

    Returns:
        ``int32`` array of the same shape; ``max_iterations`` marks points
        that never escaped
    """
    z = np.array(z, dtype=np.complex128, copy=True)
    counts = np.zeros(z.shape, dtype=np.int32)
    active = np.ones(z.shape, dtype=bool)

    for _ in range(max_iterations):
        active &= np.abs(z) <= ESCAPE_RADIUS
        if not np.any(active):
            break
        z[active] = z[active] * z[active] + c
        counts[active] += 1

    return counts


def julia_escape_counts(width: int, height: int, c: complex, max_iterations: int,
                        rows: Optional[Tuple[int, int]] = None,
                        limits: DepthLimits = DEFAULT_LIMITS) -> np.ndarray:
    """Escape counts for a full grid or a band of rows."""
    c = validate_grid(width, height, c, max_iterations, limits)
    return escape_counts(plane_coordinates(width, height, rows), c, max_iterations)


def escape_color(iterations: int, max_iterations: int) -> Hsla:
    """Hue proportional to escape speed at fixed saturation and lightness."""
    return Hsla(iterations / max_iterations * 360.0, SATURATION, LIGHTNESS, 1.0)


def pixels_from_counts(counts: np.ndarray, max_iterations: int, y_offset: int = 0) -> List[Pixel]:
    """
    Turn escape counts into colored pixels, row-major.

    Args:
        counts: Escape counts of shape ``(rows, width)``
        max_iterations: Iteration cap used to compute ``counts``
        y_offset: Grid row of ``counts[0]``

    Returns:
        One pixel per escaped point
    """
    ys, xs = np.nonzero(counts < max_iterations)
    return [
        Pixel(Point(float(x), float(y + y_offset)), escape_color(int(counts[y, x]), max_iterations))
        for y, x in zip(ys, xs)
    ]


def julia_set(width: int, height: int, c: complex, max_iterations: int,
              rows: Optional[Tuple[int, int]] = None,
              limits: DepthLimits = DEFAULT_LIMITS) -> List[Pixel]:
    """
    Colored pixels of a Julia set.

    Args:
        width: Grid width in pixels
        height: Grid height in pixels
        c: Julia constant
        max_iterations: Iteration cap
        rows: Optional ``(y_start, y_end)`` band
        limits: Iteration caps

    Returns:
        Pixels for every point that escaped before ``max_iterations``
    """
    counts = julia_escape_counts(width, height, c, max_iterations, rows, limits)
    y_offset = rows[0] if rows is not None else 0
    pixels = pixels_from_counts(counts, max_iterations, y_offset)
    logger.debug(f"Julia set {width}x{height} c={c} produced {len(pixels)} pixels")
    return pixels
