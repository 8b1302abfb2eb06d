"""
Circular Sierpinski circle packing.

Each circle spawns nine children a third of its radius: eight around it
at two thirds of the radius from the center, and one at the center. The
placement walk is shared by the static (single traced path) and the
animated (list of circle shapes) variants.
"""

import math
from typing import Iterator, List, Optional, Tuple
import logging

from .color import Hsla
from .geometry import Point, PointLike
from .path import Path, PathBuilder
from .shapes import Circle, Stroke
from .validation import (DEFAULT_LIMITS, DepthLimits, check_depth, check_finite, check_integer,
                         check_point, check_positive)

logger = logging.getLogger(__name__)

PERIPHERAL_CHILDREN = 8
BRANCHING_FACTOR = PERIPHERAL_CHILDREN + 1


def peripheral_centers(center: Point, radius: float, angle_offset: float = 0.0) -> List[Point]:
    """Centers of the eight outer children of a circle."""
    offset = radius * 2.0 / 3.0
    centers = []
    for i in range(PERIPHERAL_CHILDREN):
        angle = i * math.pi / 4.0 + angle_offset
        centers.append(Point(center.x + offset * math.cos(angle),
                             center.y + offset * math.sin(angle)))
    return centers


def _walk(center: Point, radius: float, depth: int, angle_offset: float,
          level_twist: float) -> Iterator[Tuple[Point, float]]:
    # Pre-order traversal with an explicit stack: a circle, then its eight
    # peripheral subtrees in angle order, then the central subtree.
    stack = [(center, radius, depth, angle_offset)]
    while stack:
        c, r, d, angle = stack.pop()
        if d == 0:
            continue
        yield (c, r)
        inner = r / 3.0
        child_angle = angle + level_twist
        stack.append((c, inner, d - 1, child_angle))
        for child in reversed(peripheral_centers(c, r, angle)):
            stack.append((child, inner, d - 1, child_angle))


def circle_packing_centers(center: PointLike, radius: float, depth: int,
                           angle_offset: float = 0.0, level_twist: float = 0.0,
                           limits: DepthLimits = DEFAULT_LIMITS) -> Iterator[Tuple[Point, float]]:
    """
    Circles of the packing in drawing order.

    Args:
        center: Center of the outermost circle
        radius: Radius of the outermost circle
        depth: Recursion depth; ``sum(9 ** k for k < depth)`` circles result
        angle_offset: Rotation of the peripheral children in radians
        level_twist: Extra rotation added to the offset at each deeper level
        limits: Depth caps

    Returns:
        Iterator of ``(center, radius)`` pairs
    """
    center = check_point('center', center)
    radius = check_positive('radius', radius)
    depth = check_depth('depth', depth, limits.circle_packing)
    angle_offset = check_finite('angle_offset', angle_offset)
    level_twist = check_finite('level_twist', level_twist)
    return _walk(center, radius, depth, angle_offset, level_twist)


def trace_circle(builder: PathBuilder, center: Point, radius: float, segments: int) -> None:
    """Trace a closed polygon approximating a circle into ``builder``."""
    angle_step = 2.0 * math.pi / segments
    builder.move_to(Point(center.x + radius, center.y))
    for i in range(1, segments + 1):
        angle = i * angle_step
        builder.line_to(Point(center.x + radius * math.cos(angle),
                              center.y + radius * math.sin(angle)))
    builder.close()


def circle_packing_path(center: PointLike, radius: float, depth: int,
                        circle_segments: int = 32, stroke_width: float = 1.0,
                        limits: DepthLimits = DEFAULT_LIMITS) -> Optional[Path]:
    """
    Static circle packing traced as one stroked path.

    Args:
        center: Center of the outermost circle
        radius: Radius of the outermost circle
        depth: Recursion depth
        circle_segments: Polygon sides used per circle (at least 3)
        stroke_width: Stroke width of the path
        limits: Depth caps

    Returns:
        The traced path, or ``None`` when ``depth`` is zero
    """
    circle_segments = check_integer('circle_segments', circle_segments, 3)
    builder = PathBuilder.stroke(stroke_width)
    for c, r in circle_packing_centers(center, radius, depth, limits=limits):
        trace_circle(builder, c, r, circle_segments)
    return builder.build_or_none()


def circle_packing_shapes(center: PointLike, radius: float, depth: int,
                          angle_offset: float = 0.0, level_twist: float = 0.0,
                          stroke: Optional[Stroke] = None, fill: Optional[Hsla] = None,
                          limits: DepthLimits = DEFAULT_LIMITS) -> List[Circle]:
    """
    Animated circle packing as a flat list of circle shapes.

    Varying ``angle_offset`` between frames rotates every peripheral child
    about its parent.
    """
    stroke = stroke or Stroke()
    shapes = []
    for c, r in circle_packing_centers(center, radius, depth, angle_offset, level_twist, limits):
        shape = Circle(r, c, stroke)
        if fill is not None:
            shape = shape.fill(fill)
        shapes.append(shape)
    logger.debug(f"Circle packing depth={depth} produced {len(shapes)} circles")
    return shapes


def expected_circle_count(depth: int) -> int:
    """Number of circles a packing of the given depth contains."""
    return sum(BRANCHING_FACTOR ** k for k in range(depth))
