"""
Recursive line-based fractals: dragon curve, Koch snowflake, Sierpinski
triangle and Pythagoras tree.

Every fractal is implemented once as a walk that yields its leaf geometry
in drawing order. The two output modes are thin folds over that walk:

* ``*_path`` traces every leaf into one ``PathBuilder`` and returns a
  single uniformly stroked ``Path`` (``None`` when nothing was drawn).
* ``*_segments`` returns one ``ColoredSegment`` per leaf, colored by an
  optional ``colorizer(index, total)`` callback.

Because both modes consume the same walk, their endpoints are identical.
"""

import math
from typing import Callable, Iterator, List, Optional, Tuple
import logging

from .color import Hsla, WHITE
from .geometry import Point, PointLike
from .path import ColoredSegment, Path, PathBuilder
from .shapes import Stroke, Triangle
from .validation import DEFAULT_LIMITS, DepthLimits, check_depth, check_finite, check_point, check_positive

logger = logging.getLogger(__name__)

Edge = Tuple[Point, Point]
Colorizer = Callable[[int, int], Hsla]

SQRT3_OVER_2 = math.sqrt(3.0) / 2.0
SQRT2 = math.sqrt(2.0)


def _uniform(color: Hsla) -> Colorizer:
    def colorizer(index: int, total: int) -> Hsla:
        return color
    return colorizer


def _edges_to_path(edges: Iterator[Edge], stroke_width: float) -> Optional[Path]:
    builder = PathBuilder.stroke(stroke_width)
    for start, end in edges:
        builder.move_to(start).line_to(end)
    return builder.build_or_none()


def _edges_to_segments(edges: Iterator[Edge], colorizer: Optional[Colorizer],
                       stroke_width: float) -> List[ColoredSegment]:
    edges = list(edges)
    colorizer = colorizer or _uniform(WHITE)
    total = len(edges)
    segments = []
    for index, (start, end) in enumerate(edges):
        builder = PathBuilder.stroke(stroke_width)
        builder.move_to(start).line_to(end)
        segments.append(ColoredSegment(builder.build(), colorizer(index, total)))
    return segments


# ---------------------------------------------------------------------------
# Dragon curve
# ---------------------------------------------------------------------------

def dragon_midpoint(start: Point, end: Point, is_right: bool) -> Point:
    """
    Apex of the right-angle fold between two points.

    The apex lies half a segment length away from the midpoint,
    perpendicular to the segment, on the side selected by ``is_right``.
    """
    sign = -1.0 if is_right else 1.0
    return Point(
        (start.x + end.x) / 2.0 + (end.y - start.y) / 2.0 * sign,
        (start.y + end.y) / 2.0 + (start.x - end.x) / 2.0 * sign,
    )


def _dragon_walk(start: Point, end: Point, iterations: int, is_right: bool) -> Iterator[Edge]:
    if iterations == 0:
        yield (start, end)
        return
    mid = dragon_midpoint(start, end, is_right)
    yield from _dragon_walk(start, mid, iterations - 1, True)
    yield from _dragon_walk(mid, end, iterations - 1, False)


def dragon_curve_edges(start: PointLike, end: PointLike, iterations: int,
                       limits: DepthLimits = DEFAULT_LIMITS) -> Iterator[Edge]:
    """
    Leaf segments of the Heighway dragon between two points.

    Args:
        start: First endpoint of the seed segment
        end: Second endpoint of the seed segment
        iterations: Number of folds; yields ``2 ** iterations`` segments
        limits: Depth caps

    Returns:
        Iterator of ``(start, end)`` pairs, first starting at ``start`` and
        last ending at ``end``
    """
    start = check_point('start', start)
    end = check_point('end', end)
    iterations = check_depth('iterations', iterations, limits.dragon)
    return _dragon_walk(start, end, iterations, True)


def dragon_curve_path(start: PointLike, end: PointLike, iterations: int,
                      stroke_width: float = 1.0,
                      limits: DepthLimits = DEFAULT_LIMITS) -> Optional[Path]:
    """Dragon curve traced as one stroked path."""
    return _edges_to_path(dragon_curve_edges(start, end, iterations, limits), stroke_width)


def dragon_curve_segments(start: PointLike, end: PointLike, iterations: int,
                          colorizer: Optional[Colorizer] = None,
                          stroke_width: float = 1.0,
                          limits: DepthLimits = DEFAULT_LIMITS) -> List[ColoredSegment]:
    """Dragon curve as independently colored segments."""
    return _edges_to_segments(dragon_curve_edges(start, end, iterations, limits),
                              colorizer, stroke_width)


# ---------------------------------------------------------------------------
# Koch snowflake
# ---------------------------------------------------------------------------

def koch_corners(start: PointLike, side_length: float) -> Tuple[Point, Point, Point]:
    """Corners of the equilateral seed triangle of a Koch snowflake."""
    start = check_point('start', start)
    side_length = check_positive('side_length', side_length)
    height = side_length * SQRT3_OVER_2
    return (
        start,
        start + Point(side_length, 0.0),
        start + Point(side_length / 2.0, height),
    )


def _koch_side(start: Point, end: Point, iterations: int) -> Iterator[Edge]:
    if iterations == 0:
        yield (start, end)
        return
    third = (end - start) / 3.0
    p2 = start + third
    p3 = p2 + third.rotated(math.pi / 3.0)
    p4 = start + third * 2.0
    yield from _koch_side(start, p2, iterations - 1)
    yield from _koch_side(p2, p3, iterations - 1)
    yield from _koch_side(p3, p4, iterations - 1)
    yield from _koch_side(p4, end, iterations - 1)


def koch_snowflake_edges(start: PointLike, side_length: float, iterations: int,
                         limits: DepthLimits = DEFAULT_LIMITS) -> Iterator[Edge]:
    """
    Leaf segments of a Koch snowflake.

    The three sides ``p1->p2``, ``p2->p3`` and ``p3->p1`` of the seed
    triangle are each subdivided; ``3 * 4 ** iterations`` segments result.
    """
    p1, p2, p3 = koch_corners(start, side_length)
    iterations = check_depth('iterations', iterations, limits.koch)

    def walk():
        yield from _koch_side(p1, p2, iterations)
        yield from _koch_side(p2, p3, iterations)
        yield from _koch_side(p3, p1, iterations)

    return walk()


def koch_snowflake_path(start: PointLike, side_length: float, iterations: int,
                        stroke_width: float = 1.0,
                        limits: DepthLimits = DEFAULT_LIMITS) -> Optional[Path]:
    """Koch snowflake traced as one stroked path."""
    return _edges_to_path(koch_snowflake_edges(start, side_length, iterations, limits),
                          stroke_width)


def koch_snowflake_segments(start: PointLike, side_length: float, iterations: int,
                            colorizer: Optional[Colorizer] = None,
                            stroke_width: float = 1.0,
                            limits: DepthLimits = DEFAULT_LIMITS) -> List[ColoredSegment]:
    """Koch snowflake as independently colored segments."""
    return _edges_to_segments(koch_snowflake_edges(start, side_length, iterations, limits),
                              colorizer, stroke_width)


# ---------------------------------------------------------------------------
# Sierpinski triangle
# ---------------------------------------------------------------------------

TrianglePoints = Tuple[Point, Point, Point]


def _sierpinski_walk(start: Point, side_length: float, iterations: int) -> Iterator[TrianglePoints]:
    if iterations == 0:
        height = side_length * SQRT3_OVER_2
        yield (start,
               start + Point(side_length, 0.0),
               start + Point(side_length / 2.0, height))
        return
    half = side_length / 2.0
    yield from _sierpinski_walk(start, half, iterations - 1)
    yield from _sierpinski_walk(start + Point(half, 0.0), half, iterations - 1)
    yield from _sierpinski_walk(start + Point(half / 2.0, half * SQRT3_OVER_2), half, iterations - 1)


def sierpinski_triangles(start: PointLike, side_length: float, iterations: int,
                         limits: DepthLimits = DEFAULT_LIMITS) -> Iterator[TrianglePoints]:
    """
    Leaf triangles of a Sierpinski triangle.

    Args:
        start: Corner shared by the base and the left side
        side_length: Side of the outer triangle
        iterations: Subdivision count; yields ``3 ** iterations`` triangles
        limits: Depth caps

    Returns:
        Iterator of corner triples
    """
    start = check_point('start', start)
    side_length = check_positive('side_length', side_length)
    iterations = check_depth('iterations', iterations, limits.sierpinski)
    return _sierpinski_walk(start, side_length, iterations)


def sierpinski_triangle_path(start: PointLike, side_length: float, iterations: int,
                             stroke_width: float = 1.0,
                             limits: DepthLimits = DEFAULT_LIMITS) -> Optional[Path]:
    """Every leaf triangle traced as a closed sub-path of one path."""
    builder = PathBuilder.stroke(stroke_width)
    for p1, p2, p3 in sierpinski_triangles(start, side_length, iterations, limits):
        builder.move_to(p1).line_to(p2).line_to(p3).close()
    return builder.build_or_none()


def sierpinski_triangle_segments(start: PointLike, side_length: float, iterations: int,
                                 colorizer: Optional[Colorizer] = None,
                                 stroke_width: float = 1.0,
                                 limits: DepthLimits = DEFAULT_LIMITS) -> List[ColoredSegment]:
    """Each leaf triangle as its own colored outline."""
    leaves = list(sierpinski_triangles(start, side_length, iterations, limits))
    colorizer = colorizer or _uniform(WHITE)
    total = len(leaves)
    return [
        Triangle(p1, p2, p3, Stroke(stroke_width, colorizer(index, total))).to_primitive()
        for index, (p1, p2, p3) in enumerate(leaves)
    ]


# ---------------------------------------------------------------------------
# Pythagoras tree
# ---------------------------------------------------------------------------

def _pythagoras_walk(start: Point, size: float, angle: float, iterations: int) -> Iterator[Edge]:
    if iterations == 0:
        return
    # Screen coordinates: y grows downward, so upward growth subtracts sin.
    end = Point(start.x + size * math.cos(angle), start.y - size * math.sin(angle))
    yield (start, end)
    new_size = size / SQRT2
    yield from _pythagoras_walk(end, new_size, angle + math.pi / 4.0, iterations - 1)
    yield from _pythagoras_walk(end, new_size, angle - math.pi / 4.0, iterations - 1)


def pythagoras_tree_edges(start: PointLike, size: float, angle: float, iterations: int,
                          limits: DepthLimits = DEFAULT_LIMITS) -> Iterator[Edge]:
    """
    Branches of a binary Pythagoras tree.

    Args:
        start: Root of the trunk
        size: Trunk length
        angle: Trunk direction in radians (``pi / 2`` grows straight up)
        iterations: Branching levels; yields ``2 ** iterations - 1`` branches
        limits: Depth caps

    Returns:
        Iterator of ``(start, end)`` branch pairs in depth-first order
    """
    start = check_point('start', start)
    size = check_positive('size', size)
    angle = check_finite('angle', angle)
    iterations = check_depth('iterations', iterations, limits.pythagoras)
    return _pythagoras_walk(start, size, angle, iterations)


def pythagoras_tree_path(start: PointLike, size: float, angle: float, iterations: int,
                         stroke_width: float = 1.0,
                         limits: DepthLimits = DEFAULT_LIMITS) -> Optional[Path]:
    """Pythagoras tree traced as one stroked path."""
    return _edges_to_path(pythagoras_tree_edges(start, size, angle, iterations, limits),
                          stroke_width)


def pythagoras_tree_segments(start: PointLike, size: float, angle: float, iterations: int,
                             colorizer: Optional[Colorizer] = None,
                             stroke_width: float = 1.0,
                             limits: DepthLimits = DEFAULT_LIMITS) -> List[ColoredSegment]:
    """Pythagoras tree as independently colored branches."""
    return _edges_to_segments(pythagoras_tree_edges(start, size, angle, iterations, limits),
                              colorizer, stroke_width)
