"""
Plane geometry value types.

Points are immutable and all arithmetic returns new values, so geometry
computed by one generator call can never be changed by another.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from .color import Hsla, TRANSPARENT_BLACK


@dataclass(frozen=True)
class Point:
    """A point (or vector) in the abstract drawing plane."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Point':
        return Point(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> 'Point':
        return Point(self.x / scalar, self.y / scalar)

    def __neg__(self) -> 'Point':
        return Point(-self.x, -self.y)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def length(self) -> float:
        """Euclidean length of this point treated as a vector."""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: 'Point') -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def rotated(self, angle: float) -> 'Point':
        """
        Rotate this vector about the origin.

        Args:
            angle: Rotation in radians (counter-clockwise in a y-up frame)

        Returns:
            Rotated vector
        """
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        return Point(self.x * cos_a - self.y * sin_a,
                     self.x * sin_a + self.y * cos_a)

    def midpoint(self, other: 'Point') -> 'Point':
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)

    def is_close(self, other: 'Point', tolerance: float = 1e-9) -> bool:
        """Compare two points within an absolute tolerance."""
        return (math.isclose(self.x, other.x, abs_tol=tolerance) and
                math.isclose(self.y, other.y, abs_tol=tolerance))

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


PointLike = Union[Point, Tuple[float, float]]


def as_point(value: PointLike) -> Point:
    """Coerce a point or an ``(x, y)`` pair into a ``Point``."""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


def point(x: float, y: float) -> Point:
    return Point(float(x), float(y))


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle given by its top-left origin and size."""
    origin: Point
    width: float
    height: float

    @classmethod
    def centered_at(cls, center: Point, width: float, height: float) -> 'Bounds':
        """Create bounds of the given size centred on a point."""
        return cls(Point(center.x - width / 2.0, center.y - height / 2.0), width, height)

    @classmethod
    def from_points(cls, a: Point, b: Point) -> 'Bounds':
        """Smallest bounds containing two corner points."""
        left = min(a.x, b.x)
        top = min(a.y, b.y)
        return cls(Point(left, top), abs(a.x - b.x), abs(a.y - b.y))

    @property
    def center(self) -> Point:
        return Point(self.origin.x + self.width / 2.0, self.origin.y + self.height / 2.0)

    @property
    def bottom_right(self) -> Point:
        return Point(self.origin.x + self.width, self.origin.y + self.height)


@dataclass(frozen=True)
class Quad:
    """
    Renderable rectangle with rounded corners, fill and border.

    Circles are quads whose corner radius is half their side, pixels are
    unit quads without rounding or border.
    """
    bounds: Bounds
    corner_radius: float = 0.0
    background: Hsla = TRANSPARENT_BLACK
    border_width: float = 0.0
    border_color: Hsla = TRANSPARENT_BLACK

    @property
    def is_round(self) -> bool:
        """True when the corner radius turns the quad into an ellipse."""
        return self.corner_radius * 2.0 >= min(self.bounds.width, self.bounds.height) > 0
