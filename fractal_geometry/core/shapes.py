"""
Shape descriptors with stroke and fill attributes.

The four shape kinds form a closed union (``Shape``). Each one is an
immutable value: attribute setters return a modified copy, so setters can
be chained::

    circle(10, center).stroke_width(2).fill(hsla(200, 0.8, 0.5))

``to_primitive()`` converts a shape into what a renderer consumes: a
``Quad`` for circles and pixels, a ``ColoredSegment`` for lines and
triangles.
"""

from dataclasses import dataclass, field, replace
from typing import Union

from .color import Hsla, TRANSPARENT_BLACK, WHITE
from .geometry import Bounds, Point, PointLike, Quad, as_point
from .path import ColoredSegment, PathBuilder


@dataclass(frozen=True)
class Stroke:
    """Outline width and color. A width of zero means no stroke."""
    width: float = 1.0
    color: Hsla = WHITE

    def __post_init__(self):
        if self.width < 0:
            raise ValueError(f"Stroke width must be non-negative, got {self.width}")

    @classmethod
    def none(cls) -> 'Stroke':
        return cls(0.0, TRANSPARENT_BLACK)

    @property
    def visible(self) -> bool:
        return self.width > 0 and not self.color.is_transparent


@dataclass(frozen=True)
class Circle:
    """Circle given by radius and center."""
    radius: float
    center: Point
    stroke: Stroke = field(default_factory=Stroke)
    background: Hsla = TRANSPARENT_BLACK

    def stroke_width(self, width: float) -> 'Circle':
        return replace(self, stroke=replace(self.stroke, width=width))

    def stroke_color(self, color: Hsla) -> 'Circle':
        return replace(self, stroke=replace(self.stroke, color=color))

    def fill(self, color: Hsla) -> 'Circle':
        return replace(self, background=color)

    def no_stroke(self) -> 'Circle':
        return replace(self, stroke=Stroke.none())

    def to_primitive(self) -> Quad:
        """Quad centred on the circle with fully rounded corners."""
        size = self.radius * 2.0
        return Quad(
            bounds=Bounds.centered_at(self.center, size, size),
            corner_radius=size / 2.0,
            background=self.background,
            border_width=self.stroke.width,
            border_color=self.stroke.color,
        )


@dataclass(frozen=True)
class Line:
    """Straight line between two points."""
    start: Point
    end: Point
    stroke: Stroke = field(default_factory=Stroke)

    def stroke_width(self, width: float) -> 'Line':
        return replace(self, stroke=replace(self.stroke, width=width))

    def stroke_color(self, color: Hsla) -> 'Line':
        return replace(self, stroke=replace(self.stroke, color=color))

    def no_stroke(self) -> 'Line':
        return replace(self, stroke=Stroke.none())

    def to_primitive(self) -> ColoredSegment:
        builder = PathBuilder.stroke(self.stroke.width)
        builder.move_to(self.start).line_to(self.end)
        return ColoredSegment(builder.build(), self.stroke.color)


@dataclass(frozen=True)
class Triangle:
    """Triangle outline through three points."""
    p1: Point
    p2: Point
    p3: Point
    stroke: Stroke = field(default_factory=Stroke)

    def stroke_width(self, width: float) -> 'Triangle':
        return replace(self, stroke=replace(self.stroke, width=width))

    def stroke_color(self, color: Hsla) -> 'Triangle':
        return replace(self, stroke=replace(self.stroke, color=color))

    def no_stroke(self) -> 'Triangle':
        return replace(self, stroke=Stroke.none())

    def to_primitive(self) -> ColoredSegment:
        builder = PathBuilder.stroke(self.stroke.width)
        builder.move_to(self.p1).line_to(self.p2).line_to(self.p3).line_to(self.p1)
        return ColoredSegment(builder.build(), self.stroke.color)


@dataclass(frozen=True)
class Pixel:
    """Single unit-size colored cell with its top-left corner at ``position``."""
    position: Point
    pixel_color: Hsla = WHITE

    def color(self, color: Hsla) -> 'Pixel':
        return replace(self, pixel_color=color)

    def to_primitive(self) -> Quad:
        return Quad(bounds=Bounds(self.position, 1.0, 1.0), background=self.pixel_color)


Shape = Union[Circle, Line, Triangle, Pixel]


def circle(radius: float, center: PointLike) -> Circle:
    """Circle with a white 1px stroke and transparent fill."""
    return Circle(float(radius), as_point(center))


def line(start: PointLike, end: PointLike) -> Line:
    return Line(as_point(start), as_point(end))


def triangle(p1: PointLike, p2: PointLike, p3: PointLike) -> Triangle:
    return Triangle(as_point(p1), as_point(p2), as_point(p3))


def pixel(position: PointLike) -> Pixel:
    return Pixel(as_point(position))
