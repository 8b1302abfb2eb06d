"""
Parametric formula patterns.

``sample_formula`` evaluates a point-producing formula over a parameter
range. ``radial_burst`` is the animated pattern of orbiting points and
fading rays, entirely determined by an integer epoch; advancing the epoch
with ``next_epoch`` and regenerating gives the next animation frame.
"""

import math
from dataclasses import dataclass
from typing import Callable, List
import logging

from .color import Hsla
from .exceptions import InvalidParameterError
from .geometry import Point, PointLike
from .shapes import Pixel
from .validation import check_depth, check_finite, check_point, check_positive

logger = logging.getLogger(__name__)

MAX_EPOCH = 512
RAY_PIXELS = 4


@dataclass(frozen=True)
class ColoredPoint:
    """A position with the color it should be drawn in."""
    position: Point
    color: Hsla

    def to_pixel(self) -> Pixel:
        return Pixel(self.position, self.color)


def sample_formula(formula: Callable[[float], ColoredPoint], start: float, end: float,
                   step: float) -> List[ColoredPoint]:
    """
    Evaluate ``formula(t)`` for ``t = start, start + step, ...`` up to ``end``.

    Args:
        formula: Function from the parameter to a colored point
        start: First parameter value
        end: Last parameter value (inclusive)
        step: Positive increment

    Returns:
        Colored points in parameter order
    """
    start = check_finite('start', start)
    end = check_finite('end', end)
    step = check_positive('step', step)
    points = []
    t = start
    while t <= end:
        points.append(formula(t))
        t += step
    return points


def next_epoch(epoch: int, max_epoch: int = MAX_EPOCH) -> int:
    """Advance an animation epoch, wrapping to zero after ``max_epoch - 1``."""
    if max_epoch <= 0:
        raise InvalidParameterError("max_epoch must be positive")
    epoch = check_depth('epoch', epoch, max_epoch - 1)
    return (epoch + 1) % max_epoch


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def orbit_points(epoch: int, center: Point, radius: float, num_points: int,
                 max_epoch: int = MAX_EPOCH) -> List[ColoredPoint]:
    """Orbiting points of a radial burst frame, ``num_points + 1`` of them."""
    e = float(epoch)
    angle_step = 2.0 * math.pi / num_points

    def formula(t: float) -> ColoredPoint:
        angle = t * angle_step + e / 128.0
        if epoch % 2 != 0:
            angle += math.pi
        chaotic = math.sin(e * t) * 0.2
        base_radius = radius * (1.0 + 0.5 * math.sin(e / 128.0) + chaotic)
        spiral = (e / 32.0) * 0.1
        position = Point(center.x + base_radius * math.cos(angle + spiral),
                         center.y + base_radius * math.sin(angle + spiral))

        hue = (t + math.sin(e / 64.0)) % 1.0
        saturation = 0.5 + 0.5 * (math.sin(e / max_epoch) * math.cos(t * 2.0 * math.pi))
        lightness = 0.5 + 0.3 * (math.cos(e / 64.0) * math.sin(t * 3.0 * math.pi))
        return ColoredPoint(position, Hsla(hue * 360.0, _clamp01(saturation), _clamp01(lightness)))

    return sample_formula(formula, 0.0, float(num_points), 1.0)


def ray_points(epoch: int, center: Point, radius: float, num_points: int) -> List[ColoredPoint]:
    """Short rays of fading pixels cast outward from the orbit."""
    e = float(epoch)
    angle_step = 2.0 * math.pi / num_points
    points = []
    for i in range(num_points):
        angle = i * angle_step + e / 75.0
        base_radius = radius * (1.0 + 0.5 * math.sin(e / 128.0))
        start = Point(center.x + base_radius * math.cos(angle),
                      center.y + base_radius * math.sin(angle))
        length = radius * (0.5 + math.cos(e / 64.0))
        end = Point(start.x + length * math.cos(angle), start.y + length * math.sin(angle))
        hue = i / num_points * 360.0
        for k in range(RAY_PIXELS):
            t = k / 20.0
            position = start + (end - start) * t
            points.append(ColoredPoint(position, Hsla(hue, 0.8, 0.5, (1.0 - t) * 0.8)))
    return points


def radial_burst(epoch: int, center: PointLike = (384.0, 384.0), radius: float = 200.0,
                 num_points: int = 16, max_epoch: int = MAX_EPOCH) -> List[Pixel]:
    """
    One frame of the radial burst animation.

    Args:
        epoch: Animation epoch in ``[0, max_epoch)``
        center: Center of the orbit
        radius: Base orbit radius
        num_points: Number of orbit samples and rays
        max_epoch: Epoch period

    Returns:
        Ray pixels followed by orbit pixels
    """
    epoch = check_depth('epoch', epoch, max_epoch - 1)
    center = check_point('center', center)
    radius = check_positive('radius', radius)
    if isinstance(num_points, bool) or not isinstance(num_points, int) or num_points <= 0:
        raise InvalidParameterError(f"num_points must be a positive integer, got {num_points!r}")

    points = ray_points(epoch, center, radius, num_points)
    points.extend(orbit_points(epoch, center, radius, num_points, max_epoch))
    return [p.to_pixel() for p in points]
