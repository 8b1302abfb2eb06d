import math

import pytest

from fractal_geometry.core.color import WHITE
from fractal_geometry.core.exceptions import InvalidParameterError
from fractal_geometry.core.formula import (MAX_EPOCH, RAY_PIXELS, ColoredPoint, next_epoch,
                                           radial_burst, sample_formula)
from fractal_geometry.core.geometry import Point
from fractal_geometry.core.shapes import Pixel


def test_sample_formula_includes_end():
    points = sample_formula(lambda t: ColoredPoint(Point(t, 0.0), WHITE), 0.0, 2.0, 0.5)
    assert [p.position.x for p in points] == [0.0, 0.5, 1.0, 1.5, 2.0]


def test_sample_formula_empty_range():
    assert sample_formula(lambda t: ColoredPoint(Point(t, t), WHITE), 1.0, 0.0, 1.0) == []


@pytest.mark.parametrize("step", [0.0, -1.0, float('nan')])
def test_sample_formula_rejects_bad_step(step):
    with pytest.raises(InvalidParameterError):
        sample_formula(lambda t: ColoredPoint(Point(t, t), WHITE), 0.0, 1.0, step)


def test_next_epoch_wraps():
    assert next_epoch(0) == 1
    assert next_epoch(MAX_EPOCH - 1) == 0
    assert next_epoch(3, max_epoch=4) == 0
    with pytest.raises(InvalidParameterError):
        next_epoch(MAX_EPOCH)
    with pytest.raises(InvalidParameterError):
        next_epoch(-1)


def test_radial_burst_pixel_count():
    pixels = radial_burst(0)
    assert len(pixels) == 16 * RAY_PIXELS + 17
    assert all(isinstance(p, Pixel) for p in pixels)


def test_radial_burst_first_frame_positions():
    pixels = radial_burst(0, center=(384, 384), radius=200)
    # First ray pixel and first orbit point both sit on the base orbit at angle 0.
    assert pixels[0].position.is_close(Point(584.0, 384.0))
    assert pixels[0].pixel_color.a == pytest.approx(0.8)
    orbit_start = pixels[16 * RAY_PIXELS]
    assert orbit_start.position.is_close(Point(584.0, 384.0))
    assert orbit_start.pixel_color.s == pytest.approx(0.5)
    assert orbit_start.pixel_color.l == pytest.approx(0.5)


def test_ray_pixels_fade_outward():
    pixels = radial_burst(10)
    alphas = [p.pixel_color.a for p in pixels[:RAY_PIXELS]]
    assert alphas == sorted(alphas, reverse=True)
    assert alphas[0] == pytest.approx(0.8)


def test_odd_epochs_flip_orbit():
    even = radial_burst(2, num_points=4)
    odd = radial_burst(3, num_points=4)
    assert not even[4 * RAY_PIXELS].position.is_close(odd[4 * RAY_PIXELS].position)
    angle = 3 / 128.0 + math.pi
    first = odd[4 * RAY_PIXELS].position - Point(384.0, 384.0)
    assert math.atan2(first.y, first.x) % (2 * math.pi) == pytest.approx(
        (angle + 3 / 320.0) % (2 * math.pi))


def test_radial_burst_is_deterministic():
    assert radial_burst(123) == radial_burst(123)
    assert radial_burst(123) != radial_burst(124)


def test_radial_burst_validation():
    with pytest.raises(InvalidParameterError):
        radial_burst(MAX_EPOCH)
    with pytest.raises(InvalidParameterError):
        radial_burst(0, radius=0)
    with pytest.raises(InvalidParameterError):
        radial_burst(0, num_points=0)
