import math
from dataclasses import FrozenInstanceError

import pytest

from fractal_geometry.core.color import Hsla
from fractal_geometry.core.exceptions import InvalidParameterError
from fractal_geometry.core.fractal_types import (CirclePacking, CirclePackingParameters, DragonCurve,
                                                 DragonParameters, DrawStyle, FractalRegistry,
                                                 JULIA_PRESETS, JuliaParameters, JuliaSet,
                                                 KochParameters, OUTPUT_PATH, OUTPUT_SEGMENTS,
                                                 RadialBurst)
from fractal_geometry.core.path import ColoredSegment, Path
from fractal_geometry.core.shapes import Circle, Pixel
from fractal_geometry.core.validation import DepthLimits

SMALL_PARAMETERS = {
    'dragon': dict(iterations=5),
    'koch': dict(iterations=2),
    'sierpinski': dict(iterations=3),
    'pythagoras': dict(iterations=4),
    'circle_packing': dict(depth=3),
    'radial_burst': dict(epoch=7),
}


def test_registry_lists_every_fractal():
    assert set(FractalRegistry.names()) == {
        'dragon', 'koch', 'sierpinski', 'pythagoras', 'circle_packing', 'julia', 'radial_burst'}
    descriptions = FractalRegistry.list_fractals()
    assert all(descriptions[name] for name in FractalRegistry.names())


@pytest.mark.parametrize("name", sorted(SMALL_PARAMETERS))
def test_expected_count_matches_generation(name):
    fractal = FractalRegistry.create_fractal(name, **SMALL_PARAMETERS[name])
    assert len(fractal.generate()) == fractal.expected_count()


def test_julia_expected_count_is_upper_bound():
    fractal = FractalRegistry.create_fractal('julia', width=8, height=6, max_iterations=20)
    pixels = fractal.generate()
    assert len(pixels) <= fractal.expected_count() == 48
    assert all(isinstance(p, Pixel) for p in pixels)


def test_output_modes():
    dragon = DragonCurve(DragonParameters(iterations=3))
    segments = dragon.generate()
    assert all(isinstance(s, ColoredSegment) for s in segments)
    path = dragon.generate(OUTPUT_PATH)
    assert isinstance(path, Path)
    assert len(list(path.segments())) == len(segments)
    with pytest.raises(ValueError):
        dragon.generate('pixels')


def test_circle_packing_modes():
    packing = CirclePacking(CirclePackingParameters(radius=90, depth=2))
    shapes = packing.generate()
    assert len(shapes) == 10
    assert all(isinstance(s, Circle) for s in shapes)
    path = packing.generate(OUTPUT_PATH, DrawStyle(circle_segments=6))
    assert len(path.commands) == 10 * 8


def test_draw_style_applies_to_segments():
    red = Hsla(0.0, 1.0, 0.5)
    fractal = FractalRegistry.create_fractal('koch', iterations=1)
    segments = fractal.generate(OUTPUT_SEGMENTS, DrawStyle(stroke_width=3.0, stroke_color=red))
    assert all(s.color == red and s.path.stroke_width == 3.0 for s in segments)

    hues = fractal.generate(OUTPUT_SEGMENTS,
                            DrawStyle(colorizer=lambda i, n: Hsla(i / n * 360.0, 1.0, 0.5)))
    assert [s.color.h for s in hues[:3]] == pytest.approx([0.0, 30.0, 60.0])


def test_zero_depth_path_is_none():
    fractal = FractalRegistry.create_fractal('pythagoras', iterations=0)
    assert fractal.generate(OUTPUT_PATH) is None
    assert fractal.generate() == []


def test_parameters_validated_on_construction():
    with pytest.raises(InvalidParameterError):
        DragonCurve(DragonParameters(iterations=-1))
    with pytest.raises(InvalidParameterError):
        FractalRegistry.create_fractal('koch', side_length=0)
    with pytest.raises(InvalidParameterError):
        FractalRegistry.create_fractal('julia', max_iterations=0)
    with pytest.raises(InvalidParameterError):
        FractalRegistry.create_fractal('dragon', limits=DepthLimits(dragon=4), iterations=5)


def test_registry_errors():
    with pytest.raises(ValueError, match="Unknown fractal type"):
        FractalRegistry.get('mandelbrot')
    with pytest.raises(ValueError, match="Invalid parameters"):
        FractalRegistry.create_fractal('dragon', depth=3)
    with pytest.raises(ValueError):
        FractalRegistry.register('bogus', dict, KochParameters)


def test_parameters_round_trip_through_dict():
    params = CirclePackingParameters(radius=120.0, depth=3, level_twist=0.25)
    assert CirclePackingParameters.from_dict(params.to_dict()) == params
    assert KochParameters().to_dict()['iterations'] == 4


def test_julia_parameters_and_presets():
    params = JuliaParameters(c_real=-0.4, c_imag=0.6)
    assert params.c == complex(-0.4, 0.6)
    assert JULIA_PRESETS['rabbit'].c == complex(-0.123, 0.745)
    fractal = JuliaSet(JuliaParameters(width=4, height=4, max_iterations=5))
    assert fractal.compute_counts().shape == (4, 4)
    assert fractal.compute_counts(rows=(1, 3)).shape == (2, 4)


def test_radial_burst_fractal():
    fractal = RadialBurst()
    assert fractal.default_output == 'pixels'
    assert len(fractal.generate()) == fractal.expected_count() == 16 * 4 + 17


def test_recommended_canvas_frames_default_geometry():
    for name in FractalRegistry.names():
        width, height = FractalRegistry.get(name)().get_recommended_canvas()
        assert width > 0 and height > 0


def test_pythagoras_default_grows_upward():
    fractal = FractalRegistry.create_fractal('pythagoras', iterations=1)
    (segment,) = fractal.generate()
    start, end = segment.path.points
    assert end.y < start.y
    assert fractal.parameters.angle == pytest.approx(math.pi / 2)


def test_parameters_are_immutable():
    with pytest.raises(FrozenInstanceError):
        JULIA_PRESETS['rabbit'].max_iterations = 7
    fractal = FractalRegistry.create_fractal('dragon', iterations=3)
    with pytest.raises(FrozenInstanceError):
        fractal.parameters.iterations = 30
    assert JULIA_PRESETS['rabbit'].max_iterations == 100
