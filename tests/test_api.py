import pytest

from fractal_geometry.api import (BatchGenerator, FractalGenerator, GenerationConfig, generate,
                                  julia_preset)
from fractal_geometry.core.exceptions import InvalidParameterError
from fractal_geometry.core.fractal_types import DragonCurve, DragonParameters
from fractal_geometry.core.path import ColoredSegment
from fractal_geometry.core.validation import DepthLimits
from fractal_geometry.rendering.raster import read_png_metadata


def test_generate_dragon():
    result = FractalGenerator().generate('dragon', iterations=4)
    assert result.count == 16
    assert result.output == 'segments'
    assert result.backend == 'python'
    assert result.parameters['iterations'] == 4
    assert all(isinstance(s, ColoredSegment) for s in result.geometry)


def test_generate_path_mode():
    result = FractalGenerator().generate('koch', output='path', iterations=1)
    assert result.count == 12

    empty = FractalGenerator().generate('pythagoras', output='path', iterations=0)
    assert empty.geometry is None
    assert empty.is_empty


def test_path_mode_counts_leaves():
    generator = FractalGenerator()
    triangles = generator.generate('sierpinski', output='path', iterations=2)
    assert triangles.count == 9 == len(triangles.geometry.polylines())
    circles = generator.generate('circle_packing', output='path', depth=2)
    assert circles.count == 10 == generator.statistics('circle_packing', depth=2)['expected_count']


def test_configured_output_mode():
    generator = FractalGenerator(GenerationConfig(output='path'))
    assert generator.generate('sierpinski', iterations=1).output == 'path'
    with pytest.raises(ValueError):
        generator.generate('julia', width=4, height=4)


def test_fractal_instance_passthrough():
    generator = FractalGenerator()
    dragon = DragonCurve(DragonParameters(iterations=3))
    assert generator.generate(dragon).count == 8
    with pytest.raises(ValueError):
        generator.create_fractal(dragon, iterations=4)


@pytest.mark.parametrize("backend", ['numpy', 'numba'])
def test_julia_backends_agree(backend):
    params = dict(width=16, height=12, c_real=-0.4, c_imag=0.6, max_iterations=40)
    expected = FractalGenerator(GenerationConfig(julia_backend='numpy')).generate('julia', **params)
    result = FractalGenerator(GenerationConfig(julia_backend=backend)).generate('julia', **params)
    assert result.backend == backend
    assert result.geometry == expected.geometry


def test_auto_backend_selection():
    generator = FractalGenerator(GenerationConfig(numba_threshold=100, multiprocessing_threshold=10_000))
    assert generator._select_julia_backend(99) == 'numpy'
    assert generator._select_julia_backend(100) == 'numba'
    assert generator._select_julia_backend(10_000) == 'multiprocessing'
    assert generator.generate('julia', width=8, height=8, max_iterations=10).backend == 'numpy'


def test_colorizer_and_stroke_style():
    generator = FractalGenerator(GenerationConfig(colorizer='hue', stroke_width=2.0))
    segments = generator.generate('dragon', iterations=2).geometry
    assert [s.color.h for s in segments] == pytest.approx([0.0, 90.0, 180.0, 270.0])
    assert all(s.path.stroke_width == 2.0 for s in segments)


def test_fill_color_applies_to_circles():
    generator = FractalGenerator(GenerationConfig(fill_color=(1.0, 0.0, 0.0)))
    shapes = generator.generate('circle_packing', depth=2).geometry
    assert all(s.background.to_rgb() == pytest.approx((1.0, 0.0, 0.0)) for s in shapes)


def test_limits_enforced():
    generator = FractalGenerator(GenerationConfig(limits=DepthLimits(dragon=5)))
    with pytest.raises(InvalidParameterError):
        generator.generate('dragon', iterations=6)


@pytest.mark.parametrize("overrides", [
    dict(stroke_width=-1),
    dict(circle_segments=2),
    dict(stroke_color=(2.0, 0.0, 0.0)),
    dict(julia_backend='gpu'),
    dict(num_processes=0),
    dict(tile_rows=0),
    dict(jpeg_quality=0),
])
def test_config_validation(overrides):
    with pytest.raises(ValueError):
        FractalGenerator(GenerationConfig(**overrides))


def test_config_dict_round_trip():
    config = GenerationConfig(stroke_color=(0.5, 0.5, 0.5), colorizer='fire',
                              limits=DepthLimits(koch=6))
    data = config.to_dict()
    assert data['limits']['koch'] == 6
    data['stroke_color'] = list(data['stroke_color'])
    data['unknown_key'] = 1
    assert GenerationConfig.from_dict(data) == config


def test_update_config():
    generator = FractalGenerator()
    generator.update_config(stroke_width=3.0)
    assert generator.style().stroke_width == 3.0
    with pytest.raises(ValueError):
        generator.update_config(julia_backend='bogus')


def test_statistics():
    info = FractalGenerator().statistics('koch', iterations=2)
    assert info['expected_count'] == 48
    assert info['outputs'] == ['segments', 'path']
    assert info['parameters']['iterations'] == 2


def test_render_png(tmp_path):
    output_path = tmp_path / "dragon.png"
    result = FractalGenerator().render('dragon', output_path, size=(64, 48), iterations=5)
    assert result.count == 32
    metadata = read_png_metadata(output_path)
    assert metadata.fractal_type == "Dragon"
    assert metadata.resolution == (64, 48)
    assert metadata.primitive_count == 32


def test_rasterize_uses_background():
    generator = FractalGenerator(GenerationConfig(background=(0.0, 0.0, 1.0)))
    result = generator.generate('pythagoras', iterations=0)
    array = generator.rasterize(result, 4, 4).to_array()
    assert tuple(array[0, 0]) == (0, 0, 255, 255)


def test_batch_summary(tmp_path):
    batch = BatchGenerator()
    assert batch.get_summary() == {'status': 'not_run'}
    batch.add_job('sierpinski', tmp_path / "tri.png", {'iterations': 2}, job_name="tri")
    batch.add_job('sierpinski', tmp_path / "bad.png", {'iterations': -1})
    progress = []
    results = batch.run_batch(lambda done, total, result: progress.append((done, total)))

    assert [r['status'] for r in results] == ['completed', 'failed']
    assert progress == [(1, 2), (2, 2)]
    assert (tmp_path / "tri.png").exists()
    summary = batch.get_summary()
    assert summary['completed'] == 1
    assert summary['failed'] == 1
    assert summary['success_rate'] == 0.5


def test_batch_config_overrides(tmp_path):
    batch = BatchGenerator()
    batch.add_job('koch', tmp_path / "koch.jpg", {'iterations': 1},
                  config_overrides={'jpeg_quality': 50, 'save_metadata': False})
    (result,) = batch.run_batch()
    assert result['status'] == 'completed'
    assert not (tmp_path / "koch.json").exists()


def test_julia_preset():
    fractal = julia_preset('rabbit', width=8, height=8)
    assert fractal.parameters.c == complex(-0.123, 0.745)
    assert fractal.parameters.width == 8
    with pytest.raises(ValueError):
        julia_preset('unknown')


def test_generate_convenience():
    assert len(generate('sierpinski', iterations=2)) == 9
    assert generate('circle_packing', output='path', depth=0) is None
