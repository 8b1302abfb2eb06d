import os
import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest

from fractal_geometry.acceleration.multiprocessing import (MultiprocessingAccelerator, assemble_bands,
                                                           create_row_bands, process_julia_band)
from fractal_geometry.acceleration.numba_backend import NumbaAccelerator
from fractal_geometry.core.color import Hsla
from fractal_geometry.core.exceptions import InvalidParameterError
from fractal_geometry.core.geometry import Point
from fractal_geometry.core.julia import (escape_color, julia_escape_counts, julia_set,
                                         plane_coordinates)
from fractal_geometry.core.validation import DEFAULT_LIMITS, DepthLimits

ROOT = Path(__file__).resolve().parents[1]


def direct_count(x, y, width, height, c, max_iterations):
    z = complex(x / width * 4.0 - 2.0, y / height * 4.0 - 2.0)
    i = 0
    while i < max_iterations and abs(z) <= 2.0:
        z = z * z + c
        i += 1
    return i


def test_plane_coordinates_map_grid_to_square():
    z = plane_coordinates(4, 4)
    assert z.shape == (4, 4)
    assert z[0, 0] == complex(-2.0, -2.0)
    assert z[0, 1] == complex(-1.0, -2.0)
    assert z[3, 0] == complex(-2.0, 1.0)


@pytest.mark.parametrize("c", [0j, complex(-0.75, 0.1), complex(-0.4, 0.6)])
def test_counts_match_direct_evaluation(c):
    width, height, max_iterations = 12, 9, 40
    counts = julia_escape_counts(width, height, c, max_iterations)
    assert counts.shape == (height, width)
    for y in range(height):
        for x in range(width):
            assert counts[y, x] == direct_count(x, y, width, height, c, max_iterations)


def test_zero_constant_keeps_unit_disk():
    counts = julia_escape_counts(8, 8, 0j, 25)
    # z0 = 0 lies at pixel (4, 4) and never escapes for c = 0.
    assert counts[4, 4] == 25
    # z0 = -2 - 2i escapes immediately.
    assert counts[0, 0] == 0


def test_single_pixel_grid():
    pixels = julia_set(1, 1, 0j, 10)
    assert len(pixels) <= 1
    assert pixels[0].position == Point(0.0, 0.0)
    assert pixels[0].pixel_color == Hsla(0.0, 1.0, 0.5, 1.0)


def test_pixels_are_row_major_and_exclude_non_escaped():
    width, height, max_iterations = 16, 16, 30
    c = complex(-0.75, 0.1)
    counts = julia_escape_counts(width, height, c, max_iterations)
    pixels = julia_set(width, height, c, max_iterations)
    assert len(pixels) == int(np.count_nonzero(counts < max_iterations))
    keys = [(p.position.y, p.position.x) for p in pixels]
    assert keys == sorted(keys)
    for p in pixels:
        i = counts[int(p.position.y), int(p.position.x)]
        assert p.pixel_color == escape_color(int(i), max_iterations)


def test_escape_color_hue_is_proportional():
    assert escape_color(25, 100).h == pytest.approx(90.0)
    assert escape_color(0, 100) == Hsla(0.0, 1.0, 0.5, 1.0)


def test_row_bands_match_full_grid():
    full = julia_escape_counts(10, 10, complex(-0.4, 0.6), 50)
    band = julia_escape_counts(10, 10, complex(-0.4, 0.6), 50, rows=(3, 7))
    np.testing.assert_array_equal(band, full[3:7])
    pixels = julia_set(10, 10, complex(-0.4, 0.6), 50, rows=(3, 7))
    assert all(3 <= p.position.y < 7 for p in pixels)


def test_generation_is_idempotent():
    assert julia_set(12, 12, complex(-0.75, 0.1), 30) == julia_set(12, 12, complex(-0.75, 0.1), 30)


@pytest.mark.parametrize("kwargs", [
    dict(width=0, height=4, c=0j, max_iterations=10),
    dict(width=4, height=-1, c=0j, max_iterations=10),
    dict(width=4.5, height=4, c=0j, max_iterations=10),
    dict(width=4, height=4, c=0j, max_iterations=0),
    dict(width=4, height=4, c=0j, max_iterations=10001),
    dict(width=4, height=4, c=complex(float('nan'), 0), max_iterations=10),
    dict(width=4, height=4, c="0", max_iterations=10),
])
def test_invalid_grid_rejected(kwargs):
    with pytest.raises(InvalidParameterError):
        julia_set(**kwargs)


def test_invalid_rows_rejected():
    with pytest.raises(InvalidParameterError):
        julia_escape_counts(4, 4, 0j, 10, rows=(2, 5))
    with pytest.raises(InvalidParameterError):
        julia_escape_counts(4, 4, 0j, 10, rows=(3, 1))


def test_iteration_cap_is_configurable():
    with pytest.raises(InvalidParameterError):
        julia_set(4, 4, 0j, 50, limits=DepthLimits(julia_iterations=20))


def test_numba_backend_matches_numpy():
    c = complex(-0.75, 0.1)
    accelerator = NumbaAccelerator()
    expected = julia_escape_counts(24, 20, c, 60)
    np.testing.assert_array_equal(accelerator.julia_escape_counts(24, 20, c, 60), expected)
    np.testing.assert_array_equal(accelerator.julia_escape_counts(24, 20, c, 60, rows=(5, 9)),
                                  expected[5:9])


def test_create_row_bands_cover_every_row_once():
    bands = create_row_bands(10, 4)
    assert [band.rows for band in bands] == [(0, 4), (4, 8), (8, 10)]
    assert sum(band.height for band in bands) == 10
    with pytest.raises(ValueError):
        create_row_bands(10, 0)


def test_bands_assemble_into_full_grid():
    c = complex(-0.4, 0.6)
    bands = create_row_bands(9, 4)
    results = [process_julia_band((8, 9, c, 30, band, DEFAULT_LIMITS)) for band in reversed(bands)]
    np.testing.assert_array_equal(assemble_bands(results, 8, 9), julia_escape_counts(8, 9, c, 30))


def test_multiprocessing_backend_matches_numpy():
    c = complex(-0.123, 0.745)
    accelerator = MultiprocessingAccelerator(num_processes=2, rows_per_band=5)
    counts = accelerator.julia_escape_counts(16, 12, c, 40)
    np.testing.assert_array_equal(counts, julia_escape_counts(16, 12, c, 40))


def test_accelerator_uses_spawned_workers():
    assert MultiprocessingAccelerator(num_processes=1).context.get_start_method() == 'spawn'


NUMBA_THEN_POOL = """
from fractal_geometry.acceleration.multiprocessing import MultiprocessingAccelerator
from fractal_geometry.acceleration.numba_backend import NumbaAccelerator

if __name__ == '__main__':
    expected = NumbaAccelerator().julia_escape_counts(16, 12, complex(-0.4, 0.6), 30)
    counts = MultiprocessingAccelerator(num_processes=2, rows_per_band=4).julia_escape_counts(
        16, 12, complex(-0.4, 0.6), 30)
    assert (counts == expected).all()
    print("ok")
"""


def test_pool_after_numba_kernel_exits_cleanly(tmp_path):
    script = tmp_path / "numba_then_pool.py"
    script.write_text(NUMBA_THEN_POOL)
    env = dict(os.environ)
    env['PYTHONPATH'] = os.pathsep.join(filter(None, [str(ROOT), env.get('PYTHONPATH')]))
    completed = subprocess.run([sys.executable, str(script)], capture_output=True, text=True,
                               timeout=120, env=env)
    assert completed.returncode == 0, completed.stderr
    assert completed.stdout.strip() == "ok"
