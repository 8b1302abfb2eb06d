import math

import numpy as np
import pytest

from fractal_geometry.core.circle_packing import (circle_packing_centers, circle_packing_path,
                                                  circle_packing_shapes, expected_circle_count,
                                                  peripheral_centers)
from fractal_geometry.core.color import hsla
from fractal_geometry.core.exceptions import InvalidParameterError
from fractal_geometry.core.geometry import Point
from fractal_geometry.core.shapes import Circle, Stroke


def test_depth_zero_is_empty():
    assert circle_packing_shapes((0, 0), 100, 0) == []
    assert circle_packing_path((0, 0), 100, 0) is None


@pytest.mark.parametrize("depth,count", [(1, 1), (2, 10), (3, 91), (4, 820)])
def test_circle_count(depth, count):
    assert len(circle_packing_shapes((384, 384), 300, depth)) == count
    assert expected_circle_count(depth) == count


def test_each_circle_has_nine_children():
    shapes = circle_packing_shapes((0, 0), 90, 2)
    root, children = shapes[0], shapes[1:]
    assert root == Circle(90.0, Point(0.0, 0.0), Stroke())
    assert len(children) == 9
    for child in children:
        assert child.radius == pytest.approx(30.0)


def test_peripheral_children_at_two_thirds_radius():
    shapes = circle_packing_shapes((10, 20), 90, 2)
    center = Point(10.0, 20.0)
    peripheral, central = shapes[1:9], shapes[9]
    for child in peripheral:
        assert child.center.distance_to(center) == pytest.approx(60.0)
    assert central.center == center
    assert peripheral[0].center.is_close(Point(70.0, 20.0))
    assert peripheral[2].center.is_close(Point(10.0, 80.0))


def test_traversal_is_preorder():
    centers = list(circle_packing_centers((0, 0), 81, 3))
    # Root, then the whole first peripheral subtree before the second child.
    first_child = centers[1]
    assert first_child[1] == pytest.approx(27.0)
    assert all(r == pytest.approx(9.0) for _, r in centers[2:11])
    assert centers[11][1] == pytest.approx(27.0)


def test_angle_offset_rotates_children():
    offset = math.pi / 8
    centers = peripheral_centers(Point(0.0, 0.0), 90.0, offset)
    assert centers[0].is_close(Point(60.0 * math.cos(offset), 60.0 * math.sin(offset)))
    shapes = circle_packing_shapes((0, 0), 90, 2, angle_offset=offset)
    assert [s.center for s in shapes[1:9]] == centers


def test_level_twist_only_affects_deeper_levels():
    plain = circle_packing_shapes((0, 0), 81, 3)
    twisted = circle_packing_shapes((0, 0), 81, 3, level_twist=math.pi / 8)
    assert plain[:2] == twisted[:2]
    assert not plain[2].center.is_close(twisted[2].center)
    assert len(plain) == len(twisted)


def test_shapes_carry_stroke_and_fill():
    red = hsla(0.0, 1.0, 0.5)
    stroke = Stroke(2.0, red)
    shapes = circle_packing_shapes((0, 0), 30, 2, stroke=stroke, fill=red)
    assert all(s.stroke == stroke for s in shapes)
    assert all(s.to_primitive().background == red for s in shapes)


def test_path_traces_polygon_per_circle():
    path = circle_packing_path((0, 0), 90, 2, circle_segments=8, stroke_width=2.0)
    # move + 8 lines + close per circle
    assert len(path.commands) == 10 * 10
    assert path.stroke_width == 2.0
    assert path.commands[0].point == Point(90.0, 0.0)
    assert len(path.polylines()) == 10


def test_path_circle_vertices_on_circle():
    path = circle_packing_path((5, 5), 30, 1, circle_segments=12)
    for p in path.points:
        assert p.distance_to(Point(5.0, 5.0)) == pytest.approx(30.0)


@pytest.mark.parametrize("segments", [2, 0, 3.5, True])
def test_invalid_circle_segments(segments):
    with pytest.raises(InvalidParameterError):
        circle_packing_path((0, 0), 10, 1, circle_segments=segments)


def test_invalid_parameters():
    with pytest.raises(InvalidParameterError):
        circle_packing_shapes((0, 0), 0, 2)
    with pytest.raises(InvalidParameterError):
        circle_packing_shapes((0, 0), 10, -1)
    with pytest.raises(InvalidParameterError):
        circle_packing_shapes((0, 0), 10, 8)
    with pytest.raises(InvalidParameterError):
        circle_packing_centers((0, 0), 10, 2, angle_offset=float('nan'))


def test_numpy_integer_segments_accepted():
    path = circle_packing_path((0, 0), 30, 1, circle_segments=np.int64(6))
    assert len(path.commands) == 8
