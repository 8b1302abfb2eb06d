"""
Fractal geometry generation library.

This library turns a handful of numeric parameters into drawable geometry
for classical fractals: dragon curve, Koch snowflake, Sierpinski triangle,
Pythagoras tree, circular Sierpinski circle packing and escape-time Julia
sets.

Key Features:
- Recursive curve generators in path mode and per-leaf segments mode
- Immutable shapes and paths built with a single-use path builder
- Vectorised, Numba-compiled and multiprocess Julia computation
- Named palettes and per-leaf colorizers
- Pillow raster preview with embedded metadata

Example usage:
    >>> from fractal_geometry import FractalGenerator
    >>> generator = FractalGenerator()
    >>> result = generator.generate('dragon', iterations=10)
    >>> len(result.geometry)
    1024
"""

__version__ = "1.0.0"
__author__ = "Fractal Geometry Team"

from fractal_geometry.core.color import Hsla, hsla
from fractal_geometry.core.exceptions import FractalGeometryError, InvalidParameterError, PathBuildError
from fractal_geometry.core.geometry import Bounds, Point, Quad, point
from fractal_geometry.core.path import ColoredSegment, Path, PathBuilder
from fractal_geometry.core.shapes import Circle, Line, Pixel, Stroke, Triangle, circle, line, pixel, triangle
from fractal_geometry.core.curves import (dragon_curve_path, dragon_curve_segments,
                                          koch_snowflake_path, koch_snowflake_segments,
                                          pythagoras_tree_path, pythagoras_tree_segments,
                                          sierpinski_triangle_path, sierpinski_triangle_segments)
from fractal_geometry.core.circle_packing import circle_packing_path, circle_packing_shapes
from fractal_geometry.core.julia import julia_set
from fractal_geometry.core.formula import radial_burst, sample_formula
from fractal_geometry.core.fractal_types import FractalRegistry, JULIA_PRESETS
from fractal_geometry.rendering.coloring import ColoringEngine, Palette
from fractal_geometry.rendering.raster import Canvas, ImageExporter

# Main API classes
from fractal_geometry.api import FractalGenerator, GenerationConfig, BatchGenerator

__all__ = [
    "FractalGenerator",
    "GenerationConfig",
    "BatchGenerator",
    "FractalRegistry",
    "JULIA_PRESETS",
    "Hsla",
    "hsla",
    "Point",
    "point",
    "Bounds",
    "Quad",
    "Path",
    "PathBuilder",
    "ColoredSegment",
    "Stroke",
    "Circle",
    "Line",
    "Triangle",
    "Pixel",
    "circle",
    "line",
    "triangle",
    "pixel",
    "dragon_curve_path",
    "dragon_curve_segments",
    "koch_snowflake_path",
    "koch_snowflake_segments",
    "sierpinski_triangle_path",
    "sierpinski_triangle_segments",
    "pythagoras_tree_path",
    "pythagoras_tree_segments",
    "circle_packing_path",
    "circle_packing_shapes",
    "julia_set",
    "radial_burst",
    "sample_formula",
    "ColoringEngine",
    "Palette",
    "Canvas",
    "ImageExporter",
    "FractalGeometryError",
    "InvalidParameterError",
    "PathBuildError",
]
