"""
Fractal type definitions and parameter management.

This module wraps each geometry generator in a configurable class with a
validated parameter dataclass, providing a plugin-style registry so
fractals can be created by name.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

import numpy as np

from . import circle_packing, curves, formula, julia
from .color import Hsla, WHITE
from .curves import Colorizer
from .geometry import Point
from .path import ColoredSegment, Path
from .shapes import Shape, Stroke
from .validation import (DEFAULT_LIMITS, DepthLimits, check_depth, check_finite,
                         check_integer, check_positive)

logger = logging.getLogger(__name__)

OUTPUT_PATH = 'path'
OUTPUT_SEGMENTS = 'segments'
OUTPUT_SHAPES = 'shapes'
OUTPUT_PIXELS = 'pixels'

GeneratedGeometry = Union[Optional[Path], List[ColoredSegment], List[Shape]]


@dataclass
class DrawStyle:
    """Stroke and fill attributes applied to generated geometry."""

    stroke_width: float = 1.0
    stroke_color: Hsla = WHITE
    colorizer: Optional[Colorizer] = None
    fill: Optional[Hsla] = None
    circle_segments: int = 32

    def segment_colorizer(self) -> Colorizer:
        """Colorizer to use for per-leaf output, defaulting to the stroke color."""
        if self.colorizer is not None:
            return self.colorizer
        color = self.stroke_color
        return lambda index, total: color


@dataclass(frozen=True)
class FractalParameters:
    """Immutable base class for fractal parameters with validation."""

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate parameter values."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FractalParameters':
        """Create parameters from dictionary."""
        return cls(**data)


class FractalType(ABC):
    """Abstract base class for fractal types."""

    outputs: Tuple[str, ...] = ()

    def __init__(self, name: str, parameters: FractalParameters,
                 limits: DepthLimits = DEFAULT_LIMITS):
        """
        Initialize fractal type.

        Args:
            name: Human-readable name for the fractal
            parameters: Fractal-specific parameters
            limits: Depth caps the parameters are validated against
        """
        self.name = name
        self.parameters = parameters
        self.limits = limits
        self.parameters.validate(limits)

    @property
    def default_output(self) -> str:
        return self.outputs[0]

    def generate(self, output: Optional[str] = None,
                 style: Optional[DrawStyle] = None) -> GeneratedGeometry:
        """
        Generate geometry in the requested output mode.

        Args:
            output: One of ``outputs`` (defaults to the first)
            style: Stroke/fill attributes

        Returns:
            A path (or ``None`` when empty) for ``'path'``, otherwise a list
        """
        return self._generate(self.resolve_output(output), style or DrawStyle())

    def resolve_output(self, output: Optional[str] = None) -> str:
        """Check an output mode, defaulting to the first supported one."""
        output = output or self.default_output
        if output not in self.outputs:
            raise ValueError(f"{self.name} does not support output '{output}'. "
                             f"Available: {', '.join(self.outputs)}")
        return output

    @abstractmethod
    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        pass

    @abstractmethod
    def expected_count(self) -> int:
        """Number of leaf primitives a generation produces."""
        pass

    @abstractmethod
    def get_recommended_canvas(self) -> Tuple[int, int]:
        """Canvas size (width, height) that frames the default parameters."""
        pass

    def get_description(self) -> str:
        """Get a description of this fractal type."""
        return f"{self.name} fractal"


@dataclass(frozen=True)
class DragonParameters(FractalParameters):
    """Parameters for the dragon curve."""

    start_x: float = 200.0
    start_y: float = 300.0
    end_x: float = 600.0
    end_y: float = 300.0
    iterations: int = 12

    @property
    def start(self) -> Point:
        return Point(self.start_x, self.start_y)

    @property
    def end(self) -> Point:
        return Point(self.end_x, self.end_y)

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate dragon curve parameters."""
        for name in ('start_x', 'start_y', 'end_x', 'end_y'):
            check_finite(name, getattr(self, name))
        check_depth('iterations', self.iterations, limits.dragon)


class DragonCurve(FractalType):
    """Heighway dragon curve."""

    outputs = (OUTPUT_SEGMENTS, OUTPUT_PATH)

    def __init__(self, parameters: Optional[DragonParameters] = None,
                 limits: DepthLimits = DEFAULT_LIMITS):
        super().__init__("Dragon", parameters or DragonParameters(), limits)

    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        p = self.parameters
        if output == OUTPUT_PATH:
            return curves.dragon_curve_path(p.start, p.end, p.iterations,
                                            style.stroke_width, self.limits)
        return curves.dragon_curve_segments(p.start, p.end, p.iterations,
                                            style.segment_colorizer(), style.stroke_width,
                                            self.limits)

    def expected_count(self) -> int:
        return 2 ** self.parameters.iterations

    def get_recommended_canvas(self) -> Tuple[int, int]:
        return (800, 600)

    def get_description(self) -> str:
        return (f"Dragon curve: {self.parameters.iterations} folds of the segment "
                f"{self.parameters.start.to_tuple()} -> {self.parameters.end.to_tuple()}")


@dataclass(frozen=True)
class KochParameters(FractalParameters):
    """Parameters for the Koch snowflake."""

    start_x: float = 100.0
    start_y: float = 150.0
    side_length: float = 400.0
    iterations: int = 4

    @property
    def start(self) -> Point:
        return Point(self.start_x, self.start_y)

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate Koch snowflake parameters."""
        check_finite('start_x', self.start_x)
        check_finite('start_y', self.start_y)
        check_positive('side_length', self.side_length)
        check_depth('iterations', self.iterations, limits.koch)


class KochSnowflake(FractalType):
    """Koch snowflake built on an equilateral triangle."""

    outputs = (OUTPUT_SEGMENTS, OUTPUT_PATH)

    def __init__(self, parameters: Optional[KochParameters] = None,
                 limits: DepthLimits = DEFAULT_LIMITS):
        super().__init__("Koch", parameters or KochParameters(), limits)

    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        p = self.parameters
        if output == OUTPUT_PATH:
            return curves.koch_snowflake_path(p.start, p.side_length, p.iterations,
                                              style.stroke_width, self.limits)
        return curves.koch_snowflake_segments(p.start, p.side_length, p.iterations,
                                              style.segment_colorizer(), style.stroke_width,
                                              self.limits)

    def expected_count(self) -> int:
        return 3 * 4 ** self.parameters.iterations

    def get_recommended_canvas(self) -> Tuple[int, int]:
        p = self.parameters
        return (int(math.ceil(p.start_x * 2 + p.side_length)),
                int(math.ceil(p.start_y * 2 + p.side_length)))

    def get_description(self) -> str:
        return f"Koch snowflake: side {self.parameters.side_length}, {self.parameters.iterations} subdivisions"


@dataclass(frozen=True)
class SierpinskiParameters(FractalParameters):
    """Parameters for the Sierpinski triangle."""

    start_x: float = 100.0
    start_y: float = 100.0
    side_length: float = 600.0
    iterations: int = 6

    @property
    def start(self) -> Point:
        return Point(self.start_x, self.start_y)

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate Sierpinski triangle parameters."""
        check_finite('start_x', self.start_x)
        check_finite('start_y', self.start_y)
        check_positive('side_length', self.side_length)
        check_depth('iterations', self.iterations, limits.sierpinski)


class SierpinskiTriangle(FractalType):
    """Sierpinski triangle of equilateral leaf triangles."""

    outputs = (OUTPUT_SEGMENTS, OUTPUT_PATH)

    def __init__(self, parameters: Optional[SierpinskiParameters] = None,
                 limits: DepthLimits = DEFAULT_LIMITS):
        super().__init__("Sierpinski", parameters or SierpinskiParameters(), limits)

    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        p = self.parameters
        if output == OUTPUT_PATH:
            return curves.sierpinski_triangle_path(p.start, p.side_length, p.iterations,
                                                   style.stroke_width, self.limits)
        return curves.sierpinski_triangle_segments(p.start, p.side_length, p.iterations,
                                                   style.segment_colorizer(), style.stroke_width,
                                                   self.limits)

    def expected_count(self) -> int:
        return 3 ** self.parameters.iterations

    def get_recommended_canvas(self) -> Tuple[int, int]:
        p = self.parameters
        return (int(math.ceil(p.start_x * 2 + p.side_length)),
                int(math.ceil(p.start_y * 2 + p.side_length)))

    def get_description(self) -> str:
        return f"Sierpinski triangle: side {self.parameters.side_length}, {self.parameters.iterations} levels"


@dataclass(frozen=True)
class PythagorasParameters(FractalParameters):
    """Parameters for the Pythagoras tree."""

    start_x: float = 400.0
    start_y: float = 700.0
    size: float = 200.0
    angle: float = math.pi / 2.0
    iterations: int = 10

    @property
    def start(self) -> Point:
        return Point(self.start_x, self.start_y)

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate Pythagoras tree parameters."""
        check_finite('start_x', self.start_x)
        check_finite('start_y', self.start_y)
        check_positive('size', self.size)
        check_finite('angle', self.angle)
        check_depth('iterations', self.iterations, limits.pythagoras)


class PythagorasTree(FractalType):
    """Binary Pythagoras tree with 45 degree branching."""

    outputs = (OUTPUT_SEGMENTS, OUTPUT_PATH)

    def __init__(self, parameters: Optional[PythagorasParameters] = None,
                 limits: DepthLimits = DEFAULT_LIMITS):
        super().__init__("Pythagoras", parameters or PythagorasParameters(), limits)

    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        p = self.parameters
        if output == OUTPUT_PATH:
            return curves.pythagoras_tree_path(p.start, p.size, p.angle, p.iterations,
                                               style.stroke_width, self.limits)
        return curves.pythagoras_tree_segments(p.start, p.size, p.angle, p.iterations,
                                               style.segment_colorizer(), style.stroke_width,
                                               self.limits)

    def expected_count(self) -> int:
        return 2 ** self.parameters.iterations - 1

    def get_recommended_canvas(self) -> Tuple[int, int]:
        return (800, 800)

    def get_description(self) -> str:
        return (f"Pythagoras tree: trunk {self.parameters.size}, "
                f"{self.parameters.iterations} levels")


@dataclass(frozen=True)
class CirclePackingParameters(FractalParameters):
    """Parameters for the circular Sierpinski packing."""

    center_x: float = 384.0
    center_y: float = 384.0
    radius: float = 300.0
    depth: int = 4
    angle_offset: float = 0.0
    level_twist: float = 0.0

    @property
    def center(self) -> Point:
        return Point(self.center_x, self.center_y)

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate circle packing parameters."""
        check_finite('center_x', self.center_x)
        check_finite('center_y', self.center_y)
        check_positive('radius', self.radius)
        check_depth('depth', self.depth, limits.circle_packing)
        check_finite('angle_offset', self.angle_offset)
        check_finite('level_twist', self.level_twist)


class CirclePacking(FractalType):
    """Circular Sierpinski structure of nested circles."""

    outputs = (OUTPUT_SHAPES, OUTPUT_PATH)

    def __init__(self, parameters: Optional[CirclePackingParameters] = None,
                 limits: DepthLimits = DEFAULT_LIMITS):
        super().__init__("Circle packing", parameters or CirclePackingParameters(), limits)

    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        p = self.parameters
        if output == OUTPUT_PATH:
            # The traced variant has no rotating offset.
            return circle_packing.circle_packing_path(p.center, p.radius, p.depth,
                                                      style.circle_segments, style.stroke_width,
                                                      self.limits)
        return circle_packing.circle_packing_shapes(
            p.center, p.radius, p.depth, p.angle_offset, p.level_twist,
            stroke=Stroke(style.stroke_width, style.stroke_color), fill=style.fill,
            limits=self.limits)

    def expected_count(self) -> int:
        return circle_packing.expected_circle_count(self.parameters.depth)

    def get_recommended_canvas(self) -> Tuple[int, int]:
        p = self.parameters
        return (int(math.ceil(p.center_x + p.radius + 1)), int(math.ceil(p.center_y + p.radius + 1)))

    def get_description(self) -> str:
        return (f"Circular Sierpinski: radius {self.parameters.radius}, depth {self.parameters.depth}, "
                f"9 children per circle")


@dataclass(frozen=True)
class JuliaParameters(FractalParameters):
    """Parameters for Julia set generation."""

    width: int = 256
    height: int = 256
    c_real: float = -0.75
    c_imag: float = 0.1
    max_iterations: int = 100

    @property
    def c(self) -> complex:
        """Get the Julia constant as a complex number."""
        return complex(self.c_real, self.c_imag)

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate Julia parameters."""
        check_finite('c_real', self.c_real)
        check_finite('c_imag', self.c_imag)
        julia.validate_grid(self.width, self.height, self.c, self.max_iterations, limits)


class JuliaSet(FractalType):
    """Escape-time Julia set over a pixel grid."""

    outputs = (OUTPUT_PIXELS,)

    def __init__(self, parameters: Optional[JuliaParameters] = None,
                 limits: DepthLimits = DEFAULT_LIMITS):
        super().__init__("Julia", parameters or JuliaParameters(), limits)

    def compute_counts(self, rows: Optional[Tuple[int, int]] = None) -> np.ndarray:
        """Escape counts for the grid (or a band of rows) with NumPy."""
        p = self.parameters
        return julia.julia_escape_counts(p.width, p.height, p.c, p.max_iterations, rows, self.limits)

    def pixels_from_counts(self, counts: np.ndarray, y_offset: int = 0) -> List[Shape]:
        return julia.pixels_from_counts(counts, self.parameters.max_iterations, y_offset)

    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        return self.pixels_from_counts(self.compute_counts())

    def expected_count(self) -> int:
        """Upper bound: every pixel of the grid."""
        return self.parameters.width * self.parameters.height

    def get_recommended_canvas(self) -> Tuple[int, int]:
        return (self.parameters.width, self.parameters.height)

    def get_description(self) -> str:
        return (f"Julia set: z_{{n+1}} = z_n^2 + c, where c = {self.parameters.c}, "
                f"{self.parameters.width}x{self.parameters.height} pixels")


@dataclass(frozen=True)
class RadialBurstParameters(FractalParameters):
    """Parameters for one frame of the radial burst animation."""

    epoch: int = 0
    center_x: float = 384.0
    center_y: float = 384.0
    radius: float = 200.0
    num_points: int = 16
    max_epoch: int = formula.MAX_EPOCH

    def validate(self, limits: DepthLimits = DEFAULT_LIMITS) -> None:
        """Validate radial burst parameters."""
        check_integer('max_epoch', self.max_epoch, 1)
        check_depth('epoch', self.epoch, self.max_epoch - 1)
        check_finite('center_x', self.center_x)
        check_finite('center_y', self.center_y)
        check_positive('radius', self.radius)
        check_depth('num_points', self.num_points, 4096)


class RadialBurst(FractalType):
    """Animated orbit of colored points with fading rays."""

    outputs = (OUTPUT_PIXELS,)

    def __init__(self, parameters: Optional[RadialBurstParameters] = None,
                 limits: DepthLimits = DEFAULT_LIMITS):
        super().__init__("Radial burst", parameters or RadialBurstParameters(), limits)

    def _generate(self, output: str, style: DrawStyle) -> GeneratedGeometry:
        p = self.parameters
        return formula.radial_burst(p.epoch, (p.center_x, p.center_y), p.radius,
                                    p.num_points, p.max_epoch)

    def expected_count(self) -> int:
        n = self.parameters.num_points
        return n * formula.RAY_PIXELS + n + 1

    def get_recommended_canvas(self) -> Tuple[int, int]:
        p = self.parameters
        extent = p.radius * 3.0
        return (int(math.ceil(p.center_x + extent)), int(math.ceil(p.center_y + extent)))

    def get_description(self) -> str:
        return f"Radial burst: epoch {self.parameters.epoch} of {self.parameters.max_epoch}"


class FractalRegistry:
    """Registry for managing available fractal types."""

    _fractals: Dict[str, type] = {
        'dragon': DragonCurve,
        'koch': KochSnowflake,
        'sierpinski': SierpinskiTriangle,
        'pythagoras': PythagorasTree,
        'circle_packing': CirclePacking,
        'julia': JuliaSet,
        'radial_burst': RadialBurst,
    }

    _parameters: Dict[str, type] = {
        'dragon': DragonParameters,
        'koch': KochParameters,
        'sierpinski': SierpinskiParameters,
        'pythagoras': PythagorasParameters,
        'circle_packing': CirclePackingParameters,
        'julia': JuliaParameters,
        'radial_burst': RadialBurstParameters,
    }

    @classmethod
    def register(cls, name: str, fractal_class: type, parameter_class: type) -> None:
        """
        Register a new fractal type.

        Args:
            name: Unique identifier for the fractal
            fractal_class: Class implementing the fractal
            parameter_class: Parameter dataclass accepted by ``fractal_class``
        """
        if not issubclass(fractal_class, FractalType):
            raise ValueError("Fractal class must inherit from FractalType")
        if not issubclass(parameter_class, FractalParameters):
            raise ValueError("Parameter class must inherit from FractalParameters")
        cls._fractals[name.lower()] = fractal_class
        cls._parameters[name.lower()] = parameter_class
        logger.info(f"Registered fractal type: {name}")

    @classmethod
    def get(cls, name: str) -> type:
        """
        Get a fractal class by name.

        Args:
            name: Fractal identifier

        Returns:
            Fractal class
        """
        fractal_class = cls._fractals.get(name.lower())
        if fractal_class is None:
            available = ', '.join(cls._fractals.keys())
            raise ValueError(f"Unknown fractal type '{name}'. Available: {available}")
        return fractal_class

    @classmethod
    def names(cls) -> List[str]:
        return list(cls._fractals.keys())

    @classmethod
    def list_fractals(cls) -> Dict[str, str]:
        """Get a dictionary of available fractals and their descriptions."""
        return {name: fractal_class().get_description()
                for name, fractal_class in cls._fractals.items()}

    @classmethod
    def create_fractal(cls, name: str, limits: DepthLimits = DEFAULT_LIMITS,
                       **kwargs) -> FractalType:
        """
        Create a fractal instance with the given parameters.

        Args:
            name: Fractal type name
            limits: Depth caps
            **kwargs: Parameters for the fractal

        Returns:
            Configured fractal instance
        """
        fractal_class = cls.get(name)
        param_class = cls._parameters[name.lower()]
        try:
            parameters = param_class(**kwargs)
        except TypeError as e:
            raise ValueError(f"Invalid parameters for '{name}': {e}") from e
        return fractal_class(parameters, limits)


# Predefined interesting Julia set constants
JULIA_PRESETS = {
    'dragon': JuliaParameters(c_real=-0.75, c_imag=0.1),
    'spiral': JuliaParameters(c_real=-0.4, c_imag=0.6),
    'dendrite': JuliaParameters(c_real=-0.235125, c_imag=0.827215),
    'lightning': JuliaParameters(c_real=-0.8, c_imag=0.156),
    'rabbit': JuliaParameters(c_real=-0.123, c_imag=0.745),
    'airplane': JuliaParameters(c_real=-1.25, c_imag=0.0),
    'san_marco': JuliaParameters(c_real=-0.75, c_imag=0.0),
    'siegel_disk': JuliaParameters(c_real=-0.391, c_imag=-0.587),
}
