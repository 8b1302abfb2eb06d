"""
Main API classes for fractal geometry generation.

This module provides the high-level interface, combining the generators,
the Julia acceleration backends, coloring and raster export into
easy-to-use classes.
"""

import numpy as np
from typing import Optional, Union, Dict, Any, Tuple, List
from dataclasses import dataclass, field, asdict, replace
from pathlib import Path
import logging
import time

from .core.color import Hsla
from .core.exceptions import InvalidParameterError
from .core.fractal_types import (DrawStyle, FractalRegistry, FractalType, GeneratedGeometry,
                                 JuliaSet, JULIA_PRESETS)
from .core.validation import DEFAULT_LIMITS, DepthLimits
from .rendering.coloring import ColoringEngine
from .rendering.raster import Canvas, ImageExporter, RenderMetadata
from .acceleration.numba_backend import get_numba_accelerator
from .acceleration.multiprocessing import MultiprocessingAccelerator, get_optimal_process_count

logger = logging.getLogger(__name__)

JULIA_BACKENDS = ('auto', 'numpy', 'numba', 'multiprocessing')


@dataclass
class GenerationConfig:
    """Configuration for geometry generation."""

    # Output
    output: Optional[str] = None  # None picks the fractal's default mode

    # Styling
    stroke_width: float = 1.0
    stroke_color: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    fill_color: Optional[Tuple[float, float, float]] = None
    colorizer: Optional[str] = None  # palette name or 'hue'
    circle_segments: int = 32

    # Julia performance
    julia_backend: str = 'auto'
    num_processes: Optional[int] = None
    tile_rows: int = 64
    numba_threshold: int = 250_000  # pixels
    multiprocessing_threshold: int = 1_000_000  # pixels

    # Raster output
    background: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    jpeg_quality: int = 95
    save_metadata: bool = True

    limits: DepthLimits = field(default_factory=lambda: DEFAULT_LIMITS)

    def validate(self):
        """Validate configuration parameters."""
        if self.stroke_width < 0:
            raise ValueError("stroke_width must be non-negative")

        if self.circle_segments < 3:
            raise ValueError("circle_segments must be >= 3")

        for name in ('stroke_color', 'fill_color', 'background'):
            color = getattr(self, name)
            if color is None:
                continue
            if len(color) != 3 or not all(0.0 <= c <= 1.0 for c in color):
                raise ValueError(f"{name} must be three RGB components between 0 and 1")

        if self.julia_backend not in JULIA_BACKENDS:
            raise ValueError(f"Unknown julia_backend '{self.julia_backend}'. "
                             f"Available: {', '.join(JULIA_BACKENDS)}")

        if self.num_processes is not None and self.num_processes < 1:
            raise ValueError("num_processes must be >= 1")

        if self.tile_rows < 1:
            raise ValueError("tile_rows must be >= 1")

        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError("jpeg_quality must be between 1 and 100")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        data = asdict(self)
        data['limits'] = self.limits.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenerationConfig':
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        unknown = set(data) - set(known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")
        if isinstance(known.get('limits'), dict):
            known['limits'] = DepthLimits.from_dict(known['limits'])
        for name in ('stroke_color', 'fill_color', 'background'):
            if known.get(name) is not None:
                known[name] = tuple(known[name])
        return cls(**known)


@dataclass
class GenerationResult:
    """Geometry produced by one generation call."""

    fractal_name: str
    output: str
    geometry: GeneratedGeometry
    count: int
    elapsed_seconds: float
    backend: str = 'python'
    parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.count == 0


def _count(fractal: FractalType, geometry: GeneratedGeometry) -> int:
    """Number of leaf primitives, in the unit of ``expected_count``."""
    if geometry is None:
        return 0
    if isinstance(geometry, list):
        return len(geometry)
    # A traced path holds every leaf of the recursion.
    return fractal.expected_count()


class FractalGenerator:
    """Main fractal geometry generation engine."""

    def __init__(self, config: Optional[GenerationConfig] = None):
        """
        Initialize fractal generator.

        Args:
            config: Generation configuration (uses defaults if None)
        """
        self.config = config or GenerationConfig()
        self.config.validate()

        self.coloring_engine = ColoringEngine()
        self.image_exporter = ImageExporter()
        self._multiprocessing: Optional[MultiprocessingAccelerator] = None

        logger.info(f"FractalGenerator initialized: julia_backend={self.config.julia_backend}")

    def create_fractal(self, fractal: Union[str, FractalType], **parameters) -> FractalType:
        """Resolve a fractal name (with parameters) or pass an instance through."""
        if isinstance(fractal, FractalType):
            if parameters:
                raise ValueError("Parameters cannot be combined with a fractal instance")
            return fractal
        return FractalRegistry.create_fractal(fractal, self.config.limits, **parameters)

    def style(self) -> DrawStyle:
        """Draw style derived from the configuration."""
        cfg = self.config
        colorizer = None
        if cfg.colorizer:
            colorizer = self.coloring_engine.get_colorizer(cfg.colorizer)
        fill = Hsla.from_rgb(*cfg.fill_color) if cfg.fill_color is not None else None
        return DrawStyle(
            stroke_width=cfg.stroke_width,
            stroke_color=Hsla.from_rgb(*cfg.stroke_color),
            colorizer=colorizer,
            fill=fill,
            circle_segments=cfg.circle_segments,
        )

    def generate(self, fractal: Union[str, FractalType], output: Optional[str] = None,
                 **parameters) -> GenerationResult:
        """
        Generate geometry for a fractal.

        Args:
            fractal: Registered fractal name or a configured instance
            output: Output mode (overrides the configured one)
            **parameters: Fractal parameters when ``fractal`` is a name

        Returns:
            GenerationResult holding the geometry
        """
        fractal = self.create_fractal(fractal, **parameters)
        output = fractal.resolve_output(output or self.config.output)
        start_time = time.time()

        logger.info(f"Starting generation: {fractal.name} ({output})")

        geometry, backend = self._generate_with_best_method(fractal, output)

        elapsed = time.time() - start_time
        count = _count(fractal, geometry)
        logger.info(f"Generation complete: {fractal.name} produced {count} primitives "
                    f"in {elapsed:.3f}s ({backend})")

        return GenerationResult(
            fractal_name=fractal.name,
            output=output,
            geometry=geometry,
            count=count,
            elapsed_seconds=elapsed,
            backend=backend,
            parameters=fractal.parameters.to_dict(),
        )

    def _generate_with_best_method(self, fractal: FractalType,
                                   output: str) -> Tuple[GeneratedGeometry, str]:
        """Choose and execute the best generation method."""
        if not isinstance(fractal, JuliaSet):
            return fractal.generate(output, self.style()), 'python'

        counts, backend = self._julia_counts(fractal)
        return fractal.pixels_from_counts(counts), backend

    def _select_julia_backend(self, total_pixels: int) -> str:
        backend = self.config.julia_backend
        if backend != 'auto':
            return backend
        if total_pixels >= self.config.multiprocessing_threshold:
            return 'multiprocessing'
        if total_pixels >= self.config.numba_threshold:
            return 'numba'
        return 'numpy'

    def _julia_counts(self, fractal: JuliaSet) -> Tuple[np.ndarray, str]:
        """Escape counts for a Julia grid on the selected backend."""
        p = fractal.parameters
        backend = self._select_julia_backend(p.width * p.height)

        if backend == 'multiprocessing':
            logger.info("Using multiprocessing Julia computation")
            return self._multiprocessing_accelerator().julia_escape_counts(
                p.width, p.height, p.c, p.max_iterations, fractal.limits), backend

        if backend == 'numba':
            logger.info("Using Numba-accelerated Julia computation")
            try:
                return get_numba_accelerator().julia_escape_counts(
                    p.width, p.height, p.c, p.max_iterations, limits=fractal.limits), backend
            except InvalidParameterError:
                raise
            except Exception as e:
                if self.config.julia_backend == 'numba':
                    raise
                logger.warning(f"Numba computation failed, falling back to NumPy: {e}")

        logger.info("Using NumPy Julia computation")
        return fractal.compute_counts(), 'numpy'

    def _multiprocessing_accelerator(self) -> MultiprocessingAccelerator:
        if self._multiprocessing is None:
            num_proc = self.config.num_processes or get_optimal_process_count()
            self._multiprocessing = MultiprocessingAccelerator(num_proc, self.config.tile_rows)
        return self._multiprocessing

    def rasterize(self, result: GenerationResult, width: int, height: int) -> Canvas:
        """Paint a generation result onto a new canvas."""
        canvas = Canvas(width, height, Hsla.from_rgb(*self.config.background))
        drawn = canvas.draw_all(result.geometry)
        logger.debug(f"Rasterized {drawn} items onto {width}x{height} canvas")
        return canvas

    def render(self, fractal: Union[str, FractalType], output_path: Path,
               size: Optional[Tuple[int, int]] = None, output: Optional[str] = None,
               **parameters) -> GenerationResult:
        """
        Generate a fractal and save it as an image.

        Args:
            fractal: Registered fractal name or a configured instance
            output_path: Image file path (.png, .jpg or .jpeg)
            size: Canvas (width, height); defaults to the fractal's recommendation
            output: Output mode
            **parameters: Fractal parameters when ``fractal`` is a name

        Returns:
            GenerationResult of the rendered geometry
        """
        fractal = self.create_fractal(fractal, **parameters)
        start_time = time.time()
        result = self.generate(fractal, output)

        width, height = size or fractal.get_recommended_canvas()
        canvas = self.rasterize(result, width, height)

        metadata = None
        if self.config.save_metadata:
            metadata = RenderMetadata(
                fractal_type=result.fractal_name,
                resolution=(width, height),
                output_mode=result.output,
                primitive_count=result.count,
                render_time_seconds=time.time() - start_time,
                backend=result.backend,
                fractal_parameters=result.parameters,
            )
        self.image_exporter.save_image(canvas.image, output_path, metadata, self.config.jpeg_quality)

        logger.info(f"Render complete: {time.time() - start_time:.2f}s")
        return result

    def statistics(self, fractal: Union[str, FractalType], **parameters) -> Dict[str, Any]:
        """
        Describe what a generation would produce without running it.

        Returns:
            Dictionary with description, expected leaf count, supported
            outputs and recommended canvas
        """
        fractal = self.create_fractal(fractal, **parameters)
        return {
            'name': fractal.name,
            'description': fractal.get_description(),
            'expected_count': fractal.expected_count(),
            'outputs': list(fractal.outputs),
            'recommended_canvas': fractal.get_recommended_canvas(),
            'parameters': fractal.parameters.to_dict(),
        }

    def update_config(self, **kwargs):
        """Update configuration and re-validate."""
        self.config = replace(self.config, **kwargs)
        self.config.validate()
        self._multiprocessing = None


class BatchGenerator:
    """Batch rendering with job queuing."""

    def __init__(self, base_config: Optional[GenerationConfig] = None):
        """Initialize batch generator."""
        self.base_config = base_config or GenerationConfig()
        self.jobs = []
        self.results = []

    def add_job(self, fractal_name: str, output_path: Path,
                parameters: Optional[Dict[str, Any]] = None,
                config_overrides: Optional[Dict[str, Any]] = None,
                job_name: Optional[str] = None):
        """
        Add a rendering job to the batch.

        Args:
            fractal_name: Registered fractal name
            output_path: Output file path
            parameters: Fractal parameters
            config_overrides: Configuration overrides for this job
            job_name: Optional name for the job
        """
        job = {
            'fractal_name': fractal_name,
            'output_path': Path(output_path),
            'parameters': parameters or {},
            'config_overrides': config_overrides or {},
            'job_name': job_name or f"job_{len(self.jobs)}",
            'status': 'pending'
        }
        self.jobs.append(job)

    def run_batch(self, progress_callback: Optional[callable] = None) -> List[Dict[str, Any]]:
        """
        Execute all jobs in the batch.

        A failing job is logged and recorded as failed; the remaining jobs
        still run.

        Args:
            progress_callback: Optional callback for progress updates

        Returns:
            List of job results
        """
        results = []

        for i, job in enumerate(self.jobs):
            logger.info(f"Processing job {i+1}/{len(self.jobs)}: {job['job_name']}")

            try:
                config = replace(self.base_config, **job['config_overrides'])
                generator = FractalGenerator(config)
                generation = generator.render(job['fractal_name'], job['output_path'],
                                              **job['parameters'])

                result = {
                    'job_name': job['job_name'],
                    'status': 'completed',
                    'render_time': generation.elapsed_seconds,
                    'primitive_count': generation.count,
                    'output_path': str(job['output_path']),
                }
                job['status'] = 'completed'

            except (ValueError, TypeError, OSError) as e:
                logger.error(f"Job {job['job_name']} failed: {e}")
                result = {
                    'job_name': job['job_name'],
                    'status': 'failed',
                    'error': str(e)
                }
                job['status'] = 'failed'

            results.append(result)

            if progress_callback:
                progress_callback(i + 1, len(self.jobs), result)

        self.results = results
        return results

    def get_summary(self) -> Dict[str, Any]:
        """Get batch processing summary."""
        if not self.results:
            return {'status': 'not_run'}

        completed = sum(1 for r in self.results if r['status'] == 'completed')
        failed = sum(1 for r in self.results if r['status'] == 'failed')
        total_time = sum(r.get('render_time', 0) for r in self.results)

        return {
            'total_jobs': len(self.results),
            'completed': completed,
            'failed': failed,
            'success_rate': completed / len(self.results),
            'total_render_time': total_time,
            'average_render_time': total_time / completed if completed > 0 else 0
        }


def julia_preset(name: str, **overrides) -> JuliaSet:
    """
    Julia set from a named preset constant.

    Args:
        name: Preset name (see ``JULIA_PRESETS``)
        **overrides: Parameter overrides, e.g. ``width`` or ``max_iterations``

    Returns:
        Configured JuliaSet
    """
    if name not in JULIA_PRESETS:
        available = ', '.join(JULIA_PRESETS.keys())
        raise ValueError(f"Unknown Julia preset '{name}'. Available: {available}")
    parameters = replace(JULIA_PRESETS[name], **overrides)
    return JuliaSet(parameters)


def generate(fractal_name: str, output: Optional[str] = None, **parameters) -> GeneratedGeometry:
    """Convenience function: geometry of a fractal with the default configuration."""
    return FractalGenerator().generate(fractal_name, output, **parameters).geometry
