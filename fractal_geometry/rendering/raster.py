"""
Rasterization and image export of generated geometry.

This module paints paths, colored segments, shapes and quads onto a Pillow
canvas and saves the result as PNG (with embedded metadata) or JPEG (with
a companion JSON file).
"""

import numpy as np
from typing import Any, Dict, Iterable, Optional, Tuple, Union
from pathlib import Path as FilePath
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, ImageDraw, PngImagePlugin

from ..core.color import BLACK, WHITE, Hsla
from ..core.geometry import Quad
from ..core.path import ColoredSegment, Path
from ..core.shapes import Circle, Line, Pixel, Triangle

logger = logging.getLogger(__name__)

Drawable = Union[Path, ColoredSegment, Quad, Circle, Line, Triangle, Pixel]


@dataclass
class RenderMetadata:
    """Metadata for geometry renders."""

    fractal_type: str
    resolution: Tuple[int, int]  # width, height
    output_mode: str
    primitive_count: int
    render_time_seconds: float
    backend: str = "python"
    timestamp: str = ""
    software_version: str = "1.0.0"
    fractal_parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        data = dict(data)
        data['resolution'] = tuple(data['resolution'])
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


def _fill(color: Hsla) -> Tuple[int, int, int, int]:
    return color.to_uint8_rgba()


def _line_width(width: float) -> int:
    return max(1, int(round(width)))


class Canvas:
    """Pillow-backed RGBA canvas that understands the geometry primitives."""

    def __init__(self, width: int, height: int, background: Hsla = BLACK):
        """
        Initialize canvas.

        Args:
            width: Canvas width in pixels
            height: Canvas height in pixels
            background: Color the canvas starts filled with
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.image = Image.new('RGBA', (width, height), _fill(background))
        self._draw = ImageDraw.Draw(self.image, 'RGBA')

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def draw_path(self, path: Path, color: Hsla = WHITE) -> None:
        """Stroke every sub-path of ``path``."""
        if path.stroke_width <= 0 or color.is_transparent:
            return
        width = _line_width(path.stroke_width)
        for polyline in path.polylines():
            self._draw.line([p.to_tuple() for p in polyline], fill=_fill(color), width=width)

    def draw_segment(self, segment: ColoredSegment) -> None:
        self.draw_path(segment.path, segment.color)

    def draw_quad(self, quad: Quad) -> None:
        """Paint a quad as an ellipse, a rounded rectangle or a plain rectangle."""
        b = quad.bounds
        fill = None if quad.background.is_transparent else _fill(quad.background)
        outline = None
        border = 0
        if quad.border_width > 0 and not quad.border_color.is_transparent:
            outline = _fill(quad.border_color)
            border = _line_width(quad.border_width)
        if fill is None and outline is None:
            return

        if b.width == 1.0 and b.height == 1.0 and outline is None:
            self._draw.point((int(round(b.origin.x)), int(round(b.origin.y))), fill=fill)
            return

        box = [b.origin.x, b.origin.y, b.bottom_right.x, b.bottom_right.y]
        if quad.is_round:
            self._draw.ellipse(box, fill=fill, outline=outline, width=border)
        elif quad.corner_radius > 0:
            self._draw.rounded_rectangle(box, radius=quad.corner_radius, fill=fill,
                                         outline=outline, width=border)
        else:
            self._draw.rectangle(box, fill=fill, outline=outline, width=border)

    def draw(self, item: Drawable) -> None:
        """Paint any supported primitive or shape."""
        if isinstance(item, Path):
            self.draw_path(item)
        elif isinstance(item, ColoredSegment):
            self.draw_segment(item)
        elif isinstance(item, Quad):
            self.draw_quad(item)
        elif isinstance(item, (Circle, Pixel)):
            self.draw_quad(item.to_primitive())
        elif isinstance(item, (Line, Triangle)):
            self.draw_segment(item.to_primitive())
        else:
            raise TypeError(f"Cannot draw object of type {type(item).__name__}")

    def draw_all(self, items: Optional[Union[Drawable, Iterable[Drawable]]]) -> int:
        """
        Paint generator output.

        Args:
            items: A single path, ``None`` (nothing to draw) or an iterable
                of primitives and shapes

        Returns:
            Number of items painted
        """
        if items is None:
            return 0
        if isinstance(items, Path):
            self.draw_path(items)
            return 1
        count = 0
        for item in items:
            self.draw(item)
            count += 1
        return count

    def to_array(self) -> np.ndarray:
        """RGBA pixels as a ``uint8`` array of shape (height, width, 4)."""
        return np.asarray(self.image, dtype=np.uint8)


class ImageExporter:
    """Image export with metadata support."""

    def __init__(self):
        """Initialize image exporter."""
        self.supported_formats = {
            '.png': self._save_png,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, image: Image.Image, filepath: FilePath,
                   metadata: Optional[RenderMetadata] = None, quality: int = 95) -> FilePath:
        """
        Save a canvas image to file with metadata.

        Args:
            image: Pillow image (typically ``Canvas.image``)
            filepath: Output file path
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            The path written
        """
        filepath = FilePath(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        filepath.parent.mkdir(parents=True, exist_ok=True)
        self.supported_formats[suffix](image, filepath, metadata, quality)

        logger.info(f"Saved image: {filepath} ({image.size[0]}x{image.size[1]})")
        return filepath

    def _save_png(self, image: Image.Image, filepath: FilePath,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as PNG with metadata."""
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Title", f"Fractal: {metadata.fractal_type}")
            pnginfo.add_text("Software", f"fractal-geometry v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text("FractalMetadata", metadata.to_json())

        image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_jpeg(self, image: Image.Image, filepath: FilePath,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as JPEG with a companion JSON metadata file."""
        image.convert('RGB').save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            json_path = filepath.with_suffix('.json')
            with open(json_path, 'w') as f:
                f.write(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")


def read_png_metadata(filepath: FilePath) -> Optional[RenderMetadata]:
    """Read metadata embedded by ``ImageExporter`` from a PNG file."""
    with Image.open(filepath) as image:
        text = image.info.get("FractalMetadata")
    if text is None:
        return None
    return RenderMetadata.from_json(text)
