"""
Palette management and per-segment colorizers.

Colorizers map a leaf index and the total leaf count to a color. They let
segment-mode generators paint each leaf differently, for example along a
palette gradient or around the hue wheel.
"""

import numpy as np
from typing import Dict, List, Sequence, Tuple, Union
import logging
from pathlib import Path

from ..core.color import Hsla
from ..core.curves import Colorizer

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]


class Palette:
    """Color palette management and interpolation."""

    def __init__(self, colors: Sequence[Union[Hsla, RGB]], name: str = "Custom"):
        """
        Initialize color palette.

        Args:
            colors: Colors in the palette, as ``Hsla`` or RGB tuples in 0-1
            name: Human-readable name for the palette
        """
        self.name = name
        self.colors: List[RGB] = []

        for color in colors:
            if isinstance(color, Hsla):
                self.colors.append(color.to_rgb())
            elif isinstance(color, (tuple, list)) and len(color) == 3:
                if not all(0.0 <= component <= 1.0 for component in color):
                    raise ValueError("RGB components must be between 0 and 1")
                self.colors.append(tuple(float(c) for c in color))
            else:
                raise ValueError(f"Invalid color format: {color}")

        if len(self.colors) < 2:
            raise ValueError("Palette must contain at least 2 colors")

    def __len__(self) -> int:
        return len(self.colors)

    def interpolate(self, t: float) -> Hsla:
        """
        Interpolate color at position t (0-1).

        Args:
            t: Position in palette, clipped to 0-1

        Returns:
            Interpolated color
        """
        t = float(np.clip(t, 0.0, 1.0))

        segment_size = 1.0 / (len(self.colors) - 1)
        segment_idx = int(t / segment_size)

        if segment_idx >= len(self.colors) - 1:
            return Hsla.from_rgb(*self.colors[-1])

        local_t = (t - segment_idx * segment_size) / segment_size
        c1 = np.array(self.colors[segment_idx])
        c2 = np.array(self.colors[segment_idx + 1])
        r, g, b = np.clip(c1 + local_t * (c2 - c1), 0.0, 1.0)
        return Hsla.from_rgb(float(r), float(g), float(b))

    def sample(self, count: int) -> List[Hsla]:
        """Evenly spaced colors along the palette."""
        if count <= 0:
            return []
        if count == 1:
            return [self.interpolate(0.0)]
        return [self.interpolate(t) for t in np.linspace(0.0, 1.0, count)]

    def save_to_file(self, filepath: Path) -> None:
        """Save palette to file in GPL format."""
        with open(filepath, 'w') as f:
            f.write("GIMP Palette\n")
            f.write(f"Name: {self.name}\n")
            f.write("#\n")

            for i, (r, g, b) in enumerate(self.colors):
                f.write(f"{int(round(r * 255)):3d} {int(round(g * 255)):3d} "
                        f"{int(round(b * 255)):3d} Color_{i}\n")

    @classmethod
    def load_from_file(cls, filepath: Path) -> 'Palette':
        """Load palette from GPL file."""
        colors = []
        name = "Loaded_Palette"

        with open(filepath, 'r') as f:
            for line in f:
                line = line.strip()
                if line.startswith("Name:"):
                    name = line.split(":", 1)[1].strip()
                elif line and not line.startswith("#") and not line.startswith("GIMP"):
                    parts = line.split()
                    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
                        r, g, b = int(parts[0]), int(parts[1]), int(parts[2])
                        colors.append((r / 255.0, g / 255.0, b / 255.0))
                    else:
                        logger.debug(f"Skipping palette line: {line!r}")

        if not colors:
            raise ValueError(f"No valid colors found in {filepath}")

        return cls(colors, name)


def rainbow_colorizer(saturation: float = 1.0, lightness: float = 0.5) -> Colorizer:
    """Colorizer walking once around the hue wheel over all leaves."""
    def colorizer(index: int, total: int) -> Hsla:
        return Hsla(index / max(total, 1) * 360.0, saturation, lightness)
    return colorizer


def palette_colorizer(palette: Palette) -> Colorizer:
    """Colorizer spreading the leaves along a palette gradient."""
    def colorizer(index: int, total: int) -> Hsla:
        return palette.interpolate(index / max(total - 1, 1))
    return colorizer


class ColoringEngine:
    """Registry of named palettes and colorizers."""

    def __init__(self):
        """Initialize coloring engine with built-in palettes."""
        self.palettes = self._create_builtin_palettes()

    def _create_builtin_palettes(self) -> Dict[str, Palette]:
        """Create built-in color palettes."""
        palettes = {}

        palettes['hot'] = Palette([
            (0, 0, 0),      # Black
            (1, 0, 0),      # Red
            (1, 1, 0),      # Yellow
            (1, 1, 1),      # White
        ], name="Hot")

        palettes['cool'] = Palette([
            (0, 0, 0),      # Black
            (0, 0, 1),      # Blue
            (0, 1, 1),      # Cyan
            (1, 1, 1),      # White
        ], name="Cool")

        palettes['gray'] = Palette([
            (0, 0, 0),
            (1, 1, 1),
        ], name="Grayscale")

        palettes['fire'] = Palette([
            (0, 0, 0),
            (0.5, 0, 0),
            (1, 0, 0),
            (1, 0.5, 0),
            (1, 1, 0),
            (1, 1, 1),
        ], name="Fire")

        palettes['ocean'] = Palette([
            (0, 0, 0.2),
            (0, 0, 0.8),
            (0, 0.5, 1),
            (0, 1, 1),
            (0.5, 1, 1),
            (1, 1, 1),
        ], name="Ocean")

        palettes['rainbow'] = Palette([
            (1, 0, 0),
            (1, 0.5, 0),
            (1, 1, 0),
            (0, 1, 0),
            (0, 1, 1),
            (0, 0, 1),
            (0.5, 0, 1),
        ], name="Rainbow")

        return palettes

    def add_palette(self, name: str, palette: Palette) -> None:
        """Add a custom color palette."""
        self.palettes[name] = palette
        logger.info(f"Added color palette: {name}")

    def get_palette(self, name: str) -> Palette:
        """Get color palette by name."""
        if name not in self.palettes:
            available = ', '.join(self.palettes.keys())
            raise ValueError(f"Unknown color palette '{name}'. Available: {available}")
        return self.palettes[name]

    def get_colorizer(self, name: str) -> Colorizer:
        """
        Colorizer by name.

        ``'hue'`` walks the hue wheel; any palette name spreads the leaves
        along that palette.
        """
        if name == 'hue':
            return rainbow_colorizer()
        return palette_colorizer(self.get_palette(name))

    def list_palettes(self) -> List[str]:
        """Get list of available color palettes."""
        return list(self.palettes.keys())
