"""
Color representation used by strokes, fills and pixels.

Colors are stored as HSLA because the generators derive colors from
angles and escape speeds. Conversion to RGB is provided for renderers.
"""

import colorsys
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Hsla:
    """HSLA color with hue in degrees and the other channels in 0-1."""
    h: float
    s: float
    l: float
    a: float = 1.0

    def __post_init__(self):
        """Normalize hue and validate the remaining channels."""
        object.__setattr__(self, 'h', float(self.h) % 360.0)
        for name in ('s', 'l', 'a'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")

    def to_rgb(self) -> Tuple[float, float, float]:
        """Convert to an RGB tuple with components in 0-1."""
        return colorsys.hls_to_rgb(self.h / 360.0, self.l, self.s)

    def to_rgba(self) -> Tuple[float, float, float, float]:
        """Convert to an RGBA tuple with components in 0-1."""
        r, g, b = self.to_rgb()
        return (r, g, b, self.a)

    def to_uint8_rgba(self) -> Tuple[int, int, int, int]:
        """Convert to an 8-bit RGBA tuple."""
        return tuple(int(round(channel * 255)) for channel in self.to_rgba())

    def with_alpha(self, alpha: float) -> 'Hsla':
        """Return the same color with a different alpha."""
        return Hsla(self.h, self.s, self.l, alpha)

    @property
    def is_transparent(self) -> bool:
        return self.a == 0.0

    @classmethod
    def from_rgb(cls, r: float, g: float, b: float, a: float = 1.0) -> 'Hsla':
        """Create a color from RGB components in 0-1."""
        h, l, s = colorsys.rgb_to_hls(r, g, b)
        return cls(h * 360.0, s, l, a)


def hsla(h: float, s: float, l: float, a: float = 1.0) -> Hsla:
    """Shorthand constructor mirroring CSS ``hsla()``."""
    return Hsla(h, s, l, a)


WHITE = Hsla(0.0, 0.0, 1.0, 1.0)
BLACK = Hsla(0.0, 0.0, 0.0, 1.0)
TRANSPARENT_BLACK = Hsla(0.0, 0.0, 0.0, 0.0)
