"""
Path construction for the line-based fractals.

A ``PathBuilder`` accumulates move/line/close commands and is consumed by
``build()``, which yields an immutable ``Path``. Generators that emit many
independently colored pieces pair each path with a color in a
``ColoredSegment``.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union
import logging

from .color import Hsla
from .exceptions import PathBuildError
from .geometry import Bounds, Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveTo:
    """Lift the pen and place it at ``point``."""
    point: Point


@dataclass(frozen=True)
class LineTo:
    """Draw a straight segment from the pen position to ``point``."""
    point: Point


@dataclass(frozen=True)
class Close:
    """Draw back to the start of the current sub-path."""


PathCommand = Union[MoveTo, LineTo, Close]


@dataclass(frozen=True)
class Path:
    """Immutable sequence of drawing commands with a stroke width."""
    commands: Tuple[PathCommand, ...]
    stroke_width: float = 1.0

    def __len__(self) -> int:
        return len(self.commands)

    @property
    def points(self) -> List[Point]:
        """All explicit points in command order."""
        return [cmd.point for cmd in self.commands if not isinstance(cmd, Close)]

    def segments(self) -> Iterator[Tuple[Point, Point]]:
        """
        Iterate the straight pieces the path draws.

        Closing commands contribute the segment back to the sub-path start
        unless the pen is already there.

        Yields:
            ``(start, end)`` point pairs
        """
        pen: Optional[Point] = None
        subpath_start: Optional[Point] = None
        for cmd in self.commands:
            if isinstance(cmd, MoveTo):
                pen = subpath_start = cmd.point
            elif isinstance(cmd, LineTo):
                if pen is not None:
                    yield (pen, cmd.point)
                else:
                    subpath_start = cmd.point
                pen = cmd.point
            elif pen is not None and subpath_start is not None:
                if pen != subpath_start:
                    yield (pen, subpath_start)
                pen = subpath_start

    def polylines(self) -> List[List[Point]]:
        """Split the path into one point list per sub-path, closing explicitly."""
        lines: List[List[Point]] = []
        current: List[Point] = []
        for cmd in self.commands:
            if isinstance(cmd, MoveTo):
                if len(current) > 1:
                    lines.append(current)
                current = [cmd.point]
            elif isinstance(cmd, LineTo):
                current.append(cmd.point)
            elif current and current[-1] != current[0]:
                current.append(current[0])
        if len(current) > 1:
            lines.append(current)
        return lines

    def bounds(self) -> Bounds:
        """Bounding rectangle of every point in the path."""
        pts = self.points
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        left, top = min(xs), min(ys)
        return Bounds(Point(left, top), max(xs) - left, max(ys) - top)


@dataclass(frozen=True)
class ColoredSegment:
    """A path drawn in a single color."""
    path: Path
    color: Hsla


class PathBuilder:
    """Single-use accumulator of path commands."""

    def __init__(self, stroke_width: float = 1.0):
        """
        Initialize an empty builder.

        Args:
            stroke_width: Width of the stroke of the built path
        """
        if stroke_width < 0:
            raise ValueError("stroke_width must be non-negative")
        self.stroke_width = stroke_width
        self._commands: List[PathCommand] = []
        self._pen: Optional[Point] = None
        self._consumed = False

    @classmethod
    def stroke(cls, width: float = 1.0) -> 'PathBuilder':
        """Builder for a stroked path of the given width."""
        return cls(stroke_width=width)

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def is_empty(self) -> bool:
        return not self._commands

    def _check_open(self):
        if self._consumed:
            raise PathBuildError("PathBuilder has already been built")

    def move_to(self, point: Point) -> 'PathBuilder':
        """Start a new sub-path at ``point``."""
        self._check_open()
        self._commands.append(MoveTo(point))
        self._pen = point
        return self

    def line_to(self, point: Point) -> 'PathBuilder':
        """Append a segment from the pen position to ``point``."""
        self._check_open()
        if self._pen is None:
            # Nothing to draw from yet; the point becomes the sub-path start.
            self._commands.append(MoveTo(point))
        else:
            self._commands.append(LineTo(point))
        self._pen = point
        return self

    def close(self) -> 'PathBuilder':
        """
        Return to the most recent ``move_to`` point.

        Raises:
            PathBuildError: If no sub-path has been started
        """
        self._check_open()
        if self._pen is None:
            raise PathBuildError("Cannot close a path before move_to")
        self._commands.append(Close())
        return self

    def build(self) -> Path:
        """
        Consume the builder and produce the path.

        Returns:
            Immutable path containing every accumulated command

        Raises:
            PathBuildError: If no commands were added or the builder was
                already consumed
        """
        self._check_open()
        if not self._commands:
            raise PathBuildError("Cannot build a path with no commands")
        self._consumed = True
        path = Path(tuple(self._commands), self.stroke_width)
        self._commands = []
        logger.debug(f"Built path with {len(path)} commands")
        return path

    def build_or_none(self) -> Optional[Path]:
        """Build the path, or return ``None`` when nothing was added."""
        if self.is_empty:
            self._check_open()
            self._consumed = True
            return None
        return self.build()
