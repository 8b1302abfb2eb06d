"""
Exception types raised by the geometry generators.

Both concrete errors also derive from ``ValueError`` so callers that
already guard parameter handling with ``except ValueError`` keep working.
"""


class FractalGeometryError(Exception):
    """Base class for all fractal geometry errors."""


class PathBuildError(FractalGeometryError, ValueError):
    """Raised when a path builder cannot produce a path.

    This happens when ``build()`` is called with no accumulated commands,
    or when a builder is used again after it has been consumed.
    """


class InvalidParameterError(FractalGeometryError, ValueError):
    """Raised when generation parameters are rejected before recursion."""
