"""
Parameter checks shared by every generator.

Generators call these before any recursion starts, so an invalid call
fails immediately and never produces partial geometry.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict

from .exceptions import InvalidParameterError
from .geometry import Point, as_point


@dataclass(frozen=True)
class DepthLimits:
    """Upper bounds on recursion depth per fractal."""
    dragon: int = 20
    koch: int = 10
    sierpinski: int = 12
    pythagoras: int = 20
    circle_packing: int = 7
    julia_iterations: int = 10000

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DepthLimits':
        return cls(**data)


DEFAULT_LIMITS = DepthLimits()


def check_depth(name: str, value: Any, limit: int) -> int:
    """
    Validate a recursion depth or iteration count.

    Args:
        name: Parameter name used in error messages
        value: Caller-supplied depth
        limit: Largest accepted depth

    Returns:
        The depth as an ``int``
    """
    # bool is an int subclass but never a meaningful depth
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidParameterError(f"{name} must be non-negative, got {value}")
    if value > limit:
        raise InvalidParameterError(f"{name} must be at most {limit}, got {value}")
    return int(value)


def check_integer(name: str, value: Any, minimum: int) -> int:
    """Validate an integer count with a lower bound."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidParameterError(f"{name} must be at least {minimum}, got {value}")
    return int(value)


def check_positive(name: str, value: Any) -> float:
    """Validate a strictly positive, finite size."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(f"{name} must be numeric, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError(f"{name} must be positive and finite, got {value}")
    return float(value)


def check_finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(f"{name} must be numeric, got {value!r}")
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value}")
    return float(value)


def check_point(name: str, value: Any) -> Point:
    """Validate that both coordinates of a point are finite numbers."""
    try:
        p = as_point(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"{name} must be a point or (x, y) pair: {e}") from e
    check_finite(f"{name}.x", p.x)
    check_finite(f"{name}.y", p.y)
    return p
