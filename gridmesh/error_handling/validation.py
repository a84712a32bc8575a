"""
Input validation for grid setters.

Type violations raise; numeric values that are merely out of range are left to
the caller to ignore, which is why these helpers split "is it a number" from
"is it a usable number".
"""

import math
import numbers
from typing import Any, Optional, Tuple

from .exceptions import InvalidTypeError


def ensure_number(value: Any, field_name: str) -> float:
    """
    Reject anything that is not a real number.

    Booleans are rejected even though they subclass int.

    Args:
        value: Value to check
        field_name: Name used in the error message

    Returns:
        The value as a float (may be NaN)
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidTypeError(
            f"Attempting to set {field_name} to a value other than a number.",
            field_name=field_name,
            received=value,
        )
    return float(value)


def ensure_bool(value: Any, field_name: str) -> bool:
    """Reject anything that is not a bool."""
    if not isinstance(value, bool):
        raise InvalidTypeError(
            f"Attempting to set {field_name} to a value other than a boolean.",
            field_name=field_name,
            received=value,
        )
    return value


def ensure_point(value: Any, field_name: str) -> Tuple[float, float]:
    """
    Accept an (x, y) pair or any object exposing numeric ``x`` and ``y``.

    Args:
        value: Tuple, list, mapping with x/y keys, or object with x/y attributes
        field_name: Name used in the error message

    Returns:
        Tuple of (x, y) floats (components may be NaN)
    """
    x: Any
    y: Any
    if isinstance(value, (tuple, list)) and len(value) == 2:
        x, y = value
    elif isinstance(value, dict) and "x" in value and "y" in value:
        x, y = value["x"], value["y"]
    elif hasattr(value, "x") and hasattr(value, "y"):
        x, y = value.x, value.y
    else:
        raise InvalidTypeError(
            f"Attempting to set {field_name} to a value other than a point.",
            field_name=field_name,
            received=value,
        )
    return ensure_number(x, f"{field_name}.x"), ensure_number(y, f"{field_name}.y")


def is_usable_number(value: float, minimum: Optional[float] = None) -> bool:
    """True if value is finite and not below minimum."""
    if math.isnan(value) or math.isinf(value):
        return False
    if minimum is not None and value < minimum:
        return False
    return True
