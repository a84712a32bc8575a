"""
Error handling for gridmesh.

Provides the exception hierarchy and the input validation helpers used by the
grid setters.
"""

from .exceptions import (
    GridMeshError,
    ValidationError,
    InvalidTypeError,
    ContractViolationError,
    SessionError,
)

from .validation import (
    ensure_bool,
    ensure_number,
    ensure_point,
    is_usable_number,
)

__all__ = [
    # Exceptions
    "GridMeshError",
    "ValidationError",
    "InvalidTypeError",
    "ContractViolationError",
    "SessionError",

    # Validation
    "ensure_bool",
    "ensure_number",
    "ensure_point",
    "is_usable_number",
]
