"""
Core module exports.
"""

from gridmesh.core.interfaces import GridHost, GridStateStore
from gridmesh.core.types import (
    CompactPoint,
    CompactPrimaryLine,
    EditMode,
    GridEventType,
    GridSnapshot,
    Point,
)

__all__ = [
    # Interfaces
    "GridHost",
    "GridStateStore",
    # Types
    "Point",
    "EditMode",
    "GridEventType",
    "CompactPoint",
    "CompactPrimaryLine",
    "GridSnapshot",
]
