"""
Core data models and types exchanged with grid hosts.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

Point = Tuple[float, float]


class EditMode(str, Enum):
    """State of the single in-flight edit session."""

    IDLE = "idle"
    DRAWING = "drawing"
    MODIFYING = "modifying"


class GridEventType(str, Enum):
    """Grid lifecycle events."""

    PLACED = "placed"
    COMPLETED = "completed"
    REMOVED = "removed"


class CompactPoint(BaseModel):
    """Geometric snapshot of one grid point."""

    model_config = ConfigDict(populate_by_name=True)

    x: float
    y: float
    is_common_point: bool = Field(
        ..., alias="isCommonPoint", description="Control point (True) or refinement point"
    )


class CompactPrimaryLine(BaseModel):
    """Minimal persisted form of a primary line, used for cross-image copy."""

    uuid: str = Field(..., description="Stable line identity")
    points: List[CompactPoint] = Field(default_factory=list)


class GridSnapshot(BaseModel):
    """State and configuration of the grid on one image, sent with notifications."""

    image_id: Optional[str] = None
    refinement_enabled: bool = False
    subdivision: int = Field(4, ge=2)
    spacing: Optional[float] = None
    primary_line_count: int = Field(0, ge=0, description="Main primary lines")
    secondary_line_count: int = Field(0, ge=0, description="Common points per main line")
    angle: Optional[int] = None
    move_one_handle_only: bool = False
    lines: List[CompactPrimaryLine] = Field(default_factory=list)
