"""
Grid data model: points, primary lines and the grid that owns them.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import uuid4

from gridmesh.core.types import Point

DEFAULT_SUBDIVISION = 4
DEFAULT_SPACING = 5.0


@dataclass(eq=False)
class GridPoint:
    """
    A single control (common) or refinement point.

    Points compare by identity: two handles at the same position are still
    different handles.
    """

    x: float
    y: float
    is_common_point: bool = False
    active: bool = True
    highlight: bool = True
    # Points this one is drawn connected to; only renderers read it.
    adjacency: List["GridPoint"] = field(default_factory=list, repr=False)

    @property
    def position(self) -> Point:
        return self.x, self.y

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def translate(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy


def new_line_uuid() -> str:
    return str(uuid4())


@dataclass(eq=False)
class PrimaryLine:
    """An ordered run of points stored at a fixed slot of the grid."""

    uuid: str = field(default_factory=new_line_uuid)
    visible: bool = True
    active: bool = False
    highlight: bool = False
    color: Optional[str] = None
    points: List[GridPoint] = field(default_factory=list)


@dataclass
class DragState:
    """Which handle the current drag session holds."""

    active_line_index: int = 0
    active_point_index: int = 0
    origin: Optional[Point] = None


@dataclass(eq=False)
class Grid:
    """
    The grid placed on one image.

    ``lines[i]`` is the primary line with primary index ``i``. Main/subsidiary
    and common/refinement roles are positional; see ``gridmesh.grid.topology``.
    """

    lines: List[PrimaryLine] = field(default_factory=list)
    subdivision: int = DEFAULT_SUBDIVISION
    refinement_enabled: bool = False
    spacing: float = DEFAULT_SPACING
    drag_state: Optional[DragState] = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def all_points(self) -> List[GridPoint]:
        return [point for line in self.lines for point in line.points]
