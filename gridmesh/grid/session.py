"""
Edit session state machine.

Idle -> Drawing -> Idle for initial placement, Idle -> Modifying -> Idle for
handle drags and whole-grid moves. At most one session is in flight.
"""

from typing import Optional

from gridmesh.core.types import EditMode
from gridmesh.error_handling.exceptions import ContractViolationError, SessionError
from gridmesh.grid.models import DragState, Grid
from gridmesh.monitoring.logger import get_logger

logger = get_logger(__name__)


class EditSession:
    """The single in-flight edit on the grid of the current image."""

    def __init__(self) -> None:
        self.mode = EditMode.IDLE
        self.grid: Optional[Grid] = None

    @property
    def is_active(self) -> bool:
        return self.mode != EditMode.IDLE

    def start_drawing(self, grid: Grid) -> None:
        """Enter the Drawing state for placing ``grid``."""
        self._require_idle(EditMode.DRAWING)
        self.mode = EditMode.DRAWING
        self.grid = grid

    def start_modifying(self, grid: Grid, line_index: int, point_index: int) -> DragState:
        """
        Enter the Modifying state holding one handle of ``grid``.

        Args:
            grid: Grid being edited
            line_index: Primary index of the held point's line
            point_index: Index of the held point on that line

        Returns:
            The drag state recorded on the grid
        """
        if not 0 <= line_index < len(grid.lines):
            raise ContractViolationError(
                f"No primary line at index {line_index}",
                operation="start_modifying",
            )
        line = grid.lines[line_index]
        if not 0 <= point_index < len(line.points):
            raise ContractViolationError(
                f"No point at index {point_index} on primary line {line_index}",
                operation="start_modifying",
            )

        self._require_idle(EditMode.MODIFYING)

        point = line.points[point_index]
        grid.drag_state = DragState(
            active_line_index=line_index,
            active_point_index=point_index,
            origin=point.position,
        )
        self.mode = EditMode.MODIFYING
        self.grid = grid

        logger.debug(
            "Drag session started",
            extra={"line_index": line_index, "point_index": point_index},
        )
        return grid.drag_state

    def finish(self) -> bool:
        """
        Finalize the in-flight session, if any.

        Lines touched by the session are marked inactive and the drag pointers
        are reset.

        Returns:
            True if a session was active
        """
        if self.mode == EditMode.IDLE:
            return False

        grid = self.grid
        if grid is not None:
            for line in grid.lines:
                line.active = False
                line.highlight = False
            grid.drag_state = None

        logger.debug("Edit session finished", extra={"mode": self.mode.value})

        self.mode = EditMode.IDLE
        self.grid = None
        return True

    def _require_idle(self, requested: EditMode) -> None:
        if self.mode != EditMode.IDLE:
            raise SessionError(
                f"Cannot start {requested.value} while {self.mode.value}",
                current_mode=self.mode.value,
                requested_mode=requested.value,
            )
