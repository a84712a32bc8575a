"""
Edit operations on an existing grid.

Every operation either applies completely or leaves the grid untouched:
wrong argument types raise ``InvalidTypeError`` before anything changes, and
out-of-range values (NaN, counts below 2, spacing below 1, negative offsets)
make the call a no-op. Each operation returns True when the grid changed.
"""

import math
from typing import Any, Optional

import numpy as np

from gridmesh.error_handling.validation import (
    ensure_bool,
    ensure_number,
    ensure_point,
    is_usable_number,
)
from gridmesh.grid.builder import GridBuilder
from gridmesh.grid.models import DEFAULT_SPACING, Grid, GridPoint
from gridmesh.grid.query import grid_angle, grid_middle_point
from gridmesh.grid.topology import (
    common_point_indices,
    find_invariant_violations,
    is_common_point,
    is_main_line,
    logical_position,
    logical_primary_line_count,
    logical_secondary_line_count,
    next_main_line,
    nth_common_point,
    previous_main_line,
)
from gridmesh.monitoring.logger import get_logger

MIN_LINE_COUNT = 2
MIN_SPACING = 1.0
MAX_ANGLE = 90.0


def _as_line_count(value: float) -> Optional[int]:
    if not is_usable_number(value, MIN_LINE_COUNT) or value != int(value):
        return None
    return int(value)


class GridMutator:
    """Resizes, refines, rescales, rotates and translates a grid in place."""

    def __init__(
        self,
        grid: Grid,
        default_spacing: float = DEFAULT_SPACING,
        verify_invariants: bool = False,
    ) -> None:
        """
        Initialize the mutator.

        Args:
            grid: Grid to edit
            default_spacing: Spacing restored by clear()
            verify_invariants: Check and log invariant violations after edits
        """
        self.grid = grid
        self.builder = GridBuilder(grid)
        self.default_spacing = default_spacing
        self.verify_invariants = verify_invariants
        self.logger = get_logger("grid.mutator")

    # ------------------------------------------------------------------
    # Resizing
    # ------------------------------------------------------------------

    def set_primary_line_count(self, count: Any) -> bool:
        """
        Grow or shrink the grid to ``count`` main primary lines.

        Growth extrapolates from the last two main lines; with refinement on,
        the new span also gets its subsidiary lines and refinement points.
        Shrinking drops the last main line together with its trailing
        subsidiary lines.
        """
        target = _as_line_count(ensure_number(count, "primary_line_count"))
        grid = self.grid
        if target is None or grid.is_empty:
            return False

        existing = logical_primary_line_count(grid)
        if target == existing:
            return False

        while existing < target:
            self.builder.add_main_primary_line()
            if grid.refinement_enabled:
                new_index = len(grid.lines) - 1
                self.builder.add_subsidiary_lines_between(
                    previous_main_line(grid, new_index), new_index
                )
                self.builder.add_refinement_points(from_main_index=len(grid.lines) - 1)
            existing += 1

        while existing > target:
            last_index = len(grid.lines) - 1
            del grid.lines[previous_main_line(grid, last_index) + 1:]
            existing -= 1

        self._finish_structural_edit("set_primary_line_count", primary_line_count=target)
        return True

    def set_secondary_line_count(self, count: Any) -> bool:
        """
        Grow or shrink every main line to ``count`` common points.

        Growth repeats each line's last common-point step; with refinement on,
        the new column is refined and reaches the subsidiary lines too.
        """
        target = _as_line_count(ensure_number(count, "secondary_line_count"))
        grid = self.grid
        if target is None or grid.is_empty:
            return False

        existing = logical_secondary_line_count(grid)
        if target == existing:
            return False

        while existing < target:
            self.builder.add_secondary_line()
            existing += 1
            if grid.refinement_enabled:
                self.builder.add_refinement_points(from_common_point_index=existing - 2)
                self.builder.add_subsidiary_lines_between(
                    0, len(grid.lines) - 1, from_common_point_index=existing - 1
                )

        while existing > target:
            for line_index, line in enumerate(grid.lines):
                if is_main_line(grid, line_index):
                    keep = common_point_indices(grid, line_index)[-2]
                    del line.points[keep + 1:]
                else:
                    line.points.pop()
            existing -= 1

        self._finish_structural_edit("set_secondary_line_count", secondary_line_count=target)
        return True

    # ------------------------------------------------------------------
    # Refinement
    # ------------------------------------------------------------------

    def set_refinement_enabled(self, enabled: Any) -> bool:
        """
        Switch refinement structure on or off.

        Enabling regenerates all subsidiary lines and refinement points.
        Disabling keeps only common points and drops every line left empty.
        """
        value = ensure_bool(enabled, "refinement_enabled")
        grid = self.grid
        if value == grid.refinement_enabled:
            return False

        if grid.is_empty:
            grid.refinement_enabled = value
            return False

        if value:
            # Every line is still a main line here, so all of them are consecutive
            self.builder.add_subsidiary_lines_between(0, len(grid.lines) - 1)
            grid.refinement_enabled = True
            self.builder.add_refinement_points()
        else:
            for line_index, line in enumerate(grid.lines):
                line.points = [
                    point
                    for point_index, point in enumerate(line.points)
                    if is_common_point(grid, line_index, point_index)
                ]
            grid.lines[:] = [line for line in grid.lines if line.points]
            grid.refinement_enabled = False

        self._finish_structural_edit("set_refinement_enabled", refinement_enabled=value)
        return True

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def set_spacing(self, spacing: Any) -> bool:
        """
        Rescale the grid about its first point, keeping its orientation.

        The step between the first two main lines and the step between the
        first two common points are measured from live coordinates, each is
        rescaled to ``spacing`` and every point is placed at
        ``anchor + primary_step * a + secondary_step * b`` where (a, b) is its
        logical position.
        """
        value = ensure_number(spacing, "spacing")
        grid = self.grid
        if not is_usable_number(value, MIN_SPACING) or grid.is_empty:
            return False

        anchor = grid.lines[0].points[0]
        anchor_x, anchor_y = anchor.x, anchor.y

        second_main = grid.lines[next_main_line(grid, 0)].points[0]
        second_common = nth_common_point(grid.lines[0], 1)

        primary_x, primary_y = self._rescaled_step(
            second_main.x - anchor_x, second_main.y - anchor_y, value, fallback=(1.0, 0.0)
        )
        secondary_x, secondary_y = self._rescaled_step(
            second_common.x - anchor_x, second_common.y - anchor_y, value, fallback=(0.0, 1.0)
        )

        for line_index, line in enumerate(grid.lines):
            for point_index, point in enumerate(line.points):
                primary, secondary = logical_position(grid, line_index, point_index)
                point.move_to(
                    anchor_x + primary_x * primary + secondary_x * secondary,
                    anchor_y + primary_y * primary + secondary_y * secondary,
                )

        previous = grid.spacing
        grid.spacing = value
        self._verify("set_spacing")
        self.logger.info(
            "Grid spacing changed",
            extra={"previous_spacing": previous, "spacing": value},
        )
        return True

    @staticmethod
    def _rescaled_step(x_diff: float, y_diff: float, length: float, fallback) -> tuple:
        current = math.hypot(x_diff, y_diff)
        if current == 0:
            x_diff, y_diff = fallback
            current = 1.0
        scale = length / current
        return x_diff * scale, y_diff * scale

    def rotate(self, angle: Any) -> bool:
        """
        Rotate every point by ``angle`` degrees about the grid middle point.
        """
        value = ensure_number(angle, "angle")
        grid = self.grid
        middle = grid_middle_point(grid)
        if not is_usable_number(value) or middle is None:
            return False

        points = grid.all_points()
        coords = np.array([[point.x, point.y] for point in points], dtype=float)
        theta = np.radians(value)
        rotation = np.array(
            [[np.cos(theta), -np.sin(theta)], [np.sin(theta), np.cos(theta)]]
        )
        center = np.array(middle, dtype=float)
        rotated = (coords - center) @ rotation.T + center

        for point, (x, y) in zip(points, rotated):
            point.move_to(float(x), float(y))

        self.logger.info("Grid rotated", extra={"angle": value})
        return True

    @property
    def angle(self) -> Optional[int]:
        """Current orientation in whole degrees, or None for an empty grid."""
        return grid_angle(self.grid)

    def set_angle(self, angle: Any) -> bool:
        """Rotate so the grid ends up at ``angle`` degrees (0 to 90)."""
        value = ensure_number(angle, "angle")
        if not is_usable_number(value, 0.0) or value > MAX_ANGLE:
            return False

        current = self.angle
        if current is None or value == current:
            return False
        return self.rotate(value - current)

    def set_offset(self, position: Any, using_active_drag: bool = False) -> bool:
        """
        Translate the whole grid so a reference point lands on ``position``.

        The reference is the dragged point when ``using_active_drag`` is set
        and a drag is active, otherwise the first point of the first line.
        Negative coordinates are ignored.
        """
        x, y = ensure_point(position, "offset")
        grid = self.grid
        if not is_usable_number(x, 0.0) or not is_usable_number(y, 0.0) or grid.is_empty:
            return False

        reference = self._dragged_point() if using_active_drag else None
        if reference is None:
            reference = grid.lines[0].points[0]

        x_change = x - reference.x
        y_change = y - reference.y
        if x_change == 0 and y_change == 0:
            return False

        for point in grid.all_points():
            point.translate(x_change, y_change)

        self.logger.debug(
            "Grid translated",
            extra={"x_change": x_change, "y_change": y_change},
        )
        return True

    def move_active_point(self, position: Any) -> bool:
        """Move only the dragged point to ``position``."""
        x, y = ensure_point(position, "position")
        point = self._dragged_point()
        if point is None or not is_usable_number(x, 0.0) or not is_usable_number(y, 0.0):
            return False

        point.move_to(x, y)
        return True

    def clear(self) -> None:
        """Remove every line and restore the default spacing."""
        self.grid.lines.clear()
        self.grid.spacing = self.default_spacing
        self.grid.drag_state = None
        self.logger.info("Grid cleared")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _dragged_point(self) -> Optional[GridPoint]:
        drag_state = self.grid.drag_state
        if drag_state is None:
            return None
        return self.grid.lines[drag_state.active_line_index].points[
            drag_state.active_point_index
        ]

    def _finish_structural_edit(self, operation: str, **context: Any) -> None:
        self.builder.link_adjacency()
        self._verify(operation)
        self.logger.info(
            f"Grid structure changed by {operation}",
            extra={
                "total_primary_lines": len(self.grid.lines),
                **context,
            },
        )

    def _verify(self, operation: str) -> None:
        if not self.verify_invariants:
            return
        violations = find_invariant_violations(self.grid)
        if violations:
            self.logger.warning(
                "Grid invariants violated",
                extra={"operation": operation, "violations": violations},
            )
