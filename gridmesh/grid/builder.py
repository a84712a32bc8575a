"""
Procedural generation of new grid structure.

New lines and points extrapolate the step vectors already present in the
grid, so a rotated or rescaled grid keeps its orientation and spacing when it
grows. Refinement structure is linear interpolation between common points.
"""

from typing import List, Optional

from gridmesh.core.types import Point
from gridmesh.error_handling.exceptions import ContractViolationError
from gridmesh.grid.models import Grid, GridPoint, PrimaryLine
from gridmesh.grid.topology import (
    NOT_FOUND,
    common_points,
    is_main_line,
    main_line_indices,
    next_main_line,
    nth_common_point,
    previous_main_line,
    slot_point,
)
from gridmesh.monitoring.logger import get_logger


def interpolate(start: GridPoint, end: GridPoint, fraction: float) -> GridPoint:
    """Refinement point at ``fraction`` of the way from ``start`` to ``end``."""
    return GridPoint(
        x=start.x + (end.x - start.x) * fraction,
        y=start.y + (end.y - start.y) * fraction,
        is_common_point=False,
    )


class GridBuilder:
    """Creates primary lines, secondary lines and refinement points."""

    def __init__(self, grid: Grid) -> None:
        """
        Initialize the builder.

        Args:
            grid: Grid to grow in place
        """
        self.grid = grid
        self.logger = get_logger("grid.builder")

    def add_main_primary_line(
        self,
        at_index: Optional[int] = None,
        anchor: Optional[Point] = None,
        point_count: Optional[int] = None,
    ) -> PrimaryLine:
        """
        Insert a main primary line holding common points only.

        The first main line is a straight column at ``anchor`` spaced by the
        grid spacing. Every later line repeats, per common slot, the step
        between the two preceding main lines, falling back to
        ``(spacing, 0)`` when only one precedes it.

        Args:
            at_index: Primary index for the new line (defaults to the end)
            anchor: Position of the first point; required for the first line
            point_count: Common points to create (defaults to the preceding
                main line's count)

        Returns:
            The inserted line
        """
        grid = self.grid
        if at_index is None:
            at_index = len(grid.lines)

        prev_index = previous_main_line(grid, at_index)

        if prev_index == NOT_FOUND:
            if anchor is None:
                raise ContractViolationError(
                    "An anchor position is required to create the first primary line",
                    operation="add_main_primary_line",
                )
            if point_count is None:
                raise ContractViolationError(
                    "A point count is required to create the first primary line",
                    operation="add_main_primary_line",
                )
            anchor_x, anchor_y = anchor
            points = [
                GridPoint(anchor_x, anchor_y + grid.spacing * idx, is_common_point=True)
                for idx in range(point_count)
            ]
        else:
            prev_line = grid.lines[prev_index]
            prev_prev_index = previous_main_line(grid, prev_index)
            prev_prev_line = grid.lines[prev_prev_index] if prev_prev_index != NOT_FOUND else None

            if point_count is None:
                point_count = len(common_points(prev_line))

            points = []
            for idx in range(point_count):
                prev_point = nth_common_point(prev_line, idx)
                if prev_point is None:
                    raise ContractViolationError(
                        f"Main line {prev_index} has no common point {idx} to extend",
                        operation="add_main_primary_line",
                    )

                x_diff, y_diff = grid.spacing, 0.0
                if prev_prev_line is not None:
                    prev_prev_point = nth_common_point(prev_prev_line, idx)
                    if prev_prev_point is not None:
                        x_diff = prev_point.x - prev_prev_point.x
                        y_diff = prev_point.y - prev_prev_point.y

                points.append(
                    GridPoint(prev_point.x + x_diff, prev_point.y + y_diff, is_common_point=True)
                )

        line = PrimaryLine(points=points)
        grid.lines.insert(at_index, line)

        self.logger.debug(
            "Main primary line added",
            extra={"primary_index": at_index, "points": len(points)},
        )
        return line

    def add_secondary_line(self) -> None:
        """
        Append one common point to every main line.

        Each line repeats the step between its own last two common points,
        falling back to ``(0, spacing)``.
        """
        grid = self.grid
        for line_index in main_line_indices(grid):
            line = grid.lines[line_index]
            commons = common_points(line)
            last_point = commons[-1]

            x_diff, y_diff = 0.0, grid.spacing
            if len(commons) >= 2:
                x_diff = last_point.x - commons[-2].x
                y_diff = last_point.y - commons[-2].y

            line.points.append(
                GridPoint(last_point.x + x_diff, last_point.y + y_diff, is_common_point=True)
            )

        self.logger.debug("Secondary line added")

    def add_subsidiary_lines_between(
        self,
        from_main_index: int,
        to_main_index: int,
        from_common_point_index: Optional[int] = None,
    ) -> None:
        """
        Create or extend the subsidiary lines between main lines.

        Without ``from_common_point_index`` the lines ``from_main_index`` to
        ``to_main_index`` must be consecutive main lines; ``subdivision - 1``
        interpolated lines are inserted between each adjacent pair, so the
        main line formerly at ``from_main_index + k`` ends up at
        ``from_main_index + k * subdivision``.

        With ``from_common_point_index`` the grid is already subdivided and
        every subsidiary line between the main lines in the range is
        regenerated from that slot on, which is how a new secondary line
        reaches the subsidiary lines.

        Args:
            from_main_index: Primary index of the first bounding main line
            to_main_index: Primary index of the last bounding main line
            from_common_point_index: First common slot to (re)generate
        """
        grid = self.grid
        subdivision = grid.subdivision

        if from_common_point_index is None:
            # Right to left, so indices of the pairs still to process stay valid
            for start in reversed(range(from_main_index, to_main_index)):
                from_line = grid.lines[start]
                to_line = grid.lines[start + 1]
                slots = min(len(common_points(from_line)), len(common_points(to_line)))

                new_lines: List[PrimaryLine] = []
                for step in range(1, subdivision):
                    fraction = step / subdivision
                    new_lines.append(
                        PrimaryLine(
                            points=[
                                interpolate(
                                    nth_common_point(from_line, slot),
                                    nth_common_point(to_line, slot),
                                    fraction,
                                )
                                for slot in range(slots)
                            ]
                        )
                    )
                grid.lines[start + 1:start + 1] = new_lines

            self.logger.debug(
                "Subsidiary lines created",
                extra={"from_main_index": from_main_index, "to_main_index": to_main_index},
            )
            return

        for line_index in main_line_indices(grid, from_main_index):
            following = next_main_line(grid, line_index)
            if following == NOT_FOUND or following > to_main_index:
                break

            from_line = grid.lines[line_index]
            to_line = grid.lines[following]
            slots = min(len(common_points(from_line)), len(common_points(to_line)))

            for subsidiary_index in range(line_index + 1, following):
                fraction = (subsidiary_index - line_index) / subdivision
                subsidiary = grid.lines[subsidiary_index]
                del subsidiary.points[from_common_point_index:]
                for slot in range(len(subsidiary.points), slots):
                    subsidiary.points.append(
                        interpolate(
                            nth_common_point(from_line, slot),
                            nth_common_point(to_line, slot),
                            fraction,
                        )
                    )

        self.logger.debug(
            "Subsidiary lines extended",
            extra={"from_common_point_index": from_common_point_index},
        )

    def add_refinement_points(
        self,
        from_main_index: Optional[int] = None,
        from_common_point_index: Optional[int] = None,
    ) -> None:
        """
        Insert refinement points between adjacent common points of main lines.

        Refinement points after the starting common point are regenerated, so
        calling this on an already refined stretch is harmless.

        Args:
            from_main_index: First main line to refine (defaults to all)
            from_common_point_index: First common slot to refine from
        """
        grid = self.grid
        subdivision = grid.subdivision
        start_slot = from_common_point_index or 0

        for line_index in main_line_indices(grid, from_main_index or 0):
            line = grid.lines[line_index]
            commons = common_points(line)
            if start_slot >= len(commons):
                continue

            keep_until = line.points.index(commons[start_slot])
            rebuilt = line.points[:keep_until + 1]
            for start, end in zip(commons[start_slot:], commons[start_slot + 1:]):
                for step in range(1, subdivision):
                    rebuilt.append(interpolate(start, end, step / subdivision))
                rebuilt.append(end)
            line.points[:] = rebuilt

        self.logger.debug(
            "Refinement points added",
            extra={
                "from_main_index": from_main_index,
                "from_common_point_index": from_common_point_index,
            },
        )

    def link_adjacency(self) -> None:
        """
        Recompute which points renderers draw as connected.

        Main lines connect consecutive points; each secondary slot connects
        its point on one primary line to the same slot on the next line.
        """
        grid = self.grid
        for point in grid.all_points():
            point.adjacency.clear()

        if not grid.lines:
            return

        slots = len(common_points(grid.lines[0]))
        for line_index, line in enumerate(grid.lines):
            if is_main_line(grid, line_index):
                for point, following in zip(line.points, line.points[1:]):
                    point.adjacency.append(following)

            if line_index + 1 >= len(grid.lines):
                continue
            for slot in range(slots):
                here = slot_point(grid, line_index, slot)
                there = slot_point(grid, line_index + 1, slot)
                if here is not None and there is not None:
                    here.adjacency.append(there)
