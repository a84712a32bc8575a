"""
Read-only queries over grids and the compact export/import form.
"""

import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from gridmesh.core.interfaces import GridStateStore
from gridmesh.core.types import CompactPoint, CompactPrimaryLine, Point
from gridmesh.error_handling.exceptions import ValidationError
from gridmesh.grid.models import Grid, GridPoint, PrimaryLine, new_line_uuid
from gridmesh.grid.topology import nth_common_point


def grid_middle_point(grid: Optional[Grid]) -> Optional[Point]:
    """
    Midpoint between the first point of the first line and the last point of
    the last line.

    Returns:
        Tuple of (x, y), or None for an empty grid
    """
    if grid is None or not grid.lines:
        return None

    first_line = grid.lines[0]
    last_line = grid.lines[-1]
    if not first_line.points or not last_line.points:
        return None

    upper_left = first_line.points[0]
    bottom_right = last_line.points[-1]
    return (
        (upper_left.x + bottom_right.x) / 2,
        (upper_left.y + bottom_right.y) / 2,
    )


def grid_angle(grid: Optional[Grid]) -> Optional[int]:
    """
    Recover the grid orientation in whole degrees.

    Compares the midpoint of the first line with the grid middle point: for an
    unrotated grid the vector between them is horizontal.

    Returns:
        Angle in degrees, rounded half up, or None for an empty grid
    """
    middle = grid_middle_point(grid)
    if middle is None:
        return None

    first_line = grid.lines[0]
    top_left = first_line.points[0]
    bottom_left = first_line.points[-1]
    center_left_x = (top_left.x + bottom_left.x) / 2
    center_left_y = (top_left.y + bottom_left.y) / 2

    x_diff = middle[0] - center_left_x
    y_diff = middle[1] - center_left_y
    if x_diff == 0 and y_diff == 0:
        return 0

    degrees = math.degrees(math.atan2(y_diff, x_diff))
    return int(math.floor(degrees + 0.5))


def measured_spacing(grid: Optional[Grid]) -> Optional[float]:
    """Distance between the first two common points of the first line."""
    if grid is None or not grid.lines:
        return None

    first = nth_common_point(grid.lines[0], 0)
    second = nth_common_point(grid.lines[0], 1)
    if first is None or second is None:
        return None
    return math.hypot(second.x - first.x, second.y - first.y)


def has_grid_on_all_images(store: GridStateStore, image_ids: Iterable[str]) -> bool:
    """True iff every given image holds a non-empty grid."""
    for image_id in image_ids:
        grid = store.get(image_id)
        if grid is None or not grid.lines:
            return False
    return True


def export_compact(grid: Optional[Grid]) -> List[CompactPrimaryLine]:
    """
    Minimal geometric snapshot of a grid.

    Keeps each line's uuid and each point's position and common flag; drops
    adjacency, visibility and colour.
    """
    if grid is None:
        return []

    return [
        CompactPrimaryLine(
            uuid=line.uuid,
            points=[
                CompactPoint(x=point.x, y=point.y, is_common_point=point.is_common_point)
                for point in line.points
            ],
        )
        for line in grid.lines
    ]


def clone_lines(lines: Sequence[Any]) -> List[PrimaryLine]:
    """
    Deep-copy primary lines, giving every copy a fresh uuid.

    Args:
        lines: Full ``PrimaryLine`` objects, ``CompactPrimaryLine`` models or
            compact dicts (``{"uuid", "points": [{"x", "y", "isCommonPoint"}]}``)

    Returns:
        Independent lines; adjacency is left empty for the builder to relink
    """
    cloned: List[PrimaryLine] = []

    for entry in lines:
        if isinstance(entry, PrimaryLine):
            cloned.append(
                PrimaryLine(
                    uuid=new_line_uuid(),
                    visible=entry.visible,
                    color=entry.color,
                    points=[
                        GridPoint(
                            point.x,
                            point.y,
                            is_common_point=point.is_common_point,
                            active=point.active,
                            highlight=point.highlight,
                        )
                        for point in entry.points
                    ],
                )
            )
            continue

        if not isinstance(entry, CompactPrimaryLine):
            try:
                entry = CompactPrimaryLine.model_validate(entry)
            except PydanticValidationError as exc:
                raise ValidationError(
                    "Invalid primary line data",
                    validation_type="compact_line",
                    failed_rules=[error["msg"] for error in exc.errors()],
                    cause=exc,
                ) from exc

        cloned.append(
            PrimaryLine(
                uuid=new_line_uuid(),
                points=[
                    GridPoint(point.x, point.y, is_common_point=point.is_common_point)
                    for point in entry.points
                ],
            )
        )

    return cloned


def find_handle(grid: Optional[Grid], position: Point, radius: float) -> Optional[Tuple[int, int]]:
    """
    Locate the point closest to ``position`` within ``radius``.

    Returns:
        Tuple of (line_index, point_index), or None if nothing is close enough
    """
    if grid is None:
        return None

    best: Optional[Tuple[int, int]] = None
    best_distance = radius
    for line_index, line in enumerate(grid.lines):
        for point_index, point in enumerate(line.points):
            distance = math.hypot(point.x - position[0], point.y - position[1])
            if distance <= best_distance:
                best = (line_index, point_index)
                best_distance = distance
    return best
