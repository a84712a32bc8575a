"""
Topology index: positional classification of lines and points.

All helpers are pure. With refinement off every line is a main line and every
point a common point. With refinement on, main lines sit at primary indices
divisible by the subdivision factor and carry common points at every
``subdivision``-th slot with refinement points between them; the lines in
between are subsidiary lines holding one refinement point per common slot.

Counts are always derived from the line list, never stored.
"""

from typing import List, Optional, Tuple

from gridmesh.grid.models import Grid, GridPoint, PrimaryLine

NOT_FOUND = -1


def is_main_line(grid: Grid, line_index: int) -> bool:
    """True if the line at ``line_index`` carries common points."""
    if not grid.refinement_enabled:
        return True
    return line_index % grid.subdivision == 0


def is_common_point(grid: Grid, line_index: int, point_index: int) -> bool:
    """True if slot ``point_index`` of line ``line_index`` holds a common point."""
    if not is_main_line(grid, line_index):
        return False
    if not grid.refinement_enabled:
        return True
    return point_index % grid.subdivision == 0


def total_primary_line_count(grid: Grid) -> int:
    return len(grid.lines)


def logical_primary_line_count(grid: Grid) -> int:
    """Number of main primary lines."""
    return len(main_line_indices(grid))


def total_secondary_line_count(grid: Grid) -> int:
    """Number of points on the first line, refinement points included."""
    if not grid.lines:
        return 0
    return len(grid.lines[0].points)


def logical_secondary_line_count(grid: Grid) -> int:
    """Number of common points on the first line."""
    if not grid.lines:
        return 0
    return len(common_point_indices(grid, 0))


def main_line_indices(grid: Grid, start: int = 0) -> List[int]:
    """Primary indices of all main lines at or after ``start``."""
    return [
        index
        for index in range(max(start, 0), len(grid.lines))
        if is_main_line(grid, index)
    ]


def common_point_indices(grid: Grid, line_index: int) -> List[int]:
    """Slots of ``grid.lines[line_index]`` holding common points."""
    line = grid.lines[line_index]
    return [
        point_index
        for point_index in range(len(line.points))
        if is_common_point(grid, line_index, point_index)
    ]


def next_main_line(grid: Grid, from_index: int) -> int:
    """Index of the first main line after ``from_index``, or NOT_FOUND."""
    index = from_index + 1
    while index < len(grid.lines):
        if is_main_line(grid, index):
            return index
        index += 1
    return NOT_FOUND


def previous_main_line(grid: Grid, from_index: int) -> int:
    """Index of the last main line before ``from_index``, or NOT_FOUND."""
    index = min(from_index, len(grid.lines)) - 1
    while index >= 0:
        if is_main_line(grid, index):
            return index
        index -= 1
    return NOT_FOUND


def common_points(line: PrimaryLine) -> List[GridPoint]:
    """Common points of a line in order."""
    return [point for point in line.points if point.is_common_point]


def nth_common_point(line: PrimaryLine, n: int) -> Optional[GridPoint]:
    """
    Return the n-th (0-based) common point of a line.

    Scans the stored points counting only common ones, so it stays correct
    while a builder is halfway through inserting refinement points.

    Args:
        line: Line to scan
        n: Ordinal of the common point

    Returns:
        The point, or None if the line has fewer common points
    """
    if n < 0:
        return None
    seen = -1
    for point in line.points:
        if point.is_common_point:
            seen += 1
            if seen == n:
                return point
    return None


def slot_point(grid: Grid, line_index: int, slot: int) -> Optional[GridPoint]:
    """
    Point of a line lying on secondary line ``slot``.

    Main lines are looked up by common-point ordinal; subsidiary lines hold
    exactly one point per slot.
    """
    line = grid.lines[line_index]
    if is_main_line(grid, line_index):
        return nth_common_point(line, slot)
    if 0 <= slot < len(line.points):
        return line.points[slot]
    return None


def logical_position(grid: Grid, line_index: int, point_index: int) -> Tuple[float, float]:
    """
    Position of a stored point in common-point units.

    Returns (primary, secondary): how many main-line steps from the first line
    and how many common-point steps from the first point the point lies.
    Refinement points land on fractional positions.
    """
    if not grid.refinement_enabled:
        return float(line_index), float(point_index)

    primary = line_index / grid.subdivision
    if is_main_line(grid, line_index):
        return primary, point_index / grid.subdivision
    return primary, float(point_index)


def find_invariant_violations(grid: Grid) -> List[str]:
    """
    Check the structural invariants of a grid.

    Returns:
        Human-readable descriptions of every violation; empty when consistent
        or when the grid has been removed
    """
    if not grid.lines:
        return []

    violations: List[str] = []
    subdivision = grid.subdivision

    if len(grid.lines) < 2:
        violations.append(f"grid has {len(grid.lines)} primary line(s), expected at least 2")

    if grid.refinement_enabled and (len(grid.lines) - 1) % subdivision != 0:
        violations.append(
            f"{len(grid.lines)} primary lines cannot end on a main line "
            f"with subdivision {subdivision}"
        )

    expected_commons = len(common_points(grid.lines[0]))
    if expected_commons < 2:
        violations.append(
            f"first line has {expected_commons} common point(s), expected at least 2"
        )

    for line_index, line in enumerate(grid.lines):
        if len(line.points) < 2:
            violations.append(f"line {line_index} has {len(line.points)} point(s)")

        if is_main_line(grid, line_index):
            if grid.refinement_enabled:
                expected_length = (expected_commons - 1) * subdivision + 1
            else:
                expected_length = expected_commons
            if len(line.points) != expected_length:
                violations.append(
                    f"main line {line_index} has {len(line.points)} points, "
                    f"expected {expected_length}"
                )
            for point_index, point in enumerate(line.points):
                if point.is_common_point != is_common_point(grid, line_index, point_index):
                    violations.append(
                        f"point {point_index} of main line {line_index} is misclassified"
                    )
            commons = len(common_points(line))
            if commons != expected_commons:
                violations.append(
                    f"main line {line_index} has {commons} common points, "
                    f"expected {expected_commons}"
                )
        else:
            if any(point.is_common_point for point in line.points):
                violations.append(f"subsidiary line {line_index} holds common points")
            if len(line.points) != expected_commons:
                violations.append(
                    f"subsidiary line {line_index} has {len(line.points)} points, "
                    f"expected {expected_commons}"
                )

    return violations
