"""
Grid factories and coordinate dumps shared by the test suites.
"""

from typing import Tuple

from gridmesh.grid.builder import GridBuilder
from gridmesh.grid.models import Grid


def build_grid(
    primary: int = 3,
    secondary: int = 3,
    anchor: Tuple[float, float] = (0.0, 0.0),
    spacing: float = 5.0,
    subdivision: int = 4,
) -> Grid:
    """Build an unrefined grid the way placement does."""
    grid = Grid(subdivision=subdivision, spacing=spacing)
    builder = GridBuilder(grid)
    for _ in range(primary):
        builder.add_main_primary_line(anchor=anchor, point_count=secondary)
    builder.link_adjacency()
    return grid


def coordinates(grid: Grid):
    """All point coordinates, line by line."""
    return [[(point.x, point.y) for point in line.points] for line in grid.lines]


def common_coordinates(grid: Grid):
    """Coordinates of common points only, line by line, skipping subsidiary lines."""
    result = []
    for line in grid.lines:
        commons = [(point.x, point.y) for point in line.points if point.is_common_point]
        if commons:
            result.append(commons)
    return result
