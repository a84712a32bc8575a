"""
Grid engine module exports.
"""

from gridmesh.grid.builder import GridBuilder
from gridmesh.grid.models import DragState, Grid, GridPoint, PrimaryLine
from gridmesh.grid.mutator import GridMutator
from gridmesh.grid.overlay import GridOverlayRenderer
from gridmesh.grid.session import EditSession
from gridmesh.grid.store import InMemoryGridStateStore, PerImageSetting
from gridmesh.grid.tool import GridTool

__all__ = [
    "Grid",
    "GridPoint",
    "PrimaryLine",
    "DragState",
    "GridBuilder",
    "GridMutator",
    "EditSession",
    "InMemoryGridStateStore",
    "PerImageSetting",
    "GridTool",
    "GridOverlayRenderer",
]
