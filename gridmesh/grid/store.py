"""
Per-image grid storage and per-image setting overrides.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from gridmesh.core.interfaces import GridStateStore
from gridmesh.grid.models import Grid


class InMemoryGridStateStore(GridStateStore):
    """Keeps one grid per image id in a dictionary."""

    def __init__(self) -> None:
        self._grids: Dict[str, Grid] = {}

    def get(self, image_id: str) -> Optional[Grid]:
        return self._grids.get(image_id)

    def put(self, image_id: str, grid: Grid) -> None:
        self._grids[image_id] = grid

    def remove(self, image_id: str) -> None:
        self._grids.pop(image_id, None)

    def clear(self) -> None:
        self._grids.clear()

    def image_ids(self) -> List[str]:
        return list(self._grids)


@dataclass
class PerImageSetting:
    """
    A setting with a global value and optional per-image overrides.

    Reading for an image returns its override when one exists, otherwise the
    global value.
    """

    global_value: bool
    overrides: Dict[str, bool] = field(default_factory=dict)

    def get(self, image_id: Optional[str]) -> bool:
        if image_id is not None and image_id in self.overrides:
            return self.overrides[image_id]
        return self.global_value

    def has_override(self, image_id: Optional[str]) -> bool:
        return image_id in self.overrides

    def set(self, image_id: Optional[str], value: bool) -> None:
        """Set both the global value and the override for ``image_id``."""
        self.global_value = value
        if image_id is not None:
            self.overrides[image_id] = value

    def clear(self, image_id: Optional[str]) -> None:
        self.overrides.pop(image_id, None)
