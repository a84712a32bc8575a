"""
Core interfaces between the grid engine and its host.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from gridmesh.core.types import GridSnapshot, Point

if TYPE_CHECKING:
    from gridmesh.grid.models import Grid


class GridHost(ABC):
    """Abstract interface implemented by the application embedding the engine."""

    @abstractmethod
    def repaint(self) -> None:
        """Re-render the current image before the next user input is processed."""
        pass

    @abstractmethod
    def notify_completed(self, snapshot: GridSnapshot) -> None:
        """
        Receive the grid state after a completed logical edit.

        Args:
            snapshot: State and configuration of the edited grid
        """
        pass

    @abstractmethod
    def notify_removed(self, image_id: Optional[str]) -> None:
        """
        Receive notice that the grid on an image was removed.

        Args:
            image_id: Image whose grid was removed
        """
        pass

    @abstractmethod
    def pixel_to_image_space(self, screen_point: Any) -> Point:
        """
        Convert a screen point to image-space coordinates.

        Args:
            screen_point: Point in canvas/screen coordinates

        Returns:
            Tuple of (x, y) image coordinates
        """
        pass


class GridStateStore(ABC):
    """Abstract per-image storage holding at most one grid per image."""

    @abstractmethod
    def get(self, image_id: str) -> Optional["Grid"]:
        """Get the grid stored for an image, or None."""
        pass

    @abstractmethod
    def put(self, image_id: str, grid: "Grid") -> None:
        """Store the grid for an image, replacing any existing one."""
        pass

    @abstractmethod
    def remove(self, image_id: str) -> None:
        """Forget the grid for an image; missing images are ignored."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget all grids."""
        pass

    @abstractmethod
    def image_ids(self) -> List[str]:
        """Get ids of images that currently hold a grid."""
        pass
