"""
Host-facing grid tool.

Wires the grid engine to a host application: one grid per image, placement
and drag sessions, property-style setters and the per-image state accessors.
Every completed logical edit triggers ``GridHost.repaint()`` followed by
``GridHost.notify_completed()``.
"""

from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from gridmesh.config.settings import Settings, get_settings
from gridmesh.core.interfaces import GridHost, GridStateStore
from gridmesh.core.types import EditMode, GridEventType, GridSnapshot, Point
from gridmesh.error_handling.validation import ensure_bool, ensure_point, is_usable_number
from gridmesh.grid.builder import GridBuilder
from gridmesh.grid.models import Grid, PrimaryLine
from gridmesh.grid.mutator import GridMutator
from gridmesh.grid.query import (
    clone_lines,
    export_compact,
    find_handle,
    grid_angle,
    grid_middle_point,
    has_grid_on_all_images,
    measured_spacing,
)
from gridmesh.grid.session import EditSession
from gridmesh.grid.store import InMemoryGridStateStore, PerImageSetting
from gridmesh.grid.topology import (
    find_invariant_violations,
    logical_primary_line_count,
    logical_secondary_line_count,
    total_primary_line_count,
    total_secondary_line_count,
)
from gridmesh.monitoring.logger import get_logger, log_grid_event


class GridTool:
    """Grid annotation tool bound to one host."""

    name = "Grid"

    def __init__(
        self,
        host: GridHost,
        store: Optional[GridStateStore] = None,
        settings: Optional[Settings] = None,
        image_id: str = "default",
    ) -> None:
        """
        Initialize the grid tool.

        Args:
            host: Application callbacks (repaint, notifications, coordinates)
            store: Per-image grid storage, defaults to an in-memory store
            settings: Engine settings, defaults to the cached settings
            image_id: Image shown when the tool is created
        """
        self.host = host
        self.store = store if store is not None else InMemoryGridStateStore()
        self.settings = settings if settings is not None else get_settings()
        self.image_id = image_id
        self.session = EditSession()
        self.refinement = PerImageSetting(self.settings.grid_refinement_enabled)
        self._move_one_handle_only = False
        self.logger = get_logger("grid.tool", tool=self.name)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def add_new_measurement(self, position: Any) -> bool:
        """
        Place a new grid with its first point at ``position``.

        Does nothing when the current image already has a grid.

        Args:
            position: Image-space anchor as (x, y) or an object with x/y

        Returns:
            True if a grid was placed
        """
        if self._grid() is not None:
            return False

        anchor = ensure_point(position, "position")
        if not all(is_usable_number(value) for value in anchor):
            return False

        grid = self._new_grid()
        self.session.start_drawing(grid)
        self.store.put(self.image_id, grid)

        builder = GridBuilder(grid)
        for line_index in range(self.settings.grid_default_primary_lines):
            builder.add_main_primary_line(
                line_index,
                anchor=anchor,
                point_count=self.settings.grid_default_secondary_lines,
            )
        builder.link_adjacency()

        refined = self.refinement.get(self.image_id)
        if refined:
            self._mutator(grid).set_refinement_enabled(True)
        self.refinement.set(self.image_id, refined)

        log_grid_event(
            GridEventType.PLACED.value,
            self.image_id,
            {"anchor": anchor, "primary_lines": total_primary_line_count(grid)},
        )
        self._end_drawing()
        return True

    # ------------------------------------------------------------------
    # Drag handling
    # ------------------------------------------------------------------

    def handle_selected(self, line_index: int, point_index: int) -> bool:
        """
        Start dragging the point at (line_index, point_index).

        Returns:
            True if a drag session started
        """
        grid = self._grid()
        if grid is None:
            return False

        self.session.start_modifying(grid, line_index, point_index)
        self.host.repaint()
        return True

    def select_handle_near(self, screen_point: Any) -> bool:
        """
        Start dragging the handle closest to a screen point, if one is near.

        Returns:
            True if a drag session started
        """
        grid = self._grid()
        if grid is None:
            return False

        image_point = self.host.pixel_to_image_space(screen_point)
        hit = find_handle(grid, image_point, self.settings.grid_hit_radius)
        if hit is None:
            return False
        return self.handle_selected(*hit)

    def drag_to(self, position: Any) -> bool:
        """
        Continue the active drag to ``position``.

        Moves only the held point in move-one-handle mode, otherwise the whole
        grid follows the held point.

        Returns:
            True if anything moved
        """
        if self.session.mode != EditMode.MODIFYING:
            return False

        grid = self.session.grid
        line = grid.lines[grid.drag_state.active_line_index]
        line.active = True
        line.highlight = True

        mutator = self._mutator(grid)
        if self._move_one_handle_only:
            moved = mutator.move_active_point(position)
        else:
            moved = mutator.set_offset(position, using_active_drag=True)

        self.host.repaint()
        return moved

    def release(self) -> bool:
        """End the active drag and report the edit."""
        if self.session.mode != EditMode.MODIFYING:
            return False
        self._end_drawing()
        return True

    # ------------------------------------------------------------------
    # Lifecycle callbacks
    # ------------------------------------------------------------------

    def new_image_callback(self, image_id: str) -> None:
        """
        Switch to another image.

        Any in-flight session is finalized first. The new image's grid then
        follows the global refinement flag unless the image has an override.
        """
        if self.session.finish():
            self.host.repaint()

        self.image_id = image_id

        grid = self._grid()
        if grid is None or self.refinement.has_override(image_id):
            return

        if self._mutator(grid).set_refinement_enabled(self.refinement.global_value):
            self.host.repaint()
            self._fire_completed()

    def passive_callback(self) -> None:
        self._close_session()

    def enabled_callback(self) -> None:
        self._close_session()

    def disabled_callback(self) -> None:
        self._close_session()

    def _close_session(self) -> None:
        if self.session.is_active:
            self._end_drawing()

    # ------------------------------------------------------------------
    # Grid configuration
    # ------------------------------------------------------------------

    @property
    def primary_line_count(self) -> Optional[int]:
        grid = self._grid()
        return logical_primary_line_count(grid) if grid else None

    @primary_line_count.setter
    def primary_line_count(self, value: Any) -> None:
        self._edit(lambda mutator: mutator.set_primary_line_count(value))

    @property
    def total_primary_line_count(self) -> Optional[int]:
        grid = self._grid()
        return total_primary_line_count(grid) if grid else None

    @property
    def secondary_line_count(self) -> Optional[int]:
        grid = self._grid()
        return logical_secondary_line_count(grid) if grid else None

    @secondary_line_count.setter
    def secondary_line_count(self, value: Any) -> None:
        self._edit(lambda mutator: mutator.set_secondary_line_count(value))

    @property
    def total_secondary_line_count(self) -> Optional[int]:
        grid = self._grid()
        return total_secondary_line_count(grid) if grid else None

    @property
    def spacing(self) -> Optional[float]:
        grid = self._grid()
        return grid.spacing if grid else None

    @spacing.setter
    def spacing(self, value: Any) -> None:
        self._edit(lambda mutator: mutator.set_spacing(value))

    @property
    def refinement_enabled(self) -> Optional[bool]:
        grid = self._grid()
        return grid.refinement_enabled if grid else None

    @refinement_enabled.setter
    def refinement_enabled(self, value: Any) -> None:
        value = ensure_bool(value, "refinement_enabled")
        self._edit(lambda mutator: mutator.set_refinement_enabled(value))
        self.refinement.set(self.image_id, value)

    @property
    def angle(self) -> Optional[int]:
        return grid_angle(self._grid())

    @angle.setter
    def angle(self, value: Any) -> None:
        self._edit(lambda mutator: mutator.set_angle(value))

    @property
    def move_one_handle_only(self) -> bool:
        return self._move_one_handle_only

    @move_one_handle_only.setter
    def move_one_handle_only(self, value: Any) -> None:
        self._move_one_handle_only = ensure_bool(value, "move_one_handle_only")
        self.host.repaint()
        self._fire_completed()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def rotate(self, angle: Any) -> bool:
        """Rotate the grid by ``angle`` degrees about its middle point."""
        return self._edit(lambda mutator: mutator.rotate(angle))

    def set_offset(self, position: Any) -> bool:
        """Move the whole grid so its first point lands on ``position``."""
        return self._edit(lambda mutator: mutator.set_offset(position))

    def remove_grid(self) -> None:
        """Remove the grid from the current image, if it has one."""
        grid = self.store.get(self.image_id)
        if grid is None:
            return

        self.session.finish()
        self._mutator(grid).clear()
        self.store.remove(self.image_id)
        self.refinement.clear(self.image_id)

        self.host.repaint()
        self.host.notify_removed(self.image_id)
        log_grid_event(GridEventType.REMOVED.value, self.image_id)

    def clear_all_states(self) -> None:
        """Forget the grids of every image."""
        self.session.finish()
        self.store.clear()
        self.host.repaint()
        self.logger.info("All grid states cleared")

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def grid_middle_point(self) -> Optional[Point]:
        return grid_middle_point(self._grid())

    def get_state_and_config(self) -> GridSnapshot:
        """Snapshot of the current image's grid and tool configuration."""
        grid = self._grid()
        return GridSnapshot(
            image_id=self.image_id,
            refinement_enabled=(
                grid.refinement_enabled if grid else self.refinement.get(self.image_id)
            ),
            subdivision=grid.subdivision if grid else self.settings.grid_subdivision,
            spacing=grid.spacing if grid else None,
            primary_line_count=logical_primary_line_count(grid) if grid else 0,
            secondary_line_count=logical_secondary_line_count(grid) if grid else 0,
            angle=grid_angle(grid),
            move_one_handle_only=self._move_one_handle_only,
            lines=export_compact(grid),
        )

    def get_state_for_image(
        self, image_id: str, compact: bool = False
    ) -> Union[List[dict], List[PrimaryLine]]:
        """
        Lines stored for an image.

        Args:
            image_id: Image to read
            compact: Return the compact export shape instead of the live lines

        Returns:
            Compact dicts or live ``PrimaryLine`` objects; empty when the image
            has no grid
        """
        grid = self.store.get(image_id)
        if grid is None:
            return []

        if not compact:
            return grid.lines

        return [line.model_dump(by_alias=True) for line in export_compact(grid)]

    def set_state_for_images(
        self,
        primary_lines: Sequence[Any],
        image_ids: Iterable[str],
        has_refinement_points: bool = False,
    ) -> None:
        """
        Copy a grid onto several images.

        Each image receives its own deep copy with freshly generated line
        uuids, and its refinement flag is recorded.

        Args:
            primary_lines: Compact or full lines to copy
            image_ids: Target images
            has_refinement_points: Whether the lines carry refinement structure
        """
        has_refinement_points = ensure_bool(has_refinement_points, "has_refinement_points")
        image_ids = list(image_ids)

        for image_id in image_ids:
            grid = self._new_grid()
            grid.lines = clone_lines(primary_lines)
            grid.refinement_enabled = has_refinement_points

            spacing = measured_spacing(grid)
            if spacing is not None and is_usable_number(spacing, 1.0):
                grid.spacing = spacing

            GridBuilder(grid).link_adjacency()
            self._log_violations(grid, image_id)

            if image_id == self.image_id:
                self.session.finish()
            self.store.put(image_id, grid)
            self.refinement.set(image_id, has_refinement_points)

        self.logger.info(
            "Grid copied to images",
            extra={"image_ids": image_ids, "has_refinement_points": has_refinement_points},
        )

        if self.image_id in image_ids:
            self.host.repaint()
        self._fire_completed()

    def has_grid_for_images(self, image_ids: Iterable[str]) -> bool:
        """True iff every given image holds a grid."""
        return has_grid_on_all_images(self.store, image_ids)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _grid(self) -> Optional[Grid]:
        grid = self.store.get(self.image_id)
        if grid is None or not grid.lines:
            return None
        return grid

    def _new_grid(self) -> Grid:
        return Grid(
            subdivision=self.settings.grid_subdivision,
            spacing=self.settings.grid_default_spacing,
        )

    def _mutator(self, grid: Grid) -> GridMutator:
        return GridMutator(
            grid,
            default_spacing=self.settings.grid_default_spacing,
            verify_invariants=self.settings.debug_mode,
        )

    def _edit(self, operation: Callable[[GridMutator], bool]) -> bool:
        # Edits move or drop lines, so an in-flight drag must not outlive them
        self.session.finish()

        # An empty stand-in grid still validates argument types
        grid = self._grid() or self._new_grid()
        changed = operation(self._mutator(grid))
        if changed:
            self.host.repaint()
            self._fire_completed()
        return changed

    def _end_drawing(self) -> None:
        self.session.finish()
        self.host.repaint()
        self._fire_completed()

    def _fire_completed(self) -> None:
        snapshot = self.get_state_and_config()
        self.host.notify_completed(snapshot)
        log_grid_event(
            GridEventType.COMPLETED.value,
            self.image_id,
            {
                "primary_line_count": snapshot.primary_line_count,
                "secondary_line_count": snapshot.secondary_line_count,
                "refinement_enabled": snapshot.refinement_enabled,
            },
        )

    def _log_violations(self, grid: Grid, image_id: str) -> None:
        if not self.settings.debug_mode:
            return
        violations = find_invariant_violations(grid)
        if violations:
            self.logger.warning(
                "Copied grid is inconsistent",
                extra={"image_id": image_id, "violations": violations},
            )
