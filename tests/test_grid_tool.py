"""
Unit tests for the host-facing grid tool.
"""

from unittest.mock import MagicMock

import pytest

from helpers import build_grid, coordinates

from gridmesh.config.settings import Settings
from gridmesh.core.interfaces import GridHost
from gridmesh.core.types import EditMode, GridSnapshot
from gridmesh.error_handling.exceptions import InvalidTypeError
from gridmesh.grid.store import InMemoryGridStateStore
from gridmesh.grid.tool import GridTool


@pytest.fixture
def host():
    """Mock host application."""
    mock_host = MagicMock(spec=GridHost)
    mock_host.pixel_to_image_space.side_effect = lambda point: point
    return mock_host


@pytest.fixture
def settings():
    """Small default grids, refinement off."""
    return Settings(
        grid_default_primary_lines=3,
        grid_default_secondary_lines=3,
        grid_default_spacing=5.0,
        grid_refinement_enabled=False,
        debug_mode=True,
    )


@pytest.fixture
def tool(host, settings):
    """Tool on image "a" without a grid."""
    return GridTool(host, store=InMemoryGridStateStore(), settings=settings, image_id="a")


@pytest.fixture
def placed_tool(tool, host):
    """Tool with a 3 x 3 grid placed at the origin; host mock reset."""
    tool.add_new_measurement((0, 0))
    host.reset_mock()
    return tool


class TestPlacement:
    """Tests for placing a new grid."""

    def test_places_default_grid(self, tool, host):
        """Placement builds the default grid and reports it once."""
        assert tool.add_new_measurement((0, 0)) is True

        assert tool.primary_line_count == 3
        assert tool.secondary_line_count == 3
        assert tool.spacing == 5.0
        assert coordinates(tool.store.get("a"))[1] == [(5.0, 0.0), (5.0, 5.0), (5.0, 10.0)]
        assert tool.session.mode == EditMode.IDLE
        host.repaint.assert_called()
        host.notify_completed.assert_called_once()
        snapshot = host.notify_completed.call_args[0][0]
        assert isinstance(snapshot, GridSnapshot)
        assert snapshot.primary_line_count == 3

    def test_one_grid_per_image(self, placed_tool, host):
        """A second placement on the same image is ignored."""
        assert placed_tool.add_new_measurement((50, 50)) is False
        host.notify_completed.assert_not_called()

    def test_placement_follows_refinement_flag(self, tool):
        """New grids are refined when the global flag is on."""
        tool.refinement.global_value = True

        tool.add_new_measurement((0, 0))

        assert tool.refinement_enabled is True
        assert tool.total_primary_line_count == 9
        assert tool.refinement.has_override("a")

    def test_rejects_non_point(self, tool):
        """The anchor must be a point."""
        with pytest.raises(InvalidTypeError):
            tool.add_new_measurement("origin")

    def test_rejects_nan_anchor(self, tool):
        """A NaN anchor places nothing."""
        assert tool.add_new_measurement((float("nan"), 0)) is False
        assert tool.store.get("a") is None


class TestProperties:
    """Tests for property-style configuration."""

    def test_no_grid(self, tool):
        """Getters return None without a grid."""
        assert tool.primary_line_count is None
        assert tool.total_primary_line_count is None
        assert tool.secondary_line_count is None
        assert tool.total_secondary_line_count is None
        assert tool.spacing is None
        assert tool.refinement_enabled is None
        assert tool.angle is None
        assert tool.grid_middle_point() is None

    def test_type_checked_without_grid(self, tool):
        """Wrong types raise even when there is no grid yet."""
        with pytest.raises(InvalidTypeError):
            tool.primary_line_count = "4"
        with pytest.raises(InvalidTypeError):
            tool.move_one_handle_only = "yes"

    def test_setters_notify(self, placed_tool, host):
        """Effective edits repaint and report."""
        placed_tool.primary_line_count = 4
        placed_tool.secondary_line_count = 5

        assert placed_tool.primary_line_count == 4
        assert placed_tool.secondary_line_count == 5
        assert host.notify_completed.call_count == 2

    def test_ignored_values_do_not_notify(self, placed_tool, host):
        """No-op edits stay silent."""
        placed_tool.primary_line_count = 1
        placed_tool.spacing = 0

        host.notify_completed.assert_not_called()

    def test_spacing(self, placed_tool):
        """Spacing rescales the grid."""
        placed_tool.spacing = 10

        assert placed_tool.spacing == 10.0
        assert coordinates(placed_tool.store.get("a"))[1] == [
            (10.0, 0.0), (10.0, 10.0), (10.0, 20.0),
        ]

    def test_refinement(self, placed_tool):
        """Refinement changes totals but not logical counts."""
        placed_tool.refinement_enabled = True

        assert placed_tool.total_primary_line_count == 9
        assert placed_tool.total_secondary_line_count == 9
        assert placed_tool.primary_line_count == 3
        assert placed_tool.refinement.get("a") is True

        with pytest.raises(InvalidTypeError):
            placed_tool.refinement_enabled = "yes"

    def test_angle(self, placed_tool):
        """The angle setter rotates to an absolute orientation."""
        placed_tool.angle = 30
        assert placed_tool.angle == 30

        placed_tool.rotate(-30)
        assert placed_tool.angle == 0

    def test_set_offset(self, placed_tool):
        """The grid moves so its first point lands on the target."""
        assert placed_tool.set_offset((7, 8)) is True
        assert coordinates(placed_tool.store.get("a"))[0][0] == (7.0, 8.0)

    def test_move_one_handle_only(self, placed_tool, host):
        """Toggling the drag mode repaints and reports."""
        placed_tool.move_one_handle_only = True

        assert placed_tool.move_one_handle_only is True
        host.notify_completed.assert_called_once()
        assert host.notify_completed.call_args[0][0].move_one_handle_only is True


class TestDragging:
    """Tests for handle drags."""

    def test_drag_moves_whole_grid(self, placed_tool, host):
        """By default the grid follows the held point."""
        assert placed_tool.handle_selected(1, 1) is True
        assert placed_tool.drag_to((50, 50)) is True

        grid = placed_tool.store.get("a")
        assert coordinates(grid)[0][0] == (45.0, 45.0)
        assert grid.lines[1].active is True
        host.notify_completed.assert_not_called()

        assert placed_tool.release() is True
        host.notify_completed.assert_called_once()
        assert grid.lines[1].active is False
        assert placed_tool.session.mode == EditMode.IDLE

    def test_drag_single_handle(self, placed_tool):
        """In move-one-handle mode only the held point moves."""
        placed_tool.move_one_handle_only = True
        placed_tool.handle_selected(2, 2)

        placed_tool.drag_to((30, 31))
        placed_tool.release()

        grid = placed_tool.store.get("a")
        assert coordinates(grid)[2][2] == (30.0, 31.0)
        assert coordinates(grid)[0][0] == (0.0, 0.0)

    def test_select_handle_near(self, placed_tool, host):
        """Hit-testing converts the screen point and picks the nearest handle."""
        assert placed_tool.select_handle_near((5.2, 10.3)) is True

        host.pixel_to_image_space.assert_called_once_with((5.2, 10.3))
        drag_state = placed_tool.store.get("a").drag_state
        assert (drag_state.active_line_index, drag_state.active_point_index) == (1, 2)

    def test_select_handle_misses(self, placed_tool):
        """Clicking away from every handle starts nothing."""
        assert placed_tool.select_handle_near((200, 200)) is False
        assert placed_tool.session.mode == EditMode.IDLE

    def test_drag_without_session(self, placed_tool):
        """Drag and release need an active drag."""
        assert placed_tool.drag_to((1, 1)) is False
        assert placed_tool.release() is False

    def test_handle_selected_without_grid(self, tool):
        """There is nothing to drag without a grid."""
        assert tool.handle_selected(0, 0) is False

    def test_structural_edit_ends_drag(self, placed_tool):
        """Resizing during a drag ends it, so no stale handle is held."""
        placed_tool.handle_selected(2, 2)

        placed_tool.primary_line_count = 2

        assert placed_tool.session.mode == EditMode.IDLE
        assert placed_tool.store.get("a").drag_state is None
        assert placed_tool.drag_to((50, 50)) is False
        assert placed_tool.total_primary_line_count == 2

    def test_refinement_toggle_ends_drag(self, placed_tool):
        """Refining during a drag releases the held handle."""
        placed_tool.handle_selected(1, 1)

        placed_tool.refinement_enabled = True

        assert placed_tool.session.mode == EditMode.IDLE
        assert placed_tool.store.get("a").drag_state is None

    def test_mode_change_finalizes_drag(self, placed_tool, host):
        """Leaving the active tool mode ends the drag and reports it."""
        placed_tool.handle_selected(0, 0)

        placed_tool.passive_callback()

        assert placed_tool.session.mode == EditMode.IDLE
        host.notify_completed.assert_called_once()

    def test_mode_change_when_idle(self, placed_tool, host):
        """Mode changes without a session are silent."""
        placed_tool.enabled_callback()
        placed_tool.disabled_callback()

        host.notify_completed.assert_not_called()


class TestImageSwitching:
    """Tests for new_image_callback."""

    def test_switch_finalizes_session(self, placed_tool):
        """Switching images ends the in-flight drag."""
        placed_tool.handle_selected(0, 0)

        placed_tool.new_image_callback("b")

        assert placed_tool.session.mode == EditMode.IDLE
        assert placed_tool.image_id == "b"
        assert placed_tool.store.get("a").drag_state is None
        assert placed_tool.primary_line_count is None

    def test_grid_follows_global_refinement(self, placed_tool, host):
        """Images without an override adopt the global refinement flag."""
        placed_tool.store.put("b", build_grid())
        placed_tool.refinement_enabled = True

        host.reset_mock()

        placed_tool.new_image_callback("b")

        assert placed_tool.refinement_enabled is True
        assert placed_tool.total_primary_line_count == 9
        host.notify_completed.assert_called_once()
        snapshot = host.notify_completed.call_args[0][0]
        assert snapshot.image_id == "b"
        assert snapshot.refinement_enabled is True

    def test_override_is_kept(self, placed_tool, host):
        """Images with an override keep their own flag."""
        placed_tool.store.put("b", build_grid())
        placed_tool.refinement.overrides["b"] = False
        placed_tool.refinement_enabled = True

        host.reset_mock()

        placed_tool.new_image_callback("b")

        assert placed_tool.refinement_enabled is False
        host.notify_completed.assert_not_called()


class TestRemoval:
    """Tests for remove_grid and clear_all_states."""

    def test_remove_grid(self, placed_tool, host):
        """Removal forgets the grid and notifies the host."""
        placed_tool.remove_grid()

        assert placed_tool.store.get("a") is None
        assert placed_tool.has_grid_for_images(["a"]) is False
        host.notify_removed.assert_called_once_with("a")
        assert placed_tool.add_new_measurement((1, 1)) is True

    def test_remove_without_grid(self, tool, host):
        """Removing from an image without a grid is silent."""
        tool.remove_grid()

        host.notify_removed.assert_not_called()
        host.repaint.assert_not_called()

    def test_clear_all_states(self, placed_tool):
        """Every image loses its grid."""
        placed_tool.store.put("b", build_grid())

        placed_tool.clear_all_states()

        assert placed_tool.store.image_ids() == []


class TestStateAccess:
    """Tests for snapshots and cross-image copies."""

    def test_snapshot_without_grid(self, tool):
        """A tool without a grid still describes its configuration."""
        snapshot = tool.get_state_and_config()

        assert snapshot.image_id == "a"
        assert snapshot.primary_line_count == 0
        assert snapshot.lines == []
        assert snapshot.refinement_enabled is False

    def test_get_state_for_image(self, placed_tool):
        """Lines are returned live or in compact form."""
        grid = placed_tool.store.get("a")

        assert placed_tool.get_state_for_image("a") is grid.lines
        compact = placed_tool.get_state_for_image("a", compact=True)
        assert compact[0]["points"][1] == {"x": 0.0, "y": 5.0, "isCommonPoint": True}
        assert placed_tool.get_state_for_image("missing") == []

    def test_copy_to_images(self, placed_tool, host):
        """Each target image gets its own copy with fresh uuids."""
        placed_tool.refinement_enabled = True
        host.reset_mock()
        compact = placed_tool.get_state_for_image("a", compact=True)

        placed_tool.set_state_for_images(compact, ["b", "c"], has_refinement_points=True)

        source = placed_tool.store.get("a")
        for image_id in ("b", "c"):
            copy = placed_tool.store.get(image_id)
            assert coordinates(copy) == coordinates(source)
            assert copy.refinement_enabled is True
            assert copy.spacing == 5.0
            assert not {line.uuid for line in copy.lines} & {line.uuid for line in source.lines}
            assert placed_tool.refinement.get(image_id) is True

        assert placed_tool.store.get("b").lines[0].points[0] is not placed_tool.store.get("c").lines[0].points[0]
        assert placed_tool.has_grid_for_images(["a", "b", "c"]) is True
        host.notify_completed.assert_called_once()

    def test_copy_onto_current_image(self, placed_tool, host):
        """Copying onto the shown image repaints it."""
        lines = build_grid(anchor=(20.0, 20.0)).lines

        placed_tool.set_state_for_images(lines, ["a"])

        assert coordinates(placed_tool.store.get("a"))[0][0] == (20.0, 20.0)
        host.repaint.assert_called()
