"""Unit tests for DashboardController commands."""

from unittest.mock import Mock, patch

from worktrees_tui.cli.tui import controller as controller_module
from worktrees_tui.cli.tui.controller import DashboardController, sibling_tree_path
from worktrees_tui.cli.tui.state import DashboardState, StatusLevel
from worktrees_tui.config import DashboardConfig
from worktrees_tui.core.lifecycle_hooks import LifecycleOutcome
from worktrees_tui.core.models import (
    AffinityKind,
    AffinityResolution,
    AssistantSession,
    LayoutResult,
    PaneCommandResult,
    PaneFailure,
    Snapshot,
    WorkingTree,
)
from worktrees_tui.core.pane_affinity import PaneAffinityStore
from worktrees_tui.core.reconciler import PollSlice

TREE = WorkingTree(path="/r/feature", name="feature", branch="feature", commit_short="abc1234")
ROOT_TREE = WorkingTree(path="/r/main", name="main", branch="main", commit_short="1234567")


def _controller(trees=(TREE,), sessions=()):
    inspector = Mock()
    inspector.send_directory_change.return_value = PaneCommandResult.ok()
    inspector.focus_pane.return_value = PaneCommandResult.ok()
    inspector.find_panes_matching_path.return_value = []
    affinity = PaneAffinityStore(inspector)
    layout = Mock()
    reconciler = Mock()
    ctrl = DashboardController(
        DashboardConfig(root="/r/main"),
        DashboardState(),
        inspector,
        affinity,
        layout,
        reconciler,
    )
    ctrl.sync_snapshot(Snapshot(trees=tuple(trees), sessions=tuple(sessions)))
    return ctrl, inspector, layout, reconciler


def test_send_selected_without_matching_pane_asks_for_index():
    ctrl, inspector, _, reconciler = _controller()

    ctrl.send_selected()

    assert ctrl.state.status is not None
    assert ctrl.state.status.level is StatusLevel.WARNING
    inspector.send_directory_change.assert_not_called()
    reconciler.request_refresh.assert_not_called()


def test_send_selected_ambiguous_lists_candidates_and_sends_nothing():
    ctrl, inspector, _, _ = _controller()
    ctrl.affinity = Mock()
    ctrl.affinity.resolve_target.return_value = AffinityResolution(AffinityKind.AMBIGUOUS, candidates=(1, 3))

    ctrl.send_selected()

    assert ctrl.state.status is not None
    assert "1, 3" in ctrl.state.status.text
    inspector.send_directory_change.assert_not_called()


def test_send_selected_resolved_sends_and_refreshes_sessions():
    ctrl, inspector, _, reconciler = _controller()
    ctrl.affinity.remember(TREE.path, 2)

    ctrl.send_selected()

    inspector.send_directory_change.assert_called_once_with(2, "/r/feature")
    reconciler.request_refresh.assert_called_once_with(PollSlice.SESSIONS)
    assert ctrl.state.status is not None and ctrl.state.status.level is StatusLevel.SUCCESS


def test_send_selected_to_remembers_pane_on_success():
    ctrl, _, _, _ = _controller()

    ctrl.send_selected_to(4)

    assert ctrl.affinity.get(TREE.path) == 4


def test_send_selected_to_invalid_pane_reports_valid_indices():
    ctrl, inspector, _, _ = _controller()
    inspector.send_directory_change.return_value = PaneCommandResult(
        False, "Pane 8 not found. Valid panes: 0, 1", PaneFailure.PANE_NOT_FOUND, (0, 1)
    )

    ctrl.send_selected_to(8)

    assert ctrl.affinity.get(TREE.path) is None
    assert ctrl.state.status is not None
    assert ctrl.state.status.text == "Pane 8 not found. Valid panes: 0, 1"
    assert ctrl.state.status.level is StatusLevel.ERROR


def test_next_input_clears_previous_status():
    ctrl, _, _, _ = _controller()
    ctrl.send_selected()
    assert ctrl.state.status is not None

    ctrl.move_selection(1)

    assert ctrl.state.status is None


def test_focus_selected_in_sessions_list_focuses_session_pane():
    session = AssistantSession(pane_index=3, pane_id="%3", cwd="/r/feature")
    ctrl, inspector, _, _ = _controller(sessions=(session,))
    ctrl.switch_focus()

    ctrl.focus_selected()

    inspector.focus_pane.assert_called_once_with(3)


def test_toggle_width_stores_and_clears_width():
    ctrl, _, layout, _ = _controller()
    layout.toggle_width.return_value = LayoutResult(True, action="minimized", width=90)

    ctrl.toggle_width()
    assert ctrl.state.stored_width == 90
    layout.toggle_width.assert_called_with(None)

    layout.toggle_width.return_value = LayoutResult(True, action="restored", width=90)
    ctrl.toggle_width()
    assert ctrl.state.stored_width is None
    layout.toggle_width.assert_called_with(90)


def test_move_pane_failure_sets_error_status():
    ctrl, _, layout, reconciler = _controller()
    layout.move_current_pane.return_value = LayoutResult(False, error="break-pane failed")

    ctrl.move_pane("left")

    assert ctrl.state.status is not None
    assert ctrl.state.status.text == "break-pane failed"
    reconciler.request_refresh.assert_not_called()


def test_toggle_sort_reports_mode():
    ctrl, _, _, _ = _controller()

    ctrl.toggle_sort()

    assert ctrl.state.status is not None
    assert ctrl.state.status.text == "Sorted by branch"


def test_add_tree_uses_sibling_path_and_refreshes_trees():
    ctrl, _, _, reconciler = _controller()
    outcome = LifecycleOutcome(True, "Created main-feature-y", path="/r/main-feature-y")
    with patch.object(controller_module, "add_working_tree", return_value=outcome) as mock_add:
        ctrl.add_tree("feature/y")

    assert mock_add.call_args.args[:3] == ("/r/main", "/r/main-feature-y", "feature/y")
    reconciler.request_refresh.assert_called_once_with(PollSlice.TREES)


def test_partial_outcome_is_a_warning():
    ctrl, _, _, _ = _controller()
    outcome = LifecycleOutcome(True, "Removed feature, but after_remove hook failed: x", partial=True)
    with patch.object(controller_module, "remove_working_tree", return_value=outcome):
        ctrl.remove_selected()

    assert ctrl.state.status is not None
    assert ctrl.state.status.level is StatusLevel.WARNING


def test_remove_refuses_root_checkout():
    ctrl, _, _, _ = _controller(trees=(ROOT_TREE,))
    with patch.object(controller_module, "remove_working_tree") as mock_remove:
        ctrl.remove_selected()

    mock_remove.assert_not_called()


def test_sibling_tree_path_sanitizes_branch():
    assert sibling_tree_path("/src/app", "feature/new thing") == "/src/app-feature-new-thing"


def test_send_selected_resolved_without_index_reports_error():
    ctrl, inspector, _, reconciler = _controller()
    ctrl.affinity = Mock()
    ctrl.affinity.resolve_target.return_value = AffinityResolution(AffinityKind.RESOLVED)

    ctrl.send_selected()

    assert ctrl.state.status is not None
    assert ctrl.state.status.level is StatusLevel.ERROR
    inspector.send_directory_change.assert_not_called()
    reconciler.request_refresh.assert_not_called()
