"""Integration tests for the Textual dashboard shell."""

from unittest.mock import Mock

import pytest

from worktrees_tui.cli.tui.app import DashboardApp
from worktrees_tui.cli.tui.controller import DashboardController
from worktrees_tui.cli.tui.flash import FlashTracker
from worktrees_tui.cli.tui.messages import SnapshotPublished
from worktrees_tui.cli.tui.state import DashboardState
from worktrees_tui.config import DashboardConfig
from worktrees_tui.core.models import AssistantSession, PaneCommandResult, Snapshot, WorkingTree
from worktrees_tui.core.pane_affinity import PaneAffinityStore

TREES = (
    WorkingTree(path="/r/main", name="main", branch="main", commit_short="1234567"),
    WorkingTree(path="/r/feature", name="feature", branch="feature", commit_short="abcdef0", mtime=5.0),
)


def _app() -> tuple[DashboardApp, Mock]:
    inspector = Mock()
    inspector.send_directory_change.return_value = PaneCommandResult.ok()
    inspector.find_panes_matching_path.return_value = []
    controller = DashboardController(
        DashboardConfig(root="/r/main"),
        DashboardState(),
        inspector,
        PaneAffinityStore(inspector),
        Mock(),
        None,
    )
    return DashboardApp(controller, FlashTracker()), inspector


@pytest.mark.asyncio
async def test_snapshot_then_number_key_sends_selected_tree():
    app, inspector = _app()
    async with app.run_test() as pilot:
        session = AssistantSession(pane_index=2, pane_id="%2", cwd="/r/feature", waiting_for_input=True)
        app.post_message(SnapshotPublished(Snapshot(trees=TREES, sessions=(session,))))
        await pilot.pause()

        await pilot.press("j")
        await pilot.press("2")
        await pilot.pause()

    inspector.send_directory_change.assert_called_once_with(2, "/r/feature")
    assert app.controller.affinity.get("/r/feature") == 2
    assert app.flash.is_blinking


@pytest.mark.asyncio
async def test_sort_key_toggles_mode():
    app, _ = _app()
    async with app.run_test() as pilot:
        await pilot.press("s")
        await pilot.pause()

    assert app.controller.state.sort_mode.value == "branch"
