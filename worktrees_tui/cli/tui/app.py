"""Textual dashboard application.

The reconciler runs on the app's event loop and publishes snapshots through
``SnapshotPublished`` messages; key bindings call into DashboardController.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical

from worktrees_tui.cli.tui.controller import DashboardController
from worktrees_tui.cli.tui.flash import FlashTracker
from worktrees_tui.cli.tui.messages import SnapshotPublished
from worktrees_tui.cli.tui.state import DashboardState
from worktrees_tui.cli.tui.widgets.modals import BranchInputModal, ConfirmModal
from worktrees_tui.cli.tui.widgets.session_list import SessionList
from worktrees_tui.cli.tui.widgets.status_bar import StatusBar
from worktrees_tui.cli.tui.widgets.tree_list import TreeList
from worktrees_tui.config.schema import DashboardConfig
from worktrees_tui.core.models import Snapshot, SortMode
from worktrees_tui.core.pane_affinity import PaneAffinityStore
from worktrees_tui.core.pane_layout import PaneLayoutController
from worktrees_tui.core.plugin_state import PluginStateReader
from worktrees_tui.core.process_tree import ProcessTreeClassifier
from worktrees_tui.core.reconciler import Reconciler
from worktrees_tui.core.session_detection import SessionDetector
from worktrees_tui.core.tmux_panes import TmuxPaneInspector
from worktrees_tui.core.transcripts import TranscriptSummaries

logger = logging.getLogger(__name__)


def build_controller(config: DashboardConfig, inspector: Optional[TmuxPaneInspector] = None) -> DashboardController:
    """Wire engine components for ``config`` into a controller."""
    inspector = inspector or TmuxPaneInspector(config.tmux_binary)
    detector = SessionDetector(
        inspector,
        ProcessTreeClassifier(config.assistant_binaries),
        PluginStateReader(config.state_dir),
        TranscriptSummaries(config.projects_dir),
    )
    reconciler = Reconciler(config, detector)
    state = DashboardState(sort_mode=SortMode(config.sort_mode))
    return DashboardController(
        config,
        state,
        inspector,
        PaneAffinityStore(inspector),
        PaneLayoutController(inspector, config.pane_min_width),
        reconciler,
    )


class DashboardApp(App[None]):
    """Working trees and Claude sessions for the current tmux window."""

    TITLE = "worktrees-tui"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("down,j", "cursor_down", "Down", show=False),
        Binding("up,k", "cursor_up", "Up", show=False),
        Binding("tab", "switch_focus", "Switch list"),
        Binding("enter", "send", "Send"),
        *[Binding(str(n), f"send_to({n})", f"Send to {n}", show=False) for n in range(1, 10)],
        Binding("f", "focus_pane", "Focus"),
        Binding("s", "toggle_sort", "Sort"),
        Binding("less_than_sign,h", "move_pane('left')", "Move left", show=False),
        Binding("greater_than_sign,l", "move_pane('right')", "Move right", show=False),
        Binding("w", "toggle_width", "Width"),
        Binding("r", "refresh", "Refresh"),
        Binding("a", "add_tree", "Add"),
        Binding("d", "remove_tree", "Remove"),
    ]

    CSS = """
    #lists {
        height: 1fr;
    }
    """

    def __init__(self, controller: DashboardController, flash: FlashTracker, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self.controller = controller
        self.flash = flash

    @classmethod
    def from_config(cls, config: DashboardConfig) -> "DashboardApp":
        return cls(build_controller(config), FlashTracker(config.flash_interval_ms, config.flash_duration_ms))

    def compose(self) -> ComposeResult:
        with Vertical(id="lists"):
            yield TreeList(id="trees")
            yield SessionList(self.flash, id="sessions")
        yield StatusBar(id="status")

    def on_mount(self) -> None:
        reconciler = self.controller.reconciler
        if reconciler is not None:
            reconciler.on_publish = self._publish
            reconciler.start()
        self.set_interval(self.flash.interval_ms / 1000.0, self._tick_flash)
        self._render_state()

    async def on_unmount(self) -> None:
        if self.controller.reconciler is not None:
            await self.controller.reconciler.stop()

    def _publish(self, snapshot: Snapshot) -> None:
        self.post_message(SnapshotPublished(snapshot))

    def on_snapshot_published(self, message: SnapshotPublished) -> None:
        self.controller.sync_snapshot(message.snapshot)
        self.flash.update(message.snapshot.sessions, time.time())
        self._render_state()

    def _tick_flash(self) -> None:
        if self.flash.is_blinking:
            self.query_one("#sessions", SessionList).refresh()

    def _render_state(self) -> None:
        state = self.controller.state
        self.query_one("#trees", TreeList).update_view(
            state.trees,
            state.snapshot.counters,
            state.tree_index,
            active=state.focus == "trees",
            sort_mode=state.sort_mode,
        )
        self.query_one("#sessions", SessionList).update_view(
            state.sessions,
            state.session_index,
            active=state.focus == "sessions",
        )
        self.query_one("#status", StatusBar).update_status(state.status)

    # --- actions ---

    def action_cursor_down(self) -> None:
        self.controller.move_selection(1)
        self._render_state()

    def action_cursor_up(self) -> None:
        self.controller.move_selection(-1)
        self._render_state()

    def action_switch_focus(self) -> None:
        self.controller.switch_focus()
        self._render_state()

    def action_send(self) -> None:
        if self.controller.state.focus == "sessions":
            self.controller.focus_selected()
        else:
            self.controller.send_selected()
        self._render_state()

    def action_send_to(self, index: int) -> None:
        if self.controller.state.focus == "sessions":
            self.controller.clear_status()
            self.controller.focus_session(index)
        else:
            self.controller.send_selected_to(index)
        self._render_state()

    def action_focus_pane(self) -> None:
        self.controller.focus_selected()
        self._render_state()

    def action_toggle_sort(self) -> None:
        self.controller.toggle_sort()
        self._render_state()

    def action_move_pane(self, direction: str) -> None:
        if direction not in ("left", "right"):
            return
        self.controller.move_pane("left" if direction == "left" else "right")
        self._render_state()

    def action_toggle_width(self) -> None:
        self.controller.toggle_width()
        self._render_state()

    def action_refresh(self) -> None:
        self.controller.clear_status()
        if self.controller.reconciler is not None:
            self.controller.reconciler.request_refresh()
        self._render_state()

    def action_add_tree(self) -> None:
        def _on_branch(branch: str | None) -> None:
            if branch:
                self.controller.add_tree(branch)
                self._render_state()

        self.push_screen(BranchInputModal(), _on_branch)

    def action_remove_tree(self) -> None:
        tree = self.controller.state.selected_tree
        if tree is None:
            return

        def _on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self.controller.remove_selected()
                self._render_state()

        self.push_screen(ConfirmModal("Remove working tree", f"Remove {tree.path}?"), _on_confirm)
