"""Dashboard controller: applies intents and executes user commands.

Commands are synchronous. Each one clears the previous status line, performs
its side effect through the inspector, affinity store or layout controller,
reports the outcome as a status message and asks the reconciler to re-poll
the slices the side effect may have changed.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Optional

from worktrees_tui.cli.tui.state import (
    DashboardState,
    Intent,
    IntentType,
    StatusLevel,
    reduce_state,
)
from worktrees_tui.config.schema import DashboardConfig
from worktrees_tui.core.lifecycle_hooks import LifecycleOutcome, add_working_tree, remove_working_tree
from worktrees_tui.core.models import AffinityKind, PaneCommandResult, Snapshot
from worktrees_tui.core.pane_affinity import PaneAffinityStore
from worktrees_tui.core.pane_layout import Direction, PaneLayoutController
from worktrees_tui.core.reconciler import PollSlice, Reconciler
from worktrees_tui.core.tmux_panes import TmuxPaneInspector

logger = logging.getLogger(__name__)

_BRANCH_DIR_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def sibling_tree_path(root: str, branch: str) -> str:
    """Default location for a new tree: ``<root>-<branch>`` next to the root checkout."""
    root = os.path.abspath(root)
    suffix = _BRANCH_DIR_UNSAFE.sub("-", branch).strip("-") or "tree"
    return os.path.join(os.path.dirname(root), f"{os.path.basename(root)}-{suffix}")


class DashboardController:
    """Central controller for dashboard state and pane commands."""

    def __init__(
        self,
        config: DashboardConfig,
        state: DashboardState,
        inspector: TmuxPaneInspector,
        affinity: PaneAffinityStore,
        layout: PaneLayoutController,
        reconciler: Optional[Reconciler] = None,
    ) -> None:
        self.config = config
        self.state = state
        self.inspector = inspector
        self.affinity = affinity
        self.layout = layout
        self.reconciler = reconciler

    def dispatch(self, intent: Intent) -> None:
        reduce_state(self.state, intent)

    # --- status helpers ---

    def _status(self, text: str, level: StatusLevel = StatusLevel.INFO) -> None:
        self.dispatch(Intent(IntentType.SET_STATUS, {"text": text, "level": level}))

    def clear_status(self) -> None:
        if self.state.status is not None:
            self.dispatch(Intent(IntentType.CLEAR_STATUS))

    def _refresh(self, *slices: PollSlice) -> None:
        if self.reconciler is not None:
            self.reconciler.request_refresh(*slices)

    def _report_failure(self, result: PaneCommandResult) -> None:
        self._status(result.error or "Pane command failed", StatusLevel.ERROR)

    # --- state inputs ---

    def sync_snapshot(self, snapshot: Snapshot) -> None:
        self.dispatch(Intent(IntentType.SYNC_SNAPSHOT, {"snapshot": snapshot}))

    def move_selection(self, delta: int) -> None:
        self.clear_status()
        self.dispatch(Intent(IntentType.MOVE_SELECTION, {"delta": delta}))

    def switch_focus(self) -> None:
        self.clear_status()
        self.dispatch(Intent(IntentType.SWITCH_FOCUS))

    def toggle_sort(self) -> None:
        self.clear_status()
        self.dispatch(Intent(IntentType.TOGGLE_SORT))
        self._status(f"Sorted by {self.state.sort_mode.value}")

    # --- pane commands ---

    def send_selected(self) -> None:
        """Send ``cd`` for the selected tree to its remembered or unique pane."""
        self.clear_status()
        tree = self.state.selected_tree
        if tree is None:
            self._status("No working tree selected", StatusLevel.WARNING)
            return

        resolution = self.affinity.resolve_target(tree.path)
        if resolution.kind is AffinityKind.NONE:
            self._status(f"No pane is in {tree.name}. Press 1-9 to pick a pane", StatusLevel.WARNING)
            return
        if resolution.kind is AffinityKind.AMBIGUOUS:
            candidates = ", ".join(str(i) for i in resolution.candidates)
            self._status(f"Several panes are in {tree.name}: {candidates}. Press a number", StatusLevel.WARNING)
            return

        if resolution.pane_index is None:
            self._status(f"No pane resolved for {tree.name}", StatusLevel.ERROR)
            return
        result = self.inspector.send_directory_change(resolution.pane_index, tree.path)
        if not result.success:
            self._report_failure(result)
            return
        self._status(f"Sent {tree.name} to pane {resolution.pane_index}", StatusLevel.SUCCESS)
        self._refresh(PollSlice.SESSIONS)

    def send_selected_to(self, index: int) -> None:
        """Send ``cd`` for the selected tree to pane ``index`` and remember the pairing."""
        self.clear_status()
        tree = self.state.selected_tree
        if tree is None:
            self._status("No working tree selected", StatusLevel.WARNING)
            return

        result = self.inspector.send_directory_change(index, tree.path)
        if not result.success:
            self._report_failure(result)
            return
        self.affinity.remember(tree.path, index)
        self._status(f"Sent {tree.name} to pane {index}", StatusLevel.SUCCESS)
        self._refresh(PollSlice.SESSIONS)

    def focus_selected(self) -> None:
        """Focus the pane paired with the selected tree, or the selected session's pane."""
        self.clear_status()
        if self.state.focus == "sessions":
            session = self.state.selected_session
            if session is not None:
                self.focus_session(session.pane_index)
            return

        tree = self.state.selected_tree
        if tree is None:
            return
        resolution = self.affinity.resolve_target(tree.path)
        if resolution.kind is AffinityKind.RESOLVED and resolution.pane_index is not None:
            self.focus_session(resolution.pane_index)
        elif resolution.kind is AffinityKind.AMBIGUOUS:
            candidates = ", ".join(str(i) for i in resolution.candidates)
            self._status(f"Several panes are in {tree.name}: {candidates}", StatusLevel.WARNING)
        else:
            self._status(f"No pane is in {tree.name}", StatusLevel.WARNING)

    def focus_session(self, pane_index: int) -> None:
        result = self.inspector.focus_pane(pane_index)
        if not result.success:
            self._report_failure(result)
            return
        self._status(f"Focused pane {pane_index}")

    # --- layout commands ---

    def move_pane(self, direction: Direction) -> None:
        self.clear_status()
        result = self.layout.move_current_pane(direction)
        if not result.success:
            self._status(result.error or "Move failed", StatusLevel.ERROR)
            return
        self._status(f"Moved to the {direction} edge")
        self._refresh(PollSlice.SESSIONS)

    def toggle_width(self) -> None:
        self.clear_status()
        result = self.layout.toggle_width(self.state.stored_width)
        if not result.success:
            self._status(result.error or "Resize failed", StatusLevel.ERROR)
            return
        if result.action == "minimized":
            self.dispatch(Intent(IntentType.SET_STORED_WIDTH, {"width": result.width}))
            self._status(f"Minimized (was {result.width} columns)")
        else:
            self.dispatch(Intent(IntentType.SET_STORED_WIDTH, {"width": None}))
            self._status(f"Restored to {result.width} columns")

    # --- worktree lifecycle ---

    def _report_outcome(self, outcome: LifecycleOutcome) -> None:
        if not outcome.success:
            level = StatusLevel.ERROR
        elif outcome.partial:
            level = StatusLevel.WARNING
        else:
            level = StatusLevel.SUCCESS
        self._status(outcome.message, level)

    def add_tree(self, branch: str) -> None:
        """Create a working tree for ``branch`` next to the root checkout."""
        self.clear_status()
        branch = branch.strip()
        if not branch:
            self._status("Branch name is required", StatusLevel.WARNING)
            return
        path = sibling_tree_path(self.config.root, branch)
        outcome = add_working_tree(self.config.root, path, branch, self.config.hooks)
        self._report_outcome(outcome)
        if outcome.success:
            self._refresh(PollSlice.TREES)

    def remove_selected(self) -> None:
        """Remove the selected tree. The root checkout is never removed."""
        self.clear_status()
        tree = self.state.selected_tree
        if tree is None:
            return
        if os.path.normpath(tree.path) == os.path.normpath(os.path.abspath(self.config.root)):
            self._status("Refusing to remove the root checkout", StatusLevel.WARNING)
            return
        outcome = remove_working_tree(self.config.root, tree, self.config.hooks)
        self._report_outcome(outcome)
        if outcome.success:
            self.affinity.forget(tree.path)
            self._refresh(PollSlice.TREES)
