"""Dashboard state model and reducer.

Every change to dashboard state (snapshot arrival, keystroke, command
outcome) is an Intent applied by ``reduce_state``. The reducer is the only
code that mutates ``DashboardState``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, TypedDict, cast

from worktrees_tui.core.git_worktrees import sort_working_trees
from worktrees_tui.core.models import AssistantSession, Snapshot, SortMode, WorkingTree

logger = logging.getLogger(__name__)

FocusList = Literal["trees", "sessions"]


class StatusLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    """Transient status line, cleared on the next input event."""

    text: str
    level: StatusLevel = StatusLevel.INFO


@dataclass
class DashboardState:
    """Shared state for the dashboard view."""

    snapshot: Snapshot = field(default_factory=Snapshot)
    sort_mode: SortMode = SortMode.RECENT
    focus: FocusList = "trees"
    tree_index: int = 0
    session_index: int = 0
    selected_tree_path: Optional[str] = None
    status: Optional[StatusMessage] = None
    stored_width: Optional[int] = None

    @property
    def trees(self) -> list[WorkingTree]:
        return sort_working_trees(self.snapshot.trees, self.sort_mode)

    @property
    def sessions(self) -> tuple[AssistantSession, ...]:
        return self.snapshot.sessions

    @property
    def selected_tree(self) -> Optional[WorkingTree]:
        trees = self.trees
        if not trees:
            return None
        return trees[min(self.tree_index, len(trees) - 1)]

    @property
    def selected_session(self) -> Optional[AssistantSession]:
        if not self.sessions:
            return None
        return self.sessions[min(self.session_index, len(self.sessions) - 1)]


class IntentType(str, Enum):
    """Intent identifiers for reducer-driven state updates."""

    SYNC_SNAPSHOT = "sync_snapshot"
    MOVE_SELECTION = "move_selection"
    SWITCH_FOCUS = "switch_focus"
    TOGGLE_SORT = "toggle_sort"
    SET_STATUS = "set_status"
    CLEAR_STATUS = "clear_status"
    SET_STORED_WIDTH = "set_stored_width"


class IntentPayload(TypedDict, total=False):
    snapshot: Snapshot
    delta: int
    focus: FocusList
    text: str
    level: StatusLevel
    width: Optional[int]


@dataclass(frozen=True)
class Intent:
    """State transition request."""

    type: IntentType
    payload: IntentPayload = field(default_factory=lambda: cast(IntentPayload, {}))


def _clamp(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


def _reselect_tree(state: DashboardState) -> None:
    """Keep the selected tree selected (by path) after the list changes."""
    trees = state.trees
    if state.selected_tree_path is not None:
        for idx, tree in enumerate(trees):
            if tree.path == state.selected_tree_path:
                state.tree_index = idx
                return
    state.tree_index = _clamp(state.tree_index, len(trees))
    state.selected_tree_path = trees[state.tree_index].path if trees else None


def reduce_state(state: DashboardState, intent: Intent) -> None:
    """Apply intent to state (pure state mutation only)."""
    t = intent.type
    p = intent.payload

    if t is IntentType.SYNC_SNAPSHOT:
        snapshot = p.get("snapshot")
        if snapshot is None:
            return
        state.snapshot = snapshot
        _reselect_tree(state)
        state.session_index = _clamp(state.session_index, len(snapshot.sessions))
        return

    if t is IntentType.MOVE_SELECTION:
        delta = p.get("delta", 0)
        if state.focus == "sessions":
            state.session_index = _clamp(state.session_index + delta, len(state.sessions))
            return
        trees = state.trees
        state.tree_index = _clamp(state.tree_index + delta, len(trees))
        state.selected_tree_path = trees[state.tree_index].path if trees else None
        return

    if t is IntentType.SWITCH_FOCUS:
        focus = p.get("focus")
        if focus is None:
            focus = "sessions" if state.focus == "trees" else "trees"
        if focus == "sessions" and not state.sessions:
            return
        state.focus = focus
        return

    if t is IntentType.TOGGLE_SORT:
        state.sort_mode = state.sort_mode.toggle()
        _reselect_tree(state)
        return

    if t is IntentType.SET_STATUS:
        text = p.get("text")
        if text:
            state.status = StatusMessage(text, p.get("level", StatusLevel.INFO))
        return

    if t is IntentType.CLEAR_STATUS:
        state.status = None
        return

    if t is IntentType.SET_STORED_WIDTH:
        state.stored_width = p.get("width")
        return

    logger.debug("Unhandled intent %s", t)
