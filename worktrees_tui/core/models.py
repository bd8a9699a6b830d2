"""Data models for the reconciliation engine.

All models are frozen: every poll produces fresh instances and identity
across polls is by key (tree path, pane id), never by object identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional


class SortMode(str, Enum):
    """Display ordering for the working-tree list."""

    RECENT = "recent"
    BRANCH = "branch"

    def toggle(self) -> "SortMode":
        return SortMode.BRANCH if self is SortMode.RECENT else SortMode.RECENT


@dataclass(frozen=True)
class WorkingTree:
    """One git working-tree checkout."""

    path: str
    name: str
    branch: str
    commit_short: str
    mtime: float = 0.0


@dataclass(frozen=True)
class SyncCounters:
    """Upstream sync and working-directory change counts for one tree."""

    ahead: int = 0
    behind: int = 0
    staged: int = 0
    modified: int = 0
    untracked: int = 0

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.modified or self.untracked)


@dataclass(frozen=True)
class Pane:
    """A tmux pane in the dashboard's window.

    ``index`` is positional and may be renumbered when panes come and go;
    ``id`` (``%N``) is stable for the pane's lifetime.
    """

    index: int
    id: str
    cwd: str = ""
    command: str = ""
    pid: Optional[int] = None
    window_name: str = ""


PluginLifecycle = Literal["start", "working", "waiting"]


@dataclass(frozen=True)
class PluginState:
    """Session state written by the companion Claude Code plugin."""

    session_id: str
    cwd: str
    state: PluginLifecycle
    pane_id: str
    timestamp: float  # epoch seconds
    hostname: Optional[str] = None
    is_devcontainer: bool = False


@dataclass(frozen=True)
class AssistantSession:
    """One detected assistant process bound to a pane."""

    pane_index: int
    pane_id: str
    cwd: str
    window_name: str = ""
    pid: Optional[int] = None
    summary: Optional[str] = None
    waiting_for_input: Optional[bool] = None  # None = unknown
    hostname: Optional[str] = None
    is_devcontainer: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Published engine state consumed by the presentation layer.

    Replaced wholesale on every tick; never mutated in place.
    """

    trees: tuple[WorkingTree, ...] = ()
    counters: dict[str, SyncCounters] = field(default_factory=dict)
    sessions: tuple[AssistantSession, ...] = ()
    trees_loaded_at: Optional[float] = None
    counters_loaded_at: Optional[float] = None
    sessions_loaded_at: Optional[float] = None


class PaneFailure(str, Enum):
    """Reasons a pane command can be refused."""

    NOT_IN_TMUX = "not_in_tmux"
    PANE_NOT_FOUND = "pane_not_found"
    TARGET_IS_SELF = "target_is_self"
    COMMAND_FAILED = "command_failed"


@dataclass(frozen=True)
class PaneCommandResult:
    """Outcome of a send/focus command. Never raised, always returned."""

    success: bool
    error: Optional[str] = None
    failure: Optional[PaneFailure] = None
    valid_indices: tuple[int, ...] = ()

    @classmethod
    def ok(cls) -> "PaneCommandResult":
        return cls(success=True)


class AffinityKind(str, Enum):
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


@dataclass(frozen=True)
class AffinityResolution:
    """Result of looking up the pane a working tree should be sent to."""

    kind: AffinityKind
    pane_index: Optional[int] = None
    candidates: tuple[int, ...] = ()


LayoutAction = Literal["moved", "minimized", "restored"]


@dataclass(frozen=True)
class LayoutResult:
    """Outcome of a pane layout operation."""

    success: bool
    action: Optional[LayoutAction] = None
    width: Optional[int] = None
    error: Optional[str] = None
