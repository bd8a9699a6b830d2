"""Assistant session detection.

Two independent detectors produce tagged results that are merged by pane id:

- LocalDetection: the process tree under a pane's shell contains the
  assistant. Enriched with a transcript summary and plugin waiting state.
- DevcontainerDetection: a fresh plugin state file flags a session running
  inside a container, which the host process table cannot see.

On conflict the local detection wins.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from worktrees_tui.core.models import AssistantSession, Pane, PluginState
from worktrees_tui.core.plugin_state import PluginStateReader, waiting_from_state
from worktrees_tui.core.process_tree import ProcessTable, ProcessTreeClassifier
from worktrees_tui.core.tmux_panes import TmuxPaneInspector
from worktrees_tui.core.transcripts import TranscriptSummaries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalDetection:
    session: AssistantSession


@dataclass(frozen=True)
class DevcontainerDetection:
    session: AssistantSession


Detection = Union[LocalDetection, DevcontainerDetection]


def detect_local(
    panes: Sequence[Pane],
    self_pane_id: Optional[str],
    classifier: ProcessTreeClassifier,
    table: ProcessTable,
    states: dict[str, PluginState],
    summaries: dict[str, str],
) -> list[LocalDetection]:
    detections: list[LocalDetection] = []
    for pane in panes:
        if pane.id == self_pane_id or pane.pid is None:
            continue
        if not classifier.is_assistant_running(pane.pid, table):
            continue
        state = states.get(pane.id)
        detections.append(
            LocalDetection(
                AssistantSession(
                    pane_index=pane.index,
                    pane_id=pane.id,
                    cwd=pane.cwd,
                    window_name=pane.window_name,
                    pid=pane.pid,
                    summary=summaries.get(pane.cwd),
                    waiting_for_input=waiting_from_state(state),
                    hostname=state.hostname if state else None,
                    is_devcontainer=False,
                )
            )
        )
    return detections


def detect_devcontainer(
    panes: Sequence[Pane],
    self_pane_id: Optional[str],
    states: dict[str, PluginState],
    summaries: dict[str, str],
) -> list[DevcontainerDetection]:
    by_id = {pane.id: pane for pane in panes}
    detections: list[DevcontainerDetection] = []
    for state in states.values():
        if not state.is_devcontainer:
            continue
        pane = by_id.get(state.pane_id)
        if pane is None:
            logger.debug("Devcontainer session %s: pane %s not found", state.session_id, state.pane_id)
            continue
        if pane.id == self_pane_id:
            continue
        detections.append(
            DevcontainerDetection(
                AssistantSession(
                    pane_index=pane.index,
                    pane_id=pane.id,
                    cwd=state.cwd,
                    window_name=pane.window_name,
                    pid=pane.pid,
                    summary=summaries.get(state.cwd),
                    waiting_for_input=waiting_from_state(state),
                    hostname=state.hostname,
                    is_devcontainer=True,
                )
            )
        )
    return detections


def merge_detections(
    local: Sequence[LocalDetection],
    devcontainer: Sequence[DevcontainerDetection],
) -> list[AssistantSession]:
    """Union by pane id; local detections take precedence."""
    merged: dict[str, AssistantSession] = {}
    for detection in devcontainer:
        merged[detection.session.pane_id] = detection.session
    for local_detection in local:
        merged[local_detection.session.pane_id] = local_detection.session
    return sorted(merged.values(), key=lambda s: s.pane_index)


class SessionDetector:
    """Produces the unified assistant session list for one poll."""

    def __init__(
        self,
        inspector: TmuxPaneInspector,
        classifier: ProcessTreeClassifier,
        state_reader: PluginStateReader,
        summaries: TranscriptSummaries,
    ) -> None:
        self.inspector = inspector
        self.classifier = classifier
        self.state_reader = state_reader
        self.summaries = summaries

    def detect_sessions(self, now: Optional[float] = None) -> list[AssistantSession]:
        now = time.time() if now is None else now
        panes = self.inspector.list_panes()
        if not panes:
            return []
        self_pane_id = self.inspector.get_self_pane_id()
        states = self.state_reader.read_fresh(now)
        summaries = self.summaries.collect(now)
        table = ProcessTable.snapshot()

        local = detect_local(panes, self_pane_id, self.classifier, table, states, summaries)
        devcontainer = detect_devcontainer(panes, self_pane_id, states, summaries)
        sessions = merge_detections(local, devcontainer)
        logger.debug(
            "Detected %d sessions (%d local, %d devcontainer)", len(sessions), len(local), len(devcontainer)
        )
        return sessions
