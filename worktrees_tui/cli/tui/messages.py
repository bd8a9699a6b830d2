"""Custom Textual messages for dashboard inter-widget communication."""

from __future__ import annotations

from textual.message import Message

from worktrees_tui.core.models import Snapshot

# --- Data refresh messages ---


class SnapshotPublished(Message):
    """Fired when the reconciler publishes a new snapshot."""

    def __init__(self, snapshot: Snapshot) -> None:
        super().__init__()
        self.snapshot = snapshot
