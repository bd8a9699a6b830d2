"""Remembered association between working trees and tmux panes."""

from __future__ import annotations

import logging
import os

from worktrees_tui.core.models import AffinityKind, AffinityResolution
from worktrees_tui.core.tmux_panes import TmuxPaneInspector

logger = logging.getLogger(__name__)


class PaneAffinityStore:
    """In-memory ``tree path -> pane index`` map for the process lifetime.

    Entries can dangle after a pane closes or indices shift. They are not
    purged; a failed send against a stale index is reported by the inspector.
    """

    def __init__(self, inspector: TmuxPaneInspector) -> None:
        self.inspector = inspector
        self._affinity: dict[str, int] = {}

    @staticmethod
    def _key(path: str) -> str:
        return os.path.normpath(path)

    def get(self, path: str) -> int | None:
        return self._affinity.get(self._key(path))

    def remember(self, path: str, pane_index: int) -> None:
        self._affinity[self._key(path)] = pane_index

    def forget(self, path: str) -> None:
        self._affinity.pop(self._key(path), None)

    def resolve_target(self, path: str) -> AffinityResolution:
        """Resolve the pane for ``path``; never guesses between several matches."""
        cached = self.get(path)
        if cached is not None:
            return AffinityResolution(AffinityKind.RESOLVED, pane_index=cached)

        matches = self.inspector.find_panes_matching_path(path)
        if not matches:
            return AffinityResolution(AffinityKind.NONE)
        if len(matches) > 1:
            candidates = tuple(sorted(p.index for p in matches))
            logger.debug("Ambiguous panes for %s: %s", path, candidates)
            return AffinityResolution(AffinityKind.AMBIGUOUS, candidates=candidates)

        index = matches[0].index
        self.remember(path, index)
        return AffinityResolution(AffinityKind.RESOLVED, pane_index=index)
