"""Rearrange and resize the dashboard's own tmux pane."""

from __future__ import annotations

import logging
from typing import Literal, Optional

from worktrees_tui.constants import PANE_MIN_WIDTH, PANE_MIN_WIDTH_TOLERANCE
from worktrees_tui.core.models import LayoutResult
from worktrees_tui.core.tmux_panes import TmuxPaneInspector

logger = logging.getLogger(__name__)

Direction = Literal["left", "right"]


class PaneLayoutController:
    """Move the dashboard pane to a window edge and toggle its width.

    Both operations are stateless with respect to the controller: the width
    toggle decides purely on the currently measured width.
    """

    def __init__(self, inspector: TmuxPaneInspector, min_width: int = PANE_MIN_WIDTH) -> None:
        self.inspector = inspector
        self.min_width = min_width

    def _current_pane(self) -> tuple[Optional[str], Optional[int], Optional[str]]:
        """Return (pane id, width, window id) for the dashboard pane."""
        pane_id = self.inspector.get_self_pane_id()
        if not pane_id:
            return None, None, None
        raw = self.inspector.display("#{pane_width}\t#{window_id}", target=pane_id)
        if not raw:
            return pane_id, None, None
        width_str, _, window_id = raw.partition("\t")
        try:
            width = int(width_str)
        except ValueError:
            return pane_id, None, window_id or None
        return pane_id, width, window_id or None

    def _resize(self, pane_id: str, width: int) -> bool:
        return self.inspector.run("resize-pane", "-t", pane_id, "-x", str(width)).ok

    def move_current_pane(self, direction: Direction) -> LayoutResult:
        """Re-dock the dashboard pane at the left or right edge, full height.

        Break, join and resize are three separate tmux calls. A failure after
        the break leaves the pane in its own window; it is reported, not retried.
        """
        if direction not in ("left", "right"):
            return LayoutResult(False, error=f"Unknown direction: {direction}")
        if not self.inspector.is_available:
            return LayoutResult(False, error="Not running inside tmux")

        pane_id, width, window_id = self._current_pane()
        if not pane_id or width is None or not window_id:
            return LayoutResult(False, error="Could not read current pane geometry")

        if not self.inspector.run("break-pane", "-d", "-s", pane_id).ok:
            return LayoutResult(False, error="break-pane failed")

        join_args = ["join-pane", "-f", "-h"]
        if direction == "left":
            join_args.append("-b")
        join_args += ["-s", pane_id, "-t", window_id]
        if not self.inspector.run(*join_args).ok:
            logger.warning("join-pane failed after break-pane; pane %s left detached", pane_id)
            return LayoutResult(False, error="join-pane failed (pane is now in its own window)")

        if not self._resize(pane_id, width):
            return LayoutResult(False, error="resize-pane failed", width=width)

        logger.info("Moved pane %s to the %s edge (width %d)", pane_id, direction, width)
        return LayoutResult(True, action="moved", width=width)

    def toggle_width(self, stored_width: Optional[int] = None) -> LayoutResult:
        """Minimize the dashboard pane, or restore it to ``stored_width``.

        Returns ``minimized`` with the pre-minimize width for the caller to keep,
        or ``restored`` with the width restored to.
        """
        if not self.inspector.is_available:
            return LayoutResult(False, error="Not running inside tmux")

        pane_id, width, _window_id = self._current_pane()
        if not pane_id or width is None:
            return LayoutResult(False, error="Could not read current pane width")

        if width <= self.min_width + PANE_MIN_WIDTH_TOLERANCE and stored_width:
            if not self._resize(pane_id, stored_width):
                return LayoutResult(False, error="resize-pane failed")
            return LayoutResult(True, action="restored", width=stored_width)

        if not self._resize(pane_id, self.min_width):
            return LayoutResult(False, error="resize-pane failed")
        return LayoutResult(True, action="minimized", width=width)
