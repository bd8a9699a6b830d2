"""Assistant session list with waiting-for-input flash."""

from __future__ import annotations

import time
from typing import Sequence

from rich.style import Style
from rich.text import Text
from textual.widget import Widget

from worktrees_tui.cli.tui.base import DashboardMixin
from worktrees_tui.cli.tui.flash import FlashIndicator, FlashTracker
from worktrees_tui.core.models import AssistantSession

_SELECTED = Style(reverse=True)
_WAITING_ON = Style(color="black", bgcolor="yellow", bold=True)
_WAITING_SOLID = Style(color="yellow", bold=True)


def session_marker(indicator: FlashIndicator, waiting: bool | None) -> tuple[str, Style | str]:
    """Leading marker for a session row."""
    if indicator is FlashIndicator.ON:
        return "●", _WAITING_ON
    if indicator is FlashIndicator.OFF:
        return "○", _WAITING_SOLID
    if indicator is FlashIndicator.SOLID:
        return "●", _WAITING_SOLID
    if waiting is False:
        return "◆", "green"
    return "·", "dim"


class SessionList(DashboardMixin, Widget):
    """Renders detected assistant sessions, one per line."""

    DEFAULT_CSS = """
    SessionList {
        width: 100%;
        height: auto;
        padding: 0 1;
        margin-top: 1;
    }
    """

    def __init__(self, flash: FlashTracker, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self.flash = flash
        self._sessions: Sequence[AssistantSession] = ()
        self._selected = 0
        self._active = False

    def update_view(self, sessions: Sequence[AssistantSession], selected: int, *, active: bool) -> None:
        self._sessions = sessions
        self._selected = selected
        self._active = active
        self.refresh(layout=True)

    def render(self) -> Text:
        now = time.time()
        out = Text()
        out.append("Claude sessions\n", style="bold underline")
        if not self._sessions:
            out.append("No sessions detected", style="dim")
            return out

        for i, session in enumerate(self._sessions):
            marker, marker_style = session_marker(
                self.flash.indicator(session.pane_id, now), session.waiting_for_input
            )
            line = Text()
            line.append(marker, style=marker_style)
            line.append(f" [{session.pane_index}] ", style="bold")
            line.append(session.window_name or session.cwd)
            if session.is_devcontainer:
                line.append(" (container)", style="blue")
            if session.summary:
                line.append("  ")
                line.append(session.summary, style="italic dim")
            if self._active and i == self._selected:
                line.stylize(_SELECTED)
            out.append_text(line)
            if i < len(self._sessions) - 1:
                out.append("\n")
        return out
