"""Status line with the last command outcome and key hints."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget

from worktrees_tui.cli.tui.base import DashboardMixin
from worktrees_tui.cli.tui.state import StatusLevel, StatusMessage

_LEVEL_STYLES = {
    StatusLevel.INFO: "",
    StatusLevel.SUCCESS: "green",
    StatusLevel.WARNING: "yellow",
    StatusLevel.ERROR: "bold red",
}

HINTS = "⏎ send  1-9 send to pane  f focus  tab switch  s sort  </> move  w width  a add  d remove  q quit"


class StatusBar(DashboardMixin, Widget):
    """Bottom bar: status message when present, key hints otherwise."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        width: 100%;
        height: 1;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._status: StatusMessage | None = None

    def update_status(self, status: StatusMessage | None) -> None:
        if status == self._status:
            return
        self._status = status
        self.refresh()

    def render(self) -> Text:
        if self._status is None:
            return Text(HINTS, style="dim", no_wrap=True, overflow="ellipsis")
        return Text(
            self._status.text,
            style=_LEVEL_STYLES.get(self._status.level, ""),
            no_wrap=True,
            overflow="ellipsis",
        )
