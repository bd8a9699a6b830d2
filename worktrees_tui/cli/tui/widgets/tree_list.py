"""Working-tree list with sync counters."""

from __future__ import annotations

from typing import Mapping, Sequence

from rich.style import Style
from rich.text import Text
from textual.widget import Widget

from worktrees_tui.cli.tui.base import DashboardMixin
from worktrees_tui.core.models import SortMode, SyncCounters, WorkingTree

_SELECTED = Style(reverse=True)
_SELECTED_INACTIVE = Style(bold=True)


def format_counters(counters: SyncCounters | None) -> Text:
    """Render ``↑ahead ↓behind +staged ~modified ?untracked``; zero fields are omitted."""
    text = Text()
    if counters is None:
        return text
    parts = [
        ("↑", counters.ahead, "cyan"),
        ("↓", counters.behind, "magenta"),
        ("+", counters.staged, "green"),
        ("~", counters.modified, "yellow"),
        ("?", counters.untracked, "red"),
    ]
    for symbol, value, color in parts:
        if not value:
            continue
        if text.cell_len:
            text.append(" ")
        text.append(f"{symbol}{value}", style=color)
    return text


class TreeList(DashboardMixin, Widget):
    """Renders the sorted working trees, one per line."""

    DEFAULT_CSS = """
    TreeList {
        width: 100%;
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._trees: Sequence[WorkingTree] = ()
        self._counters: Mapping[str, SyncCounters] = {}
        self._selected = 0
        self._active = True
        self._sort_mode = SortMode.RECENT

    def update_view(
        self,
        trees: Sequence[WorkingTree],
        counters: Mapping[str, SyncCounters],
        selected: int,
        *,
        active: bool,
        sort_mode: SortMode,
    ) -> None:
        self._trees = trees
        self._counters = counters
        self._selected = selected
        self._active = active
        self._sort_mode = sort_mode
        self.refresh(layout=True)

    def render(self) -> Text:
        out = Text()
        out.append(f"Working trees ({self._sort_mode.value})\n", style="bold underline")
        if not self._trees:
            out.append("No working trees found", style="dim")
            return out

        name_width = max(len(t.name) for t in self._trees)
        for i, tree in enumerate(self._trees):
            line = Text()
            line.append(tree.name.ljust(name_width), style="bold")
            line.append("  ")
            line.append(tree.branch or "(detached)", style="dim" if not tree.branch else "")
            line.append("  ")
            line.append(tree.commit_short, style="dim")
            counters = format_counters(self._counters.get(tree.path))
            if counters.cell_len:
                line.append("  ")
                line.append_text(counters)
            if i == self._selected:
                line.stylize(_SELECTED if self._active else _SELECTED_INACTIVE)
            out.append_text(line)
            if i < len(self._trees) - 1:
                out.append("\n")
        return out
