"""Unit tests for PaneLayoutController."""

from unittest.mock import Mock

from worktrees_tui.core.pane_layout import PaneLayoutController
from worktrees_tui.core.tmux_panes import TmuxResult


class FakeTmux:
    """Inspector double that tracks the dashboard pane's width."""

    def __init__(self, width: int = 80, fail: str | None = None) -> None:
        self.width = width
        self.fail = fail
        self.is_available = True
        self.calls: list[tuple[str, ...]] = []

    def get_self_pane_id(self) -> str:
        return "%0"

    def display(self, fmt: str, target: str | None = None) -> str:
        return f"{self.width}\t@1"

    def run(self, *args: str) -> TmuxResult:
        self.calls.append(args)
        if args[0] == self.fail:
            return TmuxResult(1, "", "failed")
        if args[0] == "resize-pane":
            self.width = int(args[args.index("-x") + 1])
        return TmuxResult(0, "", "")


def test_toggle_minimize_restore_minimize_reproduces_width():
    tmux = FakeTmux(width=80)
    layout = PaneLayoutController(tmux)  # type: ignore[arg-type]

    first = layout.toggle_width(None)
    assert (first.action, first.width, tmux.width) == ("minimized", 80, 3)

    second = layout.toggle_width(first.width)
    assert (second.action, second.width, tmux.width) == ("restored", 80, 80)

    third = layout.toggle_width(None)
    assert (third.action, third.width, tmux.width) == ("minimized", 80, 3)


def test_toggle_within_tolerance_counts_as_minimized():
    tmux = FakeTmux(width=5)
    layout = PaneLayoutController(tmux)  # type: ignore[arg-type]

    result = layout.toggle_width(60)

    assert result.action == "restored"
    assert tmux.width == 60


def test_toggle_small_pane_without_stored_width_minimizes():
    tmux = FakeTmux(width=4)
    layout = PaneLayoutController(tmux)  # type: ignore[arg-type]

    result = layout.toggle_width(None)

    assert result.action == "minimized"
    assert result.width == 4


def test_move_left_breaks_joins_before_and_restores_width():
    tmux = FakeTmux(width=42)
    layout = PaneLayoutController(tmux)  # type: ignore[arg-type]

    result = layout.move_current_pane("left")

    assert result.success
    assert tmux.calls == [
        ("break-pane", "-d", "-s", "%0"),
        ("join-pane", "-f", "-h", "-b", "-s", "%0", "-t", "@1"),
        ("resize-pane", "-t", "%0", "-x", "42"),
    ]


def test_move_right_joins_after():
    tmux = FakeTmux()
    layout = PaneLayoutController(tmux)  # type: ignore[arg-type]

    layout.move_current_pane("right")

    assert tmux.calls[1] == ("join-pane", "-f", "-h", "-s", "%0", "-t", "@1")


def test_move_reports_failed_join_without_retry():
    tmux = FakeTmux(fail="join-pane")
    layout = PaneLayoutController(tmux)  # type: ignore[arg-type]

    result = layout.move_current_pane("right")

    assert not result.success
    assert "join-pane failed" in (result.error or "")
    assert [c[0] for c in tmux.calls] == ["break-pane", "join-pane"]


def test_layout_outside_tmux_fails():
    inspector = Mock(is_available=False)
    layout = PaneLayoutController(inspector)

    assert not layout.toggle_width(10).success
    assert not layout.move_current_pane("left").success
    inspector.run.assert_not_called()
