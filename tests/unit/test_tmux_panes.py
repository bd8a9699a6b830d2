"""Unit tests for TmuxPaneInspector."""

from unittest.mock import Mock, patch

import pytest

from worktrees_tui.core.errors import HostEnvironmentError
from worktrees_tui.core.models import PaneFailure
from worktrees_tui.core.tmux_panes import (
    TmuxPaneInspector,
    TmuxResult,
    parse_pane_lines,
    parse_pane_path_lines,
    require_tmux,
)

PATHS_OUTPUT = "0\t%0\t/repo\n1\t%3\t/repo-feature\n2\t%7\t/repo-feature\n3\t%9\t/elsewhere"


def _inspector_with(output: str) -> tuple[TmuxPaneInspector, Mock]:
    inspector = TmuxPaneInspector()
    mock_run = Mock(return_value=TmuxResult(0, output, ""))
    inspector.run = mock_run  # type: ignore[method-assign]
    return inspector, mock_run


def test_require_tmux_raises_outside_tmux(no_tmux_env):
    with pytest.raises(HostEnvironmentError):
        require_tmux()


def test_parse_pane_lines_reads_all_fields():
    panes = parse_pane_lines("1\t%3\tzsh\t4242\teditor\t/home/u/repo\nbad line\n")

    assert len(panes) == 1
    pane = panes[0]
    assert (pane.index, pane.id, pane.command, pane.pid, pane.window_name, pane.cwd) == (
        1,
        "%3",
        "zsh",
        4242,
        "editor",
        "/home/u/repo",
    )


def test_parse_pane_path_lines_keeps_tabs_in_path():
    panes = parse_pane_path_lines("2\t%5\t/tmp/odd\tname\n")

    assert panes[0].cwd == "/tmp/odd\tname"


def test_list_panes_returns_empty_outside_tmux(no_tmux_env):
    inspector = TmuxPaneInspector()
    with patch.object(inspector, "run") as mock_run:
        assert inspector.list_panes() == []
    mock_run.assert_not_called()


def test_list_panes_targets_the_dashboard_window(tmux_env):
    inspector, mock_run = _inspector_with("0\t%0\tpython\t1\tw\t/repo")

    inspector.list_panes()

    args = mock_run.call_args.args
    assert args[:3] == ("list-panes", "-t", "%0")


def test_self_pane_id_prefers_tmux_pane_env(tmux_env):
    inspector, mock_run = _inspector_with("%42")

    assert inspector.get_self_pane_id() == "%0"
    mock_run.assert_not_called()


def test_find_panes_matching_path_excludes_self(tmux_env):
    inspector, _ = _inspector_with("0\t%0\t/repo-feature\n1\t%3\t/repo-feature/\n")

    matches = inspector.find_panes_matching_path("/repo-feature")

    assert [p.index for p in matches] == [1]


def test_send_directory_change_to_unknown_pane_lists_valid_indices(tmux_env):
    inspector, mock_run = _inspector_with(PATHS_OUTPUT)

    result = inspector.send_directory_change(8, "/repo")

    assert not result.success
    assert result.failure is PaneFailure.PANE_NOT_FOUND
    assert result.valid_indices == (0, 1, 2, 3)
    assert result.error == "Pane 8 not found. Valid panes: 0, 1, 2, 3"
    assert all(call.args[0] != "send-keys" for call in mock_run.call_args_list)


def test_send_directory_change_refuses_self_pane(tmux_env):
    inspector, mock_run = _inspector_with(PATHS_OUTPUT)

    result = inspector.send_directory_change(0, "/repo")

    assert not result.success
    assert result.failure is PaneFailure.TARGET_IS_SELF
    assert 0 not in result.valid_indices
    assert all(call.args[0] != "send-keys" for call in mock_run.call_args_list)


def test_send_directory_change_quotes_path_and_targets_pane_id(tmux_env):
    inspector, mock_run = _inspector_with(PATHS_OUTPUT)

    result = inspector.send_directory_change(3, "/path with space/it's")

    assert result.success
    send_call = mock_run.call_args_list[-1]
    assert send_call.args == ("send-keys", "-t", "%9", "cd '/path with space/it'\"'\"'s'", "Enter")


def test_send_directory_change_outside_tmux(no_tmux_env):
    result = TmuxPaneInspector().send_directory_change(1, "/repo")

    assert result.failure is PaneFailure.NOT_IN_TMUX


def test_focus_pane_reports_command_failure(tmux_env):
    inspector = TmuxPaneInspector()

    def fake_run(*args):
        if args[0] == "list-panes":
            return TmuxResult(0, PATHS_OUTPUT, "")
        return TmuxResult(1, "", "can't find pane")

    inspector.run = fake_run  # type: ignore[method-assign]

    result = inspector.focus_pane(2)

    assert not result.success
    assert result.failure is PaneFailure.COMMAND_FAILED
    assert "can't find pane" in (result.error or "")


def test_run_reports_missing_binary_as_127():
    result = TmuxPaneInspector(tmux_binary="/nonexistent/tmux").run("list-panes")

    assert result.returncode == 127
    assert not result.ok
