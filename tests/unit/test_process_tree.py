"""Unit tests for the assistant process-tree classifier."""

from unittest.mock import patch

import psutil

from worktrees_tui.core.process_tree import (
    ProcessInfo,
    ProcessTable,
    ProcessTreeClassifier,
    is_assistant_command,
)


def _table(*procs: tuple[int, int, tuple[str, ...]]) -> ProcessTable:
    return ProcessTable.from_processes(ProcessInfo(pid, ppid, cmd) for pid, ppid, cmd in procs)


def test_is_assistant_command_matches_whole_token():
    assert is_assistant_command(("claude", "--resume"))
    assert is_assistant_command(("/usr/local/bin/claude",))
    assert not is_assistant_command(("claudette",))
    assert not is_assistant_command(("vim", "claude-notes.md"))
    assert not is_assistant_command(())


def test_is_assistant_command_ignores_words_inside_an_argument():
    assert not is_assistant_command(("git", "commit", "-m", "fix claude detection"))
    assert not is_assistant_command(("bash", "-c", "echo claude"))


def test_is_assistant_command_matches_package_identifier():
    cmd = ("node", "/usr/lib/node_modules/@anthropic-ai/claude-code/cli.js")

    assert is_assistant_command(cmd)


def test_classifier_checks_root_process_first():
    table = _table((100, 1, ("claude", "--resume")))

    assert ProcessTreeClassifier().is_assistant_running(100, table)


def test_classifier_walks_descendants():
    """shell -> npx -> node running the CLI bundle is detected."""
    table = _table(
        (100, 1, ("-zsh",)),
        (200, 100, ("npx", "something")),
        (300, 200, ("node", "/opt/claude-code/cli.js")),
        (400, 1, ("claude",)),  # unrelated tree
    )

    assert ProcessTreeClassifier().is_assistant_running(100, table)


def test_classifier_ignores_unrelated_trees():
    table = _table(
        (100, 1, ("-zsh",)),
        (200, 100, ("vim",)),
        (400, 1, ("claude",)),
    )

    assert not ProcessTreeClassifier().is_assistant_running(100, table)


def test_classifier_empty_table_is_false():
    assert not ProcessTreeClassifier().is_assistant_running(100, ProcessTable())


def test_classifier_survives_pid_cycles():
    table = _table((100, 200, ("sh",)), (200, 100, ("sh",)))

    assert not ProcessTreeClassifier().is_assistant_running(100, table)


def test_classifier_uses_configured_binaries():
    table = _table((100, 1, ("my-claude-wrapper",)))

    assert ProcessTreeClassifier(("my-claude-wrapper",)).is_assistant_running(100, table)
    assert not ProcessTreeClassifier().is_assistant_running(100, table)


def test_snapshot_returns_empty_table_on_psutil_error():
    with patch("psutil.process_iter", side_effect=psutil.AccessDenied()):
        table = ProcessTable.snapshot()

    assert not table
