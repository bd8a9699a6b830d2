"""Pytest configuration for worktrees-tui tests."""

import logging

import pytest

logging.getLogger("worktrees_tui").handlers.clear()


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory and set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        parts = item.path.parts
        if "unit" in parts:
            item.add_marker(pytest.mark.unit)
        elif "integration" in parts:
            item.add_marker(pytest.mark.integration)

        if item.get_closest_marker("timeout") is not None:
            continue
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))


@pytest.fixture
def tmux_env(monkeypatch):
    """Pretend to run inside tmux in pane %0."""
    monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1,0")
    monkeypatch.setenv("TMUX_PANE", "%0")


@pytest.fixture
def no_tmux_env(monkeypatch):
    monkeypatch.delenv("TMUX", raising=False)
    monkeypatch.delenv("TMUX_PANE", raising=False)
