from __future__ import annotations

import os
from pathlib import Path


def _xdg_dir(env_var: str, fallback: str) -> Path:
    value = os.environ.get(env_var)
    return Path(value).expanduser() if value else Path(fallback).expanduser()


STATE_HOME = _xdg_dir("XDG_STATE_HOME", "~/.local/state") / "worktrees-tui"
CONFIG_HOME = _xdg_dir("XDG_CONFIG_HOME", "~/.config") / "worktrees-tui"

DEFAULT_CONFIG_PATH = CONFIG_HOME / "config.yml"
DEFAULT_PLUGIN_STATE_DIR = STATE_HOME / "sessions"
DEFAULT_LOG_DIR = STATE_HOME / "logs"
DEFAULT_PROJECTS_DIR = (Path("~/.claude") / "projects").expanduser()
