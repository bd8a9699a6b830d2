"""Read session state files written by the companion Claude Code plugin.

One JSON file per session lives in the plugin state directory. Files are
eventually consistent inputs: they are never locked, and anything older than
the freshness window is treated as if it did not exist.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

from worktrees_tui.constants import PLUGIN_STATE_MAX_AGE_S
from worktrees_tui.core.models import PluginState

logger = logging.getLogger(__name__)

_VALID_STATES = ("start", "working", "waiting")
_EPOCH_MS_THRESHOLD = 1e12


def parse_timestamp(value: object) -> Optional[float]:
    """Convert an ISO-8601 string or epoch seconds/milliseconds to epoch seconds."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = float(value)
        return seconds / 1000.0 if seconds > _EPOCH_MS_THRESHOLD else seconds
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).timestamp()
        except ValueError:
            return None
    return None


def parse_plugin_state(data: Mapping[str, object]) -> Optional[PluginState]:
    """Build a PluginState from decoded JSON, or None when required fields are missing."""
    session_id = data.get("session_id")
    cwd = data.get("cwd")
    state = data.get("state")
    pane_id = data.get("pane_id")
    timestamp = parse_timestamp(data.get("timestamp"))
    if not isinstance(session_id, str) or not isinstance(cwd, str) or not isinstance(pane_id, str):
        return None
    if state not in _VALID_STATES or timestamp is None or not pane_id:
        return None
    hostname = data.get("hostname")
    return PluginState(
        session_id=session_id,
        cwd=cwd,
        state=state,  # type: ignore[arg-type]
        pane_id=pane_id,
        timestamp=timestamp,
        hostname=hostname if isinstance(hostname, str) and hostname else None,
        is_devcontainer=bool(data.get("is_devcontainer", False)),
    )


def is_fresh(state: PluginState, now: float, max_age_s: float = PLUGIN_STATE_MAX_AGE_S) -> bool:
    return now - state.timestamp <= max_age_s


def waiting_from_state(state: Optional[PluginState]) -> Optional[bool]:
    """Map plugin lifecycle to the waiting-for-input tri-state."""
    if state is None:
        return None
    return state.state == "waiting"


class PluginStateReader:
    """Loads fresh plugin state, keyed by tmux pane id."""

    def __init__(self, state_dir: Path, max_age_s: float = PLUGIN_STATE_MAX_AGE_S) -> None:
        self.state_dir = Path(state_dir)
        self.max_age_s = max_age_s

    def _load_file(self, path: Path) -> Optional[PluginState]:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.debug("Skipping unreadable plugin state %s: %s", path, e)
            return None
        if not isinstance(raw, dict):
            return None
        return parse_plugin_state(raw)

    def read_fresh(self, now: Optional[float] = None) -> dict[str, PluginState]:
        """Return the newest fresh state per pane id."""
        now = time.time() if now is None else now
        if not self.state_dir.is_dir():
            return {}

        by_pane: dict[str, PluginState] = {}
        for path in sorted(self.state_dir.glob("*.json")):
            state = self._load_file(path)
            if state is None:
                continue
            if not is_fresh(state, now, self.max_age_s):
                logger.debug("Discarding stale plugin state %s (pane %s)", state.session_id, state.pane_id)
                continue
            current = by_pane.get(state.pane_id)
            if current is None or state.timestamp > current.timestamp:
                by_pane[state.pane_id] = state
        return by_pane
