"""Claude Code hook receiver: records session state for the dashboard.

Installed as a Claude Code hook command::

    worktrees-tui-hook SessionStart       (JSON payload on stdin)

Each session gets one state file ``<state_dir>/<session_id>.json`` holding
the lifecycle state and the tmux pane the session runs in. The file is
replaced atomically on every event and deleted on session end. Hooks for one
session can fire concurrently; they take turns on ``<session_id>.lock``.
"""

from __future__ import annotations

import argparse
import fcntl
import json
import logging
import os
import socket
import sys
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, cast

from worktrees_tui.config import load_dashboard_config
from worktrees_tui.logging_config import setup_logging

logger = logging.getLogger(__name__)

EVENT_STATES: dict[str, Optional[str]] = {
    "session_start": "start",
    "user_prompt_submit": "working",
    "pre_tool_use": "working",
    "notification": "waiting",
    "stop": "waiting",
    "session_end": None,
}

_DEVCONTAINER_ENV_VARS = ("DEVCONTAINER", "REMOTE_CONTAINERS")


def normalize_event(event: str) -> str:
    """Map ``SessionStart`` / ``session-start`` / ``session_start`` to snake case."""
    out: list[str] = []
    for i, ch in enumerate(event.strip()):
        if ch == "-":
            out.append("_")
        elif ch.isupper():
            if i and out and out[-1] != "_":
                out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def is_devcontainer() -> bool:
    return any(os.environ.get(name) for name in _DEVCONTAINER_ENV_VARS)


def build_state_record(
    data: dict[str, object],
    state: str,
    pane_id: str,
    now: Optional[float] = None,
) -> dict[str, object]:
    """Build the JSON record the dashboard's plugin state reader consumes."""
    cwd = data.get("cwd")
    return {
        "session_id": data.get("session_id"),
        "cwd": cwd if isinstance(cwd, str) and cwd else os.getcwd(),
        "state": state,
        "pane_id": pane_id,
        "timestamp": time.time() if now is None else now,
        "hostname": socket.gethostname(),
        "is_devcontainer": is_devcontainer(),
    }


@contextmanager
def session_lock(state_dir: Path, session_id: str) -> Iterator[None]:
    """Hold an exclusive lock on ``<session_id>.lock`` so concurrent hooks apply in turn."""
    state_dir.mkdir(parents=True, exist_ok=True)
    with open(state_dir / f"{session_id}.lock", "w", encoding="utf-8") as lock_file:
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


def write_state_atomic(path: Path, record: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.stem}.",
        suffix=".tmp",
        delete=False,
    ) as f:
        tmp_path = Path(f.name)
        try:
            json.dump(record, f, indent=2, sort_keys=True)
            f.flush()
            os.fsync(f.fileno())
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
    os.replace(tmp_path, path)


def handle_event(event: str, data: dict[str, object], state_dir: Path, pane_id: Optional[str]) -> Optional[Path]:
    """Apply one hook event. Returns the state file touched, or None when ignored."""
    event = normalize_event(event)
    if event not in EVENT_STATES:
        logger.debug("Ignoring hook event %s", event)
        return None

    session_id = data.get("session_id")
    if not isinstance(session_id, str) or not session_id:
        logger.warning("Hook event %s without session_id", event)
        return None
    path = state_dir / f"{session_id}.json"

    state = EVENT_STATES[event]
    if state is None:
        with session_lock(state_dir, session_id):
            path.unlink(missing_ok=True)
        logger.debug("Removed state for session %s", session_id)
        return path

    if not pane_id:
        # Not running in tmux: the dashboard has no pane to attach this to.
        logger.debug("No TMUX_PANE for session %s, skipping", session_id)
        return None

    with session_lock(state_dir, session_id):
        write_state_atomic(path, build_state_record(data, state, pane_id))
    logger.debug("Session %s -> %s (pane %s)", session_id, state, pane_id)
    return path


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="worktrees-tui Claude Code hook receiver")
    parser.add_argument("event_type", help="Hook event type (e.g. SessionStart, Stop)")
    parser.add_argument("--state-dir", default=None, help="Override the session state directory")
    return parser.parse_args(argv)


def _read_stdin() -> dict[str, object]:
    if sys.stdin.isatty():
        return {}
    raw_input = sys.stdin.read()
    if not raw_input.strip():
        return {}
    parsed = json.loads(raw_input)
    if not isinstance(parsed, dict):
        raise ValueError("Hook stdin payload must be a JSON object")
    return cast(dict[str, object], parsed)


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)
    setup_logging()

    try:
        data = _read_stdin()
    except json.JSONDecodeError:
        logger.error("Invalid hook payload JSON from stdin (event %s)", args.event_type)
        sys.exit(1)
    except ValueError as exc:
        logger.error("%s (event %s)", exc, args.event_type)
        sys.exit(1)

    state_dir = Path(args.state_dir) if args.state_dir else Path(load_dashboard_config().state_dir)
    try:
        handle_event(args.event_type, data, state_dir, os.environ.get("TMUX_PANE"))
    except OSError as exc:
        logger.error("Failed to record hook event %s: %s", args.event_type, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
