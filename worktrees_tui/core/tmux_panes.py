"""Tmux pane inspection and pane-targeted commands.

All listings are scoped to the window containing the dashboard's own pane
(the "self" pane, identified by ``TMUX_PANE``).
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional

from worktrees_tui.core.errors import HostEnvironmentError
from worktrees_tui.core.models import Pane, PaneCommandResult, PaneFailure

logger = logging.getLogger(__name__)

_FIELD_SEP = "\t"
_PANE_FORMAT = _FIELD_SEP.join(
    [
        "#{pane_index}",
        "#{pane_id}",
        "#{pane_current_command}",
        "#{pane_pid}",
        "#{window_name}",
        "#{pane_current_path}",
    ]
)
_PANE_PATH_FORMAT = _FIELD_SEP.join(["#{pane_index}", "#{pane_id}", "#{pane_current_path}"])


def in_tmux() -> bool:
    return bool(os.environ.get("TMUX"))


def require_tmux() -> None:
    """Raise when the dashboard is started outside a tmux client."""
    if not in_tmux():
        raise HostEnvironmentError("worktrees-tui must be run inside tmux")


def _normalize_path(path: str) -> str:
    return os.path.normpath(path) if path else path


@dataclass(frozen=True)
class TmuxResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def parse_pane_lines(output: str) -> list[Pane]:
    """Parse heavy ``list-panes`` output (index, id, command, pid, window, cwd)."""
    panes: list[Pane] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split(_FIELD_SEP, 5)
        if len(parts) < 6:
            logger.debug("Skipping malformed pane line: %r", line)
            continue
        index_str, pane_id, command, pid_str, window_name, cwd = parts
        try:
            index = int(index_str)
        except ValueError:
            continue
        pid = int(pid_str) if pid_str.isdigit() else None
        panes.append(Pane(index=index, id=pane_id, cwd=cwd, command=command, pid=pid, window_name=window_name))
    return panes


def parse_pane_path_lines(output: str) -> list[Pane]:
    """Parse cheap ``list-panes`` output (index, id, cwd)."""
    panes: list[Pane] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split(_FIELD_SEP, 2)
        if len(parts) < 3:
            continue
        try:
            index = int(parts[0])
        except ValueError:
            continue
        panes.append(Pane(index=index, id=parts[1], cwd=parts[2]))
    return panes


class TmuxPaneInspector:
    """Reads pane metadata from tmux and sends keys/focus to panes."""

    def __init__(self, tmux_binary: str = "tmux") -> None:
        self.tmux_binary = tmux_binary
        self._self_pane_id: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return in_tmux()

    def run(self, *args: str) -> TmuxResult:
        """Run a tmux command. A missing binary is reported as exit code 127."""
        try:
            result = subprocess.run(
                [self.tmux_binary, *args],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            logger.warning("tmux %s failed: %s", args[0] if args else "", e)
            return TmuxResult(returncode=127, stdout="", stderr=str(e))
        if result.returncode != 0:
            logger.debug("tmux %s exited %d: %s", " ".join(args), result.returncode, result.stderr.strip())
        return TmuxResult(returncode=result.returncode, stdout=result.stdout.strip(), stderr=result.stderr.strip())

    def display(self, fmt: str, target: Optional[str] = None) -> Optional[str]:
        """Evaluate a tmux format string via ``display-message -p``."""
        args = ["display-message"]
        if target:
            args += ["-t", target]
        args += ["-p", fmt]
        result = self.run(*args)
        if not result.ok or not result.stdout:
            return None
        return result.stdout

    def get_self_pane_id(self) -> Optional[str]:
        """Return the pane id the dashboard runs in.

        Prefers TMUX_PANE (fixed for the pane's lifetime) over display-message,
        which reports the currently focused pane.
        """
        if self._self_pane_id:
            return self._self_pane_id
        pane_id = os.environ.get("TMUX_PANE") or self.display("#{pane_id}")
        self._self_pane_id = pane_id
        return pane_id

    def _list_args(self, fmt: str) -> list[str]:
        args = ["list-panes"]
        self_id = self.get_self_pane_id()
        if self_id:
            args += ["-t", self_id]
        return args + ["-F", fmt]

    def list_panes(self) -> list[Pane]:
        """List panes in the dashboard's window with process metadata."""
        if not self.is_available:
            return []
        result = self.run(*self._list_args(_PANE_FORMAT))
        if not result.ok:
            return []
        return parse_pane_lines(result.stdout)

    def list_pane_paths(self) -> list[Pane]:
        """List panes with cwd only (cheaper format)."""
        if not self.is_available:
            return []
        result = self.run(*self._list_args(_PANE_PATH_FORMAT))
        if not result.ok:
            return []
        return parse_pane_path_lines(result.stdout)

    def get_self_pane_index(self, panes: Optional[list[Pane]] = None) -> Optional[int]:
        self_id = self.get_self_pane_id()
        for pane in panes if panes is not None else self.list_pane_paths():
            if pane.id == self_id:
                return pane.index
        return None

    def pane_index_for_id(self, pane_id: str, panes: Optional[list[Pane]] = None) -> Optional[int]:
        for pane in panes if panes is not None else self.list_pane_paths():
            if pane.id == pane_id:
                return pane.index
        return None

    def find_panes_matching_path(self, path: str) -> list[Pane]:
        """Return non-self panes whose cwd equals ``path``."""
        target = _normalize_path(path)
        self_id = self.get_self_pane_id()
        return [
            pane for pane in self.list_pane_paths() if pane.id != self_id and _normalize_path(pane.cwd) == target
        ]

    def _validate_target(self, index: int) -> tuple[Optional[Pane], PaneCommandResult]:
        if not self.is_available:
            return None, PaneCommandResult(False, "Not running inside tmux", PaneFailure.NOT_IN_TMUX)

        panes = self.list_pane_paths()
        target = next((p for p in panes if p.index == index), None)
        valid = tuple(p.index for p in panes)
        if target is None:
            valid_text = ", ".join(str(i) for i in valid) or "none"
            return None, PaneCommandResult(
                False,
                f"Pane {index} not found. Valid panes: {valid_text}",
                PaneFailure.PANE_NOT_FOUND,
                valid,
            )
        if target.id == self.get_self_pane_id():
            others = tuple(i for i in valid if i != index)
            return None, PaneCommandResult(
                False,
                "Cannot send to the dashboard's own pane",
                PaneFailure.TARGET_IS_SELF,
                others,
            )
        return target, PaneCommandResult.ok()

    def send_directory_change(self, index: int, path: str) -> PaneCommandResult:
        """Type ``cd <path>`` + Enter into pane ``index``."""
        target, verdict = self._validate_target(index)
        if target is None:
            return verdict
        result = self.run("send-keys", "-t", target.id, f"cd {shlex.quote(path)}", "Enter")
        if not result.ok:
            return PaneCommandResult(
                False, f"send-keys failed: {result.stderr or result.returncode}", PaneFailure.COMMAND_FAILED
            )
        logger.info("Sent cd %s to pane %d (%s)", path, index, target.id)
        return PaneCommandResult.ok()

    def focus_pane(self, index: int) -> PaneCommandResult:
        """Select pane ``index``."""
        target, verdict = self._validate_target(index)
        if target is None:
            return verdict
        result = self.run("select-pane", "-t", target.id)
        if not result.ok:
            return PaneCommandResult(
                False, f"select-pane failed: {result.stderr or result.returncode}", PaneFailure.COMMAND_FAILED
            )
        logger.debug("Focused pane %d (%s)", index, target.id)
        return PaneCommandResult.ok()
