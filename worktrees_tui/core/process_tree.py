"""Classify whether a Claude Code process runs under a pane's shell.

One snapshot of the host process table is taken per classification pass and
the pane's process subtree is walked breadth-first from it. The tree can
change between the snapshot and its use; answers may be stale by one poll.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import psutil

from worktrees_tui.constants import ASSISTANT_BINARIES, ASSISTANT_PACKAGE_MARKERS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessInfo:
    pid: int
    ppid: int
    cmdline: tuple[str, ...]


@dataclass
class ProcessTable:
    """Point-in-time view of the host process table."""

    processes: dict[int, ProcessInfo] = field(default_factory=dict)
    children: dict[int, list[int]] = field(default_factory=dict)

    @classmethod
    def from_processes(cls, processes: Iterable[ProcessInfo]) -> "ProcessTable":
        table = cls()
        for proc in processes:
            table.processes[proc.pid] = proc
            table.children.setdefault(proc.ppid, []).append(proc.pid)
        return table

    @classmethod
    def snapshot(cls) -> "ProcessTable":
        """Read pid, ppid and cmdline for every process in one pass."""
        processes: list[ProcessInfo] = []
        try:
            for proc in psutil.process_iter(["pid", "ppid", "cmdline"]):
                info = proc.info
                pid = info.get("pid")
                if pid is None:
                    continue
                cmdline = info.get("cmdline") or ()
                processes.append(ProcessInfo(pid=pid, ppid=info.get("ppid") or 0, cmdline=tuple(cmdline)))
        except (psutil.Error, OSError) as e:
            logger.warning("Failed to read process table: %s", e)
            return cls()
        return cls.from_processes(processes)

    def __bool__(self) -> bool:
        return bool(self.processes)


def is_assistant_command(
    cmdline: Sequence[str],
    binaries: Sequence[str] = ASSISTANT_BINARIES,
    package_markers: Sequence[str] = ASSISTANT_PACKAGE_MARKERS,
) -> bool:
    """Match a command line against assistant signatures.

    The short binary name must equal a whole argv token's basename, so
    ``/usr/local/bin/claude`` matches and ``claudette`` does not. Package
    identifiers (``@anthropic-ai/claude-code``) match as substrings.
    """
    if not cmdline:
        return False
    names = set(binaries)
    if any(os.path.basename(token) in names for token in cmdline):
        return True
    joined = " ".join(cmdline)
    return any(marker in joined for marker in package_markers)


class ProcessTreeClassifier:
    """Answers "is the assistant running under this pid?"."""

    def __init__(self, binaries: Sequence[str] = ASSISTANT_BINARIES) -> None:
        self.binaries = tuple(binaries)

    def _matches(self, info: Optional[ProcessInfo]) -> bool:
        return info is not None and is_assistant_command(info.cmdline, self.binaries)

    def is_assistant_running(self, root_pid: int, table: Optional[ProcessTable] = None) -> bool:
        """Check ``root_pid`` and then its descendants breadth-first."""
        if table is None:
            table = ProcessTable.snapshot()
        if not table:
            return False

        if self._matches(table.processes.get(root_pid)):
            return True

        visited = {root_pid}
        queue = deque(table.children.get(root_pid, ()))
        while queue:
            pid = queue.popleft()
            if pid in visited:
                continue
            visited.add(pid)
            if self._matches(table.processes.get(pid)):
                return True
            queue.extend(table.children.get(pid, ()))
        return False
