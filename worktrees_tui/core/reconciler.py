"""Reconciliation loop: polls git, tmux and session sources into snapshots.

Three slices poll on independent cadences derived from one base interval:

    trees     every base
    counters  every max(base, 2000 ms)
    sessions  every max(base, 1000 ms)

A base of 0 disables periodic polling (each slice loads once, then only on
explicit refresh requests). Each slice is a single task that polls, publishes
and then waits, so a slow poll delays its own next tick and never overlaps
itself. Refresh requests made while a poll runs coalesce into one re-poll.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from enum import Enum
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from worktrees_tui.config.schema import DashboardConfig
from worktrees_tui.constants import SESSIONS_MIN_INTERVAL_MS, SYNC_COUNTERS_MIN_INTERVAL_MS
from worktrees_tui.core.git_worktrees import fetch_sync_counters, list_working_trees
from worktrees_tui.core.models import AssistantSession, Snapshot, SyncCounters, WorkingTree
from worktrees_tui.core.session_detection import SessionDetector

logger = logging.getLogger(__name__)

ListTrees = Callable[[str], Sequence[WorkingTree]]
FetchCounters = Callable[[Sequence[str]], Awaitable[Mapping[str, SyncCounters]]]
PublishCallback = Callable[[Snapshot], None]


class PollSlice(str, Enum):
    TREES = "trees"
    COUNTERS = "counters"
    SESSIONS = "sessions"


def slice_intervals(base_ms: int) -> dict[PollSlice, Optional[float]]:
    """Return per-slice intervals in seconds (None = periodic polling disabled)."""
    if base_ms <= 0:
        return {s: None for s in PollSlice}
    return {
        PollSlice.TREES: base_ms / 1000.0,
        PollSlice.COUNTERS: max(base_ms, SYNC_COUNTERS_MIN_INTERVAL_MS) / 1000.0,
        PollSlice.SESSIONS: max(base_ms, SESSIONS_MIN_INTERVAL_MS) / 1000.0,
    }


class Reconciler:
    """Owns the published Snapshot and the polling tasks that replace it."""

    def __init__(
        self,
        config: DashboardConfig,
        detector: SessionDetector,
        *,
        on_publish: Optional[PublishCallback] = None,
        list_trees: Optional[ListTrees] = None,
        fetch_counters: Optional[FetchCounters] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.detector = detector
        self.on_publish = on_publish
        self._list_trees: ListTrees = list_trees or list_working_trees
        self._fetch_counters: FetchCounters = fetch_counters or fetch_sync_counters
        self._clock = clock
        self.intervals = slice_intervals(config.refresh_interval_ms)
        self.snapshot = Snapshot()
        self._wake: dict[PollSlice, asyncio.Event] = {}
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def _publish(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        if self.on_publish is not None:
            self.on_publish(snapshot)

    async def _poll_trees(self) -> None:
        trees = tuple(await asyncio.to_thread(self._list_trees, self.config.root))
        previous_paths = {t.path for t in self.snapshot.trees}
        paths = {t.path for t in trees}
        counters = {path: c for path, c in self.snapshot.counters.items() if path in paths}
        self._publish(replace(self.snapshot, trees=trees, counters=counters, trees_loaded_at=self._clock()))
        if paths != previous_paths and PollSlice.COUNTERS in self._wake:
            self._wake[PollSlice.COUNTERS].set()

    async def _poll_counters(self) -> None:
        paths = [t.path for t in self.snapshot.trees]
        fetched = await self._fetch_counters(paths) if paths else {}
        # The tree list may have changed while the batch was running.
        current = {t.path for t in self.snapshot.trees}
        counters = {path: c for path, c in fetched.items() if path in current}
        self._publish(replace(self.snapshot, counters=counters, counters_loaded_at=self._clock()))

    async def _poll_sessions(self) -> None:
        sessions: list[AssistantSession] = await asyncio.to_thread(self.detector.detect_sessions)
        self._publish(replace(self.snapshot, sessions=tuple(sessions), sessions_loaded_at=self._clock()))

    async def poll_once(self, slice_: PollSlice) -> None:
        """Poll one slice and publish it. Failures keep the previous slice value."""
        poll = {
            PollSlice.TREES: self._poll_trees,
            PollSlice.COUNTERS: self._poll_counters,
            PollSlice.SESSIONS: self._poll_sessions,
        }[slice_]
        try:
            await poll()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Polling %s failed", slice_.value)

    async def _run_slice(self, slice_: PollSlice) -> None:
        wake = self._wake[slice_]
        interval = self.intervals[slice_]
        while True:
            wake.clear()
            await self.poll_once(slice_)
            if interval is None:
                await wake.wait()
                continue
            try:
                await asyncio.wait_for(wake.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    def start(self) -> None:
        """Start one polling task per slice on the running event loop."""
        if self.is_running:
            return
        self._wake = {s: asyncio.Event() for s in PollSlice}
        self._tasks = [asyncio.create_task(self._run_slice(s), name=f"poll-{s.value}") for s in PollSlice]
        logger.info(
            "Reconciler started (intervals: %s)",
            {s.value: i for s, i in self.intervals.items()},
        )

    def request_refresh(self, *slices: PollSlice) -> None:
        """Ask slices to re-poll as soon as their current poll (if any) finishes."""
        for slice_ in slices or tuple(PollSlice):
            event = self._wake.get(slice_)
            if event is not None:
                event.set()

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
