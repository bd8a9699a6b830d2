"""Waiting-for-input flash indicator.

A session that enters the waiting state blinks for ``duration_ms`` and then
stays solid until it leaves the waiting state. Leaving resets the timer, so a
session that starts waiting again blinks again.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from worktrees_tui.core.models import AssistantSession


class FlashIndicator(str, Enum):
    NONE = "none"
    ON = "on"
    OFF = "off"
    SOLID = "solid"


class FlashTracker:
    """Tracks when each pane started waiting and derives its indicator."""

    def __init__(self, interval_ms: int = 500, duration_ms: int = 10000) -> None:
        self.interval_ms = interval_ms
        self.duration_ms = duration_ms
        self._waiting_since: dict[str, float] = {}

    def update(self, sessions: Iterable[AssistantSession], now: float) -> None:
        """Record waiting transitions from a freshly published session list."""
        waiting = {s.pane_id for s in sessions if s.waiting_for_input is True}
        for pane_id in list(self._waiting_since):
            if pane_id not in waiting:
                del self._waiting_since[pane_id]
        for pane_id in waiting:
            self._waiting_since.setdefault(pane_id, now)

    def indicator(self, pane_id: str, now: float) -> FlashIndicator:
        started = self._waiting_since.get(pane_id)
        if started is None:
            return FlashIndicator.NONE
        elapsed_ms = max(0.0, (now - started) * 1000.0)
        # duration 0 means blink for as long as the session waits
        if self.duration_ms and elapsed_ms >= self.duration_ms:
            return FlashIndicator.SOLID
        phase = int(elapsed_ms // self.interval_ms)
        return FlashIndicator.ON if phase % 2 == 0 else FlashIndicator.OFF

    @property
    def is_blinking(self) -> bool:
        return bool(self._waiting_since)
