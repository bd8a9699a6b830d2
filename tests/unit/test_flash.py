"""Unit tests for the waiting-for-input flash tracker."""

from worktrees_tui.cli.tui.flash import FlashIndicator, FlashTracker
from worktrees_tui.core.models import AssistantSession


def _session(waiting):
    return AssistantSession(pane_index=1, pane_id="%1", cwd="/r", waiting_for_input=waiting)


def test_not_waiting_has_no_indicator():
    tracker = FlashTracker(500, 10000)
    tracker.update([_session(False)], now=0.0)

    assert tracker.indicator("%1", 0.0) is FlashIndicator.NONE
    assert not tracker.is_blinking


def test_unknown_waiting_state_does_not_flash():
    tracker = FlashTracker(500, 10000)
    tracker.update([_session(None)], now=0.0)

    assert tracker.indicator("%1", 1.0) is FlashIndicator.NONE


def test_blinks_then_goes_solid():
    tracker = FlashTracker(500, 10000)
    tracker.update([_session(True)], now=100.0)

    assert tracker.indicator("%1", 100.0) is FlashIndicator.ON
    assert tracker.indicator("%1", 100.6) is FlashIndicator.OFF
    assert tracker.indicator("%1", 101.1) is FlashIndicator.ON
    assert tracker.indicator("%1", 110.0) is FlashIndicator.SOLID


def test_repeated_updates_keep_first_start():
    tracker = FlashTracker(500, 1000)
    tracker.update([_session(True)], now=0.0)
    tracker.update([_session(True)], now=5.0)

    assert tracker.indicator("%1", 5.0) is FlashIndicator.SOLID


def test_leaving_waiting_resets_the_timer():
    tracker = FlashTracker(500, 1000)
    tracker.update([_session(True)], now=0.0)
    tracker.update([_session(False)], now=2.0)
    tracker.update([_session(True)], now=3.0)

    assert tracker.indicator("%1", 3.1) is FlashIndicator.ON


def test_zero_duration_blinks_forever():
    tracker = FlashTracker(500, 0)
    tracker.update([_session(True)], now=0.0)

    assert tracker.indicator("%1", 3600.2) in (FlashIndicator.ON, FlashIndicator.OFF)
