"""Tests for the debouncing primitives.

Uses the manual scheduler from conftest so time only moves when told to.
"""

import pytest

from discovery_feed.debounce import Debouncer, LocationChangeGate, SearchDebouncer


@pytest.fixture
def received():
    return []


class TestDebouncer:
    """Tests for Debouncer."""

    def test_emits_after_window(self, scheduler, received):
        debouncer = Debouncer(scheduler, 0.3, received.append)

        debouncer.push("a")
        scheduler.advance(0.29)
        assert received == []

        scheduler.advance(0.01)
        assert received == ["a"]

    def test_burst_collapses_to_latest(self, scheduler, received):
        """Three pushes 50 ms apart give one emission 300 ms after the last."""
        debouncer = Debouncer(scheduler, 0.3, received.append)

        debouncer.push("j")
        scheduler.advance(0.05)
        debouncer.push("ja")
        scheduler.advance(0.05)
        debouncer.push("jaz")

        scheduler.advance(0.299)
        assert received == []

        scheduler.advance(0.001)
        assert received == ["jaz"]
        assert scheduler.now == pytest.approx(0.4)

    def test_separate_bursts_emit_separately(self, scheduler, received):
        debouncer = Debouncer(scheduler, 0.3, received.append)

        debouncer.push(1)
        scheduler.advance(0.5)
        debouncer.push(2)
        scheduler.advance(0.5)

        assert received == [1, 2]

    def test_is_pending(self, scheduler, received):
        debouncer = Debouncer(scheduler, 0.3, received.append)
        assert debouncer.is_pending is False

        debouncer.push(1)
        assert debouncer.is_pending is True

        scheduler.advance(0.3)
        assert debouncer.is_pending is False

    def test_cancel_drops_pending(self, scheduler, received):
        debouncer = Debouncer(scheduler, 0.3, received.append)

        debouncer.push(1)
        debouncer.cancel()
        scheduler.advance(1.0)

        assert received == []
        assert debouncer.is_pending is False

    def test_close_cancels_and_ignores_later_pushes(self, scheduler, received):
        debouncer = Debouncer(scheduler, 0.3, received.append)

        debouncer.push(1)
        debouncer.close()
        debouncer.push(2)
        scheduler.advance(1.0)

        assert received == []
        assert debouncer.closed is True

    def test_stale_timer_firing_after_cancel_is_ignored(self, scheduler, received):
        """A handle that fires anyway after cancel() delivers nothing."""
        debouncer = Debouncer(scheduler, 0.3, received.append)

        debouncer.push(1)
        timer = scheduler.pending[0]
        debouncer.cancel()
        timer.callback()

        assert received == []

    def test_rejects_non_positive_window(self, scheduler):
        with pytest.raises(ValueError):
            Debouncer(scheduler, 0, lambda value: None)


class TestNamedDebouncers:
    """Tests for the search and location presets."""

    def test_search_debouncer_window(self, scheduler, received):
        debouncer = SearchDebouncer(scheduler, received.append)
        assert debouncer.window_seconds == 0.3

    def test_location_gate_window(self, scheduler, received):
        gate = LocationChangeGate(scheduler, received.append)

        gate.push("fix-1")
        scheduler.advance(0.5)
        gate.push("fix-2")
        scheduler.advance(0.999)
        assert received == []

        scheduler.advance(0.001)
        assert received == ["fix-2"]
        assert gate.window_seconds == 1.0
