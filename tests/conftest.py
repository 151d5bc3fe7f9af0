"""Shared fixtures: a manual clock, a manual executor and an event factory.

The scheduler and executor let engine and debounce tests control time and
fetch completion order deterministically, with no threads or sleeps.
"""

from concurrent.futures import Future
from datetime import datetime, timedelta, timezone

import pytest

from discovery_feed.core.event import Category, Event, EventLocation, EventStatus
from discovery_feed.core.geo import Position


BASE_TIME = datetime(2026, 10, 19, 18, 0, 0, tzinfo=timezone.utc)

# San Francisco Ferry Building
ORIGIN_LAT = 37.7955
ORIGIN_LON = -122.3937

# One degree of latitude is roughly 111.2 km
METERS_PER_DEGREE_LAT = 111_195.0


class FakeTimer:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock with the call_later / call_soon_threadsafe interface."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback, *args):
        timer = FakeTimer(self.now + delay, callback, args)
        self.timers.append(timer)
        return timer

    def call_soon_threadsafe(self, callback, *args):
        callback(*args)

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.when <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.timers.remove(timer)
            self.now = timer.when
            timer.callback(*timer.args)
        self.now = target


class ManualExecutor:
    """Executor whose submitted calls only run when a test says so.

    Submitted futures are marked running straight away (as a thread pool
    worker would), unless ``start_immediately`` is False.
    """

    def __init__(self, start_immediately: bool = True):
        self.start_immediately = start_immediately
        self.calls: list[tuple] = []

    def submit(self, fn, *args):
        future = Future()
        if self.start_immediately:
            future.set_running_or_notify_cancel()
        self.calls.append((fn, args, future))
        return future

    def future(self, index: int) -> Future:
        return self.calls[index][2]

    def complete(self, index: int) -> None:
        """Run call ``index`` and settle its future with the outcome."""
        fn, args, future = self.calls[index]
        if not future.running() and not future.set_running_or_notify_cancel():
            return
        try:
            result = fn(*args)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def resolve(self, index: int, result) -> None:
        """Settle call ``index`` with a given result, ignoring its function."""
        self.calls[index][2].set_result(result)

    def fail(self, index: int, error: Exception) -> None:
        self.calls[index][2].set_exception(error)


def offset_position(north_meters: float) -> tuple[float, float]:
    """Coordinates ``north_meters`` due north of the origin."""
    return (ORIGIN_LAT + north_meters / METERS_PER_DEGREE_LAT, ORIGIN_LON)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def executor():
    return ManualExecutor()


@pytest.fixture
def make_event():
    """Factory for events placed ``north_meters`` from the origin."""

    def _make_event(
        id: str = "evt-1",
        title: str = "Sunset Yoga",
        description: str = "Stretch by the bay",
        category: Category = Category.OUTDOORS,
        north_meters: float = 0.0,
        start_offset_hours: float = 0.0,
        duration_hours: float = 2.0,
        current_attendees: int = 0,
        max_attendees: int | None = None,
    ) -> Event:
        latitude, longitude = offset_position(north_meters)
        start = BASE_TIME + timedelta(hours=start_offset_hours)
        return Event(
            id=id,
            host_id="host-1",
            title=title,
            description=description,
            category=category,
            location=EventLocation(
                name=f"Venue {id}",
                address="1 Ferry Building, San Francisco, CA",
                latitude=latitude,
                longitude=longitude,
            ),
            start_time=start,
            end_time=start + timedelta(hours=duration_hours),
            current_attendees=current_attendees,
            max_attendees=max_attendees,
            status=EventStatus.UPCOMING,
            created_at=BASE_TIME - timedelta(days=7),
            updated_at=BASE_TIME - timedelta(days=1),
        )

    return _make_event


@pytest.fixture
def origin():
    """Position at the origin used by make_event."""
    return Position(ORIGIN_LAT, ORIGIN_LON)


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def lazy_executor():
    """Executor whose futures stay pending (not yet picked up by a worker)."""
    return ManualExecutor(start_immediately=False)
