"""Debouncing - rate limiting for high-frequency input streams.

A Debouncer collapses a burst of values into a single delivery of the most
recent one, once a quiescence window has passed with no further input.

Timers come from an injected scheduler: any object with
``call_later(delay, callback, *args)`` returning a handle with ``cancel()``.
An asyncio event loop fits; tests use a manual clock.
"""

import logging
from typing import Any, Callable

from discovery_feed.core.config import LOCATION_DEBOUNCE_SECONDS, SEARCH_DEBOUNCE_SECONDS


logger = logging.getLogger(__name__)


class Debouncer:
    """Delivers the latest pushed value after ``window_seconds`` of quiet."""

    def __init__(
        self,
        scheduler: Any,
        window_seconds: float,
        callback: Callable[[Any], None],
        name: str = "debouncer",
    ) -> None:
        """Initialize debouncer.

        Args:
            scheduler: Timer source (see module docstring)
            window_seconds: Quiescence window
            callback: Receives the settled value
            name: Label used in log messages
        """
        if window_seconds <= 0:
            raise ValueError(f"Debounce window must be positive, got {window_seconds}")

        self.scheduler = scheduler
        self.window_seconds = window_seconds
        self.callback = callback
        self.name = name
        self._handle: Any = None
        self._pending_value: Any = None
        self._closed = False

    @property
    def is_pending(self) -> bool:
        """True while an emission is scheduled."""
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, value: Any) -> None:
        """Record a new value and restart the quiescence window."""
        if self._closed:
            logger.debug("%s closed, dropping value", self.name)
            return

        if self._handle is not None:
            self._handle.cancel()

        self._pending_value = value
        self._handle = self.scheduler.call_later(self.window_seconds, self._fire)

    def cancel(self) -> None:
        """Drop the pending emission, if any."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending_value = None

    def close(self) -> None:
        """Cancel and refuse all further input."""
        self.cancel()
        self._closed = True

    def _fire(self) -> None:
        if self._closed or self._handle is None:
            return

        value = self._pending_value
        self._handle = None
        self._pending_value = None

        logger.debug("%s settled", self.name)
        self.callback(value)


class SearchDebouncer(Debouncer):
    """Debounces filter edits (search text, categories, date range, radius)."""

    def __init__(
        self,
        scheduler: Any,
        callback: Callable[[Any], None],
        window_seconds: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        super().__init__(scheduler, window_seconds, callback, name="search-debouncer")


class LocationChangeGate(Debouncer):
    """Debounces position updates into re-fetch triggers."""

    def __init__(
        self,
        scheduler: Any,
        callback: Callable[[Any], None],
        window_seconds: float = LOCATION_DEBOUNCE_SECONDS,
    ) -> None:
        super().__init__(scheduler, window_seconds, callback, name="location-gate")
