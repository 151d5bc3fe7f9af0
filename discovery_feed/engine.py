"""Discovery Feed Engine - Wires Functional Core and Imperative Shell.

This module coordinates the feed: it listens to the location source and
to filter edits, triggers fetches through the events repository, and
recomputes the visible list with the pure ranking functions from core.

Threading model: every state change happens on the scheduler's context
(an asyncio loop in production). Fetches run on an executor and their
results are marshalled back with ``call_soon_threadsafe``. Each fetch
carries a sequence number and a completion is applied only if it is
newer than the list already shown.
"""

import functools
import logging
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from discovery_feed.core.config import FeedConfig
from discovery_feed.core.event import Category, Event
from discovery_feed.core.filters import (
    DateRange,
    FilterState,
    cleared,
    has_active_filters,
    with_category_toggled,
    with_date_range,
    with_radius,
    with_search_text,
)
from discovery_feed.core.geo import Position
from discovery_feed.core.ranking import derive_feed
from discovery_feed.debounce import LocationChangeGate, SearchDebouncer
from discovery_feed.shell.location_source import AuthorizationStatus, LocationSource


logger = logging.getLogger(__name__)


class FeedState(str, Enum):
    """Engine lifecycle state."""
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"


@dataclass(frozen=True)
class FeedSnapshot:
    """What the presentation layer needs to render the feed.

    Attributes:
        events: Filtered and ranked events
        has_active_filters: Whether to show the filters-active indicator
        state: Engine lifecycle state
        filters: Filter snapshot (may be ahead of ``events`` while debouncing)
        position: Position used for distances, None if unknown or denied
        error: Last fetch error message, None after a successful fetch
    """
    events: tuple[Event, ...]
    has_active_filters: bool
    state: FeedState
    filters: FilterState
    position: Position | None
    error: str | None = None


FeedListener = Callable[[FeedSnapshot], None]


class DiscoveryFeedEngine:
    """Coordinates location, filters and fetches into one ranked feed.

    This class wires together:
    - Location source (position fixes, permission changes)
    - Events repository (anything with ``fetch_nearby(position, radius)``)
    - Debouncers for filter edits and position updates
    - Core ranking (derive_feed)
    """

    def __init__(
        self,
        config: FeedConfig,
        repository: Any,
        location_source: LocationSource,
        scheduler: Any,
        executor: Any,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Application configuration
            repository: Events repository with ``fetch_nearby``
            location_source: Position and permission publisher
            scheduler: Execution context with ``call_later`` and
                ``call_soon_threadsafe`` (e.g. an asyncio loop)
            executor: ``concurrent.futures`` executor for fetches
        """
        self.config = config
        self.repository = repository
        self.location_source = location_source
        self.scheduler = scheduler
        self.executor = executor

        self._filters = FilterState(radius_meters=config.default_radius_meters)
        self._unfiltered: tuple[Event, ...] = ()
        self._events: tuple[Event, ...] = ()
        self._has_active_filters = has_active_filters(self._filters)
        self._has_loaded = False
        self._last_error: Exception | None = None

        self._issued_seq = 0
        self._applied_seq = 0
        self._inflight: set[int] = set()
        self._pending_future: Future | None = None

        self._listeners: list[FeedListener] = []
        self._unsubscribe_location: Callable[[], None] | None = None
        self._started = False
        self._torn_down = False

        self._filter_debouncer = SearchDebouncer(
            scheduler,
            self._on_filters_settled,
            window_seconds=config.search_debounce_seconds,
        )
        self._location_gate = LocationChangeGate(
            scheduler,
            self._on_location_settled,
            window_seconds=config.location_debounce_seconds,
        )

    # ----- Read-only state -----

    @property
    def events(self) -> list[Event]:
        """The derived (filtered and ranked) list."""
        return list(self._events)

    @property
    def unfiltered_events(self) -> list[Event]:
        """Everything returned by the last applied fetch."""
        return list(self._unfiltered)

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def has_active_filters(self) -> bool:
        return self._has_active_filters

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def position(self) -> Position | None:
        """Position used for distance filtering and ranking.

        None when there is no fix or location access is blocked.
        """
        if self.location_source.authorization.is_blocked:
            return None
        return self.location_source.position

    @property
    def is_fetching(self) -> bool:
        """True while a fetch newer than the displayed list is in flight."""
        return any(seq > self._applied_seq for seq in self._inflight)

    @property
    def state(self) -> FeedState:
        if self.is_fetching:
            return FeedState.FETCHING
        if self._has_loaded:
            return FeedState.READY
        return FeedState.IDLE

    @property
    def is_settled(self) -> bool:
        """True when no debounce is pending and no fetch is in flight."""
        return not (
            self._filter_debouncer.is_pending
            or self._location_gate.is_pending
            or self.is_fetching
        )

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def snapshot(self) -> FeedSnapshot:
        """Current view of the feed."""
        return FeedSnapshot(
            events=self._events,
            has_active_filters=self._has_active_filters,
            state=self.state,
            filters=self._filters,
            position=self.position,
            error=str(self._last_error) if self._last_error is not None else None,
        )

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Receive a snapshot after every derivation or state change.

        Returns:
            Zero-argument function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # ----- Lifecycle -----

    def start(self) -> None:
        """Subscribe to the location source and prime both debouncers."""
        if self._started or self._torn_down:
            return
        self._started = True

        self._unsubscribe_location = self.location_source.subscribe(
            self._on_position_update,
            self._on_authorization_change,
        )

        authorization = self.location_source.authorization
        if authorization == AuthorizationStatus.NOT_DETERMINED:
            self.location_source.request_permission()
        if not self.location_source.authorization.is_blocked:
            self.location_source.start_updates()

        logger.info(
            "Discovery feed started (location access: %s)",
            self.location_source.authorization.value,
        )

        self._filter_debouncer.push(self._filters)

        position = self.position
        if position is not None:
            self._location_gate.push(position)

    def teardown(self) -> None:
        """Cancel pending timers and ignore any fetch still in flight."""
        if self._torn_down:
            return
        self._torn_down = True

        self._filter_debouncer.close()
        self._location_gate.close()

        if self._unsubscribe_location is not None:
            self._unsubscribe_location()
            self._unsubscribe_location = None

        if self._pending_future is not None:
            self._pending_future.cancel()
            self._pending_future = None

        self._inflight.clear()
        self._listeners.clear()

        logger.info("Discovery feed torn down")

    # ----- Filter mutations -----

    def set_search_text(self, text: str) -> None:
        """Update the search query (applied after the debounce window)."""
        self._update_filters(with_search_text(self._filters, text))

    def toggle_category(self, category: Category | str) -> None:
        """Select or deselect a category.

        Raises:
            ValueError: If the category name is unknown
        """
        self._update_filters(with_category_toggled(self._filters, category))

    def set_date_range(self, start: datetime, end: datetime) -> None:
        """Restrict to events starting within [start, end].

        Raises:
            ValueError: If start is after end
        """
        self._update_filters(with_date_range(self._filters, DateRange(start, end)))

    def clear_date_range(self) -> None:
        self._update_filters(with_date_range(self._filters, None))

    def set_radius(self, radius_meters: float) -> None:
        """Change the distance radius. Does not trigger a fetch.

        Raises:
            ValueError: If the radius is not positive
        """
        self._update_filters(with_radius(self._filters, radius_meters))

    def clear_filters(self) -> None:
        """Reset text, categories and date range and re-derive immediately."""
        if self._torn_down:
            logger.debug("Ignoring clear_filters after teardown")
            return

        self._filter_debouncer.cancel()
        self._filters = cleared(self._filters)
        self._rederive()

    def _update_filters(self, filters: FilterState) -> None:
        if self._torn_down:
            logger.debug("Ignoring filter change after teardown")
            return

        if filters == self._filters:
            return

        self._filters = filters
        self._filter_debouncer.push(filters)

    def _on_filters_settled(self, filters: FilterState) -> None:
        if self._torn_down:
            return
        self._rederive()

    # ----- Location -----

    def _on_position_update(self, position: Position | None) -> None:
        if self._torn_down:
            return
        self.scheduler.call_soon_threadsafe(self._handle_position, position)

    def _handle_position(self, position: Position | None) -> None:
        if self._torn_down or position is None:
            return

        if self.location_source.authorization.is_blocked:
            logger.debug("Location access blocked, ignoring position update")
            return

        self._location_gate.push(position)

    def _on_location_settled(self, position: Position) -> None:
        if self._torn_down:
            return

        logger.info(
            "Position settled at (%.4f, %.4f)",
            position.latitude,
            position.longitude,
        )
        self.refresh()

    def _on_authorization_change(self, status: AuthorizationStatus) -> None:
        if self._torn_down:
            return
        self.scheduler.call_soon_threadsafe(self._handle_authorization, status)

    def _handle_authorization(self, status: AuthorizationStatus) -> None:
        if self._torn_down:
            return

        if status.is_blocked:
            logger.warning(
                "Location access %s; distance filtering disabled, keeping current list",
                status.value,
            )
            self._location_gate.cancel()
        elif status == AuthorizationStatus.AUTHORIZED:
            position = self.location_source.position
            if position is not None:
                self._location_gate.push(position)

        self._rederive()

    # ----- Fetching -----

    def refresh(self) -> bool:
        """Fetch events for the current position now.

        Returns:
            True if a fetch was issued, False if there was no usable
            position (or the engine is torn down)
        """
        if self._torn_down:
            logger.debug("Ignoring refresh after teardown")
            return False

        position = self.position
        if position is None:
            logger.info("No usable position, skipping refresh")
            return False

        self._issue_fetch(position, self._filters.radius_meters)
        return True

    def _issue_fetch(self, position: Position, radius_meters: float) -> None:
        if self._pending_future is not None:
            # Only succeeds if the old fetch has not started yet
            self._pending_future.cancel()

        self._issued_seq += 1
        seq = self._issued_seq
        self._inflight.add(seq)

        logger.info("Starting fetch #%d", seq)

        future = self.executor.submit(
            self.repository.fetch_nearby,
            position,
            radius_meters,
        )
        self._pending_future = future
        future.add_done_callback(functools.partial(self._on_fetch_complete, seq))

        self._notify()

    def _on_fetch_complete(self, seq: int, future: Future) -> None:
        # Runs on the executor thread
        if self._torn_down:
            return
        self.scheduler.call_soon_threadsafe(self._handle_fetch_result, seq, future)

    def _handle_fetch_result(self, seq: int, future: Future) -> None:
        if self._torn_down:
            return

        self._inflight.discard(seq)
        if future is self._pending_future:
            self._pending_future = None

        if future.cancelled():
            logger.debug("Fetch #%d cancelled", seq)
            self._notify()
            return

        if seq <= self._applied_seq:
            logger.info(
                "Discarding stale fetch #%d (already showing #%d)",
                seq,
                self._applied_seq,
            )
            self._notify()
            return

        error = future.exception()
        if error is not None:
            logger.error("Failed to fetch events (fetch #%d): %s", seq, error)
            self._last_error = error
            self._notify()
            return

        events = future.result()
        self._applied_seq = seq
        self._unfiltered = tuple(events)
        self._has_loaded = True
        self._last_error = None

        logger.info("Fetch #%d returned %d events", seq, len(self._unfiltered))

        self._rederive()

    # ----- Derivation -----

    def _rederive(self) -> None:
        self._events = tuple(derive_feed(
            list(self._unfiltered),
            self._filters,
            self.position,
            self.config.tie_break_meters,
        ))
        self._has_active_filters = has_active_filters(self._filters)

        logger.debug(
            "Derived %d of %d events",
            len(self._events),
            len(self._unfiltered),
        )

        self._notify()
