"""Feed filtering and ranking - Pure functions.

This module turns the unfiltered event list plus a FilterState snapshot
into the list shown to the user. All functions are pure with no side
effects: the same events, filters and position always give the same
ordered output.
"""

import math
import unicodedata
from functools import cmp_to_key

from discovery_feed.core.event import Category, Event
from discovery_feed.core.filters import DateRange, FilterState
from discovery_feed.core.geo import Position, distance_to_event


# Distances closer than this are considered a tie and ordered by start time
TIE_BREAK_METERS = 1000.0


def _fold(text: str) -> str:
    return unicodedata.normalize("NFC", text).casefold()


def matches_text(event: Event, query: str) -> bool:
    """Check if an event's title or description contains the query.

    Pure function. Matching is case-insensitive using Unicode case folding.
    """
    needle = _fold(query)
    return needle in _fold(event.title) or needle in _fold(event.description)


def filter_by_text(events: list[Event], query: str) -> list[Event]:
    """Filter events by free-text query.

    Pure function. An empty query keeps every event.
    """
    if not query:
        return list(events)
    return [e for e in events if matches_text(e, query)]


def filter_by_category(
    events: list[Event],
    categories: frozenset[Category],
) -> list[Event]:
    """Filter events to the selected categories.

    Pure function. An empty selection keeps every event.
    """
    if not categories:
        return list(events)
    return [e for e in events if e.category in categories]


def filter_by_date_range(
    events: list[Event],
    date_range: DateRange | None,
) -> list[Event]:
    """Filter events whose start time falls within the range.

    Pure function. No range keeps every event.
    """
    if date_range is None:
        return list(events)
    return [e for e in events if date_range.contains(e.start_time)]


def filter_by_distance(
    events: list[Event],
    position: Position | None,
    radius_meters: float,
) -> list[Event]:
    """Filter events to those within radius of the position.

    Pure function. Without a position the filter is skipped.

    Args:
        events: Events to filter
        position: Current position, None if unknown
        radius_meters: Maximum distance (inclusive)

    Returns:
        Events within the radius
    """
    if position is None:
        return list(events)

    result = []
    for event in events:
        distance = distance_to_event(position, event)
        if distance is None or distance <= radius_meters:
            result.append(event)
    return result


def compare_events(
    first: Event,
    second: Event,
    position: Position | None,
    tie_break_meters: float = TIE_BREAK_METERS,
) -> int:
    """Order two events for the feed.

    Pure function. Distance decides only when the two distances differ by
    more than ``tie_break_meters``; otherwise the earlier start wins. This
    is not "distance, then time": 500 m vs 1400 m is a tie, 500 m vs 1600 m
    is not. Without a position only start time counts.

    Returns:
        Negative if ``first`` goes first, positive if ``second`` does, 0 if equal
    """
    if position is not None:
        first_distance = distance_to_event(position, first)
        second_distance = distance_to_event(position, second)
        if first_distance is None:
            first_distance = math.inf
        if second_distance is None:
            second_distance = math.inf

        # inf - inf is nan, which never exceeds the threshold
        if abs(first_distance - second_distance) > tie_break_meters:
            return -1 if first_distance < second_distance else 1

    if first.start_time < second.start_time:
        return -1
    if first.start_time > second.start_time:
        return 1
    return 0


def rank_events(
    events: list[Event],
    position: Position | None,
    tie_break_meters: float = TIE_BREAK_METERS,
) -> list[Event]:
    """Sort events with compare_events.

    Pure function. Returns a new list.
    """
    key = cmp_to_key(
        lambda a, b: compare_events(a, b, position, tie_break_meters)
    )
    return sorted(events, key=key)


def derive_feed(
    events: list[Event],
    filters: FilterState,
    position: Position | None,
    tie_break_meters: float = TIE_BREAK_METERS,
) -> list[Event]:
    """Compute the visible feed from the unfiltered list.

    Pure function. Applies, in order: text, category, date range and
    distance filters, then ranking.

    Args:
        events: Unfiltered events from the last successful fetch
        filters: Current filter snapshot
        position: Current position, None if unknown or not permitted
        tie_break_meters: Distance difference treated as a tie

    Returns:
        Filtered and ranked events (a subset of ``events``)
    """
    result = filter_by_text(events, filters.search_text)
    result = filter_by_category(result, filters.categories)
    result = filter_by_date_range(result, filters.date_range)
    result = filter_by_distance(result, position, filters.radius_meters)
    return rank_events(result, position, tie_break_meters)
