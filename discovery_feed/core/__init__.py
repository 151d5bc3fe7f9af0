"""Functional Core - Pure functions with no side effects.

This module contains all feed logic as pure functions:
- Event data parsing
- Geo/distance calculations
- Filter state transitions
- Feed filtering and ranking
- Display formatting

All functions here are deterministic and have no I/O.
"""

from discovery_feed.core.event import Category, Event, EventLocation, EventStatus, parse_events
from discovery_feed.core.geo import Position, calculate_distance, distance_to_event
from discovery_feed.core.filters import DateRange, FilterState, has_active_filters
from discovery_feed.core.ranking import compare_events, derive_feed, rank_events
from discovery_feed.core.formatter import format_distance, format_feed_summary

__all__ = [
    # Event
    "Category",
    "Event",
    "EventLocation",
    "EventStatus",
    "parse_events",
    # Geo
    "Position",
    "calculate_distance",
    "distance_to_event",
    # Filters
    "DateRange",
    "FilterState",
    "has_active_filters",
    # Ranking
    "compare_events",
    "derive_feed",
    "rank_events",
    # Formatter
    "format_distance",
    "format_feed_summary",
]
