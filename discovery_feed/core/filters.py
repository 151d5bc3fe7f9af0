"""Filter state - Pure data structures and transitions.

FilterState is an immutable snapshot of what the user has asked to see.
Every transition returns a new snapshot; malformed values are rejected
here with ValueError/TypeError so they never reach the feed engine.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime

from discovery_feed.core.event import Category


# Default search radius (10 km)
DEFAULT_RADIUS_METERS = 10_000.0


@dataclass(frozen=True)
class DateRange:
    """Closed date-time interval, inclusive at both ends.

    Attributes:
        start: Earliest start time to include
        end: Latest start time to include
    """
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        # Event times are timezone-aware; naive bounds can't be compared to them
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("Date range bounds must be timezone-aware")
        if self.start > self.end:
            raise ValueError(
                f"Date range start ({self.start.isoformat()}) is after end ({self.end.isoformat()})"
            )

    def contains(self, moment: datetime) -> bool:
        """Check if a moment falls within the range."""
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class FilterState:
    """What the user is currently filtering the feed by.

    Attributes:
        search_text: Free-text query, empty for no text filter
        categories: Selected categories, empty for no restriction
        date_range: Start-time window, None for no restriction
        radius_meters: Maximum venue distance from the current position
    """
    search_text: str = ""
    categories: frozenset[Category] = field(default_factory=frozenset)
    date_range: DateRange | None = None
    radius_meters: float = DEFAULT_RADIUS_METERS


def coerce_category(value: Category | str) -> Category:
    """Convert a category name to a Category.

    Raises:
        ValueError: If the name is not a known category
    """
    if isinstance(value, Category):
        return value
    return Category(value)


def with_search_text(filters: FilterState, text: str) -> FilterState:
    """Return filters with a new search query.

    Raises:
        TypeError: If text is not a string
    """
    if not isinstance(text, str):
        raise TypeError(f"Search text must be a string, got {type(text).__name__}")
    return replace(filters, search_text=text)


def with_category_toggled(filters: FilterState, category: Category | str) -> FilterState:
    """Return filters with a category added, or removed if already selected."""
    category = coerce_category(category)
    categories = set(filters.categories)

    if category in categories:
        categories.remove(category)
    else:
        categories.add(category)

    return replace(filters, categories=frozenset(categories))


def with_date_range(filters: FilterState, date_range: DateRange | None) -> FilterState:
    """Return filters with a new date range (None clears it)."""
    return replace(filters, date_range=date_range)


def with_radius(filters: FilterState, radius_meters: float) -> FilterState:
    """Return filters with a new search radius.

    Raises:
        ValueError: If the radius is not a positive finite number
    """
    radius = float(radius_meters)
    if not math.isfinite(radius) or radius <= 0:
        raise ValueError(f"Radius must be positive, got {radius_meters}")
    return replace(filters, radius_meters=radius)


def cleared(filters: FilterState) -> FilterState:
    """Reset text, categories and date range. The radius is kept."""
    return FilterState(radius_meters=filters.radius_meters)


def has_active_filters(filters: FilterState) -> bool:
    """Whether the feed should show its "filters active" indicator.

    Note the search-text clause: it is true when the text is *empty*. This
    matches the shipped client's behaviour and is kept until product
    decides otherwise.
    """
    return (
        bool(filters.categories)
        or filters.date_range is not None
        or filters.search_text == ""
    )
