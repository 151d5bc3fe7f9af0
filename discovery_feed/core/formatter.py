"""Feed formatting - Pure functions.

This module formats events and distances into display strings for the
command-line feed. All functions are pure with no side effects.
"""

from datetime import datetime, tzinfo

from discovery_feed.core.event import Event
from discovery_feed.core.geo import Position, distance_to_event


DATE_FORMAT = "%b %d, %Y"
TIME_FORMAT = "%I:%M %p"


def format_distance(meters: float) -> str:
    """Format a distance for display.

    Pure function. Under 1 km is shown in whole meters, otherwise in
    kilometers with one decimal.
    """
    if meters < 1000:
        return f"{meters:.0f} m"
    return f"{meters / 1000:.1f} km"


def format_date_range(
    start: datetime,
    end: datetime,
    tz: tzinfo | None = None,
) -> str:
    """Format an event's start/end times.

    Pure function. A range within one calendar day shows the date once.

    Args:
        start: Start time
        end: End time
        tz: Display timezone (defaults to the timestamps' own)

    Returns:
        Formatted range, e.g. "Oct 19, 2026 06:00 PM - 09:00 PM"
    """
    if tz is not None:
        start = start.astimezone(tz)
        end = end.astimezone(tz)

    start_str = start.strftime(f"{DATE_FORMAT} {TIME_FORMAT}")

    if start.date() == end.date():
        return f"{start_str} - {end.strftime(TIME_FORMAT)}"

    return f"{start_str} - {end.strftime(f'{DATE_FORMAT} {TIME_FORMAT}')}"


def format_attendance(event: Event) -> str:
    """Format attendee count, with capacity when set."""
    if event.max_attendees is None:
        return f"{event.current_attendees} going"

    remaining = event.remaining_spots
    if remaining is not None and remaining <= 0:
        return f"{event.current_attendees}/{event.max_attendees} going (full)"
    return f"{event.current_attendees}/{event.max_attendees} going"


def format_event_line(
    event: Event,
    position: Position | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Format a one-line summary of an event.

    Pure function.

    Args:
        event: Event to summarize
        position: Current position for the distance column (optional)
        tz: Display timezone (optional)

    Returns:
        One-line summary string
    """
    parts = [
        f"[{event.category.value}] {event.title}",
        format_date_range(event.start_time, event.end_time, tz),
        event.location.name or event.location.address,
    ]

    distance = distance_to_event(position, event)
    if distance is not None:
        parts.append(format_distance(distance))

    parts.append(format_attendance(event))

    return " | ".join(parts)


def format_feed_summary(
    events: list[Event],
    has_active_filters: bool,
    position: Position | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Format the whole feed as a multi-line block.

    Pure function.
    """
    header = f"{len(events)} events"
    if has_active_filters:
        header += " (filters active)"

    if not events:
        return f"{header}\nNo events match the current filters."

    lines = [header]
    for index, event in enumerate(events, start=1):
        lines.append(f"{index:>3}. {format_event_line(event, position, tz)}")

    return "\n".join(lines)
