"""Event data models and parsing - Pure functions.

This module handles parsing event records returned by the events API into
typed Event objects. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Category(str, Enum):
    """Fixed set of event categories."""
    SOCIAL = "social"
    SPORTS = "sports"
    MUSIC = "music"
    ART = "art"
    FOOD = "food"
    TECHNOLOGY = "technology"
    OUTDOORS = "outdoors"
    NETWORKING = "networking"
    EDUCATION = "education"
    OTHER = "other"


class EventStatus(str, Enum):
    """Lifecycle status of an event."""
    UPCOMING = "upcoming"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class EventLocation:
    """Where an event takes place.

    Attributes:
        name: Venue name
        address: Street address
        latitude: Venue latitude
        longitude: Venue longitude
        place_id: Maps provider place identifier (optional)
    """
    name: str
    address: str
    latitude: float
    longitude: float
    place_id: str | None = None


@dataclass(frozen=True)
class Event:
    """Immutable event data model.

    Attributes:
        id: Unique event ID
        host_id: ID of the hosting user
        title: Event title
        description: Free-text description
        category: Event category
        location: Venue location
        start_time: Start timestamp (timezone-aware)
        end_time: End timestamp (timezone-aware)
        max_attendees: Attendee capacity, None for unlimited
        current_attendees: Number of attendees so far (may exceed capacity)
        image_url: Cover image URL (optional)
        status: Lifecycle status
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """
    id: str
    host_id: str
    title: str
    description: str
    category: Category
    location: EventLocation
    start_time: datetime
    end_time: datetime
    current_attendees: int = 0
    max_attendees: int | None = None
    image_url: str | None = None
    status: EventStatus = EventStatus.UPCOMING
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.location.latitude, self.location.longitude)

    @property
    def has_available_spots(self) -> bool:
        """True when there is no capacity or it has not been reached."""
        if self.max_attendees is None:
            return True
        return self.current_attendees < self.max_attendees

    @property
    def remaining_spots(self) -> int | None:
        """Spots left before capacity, None when uncapped.

        Negative when the event is over capacity.
        """
        if self.max_attendees is None:
            return None
        return self.max_attendees - self.current_attendees

    def is_upcoming(self, now: datetime) -> bool:
        """Check whether the event starts after ``now``."""
        return self.start_time > now


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 string or epoch seconds into an aware datetime.

    Pure function. Naive timestamps are assumed to be UTC.

    Args:
        value: ISO 8601 string (``Z`` suffix allowed) or number of seconds

    Returns:
        Timezone-aware datetime, or None if the value can't be parsed
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_location(data: dict[str, Any]) -> EventLocation | None:
    """Parse a venue location record.

    Pure function.

    Args:
        data: Location dict with name, address, latitude, longitude, placeId

    Returns:
        EventLocation or None if required fields are missing or invalid
    """
    try:
        latitude = float(data["latitude"])
        longitude = float(data["longitude"])
    except (KeyError, TypeError, ValueError):
        return None

    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        return None

    return EventLocation(
        name=str(data.get("name", "")),
        address=str(data.get("address", "")),
        latitude=latitude,
        longitude=longitude,
        place_id=data.get("placeId"),
    )


def parse_event(data: dict[str, Any]) -> Event | None:
    """Parse a single event record into an Event.

    Pure function: takes raw dict, returns typed Event or None if invalid.

    Args:
        data: Event record from the events API (camelCase keys)

    Returns:
        Event object or None if parsing fails
    """
    try:
        location = parse_location(data["location"])
        if location is None:
            return None

        start_time = parse_timestamp(data.get("startTime"))
        end_time = parse_timestamp(data.get("endTime"))
        if start_time is None or end_time is None:
            return None

        current_attendees = int(data.get("currentAttendees", 0))
        if current_attendees < 0:
            return None

        max_attendees = data.get("maxAttendees")

        return Event(
            id=str(data["id"]),
            host_id=str(data["hostId"]),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            category=Category(data["category"]),
            location=location,
            start_time=start_time,
            end_time=end_time,
            current_attendees=current_attendees,
            max_attendees=int(max_attendees) if max_attendees is not None else None,
            image_url=data.get("imageURL"),
            status=EventStatus(data.get("status", EventStatus.UPCOMING.value)),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )
    except (KeyError, TypeError, ValueError, AttributeError):
        return None


def parse_events(records: list[Any]) -> list[Event]:
    """Parse a list of event records, dropping invalid ones.

    Pure function. Input order is preserved.

    Args:
        records: Raw event dicts

    Returns:
        List of valid Event objects
    """
    events = []

    for record in records:
        if not isinstance(record, dict):
            continue
        event = parse_event(record)
        if event is not None:
            events.append(event)

    return events


def event_to_dict(event: Event) -> dict[str, Any]:
    """Serialize an Event back to the API's camelCase record shape.

    Pure function.
    """
    return {
        "id": event.id,
        "hostId": event.host_id,
        "title": event.title,
        "description": event.description,
        "category": event.category.value,
        "location": {
            "name": event.location.name,
            "address": event.location.address,
            "latitude": event.location.latitude,
            "longitude": event.location.longitude,
            "placeId": event.location.place_id,
        },
        "startTime": _format_timestamp(event.start_time),
        "endTime": _format_timestamp(event.end_time),
        "maxAttendees": event.max_attendees,
        "currentAttendees": event.current_attendees,
        "imageURL": event.image_url,
        "status": event.status.value,
        "createdAt": _format_timestamp(event.created_at),
        "updatedAt": _format_timestamp(event.updated_at),
    }
