"""Geographic calculations - Pure functions.

This module provides distance calculations between the user's position and
event venues. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass

from discovery_feed.core.event import Event


# Earth's mean radius in meters
EARTH_RADIUS_METERS = 6_371_000.0


@dataclass(frozen=True)
class Position:
    """A position fix.

    Attributes:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
    """
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude {self.latitude} out of range [-90, 90]")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude {self.longitude} out of range [-180, 180]")


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def distance_to_event(position: Position | None, event: Event) -> float | None:
    """Distance from a position to an event's venue.

    Pure function.

    Args:
        position: Current position, None if no fix
        event: Event to measure to

    Returns:
        Distance in meters, or None when there is no position
    """
    if position is None:
        return None

    return calculate_distance(
        position.latitude,
        position.longitude,
        event.location.latitude,
        event.location.longitude,
    )


def is_within_radius(
    event: Event,
    position: Position,
    radius_meters: float,
) -> bool:
    """Check if an event's venue is within a radius of a position.

    Pure function. The boundary is inclusive.
    """
    distance = distance_to_event(position, event)
    return distance is not None and distance <= radius_meters
