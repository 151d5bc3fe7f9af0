"""Events API Client - Imperative Shell.

This module handles HTTP communication with the events backend.
All I/O is contained here; parsing and ranking live in the core module.
"""

import logging
from typing import Any
from urllib.parse import urlparse

import requests

from discovery_feed.core.config import DEFAULT_API_BASE_URL
from discovery_feed.core.event import Event, parse_events
from discovery_feed.core.geo import Position


logger = logging.getLogger(__name__)


NEARBY_EVENTS_PATH = "/events/nearby"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 30


class EventFetchError(Exception):
    """Base class for failures fetching nearby events."""


class InvalidEndpointError(EventFetchError):
    """The configured API URL can't be requested."""


class MalformedResponseError(EventFetchError):
    """The response body is not valid JSON."""


class DecodingError(EventFetchError):
    """The JSON body does not have the expected shape."""


class UnauthorizedError(EventFetchError):
    """The API rejected our credentials (HTTP 401)."""


class ServerError(EventFetchError):
    """The API answered with a non-success status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"Status code: {status_code}")


class TransportError(EventFetchError):
    """The request failed before a response arrived."""


class EventsClient:
    """Client for fetching nearby events from the events API.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        api_token: str | None = None,
    ) -> None:
        """Initialize events client.

        Args:
            base_url: Events API base URL
            timeout: Request timeout in seconds
            api_token: Bearer token (optional)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.api_token = api_token

    def _build_url(self, path: str) -> str:
        """Join the base URL and an endpoint path.

        Raises:
            InvalidEndpointError: If the result is not an absolute http(s) URL
        """
        url = self.base_url.rstrip("/") + path
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidEndpointError(f"Invalid endpoint URL: {url}")
        return url

    def _build_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _build_params(self, position: Position, radius_meters: float) -> dict[str, str]:
        return {
            "latitude": str(position.latitude),
            "longitude": str(position.longitude),
            "radius": str(radius_meters),
        }

    def _extract_records(self, data: Any) -> list[Any]:
        """Find the list of event records in a decoded body.

        Accepts a bare list or an object with an ``events`` list.

        Raises:
            DecodingError: If neither shape matches
        """
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("events"), list):
            return data["events"]
        raise DecodingError(
            f"Expected a list of events, got {type(data).__name__}"
        )

    def fetch_nearby(self, position: Position, radius_meters: float) -> list[Event]:
        """Fetch events near a position.

        This method performs HTTP I/O.

        Args:
            position: Center of the search
            radius_meters: Search radius in meters

        Returns:
            Parsed events (invalid records are dropped)

        Raises:
            EventFetchError: Any failure, as one of its subclasses
        """
        url = self._build_url(NEARBY_EVENTS_PATH)
        params = self._build_params(position, radius_meters)

        logger.info(
            "Fetching events near (%.4f, %.4f) within %.0fm",
            position.latitude,
            position.longitude,
            radius_meters,
        )

        try:
            response = requests.get(
                url,
                params=params,
                headers=self._build_headers(),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportError("Request timed out") from e
        except (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ) as e:
            raise InvalidEndpointError(str(e)) from e
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        if response.status_code == 401:
            raise UnauthorizedError("Unauthorized")

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Events API returned non-2xx: %d - %s",
                response.status_code,
                response.text[:200],
            )
            raise ServerError(response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

        records = self._extract_records(data)
        events = parse_events(records)

        if len(events) < len(records):
            logger.warning(
                "Dropped %d invalid event records",
                len(records) - len(events),
            )

        logger.info("Fetched %d events", len(events))

        return events
