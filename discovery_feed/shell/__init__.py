"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Events API client (HTTP)
- Location source (platform position/permission updates)
- Configuration loading (environment/files)

Keep this layer thin and simple. All feed logic should be in core.
"""

from discovery_feed.shell.events_client import EventFetchError, EventsClient
from discovery_feed.shell.location_source import (
    AuthorizationStatus,
    FixedLocationSource,
    LocationSource,
)
from discovery_feed.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "EventFetchError",
    "EventsClient",
    "AuthorizationStatus",
    "FixedLocationSource",
    "LocationSource",
    "load_config",
    "load_config_from_env",
]
