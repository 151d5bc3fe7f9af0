"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The FeedConfig model is defined in discovery_feed/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from discovery_feed.core.config import (
    DEFAULT_API_BASE_URL,
    LOCATION_DEBOUNCE_SECONDS,
    SEARCH_DEBOUNCE_SECONDS,
    FeedConfig,
    FixedPosition,
)
from discovery_feed.core.filters import DEFAULT_RADIUS_METERS
from discovery_feed.core.ranking import TIE_BREAK_METERS


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _resolve_value(value: Any) -> Any:
    """Resolve a ``${VAR}`` placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place (validation warns about it).
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_position(data: dict[str, Any] | None) -> FixedPosition | None:
    """Parse a fixed position from config data."""
    if not data:
        return None
    return FixedPosition(
        latitude=float(_resolve_value(data["latitude"])),
        longitude=float(_resolve_value(data["longitude"])),
    )


def load_config_from_dict(data: dict[str, Any]) -> FeedConfig:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion reads state).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed FeedConfig object
    """
    api = data.get("api", {}) or {}
    feed = data.get("feed", {}) or {}

    api_token = _resolve_value(api.get("token"))

    return FeedConfig(
        api_base_url=_resolve_value(api.get("base_url", DEFAULT_API_BASE_URL)),
        api_token=api_token or None,
        request_timeout_seconds=float(api.get("timeout_seconds", 30.0)),
        search_debounce_seconds=float(feed.get("search_debounce_seconds", SEARCH_DEBOUNCE_SECONDS)),
        location_debounce_seconds=float(feed.get("location_debounce_seconds", LOCATION_DEBOUNCE_SECONDS)),
        default_radius_meters=float(feed.get("radius_meters", DEFAULT_RADIUS_METERS)),
        tie_break_meters=float(feed.get("tie_break_meters", TIE_BREAK_METERS)),
        fixed_position=_parse_position(data.get("position")),
        display_timezone=data.get("display_timezone"),
    )


def load_config(config_path: str | Path | None = None) -> FeedConfig:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed FeedConfig object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return FeedConfig()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return FeedConfig()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: api=%s, radius=%.0fm, position=%s",
        config.api_base_url,
        config.default_radius_meters,
        "fixed" if config.fixed_position else "none",
    )

    return config


def load_config_from_env() -> FeedConfig:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        FEED_API_URL: Events API base URL
        FEED_API_TOKEN: Bearer token for the API
        FEED_LATITUDE / FEED_LONGITUDE: Fixed position (both required)
        FEED_RADIUS_METERS: Initial search radius

    Returns:
        FeedConfig object from environment
    """
    fixed_position = None
    latitude = os.environ.get("FEED_LATITUDE")
    longitude = os.environ.get("FEED_LONGITUDE")
    if latitude and longitude:
        fixed_position = FixedPosition(
            latitude=float(latitude),
            longitude=float(longitude),
        )
    elif latitude or longitude:
        logger.warning("Both FEED_LATITUDE and FEED_LONGITUDE are needed; ignoring position")

    return FeedConfig(
        api_base_url=os.environ.get("FEED_API_URL", DEFAULT_API_BASE_URL),
        api_token=os.environ.get("FEED_API_TOKEN") or None,
        default_radius_meters=float(os.environ.get("FEED_RADIUS_METERS", DEFAULT_RADIUS_METERS)),
        fixed_position=fixed_position,
    )
