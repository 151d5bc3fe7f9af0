"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
from unittest.mock import patch

import pytest
import yaml

from discovery_feed.core.config import (
    DEFAULT_API_BASE_URL,
    FeedConfig,
    FixedPosition,
)
from discovery_feed.shell.config_loader import (
    _parse_position,
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        """Non-string values are returned unchanged."""
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None
        assert _resolve_value(True) is True

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("https://example.com") == "https://example.com"

    def test_resolves_env_var_placeholder(self):
        """Resolves ${VAR} placeholders from environment."""
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert _resolve_value("${TEST_VAR}") == "test_value"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"


class TestParsePosition:
    """Tests for _parse_position function."""

    def test_none_when_missing(self):
        assert _parse_position(None) is None
        assert _parse_position({}) is None

    def test_parses_coordinates(self):
        result = _parse_position({"latitude": "37.7955", "longitude": -122.3937})
        assert result == FixedPosition(latitude=37.7955, longitude=-122.3937)

    def test_resolves_env_placeholders(self):
        with patch.dict(os.environ, {"LAT": "40.7", "LON": "-74.0"}):
            result = _parse_position({"latitude": "${LAT}", "longitude": "${LON}"})
        assert result == FixedPosition(latitude=40.7, longitude=-74.0)

    def test_missing_longitude_raises(self):
        with pytest.raises(KeyError):
            _parse_position({"latitude": 40.7})


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_empty_dict_gives_defaults(self):
        assert load_config_from_dict({}) == FeedConfig()

    def test_full_config(self):
        data = {
            "api": {
                "base_url": "https://events.example.com",
                "token": "abc",
                "timeout_seconds": 10,
            },
            "feed": {
                "search_debounce_seconds": 0.5,
                "location_debounce_seconds": 2,
                "radius_meters": 2500,
                "tie_break_meters": 500,
            },
            "position": {"latitude": 37.7955, "longitude": -122.3937},
            "display_timezone": "America/Los_Angeles",
        }

        config = load_config_from_dict(data)

        assert config.api_base_url == "https://events.example.com"
        assert config.api_token == "abc"
        assert config.request_timeout_seconds == 10.0
        assert config.search_debounce_seconds == 0.5
        assert config.location_debounce_seconds == 2.0
        assert config.default_radius_meters == 2500.0
        assert config.tie_break_meters == 500.0
        assert config.fixed_position == FixedPosition(37.7955, -122.3937)
        assert config.display_timezone == "America/Los_Angeles"

    def test_token_from_env(self):
        with patch.dict(os.environ, {"FEED_API_TOKEN": "from-env"}):
            config = load_config_from_dict({"api": {"token": "${FEED_API_TOKEN}"}})
        assert config.api_token == "from-env"

    def test_null_sections_are_tolerated(self):
        config = load_config_from_dict({"api": None, "feed": None})
        assert config.api_base_url == DEFAULT_API_BASE_URL

    def test_empty_token_becomes_none(self):
        assert load_config_from_dict({"api": {"token": ""}}).api_token is None


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_from_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            """
api:
  base_url: https://events.example.com
feed:
  radius_meters: 5000
position:
  latitude: 37.7955
  longitude: -122.3937
"""
        )

        config = load_config(path)

        assert config.api_base_url == "https://events.example.com"
        assert config.default_radius_meters == 5000.0
        assert config.fixed_position is not None

    def test_missing_file_returns_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml") == FeedConfig()

    def test_empty_file_returns_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path) == FeedConfig()

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("api: [unclosed")

        with pytest.raises(yaml.YAMLError):
            load_config(path)

    def test_uses_config_path_env_var(self, tmp_path):
        path = tmp_path / "from_env.yaml"
        path.write_text("feed:\n  radius_meters: 750\n")

        with patch.dict(os.environ, {"CONFIG_PATH": str(path)}):
            config = load_config()

        assert config.default_radius_meters == 750.0


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_defaults_with_empty_env(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_env()

        assert config == FeedConfig()

    def test_reads_all_variables(self):
        env = {
            "FEED_API_URL": "https://events.example.com",
            "FEED_API_TOKEN": "abc",
            "FEED_LATITUDE": "37.7955",
            "FEED_LONGITUDE": "-122.3937",
            "FEED_RADIUS_METERS": "2500",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.api_base_url == "https://events.example.com"
        assert config.api_token == "abc"
        assert config.fixed_position == FixedPosition(37.7955, -122.3937)
        assert config.default_radius_meters == 2500.0

    def test_half_position_is_ignored(self):
        with patch.dict(os.environ, {"FEED_LATITUDE": "37.7955"}, clear=True):
            config = load_config_from_env()

        assert config.fixed_position is None
