"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

import math
from dataclasses import dataclass, field

from discovery_feed.core.filters import DEFAULT_RADIUS_METERS
from discovery_feed.core.ranking import TIE_BREAK_METERS


DEFAULT_API_BASE_URL = "https://api.olec.app"

# Quiescence windows (seconds)
SEARCH_DEBOUNCE_SECONDS = 0.3
LOCATION_DEBOUNCE_SECONDS = 1.0


@dataclass
class FixedPosition:
    """A configured position used when no live location provider exists.

    Attributes:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
    """
    latitude: float
    longitude: float


@dataclass
class FeedConfig:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        api_base_url: Events API base URL
        api_token: Bearer token sent with API requests (optional)
        request_timeout_seconds: HTTP timeout for event fetches
        search_debounce_seconds: Quiescence window for filter edits
        location_debounce_seconds: Quiescence window for position updates
        default_radius_meters: Initial search radius
        tie_break_meters: Distance difference ranked as a tie
        fixed_position: Position to report when no live provider exists
        display_timezone: IANA zone name for formatted times (None for UTC)
    """
    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: str | None = None
    request_timeout_seconds: float = 30.0
    search_debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS
    location_debounce_seconds: float = LOCATION_DEBOUNCE_SECONDS
    default_radius_meters: float = DEFAULT_RADIUS_METERS
    tie_break_meters: float = TIE_BREAK_METERS
    fixed_position: FixedPosition | None = None
    display_timezone: str | None = None


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def _validate_positive(value: float, field_name: str) -> list[ValidationError]:
    if not math.isfinite(value) or value <= 0:
        return [ValidationError(
            field=field_name,
            message=f"Must be a positive number, got {value}",
        )]
    return []


def validate_config(config: FeedConfig) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.api_base_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="api_base_url",
            message=f"API base URL must start with http:// or https://, got '{config.api_base_url}'",
        ))

    if config.api_token is not None and config.api_token.startswith("${"):
        errors.append(ValidationError(
            field="api_token",
            message="API token not resolved (still contains placeholder)",
            severity="warning",
        ))

    errors.extend(_validate_positive(config.request_timeout_seconds, "request_timeout_seconds"))
    errors.extend(_validate_positive(config.search_debounce_seconds, "search_debounce_seconds"))
    errors.extend(_validate_positive(config.location_debounce_seconds, "location_debounce_seconds"))
    errors.extend(_validate_positive(config.default_radius_meters, "default_radius_meters"))

    if not math.isfinite(config.tie_break_meters) or config.tie_break_meters < 0:
        errors.append(ValidationError(
            field="tie_break_meters",
            message=f"Must be zero or positive, got {config.tie_break_meters}",
        ))

    if config.fixed_position is not None:
        errors.extend(validate_coordinates(
            config.fixed_position.latitude,
            config.fixed_position.longitude,
            "fixed_position",
        ))
    else:
        errors.append(ValidationError(
            field="fixed_position",
            message="No fixed position configured; the feed stays empty until a location provider reports one",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
