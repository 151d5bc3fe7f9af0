"""Discovery feed engine for a location-aware events directory."""

__version__ = "0.1.0"
