"""Command-line Entry Point.

This module is a thin wrapper that loads configuration, wires the engine
to the events API and a fixed location, runs it on an asyncio loop until
the feed settles, and prints the result.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from discovery_feed.core.config import FeedConfig, FixedPosition, validate_config
from discovery_feed.core.event import Event, event_to_dict
from discovery_feed.core.formatter import format_feed_summary
from discovery_feed.core.geo import Position
from discovery_feed.engine import DiscoveryFeedEngine, FeedSnapshot
from discovery_feed.shell.config_loader import load_config, load_config_from_env
from discovery_feed.shell.events_client import EventsClient
from discovery_feed.shell.location_source import FixedLocationSource


logger = logging.getLogger(__name__)

# Upper bound on how long the CLI waits for the feed to settle (seconds)
SETTLE_TIMEOUT = 60.0
POLL_INTERVAL = 0.05


def _configure_logging() -> None:
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _parse_datetime(value: str) -> datetime:
    """argparse type for --from/--to; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid ISO 8601 datetime: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discovery-feed",
        description="Show nearby events, filtered and ranked by distance and start time.",
    )
    parser.add_argument("--config", help="Path to YAML config (default: CONFIG_PATH or env vars)")
    parser.add_argument("--lat", type=float, help="Latitude of the current position")
    parser.add_argument("--lon", type=float, help="Longitude of the current position")
    parser.add_argument("--query", default="", help="Free-text search")
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        help="Restrict to a category (repeatable)",
    )
    parser.add_argument("--from", dest="date_from", type=_parse_datetime, help="Earliest start time")
    parser.add_argument("--to", dest="date_to", type=_parse_datetime, help="Latest start time")
    parser.add_argument("--radius", type=float, help="Search radius in meters")
    parser.add_argument("--json", action="store_true", help="Print events as JSON")
    return parser


def _get_config(args: argparse.Namespace) -> FeedConfig:
    """Load configuration from file or environment, then apply CLI overrides."""
    config_path = args.config or os.environ.get("CONFIG_PATH")

    if config_path:
        config = load_config(config_path)
    else:
        config = load_config_from_env()

    if args.lat is not None and args.lon is not None:
        config.fixed_position = FixedPosition(latitude=args.lat, longitude=args.lon)

    return config


def _apply_filters(engine: DiscoveryFeedEngine, args: argparse.Namespace) -> None:
    if args.query:
        engine.set_search_text(args.query)
    for category in args.category:
        engine.toggle_category(category)
    if args.date_from or args.date_to:
        engine.set_date_range(
            args.date_from or datetime.min.replace(tzinfo=timezone.utc),
            args.date_to or datetime.max.replace(tzinfo=timezone.utc),
        )
    if args.radius is not None:
        engine.set_radius(args.radius)


async def run_feed(config: FeedConfig, args: argparse.Namespace) -> FeedSnapshot:
    """Run the engine until it settles and return the final snapshot.

    Raises:
        ValueError: If a filter argument is invalid
        TimeoutError: If the feed does not settle in time
    """
    loop = asyncio.get_running_loop()

    fixed = config.fixed_position
    source = FixedLocationSource(Position(fixed.latitude, fixed.longitude))

    client = EventsClient(
        base_url=config.api_base_url,
        timeout=config.request_timeout_seconds,
        api_token=config.api_token,
    )

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="feed-fetch") as executor:
        engine = DiscoveryFeedEngine(
            config,
            repository=client,
            location_source=source,
            scheduler=loop,
            executor=executor,
        )
        try:
            engine.start()
            _apply_filters(engine, args)

            async with asyncio.timeout(SETTLE_TIMEOUT):
                # start() arms both debouncers, so the engine is busy until
                # the first fetch lands
                while not engine.is_settled:
                    await asyncio.sleep(POLL_INTERVAL)

            return engine.snapshot()
        finally:
            engine.teardown()


def _print_snapshot(snapshot: FeedSnapshot, as_json: bool, tz_name: str | None) -> None:
    events: list[Event] = list(snapshot.events)

    if as_json:
        print(json.dumps([event_to_dict(e) for e in events], indent=2))
        return

    tz = timezone.utc
    if tz_name:
        try:
            tz = ZoneInfo(tz_name)
        except ZoneInfoNotFoundError:
            logger.warning("Unknown timezone %s, using UTC", tz_name)

    print(format_feed_summary(events, snapshot.has_active_filters, snapshot.position, tz))


def main(argv: list[str] | None = None) -> int:
    """Run the discovery feed once from the command line.

    Returns:
        Process exit code
    """
    _configure_logging()
    args = build_parser().parse_args(argv)

    config = _get_config(args)
    validation = validate_config(config)

    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)

    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("Config %s: %s", error.field, error.message)
        return 1

    if config.fixed_position is None:
        logger.error("No position: pass --lat/--lon or set FEED_LATITUDE/FEED_LONGITUDE")
        return 1

    try:
        snapshot = asyncio.run(run_feed(config, args))
    except ValueError as e:
        logger.error("Invalid filter: %s", e)
        return 1
    except TimeoutError:
        logger.error("Feed did not settle within %.0fs", SETTLE_TIMEOUT)
        return 1

    if snapshot.error:
        logger.error("Last fetch failed: %s", snapshot.error)

    _print_snapshot(snapshot, args.json, config.display_timezone)

    return 0 if snapshot.error is None else 2


if __name__ == "__main__":
    sys.exit(main())
