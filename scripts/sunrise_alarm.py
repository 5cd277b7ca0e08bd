#!/usr/bin/env python3
"""Manage saved locations and the sunrise alarm from the command line.

Usage:
    # Save a location and make it the one the alarm follows
    python scripts/sunrise_alarm.py locations add "Home" 37.7749 -122.4194 --select

    # List saved locations (* marks the selected one)
    python scripts/sunrise_alarm.py locations list

    # Wake 10 minutes after sunrise instead of before
    python scripts/sunrise_alarm.py timing after

    # Arm, refresh, inspect or cancel the alarm
    python scripts/sunrise_alarm.py setup
    python scripts/sunrise_alarm.py refresh
    python scripts/sunrise_alarm.py status
    python scripts/sunrise_alarm.py cancel

    # Check the dispatch path without hitting the sunrise API
    python scripts/sunrise_alarm.py test-alarm --delay 10

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sunrise.core.location import AlarmTiming, SavedLocation
from sunrise.core.errors import InvalidLocationError
from sunrise.main import Components, build_components
from sunrise.scheduler import AlarmResult
from sunrise.shell.config_loader import load_config

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Seconds to wait for an operation that needs the sunrise API
OPERATION_TIMEOUT = 60


def report(result: AlarmResult) -> int:
    """Log an operation result and return the exit code."""
    state = result.state

    if result.sunrise is not None:
        logger.info("Next sunrise: %s", result.sunrise.strftime("%Y-%m-%d %H:%M:%S %Z"))

    if state.enabled and state.fire_instant is not None:
        logger.info(
            "Alarm Active: %s at %s",
            state.location_label,
            state.fire_instant.strftime("%H:%M"),
        )
    else:
        logger.info("Alarm: off")

    if not result.success:
        if result.discarded:
            logger.warning("Result discarded (superseded by a newer operation)")
        else:
            logger.error("%s", result.message)
        return 1
    return 0


def cmd_locations(components: Components, args: argparse.Namespace) -> int:
    registry = components.registry

    if args.action == "list":
        locations = registry.locations()
        if not locations:
            logger.info("No saved locations")
        for loc in locations:
            marker = "*" if loc.is_selected else " "
            logger.info(
                "%s %s  %-20s (%.4f, %.4f)",
                marker, loc.id, loc.name, loc.latitude, loc.longitude,
            )
        return 0

    if args.action == "add":
        try:
            stored = registry.add(SavedLocation(
                name=args.name,
                latitude=args.latitude,
                longitude=args.longitude,
                is_selected=args.select,
            ))
        except InvalidLocationError as e:
            logger.error("%s", e)
            return 1
        logger.info("Saved %s as %s", stored.name, stored.id)
        return 0

    if registry.get(args.id) is None:
        logger.error("Location '%s' not found", args.id)
        return 1

    if args.action == "select":
        registry.select(args.id)
    elif args.action == "delete":
        registry.delete(args.id)
    elif args.action == "rename":
        registry.rename(args.id, args.name)
    return 0


def cmd_timing(components: Components, args: argparse.Namespace) -> int:
    registry = components.registry
    if args.value is not None:
        registry.set_alarm_timing(
            AlarmTiming.BEFORE if args.value == "before" else AlarmTiming.AFTER
        )
    logger.info("Alarm timing: %s", registry.alarm_timing().value)
    return 0


def cmd_status(components: Components, args: argparse.Namespace) -> int:
    selected = components.registry.selected()
    logger.info("Location: %s", selected.name if selected else "none selected")
    logger.info("Timing: %s", components.registry.alarm_timing().value)

    state = components.scheduler.state()
    if state.enabled and state.fire_instant is not None:
        logger.info(
            "Alarm Active: %s at %s",
            state.location_label,
            state.fire_instant.strftime("%Y-%m-%d %H:%M"),
        )
    else:
        logger.info("Alarm: off")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sunrise alarm control")
    commands = parser.add_subparsers(dest="command", required=True)

    locations = commands.add_parser("locations", help="Manage saved locations")
    actions = locations.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="List saved locations")
    add = actions.add_parser("add", help="Save a new location")
    add.add_argument("name")
    add.add_argument("latitude", type=float)
    add.add_argument("longitude", type=float)
    add.add_argument("--select", action="store_true", help="Select it right away")
    for name in ("select", "delete"):
        action = actions.add_parser(name, help=f"{name.capitalize()} a location")
        action.add_argument("id")
    rename = actions.add_parser("rename", help="Rename a location")
    rename.add_argument("id")
    rename.add_argument("name")

    timing = commands.add_parser("timing", help="Show or set alarm timing")
    timing.add_argument("value", nargs="?", choices=["before", "after"])

    commands.add_parser("setup", help="Arm the sunrise alarm")
    commands.add_parser("refresh", help="Re-resolve sunrise and re-arm")
    commands.add_parser("cancel", help="Cancel the alarm")
    commands.add_parser("status", help="Show alarm status")

    test = commands.add_parser("test-alarm", help="Arm a one-off alarm soon")
    test.add_argument("--delay", type=int, default=None, help="Seconds from now")

    return parser


def main() -> int:
    """Main entry point."""
    args = build_parser().parse_args()

    config = load_config(os.environ.get("CONFIG_PATH"))
    components = build_components(config)
    scheduler = components.scheduler

    try:
        if args.command == "locations":
            return cmd_locations(components, args)
        if args.command == "timing":
            return cmd_timing(components, args)
        if args.command == "status":
            return cmd_status(components, args)

        if args.command == "setup":
            future = scheduler.setup_alarm()
        elif args.command == "refresh":
            future = scheduler.refresh()
        elif args.command == "cancel":
            future = scheduler.cancel_alarm()
        else:
            delay = args.delay or config.test_alarm_delay_seconds
            future = scheduler.schedule_test_alarm(delay_seconds=delay)

        return report(future.result(timeout=OPERATION_TIMEOUT))
    finally:
        scheduler.close()


if __name__ == "__main__":
    sys.exit(main())
