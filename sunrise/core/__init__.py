"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Timestamp parsing with a fallback chain of formats
- Saved location list transforms (single selection)
- Sunrise response decoding and calendar re-anchoring
- Alarm fire-time arithmetic and state (de)serialization

All functions here are deterministic and have no I/O.
"""

from sunrise.core.alarm import AlarmState, AlarmStatus, MessageVariant, compute_fire_instant
from sunrise.core.dates import parse_timestamp
from sunrise.core.location import AlarmTiming, SavedLocation
from sunrise.core.sunrise import anchor_to_date, extract_sunrise_field, sunrise_from_payload

__all__ = [
    # Alarm
    "AlarmState",
    "AlarmStatus",
    "MessageVariant",
    "compute_fire_instant",
    # Dates
    "parse_timestamp",
    # Locations
    "AlarmTiming",
    "SavedLocation",
    # Sunrise
    "anchor_to_date",
    "extract_sunrise_field",
    "sunrise_from_payload",
]
