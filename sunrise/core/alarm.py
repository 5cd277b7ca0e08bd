"""Alarm state and fire-time arithmetic - Pure functions.

This module holds the alarm data model and the calculations behind it.
Scheduling, locking and dispatch are handled by sunrise.scheduler.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from sunrise.core.dates import parse_timestamp
from sunrise.core.errors import DateParseError
from sunrise.core.location import AlarmTiming


NOTIFICATION_TITLE = "Sunrise Alarm"
NOTIFICATION_IDENTIFIER = "daily_sunrise_alarm"


class AlarmStatus(Enum):
    """Lifecycle of the single alarm."""

    DISABLED = "disabled"
    ENABLING = "enabling"
    ENABLED = "enabled"


class MessageVariant(Enum):
    """Notification wording, chosen by which side of sunrise the alarm is on."""

    BEFORE_SUNRISE = "before_sunrise"
    AFTER_SUNRISE = "after_sunrise"

    @property
    def body(self) -> str:
        """Notification body text."""
        if self is MessageVariant.BEFORE_SUNRISE:
            return "Good morning! The sun will rise in 10 minutes."
        return "Good morning! The sun has risen!"


@dataclass(frozen=True)
class AlarmState:
    """Snapshot of the alarm.

    Attributes:
        status: Current lifecycle status
        fire_instant: When the alarm fires (None when disabled)
        location_label: Name of the location the alarm was armed for
    """
    status: AlarmStatus = AlarmStatus.DISABLED
    fire_instant: datetime | None = None
    location_label: str = ""

    @property
    def enabled(self) -> bool:
        """True once the alarm has been handed off successfully."""
        return self.status is AlarmStatus.ENABLED


DISABLED_STATE = AlarmState()


def compute_fire_instant(sunrise: datetime, timing: AlarmTiming) -> datetime:
    """Apply the 10 minute offset to a sunrise instant.

    Pure function. The timing is passed in by the caller at computation time
    rather than read from shared state.

    Args:
        sunrise: Resolved sunrise instant
        timing: Before or after sunrise

    Returns:
        Fire instant
    """
    return sunrise + timing.signed_offset


def message_variant_for(timing: AlarmTiming) -> MessageVariant:
    """Pick the notification wording for a timing preference."""
    if timing is AlarmTiming.BEFORE:
        return MessageVariant.BEFORE_SUNRISE
    return MessageVariant.AFTER_SUNRISE


def alarm_state_to_dict(state: AlarmState) -> dict[str, Any]:
    """Structured form used for persistence.

    Only enabled or disabled are ever written; an in-flight ENABLING
    state is persisted as disabled.
    """
    return {
        "enabled": state.enabled,
        "fire_instant": (
            state.fire_instant.isoformat()
            if state.enabled and state.fire_instant is not None
            else None
        ),
        "location_label": state.location_label if state.enabled else "",
    }


def alarm_state_from_dict(data: dict[str, Any] | None) -> AlarmState:
    """Restore a persisted alarm state.

    Pure function. Anything that cannot be decoded yields a disabled state.
    """
    if not isinstance(data, dict) or not data.get("enabled"):
        return DISABLED_STATE

    raw_instant = data.get("fire_instant")
    if not isinstance(raw_instant, str):
        return DISABLED_STATE

    try:
        fire_instant = parse_timestamp(raw_instant)
    except DateParseError:
        return DISABLED_STATE

    return AlarmState(
        status=AlarmStatus.ENABLED,
        fire_instant=fire_instant,
        location_label=str(data.get("location_label", "")),
    )
