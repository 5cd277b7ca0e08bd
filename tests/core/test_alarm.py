"""Unit tests for alarm arithmetic and state serialization.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from sunrise.core.alarm import (
    DISABLED_STATE,
    AlarmState,
    AlarmStatus,
    MessageVariant,
    alarm_state_from_dict,
    alarm_state_to_dict,
    compute_fire_instant,
    message_variant_for,
)
from sunrise.core.location import AlarmTiming


SUNRISE = datetime(2024, 3, 10, 6, 0, 0, tzinfo=timezone.utc)


class TestComputeFireInstant:
    """Tests for compute_fire_instant()."""

    def test_before_sunrise(self):
        """Sunrise 06:00 with Before fires at 05:50."""
        result = compute_fire_instant(SUNRISE, AlarmTiming.BEFORE)
        assert result == datetime(2024, 3, 10, 5, 50, 0, tzinfo=timezone.utc)

    def test_after_sunrise(self):
        """Sunrise 06:00 with After fires at 06:10."""
        result = compute_fire_instant(SUNRISE, AlarmTiming.AFTER)
        assert result == datetime(2024, 3, 10, 6, 10, 0, tzinfo=timezone.utc)

    def test_crosses_midnight(self):
        """Offsets can move the fire instant to the previous day."""
        early = datetime(2024, 6, 21, 0, 5, 0, tzinfo=timezone.utc)
        result = compute_fire_instant(early, AlarmTiming.BEFORE)
        assert result == datetime(2024, 6, 20, 23, 55, 0, tzinfo=timezone.utc)


class TestMessageVariant:
    def test_variant_for_timing(self):
        assert message_variant_for(AlarmTiming.BEFORE) is MessageVariant.BEFORE_SUNRISE
        assert message_variant_for(AlarmTiming.AFTER) is MessageVariant.AFTER_SUNRISE

    def test_bodies(self):
        assert "in 10 minutes" in MessageVariant.BEFORE_SUNRISE.body
        assert "has risen" in MessageVariant.AFTER_SUNRISE.body


class TestAlarmStateSerialization:
    """Tests for alarm_state_to_dict() and alarm_state_from_dict()."""

    def test_enabled_state_round_trips(self):
        tz = ZoneInfo("America/Los_Angeles")
        state = AlarmState(
            status=AlarmStatus.ENABLED,
            fire_instant=datetime(2024, 3, 11, 7, 5, tzinfo=tz),
            location_label="Home",
        )

        restored = alarm_state_from_dict(alarm_state_to_dict(state))

        assert restored.enabled
        assert restored.fire_instant == state.fire_instant
        assert restored.location_label == "Home"

    def test_disabled_state(self):
        data = alarm_state_to_dict(DISABLED_STATE)

        assert data == {"enabled": False, "fire_instant": None, "location_label": ""}
        assert alarm_state_from_dict(data) == DISABLED_STATE

    def test_enabling_is_written_as_disabled(self):
        """An in-flight setup is never persisted as armed."""
        state = AlarmState(status=AlarmStatus.ENABLING, location_label="Home")
        assert alarm_state_to_dict(state)["enabled"] is False

    def test_garbage_restores_disabled(self):
        assert alarm_state_from_dict(None) == DISABLED_STATE
        assert alarm_state_from_dict({"enabled": True}) == DISABLED_STATE
        assert alarm_state_from_dict(
            {"enabled": True, "fire_instant": "tomorrow"}
        ) == DISABLED_STATE
