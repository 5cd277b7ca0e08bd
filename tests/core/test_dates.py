"""Unit tests for timestamp parsing.

Pure function tests - no mocks needed.
"""

import pytest
from datetime import datetime, timezone

from sunrise.core.dates import (
    OFFSET_TEMPLATES,
    parse_timestamp,
    parse_timestamp_with_strategy,
    parse_with_template,
)
from sunrise.core.errors import DateParseError


EXPECTED = datetime(2024, 3, 10, 14, 15, 30, tzinfo=timezone.utc)


class TestStrictStrategies:
    """Tests for the RFC 3339 strategies."""

    def test_fractional_seconds_with_colon_offset(self):
        """Fractional seconds and +HH:MM are handled by the first strategy."""
        parsed, strategy = parse_timestamp_with_strategy(
            "2024-03-10T14:15:30.250+00:00"
        )

        assert strategy == "internet_fractional"
        assert parsed == EXPECTED.replace(microsecond=250000)

    def test_nanosecond_fraction_is_truncated(self):
        """More than six fractional digits keep microsecond precision."""
        parsed = parse_timestamp("2024-03-10T14:15:30.123456789Z")
        assert parsed.microsecond == 123456

    def test_no_fraction_uses_second_strategy(self):
        """Without fractional seconds the second strategy matches."""
        parsed, strategy = parse_timestamp_with_strategy("2024-03-10T14:15:30+00:00")

        assert strategy == "internet"
        assert parsed == EXPECTED

    def test_z_suffix(self):
        """Z is accepted as UTC."""
        assert parse_timestamp("2024-03-10T14:15:30Z") == EXPECTED

    def test_non_utc_offset_normalized_to_utc(self):
        """Instants with an offset come back in UTC."""
        parsed = parse_timestamp("2024-03-10T07:15:30-07:00")

        assert parsed == EXPECTED
        assert parsed.tzinfo == timezone.utc


class TestTemplates:
    """Each explicit template parses its own shape."""

    @pytest.mark.parametrize(
        "raw,template",
        [
            ("2024-03-10T14:15:30+0000", "%Y-%m-%dT%H:%M:%S%z"),
            ("2024-03-10T14:15:30.000+0000", "%Y-%m-%dT%H:%M:%S.%f%z"),
            ("2024-03-10T14:15:30Z", "%Y-%m-%dT%H:%M:%SZ"),
            ("2024-03-10T14:15:30.000Z", "%Y-%m-%dT%H:%M:%S.%fZ"),
        ],
    )
    def test_template_parses_expected_instant(self, raw, template):
        """A string built in the template's exact pattern gives the instant."""
        assert template in OFFSET_TEMPLATES
        assert parse_with_template(raw, template) == EXPECTED
        assert parse_timestamp(raw) == EXPECTED

    def test_numeric_offset_without_colon_falls_through_to_templates(self):
        """+HHMM is not RFC 3339, so only the templates accept it."""
        _, strategy = parse_timestamp_with_strategy("2024-03-10T16:15:30+0200")
        assert strategy == "templates"

    def test_template_mismatch_returns_none(self):
        """A string that does not fit returns None rather than raising."""
        assert parse_with_template("2024-03-10", "%Y-%m-%dT%H:%M:%S%z") is None

    def test_missing_zone_assumes_utc(self):
        """No zone indicator is read as UTC."""
        assert parse_timestamp("2024-03-10T14:15:30") == EXPECTED
        assert parse_timestamp("2024-03-10T14:15:30.5") == EXPECTED.replace(
            microsecond=500000
        )


class TestFailures:
    """Tests for the exhausted-chain case."""

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "6:15:30 AM",
            "2024-03-10",
            "not a date",
            "2024-13-10T14:15:30Z",
            "2024-03-10 14:15:30+00:00x",
        ],
    )
    def test_unparseable_raises(self, raw):
        """Strings matching no strategy raise DateParseError."""
        with pytest.raises(DateParseError):
            parse_timestamp(raw)

    def test_non_string_raises(self):
        """Non-string input raises DateParseError."""
        with pytest.raises(DateParseError):
            parse_timestamp(None)

    def test_surrounding_whitespace_is_ignored(self):
        """Leading and trailing whitespace is stripped."""
        assert parse_timestamp("  2024-03-10T14:15:30Z\n") == EXPECTED
