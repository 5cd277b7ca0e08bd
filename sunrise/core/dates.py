"""Timestamp parsing - Pure functions.

The sunrise source is not consistent about the shape of its timestamps:
sometimes fractional seconds are present, sometimes not, and the offset may
come as "Z", "+00:00" or "+0000". parse_timestamp() tries a fixed chain of
strategies and returns the first match as an aware datetime in UTC.
"""

import logging
import re
from datetime import datetime, timezone

from sunrise.core.errors import DateParseError


logger = logging.getLogger(__name__)


# RFC 3339 internet date-time, the shape the source documents
_INTERNET_FRACTIONAL = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})\.(\d{1,9})(Z|[+-]\d{2}:\d{2})$"
)
_INTERNET = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(Z|[+-]\d{2}:\d{2})$"
)

# Explicit templates tried after the strict forms. Field extraction uses
# the proleptic Gregorian calendar of datetime, in UTC.
OFFSET_TEMPLATES = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
)

# No zone indicator at all: assumed UTC
NAIVE_TEMPLATES = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
)


def _offset(token: str) -> str:
    return "+00:00" if token == "Z" else token


def _parse_internet_fractional(raw: str) -> datetime | None:
    match = _INTERNET_FRACTIONAL.match(raw)
    if match is None:
        return None
    base, fraction, zone = match.groups()
    # datetime only keeps microseconds
    micros = fraction[:6].ljust(6, "0")
    return datetime.fromisoformat(f"{base}.{micros}{_offset(zone)}")


def _parse_internet(raw: str) -> datetime | None:
    match = _INTERNET.match(raw)
    if match is None:
        return None
    base, zone = match.groups()
    return datetime.fromisoformat(f"{base}{_offset(zone)}")


def parse_with_template(raw: str, template: str) -> datetime | None:
    """Parse raw against a single strptime template.

    Pure function. Templates ending in a literal Z, or carrying no zone
    directive, are read as UTC.

    Args:
        raw: Timestamp string
        template: strptime format string

    Returns:
        Aware datetime, or None if the string does not fit the template
    """
    try:
        parsed = datetime.strptime(raw, template)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_templates(raw: str) -> datetime | None:
    for template in OFFSET_TEMPLATES:
        parsed = parse_with_template(raw, template)
        if parsed is not None:
            return parsed

    for template in NAIVE_TEMPLATES:
        parsed = parse_with_template(raw, template)
        if parsed is not None:
            logger.debug("Timestamp %r has no zone indicator, assuming UTC", raw)
            return parsed

    return None


STRATEGIES = (
    ("internet_fractional", _parse_internet_fractional),
    ("internet", _parse_internet),
    ("templates", _parse_templates),
)


def parse_timestamp_with_strategy(raw: str) -> tuple[datetime, str]:
    """Parse a timestamp and report which strategy matched.

    Pure function.

    Args:
        raw: Timestamp string from the sunrise source

    Returns:
        Tuple of (instant in UTC, strategy name)

    Raises:
        DateParseError: If no strategy matches
    """
    if not isinstance(raw, str) or not raw.strip():
        raise DateParseError(f"Could not parse sunrise time: {raw!r}")

    text = raw.strip()
    for name, strategy in STRATEGIES:
        try:
            parsed = strategy(text)
        except ValueError:
            # Shape matched but fields are out of range (e.g. month 13)
            parsed = None
        if parsed is not None:
            return parsed.astimezone(timezone.utc), name

    raise DateParseError(f"Could not parse sunrise time: {raw!r}")


def parse_timestamp(raw: str) -> datetime:
    """Parse a timestamp string into an absolute instant.

    Pure function. Strategies are tried in order and the first success wins:
    RFC 3339 with fractional seconds, RFC 3339 without, then the explicit
    templates.

    Args:
        raw: Timestamp string from the sunrise source

    Returns:
        Aware datetime in UTC

    Raises:
        DateParseError: If no strategy matches
    """
    parsed, _ = parse_timestamp_with_strategy(raw)
    return parsed
