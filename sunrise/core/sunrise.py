"""Sunrise response handling - Pure functions.

This module turns a decoded sunrise-sunset.org response into a local
sunrise instant. All functions are pure with no side effects; the HTTP
request itself is made by sunrise.shell.sunrise_client.
"""

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any

from sunrise.core.dates import parse_timestamp
from sunrise.core.errors import CalendarComposeError, DecodeError, InvalidRequestError


# Literal date token the source understands as "the current day"
TODAY_TOKEN = "today"

# Status value the source uses for a successful lookup
STATUS_OK = "OK"


def format_date_param(calendar_date: date | None) -> str:
    """Render the date query parameter.

    Pure function.

    Args:
        calendar_date: Target date, or None for the source's "today"

    Returns:
        "YYYY-MM-DD" or the literal "today" token
    """
    if calendar_date is None:
        return TODAY_TOKEN
    return calendar_date.strftime("%Y-%m-%d")


def build_query_params(
    latitude: float,
    longitude: float,
    date_param: str,
) -> dict[str, str]:
    """Build query parameters for a sunrise lookup.

    Pure function.

    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        date_param: "YYYY-MM-DD" or "today"

    Returns:
        Dict of URL query parameters

    Raises:
        InvalidRequestError: If the coordinates cannot form a valid request
    """
    for label, value, limit in (
        ("latitude", latitude, 90),
        ("longitude", longitude, 180),
    ):
        # bool is an int subclass but never a coordinate
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not math.isfinite(value)
        ):
            raise InvalidRequestError(f"Invalid {label}: {value!r}")
        if not -limit <= value <= limit:
            raise InvalidRequestError(
                f"{label.capitalize()} {value} out of range [-{limit}, {limit}]"
            )

    if not date_param:
        raise InvalidRequestError("Missing date parameter")

    return {
        "lat": str(latitude),
        "lng": str(longitude),
        # formatted=0 returns ISO 8601 timestamps instead of "6:15:30 AM"
        "formatted": "0",
        "date": date_param,
    }


def extract_sunrise_field(payload: Any) -> str:
    """Pull the raw sunrise timestamp out of a decoded response.

    Pure function. Only "status" and "results.sunrise" are consumed; other
    fields (sunset, twilight bounds, day_length) are ignored.

    Args:
        payload: Decoded JSON body

    Returns:
        Raw sunrise timestamp string

    Raises:
        DecodeError: If the structure is not what the source documents
    """
    if not isinstance(payload, dict):
        raise DecodeError("Sunrise response is not a JSON object")

    status = payload.get("status")
    if status != STATUS_OK:
        raise DecodeError(f"Sunrise source returned status {status!r}")

    results = payload.get("results")
    if not isinstance(results, dict):
        raise DecodeError("Sunrise response has no results object")

    sunrise = results.get("sunrise")
    if not isinstance(sunrise, str):
        raise DecodeError("Sunrise response has no sunrise field")

    return sunrise


def _wall_time_exists(composed: datetime) -> bool:
    """A wall time inside a DST gap does not survive a round trip via UTC."""
    round_trip = composed.astimezone(timezone.utc).astimezone(composed.tzinfo)
    return round_trip.replace(tzinfo=None) == composed.replace(tzinfo=None)


def anchor_to_date(
    instant: datetime,
    calendar_date: date,
    tz: tzinfo,
) -> datetime:
    """Put the time-of-day of an instant onto a chosen calendar date.

    Pure function. The upstream value is trusted only for hour, minute and
    second (in the local zone); the date portion always comes from the
    caller, so a response stamped with a neighbouring day near midnight
    still lands on the requested day.

    Args:
        instant: Parsed upstream sunrise instant
        calendar_date: Local calendar day the sunrise belongs to
        tz: Local time zone

    Returns:
        Aware datetime in tz on calendar_date

    Raises:
        CalendarComposeError: If the composed local time cannot exist
    """
    local = instant.astimezone(tz)
    wall = time(local.hour, local.minute, local.second)

    try:
        composed = datetime.combine(calendar_date, wall, tzinfo=tz)
    except (TypeError, ValueError, OverflowError) as e:
        raise CalendarComposeError(
            f"Could not create local sunrise date: {e}"
        ) from e

    if not _wall_time_exists(composed):
        raise CalendarComposeError(
            f"Could not create local sunrise date: {calendar_date} {wall} "
            f"does not exist in {tz}"
        )

    return composed


def today_in(tz: tzinfo, now: datetime) -> date:
    """Local calendar date of now in tz."""
    return now.astimezone(tz).date()


def tomorrow_in(tz: tzinfo, now: datetime) -> date:
    """Local calendar date after now in tz."""
    return today_in(tz, now) + timedelta(days=1)


def sunrise_from_payload(
    payload: Any,
    calendar_date: date,
    tz: tzinfo,
) -> datetime:
    """Decode, parse and re-anchor the sunrise in one step.

    Pure function.

    Args:
        payload: Decoded JSON body
        calendar_date: Local calendar day the sunrise belongs to
        tz: Local time zone

    Returns:
        Local sunrise instant on calendar_date

    Raises:
        DecodeError: If the response structure is wrong
        DateParseError: If the sunrise timestamp matches no known format
        CalendarComposeError: If the re-anchored time cannot exist
    """
    raw = extract_sunrise_field(payload)
    instant = parse_timestamp(raw)
    return anchor_to_date(instant, calendar_date, tz)
