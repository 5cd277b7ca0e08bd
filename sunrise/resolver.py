"""Sunrise Resolver - Wires the sunrise client and the core parsing.

Given coordinates and a local calendar day, fetches the raw sunrise from
the remote source and returns it as a local instant on that day. The call
blocks on network I/O; the scheduler runs it on a worker thread.
"""

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Callable

from sunrise.core.sunrise import (
    TODAY_TOKEN,
    format_date_param,
    sunrise_from_payload,
    today_in,
    tomorrow_in,
)
from sunrise.shell.sunrise_client import SunriseClient


logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SunriseResolver:
    """Resolves the sunrise instant for a location and day.

    No retries are attempted here; every failure is raised as one of the
    sunrise error kinds and retry policy is left to the caller.
    """

    def __init__(
        self,
        client: SunriseClient,
        tz: tzinfo,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize resolver.

        Args:
            client: HTTP client for the sunrise source
            tz: Local time zone whose calendar the alarm follows
            clock: Returns the current aware datetime
        """
        self.client = client
        self.tz = tz
        self.clock = clock

    def _resolve(
        self,
        latitude: float,
        longitude: float,
        calendar_date: date,
        date_param: str,
    ) -> datetime:
        payload = self.client.fetch(latitude, longitude, date_param)
        sunrise = sunrise_from_payload(payload, calendar_date, self.tz)

        logger.info(
            "Resolved sunrise for (%.4f, %.4f) on %s: %s",
            latitude,
            longitude,
            calendar_date.isoformat(),
            sunrise.isoformat(),
        )
        return sunrise

    def resolve_for(
        self,
        latitude: float,
        longitude: float,
        calendar_date: date,
    ) -> datetime:
        """Resolve sunrise on a specific local calendar day.

        The date of the result always equals calendar_date; only the
        time-of-day is taken from the upstream response.

        Raises:
            InvalidRequestError, TransportError, EmptyResponseError,
            DecodeError, DateParseError, CalendarComposeError
        """
        return self._resolve(
            latitude,
            longitude,
            calendar_date,
            format_date_param(calendar_date),
        )

    def resolve_today(self, latitude: float, longitude: float) -> datetime:
        """Resolve sunrise for the current local day.

        Sends the source's literal "today" token.
        """
        calendar_date = today_in(self.tz, self.clock())
        return self._resolve(latitude, longitude, calendar_date, TODAY_TOKEN)

    def resolve_tomorrow(self, latitude: float, longitude: float) -> datetime:
        """Resolve sunrise for the next local day.

        This is the next upcoming sunrise even when today's has passed,
        so it is what the alarm and the display use.
        """
        calendar_date = tomorrow_in(self.tz, self.clock())
        return self.resolve_for(latitude, longitude, calendar_date)
