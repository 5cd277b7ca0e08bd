"""Sunrise API Client - Imperative Shell.

This module handles HTTP communication with the sunrise-sunset.org API.
All I/O is contained here; parsing and date logic are in the core module.
"""

import logging
from typing import Any

import requests

from sunrise.core.config import SUNRISE_API_BASE
from sunrise.core.errors import (
    DecodeError,
    EmptyResponseError,
    InvalidRequestError,
    TransportError,
)
from sunrise.core.sunrise import build_query_params


logger = logging.getLogger(__name__)


# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10


class SunriseClient:
    """Client for fetching sunrise data from the sunrise-sunset.org API.

    This is part of the imperative shell - it handles HTTP I/O.
    Library exceptions are translated into the sunrise error kinds.
    """

    def __init__(
        self,
        base_url: str = SUNRISE_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize sunrise client.

        Args:
            base_url: API endpoint
            timeout: Request timeout in seconds
            session: Optional requests session (one is created if omitted)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(
        self,
        latitude: float,
        longitude: float,
        date_param: str,
    ) -> dict[str, Any]:
        """Fetch raw sunrise data for a location and day.

        This method performs HTTP I/O. No retries are attempted.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            date_param: "YYYY-MM-DD" or "today"

        Returns:
            Decoded JSON response

        Raises:
            InvalidRequestError: If the request target is malformed
            TransportError: On timeout, connection failure or HTTP error status
            EmptyResponseError: If the response has no body
            DecodeError: If the body is not a JSON object
        """
        params = build_query_params(latitude, longitude, date_param)

        logger.info(
            "Fetching sunrise for (%.4f, %.4f) on %s",
            latitude,
            longitude,
            date_param,
        )

        try:
            response = self.session.get(
                self.base_url,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except (requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema,
                requests.exceptions.InvalidURL) as e:
            raise InvalidRequestError(f"Invalid URL: {e}") from e
        except requests.Timeout as e:
            logger.error("Sunrise request timed out")
            raise TransportError("Request timed out") from e
        except requests.RequestException as e:
            logger.error("Sunrise request failed: %s", str(e))
            raise TransportError(f"Failed to fetch sunrise time: {e}") from e

        if not response.content or not response.content.strip():
            raise EmptyResponseError("No data received")

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Sunrise response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise DecodeError("Sunrise response is not a JSON object")

        logger.info("Sunrise source returned status %s", data.get("status"))

        return data
