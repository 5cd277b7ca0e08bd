"""Alarm Dispatch Clients - Imperative Shell.

The actual alarm delivery (phone notification, smart speaker, home
automation hub) happens outside this project. These clients hand a fire
time and message over to it and report whether the hand-off worked.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import requests

from sunrise.core.alarm import NOTIFICATION_IDENTIFIER, NOTIFICATION_TITLE, MessageVariant


logger = logging.getLogger(__name__)


# Default timeout for webhook requests (seconds)
DEFAULT_TIMEOUT = 10


@dataclass
class DispatchResponse:
    """Outcome of a dispatch hand-off.

    Attributes:
        success: Whether the receiver accepted the request
        status_code: HTTP status code (0 when no response was received)
        error: Error message if failed
    """
    success: bool
    status_code: int
    error: str | None = None


def build_schedule_payload(
    fire_instant: datetime,
    variant: MessageVariant,
    location_label: str,
) -> dict[str, Any]:
    """Build the JSON body for a daily schedule request.

    The receiver repeats the alarm daily at hour:minute local time;
    fire_at carries the full instant of the next occurrence.
    """
    return {
        "action": "schedule",
        "identifier": NOTIFICATION_IDENTIFIER,
        "title": NOTIFICATION_TITLE,
        "body": variant.body,
        "variant": variant.value,
        "hour": fire_instant.hour,
        "minute": fire_instant.minute,
        "fire_at": fire_instant.isoformat(),
        "repeats": True,
        "location": location_label,
    }


class WebhookDispatcher:
    """Hands alarm schedule/cancel requests to an HTTP webhook.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(self, webhook_url: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        """Initialize webhook dispatcher.

        Args:
            webhook_url: Endpoint that receives the alarm requests
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    def _post(self, payload: dict[str, Any]) -> DispatchResponse:
        try:
            response = requests.post(
                self.webhook_url,
                json=payload,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )

            if 200 <= response.status_code < 300:
                return DispatchResponse(
                    success=True,
                    status_code=response.status_code,
                )
            else:
                error_text = response.text
                logger.warning(
                    "Dispatch webhook returned non-2xx: %d - %s",
                    response.status_code,
                    error_text,
                )
                return DispatchResponse(
                    success=False,
                    status_code=response.status_code,
                    error=error_text or f"HTTP {response.status_code}",
                )

        except requests.Timeout:
            logger.error("Dispatch webhook request timed out")
            return DispatchResponse(
                success=False,
                status_code=0,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("Dispatch webhook request failed: %s", str(e))
            return DispatchResponse(
                success=False,
                status_code=0,
                error=str(e),
            )

    def schedule_daily(
        self,
        fire_instant: datetime,
        variant: MessageVariant,
        location_label: str,
    ) -> DispatchResponse:
        """Ask the receiver to fire daily at the instant's local time.

        This method performs HTTP I/O. The receiver replaces any alarm it
        already holds under the same identifier.
        """
        logger.info(
            "Scheduling daily alarm for %02d:%02d (%s)",
            fire_instant.hour,
            fire_instant.minute,
            location_label,
        )
        response = self._post(
            build_schedule_payload(fire_instant, variant, location_label)
        )
        if response.success:
            logger.info("Alarm hand-off accepted")
        return response

    def cancel_all(self) -> DispatchResponse:
        """Ask the receiver to drop every pending alarm.

        This method performs HTTP I/O.
        """
        logger.info("Cancelling all alarms")
        return self._post({"action": "cancel_all"})


class LoggingDispatcher:
    """Dispatcher used when no webhook is configured.

    Hand-offs are only written to the log and always succeed.
    """

    def schedule_daily(
        self,
        fire_instant: datetime,
        variant: MessageVariant,
        location_label: str,
    ) -> DispatchResponse:
        logger.info(
            "[no dispatcher] Would schedule daily alarm at %s for %s: %s",
            fire_instant.isoformat(),
            location_label,
            variant.body,
        )
        return DispatchResponse(success=True, status_code=0)

    def cancel_all(self) -> DispatchResponse:
        logger.info("[no dispatcher] Would cancel all alarms")
        return DispatchResponse(success=True, status_code=0)
