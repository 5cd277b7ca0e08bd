"""Tests for the alarm dispatch clients.

Uses the `responses` library to mock HTTP requests.
"""

import json

import requests
import responses
from datetime import datetime
from zoneinfo import ZoneInfo

from sunrise.core.alarm import MessageVariant
from sunrise.shell.webhook_dispatcher import (
    LoggingDispatcher,
    WebhookDispatcher,
    build_schedule_payload,
)


WEBHOOK_URL = "https://hooks.example.com/alarm"
FIRE = datetime(2024, 3, 11, 7, 5, 0, tzinfo=ZoneInfo("America/Los_Angeles"))


class TestBuildSchedulePayload:
    def test_payload_fields(self):
        payload = build_schedule_payload(FIRE, MessageVariant.BEFORE_SUNRISE, "Home")

        assert payload["action"] == "schedule"
        assert payload["identifier"] == "daily_sunrise_alarm"
        assert payload["title"] == "Sunrise Alarm"
        assert payload["hour"] == 7
        assert payload["minute"] == 5
        assert payload["repeats"] is True
        assert payload["location"] == "Home"
        assert payload["fire_at"] == "2024-03-11T07:05:00-07:00"
        assert payload["body"] == MessageVariant.BEFORE_SUNRISE.body


class TestWebhookDispatcher:
    """Tests for WebhookDispatcher."""

    @responses.activate
    def test_schedule_success(self):
        responses.add(responses.POST, WEBHOOK_URL, json={"ok": True}, status=200)

        result = WebhookDispatcher(WEBHOOK_URL).schedule_daily(
            FIRE, MessageVariant.AFTER_SUNRISE, "Cabin",
        )

        assert result.success is True
        assert result.error is None
        body = json.loads(responses.calls[0].request.body)
        assert body["variant"] == "after_sunrise"
        assert body["location"] == "Cabin"

    @responses.activate
    def test_schedule_accepts_any_2xx(self):
        responses.add(responses.POST, WEBHOOK_URL, status=204)

        result = WebhookDispatcher(WEBHOOK_URL).schedule_daily(
            FIRE, MessageVariant.BEFORE_SUNRISE, "Home",
        )

        assert result.success is True

    @responses.activate
    def test_schedule_rejected(self):
        responses.add(responses.POST, WEBHOOK_URL, body="quota exceeded", status=429)

        result = WebhookDispatcher(WEBHOOK_URL).schedule_daily(
            FIRE, MessageVariant.BEFORE_SUNRISE, "Home",
        )

        assert result.success is False
        assert result.status_code == 429
        assert result.error == "quota exceeded"

    @responses.activate
    def test_timeout(self):
        responses.add(responses.POST, WEBHOOK_URL, body=requests.Timeout())

        result = WebhookDispatcher(WEBHOOK_URL).schedule_daily(
            FIRE, MessageVariant.BEFORE_SUNRISE, "Home",
        )

        assert result.success is False
        assert result.status_code == 0
        assert result.error == "Request timed out"

    @responses.activate
    def test_cancel_all(self):
        responses.add(responses.POST, WEBHOOK_URL, status=200)

        result = WebhookDispatcher(WEBHOOK_URL).cancel_all()

        assert result.success is True
        assert json.loads(responses.calls[0].request.body) == {"action": "cancel_all"}


class TestLoggingDispatcher:
    def test_always_succeeds(self):
        dispatcher = LoggingDispatcher()

        assert dispatcher.schedule_daily(FIRE, MessageVariant.BEFORE_SUNRISE, "Home").success
        assert dispatcher.cancel_all().success
