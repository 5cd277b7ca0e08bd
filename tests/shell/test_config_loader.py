"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
from pathlib import Path
from unittest.mock import patch

from sunrise.core.config import Config, SUNRISE_API_BASE
from sunrise.shell.config_loader import (
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


EXAMPLE_CONFIG = Path(__file__).resolve().parents[2] / "config" / "config.example.yaml"


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        assert _resolve_value(10) == 10
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("https://example.com") == "https://example.com"

    def test_resolves_env_var_placeholder(self):
        with patch.dict(os.environ, {"HOOK_URL": "https://hooks.example.com"}):
            assert _resolve_value("${HOOK_URL}") == "https://hooks.example.com"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_empty_dict_gives_defaults(self):
        assert load_config_from_dict({}) == Config()

    def test_full_config(self):
        config = load_config_from_dict({
            "timezone": "Europe/Berlin",
            "sunrise_api": {"base_url": "http://localhost:8080/json", "timeout_seconds": 3},
            "storage": {
                "backend": "firestore",
                "firestore_database": "sunrise",
                "firestore_collection": "alarms",
            },
            "dispatch": {
                "webhook_url": "https://hooks.example.com/alarm",
                "timeout_seconds": 5,
                "test_alarm_delay_seconds": 30,
            },
        })

        assert config.timezone == "Europe/Berlin"
        assert config.api_base_url == "http://localhost:8080/json"
        assert config.request_timeout_seconds == 3
        assert config.storage_backend == "firestore"
        assert config.firestore_database == "sunrise"
        assert config.firestore_collection == "alarms"
        assert config.dispatch_webhook_url == "https://hooks.example.com/alarm"
        assert config.dispatch_timeout_seconds == 5
        assert config.test_alarm_delay_seconds == 30

    def test_null_sections_are_tolerated(self):
        config = load_config_from_dict({"storage": None, "dispatch": None})
        assert config.storage_backend == "file"
        assert config.dispatch_webhook_url is None

    def test_webhook_placeholder_expanded(self):
        with patch.dict(os.environ, {"DISPATCH_WEBHOOK_URL": "https://hooks.example.com/a"}):
            config = load_config_from_dict({"dispatch": {"webhook_url": "${DISPATCH_WEBHOOK_URL}"}})

        assert config.dispatch_webhook_url == "https://hooks.example.com/a"

    def test_empty_timezone_means_local(self):
        assert load_config_from_dict({"timezone": ""}).timezone is None


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml") == Config()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path) == Config()

    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "timezone: Asia/Tokyo\n"
            "storage:\n"
            "  backend: memory\n"
        )

        config = load_config(str(path))

        assert config.timezone == "Asia/Tokyo"
        assert config.storage_backend == "memory"

    def test_uses_config_path_env(self, tmp_path):
        path = tmp_path / "from_env.yaml"
        path.write_text("timezone: UTC\n")

        with patch.dict(os.environ, {"CONFIG_PATH": str(path)}):
            assert load_config().timezone == "UTC"

    def test_example_config_loads(self):
        with patch.dict(os.environ, {"DISPATCH_WEBHOOK_URL": "https://hooks.example.com/x"}):
            config = load_config(EXAMPLE_CONFIG)

        assert config.timezone == "America/Los_Angeles"
        assert config.api_base_url == SUNRISE_API_BASE
        assert config.dispatch_webhook_url == "https://hooks.example.com/x"


class TestLoadConfigFromEnv:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            assert load_config_from_env() == Config()

    def test_reads_variables(self):
        env = {
            "SUNRISE_API_URL": "http://localhost/json",
            "SUNRISE_TIMEZONE": "America/New_York",
            "STORAGE_BACKEND": "firestore",
            "FIRESTORE_DATABASE": "sunrise",
            "DISPATCH_WEBHOOK_URL": "https://hooks.example.com/alarm",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.api_base_url == "http://localhost/json"
        assert config.timezone == "America/New_York"
        assert config.storage_backend == "firestore"
        assert config.firestore_database == "sunrise"
        assert config.dispatch_webhook_url == "https://hooks.example.com/alarm"
