"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in sunrise/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from sunrise.core.config import Config, SUNRISE_API_BASE


logger = logging.getLogger(__name__)


def _resolve_value(value: Any) -> Any:
    """Expand a ${VAR} placeholder from the environment.

    Non-strings and plain strings are returned unchanged; an unset
    variable leaves the placeholder in place (validate_config warns).
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = _resolve_value(data.get(key))
    if value is None or value == "":
        return None
    return str(value)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    api = data.get("sunrise_api", {}) or {}
    storage = data.get("storage", {}) or {}
    dispatch = data.get("dispatch", {}) or {}

    return Config(
        api_base_url=str(_resolve_value(api.get("base_url", SUNRISE_API_BASE))),
        request_timeout_seconds=int(api.get("timeout_seconds", 10)),
        timezone=_optional_str(data, "timezone"),
        storage_backend=str(storage.get("backend", "file")),
        storage_path=str(_resolve_value(storage.get("path", "data/sunrise_state.json"))),
        firestore_database=_optional_str(storage, "firestore_database"),
        firestore_collection=str(storage.get("firestore_collection", "sunrise_alarm")),
        dispatch_webhook_url=_optional_str(dispatch, "webhook_url"),
        dispatch_timeout_seconds=int(dispatch.get("timeout_seconds", 10)),
        test_alarm_delay_seconds=int(dispatch.get("test_alarm_delay_seconds", 10)),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: storage=%s, timezone=%s, dispatch=%s",
        config.storage_backend,
        config.timezone or "local",
        "webhook" if config.dispatch_webhook_url else "log only",
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for Cloud Function deployments without a YAML file.

    Environment variables:
        SUNRISE_API_URL: Sunrise source endpoint
        SUNRISE_TIMEZONE: IANA zone for local calendar fields
        STORAGE_BACKEND: file, memory or firestore
        STORAGE_PATH: JSON file for the file backend
        FIRESTORE_DATABASE: Firestore database name
        DISPATCH_WEBHOOK_URL: Endpoint receiving alarm hand-offs

    Returns:
        Config object from environment
    """
    return Config(
        api_base_url=os.environ.get("SUNRISE_API_URL", SUNRISE_API_BASE),
        timezone=os.environ.get("SUNRISE_TIMEZONE") or None,
        storage_backend=os.environ.get("STORAGE_BACKEND", "file"),
        storage_path=os.environ.get("STORAGE_PATH", "data/sunrise_state.json"),
        firestore_database=os.environ.get("FIRESTORE_DATABASE") or None,
        dispatch_webhook_url=os.environ.get("DISPATCH_WEBHOOK_URL") or None,
    )
