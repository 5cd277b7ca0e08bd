"""Cloud Function Entry Point.

This module provides the entry points an external periodic scheduler
(Cloud Scheduler over HTTP or Pub/Sub) calls to keep the alarm in step
with the changing sunrise. The project never schedules its own wake-ups.
"""

import logging
import os
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Any

import functions_framework
from flask import Request

from sunrise.core.config import Config, resolve_timezone, validate_config
from sunrise.core.errors import NoLocationSelected
from sunrise.registry import LocationRegistry
from sunrise.resolver import SunriseResolver
from sunrise.scheduler import AlarmResult, AlarmScheduler
from sunrise.shell.config_loader import load_config, load_config_from_env
from sunrise.shell.firestore_client import FirestoreConfig, FirestoreStore
from sunrise.shell.kv_store import JsonFileStore, MemoryStore
from sunrise.shell.sunrise_client import SunriseClient
from sunrise.shell.webhook_dispatcher import LoggingDispatcher, WebhookDispatcher


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Seconds to wait for a refresh before giving up on the invocation
REFRESH_TIMEOUT = 60


@dataclass
class Components:
    """The wired-up stateful components."""
    config: Config
    registry: LocationRegistry
    resolver: SunriseResolver
    scheduler: AlarmScheduler


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("STORAGE_BACKEND") or os.environ.get("DISPATCH_WEBHOOK_URL"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def build_store(config: Config) -> Any:
    """Create the key-value store selected by the config."""
    if config.storage_backend == "firestore":
        return FirestoreStore(FirestoreConfig(
            database=config.firestore_database,
            collection=config.firestore_collection,
        ))
    if config.storage_backend == "memory":
        return MemoryStore()
    return JsonFileStore(config.storage_path)


def build_dispatcher(config: Config) -> Any:
    """Create the alarm hand-off client selected by the config."""
    if config.dispatch_webhook_url:
        return WebhookDispatcher(
            config.dispatch_webhook_url,
            timeout=config.dispatch_timeout_seconds,
        )
    return LoggingDispatcher()


def build_components(
    config: Config,
    store: Any | None = None,
    dispatcher: Any | None = None,
    client: SunriseClient | None = None,
) -> Components:
    """Wire registry, resolver and scheduler from configuration.

    Args:
        config: Application configuration
        store: Key-value store (created from config if not provided)
        dispatcher: Alarm hand-off client (created from config if not provided)
        client: Sunrise API client (created from config if not provided)

    Returns:
        Components sharing one store

    Raises:
        ValueError: If the configuration has critical errors
    """
    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not validation.valid:
        messages = "; ".join(
            f"{e.field}: {e.message}" for e in validation.critical_errors
        )
        raise ValueError(f"Invalid configuration: {messages}")

    store = store if store is not None else build_store(config)
    registry = LocationRegistry(store)
    resolver = SunriseResolver(
        client or SunriseClient(
            base_url=config.api_base_url,
            timeout=config.request_timeout_seconds,
        ),
        tz=resolve_timezone(config.timezone),
    )
    scheduler = AlarmScheduler(
        registry=registry,
        resolver=resolver,
        dispatcher=dispatcher if dispatcher is not None else build_dispatcher(config),
        store=store,
    )

    return Components(
        config=config,
        registry=registry,
        resolver=resolver,
        scheduler=scheduler,
    )


def result_to_response(result: AlarmResult) -> tuple[dict[str, Any], int]:
    """Build the HTTP response body and status for a refresh result."""
    state = result.state
    response: dict[str, Any] = {
        "status": "success" if result.success else "error",
        "alarm_enabled": state.enabled,
        "fire_instant": state.fire_instant.isoformat() if state.fire_instant else None,
        "location": state.location_label or None,
        "sunrise": result.sunrise.isoformat() if result.sunrise else None,
    }

    if result.success:
        return response, 200

    response["message"] = result.message
    if isinstance(result.error, NoLocationSelected):
        return response, 400
    # 207 = Multi-Status: refresh failed, armed alarm kept
    return response, 207


def run_refresh(components: Components) -> AlarmResult:
    """Run one refresh and wait at most REFRESH_TIMEOUT for it.

    Raises:
        concurrent.futures.TimeoutError: If the refresh did not finish in time
    """
    scheduler = components.scheduler
    try:
        result = scheduler.refresh().result(timeout=REFRESH_TIMEOUT)
    except FuturesTimeoutError:
        logger.error("Refresh did not finish within %d seconds", REFRESH_TIMEOUT)
        # Do not wait on the hung resolution
        scheduler.close(wait=False)
        raise

    scheduler.close()
    return result


@functions_framework.http
def sunrise_refresh(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function entry point.

    Triggered by Cloud Scheduler. Resolves tomorrow's sunrise for the
    selected location and re-arms the alarm if it is enabled.

    Args:
        request: Flask request object (not used, but required by framework)

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Starting sunrise refresh")

    try:
        components = build_components(_get_config())
        result = run_refresh(components)

        response, status_code = result_to_response(result)
        if result.success:
            logger.info("Refresh completed: alarm_enabled=%s", result.state.enabled)
        else:
            logger.error("Refresh failed: %s", result.message)

        return response, status_code

    except Exception as e:
        logger.exception("Unexpected error in sunrise refresh")
        return {
            "status": "error",
            "message": str(e),
        }, 500


@functions_framework.cloud_event
def sunrise_refresh_pubsub(cloud_event: Any) -> None:
    """Pub/Sub Cloud Function entry point.

    Alternative trigger for Cloud Scheduler via Pub/Sub.

    Args:
        cloud_event: CloudEvent from Pub/Sub
    """
    logger.info("Starting sunrise refresh (Pub/Sub trigger)")

    try:
        components = build_components(_get_config())
        result = run_refresh(components)

        if result.success:
            logger.info("Refresh completed: alarm_enabled=%s", result.state.enabled)
        else:
            logger.error("Refresh failed: %s", result.message)

    except Exception:
        logger.exception("Unexpected error in sunrise refresh")
        raise
