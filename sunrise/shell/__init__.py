"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Sunrise API client (HTTP)
- Alarm dispatch webhook client (HTTP)
- Key-value stores (file, memory, Firestore)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from sunrise.shell.sunrise_client import SunriseClient
from sunrise.shell.webhook_dispatcher import LoggingDispatcher, WebhookDispatcher
from sunrise.shell.kv_store import JsonFileStore, MemoryStore
from sunrise.shell.config_loader import load_config, Config

__all__ = [
    "SunriseClient",
    "WebhookDispatcher",
    "LoggingDispatcher",
    "JsonFileStore",
    "MemoryStore",
    "load_config",
    "Config",
]
