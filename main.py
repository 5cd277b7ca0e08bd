"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the sunrise package.
"""

from sunrise.main import (
    sunrise_refresh,
    sunrise_refresh_pubsub,
)

__all__ = [
    "sunrise_refresh",
    "sunrise_refresh_pubsub",
]
