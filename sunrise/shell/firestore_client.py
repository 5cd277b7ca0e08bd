"""Firestore Store - Imperative Shell.

This module persists locations, the timing preference and the alarm state
to Google Cloud Firestore, one document per key. It is the storage backend
used when the refresh entry point runs as a Cloud Function, where the local
filesystem does not survive between invocations.

All I/O is contained here.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from google.cloud import firestore


logger = logging.getLogger(__name__)


# Default collection holding one document per stored key
DEFAULT_COLLECTION = "sunrise_alarm"


@dataclass
class FirestoreConfig:
    """Configuration for Firestore store.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection name
    """
    project_id: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION


class FirestoreStore:
    """Key-value store over Firestore documents.

    This is part of the imperative shell - it handles database I/O.

    Document structure (document id = key):
    {
        "value": <JSON-compatible value>,
        "updated_at": <timestamp>
    }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore store.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _get_doc_ref(self, key: str) -> Any:
        return self.client.collection(self.config.collection).document(key)

    def get(self, key: str, default: Any = None) -> Any:
        """Read one key.

        This method performs database I/O.

        Returns:
            Stored value, or default if missing or unreadable
        """
        try:
            doc = self._get_doc_ref(key).get()

            if not doc.exists:
                logger.info("No stored %s document found", key)
                return default

            data = doc.to_dict() or {}
            return data.get("value", default)

        except Exception as e:
            logger.error("Failed to fetch %s from Firestore: %s", key, str(e))
            # Fall back to default - callers treat this as "nothing stored"
            return default

    def set(self, key: str, value: Any) -> bool:
        """Write one key.

        This method performs database I/O.

        Returns:
            True if save was successful
        """
        try:
            self._get_doc_ref(key).set({
                "value": value,
                "updated_at": datetime.now(timezone.utc),
            })

            logger.info("Saved %s to Firestore", key)
            return True

        except Exception as e:
            logger.error("Failed to save %s to Firestore: %s", key, str(e))
            return False
