"""Key-Value Stores - Imperative Shell.

Locations, the alarm timing preference and the alarm state are each kept
under their own key. Values are JSON-compatible structures.

All I/O is contained here; what gets stored is decided by the registry
and the scheduler.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


class MemoryStore:
    """Process-local store. Nothing survives a restart."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        with self._lock:
            self._data[key] = value
        return True


class JsonFileStore:
    """Store backed by a single JSON file.

    This is part of the imperative shell - it handles file I/O.

    File structure:
    {
        "SavedLocations": [...],
        "AlarmTiming": "Before Sunrise",
        "AlarmState": {...}
    }
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize file store.

        Args:
            path: JSON file location (created on first write)
        """
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to read %s: %s", self.path, str(e))
            # Fall back to defaults - the next write replaces the file
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed store file %s", self.path)
            return {}

        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Read one key.

        This method performs file I/O.
        """
        with self._lock:
            return self._read().get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """Write one key, keeping the others.

        This method performs file I/O. The file is replaced atomically.

        Returns:
            True if the write succeeded
        """
        with self._lock:
            data = self._read()
            data[key] = value

            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
                with open(tmp_path, "w") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_path, self.path)
            except OSError as e:
                logger.error("Failed to write %s: %s", self.path, str(e))
                return False

        logger.debug("Saved %s to %s", key, self.path)
        return True
