"""Location Registry - Saved locations and the alarm timing preference.

Wraps the pure list transforms from sunrise.core.location with a lock and
a key-value store. Every mutation replaces the whole list in one step and
persists it, so at most one location is ever selected.
"""

import logging
import threading
from typing import Any

from sunrise.core.location import (
    DEFAULT_ALARM_TIMING,
    AlarmTiming,
    SavedLocation,
    add_location,
    count_selected,
    delete_location,
    drop_duplicate_ids,
    get_selected,
    location_from_dict,
    normalize_selection,
    rename_location,
    select_location,
    timing_from_value,
    validate_location,
)


logger = logging.getLogger(__name__)


LOCATIONS_KEY = "SavedLocations"
TIMING_KEY = "AlarmTiming"


class LocationRegistry:
    """Owns the saved locations and which one is selected.

    Operations referencing a missing id are no-ops, not errors.
    """

    def __init__(self, store: Any) -> None:
        """Initialize registry and load persisted data.

        Args:
            store: Key-value store with get(key, default) and set(key, value)
        """
        self.store = store
        self._lock = threading.Lock()
        self._locations = self._load_locations()
        self._timing = self._load_timing()

    def _load_locations(self) -> list[SavedLocation]:
        raw = self.store.get(LOCATIONS_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed %s entry", LOCATIONS_KEY)
            return []

        locations = []
        for item in raw:
            location = location_from_dict(item) if isinstance(item, dict) else None
            if location is None:
                logger.warning("Skipping undecodable saved location: %r", item)
                continue
            locations.append(location)

        unique = drop_duplicate_ids(locations)
        if len(unique) != len(locations):
            logger.warning(
                "Dropped %d saved locations with duplicate ids",
                len(locations) - len(unique),
            )
            locations = unique

        if count_selected(locations) > 1:
            logger.warning("Stored locations had several selected, keeping the first")
            locations = normalize_selection(locations)

        logger.info("Loaded %d saved locations", len(locations))
        return locations

    def _load_timing(self) -> AlarmTiming:
        raw = self.store.get(TIMING_KEY)
        if raw is None:
            return DEFAULT_ALARM_TIMING

        timing = timing_from_value(raw)
        if timing is None:
            logger.warning("Unknown alarm timing %r, using default", raw)
            return DEFAULT_ALARM_TIMING
        return timing

    def _commit(self, locations: list[SavedLocation]) -> None:
        """Swap in a new list and persist it. Caller holds the lock."""
        self._locations = locations
        if not self.store.set(LOCATIONS_KEY, [loc.to_dict() for loc in locations]):
            logger.error("Failed to persist saved locations")

    def add(self, location: SavedLocation) -> SavedLocation:
        """Append a location and return the stored record.

        Raises:
            InvalidLocationError: If the coordinates are out of range
        """
        validate_location(location)
        with self._lock:
            self._commit(add_location(self._locations, location))
            # add_location appends last, possibly under a fresh id
            stored = self._locations[-1]
        logger.info("Added location %s (%s)", stored.name, stored.id)
        return stored

    def delete(self, location_id: str) -> None:
        """Remove a location. Deleting the selected one leaves none selected."""
        with self._lock:
            if not any(loc.id == location_id for loc in self._locations):
                return
            self._commit(delete_location(self._locations, location_id))
        logger.info("Deleted location %s", location_id)

    def select(self, location_id: str) -> None:
        """Select a location and clear every other selection.

        Silently ignored if the id is unknown.
        """
        with self._lock:
            if not any(loc.id == location_id for loc in self._locations):
                logger.warning("Cannot select unknown location %s", location_id)
                return
            self._commit(select_location(self._locations, location_id))
        logger.info("Selected location %s", location_id)

    def rename(self, location_id: str, name: str) -> None:
        """Change a location's display name. Ignored if the id is unknown."""
        with self._lock:
            if not any(loc.id == location_id for loc in self._locations):
                return
            self._commit(rename_location(self._locations, location_id, name))

    def get(self, location_id: str) -> SavedLocation | None:
        with self._lock:
            return next(
                (loc for loc in self._locations if loc.id == location_id),
                None,
            )

    def locations(self) -> list[SavedLocation]:
        with self._lock:
            return list(self._locations)

    def selected(self) -> SavedLocation | None:
        """Return the selected location, or None."""
        with self._lock:
            return get_selected(self._locations)

    def alarm_timing(self) -> AlarmTiming:
        """Current before/after preference."""
        with self._lock:
            return self._timing

    def set_alarm_timing(self, timing: AlarmTiming) -> None:
        """Update and persist the before/after preference."""
        with self._lock:
            self._timing = timing
            if not self.store.set(TIMING_KEY, timing.value):
                logger.error("Failed to persist alarm timing")
        logger.info("Alarm timing set to %s", timing.value)
