"""Saved locations and the alarm timing preference - Pure functions.

Every function here takes a list of SavedLocation and returns a new list,
never mutating its input. Persistence and locking live in
sunrise.registry.LocationRegistry.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum
from typing import Any

from sunrise.core.errors import InvalidLocationError


# Fixed distance between sunrise and the alarm
ALARM_OFFSET = timedelta(minutes=10)


class AlarmTiming(Enum):
    """Which side of sunrise the alarm fires on."""

    BEFORE = "Before Sunrise"
    AFTER = "After Sunrise"

    @property
    def signed_offset(self) -> timedelta:
        """Offset to add to the sunrise instant."""
        return -ALARM_OFFSET if self is AlarmTiming.BEFORE else ALARM_OFFSET


DEFAULT_ALARM_TIMING = AlarmTiming.BEFORE


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class SavedLocation:
    """A user-saved place to compute sunrise for.

    Attributes:
        name: Display name (e.g., "Home")
        latitude: WGS84 latitude in decimal degrees
        longitude: WGS84 longitude in decimal degrees
        is_selected: Whether this is the location the alarm follows
        id: Opaque unique identifier
    """
    name: str
    latitude: float
    longitude: float
    is_selected: bool = False
    id: str = field(default_factory=_new_id)

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict[str, Any]:
        """Structured form used for persistence."""
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "is_selected": self.is_selected,
        }


def location_from_dict(data: dict[str, Any]) -> SavedLocation | None:
    """Parse a persisted location.

    Pure function: returns None for entries that cannot be decoded.
    """
    try:
        return SavedLocation(
            id=str(data["id"]),
            name=str(data["name"]),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            is_selected=bool(data.get("is_selected", False)),
        )
    except (KeyError, TypeError, ValueError):
        return None


def timing_from_value(value: Any) -> AlarmTiming | None:
    """Parse a persisted AlarmTiming value, None if unknown."""
    try:
        return AlarmTiming(value)
    except ValueError:
        return None


def validate_location(location: SavedLocation) -> None:
    """Check a location's coordinates are on the globe.

    Raises:
        InvalidLocationError: If latitude or longitude is out of range
    """
    if not -90 <= location.latitude <= 90:
        raise InvalidLocationError(
            f"Latitude {location.latitude} out of range [-90, 90]"
        )
    if not -180 <= location.longitude <= 180:
        raise InvalidLocationError(
            f"Longitude {location.longitude} out of range [-180, 180]"
        )


def add_location(
    locations: list[SavedLocation],
    location: SavedLocation,
) -> list[SavedLocation]:
    """Append a location.

    Pure function. No dedup by coordinate. An id already in the list is
    replaced with a fresh one, so ids stay unique. A location that arrives
    already selected takes the selection from every other entry.

    Args:
        locations: Current locations
        location: Location to append

    Returns:
        New list with the location appended last
    """
    if any(loc.id == location.id for loc in locations):
        location = replace(location, id=_new_id())

    result = [*locations, location]
    if location.is_selected:
        return select_location(result, location.id)
    return result


def delete_location(
    locations: list[SavedLocation],
    location_id: str,
) -> list[SavedLocation]:
    """Remove the location with the given id.

    Pure function. Missing ids are a no-op. Deleting the selected location
    leaves nothing selected.
    """
    return [loc for loc in locations if loc.id != location_id]


def select_location(
    locations: list[SavedLocation],
    location_id: str,
) -> list[SavedLocation]:
    """Mark one location selected and clear all others.

    Pure function. If no location has the id, the input is returned as-is.
    """
    if not any(loc.id == location_id for loc in locations):
        return list(locations)

    return [
        replace(loc, is_selected=(loc.id == location_id))
        for loc in locations
    ]


def rename_location(
    locations: list[SavedLocation],
    location_id: str,
    name: str,
) -> list[SavedLocation]:
    """Change a location's display name. Missing ids are a no-op."""
    return [
        replace(loc, name=name) if loc.id == location_id else loc
        for loc in locations
    ]


def get_selected(locations: list[SavedLocation]) -> SavedLocation | None:
    """Return the selected location, or None."""
    return next((loc for loc in locations if loc.is_selected), None)


def count_selected(locations: list[SavedLocation]) -> int:
    """Number of locations flagged as selected."""
    return sum(1 for loc in locations if loc.is_selected)


def normalize_selection(locations: list[SavedLocation]) -> list[SavedLocation]:
    """Repair persisted data carrying more than one selection.

    Pure function. The first selected entry keeps the selection.
    """
    if count_selected(locations) <= 1:
        return list(locations)

    first = get_selected(locations)
    return select_location(locations, first.id)


def drop_duplicate_ids(locations: list[SavedLocation]) -> list[SavedLocation]:
    """Keep only the first entry for each id.

    Pure function. Used to repair persisted data before selection is
    normalized.
    """
    seen: set[str] = set()
    result = []
    for loc in locations:
        if loc.id in seen:
            continue
        seen.add(loc.id)
        result.append(loc)
    return result
