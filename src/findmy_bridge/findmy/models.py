"""Data models for Find My friend locations."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

NO_FIX: tuple[float, float] = (0.0, 0.0)


class LocationStatus(str, Enum):
    """Source tier of a location fix. LEGACY is the lowest-trust tier."""

    LEGACY = "legacy"
    LIVE = "live"
    SHALLOW = "shallow"


_KNOWN_FIELDS = (
    "handle",
    "coordinates",
    "status",
    "last_updated",
    "is_locating_in_progress",
    "long_address",
    "short_address",
    "title",
    "subtitle",
)


@dataclass(frozen=True)
class LocationRecord:
    """Last-known location of one friend.

    Attributes:
        handle: Account or contact address identifying the friend.
        coordinates: (latitude, longitude); (0, 0) means no precise fix.
        status: One of the LocationStatus values, kept as the raw string.
        last_updated: Epoch milliseconds of the fix.
        is_locating_in_progress: 0/1 flag reported by the helper.
        long_address: Full formatted address.
        short_address: Short formatted address.
        title: Display title.
        subtitle: Display subtitle.
        extra: Keys the helper sent that are not modelled above.
    """

    handle: str | None
    coordinates: tuple[float, float] | None = None
    status: str | None = None
    last_updated: int | None = None
    is_locating_in_progress: int = 0
    long_address: str | None = None
    short_address: str | None = None
    title: str | None = None
    subtitle: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_legacy(self) -> bool:
        return self.status == LocationStatus.LEGACY

    @property
    def effective_coordinates(self) -> tuple[float, float]:
        """Coordinates used for comparisons; missing reads as (0, 0)."""
        return self.coordinates if self.coordinates is not None else NO_FIX

    @property
    def effective_last_updated(self) -> int:
        """Timestamp used for comparisons; missing reads as 0."""
        return self.last_updated if self.last_updated is not None else 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocationRecord":
        """Build a record from a helper payload."""
        coordinates = data.get("coordinates")
        if coordinates is not None:
            lat, lon = coordinates
            coordinates = (float(lat), float(lon))

        last_updated = data.get("last_updated")
        if last_updated is not None:
            last_updated = int(last_updated)

        return cls(
            handle=data.get("handle"),
            coordinates=coordinates,
            status=data.get("status"),
            last_updated=last_updated,
            is_locating_in_progress=int(data.get("is_locating_in_progress") or 0),
            long_address=data.get("long_address"),
            short_address=data.get("short_address"),
            title=data.get("title"),
            subtitle=data.get("subtitle"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape served over HTTP."""
        data: dict[str, Any] = dict(self.extra)
        data.update(
            handle=self.handle,
            coordinates=list(self.coordinates) if self.coordinates is not None else None,
            long_address=self.long_address,
            short_address=self.short_address,
            title=self.title,
            subtitle=self.subtitle,
            last_updated=self.last_updated,
            is_locating_in_progress=self.is_locating_in_progress,
            status=self.status,
        )
        return data


def parse_locations(raw: Any) -> list[LocationRecord]:
    """Convert a helper location list into records, skipping bad entries."""
    if not isinstance(raw, list):
        return []

    records = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            records.append(LocationRecord.from_dict(item))
        except (TypeError, ValueError):
            logger.warning("Skipping malformed location entry for %r", item.get("handle"))
    return records
