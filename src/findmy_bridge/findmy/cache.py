"""In-memory cache of friend locations with a source-aware merge rule."""

import logging
import threading

from .models import LocationRecord

logger = logging.getLogger(__name__)


def _is_zero(coordinates: tuple[float, float]) -> bool:
    return coordinates[0] == 0 and coordinates[1] == 0


def _is_nonzero(coordinates: tuple[float, float]) -> bool:
    return coordinates[0] != 0 and coordinates[1] != 0


def should_replace(current: LocationRecord, incoming: LocationRecord) -> bool:
    """Decide whether `incoming` may overwrite `current` for the same handle.

    Rules, in order:
      1. A legacy fix never replaces a live or shallow one, whatever its age.
      2. Between two legacy fixes, a (0, 0) fix never replaces a real one.
      3. An exact duplicate (status, coordinates, timestamp) is a no-op.
      4. A strictly older timestamp is rejected.
    Anything else is accepted, including equal timestamps that differ in
    status or coordinates.
    """
    if incoming.is_legacy and not current.is_legacy:
        return False

    current_coords = current.effective_coordinates
    incoming_coords = incoming.effective_coordinates
    current_ts = current.effective_last_updated
    incoming_ts = incoming.effective_last_updated

    if (
        current.is_legacy
        and incoming.is_legacy
        and _is_nonzero(current_coords)
        and _is_zero(incoming_coords)
    ):
        return False

    if (
        current.status == incoming.status
        and current_coords == incoming_coords
        and current_ts == incoming_ts
    ):
        return False

    if incoming_ts < current_ts:
        return False

    return True


class FriendLocationCache:
    """Holds the single authoritative location per friend handle.

    All mutations go through one lock so the read-compare-write of the merge
    rule is atomic. Records are immutable and swapped whole, so readers see
    either the old or the new record, never a mix.
    """

    def __init__(self) -> None:
        self._records: dict[str, LocationRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: LocationRecord) -> bool:
        """Try to store a record.

        Returns:
            True if the cache changed (insert or overwrite), False if the
            record was rejected or was a duplicate.
        """
        if not record.handle:
            return False

        with self._lock:
            current = self._records.get(record.handle)
            if current is not None and not should_replace(current, record):
                return False
            self._records[record.handle] = record

        logger.debug("Cached location for %s (status=%s)", record.handle, record.status)
        return True

    def add_all(self, records: list[LocationRecord]) -> list[LocationRecord]:
        """Add records in order and return the ones that changed the cache."""
        return [record for record in records if self.add(record)]

    def get(self, handle: str) -> LocationRecord | None:
        with self._lock:
            return self._records.get(handle)

    def get_all(self) -> list[LocationRecord]:
        """Snapshot of every cached record, in insertion order."""
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
