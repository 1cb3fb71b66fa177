"""Reader for the Find My app's on-disk device and item snapshots.

The Find My app writes three cache files:

    Devices.data     the account's own devices
    Items.data       AirTags and other tracked accessories
    ItemGroups.data  names for item groups (enrichment only)

Each is either a JSON array or, on macOS 14.4 and later, an encrypted binary
property list that cannot be read without platform support.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from ..errors import MalformedCacheFile
from .items import item_to_device

logger = logging.getLogger(__name__)

BPLIST_SIGNATURE = b"bplist"

DEVICES = "Devices"
ITEMS = "Items"
ITEM_GROUPS = "ItemGroups"


def is_binary_plist(data: bytes) -> bool:
    """Check for the binary property list signature."""
    return data[: len(BPLIST_SIGNATURE)] == BPLIST_SIGNATURE


def parse_snapshot(kind: str, data: bytes) -> list[dict[str, Any]]:
    """Parse snapshot bytes that are known not to be a binary plist."""
    try:
        parsed = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedCacheFile(kind, "It is not in the correct format!") from e

    if not isinstance(parsed, list):
        raise MalformedCacheFile(kind, "It is not an array!")
    return parsed


class DeviceCacheReader:
    """Reads device snapshots fresh from disk on every call."""

    def __init__(self, findmy_dir: Path) -> None:
        self.findmy_dir = Path(findmy_dir)

    def snapshot_path(self, kind: str) -> Path:
        return self.findmy_dir / f"{kind}.data"

    def _read_bytes(self, kind: str) -> bytes | None:
        try:
            return self.snapshot_path(kind).read_bytes()
        except OSError:
            return None

    def read_snapshot(self, kind: str) -> list[dict[str, Any]] | None:
        """Read one snapshot file.

        Returns:
            The parsed records, or None if the file is missing, unreadable,
            or an encrypted binary plist.

        Raises:
            MalformedCacheFile: If the file is neither a binary plist nor a
                JSON array.
        """
        data = self._read_bytes(kind)
        if data is None:
            return None

        if is_binary_plist(data):
            logger.debug(
                "FindMy %s cache file is an encrypted binary plist. "
                "This is expected on macOS 14.4+; cache-file tracking is not available.",
                kind,
            )
            return None

        return parse_snapshot(kind, data)

    def read_item_groups(self) -> list[dict[str, Any]]:
        """Read item groups; missing or encrypted files read as empty."""
        data = self._read_bytes(ITEM_GROUPS)
        if data is None:
            return []

        if is_binary_plist(data):
            logger.debug(
                "FindMy %s cache file is an encrypted binary plist. "
                "Group names are not available on macOS 14.4+.",
                ITEM_GROUPS,
            )
            return []

        return parse_snapshot(ITEM_GROUPS, data)

    def _read_or_absent(self, kind: str) -> list[dict[str, Any]] | None:
        try:
            return self.read_snapshot(kind)
        except MalformedCacheFile as e:
            logger.warning("%s", e)
            return None

    def _attach_group_names(self, items: list[dict[str, Any]]) -> None:
        if not any(item.get("groupIdentifier") for item in items):
            return

        try:
            groups = self.read_item_groups()
        except Exception as e:
            logger.debug("An error occurred while reading FindMy ItemGroups cache file: %s", e)
            return

        names = {
            group.get("identifier"): group.get("name")
            for group in groups
            if isinstance(group, dict)
        }
        for item in items:
            name = names.get(item.get("groupIdentifier"))
            if item.get("groupIdentifier") and name:
                item["groupName"] = name

    async def get_devices(self) -> list[dict[str, Any]] | None:
        """Unified list of devices followed by normalised items.

        Returns None when neither snapshot could be read, which callers must
        keep distinct from an empty list.
        """
        devices, items = await asyncio.gather(
            asyncio.to_thread(self._read_or_absent, DEVICES),
            asyncio.to_thread(self._read_or_absent, ITEMS),
        )

        if devices is None and items is None:
            return None

        items = [item for item in items or [] if isinstance(item, dict)]
        self._attach_group_names(items)

        return [*(devices or []), *(item_to_device(item) for item in items)]
