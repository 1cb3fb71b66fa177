"""Coordinates friend and device refreshes."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from ..errors import PrivateApiUnavailable
from ..logging import get_logger
from ..privateapi import PrivateApiFindMy
from .app import AppController
from .cache import FriendLocationCache
from .devices import DeviceCacheReader
from .models import LocationRecord, parse_locations

logger = logging.getLogger(__name__)

FriendsListener = Callable[[list[LocationRecord]], Awaitable[None] | None]


class RefreshOrchestrator:
    """Pulls fresh locations into the cache and nudges the Find My app.

    At most one app refresh cycle runs at a time; callers that arrive while
    one is running share it.
    """

    def __init__(
        self,
        cache: FriendLocationCache,
        reader: DeviceCacheReader,
        app: AppController,
        findmy_api: PrivateApiFindMy | None = None,
        private_api_enabled: bool = False,
        private_api_supported: bool = False,
    ) -> None:
        self.cache = cache
        self.reader = reader
        self.app = app
        self.findmy_api = findmy_api
        self.private_api_enabled = private_api_enabled
        self.private_api_supported = private_api_supported
        self._cycle_task: asyncio.Task | None = None
        self._listeners: list[FriendsListener] = []

    @property
    def uses_private_api(self) -> bool:
        return self.private_api_enabled and self.private_api_supported

    def on_friends_changed(self, listener: FriendsListener) -> None:
        """Register a callback that receives the records each merge changed."""
        self._listeners.append(listener)

    async def _publish(self, changed: list[LocationRecord], *, source: str) -> None:
        if not changed:
            return

        get_logger().log_friends_updated(
            [record.handle for record in changed if record.handle], source=source
        )
        for listener in self._listeners:
            try:
                result = listener(list(changed))
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("Friends listener failed")

    def _start_cycle(self) -> asyncio.Task:
        if self._cycle_task is None or self._cycle_task.done():
            self._cycle_task = asyncio.create_task(self.app.refresh_cycle())
            self._cycle_task.add_done_callback(self._on_cycle_done)
        return self._cycle_task

    @staticmethod
    def _on_cycle_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Find My app refresh cycle failed: %s", exc)

    def nudge_app(self) -> asyncio.Task:
        """Start an app refresh cycle in the background without waiting."""
        return self._start_cycle()

    async def refresh_friends(self, open_app: bool = True) -> list[LocationRecord]:
        """Refresh friend locations.

        When the private API is usable, fresh locations are requested from
        the helper and merged into the cache; helper errors propagate. The
        app is nudged in the background either way, since live updates arrive
        later as push events.

        Returns:
            The cache snapshot after the merge.
        """
        start_time = time.monotonic()
        try:
            if self.uses_private_api:
                await self._pull_friend_locations()
        finally:
            if open_app:
                self.nudge_app()

        friends = self.cache.get_all()
        get_logger().log_refresh(
            "friends", len(friends), (time.monotonic() - start_time) * 1000
        )
        return friends

    async def _pull_friend_locations(self) -> None:
        if self.findmy_api is None or not self.findmy_api.sender.is_connected:
            raise PrivateApiUnavailable("Private API helper is not connected")

        result = await self.findmy_api.refresh_friends()
        records = parse_locations(result.get("data", {}).get("locations"))
        changed = self.cache.add_all(records)
        await self._publish(changed, source="refresh")

    async def refresh_devices(self) -> list[dict[str, Any]] | None:
        """Run the app refresh cycle to completion, then re-read device snapshots."""
        start_time = time.monotonic()
        await asyncio.shield(self._start_cycle())
        devices = await self.reader.get_devices()
        get_logger().log_refresh(
            "devices",
            len(devices) if devices is not None else None,
            (time.monotonic() - start_time) * 1000,
        )
        return devices

    async def handle_location_event(self, message: dict[str, Any]) -> list[LocationRecord]:
        """Merge a pushed ``new-findmy-location`` event into the cache.

        Returns:
            The records that changed the cache.
        """
        changed = self.cache.add_all(parse_locations(message.get("data")))
        await self._publish(changed, source="event")
        return changed
