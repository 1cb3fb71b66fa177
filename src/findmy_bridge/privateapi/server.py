"""TCP server that the injected helper process connects to.

The helper dials out to the bridge, so the bridge listens. Both directions
carry JSON objects, one per line. Requests are written as
``{"action", "data", "transactionId"}``; the helper answers with a message
carrying the same ``transactionId``, and pushes unsolicited messages tagged
with an ``event`` name (``ping``, ``new-findmy-location``, ...).
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..errors import HelperNotConnected
from ..logging import get_logger
from .transactions import TransactionManager

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[None] | None]

# Location lists can be large; the default 64 KiB line limit is too small.
STREAM_LIMIT = 16 * 1024 * 1024


class HelperServer:
    """Accepts the helper connection and routes its traffic."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 45670,
        transactions: TransactionManager | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.transactions = transactions or TransactionManager()
        self.helper_process: str | None = None
        self._server: asyncio.AbstractServer | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._handlers: dict[str, list[EventHandler]] = {}
        self._write_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    def on_event(self, event: str, handler: EventHandler) -> None:
        """Register a handler for pushed helper events."""
        self._handlers.setdefault(event, []).append(handler)

    async def start(self) -> None:
        self._server = await asyncio.start_server(
            self._handle_connection, self.host, self.port, limit=STREAM_LIMIT
        )
        logger.info("Waiting for helper on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        self.transactions.reject_all(HelperNotConnected("Bridge is shutting down"))

    async def send_request(self, action: str, data: Any = None) -> dict[str, Any]:
        """Send an action to the helper and wait for its response.

        Raises:
            HelperNotConnected: If no helper is connected.
            TransactionTimeout: If the helper does not answer in time.
            HelperError: If the helper answers with an error.
        """
        if not self.is_connected:
            raise HelperNotConnected("Private API helper is not connected")

        transaction = self.transactions.create(action)
        payload = {"action": action, "data": data, "transactionId": transaction.transaction_id}

        try:
            await self._write(payload)
        except (ConnectionError, OSError) as e:
            self.transactions.discard(transaction.transaction_id)
            raise HelperNotConnected(f"Failed to send {action} to helper: {e}") from e

        return await self.transactions.wait(transaction)

    async def _write(self, payload: dict[str, Any]) -> None:
        writer = self._writer
        if writer is None:
            raise ConnectionError("helper connection closed")
        async with self._write_lock:
            writer.write((json.dumps(payload) + "\n").encode("utf-8"))
            await writer.drain()

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        # Only the most recent helper connection is used
        if self._writer is not None and self._writer is not writer:
            self._writer.close()
        self._writer = writer

        peer = writer.get_extra_info("peername")
        get_logger().log("helper_connected", peer=str(peer))

        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                await self.handle_line(line)
        except (ConnectionError, asyncio.LimitOverrunError, ValueError) as e:
            logger.warning("Helper connection error: %s", e)
        finally:
            if self._writer is writer:
                self._writer = None
                self.helper_process = None
                self.transactions.reject_all(HelperNotConnected("Helper disconnected"))
            writer.close()
            get_logger().log("helper_disconnected", peer=str(peer))

    async def handle_line(self, line: bytes | str) -> None:
        """Parse one wire line and dispatch it."""
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        line = line.strip()
        if not line:
            return

        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON from helper: %s", e)
            return

        if isinstance(message, dict):
            await self.handle_message(message)

    async def handle_message(self, message: dict[str, Any]) -> None:
        """Route a decoded helper message."""
        if message.get("transactionId"):
            self.transactions.resolve(message)
            return

        event = message.get("event")
        if event == "ping":
            self.helper_process = message.get("process")
            logger.info("Helper identified itself (process: %s)", self.helper_process)

        for handler in self._handlers.get(event or "", []):
            try:
                result = handler(message)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("Handler for helper event %s failed", event)
