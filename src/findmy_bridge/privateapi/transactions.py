"""Request/response matching for helper transactions."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from ..errors import HelperError, TransactionTimeout
from ..logging import get_logger

logger = logging.getLogger(__name__)


@dataclass
class Transaction:
    """A request waiting for its helper response."""

    transaction_id: str
    action: str
    future: asyncio.Future = field(repr=False)


class TransactionManager:
    """Tracks in-flight transactions and resolves each exactly once.

    Responses that arrive after a transaction timed out, or that repeat an
    already-resolved transaction, are dropped.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout
        self._pending: dict[str, Transaction] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def create(self, action: str) -> Transaction:
        """Register a new transaction for `action`."""
        loop = asyncio.get_running_loop()
        transaction = Transaction(
            transaction_id=str(uuid.uuid4()),
            action=action,
            future=loop.create_future(),
        )
        self._pending[transaction.transaction_id] = transaction
        return transaction

    def discard(self, transaction_id: str) -> None:
        self._pending.pop(transaction_id, None)

    async def wait(self, transaction: Transaction, timeout: float | None = None) -> dict[str, Any]:
        """Wait for the response to `transaction`.

        Raises:
            TransactionTimeout: If no response arrives in time.
            HelperError: If the helper answered with an error.
        """
        timeout = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(asyncio.shield(transaction.future), timeout=timeout)
        except asyncio.TimeoutError:
            get_logger().log_transaction_timeout(
                transaction.action, transaction.transaction_id, timeout
            )
            raise TransactionTimeout(
                f"Timed out waiting for {transaction.action} response ({timeout}s)"
            ) from None
        finally:
            self.discard(transaction.transaction_id)

    def resolve(self, message: dict[str, Any]) -> bool:
        """Settle the transaction named by `message["transactionId"]`.

        Returns:
            True if a waiting transaction was settled, False if the message
            was late, duplicated, or unknown.
        """
        transaction_id = message.get("transactionId")
        transaction = self._pending.pop(str(transaction_id), None) if transaction_id else None
        if transaction is None or transaction.future.done():
            logger.debug("Dropping response for unknown transaction %s", transaction_id)
            return False

        error = message.get("error")
        if error:
            transaction.future.set_exception(HelperError(f"{transaction.action}: {error}"))
        else:
            transaction.future.set_result(message)
        return True

    def reject_all(self, exc: Exception) -> int:
        """Fail every pending transaction, e.g. when the helper disconnects."""
        count = 0
        for transaction in list(self._pending.values()):
            if not transaction.future.done():
                transaction.future.set_exception(exc)
                count += 1
        self._pending.clear()
        return count
