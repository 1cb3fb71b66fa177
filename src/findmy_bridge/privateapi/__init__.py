"""Transport and actions for the injected helper process."""

from .contacts import PrivateApiContacts
from .findmy import PrivateApiFindMy, RequestSender
from .server import HelperServer
from .transactions import Transaction, TransactionManager

__all__ = [
    "HelperServer",
    "PrivateApiContacts",
    "PrivateApiFindMy",
    "RequestSender",
    "Transaction",
    "TransactionManager",
]
