"""Two-phase transaction broker: build, hold, sign, submit."""

from uniagent.broker.builder import TransactionBuilder
from uniagent.broker.coordinator import SubmitCoordinator
from uniagent.broker.service import SIGN_MESSAGE, Broker, build_preview
from uniagent.broker.store import PendingEntry, PendingTransactionStore

__all__ = [
    "Broker",
    "PendingEntry",
    "PendingTransactionStore",
    "SIGN_MESSAGE",
    "SubmitCoordinator",
    "TransactionBuilder",
    "build_preview",
]
