"""Abstract interface to the cross-chain execution engine.

The engine builds, prices and executes operations. The broker only ever
sees what this interface returns; route finding, gas abstraction and
settlement all happen on the other side.
"""

from abc import ABC, abstractmethod

from uniagent.models import (
    AccountBalance,
    ExecutionContext,
    Intent,
    SubmissionResult,
    TransactionRecord,
    UnsignedTransaction,
)


class ExecutionEngine(ABC):
    """Abstract base class for execution engines.

    Build methods raise EngineError when the engine refuses the intent;
    send raises EngineError when the signed transaction is rejected.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name identifier."""
        pass

    @abstractmethod
    async def build_buy(self, intent: Intent) -> UnsignedTransaction:
        """Build a transaction acquiring intent.token for a USD amount."""
        pass

    @abstractmethod
    async def build_sell(self, intent: Intent) -> UnsignedTransaction:
        """Build a transaction selling an amount of intent.token."""
        pass

    @abstractmethod
    async def build_convert(self, intent: Intent) -> UnsignedTransaction:
        """Build a transaction converting into the primary asset intent.asset."""
        pass

    @abstractmethod
    async def build_transfer(self, intent: Intent) -> UnsignedTransaction:
        """Build a transaction moving intent.token to intent.receiver."""
        pass

    @abstractmethod
    async def send(
        self,
        transaction: UnsignedTransaction,
        signature: str,
        context: ExecutionContext,
    ) -> SubmissionResult:
        """
        Submit a signed transaction for execution.

        Args:
            transaction: The transaction exactly as built
            signature: Owner's signature over transaction.root_hash
            context: Context captured when the transaction was built

        Returns:
            SubmissionResult with the engine's transaction ID
        """
        pass

    @abstractmethod
    async def get_account(self, owner_address: str) -> AccountBalance:
        """Get the unified balance for an owner."""
        pass

    @abstractmethod
    async def get_transactions(
        self,
        owner_address: str,
        page: int = 1,
        page_size: int = 10,
    ) -> list[TransactionRecord]:
        """Get an owner's transaction history, newest first."""
        pass

    async def health_check(self) -> bool:
        """Check if the engine is reachable."""
        return True

    async def close(self) -> None:
        """Release network resources."""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
