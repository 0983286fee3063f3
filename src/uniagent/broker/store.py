"""Pending transaction store.

Holds unsigned transactions server-side, keyed by root hash, until the owner
signs them or they expire. The client only ever sees the root hash.

Guarantees:
- At most one entry per root hash (last write wins on reuse)
- take() is atomic: of any number of concurrent callers for the same root
  hash, exactly one receives the entry
- Entries older than the TTL are never returned, whether or not the
  background sweep has removed them yet
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from uniagent.models import ExecutionContext, UnsignedTransaction

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass(frozen=True)
class PendingEntry:
    """An unsigned transaction awaiting its signature."""

    root_hash: str
    transaction: UnsignedTransaction
    context: ExecutionContext
    created_at: float

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        """Check if the entry has outlived the TTL at time now."""
        return now - self.created_at > ttl_seconds


class PendingTransactionStore:
    """TTL-bounded, claim-once mapping of root hash to pending entry.

    Expired entries are dropped lazily by take() and eagerly by sweep(),
    which the background sweeper started with start() runs periodically.

    Example:
        store = PendingTransactionStore(ttl_seconds=300)
        await store.put(store.new_entry(transaction))
        entry = await store.take(transaction.root_hash)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_interval: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the store.

        Args:
            ttl_seconds: Lifetime of an entry, measured from creation
            sweep_interval: Seconds between background sweeps
            clock: Monotonic time source (injectable for tests)
        """
        self.ttl_seconds = ttl_seconds
        self.sweep_interval = sweep_interval
        self.clock = clock
        self._entries: dict[str, PendingEntry] = {}
        self._lock = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def new_entry(self, transaction: UnsignedTransaction) -> PendingEntry:
        """Wrap a freshly built transaction in an entry stamped with now."""
        return PendingEntry(
            root_hash=transaction.root_hash,
            transaction=transaction,
            context=transaction.context,
            created_at=self.clock(),
        )

    async def put(self, entry: PendingEntry) -> None:
        """Store an entry under its root hash, replacing any previous one."""
        async with self._lock:
            if entry.root_hash in self._entries:
                logger.warning(f"Root hash {entry.root_hash[:10]}... reused, replacing pending entry")
            self._entries[entry.root_hash] = entry
            size = len(self._entries)
        logger.debug(f"Pending transaction stored: {entry.root_hash[:10]}... ({size} pending)")

    async def take(self, root_hash: str) -> Optional[PendingEntry]:
        """Atomically remove and return the entry for root_hash.

        Returns None when the hash is unknown, already taken, or expired;
        callers cannot tell these cases apart.
        """
        async with self._lock:
            entry = self._entries.pop(root_hash, None)
        if entry is None:
            return None
        if entry.is_expired(self.clock(), self.ttl_seconds):
            logger.info(f"Pending transaction {root_hash[:10]}... expired before submit")
            return None
        logger.debug(f"Pending transaction claimed: {root_hash[:10]}...")
        return entry

    async def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        async with self._lock:
            now = self.clock()
            expired = [
                key for key, entry in self._entries.items()
                if entry.is_expired(now, self.ttl_seconds)
            ]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.info(f"Swept {len(expired)} expired pending transaction(s)")
        return len(expired)

    async def _run_sweeper(self) -> None:
        """Sweep on a fixed interval until cancelled."""
        while True:
            await asyncio.sleep(self.sweep_interval)
            await self.sweep()

    def start(self) -> None:
        """Start the background sweeper on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._run_sweeper())
            logger.info(
                f"Pending transaction sweeper started "
                f"(ttl: {self.ttl_seconds}s, interval: {self.sweep_interval}s)"
            )

    async def stop(self) -> None:
        """Stop the background sweeper."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            logger.info("Pending transaction sweeper stopped")
        self._sweeper = None

    async def clear(self) -> None:
        """Drop every pending entry."""
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, root_hash: str) -> bool:
        return root_hash in self._entries
