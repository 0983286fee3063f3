"""Tests for the pending transaction store."""

import asyncio

import pytest

from conftest import FakeClock, make_transaction
from uniagent.broker.store import PendingTransactionStore


def _hash(n: int) -> str:
    return "0x" + f"{n:064x}"


class TestPutTake:
    """Tests for storing and claiming entries."""

    async def test_round_trip(self, store):
        """Test that take returns exactly what was put."""
        transaction = make_transaction()
        entry = store.new_entry(transaction)
        await store.put(entry)

        taken = await store.take(transaction.root_hash)

        assert taken is entry
        assert taken.transaction is transaction
        assert taken.context is transaction.context

    async def test_take_is_once(self, store):
        """Test that a second take for the same hash gets nothing."""
        transaction = make_transaction()
        await store.put(store.new_entry(transaction))

        assert await store.take(transaction.root_hash) is not None
        assert await store.take(transaction.root_hash) is None
        assert len(store) == 0

    async def test_unknown_hash(self, store):
        """Test that an unknown hash gets nothing."""
        assert await store.take(_hash(404)) is None

    async def test_put_replaces(self, store):
        """Test that reusing a root hash keeps only the latest entry."""
        first = make_transaction(owner_address="0x" + "11" * 20)
        second = make_transaction(owner_address="0x" + "22" * 20)
        await store.put(store.new_entry(first))
        await store.put(store.new_entry(second))

        taken = await store.take(first.root_hash)

        assert taken.transaction is second
        assert len(store) == 0

    async def test_concurrent_take(self, store):
        """Test that exactly one of many concurrent takes wins."""
        transaction = make_transaction()
        await store.put(store.new_entry(transaction))

        results = await asyncio.gather(*(store.take(transaction.root_hash) for _ in range(20)))

        assert sum(1 for r in results if r is not None) == 1


class TestExpiry:
    """Tests for TTL handling."""

    async def test_retrievable_just_before_ttl(self, store, clock):
        """Test that an entry is still claimable right before the TTL."""
        transaction = make_transaction()
        await store.put(store.new_entry(transaction))

        clock.advance(store.ttl_seconds - 0.001)

        assert await store.take(transaction.root_hash) is not None

    async def test_retrievable_at_ttl(self, store, clock):
        """Test that an entry aged exactly the TTL is not yet expired."""
        transaction = make_transaction()
        await store.put(store.new_entry(transaction))

        clock.advance(store.ttl_seconds)

        assert await store.take(transaction.root_hash) is not None

    async def test_gone_just_after_ttl(self, store, clock):
        """Test that an entry past the TTL is never returned, even unswept."""
        transaction = make_transaction()
        await store.put(store.new_entry(transaction))

        clock.advance(store.ttl_seconds + 0.001)

        assert await store.take(transaction.root_hash) is None
        assert len(store) == 0

    async def test_ttl_counts_from_creation(self, clock):
        """Test that the TTL is measured from when the entry was created."""
        store = PendingTransactionStore(ttl_seconds=10, clock=clock)
        transaction = make_transaction()
        entry = store.new_entry(transaction)

        clock.advance(8)
        await store.put(entry)
        clock.advance(3)

        assert await store.take(transaction.root_hash) is None

    async def test_sweep_removes_only_expired(self, store, clock):
        """Test that sweep drops expired entries and keeps fresh ones."""
        old = make_transaction(root_hash=_hash(1))
        await store.put(store.new_entry(old))
        clock.advance(200)
        fresh = make_transaction(root_hash=_hash(2))
        await store.put(store.new_entry(fresh))
        clock.advance(150)

        removed = await store.sweep()

        assert removed == 1
        assert old.root_hash not in store
        assert fresh.root_hash in store

    async def test_clear(self, store):
        """Test dropping every entry."""
        await store.put(store.new_entry(make_transaction(root_hash=_hash(1))))
        await store.put(store.new_entry(make_transaction(root_hash=_hash(2))))

        await store.clear()

        assert len(store) == 0


class TestSweeper:
    """Tests for the background sweeper task."""

    async def test_sweeper_removes_expired(self):
        """Test that the background task sweeps on its interval."""
        clock = FakeClock()
        store = PendingTransactionStore(ttl_seconds=1, sweep_interval=0.01, clock=clock)
        await store.put(store.new_entry(make_transaction()))
        clock.advance(5)

        store.start()
        try:
            for _ in range(100):
                if len(store) == 0:
                    break
                await asyncio.sleep(0.01)
        finally:
            await store.stop()

        assert len(store) == 0

    async def test_start_is_idempotent(self, store):
        """Test that starting twice keeps a single task."""
        store.start()
        task = store._sweeper
        store.start()

        assert store._sweeper is task
        await store.stop()
        assert store._sweeper is None

    async def test_stop_without_start(self, store):
        """Test that stopping an idle store is harmless."""
        await store.stop()
