import asyncio
from datetime import timedelta
from unittest.mock import patch

import aiosqlite
import pytest

from monday_poll.db_pool import ConnectionPool
from monday_poll.errors import StorageFailure
from monday_poll.store import RecordStore


@pytest.mark.asyncio
async def test_initialize_is_idempotent(store):
    await store.initialize()
    await store.initialize()
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_insert_and_count(store, now):
    await store.insert(now, True)
    await store.insert(now, True)
    await store.insert(now, False)
    assert await store.count() == 3


@pytest.mark.asyncio
async def test_delete_before_is_strict(store, now):
    cutoff = now - timedelta(hours=5)
    await store.insert(cutoff - timedelta(microseconds=1), True)
    await store.insert(cutoff, True)
    await store.insert(now, False)

    deleted = await store.delete_before(cutoff)

    assert deleted == 1
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_grouped_counts_bitmask(store, now):
    await store.insert(now, True)                        # inside both
    await store.insert(now - timedelta(hours=2), True)   # wide only
    await store.insert(now - timedelta(hours=2), False)  # wide only
    await store.insert(now - timedelta(hours=9), False)  # outside both

    buckets = await store.grouped_counts([now - timedelta(hours=3), now - timedelta(hours=1)])

    assert sorted(buckets) == [(False, 0b01, 1), (True, 0b01, 1), (True, 0b11, 1)]


@pytest.mark.asyncio
async def test_grouped_counts_boundary_inclusive(store, now):
    boundary = now - timedelta(hours=1)
    await store.insert(boundary, True)
    await store.insert(boundary - timedelta(microseconds=1), True)

    assert await store.grouped_counts([boundary]) == [(True, 1, 1)]


@pytest.mark.asyncio
async def test_grouped_counts_without_boundaries(store):
    assert await store.grouped_counts([]) == []


@pytest.mark.asyncio
async def test_memory_database_uses_single_connection(now):
    store = RecordStore(ConnectionPool(":memory:", size=5))
    assert store.pool.size == 1
    await store.initialize()
    await store.insert(now, True)
    assert await store.count() == 1
    await store.close()


@pytest.mark.asyncio
async def test_insert_failure_raises_storage_failure(store, now):
    with patch.object(aiosqlite.Connection, "execute", side_effect=aiosqlite.OperationalError("disk I/O error")):
        with pytest.raises(StorageFailure) as info:
            await store.insert(now, True)
    assert "insert failed" in str(info.value)
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_missing_table_raises_storage_failure(tmp_path, now):
    store = RecordStore.open(str(tmp_path / "empty.db"))
    try:
        with pytest.raises(StorageFailure):
            await store.grouped_counts([now])
        with pytest.raises(StorageFailure):
            await store.delete_before(now)
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_file_pool_opens_every_connection(tmp_path, now, open_transactions):
    store = RecordStore.open(str(tmp_path / "pooled.db"), pool_size=5)
    try:
        await store.initialize()
        await asyncio.gather(*(store.insert(now, i % 2 == 0) for i in range(10)))

        assert await store.count() == 10
        assert await open_transactions(store.pool) == [False] * 5
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_failed_pool_open_closes_opened_connections(tmp_path):
    path = str(tmp_path / "partial.db")
    first = aiosqlite.connect(path)
    store = RecordStore.open(path, pool_size=3)

    with patch(
        "monday_poll.db_pool.aiosqlite.connect",
        side_effect=[first, aiosqlite.OperationalError("unable to open database file")],
    ):
        with patch.object(first, "close", wraps=first.close) as close:
            with pytest.raises(StorageFailure) as info:
                await store.initialize()

    close.assert_awaited_once()
    assert "could not open" in str(info.value)

    # the next call opens the pool from scratch
    await store.initialize()
    assert await store.count() == 0
    await store.close()


@pytest.mark.asyncio
async def test_failed_insert_leaves_no_open_transaction(store, now, open_transactions):
    with patch.object(aiosqlite.Connection, "commit", side_effect=aiosqlite.OperationalError("disk full")):
        with pytest.raises(StorageFailure):
            await store.insert(now, True)

    assert await open_transactions(store.pool) == [False] * store.pool.size
    assert await store.count() == 0
