from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from monday_poll.app import App, AppConfig
from monday_poll.store import RecordStore


@pytest.fixture
def now() -> datetime:
    return datetime(2020, 1, 10, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def store(tmp_path):
    record_store = RecordStore.open(str(tmp_path / "submissions.db"), pool_size=3)
    await record_store.initialize()
    yield record_store
    await record_store.close()


@pytest_asyncio.fixture
async def make_app(store):
    async def factory(clean_before=timedelta(hours=24), clean_timeout=timedelta(seconds=60)) -> App:
        return await App.create(store, AppConfig(clean_before=clean_before, clean_timeout=clean_timeout))

    return factory


@pytest.fixture
def open_transactions():
    """Check every pooled connection out and report which are mid-transaction."""

    async def check(pool):
        conns = [await pool.acquire() for _ in range(pool.size)]
        try:
            return [conn.in_transaction for conn in conns]
        finally:
            for conn in conns:
                await pool.release(conn)

    return check
