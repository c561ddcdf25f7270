from __future__ import annotations

"""Simple asyncio connection pool for *aiosqlite*.

This lightweight helper avoids paying the open/close penalty for every query
and keeps at most *size* file handles alive for one database file.  Every
caller checks a connection out for the duration of a single operation, so no
cursor or statement is ever shared between two in-flight requests:

```python
pool = ConnectionPool(settings.DATABASE_PATH)

async with pool.connection() as conn:
    await conn.execute(...)
```

An in-memory database (``:memory:``) only exists inside the connection that
created it, so such a pool is pinned to a single connection.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List

import aiosqlite
from loguru import logger

from monday_poll.errors import StorageFailure

MEMORY_DATABASE = ":memory:"


class ConnectionPool:
    def __init__(self, db_path: str, size: int = 5):
        self.db_path = db_path
        self._size = 1 if db_path == MEMORY_DATABASE else size
        self._queue: asyncio.Queue[aiosqlite.Connection] | None = None
        self._init_lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return self._size

    async def _init_pool(self) -> None:
        """Open *size* connections and put them into the queue.

        If any connection fails to open, the ones already opened are closed
        again so their worker threads do not keep the process alive.
        """
        async with self._init_lock:
            if self._queue is not None:
                return
            if self.db_path != MEMORY_DATABASE:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            queue: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=self._size)
            opened: List[aiosqlite.Connection] = []
            try:
                for _ in range(self._size):
                    conn = await aiosqlite.connect(self.db_path)
                    opened.append(conn)
                    # an unfinished PRAGMA statement would keep the file locked
                    async with conn.execute("PRAGMA journal_mode=WAL"):
                        pass
                    await queue.put(conn)
            except aiosqlite.Error as exc:
                for conn in opened:
                    await conn.close()
                logger.error(f"[DB] Could not open pool for {self.db_path}: {exc}")
                raise StorageFailure(f"could not open {self.db_path}: {exc}") from exc
            self._queue = queue
            logger.debug(f"[DB] Opened {self._size} connection(s) to {self.db_path}")

    async def acquire(self) -> aiosqlite.Connection:
        if self._queue is None:
            await self._init_pool()
        assert self._queue is not None
        return await self._queue.get()

    async def release(self, conn: aiosqlite.Connection) -> None:
        assert self._queue is not None
        await self._queue.put(conn)

    async def close(self) -> None:
        if self._queue is None:
            return
        while not self._queue.empty():
            conn = await self._queue.get()
            await conn.close()
        self._queue = None
        logger.debug(f"[DB] Closed pool for {self.db_path}")

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Check a connection out of the pool for the duration of the block.

        A connection only goes back to the pool outside a transaction.  When
        the block fails or is cancelled, whatever it left uncommitted is
        rolled back; the rollback is shielded so a cancelled caller cannot
        skip it, and aiosqlite runs it after any statement still in flight.
        """
        conn = await self.acquire()
        try:
            yield conn
        except BaseException:
            await asyncio.shield(conn.rollback())
            raise
        else:
            if conn.in_transaction:
                await conn.rollback()
        finally:
            await self.release(conn)
