"""SQLite-backed record store for submissions."""

from __future__ import annotations

from datetime import datetime
from typing import List, Sequence, Tuple

import aiosqlite
from loguru import logger

from monday_poll.db import DateTimeValue
from monday_poll.db_pool import ConnectionPool
from monday_poll.errors import StorageFailure

SCHEMA = """
CREATE TABLE IF NOT EXISTS submissions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    epoch_us INTEGER NOT NULL,
    monday INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS submission_epoch_index ON submissions (epoch_us);
"""

# (monday, membership bitmask, count)
Bucket = Tuple[bool, int, int]


class RecordStore:
    """Append-only table of votes.

    Each method checks its own connection out of the pool, so concurrent
    callers never share a cursor.  Any :class:`aiosqlite.Error` is re-raised
    as :class:`~monday_poll.errors.StorageFailure`; the pool rolls back
    whatever a failed or cancelled call left uncommitted.
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    @classmethod
    def open(cls, db_path: str, pool_size: int = 5) -> "RecordStore":
        return cls(ConnectionPool(db_path, size=pool_size))

    async def close(self) -> None:
        await self.pool.close()

    async def initialize(self) -> None:
        """Create tables in the database, if needed."""
        async with self.pool.connection() as conn:
            try:
                await conn.executescript(SCHEMA)
                await conn.commit()
            except aiosqlite.Error as exc:
                raise StorageFailure(f"schema bootstrap failed: {exc}") from exc
        logger.debug(f"[DB] Schema ready in {self.pool.db_path}")

    async def insert(self, timestamp: datetime, monday: bool) -> None:
        text, epoch_us = DateTimeValue(timestamp).as_row()
        async with self.pool.connection() as conn:
            try:
                async with conn.execute(
                    "INSERT INTO submissions (timestamp, epoch_us, monday) VALUES (?, ?, ?)",
                    (text, epoch_us, int(monday)),
                ):
                    pass
                await conn.commit()
            except aiosqlite.Error as exc:
                raise StorageFailure(f"insert failed: {exc}") from exc

    async def delete_before(self, cutoff: datetime) -> int:
        """Delete every submission strictly older than *cutoff*; return the row count."""
        epoch_us = DateTimeValue(cutoff).epoch_us
        async with self.pool.connection() as conn:
            try:
                cursor = await conn.execute("DELETE FROM submissions WHERE epoch_us < ?", (epoch_us,))
                deleted = cursor.rowcount
                await cursor.close()
                await conn.commit()
            except aiosqlite.Error as exc:
                raise StorageFailure(f"delete failed: {exc}") from exc
        return deleted

    async def grouped_counts(self, boundaries: Sequence[datetime]) -> List[Bucket]:
        """Group submissions by ``(monday, window membership bitmask)``.

        Bit ``i`` of the mask is set when the submission is at or after
        ``boundaries[i]``.  Submissions outside every boundary are skipped,
        so at most ``2 * 2 ** len(boundaries)`` buckets come back.
        """
        if not boundaries:
            return []
        keys = [DateTimeValue(boundary).epoch_us for boundary in boundaries]
        mask_sql = " + ".join(f"((epoch_us >= ?) << {bit})" for bit in range(len(keys)))
        query = (
            f"SELECT monday, {mask_sql} AS mask, COUNT(*) "
            "FROM submissions WHERE epoch_us >= ? "
            "GROUP BY monday, mask"
        )
        async with self.pool.connection() as conn:
            try:
                async with conn.execute(query, (*keys, min(keys))) as cursor:
                    rows = await cursor.fetchall()
            except aiosqlite.Error as exc:
                raise StorageFailure(f"summary query failed: {exc}") from exc
        return [(bool(monday), int(mask), int(count)) for monday, mask, count in rows]

    async def count(self) -> int:
        async with self.pool.connection() as conn:
            try:
                async with conn.execute("SELECT COUNT(*) FROM submissions") as cursor:
                    row = await cursor.fetchone()
            except aiosqlite.Error as exc:
                raise StorageFailure(f"count query failed: {exc}") from exc
        return int(row[0]) if row else 0
