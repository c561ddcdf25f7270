"""Debounced retention sweeps.

The cleaner deletes submissions older than ``clean_before`` at most once per
``clean_timeout``.  It never reads a clock: callers pass ``now`` in, which
keeps the debounce logic deterministic under test.

The debounce check, the delete and the ``last_clean`` update run inside one
critical section, so two concurrent requests can never both decide that a
sweep is due.  Arguments are validated and the cutoff is computed before the
section is entered, so only the store call runs inside it.  If anything
other than a store failure or a cancellation escapes the section, the guard
is marked broken and every later call fails with
:class:`~monday_poll.errors.StateUnavailable`.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Optional

from loguru import logger

from monday_poll.db import DateTimeValue
from monday_poll.errors import StateUnavailable, StorageFailure
from monday_poll.store import RecordStore


class Cleaner:
    def __init__(self, store: RecordStore, clean_before: timedelta, clean_timeout: timedelta):
        self.store = store
        self.clean_before = clean_before
        self.clean_timeout = clean_timeout
        self._last_clean: Optional[datetime] = None
        self._lock = asyncio.Lock()
        self._broken = False

    @property
    def last_clean(self) -> Optional[datetime]:
        """Instant of the last successful sweep, ``None`` until the first one."""
        return self._last_clean

    @asynccontextmanager
    async def _guard(self) -> AsyncIterator[None]:
        try:
            await self._lock.acquire()
        except RuntimeError as exc:
            # asyncio.Lock refuses to be awaited from a second event loop
            raise StateUnavailable(f"last-clean guard unusable: {exc}") from exc
        try:
            if self._broken:
                raise StateUnavailable("last-clean guard was left broken by an earlier failure")
            try:
                yield
            except (StorageFailure, asyncio.CancelledError):
                raise
            except BaseException:
                self._broken = True
                raise
        finally:
            self._lock.release()

    def _due(self, now: datetime) -> bool:
        return self._last_clean is None or now - self._last_clean >= self.clean_timeout

    async def queue_clean(self, now: datetime) -> bool:
        """Sweep expired submissions unless a sweep happened less than ``clean_timeout`` ago.

        Returns ``True`` when a sweep ran.  ``last_clean`` only moves forward
        after the delete succeeded, so a failed or cancelled sweep is retried
        by the very next call.
        """
        # argument errors surface here, before the guard is taken
        DateTimeValue(now)
        cutoff = now - self.clean_before

        async with self._guard():
            if not self._due(now):
                logger.debug(f"[CLEANER] Skipping sweep, last one at {self._last_clean.isoformat()}")
                return False

            deleted = await self.store.delete_before(cutoff)
            self._last_clean = now
            logger.info(f"[CLEANER] Removed {deleted} submission(s) older than {cutoff.isoformat()}")
            return True
