"""Coordinator tying the cleaner and the surveyor together."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from monday_poll.cleaner import Cleaner
from monday_poll.errors import AppError, PollError
from monday_poll.models import Summary
from monday_poll.settings import Settings
from monday_poll.store import RecordStore
from monday_poll.surveyor import Surveyor


@dataclass(frozen=True)
class AppConfig:
    clean_before: timedelta
    clean_timeout: timedelta

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppConfig":
        return cls(clean_before=settings.retention_horizon, clean_timeout=settings.sweep_interval)


class App:
    """Runs a retention sweep check before every submit and summary.

    Errors from either component are re-raised as :class:`AppError` tagged
    with ``"cleaner"`` or ``"surveyor"``; nothing is retried or suppressed.
    """

    def __init__(self, store: RecordStore, config: AppConfig):
        self.config = config
        self.cleaner = Cleaner(store, config.clean_before, config.clean_timeout)
        self.surveyor = Surveyor(store)

    @classmethod
    async def create(cls, store: RecordStore, config: AppConfig) -> "App":
        """Bootstrap the schema, then build the app."""
        await store.initialize()
        return cls(store, config)

    async def _clean(self, now: datetime) -> None:
        try:
            await self.cleaner.queue_clean(now)
        except PollError as exc:
            logger.error(f"[APP] Cleaner failed: {exc}")
            raise AppError("cleaner", exc) from exc

    async def submit(self, now: datetime, monday_status: bool) -> None:
        await self._clean(now)
        try:
            await self.surveyor.submit(now, monday_status)
        except PollError as exc:
            logger.error(f"[APP] Surveyor failed to record submission: {exc}")
            raise AppError("surveyor", exc) from exc

    async def summary(self, now: datetime) -> Summary[int]:
        await self._clean(now)
        try:
            return await self.surveyor.summary(now)
        except PollError as exc:
            logger.error(f"[APP] Surveyor failed to summarise: {exc}")
            raise AppError("surveyor", exc) from exc
