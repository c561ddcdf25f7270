"""Window aggregation over stored submissions."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Tuple

from loguru import logger

from monday_poll.models import Question, Summary
from monday_poll.store import RecordStore

# Widest first; bit i of a bucket mask corresponds to WINDOWS[i].
WINDOWS: Tuple[Tuple[str, timedelta], ...] = (
    ("last_24_hours", timedelta(hours=24)),
    ("last_12_hours", timedelta(hours=12)),
    ("last_6_hours", timedelta(hours=6)),
    ("last_3_hours", timedelta(hours=3)),
    ("last_hour", timedelta(hours=1)),
)


class Surveyor:
    """Stores votes and tallies them over the trailing windows."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def submit(self, now: datetime, monday_status: bool) -> None:
        await self.store.insert(now, monday_status)
        logger.debug(f"[SURVEYOR] Recorded {'yes' if monday_status else 'no'} at {now.isoformat()}")

    async def summary(self, now: datetime) -> Summary[int]:
        """Count yes/no votes at or after ``now - window`` for every window.

        The store groups rows once by answer and window-membership bitmask;
        each bucket's count is then added to every window whose bit is set.
        """
        boundaries = [now - size for _, size in WINDOWS]
        buckets = await self.store.grouped_counts(boundaries)

        totals: Dict[bool, list[int]] = {True: [0] * len(WINDOWS), False: [0] * len(WINDOWS)}
        for monday, mask, count in buckets:
            for bit in range(len(WINDOWS)):
                if mask & (1 << bit):
                    totals[monday][bit] += count

        summary = Summary[int](**{name: Question[int](yes=0, no=0) for name, _ in WINDOWS})
        for monday, counts in totals.items():
            for question, answer in zip(summary.questions(), counts):
                question.set_answer(monday, answer)

        logger.debug(
            f"[SURVEYOR] Summary at {now.isoformat()}: "
            f"24h={summary.last_24_hours.yes}/{summary.last_24_hours.no} "
            f"1h={summary.last_hour.yes}/{summary.last_hour.no}"
        )
        return summary
