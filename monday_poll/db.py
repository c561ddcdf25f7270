"""Conversion between timezone-aware datetimes and stored column values.

Every submission stores its timestamp twice: an RFC 3339 string that keeps
the caller's offset for humans poking at the database, and an integer count
of microseconds since the Unix epoch.  All range comparisons use the integer
column, so instants written with different UTC offsets still order correctly
and window boundaries compare exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Tuple

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


@dataclass(frozen=True)
class DateTimeValue:
    """A timezone-aware instant ready to be bound to a query."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None or self.value.utcoffset() is None:
            raise ValueError(f"timestamp must be timezone-aware, got {self.value!r}")

    @property
    def text(self) -> str:
        return self.value.isoformat()

    @property
    def epoch_us(self) -> int:
        return (self.value - EPOCH) // _MICROSECOND

    def as_row(self) -> Tuple[str, int]:
        return self.text, self.epoch_us

