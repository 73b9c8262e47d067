"""Injectable clocks for date-based scheduling."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock (naive local time, matching stored timestamps)."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given instant; advance() moves it forward."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()

    def advance(self, **delta: float) -> None:
        self._instant += timedelta(**delta)


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed between two instants (floored, never negative)."""
    seconds = (later - earlier).total_seconds()
    return max(0, int(seconds // 86400))
