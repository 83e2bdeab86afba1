from __future__ import annotations
import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterator, Optional, Sequence
from zoneinfo import ZoneInfo

# Last representable instant of a calendar day.
_END_OF_DAY = time.max


class Clock:
    """Wall clock in the chart timezone.

    Every "now", "today" and day-boundary decision goes through a Clock so
    the series logic can be driven deterministically in tests.
    """

    def __init__(self, tz: str | tzinfo = "UTC"):
        self.tz: tzinfo = resolve_tz(tz)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def is_today(self, day: Optional[date]) -> bool:
        return day is not None and day == self.today()


class FixedClock(Clock):
    """Clock frozen at a given instant (tests, one-shot renders)."""

    def __init__(self, now: datetime, tz: str | tzinfo = "UTC"):
        super().__init__(tz)
        self._now = localize(now, self.tz)

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = localize(now, self.tz)

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)


def resolve_tz(tz: str | tzinfo) -> tzinfo:
    if not isinstance(tz, str):
        return tz
    if tz.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(tz)


def localize(ts: datetime, tz: tzinfo) -> datetime:
    """Attach tz to a naive datetime, or convert an aware one into tz."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=tz)
    return ts.astimezone(tz)


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, _END_OF_DAY, tzinfo=tz)


def day_range(first: date, last: date) -> Iterator[date]:
    """Yield every calendar day from first to last inclusive.

    A backwards range collapses to the single day ``last``.
    """
    if first > last:
        first = last
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def safe_div(a: float, b: float, default: float = 0.0) -> float:
    if abs(b) < 1e-15:
        return default
    return a / b


def is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def value_range(values: Sequence[float]) -> tuple[float, float]:
    """Return (min, max) of a non-empty sequence."""
    return min(values), max(values)
