"""Balance history store.

Holds the ordered balance-history feed plus the two externally supplied
scalars the chart needs: the initial (settings) balance used as a fallback
opening balance, and the live balance reported by the latest status poll.
"""
from __future__ import annotations
import bisect
import logging
import re
from datetime import datetime, timezone, tzinfo
from typing import Iterable, List, Optional, Tuple

from core.types import BalanceSnapshot
from core.utils import is_finite_number, localize

log = logging.getLogger(__name__)

# Feed timestamps may carry nanoseconds; datetime only takes micros.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class MalformedSnapshot(ValueError):
    """A history entry whose timestamp or balance cannot be parsed."""


def _utc(ts: datetime) -> datetime:
    return ts.astimezone(timezone.utc)


def parse_timestamp(value: object, tz: tzinfo) -> datetime:
    """Accept datetime, epoch milliseconds, or an ISO-8601 string."""
    if isinstance(value, datetime):
        return localize(value, tz)
    if is_finite_number(value):
        try:
            return datetime.fromtimestamp(float(value) / 1000.0, tz)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedSnapshot(f"bad epoch timestamp {value!r}: {e}") from e
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION_RE.sub(r"\1", text)
        try:
            return localize(datetime.fromisoformat(text), tz)
        except ValueError as e:
            raise MalformedSnapshot(f"bad timestamp {value!r}") from e
    raise MalformedSnapshot(f"unsupported timestamp {value!r}")


def parse_balance(value: object) -> float:
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError as e:
            raise MalformedSnapshot(f"bad balance {value!r}") from e
    if not is_finite_number(value):
        raise MalformedSnapshot(f"bad balance {value!r}")
    return float(value)


def parse_snapshot(entry: object, tz: tzinfo) -> BalanceSnapshot:
    if isinstance(entry, BalanceSnapshot):
        return BalanceSnapshot(localize(entry.timestamp, tz), entry.balance)
    if not isinstance(entry, dict):
        raise MalformedSnapshot(f"unsupported entry {type(entry).__name__}")
    return BalanceSnapshot(
        timestamp=parse_timestamp(entry.get("timestamp"), tz),
        balance=parse_balance(entry.get("balance")),
    )


class SnapshotStore:
    """Ordered, replace-on-ingest balance history."""

    def __init__(self, tz: tzinfo, initial_balance: float = 0.0):
        self.tz = tz
        self.initial_balance: float = initial_balance
        self.live_balance: Optional[float] = None
        self._series: Tuple[BalanceSnapshot, ...] = ()
        self._stamps: List[datetime] = []  # UTC, parallel to _series

    # --- Feed updates ---

    def ingest(self, history: Optional[Iterable[object]]) -> bool:
        """Replace the series with ``history`` sorted by timestamp.

        Returns False (and keeps the previous series) when the feed is
        empty, absent, or contains no parsable entry.
        """
        if not history:
            log.debug("Empty balance history, keeping %d stored snapshots", len(self))
            return False

        parsed: List[BalanceSnapshot] = []
        dropped = 0
        for entry in history:
            try:
                parsed.append(parse_snapshot(entry, self.tz))
            except MalformedSnapshot as e:
                dropped += 1
                log.debug("Dropped malformed snapshot: %s", e)

        if dropped:
            log.warning("Dropped %d malformed balance snapshot(s)", dropped)
        if not parsed:
            return False

        # Sort on the UTC instant; wall time repeats across a DST fall-back.
        # sorted() is stable, so equal timestamps keep feed order
        self._series = tuple(sorted(parsed, key=lambda s: _utc(s.timestamp)))
        self._stamps = [_utc(s.timestamp) for s in self._series]
        return True

    def set_live_balance(self, value: object) -> None:
        if value is None:
            return
        try:
            self.live_balance = parse_balance(value)
        except MalformedSnapshot:
            log.warning("Ignoring unparsable live balance %r", value)

    def set_initial_balance(self, value: object) -> None:
        try:
            self.initial_balance = parse_balance(value)
        except MalformedSnapshot:
            log.warning("Ignoring unparsable initial balance %r", value)

    # --- Queries ---

    @property
    def snapshots(self) -> Tuple[BalanceSnapshot, ...]:
        return self._series

    def __len__(self) -> int:
        return len(self._series)

    def __bool__(self) -> bool:
        return bool(self._series)

    def earliest(self) -> Optional[BalanceSnapshot]:
        return self._series[0] if self._series else None

    def latest(self) -> Optional[BalanceSnapshot]:
        return self._series[-1] if self._series else None

    def last_before(self, instant: datetime) -> Optional[BalanceSnapshot]:
        """Latest snapshot with timestamp strictly before ``instant``."""
        idx = bisect.bisect_left(self._stamps, _utc(instant))
        return self._series[idx - 1] if idx > 0 else None

    def between(self, start: datetime, end: datetime) -> List[BalanceSnapshot]:
        """Snapshots within [start, end] inclusive, in order."""
        lo = bisect.bisect_left(self._stamps, _utc(start))
        hi = bisect.bisect_right(self._stamps, _utc(end))
        return list(self._series[lo:hi])

    def current_balance(self) -> float:
        """Live balance, else the latest snapshot, else the initial balance."""
        if self.live_balance is not None:
            return self.live_balance
        latest = self.latest()
        if latest is not None:
            return latest.balance
        return self.initial_balance
