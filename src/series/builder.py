"""Raw series construction for the day (line) and all-time (bar) views."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List

from core.types import DayBucket, Point, COLOR_DOWN, COLOR_FLAT, COLOR_UP
from core.utils import Clock, day_range, end_of_day, start_of_day
from series.boundary import DayBoundaryResolver
from series.store import SnapshotStore

log = logging.getLogger(__name__)


@dataclass(slots=True)
class DaySeries:
    points: List[Point]      # absolute balances, or the flat no-data line
    opening_balance: float
    start: datetime
    end: datetime            # x-axis end: "now" for today, else end of day
    no_data: bool = False


def relativize(points: List[Point], opening_balance: float) -> List[Point]:
    """Express absolute balances as P&L since the day's open."""
    return [Point(p.x, p.y - opening_balance, p.is_original) for p in points]


def bar_color(balance: float, prev: float | None, flat_eps: float) -> str:
    if prev is None or abs(balance - prev) < flat_eps:
        return COLOR_FLAT
    return COLOR_UP if balance > prev else COLOR_DOWN


class SeriesBuilder:
    def __init__(self, store: SnapshotStore, resolver: DayBoundaryResolver,
                 clock: Clock, config: dict):
        self.store = store
        self.resolver = resolver
        self.clock = clock
        chart_cfg = config.get("chart", {})
        self.bar_flat_epsilon: float = chart_cfg.get("bar_flat_epsilon", 0.0001)

    def build_day(self, day: date, is_today: bool, live_balance: float) -> DaySeries:
        tz = self.store.tz
        start = start_of_day(day, tz)
        end = end_of_day(day, tz)
        now = self.clock.now()
        x_end = now if is_today else end

        opening = self.resolver.opening_balance_for(day)
        filtered = self.store.between(start, end)

        if not filtered:
            return DaySeries(
                points=[Point(start, 0.0), Point(x_end, 0.0)],
                opening_balance=opening,
                start=start,
                end=x_end,
                no_data=True,
            )

        points = [Point(start, opening)]
        points.extend(Point(s.timestamp, s.balance) for s in filtered)
        if is_today:
            points.append(Point(now, live_balance))
        else:
            points.append(Point(end, filtered[-1].balance))

        return DaySeries(points=points, opening_balance=opening,
                         start=start, end=x_end)

    def build_day_buckets(self, live_balance: float) -> List[DayBucket]:
        """One forward-filled closing balance per day, first day through today."""
        closing: Dict[date, float] = {}
        for snap in self.store.snapshots:
            closing[snap.timestamp.date()] = snap.balance

        today = self.clock.today()
        first = min(closing) if closing else today

        buckets: List[DayBucket] = []
        last_balance = self.store.initial_balance
        prev: float | None = None
        for day in day_range(first, today):
            if day in closing:
                last_balance = closing[day]
            if day == today:
                last_balance = live_balance
            buckets.append(DayBucket(
                day=day,
                closing_balance=last_balance,
                color=bar_color(last_balance, prev, self.bar_flat_epsilon),
            ))
            prev = last_balance

        log.debug("Built %d day buckets from %s", len(buckets), first)
        return buckets
