"""Compose a display-ready frame for the active view.

Pipeline for a day view:
    opening balance -> raw points -> day-relative -> split on jumps
    -> zero crossings -> Y bounds

The all-time view skips all of that and produces forward-filled day buckets.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from core.types import (
    ChartMode, DayBucket, Point, RenderFrame, ViewSelector, YBounds,
)
from core.utils import Clock, value_range
from series.boundary import DayBoundaryResolver
from series.builder import SeriesBuilder, relativize
from series.crossing import refine_segments
from series.splitter import SegmentSplitter
from series.store import SnapshotStore

log = logging.getLogger(__name__)

_NO_DATA_BOUNDS = YBounds(-10.0, 10.0)
_LINE_FALLBACK_MARGIN = 5.0
_BAR_FALLBACK_MARGIN = 10.0
_MARGIN_PCT = 0.10


def padded_bounds(values: Sequence[float], fallback_margin: float) -> YBounds:
    """Min/max of values padded by 10% of the range (or a fixed margin)."""
    lo, hi = value_range(values)
    margin = (hi - lo) * _MARGIN_PCT or fallback_margin
    return YBounds(lo - margin, hi + margin)


class FrameComposer:
    def __init__(self, store: SnapshotStore, clock: Clock, config: dict):
        self.store = store
        self.clock = clock
        self.resolver = DayBoundaryResolver(store)
        self.builder = SeriesBuilder(store, self.resolver, clock, config)
        self.splitter = SegmentSplitter.from_config(config)

    def compose(self, selector: ViewSelector, live_balance: float,
                generation: int = 0) -> RenderFrame:
        if selector.is_all_time:
            frame = self._compose_all_time(selector, live_balance)
        else:
            frame = self._compose_day(selector, live_balance)
        frame.generation = generation
        return frame

    def _compose_all_time(self, selector: ViewSelector,
                          live_balance: float) -> RenderFrame:
        buckets = self.builder.build_day_buckets(live_balance)
        if buckets:
            bounds = padded_bounds([b.closing_balance for b in buckets],
                                   _BAR_FALLBACK_MARGIN)
        else:
            bounds = YBounds(live_balance - 10.0, live_balance + 10.0)
        return RenderFrame(
            selector=selector,
            mode=ChartMode.BAR,
            bounds=bounds,
            buckets=buckets,
            live_balance=live_balance,
        )

    def _compose_day(self, selector: ViewSelector, live_balance: float) -> RenderFrame:
        is_today = self.clock.is_today(selector.day)
        series = self.builder.build_day(selector.day, is_today, live_balance)

        if series.no_data:
            # Flat zero line; nothing to split or interpolate
            segments = self.splitter.split(series.points)
            return RenderFrame(
                selector=selector,
                mode=ChartMode.LINE,
                bounds=_NO_DATA_BOUNDS,
                segments=segments,
                opening_balance=series.opening_balance,
                live_balance=live_balance,
                no_data=True,
                is_today=is_today,
                x_min=series.start,
                x_max=series.end,
            )

        relative = relativize(series.points, series.opening_balance)
        segments = refine_segments(self.splitter.split(relative))
        values = [p.y for seg in segments for p in seg.points]

        return RenderFrame(
            selector=selector,
            mode=ChartMode.LINE,
            bounds=padded_bounds(values, _LINE_FALLBACK_MARGIN),
            segments=segments,
            boundaries=SegmentSplitter.boundaries(segments),
            opening_balance=series.opening_balance,
            live_balance=live_balance,
            is_today=is_today,
            x_min=series.start,
            x_max=series.end,
        )


def format_tooltip(frame: RenderFrame, point: Optional[Point] = None,
                   bucket: Optional[DayBucket] = None,
                   offset: float = 0.0) -> List[str]:
    """Tooltip lines for a hovered point (line view) or bucket (bar view).

    ``offset`` is the hovered segment's jump offset, so the balance line
    shows the real balance after a deposit or withdrawal.
    """
    if bucket is not None:
        return [f"Balance: {bucket.closing_balance:.2f} $"]
    if point is None:
        return []
    pnl = point.y
    sign = "+" if pnl > 0 else ""
    return [
        f"PnL: {sign}{pnl:.2f} $",
        f"Balance: {pnl + offset + frame.opening_balance:.2f} $",
    ]
