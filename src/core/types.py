from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterator, List, Optional


class ViewKind(str, Enum):
    DAY = "day"
    ALL_TIME = "all_time"


class ChartMode(str, Enum):
    LINE = "line"
    BAR = "bar"


# Bar / marker colors used by the dashboard
COLOR_UP = "#00ff88"
COLOR_DOWN = "#ff0000"
COLOR_FLAT = "#888888"


@dataclass(frozen=True, slots=True)
class BalanceSnapshot:
    timestamp: datetime  # tz-aware, chart timezone
    balance: float


@dataclass(frozen=True, slots=True)
class ViewSelector:
    """Which derived view is on screen: one calendar day, or all time."""
    kind: ViewKind
    day: Optional[date] = None

    @classmethod
    def for_day(cls, day: date) -> "ViewSelector":
        return cls(ViewKind.DAY, day)

    @classmethod
    def all_time(cls) -> "ViewSelector":
        return cls(ViewKind.ALL_TIME, None)

    @property
    def is_all_time(self) -> bool:
        return self.kind == ViewKind.ALL_TIME

    def label(self, today: Optional[date] = None) -> str:
        if self.is_all_time:
            return "All time"
        if today is not None and self.day == today:
            return "Today"
        return self.day.isoformat() if self.day else "?"


@dataclass(slots=True)
class Point:
    x: datetime
    y: float
    is_original: bool = True  # False for synthesized crossing points


@dataclass(slots=True)
class Segment:
    """One continuous trading run between two discontinuities.

    ``offset`` is the cumulative balance shift removed from this run, so
    ``point.y + offset`` is the value relative to the day's opening balance.
    """
    points: List[Point]
    offset: float = 0.0

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    @property
    def start(self) -> datetime:
        return self.points[0].x

    @property
    def end(self) -> datetime:
        return self.points[-1].x

    def originals(self) -> List[Point]:
        return [p for p in self.points if p.is_original]


@dataclass(slots=True)
class DayBucket:
    day: date
    closing_balance: float
    color: str = COLOR_FLAT


@dataclass(frozen=True, slots=True)
class YBounds:
    min: float
    max: float


@dataclass(slots=True)
class RenderFrame:
    """Display-ready output of one render pass."""
    selector: ViewSelector
    mode: ChartMode
    bounds: YBounds
    segments: List[Segment] = field(default_factory=list)
    buckets: List[DayBucket] = field(default_factory=list)
    boundaries: List[datetime] = field(default_factory=list)  # discontinuity markers
    opening_balance: float = 0.0
    live_balance: float = 0.0
    no_data: bool = False
    is_today: bool = False
    x_min: Optional[datetime] = None
    x_max: Optional[datetime] = None
    generation: int = 0
    stats: dict = field(default_factory=dict)

    @property
    def points(self) -> List[Point]:
        """All segment points flattened in order."""
        return [p for seg in self.segments for p in seg.points]

    def summary(self) -> dict:
        return {
            "view": self.selector.kind.value,
            "day": self.selector.day.isoformat() if self.selector.day else None,
            "mode": self.mode.value,
            "segments": len(self.segments),
            "points": sum(len(s) for s in self.segments),
            "buckets": len(self.buckets),
            "no_data": self.no_data,
            "y_min": round(self.bounds.min, 4),
            "y_max": round(self.bounds.max, 4),
            "opening_balance": round(self.opening_balance, 4),
        }
