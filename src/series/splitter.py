from __future__ import annotations
import logging
from datetime import datetime
from typing import List

from core.types import Point, Segment

log = logging.getLogger(__name__)


class SegmentSplitter:
    """Split a day-relative series wherever the balance jumps.

    A step larger than ``threshold * multiplier`` between consecutive points
    is a deposit or withdrawal, not trading P&L. The run after the jump
    becomes its own segment, shifted so it starts near zero again.
    """

    def __init__(self, threshold: float = 1.0, multiplier: float = 5.0):
        self.threshold = threshold
        self.multiplier = multiplier

    @classmethod
    def from_config(cls, config: dict) -> "SegmentSplitter":
        chart_cfg = config.get("chart", {})
        return cls(
            threshold=chart_cfg.get("threshold", 1.0),
            multiplier=chart_cfg.get("jump_multiplier", 5.0),
        )

    @property
    def jump_limit(self) -> float:
        return self.threshold * self.multiplier

    def split(self, points: List[Point]) -> List[Segment]:
        if not points:
            return []

        segments: List[Segment] = []
        offset = 0.0
        current = Segment(points=[], offset=offset)

        for i, p in enumerate(points):
            current.points.append(Point(p.x, p.y - offset, p.is_original))
            if i + 1 < len(points):
                diff = points[i + 1].y - p.y
                if abs(diff) > self.jump_limit:
                    log.debug("Balance jump %.4f at %s, starting new segment",
                              diff, points[i + 1].x)
                    segments.append(current)
                    offset += diff
                    current = Segment(points=[], offset=offset)

        segments.append(current)
        return segments

    @staticmethod
    def boundaries(segments: List[Segment]) -> List[datetime]:
        """Timestamps where a new segment begins after a jump."""
        return [seg.start for seg in segments[1:]]
