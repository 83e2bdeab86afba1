from __future__ import annotations
from typing import List

from core.types import Point, Segment


def insert_crossings(points: List[Point], threshold: float = 0.0) -> List[Point]:
    """Insert a synthetic point wherever the line crosses ``threshold``.

    Each inserted point sits exactly on the threshold at the linearly
    interpolated time, so above/below fills switch color at the axis.
    """
    if len(points) < 2:
        return list(points)

    out = [points[0]]
    for a, b in zip(points, points[1:]):
        da = a.y - threshold
        db = b.y - threshold
        if da * db < 0:
            frac = -da / (db - da)
            out.append(Point(a.x + (b.x - a.x) * frac, threshold, is_original=False))
        out.append(b)
    return out


def refine_segments(segments: List[Segment], threshold: float = 0.0) -> List[Segment]:
    return [Segment(insert_crossings(seg.points, threshold), seg.offset)
            for seg in segments]
