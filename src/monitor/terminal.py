"""Terminal chart renderer.

Draws a RenderFrame with plotext and hosts it in a rich panel:

  * day view  -> P&L line per segment, green above zero / red below,
                 dashed zero baseline, gray markers at balance jumps
  * all time  -> one bar per day, colored by change vs the previous day

Usage:
    chart = TerminalChart(config)
    chart.start()           # rich.Live on the terminal
    chart.render(frame)     # called by ChartEngine
    chart.stop()
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import List, Optional, Tuple

import plotext as plt
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from core.types import (
    ChartMode, Point, RenderFrame, COLOR_DOWN, COLOR_FLAT, COLOR_UP,
)

log = logging.getLogger(__name__)

_PLOT_COLORS = {COLOR_UP: "green", COLOR_DOWN: "red", COLOR_FLAT: "gray"}


def pair_color(a: Point, b: Point) -> str:
    return "green" if a.y >= 0 and b.y >= 0 else "red"


def color_runs(points: List[Point]) -> List[Tuple[str, List[Point]]]:
    """Group a segment into maximal runs whose consecutive pairs share a color."""
    runs: List[Tuple[str, List[Point]]] = []
    for a, b in zip(points, points[1:]):
        color = pair_color(a, b)
        if runs and runs[-1][0] == color:
            runs[-1][1].append(b)
        else:
            runs.append((color, [a, b]))
    return runs


def _hours_since(origin: datetime, ts: datetime) -> float:
    return (ts - origin).total_seconds() / 3600.0


class TerminalChart:
    def __init__(self, config: dict):
        dash_cfg = config.get("dashboard", {})
        self.enabled: bool = dash_cfg.get("enabled", True)
        self.width: int = dash_cfg.get("width", 100)
        self.height: int = dash_cfg.get("height", 25)
        self.frame: Optional[RenderFrame] = None
        self.renders: int = 0
        self._live: Optional[Live] = None
        self._suppressed: list[logging.Handler] = []

    # ── Renderer interface ────────────────────────────────────────

    def render(self, frame: RenderFrame) -> None:
        self.frame = frame
        self.renders += 1
        if self._live is not None:
            try:
                self._live.update(self.panel(frame))
            except Exception as exc:
                log.debug("Chart render error: %s", exc)

    # ── Live display ──────────────────────────────────────────────

    def start(self) -> None:
        if not self.enabled or self._live is not None:
            return
        # Keep log lines from tearing the live display
        root = logging.getLogger()
        for h in root.handlers[:]:
            if isinstance(h, logging.StreamHandler) and h.stream in (sys.stdout, sys.stderr):
                root.removeHandler(h)
                self._suppressed.append(h)
        initial = self.panel(self.frame) if self.frame else Text("Waiting for status...")
        self._live = Live(initial, refresh_per_second=4, screen=True)
        self._live.start()

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
        root = logging.getLogger()
        for h in self._suppressed:
            root.addHandler(h)
        self._suppressed.clear()

    # ── Drawing ───────────────────────────────────────────────────

    def panel(self, frame: RenderFrame) -> Panel:
        title = "Today" if frame.is_today else frame.selector.label()
        subtitle = self._subtitle(frame)
        style = "green" if frame.live_balance >= frame.opening_balance else "red"
        return Panel(Text.from_ansi(self.build(frame)), title=f"BALANCE · {title}",
                     title_align="left", subtitle=subtitle, border_style=style)

    def build(self, frame: RenderFrame) -> str:
        plt.clf()
        plt.clt()
        plt.plotsize(self.width, self.height)
        plt.theme("dark")
        plt.ylim(frame.bounds.min, frame.bounds.max)

        if frame.mode == ChartMode.BAR:
            self._draw_bars(frame)
        else:
            self._draw_line(frame)
        return plt.build()

    def _draw_bars(self, frame: RenderFrame) -> None:
        if not frame.buckets:
            return
        labels = [b.day.strftime("%m/%d") for b in frame.buckets]
        values = [b.closing_balance for b in frame.buckets]
        colors = [_PLOT_COLORS.get(b.color, "gray") for b in frame.buckets]
        plt.bar(labels, values, color=colors)

    def _draw_line(self, frame: RenderFrame) -> None:
        origin = frame.x_min
        x_end = _hours_since(origin, frame.x_max)
        plt.xlim(0, max(x_end, 0.01))
        plt.xlabel("hours")
        plt.plot([0, x_end], [0, 0], color="gray")

        if frame.no_data:
            plt.title("No trades in this period")
            return

        for ts in frame.boundaries:
            plt.vline(_hours_since(origin, ts), color="gray")

        for seg in frame.segments:
            for color, run in color_runs(seg.points):
                xs = [_hours_since(origin, p.x) for p in run]
                ys = [p.y for p in run]
                plt.plot(xs, ys, color=color)
            for color, above in (("green", True), ("red", False)):
                marks = [p for p in seg.originals() if (p.y >= 0) == above]
                if marks:
                    plt.scatter([_hours_since(origin, p.x) for p in marks],
                                [p.y for p in marks], color=color, marker="dot")

    @staticmethod
    def _subtitle(frame: RenderFrame) -> str:
        stats = frame.stats
        parts = [f"${frame.live_balance:,.2f}"]
        if frame.mode == ChartMode.LINE and not frame.no_data and frame.segments:
            parts.append(f"run {frame.segments[-1].points[-1].y:+.2f}$")
        if stats:
            parts.append(f"today {stats.get('today_percent', 0.0):+.2f}%")
            parts.append(f"total {stats.get('growth_percent', 0.0):+.2f}%")
        return " | ".join(parts)
