from __future__ import annotations
import logging
from typing import Optional

from core.types import RenderFrame, ViewSelector
from core.utils import Clock
from series.gate import RenderGate
from series.store import SnapshotStore

log = logging.getLogger(__name__)


class ChartState:
    """Mutable chart state owned by the hosting shell."""

    def __init__(self, config: dict, clock: Clock):
        self.config = config
        self.clock = clock
        chart_cfg = config.get("chart", {})

        # --- Data ---
        self.store = SnapshotStore(clock.tz, chart_cfg.get("initial_balance", 0.0))

        # --- View ---
        self.selector: ViewSelector = ViewSelector.for_day(clock.today())
        self.follow_today: bool = True   # roll the day view over at midnight
        self.generation: int = 0         # bumped on every view switch
        self.gate = RenderGate.from_config(config)

        # --- Feed ordering ---
        self.fetch_seq: int = 0          # last issued fetch
        self.applied_seq: int = 0        # last fetch whose result was applied

        # --- Render bookkeeping ---
        self.last_frame: Optional[RenderFrame] = None
        self.last_status: dict = {}
        self.frames_rendered: int = 0
        self.ticks_suppressed: int = 0
        self.feed_failures: int = 0

    # --- View selection ---

    def is_today(self) -> bool:
        return not self.selector.is_all_time and self.clock.is_today(self.selector.day)

    def select(self, selector: ViewSelector) -> bool:
        """Switch the active view and force the next render.

        Re-selecting the active view only resets the gate; the generation
        moves on a real switch. Returns True when the view changed.
        """
        if selector == self.selector:
            self.gate.reset()
            log.debug("View %s re-selected", selector.label(self.clock.today()))
            return False
        self.selector = selector
        self.follow_today = self.is_today()
        self.generation += 1
        self.gate.reset()
        log.info("View -> %s", selector.label(self.clock.today()))
        return True

    def roll_day(self) -> bool:
        """Move a followed "today" view onto the new calendar day."""
        if not self.follow_today or self.selector.is_all_time:
            return False
        today = self.clock.today()
        if self.selector.day == today:
            return False
        log.info("Day rollover %s -> %s", self.selector.day, today)
        self.select(ViewSelector.for_day(today))
        return True

    # --- Feed ordering ---

    def next_fetch_seq(self) -> int:
        self.fetch_seq += 1
        return self.fetch_seq

    def accept_seq(self, seq: int) -> bool:
        """Accept a fetch result unless a newer one was already applied."""
        if seq <= self.applied_seq:
            return False
        self.applied_seq = seq
        return True

    def summary(self) -> dict:
        return {
            "view": self.selector.label(self.clock.today()),
            "generation": self.generation,
            "snapshots": len(self.store),
            "live_balance": self.store.live_balance,
            "initial_balance": self.store.initial_balance,
            "frames_rendered": self.frames_rendered,
            "ticks_suppressed": self.ticks_suppressed,
            "feed_failures": self.feed_failures,
        }
