"""Chart engine — periodic status polling and render pipeline.

Each tick awaits one status fetch, then runs synchronously:

    ingest -> gate -> compose (resolve, build, split, interpolate) -> render

Ticks never overlap: the next one is scheduled only after the previous
fetch has completed or failed. Feed failures keep the last good series and
are retried on the next tick.

Usage:
    engine = ChartEngine(feed, renderer, config)
    engine.start()          # launches async poll loop
    engine.on_view_change(ViewSelector.all_time())
    engine.stop()
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from core.state import ChartState
from core.types import RenderFrame, ViewSelector
from core.utils import Clock
from gateway.base import FeedUnavailable, StatusFeed, StatusPayload
from monitor.stats import header_stats
from series.frame import FrameComposer

log = logging.getLogger(__name__)


class ChartRenderer(Protocol):
    def render(self, frame: RenderFrame) -> None: ...


@dataclass(slots=True)
class FetchResult:
    seq: int
    payload: Optional[StatusPayload] = None
    error: Optional[FeedUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.payload is not None


class ChartEngine:
    def __init__(self, feed: StatusFeed, renderer: Optional[ChartRenderer],
                 config: dict, clock: Optional[Clock] = None):
        self.feed = feed
        self.renderer = renderer
        self.config = config
        chart_cfg = config.get("chart", {})
        self.clock = clock or Clock(chart_cfg.get("timezone", "UTC"))
        self.interval_s: float = chart_cfg.get("poll_interval_s", 2.0)
        self.initial_deposit: float = chart_cfg.get("initial_balance", 0.0)

        self.state = ChartState(config, self.clock)
        self.composer = FrameComposer(self.state.store, self.clock, config)

        self._task: Optional[asyncio.Task] = None
        self._running = False

    # ── Lifecycle ─────────────────────────────────────────────────

    def start(self) -> None:
        self._running = True
        self._task = asyncio.ensure_future(self.run())
        log.info("Chart engine started (poll every %.1fs)", self.interval_s)

    def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    async def run(self) -> None:
        self._running = True
        await self.init()
        while self._running:
            await asyncio.sleep(self.interval_s)
            await self.tick()

    async def init(self) -> Optional[RenderFrame]:
        await self.load_settings()
        return await self.tick()

    async def load_settings(self) -> None:
        try:
            settings = await self.feed.fetch_settings()
        except FeedUnavailable as e:
            log.warning("Settings unavailable, initial balance stays %.2f: %s",
                        self.state.store.initial_balance, e)
            return
        if settings.balance is not None:
            self.state.store.set_initial_balance(settings.balance)
            self.initial_deposit = self.state.store.initial_balance
            log.info("Initial balance: %.2f", self.initial_deposit)

    # ── Tick ──────────────────────────────────────────────────────

    async def fetch(self) -> FetchResult:
        seq = self.state.next_fetch_seq()
        try:
            payload = await self.feed.fetch_status()
        except FeedUnavailable as e:
            return FetchResult(seq, error=e)
        return FetchResult(seq, payload=payload)

    async def tick(self) -> Optional[RenderFrame]:
        try:
            return self.apply(await self.fetch())
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.exception("Chart tick failed: %s", e)
            return None

    def apply(self, result: FetchResult) -> Optional[RenderFrame]:
        """Fold one fetch result into the store and re-render if needed."""
        st = self.state
        if not result.ok:
            st.feed_failures += 1
            log.warning("Status feed unavailable (#%d): %s", result.seq, result.error)
            return None
        if not st.accept_seq(result.seq):
            log.debug("Discarding stale status #%d (already applied #%d)",
                      result.seq, st.applied_seq)
            return None

        payload = result.payload
        st.store.ingest(payload.balance_history)
        st.store.set_live_balance(payload.balance)
        st.last_status = header_stats(st.store.current_balance(),
                                      payload.today_profit,
                                      self.initial_deposit)
        return self.update()

    def update(self) -> Optional[RenderFrame]:
        st = self.state
        st.roll_day()
        live = st.store.current_balance()

        if not st.gate.evaluate(st.is_today(), live, len(st.store)):
            st.ticks_suppressed += 1
            st.gate.settle()
            return None

        frame = self.composer.compose(st.selector, live, st.generation)
        frame.stats = dict(st.last_status)
        st.last_frame = frame
        st.frames_rendered += 1
        log.debug("Frame %s", frame.summary())
        if self.renderer is not None:
            self.renderer.render(frame)
        st.gate.settle()
        return frame

    # ── UI entry points ───────────────────────────────────────────

    def on_view_change(self, selector: ViewSelector) -> Optional[RenderFrame]:
        """Switch view (date picker / all-time toggle) and redraw at once."""
        self.state.select(selector)
        return self.update()

    def show_today(self) -> Optional[RenderFrame]:
        return self.on_view_change(ViewSelector.for_day(self.clock.today()))
