"""Redraw suppression.

Polling ticks arrive every couple of seconds and most of them carry nothing
new. The gate compares each update with what was last rendered and lets
through only those that materially change the active view.
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Optional

log = logging.getLogger(__name__)


class GateState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    SUPPRESSED = "suppressed"
    RENDERING = "rendering"


class RenderGate:
    def __init__(self, epsilon: float = 0.01):
        self.epsilon = epsilon
        self.state: GateState = GateState.IDLE
        self.last_rendered_count: int = 0
        self.last_live_balance: Optional[float] = None
        self._forced: bool = True

    @classmethod
    def from_config(cls, config: dict) -> "RenderGate":
        return cls(epsilon=config.get("chart", {}).get("live_epsilon", 0.01))

    def reset(self) -> None:
        """Forget the last render; the next evaluation always renders."""
        self.last_rendered_count = 0
        self.last_live_balance = None
        self._forced = True
        self.state = GateState.IDLE

    def evaluate(self, is_today: bool, live_balance: float, series_len: int) -> bool:
        """Return True when the update should be rendered."""
        self.state = GateState.EVALUATING

        if self._forced:
            render = True
        elif is_today:
            render = (self.last_live_balance is None
                      or abs(live_balance - self.last_live_balance) >= self.epsilon)
        else:
            render = not (series_len == self.last_rendered_count and series_len > 0)

        if not render:
            self.state = GateState.SUPPRESSED
            return False

        self.state = GateState.RENDERING
        self._forced = False
        if is_today:
            self.last_live_balance = live_balance
        self.last_rendered_count = series_len
        return True

    def settle(self) -> None:
        self.state = GateState.IDLE
