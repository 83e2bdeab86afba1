from __future__ import annotations
import logging
from datetime import date

from core.utils import start_of_day
from series.store import SnapshotStore

log = logging.getLogger(__name__)


class DayBoundaryResolver:
    """Balance as it stood entering a calendar day."""

    def __init__(self, store: SnapshotStore):
        self.store = store

    def opening_balance_for(self, day: date) -> float:
        if not self.store:
            return self.store.initial_balance

        prior = self.store.last_before(start_of_day(day, self.store.tz))
        if prior is not None:
            return prior.balance

        # Day precedes all history: use the first real balance rather than
        # a possibly stale or zero initial balance.
        earliest = self.store.earliest()
        log.debug("No snapshot before %s, opening from earliest %.4f",
                  day, earliest.balance)
        return earliest.balance
