"""Header statistics shown above the balance chart.

Today's profit as a percentage of the day's starting balance, and overall
growth against the initial deposit.
"""
from __future__ import annotations
import logging
from typing import Dict

from core.utils import safe_div

log = logging.getLogger(__name__)


def today_percent(balance: float, today_profit: float) -> float:
    """Today's profit relative to the balance the day started with."""
    start = balance - today_profit
    if start <= 0:
        return 0.0
    return today_profit / start * 100.0


def growth(balance: float, initial_deposit: float) -> tuple[float, float]:
    """Absolute and percentage change against the initial deposit."""
    diff = balance - initial_deposit
    return diff, safe_div(diff, initial_deposit) * 100.0


def header_stats(balance: float, today_profit: float,
                 initial_deposit: float) -> Dict[str, float]:
    diff, pct = growth(balance, initial_deposit)
    return {
        "balance": round(balance, 2),
        "today_profit": round(today_profit, 4),
        "today_percent": round(today_percent(balance, today_profit), 3),
        "diff": round(diff, 2),
        "growth_percent": round(pct, 3),
    }
