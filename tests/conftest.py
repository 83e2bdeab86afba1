"""Shared test fixtures."""
import sys
import os
from datetime import datetime, timezone

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

# Day under test: 2024-05-10, "now" is 16:00 UTC
DAY = 10
NOW = datetime(2024, 5, DAY, 16, 0, tzinfo=timezone.utc)


def ts(day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(2024, 5, day, hour, minute, tzinfo=timezone.utc)


def snap(day: int, hour: int, balance: float, minute: int = 0) -> dict:
    """History entry in the bot's wire shape (naive ISO timestamp)."""
    return {"timestamp": f"2024-05-{day:02d}T{hour:02d}:{minute:02d}:00", "balance": balance}


@pytest.fixture
def config():
    return {
        "log_level": "DEBUG",
        "chart": {
            "timezone": "UTC",
            "initial_balance": 0.0,
            "threshold": 1.0,
            "jump_multiplier": 5,
            "live_epsilon": 0.01,
            "bar_flat_epsilon": 0.0001,
            "poll_interval_s": 2.0,
        },
        "dashboard": {"enabled": False, "width": 80, "height": 20},
    }


@pytest.fixture
def wide_config(config):
    """Jump limit of 100 balance units (threshold 20 x 5)."""
    config["chart"]["threshold"] = 20.0
    return config


@pytest.fixture
def clock():
    from core.utils import FixedClock
    return FixedClock(NOW, "UTC")


@pytest.fixture
def store(clock):
    from series.store import SnapshotStore
    return SnapshotStore(clock.tz)
