"""Balance chart — Main Application.

Live balance/P&L chart for a trading bot. Polls the bot's status document,
turns its balance history into day-relative P&L segments (or all-time day
bars) and draws them in the terminal.
"""
from __future__ import annotations
import asyncio
import logging
import os
import sys
from typing import Optional

import yaml
from dotenv import load_dotenv

from core.utils import Clock
from gateway.feed import StatusFileFeed
from monitor.engine import ChartEngine, ChartRenderer
from monitor.terminal import TerminalChart

log = logging.getLogger("pnlchart")

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "config", "default.yaml")


def setup_logging(level: str = "INFO") -> None:
    fmt = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def load_config(path: Optional[str] = None) -> dict:
    config_path = path or os.environ.get("PNLCHART_CONFIG") or DEFAULT_CONFIG_PATH
    if not os.path.exists(config_path):
        log.warning("Config %s not found, using built-in defaults", config_path)
        return {}
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def build_feed(config: dict) -> StatusFileFeed:
    feed_cfg = config.get("feed", {})
    status_path = os.environ.get("PNLCHART_STATUS_FILE") or feed_cfg.get(
        "status_file", "data/status.json")
    settings_path = os.environ.get("PNLCHART_SETTINGS_FILE") or feed_cfg.get(
        "settings_file")
    return StatusFileFeed(status_path, settings_path)


def build_engine(config: dict, renderer: Optional[ChartRenderer] = None,
                 feed: Optional[StatusFileFeed] = None) -> ChartEngine:
    clock = Clock(config.get("chart", {}).get("timezone", "UTC"))
    return ChartEngine(feed or build_feed(config), renderer, config, clock=clock)


async def main() -> None:
    load_dotenv()
    config = load_config()
    setup_logging(config.get("log_level", "INFO"))

    log.info("=" * 60)
    log.info("  BALANCE CHART — Starting up")
    log.info("=" * 60)

    chart = TerminalChart(config)
    engine = build_engine(config, chart)
    log.info("Status feed: %s (tz=%s)", engine.feed.status_path, engine.clock.tz)

    chart.start()
    try:
        await engine.run()
    except (KeyboardInterrupt, asyncio.CancelledError):
        log.info("Shutdown requested by user")
    finally:
        engine.stop()
        chart.stop()
        await engine.feed.close()
        log.info("Final state: %s", engine.state.summary())


if __name__ == "__main__":
    asyncio.run(main())
