"""Console entry points for the pnlchart package.

After ``pip install .``, two commands are available:

    pnlchart            – live terminal chart (wraps src/app.py)
    pnlchart-render     – render one frame from a status file and exit
"""
from __future__ import annotations

import asyncio
import sys
from datetime import date


def main_live() -> None:
    """Entry point for ``pnlchart`` console command (live chart)."""
    from app import main  # noqa: E402 — deferred to allow clean packaging
    asyncio.run(main())


def main_render() -> None:
    """Entry point for ``pnlchart-render`` console command."""
    import argparse

    import orjson

    from app import build_engine, load_config, setup_logging  # noqa: E402
    from core.types import ViewSelector
    from gateway.feed import StatusFileFeed
    from monitor.terminal import TerminalChart

    parser = argparse.ArgumentParser(description="Render the balance chart once")
    parser.add_argument("--status", required=True,
                        help="Path to a status JSON document")
    parser.add_argument("--settings", default=None,
                        help="Path to a settings JSON document (initial deposit)")
    parser.add_argument("--config", default=None, help="YAML config path")
    parser.add_argument("--day", type=date.fromisoformat, default=None,
                        metavar="YYYY-MM-DD", help="Day to show (default: today)")
    parser.add_argument("--all-time", action="store_true",
                        help="Show the all-time daily bars")
    parser.add_argument("--json", action="store_true",
                        help="Print the frame as JSON instead of drawing it")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(config.get("log_level", "WARNING"))
    dash_cfg = config.setdefault("dashboard", {})
    if args.width:
        dash_cfg["width"] = args.width
    if args.height:
        dash_cfg["height"] = args.height

    engine = build_engine(config, feed=StatusFileFeed(args.status, args.settings))
    asyncio.run(engine.init())

    if args.all_time:
        engine.on_view_change(ViewSelector.all_time())
    elif args.day is not None:
        engine.on_view_change(ViewSelector.for_day(args.day))

    frame = engine.state.last_frame
    if frame is None:
        print("No frame rendered (status feed unavailable?)", file=sys.stderr)
        sys.exit(1)

    if args.json:
        sys.stdout.write(orjson.dumps(frame, option=orjson.OPT_INDENT_2).decode())
        sys.stdout.write("\n")
    else:
        print(TerminalChart(config).build(frame))
