"""Live macro clock.

Prints the active macro, the next macro and a countdown once per tick, using
the session toggles from the environment unless overridden.

Usage:
    # NY + London sessions (defaults from .env)
    python scripts/run_macro_clock.py

    # Include Asia, tick every 5 seconds
    python scripts/run_macro_clock.py --asia --interval 5

    # Print a single snapshot and exit
    python scripts/run_macro_clock.py --once

Example:
    $ python scripts/run_macro_clock.py --once
    [INFO] 10:02:15 ET | ACTIVE 09:50 - 10:10 Macro (8 min left) | next 10:50 - 11:10 Macro in 47:45
"""

import argparse
import sys
import time

from macro_tracker.macros.catalog import SessionFilters
from macro_tracker.macros.scheduler import ScheduleSnapshot
from macro_tracker.macros.ticker import MacroTicker
from macro_tracker.shared.config import Config
from macro_tracker.shared.utils import setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Show the live macro window schedule (Eastern Time)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--asia", action="store_true", help="Include Asia session macros")
    parser.add_argument("--no-london", action="store_true", help="Hide London session macros")
    parser.add_argument("--no-ny", action="store_true", help="Hide NY session macros")

    parser.add_argument(
        "--interval",
        type=float,
        default=Config.TICK_INTERVAL_SECONDS,
        help="Seconds between ticks. Default: %(default)s",
        metavar="SECONDS",
    )

    parser.add_argument("--once", action="store_true", help="Print one snapshot and exit")

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def describe(snapshot: ScheduleSnapshot) -> str:
    """One-line summary of a snapshot."""
    parts = [snapshot.now_et.strftime("%H:%M:%S ET")]

    if snapshot.is_weekend:
        parts.append(f"weekend, next trading day {snapshot.next_trading_day}")
        return " | ".join(parts)

    active = snapshot.active_status
    if active is not None:
        parts.append(f"ACTIVE {active.macro.name} ({active.minutes_remaining} min left)")
    elif snapshot.is_trading_hours:
        parts.append("between macros")
    else:
        parts.append("outside trading hours")

    if snapshot.next_macro is not None:
        parts.append(f"next {snapshot.next_macro.name} in {snapshot.countdown}")
    else:
        parts.append(f"no more macros today, next trading day {snapshot.next_trading_day}")

    return " | ".join(parts)


def main() -> int:
    """Run the clock until interrupted."""
    args = parse_args()

    logger = setup_logger(
        "macro_clock",
        level="DEBUG" if args.verbose else Config.LOG_LEVEL,
    )

    configured = Config.session_filters()
    filters = SessionFilters(
        show_asia_macros=args.asia or configured.show_asia_macros,
        show_london_macros=configured.show_london_macros and not args.no_london,
        show_ny_macros=configured.show_ny_macros and not args.no_ny,
    )

    try:
        Config.validate()
        ticker = MacroTicker(
            on_tick=lambda snapshot: logger.info(describe(snapshot)),
            interval=args.interval,
            filters=filters,
        )
    except ValueError as e:
        logger.error("Invalid clock settings: %s", e)
        return 1

    if args.once:
        ticker.tick()
        return 0

    ticker.start()
    try:
        while ticker.running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Clock interrupted by user")
    finally:
        ticker.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
