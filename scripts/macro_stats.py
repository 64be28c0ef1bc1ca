"""Macro log statistics report.

Reads every macro log of the configured user from the database and prints the
dashboard rollups plus a per-window breakdown.

Usage:
    python scripts/macro_stats.py
    python scripts/macro_stats.py --date 2025-01-06
    python scripts/macro_stats.py --user trader-1 --verbose
"""

import argparse
import sys

from macro_tracker.analytics.stats import (
    compute_macro_stats,
    day_indicators,
    group_logs_by_date,
    macro_breakdown,
)
from macro_tracker.shared.config import Config
from macro_tracker.shared.db import SqlLogStore, init_db
from macro_tracker.shared.utils import parse_iso_date, setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Print statistics over recorded macro logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--user", type=str, help="User id. Default: MACRO_USER_ID")
    parser.add_argument(
        "--date",
        type=str,
        help="Also list the logs of one day (YYYY-MM-DD)",
        metavar="DATE",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser.parse_args()


def main() -> int:
    """Print the report."""
    args = parse_args()
    logger = setup_logger("macro_stats", level="DEBUG" if args.verbose else Config.LOG_LEVEL)

    try:
        Config.validate()
        init_db()
        store = SqlLogStore(user_id=args.user)
        logs = store.list_all()
        logger.info("Loaded %d macro logs for user '%s'", len(logs), store.user_id)

        stats = compute_macro_stats(logs)
        logger.info("=" * 60)
        logger.info("Logged macros:    %d", stats.total_logs)
        logger.info(
            "Direction:        %d%% bullish / %d%% bearish / %d%% chop",
            stats.bullish_rate,
            stats.bearish_rate,
            stats.chop_rate,
        )
        logger.info("Average points:   %d", stats.avg_points)
        logger.info(
            "Resistance:       %d low / %d high",
            stats.low_resistance_count,
            stats.high_resistance_count,
        )
        best_avg = f" ({stats.best_macro.avg_points} pts avg)" if stats.best_macro else ""
        logger.info("Best macro:       %s%s", stats.best_macro_label, best_avg)
        logger.info("Best day:         %s", stats.best_day_label)
        logger.info("=" * 60)

        breakdown = macro_breakdown(logs)
        if not breakdown.empty:
            logger.info("Per-window breakdown:\n%s", breakdown.to_string())

        if args.date:
            day = parse_iso_date(args.date).isoformat()
            day_logs = group_logs_by_date(logs).get(day, [])
            indicator = day_indicators(day_logs)
            if indicator is None:
                logger.info("No logs on %s", day)
            else:
                logger.info(
                    "%s: %d logs, %d bullish, %d bearish",
                    day,
                    indicator.count,
                    indicator.bullish,
                    indicator.bearish,
                )
                for log in day_logs:
                    logger.info("  %s", log.to_dict())

        return 0

    except ValueError as e:
        logger.error("%s", e)
        return 1

    except Exception as e:
        logger.exception("Unexpected error while building the report: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
