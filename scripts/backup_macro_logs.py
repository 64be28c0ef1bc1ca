"""Export or restore macro logs as JSON.

Usage:
    # Export to data/exports/macro-logs-YYYY-MM-DD.json
    python scripts/backup_macro_logs.py

    # Export to a given file
    python scripts/backup_macro_logs.py --output backup.json

    # Restore (merge) a backup into the database
    python scripts/backup_macro_logs.py --restore backup.json
"""

import argparse
import sys
from pathlib import Path

from macro_tracker.macros.export import export_to_json, import_macro_logs, load_export
from macro_tracker.shared.config import Config
from macro_tracker.shared.db import SqlLogStore, init_db
from macro_tracker.shared.utils import setup_logger, utc_now


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Export or restore macro logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--user", type=str, help="User id. Default: MACRO_USER_ID")
    parser.add_argument("--output", type=Path, help="Export file path", metavar="FILE")
    parser.add_argument("--restore", type=Path, help="Backup file to import", metavar="FILE")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser.parse_args()


def main() -> int:
    """Run the export or the restore."""
    args = parse_args()
    logger = setup_logger("macro_backup", level="DEBUG" if args.verbose else Config.LOG_LEVEL)

    try:
        Config.validate()
        init_db()
        store = SqlLogStore(user_id=args.user)

        if args.restore:
            if not args.restore.exists():
                logger.error("Backup file not found: %s", args.restore)
                return 1
            result = import_macro_logs(load_export(args.restore), store)
            for error in result.errors:
                logger.warning("Skipped row: %s", error)
            logger.info("✓ Restored %d macro logs (%d skipped)", result.imported, result.skipped)
            return 0

        output = args.output or (
            Config.EXPORT_DIR / f"macro-logs-{utc_now().date().isoformat()}.json"
        )
        export_to_json(store.list_all(), output)
        logger.info("✓ Backup written to %s", output)
        return 0

    except ValueError as e:
        logger.error("%s", e)
        return 1

    except Exception as e:
        logger.exception("Unexpected error during backup: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
