"""JSON backup of macro logs.

Backup document format:

    {
        "exportedAt": "2025-01-06T21:00:00+00:00",
        "stats": {"totalMacroLogs": 2},
        "macroLogs": [{"id": ..., "date": "2025-01-06", "macroId": "hourly-950", ...}]
    }
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError

from macro_tracker.macros.catalog import find_macro_by_id
from macro_tracker.macros.logs import MUTABLE_FIELDS, MacroLogRecord
from macro_tracker.macros.store import LogStore
from macro_tracker.shared.utils import utc_now

logger = logging.getLogger(__name__)


def build_export(
    records: Iterable[MacroLogRecord], exported_at: datetime | None = None
) -> dict[str, Any]:
    """Assemble the backup document, newest dates first."""
    ordered = sorted(records, key=lambda r: (r.date, r.created_at), reverse=True)
    return {
        "exportedAt": (exported_at or utc_now()).isoformat(),
        "stats": {"totalMacroLogs": len(ordered)},
        "macroLogs": [r.to_dict() for r in ordered],
    }


def export_to_json(records: Iterable[MacroLogRecord], output_path: Path) -> Path:
    """Write the backup document to ``output_path``."""
    document = build_export(records)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    logger.info("Exported %d macro logs to %s", document["stats"]["totalMacroLogs"], output_path)
    return output_path


def load_export(path: Path) -> list[dict[str, Any]]:
    """Read the ``macroLogs`` rows of a backup file.

    A bare JSON list of rows is accepted as well.

    Raises:
        ValueError: If the file holds neither shape.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("macroLogs"), list):
        return data["macroLogs"]
    raise ValueError(f"{path} is not a macro log backup")


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


def import_macro_logs(rows: Iterable[dict[str, Any]], store: LogStore) -> ImportResult:
    """Upsert backup rows into ``store`` keyed by ``(date, macroId)``.

    Rows that fail validation, reference an unknown macro or hit a database
    error are skipped and reported; the rest are merged into whatever the
    store already holds.
    """
    result = ImportResult()
    for row in rows:
        try:
            record = MacroLogRecord.from_dict(row)
        except (TypeError, ValueError) as e:
            result.skipped += 1
            result.errors.append(str(e))
            continue

        window = find_macro_by_id(record.macro_id)
        macro_id = window.id if window else record.macro_id
        fields = {name: getattr(record, name) for name in MUTABLE_FIELDS}
        try:
            stored = store.upsert(record.date, macro_id, fields, log_id=record.id)
        except SQLAlchemyError as e:
            logger.error("Failed to import %s/%s: %s", record.date, macro_id, e)
            result.skipped += 1
            result.errors.append(f"{record.date}/{macro_id}: {e}")
            continue
        if stored is None:
            result.skipped += 1
            result.errors.append(f"Unknown macro '{record.macro_id}'")
        else:
            result.imported += 1

    logger.info("Imported %d macro logs, skipped %d", result.imported, result.skipped)
    return result
