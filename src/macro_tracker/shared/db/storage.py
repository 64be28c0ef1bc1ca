"""
SQL storage layer for macro logs.

Rows are keyed by ``(user_id, date, macro_id)``; every query is scoped to the
store's user. Writes read the current row, merge the partial update and write
the full row back inside one transaction.

Example:

    from macro_tracker.shared.db.storage import SqlLogStore

    store = SqlLogStore(user_id="trader-1")
    store.upsert("2025-01-06", "hourly-950", {"pointsMoved": 12})
    store.upsert("2025-01-06", "hourly-950", {"direction": "BULLISH"})
    print(store.get("2025-01-06", "hourly-950"))
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from macro_tracker.macros.catalog import ALL_MACROS, MacroWindow
from macro_tracker.macros.logs import (
    DisplacementQuality,
    Direction,
    LiquiditySweep,
    MacroLogRecord,
    append_link,
    drop_link,
    new_record,
    normalize_fields,
)
from macro_tracker.macros.store import LogStore
from macro_tracker.shared.config import Config
from macro_tracker.shared.utils import parse_iso_date

from .models import MacroLogRow
from .session import SessionLocal, get_db


def _aware(ts: datetime | None) -> datetime:
    if ts is None:
        return datetime.now(pytz.UTC)
    if ts.tzinfo is None:
        # SQLite drops the offset; values are always written as UTC
        return pytz.UTC.localize(ts)
    return ts


def row_to_record(row: MacroLogRow) -> MacroLogRecord:
    """Convert an ORM row to an immutable record."""
    return MacroLogRecord(
        id=row.id,
        date=row.date,
        macro_id=row.macro_id,
        points_moved=row.points_moved,
        direction=Direction(row.direction) if row.direction else None,
        displacement_quality=(
            DisplacementQuality(row.displacement_quality) if row.displacement_quality else None
        ),
        liquidity_sweep=LiquiditySweep(row.liquidity_sweep) if row.liquidity_sweep else None,
        note=row.note or "",
        tv_links=tuple(row.tv_links or ()),
        created_at=_aware(row.created_at),
    )


def _copy_to_row(record: MacroLogRecord, row: MacroLogRow) -> None:
    row.points_moved = record.points_moved
    row.direction = record.direction.value if record.direction else None
    row.displacement_quality = (
        record.displacement_quality.value if record.displacement_quality else None
    )
    row.liquidity_sweep = record.liquidity_sweep.value if record.liquidity_sweep else None
    row.note = record.note
    # JSON columns only notice reassignment, never in-place mutation
    row.tv_links = list(record.tv_links)


class SqlLogStore(LogStore):
    """SQLAlchemy-backed log store for a single user."""

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        user_id: str | None = None,
        catalog: Sequence[MacroWindow] = ALL_MACROS,
        log_file: Path | None = None,
    ) -> None:
        super().__init__(catalog=catalog, log_file=log_file or Config.LOGS_DIR / "macro_store.log")
        self.session_factory = session_factory
        self.user_id = user_id or Config.USER_ID

    def _query(self, session: Session):
        return session.query(MacroLogRow).filter(MacroLogRow.user_id == self.user_id)

    def _find(self, session: Session, log_date, macro_id: str) -> MacroLogRow | None:
        return (
            self._query(session)
            .filter(MacroLogRow.date == log_date, MacroLogRow.macro_id == macro_id)
            .one_or_none()
        )

    def _write(
        self,
        log_date,
        macro_id: str,
        mutate: Callable[[MacroLogRecord], MacroLogRecord],
        log_id: str | None = None,
        create: bool = True,
    ) -> MacroLogRecord | None:
        """Read-merge-write one row; retried once if a concurrent insert wins."""
        day = parse_iso_date(log_date)
        for attempt in (1, 2):
            try:
                with get_db(self.session_factory) as session:
                    row = self._find(session, day, macro_id)
                    if row is None:
                        if not create:
                            return None
                        if log_id and session.get(MacroLogRow, log_id) is not None:
                            # Ids are global; a row of another user already owns this one
                            self.logger.info("Log id %s is taken, using a new id", log_id)
                            log_id = None
                        record = mutate(new_record(day, macro_id, log_id=log_id))
                        row = MacroLogRow(
                            id=record.id,
                            user_id=self.user_id,
                            date=day,
                            macro_id=macro_id,
                            created_at=record.created_at,
                        )
                        session.add(row)
                    else:
                        record = mutate(row_to_record(row))
                    _copy_to_row(record, row)
                    session.flush()
                    return row_to_record(row)
            except IntegrityError:
                if attempt == 2:
                    raise
                self.logger.info(
                    "Row for %s/%s was created concurrently, merging instead", day, macro_id
                )
        return None

    def upsert(self, log_date, macro_id, fields, log_id=None):
        if not self.knows_macro(macro_id):
            return None
        updates = normalize_fields(fields)
        record = self._write(log_date, macro_id, lambda r: replace(r, **updates), log_id=log_id)
        self.logger.debug("Upserted %s/%s fields=%s", log_date, macro_id, sorted(updates))
        return record

    def add_link(self, log_date, macro_id, url, log_id=None):
        url = url.strip()
        if not url:
            return self.get(log_date, macro_id)
        if not self.knows_macro(macro_id):
            return None
        return self._write(log_date, macro_id, lambda r: append_link(r, url), log_id=log_id)

    def remove_link(self, log_date, macro_id, index):
        return self._write(log_date, macro_id, lambda r: drop_link(r, index), create=False)

    def delete(self, log_id):
        with get_db(self.session_factory) as session:
            row = self._query(session).filter(MacroLogRow.id == log_id).one_or_none()
            if row is None:
                self.logger.info("Delete skipped, no macro log with id %s", log_id)
                return False
            session.delete(row)
        self.logger.info("Deleted macro log %s", log_id)
        return True

    def get(self, log_date, macro_id):
        with get_db(self.session_factory) as session:
            row = self._find(session, parse_iso_date(log_date), macro_id)
            return row_to_record(row) if row else None

    def list_by_date(self, log_date):
        with get_db(self.session_factory) as session:
            rows = (
                self._query(session)
                .filter(MacroLogRow.date == parse_iso_date(log_date))
                .order_by(MacroLogRow.created_at)
                .all()
            )
            return [row_to_record(r) for r in rows]

    def list_all(self):
        with get_db(self.session_factory) as session:
            rows = self._query(session).order_by(MacroLogRow.date, MacroLogRow.created_at).all()
            return [row_to_record(r) for r in rows]
