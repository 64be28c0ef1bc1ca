"""Optimistic, in-memory view of the macro log.

Every edit is applied to the local collection first, so statistics and the
UI see it immediately. The store call then runs on a single background worker;
writes therefore reach the store in the order they were made.

For each row the book keeps the last state the store acknowledged plus the
edits still queued for it. The local row is always that confirmed state with
the queued edits replayed on top. When a write fails it is dropped from the
queue, the row is rebuilt, and subscribers get a ``WriteFailure`` with a
``retry`` callable. The local collection therefore ends up equal to what the
store holds once the queue drains.

Example:

    from macro_tracker.macros.log_book import MacroLogBook
    from macro_tracker.shared.db import SqlLogStore, init_db

    init_db()
    book = MacroLogBook(SqlLogStore())
    book.subscribe(lambda failure: print("not saved:", failure.error))
    book.load()
    book.upsert("2025-01-06", "hourly-950", pointsMoved=12)
    book.upsert("2025-01-06", "hourly-950", direction="BULLISH")
    book.close()
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, Sequence

from macro_tracker.macros.catalog import ALL_MACROS, MacroWindow
from macro_tracker.macros.logs import (
    MacroLogRecord,
    append_link,
    drop_link,
    new_record,
    normalize_fields,
)
from macro_tracker.macros.store import LogStore
from macro_tracker.shared.utils import parse_iso_date, setup_logger

Key = tuple[date, str]

# A queued edit: previous row state (None when absent) to the new one
Mutation = Callable[[MacroLogRecord | None], MacroLogRecord | None]


@dataclass(frozen=True)
class WriteFailure:
    """A store write that did not go through and was rolled back locally."""

    operation: str
    date: date
    macro_id: str
    error: Exception
    retry: Callable[[], Future]


class MacroLogBook:
    """Local collection of macro logs kept in step with a ``LogStore``."""

    def __init__(
        self,
        store: LogStore,
        catalog: Sequence[MacroWindow] = ALL_MACROS,
        executor: ThreadPoolExecutor | None = None,
        log_file: Path | None = None,
    ) -> None:
        self.store = store
        self.macro_ids = {w.id for w in catalog}
        self.logger = setup_logger(self.__class__.__name__, log_file)
        # One worker: writes for the same row can never overtake each other
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="macro-log-writer"
        )
        self._lock = threading.RLock()
        self._closed = False
        self._records: dict[Key, MacroLogRecord] = {}
        self._confirmed: dict[Key, MacroLogRecord] = {}
        self._pending: dict[Key, list[Mutation]] = {}
        # Rows created locally keep one id across replays
        self._drafts: dict[Key, MacroLogRecord] = {}
        self._subscribers: list[Callable[[WriteFailure], None]] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load(self) -> int:
        """Replace the local collection with the store's contents.

        Edits still queued are replayed on top of the loaded rows.
        """
        records = self.store.list_all()
        with self._lock:
            self._confirmed = {r.key: r for r in records}
            self._records = dict(self._confirmed)
            for key in list(self._pending):
                self._replay(key)
        self.logger.info("Loaded %d macro logs", len(records))
        return len(records)

    def records(self) -> tuple[MacroLogRecord, ...]:
        """Immutable snapshot of the local collection."""
        with self._lock:
            return tuple(self._records.values())

    def get(self, log_date: date | str, macro_id: str) -> MacroLogRecord | None:
        with self._lock:
            return self._records.get((parse_iso_date(log_date), macro_id))

    def for_date(self, log_date: date | str) -> list[MacroLogRecord]:
        day = parse_iso_date(log_date)
        return [r for r in self.records() if r.date == day]

    def subscribe(self, callback: Callable[[WriteFailure], None]) -> None:
        """Register a callback for failed writes."""
        self._subscribers.append(callback)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, log_date: date | str, macro_id: str, **fields: Any) -> Future:
        """Merge ``fields`` into the row for ``(log_date, macro_id)``.

        Field names may be snake_case or camelCase; invalid names or values
        raise ``ValueError`` before anything is applied. A call without
        fields creates nothing.
        """
        day = parse_iso_date(log_date)
        updates = normalize_fields(fields)
        if not updates or not self._knows(macro_id):
            return _done(self.get(day, macro_id))
        key = (day, macro_id)

        def mutate(record: MacroLogRecord | None) -> MacroLogRecord:
            return replace(record or self._draft(key), **updates)

        return self._apply(
            "upsert",
            key,
            mutate,
            lambda log_id: self.store.upsert(day, macro_id, updates, log_id=log_id),
            lambda: self.upsert(day, macro_id, **fields),
        )

    def add_link(self, log_date: date | str, macro_id: str, url: str) -> Future:
        day = parse_iso_date(log_date)
        url = url.strip()
        if not url or not self._knows(macro_id):
            return _done(self.get(day, macro_id))
        key = (day, macro_id)

        return self._apply(
            "add_link",
            key,
            lambda record: append_link(record or self._draft(key), url),
            lambda log_id: self.store.add_link(day, macro_id, url, log_id=log_id),
            lambda: self.add_link(day, macro_id, url),
        )

    def remove_link(self, log_date: date | str, macro_id: str, index: int) -> Future:
        """Remove a link by position; stale positions are ignored."""
        day = parse_iso_date(log_date)
        current = self.get(day, macro_id)
        if current is None or not 0 <= index < len(current.tv_links):
            return _done(current)

        return self._apply(
            "remove_link",
            (day, macro_id),
            lambda record: drop_link(record, index) if record is not None else None,
            lambda _log_id: self.store.remove_link(day, macro_id, index),
            lambda: self.remove_link(day, macro_id, index),
        )

    def delete(self, log_id: str) -> Future:
        """Remove a row locally, then from the store."""
        with self._lock:
            record = next((r for r in self._records.values() if r.id == log_id), None)
        if record is None:
            return _done(False)

        return self._apply(
            "delete",
            record.key,
            lambda _record: None,
            lambda _log_id: self.store.delete(log_id),
            lambda: self.delete(log_id),
        )

    def close(self) -> None:
        """Wait for pending writes and stop the worker."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "MacroLogBook":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _knows(self, macro_id: str) -> bool:
        if macro_id in self.macro_ids:
            return True
        self.logger.warning("Ignoring edit for unknown macro '%s'", macro_id)
        return False

    def _draft(self, key: Key) -> MacroLogRecord:
        if key not in self._drafts:
            self._drafts[key] = new_record(key[0], key[1])
        return self._drafts[key]

    def _replay(self, key: Key) -> None:
        """Rebuild the local row from the confirmed state and queued edits."""
        state = self._confirmed.get(key)
        for mutate in self._pending.get(key, ()):
            state = mutate(state)
        if state is None:
            self._records.pop(key, None)
        else:
            self._records[key] = state

    def _dequeue(self, key: Key, mutate: Mutation) -> None:
        queue = self._pending.get(key, [])
        queue.remove(mutate)
        if not queue:
            self._pending.pop(key, None)

    def _apply(
        self,
        operation: str,
        key: Key,
        mutate: Mutation,
        write: Callable[[str | None], Any],
        retry: Callable[[], Future],
    ) -> Future:
        def on_success() -> None:
            with self._lock:
                confirmed = mutate(self._confirmed.get(key))
                if confirmed is None:
                    self._confirmed.pop(key, None)
                else:
                    self._confirmed[key] = confirmed
                self._dequeue(key, mutate)

        def on_error(error: Exception) -> None:
            with self._lock:
                self._dequeue(key, mutate)
                self._replay(key)
            self._notify(operation, key, error, retry)

        with self._lock:
            if self._closed:
                raise RuntimeError("MacroLogBook is closed")
            self._pending.setdefault(key, []).append(mutate)
            self._replay(key)
            after = self._records.get(key)
            log_id = after.id if after is not None else None
            return self._submit(lambda: write(log_id), on_success, on_error)

    def _submit(
        self,
        call: Callable[[], Any],
        on_success: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> Future:
        def run() -> Any:
            try:
                result = call()
            except Exception as error:
                # Roll back before the future resolves so waiters see the reverted state
                on_error(error)
                raise
            on_success()
            return result

        return self._executor.submit(run)

    def _notify(
        self, operation: str, key: Key, error: Exception, retry: Callable[[], Future]
    ) -> None:
        self.logger.error(
            "Failed to %s macro log %s/%s, local change reverted: %s",
            operation, key[0], key[1], error,
        )
        failure = WriteFailure(
            operation=operation, date=key[0], macro_id=key[1], error=error, retry=retry
        )
        for callback in list(self._subscribers):
            try:
                callback(failure)
            except Exception:
                self.logger.exception("Write-failure subscriber raised")


def _done(value: Any) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future
