"""Log store contract.

A log store keeps at most one record per ``(date, macro_id)`` for its owner.
Every write is a field-level merge, so many quick partial updates for the same
window never drop each other's fields.
"""

import threading
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Sequence

from macro_tracker.macros.catalog import ALL_MACROS, MacroWindow
from macro_tracker.macros.logs import (
    MacroLogRecord,
    append_link,
    drop_link,
    merge_fields,
    new_record,
)
from macro_tracker.shared.utils import parse_iso_date, setup_logger


class LogStore(ABC):
    """Base class for macro log stores.

    Subclasses must implement the primitive reads and writes; the
    ``macro_id`` check against the catalog is shared here.
    """

    def __init__(
        self,
        catalog: Sequence[MacroWindow] = ALL_MACROS,
        log_file: Path | None = None,
    ) -> None:
        self.macro_ids = {w.id for w in catalog}
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def knows_macro(self, macro_id: str) -> bool:
        if macro_id in self.macro_ids:
            return True
        self.logger.warning("Ignoring write for unknown macro '%s'", macro_id)
        return False

    @abstractmethod
    def upsert(
        self,
        log_date: date | str,
        macro_id: str,
        fields: Mapping[str, Any],
        log_id: str | None = None,
    ) -> MacroLogRecord | None:
        """Create the record if absent, otherwise merge ``fields`` into it.

        Args:
            log_date: Calendar date of the observation.
            macro_id: Catalog id of the window.
            fields: Partial update; keys mapped to None clear that field.
            log_id: Id to use when the record has to be created.

        Returns:
            The stored record, or None when ``macro_id`` is not in the catalog.
        """
        ...

    @abstractmethod
    def add_link(
        self,
        log_date: date | str,
        macro_id: str,
        url: str,
        log_id: str | None = None,
    ) -> MacroLogRecord | None:
        """Append a chart link, creating the record if needed."""
        ...

    @abstractmethod
    def remove_link(self, log_date: date | str, macro_id: str, index: int) -> MacroLogRecord | None:
        """Remove a chart link by position. Stale indexes are ignored."""
        ...

    @abstractmethod
    def delete(self, log_id: str) -> bool:
        """Hard-delete a record. Returns False if it did not exist."""
        ...

    @abstractmethod
    def get(self, log_date: date | str, macro_id: str) -> MacroLogRecord | None: ...

    @abstractmethod
    def list_by_date(self, log_date: date | str) -> list[MacroLogRecord]: ...

    @abstractmethod
    def list_all(self) -> list[MacroLogRecord]: ...


class InMemoryLogStore(LogStore):
    """Dictionary-backed store, used offline and in tests."""

    def __init__(
        self,
        catalog: Sequence[MacroWindow] = ALL_MACROS,
        records: Sequence[MacroLogRecord] = (),
        log_file: Path | None = None,
    ) -> None:
        super().__init__(catalog=catalog, log_file=log_file)
        self._lock = threading.Lock()
        self._records: dict[tuple[date, str], MacroLogRecord] = {r.key: r for r in records}

    def upsert(self, log_date, macro_id, fields, log_id=None):
        if not self.knows_macro(macro_id):
            return None
        key = (parse_iso_date(log_date), macro_id)
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                record = new_record(key[0], macro_id, fields, log_id=log_id)
            else:
                record = merge_fields(existing, fields)
            self._records[key] = record
        return record

    def add_link(self, log_date, macro_id, url, log_id=None):
        url = url.strip()
        if not url:
            return self.get(log_date, macro_id)
        if not self.knows_macro(macro_id):
            return None
        key = (parse_iso_date(log_date), macro_id)
        with self._lock:
            existing = self._records.get(key) or new_record(key[0], macro_id, log_id=log_id)
            record = append_link(existing, url)
            self._records[key] = record
        return record

    def remove_link(self, log_date, macro_id, index):
        key = (parse_iso_date(log_date), macro_id)
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                return None
            record = drop_link(existing, index)
            self._records[key] = record
        return record

    def delete(self, log_id):
        with self._lock:
            for key, record in self._records.items():
                if record.id == log_id:
                    del self._records[key]
                    return True
        return False

    def get(self, log_date, macro_id):
        return self._records.get((parse_iso_date(log_date), macro_id))

    def list_by_date(self, log_date):
        day = parse_iso_date(log_date)
        return [r for r in self.list_all() if r.date == day]

    def list_all(self):
        with self._lock:
            return list(self._records.values())
