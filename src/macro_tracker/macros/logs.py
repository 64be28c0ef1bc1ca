"""Macro log records and the field-merge rules shared by every store.

A record exists for a ``(date, macro_id)`` pair only once something was
written for it. Updates are partial: keys present in an update overwrite
(``None`` included), keys absent from it are left alone.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

import pytz

from macro_tracker.shared.utils import parse_iso_date


class Direction(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    CONSOLIDATION = "CONSOLIDATION"


class DisplacementQuality(str, Enum):
    CLEAN = "CLEAN"
    CHOPPY = "CHOPPY"


class LiquiditySweep(str, Enum):
    HIGHS = "HIGHS"
    LOWS = "LOWS"
    BOTH = "BOTH"
    NONE = "NONE"


_ENUM_FIELDS = {
    "direction": Direction,
    "displacement_quality": DisplacementQuality,
    "liquidity_sweep": LiquiditySweep,
}

# Fields a caller may write through ``upsert``
MUTABLE_FIELDS = (
    "points_moved",
    "direction",
    "displacement_quality",
    "liquidity_sweep",
    "note",
    "tv_links",
)

# camelCase wire names used by backup files
WIRE_NAMES = {
    "id": "id",
    "date": "date",
    "macro_id": "macroId",
    "points_moved": "pointsMoved",
    "direction": "direction",
    "displacement_quality": "displacementQuality",
    "liquidity_sweep": "liquiditySweep",
    "note": "note",
    "tv_links": "tvLinks",
    "created_at": "createdAt",
}
_FROM_WIRE = {wire: name for name, wire in WIRE_NAMES.items()}


@dataclass(frozen=True)
class MacroLogRecord:
    """One day's observation for one macro window."""

    date: date
    macro_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    points_moved: float | None = None
    direction: Direction | None = None
    displacement_quality: DisplacementQuality | None = None
    liquidity_sweep: LiquiditySweep | None = None
    note: str = ""
    tv_links: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(pytz.UTC))

    @property
    def key(self) -> tuple[date, str]:
        return (self.date, self.macro_id)

    @property
    def has_data(self) -> bool:
        """A placeholder row (links or note only) is not a real entry."""
        return self.direction is not None or self.points_moved is not None

    def to_dict(self) -> dict[str, Any]:
        """Wire representation with camelCase keys."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "macroId": self.macro_id,
            "pointsMoved": self.points_moved,
            "direction": self.direction.value if self.direction else None,
            "displacementQuality": (
                self.displacement_quality.value if self.displacement_quality else None
            ),
            "liquiditySweep": self.liquidity_sweep.value if self.liquidity_sweep else None,
            "note": self.note,
            "tvLinks": list(self.tv_links),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MacroLogRecord":
        """Build a record from wire (camelCase) or column (snake_case) keys."""
        values = {_FROM_WIRE.get(k, k): v for k, v in data.items()}
        if not values.get("macro_id") or not values.get("date"):
            raise ValueError("Macro log requires 'date' and 'macroId'")

        kwargs: dict[str, Any] = {
            "date": parse_iso_date(values["date"]),
            "macro_id": str(values["macro_id"]),
        }
        if values.get("id"):
            kwargs["id"] = str(values["id"])
        if values.get("created_at"):
            kwargs["created_at"] = _parse_timestamp(values["created_at"])

        fields = {k: values[k] for k in MUTABLE_FIELDS if k in values}
        return merge_fields(cls(**kwargs), fields)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = pytz.UTC.localize(ts)
    return ts


def normalize_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and coerce a partial update.

    Accepts snake_case or camelCase keys. Enum fields take enum members or
    their string values; ``points_moved`` is coerced to float.

    Raises:
        ValueError: On an unknown field name or an invalid value.
    """
    normalized: dict[str, Any] = {}
    for raw_key, value in fields.items():
        key = _FROM_WIRE.get(raw_key, raw_key)
        if key not in MUTABLE_FIELDS:
            raise ValueError(f"Unknown macro log field '{raw_key}'")

        if value is None:
            if key == "note":
                value = ""
            elif key == "tv_links":
                value = ()
        elif key in _ENUM_FIELDS:
            enum_type = _ENUM_FIELDS[key]
            try:
                value = enum_type(value.value if isinstance(value, Enum) else str(value).upper())
            except ValueError as e:
                raise ValueError(f"Invalid {key} value {value!r}") from e
        elif key == "points_moved":
            try:
                value = float(value)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid points_moved value {value!r}") from e
        elif key == "note":
            value = str(value)
        elif key == "tv_links":
            if isinstance(value, str):
                raise ValueError("tv_links must be a list of URLs")
            value = tuple(str(link) for link in value)

        normalized[key] = value
    return normalized


def merge_fields(record: MacroLogRecord, fields: Mapping[str, Any]) -> MacroLogRecord:
    """Return ``record`` with only the provided fields replaced."""
    return replace(record, **normalize_fields(fields))


def new_record(
    log_date: date | str,
    macro_id: str,
    fields: Mapping[str, Any] | None = None,
    log_id: str | None = None,
) -> MacroLogRecord:
    """Create the lazily-born record for a ``(date, macro_id)`` pair."""
    record = MacroLogRecord(date=parse_iso_date(log_date), macro_id=macro_id)
    if log_id:
        record = replace(record, id=log_id)
    return merge_fields(record, fields or {})


def append_link(record: MacroLogRecord, url: str) -> MacroLogRecord:
    return replace(record, tv_links=record.tv_links + (url,))


def drop_link(record: MacroLogRecord, index: int) -> MacroLogRecord:
    """Remove the link at ``index``; out-of-range indexes leave the record as is."""
    if not 0 <= index < len(record.tv_links):
        return record
    links = record.tv_links[:index] + record.tv_links[index + 1 :]
    return replace(record, tv_links=links)
