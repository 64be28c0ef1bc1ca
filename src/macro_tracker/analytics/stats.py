"""Macro log statistics.

Rollups are computed over rows that carry data (a direction or a points
value); placeholder rows holding only links or a note are ignored. Every
function is pure and takes a snapshot of the log collection.
"""

from collections import defaultdict
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

import pandas as pd

from macro_tracker.macros.catalog import ALL_MACROS, CATEGORY_LABELS, MacroWindow
from macro_tracker.macros.logs import Direction, DisplacementQuality, MacroLogRecord
from macro_tracker.shared.utils import WEEKDAY_NAMES

PLACEHOLDER = "—"

# Weekdays need this many rows before they can be named best day
MIN_DAY_SAMPLES = 3

FRAME_COLUMNS = [
    "id",
    "date",
    "macro_id",
    "points_moved",
    "direction",
    "displacement_quality",
    "liquidity_sweep",
    "has_data",
]


def round_half_up(value: float) -> int:
    """Round .5 away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _value(member) -> str | None:
    return member.value if member is not None else None


def logs_to_frame(logs: Iterable[MacroLogRecord]) -> pd.DataFrame:
    """Tabulate records; ``date`` becomes a naive calendar datetime."""
    frame = pd.DataFrame.from_records(
        [
            {
                "id": log.id,
                "date": log.date,
                "macro_id": log.macro_id,
                "points_moved": log.points_moved,
                "direction": _value(log.direction),
                "displacement_quality": _value(log.displacement_quality),
                "liquidity_sweep": _value(log.liquidity_sweep),
                "has_data": log.has_data,
            }
            for log in logs
        ],
        columns=FRAME_COLUMNS,
    )
    frame["date"] = pd.to_datetime(frame["date"])
    frame["points_moved"] = pd.to_numeric(frame["points_moved"], errors="coerce")
    frame["has_data"] = frame["has_data"].astype(bool)
    return frame


@dataclass(frozen=True)
class BestMacro:
    id: str
    name: str
    avg_points: int


@dataclass(frozen=True)
class DayIndicator:
    count: int
    bullish: int
    bearish: int


@dataclass(frozen=True)
class MacroStats:
    total_logs: int = 0
    bullish_count: int = 0
    bearish_count: int = 0
    consolidation_count: int = 0
    bullish_rate: int = 0
    bearish_rate: int = 0
    chop_rate: int = 0
    avg_points: int = 0
    low_resistance_count: int = 0
    high_resistance_count: int = 0
    low_resistance_pct: int = 0
    high_resistance_pct: int = 0
    best_macro: BestMacro | None = None
    best_day: str | None = None

    @property
    def best_macro_label(self) -> str:
        return self.best_macro.name if self.best_macro else PLACEHOLDER

    @property
    def best_day_label(self) -> str:
        return self.best_day or PLACEHOLDER

    def to_dict(self) -> dict:
        return asdict(self)


def _best_macro(frame: pd.DataFrame, catalog: Sequence[MacroWindow]) -> BestMacro | None:
    with_points = frame.dropna(subset=["points_moved"])
    if with_points.empty:
        return None

    means = with_points.groupby("macro_id", sort=False)["points_moved"].mean()
    position = {w.id: i for i, w in enumerate(catalog)}
    # Highest mean wins; ties go to catalog order, then to first appearance
    ranked = sorted(
        means.items(),
        key=lambda item: (-item[1], position.get(item[0], len(position))),
    )
    macro_id, mean = ranked[0]
    window = next((w for w in catalog if w.id == macro_id), None)
    return BestMacro(
        id=macro_id,
        name=window.name if window else macro_id,
        avg_points=round_half_up(mean),
    )


def _best_day(frame: pd.DataFrame) -> str | None:
    directional = frame["direction"].isin([Direction.BULLISH.value, Direction.BEARISH.value])
    by_day = (
        frame.assign(weekday=frame["date"].dt.dayofweek, directional=directional)
        .groupby("weekday")
        .agg(total=("directional", "size"), directional=("directional", "sum"))
    )
    qualified = by_day[by_day["total"] >= MIN_DAY_SAMPLES]
    if qualified.empty:
        return None

    rates = qualified["directional"] / qualified["total"]
    if rates.max() <= 0:
        return None
    # idxmax keeps the earliest weekday on ties
    return WEEKDAY_NAMES[int(rates.idxmax())]


def compute_macro_stats(
    logs: Iterable[MacroLogRecord], catalog: Sequence[MacroWindow] = ALL_MACROS
) -> MacroStats:
    """Aggregate the log collection into dashboard statistics.

    Returns neutral defaults (zeros, no best macro/day) for an empty collection.
    """
    frame = logs_to_frame(logs)
    frame = frame[frame["has_data"]]
    total = len(frame)
    if total == 0:
        return MacroStats()

    direction = frame["direction"]
    bullish = int((direction == Direction.BULLISH.value).sum())
    bearish = int((direction == Direction.BEARISH.value).sum())
    consolidation = int((direction == Direction.CONSOLIDATION.value).sum())

    points = frame["points_moved"].dropna()
    avg_points = round_half_up(points.mean()) if not points.empty else 0

    quality = frame["displacement_quality"]
    low = int((quality == DisplacementQuality.CLEAN.value).sum())
    high = int((quality == DisplacementQuality.CHOPPY.value).sum())
    tagged = (low + high) or 1

    bullish_rate = round_half_up(bullish / total * 100)
    bearish_rate = round_half_up(bearish / total * 100)

    return MacroStats(
        total_logs=total,
        bullish_count=bullish,
        bearish_count=bearish,
        consolidation_count=consolidation,
        bullish_rate=bullish_rate,
        bearish_rate=bearish_rate,
        chop_rate=100 - bullish_rate - bearish_rate,
        avg_points=avg_points,
        low_resistance_count=low,
        high_resistance_count=high,
        low_resistance_pct=round_half_up(low / tagged * 100),
        high_resistance_pct=round_half_up(high / tagged * 100),
        best_macro=_best_macro(frame, catalog),
        best_day=_best_day(frame),
    )


def group_logs_by_date(logs: Iterable[MacroLogRecord]) -> dict[str, list[MacroLogRecord]]:
    """Map ISO date to every log of that date, one entry per macro window."""
    grouped: dict[str, list[MacroLogRecord]] = defaultdict(list)
    for log in logs:
        grouped[log.date.isoformat()].append(log)
    return dict(grouped)


def day_indicators(logs: Sequence[MacroLogRecord]) -> DayIndicator | None:
    """Calendar cell summary for one date's logs."""
    if not logs:
        return None
    return DayIndicator(
        count=len(logs),
        bullish=sum(1 for log in logs if log.direction is Direction.BULLISH),
        bearish=sum(1 for log in logs if log.direction is Direction.BEARISH),
    )


def macro_breakdown(
    logs: Iterable[MacroLogRecord], catalog: Sequence[MacroWindow] = ALL_MACROS
) -> pd.DataFrame:
    """Per-window counts and average points, in catalog order.

    Windows without data rows are omitted.
    """
    frame = logs_to_frame(logs)
    frame = frame[frame["has_data"]]
    columns = ["name", "category", "count", "avg_points", "bullish", "bearish", "consolidation"]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    direction = frame["direction"]
    frame = frame.assign(
        bullish=direction == Direction.BULLISH.value,
        bearish=direction == Direction.BEARISH.value,
        consolidation=direction == Direction.CONSOLIDATION.value,
    )
    table = frame.groupby("macro_id").agg(
        count=("id", "size"),
        avg_points=("points_moved", "mean"),
        bullish=("bullish", "sum"),
        bearish=("bearish", "sum"),
        consolidation=("consolidation", "sum"),
    )

    names = {w.id: w.name for w in catalog}
    categories = {w.id: CATEGORY_LABELS[w.category] for w in catalog}
    order = [w.id for w in catalog if w.id in table.index]
    order += [macro_id for macro_id in table.index if macro_id not in names]
    table = table.loc[order]
    table.insert(0, "name", [names.get(macro_id, macro_id) for macro_id in table.index])
    table.insert(1, "category", [categories.get(macro_id, "") for macro_id in table.index])
    table["avg_points"] = table["avg_points"].round(1)
    return table[columns]
