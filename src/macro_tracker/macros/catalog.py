"""Macro window catalog.

All times are US Eastern wall-clock, half-open ``[start, end)`` and contained
in a single calendar day. Hourly macros cover the last 10 minutes of an hour
and the first 10 minutes of the next one; the RTH closing macros follow the
cash-session close.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence


class MacroCategory(str, Enum):
    OVERNIGHT = "overnight"
    LONDON = "london"
    RTH = "rth"
    RTH_CLOSE = "rth_close"
    ASIA = "asia"


class Session(str, Enum):
    """Session toggle that gates a group of categories."""

    ASIA = "asia"
    LONDON = "london"
    NY = "ny"


CATEGORY_SESSION = {
    MacroCategory.ASIA: Session.ASIA,
    MacroCategory.LONDON: Session.LONDON,
    MacroCategory.OVERNIGHT: Session.NY,
    MacroCategory.RTH: Session.NY,
    MacroCategory.RTH_CLOSE: Session.NY,
}

CATEGORY_LABELS = {
    MacroCategory.OVERNIGHT: "Overnight",
    MacroCategory.LONDON: "London",
    MacroCategory.RTH: "RTH",
    MacroCategory.RTH_CLOSE: "RTH Close",
    MacroCategory.ASIA: "Asia",
}


class CatalogError(ValueError):
    """Raised when a window catalog breaks ordering or overlap rules."""


@dataclass(frozen=True)
class MacroWindow:
    id: str
    name: str
    short_name: str
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    category: MacroCategory
    description: str = ""

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute

    @property
    def session(self) -> Session:
        return CATEGORY_SESSION[self.category]

    @property
    def label(self) -> str:
        return (
            f"{format_macro_time(self.start_hour, self.start_minute)} - "
            f"{format_macro_time(self.end_hour, self.end_minute)}"
        )

    def contains(self, minutes: int) -> bool:
        """True if ``minutes`` after midnight falls inside ``[start, end)``."""
        return self.start_minutes <= minutes < self.end_minutes


def format_macro_time(hour: int, minute: int) -> str:
    """Format a 24h wall-clock time as ``9:05 AM``."""
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display_hour}:{minute:02d} {period}"


def _hourly(
    prefix: str,
    hour: int,
    category: MacroCategory,
    description: str,
) -> MacroWindow:
    """Build an ``hh:50 - hh+1:10`` macro window."""
    return MacroWindow(
        id=f"{prefix}-{hour}50",
        name=f"{hour:02d}:50 - {hour + 1:02d}:10 Macro",
        short_name=f"{hour:02d}:50",
        start_hour=hour,
        start_minute=50,
        end_hour=hour + 1,
        end_minute=10,
        category=category,
        description=description,
    )


LONDON_MACROS = [
    _hourly("london", hour, MacroCategory.LONDON, "London session macro")
    for hour in (0, 1, 2, 3, 4, 5)
]

OVERNIGHT_MACROS = [
    _hourly("overnight", hour, MacroCategory.OVERNIGHT, "NY pre-market macro")
    for hour in (6, 7, 8)
]

HOURLY_MACROS = [
    _hourly("hourly", hour, MacroCategory.RTH, "Hourly macro - last 10 + first 10 minutes")
    for hour in (9, 10, 11, 12, 13)
]

RTH_CLOSE_MACROS = [
    MacroWindow(
        id="rth-close-1",
        name="PM Silver Bullet",
        short_name="PM SB",
        start_hour=14,
        start_minute=50,
        end_hour=15,
        end_minute=10,
        category=MacroCategory.RTH_CLOSE,
        description="First RTH closing macro window",
    ),
    MacroWindow(
        id="rth-close-2",
        name="Power Hour",
        short_name="PWR HR",
        start_hour=15,
        start_minute=15,
        end_hour=15,
        end_minute=45,
        category=MacroCategory.RTH_CLOSE,
        description="Middle RTH closing macro window",
    ),
    MacroWindow(
        id="rth-close-3",
        name="Market Close",
        short_name="CLOSE",
        start_hour=15,
        start_minute=50,
        end_hour=16,
        end_minute=10,
        category=MacroCategory.RTH_CLOSE,
        description="Final RTH closing macro window",
    ),
]

ASIA_MACROS = [
    _hourly("asia", hour, MacroCategory.ASIA, "Asia range macro")
    for hour in (18, 19, 20, 21, 22)
]


def sort_windows(windows: Iterable[MacroWindow]) -> list[MacroWindow]:
    """Sort by start time; ties keep their original order."""
    return sorted(windows, key=lambda w: w.start_minutes)


ALL_MACROS: list[MacroWindow] = sort_windows(
    LONDON_MACROS + OVERNIGHT_MACROS + HOURLY_MACROS + RTH_CLOSE_MACROS + ASIA_MACROS
)


@dataclass(frozen=True)
class SessionFilters:
    """Which session groups participate in scheduling and display."""

    show_asia_macros: bool = False
    show_london_macros: bool = True
    show_ny_macros: bool = True

    def includes(self, session: Session) -> bool:
        return {
            Session.ASIA: self.show_asia_macros,
            Session.LONDON: self.show_london_macros,
            Session.NY: self.show_ny_macros,
        }[session]

    def apply(self, catalog: Sequence[MacroWindow]) -> list[MacroWindow]:
        return sort_windows(w for w in catalog if self.includes(w.session))


def windows_for_display(
    include_asia: bool = False,
    include_london: bool = True,
    include_ny: bool = True,
) -> list[MacroWindow]:
    """Catalog entries for the enabled sessions, ordered by start time."""
    filters = SessionFilters(
        show_asia_macros=include_asia,
        show_london_macros=include_london,
        show_ny_macros=include_ny,
    )
    return filters.apply(ALL_MACROS)


_HOURLY_ID = re.compile(r"^hourly-(\d+)50$")


def find_macro_by_id(
    macro_id: str, catalog: Sequence[MacroWindow] = ALL_MACROS
) -> MacroWindow | None:
    """Look up a window by id.

    Hourly ids are also matched with or without a leading zero on the hour,
    so ``hourly-0950`` finds ``hourly-950``.
    """
    by_id = {window.id: window for window in catalog}
    if macro_id in by_id:
        return by_id[macro_id]

    match = _HOURLY_ID.match(macro_id)
    if match:
        hour = int(match.group(1))
        return by_id.get(f"hourly-{hour:02d}50") or by_id.get(f"hourly-{hour}50")
    return None


def validate_catalog(catalog: Sequence[MacroWindow]) -> None:
    """Check the ordering and overlap rules of a catalog.

    Raises:
        CatalogError: If ids repeat, a window is empty, inverted or outside a
            single day, the catalog is not sorted by start, or two windows overlap.
    """
    seen: set[str] = set()
    previous: MacroWindow | None = None

    for window in catalog:
        if window.id in seen:
            raise CatalogError(f"Duplicate macro id '{window.id}'")
        seen.add(window.id)

        for hour, minute in (
            (window.start_hour, window.start_minute),
            (window.end_hour, window.end_minute),
        ):
            if not (0 <= hour < 24 and 0 <= minute < 60):
                raise CatalogError(f"'{window.id}' has an invalid time {hour}:{minute}")

        if window.start_minutes >= window.end_minutes:
            raise CatalogError(f"'{window.id}' must end after it starts on the same day")

        if previous is not None:
            if window.start_minutes < previous.start_minutes:
                raise CatalogError(f"'{window.id}' is out of order after '{previous.id}'")
            if window.start_minutes < previous.end_minutes:
                raise CatalogError(f"'{window.id}' overlaps '{previous.id}'")
        previous = window
