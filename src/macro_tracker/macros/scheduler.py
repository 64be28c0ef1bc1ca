"""Live macro scheduler.

``schedule()`` is recomputed from scratch on every tick: given an instant and
an already session-filtered catalog it reports which window is active, which
is next and how long until it starts.

Example:

    from macro_tracker.macros.catalog import windows_for_display
    from macro_tracker.macros.scheduler import schedule
    from macro_tracker.shared.utils import utc_now

    snapshot = schedule(utc_now(), windows_for_display(include_asia=True))
    if snapshot.active_macro:
        print(snapshot.active_macro.name, snapshot.active_status.minutes_remaining)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Sequence

from macro_tracker.macros.catalog import ALL_MACROS, MacroWindow
from macro_tracker.shared.utils import (
    eastern_fields,
    is_regular_trading_time,
    is_weekend,
    next_trading_day,
    to_eastern,
)


class MacroStatusType(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    PASSED = "passed"


@dataclass(frozen=True)
class MacroStatus:
    macro: MacroWindow
    status: MacroStatusType
    minutes_until: int = 0
    seconds_until: int = 0
    minutes_remaining: int = 0


@dataclass(frozen=True)
class ScheduleSnapshot:
    now_et: datetime
    active_macro: MacroWindow | None
    next_macro: MacroWindow | None
    minutes_to_next_macro: int
    seconds_to_next_macro: int
    macro_statuses: tuple[MacroStatus, ...]
    is_trading_hours: bool
    is_weekend: bool
    next_trading_day: str

    @property
    def active_status(self) -> MacroStatus | None:
        for status in self.macro_statuses:
            if status.status is MacroStatusType.ACTIVE:
                return status
        return None

    def status_of(self, macro_id: str) -> MacroStatus | None:
        for status in self.macro_statuses:
            if status.macro.id == macro_id:
                return status
        return None

    @property
    def countdown(self) -> str:
        """``mm:ss`` until the next macro, or an empty string."""
        if self.next_macro is None:
            return ""
        return f"{self.minutes_to_next_macro}:{self.seconds_to_next_macro:02d}"


def classify(macro: MacroWindow, now_minutes: int, second: int = 0) -> MacroStatus:
    """Status of a single window at ``now_minutes`` past midnight ET.

    The end bound is exclusive, so a window whose end equals the start of the
    next one hands over without both being active.
    """
    if now_minutes < macro.start_minutes:
        seconds_until = macro.start_minutes * 60 - (now_minutes * 60 + second)
        return MacroStatus(
            macro=macro,
            status=MacroStatusType.UPCOMING,
            minutes_until=max(macro.start_minutes - now_minutes, 0),
            seconds_until=max(seconds_until, 0),
        )
    if now_minutes < macro.end_minutes:
        return MacroStatus(
            macro=macro,
            status=MacroStatusType.ACTIVE,
            minutes_remaining=macro.end_minutes - now_minutes,
        )
    return MacroStatus(macro=macro, status=MacroStatusType.PASSED)


def schedule(now: datetime, catalog: Sequence[MacroWindow] = ALL_MACROS) -> ScheduleSnapshot:
    """Compute the schedule snapshot for ``now``.

    Args:
        now: Current instant. Naive values are read as UTC.
        catalog: Windows already filtered by the session toggles, sorted by start.

    Returns:
        Snapshot of every window's status plus the next-macro countdown.
    """
    fields = eastern_fields(now)
    now_et = to_eastern(now)
    trading_day = next_trading_day(fields.weekday)

    if is_weekend(fields.weekday):
        return ScheduleSnapshot(
            now_et=now_et,
            active_macro=None,
            next_macro=None,
            minutes_to_next_macro=0,
            seconds_to_next_macro=0,
            macro_statuses=tuple(
                MacroStatus(macro=m, status=MacroStatusType.PASSED) for m in catalog
            ),
            is_trading_hours=False,
            is_weekend=True,
            next_trading_day=trading_day,
        )

    now_minutes = fields.minutes
    statuses = tuple(classify(m, now_minutes, fields.second) for m in catalog)

    active = next((s for s in statuses if s.status is MacroStatusType.ACTIVE), None)
    upcoming = next((s for s in statuses if s.status is MacroStatusType.UPCOMING), None)

    minutes_to_next = seconds_to_next = 0
    if upcoming is not None:
        minutes_to_next, seconds_to_next = divmod(upcoming.seconds_until, 60)

    is_trading_hours = active is not None or is_regular_trading_time(now)

    return ScheduleSnapshot(
        now_et=now_et,
        active_macro=active.macro if active else None,
        next_macro=upcoming.macro if upcoming else None,
        minutes_to_next_macro=minutes_to_next,
        seconds_to_next_macro=seconds_to_next,
        macro_statuses=statuses,
        is_trading_hours=is_trading_hours,
        is_weekend=False,
        next_trading_day=trading_day,
    )
