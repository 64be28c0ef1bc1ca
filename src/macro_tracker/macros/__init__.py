"""Macro window catalog, live scheduler and the observation log."""

from macro_tracker.macros.catalog import (
    ALL_MACROS,
    MacroCategory,
    MacroWindow,
    SessionFilters,
    find_macro_by_id,
    windows_for_display,
)
from macro_tracker.macros.logs import (
    Direction,
    DisplacementQuality,
    LiquiditySweep,
    MacroLogRecord,
)
from macro_tracker.macros.scheduler import MacroStatus, MacroStatusType, ScheduleSnapshot, schedule

__all__ = [
    "ALL_MACROS",
    "MacroCategory",
    "MacroWindow",
    "SessionFilters",
    "find_macro_by_id",
    "windows_for_display",
    "Direction",
    "DisplacementQuality",
    "LiquiditySweep",
    "MacroLogRecord",
    "MacroStatus",
    "MacroStatusType",
    "ScheduleSnapshot",
    "schedule",
]
