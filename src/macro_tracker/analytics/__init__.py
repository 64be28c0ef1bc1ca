"""Statistics over the macro log."""

from macro_tracker.analytics.stats import (
    BestMacro,
    DayIndicator,
    MacroStats,
    compute_macro_stats,
    day_indicators,
    group_logs_by_date,
    macro_breakdown,
)

__all__ = [
    "BestMacro",
    "DayIndicator",
    "MacroStats",
    "compute_macro_stats",
    "day_indicators",
    "group_logs_by_date",
    "macro_breakdown",
]
