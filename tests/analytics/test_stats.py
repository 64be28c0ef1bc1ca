"""Tests for macro log statistics."""

from datetime import date

import pytest

from macro_tracker.analytics.stats import (
    PLACEHOLDER,
    BestMacro,
    DayIndicator,
    MacroStats,
    compute_macro_stats,
    day_indicators,
    group_logs_by_date,
    logs_to_frame,
    macro_breakdown,
    round_half_up,
)
from macro_tracker.macros.logs import new_record

MONDAY = "2025-01-06"
TUESDAY = "2025-01-07"


def _log(day, macro_id, **fields):
    return new_record(day, macro_id, fields)


class TestComputeMacroStats:
    def test_rates_exclude_rows_without_data(self):
        logs = [
            _log(MONDAY, "hourly-950", direction="BULLISH"),
            _log(MONDAY, "hourly-1050", direction="BULLISH"),
            _log(MONDAY, "hourly-1150", direction="BEARISH"),
            _log(MONDAY, "hourly-1250", direction=None, pointsMoved=None),
        ]
        stats = compute_macro_stats(logs)

        assert stats.total_logs == 3
        assert stats.bullish_rate == 67
        assert stats.bearish_rate == 33
        assert stats.chop_rate == 0

    def test_empty_collection(self):
        stats = compute_macro_stats([])
        assert stats == MacroStats()
        assert stats.best_macro_label == PLACEHOLDER
        assert stats.best_day_label == PLACEHOLDER

    def test_only_placeholder_rows(self):
        logs = [_log(MONDAY, "hourly-950", tvLinks=["https://tv/1"], note="later")]
        assert compute_macro_stats(logs).total_logs == 0

    def test_points_only_rows_count(self):
        logs = [_log(MONDAY, "hourly-950", pointsMoved=1), _log(MONDAY, "hourly-1050", pointsMoved=2)]
        stats = compute_macro_stats(logs)
        assert stats.total_logs == 2
        assert stats.avg_points == 2  # 1.5 rounds half up
        assert stats.chop_rate == 100

    def test_resistance_split(self):
        logs = [
            _log(MONDAY, "hourly-950", direction="BULLISH", displacementQuality="CLEAN"),
            _log(MONDAY, "hourly-1050", direction="BEARISH", displacementQuality="CHOPPY"),
            _log(MONDAY, "hourly-1150", direction="BEARISH", displacementQuality="CHOPPY"),
            _log(MONDAY, "hourly-1250", direction="CONSOLIDATION"),
        ]
        stats = compute_macro_stats(logs)
        assert (stats.low_resistance_count, stats.high_resistance_count) == (1, 2)
        assert (stats.low_resistance_pct, stats.high_resistance_pct) == (33, 67)
        assert stats.consolidation_count == 1

    def test_no_quality_tags(self):
        stats = compute_macro_stats([_log(MONDAY, "hourly-950", direction="BULLISH")])
        assert (stats.low_resistance_pct, stats.high_resistance_pct) == (0, 0)

    @pytest.mark.parametrize(
        "directions",
        [
            ["BULLISH", "BEARISH", "CONSOLIDATION"],
            ["BULLISH"] * 2 + ["BEARISH"] * 5,
            ["BULLISH"] + ["CONSOLIDATION"] * 5,
            ["BEARISH"] * 7 + ["BULLISH"] * 4 + ["CONSOLIDATION"],
        ],
    )
    def test_rates_sum_to_100(self, directions):
        logs = [_log(MONDAY, f"m{i}", direction=d) for i, d in enumerate(directions)]
        stats = compute_macro_stats(logs)
        assert stats.bullish_rate + stats.bearish_rate + stats.chop_rate == 100
        assert stats.chop_rate >= 0

    def test_to_dict(self):
        stats = compute_macro_stats([_log(MONDAY, "hourly-950", pointsMoved=4)])
        data = stats.to_dict()
        assert data["total_logs"] == 1
        assert data["best_macro"] == {"id": "hourly-950", "name": "09:50 - 10:10 Macro", "avg_points": 4}


class TestBestMacro:
    def test_highest_average_wins(self):
        logs = [
            _log(MONDAY, "hourly-950", pointsMoved=10),
            _log(TUESDAY, "hourly-950", pointsMoved=20),
            _log(MONDAY, "hourly-1050", pointsMoved=30),
        ]
        best = compute_macro_stats(logs).best_macro
        assert best == BestMacro(id="hourly-1050", name="10:50 - 11:10 Macro", avg_points=30)

    def test_tie_goes_to_catalog_order(self):
        logs = [
            _log(MONDAY, "hourly-1050", pointsMoved=20),
            _log(MONDAY, "hourly-950", pointsMoved=20),
        ]
        assert compute_macro_stats(logs).best_macro.id == "hourly-950"

    def test_direction_only_rows_have_no_best_macro(self):
        logs = [_log(MONDAY, "hourly-950", direction="BULLISH")]
        stats = compute_macro_stats(logs)
        assert stats.best_macro is None
        assert stats.best_macro_label == PLACEHOLDER


class TestBestDay:
    def test_needs_three_samples(self):
        logs = [
            _log(MONDAY, "hourly-950", direction="BULLISH"),
            _log(MONDAY, "hourly-1050", direction="BULLISH"),
        ]
        assert compute_macro_stats(logs).best_day is None

    def test_highest_directional_rate(self):
        logs = [
            _log(MONDAY, "hourly-950", direction="BULLISH"),
            _log(MONDAY, "hourly-1050", direction="CONSOLIDATION"),
            _log(MONDAY, "hourly-1150", direction="BEARISH"),
            _log(TUESDAY, "hourly-950", direction="BULLISH"),
            _log(TUESDAY, "hourly-1050", direction="BEARISH"),
            _log(TUESDAY, "hourly-1150", direction="BEARISH"),
        ]
        stats = compute_macro_stats(logs)
        assert stats.best_day == "Tuesday"
        assert stats.best_day_label == "Tuesday"

    def test_tie_goes_to_earliest_weekday(self):
        logs = [
            _log(TUESDAY, "hourly-950", direction="BULLISH"),
            _log(TUESDAY, "hourly-1050", direction="BULLISH"),
            _log(TUESDAY, "hourly-1150", direction="BULLISH"),
            _log(MONDAY, "hourly-950", direction="BEARISH"),
            _log(MONDAY, "hourly-1050", direction="BEARISH"),
            _log(MONDAY, "hourly-1150", direction="BEARISH"),
        ]
        assert compute_macro_stats(logs).best_day == "Monday"

    def test_consolidation_only_has_no_best_day(self):
        logs = [_log(MONDAY, f"hourly-{h}50", direction="CONSOLIDATION") for h in (9, 10, 11)]
        assert compute_macro_stats(logs).best_day is None

    def test_same_weekday_across_weeks(self):
        logs = [
            _log("2025-01-06", "hourly-950", direction="BULLISH"),
            _log("2025-01-13", "hourly-950", direction="BULLISH"),
            _log("2025-01-20", "hourly-950", direction="BEARISH"),
        ]
        assert compute_macro_stats(logs).best_day == "Monday"


class TestGrouping:
    def test_group_logs_by_date(self):
        logs = [
            _log(MONDAY, "hourly-950", direction="BULLISH"),
            _log(MONDAY, "hourly-1050"),
            _log(TUESDAY, "hourly-950"),
        ]
        grouped = group_logs_by_date(logs)
        assert set(grouped) == {MONDAY, TUESDAY}
        assert [r.macro_id for r in grouped[MONDAY]] == ["hourly-950", "hourly-1050"]

    def test_day_indicators(self):
        logs = [
            _log(MONDAY, "hourly-950", direction="BULLISH"),
            _log(MONDAY, "hourly-1050", direction="BEARISH"),
            _log(MONDAY, "hourly-1150", direction="BULLISH"),
            _log(MONDAY, "hourly-1250"),
        ]
        assert day_indicators(logs) == DayIndicator(count=4, bullish=2, bearish=1)

    def test_day_indicators_empty(self):
        assert day_indicators([]) is None


class TestBreakdown:
    def test_breakdown_in_catalog_order(self):
        logs = [
            _log(MONDAY, "hourly-1050", pointsMoved=10, direction="BEARISH"),
            _log(MONDAY, "london-250", pointsMoved=5, direction="BULLISH"),
            _log(TUESDAY, "london-250", pointsMoved=6, direction="CONSOLIDATION"),
            _log(TUESDAY, "hourly-950", note="links only"),
        ]
        table = macro_breakdown(logs)

        assert list(table.index) == ["london-250", "hourly-1050"]
        assert list(table.columns) == [
            "name",
            "category",
            "count",
            "avg_points",
            "bullish",
            "bearish",
            "consolidation",
        ]
        assert table.loc["london-250", "count"] == 2
        assert table.loc["london-250", "category"] == "London"
        assert table.loc["hourly-1050", "category"] == "RTH"
        assert table.loc["london-250", "avg_points"] == 5.5
        assert table.loc["hourly-1050", "bearish"] == 1

    def test_breakdown_empty(self):
        assert macro_breakdown([]).empty


def test_logs_to_frame_dates():
    frame = logs_to_frame([_log(MONDAY, "hourly-950", pointsMoved=3)])
    assert frame.loc[0, "date"].date() == date(2025, 1, 6)
    assert frame.loc[0, "points_moved"] == 3.0


@pytest.mark.parametrize("value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (66.666, 67), (33.333, 33)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
