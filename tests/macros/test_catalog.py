"""Tests for the macro window catalog."""

import pytest

from macro_tracker.macros.catalog import (
    ALL_MACROS,
    ASIA_MACROS,
    HOURLY_MACROS,
    LONDON_MACROS,
    RTH_CLOSE_MACROS,
    CatalogError,
    MacroCategory,
    MacroWindow,
    Session,
    SessionFilters,
    find_macro_by_id,
    format_macro_time,
    validate_catalog,
    windows_for_display,
)


def _window(macro_id, start, end, category=MacroCategory.RTH):
    return MacroWindow(
        id=macro_id,
        name=macro_id,
        short_name=macro_id,
        start_hour=start[0],
        start_minute=start[1],
        end_hour=end[0],
        end_minute=end[1],
        category=category,
    )


class TestBuiltInCatalog:
    def test_catalog_is_valid(self):
        validate_catalog(ALL_MACROS)

    def test_ids_are_unique(self):
        ids = [w.id for w in ALL_MACROS]
        assert len(ids) == len(set(ids))

    def test_sorted_by_start(self):
        starts = [w.start_minutes for w in ALL_MACROS]
        assert starts == sorted(starts)

    def test_hourly_window_shape(self):
        window = find_macro_by_id("hourly-950")
        assert window is not None
        assert (window.start_hour, window.start_minute) == (9, 50)
        assert (window.end_hour, window.end_minute) == (10, 10)
        assert window.name == "09:50 - 10:10 Macro"
        assert window.category is MacroCategory.RTH

    def test_rth_close_windows(self):
        assert [w.id for w in RTH_CLOSE_MACROS] == ["rth-close-1", "rth-close-2", "rth-close-3"]
        assert RTH_CLOSE_MACROS[-1].end_minutes == 16 * 60 + 10

    def test_sessions(self):
        assert {w.session for w in LONDON_MACROS} == {Session.LONDON}
        assert {w.session for w in ASIA_MACROS} == {Session.ASIA}
        assert {w.session for w in HOURLY_MACROS + RTH_CLOSE_MACROS} == {Session.NY}

    def test_label(self):
        window = find_macro_by_id("rth-close-2")
        assert window.label == "3:15 PM - 3:45 PM"

    def test_find_unknown_id(self):
        assert find_macro_by_id("nope") is None

    @pytest.mark.parametrize("macro_id", ["hourly-0950", "hourly-950"])
    def test_find_padded_hourly_id(self, macro_id):
        assert find_macro_by_id(macro_id).id == "hourly-950"

    def test_padded_match_stays_within_hourly_windows(self):
        assert find_macro_by_id("hourly-1050").id == "hourly-1050"
        assert find_macro_by_id("hourly-0850") is None


@pytest.mark.parametrize(
    "hour,minute,expected",
    [
        (0, 50, "12:50 AM"),
        (9, 5, "9:05 AM"),
        (12, 0, "12:00 PM"),
        (15, 45, "3:45 PM"),
    ],
)
def test_format_macro_time(hour, minute, expected):
    assert format_macro_time(hour, minute) == expected


class TestSessionFilters:
    def test_defaults_hide_asia(self):
        windows = windows_for_display()
        assert windows
        assert all(w.session is not Session.ASIA for w in windows)
        assert any(w.session is Session.LONDON for w in windows)

    def test_include_asia(self):
        windows = windows_for_display(include_asia=True)
        assert len(windows) == len(ALL_MACROS)

    def test_only_ny(self):
        windows = windows_for_display(include_london=False)
        assert {w.session for w in windows} == {Session.NY}

    def test_nothing_enabled(self):
        filters = SessionFilters(
            show_asia_macros=False, show_london_macros=False, show_ny_macros=False
        )
        assert filters.apply(ALL_MACROS) == []

    def test_filtered_output_stays_sorted(self):
        filters = SessionFilters(show_asia_macros=True)
        windows = filters.apply(list(reversed(ALL_MACROS)))
        assert [w.id for w in windows] == [w.id for w in ALL_MACROS]


class TestValidateCatalog:
    def test_duplicate_id(self):
        catalog = [_window("a", (9, 0), (9, 10)), _window("a", (10, 0), (10, 10))]
        with pytest.raises(CatalogError, match="Duplicate"):
            validate_catalog(catalog)

    def test_empty_window(self):
        with pytest.raises(CatalogError, match="end after"):
            validate_catalog([_window("a", (9, 0), (9, 0))])

    def test_invalid_time(self):
        with pytest.raises(CatalogError, match="invalid time"):
            validate_catalog([_window("a", (9, 0), (9, 75))])

    def test_out_of_order(self):
        catalog = [_window("a", (10, 0), (10, 10)), _window("b", (9, 0), (9, 10))]
        with pytest.raises(CatalogError, match="out of order"):
            validate_catalog(catalog)

    def test_overlap(self):
        catalog = [_window("a", (9, 0), (9, 30)), _window("b", (9, 20), (9, 40))]
        with pytest.raises(CatalogError, match="overlaps"):
            validate_catalog(catalog)

    def test_touching_windows_are_allowed(self):
        validate_catalog([_window("a", (9, 0), (9, 30)), _window("b", (9, 30), (10, 0))])

    def test_catalog_error_is_value_error(self):
        assert issubclass(CatalogError, ValueError)
