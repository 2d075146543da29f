"""Tests for the news list filter state."""

from datetime import date, datetime

import pytest

from news_admin.categories import Category
from news_admin.services.filters import (
    MAX_PAGE,
    MAX_PAGE_SIZE,
    MAX_SQL_INT,
    FilterState,
    SortDirection,
    SortField,
)


class TestUpdate:
    """Tests for FilterState.update."""

    @pytest.mark.parametrize(
        "field,value",
        [
            ("search_text", "election"),
            ("category", "disasters"),
            ("source_id", 3),
            ("start_date", "2024-01-01"),
            ("end_date", "2024-01-31"),
            ("min_score", "2"),
            ("page_size", 10),
            ("sort_field", "priority_score"),
            ("sort_direction", "asc"),
        ],
    )
    def test_non_page_update_resets_page(self, field, value):
        state = FilterState(page=4)
        updated = state.update(field, value)
        assert updated.page == 1

    def test_page_update_keeps_page(self):
        state = FilterState().update("page", 3)
        assert state.page == 3

    def test_update_returns_new_state(self):
        state = FilterState()
        updated = state.update("category", "conflicts")
        assert state.category is None
        assert updated.category is Category.conflicts

    def test_state_is_immutable(self):
        state = FilterState()
        with pytest.raises(Exception):
            state.page = 2

    def test_unknown_field_raises(self):
        with pytest.raises(ValueError):
            FilterState().update("colour", "red")


class TestNormalization:
    """Malformed input is folded into 'unset' instead of raising."""

    @pytest.mark.parametrize("value", ["", "   ", "abc", "-1", "nan", "inf", None])
    def test_bad_min_score_is_unset(self, value):
        assert FilterState().update("min_score", value).min_score is None

    def test_min_score_zero_is_kept(self):
        assert FilterState().update("min_score", "0").min_score == 0.0

    def test_min_score_parses_decimal(self):
        assert FilterState().update("min_score", " 1.5 ").min_score == 1.5

    @pytest.mark.parametrize("value", ["", "any", "unknown_category", None])
    def test_category_unset_markers(self, value):
        assert FilterState().update("category", value).category is None

    @pytest.mark.parametrize("value", ["", "any", "x", "0", None])
    def test_source_id_unset_markers(self, value):
        assert FilterState().update("source_id", value).source_id is None

    def test_source_id_from_string(self):
        assert FilterState().update("source_id", "7").source_id == 7

    def test_dates_accept_date_datetime_and_iso(self):
        state = (
            FilterState()
            .update("start_date", datetime(2024, 3, 1, 15, 30))
            .update("end_date", "2024-03-31")
        )
        assert state.start_date == date(2024, 3, 1)
        assert state.end_date == date(2024, 3, 31)

    def test_unparseable_date_is_unset(self):
        assert FilterState().update("start_date", "31/03/2024").start_date is None

    @pytest.mark.parametrize("value", [0, -3, "x", None])
    def test_invalid_page_falls_back_to_first(self, value):
        assert FilterState(page=5).update("page", value).page == 1

    def test_unknown_sort_falls_back_to_default(self):
        state = FilterState.from_params(sort_field="title", sort_direction="sideways")
        assert state.sort_field is SortField.fetched_at
        assert state.sort_direction is SortDirection.desc

    def test_from_params_skips_missing(self):
        state = FilterState.from_params(category="politics_br", page=2, search_text=None)
        assert state.category is Category.politics_br
        assert state.page == 2
        assert state.search_text == ""


class TestReset:

    def test_reset_clears_filters_and_keeps_page_size(self):
        state = FilterState(
            search_text="war",
            category=Category.conflicts,
            min_score=1,
            page=3,
            page_size=20,
            sort_field=SortField.priority_score,
            sort_direction=SortDirection.asc,
        )
        reset = state.reset()
        assert reset == FilterState(page_size=20)
        assert reset.sort_field is SortField.fetched_at
        assert reset.sort_direction is SortDirection.desc


class TestToggleSort:

    def test_same_field_flips_direction(self):
        state = FilterState()
        toggled = state.toggle_sort("fetched_at")
        assert toggled.sort_direction is SortDirection.asc

    def test_toggle_twice_restores_direction(self):
        state = FilterState(sort_field=SortField.priority_score, sort_direction=SortDirection.asc)
        assert state.toggle_sort("priority_score").toggle_sort("priority_score").sort_direction is SortDirection.asc

    @pytest.mark.parametrize("direction", [SortDirection.asc, SortDirection.desc])
    def test_new_field_sorts_descending(self, direction):
        state = FilterState(sort_field=SortField.fetched_at, sort_direction=direction)
        toggled = state.toggle_sort(SortField.priority_score)
        assert toggled.sort_field is SortField.priority_score
        assert toggled.sort_direction is SortDirection.desc

    def test_toggle_resets_page(self):
        assert FilterState(page=3).toggle_sort("priority_score").page == 1
        assert FilterState(page=3).toggle_sort("fetched_at").page == 1

    def test_unknown_field_raises(self):
        with pytest.raises(ValueError):
            FilterState().toggle_sort("title")


class TestHasActiveFilters:

    def test_default_state_has_none(self):
        assert FilterState().has_active_filters() is False

    def test_search_alone_does_not_count(self):
        assert FilterState().update("search_text", "election").has_active_filters() is False

    @pytest.mark.parametrize(
        "field,value",
        [
            ("category", "disasters"),
            ("source_id", 1),
            ("start_date", "2024-01-01"),
            ("end_date", "2024-01-01"),
            ("min_score", 0),
        ],
    )
    def test_each_filter_counts(self, field, value):
        assert FilterState().update(field, value).has_active_filters() is True

    def test_offset(self):
        assert FilterState(page=3, page_size=10).offset == 20


class TestBounds:
    """Values too large for an SQL INTEGER never reach the store."""

    def test_huge_page_is_clamped(self):
        assert FilterState(page=10**20).page == MAX_PAGE

    def test_huge_page_size_is_clamped(self):
        assert FilterState(page_size=10**20).page_size == MAX_PAGE_SIZE

    def test_huge_source_id_is_unset(self):
        assert FilterState().update("source_id", str(10**20)).source_id is None

    def test_largest_offset_fits_sql_integer(self):
        state = FilterState(page=10**20, page_size=10**20)
        assert state.offset <= MAX_SQL_INT
