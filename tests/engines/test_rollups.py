"""
Tests for rollups and the search/sort helpers over consolidated rows.
"""

from decimal import Decimal

import pytest

from aid_engines.consolidation import (
    RowTotals,
    SortColumn,
    SortDirection,
    SortState,
    apply_view,
    filter_rows,
    sort_rows,
    summarize_by_item_type,
    totals_for,
)
from aid_kernel.exceptions import InvalidSortColumnError
from tests.builders import make_row


@pytest.fixture
def rows():
    # Name-sorted, as the aggregator hands them over.
    return [
        make_row("A1", "Bicycle", 10, ordered=4, item_type="Article", value="1000"),
        make_row("A2", "Hearing Aid", 5, ordered=5, received=5, item_type="Aid", value="250"),
        make_row("A3", "Sewing Machine", 10, ordered=12, item_type="Article", value="5000"),
        make_row("A4", "Well Project", 1, item_type="Project", value="90000"),
        make_row("A5", "wheelchair", 5, ordered=1, received=1, item_type="Aid", value="400"),
    ]


class TestItemTypeSummary:
    def test_partitions_by_item_type(self, rows):
        summary = {s.item_type: s for s in summarize_by_item_type(rows)}

        assert summary["Article"].article_count == 2
        assert summary["Article"].total_quantity == 20
        assert summary["Article"].quantity_ordered == 16
        assert summary["Article"].quantity_pending == 6
        assert summary["Aid"].total_quantity == 10
        assert summary["Aid"].quantity_pending == 4
        assert summary["Project"].quantity_pending == 1

    def test_known_types_always_present_in_order(self):
        summary = summarize_by_item_type([])

        assert [s.item_type for s in summary] == ["Article", "Aid", "Project"]
        assert all(s.article_count == 0 for s in summary)

    def test_unknown_types_follow_known_ones(self, rows):
        extra = make_row("A9", "Mystery Box", 2, item_type=None)

        summary = summarize_by_item_type(rows + [extra])

        assert [s.item_type for s in summary] == ["Article", "Aid", "Project", None]
        assert summary[-1].total_quantity == 2


class TestTotals:
    def test_totals_over_rows(self, rows):
        totals = totals_for(rows)

        assert totals == RowTotals(
            article_count=5,
            total_quantity=31,
            quantity_ordered=22,
            quantity_received=6,
            quantity_pending=6 + 0 + 0 + 1 + 4,
            total_value=Decimal("96650"),
        )

    def test_totals_of_nothing(self):
        assert totals_for([]) == RowTotals()


class TestFilter:
    def test_case_insensitive_substring(self, rows):
        names = [r.article_name for r in filter_rows(rows, "WHEEL")]

        assert names == ["wheelchair"]

    def test_substring_anywhere(self, rows):
        names = [r.article_name for r in filter_rows(rows, "aid")]

        assert names == ["Hearing Aid"]

    @pytest.mark.parametrize("query", ["", None])
    def test_empty_query_returns_everything(self, rows, query):
        assert filter_rows(rows, query) == rows


class TestSort:
    def test_numeric_ascending_keeps_ties_in_name_order(self, rows):
        result = sort_rows(rows, column=SortColumn.TOTAL_QUANTITY, direction=SortDirection.ASC)

        assert [r.article_id for r in result] == ["A4", "A2", "A5", "A1", "A3"]

    def test_numeric_descending_keeps_ties_in_name_order(self, rows):
        result = sort_rows(rows, column="total_quantity", direction="desc")

        assert [r.article_id for r in result] == ["A1", "A3", "A2", "A5", "A4"]

    def test_pending_column(self, rows):
        result = sort_rows(rows, column=SortColumn.QUANTITY_PENDING)

        assert [r.quantity_pending for r in result] == [0, 0, 1, 4, 6]

    def test_value_column(self, rows):
        result = sort_rows(rows, column=SortColumn.TOTAL_VALUE, direction=SortDirection.DESC)

        assert result[0].article_id == "A4"
        assert result[-1].article_id == "A2"

    def test_text_column_uses_collation_key(self, rows):
        result = sort_rows(rows, column=SortColumn.ARTICLE_NAME, direction=SortDirection.DESC)

        assert [r.article_name for r in result] == [
            "wheelchair",
            "Well Project",
            "Sewing Machine",
            "Hearing Aid",
            "Bicycle",
        ]

    def test_text_column_ignores_accents(self):
        accented = [
            make_row("A1", "Ecz", 1),
            make_row("A2", "Éclair", 1),
            make_row("A3", "Drum", 1),
        ]

        result = sort_rows(accented, column=SortColumn.ARTICLE_NAME)

        assert [r.article_name for r in result] == ["Drum", "Éclair", "Ecz"]

    def test_unknown_column_rejected(self, rows):
        with pytest.raises(InvalidSortColumnError) as exc_info:
            sort_rows(rows, column="supplier_name")

        assert exc_info.value.code == "INVALID_SORT_COLUMN"
        assert exc_info.value.column == "supplier_name"
        assert "article_name" in exc_info.value.allowed

    def test_sort_does_not_mutate_input(self, rows):
        before = list(rows)

        sort_rows(rows, column=SortColumn.TOTAL_VALUE)

        assert rows == before


class TestSortState:
    def test_new_column_starts_ascending(self):
        state = SortState().toggle(SortColumn.TOTAL_QUANTITY)

        assert state == SortState(SortColumn.TOTAL_QUANTITY, SortDirection.ASC)

    def test_same_column_flips(self):
        state = SortState().toggle(SortColumn.TOTAL_QUANTITY).toggle(SortColumn.TOTAL_QUANTITY)

        assert state.direction is SortDirection.DESC
        assert state.toggle(SortColumn.TOTAL_QUANTITY).direction is SortDirection.ASC

    def test_switching_column_resets_direction(self):
        state = SortState(SortColumn.TOTAL_QUANTITY, SortDirection.DESC).toggle(SortColumn.ARTICLE_NAME)

        assert state == SortState(SortColumn.ARTICLE_NAME, SortDirection.ASC)


class TestApplyView:
    def test_filter_then_sort(self, rows):
        result = apply_view(
            rows,
            search="a",
            sort=SortState(SortColumn.QUANTITY_ORDERED, SortDirection.DESC),
        )

        assert [r.article_id for r in result] == ["A3", "A2", "A5"]

    def test_unsorted_state_keeps_order(self, rows):
        assert apply_view(rows, sort=SortState()) == rows
