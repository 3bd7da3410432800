"""
Rollups and presentation helpers over consolidated rows.

- summarize_by_item_type(): partition by item type (Article / Aid / Project)
  and sum demand, ordered and pending quantities.
- totals_for(): column totals of a (filtered) row set.
- filter_rows(): case-insensitive substring match on article name.
- sort_rows(): stable sort by one column.  Text columns compare by
  collation key, numeric columns by value.  Descending order is produced
  with reverse=True, which keeps tied rows in their prior relative order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from aid_kernel.domain.dtos import ItemType
from aid_kernel.exceptions import InvalidSortColumnError
from aid_engines.consolidation.types import (
    ZERO,
    ConsolidatedArticle,
    ItemTypeSummary,
    RowTotals,
    SortColumn,
    SortDirection,
    SortState,
    article_name_key,
)
from aid_engines.tracer import traced_engine

_KNOWN_ITEM_TYPES: tuple[str, ...] = tuple(item_type.value for item_type in ItemType)


@traced_engine("item_type_summary", "1.0")
def summarize_by_item_type(
    rows: Iterable[ConsolidatedArticle],
) -> tuple[ItemTypeSummary, ...]:
    """
    Per item-type rollup.

    Known item types are always present (zero rows allowed) in catalog
    order; unknown or missing item types follow in first-seen order.
    """
    buckets: dict[str | None, list[ConsolidatedArticle]] = {
        item_type: [] for item_type in _KNOWN_ITEM_TYPES
    }
    for row in rows:
        buckets.setdefault(row.item_type, []).append(row)

    return tuple(
        ItemTypeSummary(
            item_type=item_type,
            article_count=len(members),
            total_quantity=sum(row.total_quantity for row in members),
            quantity_ordered=sum(row.quantity_ordered for row in members),
            quantity_pending=sum(row.quantity_pending for row in members),
        )
        for item_type, members in buckets.items()
    )


def totals_for(rows: Iterable[ConsolidatedArticle]) -> RowTotals:
    """Column totals for the given rows."""
    count = quantity = ordered = received = pending = 0
    value = ZERO
    for row in rows:
        count += 1
        quantity += row.total_quantity
        ordered += row.quantity_ordered
        received += row.quantity_received
        pending += row.quantity_pending
        value += row.total_value
    return RowTotals(
        article_count=count,
        total_quantity=quantity,
        quantity_ordered=ordered,
        quantity_received=received,
        quantity_pending=pending,
        total_value=value,
    )


def filter_rows(
    rows: Iterable[ConsolidatedArticle], query: str | None
) -> list[ConsolidatedArticle]:
    """Rows whose article name contains query, ignoring case."""
    if not query:
        return list(rows)
    needle = query.casefold()
    return [row for row in rows if needle in row.article_name.casefold()]


def parse_sort_column(column: SortColumn | str) -> SortColumn:
    """Resolve a column name to a SortColumn or raise InvalidSortColumnError."""
    if isinstance(column, SortColumn):
        return column
    try:
        return SortColumn(column)
    except ValueError:
        raise InvalidSortColumnError(
            str(column), tuple(c.value for c in SortColumn)
        ) from None


def _sort_key(column: SortColumn):
    if column.is_text:
        return lambda row: article_name_key(row.article_name or "")

    def numeric(row: ConsolidatedArticle) -> Any:
        return getattr(row, column.value) or 0

    return numeric


@traced_engine("order_sort", "1.0", fingerprint_fields=("column", "direction"))
def sort_rows(
    rows: Sequence[ConsolidatedArticle],
    *,
    column: SortColumn | str,
    direction: SortDirection | str = SortDirection.ASC,
) -> list[ConsolidatedArticle]:
    """
    Stable sort of consolidated rows by one column.

    Raises:
        InvalidSortColumnError: column is not a SortColumn value.
    """
    sort_column = parse_sort_column(column)
    descending = SortDirection(direction) is SortDirection.DESC
    return sorted(rows, key=_sort_key(sort_column), reverse=descending)


def apply_view(
    rows: Sequence[ConsolidatedArticle],
    search: str | None = None,
    sort: SortState | None = None,
) -> list[ConsolidatedArticle]:
    """Filter then sort, the way the order management table shows rows."""
    visible = filter_rows(rows, search)
    if sort is None or sort.column is None:
        return visible
    return sort_rows(visible, column=sort.column, direction=sort.direction)
