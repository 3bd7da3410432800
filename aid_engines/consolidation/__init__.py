"""Order consolidation engines: demand aggregation, order reconciliation, rollups."""

from aid_engines.consolidation.demand import DemandAggregator, aggregate_demand
from aid_engines.consolidation.reconciler import (
    DEFAULT_RECEIVED_STATUS,
    OrderReconciler,
    demand_only,
)
from aid_engines.consolidation.rollups import (
    apply_view,
    filter_rows,
    parse_sort_column,
    sort_rows,
    summarize_by_item_type,
    totals_for,
)
from aid_engines.consolidation.types import (
    ArticleOrderSummary,
    ConsolidatedArticle,
    DemandBreakdown,
    DemandEntry,
    DemandResult,
    ItemTypeSummary,
    OrderConsolidation,
    RowTotals,
    SortColumn,
    SortDirection,
    SortState,
    article_name_key,
)

__all__ = [
    "DEFAULT_RECEIVED_STATUS",
    "ArticleOrderSummary",
    "ConsolidatedArticle",
    "DemandAggregator",
    "DemandBreakdown",
    "DemandEntry",
    "DemandResult",
    "ItemTypeSummary",
    "OrderConsolidation",
    "OrderReconciler",
    "RowTotals",
    "SortColumn",
    "SortDirection",
    "SortState",
    "aggregate_demand",
    "apply_view",
    "article_name_key",
    "demand_only",
    "filter_rows",
    "parse_sort_column",
    "sort_rows",
    "summarize_by_item_type",
    "totals_for",
]
