"""
Module: aid_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    aid_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import aid_kernel.domain, aid_kernel.logging_config and
    aid_kernel.exceptions (and sibling engine modules).
    MUST NOT import aid_services or open database sessions.

Invariants enforced:
    - Determinism: identical inputs always produce identical outputs,
      including row order.
    - Decimal-only arithmetic for values; quantities are ints.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``aid_engines.tracer``), emitting AID_ENGINE_TRACE log records.

Usage:
    from aid_engines import DemandAggregator, OrderReconciler
    from aid_engines import filter_rows, sort_rows, totals_for
"""

from aid_engines.consolidation import (
    ArticleOrderSummary,
    ConsolidatedArticle,
    DemandAggregator,
    DemandBreakdown,
    DemandEntry,
    DemandResult,
    ItemTypeSummary,
    OrderConsolidation,
    OrderReconciler,
    RowTotals,
    SortColumn,
    SortDirection,
    SortState,
    aggregate_demand,
    apply_view,
    article_name_key,
    demand_only,
    filter_rows,
    parse_sort_column,
    sort_rows,
    summarize_by_item_type,
    totals_for,
)
from aid_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
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
    "compute_input_fingerprint",
    "demand_only",
    "filter_rows",
    "parse_sort_column",
    "sort_rows",
    "summarize_by_item_type",
    "totals_for",
    "traced_engine",
]
