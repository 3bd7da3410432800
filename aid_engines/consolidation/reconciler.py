"""
Order Reconciler.

Merges supplier order figures into the demand table produced by the
Demand Aggregator.

    quantity_ordered  = sum(quantity_ordered) over every order entry of the
                        article, whatever its status
    quantity_received = sum(quantity_ordered) over entries whose status is
                        the delivery-complete marker
    quantity_pending  = max(0, total_quantity - quantity_ordered)
    value_ordered     = sum(total_amount) over entries that are not cancelled

Articles with demand but no order entries get explicit zeros.  Orders for
articles outside the demand id set are ignored: the order stage only ever
asks for the demanded ids, so such rows indicate a caller bug and are
logged, not merged.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from decimal import Decimal
from types import MappingProxyType

from aid_kernel.domain.dtos import ArticleId, OrderLine
from aid_kernel.logging_config import get_logger
from aid_engines.consolidation.types import (
    ZERO,
    ArticleOrderSummary,
    ConsolidatedArticle,
    DemandResult,
    OrderConsolidation,
)
from aid_engines.tracer import traced_engine

logger = get_logger("engines.consolidation.reconciler")

DEFAULT_RECEIVED_STATUS = "received"
CANCELLED_STATUS = "cancelled"


class OrderReconciler:
    """
    Pure stage-2 engine.

    Contract:
        - summarize() returns a summary for EVERY requested article id,
          empty ones included.
        - reconcile() preserves the demand table's row order.
    """

    def __init__(self, received_status: str = DEFAULT_RECEIVED_STATUS) -> None:
        self._received_status = received_status

    @traced_engine("order_summary", "1.0")
    def summarize(
        self,
        article_ids: Iterable[ArticleId],
        orders: Iterable[OrderLine],
    ) -> dict[ArticleId, ArticleOrderSummary]:
        """
        Aggregate order entries per article.

        Args:
            article_ids: The ids the summaries are wanted for.
            orders: Order entries, newest first.  Per-article order lists
                keep this order.
        """
        ids = list(dict.fromkeys(article_ids))
        ordered: dict[ArticleId, int] = {article_id: 0 for article_id in ids}
        received: dict[ArticleId, int] = dict(ordered)
        value: dict[ArticleId, Decimal] = {article_id: ZERO for article_id in ids}
        lines: dict[ArticleId, list[OrderLine]] = {article_id: [] for article_id in ids}
        statuses: dict[ArticleId, Counter] = {article_id: Counter() for article_id in ids}

        foreign = 0
        for order in orders:
            if order.article_id not in ordered:
                foreign += 1
                continue
            ordered[order.article_id] += order.quantity_ordered
            if order.status == self._received_status:
                received[order.article_id] += order.quantity_ordered
            if order.status != CANCELLED_STATUS:
                value[order.article_id] += order.total_amount
            lines[order.article_id].append(order)
            statuses[order.article_id][order.status] += 1

        if foreign:
            logger.warning(
                "order_entries_outside_demand_ignored",
                extra={"ignored_count": foreign},
            )

        return {
            article_id: ArticleOrderSummary(
                article_id=article_id,
                quantity_ordered=ordered[article_id],
                quantity_received=received[article_id],
                value_ordered=value[article_id],
                orders=tuple(lines[article_id]),
                status_counts=MappingProxyType(dict(statuses[article_id])),
            )
            for article_id in ids
        }

    @traced_engine("order_reconciler", "1.0")
    def reconcile(
        self,
        demand: DemandResult,
        summaries: Mapping[ArticleId, ArticleOrderSummary],
    ) -> OrderConsolidation:
        """
        Merge order summaries into every demand row.

        Args:
            demand: Stage-1 result.
            summaries: Output of summarize() for demand.article_ids.  A
                missing id is treated as "no orders yet".
        """
        articles = tuple(
            ConsolidatedArticle.from_demand(
                entry,
                summaries.get(entry.article_id)
                or ArticleOrderSummary.empty(entry.article_id),
            )
            for entry in demand.entries
        )

        logger.info(
            "orders_reconciled",
            extra={
                "article_count": len(articles),
                "articles_with_orders": sum(
                    1 for article in articles if article.quantity_ordered
                ),
                "total_pending": sum(article.quantity_pending for article in articles),
            },
        )
        return OrderConsolidation(articles=articles, is_reconciled=True)


def demand_only(demand: DemandResult) -> OrderConsolidation:
    """Consolidated view of stage 1 alone; order figures are zero, not reconciled."""
    return OrderConsolidation(
        articles=tuple(ConsolidatedArticle.from_demand(entry) for entry in demand.entries),
        is_reconciled=False,
    )
