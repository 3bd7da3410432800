"""
Order entry query selector.

Provides read-only access to supplier order entries for a bounded set of
articles.

Key design decisions:
- Only the article ids handed in are queried, never the full table
- Ids are sent in chunks so a large demand table cannot produce an
  unbounded IN (...) list
- An empty id set issues no statement at all
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from aid_kernel.db.types import ZERO, enum_value, to_money, to_quantity
from aid_kernel.domain.dtos import ArticleId, OrderLine
from aid_kernel.logging_config import get_logger
from aid_kernel.models.order_entry import OrderEntry
from aid_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.order")

DEFAULT_CHUNK_SIZE = 500


def _chunks(ids: list[ArticleId], size: int) -> Iterable[list[ArticleId]]:
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


class OrderSelector(BaseSelector[OrderEntry]):
    """Selector for order entry queries."""

    def __init__(self, session: Session, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(session)
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._chunk_size = chunk_size

    def _to_dto(self, entry: OrderEntry) -> OrderLine:
        return OrderLine(
            id=entry.id,
            article_id=entry.article_id,
            quantity_ordered=to_quantity(entry.quantity_ordered),
            status=enum_value(entry.status),
            total_amount=to_money(entry.total_amount) or ZERO,
            order_date=entry.order_date,
            supplier_name=entry.supplier_name,
            fund_request_id=entry.fund_request_id,
        )

    def entries_for_articles(
        self, article_ids: Iterable[ArticleId]
    ) -> list[OrderLine]:
        """
        Get every order entry referencing one of the given articles.

        Args:
            article_ids: Article ids to fetch orders for.  Duplicates are
                ignored.

        Returns:
            OrderLine list, newest order date first (across all chunks).
        """
        ids = list(dict.fromkeys(article_ids))
        if not ids:
            return []

        entries: list[OrderLine] = []
        chunk_count = 0
        for chunk in _chunks(ids, self._chunk_size):
            chunk_count += 1
            stmt = (
                select(OrderEntry)
                .where(OrderEntry.article_id.in_(chunk))
                .order_by(OrderEntry.order_date.desc(), OrderEntry.created_at.desc())
            )
            entries.extend(
                self._to_dto(entry) for entry in self.session.execute(stmt).scalars()
            )

        if chunk_count > 1:
            entries.sort(
                key=lambda line: line.order_date.toordinal() if line.order_date else 0,
                reverse=True,
            )

        logger.debug(
            "order_entries_fetched",
            extra={
                "article_count": len(ids),
                "chunk_count": chunk_count,
                "entry_count": len(entries),
            },
        )
        return entries
