"""
Order consolidation value objects.

Immutable result types produced by the Demand Aggregator and the Order
Reconciler.  Pure domain objects with no I/O dependencies.

Invariants (checked in __post_init__, violations are programming errors):
    - breakdown.district + breakdown.public + breakdown.institutions
      == total_quantity for every demand entry and consolidated row.
    - quantity_pending == max(0, total_quantity - quantity_ordered).
    - Order figures are never None: "no orders yet" is an explicit zero.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from aid_kernel.domain.dtos import ArticleId, BeneficiaryCategory, OrderLine
from aid_kernel.logging_config import get_logger

logger = get_logger("engines.consolidation.types")

ZERO = Decimal("0")


def article_name_key(name: str) -> tuple[str, str]:
    """
    Collation key for article names.

    Primary: case-folded with accents removed, so "Éclair" sorts among the
    plain E names.  Secondary: the case-folded decomposition, so names that
    differ only by accent still order deterministically.
    """
    decomposed = unicodedata.normalize("NFKD", name).casefold()
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base, decomposed


@dataclass(frozen=True, slots=True)
class DemandBreakdown:
    """Quantity demanded per beneficiary category."""

    district: int = 0
    public: int = 0
    institutions: int = 0

    @property
    def total(self) -> int:
        return self.district + self.public + self.institutions

    def as_dict(self) -> dict[str, int]:
        return {
            BeneficiaryCategory.DISTRICT.value: self.district,
            BeneficiaryCategory.PUBLIC.value: self.public,
            BeneficiaryCategory.INSTITUTIONS.value: self.institutions,
        }


def _check_breakdown(article_id: ArticleId, total: int, breakdown: DemandBreakdown) -> None:
    if breakdown.total != total:
        logger.critical("demand_breakdown_mismatch", extra={
            "article_id": str(article_id),
            "total_quantity": total,
            "breakdown": breakdown.as_dict(),
        })
        raise ValueError(
            f"Breakdown {breakdown.as_dict()} does not sum to total quantity "
            f"{total} for article {article_id}"
        )


@dataclass(frozen=True, slots=True)
class DemandEntry:
    """Aggregated beneficiary demand for one article."""

    article_id: ArticleId
    article_name: str
    total_quantity: int
    breakdown: DemandBreakdown
    total_value: Decimal
    item_type: str | None = None
    line_count: int = 0

    def __post_init__(self) -> None:
        _check_breakdown(self.article_id, self.total_quantity, self.breakdown)


@dataclass(frozen=True, slots=True)
class DemandResult:
    """
    Stage-1 output: the demand table plus the exact article ids it touches.

    entries are sorted by article name (collation key, ascending).
    article_ids is the only input the order stage is allowed to query with.
    """

    entries: tuple[DemandEntry, ...]
    skipped_lines: int = 0

    @property
    def article_ids(self) -> tuple[ArticleId, ...]:
        return tuple(entry.article_id for entry in self.entries)

    @property
    def total_value(self) -> Decimal:
        return sum((entry.total_value for entry in self.entries), ZERO)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class ArticleOrderSummary:
    """Order-tracking figures for one article."""

    article_id: ArticleId
    quantity_ordered: int = 0
    quantity_received: int = 0
    value_ordered: Decimal = ZERO
    orders: tuple[OrderLine, ...] = ()
    status_counts: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def empty(cls, article_id: ArticleId) -> ArticleOrderSummary:
        """Summary for an article with no order entries (legitimate zero)."""
        return cls(article_id=article_id)

    @property
    def order_count(self) -> int:
        return len(self.orders)


@dataclass(frozen=True, slots=True)
class ConsolidatedArticle:
    """
    One row of the consolidated view: demand plus order tracking.

    Derived, never persisted.  Stale as soon as any allocation or order
    changes.
    """

    article_id: ArticleId
    article_name: str
    total_quantity: int
    breakdown: DemandBreakdown
    total_value: Decimal
    quantity_ordered: int = 0
    quantity_received: int = 0
    quantity_pending: int = 0
    item_type: str | None = None
    order_summary: ArticleOrderSummary | None = None

    def __post_init__(self) -> None:
        _check_breakdown(self.article_id, self.total_quantity, self.breakdown)
        expected_pending = max(0, self.total_quantity - self.quantity_ordered)
        if self.quantity_pending != expected_pending:
            logger.critical("pending_quantity_inconsistent", extra={
                "article_id": str(self.article_id),
                "total_quantity": self.total_quantity,
                "quantity_ordered": self.quantity_ordered,
                "quantity_pending": self.quantity_pending,
            })
            raise ValueError(
                f"Pending quantity {self.quantity_pending} inconsistent with "
                f"total {self.total_quantity} - ordered {self.quantity_ordered}"
            )

    @classmethod
    def from_demand(
        cls,
        entry: DemandEntry,
        summary: ArticleOrderSummary | None = None,
    ) -> ConsolidatedArticle:
        """Merge a demand entry with its order summary (None = demand only)."""
        ordered = summary.quantity_ordered if summary else 0
        received = summary.quantity_received if summary else 0
        return cls(
            article_id=entry.article_id,
            article_name=entry.article_name,
            total_quantity=entry.total_quantity,
            breakdown=entry.breakdown,
            total_value=entry.total_value,
            quantity_ordered=ordered,
            quantity_received=received,
            quantity_pending=max(0, entry.total_quantity - ordered),
            item_type=entry.item_type,
            order_summary=summary,
        )

    @property
    def excess_ordered(self) -> int:
        """Quantity ordered beyond demand (not reflected in pending)."""
        return max(0, self.quantity_ordered - self.total_quantity)

    @property
    def is_fully_ordered(self) -> bool:
        return self.quantity_pending == 0


@dataclass(frozen=True, slots=True)
class OrderConsolidation:
    """
    The consolidated view handed to presentation layers.

    is_reconciled is False for a demand-only view (stage 1 only), so a
    caller can never mistake its zero order figures for real ones.
    """

    articles: tuple[ConsolidatedArticle, ...]
    is_reconciled: bool = False

    @property
    def total_articles(self) -> int:
        return len(self.articles)

    @property
    def total_value(self) -> Decimal:
        return sum((article.total_value for article in self.articles), ZERO)


@dataclass(frozen=True, slots=True)
class ItemTypeSummary:
    """Per item-type rollup of consolidated rows."""

    item_type: str | None
    article_count: int
    total_quantity: int
    quantity_ordered: int
    quantity_pending: int


@dataclass(frozen=True, slots=True)
class RowTotals:
    """Column totals over a (possibly filtered) set of consolidated rows."""

    article_count: int = 0
    total_quantity: int = 0
    quantity_ordered: int = 0
    quantity_received: int = 0
    quantity_pending: int = 0
    total_value: Decimal = ZERO


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortColumn(str, Enum):
    """Sortable columns of the consolidated view."""

    ARTICLE_NAME = "article_name"
    TOTAL_QUANTITY = "total_quantity"
    QUANTITY_ORDERED = "quantity_ordered"
    QUANTITY_RECEIVED = "quantity_received"
    QUANTITY_PENDING = "quantity_pending"
    TOTAL_VALUE = "total_value"

    @property
    def is_text(self) -> bool:
        return self is SortColumn.ARTICLE_NAME


@dataclass(frozen=True, slots=True)
class SortState:
    """
    Header-click sort state.

    column None means "unsorted": rows keep the name order the aggregator
    produced.
    """

    column: SortColumn | None = None
    direction: SortDirection = SortDirection.ASC

    def toggle(self, column: SortColumn) -> SortState:
        """Same column flips direction; a new column starts ascending."""
        if self.column is column:
            flipped = (
                SortDirection.DESC
                if self.direction is SortDirection.ASC
                else SortDirection.ASC
            )
            return SortState(column=column, direction=flipped)
        return SortState(column=column, direction=SortDirection.ASC)
