"""
Demand Aggregator.

Sums beneficiary demand per article across the three allocation categories
(district, public, institutions).  Pure: takes already-fetched DTOs and
returns a DemandResult.

Algorithm:
    1. Walk district groups, public lines and institution groups in that
       order.
    2. For each line-item resolve its article (joined name first, then the
       catalog).  Unresolvable or zero-quantity line-items are skipped and
       logged; they never abort the aggregation.
    3. Add quantity to total_quantity and to the breakdown bucket of the
       line's category; add the stored line value to total_value (missing
       value counts as zero).
    4. Sort the resulting entries by article name collation key.  Ties keep
       first-seen order.

The table is built from allocations only: an article that no allocation
references never appears, whatever the catalog holds.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from aid_kernel.domain.dtos import (
    AllocationGroup,
    AllocationLine,
    ArticleDTO,
    ArticleId,
    BeneficiaryCategory,
)
from aid_kernel.logging_config import get_logger
from aid_engines.consolidation.types import (
    ZERO,
    DemandBreakdown,
    DemandEntry,
    DemandResult,
    article_name_key,
)
from aid_engines.tracer import traced_engine

logger = get_logger("engines.consolidation.demand")


@dataclass
class _Accumulator:
    article_id: ArticleId
    article_name: str
    item_type: str | None
    quantities: dict[BeneficiaryCategory, int] = field(
        default_factory=lambda: {category: 0 for category in BeneficiaryCategory}
    )
    total_value: Decimal = ZERO
    line_count: int = 0

    def freeze(self) -> DemandEntry:
        breakdown = DemandBreakdown(
            district=self.quantities[BeneficiaryCategory.DISTRICT],
            public=self.quantities[BeneficiaryCategory.PUBLIC],
            institutions=self.quantities[BeneficiaryCategory.INSTITUTIONS],
        )
        return DemandEntry(
            article_id=self.article_id,
            article_name=self.article_name,
            total_quantity=breakdown.total,
            breakdown=breakdown,
            total_value=self.total_value,
            item_type=self.item_type,
            line_count=self.line_count,
        )


class DemandAggregator:
    """
    Aggregates allocation line-items into a per-article demand table.

    Contract:
        - aggregate() never raises on data-quality gaps; it counts and logs
          them in skipped_lines.
        - Output ordering is deterministic for identical input.

    Non-goals:
        - Does NOT fetch anything.  Source failures are the caller's concern
          and must abort before this engine runs.
    """

    def __init__(self, catalog: Iterable[ArticleDTO] = ()) -> None:
        self._catalog: Mapping[ArticleId, ArticleDTO] = {
            article.id: article for article in catalog
        }

    def _resolve(self, line: AllocationLine) -> tuple[str, str | None] | None:
        if line.article_name:
            return line.article_name, line.item_type
        article = self._catalog.get(line.article_id)
        if article is not None:
            return article.article_name, line.item_type or article.item_type
        return None

    def _skip(self, line: AllocationLine, reason: str, group_key: str | None) -> None:
        logger.warning(
            "allocation_line_skipped",
            extra={
                "reason": reason,
                "category": line.category.value,
                "article_id": str(line.article_id) if line.article_id is not None else None,
                "source_id": str(line.source_id) if line.source_id is not None else None,
                "group_key": group_key,
            },
        )

    def _add_line(
        self,
        table: dict[ArticleId, _Accumulator],
        line: AllocationLine,
        group_key: str | None,
    ) -> bool:
        """Fold one line-item into the table. Returns False if skipped."""
        if line.article_id is None:
            self._skip(line, "missing_article_id", group_key)
            return False

        resolved = self._resolve(line)
        if resolved is None:
            self._skip(line, "unresolvable_article", group_key)
            return False

        if not line.quantity or line.quantity < 0:
            self._skip(line, "non_positive_quantity", group_key)
            return False

        name, item_type = resolved
        acc = table.get(line.article_id)
        if acc is None:
            acc = _Accumulator(
                article_id=line.article_id,
                article_name=name,
                item_type=item_type,
            )
            table[line.article_id] = acc

        acc.quantities[line.category] += line.quantity
        acc.line_count += 1
        if line.computed_value is None:
            logger.debug(
                "allocation_value_missing",
                extra={
                    "article_id": str(line.article_id),
                    "category": line.category.value,
                },
            )
        else:
            acc.total_value += line.computed_value
        return True

    def _add_groups(
        self,
        table: dict[ArticleId, _Accumulator],
        groups: Iterable[AllocationGroup],
    ) -> int:
        skipped = 0
        for group in groups:
            added = 0
            for line in group.lines:
                if self._add_line(table, line, group.group_key):
                    added += 1
                else:
                    skipped += 1
            if group.lines and added == 0:
                logger.warning(
                    "allocation_group_skipped",
                    extra={
                        "category": group.category.value,
                        "group_key": group.group_key,
                        "line_count": len(group.lines),
                    },
                )
        return skipped

    @traced_engine("demand_aggregator", "1.0")
    def aggregate(
        self,
        district_groups: Iterable[AllocationGroup],
        public_lines: Iterable[AllocationLine],
        institution_groups: Iterable[AllocationGroup],
    ) -> DemandResult:
        """
        Build the per-article demand table.

        Args:
            district_groups: District applications (multi-line).
            public_lines: Public applications (one line each).
            institution_groups: Institution applications (multi-line).

        Returns:
            DemandResult with entries sorted by article name.
        """
        table: dict[ArticleId, _Accumulator] = {}

        skipped = self._add_groups(table, district_groups)
        for line in public_lines:
            if not self._add_line(table, line, None):
                skipped += 1
        skipped += self._add_groups(table, institution_groups)

        # sorted() is stable: equal names keep first-seen order
        entries = tuple(
            sorted(
                (acc.freeze() for acc in table.values()),
                key=lambda entry: article_name_key(entry.article_name),
            )
        )

        logger.info(
            "demand_aggregated",
            extra={
                "article_count": len(entries),
                "skipped_lines": skipped,
                "total_quantity": sum(entry.total_quantity for entry in entries),
            },
        )
        return DemandResult(entries=entries, skipped_lines=skipped)


def aggregate_demand(
    district_groups: Iterable[AllocationGroup],
    public_lines: Iterable[AllocationLine],
    institution_groups: Iterable[AllocationGroup],
    catalog: Iterable[ArticleDTO] = (),
) -> DemandResult:
    """Functional wrapper around DemandAggregator.aggregate()."""
    return DemandAggregator(catalog).aggregate(
        district_groups, public_lines, institution_groups
    )
