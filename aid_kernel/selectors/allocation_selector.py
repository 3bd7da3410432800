"""
Allocation query selector.

Provides read-only access to the three beneficiary demand sources.

Key design decisions:
- Returns DTOs (AllocationLine / AllocationGroup), not ORM models
- Joins the catalog with an OUTER join so that a line-item whose article row
  is missing still reaches the engine (which logs and skips it) instead of
  silently disappearing in SQL
- District and institution rows are grouped by application number, newest
  application first; rows saved without an application number form their
  own single-line group keyed by row id, so their demand is still counted
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select

from aid_kernel.db.types import enum_value, to_money, to_quantity
from aid_kernel.domain.dtos import (
    AllocationGroup,
    AllocationLine,
    ArticleDTO,
    BeneficiaryCategory,
)
from aid_kernel.logging_config import get_logger
from aid_kernel.models.article import Article
from aid_kernel.models.beneficiary import (
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    PublicBeneficiaryEntry,
)
from aid_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.allocation")


def _line_from_row(
    entry: Any,
    article_name: str | None,
    item_type: str | None,
    catalog_cost: Any,
    category: BeneficiaryCategory,
) -> AllocationLine:
    return AllocationLine(
        category=category,
        article_id=entry.article_id,
        quantity=None if entry.quantity is None else to_quantity(entry.quantity),
        computed_value=to_money(entry.total_amount),
        article_name=article_name,
        item_type=enum_value(item_type),
        unit_cost_override=to_money(entry.article_cost_per_unit),
        catalog_unit_cost=to_money(catalog_cost),
        source_id=entry.id,
    )


def group_lines(
    keyed_lines: Iterable[tuple[str, AllocationLine]],
    category: BeneficiaryCategory,
) -> list[AllocationGroup]:
    """Group (key, line) pairs by key, keeping first-seen key order."""
    grouped: dict[str, list[AllocationLine]] = {}
    for key, line in keyed_lines:
        grouped.setdefault(key, []).append(line)
    return [
        AllocationGroup(group_key=key, category=category, lines=tuple(lines))
        for key, lines in grouped.items()
    ]


class AllocationSelector(BaseSelector[DistrictBeneficiaryEntry]):
    """
    Selector for beneficiary allocation queries.

    Each method issues exactly one statement, so each demand source can be
    fetched on its own session in its own worker thread.
    """

    def _rows(self, model: type) -> list[Any]:
        stmt = (
            select(
                model,
                Article.article_name,
                Article.item_type,
                Article.cost_per_unit,
            )
            .outerjoin(Article, Article.id == model.article_id)
            .order_by(model.created_at.desc(), model.application_number.desc())
        )
        return list(self.session.execute(stmt).all())

    def _grouped(
        self, model: type, category: BeneficiaryCategory
    ) -> list[AllocationGroup]:
        rows = self._rows(model)
        ungrouped = 0
        keyed: list[tuple[str, AllocationLine]] = []
        for entry, name, item_type, cost in rows:
            key = entry.application_number
            if not key:
                ungrouped += 1
                key = str(entry.id)
            keyed.append((key, _line_from_row(entry, name, item_type, cost, category)))

        groups = group_lines(keyed, category)
        logger.debug(
            "allocation_groups_fetched",
            extra={
                "category": category.value,
                "row_count": len(rows),
                "group_count": len(groups),
                "rows_without_application_number": ungrouped,
            },
        )
        return groups

    # =========================================================================
    # Demand sources
    # =========================================================================

    def district_groups(self) -> list[AllocationGroup]:
        """
        District allocations grouped by application number.

        Returns:
            One AllocationGroup per application, newest first.
        """
        return self._grouped(DistrictBeneficiaryEntry, BeneficiaryCategory.DISTRICT)

    def public_lines(self) -> list[AllocationLine]:
        """
        Public allocations, one line-item per application.

        Returns:
            AllocationLine list, newest first.
        """
        rows = self._rows(PublicBeneficiaryEntry)
        lines = [
            _line_from_row(entry, name, item_type, cost, BeneficiaryCategory.PUBLIC)
            for entry, name, item_type, cost in rows
        ]
        logger.debug(
            "public_lines_fetched",
            extra={"category": BeneficiaryCategory.PUBLIC.value, "row_count": len(lines)},
        )
        return lines

    def institution_groups(self) -> list[AllocationGroup]:
        """
        Institution allocations grouped by application number.

        Both institution_type values (institutions, others) count as
        institution demand.
        """
        return self._grouped(
            InstitutionBeneficiaryEntry, BeneficiaryCategory.INSTITUTIONS
        )


class ArticleSelector(BaseSelector[Article]):
    """Selector for the article catalog."""

    def catalog(self, include_inactive: bool = True) -> list[ArticleDTO]:
        """
        All catalog articles ordered by name.

        Args:
            include_inactive: Include deactivated articles.  Allocations may
                still reference an article after it is deactivated, so the
                consolidation core asks for everything.
        """
        stmt = select(Article).order_by(Article.article_name)
        if not include_inactive:
            stmt = stmt.where(Article.is_active.is_(True))

        return [
            ArticleDTO(
                id=article.id,
                article_name=article.article_name,
                cost_per_unit=to_money(article.cost_per_unit),
                item_type=enum_value(article.item_type),
                category=article.category,
                is_active=article.is_active,
            )
            for article in self.session.execute(stmt).scalars()
        ]
