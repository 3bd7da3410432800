"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that cross the boundary between
    the selectors (which read the hosted tables) and the consolidation
    engines (which never see ORM instances): ArticleDTO, AllocationLine,
    AllocationGroup and OrderLine.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Free of ORM dependencies.

Invariants enforced:
    - Quantities are ints, money is Decimal (never float).
    - Beneficiary categories are a closed enumeration; no string
      discriminators flow into the engines.
    - article_id is an opaque identifier.  It is a UUID for rows read from
      the store, but engines only hash and compare it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Hashable
from uuid import UUID

ArticleId = Hashable


class ItemType(str, Enum):
    """Catalog classification of an article."""

    ARTICLE = "Article"
    AID = "Aid"
    PROJECT = "Project"


class BeneficiaryCategory(str, Enum):
    """Breakdown bucket a demand line-item is counted under."""

    DISTRICT = "district"
    PUBLIC = "public"
    INSTITUTIONS = "institutions"


@dataclass(frozen=True)
class ArticleDTO:
    """Catalog row as seen by the consolidation core."""

    id: ArticleId
    article_name: str
    cost_per_unit: Decimal
    item_type: str
    category: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class AllocationLine:
    """
    One article line-item of a beneficiary allocation.

    article_name and item_type come from the catalog join and are None when
    the referenced article row could not be found.  quantity and
    computed_value are None when the stored row is missing them.
    """

    category: BeneficiaryCategory
    article_id: ArticleId | None
    quantity: int | None
    computed_value: Decimal | None
    article_name: str | None = None
    item_type: str | None = None
    unit_cost_override: Decimal | None = None
    catalog_unit_cost: Decimal | None = None
    source_id: UUID | None = None

    @property
    def effective_unit_cost(self) -> Decimal:
        """Per-allocation override if present, otherwise the catalog cost."""
        if self.unit_cost_override is not None:
            return self.unit_cost_override
        if self.catalog_unit_cost is not None:
            return self.catalog_unit_cost
        return Decimal("0")


@dataclass(frozen=True)
class AllocationGroup:
    """
    An application (grant) with one or more article line-items.

    group_key is the application number, or the row id for rows that were
    saved without one.
    """

    group_key: str
    category: BeneficiaryCategory
    lines: tuple[AllocationLine, ...]


@dataclass(frozen=True)
class OrderLine:
    """A supplier order entry for one article."""

    id: UUID
    article_id: ArticleId
    quantity_ordered: int
    status: str
    total_amount: Decimal
    order_date: date | None = None
    supplier_name: str | None = None
    fund_request_id: UUID | None = None
