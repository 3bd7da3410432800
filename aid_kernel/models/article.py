"""
Module: aid_kernel.models.article
Responsibility: ORM mapping of the article catalog (the master list of items
    that can be allocated to beneficiaries and ordered from suppliers).
Architecture position: Kernel > Models.  May import from db/ and domain/.

Invariants enforced:
    - article_name is unique across the catalog.
    - item_type is one of Article | Aid | Project.

Audit relevance:
    Catalog rows are reference data.  The consolidation core reads them to
    resolve article names, item types and catalog unit costs; it never
    writes them.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from aid_kernel.db.base import TrackedBase
from aid_kernel.domain.dtos import ItemType


class Article(TrackedBase):
    """
    Catalog entry for an allocatable item.

    Contract:
        Immutable reference data from the consolidation core's point of view.
        cost_per_unit is the default unit cost; allocation rows may carry
        their own override.
    """

    __tablename__ = "articles"

    __table_args__ = (
        UniqueConstraint("article_name", name="uq_article_name"),
        Index("idx_articles_item_type", "item_type"),
        Index("idx_articles_is_active", "is_active"),
    )

    article_name: Mapped[str] = mapped_column(String(255), nullable=False)

    cost_per_unit: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    item_type: Mapped[ItemType] = mapped_column(String(20), nullable=False)

    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    master_category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Bundled article made up of several catalog items
    combo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Article {self.article_name} ({self.item_type})>"
