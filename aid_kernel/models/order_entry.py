"""
Module: aid_kernel.models.order_entry
Responsibility: ORM mapping of supplier order entries placed against
    catalog articles.  Orders may be placed incrementally (order 4 today,
    the rest tomorrow), so one article usually has several entries.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - quantity_ordered > 0 (check constraint, mirrors the hosted schema).
    - status is one of pending | ordered | received | cancelled.
    - There is no partial-receipt quantity: an entry is either received in
      full (status = received) or not received at all.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from aid_kernel.db.base import TrackedBase, UUIDString


class OrderStatus(str, Enum):
    """Supplier order lifecycle."""

    PENDING = "pending"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class OrderEntry(TrackedBase):
    """A supplier order for one article."""

    __tablename__ = "order_entries"

    __table_args__ = (
        CheckConstraint("quantity_ordered > 0", name="ck_order_quantity_positive"),
        Index("idx_order_entries_article_id", "article_id"),
        Index("idx_order_entries_status", "status"),
        Index("idx_order_entries_article_status", "article_id", "status"),
    )

    article_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("articles.id", ondelete="RESTRICT"),
        nullable=False,
    )

    quantity_ordered: Mapped[int] = mapped_column(nullable=False, default=1)

    order_date: Mapped[date] = mapped_column(nullable=False, default=date.today)

    status: Mapped[OrderStatus] = mapped_column(
        String(20), nullable=False, default=OrderStatus.PENDING.value
    )

    supplier_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    supplier_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)

    unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    total_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    expected_delivery_date: Mapped[date | None] = mapped_column(nullable=True)

    notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    # Originating fund request, when the order was raised from one
    fund_request_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
