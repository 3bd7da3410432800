"""
Module: aid_kernel.models.beneficiary
Responsibility: ORM mappings of the three beneficiary allocation tables
    (district, public, institution) and the district master they hang off.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Every allocation row references exactly one article.
    - District and institution applications may span several rows sharing
      an application_number (one row per article line-item).  Public
      applications are one row each.
    - total_amount is the stored line value (quantity x effective unit cost
      as computed by the data-entry form); article_cost_per_unit, when
      present, is the per-allocation override of the catalog cost.

Audit relevance:
    These rows are the demand side of order consolidation.  Created and
    edited by the data-entry screens; read-only to this core.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from aid_kernel.db.base import TrackedBase, UUIDString


class AllocationStatus(str, Enum):
    """Workflow status of an allocation row."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class InstitutionType(str, Enum):
    """Institution entries cover both institutions and 'others' applicants."""

    INSTITUTIONS = "institutions"
    OTHERS = "others"


class District(TrackedBase):
    """District master row with its allotted budget."""

    __tablename__ = "district_master"

    district_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    allotted_budget: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    president_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    mobile_number: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class _AllocationColumns:
    """Columns shared by all three allocation tables."""

    application_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    article_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("articles.id", ondelete="RESTRICT"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(nullable=False, default=1)

    article_cost_per_unit: Mapped[Decimal | None] = mapped_column(nullable=True)

    total_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    status: Mapped[AllocationStatus] = mapped_column(
        String(20), nullable=False, default=AllocationStatus.PENDING.value
    )

    fund_request_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)


class DistrictBeneficiaryEntry(_AllocationColumns, TrackedBase):
    """One article line-item of a district application."""

    __tablename__ = "district_beneficiary_entries"

    __table_args__ = (
        Index("idx_district_beneficiary_district_id", "district_id"),
        Index("idx_district_beneficiary_application_number", "application_number"),
        Index("idx_district_beneficiary_article_id", "article_id"),
    )

    district_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("district_master.id", ondelete="RESTRICT"),
        nullable=False,
    )


class PublicBeneficiaryEntry(_AllocationColumns, TrackedBase):
    """A single-article application from a member of the public."""

    __tablename__ = "public_beneficiary_entries"

    __table_args__ = (
        Index("idx_public_beneficiary_aadhar", "aadhar_number"),
        Index("idx_public_beneficiary_article_id", "article_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    aadhar_number: Mapped[str] = mapped_column(String(20), nullable=False)
    is_handicapped: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)


class InstitutionBeneficiaryEntry(_AllocationColumns, TrackedBase):
    """One article line-item of an institution (or 'others') application."""

    __tablename__ = "institutions_beneficiary_entries"

    __table_args__ = (
        Index("idx_institutions_beneficiary_application_number", "application_number"),
        Index("idx_institutions_beneficiary_article_id", "article_id"),
    )

    institution_name: Mapped[str] = mapped_column(String(255), nullable=False)
    institution_type: Mapped[InstitutionType] = mapped_column(
        String(20), nullable=False, default=InstitutionType.INSTITUTIONS.value
    )
    address: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
