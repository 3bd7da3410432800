"""ORM mappings of the hosted allocation, catalog and order tables."""

from aid_kernel.models.article import Article, ItemType
from aid_kernel.models.beneficiary import (
    AllocationStatus,
    District,
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    InstitutionType,
    PublicBeneficiaryEntry,
)
from aid_kernel.models.order_entry import OrderEntry, OrderStatus

__all__ = [
    "Article",
    "ItemType",
    "AllocationStatus",
    "District",
    "DistrictBeneficiaryEntry",
    "InstitutionBeneficiaryEntry",
    "InstitutionType",
    "PublicBeneficiaryEntry",
    "OrderEntry",
    "OrderStatus",
]
