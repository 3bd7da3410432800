"""
Pure domain layer.

This module contains pure data transfer objects with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from aid_kernel.domain.dtos import (
    AllocationGroup,
    AllocationLine,
    ArticleDTO,
    ArticleId,
    BeneficiaryCategory,
    OrderLine,
)

__all__ = [
    "AllocationGroup",
    "AllocationLine",
    "ArticleDTO",
    "ArticleId",
    "BeneficiaryCategory",
    "OrderLine",
]
