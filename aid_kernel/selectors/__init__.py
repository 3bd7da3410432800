"""Selectors for the aid kernel (read side)."""

from aid_kernel.selectors.allocation_selector import (
    AllocationSelector,
    ArticleSelector,
)
from aid_kernel.selectors.order_selector import OrderSelector

__all__ = [
    "AllocationSelector",
    "ArticleSelector",
    "OrderSelector",
]
