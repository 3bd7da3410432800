"""
Module: aid_kernel.db.types
Responsibility: Small normalisation helpers for monetary and quantity
    values, so every selector hands the engines the same representation.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for money.  Values read from the store (which may arrive as
      str, int, float or Decimal depending on the driver) are normalised
      through to_money().
    - Quantities are integers; missing quantities normalise to zero via
      to_quantity().
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")


def to_money(value: Any) -> Decimal | None:
    """
    Normalise a stored monetary value to Decimal.

    Preconditions: value is None, a Decimal, an int, a float, or a numeric
        string (the hosted REST layer returns NUMERIC columns as strings).
    Postconditions: Returns a Decimal, or None when value is None or blank.

    Raises:
        ValueError: value is a non-numeric string.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid monetary value: {value!r}") from exc
    return Decimal(value)


def to_quantity(value: Any) -> int:
    """Normalise a stored quantity; None becomes 0."""
    if value is None:
        return 0
    return int(value)


def enum_value(value: Any) -> Any:
    """Plain value of a str-Enum column; raw strings pass through."""
    if isinstance(value, Enum):
        return value.value
    return value
