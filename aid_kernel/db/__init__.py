"""Database layer - engine, base classes, and value normalisation."""

from aid_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from aid_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from aid_kernel.db.types import to_money, to_quantity

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session_factory",
    "create_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "to_money",
    "to_quantity",
]
