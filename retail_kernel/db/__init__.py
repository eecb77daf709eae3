"""Database layer - engine, base classes, types."""

from retail_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from retail_kernel.db.engine import create_tables, get_engine, session_scope
from retail_kernel.db.types import Money, Quantity, UTCDateTime

__all__ = [
    "get_engine",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Money",
    "Quantity",
    "UTCDateTime",
]
