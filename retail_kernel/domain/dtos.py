"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable records that flow between the record store, the
    ledger/inventory services, the checkout workflow and the reporting
    functions: TransactionInfo, ProductInfo, RegisterInfo, CategoryInfo, and
    the enums they carry (TransactionKind, SaleMode).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies.  from_record() class methods convert the plain
    dict records returned by a RecordStore; they are only invoked from the
    service layer.

Invariants enforced:
    - Monetary fields are Decimal, never float.
    - Timestamps are timezone-aware UTC datetimes.
    - Identifiers are UUIDs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping
from uuid import UUID


class TransactionKind(str, Enum):
    """Direction of a cash movement."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"


class SaleMode(str, Enum):
    """How a product is sold at the till."""

    UNIT = "unit"
    WEIGHT = "weight"
    MANUAL_PRICE = "manual_price"

    @property
    def is_stock_tracked(self) -> bool:
        """Manual-price products never move stock."""
        return self is not SaleMode.MANUAL_PRICE


def _as_uuid(value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


@dataclass(frozen=True)
class TransactionInfo:
    """Immutable view of one ledger entry."""

    id: UUID
    description: str
    amount: Decimal
    kind: TransactionKind
    register_id: UUID
    category_id: UUID | None
    occurred_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_inflow(self) -> bool:
        return self.kind == TransactionKind.INFLOW

    @property
    def is_outflow(self) -> bool:
        return self.kind == TransactionKind.OUTFLOW

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> TransactionInfo:
        return cls(
            id=_as_uuid(record["id"]),
            description=record["description"],
            amount=Decimal(record["amount"]),
            kind=TransactionKind(record["kind"]),
            register_id=_as_uuid(record["register_id"]),
            category_id=_as_uuid(record.get("category_id")),
            occurred_at=record["occurred_at"],
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


@dataclass(frozen=True)
class ProductInfo:
    """Immutable view of one inventory item."""

    id: UUID
    name: str
    quantity: Decimal
    unit_cost: Decimal
    unit_price: Decimal
    sale_mode: SaleMode

    @property
    def is_stock_tracked(self) -> bool:
        return self.sale_mode.is_stock_tracked

    @property
    def stock_value(self) -> Decimal:
        """Quantity on hand valued at unit cost."""
        return self.quantity * self.unit_cost

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ProductInfo:
        return cls(
            id=_as_uuid(record["id"]),
            name=record["name"],
            quantity=Decimal(record["quantity"] if record["quantity"] is not None else 0),
            unit_cost=Decimal(record["unit_cost"]),
            unit_price=Decimal(record["unit_price"]),
            sale_mode=SaleMode(record["sale_mode"]),
        )


@dataclass(frozen=True)
class RegisterInfo:
    """A cash register or payment channel."""

    id: UUID
    code: str
    name: str
    is_cash: bool

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RegisterInfo:
        return cls(
            id=_as_uuid(record["id"]),
            code=record["code"],
            name=record["name"],
            is_cash=bool(record["is_cash"]),
        )


@dataclass(frozen=True)
class CategoryInfo:
    """A ledger category with the kind of movement it may be attached to."""

    id: UUID
    code: str
    name: str
    kind: TransactionKind

    def accepts(self, kind: TransactionKind) -> bool:
        return self.kind == kind

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> CategoryInfo:
        return cls(
            id=_as_uuid(record["id"]),
            code=record["code"],
            name=record["name"],
            kind=TransactionKind(record["kind"]),
        )
