"""
Module: retail_kernel.models.transaction
Responsibility: ORM persistence for cash-flow ledger entries.
Architecture position: Kernel > Models.  May import from db/ and domain/dtos.py.

Invariants enforced:
    - amount is positive (CHECK constraint, plus service-level validation).
    - kind is "inflow" or "outflow".
    - occurred_at is the creation instant unless the entry was backdated;
      edits never touch it implicitly.

Failure modes:
    - IntegrityError if the CHECK constraints are bypassed by raw SQL.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from retail_kernel.db.base import TrackedBase, UUIDString
from retail_kernel.db.types import UTCDateTime
from retail_kernel.domain.dtos import TransactionKind


class LedgerTransaction(TrackedBase):
    """
    One financial movement in the cash-flow ledger.

    Contract:
        Rows are editable and deletable; the ledger imposes no ordering, so
        readers sort explicitly.
    """

    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        CheckConstraint(
            "kind IN ('inflow', 'outflow')", name="ck_transaction_kind"
        ),
        Index("idx_transaction_occurred_at", "occurred_at"),
        Index("idx_transaction_register", "register_id"),
    )

    description: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    kind: Mapped[TransactionKind] = mapped_column(
        String(10),
        nullable=False,
    )

    register_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("registers.id"),
        nullable=False,
    )

    category_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("categories.id"),
        nullable=True,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<LedgerTransaction {self.kind} {self.amount}: {self.description}>"
