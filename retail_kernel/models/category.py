"""
Module: retail_kernel.models.category
Responsibility: ORM persistence for ledger categories.
Architecture position: Kernel > Models.  May import from db/ and domain/dtos.py.

Invariants enforced:
    - kind is the movement direction the category may be attached to; the
      ledger rejects an outflow category on an inflow entry and vice versa.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from retail_kernel.db.base import TrackedBase
from retail_kernel.domain.dtos import TransactionKind


class Category(TrackedBase):
    """A ledger category (Sale, Supplies, Rent, ...)."""

    __tablename__ = "categories"

    __table_args__ = (
        UniqueConstraint("code", name="uq_category_code"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    kind: Mapped[TransactionKind] = mapped_column(String(10), nullable=False)

    def __repr__(self) -> str:
        return f"<Category {self.code}: {self.name} ({self.kind})>"
