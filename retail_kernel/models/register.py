"""
Module: retail_kernel.models.register
Responsibility: ORM persistence for cash registers / payment channels.
Architecture position: Kernel > Models.  May import from db/ only.

Reference data: seeded from configuration, read-only for the kernel.
"""

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from retail_kernel.db.base import TrackedBase


class Register(TrackedBase):
    """A payment channel (cash drawer, card terminal, instant transfer)."""

    __tablename__ = "registers"

    __table_args__ = (
        UniqueConstraint("code", name="uq_register_code"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Cash payments go through the change-due step at checkout
    is_cash: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Register {self.code}: {self.name}>"
