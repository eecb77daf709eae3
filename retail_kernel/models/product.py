"""
Module: retail_kernel.models.product
Responsibility: ORM persistence for inventory items.
Architecture position: Kernel > Models.  May import from db/ and domain/dtos.py.

Invariants enforced:
    - quantity only changes through a single conditional UPDATE
      (InventoryStore.adjust_quantity), never through a client-computed value.
    - unit_cost and unit_price are non-negative.

Non-goals:
    - No CHECK on quantity >= 0: the no-oversell rule is applied by the
      adjustment statement so that backorders can be recorded on purpose.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from retail_kernel.db.base import TrackedBase
from retail_kernel.db.types import QUANTITY_DECIMAL_PLACES
from retail_kernel.domain.dtos import SaleMode


class Product(TrackedBase):
    """An item on the shelf with its stock level and prices."""

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("unit_cost >= 0", name="ck_product_cost_non_negative"),
        CheckConstraint("unit_price >= 0", name="ck_product_price_non_negative"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    quantity: Mapped[Decimal] = mapped_column(
        Numeric(18, QUANTITY_DECIMAL_PLACES),
        nullable=False,
        default=Decimal("0"),
    )

    unit_cost: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    unit_price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    sale_mode: Mapped[SaleMode] = mapped_column(
        String(20),
        nullable=False,
        default=SaleMode.UNIT.value,
    )

    def __repr__(self) -> str:
        return f"<Product {self.name}: {self.quantity}>"
