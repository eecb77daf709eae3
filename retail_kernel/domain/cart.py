"""
Cart -- the in-memory side of a checkout.

Responsibility:
    Holds the cart lines of one checkout, computes line totals and the cart
    total, builds the sale description, and computes change due for cash
    payments.  Nothing here is persisted: a cart exists only for the
    duration of one checkout.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The SaleOrchestrator
    service owns a Cart and drives it through the checkout states.

Invariants enforced:
    - Every line total is positive and rounded to currency minor units.
    - Unit and weight lines are priced as sell_quantity * unit_price;
      manual-price lines carry the amount typed at the till.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from itertools import count
from uuid import UUID

from retail_kernel.db.types import round_money, round_quantity, to_decimal
from retail_kernel.domain.dtos import ProductInfo, SaleMode
from retail_kernel.exceptions import ValidationError


class CheckoutState(str, Enum):
    BUILDING = "building"
    FINALIZING = "finalizing"
    COMMITTED = "committed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class CartLine:
    line_id: int
    product_id: UUID
    product_name: str
    sale_mode: SaleMode
    sell_quantity: Decimal
    line_total: Decimal

    @property
    def is_stock_tracked(self) -> bool:
        return self.sale_mode.is_stock_tracked

    def label(self) -> str:
        """Short text used in the sale description ("2x Soda", "0.5kg Rice")."""
        if self.sale_mode == SaleMode.WEIGHT:
            return f"{_plain(self.sell_quantity)}kg {self.product_name}"
        return f"{_plain(self.sell_quantity)}x {self.product_name}"


def _plain(value: Decimal) -> str:
    """Render 2.000 as "2" and 0.500 as "0.5"."""
    return format(value.normalize(), "f")


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)
    _ids: count = field(default_factory=lambda: count(1), repr=False)

    def add(
        self,
        product: ProductInfo,
        quantity: Decimal | int | str = 1,
        manual_amount: Decimal | str | None = None,
    ) -> CartLine:
        """
        Price a product and append it as a new line.

        Raises:
            ValidationError: non-numeric input, non-positive quantity, or a
                line total that is not positive.
        """
        if product.sale_mode == SaleMode.MANUAL_PRICE:
            if manual_amount is None:
                raise ValidationError("manual_amount", "required for manual-price products")
            sell_quantity = Decimal("1")
            line_total = _decimal_field("manual_amount", manual_amount)
        else:
            sell_quantity = round_quantity(_decimal_field("quantity", quantity))
            if sell_quantity <= 0:
                raise ValidationError("quantity", "must be positive")
            line_total = sell_quantity * product.unit_price

        line_total = round_money(line_total)
        if line_total <= 0:
            raise ValidationError("line_total", f"must be positive, got {line_total}")

        line = CartLine(
            line_id=next(self._ids),
            product_id=product.id,
            product_name=product.name,
            sale_mode=product.sale_mode,
            sell_quantity=sell_quantity,
            line_total=line_total,
        )
        self.lines.append(line)
        return line

    def remove(self, line_id: int) -> CartLine:
        for index, line in enumerate(self.lines):
            if line.line_id == line_id:
                return self.lines.pop(index)
        raise ValidationError("line_id", f"no cart line {line_id}")

    def clear(self) -> None:
        self.lines.clear()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total(self) -> Decimal:
        return round_money(sum((line.line_total for line in self.lines), Decimal("0")))

    def stock_requirements(self) -> dict[UUID, Decimal]:
        """Total quantity to take off the shelf per stock-tracked product."""
        required: dict[UUID, Decimal] = {}
        for line in self.lines:
            if line.is_stock_tracked:
                required[line.product_id] = (
                    required.get(line.product_id, Decimal("0")) + line.sell_quantity
                )
        return required

    def describe(self, prefix: str = "Sale") -> str:
        """Aggregate ledger description for the whole cart."""
        return f"{prefix}: " + ", ".join(line.label() for line in self.lines)


def change_due(total: Decimal, received: Decimal | str) -> Decimal:
    """received - total; negative while the customer has not paid enough."""
    return round_money(_decimal_field("received_amount", received) - total)


def _decimal_field(name: str, value) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise ValidationError(name, str(exc)) from None
