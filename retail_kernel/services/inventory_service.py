"""
Service layer for inventory.

Manages products, their prices and the quantity on hand.  Quantity changes
only through adjust_quantity(), which is a single conditional UPDATE against
the persisted value, so two tills selling the last unit at the same time
cannot both succeed.

Returns ProductInfo DTOs instead of store records.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Mapping
from uuid import UUID, uuid4

from retail_kernel.db.types import round_money, round_quantity, to_decimal
from retail_kernel.domain.dtos import ProductInfo, SaleMode
from retail_kernel.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from retail_kernel.logging_config import LogContext, get_logger
from retail_kernel.services.base import BaseService, _parse_id, reject_unknown_fields
from retail_kernel.services.record_store import PRODUCTS

logger = get_logger("services.inventory")

# quantity is deliberately absent: it moves only through adjust_quantity()
EDITABLE_FIELDS = frozenset({"name", "unit_cost", "unit_price", "sale_mode"})

SORT_KEYS: dict[str, Callable[[ProductInfo], Any]] = {
    "name": lambda p: p.name.casefold(),
    "quantity": lambda p: p.quantity,
    "unit_price": lambda p: p.unit_price,
    "unit_cost": lambda p: p.unit_cost,
}


def _name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("name", "must be non-empty text")
    return value.strip()


def _non_negative(field: str, value: Any, places: str = "money") -> Decimal:
    try:
        number = to_decimal(value)
    except ValueError as exc:
        raise ValidationError(field, str(exc)) from None
    number = round_quantity(number) if places == "quantity" else round_money(number)
    if number < 0:
        raise ValidationError(field, f"must not be negative, got {number}")
    return number


def _sale_mode(value: Any) -> SaleMode:
    try:
        return SaleMode(value)
    except ValueError:
        raise ValidationError(
            "sale_mode", f"must be one of {[m.value for m in SaleMode]}"
        ) from None


class InventoryStore(BaseService):
    """
    Service for products and stock levels.

    Contract:
        Every method validates its input before touching the store.

    Guarantees:
        - adjust_quantity never writes a value computed from a cached read.
        - adjust_quantity(id, 0) leaves the stored quantity unchanged.
        - With the default policy a decrement that would take quantity below
          zero writes nothing and raises InsufficientStockError.
    """

    resource = PRODUCTS
    not_found = ProductNotFoundError

    def create(
        self,
        name: str,
        quantity: Decimal | str | int = 0,
        unit_cost: Decimal | str | int = 0,
        unit_price: Decimal | str | int = 0,
        sale_mode: SaleMode | str = SaleMode.UNIT,
    ) -> ProductInfo:
        """
        Create a product.

        Args:
            name: Display name.
            quantity: Opening stock (>= 0, may be fractional for weight goods).
            unit_cost: Purchase cost per unit.
            unit_price: Sale price per unit (per kg for weight goods).
            sale_mode: unit, weight or manual_price.

        Returns:
            Created ProductInfo DTO.
        """
        body = {
            "id": uuid4(),
            "name": _name(name),
            "quantity": _non_negative("quantity", quantity, "quantity"),
            "unit_cost": _non_negative("unit_cost", unit_cost),
            "unit_price": _non_negative("unit_price", unit_price),
            "sale_mode": _sale_mode(sale_mode).value,
        }
        product = ProductInfo.from_record(self.store.create(PRODUCTS, body))
        logger.info(
            "product_created",
            extra={
                "product_id": str(product.id),
                "quantity": str(product.quantity),
                "sale_mode": product.sale_mode.value,
            },
        )
        return product

    def get(self, product_id: UUID) -> ProductInfo:
        """
        Get product by ID.

        Raises:
            ProductNotFoundError: If product not found.
        """
        return ProductInfo.from_record(self._require(product_id))

    def list(
        self,
        *,
        sort_by: str | None = None,
        descending: bool = False,
        search: str | None = None,
    ) -> list[ProductInfo]:
        """
        All products, optionally filtered by a name substring and sorted.

        Without ``sort_by`` the order is whatever the store returns.
        """
        if sort_by is not None and sort_by not in SORT_KEYS:
            raise ValidationError("sort_by", f"must be one of {sorted(SORT_KEYS)}")

        products = [ProductInfo.from_record(r) for r in self.store.list(PRODUCTS)]
        if search:
            needle = search.casefold()
            products = [p for p in products if needle in p.name.casefold()]
        if sort_by is not None:
            key = SORT_KEYS[sort_by]
            products.sort(key=lambda p: (key(p), str(p.id)), reverse=descending)
        return products

    def update(self, product_id: UUID, patch: Mapping[str, Any]) -> ProductInfo:
        """
        Edit name, prices or sale mode.

        Raises:
            ValidationError: unknown field (including quantity) or bad value.
            ProductNotFoundError: If product not found.
        """
        reject_unknown_fields(patch, EDITABLE_FIELDS)
        changes: dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = _name(patch["name"])
        if "unit_cost" in patch:
            changes["unit_cost"] = _non_negative("unit_cost", patch["unit_cost"])
        if "unit_price" in patch:
            changes["unit_price"] = _non_negative("unit_price", patch["unit_price"])
        if "sale_mode" in patch:
            changes["sale_mode"] = _sale_mode(patch["sale_mode"]).value

        record_id = _parse_id(product_id)
        record = self.store.patch(PRODUCTS, record_id, changes)
        if record is None:
            raise ProductNotFoundError(str(product_id))
        logger.info(
            "product_updated",
            extra={"product_id": str(record_id), "fields": sorted(changes)},
        )
        return ProductInfo.from_record(record)

    def remove(self, product_id: UUID) -> None:
        record_id = _parse_id(product_id)
        if not self.store.delete(PRODUCTS, record_id):
            raise ProductNotFoundError(str(product_id))
        logger.info("product_removed", extra={"product_id": str(record_id)})

    def adjust_quantity(
        self,
        product_id: UUID,
        delta: Decimal | str | int,
        *,
        allow_negative: bool = False,
    ) -> ProductInfo:
        """
        Add ``delta`` (negative to take stock out) to the persisted quantity.

        Applied as one conditional UPDATE inside one store transaction.
        A decrement only matches while the result stays >= 0, unless
        ``allow_negative`` is set.  Increments always apply, so a backordered
        product can be restocked in steps.

        Args:
            product_id: Product to adjust.
            delta: Signed change; fractional for weight goods.
            allow_negative: Record a backorder instead of rejecting.

        Returns:
            The product as persisted after the adjustment.

        Raises:
            ValidationError: delta is not a number.
            ProductNotFoundError: If product not found.
            InsufficientStockError: the decrement would go below zero.
        """
        record_id = _parse_id(product_id)
        try:
            delta = round_quantity(to_decimal(delta))
        except ValueError as exc:
            raise ValidationError("delta", str(exc)) from None

        with LogContext.bind(product_id=str(record_id)):
            if delta == 0:
                # Nothing to write; report the persisted value.
                return self.get(record_id)

            floor = Decimal("0") if delta < 0 and not allow_negative else None
            result = self.store.increment(PRODUCTS, record_id, "quantity", delta, floor)
            if result is None:
                raise ProductNotFoundError(str(product_id))

            product = ProductInfo.from_record(result.record)
            if not result.applied:
                logger.warning(
                    "stock_adjustment_rejected",
                    extra={"delta": str(delta), "available": str(product.quantity)},
                )
                raise InsufficientStockError(str(record_id), product.quantity, -delta)

            logger.info(
                "stock_adjusted",
                extra={"delta": str(delta), "quantity": str(product.quantity)},
            )
            if product.quantity < 0:
                logger.warning(
                    "stock_backordered",
                    extra={"quantity": str(product.quantity)},
                )
            return product
