"""Tests for the checkout cart."""

from decimal import Decimal
from uuid import uuid4

import pytest

from retail_kernel.domain.cart import Cart, change_due
from retail_kernel.domain.dtos import ProductInfo, SaleMode
from retail_kernel.exceptions import ValidationError


def _product(name="Soda", price="10.00", mode=SaleMode.UNIT, quantity="50"):
    return ProductInfo(
        id=uuid4(),
        name=name,
        quantity=Decimal(quantity),
        unit_cost=Decimal("4.00"),
        unit_price=Decimal(price),
        sale_mode=mode,
    )


class TestCartLines:

    def test_unit_line_total(self):
        cart = Cart()
        line = cart.add(_product(price="10.00"), 2)
        assert line.line_total == Decimal("20.00")
        assert line.sell_quantity == Decimal("2")

    def test_weight_line_rounds_to_cents(self):
        cart = Cart()
        line = cart.add(_product("Rice", price="7.99", mode=SaleMode.WEIGHT), "0.333")
        # 0.333 * 7.99 = 2.66067
        assert line.line_total == Decimal("2.66")

    def test_manual_price_line_uses_typed_amount(self):
        cart = Cart()
        line = cart.add(
            _product("Service", price="0", mode=SaleMode.MANUAL_PRICE),
            manual_amount="15.50",
        )
        assert line.line_total == Decimal("15.50")
        assert line.sell_quantity == Decimal("1")
        assert not line.is_stock_tracked

    def test_manual_price_requires_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            Cart().add(_product(mode=SaleMode.MANUAL_PRICE))
        assert exc_info.value.field == "manual_amount"

    @pytest.mark.parametrize("quantity", [0, -1, "0.0001"])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError):
            Cart().add(_product(), quantity)

    def test_zero_price_product_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Cart().add(_product(price="0"), 3)
        assert exc_info.value.field == "line_total"

    @pytest.mark.parametrize("amount", ["0", "-5", "abc"])
    def test_bad_manual_amount_rejected(self, amount):
        with pytest.raises(ValidationError):
            Cart().add(_product(mode=SaleMode.MANUAL_PRICE), manual_amount=amount)

    def test_line_ids_are_unique_after_removal(self):
        cart = Cart()
        first = cart.add(_product(), 1)
        cart.remove(first.line_id)
        second = cart.add(_product(), 1)
        assert second.line_id != first.line_id

    def test_remove_unknown_line(self):
        with pytest.raises(ValidationError):
            Cart().remove(99)


class TestCartTotals:

    def test_total_and_description(self):
        cart = Cart()
        cart.add(_product("Soda", "10.00"), 2)
        cart.add(_product("Bulk Rice", "5.00", SaleMode.WEIGHT), "1.5")
        assert cart.total == Decimal("27.50")
        assert cart.describe() == "Sale: 2x Soda, 1.5kg Bulk Rice"

    def test_empty_cart(self):
        cart = Cart()
        assert cart.is_empty
        assert cart.total == Decimal("0.00")

    def test_stock_requirements_merge_lines_and_skip_manual(self):
        soda = _product("Soda")
        cart = Cart()
        cart.add(soda, 2)
        cart.add(soda, 1)
        cart.add(_product("Tip", mode=SaleMode.MANUAL_PRICE), manual_amount="3")
        assert cart.stock_requirements() == {soda.id: Decimal("3")}

    def test_clear(self):
        cart = Cart()
        cart.add(_product(), 1)
        cart.clear()
        assert cart.is_empty


class TestChangeDue:

    def test_change(self):
        assert change_due(Decimal("35.50"), "40.00") == Decimal("4.50")

    def test_short_payment_is_negative(self):
        assert change_due(Decimal("35.50"), "30.00") == Decimal("-5.50")

    def test_non_numeric_received(self):
        with pytest.raises(ValidationError) as exc_info:
            change_due(Decimal("10"), "ten")
        assert exc_info.value.field == "received_amount"
