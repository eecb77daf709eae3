"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- Database sessions
- Time/clock (callers pass "now")
- I/O

All domain objects are immutable and deterministic, except the Cart,
which is the local working state of one checkout.
"""

from retail_kernel.domain.cart import Cart, CartLine, CheckoutState, change_due
from retail_kernel.domain.classifier import classify
from retail_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from retail_kernel.domain.dtos import (
    CategoryInfo,
    ProductInfo,
    RegisterInfo,
    SaleMode,
    TransactionInfo,
    TransactionKind,
)
from retail_kernel.domain.periods import PeriodKind, PeriodSelector, matches, window
from retail_kernel.domain.stock_status import (
    LOW_STOCK_THRESHOLD,
    StockStatus,
    needs_attention,
    stock_status,
)

__all__ = [
    "Cart",
    "CartLine",
    "CategoryInfo",
    "CheckoutState",
    "Clock",
    "DeterministicClock",
    "LOW_STOCK_THRESHOLD",
    "PeriodKind",
    "PeriodSelector",
    "ProductInfo",
    "RegisterInfo",
    "SaleMode",
    "StockStatus",
    "SystemClock",
    "TransactionInfo",
    "TransactionKind",
    "change_due",
    "classify",
    "matches",
    "needs_attention",
    "stock_status",
    "window",
]
