"""
Stock status -- inventory tiers that drive low-stock alerts.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - LOW_STOCK_THRESHOLD is owned here; callers ask for a status and never
      compare quantities against the threshold themselves.
"""

from decimal import Decimal
from enum import Enum

LOW_STOCK_THRESHOLD = Decimal("20")


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"


def stock_status(quantity: Decimal | int) -> StockStatus:
    """
    Map a quantity on hand to its status tier.

    0 is out of stock, up to and including the threshold is low, anything
    above is in stock.  Negative quantities (recorded backorders) count as
    out of stock.
    """
    quantity = Decimal(quantity)
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def needs_attention(status: StockStatus) -> bool:
    """True for the tiers that belong on the low-stock alert list."""
    return status in (StockStatus.OUT_OF_STOCK, StockStatus.LOW_STOCK)
