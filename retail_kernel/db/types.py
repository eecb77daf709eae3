"""
Module: retail_kernel.db.types
Responsibility: Annotated type aliases and utility functions for money,
    quantity and timestamp columns.  Centralizes precision, rounding and
    timezone normalization so every model and service uses identical rules.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for money.  to_decimal() converts through str() so binary
      floating point noise never reaches the store.
    - round_money() is the ONLY sanctioned rounding function for monetary
      values (currency minor units, ROUND_HALF_UP).
    - Every persisted timestamp is timezone-aware UTC (UTCDateTime).

Failure modes:
    - ValueError from to_decimal() on values that are not numbers.
"""

from datetime import timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any

from sqlalchemy import DateTime, Numeric
from sqlalchemy.types import TypeDecorator

# Rounding constants
MONEY_DECIMAL_PLACES = 2
QUANTITY_DECIMAL_PLACES = 3
DEFAULT_ROUNDING = ROUND_HALF_UP

# Monetary amount in currency minor-unit precision
Money = Annotated[Decimal, Numeric(18, MONEY_DECIMAL_PLACES)]

# Stock quantity; fractional for goods sold by weight
Quantity = Annotated[Decimal, Numeric(18, QUANTITY_DECIMAL_PLACES)]


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime normalized to UTC on the way in and out.

    SQLite drops tzinfo on storage; values read back naive are UTC wall
    clock and are re-tagged as such.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def to_decimal(value: Any) -> Decimal:
    """
    Convert a user-supplied number to Decimal without binary float noise.

    Raises:
        ValueError: If value is None, a bool, or not numeric.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to specified decimal places.

    This is the ONLY sanctioned rounding function for monetary values in the
    kernel.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "1." + "0" * decimal_places if decimal_places else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def round_quantity(value: Decimal) -> Decimal:
    """Round a stock quantity to the stored precision."""
    return round_money(value, QUANTITY_DECIMAL_PLACES)
