"""
Unit tests for decimal and timestamp handling.

Verifies:
- Float input never leaks binary noise
- Rounding determinism (ROUND_HALF_UP)
- UTC normalization of stored timestamps
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from retail_kernel.db.types import (
    MONEY_DECIMAL_PLACES,
    UTCDateTime,
    round_money,
    round_quantity,
    to_decimal,
)


class TestToDecimal:
    """Tests for to_decimal."""

    def test_string(self):
        assert to_decimal("35.50") == Decimal("35.50")

    def test_float_goes_through_str(self):
        """0.1 must not become 0.1000000000000000055511151231257827."""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int(self):
        assert to_decimal(3) == Decimal("3")

    def test_whitespace_stripped(self):
        assert to_decimal(" 4.50 ") == Decimal("4.50")

    @pytest.mark.parametrize("value", [None, True, "abc", "", "NaN", "Infinity"])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


class TestRounding:
    """Tests for round_money and round_quantity."""

    def test_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("-2.345")) == Decimal("-2.35")

    def test_default_places(self):
        assert MONEY_DECIMAL_PLACES == 2
        assert round_money(Decimal("10")) == Decimal("10.00")
        assert str(round_money(Decimal("10"))) == "10.00"

    def test_deterministic(self):
        results = {round_money(Decimal("0.125")) for _ in range(100)}
        assert results == {Decimal("0.13")}

    def test_quantity_three_places(self):
        assert round_quantity(Decimal("0.3335")) == Decimal("0.334")


class TestUTCDateTime:
    """Tests for the UTC timestamp column type."""

    def test_aware_value_normalized_for_postgres(self):
        col = UTCDateTime()
        local = datetime(2024, 3, 13, 12, 0, tzinfo=timezone(timedelta(hours=-3)))
        bound = col.process_bind_param(local, postgresql.dialect())
        assert bound == datetime(2024, 3, 13, 15, 0, tzinfo=timezone.utc)
        assert bound.utcoffset() == timedelta(0)

    def test_sqlite_stores_naive_utc(self):
        col = UTCDateTime()
        local = datetime(2024, 3, 13, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        bound = col.process_bind_param(local, sqlite.dialect())
        assert bound == datetime(2024, 3, 13, 10, 0)
        assert bound.tzinfo is None

    def test_naive_result_tagged_utc(self):
        col = UTCDateTime()
        result = col.process_result_value(datetime(2024, 3, 13, 10, 0), sqlite.dialect())
        assert result.tzinfo == timezone.utc

    def test_none_passthrough(self):
        col = UTCDateTime()
        assert col.process_bind_param(None, sqlite.dialect()) is None
        assert col.process_result_value(None, sqlite.dialect()) is None
