"""
Tests for TransactionLedger.

Covers:
- Append validation and round trip
- Partial edits: merge, invariant re-validation, timestamp preservation
- Removal
- Filtering by search, kind, register, category and period
- Explicit ordering
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from retail_kernel.domain.dtos import TransactionKind
from retail_kernel.domain.periods import PeriodSelector
from retail_kernel.exceptions import (
    CategoryNotFoundError,
    InvariantViolationError,
    RegisterNotFoundError,
    TransactionNotFoundError,
    ValidationError,
)
from retail_kernel.services.ledger_service import TransactionQuery


@pytest.fixture
def expense(ledger, cash_register, supplies_category):
    def _expense(description="Purchase of flour", amount="40.00", **kwargs):
        return ledger.append(
            description=description,
            amount=amount,
            kind=TransactionKind.OUTFLOW,
            register_id=cash_register.id,
            category_id=kwargs.pop("category_id", supplies_category.id),
            **kwargs,
        )
    return _expense


class TestAppend:

    def test_round_trip(self, ledger, cash_register, sale_category, clock):
        txn = ledger.append(
            description="Sale: 1x Soda",
            amount=Decimal("10.00"),
            kind=TransactionKind.INFLOW,
            register_id=cash_register.id,
            category_id=sale_category.id,
        )

        stored = ledger.get(txn.id)
        assert stored.description == "Sale: 1x Soda"
        assert stored.amount == Decimal("10.00")
        assert stored.kind == TransactionKind.INFLOW
        assert stored.category_id == sale_category.id
        assert stored.register_id == cash_register.id
        assert stored.occurred_at == clock.now_utc()

    def test_backdated_entry_keeps_given_timestamp(self, expense):
        when = datetime(2024, 1, 5, 9, 30, tzinfo=timezone.utc)
        txn = expense(occurred_at=when)
        assert txn.occurred_at == when

    def test_amount_string_is_rounded(self, expense):
        assert expense(amount="12.345").amount == Decimal("12.35")

    def test_category_is_optional(self, expense):
        assert expense(category_id=None).category_id is None

    @pytest.mark.parametrize("amount", ["0", "-1", "0.001", "abc", None])
    def test_non_positive_or_bad_amount_rejected(self, expense, ledger, amount):
        with pytest.raises(ValidationError) as exc_info:
            expense(amount=amount)
        assert exc_info.value.field == "amount"
        assert ledger.list() == []

    @pytest.mark.parametrize("description", ["", "   ", None])
    def test_empty_description_rejected(self, expense, description):
        with pytest.raises(ValidationError):
            expense(description=description)

    def test_bad_kind_rejected(self, ledger, cash_register):
        with pytest.raises(ValidationError):
            ledger.append("Rent", "100", "sideways", cash_register.id)

    def test_unknown_register(self, ledger):
        with pytest.raises(RegisterNotFoundError):
            ledger.append("Rent", "100", TransactionKind.OUTFLOW, uuid4())

    def test_unknown_category(self, expense):
        with pytest.raises(CategoryNotFoundError):
            expense(category_id=uuid4())

    def test_category_kind_must_match(self, ledger, cash_register, sale_category):
        with pytest.raises(ValidationError) as exc_info:
            ledger.append(
                "Purchase of flour",
                "40",
                TransactionKind.OUTFLOW,
                cash_register.id,
                sale_category.id,
            )
        assert exc_info.value.field == "category_id"
        assert ledger.list() == []

    def test_appends_are_logged(self, expense, captured_logs):
        txn = expense()
        logs = captured_logs()
        appended = [r for r in logs if r["message"] == "transaction_appended"]
        assert appended and appended[0]["transaction_id"] == str(txn.id)


class TestUpdate:

    def test_partial_merge(self, ledger, expense):
        txn = expense()
        updated = ledger.update(txn.id, {"amount": "45.10"})
        assert updated.amount == Decimal("45.10")
        assert updated.description == txn.description
        assert updated.category_id == txn.category_id

    def test_occurred_at_preserved_across_edits(self, ledger, expense, clock):
        txn = expense()
        clock.advance(hours=1)
        updated = ledger.update(txn.id, {"description": "Purchase of sugar"})
        assert updated.occurred_at == txn.occurred_at

    def test_explicit_backdating(self, ledger, expense):
        txn = expense()
        when = txn.occurred_at - timedelta(days=3)
        assert ledger.update(txn.id, {"occurred_at": when}).occurred_at == when

    def test_non_positive_amount_is_invariant_violation(self, ledger, expense):
        txn = expense()
        with pytest.raises(InvariantViolationError) as exc_info:
            ledger.update(txn.id, {"amount": "0"})
        assert exc_info.value.invariant == "amount_positive"
        assert ledger.get(txn.id).amount == Decimal("40.00")

    def test_kind_flip_against_category_rejected(self, ledger, expense):
        txn = expense()
        with pytest.raises(InvariantViolationError) as exc_info:
            ledger.update(txn.id, {"kind": "inflow"})
        assert exc_info.value.invariant == "category_kind_match"
        assert ledger.get(txn.id).kind == TransactionKind.OUTFLOW

    def test_kind_and_category_changed_together(self, ledger, expense, sale_category):
        txn = expense()
        updated = ledger.update(
            txn.id, {"kind": "inflow", "category_id": sale_category.id}
        )
        assert updated.kind == TransactionKind.INFLOW
        assert updated.category_id == sale_category.id

    def test_unknown_field_rejected(self, ledger, expense):
        txn = expense()
        with pytest.raises(ValidationError) as exc_info:
            ledger.update(txn.id, {"colour": "red"})
        assert exc_info.value.field == "colour"

    def test_missing_transaction(self, ledger):
        with pytest.raises(TransactionNotFoundError):
            ledger.update(uuid4(), {"amount": "1"})


class TestRemove:

    def test_remove(self, ledger, expense):
        txn = expense()
        ledger.remove(txn.id)
        with pytest.raises(TransactionNotFoundError):
            ledger.get(txn.id)

    def test_remove_missing(self, ledger):
        with pytest.raises(TransactionNotFoundError):
            ledger.remove(uuid4())


class TestList:

    def test_filters(
        self, ledger, expense, card_register, sale_category, supplies_category, clock
    ):
        flour = expense("Purchase of flour", "40.00")
        expense("Electricity bill", "90.00", category_id=None)
        sale = ledger.append(
            "Sale: 3x Soda", "30.00", TransactionKind.INFLOW,
            card_register.id, sale_category.id,
        )
        old = expense(
            "Purchase of salt", "5.00",
            occurred_at=clock.now_utc() - timedelta(days=40),
        )

        def ids(query):
            return {t.id for t in ledger.list(query)}

        assert ids(TransactionQuery(search="PURCHASE")) == {flour.id, old.id}
        assert ids(TransactionQuery(kind=TransactionKind.INFLOW)) == {sale.id}
        assert ids(TransactionQuery(register_id=card_register.id)) == {sale.id}
        assert ids(TransactionQuery(category_id=supplies_category.id)) == {flour.id, old.id}
        assert ids(TransactionQuery(search="purchase", period=PeriodSelector.this_month())) == {flour.id}

    def test_sorting(self, ledger, expense, clock):
        a = expense("b-item", "30.00")
        clock.advance(minutes=1)
        b = expense("A-item", "10.00")
        clock.advance(minutes=1)
        c = expense("c-item", "20.00")

        assert [t.id for t in ledger.list(sort_by="occurred_at")] == [a.id, b.id, c.id]
        assert [t.id for t in ledger.list(sort_by="occurred_at", descending=True)] == [c.id, b.id, a.id]
        assert [t.id for t in ledger.list(sort_by="amount")] == [b.id, c.id, a.id]
        assert [t.id for t in ledger.list(sort_by="description")] == [b.id, a.id, c.id]

    def test_unknown_sort_key(self, ledger):
        with pytest.raises(ValidationError):
            ledger.list(sort_by="colour")

    def test_empty(self, ledger):
        assert ledger.list() == []
