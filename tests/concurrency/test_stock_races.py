"""
Stock and ledger safety under concurrent tills.

Stock decrements are a single conditional UPDATE
(quantity = quantity + delta WHERE quantity + delta >= 0), so two tills
selling the last unit can never both succeed and the count never goes
below zero, whatever the interleaving.

Runs against the per-test SQLite file by default (writers serialize on the
database lock); set DATABASE_URL to exercise PostgreSQL row locks.

Run with: pytest tests/concurrency/test_stock_races.py -v
Skip with: pytest -m "not slow_locks"
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from threading import Barrier

import pytest

from retail_kernel.domain.dtos import TransactionKind
from retail_kernel.exceptions import InsufficientStockError
from retail_kernel.services.sale_orchestrator import SaleOrchestrator, SaleStatus

pytestmark = pytest.mark.slow_locks


def _run_concurrently(num_threads, work):
    """Start ``work(i)`` on every thread at once; return results or exceptions."""
    barrier = Barrier(num_threads, timeout=30)

    def _worker(i):
        barrier.wait()
        try:
            return work(i)
        except Exception as exc:  # collected for assertions
            return exc

    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        return list(executor.map(_worker, range(num_threads)))


class TestConcurrentAdjustments:

    def test_last_unit_sold_once(self, inventory, make_product):
        product = make_product("Soda", quantity="1")

        results = _run_concurrently(
            2, lambda _: inventory.adjust_quantity(product.id, Decimal("-1"))
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientStockError)
        assert inventory.get(product.id).quantity == Decimal("0")

    def test_exactly_available_units_sold(self, inventory, make_product):
        product = make_product("Soda", quantity="5")

        results = _run_concurrently(
            10, lambda _: inventory.adjust_quantity(product.id, Decimal("-1"))
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 5
        assert all(isinstance(f, InsufficientStockError) for f in failures)
        assert inventory.get(product.id).quantity == Decimal("0")

    def test_mixed_restock_and_sales_are_not_lost(self, inventory, make_product):
        product = make_product("Soda", quantity="10")
        deltas = [Decimal("-2"), Decimal("3")] * 4

        results = _run_concurrently(len(deltas), lambda i: inventory.adjust_quantity(
            product.id, deltas[i]
        ))

        assert not any(isinstance(r, Exception) for r in results)
        assert inventory.get(product.id).quantity == Decimal("14")


class TestConcurrentLedger:

    def test_parallel_appends_all_recorded(self, ledger, cash_register):
        results = _run_concurrently(8, lambda i: ledger.append(
            description=f"Sale: {i + 1}x Soda",
            amount=Decimal("10.00") * (i + 1),
            kind=TransactionKind.INFLOW,
            register_id=cash_register.id,
        ))

        assert not any(isinstance(r, Exception) for r in results)
        assert len({r.id for r in results}) == 8
        assert len(ledger.list()) == 8


class TestConcurrentCheckout:

    def test_two_tills_cannot_oversell(
        self, ledger, inventory, reference, make_product, card_register
    ):
        product = make_product("Soda", quantity="5")
        tills = [SaleOrchestrator(ledger, inventory, reference) for _ in range(2)]
        for till in tills:
            till.add_line(product.id, 3)
            till.begin_finalize(card_register.id)

        results = _run_concurrently(2, lambda i: tills[i].finalize())

        statuses = sorted(r.status.value for r in results)
        assert statuses.count(SaleStatus.COMMITTED.value) == 1
        loser = next(r for r in results if r.status != SaleStatus.COMMITTED)
        assert loser.status in (SaleStatus.FAILED, SaleStatus.PARTIAL)
        if loser.status == SaleStatus.PARTIAL:
            assert loser.unsynced == (product.id,)

        assert inventory.get(product.id).quantity == Decimal("2")
        recorded = [r for r in results if r.recorded]
        assert len(ledger.list()) == len(recorded)
