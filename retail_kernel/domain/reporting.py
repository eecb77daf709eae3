"""
Reporting -- pure aggregations over ledger and inventory snapshots.

Responsibility:
    Daily inflow/outflow totals, today's summary, the low-stock list, recent
    activity, the expense breakdown by category, cash-flow totals for a
    filtered ledger view, and the per-day series used by the reports chart.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The
    AggregationReporter selector fetches the snapshots and calls these.

Invariants enforced:
    - Pure given inputs: "now" is always a parameter.
    - Empty snapshots yield zeroed or empty results, never an error.
    - Days are UTC calendar days (periods.to_utc_date).
    - Every returned sequence has a deterministic order.
    - Category inference never mutates the input records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Mapping
from uuid import UUID

from retail_kernel.db.types import round_money
from retail_kernel.domain.classifier import classify
from retail_kernel.domain.dtos import (
    CategoryInfo,
    ProductInfo,
    TransactionInfo,
    TransactionKind,
)
from retail_kernel.domain.periods import PeriodSelector, matches, to_utc_date
from retail_kernel.domain.stock_status import needs_attention, stock_status

ZERO = Decimal("0")

DEFAULT_DAILY_WINDOW = 7


@dataclass(frozen=True)
class DailyTotal:
    day: date
    inflow: Decimal
    outflow: Decimal

    @property
    def net(self) -> Decimal:
        return self.inflow - self.outflow


@dataclass(frozen=True)
class TodaySummary:
    sales_today: Decimal
    expenses_today: Decimal
    profit_today: Decimal
    inventory_value: Decimal


@dataclass(frozen=True)
class CashFlowSummary:
    total_inflow: Decimal
    total_outflow: Decimal
    balance: Decimal


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    amount: Decimal
    inferred: bool


def _sum(amounts: Iterable[Decimal]) -> Decimal:
    return round_money(sum(amounts, ZERO))


def daily_totals(
    transactions: Iterable[TransactionInfo],
    now: date | datetime,
    days: int = DEFAULT_DAILY_WINDOW,
) -> list[DailyTotal]:
    """
    Inflow and outflow per day for the last ``days`` days, oldest first.

    Every day in the window gets an entry, including days with no activity.
    """
    if days <= 0:
        return []
    today = to_utc_date(now)
    first = today - timedelta(days=days - 1)
    inflow = {first + timedelta(days=i): ZERO for i in range(days)}
    outflow = dict(inflow)

    for txn in transactions:
        day = to_utc_date(txn.occurred_at)
        if day not in inflow:
            continue
        if txn.kind == TransactionKind.INFLOW:
            inflow[day] += txn.amount
        else:
            outflow[day] += txn.amount

    return [
        DailyTotal(day=day, inflow=round_money(inflow[day]), outflow=round_money(outflow[day]))
        for day in sorted(inflow)
    ]


def today_summary(
    transactions: Iterable[TransactionInfo],
    products: Iterable[ProductInfo],
    now: date | datetime,
) -> TodaySummary:
    """Sales, expenses and profit for the UTC day of ``now``, plus stock value."""
    today = to_utc_date(now)
    sales = ZERO
    expenses = ZERO
    for txn in transactions:
        if to_utc_date(txn.occurred_at) != today:
            continue
        if txn.kind == TransactionKind.INFLOW:
            sales += txn.amount
        else:
            expenses += txn.amount

    sales = round_money(sales)
    expenses = round_money(expenses)
    return TodaySummary(
        sales_today=sales,
        expenses_today=expenses,
        profit_today=sales - expenses,
        inventory_value=inventory_value(products),
    )


def inventory_value(products: Iterable[ProductInfo]) -> Decimal:
    """Sum of quantity * unit_cost over all products."""
    return _sum(p.stock_value for p in products)


def low_stock(
    products: Iterable[ProductInfo],
    limit: int | None = None,
) -> list[ProductInfo]:
    """
    Products that are out of stock or low, lowest quantity first.

    Manual-price products are not stock tracked and never appear.  Ties are
    broken by name so the list is reproducible.
    """
    flagged = [
        p for p in products
        if p.is_stock_tracked and needs_attention(stock_status(p.quantity))
    ]
    flagged.sort(key=lambda p: (p.quantity, p.name.casefold(), str(p.id)))
    if limit is not None:
        return flagged[:limit]
    return flagged


def recent_activity(
    transactions: Iterable[TransactionInfo],
    limit: int = 5,
) -> list[TransactionInfo]:
    """Most recent ledger records first, truncated to ``limit``."""
    ordered = sorted(
        transactions,
        key=lambda t: (t.occurred_at, str(t.id)),
        reverse=True,
    )
    return ordered[:limit]


def resolve_category(
    txn: TransactionInfo,
    categories: Mapping[UUID, CategoryInfo],
) -> tuple[str, bool]:
    """
    Display category for a record: (name, inferred).

    The explicit category reference wins; records without one (or whose
    category no longer exists) fall back to the description classifier.
    """
    if txn.category_id is not None:
        category = categories.get(txn.category_id)
        if category is not None:
            return category.name, False
    return classify(txn.description), True


def category_breakdown(
    transactions: Iterable[TransactionInfo],
    categories: Iterable[CategoryInfo],
    now: date | datetime,
    period: PeriodSelector | None = None,
) -> list[CategoryTotal]:
    """
    Outflow totals per resolved category within ``period``.

    Sorted by amount descending, then by category name.
    """
    period = period or PeriodSelector.all()
    by_id = {c.id: c for c in categories}
    totals: dict[str, Decimal] = {}
    inferred: dict[str, bool] = {}

    for txn in transactions:
        if txn.kind != TransactionKind.OUTFLOW:
            continue
        if not matches(txn.occurred_at, now, period):
            continue
        name, was_inferred = resolve_category(txn, by_id)
        totals[name] = totals.get(name, ZERO) + txn.amount
        inferred[name] = inferred.get(name, True) and was_inferred

    rows = [
        CategoryTotal(category=name, amount=round_money(amount), inferred=inferred[name])
        for name, amount in totals.items()
    ]
    rows.sort(key=lambda row: (-row.amount, row.category))
    return rows


def cash_flow_summary(transactions: Iterable[TransactionInfo]) -> CashFlowSummary:
    """Totals for an already-filtered ledger view."""
    inflow = ZERO
    outflow = ZERO
    for txn in transactions:
        if txn.kind == TransactionKind.INFLOW:
            inflow += txn.amount
        else:
            outflow += txn.amount
    inflow = round_money(inflow)
    outflow = round_money(outflow)
    return CashFlowSummary(
        total_inflow=inflow,
        total_outflow=outflow,
        balance=inflow - outflow,
    )


def period_series(
    transactions: Iterable[TransactionInfo],
    now: date | datetime,
    period: PeriodSelector,
) -> list[DailyTotal]:
    """
    Inflow/outflow per day for the days that have activity in ``period``.

    Unlike daily_totals, empty days are skipped; used for long windows such
    as "this year" where a dense series is not wanted.
    """
    inflow: dict[date, Decimal] = {}
    outflow: dict[date, Decimal] = {}
    for txn in transactions:
        if not matches(txn.occurred_at, now, period):
            continue
        day = to_utc_date(txn.occurred_at)
        inflow.setdefault(day, ZERO)
        outflow.setdefault(day, ZERO)
        if txn.kind == TransactionKind.INFLOW:
            inflow[day] += txn.amount
        else:
            outflow[day] += txn.amount

    return [
        DailyTotal(day=day, inflow=round_money(inflow[day]), outflow=round_money(outflow[day]))
        for day in sorted(inflow)
    ]
