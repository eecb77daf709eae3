"""
Module: retail_kernel.selectors.report_selector
Responsibility: Dashboard and report queries.  Fetches ledger and inventory
    snapshots through the record store, evaluates them with the pure
    functions in domain/reporting.py against the injected clock, and offers
    product and transaction lists enriched with stock status and resolved
    category names.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Read-only: only get/list store calls.
    - Inferred categories are display data; nothing is written back.
    - Empty stores yield zeroed summaries and empty lists.
"""

from __future__ import annotations

from dataclasses import dataclass

from retail_kernel.domain.clock import Clock
from retail_kernel.domain.dtos import ProductInfo, TransactionInfo
from retail_kernel.domain.periods import PeriodSelector
from retail_kernel.domain.reporting import (
    CashFlowSummary,
    CategoryTotal,
    DailyTotal,
    TodaySummary,
    cash_flow_summary,
    category_breakdown,
    daily_totals,
    low_stock,
    period_series,
    recent_activity,
    resolve_category,
    today_summary,
)
from retail_kernel.domain.stock_status import StockStatus, needs_attention, stock_status
from retail_kernel.logging_config import get_logger
from retail_kernel.selectors.base import BaseSelector
from retail_kernel.services.inventory_service import InventoryStore
from retail_kernel.services.ledger_service import TransactionLedger, TransactionQuery
from retail_kernel.services.record_store import RecordStore
from retail_kernel.services.reference_data_loader import ReferenceDataLoader

logger = get_logger("selectors.report")


@dataclass(frozen=True)
class AnnotatedProduct:
    product: ProductInfo
    status: StockStatus | None

    @property
    def needs_restock(self) -> bool:
        return self.status is not None and needs_attention(self.status)


@dataclass(frozen=True)
class AnnotatedTransaction:
    transaction: TransactionInfo
    category_name: str
    category_inferred: bool
    register_name: str | None


@dataclass(frozen=True)
class Dashboard:
    """Everything the dashboard page shows, from one pair of snapshots."""

    summary: TodaySummary
    daily: list[DailyTotal]
    low_stock: list[ProductInfo]
    recent: list[TransactionInfo]


class AggregationReporter(BaseSelector):
    """
    Report queries over the ledger and the inventory.

    Contract:
        Every query reads fresh snapshots; nothing is cached between calls.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        *,
        daily_window_days: int = 7,
        recent_activity_limit: int = 5,
        low_stock_limit: int | None = None,
    ):
        super().__init__(store, clock)
        self.daily_window_days = daily_window_days
        self.recent_activity_limit = recent_activity_limit
        self.low_stock_limit = low_stock_limit
        self._ledger = TransactionLedger(store, self.clock)
        self._inventory = InventoryStore(store)
        self._reference = ReferenceDataLoader(store)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def daily_totals(self, days: int | None = None) -> list[DailyTotal]:
        return daily_totals(
            self._ledger.list(),
            self.clock.now_utc(),
            days if days is not None else self.daily_window_days,
        )

    def today_summary(self) -> TodaySummary:
        return today_summary(
            self._ledger.list(),
            self._inventory.list(),
            self.clock.now_utc(),
        )

    def low_stock(self, limit: int | None = None) -> list[ProductInfo]:
        return low_stock(
            self._inventory.list(),
            limit if limit is not None else self.low_stock_limit,
        )

    def recent_activity(self, limit: int | None = None) -> list[TransactionInfo]:
        return recent_activity(
            self._ledger.list(),
            limit if limit is not None else self.recent_activity_limit,
        )

    def dashboard(self) -> Dashboard:
        """Summary, daily chart, low-stock list and recent activity together."""
        now = self.clock.now_utc()
        txns = self._ledger.list()
        products = self._inventory.list()
        dashboard = Dashboard(
            summary=today_summary(txns, products, now),
            daily=daily_totals(txns, now, self.daily_window_days),
            low_stock=low_stock(products, self.low_stock_limit),
            recent=recent_activity(txns, self.recent_activity_limit),
        )
        logger.debug(
            "dashboard_built",
            extra={
                "transaction_count": len(txns),
                "product_count": len(products),
                "low_stock_count": len(dashboard.low_stock),
            },
        )
        return dashboard

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def category_breakdown(
        self, period: PeriodSelector | None = None
    ) -> list[CategoryTotal]:
        return category_breakdown(
            self._ledger.list(),
            self._reference.categories(),
            self.clock.now_utc(),
            period,
        )

    def cash_flow_summary(self, query: TransactionQuery | None = None) -> CashFlowSummary:
        """Totals for the ledger view selected by ``query``."""
        return cash_flow_summary(self._ledger.list(query))

    def period_series(self, period: PeriodSelector) -> list[DailyTotal]:
        return period_series(self._ledger.list(), self.clock.now_utc(), period)

    # ------------------------------------------------------------------
    # Enriched lists
    # ------------------------------------------------------------------

    def annotated_products(
        self,
        *,
        sort_by: str | None = None,
        descending: bool = False,
        search: str | None = None,
    ) -> list[AnnotatedProduct]:
        """
        Products with their stock status.

        Manual-price products carry no status: they are not stock tracked.
        """
        return [
            AnnotatedProduct(
                product=p,
                status=stock_status(p.quantity) if p.is_stock_tracked else None,
            )
            for p in self._inventory.list(
                sort_by=sort_by, descending=descending, search=search
            )
        ]

    def annotated_transactions(
        self,
        query: TransactionQuery | None = None,
        *,
        sort_by: str | None = "occurred_at",
        descending: bool = True,
    ) -> list[AnnotatedTransaction]:
        """Ledger entries with category and register names resolved."""
        categories = {c.id: c for c in self._reference.categories()}
        registers = {r.id: r.name for r in self._reference.registers()}
        rows = []
        for txn in self._ledger.list(query, sort_by=sort_by, descending=descending):
            name, inferred = resolve_category(txn, categories)
            rows.append(
                AnnotatedTransaction(
                    transaction=txn,
                    category_name=name,
                    category_inferred=inferred,
                    register_name=registers.get(txn.register_id),
                )
            )
        return rows
