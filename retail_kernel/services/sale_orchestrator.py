"""
SaleOrchestrator -- the checkout state machine of one till.

Responsibility:
    Assembles a cart, takes the payment channel (and cash received for cash
    sales), then commits the sale: one ledger entry for the whole cart
    followed by one stock decrement per stock-tracked line.

Architecture position:
    Kernel > Services -- imperative shell.  Cart arithmetic lives in
    domain/cart.py; persistence goes through TransactionLedger and
    InventoryStore only.

States:
    BUILDING --begin_finalize--> FINALIZING --finalize--> COMMITTED
                 <--cancel_finalize--            \\-----> PARTIAL
                                                  \\----> FAILED
    reset() returns to BUILDING from any terminal state.

Commit protocol:
    1. Cash payment check (no store call).
    2. Pre-flight: every stock-tracked product must have enough stock right
       now.  A shortfall fails the sale before anything is written.
    3. Ledger append.  Failure -> FAILED, no stock touched, cart kept.
    4. One adjust_quantity per stock-tracked line.  Failures are collected
       and the remaining lines are still applied; the ledger entry and
       earlier adjustments are never rolled back.  Any failure -> PARTIAL
       with the unsynced product ids.

Invariants enforced:
    - Exactly one ledger entry per committed or partial sale.
    - The pre-flight check is advisory; the conditional UPDATE in
      adjust_quantity is what prevents overselling between two tills.

Failure modes:
    - CheckoutStateError for operations outside their state.
    - ValidationError / InsufficientPaymentError before any write.
    - finalize() itself reports store failures as a SaleResult status.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable
from uuid import UUID

from retail_kernel.domain.cart import Cart, CartLine, CheckoutState, change_due
from retail_kernel.domain.dtos import RegisterInfo, TransactionInfo, TransactionKind
from retail_kernel.exceptions import (
    CheckoutStateError,
    InsufficientPaymentError,
    InsufficientStockError,
    PartialCommitError,
    RetailKernelError,
    SaleFailedError,
    ValidationError,
)
from retail_kernel.logging_config import LogContext, get_logger
from retail_kernel.services.inventory_service import InventoryStore
from retail_kernel.services.ledger_service import TransactionLedger
from retail_kernel.services.reference_data_loader import ReferenceDataLoader

logger = get_logger("services.sale")


class SaleStatus(str, Enum):
    COMMITTED = "committed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class SaleResult:
    """
    Outcome of SaleOrchestrator.finalize().

    COMMITTED: ledger entry written, every stock line applied.
    PARTIAL:   ledger entry written, ``unsynced`` products not decremented.
    FAILED:    nothing written; ``error`` holds the cause.
    """

    status: SaleStatus
    transaction: TransactionInfo | None = None
    unsynced: tuple[UUID, ...] = ()
    change_due: Decimal | None = None
    error: RetailKernelError | None = None

    @property
    def recorded(self) -> bool:
        """True when the sale is in the ledger."""
        return self.transaction is not None

    def raise_for_status(self) -> None:
        if self.status == SaleStatus.PARTIAL:
            raise PartialCommitError(
                str(self.transaction.id), [str(pid) for pid in self.unsynced]
            )
        if self.status == SaleStatus.FAILED:
            raise SaleFailedError(str(self.error)) from self.error


RefreshCallback = Callable[[SaleResult], None]


class SaleOrchestrator:
    """
    Checkout workflow for one till.

    Not thread-safe: each till (or request handler) owns its own
    orchestrator.  Concurrency between tills is resolved by the stores.
    """

    def __init__(
        self,
        ledger: TransactionLedger,
        inventory: InventoryStore,
        reference: ReferenceDataLoader,
        *,
        sale_category_code: str = "SALE",
        description_prefix: str = "Sale",
    ):
        self._ledger = ledger
        self._inventory = inventory
        self._reference = reference
        self._sale_category_code = sale_category_code
        self._description_prefix = description_prefix
        self._cart = Cart()
        self._state = CheckoutState.BUILDING
        self._register: RegisterInfo | None = None
        self._subscribers: list[RefreshCallback] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._cart.lines)

    @property
    def total(self) -> Decimal:
        return self._cart.total

    @property
    def register(self) -> RegisterInfo | None:
        return self._register

    def _require_state(self, operation: str, *allowed: CheckoutState) -> None:
        if self._state not in allowed:
            raise CheckoutStateError(self._state.value, operation)

    def subscribe(self, callback: RefreshCallback) -> Callable[[], None]:
        """
        Register a callback run after every sale that reached the ledger.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add_line(
        self,
        product_id: UUID,
        quantity: Decimal | str | int = 1,
        manual_amount: Decimal | str | None = None,
    ) -> CartLine:
        """Price the product as stored now and append it to the cart."""
        self._require_state("add a line", CheckoutState.BUILDING)
        product = self._inventory.get(product_id)
        line = self._cart.add(product, quantity, manual_amount)
        logger.debug(
            "cart_line_added",
            extra={
                "line_id": line.line_id,
                "product_id": str(line.product_id),
                "line_total": str(line.line_total),
            },
        )
        return line

    def remove_line(self, line_id: int) -> CartLine:
        self._require_state("remove a line", CheckoutState.BUILDING)
        return self._cart.remove(line_id)

    def clear(self) -> None:
        """Cancel the checkout being built.  Purely local."""
        self._require_state("clear the cart", CheckoutState.BUILDING)
        self._cart.clear()

    # ------------------------------------------------------------------
    # Finalizing
    # ------------------------------------------------------------------

    def begin_finalize(self, register_id: UUID) -> RegisterInfo:
        self._require_state("finalize", CheckoutState.BUILDING)
        if self._cart.is_empty:
            raise ValidationError("cart", "is empty")
        self._register = self._reference.register(register_id)
        self._state = CheckoutState.FINALIZING
        return self._register

    def cancel_finalize(self) -> None:
        self._require_state("cancel finalizing", CheckoutState.FINALIZING)
        self._register = None
        self._state = CheckoutState.BUILDING

    def change_due(self, received: Decimal | str) -> Decimal:
        """received - total; negative while the payment is short."""
        return change_due(self._cart.total, received)

    def can_confirm(self, received: Decimal | str | None = None) -> bool:
        if self._state != CheckoutState.FINALIZING:
            return False
        if not self._register.is_cash:
            return True
        return received is not None and self.change_due(received) >= 0

    def finalize(self, received_amount: Decimal | str | None = None) -> SaleResult:
        """
        Commit the sale.

        Raises:
            CheckoutStateError: not FINALIZING.
            InsufficientPaymentError: cash register and received < total.
        """
        self._require_state("commit the sale", CheckoutState.FINALIZING)
        register = self._register
        total = self._cart.total

        change = None
        if register.is_cash:
            if received_amount is None or self.change_due(received_amount) < 0:
                raise InsufficientPaymentError(total, received_amount)
            change = self.change_due(received_amount)

        with LogContext.bind(register_id=str(register.id)):
            failure = self._preflight()
            if failure is None:
                try:
                    txn = self._append_sale(register, total)
                except RetailKernelError as exc:
                    failure = exc
            if failure is not None:
                return self._fail(failure, total)

            with LogContext.bind(sale_id=str(txn.id)):
                unsynced = self._apply_stock()
                return self._recorded(txn, unsynced, change)

    def reset(self) -> None:
        """
        Return to BUILDING after a terminal state.

        A FAILED sale keeps its cart so it can be retried.
        """
        self._require_state(
            "reset",
            CheckoutState.COMMITTED,
            CheckoutState.PARTIAL,
            CheckoutState.FAILED,
        )
        self._register = None
        self._state = CheckoutState.BUILDING

    # ------------------------------------------------------------------
    # Commit steps
    # ------------------------------------------------------------------

    def _preflight(self) -> RetailKernelError | None:
        try:
            for product_id, required in self._cart.stock_requirements().items():
                product = self._inventory.get(product_id)
                if product.quantity < required:
                    return InsufficientStockError(
                        str(product_id), product.quantity, required
                    )
        except RetailKernelError as exc:
            return exc
        return None

    def _append_sale(self, register: RegisterInfo, total: Decimal) -> TransactionInfo:
        category = self._reference.category_by_code(self._sale_category_code)
        return self._ledger.append(
            description=self._cart.describe(self._description_prefix),
            amount=total,
            kind=TransactionKind.INFLOW,
            register_id=register.id,
            category_id=category.id,
        )

    def _apply_stock(self) -> list[UUID]:
        unsynced: list[UUID] = []
        for line in self._cart.lines:
            if not line.is_stock_tracked:
                continue
            try:
                self._inventory.adjust_quantity(line.product_id, -line.sell_quantity)
            except RetailKernelError as exc:
                logger.warning(
                    "sale_stock_line_failed",
                    extra={
                        "product_id": str(line.product_id),
                        "sell_quantity": str(line.sell_quantity),
                        "error_code": exc.code,
                    },
                )
                if line.product_id not in unsynced:
                    unsynced.append(line.product_id)
        return unsynced

    def _fail(self, error: RetailKernelError, total: Decimal) -> SaleResult:
        self._state = CheckoutState.FAILED
        logger.error(
            "sale_failed",
            extra={"total": str(total), "error_code": error.code, "reason": str(error)},
        )
        return SaleResult(status=SaleStatus.FAILED, error=error)

    def _recorded(
        self,
        txn: TransactionInfo,
        unsynced: list[UUID],
        change: Decimal | None,
    ) -> SaleResult:
        if unsynced:
            self._state = CheckoutState.PARTIAL
            result = SaleResult(
                status=SaleStatus.PARTIAL,
                transaction=txn,
                unsynced=tuple(unsynced),
                change_due=change,
            )
            logger.error(
                "sale_partially_committed",
                extra={
                    "transaction_id": str(txn.id),
                    "unsynced": [str(pid) for pid in unsynced],
                },
            )
        else:
            self._state = CheckoutState.COMMITTED
            result = SaleResult(
                status=SaleStatus.COMMITTED,
                transaction=txn,
                change_due=change,
            )
            logger.info(
                "sale_committed",
                extra={
                    "transaction_id": str(txn.id),
                    "total": str(txn.amount),
                    "line_count": len(self._cart.lines),
                },
            )

        self._cart.clear()
        self._notify(result)
        return result

    def _notify(self, result: SaleResult) -> None:
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception:
                # Outcome stands regardless of listeners.
                logger.exception("refresh_subscriber_failed")
