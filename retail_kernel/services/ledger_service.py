"""
TransactionLedger -- the cash-flow log of the shop.

Responsibility:
    Owns the ledger of financial movements: append, read, partial edit,
    removal and filtered listing.  Every sale recorded by the checkout and
    every manual income/expense entry goes through here.

Architecture position:
    Kernel > Services -- imperative shell over the record store.  Pure
    period logic comes from domain/periods.py.

Invariants enforced:
    - amount > 0, rounded to currency minor units, never a float.
    - The category's kind affinity equals the transaction's kind.
    - occurred_at is set from the injected clock on append unless the caller
      backdates it, and is preserved across edits unless the edit supplies a
      new value.
    - Entries are editable and deletable; the ledger imposes no ordering.
      Callers that need an order ask for one with ``sort_by``.

Failure modes:
    - ValidationError: bad input on append, or unknown/unparseable fields in
      an edit.  Raised before any write.
    - InvariantViolationError: an edit whose merged result breaks the
      amount/kind/category rules.  Nothing is written.
    - TransactionNotFoundError / RegisterNotFoundError /
      CategoryNotFoundError for missing references.
    - StoreUnavailableError from the store, unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Mapping
from uuid import UUID, uuid4

from retail_kernel.db.types import round_money, to_decimal
from retail_kernel.domain.clock import Clock, SystemClock
from retail_kernel.domain.dtos import CategoryInfo, TransactionInfo, TransactionKind
from retail_kernel.domain.periods import PeriodSelector, matches
from retail_kernel.exceptions import (
    CategoryNotFoundError,
    InvariantViolationError,
    RegisterNotFoundError,
    TransactionNotFoundError,
    ValidationError,
)
from retail_kernel.logging_config import get_logger
from retail_kernel.services.base import BaseService, _parse_id, reject_unknown_fields
from retail_kernel.services.record_store import (
    CATEGORIES,
    REGISTERS,
    TRANSACTIONS,
    RecordStore,
)

logger = get_logger("services.ledger")

EDITABLE_FIELDS = frozenset({
    "description",
    "amount",
    "kind",
    "register_id",
    "category_id",
    "occurred_at",
})

SORT_KEYS: dict[str, Callable[[TransactionInfo], Any]] = {
    "occurred_at": lambda t: t.occurred_at,
    "amount": lambda t: t.amount,
    "description": lambda t: t.description.casefold(),
}


@dataclass(frozen=True)
class TransactionQuery:
    """Filter for TransactionLedger.list; unset fields do not filter."""

    search: str | None = None
    kind: TransactionKind | None = None
    register_id: UUID | None = None
    category_id: UUID | None = None
    period: PeriodSelector = field(default_factory=PeriodSelector.all)

    def matches(self, txn: TransactionInfo, now: datetime) -> bool:
        if self.search and self.search.casefold() not in txn.description.casefold():
            return False
        if self.kind is not None and txn.kind != self.kind:
            return False
        if self.register_id is not None and txn.register_id != self.register_id:
            return False
        if self.category_id is not None and txn.category_id != self.category_id:
            return False
        return matches(txn.occurred_at, now, self.period)


def _description(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("description", "must be non-empty text")
    return value.strip()


def _amount(value: Any) -> Decimal:
    try:
        amount = round_money(to_decimal(value))
    except ValueError as exc:
        raise ValidationError("amount", str(exc)) from None
    if amount <= 0:
        raise ValidationError("amount", f"must be positive, got {amount}")
    return amount


def _kind(value: Any) -> TransactionKind:
    try:
        return TransactionKind(value)
    except ValueError:
        raise ValidationError("kind", f"must be inflow or outflow, got {value!r}") from None


def _timestamp(value: Any) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError("occurred_at", "must be a datetime")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TransactionLedger(BaseService):
    """
    Service for ledger entries.

    Contract:
        Returns TransactionInfo DTOs, never store records.

    Guarantees:
        - No store write happens unless every validation passed.
    """

    resource = TRANSACTIONS
    not_found = TransactionNotFoundError

    def __init__(self, store: RecordStore, clock: Clock | None = None):
        super().__init__(store)
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Reference checks
    # ------------------------------------------------------------------

    def _check_register(self, register_id: Any) -> UUID:
        register_id = _parse_id(register_id, "register_id")
        if self.store.get(REGISTERS, register_id) is None:
            raise RegisterNotFoundError(str(register_id))
        return register_id

    def _category(self, category_id: Any) -> CategoryInfo | None:
        if category_id is None:
            return None
        category_id = _parse_id(category_id, "category_id")
        record = self.store.get(CATEGORIES, category_id)
        if record is None:
            raise CategoryNotFoundError(str(category_id))
        return CategoryInfo.from_record(record)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def append(
        self,
        description: str,
        amount: Decimal | str,
        kind: TransactionKind | str,
        register_id: UUID,
        category_id: UUID | None = None,
        occurred_at: datetime | None = None,
    ) -> TransactionInfo:
        """
        Record a new movement.

        Args:
            description: Non-empty text.
            amount: Positive amount; strings and ints are accepted.
            kind: inflow or outflow.
            register_id: Existing register.
            category_id: Optional existing category with a matching kind.
            occurred_at: Backdate the entry; defaults to the clock's now.

        Returns:
            The stored entry.
        """
        body = {
            "id": uuid4(),
            "description": _description(description),
            "amount": _amount(amount),
            "kind": _kind(kind),
            "occurred_at": (
                _timestamp(occurred_at) if occurred_at is not None
                else self._clock.now_utc()
            ),
        }
        body["register_id"] = self._check_register(register_id)
        category = self._category(category_id)
        if category is not None and not category.accepts(body["kind"]):
            raise ValidationError(
                "category_id",
                f"category {category.code} is for {category.kind.value} entries",
            )
        body["category_id"] = category.id if category else None
        body["kind"] = body["kind"].value

        record = self.store.create(TRANSACTIONS, body)
        txn = TransactionInfo.from_record(record)
        logger.info(
            "transaction_appended",
            extra={
                "transaction_id": str(txn.id),
                "kind": txn.kind.value,
                "amount": str(txn.amount),
                "register_id": str(txn.register_id),
            },
        )
        return txn

    def update(self, txn_id: UUID, patch: Mapping[str, Any]) -> TransactionInfo:
        """
        Partially edit an entry.

        The patch is merged over the stored record and the merged result is
        validated as a whole before the single write.
        """
        reject_unknown_fields(patch, EDITABLE_FIELDS)
        current = TransactionInfo.from_record(self._require(txn_id))

        merged: dict[str, Any] = {
            "description": current.description,
            "amount": current.amount,
            "kind": current.kind,
            "register_id": current.register_id,
            "category_id": current.category_id,
            "occurred_at": current.occurred_at,
        }

        if "description" in patch:
            merged["description"] = _description(patch["description"])
        if "amount" in patch:
            try:
                merged["amount"] = round_money(to_decimal(patch["amount"]))
            except ValueError as exc:
                raise ValidationError("amount", str(exc)) from None
        if "kind" in patch:
            merged["kind"] = _kind(patch["kind"])
        if "occurred_at" in patch:
            merged["occurred_at"] = _timestamp(patch["occurred_at"])
        if "register_id" in patch:
            merged["register_id"] = self._check_register(patch["register_id"])
        if "category_id" in patch:
            merged["category_id"] = (
                _parse_id(patch["category_id"], "category_id")
                if patch["category_id"] is not None else None
            )

        if merged["amount"] <= 0:
            raise InvariantViolationError(
                str(current.id),
                "amount_positive",
                f"amount would become {merged['amount']}",
            )
        category = self._category(merged["category_id"])
        if category is not None and not category.accepts(merged["kind"]):
            raise InvariantViolationError(
                str(current.id),
                "category_kind_match",
                f"category {category.code} is for {category.kind.value} entries, "
                f"entry would be {merged['kind'].value}",
            )

        merged["kind"] = merged["kind"].value
        record = self.store.update(TRANSACTIONS, current.id, merged)
        if record is None:
            raise TransactionNotFoundError(str(current.id))

        txn = TransactionInfo.from_record(record)
        logger.info(
            "transaction_updated",
            extra={
                "transaction_id": str(txn.id),
                "fields": sorted(patch),
            },
        )
        return txn

    def remove(self, txn_id: UUID) -> None:
        record_id = _parse_id(txn_id)
        if not self.store.delete(TRANSACTIONS, record_id):
            raise TransactionNotFoundError(str(txn_id))
        logger.info("transaction_removed", extra={"transaction_id": str(record_id)})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, txn_id: UUID) -> TransactionInfo:
        return TransactionInfo.from_record(self._require(txn_id))

    def list(
        self,
        query: TransactionQuery | None = None,
        *,
        sort_by: str | None = None,
        descending: bool = False,
    ) -> list[TransactionInfo]:
        """
        Entries matching ``query``.

        Without ``sort_by`` the order is whatever the store returns.

        Raises:
            ValidationError: unknown sort key.
        """
        if sort_by is not None and sort_by not in SORT_KEYS:
            raise ValidationError("sort_by", f"must be one of {sorted(SORT_KEYS)}")

        txns = [TransactionInfo.from_record(r) for r in self.store.list(TRANSACTIONS)]
        if query is not None:
            now = self._clock.now_utc()
            txns = [t for t in txns if query.matches(t, now)]
        if sort_by is not None:
            key = SORT_KEYS[sort_by]
            txns.sort(key=lambda t: (key(t), str(t.id)), reverse=descending)
        return txns
