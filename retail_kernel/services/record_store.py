"""
RecordStore -- the CRUD contract every component persists through.

Responsibility:
    Defines the small record-store interface consumed by the ledger, the
    inventory and the reference-data loader (get, list, create, update,
    patch, delete, plus the atomic ``increment`` used for stock), and the
    SQLAlchemy implementation of it.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.  Components receive
    a RecordStore instance; none of them reaches for a module-level session.

Invariants enforced:
    - Records are plain dicts keyed by column name; money and quantities are
      Decimal, identifiers UUID, timestamps aware UTC datetimes.
    - One transactional session scope per call.  A call either fully applies
      or leaves the store untouched.
    - ``increment`` is one conditional UPDATE against the persisted value,
      issued as the first statement of its transaction, followed by a read
      of the updated row in the same transaction.  No value cached by the
      caller is ever written back.

Failure modes:
    - StoreUnavailableError wrapping any SQLAlchemyError (connection loss,
      lock or statement timeout, constraint failure).  Never retried here.
    - ValueError for an unknown resource or unknown/missing fields; these
      are programming errors, services validate caller input first.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from retail_kernel.db.base import Base
from retail_kernel.db.engine import session_scope
from retail_kernel.exceptions import StoreUnavailableError
from retail_kernel.logging_config import get_logger
from retail_kernel.models import Category, LedgerTransaction, Product, Register

logger = get_logger("services.record_store")

TRANSACTIONS = "transactions"
PRODUCTS = "products"
REGISTERS = "registers"
CATEGORIES = "categories"

RESOURCES: dict[str, type[Base]] = {
    TRANSACTIONS: LedgerTransaction,
    PRODUCTS: Product,
    REGISTERS: Register,
    CATEGORIES: Category,
}

# Maintained by the store, never accepted in a body
_MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})

Record = dict[str, Any]


@dataclass(frozen=True)
class IncrementResult:
    """
    Outcome of an atomic increment on an existing record.

    ``applied`` is False when the floor condition rejected the change; the
    record then shows the persisted value that caused the rejection.
    """

    record: Record
    applied: bool


class RecordStore(ABC):
    """
    Abstract record store.

    Contract:
        Lookups of a missing id return None (``get``, ``update``, ``patch``,
        ``increment``) or False (``delete``); services turn that into the
        appropriate NotFoundError.  ``list`` makes no ordering promise.
    """

    @abstractmethod
    def get(self, resource: str, record_id: UUID) -> Record | None:
        ...

    @abstractmethod
    def list(self, resource: str) -> list[Record]:
        ...

    @abstractmethod
    def create(self, resource: str, body: Mapping[str, Any]) -> Record:
        ...

    @abstractmethod
    def update(
        self, resource: str, record_id: UUID, body: Mapping[str, Any]
    ) -> Record | None:
        """Replace every writable field of a record."""
        ...

    @abstractmethod
    def patch(
        self, resource: str, record_id: UUID, partial: Mapping[str, Any]
    ) -> Record | None:
        """Overwrite only the fields present in ``partial``."""
        ...

    @abstractmethod
    def delete(self, resource: str, record_id: UUID) -> bool:
        ...

    @abstractmethod
    def increment(
        self,
        resource: str,
        record_id: UUID,
        field: str,
        delta: Decimal,
        floor: Decimal | None = None,
    ) -> IncrementResult | None:
        """
        Atomically add ``delta`` to a numeric field.

        With a ``floor``, the change is applied only if the resulting value
        stays >= floor; otherwise nothing is written and ``applied`` is
        False.
        """
        ...


def _model_for(resource: str) -> type[Base]:
    try:
        return RESOURCES[resource]
    except KeyError:
        raise ValueError(f"Unknown resource: {resource!r}") from None


def _writable_fields(model: type[Base]) -> frozenset[str]:
    return frozenset(
        attr.key for attr in model.__mapper__.column_attrs
    ) - _MANAGED_FIELDS


def _to_record(row: Base) -> Record:
    return {
        attr.key: getattr(row, attr.key)
        for attr in row.__mapper__.column_attrs
    }


def _check_fields(
    model: type[Base],
    body: Mapping[str, Any],
    *,
    require_all: bool,
    allow_id: bool = False,
) -> None:
    writable = _writable_fields(model)
    allowed = writable | {"id"} if allow_id else writable
    unknown = set(body) - allowed
    if unknown:
        raise ValueError(
            f"Unknown fields for {model.__tablename__}: {sorted(unknown)}"
        )
    if require_all:
        missing = writable - set(body)
        if missing:
            raise ValueError(
                f"Missing fields for {model.__tablename__}: {sorted(missing)}"
            )


class SqlRecordStore(RecordStore):
    """
    RecordStore over SQLAlchemy.

    Each call opens its own session from the injected factory and commits
    (or rolls back) before returning, so the store is safe to share between
    threads.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def _fail(self, operation: str, resource: str, exc: SQLAlchemyError):
        logger.error(
            "store_call_failed",
            extra={
                "operation": operation,
                "resource": resource,
                "error_type": type(exc).__name__,
            },
        )
        return StoreUnavailableError(operation, resource, str(exc).splitlines()[0])

    def get(self, resource: str, record_id: UUID) -> Record | None:
        model = _model_for(resource)
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(model, record_id)
                return _to_record(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise self._fail("get", resource, exc) from exc

    def list(self, resource: str) -> list[Record]:
        model = _model_for(resource)
        try:
            with session_scope(self._session_factory) as session:
                rows = session.execute(select(model)).scalars().all()
                return [_to_record(row) for row in rows]
        except SQLAlchemyError as exc:
            raise self._fail("list", resource, exc) from exc

    def create(self, resource: str, body: Mapping[str, Any]) -> Record:
        model = _model_for(resource)
        _check_fields(model, body, require_all=False, allow_id=True)
        try:
            with session_scope(self._session_factory) as session:
                row = model(**body)
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_record(row)
        except SQLAlchemyError as exc:
            raise self._fail("create", resource, exc) from exc

    def update(
        self, resource: str, record_id: UUID, body: Mapping[str, Any]
    ) -> Record | None:
        model = _model_for(resource)
        _check_fields(model, body, require_all=True)
        return self._write("update", model, resource, record_id, body)

    def patch(
        self, resource: str, record_id: UUID, partial: Mapping[str, Any]
    ) -> Record | None:
        model = _model_for(resource)
        _check_fields(model, partial, require_all=False)
        return self._write("patch", model, resource, record_id, partial)

    def _write(
        self,
        operation: str,
        model: type[Base],
        resource: str,
        record_id: UUID,
        values: Mapping[str, Any],
    ) -> Record | None:
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(model, record_id)
                if row is None:
                    return None
                for key, value in values.items():
                    setattr(row, key, value)
                session.flush()
                session.refresh(row)
                return _to_record(row)
        except SQLAlchemyError as exc:
            raise self._fail(operation, resource, exc) from exc

    def delete(self, resource: str, record_id: UUID) -> bool:
        model = _model_for(resource)
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(model, record_id)
                if row is None:
                    return False
                session.delete(row)
                return True
        except SQLAlchemyError as exc:
            raise self._fail("delete", resource, exc) from exc

    def increment(
        self,
        resource: str,
        record_id: UUID,
        field: str,
        delta: Decimal,
        floor: Decimal | None = None,
    ) -> IncrementResult | None:
        model = _model_for(resource)
        if field not in _writable_fields(model):
            raise ValueError(f"Unknown field for {resource}: {field!r}")
        column = getattr(model, field)

        stmt = (
            sql_update(model)
            .where(model.id == record_id)
            .values({field: column + delta})
            .execution_options(synchronize_session=False)
        )
        if floor is not None:
            stmt = stmt.where(column + delta >= floor)

        try:
            with session_scope(self._session_factory) as session:
                # The UPDATE must be the first statement: it takes the row
                # (PostgreSQL) or database (SQLite) write lock before any read.
                applied = session.execute(stmt).rowcount == 1
                row = session.get(model, record_id, populate_existing=True)
                if row is None:
                    return None
                return IncrementResult(record=_to_record(row), applied=applied)
        except SQLAlchemyError as exc:
            raise self._fail("increment", resource, exc) from exc
