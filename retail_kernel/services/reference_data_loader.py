"""
Reference Data Loader - seeds and resolves registers and categories.

Registers (payment channels) and categories are read-only for the rest of
the kernel.  The loader writes them from configuration definitions and
resolves them by code, so that callers configure "CASH" or "SALE" instead
of carrying database identifiers around.

Seeding is idempotent: definitions are matched by code, existing rows are
left untouched and only missing codes are created.
"""

from __future__ import annotations

from typing import Any, Iterable
from uuid import UUID, uuid4

from retail_kernel.domain.dtos import CategoryInfo, RegisterInfo, TransactionKind
from retail_kernel.exceptions import CategoryNotFoundError, RegisterNotFoundError
from retail_kernel.logging_config import get_logger
from retail_kernel.services.base import _parse_id
from retail_kernel.services.record_store import CATEGORIES, REGISTERS, RecordStore

logger = get_logger("services.reference_data")


class ReferenceDataLoader:
    """
    Loads and seeds reference data.

    Accepts any definition objects exposing ``code``/``name`` plus
    ``is_cash`` (registers) or ``kind`` (categories), such as the
    retail_config RegisterDef and CategoryDef.
    """

    def __init__(self, store: RecordStore):
        """
        Initialize the loader.

        Args:
            store: Record store holding the reference tables.
        """
        self._store = store

    def seed(
        self,
        registers: Iterable[Any] = (),
        categories: Iterable[Any] = (),
    ) -> tuple[int, int]:
        """
        Create every register and category whose code is not stored yet.

        Returns:
            (registers_created, categories_created)
        """
        known_registers = {r.code for r in self.registers()}
        created_registers = 0
        for definition in registers:
            if definition.code in known_registers:
                continue
            self._store.create(REGISTERS, {
                "id": uuid4(),
                "code": definition.code,
                "name": definition.name,
                "is_cash": bool(definition.is_cash),
            })
            known_registers.add(definition.code)
            created_registers += 1

        known_categories = {c.code for c in self.categories()}
        created_categories = 0
        for definition in categories:
            if definition.code in known_categories:
                continue
            self._store.create(CATEGORIES, {
                "id": uuid4(),
                "code": definition.code,
                "name": definition.name,
                "kind": TransactionKind(definition.kind).value,
            })
            known_categories.add(definition.code)
            created_categories += 1

        logger.info(
            "reference_data_seeded",
            extra={
                "registers_created": created_registers,
                "categories_created": created_categories,
            },
        )
        return created_registers, created_categories

    def registers(self) -> list[RegisterInfo]:
        """All registers, ordered by code."""
        rows = [RegisterInfo.from_record(r) for r in self._store.list(REGISTERS)]
        return sorted(rows, key=lambda r: r.code)

    def categories(self) -> list[CategoryInfo]:
        """All categories, ordered by code."""
        rows = [CategoryInfo.from_record(c) for c in self._store.list(CATEGORIES)]
        return sorted(rows, key=lambda c: c.code)

    def register(self, register_id: UUID) -> RegisterInfo:
        record = self._store.get(REGISTERS, _parse_id(register_id, "register_id"))
        if record is None:
            raise RegisterNotFoundError(str(register_id))
        return RegisterInfo.from_record(record)

    def register_by_code(self, code: str) -> RegisterInfo:
        for register in self.registers():
            if register.code == code:
                return register
        raise RegisterNotFoundError(code)

    def category_by_code(self, code: str) -> CategoryInfo:
        for category in self.categories():
            if category.code == code:
                return category
        raise CategoryNotFoundError(code)
