"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and store-handling contract for every
    service in the kernel layer.  All concrete services inherit from
    BaseService, receiving a RecordStore they use for every read and write.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Services hold no module-level state; the store is injected, so two
      services over the same store see the same records and two stores
      never share anything.
    - Caller input is validated before the first store call.

Failure modes:
    - StoreUnavailableError from the store propagates unchanged; services
      never retry.
"""

from abc import ABC
from typing import Any, Mapping
from uuid import UUID

from retail_kernel.exceptions import NotFoundError, ValidationError
from retail_kernel.services.record_store import Record, RecordStore


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Contract:
        Subclasses set ``resource`` to the store resource they own and
        ``not_found`` to the NotFoundError subclass raised for a missing id.

    Non-goals:
        - Does NOT provide report queries -- those belong in
          ``retail_kernel/selectors/``.
    """

    resource: str = ""
    not_found: type[NotFoundError] = NotFoundError

    def __init__(self, store: RecordStore):
        """
        Initialize the service.

        Args:
            store: Record store for all persistence.
        """
        self.store = store

    def _require(self, record_id: UUID) -> Record:
        record = self.store.get(self.resource, _parse_id(record_id))
        if record is None:
            raise self.not_found(str(record_id))
        return record


def _parse_id(value: Any, field: str = "id") -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(field, f"not a valid identifier: {value!r}") from None


def reject_unknown_fields(patch: Mapping[str, Any], allowed: frozenset[str]) -> None:
    unknown = sorted(set(patch) - allowed)
    if unknown:
        raise ValidationError(unknown[0], "field cannot be changed")
