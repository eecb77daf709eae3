"""
Module: retail_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the "Q" side of the kernel, providing report and enriched list
    access to ledger and inventory data without mutation capability.
Architecture position: Kernel > Selectors.  May import from domain/ and the
    read methods of services/.  Selectors NEVER create, modify, or delete
    data.

Invariants enforced:
    - Read-only access: Selectors call only get/list on the record store.
    - DTO return convention: Selectors return frozen dataclasses or computed
      results, never raw store records.
    - Snapshot reads: ledger and inventory are read in separate store calls;
      results are not a single point-in-time view across the two.

Failure modes:
    - StoreUnavailableError from the underlying store, unchanged.
"""

from abc import ABC

from retail_kernel.domain.clock import Clock, SystemClock
from retail_kernel.services.record_store import RecordStore


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a RecordStore from the caller, perform read-only
        queries, and return DTOs or computed results.

    Guarantees:
        - store and clock are public attributes for subclass query use.
        - No create, update, patch, delete or increment calls are made.
    """

    def __init__(self, store: RecordStore, clock: Clock | None = None):
        """
        Initialize the selector.

        Args:
            store: Record store to read from.
            clock: Source of "now" for period and daily windows.
        """
        self.store = store
        self.clock = clock or SystemClock()
