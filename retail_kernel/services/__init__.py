"""Services for the retail kernel (write side)."""

from retail_kernel.services.inventory_service import InventoryStore
from retail_kernel.services.ledger_service import TransactionLedger, TransactionQuery
from retail_kernel.services.record_store import IncrementResult, RecordStore, SqlRecordStore
from retail_kernel.services.reference_data_loader import ReferenceDataLoader
from retail_kernel.services.sale_orchestrator import SaleOrchestrator, SaleResult, SaleStatus

__all__ = [
    "IncrementResult",
    "InventoryStore",
    "RecordStore",
    "ReferenceDataLoader",
    "SaleOrchestrator",
    "SaleResult",
    "SaleStatus",
    "SqlRecordStore",
    "TransactionLedger",
    "TransactionQuery",
]
