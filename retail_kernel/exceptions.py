"""
Typed Exception Hierarchy for the Retail Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Point-of-sale callers have to react differently to "the cashier typed a bad
amount", "the product was deleted in the meantime", "the database is down"
and "the money was recorded but the shelf count drifted".  Parsing message
strings for that is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        inventory.adjust_quantity(product_id, Decimal("-3"))
    except InsufficientStockError as e:
        api_response(code=e.code, available=e.available, requested=e.requested)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RetailKernelError (base)
    |
    +-- ValidationError
    |   +-- InsufficientPaymentError
    |
    +-- NotFoundError
    |   +-- TransactionNotFoundError
    |   +-- ProductNotFoundError
    |   +-- RegisterNotFoundError
    |   +-- CategoryNotFoundError
    |
    +-- InvariantViolationError
    +-- InsufficientStockError
    +-- StoreUnavailableError
    +-- CheckoutStateError
    |
    +-- SaleError
        +-- SaleFailedError
        +-- PartialCommitError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                  | When Raised
----------------------|--------------------------------------------------------
VALIDATION_ERROR      | Bad input, rejected before any store call
INSUFFICIENT_PAYMENT  | Cash received is less than the cart total
NOT_FOUND             | Operation targets a missing record
INVARIANT_VIOLATION   | An edit would break amount/kind/category rules
INSUFFICIENT_STOCK    | Adjustment would drive quantity below zero
STORE_UNAVAILABLE     | Record store call failed or timed out (never retried)
CHECKOUT_STATE        | Checkout operation not allowed in the current state
SALE_FAILED           | Nothing was recorded for the sale
PARTIAL_COMMIT        | Sale recorded in the ledger, some stock not updated

===============================================================================
DESIGN DECISIONS
===============================================================================

1. The sale commit protocol reports partial failures as a SaleResult status.
   PartialCommitError / SaleFailedError exist for callers that prefer to
   raise (SaleResult.raise_for_status()).

2. InsufficientStockError is not a ValidationError: it is raised both by the
   checkout pre-flight check and by the atomic adjustment itself, where it
   reflects persisted state rather than caller input.
"""

from decimal import Decimal


class RetailKernelError(Exception):
    """
    Base exception for all retail kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "RETAIL_KERNEL_ERROR"


# Validation


class ValidationError(RetailKernelError):
    """Input rejected at the boundary of an operation, before any store call."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InsufficientPaymentError(ValidationError):
    """Cash received does not cover the cart total."""

    code: str = "INSUFFICIENT_PAYMENT"

    def __init__(self, total: Decimal, received: Decimal | None):
        self.total = total
        self.received = received
        super().__init__(
            "received_amount",
            f"received {received} does not cover total {total}",
        )


# Lookup


class NotFoundError(RetailKernelError):
    """Operation targets a record that does not exist."""

    code: str = "NOT_FOUND"
    resource: str = "record"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"{self.resource.capitalize()} not found: {record_id}")


class TransactionNotFoundError(NotFoundError):
    """Transaction with given ID was not found."""

    code: str = "TRANSACTION_NOT_FOUND"
    resource = "transaction"


class ProductNotFoundError(NotFoundError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"
    resource = "product"


class RegisterNotFoundError(NotFoundError):
    """Register (payment channel) with given ID or code was not found."""

    code: str = "REGISTER_NOT_FOUND"
    resource = "register"


class CategoryNotFoundError(NotFoundError):
    """Category with given ID or code was not found."""

    code: str = "CATEGORY_NOT_FOUND"
    resource = "category"


# State


class InvariantViolationError(RetailKernelError):
    """An update would leave a record violating its invariants."""

    code: str = "INVARIANT_VIOLATION"

    def __init__(self, record_id: str, invariant: str, detail: str):
        self.record_id = record_id
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"Invariant '{invariant}' violated for {record_id}: {detail}")


class InsufficientStockError(RetailKernelError):
    """A stock decrement would drive quantity below zero."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        product_id: str,
        available: Decimal | None,
        requested: Decimal,
    ):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )


class StoreUnavailableError(RetailKernelError):
    """
    The underlying record store call failed or timed out.

    Surfaced as-is to the caller; the kernel never retries.
    """

    code: str = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, resource: str, detail: str = ""):
        self.operation = operation
        self.resource = resource
        self.detail = detail
        message = f"Record store unavailable during {operation} on {resource}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CheckoutStateError(RetailKernelError):
    """Checkout operation is not allowed in the current state."""

    code: str = "CHECKOUT_STATE"

    def __init__(self, state: str, operation: str):
        self.state = state
        self.operation = operation
        super().__init__(f"Cannot {operation} while checkout is {state}")


# Sale outcome


class SaleError(RetailKernelError):
    """Base exception for sale commit outcomes."""

    code: str = "SALE_ERROR"


class SaleFailedError(SaleError):
    """The ledger write failed; nothing was recorded and no stock moved."""

    code: str = "SALE_FAILED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Sale failed: {reason}")


class PartialCommitError(SaleError):
    """
    The sale is in the ledger but some stock adjustments did not apply.

    The ledger entry is authoritative and is not rolled back.  `unsynced`
    lists the product ids whose stock must be reconciled manually.
    """

    code: str = "PARTIAL_COMMIT"

    def __init__(self, transaction_id: str, unsynced: list[str]):
        self.transaction_id = transaction_id
        self.unsynced = unsynced
        super().__init__(
            f"Sale {transaction_id} recorded but stock not updated for "
            f"{len(unsynced)} product(s): {', '.join(unsynced)}"
        )
