"""Selectors for the retail kernel (read side)."""

from retail_kernel.selectors.report_selector import (
    AggregationReporter,
    AnnotatedProduct,
    AnnotatedTransaction,
)

__all__ = [
    "AggregationReporter",
    "AnnotatedProduct",
    "AnnotatedTransaction",
]
