"""
Retail Kernel

The transaction/inventory consistency core of a point-of-sale system:
- One ledger entry per sale, with matching stock decrements
- Atomic, oversell-safe stock adjustment
- Period filtering and category classification of the cash-flow log
- Daily and period financial summaries, low-stock alerts
"""

__version__ = "0.1.0"
