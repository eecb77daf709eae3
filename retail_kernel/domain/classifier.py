"""
Category classifier -- display fallback for uncategorized outflows.

Responsibility:
    Maps a free-text description to a coarse expense category by
    case-insensitive substring matching against a fixed, ordered rule table.
    The first matching rule wins.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Deterministic: same description, same category.
    - Display only: the result is never written back to a stored
      transaction.  Reporting calls this only when a record has no
      resolvable category reference.
"""

SUPPLIES = "Supplies"
FIXED_COSTS = "Fixed Costs"
PAYROLL = "Payroll"
OTHER = "Other"

# Order is significant: "purchase of water filters" is Supplies, not Fixed Costs.
CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        SUPPLIES,
        ("purchase", "supply", "supplies", "ingredient", "meat", "beverage",
         "drink", "stock up"),
    ),
    (
        FIXED_COSTS,
        ("electricity", "electric", "power bill", "rent", "internet", "water",
         "utility", "utilities", "phone"),
    ),
    (
        PAYROLL,
        ("salary", "payroll", "wage", "staff payment"),
    ),
)


def classify(description: str) -> str:
    """Return the fallback category name for a transaction description."""
    text = (description or "").casefold()
    for category, keywords in CATEGORY_RULES:
        if any(keyword in text for keyword in keywords):
            return category
    return OTHER
