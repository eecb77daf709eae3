"""
RetailConfig schema.

Frozen dataclasses the YAML configuration is parsed into.  Nothing here
reads files; the loader builds these and get_active_config() hands them
out.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings passed to retail_kernel.db.engine."""

    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    statement_timeout_ms: int = 30000


# ---------------------------------------------------------------------------
# Checkout and reporting policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SaleConfig:
    """How a finalized cart is written to the ledger."""

    sale_category_code: str = "SALE"
    description_prefix: str = "Sale"


@dataclass(frozen=True)
class ReportingConfig:
    """Window sizes and list limits for the dashboard."""

    daily_window_days: int = 7
    recent_activity_limit: int = 5
    low_stock_limit: int | None = None


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegisterDef:
    """A payment channel to seed (cash drawer, card terminal, transfer)."""

    code: str
    name: str
    is_cash: bool = False


@dataclass(frozen=True)
class CategoryDef:
    """A ledger category to seed; kind is inflow or outflow."""

    code: str
    name: str
    kind: str


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetailConfig:
    """The complete runtime configuration."""

    database: DatabaseConfig
    sale: SaleConfig = field(default_factory=SaleConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    registers: tuple[RegisterDef, ...] = ()
    categories: tuple[CategoryDef, ...] = ()
    checksum: str = ""

    def register(self, code: str) -> RegisterDef:
        for reg in self.registers:
            if reg.code == code:
                return reg
        raise KeyError(f"No register with code {code!r}")

    def category(self, code: str) -> CategoryDef:
        for cat in self.categories:
            if cat.code == code:
                return cat
        raise KeyError(f"No category with code {code!r}")
