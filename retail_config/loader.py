"""
Configuration Loader (``retail_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the typed
``retail_config.schema`` dataclasses.  Runtime callers go through
``retail_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; required keys have no silent defaults.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  document for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Duplicate codes or an unknown category kind  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from retail_config.schema import (
    CategoryDef,
    DatabaseConfig,
    RegisterDef,
    ReportingConfig,
    RetailConfig,
    SaleConfig,
)

_CATEGORY_KINDS = ("inflow", "outflow")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_database(data: dict[str, Any], url_override: str | None = None) -> DatabaseConfig:
    """Parse the ``database`` section; ``url`` is required unless overridden."""
    return DatabaseConfig(
        url=url_override or data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 20)),
        max_overflow=int(data.get("max_overflow", 10)),
        pool_timeout=int(data.get("pool_timeout", 30)),
        statement_timeout_ms=int(data.get("statement_timeout_ms", 30000)),
    )


def parse_sale(data: dict[str, Any]) -> SaleConfig:
    return SaleConfig(
        sale_category_code=data.get("sale_category_code", "SALE"),
        description_prefix=data.get("description_prefix", "Sale"),
    )


def parse_reporting(data: dict[str, Any]) -> ReportingConfig:
    limit = data.get("low_stock_limit")
    reporting = ReportingConfig(
        daily_window_days=int(data.get("daily_window_days", 7)),
        recent_activity_limit=int(data.get("recent_activity_limit", 5)),
        low_stock_limit=int(limit) if limit is not None else None,
    )
    if reporting.daily_window_days < 1:
        raise ValueError("reporting.daily_window_days must be at least 1")
    return reporting


def parse_register(data: dict[str, Any]) -> RegisterDef:
    return RegisterDef(
        code=data["code"],
        name=data["name"],
        is_cash=bool(data.get("is_cash", False)),
    )


def parse_category(data: dict[str, Any]) -> CategoryDef:
    kind = data["kind"]
    if kind not in _CATEGORY_KINDS:
        raise ValueError(
            f"Category {data['code']!r} has kind {kind!r}; "
            f"expected one of {_CATEGORY_KINDS}"
        )
    return CategoryDef(code=data["code"], name=data["name"], kind=kind)


def _unique(kind: str, codes: list[str]) -> None:
    seen: set[str] = set()
    for code in codes:
        if code in seen:
            raise ValueError(f"Duplicate {kind} code: {code!r}")
        seen.add(code)


def parse_config(data: dict[str, Any], url_override: str | None = None) -> RetailConfig:
    """
    Parse a whole configuration document.

    Raises:
        KeyError: if required keys are missing.
        ValueError: on duplicate codes, bad kinds, or a sale category that
            is not a configured inflow category.
    """
    registers = tuple(parse_register(r) for r in data.get("registers", []))
    categories = tuple(parse_category(c) for c in data.get("categories", []))
    _unique("register", [r.code for r in registers])
    _unique("category", [c.code for c in categories])

    sale = parse_sale(data.get("sale", {}))
    sale_category = next(
        (c for c in categories if c.code == sale.sale_category_code), None
    )
    if sale_category is None or sale_category.kind != "inflow":
        raise ValueError(
            f"sale.sale_category_code {sale.sale_category_code!r} must name "
            "a configured inflow category"
        )

    return RetailConfig(
        database=parse_database(data.get("database", {}), url_override),
        sale=sale,
        reporting=parse_reporting(data.get("reporting", {})),
        registers=registers,
        categories=categories,
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
