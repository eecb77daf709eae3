"""
retail_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- sits above ``retail_kernel``.  The kernel MUST NEVER
    import from ``retail_config``; callers read the settings they need from
    the returned ``RetailConfig`` and pass them into kernel constructors.

Resolution order:
    1. ``path`` argument, when given.
    2. ``RETAIL_CONFIG_PATH`` environment variable.
    3. The shipped ``defaults.yaml``.
    ``DATABASE_URL``, when set, replaces ``database.url`` in all cases.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``RETAIL_CONFIG_TRACE`` log entry with the source path and checksum,
    tying every sale back to the configuration that governed it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from retail_config.loader import load_yaml_file, parse_config
from retail_config.schema import (
    CategoryDef,
    DatabaseConfig,
    RegisterDef,
    ReportingConfig,
    RetailConfig,
    SaleConfig,
)

_logger = logging.getLogger("retail_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_PATH_ENV = "RETAIL_CONFIG_PATH"
DATABASE_URL_ENV = "DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> RetailConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Explicit configuration file; see the module docstring for
            the fallback order.

    Returns:
        A frozen RetailConfig.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        KeyError: If a required key is missing.
        ValueError: If the configuration is inconsistent.
    """
    source = Path(path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    config = parse_config(
        load_yaml_file(source),
        url_override=os.environ.get(DATABASE_URL_ENV),
    )

    _logger.info(
        "RETAIL_CONFIG_TRACE",
        extra={
            "trace_type": "RETAIL_CONFIG_TRACE",
            "source": str(source),
            "checksum": config.checksum,
            "register_count": len(config.registers),
            "category_count": len(config.categories),
        },
    )
    return config


__all__ = [
    "CategoryDef",
    "DatabaseConfig",
    "RegisterDef",
    "ReportingConfig",
    "RetailConfig",
    "SaleConfig",
    "get_active_config",
]
