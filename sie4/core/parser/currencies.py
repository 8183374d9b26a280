"""
ISO 4217 currency code table.

The table is packaged as YAML next to this module and loaded once.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class CurrencyTable(BaseModel, frozen=True):
    """Known currency codes with their names."""

    version: str
    currencies: dict[str, str] = Field(description="ISO code -> currency name")

    model_config = {"frozen": True}

    def __contains__(self, code: object) -> bool:
        return code in self.currencies


def _load_currency_table_from_yaml(path: Path) -> CurrencyTable:
    """Load the currency table from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f)

    return CurrencyTable(
        version=str(data.get("version", "unknown")),
        currencies={str(code): str(name) for code, name in data.get("currencies", {}).items()},
    )


@lru_cache(maxsize=1)
def get_currency_table() -> CurrencyTable:
    """
    Get the ISO 4217 currency table.

    The table is cached after first load.
    """
    return _load_currency_table_from_yaml(Path(__file__).parent / "currencies.yaml")


def is_currency_code(code: str) -> bool:
    """Check whether ``code`` is a known ISO 4217 code (case-sensitive)."""
    return code in get_currency_table()
