"""Configuration for ledgerkit.

A single immutable LedgerConfig is built at start-up (from defaults or a TOML
file) and passed explicitly to the services and engines that need it.

Example ``ledgerkit.toml``::

    default_currency = "EUR"
    database_path = "~/books/ledger.db"

    [currencies]
    EUR = 2
    JPY = 0

    [[tax_codes]]
    category = "de"
    label = "mwst"
    rate = "19"
    title = "German VAT"
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

from ledgerkit.domain.currency import DEFAULT_CURRENCIES
from ledgerkit.domain.errors import ValidationError
from ledgerkit.domain.tax import DEFAULT_TAX_CODES, TaxCodeDefinition, registry_from_definitions

logger = logging.getLogger(__name__)

CONFIG_ENV = "LEDGERKIT_CONFIG"
DB_PATH_ENV = "LEDGERKIT_DB_PATH"


@dataclass(frozen=True)
class LedgerConfig:
    """Application-wide settings threaded through the engines."""

    default_currency: str = "USD"
    currencies: Mapping[str, int] = field(default_factory=lambda: DEFAULT_CURRENCIES)
    tax_codes: Mapping[str, TaxCodeDefinition] = field(default_factory=lambda: DEFAULT_TAX_CODES)
    database_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.default_currency not in self.currencies:
            raise ValidationError(f"Default currency '{self.default_currency}' is not a known currency")


def _parse_currencies(raw: Any) -> Mapping[str, int]:
    if not isinstance(raw, dict):
        raise ValidationError("'currencies' must be a table of code = digits")
    merged = dict(DEFAULT_CURRENCIES)
    for code, digits in raw.items():
        if not isinstance(digits, int) or isinstance(digits, bool) or not 0 <= digits <= 6:
            raise ValidationError(f"Currency '{code}' must have between 0 and 6 minor-unit digits")
        merged[str(code).upper()] = digits
    return MappingProxyType(merged)


def _parse_tax_codes(raw: Any) -> Mapping[str, TaxCodeDefinition]:
    if not isinstance(raw, list):
        raise ValidationError("'tax_codes' must be an array of tables")
    definitions = list(DEFAULT_TAX_CODES.values())
    for entry in raw:
        try:
            definitions.append(
                TaxCodeDefinition(
                    category=str(entry.get("category", "")),
                    label=str(entry["label"]),
                    rate=str(entry.get("rate", "")),
                    variable=bool(entry.get("variable", False)),
                    title=str(entry.get("title", "")),
                )
            )
        except (KeyError, AttributeError) as e:
            raise ValidationError(f"Invalid tax code entry {entry!r}") from e
    return registry_from_definitions(definitions)


def config_from_mapping(data: Mapping[str, Any]) -> LedgerConfig:
    """Build a LedgerConfig from parsed TOML data."""
    kwargs: dict[str, Any] = {}
    if "default_currency" in data:
        kwargs["default_currency"] = str(data["default_currency"]).upper()
    if "currencies" in data:
        kwargs["currencies"] = _parse_currencies(data["currencies"])
    if "tax_codes" in data:
        kwargs["tax_codes"] = _parse_tax_codes(data["tax_codes"])
    if "database_path" in data:
        kwargs["database_path"] = str(Path(str(data["database_path"])).expanduser())
    return LedgerConfig(**kwargs)


def load_config(config_path: Optional[str] = None) -> LedgerConfig:
    """Load configuration.

    Args:
        config_path: Path to a TOML file. If None, checks the LEDGERKIT_CONFIG
            environment variable, then falls back to built-in defaults.
            LEDGERKIT_DB_PATH, when set, overrides ``database_path``.

    Returns:
        LedgerConfig instance

    Raises:
        ValidationError: If the file contents are invalid
        FileNotFoundError: If an explicit path does not exist
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV)

    data: dict[str, Any] = {}
    if config_path is not None:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        logger.debug("Loaded configuration from %s", config_path)

    env_db_path = os.environ.get(DB_PATH_ENV)
    if env_db_path:
        data["database_path"] = env_db_path

    return config_from_mapping(data)
