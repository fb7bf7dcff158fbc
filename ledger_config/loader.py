"""
Configuration loader (``ledger_config.loader``).

Responsibility
--------------
Load a YAML configuration file and parse it into a validated
``LedgerConfig``.  Services never call this directly; the runtime entry
point is ``ledger_config.get_active_config()``.

Expected layout::

    ledger:
      fetch_timeout_seconds: 10
      max_workers: 3
      include_company_paid: false
      reporting_currencies: [EGP, GBP]
    utilities:
      currency: EGP
      max_meter_value: 999999
    occupancy:
      projection_max_age_seconds: 300

Every key is optional; missing keys keep the ``LedgerConfig`` default.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown sections or keys, wrong types, out-of-range values
  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import LedgerConfig
from ledger_kernel.domain.values import Currency
from ledger_kernel.exceptions import ConfigurationError, InvalidCurrencyError

_KNOWN_KEYS: dict[str, dict[str, str]] = {
    "ledger": {
        "fetch_timeout_seconds": "fetch_timeout_seconds",
        "max_workers": "max_workers",
        "include_company_paid": "include_company_paid",
        "reporting_currencies": "reporting_currencies",
    },
    "utilities": {
        "currency": "utility_currency",
        "max_meter_value": "max_meter_value",
    },
    "occupancy": {
        "projection_max_age_seconds": "projection_max_age_seconds",
    },
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("<root>", f"expected a mapping, got {type(data).__name__}")
    return data


def parse_number(key: str, value: Any, kind: type) -> Any:
    if isinstance(value, bool):
        raise ConfigurationError(key, f"expected a number, got {value!r}")
    if kind is int:
        if not isinstance(value, int):
            raise ConfigurationError(key, f"expected an integer, got {value!r}")
        return value
    if kind is float:
        if not isinstance(value, (int, float)):
            raise ConfigurationError(key, f"expected a number, got {value!r}")
        return float(value)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(key, f"expected a number, got {value!r}")


def parse_currency(key: str, value: Any) -> Currency:
    try:
        return Currency.parse(value)
    except InvalidCurrencyError:
        raise ConfigurationError(key, f"unsupported currency {value!r}")


def parse_config(data: dict[str, Any]) -> LedgerConfig:
    """Parse a loaded YAML mapping into a validated LedgerConfig."""
    fields: dict[str, Any] = {}
    for section, body in data.items():
        if section not in _KNOWN_KEYS:
            raise ConfigurationError(section, "unknown section")
        if body is None:
            continue
        if not isinstance(body, dict):
            raise ConfigurationError(section, "expected a mapping")
        for key, value in body.items():
            if key not in _KNOWN_KEYS[section]:
                raise ConfigurationError(f"{section}.{key}", "unknown key")
            fields[_KNOWN_KEYS[section][key]] = value

    parsed: dict[str, Any] = {}
    for name, value in fields.items():
        if name == "fetch_timeout_seconds":
            parsed[name] = parse_number(name, value, float)
        elif name in ("max_workers", "projection_max_age_seconds"):
            parsed[name] = parse_number(name, value, int)
        elif name == "max_meter_value":
            parsed[name] = parse_number(name, value, Decimal)
        elif name == "include_company_paid":
            if not isinstance(value, bool):
                raise ConfigurationError(name, f"expected true or false, got {value!r}")
            parsed[name] = value
        elif name == "reporting_currencies":
            if not isinstance(value, list):
                raise ConfigurationError(name, "expected a list of currency codes")
            parsed[name] = tuple(parse_currency(name, v) for v in value)
        elif name == "utility_currency":
            parsed[name] = parse_currency(name, value)

    parsed["checksum"] = compute_checksum(data)
    return LedgerConfig(**parsed).validate()


def load_config(path: Path | str) -> LedgerConfig:
    """Load and validate one configuration file."""
    return parse_config(load_yaml_file(Path(path)))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
