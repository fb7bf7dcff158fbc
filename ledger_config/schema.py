"""
Configuration schema (``ledger_config.schema``).

Responsibility
--------------
Frozen dataclass describing every tunable of the ledger: fan-out timeouts,
payer policy, reporting currencies, utility metering and the occupancy
projection freshness.

Architecture position
---------------------
**Config layer**.  Depends on ``ledger_kernel`` value types only.

Invariants enforced
-------------------
* Instances are immutable once built.
* ``validate()`` is run by the loader; an invalid value never reaches a
  service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from ledger_kernel.domain.values import Currency
from ledger_kernel.exceptions import ConfigurationError

# One worker per source kind: payments, service charges, utility charges.
MIN_FETCH_WORKERS = 3


@dataclass(frozen=True)
class LedgerConfig:
    """Runtime configuration of the ledger services."""

    fetch_timeout_seconds: float = 10.0
    max_workers: int = 3
    include_company_paid: bool = False
    reporting_currencies: tuple[Currency, ...] = (Currency.EGP, Currency.GBP)
    utility_currency: Currency = Currency.EGP
    max_meter_value: Decimal = Decimal("999999")
    projection_max_age_seconds: int = 300
    checksum: str = field(default="", compare=False)

    def validate(self) -> LedgerConfig:
        """
        Check value ranges.

        Raises:
            ConfigurationError: On the first invalid value.
        """
        if self.fetch_timeout_seconds <= 0:
            raise ConfigurationError("fetch_timeout_seconds", "must be positive")
        if self.max_workers < MIN_FETCH_WORKERS:
            raise ConfigurationError(
                "max_workers", f"must be at least {MIN_FETCH_WORKERS}, one per source kind"
            )
        if not self.reporting_currencies:
            raise ConfigurationError("reporting_currencies", "must not be empty")
        if len(set(self.reporting_currencies)) != len(self.reporting_currencies):
            raise ConfigurationError("reporting_currencies", "contains duplicates")
        if self.max_meter_value <= 0:
            raise ConfigurationError("max_meter_value", "must be positive")
        if self.projection_max_age_seconds < 0:
            raise ConfigurationError("projection_max_age_seconds", "must not be negative")
        return self
