"""
Module: ledger_engines.pricing
Responsibility:
    Decide the price of a service request.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Precedence:
    1. the cost recorded on the request itself (manual override),
    2. the price of the service type in the apartment's village,
    3. the base price of the service type.

The resolved amount is not validated here; the normalizer rejects a
request whose resolved price is missing or malformed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class PriceSource(str, Enum):
    OVERRIDE = "override"
    VILLAGE = "village"
    BASE = "base"


@dataclass(frozen=True)
class ServicePrice:
    cost: Decimal | None
    currency: str | None
    source: PriceSource | None = None


def resolve_service_cost(
    override_cost: Any = None,
    override_currency: str | None = None,
    village_cost: Any = None,
    village_currency: str | None = None,
    base_cost: Any = None,
    base_currency: str | None = None,
) -> ServicePrice:
    """Pick the applicable price; see module docstring for precedence."""
    if override_cost is not None:
        # An override without its own currency keeps the catalogue currency.
        currency = override_currency or village_currency or base_currency
        return ServicePrice(override_cost, currency, PriceSource.OVERRIDE)
    if village_cost is not None:
        return ServicePrice(village_cost, village_currency, PriceSource.VILLAGE)
    if base_cost is not None:
        return ServicePrice(base_cost, base_currency, PriceSource.BASE)
    return ServicePrice(None, None)
