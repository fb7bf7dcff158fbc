"""
Module: ledger_engines.metering
Responsibility:
    Derive utility usage from start/end meter readings (handling meter
    rollover) and price it with the village unit prices.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Usage is never negative.  When the end reading is below the start
      reading the meter is assumed to have rolled over at
      ``max_meter_value``: usage = (max - start) + end.
    - A missing reading on either side means zero usage.
    - A missing unit price means that utility is not charged.
    - Each utility cost is rounded half-up to the currency precision via
      Money.rounded; the total is the sum of the rounded parts.

Usage:
    from ledger_engines.metering import meter_usage, utility_cost

    meter_usage(Decimal("999990"), Decimal("10"))   # Decimal("19")
    cost = utility_cost(water_start=..., water_end=..., water_price=...)
    cost.total
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ledger_kernel.domain.values import Currency, Money
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.metering")

DEFAULT_MAX_METER_VALUE = Decimal("999999")

_ZERO = Decimal("0")


def _decimal(value: Decimal | int | str | None) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, float):
        raise TypeError("Meter readings and prices must not be floats")
    return Decimal(str(value)) if not isinstance(value, Decimal) else value


def meter_usage(
    start: Decimal | int | str | None,
    end: Decimal | int | str | None,
    max_meter_value: Decimal | int = DEFAULT_MAX_METER_VALUE,
) -> Decimal:
    """Units consumed between two readings."""
    start_value = _decimal(start)
    end_value = _decimal(end)
    if start_value is None or end_value is None:
        return _ZERO
    if end_value >= start_value:
        return end_value - start_value

    usage = (Decimal(max_meter_value) - start_value) + end_value
    logger.debug(
        "meter_rollover",
        extra={
            "start": start_value,
            "end": end_value,
            "max_meter_value": max_meter_value,
            "usage": usage,
        },
    )
    return usage


@dataclass(frozen=True)
class UtilityCost:
    """Usage and cost of one utility reading."""

    water_usage: Decimal
    electricity_usage: Decimal
    water_cost: Money
    electricity_cost: Money

    @property
    def total(self) -> Money:
        return self.water_cost + self.electricity_cost


@traced_engine(
    "metering",
    "1.0",
    fingerprint_fields=("water_start", "water_end", "electricity_start", "electricity_end"),
)
def utility_cost(
    water_start: Decimal | None = None,
    water_end: Decimal | None = None,
    electricity_start: Decimal | None = None,
    electricity_end: Decimal | None = None,
    water_price: Decimal | None = None,
    electricity_price: Decimal | None = None,
    currency: Currency | str = Currency.EGP,
    max_meter_value: Decimal | int = DEFAULT_MAX_METER_VALUE,
) -> UtilityCost:
    """Price the water and electricity consumed over one reading period."""
    water = meter_usage(water_start, water_end, max_meter_value)
    electricity = meter_usage(electricity_start, electricity_end, max_meter_value)
    water_unit = _decimal(water_price) or _ZERO
    electricity_unit = _decimal(electricity_price) or _ZERO

    return UtilityCost(
        water_usage=water,
        electricity_usage=electricity,
        water_cost=Money.rounded(water * water_unit, currency),
        electricity_cost=Money.rounded(electricity * electricity_unit, currency),
    )
