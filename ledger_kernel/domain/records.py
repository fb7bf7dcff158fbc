"""
Records -- Source record shapes consumed from the system of record.

Responsibility:
    Describe the three heterogeneous financial records the ledger is built
    from (payments, service charges, utility charges) and the small enums
    that classify them.  Records are deliberately loosely typed: every field
    may be ``None`` or a raw string, because they arrive from storage and
    are validated by ``ledger_engines.normalizer`` rather than trusted.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any


class SourceKind(str, Enum):
    """Discriminant of a ledger entry: which record shape produced it."""

    PAYMENT = "payment"
    SERVICE_CHARGE = "service_charge"
    UTILITY_CHARGE = "utility_charge"

    @property
    def label(self) -> str:
        """Row type shown in the transactions table."""
        return _SOURCE_LABELS[self]


_SOURCE_LABELS = {
    SourceKind.PAYMENT: "Payment",
    SourceKind.SERVICE_CHARGE: "Service Request",
    SourceKind.UTILITY_CHARGE: "Utility Reading",
}


class Direction(str, Enum):
    """
    Sign of a ledger entry.

    CREDIT is money received (reduces the outstanding balance); DEBIT is
    money owed (increases it).
    """

    CREDIT = "credit"
    DEBIT = "debit"


class Payer(str, Enum):
    """Who a transaction is attributed to.

    Payments carry a user type (owner or renter); charges carry who pays
    (owner, renter or company).  A missing value means owner.
    """

    OWNER = "owner"
    RENTER = "renter"
    COMPANY = "company"

    @classmethod
    def parse(cls, value: Payer | str | None) -> Payer:
        """
        Parse a stored payer value.

        Raises:
            ValueError: If the value is not a known payer.
        """
        if value is None:
            return cls.OWNER
        if isinstance(value, Payer):
            return value
        normalized = str(value).strip().lower()
        if not normalized:
            return cls.OWNER
        return cls(normalized)


@dataclass(frozen=True)
class PaymentRecord:
    """A payment received for an apartment."""

    record_id: Any
    apartment_id: Any
    amount: Decimal | str | None
    currency: str | None
    paid_on: date | None
    user_type: str | None = None
    counterparty_id: Any = None
    counterparty_name: str | None = None
    booking_id: Any = None
    description: str | None = None
    method_name: str | None = None


@dataclass(frozen=True)
class ServiceChargeRecord:
    """
    A priced service request.

    ``cost`` is already resolved by the caller (override cost, else the
    service type price for the apartment's village).
    """

    record_id: Any
    apartment_id: Any
    cost: Decimal | str | None
    currency: str | None
    who_pays: str | None
    requested_on: date | None
    action_on: date | None = None
    service_name: str | None = None
    notes: str | None = None
    booking_id: Any = None
    counterparty_id: Any = None
    counterparty_name: str | None = None


@dataclass(frozen=True)
class UtilityChargeRecord:
    """
    A priced utility reading.

    ``cost`` is derived upstream from meter deltas and village unit prices
    and is opaque to the ledger.  ``currency`` defaults to the local
    currency.  The reading period dates place the charge in time.
    """

    record_id: Any
    apartment_id: Any
    cost: Any
    who_pays: str | None
    reading_start: date | None = None
    reading_end: date | None = None
    recorded_on: date | None = None
    currency: str | None = "EGP"
    water_usage: Decimal | None = None
    electricity_usage: Decimal | None = None
    booking_id: Any = None
    counterparty_id: Any = None
    counterparty_name: str | None = None


SourceRecord = PaymentRecord | ServiceChargeRecord | UtilityChargeRecord
