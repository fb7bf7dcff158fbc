"""
Module: ledger_engines.normalizer
Responsibility:
    Convert heterogeneous source records (payments, service charges,
    utility charges) into canonical LedgerEntry values with a direction,
    validated Money and a single occurrence date.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel.domain and ledger_kernel.exceptions.

Invariants enforced:
    - Direction convention: payments are CREDIT, charges are DEBIT.
    - Every emitted entry has a strictly positive amount with at most two
      fractional digits in EGP or GBP.
    - Never coerces: a record that fails validation is rejected whole with
      MalformedRecordError, it is never "fixed" (no rounding, no sign flip,
      no default currency except the utility EGP default).

Failure modes:
    - MalformedRecordError for a missing or non-positive amount, an amount
      that is not a finite decimal or has more than two fractional digits,
      a missing or unsupported currency, a missing apartment reference, a
      missing occurrence date or a utility usage that is not a decimal.
    - normalize_many also rejects items that are not source records.

Usage:
    from ledger_engines.normalizer import TransactionNormalizer

    normalizer = TransactionNormalizer()
    entry = normalizer.normalize(payment_record)
    result = normalizer.normalize_many(records)
    result.entries, result.rejected
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any

from ledger_kernel.domain.ledger import LedgerEntry
from ledger_kernel.domain.records import (
    Direction,
    Payer,
    PaymentRecord,
    ServiceChargeRecord,
    SourceKind,
    SourceRecord,
    UtilityChargeRecord,
)
from ledger_kernel.domain.values import Currency, Money
from ledger_kernel.exceptions import InvalidCurrencyError, MalformedRecordError
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.normalizer")


@dataclass(frozen=True)
class NormalizationResult:
    """Entries that normalized cleanly plus the records that were rejected."""

    entries: tuple[LedgerEntry, ...]
    rejected: tuple[MalformedRecordError, ...]

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)


_RECORD_TYPES = (PaymentRecord, ServiceChargeRecord, UtilityChargeRecord)


def source_kind_of(record: SourceRecord) -> SourceKind:
    """Discriminant of a source record."""
    if isinstance(record, PaymentRecord):
        return SourceKind.PAYMENT
    if isinstance(record, ServiceChargeRecord):
        return SourceKind.SERVICE_CHARGE
    if isinstance(record, UtilityChargeRecord):
        return SourceKind.UTILITY_CHARGE
    raise TypeError(f"Not a source record: {type(record).__name__}")


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _fmt_units(value: Decimal) -> str:
    return f"{value:.2f}"


class TransactionNormalizer:
    """
    Per-kind normalization of source records into LedgerEntry values.

    Contract:
        Stateless; one instance may be shared across threads.
    Guarantees:
        - ``normalize`` either returns a valid LedgerEntry or raises
          MalformedRecordError.
        - ``normalize_many`` never raises for a malformed record; it
          collects the error and continues.
    """

    def normalize(self, record: SourceRecord) -> LedgerEntry:
        """
        Normalize one source record.

        Raises:
            MalformedRecordError: If the record fails validation.
            TypeError: If ``record`` is not a source record at all.
        """
        kind = source_kind_of(record)
        if kind is SourceKind.PAYMENT:
            return self._normalize_payment(record)
        if kind is SourceKind.SERVICE_CHARGE:
            return self._normalize_service_charge(record)
        return self._normalize_utility_charge(record)

    @traced_engine("normalizer", "1.0")
    def normalize_many(
        self,
        records: Iterable[SourceRecord],
        kind: SourceKind | None = None,
    ) -> NormalizationResult:
        """
        Normalize every record, skipping (and collecting) malformed ones.

        An item that is not a source record at all is rejected as well;
        ``kind`` names the source it came from in that rejection.
        """
        entries: list[LedgerEntry] = []
        rejected: list[MalformedRecordError] = []
        for record in records:
            try:
                if not isinstance(record, _RECORD_TYPES):
                    raise MalformedRecordError(
                        kind.value if kind is not None else "unknown",
                        getattr(record, "record_id", None),
                        f"not a source record: {type(record).__name__}",
                    )
                entries.append(self.normalize(record))
            except MalformedRecordError as exc:
                logger.warning(
                    "record_rejected",
                    extra={
                        "source_kind": exc.source_kind,
                        "record_id": exc.record_id,
                        "reason": exc.reason,
                    },
                )
                rejected.append(exc)
        return NormalizationResult(entries=tuple(entries), rejected=tuple(rejected))

    # -- per kind -----------------------------------------------------------

    def _normalize_payment(self, record: PaymentRecord) -> LedgerEntry:
        kind = SourceKind.PAYMENT
        money = self._money(kind, record.record_id, record.amount, record.currency)
        occurred_at = self._occurred_at(kind, record.record_id, record.paid_on)
        self._require_apartment(kind, record.record_id, record.apartment_id)
        payer = self._payer(kind, record.record_id, record.user_type)

        if record.description:
            description = record.description
        elif record.method_name:
            description = f"Payment via {record.method_name}"
        else:
            description = f"Payment of {money.amount} {money.currency.value}"

        return LedgerEntry(
            entry_id=f"payment_{record.record_id}",
            source_kind=kind,
            direction=Direction.CREDIT,
            money=money,
            occurred_at=occurred_at,
            apartment_id=record.apartment_id,
            counterparty_id=record.counterparty_id,
            counterparty_name=record.counterparty_name,
            booking_ref=record.booking_id,
            payer=payer,
            description=description,
            source_id=record.record_id,
        )

    def _normalize_service_charge(self, record: ServiceChargeRecord) -> LedgerEntry:
        kind = SourceKind.SERVICE_CHARGE
        money = self._money(kind, record.record_id, record.cost, record.currency)
        occurred_at = self._occurred_at(
            kind, record.record_id, record.action_on or record.requested_on
        )
        self._require_apartment(kind, record.record_id, record.apartment_id)
        payer = self._payer(kind, record.record_id, record.who_pays)

        if record.service_name and record.notes:
            description = f"{record.service_name} - {record.notes}"
        elif record.service_name:
            description = record.service_name
        else:
            description = f"Service Request of {money.amount} {money.currency.value}"

        return LedgerEntry(
            entry_id=f"service_{record.record_id}",
            source_kind=kind,
            direction=Direction.DEBIT,
            money=money,
            occurred_at=occurred_at,
            apartment_id=record.apartment_id,
            counterparty_id=record.counterparty_id,
            counterparty_name=record.counterparty_name,
            booking_ref=record.booking_id,
            payer=payer,
            description=description,
            source_id=record.record_id,
        )

    def _normalize_utility_charge(self, record: UtilityChargeRecord) -> LedgerEntry:
        kind = SourceKind.UTILITY_CHARGE
        if isinstance(record.cost, Money):
            money = self._money(
                kind, record.record_id, record.cost.amount, record.cost.currency.value
            )
        else:
            money = self._money(
                kind, record.record_id, record.cost, record.currency or Currency.EGP.value
            )
        occurred_at = self._occurred_at(
            kind, record.record_id, record.reading_end or record.recorded_on
        )
        self._require_apartment(kind, record.record_id, record.apartment_id)
        payer = self._payer(kind, record.record_id, record.who_pays)

        water = self._usage(kind, record.record_id, record.water_usage)
        electricity = self._usage(kind, record.record_id, record.electricity_usage)

        parts = []
        if water:
            parts.append(f"Water {_fmt_units(water)} units")
        if electricity:
            parts.append(f"Electricity {_fmt_units(electricity)} units")
        if record.who_pays:
            parts.append(str(record.who_pays))
        description = f"Utility: {', '.join(parts)}" if parts else "Utility"

        return LedgerEntry(
            entry_id=f"utility_{record.record_id}",
            source_kind=kind,
            direction=Direction.DEBIT,
            money=money,
            occurred_at=occurred_at,
            apartment_id=record.apartment_id,
            counterparty_id=record.counterparty_id,
            counterparty_name=record.counterparty_name,
            booking_ref=record.booking_id,
            payer=payer,
            description=description,
            source_id=record.record_id,
        )

    # -- validation helpers -------------------------------------------------

    @staticmethod
    def _reject(kind: SourceKind, record_id: Any, reason: str) -> MalformedRecordError:
        return MalformedRecordError(kind.value, record_id, reason)

    def _money(self, kind: SourceKind, record_id: Any, amount: Any, currency: Any) -> Money:
        if amount is None:
            raise self._reject(kind, record_id, "missing amount")
        if isinstance(amount, (bool, float)):
            raise self._reject(kind, record_id, f"amount is not a decimal: {amount!r}")
        if isinstance(amount, Decimal):
            value = amount
        elif isinstance(amount, (int, str)):
            try:
                value = Decimal(str(amount).strip())
            except InvalidOperation:
                raise self._reject(kind, record_id, f"amount is not a decimal: {amount!r}")
        else:
            raise self._reject(kind, record_id, f"amount is not a decimal: {amount!r}")

        if not value.is_finite():
            raise self._reject(kind, record_id, f"amount is not finite: {amount!r}")
        if value <= 0:
            raise self._reject(kind, record_id, f"amount must be positive: {value}")
        try:
            quantized = value.quantize(Decimal("0.01"), rounding=ROUND_DOWN)
        except InvalidOperation:
            raise self._reject(kind, record_id, f"amount out of range: {value}")
        if value != quantized:
            raise self._reject(kind, record_id, f"amount has more than 2 decimals: {value}")

        if currency is None or (isinstance(currency, str) and not currency.strip()):
            raise self._reject(kind, record_id, "missing currency")
        try:
            parsed = Currency.parse(currency)
        except InvalidCurrencyError:
            raise self._reject(kind, record_id, f"unsupported currency: {currency!r}")

        return Money(value, parsed)

    def _usage(self, kind: SourceKind, record_id: Any, value: Any) -> Decimal | None:
        if value is None:
            return None
        if isinstance(value, Decimal):
            usage = value
        elif isinstance(value, (int, str)) and not isinstance(value, bool):
            try:
                usage = Decimal(str(value).strip())
            except InvalidOperation:
                raise self._reject(kind, record_id, "usage is not a decimal")
        else:
            raise self._reject(kind, record_id, "usage is not a decimal")
        if not usage.is_finite():
            raise self._reject(kind, record_id, "usage is not a decimal")
        return usage

    def _occurred_at(self, kind: SourceKind, record_id: Any, value: Any) -> date:
        occurred_at = _as_date(value)
        if occurred_at is None:
            raise self._reject(kind, record_id, "missing date")
        return occurred_at

    def _require_apartment(self, kind: SourceKind, record_id: Any, apartment_id: Any) -> None:
        if apartment_id is None:
            raise self._reject(kind, record_id, "missing apartment reference")

    def _payer(self, kind: SourceKind, record_id: Any, value: Any) -> Payer:
        try:
            return Payer.parse(value)
        except ValueError:
            raise self._reject(kind, record_id, f"unknown payer: {value!r}")
