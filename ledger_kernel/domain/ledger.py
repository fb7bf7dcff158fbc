"""
Ledger -- Canonical ledger entry and the derived totals built from it.

Responsibility:
    Defines LedgerEntry (the tagged variant every source record is
    normalized into), the per-currency debit/credit totals the accumulator
    produces, the before/within split of those totals, the three-map
    FinancialSummary reported to callers, ledger rows for drill-down
    display, and ApartmentLedger, the aggregator's result.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  Imported by engines and
    services.

Invariants enforced:
    - Direction convention: PAYMENT entries are CREDIT; SERVICE_CHARGE and
      UTILITY_CHARGE entries are DEBIT (checked in LedgerEntry).
    - DirectionTotals holds a single currency.
    - FinancialSummary.net_money == total_money_requested - total_money_spent
      for every currency; net is computed, never supplied.
    - Totals and summaries are derived per query and never persisted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from ledger_kernel.domain.records import Direction, Payer, SourceKind
from ledger_kernel.domain.values import Currency, Money
from ledger_kernel.exceptions import CurrencyMismatchError

EXPECTED_DIRECTION: dict[SourceKind, Direction] = {
    SourceKind.PAYMENT: Direction.CREDIT,
    SourceKind.SERVICE_CHARGE: Direction.DEBIT,
    SourceKind.UTILITY_CHARGE: Direction.DEBIT,
}


@dataclass(frozen=True)
class LedgerEntry:
    """
    A normalized financial event.

    Contract:
        Produced only by the normalizer.  The accumulator and period
        splitter read ``direction``, ``money`` and ``occurred_at`` and never
        look at source-specific fields.
    Guarantees:
        - ``money`` is strictly positive.
        - ``direction`` matches the source kind convention.
    """

    entry_id: str
    source_kind: SourceKind
    direction: Direction
    money: Money
    occurred_at: date
    apartment_id: Any
    counterparty_id: Any = None
    counterparty_name: str | None = None
    booking_ref: Any = None
    payer: Payer = Payer.OWNER
    description: str = ""
    source_id: Any = None

    def __post_init__(self) -> None:
        if EXPECTED_DIRECTION[self.source_kind] is not self.direction:
            raise ValueError(
                f"{self.source_kind.value} entries must be "
                f"{EXPECTED_DIRECTION[self.source_kind].value}"
            )
        if not self.money.is_positive:
            raise ValueError("Ledger entry amount must be positive")

    @property
    def currency(self) -> Currency:
        return self.money.currency

    @property
    def amount(self) -> Decimal:
        return self.money.amount


@dataclass(frozen=True)
class DirectionTotals:
    """Debit and credit sums for one currency."""

    debit_sum: Money
    credit_sum: Money

    def __post_init__(self) -> None:
        if self.debit_sum.currency is not self.credit_sum.currency:
            raise CurrencyMismatchError(
                self.debit_sum.currency.value,
                self.credit_sum.currency.value,
                "total",
            )

    @classmethod
    def zero(cls, currency: Currency | str) -> DirectionTotals:
        return cls(debit_sum=Money.zero(currency), credit_sum=Money.zero(currency))

    @property
    def currency(self) -> Currency:
        return self.debit_sum.currency

    @property
    def outstanding(self) -> Money:
        """Debits minus credits: what is still owed."""
        return self.debit_sum - self.credit_sum

    def add(self, entry: LedgerEntry) -> DirectionTotals:
        """Return new totals including ``entry``."""
        if entry.direction is Direction.DEBIT:
            return DirectionTotals(self.debit_sum + entry.money, self.credit_sum)
        return DirectionTotals(self.debit_sum, self.credit_sum + entry.money)

    def __add__(self, other: DirectionTotals) -> DirectionTotals:
        if not isinstance(other, DirectionTotals):
            return NotImplemented
        return DirectionTotals(
            debit_sum=self.debit_sum + other.debit_sum,
            credit_sum=self.credit_sum + other.credit_sum,
        )


CurrencyTotals = Mapping[Currency, DirectionTotals]


@dataclass(frozen=True)
class PeriodizedTotals:
    """Totals before the reporting window (opening) and within it."""

    before: CurrencyTotals
    within: CurrencyTotals


def _amount_map(values: Mapping[Any, Decimal]) -> dict[Currency, Decimal]:
    return {Currency.parse(k): Decimal(v) for k, v in values.items()}


@dataclass(frozen=True)
class FinancialSummary:
    """
    Per-currency money spent, money requested, and the net between them.

    Contract:
        ``total_money_spent`` sums CREDIT entries (payments received),
        ``total_money_requested`` sums DEBIT entries (charges).  Net is
        derived as requested minus spent, so a positive net is money still
        owed and a negative net is an overpayment.
    Guarantees:
        - Every currency in either input map appears in all three maps.
        - ``net_money[c] == total_money_requested[c] - total_money_spent[c]``.
    Non-goals:
        - Never converts between currencies.
    """

    total_money_spent: Mapping[Currency, Decimal]
    total_money_requested: Mapping[Currency, Decimal]
    net_money: Mapping[Currency, Decimal] = field(init=False)

    def __post_init__(self) -> None:
        spent = _amount_map(self.total_money_spent)
        requested = _amount_map(self.total_money_requested)
        currencies = sorted(set(spent) | set(requested), key=lambda c: c.value)
        zero = Decimal("0.00")
        spent = {c: spent.get(c, zero) for c in currencies}
        requested = {c: requested.get(c, zero) for c in currencies}
        object.__setattr__(self, "total_money_spent", spent)
        object.__setattr__(self, "total_money_requested", requested)
        object.__setattr__(
            self, "net_money", {c: requested[c] - spent[c] for c in currencies}
        )

    @classmethod
    def empty(cls, currencies: Iterable[Currency] = ()) -> FinancialSummary:
        zero = Decimal("0.00")
        return cls(
            total_money_spent={c: zero for c in currencies},
            total_money_requested={c: zero for c in currencies},
        )

    @classmethod
    def from_totals(
        cls,
        totals: CurrencyTotals,
        currencies: Iterable[Currency] = (),
    ) -> FinancialSummary:
        """Build a summary from accumulator output, zero-filling ``currencies``."""
        summary = cls(
            total_money_spent={c: t.credit_sum.amount for c, t in totals.items()},
            total_money_requested={c: t.debit_sum.amount for c, t in totals.items()},
        )
        return summary.combine(cls.empty(currencies))

    @property
    def currencies(self) -> tuple[Currency, ...]:
        return tuple(self.net_money)

    def combine(self, other: FinancialSummary) -> FinancialSummary:
        """Add another summary currency by currency (e.g. opening + period)."""
        spent = dict(self.total_money_spent)
        requested = dict(self.total_money_requested)
        for c, v in other.total_money_spent.items():
            spent[c] = spent.get(c, Decimal("0.00")) + v
        for c, v in other.total_money_requested.items():
            requested[c] = requested.get(c, Decimal("0.00")) + v
        return FinancialSummary(total_money_spent=spent, total_money_requested=requested)

    def to_dict(self) -> dict[str, dict[str, Decimal]]:
        """Plain mapping keyed by currency code, for the application layer."""
        return {
            "total_money_spent": {c.value: v for c, v in self.total_money_spent.items()},
            "total_money_requested": {c.value: v for c, v in self.total_money_requested.items()},
            "net_money": {c.value: v for c, v in self.net_money.items()},
        }


@dataclass(frozen=True)
class LedgerRow:
    """One row of the transactions table shown next to a summary."""

    entry_id: str
    type: str
    description: str
    currency: Currency
    debit_amount: Decimal | None
    credit_amount: Decimal | None
    date: date
    counterparty_name: str | None
    booking_ref: Any = None

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> LedgerRow:
        is_debit = entry.direction is Direction.DEBIT
        return cls(
            entry_id=entry.entry_id,
            type=entry.source_kind.label,
            description=entry.description,
            currency=entry.currency,
            debit_amount=entry.amount if is_debit else None,
            credit_amount=None if is_debit else entry.amount,
            date=entry.occurred_at,
            counterparty_name=entry.counterparty_name,
            booking_ref=entry.booking_ref,
        )


@dataclass(frozen=True)
class SkippedRecord:
    """A source record excluded from a report because it was malformed."""

    source_kind: SourceKind
    record_id: Any
    reason: str


@dataclass(frozen=True)
class SourceFailure:
    """A source kind whose fetch failed; it contributed zero to the report."""

    source_kind: SourceKind
    reason: str
    timed_out: bool = False


@dataclass(frozen=True)
class ApartmentLedger:
    """
    Result of summarizing one apartment.

    Contract:
        ``summary`` covers the reporting window; ``opening_balance`` covers
        everything before ``date_from`` and is None when no ``date_from``
        was given.  Both parts are exposed so callers can pick the view they
        need; ``cumulative()`` adds them.
    Guarantees:
        - ``ledger`` rows are ordered by date, newest first.
        - ``is_partial`` is True whenever a source kind failed to load.
    """

    apartment_id: Any
    summary: FinancialSummary
    opening_balance: FinancialSummary | None
    totals: PeriodizedTotals
    ledger: tuple[LedgerRow, ...]
    skipped_records: tuple[SkippedRecord, ...] = ()
    failures: tuple[SourceFailure, ...] = ()
    date_from: date | None = None
    date_to: date | None = None

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_records)

    @property
    def failed_sources(self) -> tuple[SourceKind, ...]:
        return tuple(f.source_kind for f in self.failures)

    def cumulative(self) -> FinancialSummary:
        """Opening balance plus reporting window: full-history totals."""
        if self.opening_balance is None:
            return self.summary
        return self.opening_balance.combine(self.summary)
