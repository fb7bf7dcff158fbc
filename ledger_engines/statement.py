"""
Module: ledger_engines.statement
Responsibility:
    Build an owner statement from a summarized apartment ledger: the
    window's transactions in chronological order with a running balance per
    currency, followed by the outstanding balance per currency for the
    period alone and including previous periods.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - A running balance is debits minus credits, per currency, starting from
      the opening net of that currency (zero without an opening balance).
    - The last running balance of a currency equals its "including previous
      periods" outstanding amount.
    - Currencies are never combined.

Usage:
    from ledger_engines.statement import build_statement

    statement = build_statement(
        ledger.ledger, ledger.opening_balance, currencies=[Currency.EGP, Currency.GBP]
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.ledger import FinancialSummary, LedgerRow
from ledger_kernel.domain.values import Currency
from ledger_engines.tracer import traced_engine

_ZERO = Decimal("0.00")


class OutstandingScope(str, Enum):
    PERIOD = "period"
    INCLUDING_PREVIOUS = "including previous periods"


@dataclass(frozen=True)
class StatementRow:
    date: date
    type: str
    description: str
    currency: Currency
    debit_amount: Decimal | None
    credit_amount: Decimal | None
    balance: Decimal


@dataclass(frozen=True)
class OutstandingRow:
    currency: Currency
    scope: OutstandingScope
    amount: Decimal

    @property
    def label(self) -> str:
        if self.scope is OutstandingScope.PERIOD:
            return f"Outstanding balance ({self.currency.value}) for the period"
        return f"Outstanding balance ({self.currency.value}) including previous periods"


@dataclass(frozen=True)
class Statement:
    rows: tuple[StatementRow, ...]
    outstanding: tuple[OutstandingRow, ...]
    opening: dict[Currency, Decimal]

    def closing(self, currency: Currency | str) -> Decimal:
        """Outstanding amount of ``currency`` including previous periods."""
        wanted = Currency.parse(currency)
        for row in self.outstanding:
            if row.currency is wanted and row.scope is OutstandingScope.INCLUDING_PREVIOUS:
                return row.amount
        return _ZERO


@traced_engine("statement", "1.0")
def build_statement(
    ledger: Sequence[LedgerRow],
    opening_balance: FinancialSummary | None = None,
    currencies: Iterable[Currency | str] | None = None,
) -> Statement:
    """
    Render ledger rows (any order) as a chronological statement.

    Args:
        ledger: Rows of the reporting window.
        opening_balance: Summary of everything before the window, if any.
        currencies: Currencies that always get outstanding rows, even with
            no activity.
    """
    wanted = [Currency.parse(c) for c in currencies or ()]
    for row in ledger:
        if row.currency not in wanted:
            wanted.append(row.currency)
    if opening_balance is not None:
        for currency in opening_balance.currencies:
            if currency not in wanted:
                wanted.append(currency)

    opening = {
        c: (opening_balance.net_money.get(c, _ZERO) if opening_balance else _ZERO)
        for c in wanted
    }
    balances = dict(opening)
    period = {c: _ZERO for c in wanted}

    # Stable sort; ledger rows arrive newest first, so reverse before sorting.
    ordered = sorted(reversed(list(ledger)), key=lambda r: r.date)

    rows = []
    for row in ordered:
        delta = (row.debit_amount or _ZERO) - (row.credit_amount or _ZERO)
        balances[row.currency] += delta
        period[row.currency] += delta
        rows.append(
            StatementRow(
                date=row.date,
                type=row.type,
                description=row.description,
                currency=row.currency,
                debit_amount=row.debit_amount,
                credit_amount=row.credit_amount,
                balance=balances[row.currency],
            )
        )

    outstanding = []
    for currency in wanted:
        outstanding.append(OutstandingRow(currency, OutstandingScope.PERIOD, period[currency]))
        outstanding.append(
            OutstandingRow(currency, OutstandingScope.INCLUDING_PREVIOUS, balances[currency])
        )

    return Statement(rows=tuple(rows), outstanding=tuple(outstanding), opening=opening)
