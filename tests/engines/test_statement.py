"""
Tests for owner statements.

Covers:
- Chronological rows with running balance per currency
- Opening balance as the starting point of each running balance
- Two outstanding rows per currency (period, including previous periods)
"""

from datetime import date
from decimal import Decimal

from ledger_engines.statement import OutstandingScope, build_statement
from ledger_kernel.domain.ledger import FinancialSummary, LedgerRow
from ledger_kernel.domain.values import Currency


def row(on, currency, debit=None, credit=None, kind="Payment"):
    return LedgerRow(
        entry_id=f"x_{on.isoformat()}",
        type=kind,
        description="",
        currency=Currency(currency),
        debit_amount=Decimal(debit) if debit else None,
        credit_amount=Decimal(credit) if credit else None,
        date=on,
        counterparty_name=None,
    )


class TestBuildStatement:
    """Tests for build_statement()."""

    def test_running_balance(self):
        # Newest first, as the aggregator returns them.
        ledger = [
            row(date(2024, 3, 1), "EGP", credit="30.00"),
            row(date(2024, 2, 1), "EGP", debit="100.00", kind="Service Request"),
        ]
        statement = build_statement(ledger, currencies=[Currency.EGP])
        assert [r.date for r in statement.rows] == [date(2024, 2, 1), date(2024, 3, 1)]
        assert [r.balance for r in statement.rows] == [Decimal("100.00"), Decimal("70.00")]
        assert statement.closing("EGP") == Decimal("70.00")

    def test_currencies_run_separately(self):
        ledger = [
            row(date(2024, 2, 2), "GBP", debit="10.00"),
            row(date(2024, 2, 1), "EGP", debit="100.00"),
        ]
        statement = build_statement(ledger, currencies=[Currency.EGP, Currency.GBP])
        assert [r.balance for r in statement.rows] == [Decimal("100.00"), Decimal("10.00")]

    def test_opening_balance(self):
        opening = FinancialSummary(
            total_money_spent={Currency.EGP: Decimal("50.00")},
            total_money_requested={Currency.EGP: Decimal("250.00")},
        )
        ledger = [row(date(2024, 1, 15), "EGP", credit="20.00")]
        statement = build_statement(ledger, opening, currencies=[Currency.EGP, Currency.GBP])

        assert statement.opening == {Currency.EGP: Decimal("200.00"), Currency.GBP: Decimal("0.00")}
        assert statement.rows[0].balance == Decimal("180.00")

        outstanding = {(o.currency, o.scope): o.amount for o in statement.outstanding}
        assert outstanding[(Currency.EGP, OutstandingScope.PERIOD)] == Decimal("-20.00")
        assert outstanding[(Currency.EGP, OutstandingScope.INCLUDING_PREVIOUS)] == Decimal("180.00")
        assert outstanding[(Currency.GBP, OutstandingScope.PERIOD)] == Decimal("0.00")

    def test_two_outstanding_rows_per_currency(self):
        statement = build_statement([], currencies=[Currency.EGP, Currency.GBP])
        assert len(statement.outstanding) == 4
        assert statement.outstanding[0].label == "Outstanding balance (EGP) for the period"
        assert (
            statement.outstanding[1].label
            == "Outstanding balance (EGP) including previous periods"
        )

    def test_unlisted_currency_still_reported(self):
        statement = build_statement([row(date(2024, 1, 1), "GBP", credit="5.00")])
        assert statement.closing(Currency.GBP) == Decimal("-5.00")
        assert statement.closing(Currency.EGP) == Decimal("0.00")

    def test_same_day_keeps_ledger_order_reversed(self):
        ledger = [
            row(date(2024, 1, 1), "EGP", credit="5.00"),
            row(date(2024, 1, 1), "EGP", debit="20.00", kind="Service Request"),
        ]
        statement = build_statement(ledger)
        assert [r.type for r in statement.rows] == ["Service Request", "Payment"]
