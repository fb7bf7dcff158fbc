"""
ledger_services.invoice_service -- Invoice views over the apartment ledger.

Responsibility:
    The report shapes the property back office works with, all built on
    LedgerAggregator: one apartment's invoices for a year or date range,
    a multi-apartment summary with grand totals, balances carried over from
    previous years, renter-only views, the transactions of one booking, and
    owner statements with running balances.

Architecture position:
    Services -- thin orchestration over LedgerAggregator and the statement
    engine.  Holds no state besides its collaborators.

Invariants enforced:
    - Grand totals are the per-currency sum of the apartment summaries;
      currencies are never combined.
    - A multi-apartment result is partial as soon as one apartment's
      ledger is partial.

Failure modes:
    - InvalidDateRangeError propagates from the aggregator.
    - ValueError when ``year`` is combined with explicit dates.

Usage:
    from ledger_services.invoice_service import InvoiceService

    invoices = InvoiceService(aggregator)
    invoices.apartment_invoices(12, year=2024)
    invoices.invoices_summary([12, 13], year=2024).totals
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any

from ledger_engines.statement import Statement, build_statement
from ledger_kernel.domain.ledger import ApartmentLedger, FinancialSummary
from ledger_kernel.domain.records import Payer
from ledger_kernel.logging_config import get_logger
from ledger_services.ledger_aggregator import LedgerAggregator

logger = get_logger("services.invoices")


def year_window(year: int) -> tuple[date, date]:
    """1 January to 31 December of ``year``."""
    return date(year, 1, 1), date(year, 12, 31)


@dataclass(frozen=True)
class InvoicesSummary:
    """Summaries of several apartments plus their grand totals."""

    apartments: tuple[ApartmentLedger, ...]
    totals: FinancialSummary
    opening_totals: FinancialSummary | None

    @property
    def is_partial(self) -> bool:
        return any(a.is_partial for a in self.apartments)

    @property
    def skipped_count(self) -> int:
        return sum(a.skipped_count for a in self.apartments)


@dataclass(frozen=True)
class PreviousYearsTotals:
    """Everything recorded before 1 January of ``before_year``."""

    before_year: int
    totals: FinancialSummary
    is_partial: bool


class InvoiceService:
    """
    Invoice and statement views.

    Contract:
        Receives a LedgerAggregator via constructor injection.
    Guarantees:
        - Every returned summary is zero-filled with the aggregator's
          reporting currencies.
    """

    def __init__(self, aggregator: LedgerAggregator):
        self._aggregator = aggregator

    @property
    def _currencies(self):
        return self._aggregator.config.reporting_currencies

    def apartment_invoices(
        self,
        apartment_id: Any,
        year: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        include_renter_transactions: bool = False,
    ) -> ApartmentLedger:
        """Invoices of one apartment for ``year`` or [date_from, date_to]."""
        date_from, date_to = self._window(year, date_from, date_to)
        return self._aggregator.summarize(
            apartment_id,
            date_from=date_from,
            date_to=date_to,
            include_renter_transactions=include_renter_transactions,
        )

    def invoices_summary(
        self,
        apartment_ids: Iterable[Any],
        year: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        include_renter_transactions: bool = False,
    ) -> InvoicesSummary:
        """Per-apartment summaries and their per-currency grand totals."""
        date_from, date_to = self._window(year, date_from, date_to)
        ledgers = tuple(
            self._aggregator.summarize(
                apartment_id,
                date_from=date_from,
                date_to=date_to,
                include_renter_transactions=include_renter_transactions,
            )
            for apartment_id in apartment_ids
        )

        totals = FinancialSummary.empty(self._currencies)
        opening = FinancialSummary.empty(self._currencies) if date_from else None
        for ledger in ledgers:
            totals = totals.combine(ledger.summary)
            if opening is not None and ledger.opening_balance is not None:
                opening = opening.combine(ledger.opening_balance)

        result = InvoicesSummary(apartments=ledgers, totals=totals, opening_totals=opening)
        logger.info(
            "invoices_summarized",
            extra={
                "apartment_count": len(ledgers),
                "is_partial": result.is_partial,
                "skipped_count": result.skipped_count,
            },
        )
        return result

    def previous_years_totals(
        self,
        apartment_ids: Iterable[Any],
        before_year: int,
        include_renter_transactions: bool = False,
    ) -> PreviousYearsTotals:
        """Balance carried into ``before_year`` across the given apartments."""
        boundary = date(before_year, 1, 1)
        totals = FinancialSummary.empty(self._currencies)
        partial = False
        for apartment_id in apartment_ids:
            ledger = self._aggregator.summarize(
                apartment_id,
                date_from=boundary,
                date_to=boundary,
                include_renter_transactions=include_renter_transactions,
            )
            totals = totals.combine(ledger.opening_balance)
            partial = partial or ledger.is_partial
        return PreviousYearsTotals(before_year=before_year, totals=totals, is_partial=partial)

    def renter_summary(
        self,
        apartment_id: Any,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> ApartmentLedger:
        """Only the transactions paid by renters."""
        return self._aggregator.summarize(
            apartment_id,
            date_from=date_from,
            date_to=date_to,
            include_renter_transactions=True,
            payers=(Payer.RENTER,),
        )

    def booking_invoices(self, apartment_id: Any, booking_id: Any) -> ApartmentLedger:
        """Every transaction of one booking, whoever paid it."""
        return self._aggregator.summarize(
            apartment_id,
            include_renter_transactions=True,
            booking_id=booking_id,
            payers=tuple(Payer),
        )

    def owner_statement(
        self,
        apartment_id: Any,
        year: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Statement:
        """Chronological statement with running and outstanding balances."""
        ledger = self.apartment_invoices(apartment_id, year, date_from, date_to)
        return build_statement(ledger.ledger, ledger.opening_balance, self._currencies)

    @staticmethod
    def _window(
        year: int | None, date_from: date | None, date_to: date | None
    ) -> tuple[date | None, date | None]:
        if year is None:
            return date_from, date_to
        if date_from is not None or date_to is not None:
            raise ValueError("Pass either year or date_from/date_to, not both")
        return year_window(year)
