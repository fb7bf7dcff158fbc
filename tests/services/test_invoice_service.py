"""
Tests for InvoiceService.

Covers:
- Year and date-range windows
- Multi-apartment grand totals and partial flag
- Previous years carried balance
- Renter-only and per-booking views
- Owner statement with opening balance
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.records import SourceKind
from ledger_kernel.domain.values import Currency
from ledger_services.invoice_service import InvoiceService, year_window
from ledger_services.ledger_aggregator import LedgerAggregator


class _MultiApartmentGateway:
    """Routes fetches to one in-memory gateway per apartment."""

    def __init__(self, gateways):
        self._gateways = gateways

    def fetch_payments(self, apartment_id, filters):
        return self._gateways[apartment_id].fetch_payments(apartment_id, filters)

    def fetch_service_charges(self, apartment_id, filters):
        return self._gateways[apartment_id].fetch_service_charges(apartment_id, filters)

    def fetch_utility_charges(self, apartment_id, filters):
        return self._gateways[apartment_id].fetch_utility_charges(apartment_id, filters)

    def fetch_bookings(self, apartment_id):
        return self._gateways[apartment_id].fetch_bookings(apartment_id)


@pytest.fixture
def invoices(make_gateway, records):
    apt1 = make_gateway(
        payments=[
            records.payment(1, "1000", "EGP", date(2023, 6, 1), apartment_id=1),
            records.payment(2, "500", "EGP", date(2024, 2, 1), apartment_id=1),
            records.payment(3, "70", "GBP", date(2024, 3, 1), apartment_id=1, user_type="renter", booking_id=8),
        ],
        service_charges=[
            records.service_charge(4, "300", "EGP", date(2024, 2, 10), apartment_id=1),
            records.service_charge(5, "25", "GBP", date(2024, 3, 2), apartment_id=1, who_pays="renter", booking_id=8),
        ],
    )
    apt2 = make_gateway(
        payments=[records.payment(6, "40", "GBP", date(2024, 5, 1), apartment_id=2)],
        utility_charges=[records.utility_charge(7, "120", date(2023, 12, 31), apartment_id=2)],
    )
    gateway = _MultiApartmentGateway({1: apt1, 2: apt2})
    return InvoiceService(LedgerAggregator(gateway))


class TestYearWindow:
    def test_bounds(self):
        assert year_window(2024) == (date(2024, 1, 1), date(2024, 12, 31))


class TestApartmentInvoices:
    """Tests for apartment_invoices()."""

    def test_year(self, invoices):
        ledger = invoices.apartment_invoices(1, year=2024)
        assert ledger.date_from == date(2024, 1, 1)
        assert ledger.summary.total_money_spent[Currency.EGP] == Decimal("500.00")
        assert ledger.summary.total_money_requested[Currency.EGP] == Decimal("300.00")
        assert ledger.opening_balance.total_money_spent[Currency.EGP] == Decimal("1000.00")

    def test_renter_excluded_by_default(self, invoices):
        ledger = invoices.apartment_invoices(1, year=2024)
        assert ledger.summary.total_money_spent[Currency.GBP] == Decimal("0.00")

    def test_include_renter(self, invoices):
        ledger = invoices.apartment_invoices(1, year=2024, include_renter_transactions=True)
        assert ledger.summary.net_money[Currency.GBP] == Decimal("-45.00")

    def test_date_range(self, invoices):
        ledger = invoices.apartment_invoices(
            1, date_from=date(2024, 2, 5), date_to=date(2024, 2, 28)
        )
        assert ledger.summary.total_money_spent[Currency.EGP] == Decimal("0.00")
        assert ledger.summary.total_money_requested[Currency.EGP] == Decimal("300.00")

    def test_year_and_dates_rejected(self, invoices):
        with pytest.raises(ValueError):
            invoices.apartment_invoices(1, year=2024, date_from=date(2024, 1, 1))


class TestInvoicesSummary:
    """Tests for invoices_summary()."""

    def test_grand_totals(self, invoices):
        result = invoices.invoices_summary([1, 2], year=2024)
        assert len(result.apartments) == 2
        assert result.totals.total_money_spent == {
            Currency.EGP: Decimal("500.00"),
            Currency.GBP: Decimal("40.00"),
        }
        assert result.opening_totals.total_money_requested[Currency.EGP] == Decimal("120.00")
        assert result.opening_totals.total_money_spent[Currency.EGP] == Decimal("1000.00")
        assert not result.is_partial

    def test_without_window_no_opening(self, invoices):
        assert invoices.invoices_summary([2]).opening_totals is None

    def test_partial_when_any_apartment_partial(self, make_gateway, records):
        healthy = make_gateway()
        broken = make_gateway(failures={SourceKind.PAYMENT: ConnectionError("refused")})
        service = InvoiceService(LedgerAggregator(_MultiApartmentGateway({1: healthy, 2: broken})))
        assert service.invoices_summary([1, 2], year=2024).is_partial


class TestPreviousYears:
    def test_carried_balance(self, invoices):
        result = invoices.previous_years_totals([1, 2], before_year=2024)
        assert result.before_year == 2024
        assert result.totals.total_money_spent[Currency.EGP] == Decimal("1000.00")
        assert result.totals.total_money_requested[Currency.EGP] == Decimal("120.00")
        assert result.totals.net_money[Currency.EGP] == Decimal("-880.00")
        assert not result.is_partial


class TestRenterAndBookingViews:
    def test_renter_summary(self, invoices):
        ledger = invoices.renter_summary(1)
        assert ledger.summary.total_money_spent == {
            Currency.EGP: Decimal("0.00"),
            Currency.GBP: Decimal("70.00"),
        }
        assert ledger.summary.total_money_requested[Currency.GBP] == Decimal("25.00")

    def test_booking_invoices(self, invoices):
        ledger = invoices.booking_invoices(1, booking_id=8)
        assert sorted(r.entry_id for r in ledger.ledger) == ["payment_3", "service_5"]


class TestOwnerStatement:
    def test_statement(self, invoices):
        statement = invoices.owner_statement(1, year=2024)
        assert statement.opening[Currency.EGP] == Decimal("-1000.00")
        assert [r.balance for r in statement.rows if r.currency is Currency.EGP] == [
            Decimal("-1500.00"),
            Decimal("-1200.00"),
        ]
        assert statement.closing(Currency.EGP) == Decimal("-1200.00")
        assert statement.closing(Currency.GBP) == Decimal("0.00")
