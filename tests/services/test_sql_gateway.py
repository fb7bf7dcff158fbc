"""
Tests for SqlSourceGateway and the aggregator running on it.

Covers:
- Service charges priced by override, village price, then base price
- Utility charges metered from readings and village unit prices
- Renter exclusion pushed down to SQL
- End-to-end summary over the database
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from ledger_config import LedgerConfig
from ledger_kernel.domain.values import Currency, Money
from ledger_services.collaborators import FetchFilters, SourceGateway, SqlSourceGateway
from ledger_services.ledger_aggregator import LedgerAggregator


@pytest.fixture
def gateway(session_factory):
    return SqlSourceGateway(session_factory, LedgerConfig())


class TestSqlSourceGateway:
    """Tests for the SQL-backed collaborator."""

    def test_satisfies_protocol(self, gateway):
        assert isinstance(gateway, SourceGateway)

    def test_payments(self, gateway, factory):
        apt = factory.apartment()
        factory.payment(apt, "100", "EGP", date(2024, 1, 1))
        factory.payment(apt, "50", "GBP", date(2024, 1, 2), user_type="renter")

        owner_only = gateway.fetch_payments(apt.id, FetchFilters())
        everyone = gateway.fetch_payments(apt.id, FetchFilters(include_renter_transactions=True))
        assert [p.currency for p in owner_only] == ["EGP"]
        assert len(everyone) == 2

    def test_service_charge_pricing(self, gateway, factory):
        village = factory.village()
        apt = factory.apartment(village=village)
        cleaning = factory.service_type("Cleaning", cost="40", currency="EGP")
        pickup = factory.service_type("Airport pickup", cost="30", currency="GBP")
        factory.village_price(cleaning, village, "55", "EGP")

        factory.service_request(apt, cleaning, date(2024, 1, 1))
        factory.service_request(apt, cleaning, date(2024, 1, 2), cost="99.50", currency="GBP")
        factory.service_request(apt, pickup, date(2024, 1, 3))

        charges = gateway.fetch_service_charges(apt.id, FetchFilters())
        assert [(c.cost, c.currency) for c in charges] == [
            (Decimal("55.00"), "EGP"),
            (Decimal("99.50"), "GBP"),
            (Decimal("30.00"), "GBP"),
        ]
        assert charges[0].service_name == "Cleaning"
        assert charges[0].requested_on == date(2024, 1, 1)

    def test_unpriced_service_has_no_cost(self, gateway, factory):
        apt = factory.apartment()
        factory.service_request(apt, factory.service_type("Free advice"), date(2024, 1, 1))
        [charge] = gateway.fetch_service_charges(apt.id, FetchFilters())
        assert charge.cost is None

    def test_utility_cost(self, gateway, factory):
        village = factory.village(water_price="10", electricity_price="2.5")
        apt = factory.apartment(village=village)
        factory.utility_reading(
            apt, date(2024, 1, 31), water=("10", "20"), electricity=("100", "150")
        )

        [charge] = gateway.fetch_utility_charges(apt.id, FetchFilters())
        assert charge.cost == Money.of("225.00", "EGP")
        assert charge.currency == "EGP"
        assert charge.water_usage == Decimal("10")
        assert charge.electricity_usage == Decimal("50")
        assert charge.reading_end == date(2024, 1, 31)

    def test_utility_meter_rollover(self, gateway, factory):
        village = factory.village(water_price="1", electricity_price="0")
        apt = factory.apartment(village=village)
        factory.utility_reading(apt, date(2024, 1, 31), water=("999990", "10"))

        [charge] = gateway.fetch_utility_charges(apt.id, FetchFilters())
        assert charge.water_usage == Decimal("19")
        assert charge.cost == Money.of("19.00", "EGP")

    def test_bookings(self, gateway, factory):
        apt = factory.apartment()
        factory.booking(apt, date(2024, 7, 1), date(2024, 7, 3))
        [booking] = gateway.fetch_bookings(apt.id)
        assert booking.apartment_id == apt.id

    def test_concurrent_fetches_on_shared_connection(self, gateway, factory):
        apt = factory.apartment()
        factory.payment(apt, "100", "EGP", date(2024, 1, 1))
        factory.payment(apt, "25", "GBP", date(2024, 1, 2))

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(
                pool.map(lambda _: gateway.fetch_payments(apt.id, FetchFilters()), range(16))
            )

        assert all([p.currency for p in r] == ["EGP", "GBP"] for r in results)


class TestAggregatorOverDatabase:
    """summarize() end to end on SqlSourceGateway."""

    def test_window_and_opening_balance(self, gateway, factory):
        apt = factory.apartment()
        cleaning = factory.service_type("Cleaning", cost="1200", currency="EGP")
        factory.payment(apt, "5000", "EGP", date(2024, 2, 1))
        factory.payment(apt, "2000", "EGP", date(2023, 11, 1))
        factory.service_request(apt, cleaning, date(2024, 3, 1))

        ledger = LedgerAggregator(gateway).summarize(apt.id, date_from=date(2024, 1, 1))

        assert ledger.summary.total_money_spent[Currency.EGP] == Decimal("5000.00")
        assert ledger.summary.total_money_requested[Currency.EGP] == Decimal("1200.00")
        assert ledger.summary.net_money[Currency.EGP] == Decimal("-3800.00")
        assert ledger.opening_balance.total_money_spent[Currency.EGP] == Decimal("2000.00")
        assert [r.type for r in ledger.ledger] == ["Service Request", "Payment"]
        assert not ledger.is_partial

    def test_unpriced_service_skipped(self, gateway, factory):
        apt = factory.apartment()
        factory.service_request(apt, factory.service_type("Free advice"), date(2024, 1, 1))
        ledger = LedgerAggregator(gateway).summarize(apt.id)
        assert ledger.skipped_count == 1
        assert ledger.skipped_records[0].reason == "missing amount"
