"""
Pytest fixtures for the rental ledger test suite.

Provides:
- Structured logging configuration and log capture
- In-memory SQLite database with every ledger table created per test
- A factory for seeding villages, apartments, bookings and transactions
- An in-memory SourceGateway with failing and hanging variants
- A deterministic clock

Environment Variables:
- DATABASE_URL: optional database URL for the SQL-backed tests.
  Defaults to in-memory SQLite ("sqlite://").
"""

import json
import logging
import os
import threading
from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace
from typing import Any

import pytest

from ledger_config import LedgerConfig
from ledger_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.occupancy import Booking as BookingValue
from ledger_kernel.domain.records import (
    PaymentRecord,
    ServiceChargeRecord,
    SourceKind,
    UtilityChargeRecord,
)
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.models import (
    Apartment,
    Booking,
    Payment,
    PaymentMethod,
    ServiceRequest,
    ServiceType,
    User,
    UtilityReading,
    Village,
    VillageServicePrice,
)
from ledger_kernel.models.projection import unregister_projection_invalidation

DEFAULT_DATABASE_URL = "sqlite://"


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, aggregator):
            aggregator.summarize(1)
            logs = captured_logs()
            assert any(r["message"] == "summary_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session_factory():
    """Fresh schema per test; yields the module-level session factory."""
    init_engine_from_url(get_database_url())
    create_tables()
    yield get_session_factory()
    unregister_projection_invalidation()
    drop_tables()
    reset_engine()


@pytest.fixture
def session(session_factory):
    with session_factory() as s:
        yield s


class PropertyFactory:
    """Seeds rows through one session, committing after each add."""

    def __init__(self, session):
        self.session = session

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def village(self, name="Gouna", water_price="10", electricity_price="2.5", **kw) -> Village:
        return self._save(
            Village(
                name=name,
                water_price=Decimal(water_price),
                electricity_price=Decimal(electricity_price),
                **kw,
            )
        )

    def user(self, name="Owner One", role="owner", **kw) -> User:
        return self._save(User(name=name, role=role, **kw))

    def apartment(self, village=None, owner=None, name="A-101", **kw) -> Apartment:
        village = village or self.village()
        owner = owner or self.user()
        return self._save(Apartment(name=name, village_id=village.id, owner_id=owner.id, **kw))

    def booking(
        self,
        apartment,
        arrival,
        leaving,
        status="Booked",
        user_type="renter",
        user=None,
        **kw,
    ) -> Booking:
        user = user or self.user(name="Guest", role="renter")
        return self._save(
            Booking(
                apartment_id=apartment.id,
                user_id=user.id,
                user_type=user_type,
                arrival_date=arrival,
                leaving_date=leaving,
                status=status,
                **kw,
            )
        )

    def method(self, name="Cash") -> PaymentMethod:
        return self._save(PaymentMethod(name=name))

    def payment(self, apartment, amount, currency, paid_on, user_type="owner", **kw) -> Payment:
        return self._save(
            Payment(
                apartment_id=apartment.id,
                amount=Decimal(amount),
                currency=currency,
                paid_on=paid_on,
                user_type=user_type,
                **kw,
            )
        )

    def service_type(self, name="Cleaning", cost=None, currency=None) -> ServiceType:
        return self._save(
            ServiceType(
                name=name,
                cost=Decimal(cost) if cost is not None else None,
                currency=currency,
            )
        )

    def village_price(self, service_type, village, cost, currency) -> VillageServicePrice:
        return self._save(
            VillageServicePrice(
                service_type_id=service_type.id,
                village_id=village.id,
                cost=Decimal(cost),
                currency=currency,
            )
        )

    def service_request(
        self,
        apartment,
        service_type,
        date_created,
        who_pays="owner",
        cost=None,
        currency=None,
        **kw,
    ) -> ServiceRequest:
        return self._save(
            ServiceRequest(
                apartment_id=apartment.id,
                type_id=service_type.id,
                date_created=date_created,
                who_pays=who_pays,
                cost=Decimal(cost) if cost is not None else None,
                currency=currency,
                **kw,
            )
        )

    def utility_reading(
        self,
        apartment,
        end_date,
        water=("0", "0"),
        electricity=("0", "0"),
        who_pays="owner",
        start_date=None,
        **kw,
    ) -> UtilityReading:
        return self._save(
            UtilityReading(
                apartment_id=apartment.id,
                water_start_reading=Decimal(water[0]),
                water_end_reading=Decimal(water[1]),
                electricity_start_reading=Decimal(electricity[0]),
                electricity_end_reading=Decimal(electricity[1]),
                start_date=start_date,
                end_date=end_date,
                who_pays=who_pays,
                **kw,
            )
        )


@pytest.fixture
def factory(session) -> PropertyFactory:
    """Factory fixture to seed property data."""
    return PropertyFactory(session)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Collaborator fixtures
# =============================================================================


class InMemoryGateway:
    """
    SourceGateway over plain lists.

    ``failures`` maps a SourceKind to the exception its fetch raises;
    ``hang`` lists kinds whose fetch blocks until ``release()``.
    """

    def __init__(
        self,
        payments: Sequence[PaymentRecord] = (),
        service_charges: Sequence[ServiceChargeRecord] = (),
        utility_charges: Sequence[UtilityChargeRecord] = (),
        bookings: Sequence[BookingValue] = (),
        failures: dict[SourceKind, Exception] | None = None,
        hang: Sequence[SourceKind] = (),
    ):
        self.payments = list(payments)
        self.service_charges = list(service_charges)
        self.utility_charges = list(utility_charges)
        self.bookings = list(bookings)
        self.failures = failures or {}
        self.hang = set(hang)
        self.calls: list[tuple[SourceKind, Any, Any]] = []
        self.context_seen: dict[SourceKind, dict] = {}
        self._released = threading.Event()
        self._lock = threading.Lock()

    def release(self) -> None:
        self._released.set()

    def _serve(self, kind: SourceKind, apartment_id, filters, records):
        with self._lock:
            self.calls.append((kind, apartment_id, filters))
            self.context_seen[kind] = LogContext.get_all()
        if kind in self.hang:
            self._released.wait(timeout=10)
        if kind in self.failures:
            raise self.failures[kind]
        return list(records)

    def fetch_payments(self, apartment_id, filters):
        return self._serve(SourceKind.PAYMENT, apartment_id, filters, self.payments)

    def fetch_service_charges(self, apartment_id, filters):
        return self._serve(SourceKind.SERVICE_CHARGE, apartment_id, filters, self.service_charges)

    def fetch_utility_charges(self, apartment_id, filters):
        return self._serve(SourceKind.UTILITY_CHARGE, apartment_id, filters, self.utility_charges)

    def fetch_bookings(self, apartment_id):
        return [b for b in self.bookings if b.apartment_id == apartment_id]


@pytest.fixture
def make_gateway():
    """
    Factory fixture building InMemoryGateway instances.

    Hanging gateways are released at teardown so no worker thread outlives
    the test by more than a moment.
    """
    created: list[InMemoryGateway] = []

    def _make(**kwargs) -> InMemoryGateway:
        gateway = InMemoryGateway(**kwargs)
        created.append(gateway)
        return gateway

    yield _make

    for gateway in created:
        gateway.release()


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig()


# =============================================================================
# Record builders
# =============================================================================


def payment(record_id, amount, currency, paid_on, apartment_id=1, **kw) -> PaymentRecord:
    return PaymentRecord(
        record_id=record_id,
        apartment_id=apartment_id,
        amount=Decimal(amount) if isinstance(amount, str) else amount,
        currency=currency,
        paid_on=paid_on,
        **kw,
    )


def service_charge(record_id, cost, currency, requested_on, apartment_id=1, who_pays="owner", **kw):
    return ServiceChargeRecord(
        record_id=record_id,
        apartment_id=apartment_id,
        cost=Decimal(cost) if isinstance(cost, str) else cost,
        currency=currency,
        who_pays=who_pays,
        requested_on=requested_on,
        **kw,
    )


def utility_charge(record_id, cost, reading_end, apartment_id=1, who_pays="owner", **kw):
    return UtilityChargeRecord(
        record_id=record_id,
        apartment_id=apartment_id,
        cost=Decimal(cost) if isinstance(cost, str) else cost,
        who_pays=who_pays,
        reading_end=reading_end,
        **kw,
    )


@pytest.fixture
def records():
    """Record builder functions: ``records.payment(...)`` and friends."""

    return SimpleNamespace(
        payment=payment,
        service_charge=service_charge,
        utility_charge=utility_charge,
    )

