"""
ledger_services.collaborators -- Read collaborators feeding the ledger.

Responsibility:
    Define the SourceGateway protocol the aggregator and occupancy service
    depend on (fetch payments, service charges, utility charges and
    bookings for one apartment), the FetchFilters pushed down to it, and
    SqlSourceGateway, the implementation over the SQLAlchemy selectors.

Architecture position:
    Services -- I/O boundary.  SqlSourceGateway composes the kernel
    selectors with the pricing and metering engines so that every record
    it returns is already priced.

Invariants enforced:
    - One session per fetch.  Fetches run concurrently on worker threads
      and SQLAlchemy sessions are not shared across threads, so each call
      opens and closes its own session from the session factory.
    - On a single-connection pool (in-memory SQLite) fetches are serialized.
    - Pushed-down filters are an optimisation only; the aggregator
      re-applies the payer and date policies in process.

Failure modes:
    - Any database error propagates to the caller; the aggregator turns it
      into CollaboratorUnavailableError for that source kind.

Usage:
    from ledger_kernel.db.engine import get_session_factory
    from ledger_services.collaborators import SqlSourceGateway

    gateway = SqlSourceGateway(get_session_factory(), config)
    gateway.fetch_payments(apartment_id, FetchFilters(date_to=date(2024, 12, 31)))
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol, runtime_checkable

from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_config import LedgerConfig
from ledger_engines.metering import utility_cost
from ledger_engines.pricing import resolve_service_cost
from ledger_kernel.domain.occupancy import Booking
from ledger_kernel.domain.records import (
    PaymentRecord,
    ServiceChargeRecord,
    UtilityChargeRecord,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.booking_selector import BookingSelector
from ledger_kernel.selectors.payment_selector import PaymentSelector
from ledger_kernel.selectors.service_selector import ServiceRequestRow, ServiceRequestSelector
from ledger_kernel.selectors.utility_selector import UtilityReadingRow, UtilityReadingSelector

logger = get_logger("services.collaborators")


@dataclass(frozen=True)
class FetchFilters:
    """
    Filters a collaborator may apply at the source.

    ``date_from`` and ``date_to`` are inclusive.  When
    ``include_renter_transactions`` is False renter-paid records may be
    left out.  ``booking_id`` narrows to one booking.
    """

    date_from: date | None = None
    date_to: date | None = None
    include_renter_transactions: bool = False
    booking_id: Any = None


@runtime_checkable
class SourceGateway(Protocol):
    """Read access to the records of the system of record."""

    def fetch_payments(
        self, apartment_id: Any, filters: FetchFilters
    ) -> Sequence[PaymentRecord]:
        ...

    def fetch_service_charges(
        self, apartment_id: Any, filters: FetchFilters
    ) -> Sequence[ServiceChargeRecord]:
        ...

    def fetch_utility_charges(
        self, apartment_id: Any, filters: FetchFilters
    ) -> Sequence[UtilityChargeRecord]:
        ...

    def fetch_bookings(self, apartment_id: Any) -> Sequence[Booking]:
        ...


def _single_connection(session_factory: sessionmaker[Session]) -> bool:
    bind = session_factory.kw.get("bind")
    return isinstance(getattr(bind, "pool", None), StaticPool)


class SqlSourceGateway:
    """
    SourceGateway over the property database.

    Contract:
        Receives a session factory (not a session) so it can be called
        from several threads at once.
    Guarantees:
        - Service charges carry their resolved price (override, village
          price, base price).
        - Utility charges carry the metered cost in the configured utility
          currency, with meter rollover handled.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        config: LedgerConfig | None = None,
    ):
        self._session_factory = session_factory
        self._config = config or LedgerConfig()
        # StaticPool hands every session the same DBAPI connection (in-memory
        # SQLite); fetches on it must not overlap.
        self._serial: AbstractContextManager = (
            threading.Lock() if _single_connection(session_factory) else nullcontext()
        )

    def fetch_payments(
        self, apartment_id: Any, filters: FetchFilters
    ) -> list[PaymentRecord]:
        with self._serial, self._session_factory() as session:
            return PaymentSelector(session).for_apartment(
                apartment_id,
                date_from=filters.date_from,
                date_to=filters.date_to,
                exclude_renter=not filters.include_renter_transactions,
                booking_id=filters.booking_id,
            )

    def fetch_service_charges(
        self, apartment_id: Any, filters: FetchFilters
    ) -> list[ServiceChargeRecord]:
        with self._serial, self._session_factory() as session:
            rows = ServiceRequestSelector(session).for_apartment(
                apartment_id,
                date_from=filters.date_from,
                date_to=filters.date_to,
                exclude_renter=not filters.include_renter_transactions,
                booking_id=filters.booking_id,
            )
        return [self._service_record(row) for row in rows]

    def fetch_utility_charges(
        self, apartment_id: Any, filters: FetchFilters
    ) -> list[UtilityChargeRecord]:
        with self._serial, self._session_factory() as session:
            rows = UtilityReadingSelector(session).for_apartment(
                apartment_id,
                date_from=filters.date_from,
                date_to=filters.date_to,
                exclude_renter=not filters.include_renter_transactions,
                booking_id=filters.booking_id,
            )
        return [self._utility_record(row) for row in rows]

    def fetch_bookings(self, apartment_id: Any) -> list[Booking]:
        with self._serial, self._session_factory() as session:
            return BookingSelector(session).for_apartment(apartment_id)

    @staticmethod
    def _service_record(row: ServiceRequestRow) -> ServiceChargeRecord:
        price = resolve_service_cost(
            override_cost=row.override_cost,
            override_currency=row.override_currency,
            village_cost=row.village_cost,
            village_currency=row.village_currency,
            base_cost=row.base_cost,
            base_currency=row.base_currency,
        )
        return ServiceChargeRecord(
            record_id=row.request_id,
            apartment_id=row.apartment_id,
            cost=price.cost,
            currency=price.currency,
            who_pays=row.who_pays,
            requested_on=row.date_created,
            action_on=row.date_action,
            service_name=row.service_name,
            notes=row.notes,
            booking_id=row.booking_id,
            counterparty_id=row.counterparty_id,
            counterparty_name=row.counterparty_name,
        )

    def _utility_record(self, row: UtilityReadingRow) -> UtilityChargeRecord:
        cost = utility_cost(
            water_start=row.water_start,
            water_end=row.water_end,
            electricity_start=row.electricity_start,
            electricity_end=row.electricity_end,
            water_price=row.water_price,
            electricity_price=row.electricity_price,
            currency=self._config.utility_currency,
            max_meter_value=self._config.max_meter_value,
        )
        return UtilityChargeRecord(
            record_id=row.reading_id,
            apartment_id=row.apartment_id,
            cost=cost.total,
            who_pays=row.who_pays,
            reading_start=row.start_date,
            reading_end=row.end_date,
            recorded_on=row.recorded_on,
            currency=cost.total.currency.value,
            water_usage=cost.water_usage,
            electricity_usage=cost.electricity_usage,
            booking_id=row.booking_id,
            counterparty_id=row.counterparty_id,
            counterparty_name=row.counterparty_name,
        )
