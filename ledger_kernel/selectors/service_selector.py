"""
Module: ledger_kernel.selectors.service_selector
Responsibility: Read service requests of an apartment together with every
    price that may apply to them (request override, village price of the
    service type, service type base price).
Architecture position: Kernel > Selectors.

The selector does not decide which price wins; ledger_engines.pricing does.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import and_, func, select
from sqlalchemy.orm import aliased

from ledger_kernel.models.booking import Booking
from ledger_kernel.models.property import Apartment, User
from ledger_kernel.models.service import ServiceRequest, ServiceType, VillageServicePrice
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class ServiceRequestRow:
    """A service request with its candidate prices."""

    request_id: int
    apartment_id: int
    service_name: str | None
    who_pays: str | None
    date_created: date | None
    date_action: date | None
    notes: str | None
    booking_id: int | None
    override_cost: Decimal | None
    override_currency: str | None
    village_cost: Decimal | None
    village_currency: str | None
    base_cost: Decimal | None
    base_currency: str | None
    counterparty_id: int | None = None
    counterparty_name: str | None = None


class ServiceRequestSelector(BaseSelector):
    """Service requests charged to apartments."""

    def for_apartment(
        self,
        apartment_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
        exclude_renter: bool = True,
        booking_id: int | None = None,
    ) -> list[ServiceRequestRow]:
        """
        Requests of ``apartment_id`` whose effective date (action date, else
        creation date) falls within [date_from, date_to].
        """
        guest = aliased(User)
        effective_date = func.coalesce(ServiceRequest.date_action, ServiceRequest.date_created)
        stmt = (
            select(
                ServiceRequest,
                ServiceType.name.label("service_name"),
                ServiceType.cost.label("base_cost"),
                ServiceType.currency.label("base_currency"),
                VillageServicePrice.cost.label("village_cost"),
                VillageServicePrice.currency.label("village_currency"),
                Booking.user_id.label("guest_id"),
                Booking.person_name.label("person_name"),
                guest.name.label("guest_name"),
            )
            .join(ServiceType, ServiceRequest.type_id == ServiceType.id)
            .join(Apartment, ServiceRequest.apartment_id == Apartment.id)
            .outerjoin(
                VillageServicePrice,
                and_(
                    VillageServicePrice.service_type_id == ServiceType.id,
                    VillageServicePrice.village_id == Apartment.village_id,
                ),
            )
            .outerjoin(Booking, ServiceRequest.booking_id == Booking.id)
            .outerjoin(guest, Booking.user_id == guest.id)
            .where(ServiceRequest.apartment_id == apartment_id)
            .order_by(effective_date, ServiceRequest.id)
        )
        stmt = self._date_window(stmt, effective_date, date_from, date_to)
        if exclude_renter:
            stmt = self._exclude_renter(stmt, ServiceRequest.who_pays)
        if booking_id is not None:
            stmt = stmt.where(ServiceRequest.booking_id == booking_id)

        rows = []
        for row in self.session.execute(stmt):
            request = row.ServiceRequest
            rows.append(
                ServiceRequestRow(
                    request_id=request.id,
                    apartment_id=request.apartment_id,
                    service_name=row.service_name,
                    who_pays=request.who_pays,
                    date_created=request.date_created,
                    date_action=request.date_action,
                    notes=request.notes,
                    booking_id=request.booking_id,
                    override_cost=request.cost,
                    override_currency=request.currency,
                    village_cost=row.village_cost,
                    village_currency=row.village_currency,
                    base_cost=row.base_cost,
                    base_currency=row.base_currency,
                    counterparty_id=row.guest_id,
                    counterparty_name=row.guest_name or row.person_name,
                )
            )
        return rows
