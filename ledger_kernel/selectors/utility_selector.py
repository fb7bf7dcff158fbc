"""
Module: ledger_kernel.selectors.utility_selector
Responsibility: Read utility readings of an apartment with the water and
    electricity unit prices of its village.
Architecture position: Kernel > Selectors.

The charge is not computed here; ledger_engines.metering turns readings and
prices into a cost.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import aliased

from ledger_kernel.models.booking import Booking
from ledger_kernel.models.property import Apartment, User, Village
from ledger_kernel.models.utility import UtilityReading
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class UtilityReadingRow:
    """Meter readings of one period plus the applicable unit prices."""

    reading_id: int
    apartment_id: int
    who_pays: str | None
    start_date: date | None
    end_date: date | None
    recorded_on: date | None
    water_start: Decimal | None
    water_end: Decimal | None
    electricity_start: Decimal | None
    electricity_end: Decimal | None
    water_price: Decimal | None
    electricity_price: Decimal | None
    booking_id: int | None = None
    counterparty_id: int | None = None
    counterparty_name: str | None = None


class UtilityReadingSelector(BaseSelector):
    """Utility readings of apartments."""

    def for_apartment(
        self,
        apartment_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
        exclude_renter: bool = True,
        booking_id: int | None = None,
    ) -> list[UtilityReadingRow]:
        """
        Readings of ``apartment_id`` whose period ends within
        [date_from, date_to].  Readings without an end date are kept; the
        normalizer places them by their recording date.
        """
        guest = aliased(User)
        stmt = (
            select(
                UtilityReading,
                Village.water_price,
                Village.electricity_price,
                Booking.user_id.label("guest_id"),
                Booking.person_name.label("person_name"),
                guest.name.label("guest_name"),
            )
            .join(Apartment, UtilityReading.apartment_id == Apartment.id)
            .join(Village, Apartment.village_id == Village.id)
            .outerjoin(Booking, UtilityReading.booking_id == Booking.id)
            .outerjoin(guest, Booking.user_id == guest.id)
            .where(UtilityReading.apartment_id == apartment_id)
            .order_by(UtilityReading.end_date, UtilityReading.id)
        )
        stmt = self._date_window(
            stmt, UtilityReading.end_date, date_from, date_to, keep_nulls=True
        )
        if exclude_renter:
            stmt = self._exclude_renter(stmt, UtilityReading.who_pays)
        if booking_id is not None:
            stmt = stmt.where(UtilityReading.booking_id == booking_id)

        rows = []
        for row in self.session.execute(stmt):
            reading = row.UtilityReading
            created = reading.created_at.date() if reading.created_at else None
            rows.append(
                UtilityReadingRow(
                    reading_id=reading.id,
                    apartment_id=reading.apartment_id,
                    who_pays=reading.who_pays,
                    start_date=reading.start_date,
                    end_date=reading.end_date,
                    recorded_on=created,
                    water_start=reading.water_start_reading,
                    water_end=reading.water_end_reading,
                    electricity_start=reading.electricity_start_reading,
                    electricity_end=reading.electricity_end_reading,
                    water_price=row.water_price,
                    electricity_price=row.electricity_price,
                    booking_id=reading.booking_id,
                    counterparty_id=row.guest_id,
                    counterparty_name=row.guest_name or row.person_name,
                )
            )
        return rows
