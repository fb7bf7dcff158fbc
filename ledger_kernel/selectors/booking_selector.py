"""
Module: ledger_kernel.selectors.booking_selector
Responsibility: Read bookings (as immutable Booking values) for occupancy
    resolution, and the apartment identities the occupancy projection
    covers.
Architecture position: Kernel > Selectors.
"""

from datetime import date

from sqlalchemy import select

from ledger_kernel.domain.occupancy import Booking as BookingValue
from ledger_kernel.domain.occupancy import BookingStatus
from ledger_kernel.models.booking import Booking
from ledger_kernel.models.property import Apartment, User
from ledger_kernel.selectors.base import BaseSelector

_ACTIVE_STATUSES = (BookingStatus.BOOKED.value, BookingStatus.CHECKED_IN.value)


class BookingSelector(BaseSelector):
    """Bookings and apartments."""

    def for_apartment(
        self,
        apartment_id: int,
        on_date: date | None = None,
        active_only: bool = False,
    ) -> list[BookingValue]:
        """
        Bookings of ``apartment_id``.

        ``on_date`` narrows to bookings whose window covers that day;
        ``active_only`` to Booked and Checked In bookings.  Neither is
        required: the resolver applies both rules itself.
        """
        stmt = (
            select(Booking, User.name.label("guest_name"))
            .outerjoin(User, Booking.user_id == User.id)
            .where(Booking.apartment_id == apartment_id)
            .order_by(Booking.arrival_date, Booking.id)
        )
        if on_date is not None:
            stmt = stmt.where(Booking.arrival_date <= on_date, Booking.leaving_date > on_date)
        if active_only:
            stmt = stmt.where(Booking.status.in_(_ACTIVE_STATUSES))

        bookings = []
        for row in self.session.execute(stmt):
            value = row.Booking.to_value()
            if value.guest_name is None and row.guest_name is not None:
                value = BookingValue(
                    booking_id=value.booking_id,
                    apartment_id=value.apartment_id,
                    arrival_date=value.arrival_date,
                    leaving_date=value.leaving_date,
                    status=value.status,
                    user_type=value.user_type,
                    guest_name=row.guest_name,
                )
            bookings.append(value)
        return bookings

    def apartment_exists(self, apartment_id: int) -> bool:
        return self.session.get(Apartment, apartment_id) is not None

    def apartment_ids(self) -> list[int]:
        return list(self.session.scalars(select(Apartment.id).order_by(Apartment.id)))
