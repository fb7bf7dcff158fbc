"""
Module: ledger_kernel.selectors.payment_selector
Responsibility: Read payments of an apartment as PaymentRecord values,
    joined with the payment method name and the booking guest.
Architecture position: Kernel > Selectors.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import aliased

from ledger_kernel.domain.records import PaymentRecord
from ledger_kernel.models.booking import Booking
from ledger_kernel.models.payment import Payment, PaymentMethod
from ledger_kernel.models.property import User
from ledger_kernel.selectors.base import BaseSelector


class PaymentSelector(BaseSelector):
    """Payments received for apartments."""

    def for_apartment(
        self,
        apartment_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
        exclude_renter: bool = True,
        booking_id: int | None = None,
    ) -> list[PaymentRecord]:
        """
        Payments of ``apartment_id`` dated within [date_from, date_to].

        ``exclude_renter`` drops payments made by renters.
        """
        guest = aliased(User)
        stmt = (
            select(
                Payment,
                PaymentMethod.name.label("method_name"),
                Booking.user_id.label("guest_id"),
                Booking.person_name.label("person_name"),
                guest.name.label("guest_name"),
            )
            .outerjoin(PaymentMethod, Payment.method_id == PaymentMethod.id)
            .outerjoin(Booking, Payment.booking_id == Booking.id)
            .outerjoin(guest, Booking.user_id == guest.id)
            .where(Payment.apartment_id == apartment_id)
            .order_by(Payment.paid_on, Payment.id)
        )
        stmt = self._date_window(stmt, Payment.paid_on, date_from, date_to)
        if exclude_renter:
            stmt = self._exclude_renter(stmt, Payment.user_type)
        if booking_id is not None:
            stmt = stmt.where(Payment.booking_id == booking_id)

        return [
            PaymentRecord(
                record_id=row.Payment.id,
                apartment_id=row.Payment.apartment_id,
                amount=row.Payment.amount,
                currency=row.Payment.currency,
                paid_on=row.Payment.paid_on,
                user_type=row.Payment.user_type,
                counterparty_id=row.guest_id,
                counterparty_name=row.guest_name or row.person_name,
                booking_id=row.Payment.booking_id,
                description=row.Payment.description,
                method_name=row.method_name,
            )
            for row in self.session.execute(stmt)
        ]
