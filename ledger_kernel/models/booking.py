"""
Module: ledger_kernel.models.booking
Responsibility: ORM mapping of bookings, the input of occupancy resolution
    and the link between transactions and guest stays.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - status stores BookingStatus values ("Booked", "Checked In",
      "Checked Out", "Cancelled").
    - user_type stores UserType values ("owner", "renter").
    - leaving_date is exclusive.
    - Any write to this table invalidates the apartment's status
      projection (see models/projection.py).
"""

from datetime import date

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase
from ledger_kernel.domain.occupancy import Booking as BookingValue
from ledger_kernel.domain.occupancy import BookingStatus, UserType
from ledger_kernel.models.property import User


class Booking(TimestampedBase):
    """A stay by an owner or renter in one apartment."""

    __tablename__ = "bookings"

    apartment_id: Mapped[int] = mapped_column(ForeignKey("apartments.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    user_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default=UserType.OWNER.value
    )
    person_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    arrival_date: Mapped[date] = mapped_column(nullable=False)
    leaving_date: Mapped[date] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.BOOKED.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped[User] = relationship()

    __table_args__ = (
        Index("idx_bookings_apartment_dates", "apartment_id", "arrival_date", "leaving_date"),
        Index("idx_bookings_status", "status"),
    )

    def to_value(self) -> BookingValue:
        """Detach into the immutable Booking value used by the resolver."""
        return BookingValue(
            booking_id=self.id,
            apartment_id=self.apartment_id,
            arrival_date=self.arrival_date,
            leaving_date=self.leaving_date,
            status=self.status,
            user_type=self.user_type,
            guest_name=self.person_name,
        )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: apt={self.apartment_id} "
            f"{self.arrival_date}..{self.leaving_date} {self.status}>"
        )
