"""
Module: ledger_kernel.models.utility
Responsibility: ORM mapping of utility meter readings (water, electricity)
    taken over a period and charged to a payer.
Architecture position: Kernel > Models.  May import from db/ only.

The charge itself is not stored; it is derived from the meter deltas and the
village unit prices by ledger_engines.metering.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase
from ledger_kernel.models.booking import Booking


class UtilityReading(TimestampedBase):
    """Start and end meter readings for one apartment over a period."""

    __tablename__ = "utility_readings"

    apartment_id: Mapped[int] = mapped_column(ForeignKey("apartments.id"), nullable=False)
    booking_id: Mapped[int | None] = mapped_column(ForeignKey("bookings.id"), nullable=True)
    water_start_reading: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    water_end_reading: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    electricity_start_reading: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    electricity_end_reading: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    start_date: Mapped[date | None] = mapped_column(nullable=True)
    end_date: Mapped[date | None] = mapped_column(nullable=True)
    who_pays: Mapped[str] = mapped_column(String(10), nullable=False, default="owner")

    booking: Mapped[Booking | None] = relationship()

    __table_args__ = (
        Index("idx_utility_readings_apartment", "apartment_id", "end_date"),
        Index("idx_utility_readings_booking", "booking_id"),
    )
