"""
Module: ledger_kernel.models.payment
Responsibility: ORM mapping of payments received and the payment methods
    they were made with.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - amount is Numeric(15, 2) and must be positive (CHECK constraint).
    - currency is EGP or GBP (CHECK constraint).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase
from ledger_kernel.models.booking import Booking


class PaymentMethod(TimestampedBase):
    """Cash, bank transfer, card and so on."""

    __tablename__ = "payment_methods"

    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Payment(TimestampedBase):
    """Money received for an apartment, optionally tied to a booking."""

    __tablename__ = "payments"

    apartment_id: Mapped[int] = mapped_column(ForeignKey("apartments.id"), nullable=False)
    booking_id: Mapped[int | None] = mapped_column(ForeignKey("bookings.id"), nullable=True)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    method_id: Mapped[int | None] = mapped_column(
        ForeignKey("payment_methods.id"), nullable=True
    )
    user_type: Mapped[str] = mapped_column(String(10), nullable=False, default="owner")
    paid_on: Mapped[date] = mapped_column("date", nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    method: Mapped[PaymentMethod | None] = relationship()
    booking: Mapped[Booking | None] = relationship()

    __table_args__ = (
        CheckConstraint("amount > 0", name="chk_payments_amount_positive"),
        CheckConstraint("currency IN ('EGP', 'GBP')", name="chk_payments_currency"),
        Index("idx_payments_apartment_date", "apartment_id", "date"),
        Index("idx_payments_booking", "booking_id"),
    )
