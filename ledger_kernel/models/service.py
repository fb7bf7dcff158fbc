"""
Module: ledger_kernel.models.service
Responsibility: ORM mapping of service types, their per-village prices and
    the service requests charged to apartments.
Architecture position: Kernel > Models.  May import from db/ only.

Pricing precedence for a request (see ledger_engines.pricing):
    request cost override > village price of the type > type base price.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase
from ledger_kernel.models.booking import Booking


class ServiceType(TimestampedBase):
    """A billable service (cleaning, maintenance, airport pickup...)."""

    __tablename__ = "service_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    village_prices: Mapped[list["VillageServicePrice"]] = relationship(
        back_populates="service_type", cascade="all, delete-orphan"
    )


class VillageServicePrice(TimestampedBase):
    """Price of one service type in one village."""

    __tablename__ = "service_type_village_prices"

    service_type_id: Mapped[int] = mapped_column(
        ForeignKey("service_types.id", ondelete="CASCADE"), nullable=False
    )
    village_id: Mapped[int] = mapped_column(
        ForeignKey("villages.id", ondelete="CASCADE"), nullable=False
    )
    cost: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    service_type: Mapped[ServiceType] = relationship(back_populates="village_prices")

    __table_args__ = (
        UniqueConstraint("service_type_id", "village_id", name="uq_service_type_village"),
    )


class ServiceRequest(TimestampedBase):
    """A service performed for an apartment and charged to a payer."""

    __tablename__ = "service_requests"

    type_id: Mapped[int] = mapped_column(ForeignKey("service_types.id"), nullable=False)
    apartment_id: Mapped[int] = mapped_column(ForeignKey("apartments.id"), nullable=False)
    booking_id: Mapped[int | None] = mapped_column(ForeignKey("bookings.id"), nullable=True)
    requester_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    date_action: Mapped[date | None] = mapped_column(nullable=True)
    date_created: Mapped[date] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Created")
    who_pays: Mapped[str] = mapped_column(String(10), nullable=False, default="owner")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)

    service_type: Mapped[ServiceType] = relationship()
    booking: Mapped[Booking | None] = relationship()

    __table_args__ = (
        Index("idx_service_requests_apartment", "apartment_id", "date_created"),
        Index("idx_service_requests_booking", "booking_id"),
    )
