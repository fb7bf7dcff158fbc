"""
Module: ledger_kernel.models.property
Responsibility: ORM mapping of the property master data the ledger reads:
    villages (with utility unit prices), users (owners and renters) and
    apartments.
Architecture position: Kernel > Models.  May import from db/ only.

These tables belong to the surrounding property-management system; the
ledger only reads them.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase


class Village(TimestampedBase):
    """A resort village; owns the utility unit prices for its apartments."""

    __tablename__ = "villages"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    electricity_price: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    water_price: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    phases: Mapped[int] = mapped_column(nullable=False, default=1)

    apartments: Mapped[list["Apartment"]] = relationship(back_populates="village")

    def __repr__(self) -> str:
        return f"<Village {self.id}: {self.name}>"


class User(TimestampedBase):
    """An owner, renter or staff member."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="owner")

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.name} ({self.role})>"


class Apartment(TimestampedBase):
    """A rentable unit inside a village, owned by one user."""

    __tablename__ = "apartments"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    village_id: Mapped[int] = mapped_column(ForeignKey("villages.id"), nullable=False)
    phase: Mapped[int] = mapped_column(nullable=False, default=1)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    purchase_date: Mapped[date | None] = mapped_column(nullable=True)
    paying_status: Mapped[str | None] = mapped_column(String(50), nullable=True)

    village: Mapped[Village] = relationship(back_populates="apartments")
    owner: Mapped[User] = relationship()

    __table_args__ = (
        Index("idx_apartments_village", "village_id"),
        Index("idx_apartments_owner", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<Apartment {self.id}: {self.name}>"
