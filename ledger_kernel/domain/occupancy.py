"""
Occupancy -- Booking value object and occupancy status vocabulary.

Responsibility:
    Defines the Booking shape read by the occupancy resolver and the status
    enums whose string values match what the booking and projection tables
    store.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class BookingStatus(str, Enum):
    """Lifecycle state of a booking, as stored."""

    BOOKED = "Booked"
    CHECKED_IN = "Checked In"
    CHECKED_OUT = "Checked Out"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: BookingStatus | str) -> BookingStatus:
        if isinstance(value, BookingStatus):
            return value
        wanted = str(value).strip().lower().replace("_", " ")
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Unknown booking status: {value!r}")

    @property
    def is_active(self) -> bool:
        """Active bookings are the only ones that can occupy an apartment."""
        return self in (BookingStatus.BOOKED, BookingStatus.CHECKED_IN)


class UserType(str, Enum):
    """Who a booking (or payment) belongs to."""

    OWNER = "owner"
    RENTER = "renter"

    @classmethod
    def parse(cls, value: UserType | str) -> UserType:
        if isinstance(value, UserType):
            return value
        return cls(str(value).strip().lower())


class OccupancyStatus(str, Enum):
    """Resolved occupancy of an apartment on a given day."""

    AVAILABLE = "Available"
    BOOKED = "Booked"
    OCCUPIED_BY_OWNER = "Occupied by Owner"
    OCCUPIED_BY_TENANT = "Occupied by Tenant"


def as_date(value: date | datetime) -> date:
    """Calendar date of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class Booking:
    """
    A reservation window for one apartment.

    ``leaving_date`` is exclusive: the apartment is free again on that day.
    String statuses and user types are parsed on construction.
    """

    booking_id: Any
    apartment_id: Any
    arrival_date: date
    leaving_date: date
    status: BookingStatus
    user_type: UserType
    guest_name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", BookingStatus.parse(self.status))
        object.__setattr__(self, "user_type", UserType.parse(self.user_type))
        object.__setattr__(self, "arrival_date", as_date(self.arrival_date))
        object.__setattr__(self, "leaving_date", as_date(self.leaving_date))

    def covers(self, day: date) -> bool:
        """True if ``day`` falls in [arrival_date, leaving_date)."""
        return self.arrival_date <= day < self.leaving_date


@dataclass(frozen=True)
class OccupancyResolution:
    """Resolved status plus the booking that determined it (None if available)."""

    status: OccupancyStatus
    booking: Booking | None = None
