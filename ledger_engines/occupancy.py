"""
Module: ledger_engines.occupancy
Responsibility:
    Resolve the occupancy status of one apartment on a given day from its
    bookings.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  "now" is always a
    parameter; the resolver never reads a clock.

Invariants enforced:
    - Only bookings with status Booked or Checked In whose window
      [arrival_date, leaving_date) covers the day are candidates.
    - Any Booked candidate makes the apartment BOOKED, whatever else is
      checked in.
    - Otherwise the candidate with the latest arrival decides between
      OCCUPIED_BY_OWNER and OCCUPIED_BY_TENANT; on equal arrival dates the
      first booking in input order wins.
    - Bookings with an inverted or empty window never match and never
      raise.

Usage:
    from ledger_engines.occupancy import resolve_occupancy

    resolution = resolve_occupancy(bookings, now=date(2024, 7, 1))
    resolution.status, resolution.booking
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from ledger_kernel.domain.occupancy import (
    Booking,
    BookingStatus,
    OccupancyResolution,
    OccupancyStatus,
    UserType,
    as_date,
)
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.occupancy")


@traced_engine("occupancy", "1.0", fingerprint_fields=("now",))
def resolve_occupancy(
    bookings: Iterable[Booking],
    now: date | datetime,
) -> OccupancyResolution:
    """Resolve the status of an apartment on ``now`` from its bookings."""
    today = as_date(now)
    candidates = [b for b in bookings if b.status.is_active and b.covers(today)]

    if not candidates:
        return OccupancyResolution(OccupancyStatus.AVAILABLE)

    for booking in candidates:
        if booking.status is BookingStatus.BOOKED:
            return OccupancyResolution(OccupancyStatus.BOOKED, booking)

    latest = candidates[0]
    for booking in candidates[1:]:
        if booking.arrival_date > latest.arrival_date:
            latest = booking

    if len(candidates) > 1:
        logger.debug(
            "overlapping_bookings",
            extra={
                "apartment_id": latest.apartment_id,
                "booking_ids": [b.booking_id for b in candidates],
                "selected_booking_id": latest.booking_id,
            },
        )

    if latest.user_type is UserType.OWNER:
        return OccupancyResolution(OccupancyStatus.OCCUPIED_BY_OWNER, latest)
    return OccupancyResolution(OccupancyStatus.OCCUPIED_BY_TENANT, latest)


def resolve_occupancy_status(
    bookings: Iterable[Booking],
    now: date | datetime,
) -> OccupancyStatus:
    """Status only; see ``resolve_occupancy``."""
    return resolve_occupancy(bookings, now).status
