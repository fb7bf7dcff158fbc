"""
Module: ledger_kernel.models.projection
Responsibility: The apartment_status_projection cache table and the ORM
    event listeners that invalidate it whenever a booking is written.
Architecture position: Kernel > Models.

Invariants enforced:
    - The projection is derived data.  The pure occupancy resolver is the
      source of truth; a projection row is only a cached answer for one
      apartment on one day (``as_of``).
    - Any insert, update or delete of a Booking removes the cached row of
      every apartment it touches, in the same transaction as the write.

Failure modes:
    - Writes that bypass the ORM (raw SQL) are not seen by the listeners;
      such callers must call OccupancyService.invalidate() themselves.
"""

from datetime import date, datetime

from sqlalchemy import ForeignKey, String, delete, event, inspect
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.booking import Booking

logger = get_logger("models.projection")


class ApartmentStatusProjection(Base):
    """Cached occupancy status of one apartment."""

    __tablename__ = "apartment_status_projection"

    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    booking_id: Mapped[int | None] = mapped_column(nullable=True)
    as_of: Mapped[date] = mapped_column(nullable=False)
    computed_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<ApartmentStatusProjection apt={self.apartment_id} {self.status} as_of={self.as_of}>"


def _touched_apartments(target: Booking) -> set[int]:
    apartments = {target.apartment_id}
    history = inspect(target).attrs.apartment_id.history
    apartments.update(history.deleted or ())
    apartments.discard(None)
    return apartments


def _invalidate_projection(mapper, connection, target) -> None:
    apartments = _touched_apartments(target)
    if not apartments:
        return
    connection.execute(
        delete(ApartmentStatusProjection).where(
            ApartmentStatusProjection.apartment_id.in_(apartments)
        )
    )
    logger.debug(
        "projection_invalidated",
        extra={"apartment_ids": sorted(apartments), "booking_id": target.id},
    )


_BOOKING_EVENTS = ("after_insert", "after_update", "after_delete")


def register_projection_invalidation() -> None:
    """
    Hook booking writes to projection invalidation.

    Idempotent; call once during application start-up, after the models
    are imported.
    """
    for name in _BOOKING_EVENTS:
        if not event.contains(Booking, name, _invalidate_projection):
            event.listen(Booking, name, _invalidate_projection)


def unregister_projection_invalidation() -> None:
    """Remove the listeners. FOR TESTING ONLY."""
    for name in _BOOKING_EVENTS:
        if event.contains(Booking, name, _invalidate_projection):
            event.remove(Booking, name, _invalidate_projection)
