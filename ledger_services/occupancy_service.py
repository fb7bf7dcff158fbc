"""
ledger_services.occupancy_service -- Current occupancy of apartments.

Responsibility:
    Answer "is this apartment available, booked, or occupied by its owner
    or a tenant right now?".  The answer always comes from the pure
    resolver (ledger_engines.occupancy) applied to fresh bookings; the
    apartment_status_projection table is only a cache of that answer for
    list views.

Architecture position:
    Services -- stateful orchestration over the occupancy engine, the
    booking selector and the projection model.  "Now" comes from the
    injected Clock.

Invariants enforced:
    - The resolver is the source of truth.  A projection row that is
      missing, from another day, or older than
      ``projection_max_age_seconds`` is recomputed before it is returned.
    - Booking writes through the ORM drop the projection row of the
      apartment (see ledger_kernel.models.projection); this service
      registers those listeners on construction.

Failure modes:
    - ApartmentNotFoundError when refreshing an apartment that does not
      exist.

Usage:
    from ledger_services.occupancy_service import OccupancyService

    service = OccupancyService(get_session_factory(), clock=SystemClock())
    service.current_status(12).status
    service.cached_status(12)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from ledger_config import LedgerConfig
from ledger_engines.occupancy import resolve_occupancy
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.occupancy import OccupancyResolution, OccupancyStatus
from ledger_kernel.exceptions import ApartmentNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.projection import (
    ApartmentStatusProjection,
    register_projection_invalidation,
)
from ledger_kernel.selectors.booking_selector import BookingSelector

logger = get_logger("services.occupancy")


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on round trip.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OccupancyService:
    """
    Occupancy status of apartments, live and cached.

    Contract:
        Receives a session factory, a Clock and a LedgerConfig via
        constructor injection.  Each public call uses its own session.
    Guarantees:
        - ``current_status`` never reads the projection.
        - ``cached_status`` never returns a stale projection row.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Clock | None = None,
        config: LedgerConfig | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._config = config or LedgerConfig()
        register_projection_invalidation()

    def current_status(self, apartment_id: Any) -> OccupancyResolution:
        """Resolve the status from the apartment's bookings as of now."""
        with self._session_factory() as session:
            return self._resolve(session, apartment_id)

    def cached_status(self, apartment_id: Any) -> OccupancyStatus:
        """Projected status, recomputed first when missing or stale."""
        with self._session_factory() as session:
            row = session.scalars(
                select(ApartmentStatusProjection).where(
                    ApartmentStatusProjection.apartment_id == apartment_id
                )
            ).first()
            if row is not None and self._is_fresh(row):
                return OccupancyStatus(row.status)

            logger.debug(
                "projection_stale",
                extra={"apartment_id": apartment_id, "missing": row is None},
            )
            resolution = self._refresh(session, apartment_id)
            session.commit()
            return resolution.status

    def refresh(self, apartment_id: Any) -> OccupancyResolution:
        """Recompute and store the projection of one apartment."""
        with self._session_factory() as session:
            resolution = self._refresh(session, apartment_id)
            session.commit()
            return resolution

    def refresh_all(self) -> dict[Any, OccupancyStatus]:
        """Recompute the projection of every apartment."""
        with self._session_factory() as session:
            statuses = {}
            for apartment_id in BookingSelector(session).apartment_ids():
                statuses[apartment_id] = self._refresh(session, apartment_id).status
            session.commit()

        logger.info("projection_refreshed", extra={"apartment_count": len(statuses)})
        return statuses

    def invalidate(self, apartment_id: Any) -> None:
        """Drop the projection row of one apartment."""
        with self._session_factory() as session:
            session.execute(
                delete(ApartmentStatusProjection).where(
                    ApartmentStatusProjection.apartment_id == apartment_id
                )
            )
            session.commit()

    # -- internals ----------------------------------------------------------

    def _resolve(self, session: Session, apartment_id: Any) -> OccupancyResolution:
        selector = BookingSelector(session)
        if not selector.apartment_exists(apartment_id):
            raise ApartmentNotFoundError(apartment_id)
        bookings = selector.for_apartment(apartment_id)
        return resolve_occupancy(bookings, self._clock.now())

    def _refresh(self, session: Session, apartment_id: Any) -> OccupancyResolution:
        resolution = self._resolve(session, apartment_id)
        now = self._clock.now()
        row = session.scalars(
            select(ApartmentStatusProjection).where(
                ApartmentStatusProjection.apartment_id == apartment_id
            )
        ).first()
        if row is None:
            row = ApartmentStatusProjection(apartment_id=apartment_id)
            session.add(row)
        row.status = resolution.status.value
        row.booking_id = resolution.booking.booking_id if resolution.booking else None
        row.as_of = now.date()
        row.computed_at = now
        session.flush()
        return resolution

    def _is_fresh(self, row: ApartmentStatusProjection) -> bool:
        now = self._clock.now()
        if row.as_of != now.date():
            return False
        max_age = timedelta(seconds=self._config.projection_max_age_seconds)
        return now - _aware(row.computed_at) <= max_age
