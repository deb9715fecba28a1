"""Hall availability service.

Answers "is hall H free for [date, start, end)?" against the datastore. Any
booking still alive in the approval pipeline holds its slot. Datastore
failures make the check fail closed.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.core.exceptions import NotFoundError
from hallbook.database import DATASTORE_ERRORS
from hallbook.domain.availability import (
    COULD_NOT_VERIFY,
    HALL_AVAILABLE,
    INVALID_WINDOW,
    AvailabilityResult,
    HallOccupancy,
    administrative_block_reason,
    conflict_reason,
    find_conflict,
    summarize_conflict,
    summarize_occupancy,
)
from hallbook.domain.booking_state import SLOT_HOLDING_STATUSES
from hallbook.models.booking import Booking
from hallbook.models.hall import Hall

logger = logging.getLogger(__name__)


@dataclass
class HallOccupancyView:
    hall: Hall
    occupancy: HallOccupancy


class AvailabilityService:
    """Service for availability checks and the live occupancy view."""

    async def check_availability(
        self,
        db: AsyncSession,
        hall_id: UUID,
        event_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: UUID | None = None,
    ) -> AvailabilityResult:
        """Check whether a hall can take a booking for the given window.

        Args:
            db: Database session
            hall_id: Hall to check
            event_date: Calendar date of the event
            start_time: Window start (inclusive)
            end_time: Window end (exclusive)
            exclude_booking_id: Booking to ignore, e.g. the one being moved

        Returns:
            AvailabilityResult: available flag, reason and the first
            conflicting booking if any

        Raises:
            NotFoundError: If the hall does not exist
        """
        try:
            hall = await db.get(Hall, hall_id)
            if hall is None:
                raise NotFoundError("Hall", str(hall_id))

            # Administrative state wins over any time window
            block_reason = administrative_block_reason(
                hall.is_blocked, hall.is_under_maintenance, hall.status_note
            )
            if block_reason:
                return AvailabilityResult(available=False, reason=block_reason)

            if start_time >= end_time:
                return AvailabilityResult(available=False, reason=INVALID_WINDOW)

            bookings = await self._slot_holders(db, hall_id, event_date, exclude_booking_id)
        except DATASTORE_ERRORS as e:
            logger.error(
                f"Availability check failed for hall {hall_id} on {event_date}: {e}"
            )
            return AvailabilityResult(available=False, reason=COULD_NOT_VERIFY)

        conflict = find_conflict(bookings, start_time, end_time, exclude_booking_id)
        if conflict is not None:
            return AvailabilityResult(
                available=False,
                reason=conflict_reason(conflict),
                conflicting_booking=summarize_conflict(conflict),
            )

        return AvailabilityResult(available=True, reason=HALL_AVAILABLE)

    async def find_available_halls(
        self,
        db: AsyncSession,
        booking: Booking,
    ) -> list[Hall]:
        """Halls a booking could be moved to for its current window.

        Only halls large enough for the booking's attendees are considered.
        """
        result = await db.execute(
            select(Hall)
            .where(
                Hall.id != booking.hall_id,
                Hall.capacity >= booking.attendees_count,
            )
            .order_by(Hall.name)
        )
        candidates = list(result.scalars().all())

        available = []
        for hall in candidates:
            check = await self.check_availability(
                db,
                hall.id,
                booking.event_date,
                booking.start_time,
                booking.end_time,
                exclude_booking_id=booking.id,
            )
            if check.available:
                available.append(hall)
        return available

    async def get_hall_occupancy(
        self,
        db: AsyncSession,
        now: datetime,
    ) -> list[HallOccupancyView]:
        """Whether each hall is in use right now, and until when it is booked."""
        halls_result = await db.execute(select(Hall).order_by(Hall.name))
        halls = list(halls_result.scalars().all())

        bookings_result = await db.execute(
            select(Booking).where(
                Booking.event_date >= now.date(),
                Booking.status.in_(sorted(SLOT_HOLDING_STATUSES)),
            )
        )
        by_hall: dict[UUID, list[Booking]] = {}
        for booking in bookings_result.scalars().all():
            by_hall.setdefault(booking.hall_id, []).append(booking)

        return [
            HallOccupancyView(hall=hall, occupancy=summarize_occupancy(by_hall.get(hall.id, []), now))
            for hall in halls
        ]

    async def _slot_holders(
        self,
        db: AsyncSession,
        hall_id: UUID,
        event_date: date,
        exclude_booking_id: UUID | None,
    ) -> list[Booking]:
        query = select(Booking).where(
            Booking.hall_id == hall_id,
            Booking.event_date == event_date,
            Booking.status.in_(sorted(SLOT_HOLDING_STATUSES)),
        )
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)
        result = await db.execute(query.order_by(Booking.start_time))
        return list(result.scalars().all())


availability_service = AvailabilityService()
