"""Hall availability rules.

Booking windows are half-open: [start, end). A booking ending at 11:00 does
not conflict with one starting at 11:00.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Protocol
from uuid import UUID

HALL_AVAILABLE = "Hall is available for the requested time slot"
HALL_BLOCKED = "Hall is blocked"
HALL_UNDER_MAINTENANCE = "Hall is under maintenance"
COULD_NOT_VERIFY = "Could not verify hall availability. Please try again."
INVALID_WINDOW = "End time must be after start time"


class ScheduledBooking(Protocol):
    id: UUID
    event_name: str
    faculty_name: str
    event_date: date
    start_time: time
    end_time: time
    status: str


@dataclass(frozen=True)
class AvailabilityResult:
    """Outcome of an availability check."""

    available: bool
    reason: str
    conflicting_booking: dict[str, Any] | None = field(default=None)


def windows_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open interval overlap."""
    return start_a < end_b and start_b < end_a


def administrative_block_reason(
    is_blocked: bool,
    is_under_maintenance: bool,
    status_note: str | None = None,
) -> str | None:
    """Reason a hall is closed to new bookings regardless of time, or None."""
    if not is_blocked and not is_under_maintenance:
        return None
    if status_note and status_note.strip():
        return status_note.strip()
    return HALL_UNDER_MAINTENANCE if is_under_maintenance else HALL_BLOCKED


def find_conflict(
    bookings: Iterable[ScheduledBooking],
    start_time: time,
    end_time: time,
    exclude_booking_id: UUID | None = None,
) -> ScheduledBooking | None:
    """First booking whose window overlaps [start_time, end_time)."""
    for booking in bookings:
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        if windows_overlap(start_time, end_time, booking.start_time, booking.end_time):
            return booking
    return None


def summarize_conflict(booking: ScheduledBooking) -> dict[str, Any]:
    return {
        "id": str(booking.id),
        "event_name": booking.event_name,
        "faculty_name": booking.faculty_name,
        "start_time": booking.start_time.strftime("%H:%M"),
        "end_time": booking.end_time.strftime("%H:%M"),
        "status": booking.status,
    }


def conflict_reason(booking: ScheduledBooking) -> str:
    return (
        f"Hall is already booked for \"{booking.event_name}\" "
        f"({booking.start_time.strftime('%H:%M')} - {booking.end_time.strftime('%H:%M')})"
    )


def is_in_use(booking: ScheduledBooking, now: datetime) -> bool:
    """Whether the booking is running at the given wall-clock moment."""
    if booking.event_date != now.date():
        return False
    current = now.time().replace(tzinfo=None)
    return booking.start_time <= current < booking.end_time


@dataclass
class HallOccupancy:
    """Real-time view of a single hall, for dashboards."""

    in_use: bool
    current_booking: ScheduledBooking | None = None
    booked_until: str | None = None


def summarize_occupancy(bookings: Iterable[ScheduledBooking], now: datetime) -> HallOccupancy:
    """Compute the "currently occupied" view for one hall.

    booked_until is the end of the running booking, else the end of the next
    booking later today, else the date and start of the next future booking.
    """
    today = now.date()
    current_time = now.time().replace(tzinfo=None)
    ordered = sorted(bookings, key=lambda b: (b.event_date, b.start_time))

    current = next((b for b in ordered if is_in_use(b, now)), None)
    if current is not None:
        return HallOccupancy(
            in_use=True,
            current_booking=current,
            booked_until=current.end_time.strftime("%H:%M"),
        )

    upcoming = [
        b
        for b in ordered
        if b.event_date > today or (b.event_date == today and b.start_time > current_time)
    ]
    if not upcoming:
        return HallOccupancy(in_use=False)

    nxt = upcoming[0]
    if nxt.event_date == today:
        return HallOccupancy(in_use=False, booked_until=nxt.end_time.strftime("%H:%M"))
    return HallOccupancy(
        in_use=False,
        booked_until=f"{nxt.event_date.isoformat()} {nxt.start_time.strftime('%H:%M')}",
    )
