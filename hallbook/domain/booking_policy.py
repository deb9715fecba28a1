"""Booking request rules checked before anything is written.

- Events run inside the institution's booking window (08:00-18:00 by default)
- start_time < end_time, same day
- No bookings for past dates, or for a start time already gone today
- Attendees must fit the hall
"""

from datetime import date, datetime, time

from hallbook.config import settings
from hallbook.core.exceptions import ValidationError


def validate_time_window(
    start_time: time,
    end_time: time,
    window_start: time | None = None,
    window_end: time | None = None,
) -> None:
    """Validate a same-day booking window against the allowed hours.

    Raises:
        ValidationError: If the window is empty, inverted or out of hours
    """
    window_start = window_start or settings.booking_window_start
    window_end = window_end or settings.booking_window_end

    if start_time >= end_time:
        raise ValidationError("End time must be after start time")

    if start_time < window_start or end_time > window_end:
        raise ValidationError(
            f"Bookings must fall between {window_start.strftime('%H:%M')} "
            f"and {window_end.strftime('%H:%M')}"
        )


def validate_event_date(event_date: date, start_time: time, now: datetime) -> None:
    """Reject retroactive bookings.

    Args:
        event_date: Requested date
        start_time: Requested start (checked only when event_date is today)
        now: Current local time
    """
    today = now.date()
    if event_date < today:
        raise ValidationError("Cannot book a hall for a past date")
    if event_date == today and start_time < now.time().replace(tzinfo=None):
        raise ValidationError("Cannot book a time slot in the past")


def validate_attendees(attendees_count: int, capacity: int) -> None:
    if attendees_count < 1:
        raise ValidationError("At least one attendee is required")
    if attendees_count > capacity:
        raise ValidationError(f"Maximum {capacity} attendees allowed for this hall")


def validate_reason(reason: str | None, what: str = "rejection") -> str:
    """Return the stripped reason, or raise if it is blank."""
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError(f"A {what} reason is required")
    return cleaned


def validate_booking_request(
    event_date: date,
    start_time: time,
    end_time: time,
    attendees_count: int,
    capacity: int,
    now: datetime,
) -> None:
    """Run every pre-write check for a new booking."""
    validate_time_window(start_time, end_time)
    validate_event_date(event_date, start_time, now)
    validate_attendees(attendees_count, capacity)
