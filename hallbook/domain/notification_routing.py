"""Who hears about what.

Routing is decided server-side at transition time; every notification is
addressed to a single recipient profile, so clients only subscribe to their
own feed.
"""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Protocol
from uuid import UUID

from hallbook.domain.booking_state import BookingStatus, describe_status


class NotificationType(str, Enum):
    """Notification type tags."""

    NEW_BOOKING = "new_booking"
    APPROVAL_REQUIRED = "approval_required"
    BOOKING_STATUS = "booking_status"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    HALL_CHANGED = "hall_changed"
    HALL_STATUS = "hall_status"
    EVENT_REMINDER = "event_reminder"


class RoutedBooking(Protocol):
    faculty_id: UUID
    faculty_name: str
    department: str
    event_name: str
    event_date: date
    start_time: time
    end_time: time


@dataclass(frozen=True)
class Recipient:
    """Either a specific profile, or every profile with a role (and department)."""

    profile_id: UUID | None = None
    role: str | None = None
    department: str | None = None


@dataclass(frozen=True)
class NotificationPlan:
    recipient: Recipient
    notification_type: NotificationType
    title: str
    message: str


def _when(booking: RoutedBooking) -> str:
    return (
        f"{booking.event_date.isoformat()} from {booking.start_time.strftime('%H:%M')} "
        f"to {booking.end_time.strftime('%H:%M')}"
    )


def plan_for_creation(booking: RoutedBooking) -> list[NotificationPlan]:
    """New request goes to the HOD of the booking's department."""
    return [
        NotificationPlan(
            recipient=Recipient(role="hod", department=booking.department),
            notification_type=NotificationType.NEW_BOOKING,
            title="New Booking Request",
            message=(
                f'New booking request from {booking.faculty_name} for "{booking.event_name}" '
                f"on {_when(booking)}"
            ),
        )
    ]


def plan_for_transition(
    booking: RoutedBooking,
    previous_status: str,
    new_status: str,
    reason: str | None = None,
) -> list[NotificationPlan]:
    """Notifications owed after a status change."""
    faculty = Recipient(profile_id=booking.faculty_id)

    if new_status == BookingStatus.REJECTED.value:
        message = f'Your booking for "{booking.event_name}" has been rejected.'
        if reason:
            message = f"{message} Reason: {reason}"
        return [
            NotificationPlan(
                recipient=faculty,
                notification_type=NotificationType.BOOKING_REJECTED,
                title="Booking Rejected",
                message=message,
            )
        ]

    if new_status == BookingStatus.PENDING_PRINCIPAL.value:
        return [
            NotificationPlan(
                recipient=Recipient(role="principal"),
                notification_type=NotificationType.APPROVAL_REQUIRED,
                title="Approval Required",
                message=(
                    f'Booking request for "{booking.event_name}" ({booking.department}) '
                    "has been approved by the HOD and requires your approval"
                ),
            ),
            NotificationPlan(
                recipient=faculty,
                notification_type=NotificationType.BOOKING_STATUS,
                title="Booking Update",
                message=(
                    f'Your booking for "{booking.event_name}" is now '
                    f"{describe_status(new_status)}"
                ),
            ),
        ]

    if new_status == BookingStatus.APPROVED.value:
        plans = [
            NotificationPlan(
                recipient=faculty,
                notification_type=NotificationType.BOOKING_APPROVED,
                title="Booking Approved",
                message=(
                    f'Your booking for "{booking.event_name}" on {_when(booking)} '
                    "has been approved!"
                ),
            )
        ]
        if previous_status != BookingStatus.PENDING_PRO.value:
            plans.append(
                NotificationPlan(
                    recipient=Recipient(role="pro"),
                    notification_type=NotificationType.BOOKING_APPROVED,
                    title="Event Approved",
                    message=(
                        f'"{booking.event_name}" by {booking.faculty_name} ({booking.department}) '
                        f"has been approved for {_when(booking)}"
                    ),
                )
            )
        return plans

    return []


def plan_for_hall_switch(
    booking: RoutedBooking,
    old_hall_name: str,
    new_hall_name: str,
    reason: str,
) -> list[NotificationPlan]:
    return [
        NotificationPlan(
            recipient=Recipient(profile_id=booking.faculty_id),
            notification_type=NotificationType.HALL_CHANGED,
            title="Hall Changed",
            message=(
                f'Your booking for "{booking.event_name}" on {_when(booking)} has been moved '
                f"from {old_hall_name} to {new_hall_name}. Reason: {reason}"
            ),
        )
    ]


def plan_for_reminder(booking: RoutedBooking, hall_name: str) -> list[NotificationPlan]:
    return [
        NotificationPlan(
            recipient=Recipient(profile_id=booking.faculty_id),
            notification_type=NotificationType.EVENT_REMINDER,
            title="Event Tomorrow",
            message=f'"{booking.event_name}" is scheduled in {hall_name} on {_when(booking)}.',
        )
    ]
