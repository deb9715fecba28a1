"""Database models."""

from hallbook.models.booking import Booking, BookingApproval
from hallbook.models.hall import Hall
from hallbook.models.notification import EmailLog, Notification
from hallbook.models.profile import Profile

__all__ = [
    # Profile
    "Profile",
    # Hall
    "Hall",
    # Booking
    "Booking",
    "BookingApproval",
    # Notification
    "Notification",
    "EmailLog",
]
