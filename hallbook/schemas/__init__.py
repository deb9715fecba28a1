"""Pydantic schemas for API validation."""

from hallbook.schemas.booking import (
    BookingApprovalResponse,
    BookingCreate,
    BookingListResponse,
    BookingRejectRequest,
    BookingResponse,
    HallSwitchRequest,
)
from hallbook.schemas.hall import (
    AvailabilityResponse,
    HallOccupancyResponse,
    HallResponse,
    HallStatusUpdate,
)
from hallbook.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
)
from hallbook.schemas.reporting import StatisticsResponse, UsageEntry

__all__ = [
    # Booking
    "BookingApprovalResponse",
    "BookingCreate",
    "BookingListResponse",
    "BookingRejectRequest",
    "BookingResponse",
    "HallSwitchRequest",
    # Hall
    "AvailabilityResponse",
    "HallOccupancyResponse",
    "HallResponse",
    "HallStatusUpdate",
    # Notification
    "NotificationListResponse",
    "NotificationResponse",
    # Reporting
    "StatisticsResponse",
    "UsageEntry",
]
