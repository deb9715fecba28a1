"""Hall and availability Pydantic schemas."""

from datetime import date, datetime, time
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class HallResponse(BaseModel):
    """Schema for hall response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    block: str
    hall_type: str
    capacity: int

    # Equipment
    has_ac: bool
    has_mic: bool
    has_projector: bool
    has_audio_system: bool

    # Administrative state
    is_blocked: bool
    is_under_maintenance: bool
    status_note: str | None
    status_label: str
    status_updated_at: datetime | None
    status_updated_by: UUID | None


class HallStatusUpdate(BaseModel):
    """Schema for an admin block/maintenance action."""

    action: Literal["block", "unblock", "maintenance", "clear_maintenance"]
    note: str | None = Field(None, max_length=500)


class ConflictingBookingSummary(BaseModel):
    """Booking that already holds the requested slot."""

    id: UUID
    event_name: str
    faculty_name: str
    start_time: str
    end_time: str
    status: str


class AvailabilityResponse(BaseModel):
    """Schema for availability check response."""

    hall_id: UUID
    event_date: date
    start_time: time
    end_time: time
    available: bool
    reason: str
    conflicting_booking: ConflictingBookingSummary | None = None


class OccupyingBooking(BaseModel):
    """Booking running in a hall right now."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_name: str
    faculty_name: str
    department: str
    event_date: date
    start_time: time
    end_time: time
    status: str


class HallOccupancyResponse(BaseModel):
    """Real-time "currently in use" view of a hall."""

    hall: HallResponse
    in_use: bool
    current_booking: OccupyingBooking | None = None
    booked_until: str | None = None
