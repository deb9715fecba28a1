"""Booking-related Pydantic schemas."""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hallbook.domain.campus import InstitutionType


class BookingBase(BaseModel):
    """Base booking schema."""

    hall_id: UUID
    organizer_name: str = Field(..., min_length=1, max_length=200)
    faculty_phone: str | None = Field(None, max_length=20)
    institution_type: InstitutionType
    event_name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    event_date: date
    start_time: time
    end_time: time
    attendees_count: int = Field(..., ge=1)

    # Guest lectures
    guest_lectures_count: int = Field(default=0, ge=0)
    guest_lecture_names: str | None = Field(None, max_length=1000)
    student_years: list[str] = Field(default_factory=list)

    # Equipment requirements
    required_ac: bool = False
    required_mic: bool = False
    required_projector: bool = False
    required_audio_system: bool = False

    @field_validator("end_time")
    @classmethod
    def validate_end_time(cls, v: time, info) -> time:
        start_time = info.data.get("start_time")
        if start_time and v <= start_time:
            raise ValueError("end_time must be after start_time")
        return v


class BookingCreate(BookingBase):
    """Schema for creating a booking."""


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    hall_id: UUID
    faculty_id: UUID

    # Requester
    faculty_name: str
    faculty_phone: str | None
    organizer_name: str
    department: str
    institution_type: str

    # Event
    event_name: str
    description: str | None
    event_date: date
    start_time: time
    end_time: time
    attendees_count: int
    guest_lectures_count: int
    guest_lecture_names: str | None
    student_years: list[str] | None

    # Equipment
    required_ac: bool
    required_mic: bool
    required_projector: bool
    required_audio_system: bool

    hod_name: str

    # Status
    status: str
    rejection_reason: str | None

    # Hall reassignment
    original_hall_id: UUID | None
    hall_changed_by: UUID | None
    hall_change_reason: str | None
    hall_changed_at: datetime | None

    # Timestamps
    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingRejectRequest(BaseModel):
    """Schema for rejecting a booking."""

    reason: str = Field(default="", max_length=1000)


class HallSwitchRequest(BaseModel):
    """Schema for moving a pending booking to another hall."""

    new_hall_id: UUID
    reason: str = Field(default="", max_length=1000)


class BookingApprovalResponse(BaseModel):
    """One entry of a booking's approval audit trail."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    approver_id: UUID
    action: str
    from_status: str | None
    reason: str | None
    created_at: datetime
