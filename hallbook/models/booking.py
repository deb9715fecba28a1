"""Booking-related database models."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from hallbook.database import Base
from hallbook.utils.clock import utcnow


class Booking(Base):
    """Hall booking request and its approval status."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_bookings_window"),
        CheckConstraint("attendees_count >= 1", name="ck_bookings_attendees"),
        Index("ix_bookings_hall_date", "hall_id", "event_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    hall_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("halls.id"), nullable=False, index=True
    )
    faculty_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True
    )

    # Requester
    faculty_name: Mapped[str] = mapped_column(String(200), nullable=False)
    faculty_phone: Mapped[str | None] = mapped_column(String(20))
    organizer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    institution_type: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # School, Diploma, Polytechnic, Engineering

    # Event
    event_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    event_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    attendees_count: Mapped[int] = mapped_column(Integer, nullable=False)
    guest_lectures_count: Mapped[int] = mapped_column(Integer, default=0)
    guest_lecture_names: Mapped[str | None] = mapped_column(Text)
    student_years: Mapped[list[str] | None] = mapped_column(JSON)

    # Equipment requirements
    required_ac: Mapped[bool] = mapped_column(Boolean, default=False)
    required_mic: Mapped[bool] = mapped_column(Boolean, default=False)
    required_projector: Mapped[bool] = mapped_column(Boolean, default=False)
    required_audio_system: Mapped[bool] = mapped_column(Boolean, default=False)

    # HOD name as it was when the request was submitted
    hod_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default="pending_hod", index=True
    )  # pending_hod, pending_principal, pending_pro (legacy), approved, rejected
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Hall reassignment
    original_hall_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("halls.id")
    )
    hall_changed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id")
    )
    hall_change_reason: Mapped[str | None] = mapped_column(Text)
    hall_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class BookingApproval(Base):
    """Append-only record of every approve/reject decision."""

    __tablename__ = "booking_approvals"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True
    )
    approver_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False
    )
    action: Mapped[str] = mapped_column(String(20), nullable=False)  # approved, rejected
    from_status: Mapped[str | None] = mapped_column(String(20))
    reason: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
