"""Hall model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hallbook.database import Base
from hallbook.utils.clock import utcnow


class Hall(Base):
    """Bookable seminar hall or smart classroom."""

    __tablename__ = "halls"
    __table_args__ = (CheckConstraint("capacity > 0", name="ck_halls_capacity_positive"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    block: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    hall_type: Mapped[str] = mapped_column("type", String(30), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Equipment
    has_ac: Mapped[bool] = mapped_column(Boolean, default=False)
    has_mic: Mapped[bool] = mapped_column(Boolean, default=False)
    has_projector: Mapped[bool] = mapped_column(Boolean, default=False)
    has_audio_system: Mapped[bool] = mapped_column(Boolean, default=False)

    # Administrative state; blocked and under maintenance are not set together
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False)
    is_under_maintenance: Mapped[bool] = mapped_column(Boolean, default=False)
    status_note: Mapped[str | None] = mapped_column(Text)
    status_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status_updated_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id")
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    @property
    def status_label(self) -> str:
        if self.is_under_maintenance:
            return "Under Maintenance"
        if self.is_blocked:
            return "Blocked"
        return "Available"
