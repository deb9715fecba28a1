"""Profile model (identity is owned by the auth provider)."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hallbook.database import Base
from hallbook.utils.clock import utcnow


class Profile(Base):
    """College staff profile with role and department claims."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    mobile_number: Mapped[str | None] = mapped_column(String(20))
    unique_id: Mapped[str | None] = mapped_column(String(50), unique=True)  # staff id
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="faculty", index=True
    )  # faculty, hod, principal, pro, admin
    department: Mapped[str | None] = mapped_column(String(40), index=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
