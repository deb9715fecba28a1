"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-06

Creates all initial tables for the hall booking service:
- Profiles
- Halls
- Bookings and the append-only approval log
- Notifications and email delivery log
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== PROFILES ====================
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("mobile_number", sa.String(20)),
        sa.Column("unique_id", sa.String(50), unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="faculty", index=True),
        sa.Column("department", sa.String(40), index=True),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== HALLS ====================
    op.create_table(
        "halls",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("block", sa.String(30), nullable=False, index=True),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("has_ac", sa.Boolean, server_default=sa.false()),
        sa.Column("has_mic", sa.Boolean, server_default=sa.false()),
        sa.Column("has_projector", sa.Boolean, server_default=sa.false()),
        sa.Column("has_audio_system", sa.Boolean, server_default=sa.false()),
        sa.Column("is_blocked", sa.Boolean, server_default=sa.false()),
        sa.Column("is_under_maintenance", sa.Boolean, server_default=sa.false()),
        sa.Column("status_note", sa.Text),
        sa.Column("status_updated_at", sa.DateTime(timezone=True)),
        sa.Column("status_updated_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("capacity > 0", name="ck_halls_capacity_positive"),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("hall_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("halls.id"), nullable=False, index=True),
        sa.Column("faculty_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False, index=True),
        sa.Column("faculty_name", sa.String(200), nullable=False),
        sa.Column("faculty_phone", sa.String(20)),
        sa.Column("organizer_name", sa.String(200), nullable=False),
        sa.Column("department", sa.String(40), nullable=False, index=True),
        sa.Column("institution_type", sa.String(20), nullable=False),
        sa.Column("event_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("event_date", sa.Date, nullable=False, index=True),
        sa.Column("start_time", sa.Time, nullable=False),
        sa.Column("end_time", sa.Time, nullable=False),
        sa.Column("attendees_count", sa.Integer, nullable=False),
        sa.Column("guest_lectures_count", sa.Integer, server_default="0"),
        sa.Column("guest_lecture_names", sa.Text),
        sa.Column("student_years", sa.JSON),
        sa.Column("required_ac", sa.Boolean, server_default=sa.false()),
        sa.Column("required_mic", sa.Boolean, server_default=sa.false()),
        sa.Column("required_projector", sa.Boolean, server_default=sa.false()),
        sa.Column("required_audio_system", sa.Boolean, server_default=sa.false()),
        sa.Column("hod_name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending_hod", index=True),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("original_hall_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("halls.id")),
        sa.Column("hall_changed_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id")),
        sa.Column("hall_change_reason", sa.Text),
        sa.Column("hall_changed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("start_time < end_time", name="ck_bookings_window"),
        sa.CheckConstraint("attendees_count >= 1", name="ck_bookings_attendees"),
    )
    op.create_index("ix_bookings_hall_date", "bookings", ["hall_id", "event_date"])

    # ==================== APPROVAL LOG (append-only) ====================
    op.create_table(
        "booking_approvals",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id"), nullable=False, index=True),
        sa.Column("approver_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("from_status", sa.String(20)),
        sa.Column("reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )

    # ==================== NOTIFICATIONS ====================
    op.create_table(
        "notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("data", postgresql.JSONB),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id")),
        sa.Column("is_read", sa.Boolean, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )

    op.create_table(
        "email_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("recipient_email", sa.String(255), nullable=False, index=True),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True)),
        sa.Column("status", sa.String(20), server_default="pending"),
        sa.Column("error_message", sa.Text),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # The approval log is append-only at the database level too
    op.execute(
        """
        CREATE OR REPLACE FUNCTION forbid_booking_approval_change() RETURNS trigger AS $$
        BEGIN
            RAISE EXCEPTION 'booking_approvals is append-only';
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    op.execute(
        """
        CREATE TRIGGER booking_approvals_append_only
        BEFORE UPDATE OR DELETE ON booking_approvals
        FOR EACH ROW EXECUTE FUNCTION forbid_booking_approval_change();
        """
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.execute("DROP TRIGGER IF EXISTS booking_approvals_append_only ON booking_approvals")
    op.execute("DROP FUNCTION IF EXISTS forbid_booking_approval_change()")
    op.drop_table("email_logs")
    op.drop_table("notifications")
    op.drop_table("booking_approvals")
    op.drop_index("ix_bookings_hall_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("halls")
    op.drop_table("profiles")
