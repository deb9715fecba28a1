"""Approval audit trail service."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.domain.booking_state import ApprovalAction
from hallbook.models.booking import BookingApproval

logger = logging.getLogger(__name__)


class AuditService:
    """Service for the append-only booking approval log."""

    async def record_decision(
        self,
        db: AsyncSession,
        booking_id: UUID,
        approver_id: UUID,
        action: ApprovalAction,
        from_status: str,
        reason: str | None = None,
    ) -> BookingApproval:
        """Append one approval/rejection row and flush it.

        Args:
            db: Database session
            booking_id: Booking decided on
            approver_id: Profile making the decision
            action: approved or rejected
            from_status: Booking status the decision was taken in
            reason: Optional reason (required upstream for rejections)

        Returns:
            Created approval entry
        """
        approval = BookingApproval(
            booking_id=booking_id,
            approver_id=approver_id,
            action=action.value,
            from_status=from_status,
            reason=reason,
        )
        db.add(approval)
        await db.flush()
        logger.info(
            f"Recorded {action.value} on booking {booking_id} by {approver_id} (from {from_status})"
        )
        return approval

    async def get_trail(self, db: AsyncSession, booking_id: UUID) -> list[BookingApproval]:
        result = await db.execute(
            select(BookingApproval)
            .where(BookingApproval.booking_id == booking_id)
            .order_by(BookingApproval.created_at)
        )
        return list(result.scalars().all())


audit_service = AuditService()
