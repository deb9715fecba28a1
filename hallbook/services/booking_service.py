"""Booking lifecycle service: creation, approvals, rejection and hall switches."""

import logging
from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.core.exceptions import (
    AuthorizationError,
    HallNotAvailable,
    InvalidBookingStatus,
    NotFoundError,
    TransitionFailed,
    ValidationError,
)
from hallbook.core.permissions import Permission, UserRole, has_permission
from hallbook.database import DATASTORE_ERRORS
from hallbook.domain.availability import COULD_NOT_VERIFY
from hallbook.domain.booking_policy import validate_attendees, validate_booking_request, validate_reason
from hallbook.domain.booking_state import (
    PENDING_STATUSES,
    ApprovalAction,
    BookingStatus,
    assert_booking_transition,
    can_approve,
    is_terminal,
    next_status_on_approval,
)
from hallbook.domain.notification_routing import (
    plan_for_creation,
    plan_for_hall_switch,
    plan_for_transition,
)
from hallbook.models.booking import Booking
from hallbook.models.hall import Hall
from hallbook.models.profile import Profile
from hallbook.schemas.booking import BookingCreate
from hallbook.services.audit_service import audit_service
from hallbook.services.availability_service import availability_service
from hallbook.services.notification_service import notification_service
from hallbook.utils.clock import local_now, utcnow

logger = logging.getLogger(__name__)

DEFAULT_HOD_NAME = "HOD"

# Queue each approver role works from
APPROVAL_QUEUES: dict[str, str] = {
    UserRole.HOD.value: BookingStatus.PENDING_HOD.value,
    UserRole.PRINCIPAL.value: BookingStatus.PENDING_PRINCIPAL.value,
    UserRole.PRO.value: BookingStatus.PENDING_PRO.value,
}


def _notification_data(booking: Booking) -> dict[str, Any]:
    return {
        "booking_id": str(booking.id),
        "hall_id": str(booking.hall_id),
        "status": booking.status,
        "event_date": booking.event_date.isoformat(),
    }


class BookingService:
    """Service for the booking approval workflow."""

    # ==================== CREATION ====================

    async def create_booking(
        self,
        db: AsyncSession,
        data: BookingCreate,
        creator: Profile,
        now: datetime | None = None,
    ) -> Booking:
        """Create a booking request in pending_hod.

        Args:
            db: Database session
            data: Validated request body
            creator: Requesting profile
            now: Current local time (defaults to the college clock)

        Returns:
            Booking: Created booking

        Raises:
            AuthorizationError: If the creator may not request halls
            ValidationError: If the request breaks a booking rule
            HallNotAvailable: If the hall is closed or the slot is taken
        """
        if not has_permission(creator.role, Permission.CREATE_BOOKING):
            raise AuthorizationError("Only faculty can request a hall")
        if not creator.department:
            raise ValidationError("Your profile has no department; contact the administrator")

        hall = await db.get(Hall, data.hall_id)
        if hall is None:
            raise NotFoundError("Hall", str(data.hall_id))

        validate_booking_request(
            event_date=data.event_date,
            start_time=data.start_time,
            end_time=data.end_time,
            attendees_count=data.attendees_count,
            capacity=hall.capacity,
            now=now or local_now(),
        )

        await self._ensure_available(db, hall.id, data.event_date, data.start_time, data.end_time)

        booking = Booking(
            hall_id=hall.id,
            faculty_id=creator.id,
            faculty_name=creator.name,
            faculty_phone=data.faculty_phone or creator.mobile_number,
            organizer_name=data.organizer_name,
            department=creator.department,
            institution_type=data.institution_type.value,
            event_name=data.event_name,
            description=data.description,
            event_date=data.event_date,
            start_time=data.start_time,
            end_time=data.end_time,
            attendees_count=data.attendees_count,
            guest_lectures_count=data.guest_lectures_count,
            guest_lecture_names=data.guest_lecture_names,
            student_years=data.student_years,
            required_ac=data.required_ac,
            required_mic=data.required_mic,
            required_projector=data.required_projector,
            required_audio_system=data.required_audio_system,
            hod_name=await self._current_hod_name(db, creator.department),
            status=BookingStatus.PENDING_HOD.value,
        )
        db.add(booking)
        await db.flush()

        logger.info(
            f"Booking {booking.id} created by {creator.id} for hall {hall.id} "
            f"on {booking.event_date} {booking.start_time}-{booking.end_time}"
        )

        await notification_service.deliver(
            db, plan_for_creation(booking), booking_id=booking.id, data=_notification_data(booking)
        )
        return booking

    # ==================== TRANSITIONS ====================

    async def approve_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor: Profile,
    ) -> Booking:
        """Move a booking one step up the approval chain.

        Final approval re-checks availability so two overlapping requests
        cannot both end up approved.
        """
        booking = await self._get_booking(db, booking_id)
        self._authorize_decision(booking, actor)

        target = next_status_on_approval(booking.status)
        assert_booking_transition(booking.status, target)

        if target == BookingStatus.APPROVED.value:
            await self._ensure_available(
                db,
                booking.hall_id,
                booking.event_date,
                booking.start_time,
                booking.end_time,
                exclude_booking_id=booking.id,
            )

        previous = booking.status
        await self._apply_transition(db, booking, actor, ApprovalAction.APPROVED, target)

        await notification_service.deliver(
            db,
            plan_for_transition(booking, previous, target),
            booking_id=booking.id,
            data=_notification_data(booking),
        )
        return booking

    async def reject_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor: Profile,
        reason: str | None,
    ) -> Booking:
        """Reject a pending booking. A non-blank reason is required."""
        cleaned = validate_reason(reason, "rejection")

        booking = await self._get_booking(db, booking_id)
        self._authorize_decision(booking, actor)
        assert_booking_transition(booking.status, BookingStatus.REJECTED.value)

        previous = booking.status
        await self._apply_transition(
            db, booking, actor, ApprovalAction.REJECTED, BookingStatus.REJECTED.value, cleaned
        )

        await notification_service.deliver(
            db,
            plan_for_transition(booking, previous, BookingStatus.REJECTED.value, cleaned),
            booking_id=booking.id,
            data=_notification_data(booking),
        )
        return booking

    async def switch_hall(
        self,
        db: AsyncSession,
        booking_id: UUID,
        new_hall_id: UUID,
        actor: Profile,
        reason: str | None,
    ) -> Booking:
        """Move a pending booking to another hall, keeping its status.

        The booking is left untouched unless the new hall is free for the
        same window.
        """
        cleaned = validate_reason(reason, "hall change")

        if not has_permission(actor.role, Permission.SWITCH_HALL):
            logger.warning(f"Hall switch refused for {actor.id} ({actor.role}) on booking {booking_id}")
            raise AuthorizationError("You are not allowed to change booking halls")

        booking = await self._get_booking(db, booking_id)
        if actor.role == UserRole.HOD.value and actor.department != booking.department:
            logger.warning(
                f"Hall switch refused: HOD {actor.id} ({actor.department}) "
                f"on {booking.department} booking {booking.id}"
            )
            raise AuthorizationError("You can only change halls for your own department")
        if booking.status not in PENDING_STATUSES:
            raise InvalidBookingStatus(
                f"Only pending bookings can be moved; this booking is {booking.status}"
            )
        if new_hall_id == booking.hall_id:
            raise ValidationError("The booking is already in this hall")

        new_hall = await db.get(Hall, new_hall_id)
        if new_hall is None:
            raise NotFoundError("Hall", str(new_hall_id))
        old_hall = await db.get(Hall, booking.hall_id)
        validate_attendees(booking.attendees_count, new_hall.capacity)

        await self._ensure_available(
            db,
            new_hall.id,
            booking.event_date,
            booking.start_time,
            booking.end_time,
            exclude_booking_id=booking.id,
        )

        try:
            if booking.original_hall_id is None:
                booking.original_hall_id = booking.hall_id
            booking.hall_id = new_hall.id
            booking.hall_changed_by = actor.id
            booking.hall_change_reason = cleaned
            booking.hall_changed_at = utcnow()
            await db.flush()
        except DATASTORE_ERRORS as e:
            logger.error(f"Hall switch write failed for booking {booking.id}: {e}")
            raise TransitionFailed("The hall change could not be saved. Please try again.")

        logger.info(
            f"Booking {booking.id} moved from hall {old_hall.id if old_hall else None} "
            f"to {new_hall.id} by {actor.id}"
        )

        await notification_service.deliver(
            db,
            plan_for_hall_switch(
                booking,
                old_hall.name if old_hall else "the previous hall",
                new_hall.name,
                cleaned,
            ),
            booking_id=booking.id,
            data=_notification_data(booking),
        )
        return booking

    # ==================== QUERIES ====================

    async def get_visible_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        viewer: Profile,
    ) -> Booking:
        """Fetch a booking the viewer is allowed to see."""
        booking = await self._get_booking(db, booking_id)
        if viewer.role == UserRole.FACULTY.value and booking.faculty_id != viewer.id:
            raise AuthorizationError("You don't have permission to access this booking")
        if viewer.role == UserRole.HOD.value and booking.department != viewer.department:
            raise AuthorizationError("You don't have permission to access this booking")
        return booking

    async def list_pending_for(self, db: AsyncSession, actor: Profile) -> list[Booking]:
        """Bookings waiting on the actor's decision."""
        status = APPROVAL_QUEUES.get(actor.role)
        if status is None:
            return []

        query = select(Booking).where(Booking.status == status)
        if actor.role == UserRole.HOD.value:
            query = query.where(Booking.department == actor.department)

        result = await db.execute(query.order_by(Booking.event_date, Booking.start_time))
        return list(result.scalars().all())

    async def list_bookings(
        self,
        db: AsyncSession,
        viewer: Profile,
        status: str | None = None,
        event_date: date | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        """Bookings visible to the viewer, newest event first.

        Faculty see their own requests, HODs their department's, the PRO
        approved events, and the principal, chairman and admins everything.
        """
        query = select(Booking)
        if viewer.role == UserRole.FACULTY.value:
            query = query.where(Booking.faculty_id == viewer.id)
        elif viewer.role == UserRole.HOD.value:
            query = query.where(Booking.department == viewer.department)
        elif viewer.role == UserRole.PRO.value:
            query = query.where(Booking.status == BookingStatus.APPROVED.value)
        elif not has_permission(viewer.role, Permission.VIEW_ALL_BOOKINGS):
            return [], 0

        if status:
            query = query.where(Booking.status == status)
        if event_date:
            query = query.where(Booking.event_date == event_date)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        query = (
            query.order_by(Booking.event_date.desc(), Booking.start_time.desc())
            .offset(offset)
            .limit(page_size)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total

    # ==================== HELPERS ====================

    async def _get_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    def _authorize_decision(self, booking: Booking, actor: Profile) -> None:
        if is_terminal(booking.status):
            raise InvalidBookingStatus(f"Booking is already {booking.status}")
        if not can_approve(actor.role, actor.department, booking.status, booking.department):
            logger.warning(
                f"Transition refused: {actor.role} {actor.id} ({actor.department}) "
                f"on {booking.status} booking {booking.id} ({booking.department})"
            )
            raise AuthorizationError("You are not allowed to act on this booking")

    async def _ensure_available(
        self,
        db: AsyncSession,
        hall_id: UUID,
        event_date,
        start_time,
        end_time,
        exclude_booking_id: UUID | None = None,
    ) -> None:
        result = await availability_service.check_availability(
            db, hall_id, event_date, start_time, end_time, exclude_booking_id
        )
        if result.available:
            return
        if result.reason == COULD_NOT_VERIFY:
            raise TransitionFailed(COULD_NOT_VERIFY)
        raise HallNotAvailable(result.reason, result.conflicting_booking)

    async def _apply_transition(
        self,
        db: AsyncSession,
        booking: Booking,
        actor: Profile,
        action: ApprovalAction,
        target: str,
        reason: str | None = None,
    ) -> None:
        """Write the audit row, then the status.

        A crash between the two leaves a trail without a status change,
        which is safe to retry.
        """
        previous = booking.status
        try:
            await audit_service.record_decision(
                db,
                booking_id=booking.id,
                approver_id=actor.id,
                action=action,
                from_status=previous,
                reason=reason,
            )
            booking.status = target
            if target == BookingStatus.REJECTED.value:
                booking.rejection_reason = reason
            if actor.role == UserRole.HOD.value:
                # Record the HOD who actually decided
                booking.hod_name = actor.name
            await db.flush()
        except DATASTORE_ERRORS as e:
            logger.error(f"Transition {previous} -> {target} failed for booking {booking.id}: {e}")
            raise TransitionFailed()

        logger.info(f"Booking {booking.id} {previous} -> {target} by {actor.role} {actor.id}")

    async def _current_hod_name(self, db: AsyncSession, department: str) -> str:
        result = await db.execute(
            select(Profile.name)
            .where(
                Profile.role == UserRole.HOD.value,
                Profile.department == department,
                Profile.is_active == True,  # noqa: E712
            )
            .order_by(Profile.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none() or DEFAULT_HOD_NAME


booking_service = BookingService()
