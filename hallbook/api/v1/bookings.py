"""Booking endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.api.deps import get_current_user, get_db
from hallbook.core.permissions import require_booking_creator, require_hall_switch
from hallbook.models.profile import Profile
from hallbook.schemas.booking import (
    BookingApprovalResponse,
    BookingCreate,
    BookingListResponse,
    BookingRejectRequest,
    BookingResponse,
    HallSwitchRequest,
)
from hallbook.schemas.hall import HallResponse
from hallbook.services.audit_service import audit_service
from hallbook.services.availability_service import availability_service
from hallbook.services.booking_service import booking_service

router = APIRouter()


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[Profile, Depends(require_booking_creator)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Request a hall. The booking starts in pending_hod."""
    booking = await booking_service.create_booking(db, booking_data, current_user)
    return BookingResponse.model_validate(booking)


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(default=None, alias="status"),
    event_date: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> BookingListResponse:
    """List the bookings visible to the current user."""
    bookings, total = await booking_service.list_bookings(
        db,
        current_user,
        status=status_filter,
        event_date=event_date,
        page=page,
        page_size=page_size,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/pending", response_model=list[BookingResponse])
async def list_pending_bookings(
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[BookingResponse]:
    """Bookings waiting on the current user's decision."""
    bookings = await booking_service.list_pending_for(db, current_user)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Get a booking by ID."""
    booking = await booking_service.get_visible_booking(db, booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.get("/{booking_id}/approvals", response_model=list[BookingApprovalResponse])
async def get_booking_approvals(
    booking_id: UUID,
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[BookingApprovalResponse]:
    """Approval history of a booking, oldest first."""
    booking = await booking_service.get_visible_booking(db, booking_id, current_user)
    trail = await audit_service.get_trail(db, booking.id)
    return [BookingApprovalResponse.model_validate(a) for a in trail]


@router.get("/{booking_id}/available-halls", response_model=list[HallResponse])
async def get_available_halls(
    booking_id: UUID,
    current_user: Annotated[Profile, Depends(require_hall_switch)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[HallResponse]:
    """Halls the booking could be moved to for its current window."""
    booking = await booking_service.get_visible_booking(db, booking_id, current_user)
    halls = await availability_service.find_available_halls(db, booking)
    return [HallResponse.model_validate(h) for h in halls]


@router.post("/{booking_id}/approve", response_model=BookingResponse)
async def approve_booking(
    booking_id: UUID,
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Approve a booking at the current user's stage."""
    booking = await booking_service.approve_booking(db, booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/reject", response_model=BookingResponse)
async def reject_booking(
    booking_id: UUID,
    request: BookingRejectRequest,
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Reject a booking with a reason."""
    booking = await booking_service.reject_booking(db, booking_id, current_user, request.reason)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/switch-hall", response_model=BookingResponse)
async def switch_booking_hall(
    booking_id: UUID,
    request: HallSwitchRequest,
    current_user: Annotated[Profile, Depends(require_hall_switch)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Move a pending booking to another free hall."""
    booking = await booking_service.switch_hall(
        db, booking_id, request.new_hall_id, current_user, request.reason
    )
    return BookingResponse.model_validate(booking)
