"""Hall and availability endpoints."""

from datetime import date, time
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.api.deps import get_current_user, get_db
from hallbook.domain.campus import Block, HallType
from hallbook.models.hall import Hall
from hallbook.models.profile import Profile
from hallbook.schemas.hall import (
    AvailabilityResponse,
    ConflictingBookingSummary,
    HallOccupancyResponse,
    HallResponse,
    OccupyingBooking,
)
from hallbook.services.availability_service import availability_service
from hallbook.services.hall_service import hall_service
from hallbook.utils.clock import local_now

router = APIRouter()


@router.get("/", response_model=list[HallResponse])
async def list_halls(
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    block: Block | None = Query(default=None),
    hall_type: HallType | None = Query(default=None, alias="type"),
    min_capacity: int | None = Query(default=None, ge=1),
) -> list[HallResponse]:
    """List halls, optionally filtered by block, type and minimum capacity."""
    query = select(Hall)
    if block:
        query = query.where(Hall.block == block.value)
    if hall_type:
        query = query.where(Hall.hall_type == hall_type.value)
    if min_capacity:
        query = query.where(Hall.capacity >= min_capacity)

    result = await db.execute(query.order_by(Hall.block, Hall.name))
    return [HallResponse.model_validate(h) for h in result.scalars().all()]


@router.get("/occupancy", response_model=list[HallOccupancyResponse])
async def get_hall_occupancy(
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[HallOccupancyResponse]:
    """Which halls are in use right now and until when they are booked."""
    views = await availability_service.get_hall_occupancy(db, local_now())
    return [
        HallOccupancyResponse(
            hall=HallResponse.model_validate(view.hall),
            in_use=view.occupancy.in_use,
            current_booking=(
                OccupyingBooking.model_validate(view.occupancy.current_booking)
                if view.occupancy.current_booking
                else None
            ),
            booked_until=view.occupancy.booked_until,
        )
        for view in views
    ]


@router.get("/{hall_id}", response_model=HallResponse)
async def get_hall(
    hall_id: UUID,
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HallResponse:
    """Get a hall by ID."""
    hall = await hall_service.get_hall(db, hall_id)
    return HallResponse.model_validate(hall)


@router.get("/{hall_id}/availability", response_model=AvailabilityResponse)
async def check_hall_availability(
    hall_id: UUID,
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    event_date: date = Query(...),
    start_time: time = Query(...),
    end_time: time = Query(...),
    exclude_booking_id: UUID | None = Query(default=None),
) -> AvailabilityResponse:
    """Check whether a hall is free for a date and time window."""
    result = await availability_service.check_availability(
        db, hall_id, event_date, start_time, end_time, exclude_booking_id
    )
    return AvailabilityResponse(
        hall_id=hall_id,
        event_date=event_date,
        start_time=start_time,
        end_time=end_time,
        available=result.available,
        reason=result.reason,
        conflicting_booking=(
            ConflictingBookingSummary(**result.conflicting_booking)
            if result.conflicting_booking
            else None
        ),
    )
