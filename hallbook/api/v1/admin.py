"""Admin endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.api.deps import get_db
from hallbook.core.permissions import require_hall_status_manager
from hallbook.models.profile import Profile
from hallbook.schemas.hall import HallResponse, HallStatusUpdate
from hallbook.services.hall_service import hall_service

router = APIRouter()


@router.patch("/halls/{hall_id}/status", response_model=HallResponse)
async def update_hall_status(
    hall_id: UUID,
    request: HallStatusUpdate,
    current_user: Annotated[Profile, Depends(require_hall_status_manager)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HallResponse:
    """Block, unblock, or set/clear maintenance on a hall (admin only)."""
    hall = await hall_service.update_hall_status(
        db, hall_id, request.action, current_user, note=request.note
    )
    return HallResponse.model_validate(hall)
